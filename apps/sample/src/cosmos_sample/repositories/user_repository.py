"""User repository."""

from cosmos_data import SimpleCosmosRepository
from cosmos_sample.models.user import User


class UserRepository(SimpleCosmosRepository[User]):
    """Users in the ``users`` container.

    Besides the generic operations the routes call derived queries such as
    ``find_by_last_name(last_name)`` and ``count_by_last_name(last_name)``.
    """

    def find_by_email(self, email: str) -> User | None:
        users = self.find_top1_by_email_ignore_case(email)
        return users[0] if users else None
