"""User API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cosmos_sample.models.user import User, UserCountResponse
from cosmos_sample.repositories.user_repository import UserRepository
from cosmos_sample.services import get_user_repository

router = APIRouter(prefix="/users", tags=["users"], redirect_slashes=False)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=User, status_code=status.HTTP_201_CREATED)
def add_user(user: User, repository: UserRepository = Depends(get_user_repository)) -> User:
    # Insert only, an existing id raises DocumentAlreadyExistsError
    return repository.insert(user)


@router.get("", response_model=list[User])
@router.get("/", response_model=list[User])
def list_users(
    last_name: str | None = Query(default=None, description="Only users with this last name"),
    email: str | None = Query(default=None, description="Only the user with this email, case-insensitive"),
    repository: UserRepository = Depends(get_user_repository),
) -> list[User]:
    if email is not None:
        user = repository.find_by_email(email)
        return [user] if user is not None else []
    if last_name is not None:
        return repository.find_by_last_name(last_name)
    return repository.find_all()


@router.get("/count", response_model=UserCountResponse)
def count_users(
    last_name: str | None = Query(default=None, description="Only count users with this last name"),
    repository: UserRepository = Depends(get_user_repository),
) -> UserCountResponse:
    if last_name is not None:
        return UserCountResponse(count=repository.count_by_last_name(last_name))
    return UserCountResponse(count=repository.count())


@router.get("/{user_id}", response_model=User)
def get_user(
    user_id: str,
    last_name: str | None = Query(default=None, description="Partition key of the user"),
    repository: UserRepository = Depends(get_user_repository),
) -> User:
    user = repository.find_by_id(user_id, last_name)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    last_name: str | None = Query(default=None, description="Partition key of the user"),
    repository: UserRepository = Depends(get_user_repository),
) -> None:
    repository.delete_by_id(user_id, last_name)
