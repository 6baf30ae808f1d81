"""User entity stored in the users container."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from cosmos_data import cosmos_document


class Address(BaseModel):
    """Postal address embedded in a user document."""

    postal_code: str = Field(..., alias="postalCode", description="Postal code")
    city: str = Field(..., description="City name")
    street: str = Field(..., description="Street and house number")

    model_config = ConfigDict(populate_by_name=True)


@cosmos_document(container="users", partition_key="last_name", auto_generate_id=True)
class User(BaseModel):
    """User entity model, partitioned by last name."""

    id: str | None = Field(default=None, description="Unique identifier, generated on insert when empty")
    email: EmailStr = Field(..., description="Email address of the user")
    first_name: str = Field(..., alias="firstName", description="First name of the user")
    last_name: str = Field(..., alias="lastName", description="Last name, used as partition key")
    addresses: list[Address] = Field(default_factory=list, description="Postal addresses")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "user-123",
                "email": "jane.doe@example.com",
                "firstName": "Jane",
                "lastName": "Doe",
                "addresses": [{"postalCode": "98052", "city": "Redmond", "street": "One Microsoft Way"}],
            }
        },
    )


class UserCountResponse(BaseModel):
    count: int
