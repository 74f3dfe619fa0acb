"""Pydantic request/response schemas for the Identity API.

Request fields are optional at this layer; the service decides what is
missing so every failure carries the same error shape.
"""

from pydantic import BaseModel, Field

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "jane.doe@example.com",
                    "password": "correct horse battery staple",
                    "name": "Jane Doe",
                    "is_seller": True,
                }
            ]
        }
    }

    email: str | None = Field(None, max_length=254)
    password: str | None = None
    name: str | None = Field(None, max_length=255)
    is_seller: bool = False


class LoginRequest(BaseModel):
    email: str | None = Field(None, max_length=254)
    password: str | None = None


# --- Response Schemas ---


class UserSummary(BaseModel):
    id: str
    email: str
    name: str
    is_seller: bool
    referral_code: str


class AuthResponse(BaseModel):
    token: str
    user: UserSummary


class SuccessResponse(BaseModel):
    success: bool = True
