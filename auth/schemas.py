"""
Pydantic schemas for request/response models in the auth module.
"""

from pydantic import BaseModel


class UserCredentials(BaseModel):
    """Schema for register and login request payloads."""
    username: str
    password: str


class AuthResult(BaseModel):
    """Schema for responses to register, login and logout."""
    success: bool = True
