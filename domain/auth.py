"""Domain Entities - Auth"""
from pydantic import BaseModel, Field
from typing import Optional

from domain.enums import UserRole


class User(BaseModel):
    """User Entity"""
    id: int
    username: str
    role: UserRole = Field(default=UserRole.CUSTOMER, alias="tipo")

    class Config:
        from_attributes = True
        populate_by_name = True
        frozen = True

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMINISTRATOR


class LoginResult(BaseModel):
    """Body returned by POST /login"""
    user_id: int
    username: str
    token: str
    tipo: UserRole = UserRole.CUSTOMER

    def to_user(self) -> User:
        return User(id=self.user_id, username=self.username, role=self.tipo)


class Session(BaseModel):
    """Bearer token plus the user it was issued for"""
    token: str
    user: User

    class Config:
        frozen = True


class AuthResult(BaseModel):
    """Outcome of a login or registration attempt"""
    success: bool
    error: Optional[str] = None
