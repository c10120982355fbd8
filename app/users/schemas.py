from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.users.models import UserRole


# -------- COMPANY --------
class CompanyOut(BaseModel):
    id: int
    code: str
    name: str
    location: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# -------- AUTH --------
class LoginSchema(BaseModel):
    company_id: str = Field(..., min_length=1)   # public company code, e.g. BK-001
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenData(BaseModel):
    user_id: int
    company_id: int
    role: UserRole


# -------- USERS --------
class UserCreateSchema(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1)
    role: UserRole = UserRole.OPERATOR


class UserUpdateSchema(BaseModel):
    password: Optional[str] = Field(None, min_length=6)
    full_name: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserDisplaySchema(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserWithCompanySchema(UserDisplaySchema):
    company: CompanyOut


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserWithCompanySchema
