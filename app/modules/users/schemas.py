# app/modules/users/schemas.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from app.core.auth.schemas import UserResponse, UserRole
from app.shared.schemas.common import BaseResponse

class UserCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = "user"

class UserUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

class UserDataResponse(BaseResponse):
    data: UserResponse

class UserListResponse(BaseResponse):
    count: int
    data: List[UserResponse]
