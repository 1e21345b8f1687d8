# app/modules/users/router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_admin_user
from app.core.auth.schemas import UserResponse
from app.shared.database.models import User
from .service import UsersService
from .schemas import UserCreateRequest, UserDataResponse, UserListResponse, UserUpdateRequest

# Todas las rutas requieren rol administrador
router = APIRouter(dependencies=[Depends(get_admin_user)])

@router.get("/", response_model=UserListResponse)
async def get_users(db: Session = Depends(get_db)):
    service = UsersService(db)
    users = await service.list_users()
    return UserListResponse(
        success=True,
        count=len(users),
        data=[UserResponse.model_validate(user) for user in users]
    )

@router.post("/", response_model=UserDataResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreateRequest, db: Session = Depends(get_db)):
    service = UsersService(db)
    user = await service.create_user(user_data)
    return UserDataResponse(
        success=True,
        message="Usuario creado exitosamente",
        data=UserResponse.model_validate(user)
    )

@router.get("/{user_id}", response_model=UserDataResponse)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UsersService(db)
    user = await service.get_user(user_id)
    return UserDataResponse(success=True, data=UserResponse.model_validate(user))

@router.put("/{user_id}", response_model=UserDataResponse)
async def update_user(user_id: int, patch: UserUpdateRequest, db: Session = Depends(get_db)):
    service = UsersService(db)
    user = await service.update_user(user_id, patch)
    return UserDataResponse(
        success=True,
        message="Usuario actualizado",
        data=UserResponse.model_validate(user)
    )

@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    service = UsersService(db)
    await service.delete_user(user_id, current_user.id)
    return {"success": True, "message": f"Usuario {user_id} eliminado", "data": {}}
