# app/modules/users/service.py
from sqlalchemy.orm import Session
from typing import List
import logging

from .repository import UsersRepository
from .schemas import UserCreateRequest, UserUpdateRequest
from app.core.auth.service import AuthService
from app.core.exceptions import InvalidArgument, NotFound
from app.shared.database.models import Sale, User

logger = logging.getLogger(__name__)

class UsersService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = UsersRepository(db)

    async def create_user(self, user_data: UserCreateRequest) -> User:
        """Crear usuario con contraseña hasheada"""
        user_dict = user_data.model_dump()
        user_dict["email"] = user_dict["email"].lower()

        if self.repository.get_user_by_email(user_dict["email"]):
            raise InvalidArgument(f"El email {user_dict['email']} ya está registrado")

        user_dict["password_hash"] = AuthService.get_password_hash(user_dict.pop("password"))
        user = self.repository.create_user(user_dict)
        logger.info(f"Usuario {user.id} creado con rol '{user.role}'")
        return user

    async def list_users(self) -> List[User]:
        return self.repository.list_users()

    async def get_user(self, user_id: int) -> User:
        user = self.repository.get_user(user_id)
        if not user:
            raise NotFound(f"Usuario {user_id} no encontrado")
        return user

    async def update_user(self, user_id: int, patch: UserUpdateRequest) -> User:
        user = await self.get_user(user_id)
        updates = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}

        if "email" in updates:
            updates["email"] = updates["email"].lower()
            existing = self.repository.get_user_by_email(updates["email"])
            if existing and existing.id != user_id:
                raise InvalidArgument(f"El email {updates['email']} ya está registrado")

        if "password" in updates:
            updates["password_hash"] = AuthService.get_password_hash(updates.pop("password"))

        return self.repository.update_user(user, updates)

    async def delete_user(self, user_id: int, requester_id: int) -> None:
        if user_id == requester_id:
            raise InvalidArgument("No puede eliminar su propio usuario")

        user = await self.get_user(user_id)

        # Las ventas conservan a su dueño: desactivar en lugar de borrar
        has_sales = self.db.query(Sale.id).filter(Sale.user_id == user_id).first() is not None
        if has_sales:
            raise InvalidArgument(
                f"El usuario {user_id} tiene ventas registradas; desactívelo en lugar de eliminarlo"
            )

        self.repository.delete_user(user)
        logger.info(f"Usuario {user_id} eliminado")
