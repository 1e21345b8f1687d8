# app/api/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
import logging

from app.config.database import get_db
from app.core.auth.service import AuthService
from app.core.auth.schemas import (
    PasswordUpdate, TokenResponse, UserDetailsUpdate, UserLogin, UserRegister, UserResponse
)
from app.core.auth.dependencies import AuthenticationError, get_current_user
from app.core.exceptions import InvalidArgument
from app.modules.users.repository import UsersRepository
from app.modules.users.schemas import UserCreateRequest, UserDataResponse
from app.modules.users.service import UsersService
from app.shared.database.models import User

logger = logging.getLogger(__name__)

router = APIRouter()

def _authenticate(db: Session, email: str, password: str) -> User:
    """Validar credenciales y estado del usuario"""
    user = UsersRepository(db).get_user_by_email(email)

    if not user or not AuthService.verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email o contraseña incorrectos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Usuario inactivo"
        )

    return user

def _token_response(user: User) -> TokenResponse:
    token_data = {
        "user_id": user.id,
        "email": user.email,
        "role": user.role
    }
    return TokenResponse(
        access_token=AuthService.create_access_token(data=token_data),
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Registro público de usuarios

    El rol asignado es siempre 'user'; los roles superiores los otorga un administrador.
    """
    service = UsersService(db)
    user = await service.create_user(UserCreateRequest(**user_data.model_dump(), role="user"))
    return _token_response(user)

@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Endpoint de login para obtener token de acceso

    **Parámetros:**
    - **username**: Email del usuario
    - **password**: Contraseña del usuario
    """
    user = _authenticate(db, form_data.username, form_data.password)
    logger.info(f"Login exitoso de usuario {user.id}")
    return _token_response(user)

@router.post("/login-json", response_model=TokenResponse)
async def login_json(user_login: UserLogin, db: Session = Depends(get_db)):
    """
    Endpoint de login alternativo que acepta JSON

    **Body:**
    ```json
        {
            "email": "user@example.com",
            "password": "password123"
        }
    ```
    """
    user = _authenticate(db, user_login.email, user_login.password)
    return _token_response(user)

@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    # JWT sin estado: el cliente descarta el token
    return {"success": True, "message": "Sesión cerrada", "data": {}}

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Obtener información del usuario actual"""
    return UserResponse.model_validate(current_user)

@router.put("/updatedetails", response_model=UserDataResponse)
async def update_details(
    details: UserDetailsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    repository = UsersRepository(db)
    updates = {k: v for k, v in details.model_dump(exclude_unset=True).items() if v is not None}

    if "email" in updates:
        updates["email"] = updates["email"].lower()
        existing = repository.get_user_by_email(updates["email"])
        if existing and existing.id != current_user.id:
            raise InvalidArgument(f"El email {updates['email']} ya está registrado")

    user = repository.update_user(current_user, updates)
    return UserDataResponse(
        success=True,
        message="Datos actualizados",
        data=UserResponse.model_validate(user)
    )

@router.put("/updatepassword", response_model=TokenResponse)
async def update_password(
    passwords: PasswordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cambiar contraseña; devuelve un token nuevo"""
    if not AuthService.verify_password(passwords.current_password, current_user.password_hash):
        raise AuthenticationError("Contraseña actual incorrecta")

    user = UsersRepository(db).update_user(
        current_user,
        {"password_hash": AuthService.get_password_hash(passwords.new_password)}
    )
    logger.info(f"Usuario {user.id} cambió su contraseña")
    return _token_response(user)
