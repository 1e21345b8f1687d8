"""
Fixtures de la suite de tests.

Provee:
- Base de datos SQLite en memoria, tablas nuevas por test
- Cliente HTTP (TestClient) con la sesión de BD inyectada
- Usuarios por rol y headers de autenticación
- Fábrica de items de inventario
"""

import os

# La configuración se lee al importar la app: fijar la BD antes
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from decimal import Decimal
from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config.database import Base, SessionLocal, engine, get_db
from app.core.auth.service import AuthService
from app.main import app
from app.shared.database import models  # noqa: F401
from app.shared.database.models import InventoryItem, User


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session):
    counter = {"n": 0}

    def _make_user(role: str = "user", password: str = "secret123", is_active: bool = True, email: str = None) -> User:
        counter["n"] += 1
        user = User(
            name=f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            password_hash=AuthService.get_password_hash(password),
            role=role,
            is_active=is_active
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_item(db_session: Session):
    def _make_item(name: str = "Widget", quantity: int = 10, price: str = "5.00", reorder_level: int = 0,
                   category: str = "Other") -> InventoryItem:
        item = InventoryItem(
            name=name,
            quantity=quantity,
            price=Decimal(price),
            reorder_level=reorder_level,
            category=category
        )
        db_session.add(item)
        db_session.commit()
        db_session.refresh(item)
        return item

    return _make_item


def _auth_headers(user: User) -> Dict[str, str]:
    token = AuthService.create_access_token(
        data={"user_id": user.id, "email": user.email, "role": user.role}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seller(make_user) -> User:
    return make_user("user")


@pytest.fixture
def manager(make_user) -> User:
    return make_user("manager")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("admin")


@pytest.fixture
def seller_headers(seller) -> Dict[str, str]:
    return _auth_headers(seller)


@pytest.fixture
def manager_headers(manager) -> Dict[str, str]:
    return _auth_headers(manager)


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    return _auth_headers(admin)


@pytest.fixture
def headers_for():
    return _auth_headers


@pytest.fixture
def stock(db_session: Session):
    """Cantidad leída directamente de la BD (None si el item no existe)"""
    def _stock(item_id: int):
        db_session.expire_all()
        item = db_session.get(InventoryItem, item_id)
        return item.quantity if item else None

    return _stock
