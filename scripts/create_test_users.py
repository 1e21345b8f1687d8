"""
Script para crear usuarios de prueba (uno por rol)
"""
from typing import Optional

from sqlalchemy.orm import Session

from app.config.database import SessionLocal, init_db
from app.core.auth.service import AuthService
from app.shared.database.models import User

TEST_USERS = [
    {
        "email": "admin@inventario.com",
        "password": "admin123",
        "name": "Ana Administradora",
        "role": "admin"
    },
    {
        "email": "gerente@inventario.com",
        "password": "gerente123",
        "name": "Carlos Gerente",
        "role": "manager"
    },
    {
        "email": "vendedor@inventario.com",
        "password": "vendedor123",
        "name": "Juan Vendedor",
        "role": "user"
    }
]

def create_test_users(db: Optional[Session] = None) -> int:
    """Crear usuarios de prueba si la tabla está vacía; retorna cuántos se crearon"""

    own_session = db is None
    db = db or SessionLocal()

    try:
        # Verificar si ya existen usuarios
        existing_users = db.query(User).count()
        if existing_users > 0:
            print(f"Ya existen {existing_users} usuarios en la base de datos")
            return 0

        for user_data in TEST_USERS:
            db.add(User(
                email=user_data["email"],
                password_hash=AuthService.get_password_hash(user_data["password"]),
                name=user_data["name"],
                role=user_data["role"],
                is_active=True
            ))
            print(f"Usuario creado: {user_data['email']} / {user_data['password']} ({user_data['role']})")

        db.commit()
        print(f"\n{len(TEST_USERS)} usuarios de prueba creados")
        return len(TEST_USERS)

    except Exception:
        db.rollback()
        raise

    finally:
        if own_session:
            db.close()

if __name__ == "__main__":
    init_db()
    create_test_users()
