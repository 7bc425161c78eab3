"""
Cambia el rol de un usuario existente (por defecto a ADMIN).

Uso:
    python scripts/make_admin.py usuario@ejemplo.com
    python scripts/make_admin.py cajero@ejemplo.com --role CASHIER
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

from app.database.database import SessionLocal
from app.modules.auth.models import User, UserRole


def set_role(db, email: str, role: UserRole) -> int:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        print(f"No se encontró ningún usuario con el email: {email}")
        return 1

    if user.role == role:
        print(f"El usuario {user.email} ya es {role.value}. No se requiere cambio.")
        return 0

    previous = user.role
    user.role = role
    db.commit()
    print(f"Usuario {user.email} ({user.full_name}): {previous.value} -> {role.value}")
    print("El usuario debe iniciar sesión de nuevo para obtener un token con el nuevo rol.")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Cambiar el rol de un usuario")
    parser.add_argument("email")
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.ADMIN.value)
    args = parser.parse_args()

    db = SessionLocal()
    try:
        sys.exit(set_role(db, args.email, UserRole(args.role)))
    finally:
        db.close()


if __name__ == "__main__":
    main()
