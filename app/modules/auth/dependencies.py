"""
Dependencias de autenticación para FastAPI.
"""
from typing import Iterable, Union
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt

from app.dependencies.dbDependecies import get_db
from app.modules.auth.models import User, UserRole
from app.modules.auth.schemas import AuthContext
from app.modules.auth.utils import decode_access_token

# Security scheme
security = HTTPBearer(auto_error=False)

RoleLike = Union[UserRole, str]


def _role_value(role: RoleLike) -> str:
    return role.value if isinstance(role, UserRole) else str(role).upper()


def is_role_allowed(required_roles: Iterable[RoleLike], actual_role: RoleLike) -> bool:
    """
    Política única de autorización.

    Una lista vacía de roles requeridos permite cualquier rol autenticado.
    """
    required = {_role_value(r) for r in required_roles}
    if not required:
        return actual_role is not None
    if actual_role is None:
        return False
    return _role_value(actual_role) in required


class AuthDependencies:
    """Dependencias de autenticación reutilizables."""

    @staticmethod
    def get_auth_context(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        db: Session = Depends(get_db)
    ) -> AuthContext:
        """
        Obtener contexto {user_id, tenant_id, role} desde el token JWT.
        El usuario debe existir, estar activo y pertenecer al tenant del token.
        """
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido o expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )

        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token de autenticación requerido",
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            payload = decode_access_token(credentials.credentials)
            user_id = UUID(payload["sub"])
            tenant_id = UUID(payload["tenant_id"])
        except (jwt.PyJWTError, KeyError, ValueError):
            raise credentials_exception

        user = db.query(User).filter(User.id == user_id).first()
        if user is None or not user.is_active or user.tenant_id != tenant_id:
            raise credentials_exception

        return AuthContext(user_id=user.id, tenant_id=user.tenant_id, role=user.role)

    @staticmethod
    def require_role(allowed_roles: list[RoleLike]):
        """
        Dependencia para requerir roles específicos.
        """
        def role_checker(auth_context: AuthContext = Depends(AuthDependencies.get_auth_context)):
            if not is_role_allowed(allowed_roles, auth_context.role):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="No tienes permisos para acceder a este recurso"
                )
            return auth_context
        return role_checker

    @staticmethod
    def require_admin():
        return AuthDependencies.require_role([UserRole.ADMIN])

    @staticmethod
    def require_any_role():
        """Cualquier usuario autenticado con contexto de tenant."""
        return AuthDependencies.require_role([])


# Instancias de dependencias
get_auth_context = AuthDependencies.get_auth_context
require_admin = AuthDependencies.require_admin
require_any_role = AuthDependencies.require_any_role
