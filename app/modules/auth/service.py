"""
Servicio de autenticación: registro de empresa + administrador y login.
"""
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging
import re
import secrets

from app.common.exceptions import ConflictError
from app.modules.auth.models import Tenant, User, UserRole
from app.modules.auth.schemas import RegisterRequest, LoginRequest, AuthResponse, UserOut
from app.modules.auth.utils import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


def _slugify(value: str) -> str:
    slug = re.sub(r'[^a-z0-9]+', '-', value.lower()).strip('-')
    return slug or "empresa"


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _build_response(self, user: User) -> AuthResponse:
        token = create_access_token(user.id, user.tenant_id, user.role.value)
        return AuthResponse(token=token, user=UserOut.model_validate(user))

    def register(self, data: RegisterRequest) -> AuthResponse:
        """Crear tenant y su primer usuario con rol ADMIN"""
        email = data.email.lower()
        existing = self.db.query(User).filter(User.email == email).first()
        if existing:
            raise ConflictError("Ya existe un usuario con este email")

        tenant_name = data.tenant_name or f"Empresa de {data.full_name}"
        tenant = Tenant(
            name=tenant_name,
            slug=f"{_slugify(tenant_name)}-{secrets.token_hex(3)}",
            email=email
        )
        self.db.add(tenant)
        self.db.flush()

        user = User(
            tenant_id=tenant.id,
            full_name=data.full_name,
            email=email,
            password=hash_password(data.password),
            role=UserRole.ADMIN,
            is_active=True
        )
        self.db.add(user)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Ya existe un usuario con este email")

        self.db.refresh(user)
        logger.info(f"Tenant registrado: {tenant.slug} ({tenant.id})")
        return self._build_response(user)

    def login(self, data: LoginRequest) -> AuthResponse:
        user = self.db.query(User).filter(User.email == data.email.lower()).first()

        if not user or not verify_password(data.password, user.password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Credenciales inválidas"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Usuario inactivo. Contacte al administrador"
            )

        return self._build_response(user)
