from fastapi import APIRouter, status

from app.dependencies.dbDependecies import db_dependency
from app.dependencies.userDependencies import auth_dependency
from app.common.exceptions import NotFoundError
from app.modules.auth.models import User
from app.modules.auth.schemas import RegisterRequest, LoginRequest, AuthResponse, UserOut
from app.modules.auth.service import AuthService

auth_router = APIRouter()


@auth_router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: db_dependency):
    """
    Registrar una nueva empresa con su usuario administrador.
    """
    return AuthService(db).register(data)


@auth_router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: db_dependency):
    """Login con email y contraseña. Retorna el bearer token."""
    return AuthService(db).login(data)


@auth_router.get("/me", response_model=UserOut)
def me(db: db_dependency, auth_context: auth_dependency):
    user = db.query(User).filter(User.id == auth_context.user_id).first()
    if not user:
        raise NotFoundError("Usuario no encontrado")
    return user
