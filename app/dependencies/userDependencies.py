from typing import Annotated
from fastapi import Depends
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext

# Cualquier rol autenticado
auth_dependency = Annotated[AuthContext, Depends(AuthDependencies.require_any_role())]

# Solo administradores
admin_dependency = Annotated[AuthContext, Depends(AuthDependencies.require_admin())]
