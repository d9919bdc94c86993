"""
Rutas de administración de usuarios del staff (solo ADMIN).
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from sqlalchemy.orm import Session

from models.usuarios import Usuario, UsuarioCreate, UsuarioUpdate, PasswordUpdate, VeterinarioResumen, Role, ROLES_STAFF
from models.common import create_delete_response, create_success_response
from core.context import RequestContext
from core.pagination import create_paginated_response
from services.usuario_service import UsuarioService
from repositories.usuario_repository import UsuarioRepository
from database.db import get_db
from auth import require_roles
from config import settings

router = APIRouter(prefix="/usuarios", tags=["usuarios"])


def get_usuario_service(db: Session = Depends(get_db)) -> UsuarioService:
    return UsuarioService(UsuarioRepository(db))


@router.post("/", response_model=Usuario, status_code=status.HTTP_201_CREATED)
async def crear_usuario(
    data: UsuarioCreate,
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value)),
    service: UsuarioService = Depends(get_usuario_service),
):
    return service.create_usuario(data, ctx)


@router.get("/")
async def listar_usuarios(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    texto: Optional[str] = Query(None, description="Busca en nombre y email"),
    rol: Optional[Role] = Query(None),
    solo_activos: bool = Query(True),
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value)),
    service: UsuarioService = Depends(get_usuario_service),
):
    usuarios, total = service.get_usuarios(texto, rol, solo_activos, page, page_size)
    return create_paginated_response(usuarios, page, page_size, total)


@router.get("/veterinarios", response_model=List[VeterinarioResumen])
async def listar_veterinarios(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: UsuarioService = Depends(get_usuario_service),
):
    return service.get_veterinarios()


@router.get("/me", response_model=Usuario)
async def mi_usuario(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: UsuarioService = Depends(get_usuario_service),
):
    return service.get_usuario(ctx.id)


@router.get("/{usuario_id}", response_model=Usuario)
async def obtener_usuario(
    usuario_id: str,
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value)),
    service: UsuarioService = Depends(get_usuario_service),
):
    return service.get_usuario(usuario_id)


@router.put("/{usuario_id}", response_model=Usuario)
async def actualizar_usuario(
    usuario_id: str,
    data: UsuarioUpdate,
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value)),
    service: UsuarioService = Depends(get_usuario_service),
):
    return service.update_usuario(usuario_id, data, ctx)


@router.put("/{usuario_id}/password")
async def cambiar_password(
    usuario_id: str,
    data: PasswordUpdate,
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value)),
    service: UsuarioService = Depends(get_usuario_service),
):
    """Restablece la contraseña de un usuario (administrador)."""
    service.cambiar_password(usuario_id, data, ctx)
    return create_success_response("Contraseña actualizada")


@router.delete("/{usuario_id}")
async def eliminar_usuario(
    usuario_id: str,
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value)),
    service: UsuarioService = Depends(get_usuario_service),
):
    service.delete_usuario(usuario_id, ctx)
    return create_delete_response("Usuario desactivado", usuario_id)


@router.post("/{usuario_id}/restaurar", response_model=Usuario)
async def restaurar_usuario(
    usuario_id: str,
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value)),
    service: UsuarioService = Depends(get_usuario_service),
):
    return service.restore_usuario(usuario_id, ctx)
