"""
Rutas de notificaciones del usuario autenticado (staff).
"""

from fastapi import APIRouter, Depends, Query
from typing import List
from sqlalchemy.orm import Session

from models.notificaciones import Notificacion, ConteoNoLeidas
from models.usuarios import ROLES_STAFF
from models.common import create_success_response, create_delete_response
from core.context import RequestContext
from services.notificacion_service import NotificacionService
from services.websocket_manager import get_connection_manager
from repositories.notificacion_repository import NotificacionRepository
from database.db import get_db
from auth import require_roles

router = APIRouter(prefix="/notificaciones", tags=["notificaciones"])


def get_notificacion_service(db: Session = Depends(get_db)) -> NotificacionService:
    return NotificacionService(NotificacionRepository(db), get_connection_manager())


@router.get("/", response_model=List[Notificacion])
async def mis_notificaciones(
    solo_no_leidas: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: NotificacionService = Depends(get_notificacion_service),
):
    return service.listar(ctx, solo_no_leidas=solo_no_leidas, limit=limit)


@router.get("/no-leidas", response_model=List[Notificacion])
async def notificaciones_no_leidas(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: NotificacionService = Depends(get_notificacion_service),
):
    return service.listar(ctx, solo_no_leidas=True)


@router.get("/no-leidas/conteo", response_model=ConteoNoLeidas)
async def conteo_no_leidas(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: NotificacionService = Depends(get_notificacion_service),
):
    return ConteoNoLeidas(no_leidas=service.contar_no_leidas(ctx))


@router.put("/leer-todas")
async def marcar_todas_leidas(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: NotificacionService = Depends(get_notificacion_service),
):
    actualizadas = service.marcar_todas_leidas(ctx)
    return create_success_response("Notificaciones marcadas como leídas", {"actualizadas": actualizadas})


@router.put("/{notificacion_id}/leer", response_model=Notificacion)
async def marcar_leida(
    notificacion_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: NotificacionService = Depends(get_notificacion_service),
):
    """Solo el destinatario puede marcarla (403 en otro caso)."""
    return service.marcar_leida(notificacion_id, ctx)


@router.delete("/{notificacion_id}")
async def eliminar_notificacion(
    notificacion_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    service: NotificacionService = Depends(get_notificacion_service),
):
    service.eliminar(notificacion_id, ctx)
    return create_delete_response("Notificación eliminada", notificacion_id, soft_delete=False)
