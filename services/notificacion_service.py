"""
Servicio de notificaciones internas del staff.

Cada notificación se guarda en BD y se empuja por WebSocket al usuario
destinatario si tiene conexiones abiertas.
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from services.websocket_manager import ConnectionManager, manager as default_manager
from repositories.notificacion_repository import NotificacionRepository
from database.models import NotificacionORM
from models.notificaciones import Notificacion, TipoNotificacion
from core.context import RequestContext
from core.exceptions import ForbiddenException
from core.security import validate_uuid
from core.utils import enum_to_value

logger = logging.getLogger(__name__)


def to_response(notificacion: NotificacionORM) -> Notificacion:
    return Notificacion(
        id_notificacion=notificacion.id,
        titulo=notificacion.titulo,
        mensaje=notificacion.mensaje,
        tipo=notificacion.tipo,
        leida=notificacion.leida,
        entidad_tipo=notificacion.entidad_tipo,
        entidad_id=notificacion.entidad_id,
        fecha_creacion=notificacion.fecha_creacion,
    )


class NotificacionService(BaseService[NotificacionORM, NotificacionRepository]):

    def __init__(
        self,
        repository: NotificacionRepository,
        connection_manager: Optional[ConnectionManager] = None
    ):
        super().__init__(repository)
        self.connections = connection_manager or default_manager

    def crear(
        self,
        id_usuario: str,
        titulo: str,
        mensaje: str,
        tipo: TipoNotificacion = TipoNotificacion.INFO,
        entidad_tipo: Optional[str] = None,
        entidad_id: Optional[str] = None,
        commit: bool = True,
    ) -> NotificacionORM:
        """
        Crea la notificación y la envía por WebSocket.

        Con commit=False queda dentro de la transacción del llamador.
        """
        notificacion = NotificacionORM(
            id_usuario=id_usuario,
            titulo=titulo,
            mensaje=mensaje,
            tipo=enum_to_value(tipo),
            leida=False,
            entidad_tipo=entidad_tipo,
            entidad_id=entidad_id,
        )
        creada = self.repository.create(notificacion)
        if commit:
            self.repository.commit()

        self.connections.notify_user(
            id_usuario,
            {"evento": "notificacion", "data": to_response(creada).model_dump(mode="json")},
        )
        return creada

    def listar(self, ctx: RequestContext, solo_no_leidas: bool = False, limit: int = 100) -> List[Notificacion]:
        notificaciones = self.repository.find_by_usuario(ctx.id, solo_no_leidas=solo_no_leidas, limit=limit)
        return [to_response(n) for n in notificaciones]

    def contar_no_leidas(self, ctx: RequestContext) -> int:
        return self.repository.count_no_leidas(ctx.id)

    def _get_propia(self, id_notificacion: str, ctx: RequestContext) -> NotificacionORM:
        validate_uuid(id_notificacion, "id_notificacion")
        notificacion = self.repository.get_by_id_or_fail(id_notificacion)
        if notificacion.id_usuario != ctx.id:
            raise ForbiddenException("No autorizado para acceder a esta notificación")
        return notificacion

    def marcar_leida(self, id_notificacion: str, ctx: RequestContext) -> Notificacion:
        notificacion = self._get_propia(id_notificacion, ctx)
        if not notificacion.leida:
            notificacion.leida = True
            notificacion = self.repository.update(notificacion)
            self.repository.commit()
        return to_response(notificacion)

    def marcar_todas_leidas(self, ctx: RequestContext) -> int:
        actualizadas = self.repository.marcar_todas_leidas(ctx.id)
        self.repository.commit()
        return actualizadas

    def eliminar(self, id_notificacion: str, ctx: RequestContext) -> None:
        notificacion = self._get_propia(id_notificacion, ctx)
        self.repository.delete(notificacion, hard=True)
        self.repository.commit()
