"""
Repositorio de notificaciones del staff.
"""

from typing import List
from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import NotificacionORM
import logging

logger = logging.getLogger(__name__)


class NotificacionRepository(BaseRepository[NotificacionORM]):
    resource_name = "Notificación"

    def __init__(self, db: Session):
        super().__init__(db, NotificacionORM)

    def find_by_usuario(self, id_usuario: str, solo_no_leidas: bool = False, limit: int = 100) -> List[NotificacionORM]:
        query = self.db.query(NotificacionORM).filter(NotificacionORM.id_usuario == id_usuario)
        if solo_no_leidas:
            query = query.filter(NotificacionORM.leida == False)
        return query.order_by(NotificacionORM.fecha_creacion.desc()).limit(limit).all()

    def count_no_leidas(self, id_usuario: str) -> int:
        return self.db.query(NotificacionORM).filter(
            NotificacionORM.id_usuario == id_usuario, NotificacionORM.leida == False
        ).count()

    def marcar_todas_leidas(self, id_usuario: str) -> int:
        """Marca como leídas todas las notificaciones del usuario; devuelve cuántas cambiaron."""
        actualizadas = (
            self.db.query(NotificacionORM)
            .filter(NotificacionORM.id_usuario == id_usuario, NotificacionORM.leida == False)
            .update({NotificacionORM.leida: True}, synchronize_session=False)
        )
        self.db.flush()
        return actualizadas
