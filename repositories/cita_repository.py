"""
Repositorio para la entidad Cita.
Gestiona las operaciones de base de datos relacionadas con las citas.
"""

from typing import List, Optional, Tuple
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import CitaORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class CitaRepository(BaseRepository[CitaORM]):
    """Repositorio para la entidad Cita."""

    resource_name = "Cita"

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de citas.

        Args:
            db: Sesión de SQLAlchemy
        """
        super().__init__(db, CitaORM)

    def find_by_profesional_en_rango(
        self,
        id_profesional: str,
        inicio: datetime,
        fin: datetime,
        excluir_id: Optional[str] = None
    ) -> List[CitaORM]:
        """
        Citas no canceladas de un profesional que empiezan dentro de [inicio, fin).

        Args:
            id_profesional: ID del veterinario
            inicio: Inicio del rango
            fin: Fin del rango (excluido)
            excluir_id: Cita a ignorar (la que se está editando)

        Returns:
            Lista de citas ordenadas por fecha
        """
        try:
            query = self.db.query(CitaORM).filter(
                CitaORM.id_profesional == id_profesional,
                CitaORM.fecha >= inicio,
                CitaORM.fecha < fin,
                CitaORM.estado != "CANCELADA",
            )
            if excluir_id:
                query = query.filter(CitaORM.id != excluir_id)
            return query.order_by(CitaORM.fecha.asc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Error finding citas for profesional {id_profesional}: {e}")
            raise DatabaseException("Error al buscar citas del profesional")

    def search(
        self,
        estado: Optional[str] = None,
        id_profesional: Optional[str] = None,
        id_paciente: Optional[str] = None,
        id_propietario: Optional[str] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[CitaORM], int]:
        """
        Busca citas con filtros opcionales.

        Returns:
            Tupla (citas de la página, total)
        """
        try:
            query = self.db.query(CitaORM)
            if estado:
                query = query.filter(CitaORM.estado == estado)
            if id_profesional:
                query = query.filter(CitaORM.id_profesional == id_profesional)
            if id_paciente:
                query = query.filter(CitaORM.id_paciente == id_paciente)
            if id_propietario:
                query = query.filter(CitaORM.id_propietario == id_propietario)
            if desde:
                query = query.filter(CitaORM.fecha >= desde)
            if hasta:
                query = query.filter(CitaORM.fecha <= hasta)
            query = query.order_by(CitaORM.fecha.asc())
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching citas: {e}")
            raise DatabaseException("Error al buscar citas")

    def find_activas_en_rango(self, inicio: datetime, fin: datetime) -> List[CitaORM]:
        """Citas PENDIENTE o CONFIRMADA con fecha en [inicio, fin)."""
        return (
            self.db.query(CitaORM)
            .filter(
                CitaORM.fecha >= inicio,
                CitaORM.fecha < fin,
                CitaORM.estado.in_(["PENDIENTE", "CONFIRMADA"]),
            )
            .order_by(CitaORM.fecha.asc())
            .all()
        )

    def find_proximas(self, desde: datetime, limit: int = 5) -> List[CitaORM]:
        """Próximas citas pendientes o confirmadas a partir de `desde`."""
        return (
            self.db.query(CitaORM)
            .filter(CitaORM.fecha >= desde, CitaORM.estado.in_(["PENDIENTE", "CONFIRMADA"]))
            .order_by(CitaORM.fecha.asc())
            .limit(limit)
            .all()
        )

    def count_en_rango(self, inicio: datetime, fin: datetime, estados: Optional[List[str]] = None) -> int:
        query = self.db.query(CitaORM).filter(CitaORM.fecha >= inicio, CitaORM.fecha < fin)
        if estados:
            query = query.filter(CitaORM.estado.in_(estados))
        return query.count()

    def count_desde(self, desde: datetime, estados: List[str]) -> int:
        return self.db.query(CitaORM).filter(
            CitaORM.fecha >= desde, CitaORM.estado.in_(estados)
        ).count()

    def count_por_estado(self) -> List[Tuple[str, int]]:
        return (
            self.db.query(CitaORM.estado, func.count(CitaORM.id))
            .group_by(CitaORM.estado)
            .all()
        )

    def find_by_paciente(self, id_paciente: str) -> List[CitaORM]:
        return (
            self.db.query(CitaORM)
            .filter(CitaORM.id_paciente == id_paciente)
            .order_by(CitaORM.fecha.desc())
            .all()
        )
