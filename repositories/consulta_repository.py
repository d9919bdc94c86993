"""
Repositorio para consultas médicas y prescripciones.
"""

from typing import List, Optional, Tuple
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import ConsultaORM, PrescripcionORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class ConsultaRepository(BaseRepository[ConsultaORM]):
    """Repositorio para la entidad Consulta."""

    resource_name = "Consulta"

    def __init__(self, db: Session):
        super().__init__(db, ConsultaORM)

    def search(
        self,
        id_paciente: Optional[str] = None,
        id_profesional: Optional[str] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[ConsultaORM], int]:
        """
        Busca consultas por paciente, profesional y rango de fechas (más recientes primero).
        """
        try:
            query = self.db.query(ConsultaORM)
            if id_paciente:
                query = query.filter(ConsultaORM.id_paciente == id_paciente)
            if id_profesional:
                query = query.filter(ConsultaORM.id_profesional == id_profesional)
            if desde:
                query = query.filter(ConsultaORM.fecha >= desde)
            if hasta:
                query = query.filter(ConsultaORM.fecha <= hasta)
            query = query.order_by(ConsultaORM.fecha.desc())
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching consultas: {e}")
            raise DatabaseException("Error al buscar consultas")

    def find_by_paciente(self, id_paciente: str) -> List[ConsultaORM]:
        return (
            self.db.query(ConsultaORM)
            .filter(ConsultaORM.id_paciente == id_paciente)
            .order_by(ConsultaORM.fecha.desc())
            .all()
        )


class PrescripcionRepository(BaseRepository[PrescripcionORM]):
    """Repositorio para la entidad Prescripcion."""

    resource_name = "Prescripción"

    def __init__(self, db: Session):
        super().__init__(db, PrescripcionORM)

    def find_by_consulta(self, id_consulta: str) -> List[PrescripcionORM]:
        return (
            self.db.query(PrescripcionORM)
            .filter(PrescripcionORM.id_consulta == id_consulta)
            .order_by(PrescripcionORM.fecha_emision.desc())
            .all()
        )

    def find_by_paciente(self, id_paciente: str) -> List[PrescripcionORM]:
        """Prescripciones de todas las consultas de un paciente."""
        try:
            return (
                self.db.query(PrescripcionORM)
                .join(ConsultaORM, PrescripcionORM.id_consulta == ConsultaORM.id)
                .filter(ConsultaORM.id_paciente == id_paciente)
                .order_by(PrescripcionORM.fecha_emision.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error finding prescripciones by paciente {id_paciente}: {e}")
            raise DatabaseException("Error al buscar prescripciones del paciente")

    def search(self, page: int = 0, page_size: int = 50) -> Tuple[List[PrescripcionORM], int]:
        query = self.db.query(PrescripcionORM).order_by(PrescripcionORM.fecha_emision.desc())
        return paginate_query(query, page, page_size)

    def count_desde(self, desde: datetime) -> int:
        return self.db.query(PrescripcionORM).filter(PrescripcionORM.fecha_emision >= desde).count()
