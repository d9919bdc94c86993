"""
Repositorios para el catálogo de vacunas y las vacunaciones aplicadas.
"""

from typing import List, Optional, Tuple
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import VacunaORM, VacunacionORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class VacunaRepository(BaseRepository[VacunaORM]):
    """Repositorio del catálogo de vacunas."""

    resource_name = "Vacuna"

    def __init__(self, db: Session):
        super().__init__(db, VacunaORM)

    def search(
        self,
        nombre: Optional[str] = None,
        especie: Optional[str] = None,
        solo_activas: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[VacunaORM], int]:
        """
        Busca vacunas por nombre y especie. Las vacunas sin especie aplican a todas.
        """
        try:
            query = self.db.query(VacunaORM)
            if nombre:
                query = query.filter(VacunaORM.nombre.ilike(f"%{nombre.strip()}%"))
            if especie:
                query = query.filter(or_(
                    func.lower(VacunaORM.especie) == especie.strip().lower(),
                    VacunaORM.especie.is_(None),
                ))
            if solo_activas:
                query = query.filter(VacunaORM.activo == True)
            query = query.order_by(VacunaORM.nombre)
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching vacunas: {e}")
            raise DatabaseException("Error al buscar vacunas")


class VacunacionRepository(BaseRepository[VacunacionORM]):
    """Repositorio de vacunaciones aplicadas a pacientes."""

    resource_name = "Vacunación"

    def __init__(self, db: Session):
        super().__init__(db, VacunacionORM)

    def find_by_paciente(self, id_paciente: str) -> List[VacunacionORM]:
        return (
            self.db.query(VacunacionORM)
            .filter(VacunacionORM.id_paciente == id_paciente)
            .order_by(VacunacionORM.fecha_aplicacion.desc())
            .all()
        )

    def find_proximas(self, desde: date, hasta: date) -> List[VacunacionORM]:
        """
        Vacunaciones cuya próxima dosis cae en [desde, hasta].

        Args:
            desde: Fecha inicial (normalmente hoy)
            hasta: Fecha final incluida
        """
        try:
            return (
                self.db.query(VacunacionORM)
                .filter(
                    VacunacionORM.proxima_dosis.isnot(None),
                    VacunacionORM.proxima_dosis >= desde,
                    VacunacionORM.proxima_dosis <= hasta,
                )
                .order_by(VacunacionORM.proxima_dosis.asc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error finding proximas vacunaciones: {e}")
            raise DatabaseException("Error al buscar próximas vacunaciones")

    def find_vencidas(self, hoy: date) -> List[VacunacionORM]:
        """Vacunaciones con próxima dosis anterior a hoy."""
        return (
            self.db.query(VacunacionORM)
            .filter(VacunacionORM.proxima_dosis.isnot(None), VacunacionORM.proxima_dosis < hoy)
            .order_by(VacunacionORM.proxima_dosis.asc())
            .all()
        )

    def count_proximas(self, desde: date, hasta: date) -> int:
        return self.db.query(VacunacionORM).filter(
            VacunacionORM.proxima_dosis >= desde, VacunacionORM.proxima_dosis <= hasta
        ).count()

    def count_vencidas(self, hoy: date) -> int:
        return self.db.query(VacunacionORM).filter(VacunacionORM.proxima_dosis < hoy).count()
