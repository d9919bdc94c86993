"""
Repositorio para la entidad Paciente.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import PacienteORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class PacienteRepository(BaseRepository[PacienteORM]):
    """Repositorio para pacientes (animales atendidos)."""

    resource_name = "Paciente"

    def __init__(self, db: Session):
        super().__init__(db, PacienteORM)

    def find_by_microchip(self, microchip: str) -> Optional[PacienteORM]:
        try:
            return self.db.query(PacienteORM).filter(
                PacienteORM.microchip == microchip.strip()
            ).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding paciente by microchip {microchip}: {e}")
            raise DatabaseException("Error al buscar paciente por microchip")

    def find_by_propietario(self, id_propietario: str, solo_activos: bool = True) -> List[PacienteORM]:
        """
        Pacientes de un propietario ordenados por nombre.
        """
        try:
            query = self.db.query(PacienteORM).filter(PacienteORM.id_propietario == id_propietario)
            if solo_activos:
                query = query.filter(PacienteORM.activo == True)
            return query.order_by(PacienteORM.nombre).all()
        except SQLAlchemyError as e:
            logger.error(f"Error finding pacientes by propietario {id_propietario}: {e}")
            raise DatabaseException("Error al buscar pacientes por propietario")

    def search(
        self,
        nombre: Optional[str] = None,
        especie: Optional[str] = None,
        id_propietario: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[PacienteORM], int]:
        """
        Busca pacientes por nombre (parcial), especie y propietario.

        Returns:
            Tupla (pacientes de la página, total)
        """
        try:
            query = self.db.query(PacienteORM)
            if nombre:
                query = query.filter(PacienteORM.nombre.ilike(f"%{nombre.strip()}%"))
            if especie:
                query = query.filter(func.lower(PacienteORM.especie) == especie.strip().lower())
            if id_propietario:
                query = query.filter(PacienteORM.id_propietario == id_propietario)
            if solo_activos:
                query = query.filter(PacienteORM.activo == True)
            query = query.order_by(PacienteORM.nombre)
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching pacientes: {e}")
            raise DatabaseException("Error al buscar pacientes")

    def count_by_especie(self) -> List[Tuple[str, int]]:
        """Distribución de pacientes activos por especie."""
        return (
            self.db.query(PacienteORM.especie, func.count(PacienteORM.id))
            .filter(PacienteORM.activo == True)
            .group_by(PacienteORM.especie)
            .order_by(func.count(PacienteORM.id).desc())
            .all()
        )
