"""
Repositorio para la entidad Propietario.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import PropietarioORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class PropietarioRepository(BaseRepository[PropietarioORM]):
    """Repositorio para propietarios (clientes de la clínica)."""

    resource_name = "Propietario"

    def __init__(self, db: Session):
        super().__init__(db, PropietarioORM)

    def find_by_email(self, email: str) -> Optional[PropietarioORM]:
        """Busca un propietario por email (sin distinguir mayúsculas)."""
        try:
            return self.db.query(PropietarioORM).filter(
                func.lower(PropietarioORM.email) == email.strip().lower()
            ).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding propietario by email {email}: {e}")
            raise DatabaseException("Error al buscar propietario por email")

    def find_by_documento(self, documento: str) -> Optional[PropietarioORM]:
        try:
            return self.db.query(PropietarioORM).filter(
                PropietarioORM.documento == documento.strip()
            ).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding propietario by documento {documento}: {e}")
            raise DatabaseException("Error al buscar propietario por documento")

    def search(
        self,
        texto: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[PropietarioORM], int]:
        """
        Busca propietarios por nombre, documento o email.

        Returns:
            Tupla (propietarios de la página, total)
        """
        try:
            query = self.db.query(PropietarioORM)
            if texto:
                patron = f"%{texto.strip()}%"
                query = query.filter(or_(
                    PropietarioORM.nombre.ilike(patron),
                    PropietarioORM.documento.ilike(patron),
                    PropietarioORM.email.ilike(patron),
                ))
            if solo_activos:
                query = query.filter(PropietarioORM.activo == True)
            query = query.order_by(PropietarioORM.nombre)
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching propietarios: {e}")
            raise DatabaseException("Error al buscar propietarios")
