"""
Repositorio para la entidad Usuario.
Gestiona las operaciones de base de datos relacionadas con los usuarios del staff.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import UsuarioORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class UsuarioRepository(BaseRepository[UsuarioORM]):
    """Repositorio para la gestión de entidades de usuario."""

    resource_name = "Usuario"

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de usuarios.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, UsuarioORM)

    def find_by_email(self, email: str) -> Optional[UsuarioORM]:
        """
        Busca un usuario por email (sin distinguir mayúsculas).

        Returns:
            UsuarioORM o None si no se encuentra
        """
        try:
            return self.db.query(UsuarioORM).filter(
                func.lower(UsuarioORM.email) == email.strip().lower()
            ).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding usuario by email {email}: {e}")
            raise DatabaseException("Error al buscar usuario por email")

    def find_veterinarios_activos(self) -> List[UsuarioORM]:
        """Veterinarios activos ordenados por nombre."""
        try:
            return self.db.query(UsuarioORM).filter(
                UsuarioORM.rol == "VET",
                UsuarioORM.activo == True
            ).order_by(UsuarioORM.nombre).all()
        except SQLAlchemyError as e:
            logger.error(f"Error finding veterinarios: {e}")
            raise DatabaseException("Error al buscar veterinarios")

    def find_activos_por_roles(self, roles: List[str]) -> List[UsuarioORM]:
        return self.db.query(UsuarioORM).filter(
            UsuarioORM.rol.in_(roles),
            UsuarioORM.activo == True
        ).all()

    def search(
        self,
        texto: Optional[str] = None,
        rol: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[UsuarioORM], int]:
        """
        Busca usuarios por nombre/email y rol, paginado.

        Returns:
            Tupla (usuarios de la página, total)
        """
        try:
            query = self.db.query(UsuarioORM)
            if texto:
                patron = f"%{texto.strip()}%"
                query = query.filter(or_(UsuarioORM.nombre.ilike(patron), UsuarioORM.email.ilike(patron)))
            if rol:
                query = query.filter(UsuarioORM.rol == rol)
            if solo_activos:
                query = query.filter(UsuarioORM.activo == True)
            query = query.order_by(UsuarioORM.nombre)
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching usuarios: {e}")
            raise DatabaseException("Error al buscar usuarios")
