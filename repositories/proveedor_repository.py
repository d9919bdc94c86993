"""
Repositorio para la entidad Proveedor.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import ProveedorORM, ProductoORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class ProveedorRepository(BaseRepository[ProveedorORM]):
    """Repositorio para proveedores del inventario."""

    resource_name = "Proveedor"

    def __init__(self, db: Session):
        super().__init__(db, ProveedorORM)

    def find_by_email(self, email: str) -> Optional[ProveedorORM]:
        return self.db.query(ProveedorORM).filter(
            func.lower(ProveedorORM.email) == email.strip().lower()
        ).one_or_none()

    def find_by_ruc(self, ruc: str) -> Optional[ProveedorORM]:
        return self.db.query(ProveedorORM).filter(ProveedorORM.ruc == ruc.strip()).one_or_none()

    def search(
        self,
        texto: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[ProveedorORM], int]:
        """
        Busca proveedores por nombre, RUC o email, ordenados por nombre.
        """
        try:
            query = self.db.query(ProveedorORM)
            if texto:
                patron = f"%{texto.strip()}%"
                query = query.filter(or_(
                    ProveedorORM.nombre.ilike(patron),
                    ProveedorORM.ruc.ilike(patron),
                    ProveedorORM.email.ilike(patron),
                ))
            if solo_activos:
                query = query.filter(ProveedorORM.activo == True)
            query = query.order_by(ProveedorORM.nombre)
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching proveedores: {e}")
            raise DatabaseException("Error al buscar proveedores")

    def count_productos_activos(self, id_proveedor: str) -> int:
        return self.db.query(ProductoORM).filter(
            ProductoORM.id_proveedor == id_proveedor, ProductoORM.activo == True
        ).count()
