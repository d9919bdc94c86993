"""
Repositorio para la entidad Factura y sus pagos.
"""

from typing import List, Optional, Tuple, Dict
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import FacturaORM, PagoORM
from core.exceptions import DatabaseException
from core.pagination import paginate_query
import logging

logger = logging.getLogger(__name__)


class FacturaRepository(BaseRepository[FacturaORM]):
    """Repositorio para la gestión de facturas."""

    resource_name = "Factura"

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de facturas.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, FacturaORM)

    def find_by_numero(self, numero: str) -> Optional[FacturaORM]:
        try:
            return self.db.query(FacturaORM).filter(FacturaORM.numero == numero).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding factura by numero {numero}: {e}")
            raise DatabaseException("Error al buscar factura por número")

    def find_by_consulta(self, id_consulta: str) -> Optional[FacturaORM]:
        """
        Busca la factura de una consulta.

        Returns:
            FacturaORM o None si la consulta no está facturada
        """
        try:
            return self.db.query(FacturaORM).filter(FacturaORM.id_consulta == id_consulta).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding factura by consulta {id_consulta}: {e}")
            raise DatabaseException("Error al buscar factura por consulta")

    def count_by_numero_prefix(self, prefix: str) -> int:
        """Cantidad de facturas cuyo número empieza por `prefix` (p. ej. FAC-202611-)."""
        return self.db.query(FacturaORM).filter(FacturaORM.numero.like(f"{prefix}%")).count()

    def search(
        self,
        estado: Optional[str] = None,
        id_propietario: Optional[str] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        page: int = 0,
        page_size: int = 50
    ) -> Tuple[List[FacturaORM], int]:
        """
        Busca facturas por estado, propietario y rango de fecha de emisión.

        Returns:
            Tupla (facturas de la página, total)
        """
        try:
            query = self.db.query(FacturaORM)
            if estado:
                query = query.filter(FacturaORM.estado == estado)
            if id_propietario:
                query = query.filter(FacturaORM.id_propietario == id_propietario)
            if desde:
                query = query.filter(FacturaORM.fecha >= desde)
            if hasta:
                query = query.filter(FacturaORM.fecha <= hasta)
            query = query.order_by(FacturaORM.fecha.desc())
            return paginate_query(query, page, page_size)
        except SQLAlchemyError as e:
            logger.error(f"Error searching facturas: {e}")
            raise DatabaseException("Error al buscar facturas")

    def totales(self, desde: Optional[datetime] = None, hasta: Optional[datetime] = None) -> Dict[str, float]:
        """
        Sumas de total y monto pagado de las facturas no canceladas en el rango.
        """
        query = self.db.query(
            func.coalesce(func.sum(FacturaORM.total), 0),
            func.coalesce(func.sum(FacturaORM.monto_pagado), 0),
        ).filter(FacturaORM.estado != "CANCELADA")
        if desde:
            query = query.filter(FacturaORM.fecha >= desde)
        if hasta:
            query = query.filter(FacturaORM.fecha <= hasta)
        total, pagado = query.one()
        return {"total_facturado": float(total), "total_pagado": float(pagado)}

    def count_por_estado(
        self,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None
    ) -> List[Tuple[str, int]]:
        query = self.db.query(FacturaORM.estado, func.count(FacturaORM.id))
        if desde:
            query = query.filter(FacturaORM.fecha >= desde)
        if hasta:
            query = query.filter(FacturaORM.fecha <= hasta)
        return query.group_by(FacturaORM.estado).all()

    def find_pagos(self, id_factura: str) -> List[PagoORM]:
        return (
            self.db.query(PagoORM)
            .filter(PagoORM.id_factura == id_factura)
            .order_by(PagoORM.fecha_pago.asc())
            .all()
        )
