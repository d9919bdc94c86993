"""
Repositorios para las plantillas de consulta y de prescripción.
"""

from typing import List, Optional, Type, TypeVar
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from repositories.base_repository import BaseRepository
from database.models import TemplateConsultaORM, TemplatePrescripcionORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T", TemplateConsultaORM, TemplatePrescripcionORM)


class _TemplateRepository(BaseRepository[T]):
    """Búsqueda por categoría y texto común a ambos tipos de plantilla."""

    def __init__(self, db: Session, model_class: Type[T]):
        super().__init__(db, model_class)

    def search(self, categoria: Optional[str] = None, texto: Optional[str] = None) -> List[T]:
        """
        Plantillas activas ordenadas por categoría y nombre.
        """
        model = self.model_class
        try:
            query = self.db.query(model).filter(model.activo == True)
            if categoria:
                query = query.filter(model.categoria == categoria.strip())
            if texto:
                patron = f"%{texto.strip()}%"
                query = query.filter(or_(model.nombre.ilike(patron), model.descripcion.ilike(patron)))
            return query.order_by(model.categoria, model.nombre).all()
        except SQLAlchemyError as e:
            logger.error(f"Error searching {model.__name__}: {e}")
            raise DatabaseException(f"Error al buscar {self.resource_name}")

    def categorias(self) -> List[str]:
        model = self.model_class
        filas = self.db.query(model.categoria).filter(
            model.activo == True, model.categoria.isnot(None)
        ).distinct().order_by(model.categoria).all()
        return [fila[0] for fila in filas]


class TemplateConsultaRepository(_TemplateRepository[TemplateConsultaORM]):

    resource_name = "Template de consulta"

    def __init__(self, db: Session):
        super().__init__(db, TemplateConsultaORM)


class TemplatePrescripcionRepository(_TemplateRepository[TemplatePrescripcionORM]):

    resource_name = "Template de prescripción"

    def __init__(self, db: Session):
        super().__init__(db, TemplatePrescripcionORM)
