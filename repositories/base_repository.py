"""
Repositorio base con operaciones CRUD comunes:
Este repositorio genérico proporciona operaciones de base de datos estándar
que se reutilizan en todos los repositorios de entidades
"""

from typing import TypeVar, Generic, List, Optional, Type
from sqlalchemy.orm import Session
from sqlalchemy import desc, asc
from sqlalchemy.exc import SQLAlchemyError
import logging

from core.exceptions import NotFoundException, DatabaseException
from database.db import soft_delete, restore_deleted, set_audit_fields

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Repositorio genérico que proporciona operaciones CRUD estándar.

    Esta clase debe ser heredada por repositorios de entidades específicos.
    `resource_name` se usa en los mensajes de error (p. ej. "Paciente").
    """

    resource_name: str = "Registro"

    def __init__(self, db: Session, model_class: Type[T]):
        """
        Inicializa el repositorio.

        Args:
            db: Sesión SQLAlchemy
            model_class: Clase del modelo ORM para este repositorio
        """
        self.db = db
        self.model_class = model_class

    @property
    def soporta_borrado_logico(self) -> bool:
        return hasattr(self.model_class, "activo")

    def get_by_id(self, id: str) -> Optional[T]:
        """
        Obtiene una entidad por su ID.

        Returns:
            La entidad o None si no existe
        """
        try:
            return self.db.get(self.model_class, str(id))
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model_class.__name__} by id {id}: {e}")
            raise DatabaseException(f"Error al obtener {self.resource_name}")

    def get_by_id_or_fail(self, id: str) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: Si la entidad no existe
        """
        entity = self.get_by_id(id)
        if not entity:
            raise NotFoundException(
                resource=self.resource_name,
                identifier=str(id)
            )
        return entity

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        solo_activos: bool = True,
        order_by: Optional[str] = None,
        order_desc: bool = False
    ) -> List[T]:
        """
        Obtiene todas las entidades con paginación.

        Args:
            skip: Número de registros a saltar
            limit: Número máximo de registros a devolver
            solo_activos: Excluir registros desactivados (si la entidad lo soporta)
            order_by: Nombre del campo para ordenar
            order_desc: Orden descendente
        """
        try:
            query = self.db.query(self.model_class)

            if solo_activos and self.soporta_borrado_logico:
                query = query.filter(self.model_class.activo == True)

            if order_by and hasattr(self.model_class, order_by):
                order_field = getattr(self.model_class, order_by)
                query = query.order_by(desc(order_field) if order_desc else asc(order_field))

            return query.offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting all {self.model_class.__name__}: {e}")
            raise DatabaseException(f"Error al listar {self.resource_name}")

    def count(self, solo_activos: bool = True, **filters) -> int:
        """
        Cuenta las entidades que coinciden con los filtros.

        Args:
            solo_activos: Excluir registros desactivados
            **filters: Filtros de igualdad adicionales
        """
        try:
            query = self.db.query(self.model_class)

            if solo_activos and self.soporta_borrado_logico:
                query = query.filter(self.model_class.activo == True)

            for field, value in filters.items():
                if hasattr(self.model_class, field) and value is not None:
                    query = query.filter(getattr(self.model_class, field) == value)

            return query.count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model_class.__name__}: {e}")
            raise DatabaseException(f"Error al contar {self.resource_name}")

    def create(self, entity: T, user_id: Optional[str] = None) -> T:
        """
        Crea una nueva entidad.

        Args:
            entity: La entidad a crear
            user_id: ID del usuario que crea la entidad (para auditoría)
        """
        try:
            set_audit_fields(entity, user_id, creating=True)
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al crear {self.resource_name}")

    def update(self, entity: T, user_id: Optional[str] = None) -> T:
        """
        Actualiza una entidad existente.

        Args:
            entity: La entidad a actualizar
            user_id: ID del usuario que actualiza la entidad (para auditoría)
        """
        try:
            set_audit_fields(entity, user_id, creating=False)
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al actualizar {self.resource_name}")

    def delete(self, entity: T, user_id: Optional[str] = None, hard: bool = False) -> None:
        """
        Elimina una entidad. Si la entidad tiene `activo` y no se pide hard,
        solo se desactiva.
        """
        try:
            if hard or not self.soporta_borrado_logico:
                self.db.delete(entity)
            else:
                soft_delete(entity, user_id)
                self.db.add(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al eliminar {self.resource_name}")

    def restore(self, entity: T, user_id: Optional[str] = None) -> T:
        """
        Reactiva una entidad desactivada.
        """
        try:
            restore_deleted(entity, user_id)
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error restoring {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al restaurar {self.resource_name}")

    def commit(self) -> None:
        """Realiza el commit de la transacción actual."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction: {e}")
            self.db.rollback()
            raise DatabaseException("Error al guardar cambios en la base de datos")

    def rollback(self) -> None:
        """Realiza el rollback de la transacción actual."""
        self.db.rollback()

    def refresh(self, entity: T) -> T:
        """Refresca una entidad desde la base de datos."""
        self.db.refresh(entity)
        return entity
