"""
Servicio base con operaciones de lógica de negocio comunes.
Esta clase proporciona una base para las clases de servicio que implementan
la lógica de negocio y coordinan las operaciones del repositorio.
"""

from typing import TypeVar, Generic, List, Optional
import logging

from core.exceptions import BusinessException
from core.pagination import calculate_skip

logger = logging.getLogger(__name__)

# Type variables
T = TypeVar('T')  # ORM Model
R = TypeVar('R')  # Repository


class BaseService(Generic[T, R]):
    """
    Servicio base que proporciona operaciones lógicas de negocio comunes.
    Esta clase debe ser heredada por servicios de entidades específicas.
    """

    def __init__(self, repository: R):
        """
        Inicializa el servicio.

        Args:
            repository: Repositorio de la entidad principal
        """
        self.repository = repository

    def get_by_id_or_fail(self, id: str) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: Si la entidad no existe
        """
        return self.repository.get_by_id_or_fail(id)

    def get_all(
        self,
        page: int = 0,
        page_size: int = 50,
        solo_activos: bool = True,
        order_by: Optional[str] = None,
        order_desc: bool = False
    ) -> tuple[List[T], int]:
        """
        Obtiene todas las entidades con paginación.

        Returns:
            Tupla (entidades de la página, total)
        """
        items = self.repository.get_all(
            skip=calculate_skip(page, page_size),
            limit=page_size,
            solo_activos=solo_activos,
            order_by=order_by,
            order_desc=order_desc
        )
        total_count = self.repository.count(solo_activos=solo_activos)
        return items, total_count

    def delete(self, id: str, user_id: Optional[str] = None) -> None:
        """
        Desactiva una entidad (borrado lógico).

        Raises:
            NotFoundException: Si la entidad no existe
            BusinessException: Si ya estaba desactivada
        """
        entity = self.get_by_id_or_fail(id)
        if getattr(entity, "activo", True) is False:
            raise BusinessException(f"{self.repository.resource_name} ya está desactivado")

        self.repository.delete(entity, user_id=user_id)
        self.repository.commit()
        logger.info(f"{self.repository.resource_name} {id} desactivado por {user_id or '-'}")

    def restore(self, id: str, user_id: Optional[str] = None) -> T:
        """
        Reactiva una entidad desactivada.

        Raises:
            BusinessException: Si la entidad ya está activa
        """
        entity = self.get_by_id_or_fail(id)
        if getattr(entity, "activo", True):
            raise BusinessException(f"{self.repository.resource_name} no está desactivado")

        restored = self.repository.restore(entity, user_id=user_id)
        self.repository.commit()
        return restored

    def validate_activo(self, entity: T, mensaje: Optional[str] = None) -> None:
        """
        Valida que una entidad esté activa.

        Raises:
            BusinessException: Si la entidad fue desactivada
        """
        if getattr(entity, "activo", True) is False:
            raise BusinessException(
                mensaje or f"{self.repository.resource_name} está inactivo y no puede ser utilizado"
            )
