"""
Paginación consistente para todos los listados de la API.

Las páginas son 0-indexed; la respuesta sigue el formato
{success, data, pagination, timestamp}.
"""

from typing import List, Any, Tuple
from pydantic import BaseModel, Field
from datetime import datetime
from sqlalchemy.orm import Query


class PaginationMeta(BaseModel):
    """Metadata para la paginacion."""
    page: int = Field(..., ge=0, description="Página actual (0-indexed)")
    page_size: int = Field(..., ge=1, description="Tamaño de página")
    total_items: int = Field(..., ge=0, description="Total de registros")
    total_pages: int = Field(..., ge=0, description="Total de páginas")
    has_next: bool = Field(..., description="Hay página siguiente")
    has_previous: bool = Field(..., description="Hay página anterior")


def calculate_pagination_meta(
    page: int,
    page_size: int,
    total_items: int
) -> PaginationMeta:
    """
    Calcula la metadata de la paginación.

    Args:
        page: Número de página actual (0-indexed)
        page_size: Items por página
        total_items: Total de registros que cumplen el filtro

    Returns:
        PaginationMeta con valores calculados
    """
    total_pages = (total_items + page_size - 1) // page_size if page_size > 0 else 0

    return PaginationMeta(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        has_next=page < total_pages - 1,
        has_previous=page > 0
    )


def create_paginated_response(
    items: List[Any],
    page: int,
    page_size: int,
    total_items: int
) -> dict:
    """
    Crea el diccionario de respuesta paginada.

    Args:
        items: Elementos de la página actual (ya serializables)
        page: Número de página actual (0-indexed)
        page_size: Número de elementos por página
        total_items: Número total de elementos
    """
    pagination_meta = calculate_pagination_meta(page, page_size, total_items)

    return {
        "success": True,
        "data": items,
        "pagination": pagination_meta.model_dump(),
        "timestamp": datetime.utcnow()
    }


def calculate_skip(page: int, page_size: int) -> int:
    """Offset para la consulta a partir de página y tamaño."""
    return page * page_size


def paginate_query(query: Query, page: int, page_size: int) -> Tuple[List[Any], int]:
    """
    Aplica offset/limit a una consulta y devuelve (items, total).

    El total se calcula sobre la misma consulta sin paginar.
    """
    total = query.order_by(None).count()
    items = query.offset(calculate_skip(page, page_size)).limit(page_size).all()
    return items, total
