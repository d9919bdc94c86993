"""
Utilidades para manejo de fechas y zonas horarias.

Las fechas se guardan en BD como hora local sin tzinfo (naive); estas funciones
convierten la entrada de la API a ese formato.
"""
from datetime import datetime, date
from typing import Optional
from zoneinfo import ZoneInfo
from config import settings


def get_local_timezone() -> ZoneInfo:
    """
    Obtiene la zona horaria configurada.

    Returns:
        ZoneInfo: Zona horaria de la aplicación.
    """
    return ZoneInfo(settings.timezone)


def get_local_now() -> datetime:
    """
    Obtiene la fecha y hora actual en la zona horaria local configurada.

    Returns:
        datetime: Fecha y hora actual con zona horaria.
    """
    return datetime.now(get_local_timezone())


def get_local_naive_now() -> datetime:
    """Hora local actual sin tzinfo, comparable con las columnas DateTime."""
    return get_local_now().replace(tzinfo=None)


def get_local_today() -> date:
    """Fecha local actual."""
    return get_local_now().date()


def to_local_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normaliza un datetime de entrada a hora local naive.

    Un datetime naive se interpreta como hora local; uno con zona se convierte.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_local_timezone()).replace(tzinfo=None)
