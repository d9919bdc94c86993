"""
Funciones de utilidad generales.
"""

from typing import Optional, Any
from enum import Enum as PyEnum


def enum_to_value(value: Any) -> Any:
    """
    Convierte un Enum a su valor, o devuelve el valor sin cambios.
    """
    if isinstance(value, PyEnum):
        return value.value
    return value


def redondear_monto(valor: Optional[float]) -> float:
    """Redondea montos a dos decimales; None cuenta como 0."""
    return round(float(valor or 0), 2)


def normalizar_email(email: Optional[str]) -> Optional[str]:
    """Minúsculas y sin espacios; None o vacío devuelve None."""
    if email is None:
        return None
    email = email.strip().lower()
    return email or None
