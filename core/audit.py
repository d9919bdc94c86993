"""
Log de auditoría.

Usa un logger dedicado ("audit") para que los eventos de seguridad y de
facturación puedan enviarse a un destino propio desde la configuración de logging.
"""

import logging
from typing import Optional

audit_logger = logging.getLogger("audit")


def log_login_exitoso(email: str, tipo: str, ip: Optional[str] = None) -> None:
    audit_logger.info(f"LOGIN_OK tipo={tipo} email={email} ip={ip or '-'}")


def log_login_fallido(email: str, tipo: str, motivo: str, ip: Optional[str] = None) -> None:
    audit_logger.warning(f"LOGIN_FALLIDO tipo={tipo} email={email} motivo={motivo} ip={ip or '-'}")


def log_accion(accion: str, entidad: str, entidad_id: str, usuario_id: Optional[str] = None, **extra) -> None:
    """Registra una acción relevante sobre una entidad."""
    detalle = " ".join(f"{k}={v}" for k, v in extra.items())
    audit_logger.info(
        f"{accion} entidad={entidad} id={entidad_id} usuario={usuario_id or '-'} {detalle}".rstrip()
    )
