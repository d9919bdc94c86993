"""módulo de base de datos con manejo de errores y configuración centralizada."""
from typing import Optional, Generator
import hashlib
import hmac
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

# import ORM classes and Base from models.py
from .models import Base

#import configuration
from config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    """Argumentos de conexión según el motor."""
    if url.startswith("sqlite"):
        #FastAPI usa varios hilos con la misma conexión
        return {"check_same_thread": False}
    return {"connect_timeout": 30}


#engine / session con configuración centralizada
engine = create_engine(
    settings.database_url,
    echo=settings.debug_mode,
    future=True,
    pool_pre_ping=True,  #verifica conexiones antes de usarlas
    pool_recycle=3600,   #recicla conexiones cada hora
    connect_args=_connect_args(settings.database_url),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """dependencia de FastAPI que provee una sesión por solicitud.

    Yields:
        Session: Sesión de SQLAlchemy

    Nota:
        - Hace rollback automático si hay excepciones SQLAlchemy
        - Cierra la sesión siempre
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de base de datos en sesión: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def create_tables() -> None:
    """Crear tablas ORM en la base de datos.

    Raises:
        SQLAlchemyError: Si hay error al crear las tablas
    """
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tablas de base de datos creadas/verificadas exitosamente")
    except SQLAlchemyError as e:
        logger.error(f"Error al crear tablas: {e}", exc_info=True)
        raise


def get_database_url() -> str:
    """Obtiene la URL de la base de datos (sin credenciales sensibles)."""
    url = engine.url.render_as_string(hide_password=True)
    if "@" in url:
        return f"***@{url.split('@', 1)[1]}"
    return url


def hash_password(password: str) -> tuple[str, str]:
    """Genera salt y hash (ambos hex) usando PBKDF2-HMAC-SHA256."""
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
    return salt.hex(), dk.hex()


def verify_password(salt_hex: Optional[str], hash_hex: Optional[str], password: str) -> bool:
    """Verifica que password coincida con salt+hash almacenados."""
    if not salt_hex or not hash_hex:
        return False
    salt = bytes.fromhex(salt_hex)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
    return hmac.compare_digest(dk.hex(), hash_hex)


def set_audit_fields(obj, user_id: Optional[str], creating: bool = True) -> None:
    """helper para setear campos de auditoría en una instancia ORM

    Args:
        obj: instancia ORM a modificar
        user_id: ID del usuario responsable (puede ser None)
        creating: Si True setea campos de creación, si False solo actualización
    """
    from utils.datetime_utils import get_local_now
    now = get_local_now().replace(tzinfo=None)
    if creating:
        if hasattr(obj, "id_usuario_creacion"):
            obj.id_usuario_creacion = user_id
        if hasattr(obj, "fecha_creacion") and getattr(obj, "fecha_creacion", None) is None:
            obj.fecha_creacion = now
    # siempre setear actualización
    if hasattr(obj, "id_usuario_actualizacion"):
        obj.id_usuario_actualizacion = user_id
    if hasattr(obj, "fecha_actualizacion"):
        obj.fecha_actualizacion = now


def soft_delete(obj, user_id: Optional[str]) -> None:
    """
    marca un objeto como inactivo (borrado lógico)

    Args:
        obj: instancia ORM con columna `activo`
        user_id: ID del usuario que realiza la eliminación
    """
    from utils.datetime_utils import get_local_now
    obj.activo = False
    obj.deleted_at = get_local_now().replace(tzinfo=None)
    obj.deleted_by = user_id
    set_audit_fields(obj, user_id, creating=False)


def restore_deleted(obj, user_id: Optional[str]) -> None:
    """reactiva un objeto previamente desactivado

    Args:
        obj: instancia ORM con columna `activo`
        user_id: ID del usuario que realiza la restauración
    """
    obj.activo = True
    obj.deleted_at = None
    obj.deleted_by = None
    set_audit_fields(obj, user_id, creating=False)
