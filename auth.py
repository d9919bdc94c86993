import logging
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from fastapi.security import OAuth2PasswordBearer
from fastapi import Depends
from sqlalchemy.orm import Session

from database.models import UsuarioORM, PropietarioORM
from database.db import get_db
from config import settings
from core.context import RequestContext, TipoCuenta
from core.exceptions import UnauthorizedException
from core.security import require_role

logger = logging.getLogger(__name__)

#auto_error=False: la ausencia de token se reporta con el cuerpo de error uniforme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

ROL_CLIENTE = "CLIENTE"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token including standard claims (sub, iat, exp, iss, aud).

    `data` must include `sub` (id), `rol` and `tipo` ("usuario" or "propietario").
    """
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_minutes))
    if "sub" not in to_encode:
        raise ValueError("`data` must include `sub` (subject / user id)")
    to_encode.setdefault("tipo", TipoCuenta.usuario.value)
    to_encode.update({
        "exp": expire,
        "iat": now,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience
    })
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token.

    Validates signature, expiration, issuer and audience. Raises
    UnauthorizedException for any invalid token state.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )
    except ExpiredSignatureError:
        logger.info("Token expirado")
        raise UnauthorizedException("Token expirado")
    except JWTError as e:
        logger.info(f"Token inválido o claim mismatch: {e}")
        raise UnauthorizedException("Token inválido o expirado")


def context_from_token(token: Optional[str], db: Session) -> RequestContext:
    """Resuelve el token a un RequestContext comprobando que la cuenta siga activa."""
    if not token:
        raise UnauthorizedException("Autenticación requerida")

    payload = decode_token(token)
    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedException("Token inválido: sub faltante")

    tipo = payload.get("tipo", TipoCuenta.usuario.value)
    if tipo == TipoCuenta.propietario.value:
        propietario = db.get(PropietarioORM, str(subject))
        if not propietario or not propietario.activo:
            raise UnauthorizedException("Cliente no encontrado o inactivo")
        return RequestContext(
            id=propietario.id,
            email=propietario.email,
            nombre=propietario.nombre,
            rol=ROL_CLIENTE,
            tipo=TipoCuenta.propietario,
        )

    usuario = db.get(UsuarioORM, str(subject))
    if not usuario or not usuario.activo:
        raise UnauthorizedException("Usuario no encontrado o inactivo")
    return RequestContext(
        id=usuario.id,
        email=usuario.email,
        nombre=usuario.nombre,
        rol=usuario.rol,
        tipo=TipoCuenta.usuario,
    )


def get_request_context(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> RequestContext:
    return context_from_token(token, db)


def require_roles(*allowed_roles: str):
    """Dependency factory that ensures the caller has one of the allowed roles.

    Usage in route: ctx = Depends(require_roles("ADMIN", "VET"))
    """

    def _dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        require_role(ctx, *allowed_roles)
        return ctx

    return _dependency
