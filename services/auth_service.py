"""
Inicio de sesión del staff y de clientes (propietarios) y registro de
contraseña para el portal de clientes.
"""

from typing import Optional
import logging

from repositories.usuario_repository import UsuarioRepository
from repositories.propietario_repository import PropietarioRepository
from database.db import hash_password, verify_password
from models.auth import ClienteRegistro, TokenResponse
from config import settings
from auth import create_access_token, ROL_CLIENTE
from core.context import TipoCuenta
from core.exceptions import UnauthorizedException, ForbiddenException, BusinessException
from core.audit import log_login_exitoso, log_login_fallido, log_accion
from core.utils import normalizar_email

logger = logging.getLogger(__name__)

CREDENCIALES_INVALIDAS = "Email o contraseña incorrectos"
CUENTA_DESACTIVADA = "Esta cuenta ha sido desactivada. Contacte al administrador para restaurarla."


def _token_response(id: str, nombre: str, email: Optional[str], rol: str, tipo: TipoCuenta) -> TokenResponse:
    token = create_access_token({"sub": id, "rol": rol, "tipo": tipo.value})
    return TokenResponse(
        access_token=token,
        expires_in=settings.jwt_access_minutes * 60,
        id=id,
        nombre=nombre,
        email=email,
        rol=rol,
        tipo=tipo.value,
    )


class AuthService:

    def __init__(self, usuario_repository: UsuarioRepository, propietario_repository: PropietarioRepository):
        self.usuario_repo = usuario_repository
        self.propietario_repo = propietario_repository

    def login_usuario(self, email: str, password: str, ip: Optional[str] = None) -> TokenResponse:
        """
        Login del staff por email.

        Raises:
            UnauthorizedException: Credenciales incorrectas
            ForbiddenException: Cuenta desactivada
        """
        email = normalizar_email(email) or ""
        usuario = self.usuario_repo.find_by_email(email)
        if not usuario or not verify_password(usuario.password_salt, usuario.password_hash, password):
            log_login_fallido(email, TipoCuenta.usuario.value, "credenciales", ip)
            raise UnauthorizedException(CREDENCIALES_INVALIDAS)
        if not usuario.activo:
            log_login_fallido(email, TipoCuenta.usuario.value, "inactivo", ip)
            raise ForbiddenException(CUENTA_DESACTIVADA)

        log_login_exitoso(email, TipoCuenta.usuario.value, ip)
        return _token_response(usuario.id, usuario.nombre, usuario.email, usuario.rol, TipoCuenta.usuario)

    def login_cliente(self, email: str, password: str, ip: Optional[str] = None) -> TokenResponse:
        """Login de un propietario en el portal de clientes."""
        email = normalizar_email(email) or ""
        propietario = self.propietario_repo.find_by_email(email)
        if not propietario or not verify_password(propietario.password_salt, propietario.password_hash, password):
            log_login_fallido(email, TipoCuenta.propietario.value, "credenciales", ip)
            raise UnauthorizedException(CREDENCIALES_INVALIDAS)
        if not propietario.activo:
            log_login_fallido(email, TipoCuenta.propietario.value, "inactivo", ip)
            raise ForbiddenException(CUENTA_DESACTIVADA)

        log_login_exitoso(email, TipoCuenta.propietario.value, ip)
        return _token_response(
            propietario.id, propietario.nombre, propietario.email, ROL_CLIENTE, TipoCuenta.propietario
        )

    def registrar_cliente(self, data: ClienteRegistro) -> TokenResponse:
        """
        Crea la contraseña del portal para un propietario existente.

        El email y el documento deben coincidir con los registrados por la clínica.
        """
        email = normalizar_email(data.email)
        propietario = self.propietario_repo.find_by_email(email)
        if (
            not propietario
            or not propietario.activo
            or (propietario.documento or "").strip() != data.documento.strip()
        ):
            raise BusinessException("No existe un propietario activo con ese email y documento")
        if propietario.password_hash:
            raise BusinessException("El propietario ya tiene una cuenta en el portal")

        propietario.password_salt, propietario.password_hash = hash_password(data.password)
        self.propietario_repo.update(propietario)
        self.propietario_repo.commit()

        log_accion("CLIENTE_REGISTRADO", "propietario", propietario.id)
        return _token_response(
            propietario.id, propietario.nombre, propietario.email, ROL_CLIENTE, TipoCuenta.propietario
        )
