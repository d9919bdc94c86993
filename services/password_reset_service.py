"""
Recuperación de contraseña por enlace enviado al correo.

La solicitud responde igual exista o no la cuenta, para no revelar qué
emails están registrados.
"""

from datetime import timedelta
from typing import Optional, Union
from uuid import uuid4
import logging

from repositories.usuario_repository import UsuarioRepository
from repositories.propietario_repository import PropietarioRepository
from repositories.password_reset_repository import PasswordResetTokenRepository
from database.models import PasswordResetTokenORM, UsuarioORM, PropietarioORM
from database.db import hash_password
from services.email_service import EmailService
from config import settings
from core.exceptions import BusinessException
from core.audit import log_accion
from core.utils import normalizar_email
from utils.datetime_utils import get_local_naive_now

logger = logging.getLogger(__name__)

TIPO_USUARIO = "USUARIO"
TIPO_PROPIETARIO = "PROPIETARIO"
TOKEN_INVALIDO = "El enlace de recuperación no es válido o ha expirado."


class PasswordResetService:

    def __init__(
        self,
        token_repository: PasswordResetTokenRepository,
        usuario_repository: UsuarioRepository,
        propietario_repository: PropietarioRepository,
        email_service: EmailService,
    ):
        self.token_repo = token_repository
        self.usuario_repo = usuario_repository
        self.propietario_repo = propietario_repository
        self.email_service = email_service

    def _buscar_cuenta(self, email: str, tipo: str) -> Optional[Union[UsuarioORM, PropietarioORM]]:
        if tipo == TIPO_PROPIETARIO:
            return self.propietario_repo.find_by_email(email)
        return self.usuario_repo.find_by_email(email)

    def solicitar(self, email: str, tipo: str = TIPO_USUARIO) -> None:
        """
        Genera un token nuevo (invalidando los anteriores) y envía el enlace.

        Si la cuenta no existe o está inactiva no hace nada.
        """
        email = normalizar_email(email) or ""
        cuenta = self._buscar_cuenta(email, tipo)
        if not cuenta or not cuenta.activo:
            logger.info(f"Solicitud de recuperación para cuenta inexistente o inactiva ({tipo})")
            return

        self.token_repo.eliminar_expirados(get_local_naive_now())
        self.token_repo.invalidar_por_email(email, tipo)
        token = PasswordResetTokenORM(
            token=str(uuid4()),
            email=email,
            tipo_usuario=tipo,
            expires_at=get_local_naive_now() + timedelta(hours=settings.password_reset_horas),
            usado=False,
        )
        self.token_repo.create(token)
        self.token_repo.commit()

        self.email_service.send_password_reset(email, cuenta.nombre, token.token)
        log_accion("PASSWORD_RESET_SOLICITADO", tipo.lower(), cuenta.id)

    def _token_vigente(self, token: str) -> Optional[PasswordResetTokenORM]:
        registro = self.token_repo.find_by_token(token)
        if not registro or registro.usado or registro.expires_at < get_local_naive_now():
            return None
        return registro

    def validar_token(self, token: str) -> bool:
        return self._token_vigente(token) is not None

    def restablecer(self, token: str, nueva_password: str) -> None:
        """
        Fija la nueva contraseña y marca el token como usado.

        Raises:
            BusinessException: Si el token no existe, ya se usó o expiró
        """
        registro = self._token_vigente(token)
        if registro is None:
            raise BusinessException(TOKEN_INVALIDO)

        cuenta = self._buscar_cuenta(registro.email, registro.tipo_usuario)
        if not cuenta or not cuenta.activo:
            raise BusinessException(TOKEN_INVALIDO)

        cuenta.password_salt, cuenta.password_hash = hash_password(nueva_password)
        registro.usado = True
        self.token_repo.update(registro)
        self.token_repo.commit()

        log_accion("PASSWORD_RESTABLECIDA", registro.tipo_usuario.lower(), cuenta.id)
