"""
Envío de correos transaccionales (citas y recuperación de contraseña).

Con MAIL_ENABLED=false (valor por defecto) los correos no se envían: se
registran en el log, lo que basta para desarrollo y pruebas.
"""

import logging
import smtplib
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

from config import settings

logger = logging.getLogger(__name__)


def _formatear_fecha(fecha: datetime) -> str:
    return fecha.strftime("%d/%m/%Y %H:%M")


class EmailService:
    """Correos de texto plano vía SMTP."""

    def __init__(self, enabled: Optional[bool] = None):
        self.enabled = settings.mail_enabled if enabled is None else enabled

    def send_email(self, to: Optional[str], subject: str, body: str) -> bool:
        """
        Envía un correo. Devuelve False si no hay destinatario o si el envío falla;
        un fallo de correo nunca interrumpe la operación que lo originó.
        """
        if not to:
            return False

        if not self.enabled:
            logger.info(f"[correo deshabilitado] para={to} asunto={subject!r}")
            return True

        message = EmailMessage()
        message["From"] = settings.mail_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(settings.mail_host, settings.mail_port, timeout=10) as smtp:
                if settings.mail_use_tls:
                    smtp.starttls()
                if settings.mail_username:
                    smtp.login(settings.mail_username, settings.mail_password)
                smtp.send_message(message)
            logger.info(f"Correo enviado a {to}: {subject}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error enviando correo a {to}: {e}")
            return False

    def send_cita_confirmacion(
        self,
        email: Optional[str],
        propietario_nombre: str,
        paciente_nombre: str,
        fecha: datetime,
        profesional_nombre: str,
        motivo: str,
    ) -> bool:
        body = (
            f"Hola {propietario_nombre},\n\n"
            f"Registramos la cita de {paciente_nombre} para el {_formatear_fecha(fecha)} "
            f"con {profesional_nombre}.\n"
            f"Motivo: {motivo}\n\n"
            f"{settings.app_name}"
        )
        return self.send_email(email, f"Confirmación de cita - {paciente_nombre}", body)

    def send_cita_estado(
        self,
        email: Optional[str],
        propietario_nombre: str,
        paciente_nombre: str,
        fecha: datetime,
        estado: str,
    ) -> bool:
        if estado == "CONFIRMADA":
            subject = f"Cita confirmada - {paciente_nombre}"
        elif estado == "CANCELADA":
            subject = f"Cancelación de cita - {paciente_nombre}"
        else:
            subject = f"Actualización de cita - {paciente_nombre}"
        body = (
            f"Hola {propietario_nombre},\n\n"
            f"La cita de {paciente_nombre} del {_formatear_fecha(fecha)} "
            f"ahora está en estado {estado}.\n\n"
            f"{settings.app_name}"
        )
        return self.send_email(email, subject, body)

    def send_recordatorio_cita(
        self,
        email: Optional[str],
        propietario_nombre: str,
        paciente_nombre: str,
        fecha: datetime,
        cuando: str,
    ) -> bool:
        body = (
            f"Hola {propietario_nombre},\n\n"
            f"Te recordamos que {paciente_nombre} tiene cita {cuando}, "
            f"el {_formatear_fecha(fecha)}.\n\n"
            f"{settings.app_name}"
        )
        return self.send_email(email, f"Recordatorio de cita - {paciente_nombre}", body)

    def send_password_reset(self, email: str, nombre: str, token: str) -> bool:
        enlace = f"{settings.frontend_url.rstrip('/')}/reset-password?token={token}"
        body = (
            f"Hola {nombre},\n\n"
            f"Para restablecer tu contraseña abre el siguiente enlace "
            f"(válido por {settings.password_reset_horas} horas):\n{enlace}\n\n"
            f"Si no solicitaste el cambio, ignora este mensaje."
        )
        return self.send_email(email, "Recuperación de contraseña", body)


def get_email_service() -> EmailService:
    return EmailService()
