"""
Configuración centralizada de la aplicación usando pydantic-settings.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación de manera tipada y validada.
"""
import secrets
import logging
from datetime import time
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


logger = logging.getLogger(__name__)


def parse_ventanas(value: str) -> list[tuple[time, time]]:
    """
    Convierte una cadena "HH:MM-HH:MM,HH:MM-HH:MM" en una lista de ventanas horarias.

    Una cadena vacía representa un día sin atención.

    Raises:
        ValueError: Si algún tramo está mal formado o el inicio no es anterior al fin
    """
    ventanas: list[tuple[time, time]] = []
    for tramo in value.split(","):
        tramo = tramo.strip()
        if not tramo:
            continue
        inicio_str, _, fin_str = tramo.partition("-")
        inicio = time.fromisoformat(inicio_str.strip())
        fin = time.fromisoformat(fin_str.strip())
        if inicio >= fin:
            raise ValueError(f"Ventana horaria inválida: {tramo}")
        ventanas.append((inicio, fin))
    return ventanas


class Settings(BaseSettings):
    """Configuración de la aplicación cargada desde variables de entorno."""

    # Database
    database_url: str = Field(
        default="sqlite:///./clinica_veterinaria.db",
        description="URL de conexión a la base de datos"
    )

    # JWT Configuration
    jwt_secret_key: str = Field(
        default="",
        description="Clave secreta para firmar tokens JWT (OBLIGATORIO en producción)"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Algoritmo para firmar JWT"
    )
    jwt_access_minutes: int = Field(
        default=60,
        ge=1,
        le=1440,
        description="Tiempo de expiración del token en minutos"
    )
    jwt_issuer: str = Field(
        default="ClinicaVeterinaria",
        description="Emisor del token JWT"
    )
    jwt_audience: str = Field(
        default="ClinicaVeterinariaClient",
        description="Audiencia del token JWT"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost,http://localhost:3000,http://localhost:5173,http://localhost:8000",
        description="Orígenes permitidos para CORS, separados por coma"
    )

    # Application
    app_name: str = Field(
        default="API Clínica Veterinaria",
        description="Nombre de la aplicación"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Versión de la aplicación"
    )
    debug_mode: bool = Field(
        default=False,
        description="Modo debug (solo para desarrollo)"
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="URL pública del frontend (enlaces en correos)"
    )

    # Paginación
    default_page_size: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Tamaño de página por defecto para listados"
    )
    max_page_size: int = Field(
        default=500,
        ge=1,
        le=500,
        description="Tamaño máximo de página permitido"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Timezone
    timezone: str = Field(
        default="America/Bogota",
        description="Zona horaria de la aplicación (formato IANA)"
    )

    # Agenda
    horario_semana: str = Field(
        default="08:00-12:00,14:00-18:00",
        description="Ventanas de atención de lunes a viernes"
    )
    horario_sabado: str = Field(
        default="08:00-12:00",
        description="Ventanas de atención del sábado"
    )
    horario_domingo: str = Field(
        default="",
        description="Ventanas de atención del domingo (vacío = cerrado)"
    )
    duracion_cita_minutos: int = Field(
        default=30,
        ge=5,
        le=240,
        description="Duración de cada cita en minutos"
    )

    # Facturación
    tarifa_consulta: float = Field(
        default=50000.0,
        ge=0,
        description="Valor del ítem por defecto al facturar una consulta"
    )

    # Correo
    mail_enabled: bool = Field(
        default=False,
        description="Si es False los correos solo se registran en el log"
    )
    mail_host: str = Field(default="localhost", description="Servidor SMTP")
    mail_port: int = Field(default=587, description="Puerto SMTP")
    mail_username: str = Field(default="", description="Usuario SMTP")
    mail_password: str = Field(default="", description="Contraseña SMTP")
    mail_use_tls: bool = Field(default=True, description="Usar STARTTLS")
    mail_from: str = Field(
        default="no-reply@clinicaveterinaria.local",
        description="Remitente de los correos"
    )

    # Recuperación de contraseña
    password_reset_horas: int = Field(
        default=24,
        ge=1,
        le=168,
        description="Vigencia en horas del enlace de recuperación"
    )

    # Recordatorios programados
    recordatorios_enabled: bool = Field(
        default=False,
        description="Arranca el planificador de recordatorios junto con la aplicación"
    )
    recordatorio_vacunas_hora: int = Field(
        default=8,
        ge=0,
        le=23,
        description="Hora diaria de las alertas de vacunación"
    )
    recordatorio_stock_hora: int = Field(
        default=9,
        ge=0,
        le=23,
        description="Hora diaria de la alerta de stock bajo"
    )
    dias_aviso_vacunacion: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Días de anticipación para avisar una próxima dosis"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v: str) -> str:
        """Valida y genera JWT_SECRET_KEY si no existe."""
        if not v or len(v) < 32:
            # Generar una clave automáticamente para desarrollo
            generated_key = secrets.token_urlsafe(48)
            logger.warning(
                "⚠️  JWT_SECRET_KEY no configurado o muy corto. "
                "Se generó una clave temporal para desarrollo. "
                "En producción configura JWT_SECRET_KEY en .env"
            )
            return generated_key
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valida que el nivel de logging sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(
                f"Nivel de log '{v}' no válido. Usando 'INFO'. "
                f"Niveles válidos: {valid_levels}"
            )
            return "INFO"
        return v_upper

    @field_validator("horario_semana", "horario_sabado", "horario_domingo")
    @classmethod
    def validate_horario(cls, v: str) -> str:
        """Verifica que las ventanas horarias tengan formato HH:MM-HH:MM."""
        parse_ventanas(v)
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Devuelve la lista de orígenes CORS permitidos."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Determina si la app está en modo producción."""
        return not self.debug_mode

    def ventanas_atencion(self, weekday: int) -> list[tuple[time, time]]:
        """
        Ventanas de atención para un día de la semana (0 = lunes, 6 = domingo).
        """
        if weekday == 6:
            return parse_ventanas(self.horario_domingo)
        if weekday == 5:
            return parse_ventanas(self.horario_sabado)
        return parse_ventanas(self.horario_semana)


# Instancia global de configuración
settings = Settings()


def configure_logging():
    """Configura el sistema de logging de la aplicación."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=log_format,
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Reducir verbosidad de librerías externas
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    # Log de auditoría siempre en INFO
    logging.getLogger("audit").setLevel(logging.INFO)

    logger.info(f"🚀 Logging configurado en nivel {settings.log_level}")
    logger.info(f"📦 Aplicación: {settings.app_name} v{settings.app_version}")
    logger.info(f"🔧 Modo: {'Desarrollo' if settings.debug_mode else 'Producción'}")


def get_settings() -> Settings:
    """Retorna la instancia de configuración (útil para dependency injection)."""
    return settings
