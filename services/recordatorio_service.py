"""
Recordatorios y alertas programadas.

Tres tareas periódicas, pensadas para ejecutarse fuera de una petición HTTP:

- recordatorios_citas: cada hora; avisa al profesional y escribe al propietario
  de las citas que empiezan en 23-24 horas y en 55-60 minutos.
- alertas_vacunaciones: cada día; avisa a los veterinarios activos de las
  dosis vencidas y de las que vencen en los próximos días.
- alerta_stock_bajo: cada día; envía a administración y recepción un resumen
  de los productos en o bajo su stock mínimo.

Un fallo al notificar un elemento se registra y no detiene el resto del lote.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from services.email_service import EmailService, get_email_service
from services.notificacion_service import NotificacionService
from services.inventario_service import ROLES_INVENTARIO
from services.websocket_manager import get_connection_manager
from repositories.cita_repository import CitaRepository
from repositories.vacuna_repository import VacunacionRepository
from repositories.inventario_repository import ProductoRepository
from repositories.usuario_repository import UsuarioRepository
from repositories.notificacion_repository import NotificacionRepository
from database.db import SessionLocal
from database.models import CitaORM, ProductoORM, VacunacionORM
from models.notificaciones import TipoNotificacion
from core.exceptions import AppException
from utils.datetime_utils import get_local_naive_now, get_local_today, get_local_timezone
from config import settings

logger = logging.getLogger(__name__)

MAX_PRODUCTOS_RESUMEN = 10


@dataclass
class ResultadoCitas:
    en_24_horas: int = 0
    en_1_hora: int = 0
    notificaciones: int = 0
    correos: int = 0


@dataclass
class ResultadoVacunaciones:
    vencidas: int = 0
    proximas: int = 0
    notificaciones: int = 0


def resumen_stock_bajo(productos: List[ProductoORM]) -> str:
    """Texto de la alerta: como máximo MAX_PRODUCTOS_RESUMEN productos y el resto contado."""
    lineas = [f"Se encontraron {len(productos)} productos con stock bajo:", ""]
    for producto in productos[:MAX_PRODUCTOS_RESUMEN]:
        lineas.append(
            f"• {producto.nombre} - Stock: {producto.stock_actual} (Mínimo: {producto.stock_minimo or 0})"
        )
    restantes = len(productos) - MAX_PRODUCTOS_RESUMEN
    if restantes > 0:
        lineas.append("")
        lineas.append(f"... y {restantes} productos más")
    return "\n".join(lineas)


class RecordatorioService:

    def __init__(
        self,
        cita_repository: CitaRepository,
        vacunacion_repository: VacunacionRepository,
        producto_repository: ProductoRepository,
        usuario_repository: UsuarioRepository,
        notificacion_service: NotificacionService,
        email_service: EmailService,
    ):
        self.cita_repo = cita_repository
        self.vacunacion_repo = vacunacion_repository
        self.producto_repo = producto_repository
        self.usuario_repo = usuario_repository
        self.notificaciones = notificacion_service
        self.email = email_service

    # ==================== Citas ====================

    def recordatorios_citas(self, ahora: Optional[datetime] = None) -> ResultadoCitas:
        ahora = ahora or get_local_naive_now()
        resultado = ResultadoCitas()

        citas_24h = self.cita_repo.find_activas_en_rango(ahora + timedelta(hours=23), ahora + timedelta(hours=24))
        citas_1h = self.cita_repo.find_activas_en_rango(ahora + timedelta(minutes=55), ahora + timedelta(hours=1))
        resultado.en_24_horas = len(citas_24h)
        resultado.en_1_hora = len(citas_1h)

        for citas, horas in ((citas_24h, 24), (citas_1h, 1)):
            for cita in citas:
                try:
                    if self._recordar_cita(cita, horas):
                        resultado.notificaciones += 1
                    if self._correo_cita(cita, horas):
                        resultado.correos += 1
                except AppException as e:
                    logger.error(f"Error enviando recordatorio de la cita {cita.id}: {e.message}", exc_info=True)

        logger.info(
            f"Recordatorios de citas procesados: {resultado.en_24_horas} en 24h, {resultado.en_1_hora} en 1h"
        )
        return resultado

    def _recordar_cita(self, cita: CitaORM, horas: int) -> bool:
        if not cita.id_profesional:
            return False
        paciente = cita.paciente.nombre if cita.paciente else "N/A"
        mensaje = (
            f"Tienes una cita programada {'en 1 hora' if horas == 1 else 'mañana'}:\n"
            f"Paciente: {paciente}\n"
            f"Hora: {cita.fecha.strftime('%H:%M')}\n"
            f"Motivo: {cita.motivo}"
        )
        self.notificaciones.crear(
            cita.id_profesional,
            f"Recordatorio: Cita en {'1 hora' if horas == 1 else '24 horas'}",
            mensaje,
            tipo=TipoNotificacion.CITA,
            entidad_tipo="cita",
            entidad_id=cita.id,
        )
        return True

    def _correo_cita(self, cita: CitaORM, horas: int) -> bool:
        propietario = cita.propietario
        if propietario is None or not propietario.email:
            return False
        return self.email.send_recordatorio_cita(
            propietario.email,
            propietario.nombre,
            cita.paciente.nombre if cita.paciente else "su mascota",
            cita.fecha,
            "en 1 hora" if horas == 1 else "mañana",
        )

    # ==================== Vacunaciones ====================

    def alertas_vacunaciones(self, hoy: Optional[date] = None) -> ResultadoVacunaciones:
        hoy = hoy or get_local_today()
        resultado = ResultadoVacunaciones()

        vencidas = self.vacunacion_repo.find_vencidas(hoy)
        proximas = self.vacunacion_repo.find_proximas(hoy, hoy + timedelta(days=settings.dias_aviso_vacunacion))
        resultado.vencidas = len(vencidas)
        resultado.proximas = len(proximas)

        veterinarios = self.usuario_repo.find_veterinarios_activos()
        for vacunaciones, vencida in ((vencidas, True), (proximas, False)):
            for vacunacion in vacunaciones:
                if vacunacion.paciente is None or vacunacion.paciente.propietario is None:
                    continue
                for vet in veterinarios:
                    try:
                        self._alertar_vacunacion(vacunacion, vet.id, vencida)
                        resultado.notificaciones += 1
                    except AppException as e:
                        logger.error(
                            f"Error enviando alerta de la vacunación {vacunacion.id}: {e.message}", exc_info=True
                        )

        logger.info(
            f"Alertas de vacunaciones procesadas: {resultado.vencidas} vencidas, {resultado.proximas} próximas"
        )
        return resultado

    def _alertar_vacunacion(self, vacunacion: VacunacionORM, id_usuario: str, vencida: bool) -> None:
        paciente = vacunacion.paciente.nombre
        vacuna = vacunacion.vacuna.nombre if vacunacion.vacuna else "N/A"
        if vencida:
            titulo = "Alerta: Vacunación vencida"
            encabezado = f"La vacunación del paciente {paciente} está vencida:"
        else:
            titulo = "Recordatorio: Vacunación próxima"
            encabezado = f"El paciente {paciente} tiene una vacunación próxima:"
        self.notificaciones.crear(
            id_usuario,
            titulo,
            f"{encabezado}\nVacuna: {vacuna}\nPróxima dosis: {vacunacion.proxima_dosis.isoformat()}",
            tipo=TipoNotificacion.VACUNA,
            entidad_tipo="vacunacion",
            entidad_id=vacunacion.id,
        )

    # ==================== Inventario ====================

    def alerta_stock_bajo(self) -> int:
        """Devuelve el número de notificaciones creadas."""
        productos = self.producto_repo.find_stock_bajo()
        enviadas = 0
        if productos:
            mensaje = resumen_stock_bajo(productos)
            for usuario in self.usuario_repo.find_activos_por_roles(list(ROLES_INVENTARIO)):
                try:
                    self.notificaciones.crear(
                        usuario.id,
                        "Alerta: Productos con stock bajo",
                        mensaje,
                        tipo=TipoNotificacion.INVENTARIO,
                        entidad_tipo="inventario",
                    )
                    enviadas += 1
                except AppException as e:
                    logger.error(f"Error enviando alerta de stock bajo a {usuario.id}: {e.message}", exc_info=True)

        logger.info(f"Alertas de stock bajo procesadas: {len(productos)} productos")
        return enviadas


# ==================== Planificador ====================

def _crear_servicio(db: Session) -> RecordatorioService:
    return RecordatorioService(
        CitaRepository(db),
        VacunacionRepository(db),
        ProductoRepository(db),
        UsuarioRepository(db),
        NotificacionService(NotificacionRepository(db), get_connection_manager()),
        get_email_service(),
    )


def job_recordatorios_citas() -> None:
    with SessionLocal() as db:
        _crear_servicio(db).recordatorios_citas()


def job_alertas_vacunaciones() -> None:
    with SessionLocal() as db:
        _crear_servicio(db).alertas_vacunaciones()


def job_alerta_stock_bajo() -> None:
    with SessionLocal() as db:
        _crear_servicio(db).alerta_stock_bajo()


def crear_planificador() -> BackgroundScheduler:
    """Registra las tres tareas sin arrancar el planificador."""
    scheduler = BackgroundScheduler(timezone=get_local_timezone())
    scheduler.add_job(
        job_recordatorios_citas,
        trigger=CronTrigger(minute=0),
        id="recordatorios_citas",
        name="Recordatorios de citas (24 h y 1 h)",
        replace_existing=True,
    )
    scheduler.add_job(
        job_alertas_vacunaciones,
        trigger=CronTrigger(hour=settings.recordatorio_vacunas_hora, minute=0),
        id="alertas_vacunaciones",
        name="Alertas de vacunaciones vencidas y próximas",
        replace_existing=True,
    )
    scheduler.add_job(
        job_alerta_stock_bajo,
        trigger=CronTrigger(hour=settings.recordatorio_stock_hora, minute=0),
        id="alerta_stock_bajo",
        name="Alerta de productos con stock bajo",
        replace_existing=True,
    )
    return scheduler


def iniciar_planificador() -> BackgroundScheduler:
    scheduler = crear_planificador()
    scheduler.start()
    logger.info(f"Planificador de recordatorios iniciado con {len(scheduler.get_jobs())} tareas")
    return scheduler
