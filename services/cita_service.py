"""
Servicio para la lógica de negocio de Citas.

Además del CRUD aplica las reglas de agenda de la clínica antes de guardar:

1. la cita no puede estar en el pasado;
2. el día debe tener horario de atención (el domingo está cerrado);
3. la cita completa debe caber en una de las ventanas de atención del día;
4. el profesional no puede tener otra cita no cancelada que se solape.

Las violaciones son BusinessException (422).
"""

from typing import Dict, List, Optional, Tuple
from datetime import datetime, date, timedelta
import logging

from services.base_service import BaseService
from services.notificacion_service import NotificacionService
from services.email_service import EmailService
from services.propietario_service import PropietarioService
from services.paciente_service import PacienteService
from repositories.cita_repository import CitaRepository
from repositories.paciente_repository import PacienteRepository
from repositories.propietario_repository import PropietarioRepository
from repositories.usuario_repository import UsuarioRepository
from database.models import CitaORM, PacienteORM, PropietarioORM, UsuarioORM
from models.citas import (
    Cita,
    CitaCreate,
    CitaUpdate,
    CitaPublicaCreate,
    CitaClienteCreate,
    EstadoCita,
    Disponibilidad,
    HorarioDisponible,
)
from models.pacientes import PacienteCreate
from models.propietarios import PropietarioCreate
from models.notificaciones import TipoNotificacion
from config import settings
from core.context import RequestContext
from core.exceptions import BusinessException, ForbiddenException
from core.security import validate_uuid, check_propietario_access
from core.utils import enum_to_value, normalizar_email
from utils.datetime_utils import get_local_naive_now, to_local_naive

logger = logging.getLogger(__name__)

ESTADOS_ACTIVOS = (EstadoCita.PENDIENTE.value, EstadoCita.CONFIRMADA.value)

#transiciones permitidas por cambio de estado explícito
TRANSICIONES: Dict[str, Tuple[str, ...]] = {
    EstadoCita.PENDIENTE.value: (EstadoCita.CONFIRMADA.value, EstadoCita.CANCELADA.value),
    EstadoCita.CONFIRMADA.value: (EstadoCita.ATENDIDA.value, EstadoCita.CANCELADA.value),
    EstadoCita.ATENDIDA.value: (),
    EstadoCita.CANCELADA.value: (),
}

DIAS = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")


def duracion_cita() -> timedelta:
    return timedelta(minutes=settings.duracion_cita_minutos)


def rangos_se_solapan(inicio_a: datetime, fin_a: datetime, inicio_b: datetime, fin_b: datetime) -> bool:
    """Rangos semiabiertos [inicio, fin): una cita que termina a las 9:00 no choca con otra que empieza a las 9:00."""
    return inicio_a < fin_b and inicio_b < fin_a


def cabe_en_horario(inicio: datetime, fin: datetime) -> bool:
    """True si [inicio, fin) queda dentro de una sola ventana de atención del día."""
    dia = inicio.date()
    for apertura, cierre in settings.ventanas_atencion(inicio.weekday()):
        if datetime.combine(dia, apertura) <= inicio and fin <= datetime.combine(dia, cierre):
            return True
    return False


def validar_horario(inicio: datetime, ahora: Optional[datetime] = None) -> None:
    """
    Reglas 1 a 3 de la agenda (todo salvo el solapamiento).

    Args:
        inicio: Inicio de la cita en hora local naive
        ahora: Hora local de referencia (por defecto, la actual)

    Raises:
        BusinessException: Si la fecha está en el pasado, el día está cerrado
            o la cita no cabe en el horario de atención
    """
    ahora = ahora or get_local_naive_now()
    if inicio < ahora:
        raise BusinessException(
            "No se puede agendar una cita en una fecha u hora pasada",
            details={"errors": {"fecha": "La fecha debe ser futura"}}
        )

    ventanas = settings.ventanas_atencion(inicio.weekday())
    if not ventanas:
        raise BusinessException(
            f"La clínica no atiende los {DIAS[inicio.weekday()]}",
            details={"errors": {"fecha": "Día sin atención"}}
        )

    if not cabe_en_horario(inicio, inicio + duracion_cita()):
        horario = ", ".join(f"{a.strftime('%H:%M')}-{c.strftime('%H:%M')}" for a, c in ventanas)
        raise BusinessException(
            f"La cita debe quedar dentro del horario de atención del {DIAS[inicio.weekday()]} ({horario})",
            details={"errors": {"fecha": "Fuera del horario de atención"}}
        )


def to_response(cita: CitaORM) -> Cita:
    return Cita(
        id_cita=cita.id,
        fecha=cita.fecha,
        fecha_fin=cita.fecha + duracion_cita(),
        motivo=cita.motivo,
        observaciones=cita.observaciones,
        estado=cita.estado,
        id_paciente=cita.id_paciente,
        paciente_nombre=cita.paciente.nombre if cita.paciente else None,
        id_propietario=cita.id_propietario,
        propietario_nombre=cita.propietario.nombre if cita.propietario else None,
        id_profesional=cita.id_profesional,
        profesional_nombre=cita.profesional.nombre if cita.profesional else None,
        fecha_creacion=cita.fecha_creacion,
    )


class CitaService(BaseService[CitaORM, CitaRepository]):
    """Servicio para la lógica de negocio de Citas."""

    def __init__(
        self,
        cita_repository: CitaRepository,
        paciente_repository: PacienteRepository,
        propietario_repository: PropietarioRepository,
        usuario_repository: UsuarioRepository,
        notificacion_service: NotificacionService,
        email_service: EmailService,
    ):
        super().__init__(cita_repository)
        self.paciente_repo = paciente_repository
        self.propietario_repo = propietario_repository
        self.usuario_repo = usuario_repository
        self.notificaciones = notificacion_service
        self.email = email_service

    # ==================== Validaciones ====================

    def validar_programacion(
        self,
        fecha: datetime,
        id_profesional: str,
        excluir_id: Optional[str] = None
    ) -> datetime:
        """
        Aplica las cuatro reglas de agenda y devuelve la fecha normalizada a hora local.

        Raises:
            BusinessException: Si alguna regla no se cumple
        """
        inicio = to_local_naive(fecha).replace(second=0, microsecond=0)
        validar_horario(inicio)

        fin = inicio + duracion_cita()
        dia = datetime.combine(inicio.date(), datetime.min.time())
        existentes = self.repository.find_by_profesional_en_rango(
            id_profesional, dia, dia + timedelta(days=1), excluir_id=excluir_id
        )
        for otra in existentes:
            if rangos_se_solapan(inicio, fin, otra.fecha, otra.fecha + duracion_cita()):
                raise BusinessException(
                    f"El profesional ya tiene una cita entre "
                    f"{otra.fecha.strftime('%H:%M')} y {(otra.fecha + duracion_cita()).strftime('%H:%M')}",
                    details={"errors": {"fecha": "Horario ocupado"}, "id_cita_existente": otra.id}
                )
        return inicio

    def _get_profesional(self, id_profesional: str) -> UsuarioORM:
        validate_uuid(id_profesional, "id_profesional")
        profesional = self.usuario_repo.get_by_id_or_fail(id_profesional)
        if profesional.rol != "VET" or not profesional.activo:
            raise BusinessException(
                "El profesional asignado debe ser un veterinario activo",
                details={"errors": {"id_profesional": "No es un veterinario activo"}}
            )
        return profesional

    def _get_paciente_de(self, id_paciente: str, id_propietario: str) -> PacienteORM:
        validate_uuid(id_paciente, "id_paciente")
        validate_uuid(id_propietario, "id_propietario")
        propietario = self.propietario_repo.get_by_id_or_fail(id_propietario)
        paciente = self.paciente_repo.get_by_id_or_fail(id_paciente)
        if not propietario.activo or not paciente.activo:
            raise BusinessException("El propietario y el paciente deben estar activos")
        if paciente.id_propietario != propietario.id:
            raise BusinessException("El paciente no pertenece al propietario indicado")
        return paciente

    # ==================== Creación ====================

    def _crear(
        self,
        fecha: datetime,
        motivo: str,
        observaciones: Optional[str],
        paciente: PacienteORM,
        profesional: UsuarioORM,
        user_id: Optional[str] = None,
    ) -> CitaORM:
        inicio = self.validar_programacion(fecha, profesional.id)
        cita = CitaORM(
            fecha=inicio,
            motivo=motivo.strip(),
            observaciones=observaciones,
            estado=EstadoCita.PENDIENTE.value,
            id_paciente=paciente.id,
            id_propietario=paciente.id_propietario,
            id_profesional=profesional.id,
        )
        created = self.repository.create(cita, user_id=user_id)
        self.repository.commit()
        logger.info(f"Cita {created.id} agendada para {inicio.isoformat()} con {profesional.id}")

        self._avisar_creacion(created)
        return created

    def _avisar_creacion(self, cita: CitaORM) -> None:
        paciente_nombre = cita.paciente.nombre if cita.paciente else ""
        self.notificaciones.crear(
            id_usuario=cita.id_profesional,
            titulo="Nueva cita agendada",
            mensaje=f"{paciente_nombre} - {cita.fecha.strftime('%d/%m/%Y %H:%M')}: {cita.motivo}",
            tipo=TipoNotificacion.CITA,
            entidad_tipo="cita",
            entidad_id=cita.id,
        )
        if cita.propietario and cita.propietario.email:
            self.email.send_cita_confirmacion(
                cita.propietario.email,
                cita.propietario.nombre,
                paciente_nombre,
                cita.fecha,
                cita.profesional.nombre if cita.profesional else "",
                cita.motivo,
            )

    def create_cita(self, data: CitaCreate, ctx: RequestContext) -> Cita:
        """
        Agenda una cita desde el staff.

        Raises:
            NotFoundException: Si paciente, propietario o profesional no existen
            BusinessException: Si el paciente no es del propietario o falla una regla de agenda
        """
        paciente = self._get_paciente_de(data.id_paciente, data.id_propietario)
        profesional = self._get_profesional(data.id_profesional)
        created = self._crear(data.fecha, data.motivo, data.observaciones, paciente, profesional, ctx.user_id)
        return to_response(created)

    def reservar_publica(self, data: CitaPublicaCreate) -> Cita:
        """
        Reserva sin autenticación.

        Acepta propietario y paciente existentes (por ID) o propietario y
        paciente nuevos; el propietario nuevo se reutiliza si su email ya existe.
        """
        profesional = self._get_profesional(data.id_profesional)

        if data.id_propietario and data.id_paciente:
            paciente = self._get_paciente_de(data.id_paciente, data.id_propietario)
        elif data.propietario_nuevo and data.paciente_nuevo:
            #validar la agenda antes de crear registros
            self.validar_programacion(data.fecha, profesional.id)
            propietario = self._propietario_para_reserva(data)
            paciente = PacienteService(self.paciente_repo, self.propietario_repo).crear_orm(
                PacienteCreate(id_propietario=propietario.id, **data.paciente_nuevo.model_dump())
            )
        else:
            raise BusinessException(
                "Indique propietario y paciente existentes, o los datos de un propietario y paciente nuevos"
            )

        created = self._crear(data.fecha, data.motivo, data.observaciones, paciente, profesional)
        return to_response(created)

    def _propietario_para_reserva(self, data: CitaPublicaCreate) -> PropietarioORM:
        email = normalizar_email(data.propietario_nuevo.email)
        existente = self.propietario_repo.find_by_email(email)
        if existente:
            if not existente.activo:
                raise BusinessException("El propietario está inactivo; contacte a la clínica")
            return existente
        service = PropietarioService(self.propietario_repo, self.paciente_repo)
        return service.crear_orm(PropietarioCreate(**data.propietario_nuevo.model_dump()))

    def reservar_cliente(self, data: CitaClienteCreate, ctx: RequestContext) -> Cita:
        """Reserva desde el portal: el paciente debe ser del cliente autenticado."""
        validate_uuid(data.id_paciente, "id_paciente")
        paciente = self.paciente_repo.get_by_id_or_fail(data.id_paciente)
        if paciente.id_propietario != ctx.id:
            raise ForbiddenException("Solo puede agendar citas para sus propios pacientes")
        paciente = self._get_paciente_de(paciente.id, ctx.id)
        profesional = self._get_profesional(data.id_profesional)
        created = self._crear(data.fecha, data.motivo, data.observaciones, paciente, profesional)
        return to_response(created)

    # ==================== Consultas ====================

    def get_cita(self, cita_id: str, ctx: RequestContext) -> Cita:
        validate_uuid(cita_id, "cita_id")
        cita = self.repository.get_by_id_or_fail(cita_id)
        check_propietario_access(ctx, cita.id_propietario, "cita")
        return to_response(cita)

    def get_citas(
        self,
        ctx: RequestContext,
        estado: Optional[str] = None,
        id_profesional: Optional[str] = None,
        id_paciente: Optional[str] = None,
        id_propietario: Optional[str] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Cita], int]:
        """Listado filtrado; un cliente solo ve las citas de sus pacientes."""
        if ctx.es_propietario:
            id_propietario = ctx.id
        citas, total = self.repository.search(
            estado=enum_to_value(estado),
            id_profesional=id_profesional,
            id_paciente=id_paciente,
            id_propietario=id_propietario,
            desde=to_local_naive(desde),
            hasta=to_local_naive(hasta),
            page=page,
            page_size=page_size
        )
        return [to_response(c) for c in citas], total

    def get_agenda(self, id_profesional: str, dia: date) -> List[Cita]:
        """Citas no canceladas de un profesional en un día."""
        validate_uuid(id_profesional, "id_profesional")
        self.usuario_repo.get_by_id_or_fail(id_profesional)
        inicio = datetime.combine(dia, datetime.min.time())
        citas = self.repository.find_by_profesional_en_rango(id_profesional, inicio, inicio + timedelta(days=1))
        return [to_response(c) for c in citas]

    def get_disponibilidad(self, id_profesional: str, dia: date) -> Disponibilidad:
        """
        Horarios libres de un profesional en un día, en pasos de la duración de una cita.
        """
        profesional = self._get_profesional(id_profesional)
        inicio_dia = datetime.combine(dia, datetime.min.time())
        ocupadas = self.repository.find_by_profesional_en_rango(
            profesional.id, inicio_dia, inicio_dia + timedelta(days=1)
        )
        ahora = get_local_naive_now()
        paso = duracion_cita()

        horarios: List[HorarioDisponible] = []
        for apertura, cierre in settings.ventanas_atencion(dia.weekday()):
            slot = datetime.combine(dia, apertura)
            limite = datetime.combine(dia, cierre)
            while slot + paso <= limite:
                libre = slot >= ahora and not any(
                    rangos_se_solapan(slot, slot + paso, c.fecha, c.fecha + paso) for c in ocupadas
                )
                if libre:
                    horarios.append(HorarioDisponible(inicio=slot, fin=slot + paso))
                slot += paso

        return Disponibilidad(id_profesional=profesional.id, fecha=dia.isoformat(), horarios=horarios)

    # ==================== Modificación ====================

    def update_cita(self, cita_id: str, data: CitaUpdate, ctx: RequestContext) -> Cita:
        """
        Edita o reprograma una cita pendiente o confirmada.

        Si cambia la fecha o el profesional se vuelven a validar las reglas de
        agenda, excluyendo la propia cita del control de solapamiento.
        """
        validate_uuid(cita_id, "cita_id")
        cita = self.repository.get_by_id_or_fail(cita_id)
        if cita.estado not in ESTADOS_ACTIVOS:
            raise BusinessException(f"No se puede modificar una cita en estado {cita.estado}")

        update_data = data.model_dump(exclude_unset=True)
        nueva_fecha = update_data.get("fecha") or cita.fecha
        nuevo_profesional = update_data.get("id_profesional") or cita.id_profesional

        if "fecha" in update_data or "id_profesional" in update_data:
            if nuevo_profesional != cita.id_profesional:
                self._get_profesional(nuevo_profesional)
            cita.fecha = self.validar_programacion(nueva_fecha, nuevo_profesional, excluir_id=cita.id)
            cita.id_profesional = nuevo_profesional

        if update_data.get("motivo"):
            cita.motivo = update_data["motivo"].strip()
        if "observaciones" in update_data:
            cita.observaciones = update_data["observaciones"]

        updated = self.repository.update(cita, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Cita {cita_id} actualizada")
        return to_response(updated)

    def cambiar_estado(self, cita_id: str, estado: EstadoCita, ctx: RequestContext) -> Cita:
        """
        Raises:
            BusinessException: Si la transición no está permitida
        """
        validate_uuid(cita_id, "cita_id")
        cita = self.repository.get_by_id_or_fail(cita_id)
        nuevo = enum_to_value(estado)
        if nuevo not in TRANSICIONES.get(cita.estado, ()):
            raise BusinessException(
                f"No se puede cambiar una cita de {cita.estado} a {nuevo}",
                details={"estado_actual": cita.estado, "estado_solicitado": nuevo}
            )

        cita.estado = nuevo
        updated = self.repository.update(cita, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Cita {cita_id} pasa a {nuevo}")

        if updated.propietario and updated.propietario.email:
            self.email.send_cita_estado(
                updated.propietario.email,
                updated.propietario.nombre,
                updated.paciente.nombre if updated.paciente else "",
                updated.fecha,
                nuevo,
            )
        return to_response(updated)

    def cancelar_cita(self, cita_id: str, ctx: RequestContext) -> Cita:
        """Las citas nunca se borran: DELETE las cancela."""
        return self.cambiar_estado(cita_id, EstadoCita.CANCELADA, ctx)
