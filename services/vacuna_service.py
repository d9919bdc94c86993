"""
Servicio para el catálogo de vacunas y el registro de vacunaciones.
"""

from typing import List, Optional
from datetime import date, timedelta
import logging

from services.base_service import BaseService
from repositories.vacuna_repository import VacunaRepository, VacunacionRepository
from repositories.paciente_repository import PacienteRepository
from repositories.usuario_repository import UsuarioRepository
from database.models import VacunaORM, VacunacionORM
from models.vacunas import Vacuna, VacunaCreate, VacunaUpdate, Vacunacion, VacunacionCreate
from core.context import RequestContext
from core.exceptions import BusinessException, ValidationException
from core.security import validate_uuid, check_propietario_access
from utils.datetime_utils import get_local_today

logger = logging.getLogger(__name__)


def to_response(vacuna: VacunaORM) -> Vacuna:
    return Vacuna(
        id_vacuna=vacuna.id,
        nombre=vacuna.nombre,
        especie=vacuna.especie,
        descripcion=vacuna.descripcion,
        fabricante=vacuna.fabricante,
        numero_dosis=vacuna.numero_dosis,
        intervalo_dias=vacuna.intervalo_dias,
        activo=vacuna.activo,
    )


def vacunacion_to_response(vacunacion: VacunacionORM) -> Vacunacion:
    return Vacunacion(
        id_vacunacion=vacunacion.id,
        id_paciente=vacunacion.id_paciente,
        paciente_nombre=vacunacion.paciente.nombre if vacunacion.paciente else None,
        id_vacuna=vacunacion.id_vacuna,
        vacuna_nombre=vacunacion.vacuna.nombre if vacunacion.vacuna else None,
        id_profesional=vacunacion.id_profesional,
        profesional_nombre=vacunacion.profesional.nombre if vacunacion.profesional else None,
        fecha_aplicacion=vacunacion.fecha_aplicacion,
        numero_dosis=vacunacion.numero_dosis,
        proxima_dosis=vacunacion.proxima_dosis,
        lote=vacunacion.lote,
        observaciones=vacunacion.observaciones,
    )


def calcular_proxima_dosis(vacuna: VacunaORM, fecha_aplicacion: date, numero_dosis: int) -> Optional[date]:
    """Fecha de la siguiente dosis, o None si era la última o la vacuna no tiene intervalo."""
    if numero_dosis >= vacuna.numero_dosis or not vacuna.intervalo_dias:
        return None
    return fecha_aplicacion + timedelta(days=vacuna.intervalo_dias)


class VacunaService(BaseService[VacunaORM, VacunaRepository]):
    """Catálogo de vacunas."""

    def create_vacuna(self, data: VacunaCreate, ctx: RequestContext) -> Vacuna:
        vacuna = VacunaORM(
            nombre=data.nombre.strip(),
            especie=data.especie.strip() if data.especie else None,
            descripcion=data.descripcion,
            fabricante=data.fabricante,
            numero_dosis=data.numero_dosis,
            intervalo_dias=data.intervalo_dias,
            activo=True,
        )
        created = self.repository.create(vacuna, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Vacuna {created.nombre} agregada al catálogo")
        return to_response(created)

    def get_vacuna(self, vacuna_id: str) -> Vacuna:
        validate_uuid(vacuna_id, "vacuna_id")
        return to_response(self.repository.get_by_id_or_fail(vacuna_id))

    def get_vacunas(
        self,
        nombre: Optional[str] = None,
        especie: Optional[str] = None,
        solo_activas: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Vacuna], int]:
        vacunas, total = self.repository.search(
            nombre=nombre, especie=especie, solo_activas=solo_activas, page=page, page_size=page_size
        )
        return [to_response(v) for v in vacunas], total

    def update_vacuna(self, vacuna_id: str, data: VacunaUpdate, ctx: RequestContext) -> Vacuna:
        validate_uuid(vacuna_id, "vacuna_id")
        vacuna = self.repository.get_by_id_or_fail(vacuna_id)
        self.validate_activo(vacuna)

        for campo, valor in data.model_dump(exclude_unset=True).items():
            if valor is None and campo in ("nombre", "numero_dosis", "intervalo_dias"):
                continue
            setattr(vacuna, campo, valor)

        updated = self.repository.update(vacuna, user_id=ctx.user_id)
        self.repository.commit()
        return to_response(updated)

    def delete_vacuna(self, vacuna_id: str, ctx: RequestContext) -> None:
        validate_uuid(vacuna_id, "vacuna_id")
        self.delete(vacuna_id, user_id=ctx.user_id)


class VacunacionService(BaseService[VacunacionORM, VacunacionRepository]):
    """Vacunaciones aplicadas y calendario de próximas dosis."""

    def __init__(
        self,
        repository: VacunacionRepository,
        vacuna_repository: VacunaRepository,
        paciente_repository: PacienteRepository,
        usuario_repository: UsuarioRepository,
    ):
        super().__init__(repository)
        self.vacuna_repo = vacuna_repository
        self.paciente_repo = paciente_repository
        self.usuario_repo = usuario_repository

    def registrar_vacunacion(self, data: VacunacionCreate, ctx: RequestContext) -> Vacunacion:
        """
        Registra la aplicación de una dosis y programa la siguiente.

        Raises:
            NotFoundException: Paciente, vacuna o profesional inexistentes
            BusinessException: Vacuna o paciente inactivos
            ValidationException: Dosis fuera de rango o fecha futura
        """
        validate_uuid(data.id_paciente, "id_paciente")
        validate_uuid(data.id_vacuna, "id_vacuna")
        paciente = self.paciente_repo.get_by_id_or_fail(data.id_paciente)
        if not paciente.activo:
            raise BusinessException("No se puede vacunar a un paciente inactivo")

        vacuna = self.vacuna_repo.get_by_id_or_fail(data.id_vacuna)
        if not vacuna.activo:
            raise BusinessException("La vacuna no está disponible en el catálogo")

        if data.numero_dosis > vacuna.numero_dosis:
            raise ValidationException(
                message=f"La vacuna {vacuna.nombre} tiene {vacuna.numero_dosis} dosis",
                field="numero_dosis"
            )
        if data.fecha_aplicacion > get_local_today():
            raise ValidationException(
                message="La fecha de aplicación no puede ser futura",
                field="fecha_aplicacion"
            )

        id_profesional = data.id_profesional or ctx.id
        validate_uuid(id_profesional, "id_profesional")
        self.usuario_repo.get_by_id_or_fail(id_profesional)

        vacunacion = VacunacionORM(
            id_paciente=paciente.id,
            id_vacuna=vacuna.id,
            id_profesional=id_profesional,
            fecha_aplicacion=data.fecha_aplicacion,
            numero_dosis=data.numero_dosis,
            proxima_dosis=calcular_proxima_dosis(vacuna, data.fecha_aplicacion, data.numero_dosis),
            lote=data.lote,
            observaciones=data.observaciones,
        )
        created = self.repository.create(vacunacion, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(
            f"Vacunación {vacuna.nombre} dosis {data.numero_dosis} aplicada a paciente {paciente.id}"
        )
        return vacunacion_to_response(created)

    def get_vacunacion(self, vacunacion_id: str, ctx: RequestContext) -> Vacunacion:
        validate_uuid(vacunacion_id, "vacunacion_id")
        vacunacion = self.repository.get_by_id_or_fail(vacunacion_id)
        check_propietario_access(ctx, vacunacion.paciente.id_propietario, "vacunación")
        return vacunacion_to_response(vacunacion)

    def get_by_paciente(self, paciente_id: str, ctx: RequestContext) -> List[Vacunacion]:
        validate_uuid(paciente_id, "paciente_id")
        paciente = self.paciente_repo.get_by_id_or_fail(paciente_id)
        check_propietario_access(ctx, paciente.id_propietario, "paciente")
        return [vacunacion_to_response(v) for v in self.repository.find_by_paciente(paciente_id)]

    def get_proximas(self, dias: int = 30) -> List[Vacunacion]:
        hoy = get_local_today()
        proximas = self.repository.find_proximas(hoy, hoy + timedelta(days=dias))
        return [vacunacion_to_response(v) for v in proximas]

    def get_vencidas(self) -> List[Vacunacion]:
        return [vacunacion_to_response(v) for v in self.repository.find_vencidas(get_local_today())]

    def delete_vacunacion(self, vacunacion_id: str, ctx: RequestContext) -> None:
        validate_uuid(vacunacion_id, "vacunacion_id")
        vacunacion = self.repository.get_by_id_or_fail(vacunacion_id)
        self.repository.delete(vacunacion)
        self.repository.commit()
        logger.info(f"Vacunación {vacunacion_id} eliminada por {ctx.id}")
