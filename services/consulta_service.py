"""
Servicios de Consultas clínicas y Prescripciones.
"""

from typing import List, Optional
from datetime import datetime
import logging

from services.base_service import BaseService
from services.cita_service import ESTADOS_ACTIVOS
from repositories.consulta_repository import ConsultaRepository, PrescripcionRepository
from repositories.paciente_repository import PacienteRepository
from repositories.usuario_repository import UsuarioRepository
from repositories.cita_repository import CitaRepository
from repositories.factura_repository import FacturaRepository
from database.models import ConsultaORM, PrescripcionORM, ItemPrescripcionORM
from models.citas import EstadoCita
from models.consultas import (
    Consulta,
    ConsultaCreate,
    ConsultaUpdate,
    Prescripcion,
    PrescripcionCreate,
    PrescripcionUpdate,
    ItemPrescripcion,
    ItemPrescripcionCreate,
)
from core.context import RequestContext
from core.exceptions import BusinessException
from core.security import validate_uuid
from core.utils import enum_to_value
from utils.datetime_utils import get_local_naive_now, to_local_naive

logger = logging.getLogger(__name__)


def to_response(consulta: ConsultaORM) -> Consulta:
    return Consulta(
        id_consulta=consulta.id,
        fecha=consulta.fecha,
        frecuencia_cardiaca=consulta.frecuencia_cardiaca,
        frecuencia_respiratoria=consulta.frecuencia_respiratoria,
        temperatura=consulta.temperatura,
        peso_kg=consulta.peso_kg,
        examen_fisico=consulta.examen_fisico,
        diagnostico=consulta.diagnostico,
        tratamiento=consulta.tratamiento,
        observaciones=consulta.observaciones,
        id_paciente=consulta.id_paciente,
        paciente_nombre=consulta.paciente.nombre if consulta.paciente else None,
        id_profesional=consulta.id_profesional,
        profesional_nombre=consulta.profesional.nombre if consulta.profesional else None,
        id_cita=consulta.id_cita,
    )


def prescripcion_to_response(prescripcion: PrescripcionORM) -> Prescripcion:
    return Prescripcion(
        id_prescripcion=prescripcion.id,
        id_consulta=prescripcion.id_consulta,
        id_paciente=prescripcion.consulta.id_paciente if prescripcion.consulta else None,
        fecha_emision=prescripcion.fecha_emision,
        indicaciones_generales=prescripcion.indicaciones_generales,
        items=[
            ItemPrescripcion(
                id_item=item.id,
                medicamento=item.medicamento,
                presentacion=item.presentacion,
                dosis=item.dosis,
                frecuencia=item.frecuencia,
                duracion_dias=item.duracion_dias,
                via_administracion=item.via_administracion,
                indicaciones=item.indicaciones,
            )
            for item in prescripcion.items
        ],
    )


class ConsultaService(BaseService[ConsultaORM, ConsultaRepository]):

    def __init__(
        self,
        repository: ConsultaRepository,
        paciente_repository: PacienteRepository,
        usuario_repository: UsuarioRepository,
        cita_repository: CitaRepository,
        factura_repository: FacturaRepository,
        prescripcion_repository: PrescripcionRepository,
    ):
        super().__init__(repository)
        self.paciente_repo = paciente_repository
        self.usuario_repo = usuario_repository
        self.cita_repo = cita_repository
        self.factura_repo = factura_repository
        self.prescripcion_repo = prescripcion_repository

    def create_consulta(self, data: ConsultaCreate, ctx: RequestContext) -> Consulta:
        """
        Registra una consulta. Si viene de una cita, la cita pasa a ATENDIDA.

        Raises:
            NotFoundException: Paciente, profesional o cita inexistentes
            BusinessException: Paciente inactivo, o cita de otro paciente o ya cancelada
        """
        validate_uuid(data.id_paciente, "id_paciente")
        paciente = self.paciente_repo.get_by_id_or_fail(data.id_paciente)
        if not paciente.activo:
            raise BusinessException("No se puede registrar una consulta para un paciente inactivo")

        id_profesional = data.id_profesional or ctx.id
        validate_uuid(id_profesional, "id_profesional")
        profesional = self.usuario_repo.get_by_id_or_fail(id_profesional)
        if not profesional.activo:
            raise BusinessException("El profesional está inactivo")

        cita = None
        if data.id_cita:
            validate_uuid(data.id_cita, "id_cita")
            cita = self.cita_repo.get_by_id_or_fail(data.id_cita)
            if cita.id_paciente != paciente.id:
                raise BusinessException("La cita indicada corresponde a otro paciente")
            if cita.estado == EstadoCita.CANCELADA.value:
                raise BusinessException("No se puede registrar una consulta sobre una cita cancelada")

        consulta = ConsultaORM(
            fecha=to_local_naive(data.fecha) or get_local_naive_now(),
            frecuencia_cardiaca=data.frecuencia_cardiaca,
            frecuencia_respiratoria=data.frecuencia_respiratoria,
            temperatura=data.temperatura,
            peso_kg=data.peso_kg,
            examen_fisico=data.examen_fisico,
            diagnostico=data.diagnostico,
            tratamiento=data.tratamiento,
            observaciones=data.observaciones,
            id_paciente=paciente.id,
            id_profesional=profesional.id,
            id_cita=cita.id if cita else None,
        )
        created = self.repository.create(consulta, user_id=ctx.user_id)

        if cita and cita.estado in ESTADOS_ACTIVOS:
            cita.estado = EstadoCita.ATENDIDA.value
            self.cita_repo.update(cita, user_id=ctx.user_id)

        #el peso de la consulta actualiza la ficha del paciente
        if data.peso_kg:
            paciente.peso_kg = data.peso_kg
            self.paciente_repo.update(paciente, user_id=ctx.user_id)

        self.repository.commit()
        logger.info(f"Consulta {created.id} registrada para paciente {paciente.id}")
        return to_response(created)

    def get_consulta(self, consulta_id: str) -> Consulta:
        validate_uuid(consulta_id, "consulta_id")
        return to_response(self.repository.get_by_id_or_fail(consulta_id))

    def get_consultas(
        self,
        id_paciente: Optional[str] = None,
        id_profesional: Optional[str] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Consulta], int]:
        consultas, total = self.repository.search(
            id_paciente=id_paciente,
            id_profesional=id_profesional,
            desde=to_local_naive(desde),
            hasta=to_local_naive(hasta),
            page=page,
            page_size=page_size
        )
        return [to_response(c) for c in consultas], total

    def update_consulta(self, consulta_id: str, data: ConsultaUpdate, ctx: RequestContext) -> Consulta:
        validate_uuid(consulta_id, "consulta_id")
        consulta = self.repository.get_by_id_or_fail(consulta_id)
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("id_profesional"):
            validate_uuid(update_data["id_profesional"], "id_profesional")
            self.usuario_repo.get_by_id_or_fail(update_data["id_profesional"])
        if "fecha" in update_data:
            update_data["fecha"] = to_local_naive(update_data["fecha"]) or consulta.fecha

        for campo, valor in update_data.items():
            if campo == "id_profesional" and not valor:
                continue
            setattr(consulta, campo, valor)

        updated = self.repository.update(consulta, user_id=ctx.user_id)
        self.repository.commit()
        return to_response(updated)

    def delete_consulta(self, consulta_id: str, ctx: RequestContext) -> None:
        """
        Elimina la consulta y sus prescripciones.

        Raises:
            BusinessException: Si la consulta ya fue facturada
        """
        validate_uuid(consulta_id, "consulta_id")
        consulta = self.repository.get_by_id_or_fail(consulta_id)
        if self.factura_repo.find_by_consulta(consulta.id):
            raise BusinessException("No se puede eliminar una consulta que ya tiene factura")

        for prescripcion in self.prescripcion_repo.find_by_consulta(consulta.id):
            self.prescripcion_repo.delete(prescripcion)
        self.repository.delete(consulta)
        self.repository.commit()
        logger.info(f"Consulta {consulta_id} eliminada por {ctx.id}")


def _items_orm(items: List[ItemPrescripcionCreate]) -> List[ItemPrescripcionORM]:
    return [
        ItemPrescripcionORM(
            medicamento=item.medicamento.strip(),
            presentacion=item.presentacion,
            dosis=item.dosis,
            frecuencia=item.frecuencia,
            duracion_dias=item.duracion_dias,
            via_administracion=enum_to_value(item.via_administracion),
            indicaciones=item.indicaciones,
        )
        for item in items
    ]


class PrescripcionService(BaseService[PrescripcionORM, PrescripcionRepository]):

    def __init__(self, repository: PrescripcionRepository, consulta_repository: ConsultaRepository):
        super().__init__(repository)
        self.consulta_repo = consulta_repository

    def create_prescripcion(self, data: PrescripcionCreate, ctx: RequestContext) -> Prescripcion:
        validate_uuid(data.id_consulta, "id_consulta")
        consulta = self.consulta_repo.get_by_id_or_fail(data.id_consulta)

        prescripcion = PrescripcionORM(
            id_consulta=consulta.id,
            fecha_emision=get_local_naive_now(),
            indicaciones_generales=data.indicaciones_generales,
        )
        prescripcion.items = _items_orm(data.items)
        created = self.repository.create(prescripcion, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Prescripción {created.id} emitida con {len(data.items)} medicamentos")
        return prescripcion_to_response(created)

    def get_prescripcion(self, prescripcion_id: str) -> Prescripcion:
        validate_uuid(prescripcion_id, "prescripcion_id")
        return prescripcion_to_response(self.repository.get_by_id_or_fail(prescripcion_id))

    def get_prescripciones(self, page: int = 0, page_size: int = 50) -> tuple[List[Prescripcion], int]:
        prescripciones, total = self.repository.search(page=page, page_size=page_size)
        return [prescripcion_to_response(p) for p in prescripciones], total

    def get_by_consulta(self, consulta_id: str) -> List[Prescripcion]:
        validate_uuid(consulta_id, "consulta_id")
        self.consulta_repo.get_by_id_or_fail(consulta_id)
        return [prescripcion_to_response(p) for p in self.repository.find_by_consulta(consulta_id)]

    def get_by_paciente(self, paciente_id: str) -> List[Prescripcion]:
        validate_uuid(paciente_id, "paciente_id")
        return [prescripcion_to_response(p) for p in self.repository.find_by_paciente(paciente_id)]

    def update_prescripcion(self, prescripcion_id: str, data: PrescripcionUpdate, ctx: RequestContext) -> Prescripcion:
        """Actualiza indicaciones; si vienen items, reemplazan a los anteriores."""
        validate_uuid(prescripcion_id, "prescripcion_id")
        prescripcion = self.repository.get_by_id_or_fail(prescripcion_id)
        update_data = data.model_dump(exclude_unset=True)

        if "indicaciones_generales" in update_data:
            prescripcion.indicaciones_generales = update_data["indicaciones_generales"]
        if data.items:
            prescripcion.items = _items_orm(data.items)

        updated = self.repository.update(prescripcion, user_id=ctx.user_id)
        self.repository.commit()
        return prescripcion_to_response(updated)

    def delete_prescripcion(self, prescripcion_id: str, ctx: RequestContext) -> None:
        validate_uuid(prescripcion_id, "prescripcion_id")
        prescripcion = self.repository.get_by_id_or_fail(prescripcion_id)
        self.repository.delete(prescripcion)
        self.repository.commit()
        logger.info(f"Prescripción {prescripcion_id} eliminada por {ctx.id}")
