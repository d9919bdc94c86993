"""
Servicio para la lógica de negocio de Pacientes (mascotas atendidas).
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from repositories.paciente_repository import PacienteRepository
from repositories.propietario_repository import PropietarioRepository
from database.models import PacienteORM
from models.pacientes import PacienteCreate, PacienteUpdate, Paciente
from core.context import RequestContext
from core.exceptions import DuplicateException, BusinessException
from core.security import validate_uuid, check_propietario_access
from core.utils import enum_to_value

logger = logging.getLogger(__name__)


def to_response(paciente: PacienteORM) -> Paciente:
    return Paciente(
        id_paciente=paciente.id,
        nombre=paciente.nombre,
        especie=paciente.especie,
        raza=paciente.raza,
        sexo=paciente.sexo,
        edad_meses=paciente.edad_meses,
        peso_kg=paciente.peso_kg,
        microchip=paciente.microchip,
        notas=paciente.notas,
        id_propietario=paciente.id_propietario,
        propietario_nombre=paciente.propietario.nombre if paciente.propietario else None,
        activo=paciente.activo,
        fecha_creacion=paciente.fecha_creacion,
    )


class PacienteService(BaseService[PacienteORM, PacienteRepository]):

    def __init__(self, repository: PacienteRepository, propietario_repository: PropietarioRepository):
        super().__init__(repository)
        self.propietario_repo = propietario_repository

    def _validar_microchip(self, microchip: Optional[str], excluir_id: Optional[str] = None) -> None:
        if not microchip:
            return
        existente = self.repository.find_by_microchip(microchip)
        if existente and existente.id != excluir_id:
            raise DuplicateException(resource="Paciente", field="microchip", value=microchip)

    def _validar_propietario(self, id_propietario: str) -> None:
        validate_uuid(id_propietario, "id_propietario")
        propietario = self.propietario_repo.get_by_id_or_fail(id_propietario)
        if not propietario.activo:
            raise BusinessException("No se puede asignar un paciente a un propietario inactivo")

    def crear_orm(self, data: PacienteCreate, user_id: Optional[str] = None) -> PacienteORM:
        """Crea el paciente sin hacer commit."""
        self._validar_propietario(data.id_propietario)
        microchip = data.microchip.strip() if data.microchip else None
        self._validar_microchip(microchip)

        paciente = PacienteORM(
            nombre=data.nombre.strip(),
            especie=data.especie.strip(),
            raza=data.raza,
            sexo=enum_to_value(data.sexo),
            edad_meses=data.edad_meses,
            peso_kg=data.peso_kg,
            microchip=microchip,
            notas=data.notas,
            id_propietario=data.id_propietario,
            activo=True,
        )
        return self.repository.create(paciente, user_id=user_id)

    def create_paciente(self, data: PacienteCreate, ctx: RequestContext) -> Paciente:
        """
        Registra un paciente.

        Raises:
            NotFoundException: Si el propietario no existe
            BusinessException: Si el propietario está inactivo
            DuplicateException: Si el microchip ya está registrado
        """
        paciente = self.crear_orm(data, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Paciente {paciente.id} creado para propietario {paciente.id_propietario}")
        return to_response(paciente)

    def get_paciente_orm(self, paciente_id: str, ctx: RequestContext) -> PacienteORM:
        validate_uuid(paciente_id, "paciente_id")
        paciente = self.repository.get_by_id_or_fail(paciente_id)
        check_propietario_access(ctx, paciente.id_propietario, "paciente")
        return paciente

    def get_paciente(self, paciente_id: str, ctx: RequestContext) -> Paciente:
        return to_response(self.get_paciente_orm(paciente_id, ctx))

    def get_pacientes(
        self,
        nombre: Optional[str] = None,
        especie: Optional[str] = None,
        id_propietario: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Paciente], int]:
        pacientes, total = self.repository.search(
            nombre=nombre,
            especie=especie,
            id_propietario=id_propietario,
            solo_activos=solo_activos,
            page=page,
            page_size=page_size
        )
        return [to_response(p) for p in pacientes], total

    def update_paciente(self, paciente_id: str, data: PacienteUpdate, ctx: RequestContext) -> Paciente:
        validate_uuid(paciente_id, "paciente_id")
        paciente = self.repository.get_by_id_or_fail(paciente_id)
        self.validate_activo(paciente)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("id_propietario") and update_data["id_propietario"] != paciente.id_propietario:
            self._validar_propietario(update_data["id_propietario"])
        if update_data.get("microchip"):
            update_data["microchip"] = update_data["microchip"].strip()
            self._validar_microchip(update_data["microchip"], excluir_id=paciente.id)
        if "sexo" in update_data:
            update_data["sexo"] = enum_to_value(update_data["sexo"])

        for campo, valor in update_data.items():
            if campo == "id_propietario" and valor is None:
                continue
            setattr(paciente, campo, valor)

        updated = self.repository.update(paciente, user_id=ctx.user_id)
        self.repository.commit()
        return to_response(updated)

    def delete_paciente(self, paciente_id: str, ctx: RequestContext) -> None:
        validate_uuid(paciente_id, "paciente_id")
        self.delete(paciente_id, user_id=ctx.user_id)
