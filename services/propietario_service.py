"""
Servicio para la lógica de negocio de Propietarios (clientes de la clínica).
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from repositories.propietario_repository import PropietarioRepository
from repositories.paciente_repository import PacienteRepository
from database.models import PropietarioORM
from models.propietarios import PropietarioCreate, PropietarioUpdate, Propietario
from models.pacientes import Paciente
from services.paciente_service import to_response as paciente_to_response
from core.context import RequestContext
from core.exceptions import DuplicateException
from core.security import validate_uuid, check_propietario_access
from core.utils import normalizar_email

logger = logging.getLogger(__name__)


def to_response(propietario: PropietarioORM) -> Propietario:
    return Propietario(
        id_propietario=propietario.id,
        nombre=propietario.nombre,
        documento=propietario.documento,
        email=propietario.email,
        telefono=propietario.telefono,
        direccion=propietario.direccion,
        activo=propietario.activo,
        tiene_cuenta=bool(propietario.password_hash),
        fecha_creacion=propietario.fecha_creacion,
    )


class PropietarioService(BaseService[PropietarioORM, PropietarioRepository]):
    """Alta, búsqueda y baja lógica de propietarios."""

    def __init__(self, repository: PropietarioRepository, paciente_repository: PacienteRepository):
        super().__init__(repository)
        self.paciente_repo = paciente_repository

    def _validar_unicos(
        self,
        email: Optional[str],
        documento: Optional[str],
        excluir_id: Optional[str] = None
    ) -> None:
        """
        Raises:
            DuplicateException: Si el email o el documento ya pertenecen a otro propietario
        """
        if email:
            existente = self.repository.find_by_email(email)
            if existente and existente.id != excluir_id:
                raise DuplicateException(resource="Propietario", field="email", value=email)
        if documento:
            existente = self.repository.find_by_documento(documento)
            if existente and existente.id != excluir_id:
                raise DuplicateException(resource="Propietario", field="documento", value=documento)

    def create_propietario(self, data: PropietarioCreate, ctx: Optional[RequestContext] = None) -> Propietario:
        propietario = self.crear_orm(data, user_id=ctx.user_id if ctx else None)
        self.repository.commit()
        logger.info(f"Propietario {propietario.id} creado")
        return to_response(propietario)

    def crear_orm(self, data: PropietarioCreate, user_id: Optional[str] = None) -> PropietarioORM:
        """Crea el propietario sin hacer commit (lo usa también la reserva pública)."""
        email = normalizar_email(data.email)
        documento = data.documento.strip() if data.documento else None
        self._validar_unicos(email, documento)

        propietario = PropietarioORM(
            nombre=data.nombre.strip(),
            documento=documento,
            email=email,
            telefono=data.telefono,
            direccion=data.direccion,
            activo=True,
        )
        return self.repository.create(propietario, user_id=user_id)

    def get_propietario(self, propietario_id: str, ctx: RequestContext) -> Propietario:
        validate_uuid(propietario_id, "propietario_id")
        check_propietario_access(ctx, propietario_id, "propietario")
        return to_response(self.repository.get_by_id_or_fail(propietario_id))

    def get_propietarios(
        self,
        texto: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Propietario], int]:
        propietarios, total = self.repository.search(
            texto=texto, solo_activos=solo_activos, page=page, page_size=page_size
        )
        return [to_response(p) for p in propietarios], total

    def update_propietario(self, propietario_id: str, data: PropietarioUpdate, ctx: RequestContext) -> Propietario:
        validate_uuid(propietario_id, "propietario_id")
        check_propietario_access(ctx, propietario_id, "propietario")
        propietario = self.repository.get_by_id_or_fail(propietario_id)
        self.validate_activo(propietario)

        update_data = data.model_dump(exclude_unset=True)
        if "email" in update_data:
            update_data["email"] = normalizar_email(update_data["email"])
        if update_data.get("documento"):
            update_data["documento"] = update_data["documento"].strip()
        self._validar_unicos(update_data.get("email"), update_data.get("documento"), excluir_id=propietario.id)

        for campo, valor in update_data.items():
            setattr(propietario, campo, valor)

        updated = self.repository.update(propietario, user_id=ctx.user_id)
        self.repository.commit()
        return to_response(updated)

    def delete_propietario(self, propietario_id: str, ctx: RequestContext) -> None:
        validate_uuid(propietario_id, "propietario_id")
        self.delete(propietario_id, user_id=ctx.user_id)

    def get_pacientes(self, propietario_id: str, ctx: RequestContext) -> List[Paciente]:
        """Pacientes activos de un propietario."""
        validate_uuid(propietario_id, "propietario_id")
        check_propietario_access(ctx, propietario_id, "propietario")
        self.repository.get_by_id_or_fail(propietario_id)
        return [paciente_to_response(p) for p in self.paciente_repo.find_by_propietario(propietario_id)]
