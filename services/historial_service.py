"""
Historial clínico de un paciente: citas, consultas, prescripciones y vacunaciones.
"""

import logging

from sqlalchemy.orm import Session

from repositories.paciente_repository import PacienteRepository
from repositories.cita_repository import CitaRepository
from repositories.consulta_repository import ConsultaRepository, PrescripcionRepository
from repositories.vacuna_repository import VacunacionRepository
from models.historial import HistorialClinico
from services import cita_service, consulta_service, paciente_service, vacuna_service
from core.context import RequestContext
from core.security import validate_uuid, check_propietario_access

logger = logging.getLogger(__name__)


class HistorialService:
    """Arma el historial a partir de los repositorios de cada entidad."""

    def __init__(self, db: Session):
        self.paciente_repo = PacienteRepository(db)
        self.cita_repo = CitaRepository(db)
        self.consulta_repo = ConsultaRepository(db)
        self.prescripcion_repo = PrescripcionRepository(db)
        self.vacunacion_repo = VacunacionRepository(db)

    def get_historial(self, paciente_id: str, ctx: RequestContext) -> HistorialClinico:
        """
        Raises:
            NotFoundException: Si el paciente no existe
            ForbiddenException: Si un cliente consulta un paciente ajeno
        """
        validate_uuid(paciente_id, "paciente_id")
        paciente = self.paciente_repo.get_by_id_or_fail(paciente_id)
        check_propietario_access(ctx, paciente.id_propietario, "paciente")

        return HistorialClinico(
            paciente=paciente_service.to_response(paciente),
            citas=[cita_service.to_response(c) for c in self.cita_repo.find_by_paciente(paciente.id)],
            consultas=[consulta_service.to_response(c) for c in self.consulta_repo.find_by_paciente(paciente.id)],
            prescripciones=[
                consulta_service.prescripcion_to_response(p)
                for p in self.prescripcion_repo.find_by_paciente(paciente.id)
            ],
            vacunaciones=[
                vacuna_service.vacunacion_to_response(v)
                for v in self.vacunacion_repo.find_by_paciente(paciente.id)
            ],
        )
