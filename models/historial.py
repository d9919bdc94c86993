from pydantic import BaseModel
from typing import List

from models.pacientes import Paciente
from models.citas import Cita
from models.consultas import Consulta, Prescripcion
from models.vacunas import Vacunacion


class HistorialClinico(BaseModel):
    """Historial completo de un paciente."""
    paciente: Paciente
    citas: List[Cita] = []
    consultas: List[Consulta] = []
    prescripciones: List[Prescripcion] = []
    vacunaciones: List[Vacunacion] = []
