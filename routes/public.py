"""
Endpoints públicos (sin autenticación) para la reserva de citas en línea.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List
from datetime import date
from sqlalchemy.orm import Session

from models.citas import Cita, CitaPublicaCreate, Disponibilidad
from models.usuarios import VeterinarioResumen
from services.cita_service import CitaService
from services.usuario_service import UsuarioService
from repositories.usuario_repository import UsuarioRepository
from routes.citas import get_cita_service
from database.db import get_db

router = APIRouter(prefix="/public", tags=["public"])


def get_usuario_service(db: Session = Depends(get_db)) -> UsuarioService:
    return UsuarioService(UsuarioRepository(db))


@router.get("/veterinarios", response_model=List[VeterinarioResumen])
async def veterinarios(service: UsuarioService = Depends(get_usuario_service)):
    return service.get_veterinarios()


@router.get("/disponibilidad/{id_profesional}", response_model=Disponibilidad)
async def disponibilidad(
    id_profesional: str,
    dia: date = Query(..., description="Día a consultar (YYYY-MM-DD)"),
    service: CitaService = Depends(get_cita_service),
):
    return service.get_disponibilidad(id_profesional, dia)


@router.post("/citas", response_model=Cita, status_code=status.HTTP_201_CREATED)
async def reservar_cita(
    data: CitaPublicaCreate,
    service: CitaService = Depends(get_cita_service),
):
    """
    Reserva con propietario y paciente existentes, o con los datos de ambos nuevos.
    Si el email del propietario nuevo ya existe se reutiliza ese propietario.
    """
    return service.reservar_publica(data)
