"""
Servicio para los indicadores del dashboard del staff.
"""
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from database.models import PacienteORM, PropietarioORM
from repositories.cita_repository import CitaRepository
from repositories.paciente_repository import PacienteRepository
from repositories.consulta_repository import PrescripcionRepository
from repositories.inventario_repository import ProductoRepository
from repositories.vacuna_repository import VacunacionRepository
from models.citas import EstadoCita
from models.dashboard import Dashboard, Conteo
from services.cita_service import to_response as cita_to_response, ESTADOS_ACTIVOS
from utils.datetime_utils import get_local_naive_now, get_local_today
import logging

logger = logging.getLogger(__name__)

DIAS_VACUNACIONES_PROXIMAS = 30


class DashboardService:
    """Calcula los indicadores de la pantalla principal."""

    def __init__(self, db: Session):
        self.db = db
        self.cita_repo = CitaRepository(db)
        self.paciente_repo = PacienteRepository(db)
        self.prescripcion_repo = PrescripcionRepository(db)
        self.producto_repo = ProductoRepository(db)
        self.vacunacion_repo = VacunacionRepository(db)

    def get_dashboard(self) -> Dashboard:
        ahora = get_local_naive_now()
        hoy = get_local_today()
        inicio_dia = datetime.combine(hoy, datetime.min.time())
        inicio_mes = inicio_dia.replace(day=1)

        # Citas de hoy que no fueron canceladas
        citas_hoy = self.cita_repo.count_en_rango(
            inicio_dia,
            inicio_dia + timedelta(days=1),
            estados=[e.value for e in EstadoCita if e != EstadoCita.CANCELADA]
        )

        pacientes_activos = self.db.query(PacienteORM).filter(PacienteORM.activo == True).count()
        total_propietarios = self.db.query(PropietarioORM).filter(PropietarioORM.activo == True).count()

        return Dashboard(
            citas_hoy=citas_hoy,
            citas_pendientes=self.cita_repo.count_desde(ahora, list(ESTADOS_ACTIVOS)),
            pacientes_activos=pacientes_activos,
            total_propietarios=total_propietarios,
            vacunaciones_proximas=self.vacunacion_repo.count_proximas(
                hoy, hoy + timedelta(days=DIAS_VACUNACIONES_PROXIMAS)
            ),
            vacunaciones_vencidas=self.vacunacion_repo.count_vencidas(hoy),
            productos_stock_bajo=self.producto_repo.count_stock_bajo(),
            prescripciones_mes=self.prescripcion_repo.count_desde(inicio_mes),
            proximas_citas=[cita_to_response(c) for c in self.cita_repo.find_proximas(ahora, limit=5)],
            citas_por_estado=[
                Conteo(etiqueta=estado, cantidad=cantidad)
                for estado, cantidad in self.cita_repo.count_por_estado()
            ],
            distribucion_especies=[
                Conteo(etiqueta=especie, cantidad=cantidad)
                for especie, cantidad in self.paciente_repo.count_by_especie()
            ],
        )
