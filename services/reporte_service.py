"""
Servicio de reportes por periodo (hoy, semana, mes, año).
"""
from datetime import datetime, timedelta
from typing import List, Tuple
from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session
from sqlalchemy import func

from database.models import CitaORM, ConsultaORM, PacienteORM, UsuarioORM
from models.dashboard import Periodo, Reporte, TotalesReporte, Conteo
from models.usuarios import Role
from utils.datetime_utils import get_local_today
import logging

logger = logging.getLogger(__name__)

MESES_TENDENCIA = 6
TOP_MOTIVOS = 5


def rango_periodo(periodo: Periodo, hoy=None) -> Tuple[datetime, datetime]:
    """
    Rango [desde, hasta) del periodo que contiene a `hoy`.

    La semana empieza el lunes.
    """
    hoy = hoy or get_local_today()
    inicio_dia = datetime.combine(hoy, datetime.min.time())

    if periodo == Periodo.hoy:
        return inicio_dia, inicio_dia + timedelta(days=1)
    if periodo == Periodo.semana:
        desde = inicio_dia - timedelta(days=hoy.weekday())
        return desde, desde + timedelta(days=7)
    if periodo == Periodo.mes:
        desde = inicio_dia.replace(day=1)
        return desde, desde + relativedelta(months=1)
    desde = inicio_dia.replace(month=1, day=1)
    return desde, desde + relativedelta(years=1)


def _conteos(filas) -> List[Conteo]:
    return [Conteo(etiqueta=str(etiqueta or "-"), cantidad=cantidad) for etiqueta, cantidad in filas]


class ReporteService:
    """Consultas agregadas para reportes del staff."""

    def __init__(self, db: Session):
        self.db = db

    def _citas_en_rango(self, desde: datetime, hasta: datetime):
        return self.db.query(CitaORM).filter(CitaORM.fecha >= desde, CitaORM.fecha < hasta)

    def tendencia_citas(self, hoy=None) -> List[Conteo]:
        """Citas por mes en los últimos meses, incluido el actual (etiqueta YYYY-MM)."""
        hoy = hoy or get_local_today()
        inicio_mes = datetime.combine(hoy.replace(day=1), datetime.min.time())
        tendencia = []
        for atras in range(MESES_TENDENCIA - 1, -1, -1):
            desde = inicio_mes - relativedelta(months=atras)
            hasta = desde + relativedelta(months=1)
            tendencia.append(Conteo(
                etiqueta=desde.strftime("%Y-%m"),
                cantidad=self._citas_en_rango(desde, hasta).count()
            ))
        return tendencia

    def get_reporte(self, periodo: Periodo) -> Reporte:
        desde, hasta = rango_periodo(periodo)
        logger.debug(f"Generando reporte {periodo.value}: {desde} - {hasta}")

        citas_por_estado = (
            self.db.query(CitaORM.estado, func.count(CitaORM.id))
            .filter(CitaORM.fecha >= desde, CitaORM.fecha < hasta)
            .group_by(CitaORM.estado)
            .all()
        )
        consultas = self.db.query(ConsultaORM).filter(
            ConsultaORM.fecha >= desde, ConsultaORM.fecha < hasta
        ).count()
        pacientes_nuevos = self.db.query(PacienteORM).filter(
            PacienteORM.fecha_creacion >= desde, PacienteORM.fecha_creacion < hasta
        ).count()
        veterinarios_activos = self.db.query(UsuarioORM).filter(
            UsuarioORM.rol == Role.VET.value, UsuarioORM.activo == True
        ).count()

        pacientes_por_especie = (
            self.db.query(PacienteORM.especie, func.count(PacienteORM.id))
            .filter(PacienteORM.activo == True)
            .group_by(PacienteORM.especie)
            .order_by(func.count(PacienteORM.id).desc())
            .all()
        )
        atenciones_por_veterinario = (
            self.db.query(UsuarioORM.nombre, func.count(ConsultaORM.id))
            .join(ConsultaORM, ConsultaORM.id_profesional == UsuarioORM.id)
            .filter(ConsultaORM.fecha >= desde, ConsultaORM.fecha < hasta)
            .group_by(UsuarioORM.nombre)
            .order_by(func.count(ConsultaORM.id).desc())
            .all()
        )
        motivos_frecuentes = (
            self.db.query(CitaORM.motivo, func.count(CitaORM.id))
            .filter(CitaORM.fecha >= desde, CitaORM.fecha < hasta)
            .group_by(CitaORM.motivo)
            .order_by(func.count(CitaORM.id).desc())
            .limit(TOP_MOTIVOS)
            .all()
        )

        return Reporte(
            periodo=periodo,
            desde=desde.date().isoformat(),
            hasta=(hasta - timedelta(days=1)).date().isoformat(),
            totales=TotalesReporte(
                citas=sum(cantidad for _, cantidad in citas_por_estado),
                consultas=consultas,
                pacientes_nuevos=pacientes_nuevos,
                veterinarios_activos=veterinarios_activos,
            ),
            citas_por_estado=_conteos(citas_por_estado),
            tendencia_citas=self.tendencia_citas(),
            pacientes_por_especie=_conteos(pacientes_por_especie),
            atenciones_por_veterinario=_conteos(atenciones_por_veterinario),
            motivos_frecuentes=_conteos(motivos_frecuentes),
        )
