"""
Modelos del dashboard y de los reportes por periodo.
"""
from pydantic import BaseModel, Field
from typing import List
from enum import Enum

from models.citas import Cita


class Periodo(str, Enum):
    hoy = "hoy"
    semana = "semana"
    mes = "mes"
    anio = "anio"


class Conteo(BaseModel):
    """Par etiqueta/cantidad para gráficos."""
    etiqueta: str
    cantidad: int


class Dashboard(BaseModel):
    """Indicadores de la pantalla principal del staff."""
    citas_hoy: int = Field(..., description="Citas no canceladas de hoy")
    citas_pendientes: int = Field(..., description="Citas pendientes o confirmadas desde ahora")
    pacientes_activos: int
    total_propietarios: int
    vacunaciones_proximas: int = Field(..., description="Dosis que vencen en los próximos 30 días")
    vacunaciones_vencidas: int
    productos_stock_bajo: int
    prescripciones_mes: int
    proximas_citas: List[Cita] = []
    citas_por_estado: List[Conteo] = []
    distribucion_especies: List[Conteo] = []


class TotalesReporte(BaseModel):
    citas: int
    consultas: int
    pacientes_nuevos: int
    veterinarios_activos: int


class Reporte(BaseModel):
    """Reporte general para un periodo."""
    periodo: Periodo
    desde: str
    hasta: str
    totales: TotalesReporte
    citas_por_estado: List[Conteo] = []
    tendencia_citas: List[Conteo] = Field([], description="Citas por mes, últimos 6 meses")
    pacientes_por_especie: List[Conteo] = []
    atenciones_por_veterinario: List[Conteo] = []
    motivos_frecuentes: List[Conteo] = []
