"""
Dashboard del staff y reportes por periodo.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from models.dashboard import Dashboard, Reporte, Periodo
from models.usuarios import Role, ROLES_STAFF
from core.context import RequestContext
from services.dashboard_service import DashboardService
from services.reporte_service import ReporteService
from database.db import get_db
from auth import require_roles

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
reportes_router = APIRouter(prefix="/reportes", tags=["reportes"])


@router.get("/", response_model=Dashboard)
async def obtener_dashboard(
    ctx: RequestContext = Depends(require_roles(*ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    """Indicadores de la pantalla principal (todo el staff)."""
    return DashboardService(db).get_dashboard()


@reportes_router.get("/", response_model=Reporte)
async def obtener_reporte(
    periodo: Periodo = Query(Periodo.mes, description="hoy, semana, mes o anio"),
    ctx: RequestContext = Depends(require_roles(Role.ADMIN.value, Role.VET.value)),
    db: Session = Depends(get_db),
):
    return ReporteService(db).get_reporte(periodo)
