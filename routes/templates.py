"""
Rutas de plantillas de consulta y de prescripción.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from sqlalchemy.orm import Session

from models.templates import (
    TemplateConsulta,
    TemplateConsultaCreate,
    TemplateConsultaUpdate,
    TemplatePrescripcion,
    TemplatePrescripcionCreate,
    TemplatePrescripcionUpdate,
)
from models.usuarios import Role
from models.common import create_delete_response
from core.context import RequestContext
from services.template_service import TemplateConsultaService, TemplatePrescripcionService
from repositories.template_repository import TemplateConsultaRepository, TemplatePrescripcionRepository
from database.db import get_db
from auth import require_roles

ROLES_CLINICOS = (Role.ADMIN.value, Role.VET.value)

router = APIRouter(prefix="/templates/consultas", tags=["templates"])
prescripciones_router = APIRouter(prefix="/templates/prescripciones", tags=["templates"])


def get_template_consulta_service(db: Session = Depends(get_db)) -> TemplateConsultaService:
    return TemplateConsultaService(TemplateConsultaRepository(db))


def get_template_prescripcion_service(db: Session = Depends(get_db)) -> TemplatePrescripcionService:
    return TemplatePrescripcionService(TemplatePrescripcionRepository(db))


# ==================== Consultas ====================

@router.get("/", response_model=List[TemplateConsulta])
async def listar_templates_consulta(
    categoria: Optional[str] = Query(None),
    texto: Optional[str] = Query(None, description="Busca en nombre y descripción"),
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplateConsultaService = Depends(get_template_consulta_service),
):
    return service.get_templates(categoria, texto)


@router.get("/categorias", response_model=List[str])
async def categorias_templates_consulta(
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplateConsultaService = Depends(get_template_consulta_service),
):
    return service.get_categorias()


@router.get("/{template_id}", response_model=TemplateConsulta)
async def obtener_template_consulta(
    template_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplateConsultaService = Depends(get_template_consulta_service),
):
    return service.get_template(template_id)


@router.post("/", response_model=TemplateConsulta, status_code=status.HTTP_201_CREATED)
async def crear_template_consulta(
    data: TemplateConsultaCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplateConsultaService = Depends(get_template_consulta_service),
):
    return service.create_template(data, ctx)


@router.put("/{template_id}", response_model=TemplateConsulta)
async def actualizar_template_consulta(
    template_id: str,
    data: TemplateConsultaUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplateConsultaService = Depends(get_template_consulta_service),
):
    return service.update_template(template_id, data, ctx)


@router.delete("/{template_id}")
async def eliminar_template_consulta(
    template_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplateConsultaService = Depends(get_template_consulta_service),
):
    service.delete_template(template_id, ctx)
    return create_delete_response("Template de consulta desactivado", template_id)


@router.post("/{template_id}/usar", response_model=TemplateConsulta)
async def usar_template_consulta(
    template_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplateConsultaService = Depends(get_template_consulta_service),
):
    """Devuelve la plantilla para precargar una consulta y suma un uso."""
    return service.usar(template_id)


# ==================== Prescripciones ====================

@prescripciones_router.get("/", response_model=List[TemplatePrescripcion])
async def listar_templates_prescripcion(
    categoria: Optional[str] = Query(None),
    texto: Optional[str] = Query(None, description="Busca en nombre y descripción"),
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplatePrescripcionService = Depends(get_template_prescripcion_service),
):
    return service.get_templates(categoria, texto)


@prescripciones_router.get("/categorias", response_model=List[str])
async def categorias_templates_prescripcion(
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplatePrescripcionService = Depends(get_template_prescripcion_service),
):
    return service.get_categorias()


@prescripciones_router.get("/{template_id}", response_model=TemplatePrescripcion)
async def obtener_template_prescripcion(
    template_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplatePrescripcionService = Depends(get_template_prescripcion_service),
):
    return service.get_template(template_id)


@prescripciones_router.post("/", response_model=TemplatePrescripcion, status_code=status.HTTP_201_CREATED)
async def crear_template_prescripcion(
    data: TemplatePrescripcionCreate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplatePrescripcionService = Depends(get_template_prescripcion_service),
):
    return service.create_template(data, ctx)


@prescripciones_router.put("/{template_id}", response_model=TemplatePrescripcion)
async def actualizar_template_prescripcion(
    template_id: str,
    data: TemplatePrescripcionUpdate,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplatePrescripcionService = Depends(get_template_prescripcion_service),
):
    return service.update_template(template_id, data, ctx)


@prescripciones_router.delete("/{template_id}")
async def eliminar_template_prescripcion(
    template_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplatePrescripcionService = Depends(get_template_prescripcion_service),
):
    service.delete_template(template_id, ctx)
    return create_delete_response("Template de prescripción desactivado", template_id)


@prescripciones_router.post("/{template_id}/usar", response_model=TemplatePrescripcion)
async def usar_template_prescripcion(
    template_id: str,
    ctx: RequestContext = Depends(require_roles(*ROLES_CLINICOS)),
    service: TemplatePrescripcionService = Depends(get_template_prescripcion_service),
):
    return service.usar(template_id)
