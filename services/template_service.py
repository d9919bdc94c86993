"""
Servicio de plantillas reutilizables para consultas y prescripciones.

Las plantillas precargan el texto clínico habitual de un caso (control anual,
postoperatorio, esquema de antibiótico...). `usar` devuelve la plantilla y
lleva la cuenta de cuántas veces se aplicó.
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from repositories.template_repository import TemplateConsultaRepository, TemplatePrescripcionRepository
from database.models import TemplateConsultaORM, TemplatePrescripcionORM, ItemTemplatePrescripcionORM
from models.consultas import ItemPrescripcionCreate
from models.templates import (
    TemplateConsulta,
    TemplateConsultaCreate,
    TemplateConsultaUpdate,
    TemplatePrescripcion,
    TemplatePrescripcionCreate,
    TemplatePrescripcionUpdate,
)
from core.context import RequestContext
from core.security import validate_uuid
from core.utils import enum_to_value

logger = logging.getLogger(__name__)


def consulta_to_response(template: TemplateConsultaORM) -> TemplateConsulta:
    return TemplateConsulta(
        id_template=template.id,
        nombre=template.nombre,
        descripcion=template.descripcion,
        categoria=template.categoria,
        examen_fisico=template.examen_fisico,
        diagnostico=template.diagnostico,
        tratamiento=template.tratamiento,
        observaciones=template.observaciones,
        veces_usado=template.veces_usado or 0,
        activo=template.activo,
        id_usuario_creacion=template.id_usuario_creacion,
        fecha_creacion=template.fecha_creacion,
    )


def prescripcion_to_response(template: TemplatePrescripcionORM) -> TemplatePrescripcion:
    return TemplatePrescripcion(
        id_template=template.id,
        nombre=template.nombre,
        descripcion=template.descripcion,
        categoria=template.categoria,
        indicaciones_generales=template.indicaciones_generales,
        items=[
            ItemPrescripcionCreate(
                medicamento=item.medicamento,
                presentacion=item.presentacion,
                dosis=item.dosis,
                frecuencia=item.frecuencia,
                duracion_dias=item.duracion_dias,
                via_administracion=item.via_administracion,
                indicaciones=item.indicaciones,
            )
            for item in template.items
        ],
        veces_usado=template.veces_usado or 0,
        activo=template.activo,
        id_usuario_creacion=template.id_usuario_creacion,
        fecha_creacion=template.fecha_creacion,
    )


def _items_template(items: List[ItemPrescripcionCreate]) -> List[ItemTemplatePrescripcionORM]:
    # el orden de envío se conserva en `orden`
    return [
        ItemTemplatePrescripcionORM(
            medicamento=item.medicamento.strip(),
            presentacion=item.presentacion,
            dosis=item.dosis,
            frecuencia=item.frecuencia,
            duracion_dias=item.duracion_dias,
            via_administracion=enum_to_value(item.via_administracion),
            indicaciones=item.indicaciones,
            orden=posicion,
        )
        for posicion, item in enumerate(items)
    ]


class TemplateConsultaService(BaseService[TemplateConsultaORM, TemplateConsultaRepository]):

    def create_template(self, data: TemplateConsultaCreate, ctx: RequestContext) -> TemplateConsulta:
        template = TemplateConsultaORM(veces_usado=0, activo=True, **data.model_dump())
        template.nombre = template.nombre.strip()
        created = self.repository.create(template, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Template de consulta '{created.nombre}' creado por {ctx.id}")
        return consulta_to_response(created)

    def get_template(self, template_id: str) -> TemplateConsulta:
        validate_uuid(template_id, "template_id")
        return consulta_to_response(self.repository.get_by_id_or_fail(template_id))

    def get_templates(self, categoria: Optional[str] = None, texto: Optional[str] = None) -> List[TemplateConsulta]:
        return [consulta_to_response(t) for t in self.repository.search(categoria, texto)]

    def get_categorias(self) -> List[str]:
        return self.repository.categorias()

    def update_template(self, template_id: str, data: TemplateConsultaUpdate, ctx: RequestContext) -> TemplateConsulta:
        validate_uuid(template_id, "template_id")
        template = self.repository.get_by_id_or_fail(template_id)
        self.validate_activo(template)

        for campo, valor in data.model_dump(exclude_unset=True).items():
            if valor is None and campo == "nombre":
                continue
            setattr(template, campo, valor)

        updated = self.repository.update(template, user_id=ctx.user_id)
        self.repository.commit()
        return consulta_to_response(updated)

    def delete_template(self, template_id: str, ctx: RequestContext) -> None:
        validate_uuid(template_id, "template_id")
        self.delete(template_id, user_id=ctx.user_id)

    def usar(self, template_id: str) -> TemplateConsulta:
        validate_uuid(template_id, "template_id")
        template = self.repository.get_by_id_or_fail(template_id)
        self.validate_activo(template)
        template.veces_usado = (template.veces_usado or 0) + 1
        updated = self.repository.update(template)
        self.repository.commit()
        return consulta_to_response(updated)


class TemplatePrescripcionService(BaseService[TemplatePrescripcionORM, TemplatePrescripcionRepository]):

    def create_template(self, data: TemplatePrescripcionCreate, ctx: RequestContext) -> TemplatePrescripcion:
        template = TemplatePrescripcionORM(
            nombre=data.nombre.strip(),
            descripcion=data.descripcion,
            categoria=data.categoria,
            indicaciones_generales=data.indicaciones_generales,
            veces_usado=0,
            activo=True,
        )
        template.items = _items_template(data.items)
        created = self.repository.create(template, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Template de prescripción '{created.nombre}' creado con {len(data.items)} medicamentos")
        return prescripcion_to_response(created)

    def get_template(self, template_id: str) -> TemplatePrescripcion:
        validate_uuid(template_id, "template_id")
        return prescripcion_to_response(self.repository.get_by_id_or_fail(template_id))

    def get_templates(self, categoria: Optional[str] = None, texto: Optional[str] = None) -> List[TemplatePrescripcion]:
        return [prescripcion_to_response(t) for t in self.repository.search(categoria, texto)]

    def get_categorias(self) -> List[str]:
        return self.repository.categorias()

    def update_template(
        self, template_id: str, data: TemplatePrescripcionUpdate, ctx: RequestContext
    ) -> TemplatePrescripcion:
        """Si vienen items, reemplazan a los anteriores."""
        validate_uuid(template_id, "template_id")
        template = self.repository.get_by_id_or_fail(template_id)
        self.validate_activo(template)

        for campo, valor in data.model_dump(exclude_unset=True, exclude={"items"}).items():
            if valor is None and campo == "nombre":
                continue
            setattr(template, campo, valor)
        if data.items:
            template.items = _items_template(data.items)

        updated = self.repository.update(template, user_id=ctx.user_id)
        self.repository.commit()
        return prescripcion_to_response(updated)

    def delete_template(self, template_id: str, ctx: RequestContext) -> None:
        validate_uuid(template_id, "template_id")
        self.delete(template_id, user_id=ctx.user_id)

    def usar(self, template_id: str) -> TemplatePrescripcion:
        validate_uuid(template_id, "template_id")
        template = self.repository.get_by_id_or_fail(template_id)
        self.validate_activo(template)
        template.veces_usado = (template.veces_usado or 0) + 1
        updated = self.repository.update(template)
        self.repository.commit()
        return prescripcion_to_response(updated)
