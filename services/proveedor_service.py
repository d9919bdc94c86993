"""
Servicio de Proveedores del inventario.
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from repositories.proveedor_repository import ProveedorRepository
from database.models import ProveedorORM
from models.proveedores import Proveedor, ProveedorCreate, ProveedorUpdate
from core.context import RequestContext
from core.exceptions import DuplicateException
from core.security import validate_uuid
from core.audit import log_accion
from core.utils import normalizar_email

logger = logging.getLogger(__name__)


def to_response(proveedor: ProveedorORM, productos_activos: int = 0) -> Proveedor:
    return Proveedor(
        id_proveedor=proveedor.id,
        nombre=proveedor.nombre,
        ruc=proveedor.ruc,
        email=proveedor.email,
        telefono=proveedor.telefono,
        direccion=proveedor.direccion,
        notas=proveedor.notas,
        activo=proveedor.activo,
        productos_activos=productos_activos,
        fecha_creacion=proveedor.fecha_creacion,
    )


class ProveedorService(BaseService[ProveedorORM, ProveedorRepository]):

    def _validar_unicos(self, email: Optional[str], ruc: Optional[str], excluir_id: Optional[str] = None) -> None:
        """
        Raises:
            DuplicateException: Si el email o el RUC ya pertenecen a otro proveedor
        """
        if email:
            existente = self.repository.find_by_email(email)
            if existente and existente.id != excluir_id:
                raise DuplicateException(resource="Proveedor", field="email", value=email)
        if ruc:
            existente = self.repository.find_by_ruc(ruc)
            if existente and existente.id != excluir_id:
                raise DuplicateException(resource="Proveedor", field="ruc", value=ruc)

    def _response(self, proveedor: ProveedorORM) -> Proveedor:
        return to_response(proveedor, self.repository.count_productos_activos(proveedor.id))

    def create_proveedor(self, data: ProveedorCreate, ctx: RequestContext) -> Proveedor:
        email = normalizar_email(data.email)
        ruc = data.ruc.strip() if data.ruc else None
        self._validar_unicos(email, ruc)

        proveedor = ProveedorORM(
            nombre=data.nombre.strip(),
            ruc=ruc,
            email=email,
            telefono=data.telefono,
            direccion=data.direccion,
            notas=data.notas,
            activo=True,
        )
        created = self.repository.create(proveedor, user_id=ctx.user_id)
        self.repository.commit()
        log_accion("PROVEEDOR_CREADO", "proveedor", created.id, ctx.user_id, nombre=created.nombre)
        return to_response(created)

    def get_proveedor(self, proveedor_id: str) -> Proveedor:
        validate_uuid(proveedor_id, "proveedor_id")
        return self._response(self.repository.get_by_id_or_fail(proveedor_id))

    def get_proveedores(
        self,
        texto: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Proveedor], int]:
        proveedores, total = self.repository.search(
            texto=texto, solo_activos=solo_activos, page=page, page_size=page_size
        )
        return [self._response(p) for p in proveedores], total

    def update_proveedor(self, proveedor_id: str, data: ProveedorUpdate, ctx: RequestContext) -> Proveedor:
        validate_uuid(proveedor_id, "proveedor_id")
        proveedor = self.repository.get_by_id_or_fail(proveedor_id)
        self.validate_activo(proveedor)

        update_data = data.model_dump(exclude_unset=True)
        if "email" in update_data:
            update_data["email"] = normalizar_email(update_data["email"])
        if update_data.get("ruc"):
            update_data["ruc"] = update_data["ruc"].strip()
        self._validar_unicos(update_data.get("email"), update_data.get("ruc"), excluir_id=proveedor.id)

        for campo, valor in update_data.items():
            if valor is None and campo == "nombre":
                continue
            setattr(proveedor, campo, valor)

        updated = self.repository.update(proveedor, user_id=ctx.user_id)
        self.repository.commit()
        return self._response(updated)

    def delete_proveedor(self, proveedor_id: str, ctx: RequestContext) -> None:
        """Baja lógica; los productos conservan la referencia."""
        validate_uuid(proveedor_id, "proveedor_id")
        self.delete(proveedor_id, user_id=ctx.user_id)
        log_accion("PROVEEDOR_DESACTIVADO", "proveedor", proveedor_id, ctx.user_id)
