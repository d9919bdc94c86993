"""
Servicio para la lógica de negocio de Usuarios (staff de la clínica).
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from repositories.usuario_repository import UsuarioRepository
from database.models import UsuarioORM
from database.db import hash_password
from models.usuarios import (
    UsuarioCreate,
    UsuarioUpdate,
    PasswordUpdate,
    Usuario,
    VeterinarioResumen,
    ROLES_STAFF,
)
from core.context import RequestContext
from core.exceptions import BusinessException, ValidationException, DuplicateException
from core.security import validate_uuid
from core.utils import enum_to_value, normalizar_email
from core.audit import log_accion

logger = logging.getLogger(__name__)


def to_response(usuario: UsuarioORM) -> Usuario:
    return Usuario(
        id_usuario=usuario.id,
        nombre=usuario.nombre,
        email=usuario.email,
        telefono=usuario.telefono,
        rol=usuario.rol,
        activo=usuario.activo,
        fecha_creacion=usuario.fecha_creacion,
    )


class UsuarioService(BaseService[UsuarioORM, UsuarioRepository]):
    """Alta, edición y baja de usuarios del staff."""

    def __init__(self, repository: UsuarioRepository):
        super().__init__(repository)

    def _validar_rol(self, rol) -> str:
        rol = enum_to_value(rol)
        if rol not in ROLES_STAFF:
            raise ValidationException(
                message="El rol debe ser ADMIN, VET o RECEPCION",
                field="rol"
            )
        return rol

    def _validar_email_unico(self, email: str, excluir_id: Optional[str] = None) -> None:
        existente = self.repository.find_by_email(email)
        if existente and existente.id != excluir_id:
            raise DuplicateException(resource="Usuario", field="email", value=email)

    def create_usuario(self, data: UsuarioCreate, ctx: Optional[RequestContext] = None) -> Usuario:
        """
        Crea un usuario del staff.

        Raises:
            DuplicateException: Si el email ya está registrado
            ValidationException: Si el rol no es de staff
        """
        rol = self._validar_rol(data.rol)
        email = normalizar_email(data.email)
        self._validar_email_unico(email)

        salt_hex, hash_hex = hash_password(data.password)
        usuario = UsuarioORM(
            nombre=data.nombre.strip(),
            email=email,
            telefono=data.telefono,
            rol=rol,
            password_salt=salt_hex,
            password_hash=hash_hex,
            activo=True,
        )
        user_id = ctx.user_id if ctx else None
        created = self.repository.create(usuario, user_id=user_id)
        self.repository.commit()

        log_accion("USUARIO_CREADO", "usuario", created.id, user_id, rol=rol)
        return to_response(created)

    def get_usuario(self, usuario_id: str) -> Usuario:
        validate_uuid(usuario_id, "usuario_id")
        return to_response(self.repository.get_by_id_or_fail(usuario_id))

    def get_usuarios(
        self,
        texto: Optional[str] = None,
        rol: Optional[str] = None,
        solo_activos: bool = True,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Usuario], int]:
        usuarios, total = self.repository.search(
            texto=texto,
            rol=enum_to_value(rol),
            solo_activos=solo_activos,
            page=page,
            page_size=page_size
        )
        return [to_response(u) for u in usuarios], total

    def get_veterinarios(self) -> List[VeterinarioResumen]:
        """Veterinarios activos (usado también por la reserva pública)."""
        return [
            VeterinarioResumen(id_usuario=v.id, nombre=v.nombre)
            for v in self.repository.find_veterinarios_activos()
        ]

    def update_usuario(self, usuario_id: str, data: UsuarioUpdate, ctx: RequestContext) -> Usuario:
        validate_uuid(usuario_id, "usuario_id")
        usuario = self.repository.get_by_id_or_fail(usuario_id)
        update_data = data.model_dump(exclude_unset=True)

        if "email" in update_data and update_data["email"] is not None:
            email = normalizar_email(update_data["email"])
            self._validar_email_unico(email, excluir_id=usuario.id)
            usuario.email = email
        if "rol" in update_data and update_data["rol"] is not None:
            nuevo_rol = self._validar_rol(update_data["rol"])
            if usuario.id == ctx.id and nuevo_rol != usuario.rol:
                raise BusinessException("No puedes cambiar tu propio rol")
            usuario.rol = nuevo_rol
        if "activo" in update_data and update_data["activo"] is not None:
            if usuario.id == ctx.id and not update_data["activo"]:
                raise BusinessException("No puedes desactivar tu propia cuenta")
            usuario.activo = update_data["activo"]
        for campo in ("nombre", "telefono"):
            if campo in update_data:
                setattr(usuario, campo, update_data[campo])

        updated = self.repository.update(usuario, user_id=ctx.user_id)
        self.repository.commit()
        logger.info(f"Usuario {usuario_id} actualizado")
        return to_response(updated)

    def cambiar_password(self, usuario_id: str, data: PasswordUpdate, ctx: RequestContext) -> None:
        validate_uuid(usuario_id, "usuario_id")
        usuario = self.repository.get_by_id_or_fail(usuario_id)
        usuario.password_salt, usuario.password_hash = hash_password(data.password)
        self.repository.update(usuario, user_id=ctx.user_id)
        self.repository.commit()
        log_accion("PASSWORD_CAMBIADA", "usuario", usuario.id, ctx.user_id)

    def delete_usuario(self, usuario_id: str, ctx: RequestContext) -> None:
        validate_uuid(usuario_id, "usuario_id")
        if usuario_id == ctx.id:
            raise BusinessException("No puedes eliminar tu propia cuenta")
        self.delete(usuario_id, user_id=ctx.user_id)
        log_accion("USUARIO_DESACTIVADO", "usuario", usuario_id, ctx.user_id)

    def restore_usuario(self, usuario_id: str, ctx: RequestContext) -> Usuario:
        validate_uuid(usuario_id, "usuario_id")
        return to_response(self.restore(usuario_id, user_id=ctx.user_id))
