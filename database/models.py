from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, DateTime, Float, Text, ForeignKey, Date, Boolean
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def gen_uuid_str():
    return str(uuid4())


def get_current_time() -> datetime:
    """Hora local configurada, sin tzinfo (así se guarda en BD)."""
    from utils.datetime_utils import get_local_now
    return get_local_now().replace(tzinfo=None)


class AuditoriaMixin:
    """Campos de auditoría comunes a todas las tablas."""
    id_usuario_creacion = Column(String(36), nullable=True)
    id_usuario_actualizacion = Column(String(36), nullable=True)
    fecha_creacion = Column(DateTime, default=get_current_time)
    fecha_actualizacion = Column(DateTime, default=get_current_time, onupdate=get_current_time)


class ActivoMixin:
    """Borrado lógico: el registro se conserva y se marca inactivo."""
    activo = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(String(36), nullable=True)


#ORM: Usuarios (staff)
class UsuarioORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "usuarios"
    #columna en DB: id_usuario, atributo python: id
    id = Column("id_usuario", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(200), nullable=False)
    email = Column(String(150), nullable=False, unique=True, index=True)
    telefono = Column(String(20), nullable=True)
    rol = Column(String(20), nullable=False, default="RECEPCION")
    password_salt = Column(String(64), nullable=False)
    password_hash = Column(String(128), nullable=False)


#ORM: Propietarios (clientes)
class PropietarioORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "propietarios"
    id = Column("id_propietario", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(200), nullable=False)
    documento = Column(String(30), nullable=True, unique=True)
    email = Column(String(150), nullable=True, unique=True, index=True)
    telefono = Column(String(20), nullable=True)
    direccion = Column(String(300), nullable=True)
    #acceso al portal de clientes (opcional)
    password_salt = Column(String(64), nullable=True)
    password_hash = Column(String(128), nullable=True)

    pacientes = relationship("PacienteORM", back_populates="propietario", lazy="select")


#ORM: Pacientes
class PacienteORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "pacientes"
    id = Column("id_paciente", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(100), nullable=False)
    especie = Column(String(50), nullable=False)
    raza = Column(String(100), nullable=True)
    sexo = Column(String(10), nullable=True)
    edad_meses = Column(Integer, nullable=True)
    peso_kg = Column(Float, nullable=True)
    microchip = Column(String(50), nullable=True, unique=True)
    notas = Column(Text, nullable=True)
    id_propietario = Column(String(36), ForeignKey("propietarios.id_propietario"), nullable=False)

    propietario = relationship("PropietarioORM", back_populates="pacientes", lazy="select")


#ORM: Citas
class CitaORM(AuditoriaMixin, Base):
    __tablename__ = "citas"
    id = Column("id_cita", String(36), primary_key=True, default=gen_uuid_str)
    fecha = Column(DateTime, nullable=False, index=True)
    motivo = Column(String(300), nullable=False)
    observaciones = Column(Text, nullable=True)
    estado = Column(String(20), nullable=False, default="PENDIENTE")
    id_paciente = Column(String(36), ForeignKey("pacientes.id_paciente"), nullable=False)
    id_propietario = Column(String(36), ForeignKey("propietarios.id_propietario"), nullable=False)
    id_profesional = Column(String(36), ForeignKey("usuarios.id_usuario"), nullable=False)

    paciente = relationship("PacienteORM", lazy="select")
    propietario = relationship("PropietarioORM", lazy="select")
    profesional = relationship("UsuarioORM", lazy="select")


#ORM: Consultas
class ConsultaORM(AuditoriaMixin, Base):
    __tablename__ = "consultas"
    id = Column("id_consulta", String(36), primary_key=True, default=gen_uuid_str)
    fecha = Column(DateTime, nullable=False, default=get_current_time)
    frecuencia_cardiaca = Column(Integer, nullable=True)
    frecuencia_respiratoria = Column(Integer, nullable=True)
    temperatura = Column(Float, nullable=True)
    peso_kg = Column(Float, nullable=True)
    examen_fisico = Column(Text, nullable=True)
    diagnostico = Column(Text, nullable=True)
    tratamiento = Column(Text, nullable=True)
    observaciones = Column(Text, nullable=True)
    id_paciente = Column(String(36), ForeignKey("pacientes.id_paciente"), nullable=False)
    id_profesional = Column(String(36), ForeignKey("usuarios.id_usuario"), nullable=False)
    id_cita = Column(String(36), ForeignKey("citas.id_cita"), nullable=True)

    paciente = relationship("PacienteORM", lazy="select")
    profesional = relationship("UsuarioORM", lazy="select")


#ORM: Prescripciones
class PrescripcionORM(AuditoriaMixin, Base):
    __tablename__ = "prescripciones"
    id = Column("id_prescripcion", String(36), primary_key=True, default=gen_uuid_str)
    fecha_emision = Column(DateTime, nullable=False, default=get_current_time)
    indicaciones_generales = Column(Text, nullable=True)
    id_consulta = Column(String(36), ForeignKey("consultas.id_consulta"), nullable=False)

    consulta = relationship("ConsultaORM", lazy="select")
    #líneas de medicamentos
    items = relationship(
        "ItemPrescripcionORM",
        backref="prescripcion",
        cascade="all, delete-orphan",
        lazy="select",
    )


class ItemPrescripcionORM(Base):
    __tablename__ = "items_prescripcion"
    id = Column("id_item_prescripcion", String(36), primary_key=True, default=gen_uuid_str)
    id_prescripcion = Column(String(36), ForeignKey("prescripciones.id_prescripcion"), nullable=False)
    medicamento = Column(String(200), nullable=False)
    presentacion = Column(String(100), nullable=True)
    dosis = Column(String(100), nullable=False)
    frecuencia = Column(String(100), nullable=False)
    duracion_dias = Column(Integer, nullable=True)
    via_administracion = Column(String(20), nullable=True)
    indicaciones = Column(Text, nullable=True)


#ORM: Plantillas de consulta y de prescripción
class TemplateConsultaORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "templates_consulta"
    id = Column("id_template", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(200), nullable=False)
    descripcion = Column(String(500), nullable=True)
    categoria = Column(String(100), nullable=True, index=True)
    examen_fisico = Column(Text, nullable=True)
    diagnostico = Column(Text, nullable=True)
    tratamiento = Column(Text, nullable=True)
    observaciones = Column(Text, nullable=True)
    veces_usado = Column(Integer, nullable=False, default=0)


class TemplatePrescripcionORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "templates_prescripcion"
    id = Column("id_template", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(200), nullable=False)
    descripcion = Column(String(500), nullable=True)
    categoria = Column(String(100), nullable=True, index=True)
    indicaciones_generales = Column(Text, nullable=True)
    veces_usado = Column(Integer, nullable=False, default=0)

    items = relationship(
        "ItemTemplatePrescripcionORM",
        backref="template",
        cascade="all, delete-orphan",
        order_by="ItemTemplatePrescripcionORM.orden",
        lazy="select",
    )


class ItemTemplatePrescripcionORM(Base):
    __tablename__ = "items_template_prescripcion"
    id = Column("id_item_template", String(36), primary_key=True, default=gen_uuid_str)
    id_template = Column(String(36), ForeignKey("templates_prescripcion.id_template"), nullable=False)
    medicamento = Column(String(200), nullable=False)
    presentacion = Column(String(100), nullable=True)
    dosis = Column(String(100), nullable=False)
    frecuencia = Column(String(100), nullable=False)
    duracion_dias = Column(Integer, nullable=True)
    via_administracion = Column(String(20), nullable=True)
    indicaciones = Column(Text, nullable=True)
    orden = Column(Integer, nullable=False, default=0)


#ORM: Facturas
class FacturaORM(AuditoriaMixin, Base):
    __tablename__ = "facturas"
    id = Column("id_factura", String(36), primary_key=True, default=gen_uuid_str)
    numero = Column(String(30), nullable=False, unique=True)
    fecha = Column(DateTime, nullable=False, default=get_current_time)
    fecha_vencimiento = Column(Date, nullable=True)
    subtotal = Column(Float, nullable=False, default=0)
    descuento = Column(Float, nullable=False, default=0)
    impuesto = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)
    monto_pagado = Column(Float, nullable=False, default=0)
    estado = Column(String(20), nullable=False, default="PENDIENTE")
    observaciones = Column(Text, nullable=True)
    id_propietario = Column(String(36), ForeignKey("propietarios.id_propietario"), nullable=False)
    id_consulta = Column(String(36), ForeignKey("consultas.id_consulta"), nullable=True, unique=True)

    propietario = relationship("PropietarioORM", lazy="select")
    items = relationship(
        "ItemFacturaORM",
        backref="factura",
        cascade="all, delete-orphan",
        order_by="ItemFacturaORM.orden",
        lazy="select",
    )
    pagos = relationship(
        "PagoORM",
        backref="factura",
        cascade="all, delete-orphan",
        order_by="PagoORM.fecha_pago",
        lazy="select",
    )


class ItemFacturaORM(Base):
    __tablename__ = "items_factura"
    id = Column("id_item_factura", String(36), primary_key=True, default=gen_uuid_str)
    id_factura = Column(String(36), ForeignKey("facturas.id_factura"), nullable=False)
    descripcion = Column(String(300), nullable=False)
    tipo_item = Column(String(20), nullable=False, default="SERVICIO")
    codigo_producto = Column(String(50), nullable=True)
    cantidad = Column(Integer, nullable=False, default=1)
    precio_unitario = Column(Float, nullable=False)
    descuento = Column(Float, nullable=False, default=0)
    subtotal = Column(Float, nullable=False)
    orden = Column(Integer, nullable=False, default=0)


class PagoORM(Base):
    __tablename__ = "pagos"
    id = Column("id_pago", String(36), primary_key=True, default=gen_uuid_str)
    id_factura = Column(String(36), ForeignKey("facturas.id_factura"), nullable=False)
    monto = Column(Float, nullable=False)
    fecha_pago = Column(DateTime, nullable=False, default=get_current_time)
    metodo_pago = Column(String(20), nullable=False)
    referencia = Column(String(100), nullable=True)
    observaciones = Column(Text, nullable=True)
    id_usuario = Column(String(36), ForeignKey("usuarios.id_usuario"), nullable=True)


#ORM: Inventario
class CategoriaProductoORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "categorias_producto"
    id = Column("id_categoria", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(100), nullable=False, unique=True)
    descripcion = Column(String(300), nullable=True)


class ProveedorORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "proveedores"
    id = Column("id_proveedor", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(200), nullable=False)
    ruc = Column(String(50), nullable=True, unique=True)
    email = Column(String(150), nullable=True, unique=True, index=True)
    telefono = Column(String(20), nullable=True)
    direccion = Column(String(500), nullable=True)
    notas = Column(Text, nullable=True)


class ProductoORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "productos"
    id = Column("id_producto", String(36), primary_key=True, default=gen_uuid_str)
    codigo = Column(String(50), nullable=False, unique=True)
    nombre = Column(String(200), nullable=False)
    descripcion = Column(Text, nullable=True)
    id_categoria = Column(String(36), ForeignKey("categorias_producto.id_categoria"), nullable=True)
    unidad_medida = Column(String(30), nullable=True)
    stock_actual = Column(Integer, nullable=False, default=0)
    stock_minimo = Column(Integer, nullable=False, default=0)
    stock_maximo = Column(Integer, nullable=True)
    costo = Column(Float, nullable=False, default=0)
    precio_venta = Column(Float, nullable=False, default=0)
    id_proveedor = Column(String(36), ForeignKey("proveedores.id_proveedor"), nullable=True)

    categoria = relationship("CategoriaProductoORM", lazy="select")
    proveedor = relationship("ProveedorORM", lazy="select")


class MovimientoInventarioORM(Base):
    __tablename__ = "movimientos_inventario"
    id = Column("id_movimiento", String(36), primary_key=True, default=gen_uuid_str)
    id_producto = Column(String(36), ForeignKey("productos.id_producto"), nullable=False)
    tipo = Column(String(10), nullable=False)
    cantidad = Column(Integer, nullable=False)
    precio_unitario = Column(Float, nullable=True)
    motivo = Column(String(300), nullable=True)
    stock_anterior = Column(Integer, nullable=False)
    stock_resultante = Column(Integer, nullable=False)
    fecha = Column(DateTime, nullable=False, default=get_current_time)
    id_usuario = Column(String(36), ForeignKey("usuarios.id_usuario"), nullable=True)


#ORM: Vacunas (catálogo) y vacunaciones aplicadas
class VacunaORM(AuditoriaMixin, ActivoMixin, Base):
    __tablename__ = "vacunas"
    id = Column("id_vacuna", String(36), primary_key=True, default=gen_uuid_str)
    nombre = Column(String(100), nullable=False)
    especie = Column(String(50), nullable=True)
    descripcion = Column(Text, nullable=True)
    fabricante = Column(String(100), nullable=True)
    numero_dosis = Column(Integer, nullable=False, default=1)
    intervalo_dias = Column(Integer, nullable=False, default=0)


class VacunacionORM(AuditoriaMixin, Base):
    __tablename__ = "vacunaciones"
    id = Column("id_vacunacion", String(36), primary_key=True, default=gen_uuid_str)
    id_paciente = Column(String(36), ForeignKey("pacientes.id_paciente"), nullable=False)
    id_vacuna = Column(String(36), ForeignKey("vacunas.id_vacuna"), nullable=False)
    id_profesional = Column(String(36), ForeignKey("usuarios.id_usuario"), nullable=False)
    fecha_aplicacion = Column(Date, nullable=False)
    numero_dosis = Column(Integer, nullable=False, default=1)
    proxima_dosis = Column(Date, nullable=True, index=True)
    lote = Column(String(50), nullable=True)
    observaciones = Column(Text, nullable=True)

    paciente = relationship("PacienteORM", lazy="select")
    vacuna = relationship("VacunaORM", lazy="select")
    profesional = relationship("UsuarioORM", lazy="select")


#ORM: Notificaciones
class NotificacionORM(Base):
    __tablename__ = "notificaciones"
    id = Column("id_notificacion", String(36), primary_key=True, default=gen_uuid_str)
    id_usuario = Column(String(36), ForeignKey("usuarios.id_usuario"), nullable=False, index=True)
    titulo = Column(String(200), nullable=False)
    mensaje = Column(Text, nullable=False)
    tipo = Column(String(30), nullable=False, default="INFO")
    leida = Column(Boolean, nullable=False, default=False)
    entidad_tipo = Column(String(50), nullable=True)
    entidad_id = Column(String(36), nullable=True)
    fecha_creacion = Column(DateTime, nullable=False, default=get_current_time)


#ORM: Tokens de recuperación de contraseña
class PasswordResetTokenORM(Base):
    __tablename__ = "password_reset_tokens"
    id = Column("id_token", String(36), primary_key=True, default=gen_uuid_str)
    token = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(150), nullable=False, index=True)
    tipo_usuario = Column(String(20), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    usado = Column(Boolean, nullable=False, default=False)
    fecha_creacion = Column(DateTime, nullable=False, default=get_current_time)


__all__ = [
    "Base",
    "UsuarioORM",
    "PropietarioORM",
    "PacienteORM",
    "CitaORM",
    "ConsultaORM",
    "PrescripcionORM",
    "ItemPrescripcionORM",
    "TemplateConsultaORM",
    "TemplatePrescripcionORM",
    "ItemTemplatePrescripcionORM",
    "FacturaORM",
    "ItemFacturaORM",
    "PagoORM",
    "CategoriaProductoORM",
    "ProveedorORM",
    "ProductoORM",
    "MovimientoInventarioORM",
    "VacunaORM",
    "VacunacionORM",
    "NotificacionORM",
    "PasswordResetTokenORM",
]
