"""initial schema for the clinic

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def _auditoria():
    return [
        sa.Column('id_usuario_creacion', sa.String(36), nullable=True),
        sa.Column('id_usuario_actualizacion', sa.String(36), nullable=True),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=True),
        sa.Column('fecha_actualizacion', sa.DateTime(), nullable=True),
    ]


def _activo():
    return [
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_by', sa.String(36), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'usuarios',
        sa.Column('id_usuario', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('email', sa.String(150), nullable=False, unique=True),
        sa.Column('telefono', sa.String(20), nullable=True),
        sa.Column('rol', sa.String(20), nullable=False),
        sa.Column('password_salt', sa.String(64), nullable=False),
        sa.Column('password_hash', sa.String(128), nullable=False),
        *_auditoria(),
        *_activo(),
    )
    op.create_index('ix_usuarios_email', 'usuarios', ['email'])

    op.create_table(
        'propietarios',
        sa.Column('id_propietario', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('documento', sa.String(30), nullable=True, unique=True),
        sa.Column('email', sa.String(150), nullable=True, unique=True),
        sa.Column('telefono', sa.String(20), nullable=True),
        sa.Column('direccion', sa.String(300), nullable=True),
        sa.Column('password_salt', sa.String(64), nullable=True),
        sa.Column('password_hash', sa.String(128), nullable=True),
        *_auditoria(),
        *_activo(),
    )
    op.create_index('ix_propietarios_email', 'propietarios', ['email'])

    op.create_table(
        'pacientes',
        sa.Column('id_paciente', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(100), nullable=False),
        sa.Column('especie', sa.String(50), nullable=False),
        sa.Column('raza', sa.String(100), nullable=True),
        sa.Column('sexo', sa.String(10), nullable=True),
        sa.Column('edad_meses', sa.Integer(), nullable=True),
        sa.Column('peso_kg', sa.Float(), nullable=True),
        sa.Column('microchip', sa.String(50), nullable=True, unique=True),
        sa.Column('notas', sa.Text(), nullable=True),
        sa.Column('id_propietario', sa.String(36), sa.ForeignKey('propietarios.id_propietario'), nullable=False),
        *_auditoria(),
        *_activo(),
    )

    op.create_table(
        'citas',
        sa.Column('id_cita', sa.String(36), primary_key=True),
        sa.Column('fecha', sa.DateTime(), nullable=False),
        sa.Column('motivo', sa.String(300), nullable=False),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('estado', sa.String(20), nullable=False),
        sa.Column('id_paciente', sa.String(36), sa.ForeignKey('pacientes.id_paciente'), nullable=False),
        sa.Column('id_propietario', sa.String(36), sa.ForeignKey('propietarios.id_propietario'), nullable=False),
        sa.Column('id_profesional', sa.String(36), sa.ForeignKey('usuarios.id_usuario'), nullable=False),
        *_auditoria(),
    )
    op.create_index('ix_citas_fecha', 'citas', ['fecha'])

    op.create_table(
        'consultas',
        sa.Column('id_consulta', sa.String(36), primary_key=True),
        sa.Column('fecha', sa.DateTime(), nullable=False),
        sa.Column('frecuencia_cardiaca', sa.Integer(), nullable=True),
        sa.Column('frecuencia_respiratoria', sa.Integer(), nullable=True),
        sa.Column('temperatura', sa.Float(), nullable=True),
        sa.Column('peso_kg', sa.Float(), nullable=True),
        sa.Column('examen_fisico', sa.Text(), nullable=True),
        sa.Column('diagnostico', sa.Text(), nullable=True),
        sa.Column('tratamiento', sa.Text(), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('id_paciente', sa.String(36), sa.ForeignKey('pacientes.id_paciente'), nullable=False),
        sa.Column('id_profesional', sa.String(36), sa.ForeignKey('usuarios.id_usuario'), nullable=False),
        sa.Column('id_cita', sa.String(36), sa.ForeignKey('citas.id_cita'), nullable=True),
        *_auditoria(),
    )

    op.create_table(
        'prescripciones',
        sa.Column('id_prescripcion', sa.String(36), primary_key=True),
        sa.Column('fecha_emision', sa.DateTime(), nullable=False),
        sa.Column('indicaciones_generales', sa.Text(), nullable=True),
        sa.Column('id_consulta', sa.String(36), sa.ForeignKey('consultas.id_consulta'), nullable=False),
        *_auditoria(),
    )

    op.create_table(
        'items_prescripcion',
        sa.Column('id_item_prescripcion', sa.String(36), primary_key=True),
        sa.Column('id_prescripcion', sa.String(36), sa.ForeignKey('prescripciones.id_prescripcion'), nullable=False),
        sa.Column('medicamento', sa.String(200), nullable=False),
        sa.Column('presentacion', sa.String(100), nullable=True),
        sa.Column('dosis', sa.String(100), nullable=False),
        sa.Column('frecuencia', sa.String(100), nullable=False),
        sa.Column('duracion_dias', sa.Integer(), nullable=True),
        sa.Column('via_administracion', sa.String(20), nullable=True),
        sa.Column('indicaciones', sa.Text(), nullable=True),
    )

    op.create_table(
        'facturas',
        sa.Column('id_factura', sa.String(36), primary_key=True),
        sa.Column('numero', sa.String(30), nullable=False, unique=True),
        sa.Column('fecha', sa.DateTime(), nullable=False),
        sa.Column('fecha_vencimiento', sa.Date(), nullable=True),
        sa.Column('subtotal', sa.Float(), nullable=False),
        sa.Column('descuento', sa.Float(), nullable=False),
        sa.Column('impuesto', sa.Float(), nullable=False),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('monto_pagado', sa.Float(), nullable=False),
        sa.Column('estado', sa.String(20), nullable=False),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('id_propietario', sa.String(36), sa.ForeignKey('propietarios.id_propietario'), nullable=False),
        sa.Column('id_consulta', sa.String(36), sa.ForeignKey('consultas.id_consulta'), nullable=True, unique=True),
        *_auditoria(),
    )

    op.create_table(
        'items_factura',
        sa.Column('id_item_factura', sa.String(36), primary_key=True),
        sa.Column('id_factura', sa.String(36), sa.ForeignKey('facturas.id_factura'), nullable=False),
        sa.Column('descripcion', sa.String(300), nullable=False),
        sa.Column('tipo_item', sa.String(20), nullable=False),
        sa.Column('codigo_producto', sa.String(50), nullable=True),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('precio_unitario', sa.Float(), nullable=False),
        sa.Column('descuento', sa.Float(), nullable=False),
        sa.Column('subtotal', sa.Float(), nullable=False),
        sa.Column('orden', sa.Integer(), nullable=False),
    )

    op.create_table(
        'pagos',
        sa.Column('id_pago', sa.String(36), primary_key=True),
        sa.Column('id_factura', sa.String(36), sa.ForeignKey('facturas.id_factura'), nullable=False),
        sa.Column('monto', sa.Float(), nullable=False),
        sa.Column('fecha_pago', sa.DateTime(), nullable=False),
        sa.Column('metodo_pago', sa.String(20), nullable=False),
        sa.Column('referencia', sa.String(100), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('id_usuario', sa.String(36), sa.ForeignKey('usuarios.id_usuario'), nullable=True),
    )

    op.create_table(
        'categorias_producto',
        sa.Column('id_categoria', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(100), nullable=False, unique=True),
        sa.Column('descripcion', sa.String(300), nullable=True),
        *_auditoria(),
        *_activo(),
    )

    op.create_table(
        'productos',
        sa.Column('id_producto', sa.String(36), primary_key=True),
        sa.Column('codigo', sa.String(50), nullable=False, unique=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('id_categoria', sa.String(36), sa.ForeignKey('categorias_producto.id_categoria'), nullable=True),
        sa.Column('unidad_medida', sa.String(30), nullable=True),
        sa.Column('stock_actual', sa.Integer(), nullable=False),
        sa.Column('stock_minimo', sa.Integer(), nullable=False),
        sa.Column('stock_maximo', sa.Integer(), nullable=True),
        sa.Column('costo', sa.Float(), nullable=False),
        sa.Column('precio_venta', sa.Float(), nullable=False),
        *_auditoria(),
        *_activo(),
    )

    op.create_table(
        'movimientos_inventario',
        sa.Column('id_movimiento', sa.String(36), primary_key=True),
        sa.Column('id_producto', sa.String(36), sa.ForeignKey('productos.id_producto'), nullable=False),
        sa.Column('tipo', sa.String(10), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('precio_unitario', sa.Float(), nullable=True),
        sa.Column('motivo', sa.String(300), nullable=True),
        sa.Column('stock_anterior', sa.Integer(), nullable=False),
        sa.Column('stock_resultante', sa.Integer(), nullable=False),
        sa.Column('fecha', sa.DateTime(), nullable=False),
        sa.Column('id_usuario', sa.String(36), sa.ForeignKey('usuarios.id_usuario'), nullable=True),
    )

    op.create_table(
        'vacunas',
        sa.Column('id_vacuna', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(100), nullable=False),
        sa.Column('especie', sa.String(50), nullable=True),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('fabricante', sa.String(100), nullable=True),
        sa.Column('numero_dosis', sa.Integer(), nullable=False),
        sa.Column('intervalo_dias', sa.Integer(), nullable=False),
        *_auditoria(),
        *_activo(),
    )

    op.create_table(
        'vacunaciones',
        sa.Column('id_vacunacion', sa.String(36), primary_key=True),
        sa.Column('id_paciente', sa.String(36), sa.ForeignKey('pacientes.id_paciente'), nullable=False),
        sa.Column('id_vacuna', sa.String(36), sa.ForeignKey('vacunas.id_vacuna'), nullable=False),
        sa.Column('id_profesional', sa.String(36), sa.ForeignKey('usuarios.id_usuario'), nullable=False),
        sa.Column('fecha_aplicacion', sa.Date(), nullable=False),
        sa.Column('numero_dosis', sa.Integer(), nullable=False),
        sa.Column('proxima_dosis', sa.Date(), nullable=True),
        sa.Column('lote', sa.String(50), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        *_auditoria(),
    )
    op.create_index('ix_vacunaciones_proxima_dosis', 'vacunaciones', ['proxima_dosis'])

    op.create_table(
        'notificaciones',
        sa.Column('id_notificacion', sa.String(36), primary_key=True),
        sa.Column('id_usuario', sa.String(36), sa.ForeignKey('usuarios.id_usuario'), nullable=False),
        sa.Column('titulo', sa.String(200), nullable=False),
        sa.Column('mensaje', sa.Text(), nullable=False),
        sa.Column('tipo', sa.String(30), nullable=False),
        sa.Column('leida', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('entidad_tipo', sa.String(50), nullable=True),
        sa.Column('entidad_id', sa.String(36), nullable=True),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_notificaciones_id_usuario', 'notificaciones', ['id_usuario'])

    op.create_table(
        'password_reset_tokens',
        sa.Column('id_token', sa.String(36), primary_key=True),
        sa.Column('token', sa.String(64), nullable=False, unique=True),
        sa.Column('email', sa.String(150), nullable=False),
        sa.Column('tipo_usuario', sa.String(20), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('usado', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_password_reset_tokens_token', 'password_reset_tokens', ['token'])
    op.create_index('ix_password_reset_tokens_email', 'password_reset_tokens', ['email'])


def downgrade() -> None:
    for table in (
        'password_reset_tokens',
        'notificaciones',
        'vacunaciones',
        'vacunas',
        'movimientos_inventario',
        'productos',
        'categorias_producto',
        'pagos',
        'items_factura',
        'facturas',
        'items_prescripcion',
        'prescripciones',
        'consultas',
        'citas',
        'pacientes',
        'propietarios',
        'usuarios',
    ):
        op.drop_table(table)
