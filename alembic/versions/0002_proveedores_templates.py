"""proveedores y plantillas de consulta/prescripción

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0002'
down_revision = '0001'
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
        'proveedores',
        sa.Column('id_proveedor', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('ruc', sa.String(50), nullable=True, unique=True),
        sa.Column('email', sa.String(150), nullable=True, unique=True),
        sa.Column('telefono', sa.String(20), nullable=True),
        sa.Column('direccion', sa.String(500), nullable=True),
        sa.Column('notas', sa.Text(), nullable=True),
        *_auditoria(),
        *_activo(),
    )
    op.create_index('ix_proveedores_email', 'proveedores', ['email'])

    with op.batch_alter_table('productos') as batch_op:
        batch_op.add_column(sa.Column('id_proveedor', sa.String(36), nullable=True))
        batch_op.create_foreign_key(
            'fk_productos_proveedor', 'proveedores', ['id_proveedor'], ['id_proveedor']
        )

    op.create_table(
        'templates_consulta',
        sa.Column('id_template', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('descripcion', sa.String(500), nullable=True),
        sa.Column('categoria', sa.String(100), nullable=True),
        sa.Column('examen_fisico', sa.Text(), nullable=True),
        sa.Column('diagnostico', sa.Text(), nullable=True),
        sa.Column('tratamiento', sa.Text(), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('veces_usado', sa.Integer(), nullable=False, server_default='0'),
        *_auditoria(),
        *_activo(),
    )
    op.create_index('ix_templates_consulta_categoria', 'templates_consulta', ['categoria'])

    op.create_table(
        'templates_prescripcion',
        sa.Column('id_template', sa.String(36), primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('descripcion', sa.String(500), nullable=True),
        sa.Column('categoria', sa.String(100), nullable=True),
        sa.Column('indicaciones_generales', sa.Text(), nullable=True),
        sa.Column('veces_usado', sa.Integer(), nullable=False, server_default='0'),
        *_auditoria(),
        *_activo(),
    )
    op.create_index('ix_templates_prescripcion_categoria', 'templates_prescripcion', ['categoria'])

    op.create_table(
        'items_template_prescripcion',
        sa.Column('id_item_template', sa.String(36), primary_key=True),
        sa.Column(
            'id_template',
            sa.String(36),
            sa.ForeignKey('templates_prescripcion.id_template'),
            nullable=False,
        ),
        sa.Column('medicamento', sa.String(200), nullable=False),
        sa.Column('presentacion', sa.String(100), nullable=True),
        sa.Column('dosis', sa.String(100), nullable=False),
        sa.Column('frecuencia', sa.String(100), nullable=False),
        sa.Column('duracion_dias', sa.Integer(), nullable=True),
        sa.Column('via_administracion', sa.String(20), nullable=True),
        sa.Column('indicaciones', sa.Text(), nullable=True),
        sa.Column('orden', sa.Integer(), nullable=False, server_default='0'),
    )


def downgrade() -> None:
    op.drop_table('items_template_prescripcion')
    op.drop_table('templates_prescripcion')
    op.drop_table('templates_consulta')
    with op.batch_alter_table('productos') as batch_op:
        batch_op.drop_constraint('fk_productos_proveedor', type_='foreignkey')
        batch_op.drop_column('id_proveedor')
    op.drop_table('proveedores')
