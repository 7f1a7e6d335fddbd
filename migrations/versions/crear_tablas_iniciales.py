"""Crear tablas iniciales

Revision ID: crear_tablas_iniciales
Revises:
Create Date: 2025-11-03 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'crear_tablas_iniciales'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('usuarios',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=200), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('rol', sa.String(length=20), nullable=False),
        sa.Column('activo', sa.Boolean(), nullable=True),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=True),
        sa.Column('ultimo_acceso', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_usuarios_email', 'usuarios', ['email'], unique=True)

    op.create_table('categorias',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nombre', sa.String(length=100), nullable=False),
        sa.Column('subcategoria', sa.String(length=100), nullable=False),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('nombre', 'subcategoria', name='uq_categorias_nombre_subcategoria')
    )
    op.create_index('ix_categorias_nombre', 'categorias', ['nombre'], unique=False)

    op.create_table('productos',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('categoria', sa.String(length=100), nullable=False),
        sa.Column('subcategoria', sa.String(length=100), nullable=False),
        sa.Column('precio', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('precio_desde', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('unidad', sa.String(length=50), nullable=True),
        sa.Column('stock', sa.Boolean(), nullable=False),
        sa.Column('codigo_barras', sa.String(length=50), nullable=True),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=True),
        sa.Column('fecha_actualizacion', sa.DateTime(), nullable=True),
        sa.CheckConstraint('(precio IS NULL) <> (precio_desde IS NULL)', name='ck_productos_un_solo_precio'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_productos_categoria', 'productos', ['categoria'], unique=False)
    op.create_index('ix_productos_codigo_barras', 'productos', ['codigo_barras'], unique=True)

    op.create_table('clientes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('telefono', sa.String(length=20), nullable=False),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('total_pedidos', sa.Integer(), nullable=False),
        sa.Column('total_gastado', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('fecha_registro', sa.DateTime(), nullable=True),
        sa.Column('ultima_interaccion', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_clientes_telefono', 'clientes', ['telefono'], unique=True)

    op.create_table('pedidos',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('numero', sa.String(length=20), nullable=False),
        sa.Column('cliente_id', sa.Integer(), nullable=False),
        sa.Column('nombre_cliente', sa.String(length=200), nullable=True),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('descuento_porcentaje', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('descuento', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('delivery', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('tipo_entrega', sa.String(length=20), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.Column('estado_pago', sa.String(length=20), nullable=False),
        sa.Column('notas', sa.Text(), nullable=True),
        sa.Column('fecha', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['cliente_id'], ['clientes.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('numero')
    )

    op.create_table('items_pedido',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('pedido_id', sa.Integer(), nullable=False),
        sa.Column('producto_id', sa.Integer(), nullable=True),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('precio_unitario', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.ForeignKeyConstraint(['pedido_id'], ['pedidos.id'], ),
        sa.ForeignKeyConstraint(['producto_id'], ['productos.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('configuracion_bot',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nombre_negocio', sa.String(length=200), nullable=True),
        sa.Column('telefono', sa.String(length=50), nullable=True),
        sa.Column('direccion', sa.Text(), nullable=True),
        sa.Column('horario', sa.String(length=200), nullable=True),
        sa.Column('costo_delivery', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('pedido_minimo', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('acepta_delivery', sa.Boolean(), nullable=False),
        sa.Column('palabras_clave', sa.JSON(), nullable=True),
        sa.Column('respuestas', sa.JSON(), nullable=True),
        sa.Column('respuestas_activas', sa.Boolean(), nullable=False),
        sa.Column('fecha_actualizacion', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('configuracion_bot')
    op.drop_table('items_pedido')
    op.drop_table('pedidos')
    op.drop_index('ix_clientes_telefono', table_name='clientes')
    op.drop_table('clientes')
    op.drop_index('ix_productos_codigo_barras', table_name='productos')
    op.drop_index('ix_productos_categoria', table_name='productos')
    op.drop_table('productos')
    op.drop_index('ix_categorias_nombre', table_name='categorias')
    op.drop_table('categorias')
    op.drop_index('ix_usuarios_email', table_name='usuarios')
    op.drop_table('usuarios')
