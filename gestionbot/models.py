from gestionbot import db
from gestionbot.precios import PrecioFijo, PrecioDesde
from gestionbot.texto import construir_id_producto
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Numeric
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash


ROLES = ('ADMIN', 'OPERATOR', 'VIEWER')
ESTADOS_PEDIDO = ('PENDIENTE', 'CONFIRMADO', 'EN_PREPARACION', 'LISTO', 'ENTREGADO', 'COMPLETADO', 'CANCELADO')
ESTADOS_PAGO = ('PENDIENTE', 'PAGADO')
TIPOS_ENTREGA = ('DELIVERY', 'RETIRO')


def _float(valor):
    return float(valor) if valor is not None else None


def _fecha(valor):
    return valor.isoformat() if valor else None


class Usuario(db.Model, UserMixin):
    __tablename__ = 'usuarios'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(200), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    nombre = db.Column(db.String(200), nullable=False)
    rol = db.Column(db.String(20), nullable=False, default='VIEWER')  # ADMIN, OPERATOR, VIEWER
    activo = db.Column(db.Boolean, default=True)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)
    ultimo_acceso = db.Column(db.DateTime)

    def set_password(self, password):
        """Genera el hash de la contraseña"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verifica la contraseña"""
        return check_password_hash(self.password_hash, password)

    @property
    def is_active(self):
        return bool(self.activo)

    def tiene_rol(self, *roles):
        return self.rol in roles

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'nombre': self.nombre,
            'rol': self.rol,
            'activo': self.activo,
            'fecha_creacion': _fecha(self.fecha_creacion),
            'ultimo_acceso': _fecha(self.ultimo_acceso)
        }


class Categoria(db.Model):
    __tablename__ = 'categorias'
    __table_args__ = (
        db.UniqueConstraint('nombre', 'subcategoria', name='uq_categorias_nombre_subcategoria'),
    )

    id = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(100), nullable=False, index=True)
    subcategoria = db.Column(db.String(100), nullable=False)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)

    @staticmethod
    def asegurar(nombre, subcategoria):
        """Registra la pareja categoría/subcategoría si todavía no existe"""
        categoria = Categoria.query.filter_by(nombre=nombre, subcategoria=subcategoria).first()
        if not categoria:
            categoria = Categoria(nombre=nombre, subcategoria=subcategoria)
            db.session.add(categoria)
        return categoria


class Producto(db.Model):
    __tablename__ = 'productos'
    __table_args__ = (
        # Exactamente uno de los dos precios
        db.CheckConstraint('(precio IS NULL) <> (precio_desde IS NULL)', name='ck_productos_un_solo_precio'),
    )

    id = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(200), nullable=False)
    categoria = db.Column(db.String(100), nullable=False, index=True)
    subcategoria = db.Column(db.String(100), nullable=False)
    precio = db.Column(Numeric(10, 2))
    precio_desde = db.Column(Numeric(10, 2))
    unidad = db.Column(db.String(50))
    stock = db.Column(db.Boolean, default=True, nullable=False)
    codigo_barras = db.Column(db.String(50), unique=True, nullable=True, index=True)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)
    fecha_actualizacion = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def tarifa(self):
        if self.precio is not None:
            return PrecioFijo(Decimal(self.precio))
        if self.precio_desde is not None:
            return PrecioDesde(Decimal(self.precio_desde))
        return None

    @tarifa.setter
    def tarifa(self, valor):
        if isinstance(valor, PrecioFijo):
            self.precio, self.precio_desde = valor.monto, None
        elif isinstance(valor, PrecioDesde):
            self.precio, self.precio_desde = None, valor.monto
        else:
            raise TypeError(f'Tarifa no soportada: {valor!r}')

    @property
    def clave(self):
        return construir_id_producto(self.categoria, self.subcategoria, self.nombre)

    def to_dict(self):
        tarifa = self.tarifa
        return {
            'id': self.id,
            'clave': self.clave,
            'nombre': self.nombre,
            'categoria': self.categoria,
            'subcategoria': self.subcategoria,
            'precio': _float(self.precio),
            'precio_desde': _float(self.precio_desde),
            'tipo_precio': tarifa.tipo if tarifa else None,
            'unidad': self.unidad,
            'stock': self.stock,
            'codigo_barras': self.codigo_barras,
            'fecha_creacion': _fecha(self.fecha_creacion),
            'fecha_actualizacion': _fecha(self.fecha_actualizacion)
        }


class Cliente(db.Model):
    __tablename__ = 'clientes'

    id = db.Column(db.Integer, primary_key=True)
    telefono = db.Column(db.String(20), unique=True, nullable=False, index=True)
    nombre = db.Column(db.String(200), nullable=False, default='Cliente WhatsApp')
    total_pedidos = db.Column(db.Integer, default=0, nullable=False)
    total_gastado = db.Column(Numeric(12, 2), default=0, nullable=False)
    fecha_registro = db.Column(db.DateTime, default=datetime.utcnow)
    ultima_interaccion = db.Column(db.DateTime, default=datetime.utcnow)

    pedidos = db.relationship('Pedido', backref='cliente', lazy=True, cascade='all, delete-orphan',
                              order_by='Pedido.fecha.desc()')

    def registrar_pedido(self, total):
        """Acumula un pedido nuevo en los totales del cliente"""
        self.total_pedidos = (self.total_pedidos or 0) + 1
        self.total_gastado = Decimal(self.total_gastado or 0) + Decimal(total)
        self.ultima_interaccion = datetime.utcnow()

    def to_dict(self, incluir_pedidos=False):
        datos = {
            'id': self.id,
            'telefono': self.telefono,
            'nombre': self.nombre,
            'total_pedidos': self.total_pedidos,
            'total_gastado': _float(self.total_gastado),
            'fecha_registro': _fecha(self.fecha_registro),
            'ultima_interaccion': _fecha(self.ultima_interaccion)
        }
        if incluir_pedidos:
            datos['pedidos'] = [p.to_dict() for p in self.pedidos[:10]]
        return datos


class Pedido(db.Model):
    __tablename__ = 'pedidos'

    id = db.Column(db.Integer, primary_key=True)
    numero = db.Column(db.String(20), unique=True, nullable=False)
    cliente_id = db.Column(db.Integer, db.ForeignKey('clientes.id'), nullable=False)
    nombre_cliente = db.Column(db.String(200))
    subtotal = db.Column(Numeric(12, 2), nullable=False)
    descuento_porcentaje = db.Column(Numeric(5, 2), default=0, nullable=False)
    descuento = db.Column(Numeric(12, 2), default=0, nullable=False)
    delivery = db.Column(Numeric(10, 2), default=0, nullable=False)
    total = db.Column(Numeric(12, 2), nullable=False)
    tipo_entrega = db.Column(db.String(20), nullable=False, default='RETIRO')  # DELIVERY, RETIRO
    estado = db.Column(db.String(20), nullable=False, default='PENDIENTE')
    estado_pago = db.Column(db.String(20), nullable=False, default='PENDIENTE')  # PENDIENTE, PAGADO
    notas = db.Column(db.Text)
    fecha = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    items = db.relationship('ItemPedido', backref='pedido', lazy=True, cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'numero': self.numero,
            'cliente_id': self.cliente_id,
            'cliente_telefono': self.cliente.telefono if self.cliente else None,
            'nombre_cliente': self.nombre_cliente,
            'subtotal': _float(self.subtotal),
            'descuento_porcentaje': _float(self.descuento_porcentaje),
            'descuento': _float(self.descuento),
            'delivery': _float(self.delivery),
            'total': _float(self.total),
            'tipo_entrega': self.tipo_entrega,
            'estado': self.estado,
            'estado_pago': self.estado_pago,
            'notas': self.notas,
            'fecha': _fecha(self.fecha),
            'items': [item.to_dict() for item in self.items]
        }


class ItemPedido(db.Model):
    __tablename__ = 'items_pedido'

    id = db.Column(db.Integer, primary_key=True)
    pedido_id = db.Column(db.Integer, db.ForeignKey('pedidos.id'), nullable=False)
    # Copia del producto al momento del pedido; el producto puede desaparecer después
    producto_id = db.Column(db.Integer, db.ForeignKey('productos.id', ondelete='SET NULL'), nullable=True)
    nombre = db.Column(db.String(200), nullable=False)
    cantidad = db.Column(db.Integer, nullable=False)
    precio_unitario = db.Column(Numeric(10, 2), nullable=False)
    subtotal = db.Column(Numeric(12, 2), nullable=False)

    producto = db.relationship('Producto', backref='items_pedido')

    def to_dict(self):
        return {
            'id': self.id,
            'pedido_id': self.pedido_id,
            'producto_id': self.producto_id,
            'nombre': self.nombre,
            'cantidad': self.cantidad,
            'precio_unitario': _float(self.precio_unitario),
            'subtotal': _float(self.subtotal)
        }


PALABRAS_CLAVE_DEFECTO = {
    'saludo': ['hola', 'buenas', 'buen dia'],
    'pedido': ['pedido', 'comprar', 'quiero'],
    'precios': ['precio', 'cuanto sale', 'lista'],
    'horario': ['horario', 'abren', 'cierran'],
}

RESPUESTAS_DEFECTO = {
    'bienvenida': '¡Hola! Gracias por escribirnos. ¿En qué podemos ayudarte?',
    'horario': 'Nuestro horario de atención es de lunes a sábado.',
    'sin_stock': 'Ese producto no tiene stock en este momento.',
    'pedido_confirmado': 'Tu pedido {numero} fue registrado. Total: ${total}',
    'despedida': '¡Gracias por tu compra!',
}


class ConfiguracionBot(db.Model):
    __tablename__ = 'configuracion_bot'

    id = db.Column(db.Integer, primary_key=True)
    nombre_negocio = db.Column(db.String(200), default='Mi Negocio')
    telefono = db.Column(db.String(50))
    direccion = db.Column(db.Text)
    horario = db.Column(db.String(200))
    # Configuración de pedidos
    costo_delivery = db.Column(Numeric(10, 2), default=500, nullable=False)
    pedido_minimo = db.Column(Numeric(10, 2), default=0, nullable=False)
    acepta_delivery = db.Column(db.Boolean, default=True, nullable=False)
    # Bot
    palabras_clave = db.Column(db.JSON)
    respuestas = db.Column(db.JSON)
    respuestas_activas = db.Column(db.Boolean, default=True, nullable=False)
    fecha_actualizacion = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def negocio_dict(self):
        return {
            'nombre_negocio': self.nombre_negocio,
            'telefono': self.telefono,
            'direccion': self.direccion,
            'horario': self.horario,
            'fecha_actualizacion': _fecha(self.fecha_actualizacion)
        }

    def pedidos_dict(self):
        return {
            'costo_delivery': _float(self.costo_delivery),
            'pedido_minimo': _float(self.pedido_minimo),
            'acepta_delivery': self.acepta_delivery
        }

    @staticmethod
    def obtener_configuracion():
        """Obtiene la configuración del bot, creándola si no existe"""
        config = ConfiguracionBot.query.first()
        if not config:
            config = ConfiguracionBot(
                nombre_negocio='Mi Negocio',
                telefono='',
                direccion='',
                horario='',
                costo_delivery=Decimal('500'),
                pedido_minimo=Decimal('0'),
                acepta_delivery=True,
                palabras_clave=dict(PALABRAS_CLAVE_DEFECTO),
                respuestas=dict(RESPUESTAS_DEFECTO),
                respuestas_activas=True
            )
            db.session.add(config)
            db.session.commit()
        return config
