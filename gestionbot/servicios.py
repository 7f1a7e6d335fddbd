import re
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from gestionbot import db
from gestionbot.errores import SolicitudInvalida
from gestionbot.models import Usuario, Cliente, Pedido, ROLES
from gestionbot.texto import limpiar_telefono, formatear_monto

NUMERO_PEDIDO_RE = re.compile(r'PED-(\d+)')
CENTAVOS = Decimal('0.01')


def crear_usuario(email, password, nombre, rol='VIEWER'):
    """Crea un usuario con la contraseña hasheada. No hace commit."""
    if rol not in ROLES:
        raise SolicitudInvalida(f'Rol inválido: {rol}')
    email = email.strip().lower()
    if Usuario.query.filter_by(email=email).first():
        raise SolicitudInvalida(f'Ya existe un usuario con el email {email}')

    usuario = Usuario(email=email, nombre=nombre, rol=rol, activo=True)
    usuario.set_password(password)
    db.session.add(usuario)
    return usuario


def obtener_o_crear_cliente(telefono, nombre=None):
    telefono_limpio = limpiar_telefono(telefono)
    cliente = Cliente.query.filter_by(telefono=telefono_limpio).first()
    if not cliente:
        cliente = Cliente(
            telefono=telefono_limpio,
            nombre=nombre or 'Cliente WhatsApp',
            total_pedidos=0,
            total_gastado=Decimal('0'),
            fecha_registro=datetime.utcnow()
        )
        db.session.add(cliente)
        db.session.flush()
    return cliente


def generar_numero_pedido():
    ultimo = Pedido.query.order_by(Pedido.id.desc()).first()
    siguiente = 1
    if ultimo:
        match = NUMERO_PEDIDO_RE.match(ultimo.numero)
        if match:
            siguiente = int(match.group(1)) + 1
    return f'PED-{siguiente:04d}'


def calcular_totales(subtotal, descuento_porcentaje, delivery):
    subtotal = Decimal(subtotal)
    descuento = (subtotal * Decimal(descuento_porcentaje) / 100).quantize(CENTAVOS, rounding=ROUND_HALF_UP)
    total = subtotal - descuento + Decimal(delivery)
    return descuento, total.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def resumen_pedido(pedido):
    """Texto del pedido listo para enviar por WhatsApp"""
    lineas = [
        f'📋 *PEDIDO {pedido.numero}*',
        '',
        f'👤 Cliente: {pedido.nombre_cliente}',
        f'📅 Fecha: {pedido.fecha.strftime("%d/%m/%Y")}',
        '',
        '🛒 *Productos:*',
    ]
    for item in pedido.items:
        lineas.append(f'  • {item.nombre} x{item.cantidad} - ${formatear_monto(item.subtotal)}')

    lineas += ['', '💰 *Totales:*', f'  Subtotal: ${formatear_monto(pedido.subtotal)}']
    if pedido.descuento and Decimal(pedido.descuento) > 0:
        lineas.append(f'  Descuento: -${formatear_monto(pedido.descuento)}')
    if pedido.delivery and Decimal(pedido.delivery) > 0:
        lineas.append(f'  Delivery: ${formatear_monto(pedido.delivery)}')
    lineas += [f'  *TOTAL: ${formatear_monto(pedido.total)}*', '']

    entrega = '🚚 Delivery' if pedido.tipo_entrega == 'DELIVERY' else '🏪 Retiro en local'
    pago = '✅ Pagado' if pedido.estado_pago == 'PAGADO' else '⏳ Pendiente'
    lineas += [f'📍 Entrega: {entrega}', f'💳 Estado: {pago}']
    return '\n'.join(lineas)
