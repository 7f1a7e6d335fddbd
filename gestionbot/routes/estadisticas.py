from datetime import datetime, time
from flask import Blueprint, jsonify
from sqlalchemy import func
from gestionbot import db
from gestionbot.models import Cliente, Producto, Pedido, ItemPedido, ESTADOS_PEDIDO
from gestionbot.permisos import autenticado

bp = Blueprint('estadisticas', __name__, url_prefix='/api/estadisticas')


@bp.route('', methods=['GET'])
@autenticado
def resumen():
    """Totales para el panel principal"""
    inicio_dia = datetime.combine(datetime.utcnow().date(), time.min)
    validos = Pedido.estado != 'CANCELADO'

    por_estado = dict(db.session.query(Pedido.estado, func.count(Pedido.id)).group_by(Pedido.estado).all())
    total_vendido = db.session.query(func.coalesce(func.sum(Pedido.total), 0)).filter(validos).scalar()
    vendido_hoy = db.session.query(func.coalesce(func.sum(Pedido.total), 0)).filter(
        validos, Pedido.fecha >= inicio_dia).scalar()

    top = db.session.query(
        ItemPedido.nombre,
        func.sum(ItemPedido.cantidad).label('cantidad'),
        func.sum(ItemPedido.subtotal).label('total')
    ).select_from(ItemPedido).join(Pedido).filter(validos).group_by(ItemPedido.nombre).order_by(
        func.sum(ItemPedido.cantidad).desc()).limit(5).all()

    return jsonify({
        'success': True,
        'data': {
            'clientes': {
                'total': Cliente.query.count()
            },
            'productos': {
                'total': Producto.query.count(),
                'sin_stock': Producto.query.filter_by(stock=False).count()
            },
            'pedidos': {
                'total': Pedido.query.count(),
                'hoy': Pedido.query.filter(Pedido.fecha >= inicio_dia).count(),
                'por_estado': {estado: por_estado.get(estado, 0) for estado in ESTADOS_PEDIDO},
                'total_vendido': float(total_vendido or 0),
                'vendido_hoy': float(vendido_hoy or 0)
            },
            'productos_mas_vendidos': [
                {'nombre': nombre, 'cantidad': int(cantidad), 'total': float(total)}
                for nombre, cantidad, total in top
            ]
        }
    })
