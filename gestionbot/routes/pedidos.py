from decimal import Decimal
from flask import Blueprint, jsonify, g, current_app
from gestionbot import db
from gestionbot.models import Pedido, ItemPedido, Producto, ConfiguracionBot, ESTADOS_PEDIDO, ESTADOS_PAGO, TIPOS_ENTREGA
from gestionbot.errores import ErrorValidacion, NoEncontrado, SolicitudInvalida
from gestionbot.permisos import autenticado, operador_o_admin
from gestionbot.paginacion import paginar, paginacion_dict, ultimo
from gestionbot.servicios import obtener_o_crear_cliente, generar_numero_pedido, calcular_totales, resumen_pedido
from gestionbot.texto import formatear_monto
from gestionbot.validacion import (validar, validar_telefono, validar_array, validar_enum, validar_numero,
                                   validar_string, validar_paginacion)

bp = Blueprint('pedidos', __name__, url_prefix='/api/pedidos')


def buscar_pedido(id):
    pedido = db.session.get(Pedido, id)
    if not pedido:
        raise NoEncontrado('Pedido no encontrado')
    return pedido


def _entero_positivo(valor):
    if isinstance(valor, bool):
        return None
    try:
        numero = int(valor)
    except (TypeError, ValueError, OverflowError):
        return None
    if numero != valor and str(numero) != str(valor).strip():
        return None
    return numero if numero > 0 else None


def _armar_items(items):
    """Valida cada item y devuelve las líneas del pedido con su subtotal"""
    errores = []
    lineas = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            errores.append({'field': f'items[{i}]', 'message': 'Item inválido', 'value': item})
            continue
        producto_id = _entero_positivo(item.get('producto_id'))
        cantidad = _entero_positivo(item.get('cantidad'))
        if producto_id is None:
            errores.append({'field': f'items[{i}].producto_id', 'message': 'producto_id inválido',
                            'value': item.get('producto_id')})
        if cantidad is None:
            errores.append({'field': f'items[{i}].cantidad', 'message': 'La cantidad debe ser un entero mayor a 0',
                            'value': item.get('cantidad')})
        if producto_id is not None and cantidad is not None:
            lineas.append((i, producto_id, cantidad, item.get('precio_unitario')))
    if errores:
        raise ErrorValidacion(errores=errores)

    resultado = []
    for i, producto_id, cantidad, precio_pedido in lineas:
        producto = db.session.get(Producto, producto_id)
        if not producto:
            raise SolicitudInvalida(f'Producto {producto_id} no encontrado')
        if not producto.stock:
            raise SolicitudInvalida(f'Producto {producto.nombre} sin stock')

        tarifa = producto.tarifa
        precio_unitario = tarifa.monto
        if tarifa.tipo == 'desde' and precio_pedido is not None:
            try:
                precio_unitario = Decimal(str(precio_pedido))
                if not precio_unitario.is_finite():
                    raise ArithmeticError(precio_pedido)
            except ArithmeticError:
                raise ErrorValidacion(errores=[{'field': f'items[{i}].precio_unitario',
                                                'message': 'Precio inválido', 'value': precio_pedido}])
            precio_unitario = precio_unitario.quantize(Decimal('0.01'))
            if precio_unitario < tarifa.monto:
                raise ErrorValidacion(errores=[{
                    'field': f'items[{i}].precio_unitario',
                    'message': f'El precio de {producto.nombre} no puede ser menor a ${formatear_monto(tarifa.monto)}',
                    'value': precio_pedido
                }])

        resultado.append(ItemPedido(
            producto_id=producto.id,
            nombre=producto.nombre,
            cantidad=cantidad,
            precio_unitario=precio_unitario,
            subtotal=precio_unitario * cantidad
        ))
    return resultado


@bp.route('', methods=['GET'])
@autenticado
@validar(
    validar_paginacion(),
    validar_enum('estado', ESTADOS_PEDIDO, opcional=True, ubicacion='query'),
)
def listar():
    consulta = Pedido.query
    estado = ultimo(g.query.get('estado'))
    if estado:
        consulta = consulta.filter(Pedido.estado == estado)

    pagina = paginar(consulta.order_by(Pedido.fecha.desc(), Pedido.id.desc()))
    return jsonify({
        'success': True,
        'pedidos': [p.to_dict() for p in pagina.items],
        'pagination': paginacion_dict(pagina)
    })


@bp.route('/<int:id>', methods=['GET'])
@autenticado
def obtener(id):
    pedido = buscar_pedido(id)
    return jsonify({'success': True, 'pedido': pedido.to_dict()})


@bp.route('/<int:id>/resumen', methods=['GET'])
@autenticado
def resumen(id):
    pedido = buscar_pedido(id)
    return jsonify({'success': True, 'numero': pedido.numero, 'resumen': resumen_pedido(pedido)})


@bp.route('', methods=['POST'])
@operador_o_admin
@validar(
    validar_telefono('cliente_telefono'),
    validar_array('items', 1, 100),
    validar_enum('tipo_entrega', TIPOS_ENTREGA, opcional=True),
    validar_enum('estado_pago', ESTADOS_PAGO, opcional=True),
    validar_numero('descuento_porcentaje', 0, 100, opcional=True),
    validar_string('nombre_cliente', 1, 200, opcional=True),
    validar_string('notas', 1, 1000, opcional=True),
)
def crear():
    datos = g.body
    config = ConfiguracionBot.obtener_configuracion()
    tipo_entrega = datos.get('tipo_entrega') or 'RETIRO'
    if tipo_entrega == 'DELIVERY' and not config.acepta_delivery:
        raise SolicitudInvalida('El negocio no acepta pedidos con delivery')

    items = _armar_items(datos['items'])
    subtotal = sum((item.subtotal for item in items), Decimal('0'))
    if subtotal < Decimal(config.pedido_minimo or 0):
        raise SolicitudInvalida(f'El pedido mínimo es de ${formatear_monto(config.pedido_minimo)}')

    descuento_porcentaje = Decimal(str(datos.get('descuento_porcentaje') or 0))
    delivery = Decimal(config.costo_delivery) if tipo_entrega == 'DELIVERY' else Decimal('0')
    descuento, total = calcular_totales(subtotal, descuento_porcentaje, delivery)

    try:
        cliente = obtener_o_crear_cliente(datos['cliente_telefono'], datos.get('nombre_cliente'))
        pedido = Pedido(
            numero=generar_numero_pedido(),
            cliente_id=cliente.id,
            nombre_cliente=datos.get('nombre_cliente') or cliente.nombre,
            subtotal=subtotal,
            descuento_porcentaje=descuento_porcentaje,
            descuento=descuento,
            delivery=delivery,
            total=total,
            tipo_entrega=tipo_entrega,
            estado='PENDIENTE',
            estado_pago=datos.get('estado_pago') or 'PENDIENTE',
            notas=datos.get('notas'),
            items=items
        )
        db.session.add(pedido)
        # Mismo commit que el pedido
        cliente.registrar_pedido(total)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error('Error creando pedido: %s', e)
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Pedido %s creado para %s (total %s)', pedido.numero, cliente.telefono, total)
    return jsonify({
        'success': True,
        'mensaje': 'Pedido creado exitosamente',
        'pedido': pedido.to_dict()
    }), 201


@bp.route('/<int:id>', methods=['PUT'])
@operador_o_admin
@validar(
    validar_enum('estado', ESTADOS_PEDIDO, opcional=True),
    validar_enum('estado_pago', ESTADOS_PAGO, opcional=True),
    validar_string('notas', 1, 1000, opcional=True),
)
def actualizar(id):
    pedido = buscar_pedido(id)
    datos = g.body
    if not any(datos.get(campo) is not None for campo in ('estado', 'estado_pago', 'notas')):
        raise SolicitudInvalida('Debe indicar estado, estado_pago o notas')

    try:
        if datos.get('estado'):
            pedido.estado = datos['estado']
        if datos.get('estado_pago'):
            pedido.estado_pago = datos['estado_pago']
        if datos.get('notas') is not None:
            pedido.notas = datos['notas']
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Pedido %s actualizado: estado=%s pago=%s', pedido.numero, pedido.estado, pedido.estado_pago)
    return jsonify({
        'success': True,
        'mensaje': 'Pedido actualizado exitosamente',
        'pedido': pedido.to_dict()
    })


@bp.route('/<int:id>', methods=['DELETE'])
@operador_o_admin
def eliminar(id):
    pedido = buscar_pedido(id)
    try:
        db.session.delete(pedido)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Pedido eliminado: %s', pedido.numero)
    return jsonify({'success': True, 'mensaje': 'Pedido eliminado exitosamente'})
