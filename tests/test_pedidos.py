from decimal import Decimal

from gestionbot import db
from gestionbot.models import Cliente, Pedido

from conftest import crear_producto

TELEFONO = '5491122334455'


def nuevo_pedido(client, items, **datos):
    pedido = {'cliente_telefono': TELEFONO, 'items': items}
    pedido.update(datos)
    return client.post('/api/pedidos', json=pedido)


def test_crear_pedido_calcula_totales_y_actualiza_cliente(app, operador):
    producto = crear_producto(operador, precio=1000)
    r = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 2}],
                     tipo_entrega='delivery', descuento_porcentaje=10)
    assert r.status_code == 201
    pedido = r.get_json()['pedido']
    assert pedido['numero'] == 'PED-0001'
    assert pedido['subtotal'] == 2000
    assert pedido['descuento'] == 200
    assert pedido['delivery'] == 500
    assert pedido['total'] == 2300
    assert pedido['estado'] == 'PENDIENTE'
    assert pedido['items'][0]['precio_unitario'] == 1000

    with app.app_context():
        cliente = Cliente.query.filter_by(telefono=TELEFONO).one()
        assert cliente.nombre == 'Cliente WhatsApp'
        assert cliente.total_pedidos == 1
        assert cliente.total_gastado == Decimal('2300.00')


def test_numeros_de_pedido_correlativos(operador):
    producto = crear_producto(operador)
    numeros = [nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}]).get_json()['pedido']['numero']
               for _ in range(3)]
    assert numeros == ['PED-0001', 'PED-0002', 'PED-0003']


def test_retiro_no_cobra_delivery(operador):
    producto = crear_producto(operador, precio=1000)
    pedido = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}]).get_json()['pedido']
    assert pedido['tipo_entrega'] == 'RETIRO'
    assert pedido['delivery'] == 0
    assert pedido['total'] == 1000


def test_producto_sin_stock(app, operador):
    producto = crear_producto(operador, stock=False)
    r = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}])
    assert r.status_code == 400
    assert 'sin stock' in r.get_json()['message']
    with app.app_context():
        assert Pedido.query.count() == 0
        assert Cliente.query.count() == 0


def test_producto_inexistente(operador):
    r = nuevo_pedido(operador, [{'producto_id': 999, 'cantidad': 1}])
    assert r.status_code == 400


def test_items_invalidos(operador):
    r = nuevo_pedido(operador, [])
    assert r.status_code == 400
    r = nuevo_pedido(operador, [{'producto_id': 1, 'cantidad': 0}])
    assert r.status_code == 400
    assert r.get_json()['errors'][0]['field'] == 'items[0].cantidad'


def test_descuento_fuera_de_rango(operador):
    producto = crear_producto(operador)
    r = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}], descuento_porcentaje=150)
    assert r.status_code == 400
    assert r.get_json()['errors'][0]['field'] == 'descuento_porcentaje'


def test_precio_desde_usa_el_minimo_o_el_indicado(operador):
    producto = crear_producto(operador, precio=None, precio_desde=1500)
    pedido = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}]).get_json()['pedido']
    assert pedido['items'][0]['precio_unitario'] == 1500

    pedido = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1,
                                      'precio_unitario': 1800}]).get_json()['pedido']
    assert pedido['items'][0]['precio_unitario'] == 1800

    r = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1, 'precio_unitario': 1200}])
    assert r.status_code == 400


def test_delivery_deshabilitado_y_pedido_minimo(operador):
    producto = crear_producto(operador, precio=100)
    operador.put('/api/configuracion/pedidos', json={'acepta_delivery': False, 'pedido_minimo': 500})

    r = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}], tipo_entrega='DELIVERY')
    assert r.status_code == 400
    r = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}])
    assert r.status_code == 400
    assert 'mínimo' in r.get_json()['message']
    r = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 5}])
    assert r.status_code == 201


def test_listar_filtrar_y_actualizar_estado(operador):
    producto = crear_producto(operador)
    pedido = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}]).get_json()['pedido']
    nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}])

    r = operador.put(f'/api/pedidos/{pedido["id"]}', json={'estado': 'confirmado', 'estado_pago': 'PAGADO'})
    assert r.status_code == 200
    assert r.get_json()['pedido']['estado'] == 'CONFIRMADO'
    assert r.get_json()['pedido']['estado_pago'] == 'PAGADO'

    datos = operador.get('/api/pedidos?estado=CONFIRMADO').get_json()
    assert [p['id'] for p in datos['pedidos']] == [pedido['id']]
    assert datos['pagination']['total'] == 1

    assert operador.put(f'/api/pedidos/{pedido["id"]}', json={'estado': 'VOLANDO'}).status_code == 400
    assert operador.put(f'/api/pedidos/{pedido["id"]}', json={}).status_code == 400


def test_resumen_para_whatsapp(operador):
    producto = crear_producto(operador, precio=1150)
    pedido = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 2}],
                          tipo_entrega='DELIVERY').get_json()['pedido']

    resumen = operador.get(f'/api/pedidos/{pedido["id"]}/resumen').get_json()['resumen']
    assert '*PEDIDO PED-0001*' in resumen
    assert 'Generala x2 - $2.300' in resumen
    assert 'Delivery: $500' in resumen
    assert '*TOTAL: $2.800*' in resumen
    assert '⏳ Pendiente' in resumen


def test_eliminar_pedido(app, operador):
    producto = crear_producto(operador)
    pedido = nuevo_pedido(operador, [{'producto_id': producto['id'], 'cantidad': 1}]).get_json()['pedido']
    assert operador.delete(f'/api/pedidos/{pedido["id"]}').status_code == 200
    assert operador.get(f'/api/pedidos/{pedido["id"]}').status_code == 404
    with app.app_context():
        assert db.session.query(Pedido).count() == 0


def test_cantidad_infinita_es_item_invalido(operador):
    producto = crear_producto(operador)
    cuerpo = '{"cliente_telefono": "%s", "items": [{"producto_id": %d, "cantidad": Infinity}]}' % (
        TELEFONO, producto['id'])
    r = operador.post('/api/pedidos', data=cuerpo, content_type='application/json')
    assert r.status_code == 400
    assert r.get_json()['errors'][0]['field'] == 'items[0].cantidad'
