from gestionbot import db

from conftest import crear_producto


def test_estadisticas(operador):
    generala = crear_producto(operador, precio=1000)
    truco = crear_producto(operador, nombre='Truco', precio=300)
    crear_producto(operador, nombre='Dados', precio=200, stock=False)

    for cantidad in (1, 2):
        operador.post('/api/pedidos', json={'cliente_telefono': '5491100000001',
                                            'items': [{'producto_id': generala['id'], 'cantidad': cantidad}]})
    r = operador.post('/api/pedidos', json={'cliente_telefono': '5491100000002',
                                            'items': [{'producto_id': truco['id'], 'cantidad': 1}]})
    operador.put(f'/api/pedidos/{r.get_json()["pedido"]["id"]}', json={'estado': 'CANCELADO'})

    datos = operador.get('/api/estadisticas').get_json()['data']
    assert datos['clientes']['total'] == 2
    assert datos['productos'] == {'total': 3, 'sin_stock': 1}
    assert datos['pedidos']['total'] == 3
    assert datos['pedidos']['hoy'] == 3
    assert datos['pedidos']['por_estado']['PENDIENTE'] == 2
    assert datos['pedidos']['por_estado']['CANCELADO'] == 1
    assert datos['pedidos']['total_vendido'] == 3000
    assert datos['productos_mas_vendidos'] == [{'nombre': 'Generala', 'cantidad': 3, 'total': 3000}]


def test_estadisticas_requieren_sesion(client):
    assert client.get('/api/estadisticas').status_code == 401


def test_health(client):
    r = client.get('/health')
    assert r.status_code == 200
    datos = r.get_json()
    assert datos['status'] == 'ok'
    assert datos['database'] == 'healthy'
    assert datos['version'] == '2.0.0'


def test_health_sin_base_de_datos(client, monkeypatch):
    def falla(*args, **kwargs):
        raise RuntimeError('conexión rechazada')

    monkeypatch.setattr(db.session, 'execute', falla)
    r = client.get('/health')
    assert r.status_code == 503
    assert r.get_json()['database'] == 'unhealthy'


def test_status(client):
    r = client.get('/api/status')
    assert r.get_json()['status'] == 'online'


def test_ruta_inexistente(client):
    r = client.get('/api/no-existe')
    assert r.status_code == 404
    assert r.get_json()['path'] == '/api/no-existe'


def test_metodo_no_permitido(client):
    r = client.patch('/api/status')
    assert r.status_code == 405
    assert r.get_json()['error'] == 'Method Not Allowed'
