def test_crear_y_obtener_cliente(operador):
    r = operador.post('/api/clientes', json={'telefono': '+5491122334455', 'nombre': 'Ana'})
    assert r.status_code == 201
    cliente = r.get_json()['cliente']
    assert cliente['telefono'] == '5491122334455'
    assert cliente['total_pedidos'] == 0

    r = operador.get('/api/clientes/5491122334455')
    assert r.status_code == 200
    assert r.get_json()['cliente']['nombre'] == 'Ana'
    assert r.get_json()['cliente']['pedidos'] == []


def test_telefono_invalido(operador):
    r = operador.post('/api/clientes', json={'telefono': 'abc'})
    assert r.status_code == 400
    assert r.get_json()['errors'][0]['field'] == 'telefono'


def test_telefono_duplicado(operador):
    operador.post('/api/clientes', json={'telefono': '5491122334455'})
    r = operador.post('/api/clientes', json={'telefono': '+5491122334455'})
    assert r.status_code == 400


def test_cliente_inexistente(operador):
    assert operador.get('/api/clientes/5490000000000').status_code == 404


def test_buscar_clientes(operador):
    operador.post('/api/clientes', json={'telefono': '5491100000001', 'nombre': 'Ana Pérez'})
    operador.post('/api/clientes', json={'telefono': '5491100000002', 'nombre': 'Bruno'})

    r = operador.get('/api/clientes?search=ana')
    assert [c['nombre'] for c in r.get_json()['clientes']] == ['Ana Pérez']
    r = operador.get('/api/clientes?search=0002')
    assert [c['nombre'] for c in r.get_json()['clientes']] == ['Bruno']


def test_actualizar_y_eliminar_cliente(operador):
    operador.post('/api/clientes', json={'telefono': '5491100000001'})
    r = operador.put('/api/clientes/5491100000001', json={'nombre': 'Carla'})
    assert r.get_json()['cliente']['nombre'] == 'Carla'

    assert operador.delete('/api/clientes/5491100000001').status_code == 200
    assert operador.get('/api/clientes/5491100000001').status_code == 404
