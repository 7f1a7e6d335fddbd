from gestionbot.models import RESPUESTAS_DEFECTO

from conftest import login


def test_configuracion_se_crea_con_valores_por_defecto(visor):
    r = visor.get('/api/configuracion')
    assert r.status_code == 200
    assert r.get_json()['configuracion']['nombre_negocio'] == 'Mi Negocio'

    pedidos = visor.get('/api/configuracion/pedidos').get_json()['configuracion']
    assert pedidos == {'costo_delivery': 500, 'pedido_minimo': 0, 'acepta_delivery': True}


def test_actualizar_datos_del_negocio(operador):
    r = operador.put('/api/configuracion', json={'nombre_negocio': 'Jugueteria Sol', 'horario': 'Lun a Sab 9-18'})
    assert r.status_code == 200
    configuracion = operador.get('/api/configuracion').get_json()['configuracion']
    assert configuracion['nombre_negocio'] == 'Jugueteria Sol'
    assert configuracion['horario'] == 'Lun a Sab 9-18'


def test_visor_no_puede_modificar_configuracion(visor):
    assert visor.put('/api/configuracion', json={'nombre_negocio': 'X'}).status_code == 403


def test_costo_delivery_negativo(operador):
    r = operador.put('/api/configuracion/pedidos', json={'costo_delivery': -1})
    assert r.status_code == 400


def test_palabras_clave(operador):
    r = operador.put('/api/configuracion/palabras-clave',
                     json={'palabras_clave': {'saludo': [' Hola ', 'BUENAS', ''], 'envio': ['delivery']}})
    assert r.status_code == 200
    palabras = operador.get('/api/configuracion/palabras-clave').get_json()['palabras_clave']
    assert palabras == {'saludo': ['hola', 'buenas'], 'envio': ['delivery']}

    r = operador.put('/api/configuracion/palabras-clave', json={'palabras_clave': {'saludo': 'hola'}})
    assert r.status_code == 400
    assert r.get_json()['errors'][0]['message'] == 'palabras_clave.saludo debe ser una lista de textos'


def test_respuestas_se_combinan(operador):
    r = operador.put('/api/respuestas', json={'respuestas': {'bienvenida': 'Hola! Bienvenido', 'promo': '2x1'}})
    assert r.status_code == 200
    respuestas = operador.get('/api/respuestas').get_json()['respuestas']
    assert respuestas['bienvenida'] == 'Hola! Bienvenido'
    assert respuestas['promo'] == '2x1'
    assert respuestas['despedida'] == RESPUESTAS_DEFECTO['despedida']

    assert operador.put('/api/respuestas', json={'respuestas': {'bienvenida': '  '}}).status_code == 400


def test_restaurar_respuestas_solo_admin(client):
    login(client, 'OPERATOR')
    client.put('/api/respuestas', json={'respuestas': {'bienvenida': 'Otra'}})
    assert client.post('/api/respuestas/restaurar').status_code == 403

    client.post('/api/auth/logout')
    login(client, 'ADMIN')
    r = client.post('/api/respuestas/restaurar')
    assert r.status_code == 200
    assert r.get_json()['respuestas'] == RESPUESTAS_DEFECTO


def test_toggle_respuestas(operador):
    assert operador.get('/api/estado').get_json()['estado'] is True

    r = operador.post('/api/toggle-respuestas')
    assert r.get_json()['estado'] is False
    assert r.get_json()['mensaje'] == 'Respuestas pausadas'
    assert operador.get('/api/estado').get_json()['respuestas_activas'] is False

    assert operador.post('/api/toggle-respuestas').get_json()['estado'] is True


def test_visor_no_puede_pausar_el_bot(visor):
    assert visor.post('/api/toggle-respuestas').status_code == 403
