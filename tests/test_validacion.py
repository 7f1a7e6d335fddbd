from gestionbot.validacion import (body, query, ejecutar_cadenas, validar_email, validar_password,
                                   validar_telefono, validar_paginacion, validar_orden, validar_array,
                                   validar_enum, validar_numero, validar_busqueda)


def errores_de(cadenas, body_datos=None, query_datos=None):
    return ejecutar_cadenas(cadenas, {'body': body_datos or {}, 'query': query_datos or {}, 'params': {}})


def test_limit_acepta_100_y_rechaza_101():
    assert errores_de(validar_paginacion(), query_datos={'limit': '100'}) == []

    errores = errores_de(validar_paginacion(), query_datos={'limit': '101'})
    assert len(errores) == 1
    assert errores[0]['field'] == 'limit'
    assert errores[0]['message'] == 'limit debe ser entre 1 y 100'


def test_page_cero_es_invalido():
    errores = errores_de(validar_paginacion(), query_datos={'page': '0'})
    assert errores[0]['field'] == 'page'


def test_paginacion_convierte_a_entero():
    datos = {'page': '3', 'limit': '20'}
    errores_de(validar_paginacion(), query_datos=datos)
    assert datos == {'page': 3, 'limit': 20}


def test_email_se_normaliza_a_minusculas():
    datos = {'email': '  Ana@Ejemplo.COM '}
    assert errores_de([validar_email()], body_datos=datos) == []
    assert datos['email'] == 'ana@ejemplo.com'


def test_password_requiere_mayusculas_minusculas_y_numeros():
    errores = errores_de([validar_password()], body_datos={'password': 'solominusculas1'})
    assert errores[0]['message'] == 'La contraseña debe contener mayúsculas, minúsculas y números'
    assert errores_de([validar_password()], body_datos={'password': 'Correcta123'}) == []


def test_telefono_formato_internacional():
    assert errores_de([validar_telefono()], body_datos={'telefono': '+5491123456789'}) == []
    errores = errores_de([validar_telefono()], body_datos={'telefono': '011-1234'})
    assert errores[0]['field'] == 'telefono'


def test_cadena_se_detiene_en_el_primer_error():
    cadena = body('nombre').no_vacio('vacío').longitud(minimo=3, mensaje='corto')
    errores = errores_de([cadena], body_datos={'nombre': ''})
    assert [e['message'] for e in errores] == ['vacío']


def test_todas_las_cadenas_reportan_sus_errores():
    errores = errores_de([validar_email(), validar_telefono()], body_datos={})
    assert {e['field'] for e in errores} == {'email', 'telefono'}


def test_comprobaciones_por_elemento_en_listas():
    cadena = query('categoria').es_entero(mensaje='no es entero')
    assert errores_de([cadena], query_datos={'categoria': ['1', '2']}) == []
    errores = errores_de([cadena], query_datos={'categoria': ['1', 'x']})
    assert errores[0]['message'] == 'no es entero'


def test_validar_array_no_se_aplica_por_elemento():
    assert errores_de([validar_array('items', 1)], body_datos={'items': [1, 2]}) == []
    errores = errores_de([validar_array('items', 1)], body_datos={'items': []})
    assert errores[0]['field'] == 'items'


def test_orden_acepta_prefijo_descendente():
    cadena = validar_orden(['nombre', 'precio'])
    assert errores_de([cadena], query_datos={'sort': '-precio'}) == []
    errores = errores_de([cadena], query_datos={'sort': 'password'})
    assert errores[0]['message'] == 'sort debe ser uno de: nombre, precio'


def test_enum_pasa_a_mayusculas():
    datos = {'estado': ' pendiente '}
    assert errores_de([validar_enum('estado', ('PENDIENTE', 'PAGADO'))], body_datos=datos) == []
    assert datos['estado'] == 'PENDIENTE'


def test_numero_con_rango():
    cadena = validar_numero('descuento', 0, 100)
    assert errores_de([cadena], body_datos={'descuento': '15.5'}) == []
    errores = errores_de([validar_numero('descuento', 0, 100)], body_datos={'descuento': 150})
    assert errores[0]['message'] == 'descuento debe ser menor o igual a 100'


def test_campo_opcional_ausente_no_falla():
    assert errores_de([validar_numero('descuento', 0, 100, opcional=True)], body_datos={}) == []


def test_endpoint_responde_400_con_formato_de_validacion(admin):
    r = admin.get('/api/productos?limit=101')
    assert r.status_code == 400
    datos = r.get_json()
    assert datos['error'] == 'Validation Error'
    assert datos['errors'][0]['field'] == 'limit'
    assert 'value' in datos['errors'][0]

    assert admin.get('/api/productos?limit=100').status_code == 200


def test_busqueda_entre_2_y_100_caracteres():
    assert errores_de([validar_busqueda('search')], query_datos={'search': 'ab'}) == []
    errores = errores_de([validar_busqueda('search')], query_datos={'search': 'a'})
    assert errores[0]['message'] == 'La búsqueda debe tener entre 2 y 100 caracteres'
