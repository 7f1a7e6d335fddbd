from conftest import crear_producto


def test_crear_categoria_es_idempotente(operador):
    for _ in range(2):
        r = operador.post('/api/categorias', json={'nombre': 'Libros Usados', 'subcategoria': 'Novelas'})
        assert r.status_code == 201
    assert r.get_json()['categoria'] == 'libros_usados'

    categorias = operador.get('/api/categorias').get_json()['categorias']
    assert categorias == [{'nombre': 'libros_usados', 'etiqueta': 'Libros Usados',
                           'subcategorias': ['novelas'], 'total_productos': 0}]


def test_crear_categoria_requiere_subcategoria(operador):
    r = operador.post('/api/categorias', json={'nombre': 'Libros'})
    assert r.status_code == 400
    assert r.get_json()['errors'][0]['field'] == 'subcategoria'


def test_listado_agrupa_subcategorias_de_productos(operador):
    crear_producto(operador, subcategoria='Cartas', nombre='Truco')
    crear_producto(operador, subcategoria='Dados', nombre='Generala')

    categorias = operador.get('/api/categorias').get_json()['categorias']
    assert categorias[0]['nombre'] == 'juguetes'
    assert categorias[0]['subcategorias'] == ['cartas', 'dados']
    assert categorias[0]['total_productos'] == 2


def test_renombrar_categoria_actualiza_productos(operador):
    producto = crear_producto(operador)
    r = operador.put('/api/categorias/juguetes', json={'nuevo_nombre': 'Juegos'})
    assert r.status_code == 200
    assert r.get_json()['productos_actualizados'] == 1

    actualizado = operador.get(f'/api/productos/{producto["id"]}').get_json()['producto']
    assert actualizado['categoria'] == 'juegos'
    assert actualizado['clave'] == 'juegos::juegos_de_mesa::Generala'


def test_renombrar_categoria_inexistente(operador):
    r = operador.put('/api/categorias/nada', json={'nuevo_nombre': 'Algo'})
    assert r.status_code == 404


def test_renombrar_a_nombre_existente(operador):
    crear_producto(operador, categoria='Juguetes')
    crear_producto(operador, categoria='Libros', subcategoria='Novelas', nombre='Rayuela')
    r = operador.put('/api/categorias/juguetes', json={'nuevo_nombre': 'Libros'})
    assert r.status_code == 400


def test_eliminar_categoria_borra_sus_productos(operador):
    crear_producto(operador, nombre='Generala')
    crear_producto(operador, nombre='Truco')
    crear_producto(operador, categoria='Libros', subcategoria='Novelas', nombre='Rayuela')

    r = operador.delete('/api/categorias/juguetes')
    assert r.status_code == 200
    assert r.get_json()['productos_eliminados'] == 2

    restantes = operador.get('/api/productos').get_json()['productos']
    assert [p['nombre'] for p in restantes] == ['Rayuela']
    assert operador.delete('/api/categorias/juguetes').status_code == 404
