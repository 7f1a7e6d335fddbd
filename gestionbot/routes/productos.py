from flask import Blueprint, jsonify, g, current_app
from sqlalchemy import func, or_
from gestionbot import db
from gestionbot.models import Producto, Categoria
from gestionbot.errores import NoEncontrado, SolicitudInvalida
from gestionbot.permisos import autenticado, operador_o_admin
from gestionbot.precios import precio_desde_datos
from gestionbot.paginacion import paginar, paginacion_dict, ordenar, ultimo
from gestionbot.texto import normalizar_texto, parsear_id_producto
from gestionbot.validacion import (validar, validar_string, validar_precio, validar_stock,
                                   validar_paginacion, validar_orden, validar_busqueda, body)

bp = Blueprint('productos', __name__, url_prefix='/api/productos')

CAMPOS_ORDEN = ('nombre', 'categoria', 'subcategoria', 'precio', 'fecha_creacion')


def buscar_producto(identificador):
    """Acepta el id numérico o la clave 'categoria::subcategoria::nombre'"""
    if identificador.isascii() and identificador.isdigit():
        producto = db.session.get(Producto, int(identificador))
    else:
        partes = parsear_id_producto(identificador)
        if not partes:
            raise SolicitudInvalida('ID de producto inválido')
        categoria, subcategoria, nombre = partes
        producto = Producto.query.filter_by(
            categoria=normalizar_texto(categoria),
            subcategoria=normalizar_texto(subcategoria),
            nombre=nombre
        ).first()

    if not producto:
        raise NoEncontrado('Producto no encontrado')
    return producto


def _verificar_duplicados(categoria, subcategoria, nombre, codigo_barras, excluir_id=None):
    existente = Producto.query.filter_by(categoria=categoria, subcategoria=subcategoria, nombre=nombre).first()
    if existente and existente.id != excluir_id:
        raise SolicitudInvalida(f'Ya existe el producto "{nombre}" en {categoria}/{subcategoria}')

    if codigo_barras:
        con_codigo = Producto.query.filter_by(codigo_barras=codigo_barras).first()
        if con_codigo and con_codigo.id != excluir_id:
            raise SolicitudInvalida(f'Ya existe un producto con el código de barras "{codigo_barras}"')


@bp.route('', methods=['GET'])
@autenticado
@validar(
    validar_paginacion(),
    validar_orden(CAMPOS_ORDEN),
    validar_busqueda('search'),
)
def listar():
    consulta = Producto.query

    categoria = g.query.get('categoria')
    if isinstance(categoria, list):
        consulta = consulta.filter(Producto.categoria.in_([normalizar_texto(c) for c in categoria]))
    elif categoria:
        consulta = consulta.filter(Producto.categoria == normalizar_texto(categoria))

    search = ultimo(g.query.get('search'))
    if search:
        patron = f'%{search.lower()}%'
        consulta = consulta.filter(or_(
            func.lower(Producto.nombre).like(patron),
            func.lower(Producto.subcategoria).like(patron)
        ))

    pagina = paginar(ordenar(consulta, Producto, 'nombre'))
    return jsonify({
        'success': True,
        'productos': [p.to_dict() for p in pagina.items],
        'pagination': paginacion_dict(pagina)
    })


@bp.route('/buscar-codigo/<codigo>', methods=['GET'])
@autenticado
def buscar_por_codigo(codigo):
    producto = Producto.query.filter_by(codigo_barras=codigo).first()
    if not producto:
        return jsonify({'success': True, 'encontrado': False, 'producto': None})
    return jsonify({'success': True, 'encontrado': True, 'producto': producto.to_dict()})


@bp.route('/<identificador>', methods=['GET'])
@autenticado
def obtener(identificador):
    producto = buscar_producto(identificador)
    return jsonify({'success': True, 'producto': producto.to_dict()})


@bp.route('', methods=['POST'])
@operador_o_admin
@validar(
    validar_string('categoria', 1, 100),
    validar_string('subcategoria', 1, 100),
    validar_string('nombre', 1, 200),
    validar_precio('precio', opcional=True),
    validar_precio('precio_desde', opcional=True),
    validar_string('unidad', 1, 50, opcional=True),
    validar_stock(),
    validar_string('codigo_barras', 1, 50, opcional=True),
)
def crear():
    datos = g.body
    tarifa = precio_desde_datos(datos)

    categoria = normalizar_texto(datos['categoria'])
    subcategoria = normalizar_texto(datos['subcategoria'])
    nombre = datos['nombre']
    codigo_barras = datos.get('codigo_barras') or None
    _verificar_duplicados(categoria, subcategoria, nombre, codigo_barras)

    try:
        producto = Producto(
            nombre=nombre,
            categoria=categoria,
            subcategoria=subcategoria,
            unidad=datos.get('unidad'),
            stock=datos.get('stock') is not False,
            codigo_barras=codigo_barras
        )
        producto.tarifa = tarifa
        Categoria.asegurar(categoria, subcategoria)
        db.session.add(producto)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error('Error creando producto: %s', e)
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Producto creado: %s', producto.clave)
    return jsonify({
        'success': True,
        'mensaje': 'Producto creado exitosamente',
        'producto': producto.to_dict()
    }), 201


@bp.route('/<identificador>', methods=['PUT'])
@operador_o_admin
@validar(
    validar_string('nombre', 1, 200, opcional=True),
    validar_string('nuevo_nombre', 1, 200, opcional=True),
    validar_string('categoria', 1, 100, opcional=True),
    validar_string('subcategoria', 1, 100, opcional=True),
    validar_precio('precio', opcional=True),
    validar_precio('precio_desde', opcional=True),
    validar_string('unidad', 1, 50, opcional=True),
    validar_stock(),
    # Vacío o null quitan el código
    body('codigo_barras').opcional().trim()
        .longitud(maximo=50, mensaje='codigo_barras debe tener como máximo 50 caracteres'),
)
def actualizar(identificador):
    producto = buscar_producto(identificador)
    datos = g.body
    tarifa = precio_desde_datos(datos, requerido=False)

    nombre = datos.get('nuevo_nombre') or datos.get('nombre') or producto.nombre
    categoria = normalizar_texto(datos['categoria']) if datos.get('categoria') else producto.categoria
    subcategoria = normalizar_texto(datos['subcategoria']) if datos.get('subcategoria') else producto.subcategoria
    if 'codigo_barras' in datos:
        codigo_barras = datos['codigo_barras'] or None
    else:
        codigo_barras = producto.codigo_barras
    _verificar_duplicados(categoria, subcategoria, nombre, codigo_barras, excluir_id=producto.id)

    try:
        producto.nombre = nombre
        producto.categoria = categoria
        producto.subcategoria = subcategoria
        producto.codigo_barras = codigo_barras
        if tarifa is not None:
            # Asignar una variante borra la otra
            producto.tarifa = tarifa
        if datos.get('unidad') is not None:
            producto.unidad = datos['unidad']
        if datos.get('stock') is not None:
            producto.stock = datos['stock']
        Categoria.asegurar(categoria, subcategoria)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error('Error actualizando producto %s: %s', identificador, e)
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({
        'success': True,
        'mensaje': 'Producto actualizado exitosamente',
        'producto': producto.to_dict()
    })


@bp.route('/<identificador>', methods=['DELETE'])
@operador_o_admin
def eliminar(identificador):
    producto = buscar_producto(identificador)
    try:
        db.session.delete(producto)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Producto eliminado: %s', identificador)
    return jsonify({'success': True, 'mensaje': 'Producto eliminado exitosamente'})
