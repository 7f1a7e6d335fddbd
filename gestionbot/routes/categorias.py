from flask import Blueprint, jsonify, g, current_app
from gestionbot import db
from gestionbot.models import Categoria, Producto
from gestionbot.errores import NoEncontrado, SolicitudInvalida
from gestionbot.permisos import autenticado, operador_o_admin
from gestionbot.texto import normalizar_texto, formatear_texto
from gestionbot.validacion import validar, validar_string

bp = Blueprint('categorias', __name__, url_prefix='/api/categorias')


def _existe(nombre):
    return (Categoria.query.filter_by(nombre=nombre).first() is not None
            or Producto.query.filter_by(categoria=nombre).first() is not None)


@bp.route('', methods=['GET'])
@autenticado
def listar():
    agrupadas = {}
    for categoria in Categoria.query.all():
        agrupadas.setdefault(categoria.nombre, set()).add(categoria.subcategoria)

    # Parejas usadas por productos que no pasaron por la tabla de categorías
    parejas = db.session.query(Producto.categoria, Producto.subcategoria).distinct().all()
    for nombre, subcategoria in parejas:
        agrupadas.setdefault(nombre, set()).add(subcategoria)

    categorias = []
    for nombre in sorted(agrupadas):
        categorias.append({
            'nombre': nombre,
            'etiqueta': formatear_texto(nombre),
            'subcategorias': sorted(agrupadas[nombre]),
            'total_productos': Producto.query.filter_by(categoria=nombre).count()
        })

    return jsonify({'success': True, 'total': len(categorias), 'categorias': categorias})


@bp.route('', methods=['POST'])
@operador_o_admin
@validar(
    validar_string('nombre', 1, 100),
    validar_string('subcategoria', 1, 100),
)
def crear():
    nombre = normalizar_texto(g.body['nombre'])
    subcategoria = normalizar_texto(g.body['subcategoria'])
    if not nombre or not subcategoria:
        raise SolicitudInvalida('Nombre y subcategoría son requeridos')

    try:
        Categoria.asegurar(nombre, subcategoria)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Categoría creada: %s/%s', nombre, subcategoria)
    return jsonify({
        'success': True,
        'mensaje': 'Categoría creada exitosamente',
        'categoria': nombre,
        'subcategoria': subcategoria
    }), 201


@bp.route('/<nombre>', methods=['PUT'])
@operador_o_admin
@validar(validar_string('nuevo_nombre', 1, 100))
def renombrar(nombre):
    actual = normalizar_texto(nombre)
    nuevo = normalizar_texto(g.body['nuevo_nombre'])
    if not nuevo:
        raise SolicitudInvalida('El nuevo nombre es obligatorio')

    if not _existe(actual):
        raise NoEncontrado(f'La categoría "{nombre}" no existe')
    if actual != nuevo and _existe(nuevo):
        raise SolicitudInvalida(f'Ya existe una categoría con el nombre "{g.body["nuevo_nombre"]}"')

    try:
        Categoria.query.filter_by(nombre=actual).update({'nombre': nuevo}, synchronize_session=False)
        actualizados = Producto.query.filter_by(categoria=actual).update({'categoria': nuevo}, synchronize_session=False)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Categoría renombrada: %s -> %s (%s productos)', actual, nuevo, actualizados)
    return jsonify({
        'success': True,
        'mensaje': 'Categoría renombrada exitosamente',
        'nombre_anterior': actual,
        'nombre_nuevo': nuevo,
        'productos_actualizados': actualizados
    })


@bp.route('/<nombre>', methods=['DELETE'])
@operador_o_admin
def eliminar(nombre):
    actual = normalizar_texto(nombre)
    if not _existe(actual):
        raise NoEncontrado('Categoría no encontrada')

    try:
        # Uno por uno para que los items de pedidos queden sin producto
        productos = Producto.query.filter_by(categoria=actual).all()
        for producto in productos:
            db.session.delete(producto)
        Categoria.query.filter_by(nombre=actual).delete(synchronize_session=False)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Categoría eliminada: %s (%s productos)', actual, len(productos))
    return jsonify({
        'success': True,
        'mensaje': 'Categoría eliminada exitosamente',
        'productos_eliminados': len(productos)
    })
