from flask import Blueprint, jsonify, g, current_app
from sqlalchemy import func, or_
from gestionbot import db
from gestionbot.models import Cliente
from gestionbot.errores import NoEncontrado, SolicitudInvalida
from gestionbot.permisos import autenticado, operador_o_admin
from gestionbot.paginacion import paginar, paginacion_dict, ultimo
from gestionbot.texto import limpiar_telefono
from gestionbot.validacion import validar, validar_telefono, validar_string, validar_paginacion, validar_busqueda

bp = Blueprint('clientes', __name__, url_prefix='/api/clientes')


def buscar_cliente(telefono):
    cliente = Cliente.query.filter_by(telefono=limpiar_telefono(telefono)).first()
    if not cliente:
        raise NoEncontrado('Cliente no encontrado')
    return cliente


@bp.route('', methods=['GET'])
@autenticado
@validar(
    validar_paginacion(),
    validar_busqueda('search'),
)
def listar():
    consulta = Cliente.query

    search = ultimo(g.query.get('search'))
    if search:
        patron = f'%{search.lower()}%'
        consulta = consulta.filter(or_(
            func.lower(Cliente.nombre).like(patron),
            Cliente.telefono.like(f'%{search}%')
        ))

    pagina = paginar(consulta.order_by(Cliente.ultima_interaccion.desc()))
    return jsonify({
        'success': True,
        'clientes': [c.to_dict() for c in pagina.items],
        'pagination': paginacion_dict(pagina)
    })


@bp.route('/<telefono>', methods=['GET'])
@autenticado
def obtener(telefono):
    cliente = buscar_cliente(telefono)
    return jsonify({'success': True, 'cliente': cliente.to_dict(incluir_pedidos=True)})


@bp.route('', methods=['POST'])
@operador_o_admin
@validar(
    validar_telefono(),
    validar_string('nombre', 1, 200, opcional=True),
)
def crear():
    telefono = limpiar_telefono(g.body['telefono'])
    if Cliente.query.filter_by(telefono=telefono).first():
        raise SolicitudInvalida('Ya existe un cliente con ese teléfono')

    try:
        cliente = Cliente(telefono=telefono, nombre=g.body.get('nombre') or 'Cliente WhatsApp')
        db.session.add(cliente)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Cliente creado: %s', telefono)
    return jsonify({
        'success': True,
        'mensaje': 'Cliente creado exitosamente',
        'cliente': cliente.to_dict()
    }), 201


@bp.route('/<telefono>', methods=['PUT'])
@operador_o_admin
@validar(validar_string('nombre', 1, 200))
def actualizar(telefono):
    cliente = buscar_cliente(telefono)
    try:
        cliente.nombre = g.body['nombre']
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({
        'success': True,
        'mensaje': 'Cliente actualizado exitosamente',
        'cliente': cliente.to_dict()
    })


@bp.route('/<telefono>', methods=['DELETE'])
@operador_o_admin
def eliminar(telefono):
    cliente = buscar_cliente(telefono)
    try:
        # Los pedidos del cliente se eliminan en cascada
        db.session.delete(cliente)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Cliente eliminado: %s', cliente.telefono)
    return jsonify({'success': True, 'mensaje': 'Cliente eliminado exitosamente'})
