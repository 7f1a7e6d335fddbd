from datetime import datetime
from flask import Blueprint, jsonify, g, current_app
from flask_login import login_user, logout_user, current_user
from gestionbot import db, limiter
from gestionbot.models import Usuario, ROLES
from gestionbot.errores import NoAutenticado, NoAutorizado, NoEncontrado, SolicitudInvalida
from gestionbot.permisos import autenticado, solo_admin
from gestionbot.servicios import crear_usuario
from gestionbot.validacion import (validar, validar_email, validar_password, validar_string, validar_enum,
                                   validar_id, body)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def buscar_usuario(id):
    usuario = db.session.get(Usuario, id)
    if not usuario:
        raise NoEncontrado('Usuario no encontrado')
    return usuario


@bp.route('/login', methods=['POST'])
@limiter.limit(lambda: current_app.config['LIMITE_LOGIN'], deduct_when=lambda r: r.status_code != 200)
@validar(
    validar_email(),
    body('password').no_vacio('La contraseña es requerida'),
)
def login():
    """Inicio de sesión"""
    usuario = Usuario.query.filter_by(email=g.body['email']).first()
    if not usuario or not usuario.check_password(g.body['password']):
        current_app.logger.warning('Login fallido para %s', g.body['email'])
        raise NoAutenticado('Email o contraseña incorrectos')
    if not usuario.activo:
        raise NoAutorizado('Usuario desactivado')

    login_user(usuario, remember=True)
    usuario.ultimo_acceso = datetime.utcnow()
    db.session.commit()

    current_app.logger.info('Login: %s (%s)', usuario.email, usuario.rol)
    return jsonify({'success': True, 'mensaje': f'¡Bienvenido, {usuario.nombre}!', 'usuario': usuario.to_dict()})


@bp.route('/logout', methods=['POST'])
@autenticado
def logout():
    """Cerrar sesión"""
    logout_user()
    return jsonify({'success': True, 'mensaje': 'Sesión cerrada correctamente'})


@bp.route('/me', methods=['GET'])
@autenticado
def me():
    return jsonify({'success': True, 'usuario': current_user.to_dict()})


@bp.route('/change-password', methods=['PUT'])
@autenticado
@validar(
    body('password_actual').no_vacio('La contraseña actual es requerida'),
    validar_password('password_nueva'),
)
def cambiar_password():
    if not current_user.check_password(g.body['password_actual']):
        raise SolicitudInvalida('La contraseña actual es incorrecta')
    if g.body['password_actual'] == g.body['password_nueva']:
        raise SolicitudInvalida('La nueva contraseña debe ser distinta a la actual')

    try:
        current_user.set_password(g.body['password_nueva'])
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({'success': True, 'mensaje': 'Contraseña actualizada correctamente'})


# Gestión de usuarios (solo ADMIN)
@bp.route('/users', methods=['GET'])
@solo_admin
def listar_usuarios():
    usuarios = Usuario.query.order_by(Usuario.nombre).all()
    return jsonify({'success': True, 'total': len(usuarios), 'usuarios': [u.to_dict() for u in usuarios]})


@bp.route('/users', methods=['POST'])
@solo_admin
@validar(
    validar_email(),
    validar_password(),
    validar_string('nombre', 2, 200),
    validar_enum('rol', ROLES, opcional=True),
)
def crear():
    try:
        usuario = crear_usuario(g.body['email'], g.body['password'], g.body['nombre'], g.body.get('rol') or 'VIEWER')
        db.session.commit()
    except SolicitudInvalida:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Usuario creado: %s (%s) por %s', usuario.email, usuario.rol, current_user.email)
    return jsonify({'success': True, 'mensaje': 'Usuario creado exitosamente', 'usuario': usuario.to_dict()}), 201


@bp.route('/users/<int:id>/role', methods=['PUT'])
@solo_admin
@validar(validar_id(), validar_enum('rol', ROLES))
def cambiar_rol(id):
    usuario = buscar_usuario(id)
    if usuario.id == current_user.id and g.body['rol'] != 'ADMIN':
        raise SolicitudInvalida('No puedes quitarte el rol de administrador')

    try:
        usuario.rol = g.body['rol']
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Rol de %s cambiado a %s', usuario.email, usuario.rol)
    return jsonify({'success': True, 'mensaje': 'Rol actualizado', 'usuario': usuario.to_dict()})


@bp.route('/users/<int:id>/status', methods=['PUT'])
@solo_admin
@validar(validar_id(), body('activo').es_booleano('activo debe ser true o false').a_booleano())
def cambiar_estado(id):
    usuario = buscar_usuario(id)
    if usuario.id == current_user.id and not g.body['activo']:
        raise SolicitudInvalida('No puedes desactivar tu propio usuario')

    try:
        usuario.activo = g.body['activo']
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Usuario %s %s', usuario.email, 'activado' if usuario.activo else 'desactivado')
    return jsonify({'success': True, 'mensaje': 'Estado actualizado', 'usuario': usuario.to_dict()})
