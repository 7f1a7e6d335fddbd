"""
Operaciones de mantenimiento protegidas por token.

No usan la sesión de Flask-Login: cada llamada debe traer la cabecera
``x-migration-token`` con el valor de ``MIGRATION_SECRET``. Pensadas para
el primer despliegue, cuando todavía no existe ningún usuario.
"""
import hmac
import subprocess
from functools import wraps

from flask import Blueprint, jsonify, request, g, current_app
from sqlalchemy import inspect

from gestionbot import db, limiter
from gestionbot.errores import NoAutorizado
from gestionbot.models import Usuario, Producto, Cliente, Pedido
from gestionbot.servicios import crear_usuario
from gestionbot.validacion import validar, validar_email, validar_string, body

bp = Blueprint('admin', __name__, url_prefix='/admin')
limiter.limit(lambda: current_app.config['LIMITE_ADMIN'])(bp)

CABECERA_TOKEN = 'x-migration-token'


def token_requerido(f):
    """Decorador que compara la cabecera con MIGRATION_SECRET en tiempo constante"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        secreto = current_app.config.get('MIGRATION_SECRET')
        token = request.headers.get(CABECERA_TOKEN, '')
        if not secreto or not hmac.compare_digest(token.encode(), secreto.encode()):
            current_app.logger.warning('Acceso admin rechazado desde %s a %s', request.remote_addr, request.path)
            raise NoAutorizado('Forbidden')
        return f(*args, **kwargs)
    return decorated_function


@bp.route('/migrate', methods=['POST'])
@token_requerido
def migrate():
    comando = current_app.config['MIGRATION_COMMAND']
    current_app.logger.info('Ejecutando migraciones: %s', ' '.join(comando))
    try:
        resultado = subprocess.run(comando, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        current_app.logger.error('Migración fallida (código %s): %s', e.returncode, e.stderr)
        return jsonify({'success': False, 'error': str(e), 'stdout': e.stdout, 'stderr': e.stderr}), 500
    except Exception as e:
        current_app.logger.error('No se pudo ejecutar la migración: %s', e)
        return jsonify({'success': False, 'error': str(e), 'stdout': None, 'stderr': None}), 500

    return jsonify({
        'success': True,
        'stdout': resultado.stdout,
        'stderr': resultado.stderr,
        'message': 'Migraciones ejecutadas correctamente'
    })


@bp.route('/create-admin', methods=['POST'])
@token_requerido
@validar(
    validar_email(),
    body('password').no_vacio('La contraseña es requerida'),
    validar_string('nombre', 1, 200),
)
def create_admin():
    try:
        admin = crear_usuario(g.body['email'], g.body['password'], g.body['nombre'], rol='ADMIN')
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Administrador creado: %s', admin.email)
    return jsonify({
        'success': True,
        'admin': {
            'id': admin.id,
            'email': admin.email,
            'nombre': admin.nombre,
            'rol': admin.rol
        }
    })


@bp.route('/db-status', methods=['GET'])
@token_requerido
def db_status():
    try:
        tablas = sorted(inspect(db.engine).get_table_names())
        conteos = {
            'usuarios': Usuario.query.count(),
            'productos': Producto.query.count(),
            'clientes': Cliente.query.count(),
            'pedidos': Pedido.query.count()
        }
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({'success': True, 'tables': tablas, 'counts': conteos})
