from flask import Blueprint, jsonify, current_app
from gestionbot import db
from gestionbot.models import ConfiguracionBot
from gestionbot.permisos import autenticado, operador_o_admin

bp = Blueprint('bot', __name__, url_prefix='/api')


@bp.route('/estado', methods=['GET'])
@autenticado
def estado():
    config = ConfiguracionBot.obtener_configuracion()
    return jsonify({
        'success': True,
        'estado': config.respuestas_activas,
        'respuestas_activas': config.respuestas_activas,
        'negocio': config.nombre_negocio
    })


@bp.route('/toggle-respuestas', methods=['POST'])
@operador_o_admin
def toggle_respuestas():
    """Activa o pausa las respuestas automáticas del bot"""
    config = ConfiguracionBot.obtener_configuracion()
    try:
        config.respuestas_activas = not config.respuestas_activas
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Respuestas automáticas %s', 'activadas' if config.respuestas_activas else 'pausadas')
    return jsonify({
        'success': True,
        'estado': config.respuestas_activas,
        'mensaje': 'Respuestas activadas' if config.respuestas_activas else 'Respuestas pausadas'
    })
