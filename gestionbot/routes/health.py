import time
from datetime import datetime
from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from gestionbot import db, limiter

bp = Blueprint('health', __name__)

INICIO = time.monotonic()


def _estado_base():
    return {
        'timestamp': datetime.utcnow().isoformat(),
        'uptime': round(time.monotonic() - INICIO, 2),
        'version': current_app.config['VERSION']
    }


@bp.route('/health', methods=['GET'])
@limiter.exempt
def health():
    """Chequeo para el balanceador: responde 503 si la base no contesta"""
    inicio = time.monotonic()
    try:
        db.session.execute(text('SELECT 1'))
    except Exception as e:
        current_app.logger.error('Health check: base de datos no disponible: %s', e)
        return jsonify({**_estado_base(), 'status': 'error', 'database': 'unhealthy', 'message': str(e)}), 503

    latencia = round((time.monotonic() - inicio) * 1000, 2)
    return jsonify({**_estado_base(), 'status': 'ok', 'database': 'healthy', 'database_latency_ms': latencia})


@bp.route('/api/status', methods=['GET'])
def status():
    return jsonify({
        **_estado_base(),
        'success': True,
        'status': 'online',
        'servicio': 'GestionBot API'
    })
