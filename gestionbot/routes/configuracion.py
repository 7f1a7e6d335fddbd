from decimal import Decimal
from flask import Blueprint, jsonify, g, current_app
from gestionbot import db
from gestionbot.models import ConfiguracionBot, RESPUESTAS_DEFECTO
from gestionbot.permisos import autenticado, operador_o_admin, solo_admin
from gestionbot.validacion import validar, validar_string, validar_numero, validar_booleano, body

bp = Blueprint('configuracion', __name__, url_prefix='/api')


def _es_mapa_de_listas(valor):
    if not isinstance(valor, dict):
        raise ValueError('palabras_clave debe ser un objeto')
    for clave, palabras in valor.items():
        if not isinstance(palabras, list) or not all(isinstance(p, str) for p in palabras):
            raise ValueError(f'palabras_clave.{clave} debe ser una lista de textos')
    return True


def _es_mapa_de_textos(valor):
    if not isinstance(valor, dict) or not valor:
        raise ValueError('respuestas debe ser un objeto con al menos una respuesta')
    for clave, texto in valor.items():
        if not isinstance(texto, str) or not texto.strip():
            raise ValueError(f'La respuesta "{clave}" no puede estar vacía')
    return True


# Datos del negocio
@bp.route('/configuracion', methods=['GET'])
@autenticado
def obtener_configuracion():
    config = ConfiguracionBot.obtener_configuracion()
    return jsonify({'success': True, 'configuracion': config.negocio_dict()})


@bp.route('/configuracion', methods=['PUT'])
@operador_o_admin
@validar(
    validar_string('nombre_negocio', 1, 200, opcional=True),
    body('telefono').opcional().trim().longitud(maximo=50),
    body('direccion').opcional().trim().longitud(maximo=500),
    body('horario').opcional().trim().longitud(maximo=200),
)
def actualizar_configuracion():
    config = ConfiguracionBot.obtener_configuracion()
    try:
        for campo in ('nombre_negocio', 'telefono', 'direccion', 'horario'):
            if g.body.get(campo) is not None:
                setattr(config, campo, g.body[campo])
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Configuración del negocio actualizada')
    return jsonify({
        'success': True,
        'mensaje': 'Configuración actualizada exitosamente',
        'configuracion': config.negocio_dict()
    })


# Pedidos
@bp.route('/configuracion/pedidos', methods=['GET'])
@autenticado
def obtener_configuracion_pedidos():
    config = ConfiguracionBot.obtener_configuracion()
    return jsonify({'success': True, 'configuracion': config.pedidos_dict()})


@bp.route('/configuracion/pedidos', methods=['PUT'])
@operador_o_admin
@validar(
    validar_numero('costo_delivery', 0, opcional=True),
    validar_numero('pedido_minimo', 0, opcional=True),
    validar_booleano('acepta_delivery'),
)
def actualizar_configuracion_pedidos():
    config = ConfiguracionBot.obtener_configuracion()
    try:
        for campo in ('costo_delivery', 'pedido_minimo'):
            if g.body.get(campo) is not None:
                setattr(config, campo, Decimal(str(g.body[campo])))
        if g.body.get('acepta_delivery') is not None:
            config.acepta_delivery = g.body['acepta_delivery']
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({
        'success': True,
        'mensaje': 'Configuración de pedidos actualizada',
        'configuracion': config.pedidos_dict()
    })


# Palabras clave y respuestas
@bp.route('/configuracion/palabras-clave', methods=['GET'])
@autenticado
def obtener_palabras_clave():
    config = ConfiguracionBot.obtener_configuracion()
    return jsonify({'success': True, 'palabras_clave': config.palabras_clave or {}})


@bp.route('/configuracion/palabras-clave', methods=['PUT'])
@operador_o_admin
@validar(body('palabras_clave').personalizado(_es_mapa_de_listas))
def actualizar_palabras_clave():
    config = ConfiguracionBot.obtener_configuracion()
    palabras = {
        clave: [p.strip().lower() for p in lista if p.strip()]
        for clave, lista in g.body['palabras_clave'].items()
    }
    try:
        # Dict nuevo para que SQLAlchemy detecte el cambio en la columna JSON
        config.palabras_clave = palabras
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({
        'success': True,
        'mensaje': 'Palabras clave actualizadas',
        'palabras_clave': config.palabras_clave
    })


@bp.route('/respuestas', methods=['GET'])
@autenticado
def obtener_respuestas():
    config = ConfiguracionBot.obtener_configuracion()
    return jsonify({
        'success': True,
        'respuestas': config.respuestas or {},
        'respuestas_activas': config.respuestas_activas
    })


@bp.route('/respuestas', methods=['PUT'])
@operador_o_admin
@validar(body('respuestas').personalizado(_es_mapa_de_textos))
def actualizar_respuestas():
    config = ConfiguracionBot.obtener_configuracion()
    respuestas = dict(config.respuestas or {})
    respuestas.update(g.body['respuestas'])
    try:
        config.respuestas = respuestas
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.info('Respuestas actualizadas: %s', ', '.join(sorted(g.body['respuestas'])))
    return jsonify({
        'success': True,
        'mensaje': 'Respuestas actualizadas exitosamente',
        'respuestas': config.respuestas
    })


@bp.route('/respuestas/restaurar', methods=['POST'])
@solo_admin
def restaurar_respuestas():
    config = ConfiguracionBot.obtener_configuracion()
    try:
        config.respuestas = dict(RESPUESTAS_DEFECTO)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500

    current_app.logger.warning('Respuestas restauradas a sus valores por defecto')
    return jsonify({
        'success': True,
        'mensaje': 'Respuestas restauradas exitosamente',
        'respuestas': config.respuestas
    })
