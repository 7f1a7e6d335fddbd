import logging
import time

from flask import g, request, current_app

FORMATO = '%(asctime)s %(levelname)s %(name)s %(message)s'


def configurar_logging(app):
    nivel = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if not app.debug and not app.testing:
        logging.basicConfig(level=nivel, format=FORMATO)
    app.logger.setLevel(nivel)

    @app.before_request
    def _iniciar_cronometro():
        g.inicio_peticion = time.perf_counter()

    @app.after_request
    def _registrar_peticion(response):
        inicio = g.get('inicio_peticion')
        duracion = (time.perf_counter() - inicio) * 1000 if inicio else 0
        current_app.logger.info('%s %s %s %.1fms', request.method, request.path,
                                response.status_code, duracion)
        return response
