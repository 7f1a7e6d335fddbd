from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException


class ErrorAplicacion(Exception):
    """Error controlado que se devuelve al cliente con su código HTTP"""
    status_code = 500
    error = 'Error'

    def __init__(self, mensaje, status_code=None):
        super().__init__(mensaje)
        self.mensaje = mensaje
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {
            'success': False,
            'error': self.error,
            'message': self.mensaje,
        }


class ErrorValidacion(ErrorAplicacion):
    status_code = 400
    error = 'Validation Error'

    def __init__(self, mensaje='Los datos enviados son inválidos', errores=None):
        super().__init__(mensaje)
        self.errores = errores or []

    def to_dict(self):
        datos = super().to_dict()
        if self.errores:
            datos['errors'] = self.errores
        return datos


class SolicitudInvalida(ErrorAplicacion):
    status_code = 400
    error = 'Bad Request'


class NoAutenticado(ErrorAplicacion):
    status_code = 401
    error = 'Unauthorized'

    def __init__(self, mensaje='No autenticado'):
        super().__init__(mensaje)


class NoAutorizado(ErrorAplicacion):
    status_code = 403
    error = 'Forbidden'

    def __init__(self, mensaje='No autorizado'):
        super().__init__(mensaje)


class NoEncontrado(ErrorAplicacion):
    status_code = 404
    error = 'Not Found'

    def __init__(self, mensaje='Recurso no encontrado'):
        super().__init__(mensaje)


def respuesta_error(status_code, error, mensaje=None, **extra):
    datos = {'success': False, 'error': error}
    if mensaje is not None:
        datos['message'] = mensaje
    datos.update(extra)
    return jsonify(datos), status_code


def registrar_manejadores(app):
    @app.errorhandler(ErrorAplicacion)
    def manejar_error_aplicacion(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def manejar_no_encontrado(e):
        return respuesta_error(404, 'Not Found', 'Ruta no encontrada',
                               path=request.path, method=request.method)

    @app.errorhandler(405)
    def manejar_metodo_no_permitido(e):
        return respuesta_error(405, 'Method Not Allowed',
                               f'Método {request.method} no permitido en {request.path}')

    @app.errorhandler(413)
    def manejar_payload_grande(e):
        limite = current_app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return respuesta_error(413, 'Payload Too Large', f'Request size exceeds {limite}mb')

    @app.errorhandler(429)
    def manejar_demasiadas_solicitudes(e):
        current_app.logger.warning('Límite excedido en %s %s desde %s', request.method, request.path,
                                   request.remote_addr)
        return respuesta_error(429, 'Too Many Requests',
                               'Demasiadas solicitudes, por favor intenta más tarde.',
                               limite=str(e.description))

    @app.errorhandler(Exception)
    def manejar_error_inesperado(e):
        if isinstance(e, HTTPException):
            return respuesta_error(e.code, e.name, e.description)
        current_app.logger.exception('Error no controlado en %s %s', request.method, request.path)
        return respuesta_error(500, 'Internal Server Error', str(e))
