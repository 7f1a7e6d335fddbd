import re

from flask import g, request, current_app

from gestionbot.errores import respuesta_error

TAG_RE = re.compile(r'<[^>]*>')

CABECERAS_SEGURIDAD = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
    'Permissions-Policy': 'geolocation=(), microphone=(), camera=()',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
}


def _clave_prohibida(clave):
    return isinstance(clave, str) and (clave.startswith('$') or '.' in clave)


def quitar_claves_nosql(valor):
    """Elimina recursivamente las claves que empiezan con '$' o contienen '.'"""
    if isinstance(valor, dict):
        return {k: quitar_claves_nosql(v) for k, v in valor.items() if not _clave_prohibida(k)}
    if isinstance(valor, list):
        return [quitar_claves_nosql(v) for v in valor]
    return valor


def limpiar_xss(valor):
    """Quita etiquetas HTML y los caracteres '<' '>' sueltos de cada string"""
    if isinstance(valor, dict):
        return {k: limpiar_xss(v) for k, v in valor.items()}
    if isinstance(valor, list):
        return [limpiar_xss(v) for v in valor]
    if isinstance(valor, str):
        return TAG_RE.sub('', valor).replace('<', '').replace('>', '')
    return valor


def recortar(valor):
    if isinstance(valor, dict):
        return {k: recortar(v) for k, v in valor.items()}
    if isinstance(valor, list):
        return [recortar(v) for v in valor]
    if isinstance(valor, str):
        return valor.strip()
    return valor


def colapsar_duplicados(multidict, whitelist):
    """Un solo valor (el último) por parámetro, salvo los de la whitelist"""
    resultado = {}
    for clave in multidict.keys():
        valores = multidict.getlist(clave)
        if clave in whitelist and len(valores) > 1:
            resultado[clave] = valores
        else:
            resultado[clave] = valores[-1]
    return resultado


def sanitizar(valor):
    return recortar(limpiar_xss(quitar_claves_nosql(valor)))


def limitar_tamano():
    limite = current_app.config.get('MAX_CONTENT_LENGTH')
    if limite and request.content_length and request.content_length > limite:
        return respuesta_error(413, 'Payload Too Large',
                               f'Request size exceeds {limite // (1024 * 1024)}mb')


def sanitizar_peticion():
    datos = request.get_json(silent=True) if request.is_json else None
    g.body = sanitizar(datos) if isinstance(datos, dict) else {}

    consulta = colapsar_duplicados(request.args, current_app.config['HPP_WHITELIST'])
    g.query = sanitizar(consulta)

    if request.view_args:
        request.view_args = sanitizar(request.view_args)


def agregar_cabeceras(response):
    for nombre, valor in CABECERAS_SEGURIDAD.items():
        response.headers[nombre] = valor
    return response


def registrar_seguridad(app):
    # El orden importa: primero el tamaño, después la limpieza
    app.before_request(limitar_tamano)
    app.before_request(sanitizar_peticion)
    app.after_request(agregar_cabeceras)
