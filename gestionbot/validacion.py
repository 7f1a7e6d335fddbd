"""
Validadores declarativos por campo.

Cada constructor devuelve una cadena de comprobaciones y sanitizadores sobre
un campo del body, del query string o de los parámetros de ruta. El
decorador ``validar`` ejecuta todas las cadenas antes de la vista y, si
alguna falla, corta la petición con un 400 que lista cada error como
``{field, message, value}``.

Ejemplo::

    @bp.route('/', methods=['POST'])
    @validar(validar_string('nombre', 1, 200), validar_paginacion())
    def crear():
        ...
"""
import html
import math
import re
from datetime import datetime
from functools import wraps
from urllib.parse import urlparse

from flask import g, request

from gestionbot.errores import ErrorValidacion

UBICACIONES = ('body', 'query', 'params')

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
TELEFONO_RE = re.compile(r'^\+?[1-9]\d{1,14}$')
PASSWORD_RE = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)')
ENTERO_RE = re.compile(r'^[+-]?\d+$')
NUMERICO_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)$')

VALORES_VERDADEROS = ('true', '1')
VALORES_BOOLEANOS = ('true', 'false', '1', '0')


class _Paso:
    __slots__ = ('tipo', 'fn', 'mensaje', 'por_elemento')

    def __init__(self, tipo, fn, mensaje=None, por_elemento=True):
        self.tipo = tipo
        self.fn = fn
        self.mensaje = mensaje
        self.por_elemento = por_elemento


def _es_numero(valor):
    return isinstance(valor, (int, float)) and not isinstance(valor, bool)


def _como_texto(valor):
    if valor is None:
        return ''
    if isinstance(valor, bool):
        return 'true' if valor else 'false'
    return str(valor)


def _a_float(valor):
    if _es_numero(valor):
        return float(valor)
    if isinstance(valor, str) and NUMERICO_RE.match(valor.strip()):
        return float(valor)
    return None


def _a_entero(valor):
    if isinstance(valor, int) and not isinstance(valor, bool):
        return valor
    if isinstance(valor, float) and valor.is_integer():
        return int(valor)
    if isinstance(valor, str) and ENTERO_RE.match(valor.strip()):
        return int(valor)
    return None


def _parsear_fecha(valor):
    if isinstance(valor, datetime):
        return valor
    if not isinstance(valor, str) or not valor:
        return None
    try:
        return datetime.fromisoformat(valor.replace('Z', '+00:00'))
    except ValueError:
        return None


class Cadena:
    """Comprobaciones encadenadas sobre un único campo.

    Se detiene en la primera comprobación que falla. Si el valor es una
    lista, las comprobaciones escalares y los sanitizadores se aplican a
    cada elemento.
    """

    def __init__(self, ubicacion, campo):
        if ubicacion not in UBICACIONES:
            raise ValueError(f'Ubicación desconocida: {ubicacion}')
        self.ubicacion = ubicacion
        self.campo = campo
        self._pasos = []
        self._opcional = False

    def __repr__(self):
        return f'<Cadena {self.ubicacion}.{self.campo} ({len(self._pasos)} pasos)>'

    # Configuración

    def opcional(self):
        """Omite la cadena cuando el campo no viene o es null"""
        self._opcional = True
        return self

    def con_mensaje(self, mensaje):
        """Reemplaza el mensaje de la última comprobación agregada"""
        for paso in reversed(self._pasos):
            if paso.tipo == 'check':
                paso.mensaje = mensaje
                return self
        raise ValueError('con_mensaje() requiere una comprobación previa')

    def _check(self, fn, mensaje=None, por_elemento=True):
        self._pasos.append(_Paso('check', fn, mensaje or f'{self.campo} inválido', por_elemento))
        return self

    def _sanitizar(self, fn):
        self._pasos.append(_Paso('sanitizar', fn))
        return self

    # Sanitizadores

    def trim(self):
        return self._sanitizar(lambda v: v.strip() if isinstance(v, str) else v)

    def a_minusculas(self):
        return self._sanitizar(lambda v: v.lower() if isinstance(v, str) else v)

    def a_mayusculas(self):
        return self._sanitizar(lambda v: v.upper() if isinstance(v, str) else v)

    def a_entero(self):
        return self._sanitizar(lambda v: _a_entero(v) if _a_entero(v) is not None else v)

    def a_float(self):
        return self._sanitizar(lambda v: _a_float(v) if _a_float(v) is not None else v)

    def a_booleano(self):
        def convertir(v):
            if isinstance(v, bool) or v is None:
                return v
            return _como_texto(v).strip().lower() in VALORES_VERDADEROS
        return self._sanitizar(convertir)

    def a_fecha(self):
        return self._sanitizar(lambda v: _parsear_fecha(v) or v)

    def escapar(self):
        return self._sanitizar(lambda v: html.escape(v) if isinstance(v, str) else v)

    # Comprobaciones

    def no_vacio(self, mensaje=None):
        return self._check(lambda v: _como_texto(v) != '', mensaje or f'{self.campo} es requerido')

    def es_email(self, mensaje=None):
        return self._check(lambda v: isinstance(v, str) and bool(EMAIL_RE.match(v)), mensaje)

    def coincide(self, patron, mensaje=None):
        regex = re.compile(patron) if isinstance(patron, str) else patron
        return self._check(lambda v: bool(regex.search(_como_texto(v))), mensaje)

    def longitud(self, minimo=None, maximo=None, mensaje=None):
        def comprobar(v):
            largo = len(_como_texto(v))
            if minimo is not None and largo < minimo:
                return False
            return maximo is None or largo <= maximo
        return self._check(comprobar, mensaje)

    def es_numerico(self, mensaje=None):
        return self._check(lambda v: _a_float(v) is not None and math.isfinite(_a_float(v)), mensaje)

    def es_entero(self, minimo=None, maximo=None, mensaje=None):
        def comprobar(v):
            numero = _a_entero(v)
            if numero is None:
                return False
            if minimo is not None and numero < minimo:
                return False
            return maximo is None or numero <= maximo
        return self._check(comprobar, mensaje)

    def es_float(self, minimo=None, maximo=None, mensaje=None):
        def comprobar(v):
            numero = _a_float(v)
            if numero is None or not math.isfinite(numero):
                return False
            if minimo is not None and numero < minimo:
                return False
            return maximo is None or numero <= maximo
        return self._check(comprobar, mensaje)

    def es_booleano(self, mensaje=None):
        return self._check(
            lambda v: isinstance(v, bool) or _como_texto(v).strip().lower() in VALORES_BOOLEANOS,
            mensaje or f'{self.campo} debe ser verdadero o falso')

    def es_iso8601(self, mensaje=None):
        return self._check(lambda v: _parsear_fecha(v) is not None, mensaje)

    def en(self, valores, mensaje=None):
        permitidos = tuple(valores)
        return self._check(lambda v: v in permitidos,
                           mensaje or f'{self.campo} debe ser uno de: {", ".join(map(str, permitidos))}')

    def es_lista(self, minimo=0, maximo=None, mensaje=None):
        def comprobar(v):
            if not isinstance(v, list):
                return False
            if len(v) < minimo:
                return False
            return maximo is None or len(v) <= maximo
        return self._check(comprobar, mensaje, por_elemento=False)

    def es_url(self, mensaje=None):
        def comprobar(v):
            if not isinstance(v, str):
                return False
            partes = urlparse(v)
            return partes.scheme in ('http', 'https') and bool(partes.netloc)
        return self._check(comprobar, mensaje)

    def personalizado(self, fn, mensaje=None):
        """``fn`` devuelve un booleano o lanza ValueError con el mensaje a mostrar"""
        return self._check(fn, mensaje)

    # Ejecución

    def ejecutar(self, fuente):
        """Valida el campo dentro de ``fuente`` y escribe el valor sanitizado.

        Devuelve una lista vacía o con un único error.
        """
        presente = self.campo in fuente and fuente[self.campo] is not None
        if not presente and self._opcional:
            return []

        valor = fuente.get(self.campo)
        for paso in self._pasos:
            lista = isinstance(valor, list) and paso.por_elemento
            if paso.tipo == 'sanitizar':
                valor = [paso.fn(v) for v in valor] if lista else paso.fn(valor)
                continue
            try:
                valido = all(paso.fn(v) for v in valor) if lista else paso.fn(valor)
                mensaje = paso.mensaje
            except ValueError as e:
                valido, mensaje = False, str(e)
            if not valido:
                return [{'field': self.campo, 'message': mensaje, 'value': valor}]

        if presente:
            fuente[self.campo] = valor
        return []


def body(campo):
    return Cadena('body', campo)


def query(campo):
    return Cadena('query', campo)


def param(campo):
    return Cadena('params', campo)


def _aplanar(cadenas):
    for cadena in cadenas:
        if isinstance(cadena, (list, tuple)):
            yield from _aplanar(cadena)
        else:
            yield cadena


def ejecutar_cadenas(cadenas, fuentes):
    errores = []
    for cadena in _aplanar(cadenas):
        fuente = fuentes.get(cadena.ubicacion)
        errores.extend(cadena.ejecutar(fuente if isinstance(fuente, dict) else {}))
    return errores


def validar(*cadenas):
    """Decorador terminal: o pasan todas las cadenas o la petición se rechaza con 400"""
    cadenas = list(_aplanar(cadenas))

    def decorador(f):
        @wraps(f)
        def envoltura(*args, **kwargs):
            if 'body' not in g:
                g.body = request.get_json(silent=True) or {}
            if 'query' not in g:
                g.query = request.args.to_dict()
            errores = ejecutar_cadenas(cadenas, {'body': g.body, 'query': g.query, 'params': kwargs})
            if errores:
                raise ErrorValidacion(errores=errores)
            return f(*args, **kwargs)
        return envoltura
    return decorador


# Constructores reutilizables
def validar_email(campo='email'):
    return (body(campo).trim()
            .no_vacio('El email es requerido')
            .es_email('Email inválido')
            .a_minusculas())


def validar_password(campo='password'):
    return (body(campo).trim()
            .no_vacio('La contraseña es requerida')
            .longitud(minimo=8, mensaje='La contraseña debe tener al menos 8 caracteres')
            .coincide(PASSWORD_RE, 'La contraseña debe contener mayúsculas, minúsculas y números'))


def validar_telefono(campo='telefono', ubicacion='body'):
    return (Cadena(ubicacion, campo).trim()
            .no_vacio('El teléfono es requerido')
            .coincide(TELEFONO_RE, 'Formato de teléfono inválido (usar formato internacional)'))


def validar_string(campo, minimo=1, maximo=255, opcional=False):
    cadena = body(campo)
    if opcional:
        cadena.opcional()
    return (cadena.trim()
            .no_vacio()
            .longitud(minimo, maximo, f'{campo} debe tener entre {minimo} y {maximo} caracteres'))


def validar_numero(campo, minimo=None, maximo=None, opcional=False):
    cadena = body(campo)
    if opcional:
        cadena.opcional()
    cadena.no_vacio().es_numerico(mensaje=f'{campo} debe ser un número')
    if minimo is not None:
        cadena.es_float(minimo=minimo, mensaje=f'{campo} debe ser mayor o igual a {minimo}')
    if maximo is not None:
        cadena.es_float(maximo=maximo, mensaje=f'{campo} debe ser menor o igual a {maximo}')
    return cadena.a_float()


def validar_entero(campo, minimo=None, maximo=None, opcional=False):
    cadena = body(campo)
    if opcional:
        cadena.opcional()
    return (cadena.no_vacio()
            .es_entero(minimo, maximo, f'{campo} debe ser un número entero')
            .a_entero())


def validar_booleano(campo):
    return body(campo).opcional().es_booleano().a_booleano()


def validar_fecha(campo):
    return (body(campo).opcional()
            .es_iso8601(f'{campo} debe ser una fecha válida (ISO 8601)')
            .a_fecha())


def validar_enum(campo, valores, opcional=False, ubicacion='body'):
    cadena = Cadena(ubicacion, campo)
    if opcional:
        cadena.opcional()
    return cadena.trim().a_mayusculas().no_vacio().en(valores)


def validar_array(campo, minimo=0, maximo=None):
    cadena = body(campo).es_lista(minimo, mensaje=f'{campo} debe ser un array con al menos {minimo} elementos')
    if maximo is not None:
        cadena.es_lista(maximo=maximo, mensaje=f'{campo} debe tener máximo {maximo} elementos')
    return cadena


def validar_url(campo):
    return body(campo).opcional().es_url(f'{campo} debe ser una URL válida')


def validar_paginacion():
    return [
        query('page').opcional()
        .es_entero(minimo=1, mensaje='page debe ser un número entero mayor a 0')
        .a_entero(),
        query('limit').opcional()
        .es_entero(minimo=1, maximo=100, mensaje='limit debe ser entre 1 y 100')
        .a_entero(),
    ]


def validar_busqueda(campo='q'):
    return (query(campo).opcional().trim()
            .longitud(2, 100, 'La búsqueda debe tener entre 2 y 100 caracteres')
            .escapar())


def validar_orden(campos_permitidos):
    permitidos = tuple(campos_permitidos)

    def comprobar(valor):
        campo = valor[1:] if isinstance(valor, str) and valor.startswith('-') else valor
        if campo not in permitidos:
            raise ValueError(f'sort debe ser uno de: {", ".join(permitidos)}')
        return True
    return query('sort').opcional().personalizado(comprobar)


def validar_precio(campo='precio', opcional=False):
    cadena = body(campo)
    if opcional:
        cadena.opcional()
    return (cadena.no_vacio('El precio es requerido')
            .es_float(minimo=0, mensaje='El precio debe ser un número positivo')
            .a_float())


def validar_stock(campo='stock'):
    return (body(campo).opcional()
            .es_booleano('El stock debe ser true o false')
            .a_booleano())


def validar_id(campo='id'):
    return (param(campo)
            .es_entero(minimo=1, mensaje='ID inválido')
            .a_entero())
