"""
Cliente HTTP de la API de GestionBot.

Lo usan el panel web y la app móvil (y los scripts de soporte) para hablar
con el backend. Mantiene la cookie de sesión en un ``requests.Session`` y
convierte cualquier falla en ``ErrorClienteApi`` con un mensaje listo para
mostrar al usuario.
"""
import logging
from urllib.parse import quote

import requests

from gestionbot.texto import (normalizar_texto, formatear_texto, construir_id_producto,
                              parsear_id_producto)

logger = logging.getLogger(__name__)

__all__ = ['ClienteGestionBot', 'ErrorClienteApi', 'validar_producto', 'normalizar_texto',
           'formatear_texto', 'construir_id_producto', 'parsear_id_producto']

MENSAJES_HTTP = {
    400: 'Los datos enviados no son válidos',
    401: 'Debes iniciar sesión',
    403: 'No tienes permisos para realizar esta acción',
    404: 'No se encontró lo que buscabas',
    413: 'La información enviada es demasiado grande',
    500: 'Error interno del servidor',
    503: 'El servidor no está disponible',
}


class ErrorClienteApi(Exception):
    """Falla de una llamada a la API, con un mensaje para el usuario"""

    def __init__(self, mensaje, status_code=None, errores=None):
        super().__init__(mensaje)
        self.mensaje = mensaje
        self.status_code = status_code
        self.errores = errores or []


def _es_positivo(valor):
    try:
        return float(valor) > 0
    except (TypeError, ValueError):
        return False


def _vacio(valor):
    return valor is None or str(valor).strip() == ''


def validar_producto(producto):
    """Devuelve la lista de errores de un producto antes de enviarlo"""
    errores = []
    if _vacio(producto.get('categoria')):
        errores.append('La categoría es obligatoria')
    if _vacio(producto.get('subcategoria')):
        errores.append('La subcategoría es obligatoria')
    if _vacio(producto.get('nombre')):
        errores.append('El nombre del producto es obligatorio')

    precio = producto.get('precio')
    precio_desde = producto.get('precio_desde')
    if _vacio(precio) and _vacio(precio_desde):
        errores.append('Debes ingresar un precio (fijo o "desde")')
    if not _vacio(precio) and not _vacio(precio_desde):
        errores.append('Solo puedes usar precio fijo O precio desde, no ambos')
    if not _vacio(precio) and not _es_positivo(precio):
        errores.append('El precio debe ser un número mayor a 0')
    if not _vacio(precio_desde) and not _es_positivo(precio_desde):
        errores.append('El precio desde debe ser un número mayor a 0')
    return errores


class ClienteGestionBot:
    """Envoltorio fino sobre la API REST. Sin caché ni reintentos."""

    def __init__(self, base_url, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})

    def __repr__(self):
        return f'<ClienteGestionBot {self.base_url}>'

    def _request(self, metodo, ruta, **kwargs):
        url = f'{self.base_url}{ruta}'
        try:
            respuesta = self.session.request(metodo, url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            logger.error('Timeout en %s %s', metodo, url)
            raise ErrorClienteApi('El servidor tardó demasiado en responder. Intenta de nuevo.')
        except requests.ConnectionError:
            logger.error('Sin conexión con %s', url)
            raise ErrorClienteApi('No se pudo conectar con el servidor. Verifica tu conexión.')
        except requests.RequestException as e:
            logger.error('Error en %s %s: %s', metodo, url, e)
            raise ErrorClienteApi(f'Error de comunicación con el servidor: {e}')

        try:
            datos = respuesta.json()
        except ValueError:
            datos = {}

        if not respuesta.ok:
            mensaje = (datos.get('message') or datos.get('error')
                       or MENSAJES_HTTP.get(respuesta.status_code, f'Error HTTP {respuesta.status_code}'))
            logger.error('%s %s -> %s: %s', metodo, url, respuesta.status_code, mensaje)
            raise ErrorClienteApi(mensaje, respuesta.status_code, datos.get('errors'))
        return datos

    def _get(self, ruta, **params):
        return self._request('GET', ruta, params={k: v for k, v in params.items() if v is not None})

    def _post(self, ruta, datos=None):
        return self._request('POST', ruta, json=datos or {})

    def _put(self, ruta, datos):
        return self._request('PUT', ruta, json=datos)

    def _delete(self, ruta):
        return self._request('DELETE', ruta)

    # Sesión

    def login(self, email, password):
        if _vacio(email) or _vacio(password):
            raise ErrorClienteApi('Email y contraseña son requeridos')
        return self._post('/api/auth/login', {'email': email, 'password': password})

    def logout(self):
        return self._post('/api/auth/logout')

    def usuario_actual(self):
        return self._get('/api/auth/me')

    # Estadísticas

    def obtener_estadisticas(self):
        return self._get('/api/estadisticas')

    # Productos

    def obtener_productos(self, page=None, limit=None, categoria=None, search=None, sort=None):
        return self._get('/api/productos', page=page, limit=limit, categoria=categoria,
                         search=search, sort=sort)

    def obtener_producto(self, identificador):
        return self._get(f'/api/productos/{quote(str(identificador), safe="")}')

    def buscar_por_codigo(self, codigo):
        if _vacio(codigo):
            raise ErrorClienteApi('El código de barras es requerido')
        return self._get(f'/api/productos/buscar-codigo/{quote(codigo, safe="")}')

    def crear_producto(self, producto):
        errores = validar_producto(producto)
        if errores:
            raise ErrorClienteApi(errores[0], errores=errores)
        return self._post('/api/productos', producto)

    def actualizar_producto(self, identificador, producto):
        errores = validar_producto(producto)
        if errores:
            raise ErrorClienteApi(errores[0], errores=errores)
        return self._put(f'/api/productos/{quote(str(identificador), safe="")}', producto)

    def eliminar_producto(self, identificador):
        return self._delete(f'/api/productos/{quote(str(identificador), safe="")}')

    # Categorías

    def obtener_categorias(self):
        return self._get('/api/categorias')

    def crear_categoria(self, nombre, subcategoria):
        if _vacio(nombre) or _vacio(subcategoria):
            raise ErrorClienteApi('Nombre y subcategoría son requeridos')
        return self._post('/api/categorias', {'nombre': nombre, 'subcategoria': subcategoria})

    def renombrar_categoria(self, nombre, nuevo_nombre):
        if _vacio(nuevo_nombre):
            raise ErrorClienteApi('El nuevo nombre es obligatorio')
        return self._put(f'/api/categorias/{normalizar_texto(nombre)}', {'nuevo_nombre': nuevo_nombre})

    def eliminar_categoria(self, nombre):
        return self._delete(f'/api/categorias/{normalizar_texto(nombre)}')

    # Clientes

    def obtener_clientes(self, page=None, limit=None, search=None):
        return self._get('/api/clientes', page=page, limit=limit, search=search)

    def obtener_cliente(self, telefono):
        if _vacio(telefono):
            raise ErrorClienteApi('El teléfono es requerido')
        return self._get(f'/api/clientes/{telefono}')

    def crear_cliente(self, telefono, nombre=None):
        if _vacio(telefono):
            raise ErrorClienteApi('El teléfono es requerido')
        datos = {'telefono': telefono}
        if nombre:
            datos['nombre'] = nombre
        return self._post('/api/clientes', datos)

    def actualizar_cliente(self, telefono, nombre):
        if _vacio(nombre):
            raise ErrorClienteApi('El nombre es requerido')
        return self._put(f'/api/clientes/{telefono}', {'nombre': nombre})

    def eliminar_cliente(self, telefono):
        return self._delete(f'/api/clientes/{telefono}')

    # Pedidos

    def obtener_pedidos(self, page=None, limit=None, estado=None):
        return self._get('/api/pedidos', page=page, limit=limit, estado=estado)

    def obtener_pedido(self, id):
        return self._get(f'/api/pedidos/{id}')

    def obtener_resumen_pedido(self, id):
        return self._get(f'/api/pedidos/{id}/resumen')

    def crear_pedido(self, pedido):
        if _vacio(pedido.get('cliente_telefono')):
            raise ErrorClienteApi('El teléfono del cliente es requerido')
        if not pedido.get('items'):
            raise ErrorClienteApi('El pedido debe tener al menos un producto')
        return self._post('/api/pedidos', pedido)

    def actualizar_pedido(self, id, estado=None, estado_pago=None, notas=None):
        datos = {k: v for k, v in (('estado', estado), ('estado_pago', estado_pago), ('notas', notas))
                 if v is not None}
        if not datos:
            raise ErrorClienteApi('Debe indicar estado, estado_pago o notas')
        return self._put(f'/api/pedidos/{id}', datos)

    def eliminar_pedido(self, id):
        return self._delete(f'/api/pedidos/{id}')

    # Configuración

    def obtener_configuracion(self):
        return self._get('/api/configuracion')

    def actualizar_configuracion(self, datos):
        return self._put('/api/configuracion', datos)

    def obtener_configuracion_pedidos(self):
        return self._get('/api/configuracion/pedidos')

    def actualizar_configuracion_pedidos(self, datos):
        return self._put('/api/configuracion/pedidos', datos)

    def obtener_palabras_clave(self):
        return self._get('/api/configuracion/palabras-clave')

    def actualizar_palabras_clave(self, palabras_clave):
        return self._put('/api/configuracion/palabras-clave', {'palabras_clave': palabras_clave})

    def obtener_respuestas(self):
        return self._get('/api/respuestas')

    def actualizar_respuestas(self, respuestas):
        if not respuestas:
            raise ErrorClienteApi('No hay respuestas para guardar')
        return self._put('/api/respuestas', {'respuestas': respuestas})

    def restaurar_respuestas(self):
        return self._post('/api/respuestas/restaurar')

    # Control del bot

    def obtener_estado_bot(self):
        return self._get('/api/estado')

    def toggle_respuestas(self):
        datos = self._post('/api/toggle-respuestas')
        logger.info('Respuestas automáticas %s', 'activadas' if datos.get('estado') else 'pausadas')
        return datos

    def health(self):
        return self._get('/health')
