import re
import unicodedata

SEPARADOR_CLAVE = '::'


def normalizar_texto(texto):
    """Minúsculas, sin tildes y con guiones bajos en lugar de espacios"""
    if not texto:
        return ''
    texto = unicodedata.normalize('NFD', texto.lower())
    texto = ''.join(c for c in texto if unicodedata.category(c) != 'Mn')
    texto = re.sub(r'\s+', '_', texto)
    texto = re.sub(r'_{2,}', '_', texto)
    return texto.strip('_')


def formatear_texto(texto):
    """Convierte 'juegos_de_mesa' en 'Juegos De Mesa'"""
    if not texto:
        return ''
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), texto.replace('_', ' '))


def limpiar_telefono(telefono):
    if not telefono:
        return ''
    return re.sub(r'\D', '', telefono.replace('@c.us', ''))


def construir_id_producto(categoria, subcategoria, nombre):
    return f'{categoria}{SEPARADOR_CLAVE}{subcategoria}{SEPARADOR_CLAVE}{nombre}'


def parsear_id_producto(clave):
    """Devuelve (categoria, subcategoria, nombre) o None si la clave no tiene tres partes.

    El nombre puede contener el separador: todo lo que sigue a la
    subcategoría forma parte de él.
    """
    if not clave:
        return None
    partes = clave.split(SEPARADOR_CLAVE)
    if len(partes) < 3:
        return None
    return partes[0], partes[1], SEPARADOR_CLAVE.join(partes[2:])


def formatear_monto(valor):
    """Formato argentino: 2500 -> '2.500', 1234.5 -> '1.234,50'"""
    texto = f'{float(valor):,.2f}'.replace(',', 'X').replace('.', ',').replace('X', '.')
    return texto[:-3] if texto.endswith(',00') else texto
