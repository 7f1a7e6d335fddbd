from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

from gestionbot.errores import ErrorValidacion


@dataclass(frozen=True)
class PrecioFijo:
    monto: Decimal
    tipo = 'fijo'


@dataclass(frozen=True)
class PrecioDesde:
    monto: Decimal
    tipo = 'desde'


Precio = Union[PrecioFijo, PrecioDesde]


def _a_decimal(campo, valor):
    try:
        monto = Decimal(str(valor))
    except (InvalidOperation, ValueError):
        raise ErrorValidacion(errores=[{'field': campo, 'message': 'Precio inválido', 'value': valor}])
    if not monto.is_finite() or monto <= 0:
        raise ErrorValidacion(errores=[{'field': campo, 'message': 'El precio debe ser un número positivo', 'value': valor}])
    return monto.quantize(Decimal('0.01'))


def _presente(valor):
    return valor is not None and valor != ''


def precio_desde_datos(datos, requerido=True):
    """Construye la variante de precio a partir de 'precio' / 'precio_desde'.

    Devuelve None si no viene ninguno y no es requerido.
    """
    precio = datos.get('precio')
    precio_desde = datos.get('precio_desde')

    if _presente(precio) and _presente(precio_desde):
        raise ErrorValidacion(errores=[{
            'field': 'precio',
            'message': 'Solo puedes usar precio fijo O precio desde, no ambos',
            'value': precio,
        }])
    if _presente(precio):
        return PrecioFijo(_a_decimal('precio', precio))
    if _presente(precio_desde):
        return PrecioDesde(_a_decimal('precio_desde', precio_desde))
    if requerido:
        raise ErrorValidacion(errores=[{
            'field': 'precio',
            'message': 'Debes ingresar un precio (fijo o desde)',
            'value': None,
        }])
    return None
