from decimal import Decimal

import pytest

from gestionbot.errores import ErrorValidacion
from gestionbot.models import Producto
from gestionbot.precios import PrecioFijo, PrecioDesde, precio_desde_datos
from gestionbot.servicios import calcular_totales
from gestionbot.texto import (normalizar_texto, formatear_texto, limpiar_telefono, construir_id_producto,
                              parsear_id_producto, formatear_monto)


def test_precio_fijo_o_desde():
    assert precio_desde_datos({'precio': 10}) == PrecioFijo(Decimal('10.00'))
    assert precio_desde_datos({'precio_desde': '99.999'}) == PrecioDesde(Decimal('100.00'))
    assert precio_desde_datos({}, requerido=False) is None


@pytest.mark.parametrize('datos', [
    {'precio': 10, 'precio_desde': 5},
    {},
    {'precio': 0},
    {'precio_desde': 'abc'},
])
def test_precios_invalidos(datos):
    with pytest.raises(ErrorValidacion):
        precio_desde_datos(datos)


def test_asignar_tarifa_borra_la_otra_columna():
    producto = Producto(precio=Decimal('10'))
    producto.tarifa = PrecioDesde(Decimal('7'))
    assert producto.precio is None
    assert producto.precio_desde == Decimal('7')
    assert producto.tarifa.tipo == 'desde'

    producto.tarifa = PrecioFijo(Decimal('3'))
    assert producto.precio_desde is None
    assert producto.tarifa == PrecioFijo(Decimal('3'))


def test_calcular_totales():
    assert calcular_totales(Decimal('1999'), 15, Decimal('500')) == (Decimal('299.85'), Decimal('2199.15'))
    assert calcular_totales(Decimal('100'), 0, 0) == (Decimal('0.00'), Decimal('100.00'))


def test_normalizar_texto():
    assert normalizar_texto('Juegos de Mesa') == 'juegos_de_mesa'
    assert normalizar_texto('  Acción   Figuras ') == 'accion_figuras'
    assert normalizar_texto(None) == ''
    assert formatear_texto('juegos_de_mesa') == 'Juegos De Mesa'


def test_limpiar_telefono():
    assert limpiar_telefono('5491122334455@c.us') == '5491122334455'
    assert limpiar_telefono('+54 9 11 2233-4455') == '5491122334455'


def test_clave_de_producto():
    clave = construir_id_producto('juguetes', 'dados', 'Set::Rojo')
    assert clave == 'juguetes::dados::Set::Rojo'
    assert parsear_id_producto(clave) == ('juguetes', 'dados', 'Set::Rojo')
    assert parsear_id_producto('juguetes::dados') is None
    assert parsear_id_producto('') is None


def test_formatear_monto():
    assert formatear_monto(2500) == '2.500'
    assert formatear_monto(Decimal('1234.5')) == '1.234,50'
    assert formatear_monto(0) == '0'
