"""
Script para crear el usuario administrador inicial
Ejecutar: python init_admin.py email nombre
La contraseña se pide por consola.
"""
import os
import sys
from getpass import getpass

from gestionbot import create_app, db
from gestionbot.errores import SolicitudInvalida
from gestionbot.models import Usuario
from gestionbot.servicios import crear_usuario

if len(sys.argv) < 3:
    print("Uso: python init_admin.py <email> <nombre>")
    sys.exit(1)

email, nombre = sys.argv[1].strip().lower(), sys.argv[2]
app = create_app(os.environ.get('FLASK_CONFIG', 'development'))

with app.app_context():
    admin = Usuario.query.filter_by(email=email).first()

    if admin:
        print(f"El usuario '{email}' ya existe.")
        respuesta = input("¿Deseas actualizar la contraseña y darle rol ADMIN? (s/n): ")
        if respuesta.lower() != 's':
            print("Operación cancelada.")
            sys.exit(0)
        admin.set_password(getpass("Nueva contraseña: "))
        admin.rol = 'ADMIN'
        admin.activo = True
        db.session.commit()
        print(f"✓ Usuario '{email}' actualizado correctamente.")
    else:
        try:
            admin = crear_usuario(email, getpass("Contraseña: "), nombre, rol='ADMIN')
            db.session.commit()
        except SolicitudInvalida as e:
            db.session.rollback()
            print(f"✗ {e}")
            sys.exit(1)
        print("✓ Usuario administrador creado exitosamente:")
        print(f"  Email: {admin.email}")
        print(f"  Rol: {admin.rol}")
