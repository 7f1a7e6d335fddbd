"""
Script de inicialización de la base de datos
Crea las tablas y la fila de configuración del bot.
En producción usar 'flask --app gestionbot db upgrade'.
"""
import os

from gestionbot import create_app, db
from gestionbot.models import ConfiguracionBot

app = create_app(os.environ.get('FLASK_CONFIG', 'development'))

with app.app_context():
    print("Creando tablas de la base de datos...")
    db.create_all()
    ConfiguracionBot.obtener_configuracion()
    print("✓ Tablas creadas exitosamente!")
    print("\nBase de datos inicializada. Puedes ejecutar 'python run.py' para iniciar la API.")
