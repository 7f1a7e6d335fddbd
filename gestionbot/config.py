import os

from dotenv import load_dotenv

# Cargar variables de entorno desde .env si existe
load_dotenv()


ORIGENES_LOCALES = (
    'http://localhost:3000',
    'http://localhost:3001',
    'http://localhost:5173',
    'http://localhost:4200',
    'http://127.0.0.1:3000',
    'http://127.0.0.1:5173',
)


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Token compartido para /admin/*; sin valor, todas las llamadas se rechazan
    MIGRATION_SECRET = os.environ.get('MIGRATION_SECRET')
    MIGRATION_COMMAND = ['flask', '--app', 'gestionbot', 'db', 'upgrade']

    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 10 * 1024 * 1024))
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', ','.join(ORIGENES_LOCALES)).split(',')
                    if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Límites por IP; el login tiene su propio límite más estricto
    RATELIMIT_ENABLED = True
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '100 per 15 minutes')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
    LIMITE_LOGIN = '5 per 15 minutes'
    LIMITE_ADMIN = '10 per hour'

    # Parámetros de query que sí pueden repetirse
    HPP_WHITELIST = ('sort', 'fields', 'page', 'limit', 'filter', 'categoria', 'estado')

    VERSION = '2.0.0'


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///gestionbot.db'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    MIGRATION_SECRET = 'test-migration-secret'
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')


config_por_nombre = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
