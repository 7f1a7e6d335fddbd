from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_name='development', ajustes=None):
    from gestionbot.config import config_por_nombre

    app = Flask(__name__)

    # Configuración
    app.config.from_object(config_por_nombre[config_name])
    if ajustes:
        app.config.update(ajustes)
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        raise RuntimeError('DATABASE_URL no está configurada')

    from gestionbot.registro import configurar_logging
    from gestionbot.seguridad import registrar_seguridad
    from gestionbot.errores import registrar_manejadores, NoAutenticado
    configurar_logging(app)
    registrar_seguridad(app)
    registrar_manejadores(app)

    # Inicializar extensiones
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)
    # Nunca comodín junto con credenciales
    origenes = app.config['CORS_ORIGINS']
    CORS(app, origins=origenes, supports_credentials='*' not in origenes)

    @login_manager.user_loader
    def load_user(user_id):
        from gestionbot.models import Usuario
        return db.session.get(Usuario, int(user_id))

    @login_manager.unauthorized_handler
    def no_autenticado():
        raise NoAutenticado('Debes iniciar sesión')

    # Registrar blueprints
    from gestionbot.routes import (productos, categorias, clientes, pedidos, configuracion,
                                   bot, estadisticas, auth, health, admin)
    app.register_blueprint(health.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(productos.bp)
    app.register_blueprint(categorias.bp)
    app.register_blueprint(clientes.bp)
    app.register_blueprint(pedidos.bp)
    app.register_blueprint(configuracion.bp)
    app.register_blueprint(bot.bp)
    app.register_blueprint(estadisticas.bp)
    app.register_blueprint(admin.bp)

    app.logger.info('GestionBot API %s iniciada (%s)', app.config['VERSION'], config_name)
    return app
