import pytest

from gestionbot import create_app, db
from gestionbot.models import Usuario

PASSWORD = 'Clave1234'

USUARIOS = {
    'ADMIN': 'admin@gestionbot.test',
    'OPERATOR': 'operador@gestionbot.test',
    'VIEWER': 'visor@gestionbot.test',
}


def _crear_app(ajustes=None):
    app = create_app('testing', ajustes)
    with app.app_context():
        db.create_all()
        for rol, email in USUARIOS.items():
            usuario = Usuario(email=email, nombre=rol.title(), rol=rol, activo=True)
            usuario.set_password(PASSWORD)
            db.session.add(usuario)
        db.session.commit()
    return app


def _cerrar_app(app):
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app():
    app = _crear_app()
    # Sin contexto activo: cada petición del test client abre el suyo
    yield app
    _cerrar_app(app)


@pytest.fixture
def app_con_limites():
    app = _crear_app({'RATELIMIT_ENABLED': True})
    yield app
    _cerrar_app(app)


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def login(client, rol='ADMIN', password=PASSWORD):
    r = client.post('/api/auth/login', json={'email': USUARIOS[rol], 'password': password})
    assert r.status_code == 200, r.get_json()
    return r.get_json()['usuario']


@pytest.fixture
def admin(client):
    login(client, 'ADMIN')
    return client


@pytest.fixture
def operador(client):
    login(client, 'OPERATOR')
    return client


@pytest.fixture
def visor(client):
    login(client, 'VIEWER')
    return client


def crear_producto(client, **datos):
    producto = {'categoria': 'Juguetes', 'subcategoria': 'Juegos de Mesa', 'nombre': 'Generala', 'precio': 1000}
    producto.update(datos)
    r = client.post('/api/productos', json=producto)
    assert r.status_code == 201, r.get_json()
    return r.get_json()['producto']
