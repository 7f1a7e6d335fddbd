from functools import wraps

from flask_login import current_user

from gestionbot.errores import NoAutenticado, NoAutorizado


def rol_requerido(*roles):
    """Decorador: exige sesión iniciada y, si se indican, alguno de los roles"""
    def decorador(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated or not current_user.is_active:
                raise NoAutenticado('Debes iniciar sesión')
            if roles and not current_user.tiene_rol(*roles):
                raise NoAutorizado(f'Se requiere rol: {", ".join(roles)}')
            return f(*args, **kwargs)
        return decorated_function
    return decorador


# VIEWER+ para lectura, OPERATOR+ para escritura
autenticado = rol_requerido()
operador_o_admin = rol_requerido('ADMIN', 'OPERATOR')
solo_admin = rol_requerido('ADMIN')
