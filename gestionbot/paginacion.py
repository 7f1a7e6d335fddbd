from flask import g


def ultimo(valor):
    """Los parámetros de la whitelist pueden llegar repetidos; se usa el último"""
    if isinstance(valor, list):
        return valor[-1] if valor else None
    return valor


def paginar(consulta, limite_defecto=50):
    page = ultimo(g.query.get('page')) or 1
    limit = ultimo(g.query.get('limit')) or limite_defecto
    return consulta.paginate(page=page, per_page=limit, error_out=False)


def paginacion_dict(pagina):
    return {
        'total': pagina.total,
        'page': pagina.page,
        'limit': pagina.per_page,
        'total_pages': pagina.pages,
        'has_more': pagina.has_next
    }


def ordenar(consulta, modelo, defecto):
    """Aplica ?sort=campo o ?sort=-campo (descendente) ya validado"""
    sort = ultimo(g.query.get('sort')) or defecto
    descendente = sort.startswith('-')
    columna = getattr(modelo, sort.lstrip('-'))
    return consulta.order_by(columna.desc() if descendente else columna.asc())
