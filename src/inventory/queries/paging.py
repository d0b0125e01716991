"""Full scans over projections, fetched page by page."""

from protean.utils.globals import current_domain

PAGE_SIZE = 100


def fetch_all(projection_cls, order_by, **criteria):
    """Yield every record of ``projection_cls`` matching ``criteria``, in ``order_by`` order."""
    dao = current_domain.repository_for(projection_cls)._dao
    offset = 0
    while True:
        query = dao.query.filter(**criteria) if criteria else dao.query
        page = query.order_by(order_by).offset(offset).limit(PAGE_SIZE).all().items
        yield from page
        if len(page) < PAGE_SIZE:
            return
        offset += PAGE_SIZE
