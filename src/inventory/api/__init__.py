from inventory.api.errors import register_exception_handlers
from inventory.api.routes import inventory_router

__all__ = ["inventory_router", "register_exception_handlers"]
