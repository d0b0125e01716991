"""Inventory policy settings.

Values come from the ``[custom]`` table of the active domain configuration
(``domain.toml``), falling back to the defaults below when a key is absent.
"""

from protean.utils.globals import current_domain

DEFAULTS = {
    "DEFAULT_MIN_STOCK_THRESHOLD": 10,
    "DEFAULT_REORDER_QUANTITY": 10,
    "LOW_STOCK_THRESHOLD": 10,
    "LOW_STOCK_LIMIT": 5,
    "CONFLICT_RETRY_ATTEMPTS": 3,
}


def setting(name):
    """Return the configured value for ``name``."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown inventory setting: {name}")

    custom = current_domain.config.get("custom") or {}
    value = custom.get(name)
    return DEFAULTS[name] if value is None else int(value)
