# backend/inventorydb/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- The package exposes a clear surface.

The actual model classes are kept in inventorydb/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models      # users + roles
from .apps.catalog import models as catalog_models        # organisations, item types, sources, BOM
from .apps.inventory import models as inventory_models    # items, locations, stock counts

__all__ = [
    "accounts_models",
    "catalog_models",
    "inventory_models",
]
