"""
Inventory module.

Physical items, the item-inside-item location tree and stock counts.
"""

from . import models  # noqa: F401
