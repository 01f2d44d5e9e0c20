"""
Catalog module.

Organisations, item types, their supply sources and bill-of-materials edges.
"""

from . import models  # noqa: F401
