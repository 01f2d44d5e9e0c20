# backend/inventorydb/apps/accounts/__init__.py
"""
Accounts app

Responsible for:
- User accounts and their permission role (viewer < editor < admin)
- Password login and the access/refresh token exchange
- Admin endpoints for managing users

Other apps depend on `models.User` / `models.PermissionRole` for anything
related to "who is allowed to do what".
"""

from . import models, schemas, services  # noqa: F401

__all__ = ["models", "schemas", "services"]
