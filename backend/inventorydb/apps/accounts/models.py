# backend/inventorydb/apps/accounts/models.py

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, String

from inventorydb.database import Base
from inventorydb.ids import new_id


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class PermissionRole(str, enum.Enum):
    """Closed set of roles, ordered by increasing privilege.

    Policy checks compare ranks (`at_least`) rather than names so that a
    higher role always satisfies a lower requirement.
    """

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)

    def at_least(self, required: "PermissionRole") -> bool:
        return self.rank >= PermissionRole(required).rank


_ROLE_ORDER = [PermissionRole.VIEWER, PermissionRole.EDITOR, PermissionRole.ADMIN]


# ---------------------------------------------------------------------------
# USERS
# ---------------------------------------------------------------------------


class User(Base):
    """
    Application user.

    Users are never physically deleted: stock counts keep a reference to
    the user who entered them as the actor of record.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)

    username = Column(String(150), nullable=False, unique=True, index=True)

    # Only the Argon2 hash is stored, never the plaintext.
    password_hash = Column(String(255), nullable=False)

    permission_role = Column(
        Enum(
            PermissionRole,
            name="permission_role",
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=PermissionRole.VIEWER,
        index=True,
    )

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.permission_role})>"
