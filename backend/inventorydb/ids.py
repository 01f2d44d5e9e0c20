from __future__ import annotations

import uuid


def new_id() -> str:
    """Opaque row identifier; used as a zero-argument column default."""
    return str(uuid.uuid4())
