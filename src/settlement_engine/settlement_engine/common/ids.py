from __future__ import annotations

import uuid


def new_id(prefix: str) -> str:
    """Prefixed opaque id, e.g. 'adj-3f9c2a41b7d0'."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"
