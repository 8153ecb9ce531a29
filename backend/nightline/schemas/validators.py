"""
Field-level helpers shared by the request schemas.
"""

from typing import Optional


def require_text(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace; a value that trims to nothing is rejected."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value
