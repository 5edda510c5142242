"""
Доступ к контексту: разрешение путей и области видимости циклов.
"""

from .resolver import MISSING, is_sequence, lookup, resolve, resolve_or_missing
from .scope import freeze, loop_scope, snapshot

__all__ = [
    "MISSING",
    "is_sequence",
    "lookup",
    "resolve",
    "resolve_or_missing",
    "freeze",
    "loop_scope",
    "snapshot",
]
