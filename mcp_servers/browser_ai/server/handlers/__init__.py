"""
Tool handlers organized by domain.

All handlers follow the signature: (arguments, ctx) -> str (JSON text).
"""

from .session import SESSION_HANDLERS

ALL_HANDLERS = {**SESSION_HANDLERS}

__all__ = ["ALL_HANDLERS", "SESSION_HANDLERS"]
