"""Operations that make up a syncspace session."""

from .common import Operations
from .session import SessionOperations

__all__ = ["Operations", "SessionOperations"]
