"""Rematch data models — re-export all models for convenient imports."""

from .buyer import Buyer
from .setting import Setting

__all__ = [
    "Buyer",
    "Setting",
]
