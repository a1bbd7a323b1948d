"""Domain layer definitions."""

from .records import LarkPage, LarkRecord
from .xero import XeroTokens

__all__ = [
    "LarkPage",
    "LarkRecord",
    "XeroTokens",
]
