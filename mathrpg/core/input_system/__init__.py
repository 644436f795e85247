"""Command system for presentation-layer input.

- commands.py: Command objects the presentation layer sends into a battle
"""

from .commands import CloseShop, Command, PurchaseItem, SubmitAnswer

__all__ = [
    "CloseShop",
    "Command",
    "PurchaseItem",
    "SubmitAnswer",
]
