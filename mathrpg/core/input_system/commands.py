"""
Command pattern implementation for presentation-layer input.

This module defines the command interface and the concrete commands the
presentation layer may send back into a running battle.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..data import CommandType

if TYPE_CHECKING:
    from ...game.managers.battle_manager import BattleManager


@dataclass(frozen=True)
class Command(ABC):
    """Abstract base class for all battle commands."""
    command_type: CommandType = field(init=False)

    @abstractmethod
    def execute(self, handler: "BattleManager") -> bool:
        """
        Execute the command.

        Args:
            handler: The battle manager receiving the command

        Returns:
            bool: True if the command was accepted, False if it was ignored
        """


@dataclass(frozen=True)
class SubmitAnswer(Command):
    """Answer to the currently open challenge."""
    value: int

    def __post_init__(self):
        object.__setattr__(self, 'command_type', CommandType.SUBMIT_ANSWER)

    def execute(self, handler: "BattleManager") -> bool:
        return handler.submit_answer(self.value)


@dataclass(frozen=True)
class PurchaseItem(Command):
    """Buy one item from the open shop."""
    item_id: str

    def __post_init__(self):
        object.__setattr__(self, 'command_type', CommandType.PURCHASE_ITEM)

    def execute(self, handler: "BattleManager") -> bool:
        return handler.purchase_item(self.item_id)


@dataclass(frozen=True)
class CloseShop(Command):
    """Leave the shop and continue to the next battle."""

    def __post_init__(self):
        object.__setattr__(self, 'command_type', CommandType.CLOSE_SHOP)

    def execute(self, handler: "BattleManager") -> bool:
        return handler.close_shop()
