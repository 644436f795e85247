"""
Shop economy for between-battle purchases.

Purchases are resolved against a copy of the player, so a rejected purchase
can never leave partial changes behind. When the shop opens is decided by
the battle manager, not here.
"""
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from ..core.data import ErrorKind, Player, ShopItem


@dataclass(frozen=True)
class PurchaseResult:
    """Outcome of a purchase attempt."""
    player: Player
    item: Optional[ShopItem] = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Shop:
    """Read-only item catalog with purchase resolution."""

    def __init__(self, items: Sequence[ShopItem]):
        ids = [item.id for item in items]
        if len(ids) != len(set(ids)):
            raise ValueError("Shop catalog contains duplicate item ids")
        self.items = tuple(items)
        self._by_id = {item.id: item for item in self.items}

    def find_item(self, item_id: str) -> Optional[ShopItem]:
        return self._by_id.get(item_id)

    def affordable_items(self, gold: int) -> list[ShopItem]:
        """Items a player with this much gold can buy."""
        return [item for item in self.items if item.cost <= gold]

    def purchase(self, player: Player, item_id: str) -> PurchaseResult:
        """
        Buy an item for the player.

        Args:
            player: Buyer; never modified
            item_id: Catalog id of the item

        Returns:
            PurchaseResult carrying an updated copy of the player on success,
            or the untouched player and an error kind on failure
        """
        item = self.find_item(item_id)
        if item is None:
            return PurchaseResult(player=player, error=ErrorKind.UNKNOWN_ITEM)

        if player.gold < item.cost:
            return PurchaseResult(player=player, item=item, error=ErrorKind.INSUFFICIENT_FUNDS)

        return PurchaseResult(player=self.apply_item(player, item), item=item)

    @staticmethod
    def apply_item(player: Player, item: ShopItem) -> Player:
        """Pay for an item and apply its effect to a copy of the player."""
        updated = replace(player, gold=player.gold - item.cost)
        effect = item.effect

        # Healing is capped at max HP; stat boosts are permanent and uncapped
        if effect.hp:
            updated.hp = min(updated.max_hp, updated.hp + effect.hp)
        if effect.attack:
            updated.attack += effect.attack
        if effect.defense:
            updated.defense += effect.defense

        return updated
