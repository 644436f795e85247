"""Tests for shop purchases."""

import pytest

from mathrpg.core.data import ErrorKind
from mathrpg.game.shop import Shop


class TestPurchase:

    def test_insufficient_funds_leaves_player_untouched(self, shop, builder):
        """A player with 15 gold cannot buy a 20 gold potion."""
        player = builder.player(gold=15, hp=50)

        result = shop.purchase(player, "health_potion")

        assert not result.ok
        assert result.error is ErrorKind.INSUFFICIENT_FUNDS
        assert result.player is player
        assert player.gold == 15
        assert player.hp == 50

    def test_unknown_item(self, shop, builder):
        result = shop.purchase(builder.player(), "excalibur")

        assert result.error is ErrorKind.UNKNOWN_ITEM
        assert result.item is None

    def test_potion_heals_capped_at_max(self, shop, builder):
        player = builder.player(hp=90, gold=20)

        result = shop.purchase(player, "health_potion")

        assert result.ok
        assert result.player.hp == 100
        assert result.player.gold == 0

    def test_purchase_returns_a_copy(self, shop, builder):
        player = builder.player(gold=200)

        result = shop.purchase(player, "iron_sword")

        assert result.player is not player
        assert result.player.attack == 25
        assert player.attack == 15
        assert player.gold == 200

    def test_stat_boosts_are_uncapped(self, shop, builder):
        player = builder.player(gold=1000, defense=8)
        for _ in range(3):
            player = shop.purchase(player, "steel_armor").player

        assert player.defense == 32
        assert player.gold == 640

    def test_exact_gold_is_enough(self, shop, builder):
        result = shop.purchase(builder.player(gold=300), "legendary_sword")
        assert result.ok
        assert result.player.gold == 0


class TestCatalog:

    def test_affordable_items(self, shop):
        assert [item.id for item in shop.affordable_items(60)] == ["health_potion", "super_potion"]
        assert shop.affordable_items(0) == []

    def test_find_item(self, shop):
        assert shop.find_item("iron_sword").cost == 100
        assert shop.find_item("nothing") is None

    def test_duplicate_ids_rejected(self, builder):
        with pytest.raises(ValueError):
            Shop([builder.item("health_potion"), builder.item("health_potion")])
