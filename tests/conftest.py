"""
Basic test fixtures for the math battle test suite.

Provides fixtures and builders shared by the battle engine tests.
"""

import sys
import os
import pytest
import numpy as np

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from mathrpg.core.data import (
    EnemyArchetype,
    ItemEffect,
    ItemType,
    MathProblem,
    Player,
    ProblemType,
    Rewards,
    Enemy,
    ShopItem,
)
from mathrpg.core.engine import ManualScheduler
from mathrpg.core.events import EventManager
from mathrpg.game.battle_config import BattleConfig
from mathrpg.game.encounter_table import EncounterTable
from mathrpg.game.managers import BattleManager
from mathrpg.game.shop import Shop


class TestDataBuilder:
    """Builders for battle objects with sensible defaults."""

    @staticmethod
    def player(**overrides) -> Player:
        values = dict(name="Hero", hp=100, max_hp=100, attack=15, defense=8,
                      level=1, exp=0, exp_to_next=100, gold=50)
        values.update(overrides)
        return Player(**values)

    @staticmethod
    def enemy(**overrides) -> Enemy:
        values = dict(name="Goblin", hp=40, max_hp=40, attack=12, defense=3,
                      rewards=Rewards(exp=25, gold=20), is_boss=False)
        values.update(overrides)
        return Enemy(**values)

    @staticmethod
    def problem(question="7 + 9", answer=16, difficulty=1, type=ProblemType.ADDITION) -> MathProblem:
        return MathProblem(question=question, answer=answer, difficulty=difficulty, type=type)

    @staticmethod
    def item(item_id="health_potion", cost=20, item_type=ItemType.POTION, **effect) -> ShopItem:
        return ShopItem(
            id=item_id,
            name=item_id.replace("_", " ").title(),
            type=item_type,
            cost=cost,
            effect=ItemEffect(**(effect or {"hp": 30})),
            description="",
        )

    @staticmethod
    def archetypes() -> tuple[list[EnemyArchetype], list[EnemyArchetype]]:
        regular = [
            EnemyArchetype("Goblin", 40, 12, 3, 25, 20),
            EnemyArchetype("Orc", 60, 16, 5, 40, 35),
            EnemyArchetype("Troll", 90, 20, 8, 60, 50),
            EnemyArchetype("Dragon", 120, 25, 12, 100, 80),
        ]
        bosses = [
            EnemyArchetype("Goblin King", 80, 18, 6, 75, 100),
            EnemyArchetype("Orc Chieftain", 120, 24, 10, 120, 150),
            EnemyArchetype("Ancient Troll", 180, 30, 15, 180, 200),
            EnemyArchetype("Elder Dragon", 250, 35, 20, 300, 300),
        ]
        return regular, bosses

    @staticmethod
    def shop_items() -> list[ShopItem]:
        return [
            TestDataBuilder.item("health_potion", 20, ItemType.POTION, hp=30),
            TestDataBuilder.item("super_potion", 50, ItemType.POTION, hp=75),
            TestDataBuilder.item("iron_sword", 100, ItemType.WEAPON, attack=10),
            TestDataBuilder.item("steel_armor", 120, ItemType.ARMOR, defense=8),
            TestDataBuilder.item("legendary_sword", 300, ItemType.WEAPON, attack=25),
        ]


class FixedProblemGenerator:
    """Problem generator stand-in that always asks the same question."""

    def __init__(self, problem: MathProblem):
        self.problem = problem
        self.levels_seen: list[int] = []

    def generate(self, player_level: int) -> MathProblem:
        self.levels_seen.append(player_level)
        return self.problem

    def with_options(self, problem: MathProblem, count: int = 4) -> MathProblem:
        return problem


class EventRecorder:
    """Universal subscriber collecting every delivered event."""

    def __init__(self, event_manager: EventManager):
        self.events = []
        event_manager.subscribe_all(self.events.append, subscriber_name="EventRecorder")

    def of_type(self, event_type):
        return [event for event in self.events if event.event_type == event_type]

    def types(self, include_logs: bool = False):
        from mathrpg.core.events import EventType
        return [event.event_type for event in self.events
                if include_logs or event.event_type != EventType.LOG_MESSAGE]

    def clear(self):
        self.events.clear()


@pytest.fixture
def builder():
    """Access to the test data builders."""
    return TestDataBuilder


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager()


@pytest.fixture
def scheduler():
    """Create a manual scheduler on a virtual clock."""
    return ManualScheduler()


@pytest.fixture
def rng():
    """Seeded random generator for reproducible tests."""
    return np.random.default_rng(1234)


@pytest.fixture
def encounter_table():
    """Encounter table with the standard archetypes."""
    regular, bosses = TestDataBuilder.archetypes()
    return EncounterTable(regular, bosses)


@pytest.fixture
def shop():
    """Shop with the standard catalog."""
    return Shop(TestDataBuilder.shop_items())


@pytest.fixture
def recorder(event_manager):
    """Records every event delivered by the event manager."""
    return EventRecorder(event_manager)


@pytest.fixture
def fixed_problem():
    return TestDataBuilder.problem()


@pytest.fixture
def completions():
    """List collecting on_complete calls."""
    return []


@pytest.fixture
def make_manager(event_manager, scheduler, encounter_table, shop, fixed_problem, completions):
    """Factory for battle managers wired to the shared fixtures."""

    def _make(config=None, problem=None, **overrides):
        kwargs = dict(
            event_manager=event_manager,
            scheduler=scheduler,
            encounter_table=encounter_table,
            shop=shop,
            problem_generator=FixedProblemGenerator(problem or fixed_problem),
            config=config or BattleConfig(),
            on_complete=lambda *args: completions.append(args),
            clock=lambda: scheduler.current_time / 1000.0,
        )
        kwargs.update(overrides)
        return BattleManager(**kwargs)

    return _make
