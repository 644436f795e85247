"""
Scripted stand-in for a presentation layer.

AutoPlayer talks to the engine only through the PresentationBridge, the
same way a real UI would: it answers every challenge (right with a given
probability), spends gold when the shop opens and closes it again. It is
used by main.py for headless demo runs and by the balance simulation.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from ..core.engine import ManualScheduler
from ..core.events import EventManager
from .battle_config import BattleConfig
from .catalog_loader import load_encounter_table, load_shop
from .managers.battle_manager import BattleManager
from .managers.presentation_bridge import PresentationBridge
from .problem_generator import ProblemGenerator


# Heal before buying upgrades when below this share of max HP
POTION_HP_THRESHOLD = 0.6


@dataclass
class SessionReport:
    """What one scripted session ended with."""
    victory: Optional[bool] = None
    final_score: int = 0
    achievements: list[str] = field(default_factory=list)
    battles_reached: int = 0
    problems_attempted: int = 0
    problems_correct: int = 0
    items_bought: list[str] = field(default_factory=list)
    transcript: list[tuple[str, dict[str, Any]]] = field(default_factory=list)


class AutoPlayer:
    """Plays a session through the bridge's wire interface."""

    def __init__(self, bridge: PresentationBridge, accuracy: float = 0.8,
                 rng: Optional[np.random.Generator] = None, record_transcript: bool = False):
        if not 0.0 <= accuracy <= 1.0:
            raise ValueError(f"accuracy must be between 0 and 1, got {accuracy}")
        self.bridge = bridge
        self.accuracy = accuracy
        self.rng = rng if rng is not None else np.random.default_rng()
        self.record_transcript = record_transcript
        self.report = SessionReport()
        self._hp = 0
        self._max_hp = 0

        bridge.on("challenge-opened", self._on_challenge)
        bridge.on("hud-update", self._on_hud)
        bridge.on("shop-opened", self._on_shop)
        bridge.on("battle-started", self._on_battle_started)
        bridge.on("game-completed", self._on_game_completed)
        if record_transcript:
            for name in ("combat-result", "enemy-attacked", "enemy-defeated", "level-up",
                         "player-defeated", "item-purchased", "purchase-rejected"):
                bridge.on(name, self._record)

    def _record(self, name: str, payload: dict[str, Any]) -> None:
        if self.record_transcript:
            self.report.transcript.append((name, payload))

    def _on_battle_started(self, name: str, payload: dict[str, Any]) -> None:
        self.report.battles_reached = payload["battleNumber"]
        self._record(name, payload)

    def _on_hud(self, name: str, payload: dict[str, Any]) -> None:
        player = payload["playerSnapshot"]
        self._hp, self._max_hp = player["hp"], player["maxHp"]

    def _on_challenge(self, name: str, payload: dict[str, Any]) -> None:
        self._record(name, payload)
        problem = payload["problem"]
        answer = problem["answer"]
        correct = self.rng.random() < self.accuracy

        if not correct:
            options = [option for option in problem.get("options") or [] if option != answer]
            answer = int(self.rng.choice(options)) if options else answer + 1

        self.report.problems_attempted += 1
        if correct:
            self.report.problems_correct += 1
        self.bridge.send("submit-answer", {"value": answer})

    def _on_shop(self, name: str, payload: dict[str, Any]) -> None:
        self._record(name, payload)
        gold = payload["gold"]
        for item in self._shopping_list(payload["items"], gold):
            if self.bridge.send("purchase-item", {"id": item["id"]}):
                self.report.items_bought.append(item["name"])
        self.bridge.send("close-shop")

    def _shopping_list(self, items: list[dict[str, Any]], gold: int) -> list[dict[str, Any]]:
        """Potions first when hurt, then the priciest affordable upgrades."""
        chosen = []
        potions = sorted((i for i in items if i["type"] == "potion"), key=lambda i: i["cost"])
        upgrades = sorted((i for i in items if i["type"] != "potion"), key=lambda i: -i["cost"])

        hp, max_hp = self._hp, self._max_hp
        if max_hp and hp < max_hp * POTION_HP_THRESHOLD:
            for potion in potions:
                if potion["cost"] <= gold:
                    chosen.append(potion)
                    gold -= potion["cost"]
                    break

        for upgrade in upgrades:
            if upgrade["cost"] <= gold:
                chosen.append(upgrade)
                gold -= upgrade["cost"]
        return chosen

    def _on_game_completed(self, name: str, payload: dict[str, Any]) -> None:
        self._record(name, payload)
        self.report.victory = payload["victory"]
        self.report.final_score = payload["finalScore"]
        self.report.achievements = list(payload["achievements"])


def simulate_session(seed: Optional[int] = None, accuracy: float = 0.8,
                     config: Optional[BattleConfig] = None,
                     record_transcript: bool = False) -> SessionReport:
    """Play one full session headlessly on a virtual clock."""
    event_manager = EventManager()
    scheduler = ManualScheduler()
    rng = np.random.default_rng(seed)
    manager = BattleManager(
        event_manager=event_manager,
        scheduler=scheduler,
        encounter_table=load_encounter_table(),
        shop=load_shop(),
        problem_generator=ProblemGenerator(rng),
        config=config,
        clock=lambda: scheduler.current_time / 1000.0,
    )
    bridge = PresentationBridge(event_manager, manager)
    player = AutoPlayer(bridge, accuracy=accuracy, rng=rng, record_transcript=record_transcript)

    manager.start()
    scheduler.run_until_idle()
    return player.report


def run_balance_simulation(runs: int = 100, accuracy: float = 0.8, seed: int = 0,
                           config: Optional[BattleConfig] = None) -> dict[str, float]:
    """
    Play many sessions and summarize how the balance plays out.

    Returns:
        Win rate, mean and median final score, and mean battles reached
    """
    if runs < 1:
        raise ValueError(f"runs must be at least 1, got {runs}")

    seeds = np.random.default_rng(seed).integers(0, 2**31 - 1, size=runs)
    reports = [simulate_session(int(s), accuracy, config) for s in seeds]

    victories = np.array([bool(r.victory) for r in reports])
    scores = np.array([r.final_score for r in reports])
    battles = np.array([r.battles_reached for r in reports])
    return {
        "runs": float(runs),
        "win_rate": float(victories.mean()),
        "mean_score": float(scores.mean()),
        "median_score": float(np.median(scores)),
        "mean_battles_reached": float(battles.mean()),
    }
