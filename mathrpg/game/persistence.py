"""
Save snapshot production and validation.

A SaveSnapshot is the plain record a host persists between visits. It is
serialized to a dict using the camelCase keys the save hook has always
used; reading and writing that dict is left to the host. Loading merges
the stored keys over the defaults so older saves with fewer keys still load,
then validates every field before anything is restored.
"""
from dataclasses import dataclass, fields
from typing import Any, Optional

from ..core.data import Player
from ..core.engine import BattleSession, BattleState, SessionPhase, SessionStats
from ..core.errors import MalformedSnapshotError
from .battle_config import DEFAULT_STARTING_PLAYER


# Snapshot field -> persisted key
KEY_MAP = {
    "player_name": "playerName",
    "player_level": "playerLevel",
    "player_hp": "playerHP",
    "player_max_hp": "playerMaxHP",
    "player_attack": "playerAttack",
    "player_defense": "playerDefense",
    "player_exp": "playerExp",
    "player_exp_to_next": "playerExpToNext",
    "player_gold": "playerGold",
    "current_battle": "currentBattle",
    "max_battles": "maxBattles",
    "inventory": "inventory",
    "total_enemies_defeated": "totalEnemiesDefeated",
    "total_bosses_defeated": "totalBossesDefeated",
    "total_math_problems_correct": "totalMathProblemsCorrect",
    "total_math_problems_attempted": "totalMathProblemsAttempted",
    "highest_difficulty_completed": "highestDifficultyCompleted",
    "total_play_time": "totalPlayTime",
}

DEFAULT_SAVE_DATA = {
    "playerName": DEFAULT_STARTING_PLAYER["name"],
    "playerLevel": DEFAULT_STARTING_PLAYER["level"],
    "playerHP": DEFAULT_STARTING_PLAYER["hp"],
    "playerMaxHP": DEFAULT_STARTING_PLAYER["max_hp"],
    "playerAttack": DEFAULT_STARTING_PLAYER["attack"],
    "playerDefense": DEFAULT_STARTING_PLAYER["defense"],
    "playerExp": DEFAULT_STARTING_PLAYER["exp"],
    "playerExpToNext": DEFAULT_STARTING_PLAYER["exp_to_next"],
    "playerGold": DEFAULT_STARTING_PLAYER["gold"],
    "currentBattle": 1,
    "maxBattles": 10,
    "inventory": [],
    "totalEnemiesDefeated": 0,
    "totalBossesDefeated": 0,
    "totalMathProblemsCorrect": 0,
    "totalMathProblemsAttempted": 0,
    "highestDifficultyCompleted": 0,
    "totalPlayTime": 0,
}

MAX_DIFFICULTY = 4


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class SaveSnapshot:
    """Everything needed to resume a session."""
    player_name: str
    player_level: int
    player_hp: int
    player_max_hp: int
    player_attack: int
    player_defense: int
    player_exp: int
    player_exp_to_next: int
    player_gold: int
    current_battle: int
    max_battles: int
    inventory: tuple[str, ...]
    total_enemies_defeated: int
    total_bosses_defeated: int
    total_math_problems_correct: int
    total_math_problems_attempted: int
    highest_difficulty_completed: int
    total_play_time: int

    @classmethod
    def from_session(cls, session: BattleSession, total_play_time: int) -> "SaveSnapshot":
        """Capture a session. Play time is in whole seconds.

        Rewards for a won battle are credited before the session moves on, so
        a capture taken in VICTORY or SHOPPING resumes at the next battle.
        """
        player = session.player
        stats = session.stats
        current_battle = session.battle_number
        if session.phase == SessionPhase.ACTIVE and session.state in (BattleState.VICTORY, BattleState.SHOPPING):
            current_battle += 1
        return cls(
            player_name=player.name,
            player_level=player.level,
            player_hp=player.hp,
            player_max_hp=player.max_hp,
            player_attack=player.attack,
            player_defense=player.defense,
            player_exp=player.exp,
            player_exp_to_next=player.exp_to_next,
            player_gold=player.gold,
            current_battle=current_battle,
            max_battles=session.max_battles,
            inventory=tuple(stats.inventory),
            total_enemies_defeated=stats.enemies_defeated,
            total_bosses_defeated=stats.bosses_defeated,
            total_math_problems_correct=stats.problems_correct,
            total_math_problems_attempted=stats.problems_attempted,
            highest_difficulty_completed=stats.highest_difficulty_completed,
            total_play_time=total_play_time,
        )

    def to_player(self) -> Player:
        return Player(
            name=self.player_name,
            hp=self.player_hp,
            max_hp=self.player_max_hp,
            attack=self.player_attack,
            defense=self.player_defense,
            level=self.player_level,
            exp=self.player_exp,
            exp_to_next=self.player_exp_to_next,
            gold=self.player_gold,
        )

    def to_stats(self) -> SessionStats:
        return SessionStats(
            problems_attempted=self.total_math_problems_attempted,
            problems_correct=self.total_math_problems_correct,
            enemies_defeated=self.total_enemies_defeated,
            bosses_defeated=self.total_bosses_defeated,
            highest_difficulty_completed=self.highest_difficulty_completed,
            inventory=list(self.inventory),
        )

    def to_session(self) -> BattleSession:
        """Build a fresh, not yet started session resuming this snapshot."""
        return BattleSession(
            player=self.to_player(),
            max_battles=self.max_battles,
            battle_number=self.current_battle,
            stats=self.to_stats(),
            play_time_offset=self.total_play_time,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted camelCase keys."""
        data = {KEY_MAP[f.name]: getattr(self, f.name) for f in fields(self)}
        data["inventory"] = list(self.inventory)
        return data

    def validate(self) -> list[str]:
        """Return a list of violated invariants (empty when valid)."""
        errors = []
        for f in fields(self):
            if f.name in ("player_name", "inventory"):
                continue
            value = getattr(self, f.name)
            if not _is_int(value):
                errors.append(f"{KEY_MAP[f.name]} must be an integer")
            elif value < 0:
                errors.append(f"{KEY_MAP[f.name]} must be non-negative")

        if not isinstance(self.player_name, str) or not self.player_name:
            errors.append("playerName must be a non-empty string")
        if not all(isinstance(item, str) for item in self.inventory):
            errors.append("inventory must contain only item names")
        if errors:
            return errors

        errors.extend(self.to_player().validate_stats())
        if self.player_level < 1:
            errors.append("playerLevel must be at least 1")
        if self.player_exp_to_next <= 0:
            errors.append("playerExpToNext must be positive")
        if self.max_battles < 1:
            errors.append("maxBattles must be at least 1")
        if not 1 <= self.current_battle <= self.max_battles + 1:
            errors.append("currentBattle must be between 1 and maxBattles + 1")
        if self.total_math_problems_correct > self.total_math_problems_attempted:
            errors.append("totalMathProblemsCorrect cannot exceed totalMathProblemsAttempted")
        if self.total_bosses_defeated > self.total_enemies_defeated:
            errors.append("totalBossesDefeated cannot exceed totalEnemiesDefeated")
        if self.highest_difficulty_completed > MAX_DIFFICULTY:
            errors.append(f"highestDifficultyCompleted cannot exceed {MAX_DIFFICULTY}")
        return errors

    @classmethod
    def from_dict(
        cls,
        data: Any,
        defaults: Optional[dict[str, Any]] = None
    ) -> "SaveSnapshot":
        """
        Parse a persisted record.

        Args:
            data: Stored dict; missing keys are taken from the defaults
            defaults: Persisted-key defaults (DEFAULT_SAVE_DATA when omitted)

        Returns:
            A validated SaveSnapshot

        Raises:
            MalformedSnapshotError: If the record is not a dict, the inventory
                is not a list, or any value breaks an invariant
        """
        if not isinstance(data, dict):
            raise MalformedSnapshotError([f"snapshot must be a mapping, got {type(data).__name__}"])

        merged = dict(defaults if defaults is not None else DEFAULT_SAVE_DATA)
        merged.update(data)

        inventory = merged["inventory"]
        if not isinstance(inventory, (list, tuple)):
            raise MalformedSnapshotError(["inventory must be a list"])

        values = {name: merged[key] for name, key in KEY_MAP.items()}
        values["inventory"] = tuple(inventory)
        snapshot = cls(**values)

        errors = snapshot.validate()
        if errors:
            raise MalformedSnapshotError(errors)
        return snapshot
