"""
Configuration loader for battle settings.

This module handles loading and validating the YAML configuration that
controls session length, shop cadence, display delays, level-up healing and
the hero's starting stats.
"""
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..core.data import HealPolicy, Player


DEFAULT_STARTING_PLAYER = {
    "name": "Hero",
    "hp": 100,
    "max_hp": 100,
    "attack": 15,
    "defense": 8,
    "level": 1,
    "exp": 0,
    "exp_to_next": 100,
    "gold": 50,
}


@dataclass(frozen=True)
class BattleConfig:
    """Tunable settings for one battle session."""
    max_battles: int = 10
    shop_every_n_battles: int = 4

    # Delays in milliseconds
    battle_start_delay_ms: int = 1000
    result_display_delay_ms: int = 2000
    enemy_attack_display_delay_ms: int = 2000
    victory_display_delay_ms: int = 3000

    heal_policy: HealPolicy = HealPolicy.DELTA
    multiple_choice: bool = False
    option_count: int = 4

    starting_player: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_STARTING_PLAYER))

    def create_player(self) -> Player:
        """Build a fresh player from the starting stats."""
        return Player(**self.starting_player)

    def validate(self) -> list[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []
        for name, minimum in (("max_battles", 1), ("shop_every_n_battles", 1), ("option_count", 2)):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
                errors.append(f"{name} must be an integer of at least {minimum}")

        for name in ("battle_start_delay_ms", "result_display_delay_ms",
                     "enemy_attack_display_delay_ms", "victory_display_delay_ms"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(f"{name} must be a non-negative integer")

        try:
            player = self.create_player()
        except TypeError as e:
            errors.append(f"starting_player is invalid: {e}")
        else:
            errors.extend(f"starting_player: {problem}" for problem in player.validate_stats())
            if not isinstance(player.level, int) or player.level < 1:
                errors.append("starting_player: level must be at least 1")
            if not isinstance(player.exp, int) or player.exp < 0:
                errors.append("starting_player: exp must be non-negative")
            if not isinstance(player.exp_to_next, int) or player.exp_to_next <= 0:
                errors.append("starting_player: exp_to_next must be positive")
            if not isinstance(player.gold, int) or player.gold < 0:
                errors.append("starting_player: gold must be non-negative")
        return errors


class BattleConfigLoader:
    """Loads battle settings from a YAML file, falling back to defaults."""

    # Section -> {yaml key: BattleConfig field}
    SECTION_KEYS = {
        "config": {
            "max_battles": "max_battles",
            "shop_every_n_battles": "shop_every_n_battles",
            "heal_policy": "heal_policy",
            "multiple_choice": "multiple_choice",
            "option_count": "option_count",
        },
        "delays": {
            "battle_start": "battle_start_delay_ms",
            "result_display": "result_display_delay_ms",
            "enemy_attack_display": "enemy_attack_display_delay_ms",
            "victory_display": "victory_display_delay_ms",
        },
    }

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or "assets/config/battle_config.yaml"
        self.warnings: list[str] = []

    def _resolve_path(self) -> Path:
        # Relative paths are resolved against the package directory
        if os.path.isabs(self.config_path):
            return Path(self.config_path)
        package_root = Path(__file__).resolve().parent.parent
        return package_root / self.config_path

    def load(self) -> BattleConfig:
        """
        Load the battle configuration.

        A missing file yields the defaults and records a warning.

        Returns:
            BattleConfig: The validated configuration

        Raises:
            ValueError: If the file is not valid YAML or holds invalid values
        """
        config_file = self._resolve_path()
        if not config_file.exists():
            self.warnings.append(f"Battle config file not found: {config_file}, using defaults")
            return BattleConfig()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_file}: {e}")

        return self.parse(data, source=str(config_file))

    def parse(self, data: Any, source: str = "<memory>") -> BattleConfig:
        """Build a config from already-loaded YAML data. Unknown keys are ignored."""
        if not isinstance(data, dict):
            raise ValueError(f"Battle config in {source} must be a mapping")

        values: dict[str, Any] = {}
        for section, keys in self.SECTION_KEYS.items():
            section_data = data.get(section) or {}
            if not isinstance(section_data, dict):
                raise ValueError(f"Section '{section}' in {source} must be a mapping")
            for yaml_key, field_name in keys.items():
                if yaml_key in section_data:
                    values[field_name] = section_data[yaml_key]

        if "heal_policy" in values:
            try:
                values["heal_policy"] = HealPolicy(str(values["heal_policy"]).lower())
            except ValueError:
                raise ValueError(f"Unknown heal_policy {values['heal_policy']!r} in {source}")

        if "multiple_choice" in values and not isinstance(values["multiple_choice"], bool):
            raise ValueError(f"multiple_choice in {source} must be true or false")

        player_data = data.get("starting_player")
        if player_data is not None:
            if not isinstance(player_data, dict):
                raise ValueError(f"Section 'starting_player' in {source} must be a mapping")
            known = {f.name for f in fields(Player)}
            starting = dict(DEFAULT_STARTING_PLAYER)
            starting.update({k: v for k, v in player_data.items() if k in known})
            # Without an explicit hp the hero starts at full health
            if "hp" not in player_data and "max_hp" in player_data:
                starting["hp"] = starting["max_hp"]
            values["starting_player"] = starting

        config = BattleConfig(**values)
        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid battle config in {source}: {'; '.join(errors)}")
        return config
