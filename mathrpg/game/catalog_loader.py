"""Enemy and shop catalogs loaded from YAML.

Catalogs are read once at startup and stay read-only for the rest of the
session. A missing or broken catalog is a startup error, so every problem
is raised instead of being patched over with defaults.
"""

from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..core.data import EnemyArchetype, ItemEffect, ItemType, ShopItem
from .encounter_table import EncounterTable
from .shop import Shop


DATA_DIR = Path(__file__).resolve().parent.parent / "assets" / "data"
ENEMIES_FILE = DATA_DIR / "enemies.yaml"
SHOP_ITEMS_FILE = DATA_DIR / "shop_items.yaml"

ARCHETYPE_FIELDS = ("name", "hp", "attack", "defense", "exp", "gold")
EFFECT_FIELDS = ("hp", "attack", "defense")


def _read_yaml(path: Union[str, Path]) -> Any:
    """Read a YAML document.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Catalog file not found: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}")


def _require_int(value: Any, label: str, minimum: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{label} must be at least {minimum}, got {value}")
    return value


def _parse_archetype(entry: Any, label: str) -> EnemyArchetype:
    if not isinstance(entry, dict):
        raise ValueError(f"{label} must be a mapping")

    missing = [name for name in ARCHETYPE_FIELDS if name not in entry]
    if missing:
        raise ValueError(f"{label} is missing fields: {', '.join(missing)}")

    name = entry["name"]
    if not isinstance(name, str) or not name:
        raise ValueError(f"{label} needs a non-empty name")

    return EnemyArchetype(
        name=name,
        hp=_require_int(entry["hp"], f"{label}.hp", 1),
        attack=_require_int(entry["attack"], f"{label}.attack", 0),
        defense=_require_int(entry["defense"], f"{label}.defense", 0),
        exp=_require_int(entry["exp"], f"{label}.exp", 0),
        gold=_require_int(entry["gold"], f"{label}.gold", 0),
    )


def load_enemy_catalog(
    path: Optional[Union[str, Path]] = None
) -> tuple[list[EnemyArchetype], list[EnemyArchetype]]:
    """Load regular and boss archetypes.

    Args:
        path: YAML file to read (defaults to the packaged enemies.yaml)

    Returns:
        Tuple of (regular archetypes, boss archetypes), weakest first

    Raises:
        FileNotFoundError: If the catalog file is missing
        ValueError: If the catalog structure or values are invalid
    """
    source = path or ENEMIES_FILE
    data = _read_yaml(source)

    try:
        enemies = data["enemies"]
        regular_data = enemies["regular"]
        boss_data = enemies["bosses"]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid enemy catalog structure in {source}: missing {e}")

    if not regular_data or not boss_data:
        raise ValueError(f"Enemy catalog {source} needs at least one regular enemy and one boss")

    regular = [_parse_archetype(entry, f"regular[{i}]") for i, entry in enumerate(regular_data)]
    bosses = [_parse_archetype(entry, f"bosses[{i}]") for i, entry in enumerate(boss_data)]
    return regular, bosses


def _parse_effect(data: Any, label: str) -> ItemEffect:
    if not isinstance(data, dict) or not data:
        raise ValueError(f"{label} needs at least one effect")

    unknown = set(data) - set(EFFECT_FIELDS)
    if unknown:
        raise ValueError(f"{label} has unknown effects: {', '.join(sorted(unknown))}")

    values = {name: _require_int(value, f"{label}.{name}", 1) for name, value in data.items()}
    return ItemEffect(**values)


def _parse_shop_item(entry: Any, label: str) -> ShopItem:
    if not isinstance(entry, dict):
        raise ValueError(f"{label} must be a mapping")

    try:
        item_type = ItemType(entry["type"])
    except KeyError as e:
        raise ValueError(f"{label} is missing field {e}")
    except ValueError:
        raise ValueError(f"{label} has unknown item type {entry['type']!r}")

    try:
        return ShopItem(
            id=str(entry["id"]),
            name=str(entry["name"]),
            type=item_type,
            cost=_require_int(entry["cost"], f"{label}.cost", 1),
            effect=_parse_effect(entry["effect"], f"{label}.effect"),
            description=str(entry.get("description", "")),
        )
    except KeyError as e:
        raise ValueError(f"{label} is missing field {e}")


def load_shop_catalog(path: Optional[Union[str, Path]] = None) -> list[ShopItem]:
    """Load the shop item catalog.

    Raises:
        FileNotFoundError: If the catalog file is missing
        ValueError: If the catalog structure or values are invalid
    """
    source = path or SHOP_ITEMS_FILE
    data = _read_yaml(source)

    if not isinstance(data, dict) or not isinstance(data.get("shop_items"), list):
        raise ValueError(f"Invalid shop catalog structure in {source}: expected a 'shop_items' list")

    return [_parse_shop_item(entry, f"shop_items[{i}]") for i, entry in enumerate(data["shop_items"])]


def load_encounter_table(path: Optional[Union[str, Path]] = None) -> EncounterTable:
    """Build an encounter table from the enemy catalog."""
    regular, bosses = load_enemy_catalog(path)
    return EncounterTable(regular, bosses)


def load_shop(path: Optional[Union[str, Path]] = None) -> Shop:
    """Build a shop from the item catalog."""
    return Shop(load_shop_catalog(path))
