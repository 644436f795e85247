#!/usr/bin/env python3
"""Headless Math RPG demo: a scripted player fights through a full session."""

import argparse
import json

import numpy as np

from mathrpg.core.engine import ManualScheduler
from mathrpg.core.events import EventManager
from mathrpg.game.autoplay import AutoPlayer, run_balance_simulation
from mathrpg.game.battle_config import BattleConfigLoader
from mathrpg.game.catalog_loader import load_encounter_table, load_shop
from mathrpg.game.managers import BattleManager, LogManager, PresentationBridge
from mathrpg.game.problem_generator import ProblemGenerator


WATCHED_EVENTS = (
    "battle-started", "challenge-opened", "combat-result", "enemy-attacked",
    "enemy-defeated", "level-up", "player-defeated", "shop-opened",
    "item-purchased", "purchase-rejected", "game-completed",
)


def print_event(name: str, payload: dict) -> None:
    print(f"{name:<18} {json.dumps(payload, ensure_ascii=False)}")


def play(seed, accuracy: float, config_path, save_log: bool) -> None:
    loader = BattleConfigLoader(config_path)
    config = loader.load()

    event_manager = EventManager()
    log_manager = LogManager(event_manager)
    for warning in loader.warnings:
        log_manager.warning(warning)

    scheduler = ManualScheduler()
    rng = np.random.default_rng(seed)

    def on_complete(final_score: int, achievements: list[str], elapsed_seconds: int) -> None:
        print(f"\nFinal score: {final_score} in {elapsed_seconds}s (virtual)")
        for achievement in achievements:
            print(f"  * {achievement}")

    manager = BattleManager(
        event_manager=event_manager,
        scheduler=scheduler,
        encounter_table=load_encounter_table(),
        shop=load_shop(),
        problem_generator=ProblemGenerator(rng),
        config=config,
        on_complete=on_complete,
        clock=lambda: scheduler.current_time / 1000.0,
    )
    bridge = PresentationBridge(event_manager, manager)
    for name in WATCHED_EVENTS:
        bridge.on(name, print_event)
    AutoPlayer(bridge, accuracy=accuracy, rng=rng)

    manager.start()
    scheduler.run_until_idle()

    if save_log:
        path = log_manager.save_log_to_file()
        print(f"\nLog saved to {path}" if path else "\nFailed to save log")


def main():
    parser = argparse.ArgumentParser(description="Headless Math RPG battle session")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument("--accuracy", type=float, default=0.8, help="Chance the scripted player answers correctly")
    parser.add_argument("--config", default=None, help="Path to a battle_config.yaml")
    parser.add_argument("--simulate", type=int, metavar="RUNS", help="Run a balance simulation instead")
    parser.add_argument("--save-log", action="store_true", help="Write the battle log under logs/")
    args = parser.parse_args()

    if args.simulate:
        summary = run_balance_simulation(args.simulate, args.accuracy, seed=args.seed or 0)
        for key, value in summary.items():
            print(f"{key:<22} {value:.2f}")
        return

    try:
        play(args.seed, args.accuracy, args.config, args.save_log)
    except KeyboardInterrupt:
        print("\n\nSession interrupted by user")


if __name__ == "__main__":
    main()
