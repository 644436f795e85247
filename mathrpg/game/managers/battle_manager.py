"""
Battle State Machine for the math battle.

This module owns a BattleSession and drives it through the battle loop:
present a challenge, resolve the answer, let the enemy strike, award
rewards, open the shop and move on to the next encounter. Every state
change goes through a declared transition table; anything not in the
table is refused.

The manager never blocks. Pauses that let the presentation layer show a
result are one-shot callbacks on the injected Scheduler. Events are
queued on the EventManager and flushed at the end of each entry point,
so listeners that send commands while events are delivered are handled
after the current batch.
"""

import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Optional

from ...core.data import DataConverter, EnemySnapshot, MathProblem, PlayerSnapshot
from ...core.engine import BattleSession, BattleState, SessionPhase
from ...core.errors import MalformedSnapshotError
from ...core.events.events import (
    BattleStarted,
    BattleStateChanged,
    ChallengeOpened,
    CombatResult,
    EnemyAttacked,
    EnemyDefeated,
    GameCompleted,
    GameEvent,
    HudUpdate,
    ItemPurchased,
    LevelUp,
    LogMessage,
    PlayerDefeated,
    PurchaseRejected,
    ShopOpened,
)
from ..battle_config import BattleConfig
from ..combat_resolver import CombatResolver
from ..persistence import SaveSnapshot
from ..problem_generator import ProblemGenerator
from ..progression import apply_experience

if TYPE_CHECKING:
    from ...core.engine import Scheduler
    from ...core.events.event_manager import EventManager
    from ...core.input_system import Command
    from ..encounter_table import EncounterTable
    from ..shop import Shop


CompletionCallback = Callable[[int, list[str], int], None]


class BattleTrigger(Enum):
    """Internal occurrences that move the battle state machine."""
    CHALLENGE_PRESENTED = auto()
    ENEMY_SURVIVED = auto()
    ENEMY_DEFEATED = auto()
    PLAYER_SURVIVED = auto()
    PLAYER_DEFEATED = auto()
    SHOP_OPENED = auto()
    NEXT_BATTLE = auto()
    SHOP_CLOSED = auto()
    RUN_WON = auto()


@dataclass
class BattleTransitionRule:
    """Defines a battle state transition rule."""

    from_state: BattleState
    trigger: BattleTrigger
    to_state: BattleState
    description: str

    def matches(self, current_state: BattleState, trigger: BattleTrigger) -> bool:
        """Check if this rule matches the current conditions."""
        return self.from_state == current_state and self.trigger == trigger


class BattleManager:
    """Runs one battle session from start to completion.

    Entry points for the presentation layer are submit_answer(),
    purchase_item(), close_shop() and execute(); each returns True when the
    command was accepted. Commands arriving in the wrong state are logged
    and ignored.
    """

    def __init__(
        self,
        event_manager: "EventManager",
        scheduler: "Scheduler",
        encounter_table: "EncounterTable",
        shop: "Shop",
        problem_generator: Optional[ProblemGenerator] = None,
        config: Optional[BattleConfig] = None,
        on_complete: Optional[CompletionCallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.event_manager = event_manager
        self.scheduler = scheduler
        self.encounter_table = encounter_table
        self.shop = shop
        self.problem_generator = problem_generator or ProblemGenerator()
        self.config = config or BattleConfig()
        self.on_complete = on_complete
        self.clock = clock

        self.session = self._new_session()
        self.current_problem: Optional[MathProblem] = None

        # Timer bookkeeping: a callback only runs if no transition happened since it was scheduled
        self._generation = 0
        self._pending: Optional[tuple[int, int]] = None  # (generation, handle)

        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None
        self._completion: Optional[tuple[int, list[str], int]] = None

        self.transition_rules: list[BattleTransitionRule] = []
        self._setup_transitions()

    def _new_session(self) -> BattleSession:
        return BattleSession(
            player=self.config.create_player(),
            max_battles=self.config.max_battles,
        )

    def _setup_transitions(self) -> None:
        """Define battle state transition rules."""
        self.transition_rules = [
            BattleTransitionRule(
                from_state=BattleState.PLAYER_TURN,
                trigger=BattleTrigger.CHALLENGE_PRESENTED,
                to_state=BattleState.WAITING_ANSWER,
                description="Wait for an answer once the challenge is shown",
            ),
            BattleTransitionRule(
                from_state=BattleState.WAITING_ANSWER,
                trigger=BattleTrigger.ENEMY_SURVIVED,
                to_state=BattleState.ENEMY_TURN,
                description="Enemy strikes back after surviving the answer",
            ),
            BattleTransitionRule(
                from_state=BattleState.WAITING_ANSWER,
                trigger=BattleTrigger.ENEMY_DEFEATED,
                to_state=BattleState.VICTORY,
                description="Enemy reduced to 0 HP",
            ),
            BattleTransitionRule(
                from_state=BattleState.ENEMY_TURN,
                trigger=BattleTrigger.PLAYER_SURVIVED,
                to_state=BattleState.PLAYER_TURN,
                description="Next challenge after surviving the enemy strike",
            ),
            BattleTransitionRule(
                from_state=BattleState.ENEMY_TURN,
                trigger=BattleTrigger.PLAYER_DEFEATED,
                to_state=BattleState.DEFEAT,
                description="Player reduced to 0 HP",
            ),
            BattleTransitionRule(
                from_state=BattleState.VICTORY,
                trigger=BattleTrigger.SHOP_OPENED,
                to_state=BattleState.SHOPPING,
                description="Open the shop after a boss or every Nth battle",
            ),
            BattleTransitionRule(
                from_state=BattleState.VICTORY,
                trigger=BattleTrigger.NEXT_BATTLE,
                to_state=BattleState.PLAYER_TURN,
                description="Start the next battle",
            ),
            BattleTransitionRule(
                from_state=BattleState.SHOPPING,
                trigger=BattleTrigger.SHOP_CLOSED,
                to_state=BattleState.PLAYER_TURN,
                description="Start the next battle after leaving the shop",
            ),
            BattleTransitionRule(
                from_state=BattleState.SHOPPING,
                trigger=BattleTrigger.RUN_WON,
                to_state=BattleState.VICTORY,
                description="Final battle already won when the shop closes",
            ),
        ]

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> BattleState:
        return self.session.state

    @property
    def phase(self) -> SessionPhase:
        return self.session.phase

    @property
    def player_snapshot(self) -> PlayerSnapshot:
        return DataConverter.player_to_snapshot(self.session.player)

    @property
    def enemy_snapshot(self) -> Optional[EnemySnapshot]:
        return DataConverter.enemy_to_snapshot(self.session.enemy)

    def get_forecast(self) -> dict[int, int]:
        """Damage a correct answer would deal at each difficulty (empty without an enemy)."""
        if self.session.enemy is None:
            return {}
        return CombatResolver.forecast_player_damage(self.session.player, self.session.enemy)

    def elapsed_seconds(self) -> int:
        """Whole seconds played, including time carried over from a restored save."""
        if self._started_at is None:
            return self.session.play_time_offset
        end = self._finished_at if self._finished_at is not None else self.clock()
        return self.session.play_time_offset + int(end - self._started_at)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Begin the session at its current battle number."""
        if self.session.phase != SessionPhase.READY:
            accepted = self._reject_command("start", "session already started")
        else:
            self.session.phase = SessionPhase.ACTIVE
            self._started_at = self.clock()
            self._emit_log(
                f"Session started at battle {self.session.battle_number}/{self.session.max_battles}",
                category="SYSTEM",
                level="INFO",
            )
            self._start_battle()
            accepted = True
        self._flush()
        return accepted

    def cancel(self) -> bool:
        """Stop the session at any point. The completion callback will not fire."""
        if self.session.is_over:
            return False

        self._cancel_pending_timer()
        self._generation += 1
        self.session.phase = SessionPhase.CANCELLED
        self._finished_at = self.clock() if self._started_at is not None else None
        self.current_problem = None
        self._emit_log(
            f"Session cancelled in state {self.session.state.name}",
            category="SYSTEM",
            level="INFO",
        )
        self._flush()
        return True

    def snapshot(self) -> SaveSnapshot:
        """Capture the session for persistence."""
        return SaveSnapshot.from_session(self.session, self.elapsed_seconds())

    def restore(self, data: Any) -> bool:
        """
        Replace the session with one resumed from a persisted record.

        Only allowed before start(). A malformed record is logged and the
        session falls back to a fresh default player.

        Returns:
            bool: True if the record was restored, False if it was rejected
        """
        if self.session.phase != SessionPhase.READY:
            accepted = self._reject_command("restore", "session already started")
            self._flush()
            return accepted

        try:
            snapshot = SaveSnapshot.from_dict(data)
        except MalformedSnapshotError as e:
            self.session = self._new_session()
            self._emit_log(f"{e}; starting a new game", category="PERSISTENCE", level="WARNING")
            self._flush()
            return False

        self.session = snapshot.to_session()
        self._emit_log(
            f"Restored {snapshot.player_name} (level {snapshot.player_level}) "
            f"at battle {snapshot.current_battle}/{snapshot.max_battles}",
            category="PERSISTENCE",
            level="INFO",
        )
        self._flush()
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def execute(self, command: "Command") -> bool:
        """Run a typed command against this manager."""
        return command.execute(self)

    def submit_answer(self, value: int) -> bool:
        """Answer the open challenge."""
        if not self._accepts(BattleState.WAITING_ANSWER):
            accepted = self._reject_command("submit-answer", self._wrong_state_reason())
        elif not isinstance(value, int) or isinstance(value, bool):
            accepted = self._reject_command("submit-answer", f"answer must be an integer, got {value!r}")
        else:
            self._resolve_answer(value)
            accepted = True
        self._flush()
        return accepted

    def purchase_item(self, item_id: str) -> bool:
        """
        Buy an item while the shop is open.

        Returns:
            bool: True if the item was bought; a rejected purchase emits
            PurchaseRejected and returns False
        """
        if not self._accepts(BattleState.SHOPPING):
            accepted = self._reject_command("purchase-item", self._wrong_state_reason())
        elif not isinstance(item_id, str):
            accepted = self._reject_command("purchase-item", f"item id must be a string, got {item_id!r}")
        else:
            accepted = self._resolve_purchase(item_id)
        self._flush()
        return accepted

    def close_shop(self) -> bool:
        """Leave the shop and move on."""
        if not self._accepts(BattleState.SHOPPING):
            accepted = self._reject_command("close-shop", self._wrong_state_reason())
        else:
            self._emit_log("Shop closed", category="SHOP", level="DEBUG")
            self._advance_battle(BattleTrigger.SHOP_CLOSED)
            accepted = True
        self._flush()
        return accepted

    # ------------------------------------------------------------------
    # Battle flow
    # ------------------------------------------------------------------

    def _start_battle(self) -> None:
        session = self.session
        if session.is_final_battle_won:
            self._game_won()
            return

        session.enemy = self.encounter_table.next_encounter(session.battle_number)
        enemy_snapshot = self.enemy_snapshot

        self._emit(BattleStarted(
            battle_number=session.battle_number,
            max_battles=session.max_battles,
            enemy_snapshot=enemy_snapshot,
        ))
        self._emit_hud()
        self._emit_log(
            f"Battle {session.battle_number}: {session.enemy.name}"
            f"{' (boss)' if session.enemy.is_boss else ''} appears",
            category="BATTLE",
            level="INFO",
        )
        self._schedule(self.config.battle_start_delay_ms, self._present_challenge)

    def _present_challenge(self) -> None:
        problem = self.problem_generator.generate(self.session.player.level)
        if self.config.multiple_choice:
            problem = self.problem_generator.with_options(problem, self.config.option_count)
        self.current_problem = problem

        self._emit(ChallengeOpened(
            battle_number=self.session.battle_number,
            problem=problem,
            enemy_snapshot=self.enemy_snapshot,
        ))
        self._transition(BattleTrigger.CHALLENGE_PRESENTED)

    def _resolve_answer(self, value: int) -> None:
        session = self.session
        player, enemy, problem = session.player, session.enemy, self.current_problem
        self.current_problem = None

        result = CombatResolver.resolve_player_attack(player, enemy, problem, value)
        session.stats.record_answer(result.correct, problem.difficulty)
        CombatResolver.apply_damage(enemy, result.damage)

        if result.correct:
            message = f"Correct! You dealt {result.damage} damage!"
        else:
            message = f"Wrong! The answer was {problem.answer}"

        self._emit(CombatResult(
            battle_number=session.battle_number,
            success=result.correct,
            damage=result.damage,
            message=message,
        ))
        self._emit_hud()
        self._emit_log(
            f"{problem.question} = {value}: {message} ({enemy.name} {enemy.hp}/{enemy.max_hp} HP)",
            category="BATTLE",
            level="INFO",
        )

        if enemy.is_defeated:
            self._enemy_defeated()
        else:
            self._transition(BattleTrigger.ENEMY_SURVIVED)
            self._schedule(self.config.result_display_delay_ms, self._enemy_turn)

    def _enemy_turn(self) -> None:
        session = self.session
        player, enemy = session.player, session.enemy

        result = CombatResolver.resolve_enemy_attack(enemy, player)
        CombatResolver.apply_damage(player, result.damage)

        self._emit(EnemyAttacked(
            battle_number=session.battle_number,
            damage=result.damage,
            enemy_name=enemy.name,
        ))
        self._emit_hud()
        self._emit_log(
            f"{enemy.name} deals {result.damage} damage ({player.name} {player.hp}/{player.max_hp} HP)",
            category="BATTLE",
            level="INFO",
        )

        if player.is_defeated:
            self._player_defeated()
        else:
            self._transition(BattleTrigger.PLAYER_SURVIVED)
            self._schedule(self.config.enemy_attack_display_delay_ms, self._present_challenge)

    def _enemy_defeated(self) -> None:
        session = self.session
        player, enemy = session.player, session.enemy

        player.gold += enemy.rewards.gold
        session.stats.record_kill(enemy.is_boss)
        level_ups = apply_experience(player, enemy.rewards.exp, self.config.heal_policy)

        for level_up in level_ups:
            self._emit(LevelUp(
                battle_number=session.battle_number,
                new_level=level_up.new_level,
                hp_increase=level_up.hp_increase,
                attack_increase=level_up.attack_increase,
                defense_increase=level_up.defense_increase,
            ))
            self._emit_log(f"{player.name} reached level {level_up.new_level}", category="PROGRESSION", level="INFO")

        self._emit(EnemyDefeated(
            battle_number=session.battle_number,
            name=enemy.name,
            exp=enemy.rewards.exp,
            gold=enemy.rewards.gold,
            is_boss=enemy.is_boss,
        ))
        self._transition(BattleTrigger.ENEMY_DEFEATED)
        self._emit_hud()
        self._emit_log(
            f"{enemy.name} defeated: +{enemy.rewards.exp} EXP, +{enemy.rewards.gold} gold",
            category="BATTLE",
            level="INFO",
        )
        self._schedule(self.config.victory_display_delay_ms, self._after_victory)

    def _after_victory(self) -> None:
        session = self.session
        if session.enemy.is_boss or session.battle_number % self.config.shop_every_n_battles == 0:
            self._transition(BattleTrigger.SHOP_OPENED)
            self._emit(ShopOpened(
                battle_number=session.battle_number,
                items=self.shop.items,
                gold=session.player.gold,
            ))
            self._emit_log(f"Shop opened with {session.player.gold} gold", category="SHOP", level="INFO")
        else:
            self._advance_battle(BattleTrigger.NEXT_BATTLE)

    def _advance_battle(self, trigger: BattleTrigger) -> None:
        session = self.session
        session.battle_number += 1
        session.enemy = None
        if session.is_final_battle_won:
            if session.state == BattleState.SHOPPING:
                self._transition(BattleTrigger.RUN_WON)
            self._game_won()
            return

        self._transition(trigger)
        self._start_battle()

    def _resolve_purchase(self, item_id: str) -> bool:
        session = self.session
        result = self.shop.purchase(session.player, item_id)

        if not result.ok:
            self._emit(PurchaseRejected(
                battle_number=session.battle_number,
                item_id=item_id,
                reason=result.error,
                gold=session.player.gold,
            ))
            self._emit_log(
                f"Purchase of '{item_id}' rejected: {result.error.value}",
                category="SHOP",
                level="INFO",
            )
            return False

        session.player = result.player
        session.stats.inventory.append(result.item.name)
        self._emit(ItemPurchased(
            battle_number=session.battle_number,
            item_name=result.item.name,
            effect=result.item.effect,
        ))
        self._emit_hud()
        self._emit_log(
            f"Bought {result.item.name} for {result.item.cost} gold ({session.player.gold} left)",
            category="SHOP",
            level="INFO",
        )
        return True

    def _player_defeated(self) -> None:
        session = self.session
        player = session.player
        final_score = player.exp

        self._transition(BattleTrigger.PLAYER_DEFEATED)
        self._emit(PlayerDefeated(battle_number=session.battle_number, final_score=final_score))
        achievements = [
            f"Reached Level {player.level}",
            f"Defeated {session.battle_number - 1} enemies",
        ]
        self._complete(victory=False, final_score=final_score, achievements=achievements)

    def _game_won(self) -> None:
        player = self.session.player
        final_score = player.exp + player.gold
        achievements = [
            "Math Master",
            f"Reached Level {player.level}",
            "Defeated All Enemies",
            f"Earned {player.gold} Gold",
        ]
        self._complete(victory=True, final_score=final_score, achievements=achievements)

    def _complete(self, victory: bool, final_score: int, achievements: list[str]) -> None:
        session = self.session
        self._cancel_pending_timer()
        self._generation += 1
        session.phase = SessionPhase.COMPLETED
        self._finished_at = self.clock()

        self._emit(GameCompleted(
            battle_number=session.battle_number,
            victory=victory,
            final_score=final_score,
            achievements=tuple(achievements),
        ))
        self._emit_log(
            f"Session {'won' if victory else 'lost'} with score {final_score} "
            f"({session.stats.accuracy}% of problems correct)",
            category="SYSTEM",
            level="INFO",
        )
        # Delivered from _flush() once the final events are out
        self._completion = (final_score, list(achievements), self.elapsed_seconds())

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _accepts(self, required_state: BattleState) -> bool:
        return self.session.phase == SessionPhase.ACTIVE and self.session.state == required_state

    def _wrong_state_reason(self) -> str:
        if self.session.phase != SessionPhase.ACTIVE:
            return f"session is {self.session.phase.name}"
        return f"battle is in {self.session.state.name}"

    def _reject_command(self, command_name: str, reason: str) -> bool:
        self._emit_log(f"Ignored {command_name}: {reason}", category="INPUT", level="WARNING")
        return False

    def _transition(self, trigger: BattleTrigger) -> bool:
        """Apply the rule matching the current state and trigger."""
        old_state = self.session.state
        for rule in self.transition_rules:
            if rule.matches(old_state, trigger):
                self.session.state = rule.to_state
                self._generation += 1
                self._emit(BattleStateChanged(
                    battle_number=self.session.battle_number,
                    old_state=old_state,
                    new_state=rule.to_state,
                ))
                self._emit_log(f"Battle state: {old_state.name} -> {rule.to_state.name} ({rule.description})")
                return True

        self._emit_log(f"Refused transition {trigger.name} from {old_state.name}", level="ERROR")
        return False

    def _schedule(self, delay_ms: int, action: Callable[[], None]) -> None:
        generation = self._generation

        def fire() -> None:
            if self._pending is not None and self._pending[0] == generation:
                self._pending = None
            if generation != self._generation or self.session.phase != SessionPhase.ACTIVE:
                self._emit_log(f"Skipped stale timer for {action.__name__}")
                self._flush()
                return
            action()
            self._flush()

        self._pending = (generation, self.scheduler.schedule(delay_ms, fire))

    def _cancel_pending_timer(self) -> None:
        if self._pending is not None:
            self.scheduler.cancel(self._pending[1])
            self._pending = None

    def _emit(self, event: GameEvent) -> None:
        self.event_manager.publish(event, source="BattleManager")

    def _emit_hud(self) -> None:
        self._emit(HudUpdate(
            battle_number=self.session.battle_number,
            player_snapshot=self.player_snapshot,
            enemy_snapshot=self.enemy_snapshot,
        ))

    def _emit_log(self, message: str, category: str = "BATTLE", level: str = "DEBUG") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                battle_number=self.session.battle_number,
                message=message,
                category=category,
                level=level,
                source="BattleManager",
            ),
            source="BattleManager",
        )

    def _flush(self) -> None:
        """Deliver queued events, then the completion callback if it is due."""
        self.event_manager.process_events()
        if self.event_manager.is_dispatching:
            return
        if self._completion is not None and self.on_complete is not None:
            completion, self._completion = self._completion, None
            self.on_complete(*completion)
