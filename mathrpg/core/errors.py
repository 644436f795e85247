"""Exceptions raised inside the battle core.

Normal play never lets these escape: they are caught at the manager boundary
and turned into log events or fallbacks.
"""

from .data.game_enums import ErrorKind


class BattleError(Exception):
    """Base exception for battle system errors."""

    kind: ErrorKind


class MalformedSnapshotError(BattleError):
    """Raised when a persisted snapshot fails validation."""

    kind = ErrorKind.MALFORMED_SNAPSHOT

    def __init__(self, problems: list[str]):
        super().__init__(f"Malformed save snapshot: {'; '.join(problems)}")
        self.problems = problems
