"""
Math challenge generation with difficulty scaling.

This module produces the problem the player must solve on every turn. The
problem tier is chosen from the player's level; the random source is
injected so a seeded generator yields a reproducible run.
"""
from dataclasses import replace
from typing import Optional

import numpy as np

from ..core.data import MathProblem, ProblemType, PROBLEM_DIFFICULTY


# Level thresholds for each problem tier
ADDITION_TIER_MAX_LEVEL = 3
MULTIPLICATION_TIER_MAX_LEVEL = 6

# Share of division problems in the top tier (the rest are mixed)
DIVISION_SHARE = 0.7


class ProblemGenerator:
    """Generates math problems scaled to the player's level."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def _between(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        return int(self.rng.integers(low, high, endpoint=True))

    def generate(self, player_level: int) -> MathProblem:
        """
        Generate a problem for the given player level.

        Args:
            player_level: Current player level (1 or higher)

        Returns:
            MathProblem whose answer is the exact result of its question
        """
        if player_level <= ADDITION_TIER_MAX_LEVEL:
            if self.rng.random() < 0.5:
                return self._addition()
            return self._subtraction()

        if player_level <= MULTIPLICATION_TIER_MAX_LEVEL:
            return self._multiplication()

        if self.rng.random() < DIVISION_SHARE:
            return self._division()
        return self._mixed()

    def _addition(self) -> MathProblem:
        a = self._between(1, 20)
        b = self._between(1, 20)
        return self._problem(f"{a} + {b}", a + b, ProblemType.ADDITION)

    def _subtraction(self) -> MathProblem:
        # Subtrahend never exceeds the minuend so the answer stays non-negative
        a = self._between(1, 20)
        b = self._between(1, a)
        return self._problem(f"{a} - {b}", a - b, ProblemType.SUBTRACTION)

    def _multiplication(self) -> MathProblem:
        a = self._between(2, 12)
        b = self._between(2, 12)
        return self._problem(f"{a} × {b}", a * b, ProblemType.MULTIPLICATION)

    def _division(self) -> MathProblem:
        divisor = self._between(2, 12)
        quotient = self._between(2, 15)
        dividend = divisor * quotient
        return self._problem(f"{dividend} ÷ {divisor}", quotient, ProblemType.DIVISION)

    def _mixed(self) -> MathProblem:
        a = self._between(5, 15)
        b = self._between(2, 8)
        c = self._between(3, 10)
        return self._problem(f"({a} + {b}) × {c}", (a + b) * c, ProblemType.MIXED)

    @staticmethod
    def _problem(question: str, answer: int, problem_type: ProblemType) -> MathProblem:
        return MathProblem(
            question=question,
            answer=answer,
            difficulty=PROBLEM_DIFFICULTY[problem_type],
            type=problem_type,
        )

    def with_options(self, problem: MathProblem, count: int = 4) -> MathProblem:
        """
        Attach multiple-choice options to a problem.

        Distractors are distinct non-negative values near the answer.

        Args:
            problem: Problem to decorate
            count: Total number of options, answer included

        Returns:
            Copy of the problem with shuffled options
        """
        if count < 2:
            raise ValueError(f"option count must be at least 2, got {count}")

        answer = problem.answer
        spread = max(3, abs(answer) // 5 + 2)
        pool = [answer + d for d in range(-spread, spread + 1) if d != 0 and answer + d >= 0]

        extra = spread + 1
        while len(pool) < count - 1:
            pool.append(answer + extra)
            extra += 1

        distractors = self.rng.choice(np.array(pool), size=count - 1, replace=False)
        options = self.rng.permutation(np.append(distractors, answer))
        return replace(problem, options=tuple(int(option) for option in options))
