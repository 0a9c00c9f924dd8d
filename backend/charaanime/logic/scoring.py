"""Points awarded for guesses and end-of-session totals."""

from __future__ import annotations

from typing import TYPE_CHECKING

from charaanime.logic.types import GameSummary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from charaanime.logic.types import RoundRecord

MAX_ROUND_POINTS = 40  # correct guess with only the first character revealed
POINTS_STEP = 10  # lost for every additional character revealed


def round_points(position: int) -> int:
    """Return the points for a correct guess at 1-based attempt ``position``.

    Position 1 scores 40, position 4 scores 10.
    """
    if position < 1:
        raise ValueError(f"position must be >= 1, got {position}")
    return max(0, MAX_ROUND_POINTS - POINTS_STEP * (position - 1))


def max_session_points(total_rounds: int) -> int:
    return total_rounds * MAX_ROUND_POINTS


def summarize_rounds(
    rounds: Sequence[RoundRecord],
    *,
    total_rounds: int,
    total_points: int,
    num_corrects: int,
) -> GameSummary:
    """Build the end-of-session summary.

    A session is perfect when every round scored the maximum on the first try.
    """
    total_tries = sum(len(r.selected_animes) for r in rounds)
    max_points = max_session_points(total_rounds)
    return GameSummary(
        total_points=total_points,
        max_points=max_points,
        total_tries=total_tries,
        total_rounds=total_rounds,
        rounds_played=len(rounds),
        num_corrects=num_corrects,
        is_perfect=max_points > 0 and total_points == max_points and total_tries == total_rounds,
    )
