"""Unbeatable minimax opponent for 3x3 Tic-Tac-Toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple
import logging
import math
import random

from .game import (
    Board,
    Player,
    apply_move,
    available_moves,
    evaluate,
    next_player,
    other,
    validate_board,
)

logger = logging.getLogger(__name__)

# Center first, then corners, then edges.
PREFERRED_OPENINGS: Tuple[int, ...] = (4, 0, 2, 6, 8, 1, 3, 5, 7)
# Openings are drawn only from this many leading entries of PREFERRED_OPENINGS.
OPENING_CHOICES = 3

WIN_SCORE = 10

# The computer always plays O; X (the human) opens.
AI_PLAYER: Player = "O"


def score_terminal(winner: Optional[Player], player: Player, depth: int) -> int:
    """Depth-weighted score: quick wins beat slow ones, slow losses beat quick ones."""
    if winner == player:
        return WIN_SCORE - depth
    if winner is not None:
        return depth - WIN_SCORE
    return 0


def minimax(
    board: Board, player: Player, maximizing: bool, depth: int = 0
) -> Tuple[float, Optional[int]]:
    """Exhaustive search scored from ``player``'s side.

    Returns ``(score, index)``; ``index`` is ``None`` at terminal nodes.
    Comparisons are strict, so the first move found wins a tie.
    """
    outcome = evaluate(board)
    if outcome.is_over:
        return score_terminal(outcome.winner, player, depth), None

    moves = available_moves(board)
    best_move: Optional[int] = moves[0]

    if maximizing:
        value = -math.inf
        for move in moves:
            child = apply_move(board, move, player)
            score, _ = minimax(child, player, False, depth + 1)
            if score > value:
                value, best_move = score, move
    else:
        value = math.inf
        opponent = other(player)
        for move in moves:
            child = apply_move(board, move, opponent)
            score, _ = minimax(child, player, True, depth + 1)
            if score < value:
                value, best_move = score, move
    return value, best_move


def select_move(
    board: Iterable[str],
    player: Player = AI_PLAYER,
    rng: Optional[random.Random] = None,
) -> Optional[int]:
    """Best cell for ``player`` (the AI side unless given).

    Returns ``None`` when the board is full, and also when it is already won.
    """
    cells = validate_board(board)
    moves = available_moves(cells)
    if not moves:
        return None

    if len(moves) == len(cells):
        rng = rng or random.Random()
        return rng.choice(PREFERRED_OPENINGS[:OPENING_CHOICES])

    score, move = minimax(cells, player, True)
    logger.debug("minimax picked %s for %s (score %s)", move, player, score)
    return move


@dataclass
class MinimaxAI:
    """Computer opponent bound to one side and its own randomness source."""

    player: Player = AI_PLAYER
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def choose(self, board: Iterable[str]) -> int:
        cells = validate_board(board)
        if evaluate(cells).is_over:
            raise ValueError("Game already finished")
        if next_player(cells) != self.player:
            raise ValueError("It is not this AI player's turn")

        return select_move(cells, self.player, self.rng)  # type: ignore[return-value]
