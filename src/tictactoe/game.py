"""Core rules for 3x3 Tic-Tac-Toe: board snapshots and outcome evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

Player = str  # "X" or "O"
Board = Tuple[str, ...]
Line = Tuple[int, int, int]

EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")

WINNING_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

EMPTY_BOARD: Board = (EMPTY,) * 9


@dataclass(frozen=True)
class Outcome:
    """Verdict for a board: a winner with its line, a draw, or neither."""

    winner: Optional[Player] = None
    line: Optional[Line] = None
    drawn: bool = False

    @property
    def is_over(self) -> bool:
        return self.winner is not None or self.drawn

    @property
    def in_progress(self) -> bool:
        return not self.is_over


def other(player: Player) -> Player:
    return "O" if player == "X" else "X"


def validate_board(cells: Iterable[str]) -> Board:
    """Return ``cells`` as a board tuple, failing fast on malformed input."""

    board = tuple(cells)
    if len(board) != 9:
        raise ValueError(f"Board must have 9 cells, got {len(board)}")
    for c in board:
        if c != EMPTY and c not in PLAYERS:
            raise ValueError(f"Invalid cell value {c!r}")
    return board


def evaluate(board: Iterable[str]) -> Outcome:
    """First completed line in ``WINNING_LINES`` order wins; else draw or open."""

    cells = validate_board(board)
    for line in WINNING_LINES:
        a, b, c = line
        v = cells[a]
        if v != EMPTY and v == cells[b] == cells[c]:
            return Outcome(winner=v, line=line)
    if is_full(cells):
        return Outcome(drawn=True)
    return Outcome()


def is_full(board: Board) -> bool:
    return all(c != EMPTY for c in board)


def available_moves(board: Board) -> List[int]:
    return [i for i, c in enumerate(board) if c == EMPTY]


def apply_move(board: Board, index: int, player: Player) -> Board:
    """New board with ``player`` placed at ``index``; the input is untouched."""

    if board[index] != EMPTY:
        raise ValueError("Cell already occupied")
    return board[:index] + (player,) + board[index + 1 :]


def next_player(board: Board) -> Player:
    """Side to move, from mark counts (X always opens)."""

    return "X" if board.count("X") == board.count("O") else "O"


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    board: Board = EMPTY_BOARD
    current_player: Player = "X"
    winner: Optional[Player] = None
    winning_line: Optional[Line] = None
    drawn: bool = False

    def outcome(self) -> Outcome:
        return evaluate(self.board)

    def play_move(self, index: int) -> None:
        """Place the current player's mark, update the verdict, pass the turn."""
        if self.winner or self.drawn:
            raise ValueError("Game already finished")
        if not 0 <= index < 9:
            raise ValueError(f"Cell index {index} is off the board")

        self.board = apply_move(self.board, index, self.current_player)

        outcome = self.outcome()
        self.winner = outcome.winner
        self.winning_line = outcome.line
        self.drawn = outcome.drawn

        self.current_player = other(self.current_player)

    def reset(self) -> None:
        self.board = EMPTY_BOARD
        self.current_player = "X"
        self.winner = None
        self.winning_line = None
        self.drawn = False
