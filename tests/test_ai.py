"""Tests for the Tic-Tac-Toe minimax AI."""

import random

import pytest

from tictactoe.ai import (
    OPENING_CHOICES,
    PREFERRED_OPENINGS,
    MinimaxAI,
    minimax,
    select_move,
)
from tictactoe.game import EMPTY_BOARD, apply_move, evaluate, next_player


def play_out(cells, rng=None):
    """Let the AI play both sides until the game ends."""
    while evaluate(cells).in_progress:
        move = select_move(cells, next_player(cells), rng)
        assert cells[move] == " "
        cells = apply_move(cells, move, next_player(cells))
    return evaluate(cells)


def test_opening_only_center_or_corner():
    rng = random.Random(1234)
    picks = {select_move(EMPTY_BOARD, rng=rng) for _ in range(200)}
    assert picks == set(PREFERRED_OPENINGS[:OPENING_CHOICES])
    assert picks <= {0, 2, 4, 6, 8}


def test_opening_is_reproducible_with_seed():
    first = [select_move(EMPTY_BOARD, rng=random.Random(7)) for _ in range(5)]
    second = [select_move(EMPTY_BOARD, rng=random.Random(7)) for _ in range(5)]
    assert first == second


def test_full_board_has_no_move(make_board):
    assert select_move(make_board("XOXXOOOXX")) is None


def test_ai_completes_own_column(make_board):
    # X: 0, 3; O: 1, 4 -> O wins at 7. The AI plays O by default.
    assert select_move(make_board("XO.XO....")) == 7


def test_explicit_side_overrides_default(make_board):
    # Same board, searched for X: 6 completes 0-3-6.
    assert select_move(make_board("XO.XO...."), player="X") == 6


def test_won_board_has_no_move(make_board):
    assert select_move(make_board("XXXOO....")) is None


def test_ai_blocks_immediate_threat(make_board):
    # X threatens 0-1-2; O must take 2.
    assert select_move(make_board("XX..O....")) == 2


def test_ai_takes_win_over_block(make_board):
    # O wins on 5 (3-4-5); blocking X at 2 comes first in scan order.
    assert select_move(make_board("XX.OO...X")) == 5


def test_never_returns_occupied_cell(make_board):
    cells = make_board("X.O.X.O..")
    move = select_move(cells, player="X")
    assert cells[move] == " "


def test_minimax_scores_are_depth_weighted(make_board):
    score, move = minimax(make_board("XO.XO...."), "O", True)
    assert (score, move) == (9, 7)
    score, _ = minimax(make_board("XOXXOOOXX"), "O", True)
    assert score == 0


@pytest.mark.parametrize("opening", PREFERRED_OPENINGS[:OPENING_CHOICES])
def test_self_play_always_draws(opening):
    cells = apply_move(EMPTY_BOARD, opening, "X")
    outcome = play_out(cells)
    assert outcome.drawn


def test_self_play_from_empty_board_draws():
    outcome = play_out(EMPTY_BOARD, rng=random.Random(42))
    assert outcome.drawn


def test_minimax_ai_rejects_wrong_turn():
    ai = MinimaxAI(player="O")
    with pytest.raises(ValueError):
        ai.choose(EMPTY_BOARD)


def test_minimax_ai_rejects_finished_game(make_board):
    ai = MinimaxAI(player="O")
    with pytest.raises(ValueError):
        ai.choose(make_board("XXXOO...."))


def test_minimax_ai_as_x_opens_strongly():
    ai = MinimaxAI(player="X", rng=random.Random(3))
    assert ai.choose(EMPTY_BOARD) in (4, 0, 2)
