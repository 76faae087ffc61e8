"""Unit tests for Tic-Tac-Toe rules and outcome evaluation."""

import pytest

from tictactoe.game import (
    EMPTY_BOARD,
    WINNING_LINES,
    Outcome,
    TicTacToeGame,
    apply_move,
    available_moves,
    evaluate,
    next_player,
)


@pytest.mark.parametrize("line", WINNING_LINES)
@pytest.mark.parametrize("player", ["X", "O"])
def test_completed_line_reports_winner(line, player):
    cells = [" "] * 9
    for i in line:
        cells[i] = player
    outcome = evaluate(cells)
    assert outcome.winner == player
    assert outcome.line == line
    assert not outcome.drawn
    assert outcome.is_over


def test_full_board_without_line_is_draw(make_board):
    outcome = evaluate(make_board("XOXXOOOXX"))
    assert outcome == Outcome(drawn=True)
    assert outcome.is_over


def test_open_board_is_in_progress(make_board):
    outcome = evaluate(make_board("XO..X...."))
    assert outcome.winner is None
    assert not outcome.drawn
    assert outcome.in_progress


def test_win_on_full_board_is_not_a_draw(make_board):
    outcome = evaluate(make_board("XXXOOXXOO"))
    assert outcome.winner == "X"
    assert outcome.line == (0, 1, 2)
    assert not outcome.drawn


def test_first_line_in_scan_order_wins(make_board):
    # Rows come before columns in the scan.
    outcome = evaluate(make_board("XXXX..X.."))
    assert outcome.line == (0, 1, 2)


def test_evaluate_is_idempotent(make_board):
    cells = make_board("XO.OX...X")
    assert evaluate(cells) == evaluate(cells)
    assert cells == make_board("XO.OX...X")


@pytest.mark.parametrize("cells", [[" "] * 8, [" "] * 10, ["x"] + [" "] * 8])
def test_malformed_board_rejected(cells):
    with pytest.raises(ValueError):
        evaluate(cells)


def test_apply_move_returns_new_board():
    after = apply_move(EMPTY_BOARD, 4, "X")
    assert after[4] == "X"
    assert EMPTY_BOARD[4] == " "
    with pytest.raises(ValueError):
        apply_move(after, 4, "O")


def test_available_moves_and_turn_parity(make_board):
    cells = make_board("X...O...X")
    assert available_moves(cells) == [1, 2, 3, 5, 6, 7]
    assert next_player(cells) == "O"
    assert next_player(EMPTY_BOARD) == "X"


def test_game_alternates_players_and_detects_win():
    game = TicTacToeGame()
    for index in (0, 3, 1, 4, 2):
        game.play_move(index)
    assert game.winner == "X"
    assert game.winning_line == (0, 1, 2)
    with pytest.raises(ValueError):
        game.play_move(8)


def test_game_detects_draw():
    game = TicTacToeGame()
    for index in (0, 1, 2, 4, 3, 5, 7, 6, 8):
        game.play_move(index)
    assert game.drawn
    assert game.winner is None


def test_game_rejects_occupied_and_off_board_cells():
    game = TicTacToeGame()
    game.play_move(4)
    with pytest.raises(ValueError):
        game.play_move(4)
    with pytest.raises(ValueError):
        game.play_move(9)
    assert game.current_player == "O"


def test_reset_clears_board():
    game = TicTacToeGame()
    for index in (0, 3, 1, 4, 2):
        game.play_move(index)
    game.reset()
    assert game.board == EMPTY_BOARD
    assert game.current_player == "X"
    assert game.winner is None and game.winning_line is None
    assert not game.drawn
