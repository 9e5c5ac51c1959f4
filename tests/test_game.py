"""Unit tests for Elite XO rules and game-loop state."""

import pytest

from elitexo.game import (
    WINNING_LINES,
    Event,
    GameMode,
    Difficulty,
    TicTacToeGame,
    WinResult,
    available_moves,
    evaluate_win,
    is_full,
    place,
)

X, O = "X", "O"
DRAW_BOARD = [X, O, X, X, O, O, O, X, X]


@pytest.mark.parametrize("line", WINNING_LINES)
@pytest.mark.parametrize("mark", [X, O])
def test_every_line_is_detected(line, mark):
    board = [None] * 9
    for index in line:
        board[index] = mark

    assert evaluate_win(board) == WinResult(winner=mark, line=line)


def test_no_win_on_partial_board():
    board = [X, X, None, O, O, None, None, None, None]
    assert evaluate_win(board) is None
    assert not is_full(board)


def test_full_board_without_line_is_a_draw():
    assert evaluate_win(DRAW_BOARD) is None
    assert is_full(DRAW_BOARD)


def test_first_line_in_fixed_order_wins_ties():
    # Row 0 and column 0 are both complete; the row comes first.
    board = [X, X, X, X, O, O, X, O, O]
    assert evaluate_win(board) == WinResult(winner=X, line=(0, 1, 2))


def test_is_full_false_with_single_gap():
    board = list(DRAW_BOARD)
    board[4] = None
    assert not is_full(board)


def test_place_returns_new_board():
    board = (None,) * 9
    after = place(board, 4, X)
    assert board == (None,) * 9
    assert after[4] == X
    assert available_moves(after) == [0, 1, 2, 3, 5, 6, 7, 8]


def test_play_move_alternates_players():
    game = TicTacToeGame()
    assert game.play_move(4) == Event.MOVE
    assert game.board[4] == X
    assert game.current_player == O
    game.play_move(0)
    assert game.board[0] == O
    assert game.current_player == X


def test_win_records_winner_and_line():
    game = TicTacToeGame(mode=GameMode.PVP)
    for index in (0, 3, 1, 4):
        game.play_move(index)
    assert game.play_move(2) == Event.WIN
    assert game.winner == X
    assert game.winning_line == (0, 1, 2)
    assert game.is_over
    assert game.available_moves() == []


def test_full_game_ends_in_draw():
    game = TicTacToeGame(mode=GameMode.PVP)
    events = [game.play_move(index) for index in (0, 1, 2, 4, 3, 5, 7, 6, 8)]
    assert events[-1] == Event.DRAW
    assert all(event == Event.MOVE for event in events[:-1])
    assert game.drawn
    assert game.winner is None
    assert game.board == DRAW_BOARD


def test_occupied_cell_rejected():
    game = TicTacToeGame()
    game.play_move(0)
    with pytest.raises(ValueError):
        game.play_move(0)


def test_out_of_range_cell_rejected():
    game = TicTacToeGame()
    with pytest.raises(ValueError):
        game.play_move(9)


def test_moves_rejected_after_game_over():
    game = TicTacToeGame()
    for index in (0, 3, 1, 4, 2):
        game.play_move(index)
    with pytest.raises(ValueError):
        game.play_move(8)


def test_ai_to_move_only_in_ai_mode():
    ai_game = TicTacToeGame(mode=GameMode.AI)
    pvp_game = TicTacToeGame(mode=GameMode.PVP)
    assert not ai_game.ai_to_move
    ai_game.play_move(0)
    pvp_game.play_move(0)
    assert ai_game.ai_to_move
    assert not pvp_game.ai_to_move


def test_reset_keeps_settings_unless_replaced():
    game = TicTacToeGame(mode=GameMode.AI, difficulty=Difficulty.HARD)
    for index in (0, 3, 1, 4, 2):
        game.play_move(index)

    game.reset()
    assert game.board == [None] * 9
    assert game.current_player == X
    assert game.winner is None and game.winning_line is None
    assert game.difficulty == Difficulty.HARD

    game.reset(mode=GameMode.PVP, difficulty=Difficulty.EASY)
    assert game.mode == GameMode.PVP
    assert game.difficulty == Difficulty.EASY
