"""Tests for the Elite XO move selector."""

from collections import Counter
import random

import pytest

from elitexo.ai import NO_MOVE, AIPlayer, coerce_difficulty, find_winning_move, select_move
from elitexo.game import (
    Difficulty,
    TicTacToeGame,
    available_moves,
    evaluate_win,
    is_full,
    other_player,
    place,
)

X, O = "X", "O"
_ = None
SMART_TIERS = [Difficulty.MEDIUM, Difficulty.HARD]


@pytest.mark.parametrize("difficulty", SMART_TIERS)
def test_takes_own_winning_move(difficulty):
    board = [X, X, _, O, O, _, _, _, _]
    assert select_move(board, difficulty, O, random.Random(0)) == 5


@pytest.mark.parametrize("difficulty", SMART_TIERS)
def test_blocks_opponent_win(difficulty):
    board = [X, X, _, _, _, _, _, _, _]
    assert select_move(board, difficulty, O, random.Random(0)) == 2


@pytest.mark.parametrize("difficulty", SMART_TIERS)
def test_lowest_winning_cell_chosen(difficulty):
    # O can finish row 0 at 2 or column 0 at 6.
    board = [O, O, _, O, X, X, _, X, X]
    assert find_winning_move(tuple(board), O) == 2
    assert select_move(board, difficulty, O, random.Random(0)) == 2


def test_medium_prefers_win_over_block():
    board = [O, O, _, X, X, _, _, _, X]
    assert select_move(board, Difficulty.MEDIUM, O, random.Random(0)) == 2


def test_medium_falls_back_to_seeded_random():
    board = [X, _, _, _, _, _, _, _, _]
    expected = random.Random(7).choice(available_moves(board))
    assert select_move(board, Difficulty.MEDIUM, O, random.Random(7)) == expected


def test_hard_answers_corner_opening_with_center():
    board = [X, _, _, _, _, _, _, _, _]
    assert select_move(board, Difficulty.HARD, O) == 4


def test_easy_only_picks_empty_cells():
    board = [X, O, _, X, _, O, _, _, X]
    rng = random.Random(99)
    picks = {select_move(board, Difficulty.EASY, O, rng) for _ in range(200)}
    assert picks == set(available_moves(board))


def test_easy_distribution_is_roughly_uniform():
    rng = random.Random(1234)
    counts = Counter(
        select_move([None] * 9, Difficulty.EASY, O, rng) for _ in range(9000)
    )
    assert set(counts) == set(range(9))
    assert all(850 <= count <= 1150 for count in counts.values())


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_full_board_returns_sentinel(difficulty):
    board = [X, O, X, X, O, O, O, X, X]
    assert select_move(board, difficulty, O) == NO_MOVE


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_selector_does_not_mutate_board(difficulty):
    board = [X, _, _, _, O, _, _, _, X]
    before = list(board)
    first = select_move(board, difficulty, O, random.Random(3))
    second = select_move(board, difficulty, O, random.Random(3))
    assert board == before
    assert first == second


def test_difficulty_accepts_strings():
    assert coerce_difficulty("hard") is Difficulty.HARD
    assert coerce_difficulty("Medium") is Difficulty.MEDIUM
    assert coerce_difficulty(" EASY ") is Difficulty.EASY
    with pytest.raises(ValueError):
        coerce_difficulty("impossible")


def _outcomes_against_every_reply(board, to_move, ai):
    """Winners reachable when ``ai`` plays Hard and the opponent tries everything."""
    result = evaluate_win(board)
    if result is not None:
        return {result.winner}
    if is_full(board):
        return {None}
    nxt = other_player(to_move)
    if to_move == ai:
        move = select_move(board, Difficulty.HARD, ai)
        return _outcomes_against_every_reply(place(board, move, ai), nxt, ai)
    outcomes = set()
    for index in available_moves(board):
        outcomes |= _outcomes_against_every_reply(place(board, index, to_move), nxt, ai)
    return outcomes


@pytest.mark.parametrize("ai", [X, O])
def test_hard_never_loses(ai):
    outcomes = _outcomes_against_every_reply((_,) * 9, X, ai)
    assert other_player(ai) not in outcomes


def test_hard_against_hard_is_a_draw():
    board = (_,) * 9
    player = X
    while evaluate_win(board) is None and not is_full(board):
        board = place(board, select_move(board, Difficulty.HARD, player), player)
        player = other_player(player)
    assert evaluate_win(board) is None


def test_ai_player_plays_on_game():
    game = TicTacToeGame(difficulty=Difficulty.HARD)
    game.play_move(0)
    ai = AIPlayer(player=O, difficulty=Difficulty.HARD)
    assert ai.choose(game) == 4


def test_ai_player_refuses_out_of_turn():
    game = TicTacToeGame()
    ai = AIPlayer(player=O)
    with pytest.raises(ValueError):
        ai.choose(game)
