"""Three-tier move selection for Elite XO: random, tactical, and full minimax."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Sequence, Union
import logging
import math
import random

from .game import (
    Board,
    Cell,
    Difficulty,
    Player,
    TicTacToeGame,
    available_moves,
    evaluate_win,
    is_full,
    other_player,
    place,
)

LOGGER = logging.getLogger(__name__)

NO_MOVE = -1

WIN_SCORE = 10
DRAW_SCORE = 0


# ---- public API ----


def select_move(
    board: Sequence[Cell],
    difficulty: Union[Difficulty, str],
    player: Player = "O",
    rng: Optional[random.Random] = None,
) -> int:
    """Return the cell index ``player`` should take, or ``NO_MOVE``.

    The caller guarantees the board is not already won; the selector only
    looks for the next move. ``rng`` drives the Easy tier and the Medium
    fallback so both are reproducible under a seeded generator.
    """
    difficulty = coerce_difficulty(difficulty)
    snapshot: Board = tuple(board)
    if not available_moves(snapshot):
        return NO_MOVE
    if rng is None:
        rng = random.Random()

    if difficulty == Difficulty.HARD:
        return _hard_move(snapshot, player)
    if difficulty == Difficulty.MEDIUM:
        return _medium_move(snapshot, player, rng)
    return _easy_move(snapshot, rng)


def coerce_difficulty(value: Union[Difficulty, str]) -> Difficulty:
    """Accept a ``Difficulty`` or its name/value in any case."""
    if isinstance(value, Difficulty):
        return value
    for tier in Difficulty:
        if value.strip().lower() in (tier.value.lower(), tier.name.lower()):
            return tier
    raise ValueError(f"Unknown difficulty {value!r}")


def find_winning_move(board: Board, player: Player) -> Optional[int]:
    """First empty cell (ascending) that completes a line for ``player``."""
    for index in available_moves(board):
        result = evaluate_win(place(board, index, player))
        if result is not None and result.winner == player:
            return index
    return None


# ---- tiers ----


def _easy_move(board: Board, rng: random.Random) -> int:
    return rng.choice(available_moves(board))


def _medium_move(board: Board, player: Player, rng: random.Random) -> int:
    # 1) Win, 2) block, 3) random
    win = find_winning_move(board, player)
    if win is not None:
        return win
    block = find_winning_move(board, other_player(player))
    if block is not None:
        return block
    return _easy_move(board, rng)


def _hard_move(board: Board, player: Player) -> int:
    best_score = -math.inf
    best_move = NO_MOVE
    for index in available_moves(board):
        score = _minimax(place(board, index, player), player, 0, False)
        if score > best_score:
            best_score, best_move = score, index
    LOGGER.debug("Minimax picked %d for %s (score %s)", best_move, player, best_score)
    return best_move


# ---- core search ----


@lru_cache(maxsize=None)
def _minimax(board: Board, player: Player, depth: int, maximizing: bool) -> int:
    """Game-theoretic value of ``board`` from ``player``'s point of view.

    ``depth`` counts plies since the root move, so quicker wins and slower
    losses score better. Boards are tuples, each child a fresh value.
    """
    result = evaluate_win(board)
    if result is not None:
        if result.winner == player:
            return WIN_SCORE - depth
        return -WIN_SCORE + depth
    if is_full(board):
        return DRAW_SCORE

    opponent = other_player(player)
    scores = (
        _minimax(
            place(board, index, player if maximizing else opponent),
            player,
            depth + 1,
            not maximizing,
        )
        for index in available_moves(board)
    )
    return max(scores) if maximizing else min(scores)


# ---- game-loop adapter ----


@dataclass
class AIPlayer:
    """Automated opponent bound to one mark and one difficulty tier.

    - AIPlayer(player="O", difficulty=Difficulty.HARD)
    - choose(game) -> cell index
    """

    player: Player = "O"
    difficulty: Difficulty = Difficulty.MEDIUM
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def choose(self, game: TicTacToeGame) -> int:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        move = select_move(game.snapshot(), self.difficulty, self.player, self.rng)
        if move == NO_MOVE:
            raise RuntimeError("No valid moves available")
        return move
