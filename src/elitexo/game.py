"""Core rules and game-loop state for Elite XO (classic 3x3 Tic-Tac-Toe)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple
import logging

LOGGER = logging.getLogger(__name__)

Player = str  # "X" or "O"
Cell = Optional[Player]
Board = Tuple[Cell, ...]

FIRST_PLAYER: Player = "X"

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class GameMode(str, Enum):
    PVP = "PVP"
    AI = "AI"


class Event(str, Enum):
    """Outcome of a single applied move; the browser maps these to sound cues."""

    MOVE = "move"
    WIN = "win"
    DRAW = "draw"


@dataclass(frozen=True)
class WinResult:
    winner: Player
    line: Tuple[int, int, int]


# ---------- Rule evaluator ----------


def evaluate_win(board: Sequence[Cell]) -> Optional[WinResult]:
    """Return the first completed line in ``WINNING_LINES`` order, if any."""
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v is not None and v == board[b] == board[c]:
            return WinResult(winner=v, line=(a, b, c))
    return None


def is_full(board: Sequence[Cell]) -> bool:
    return all(c is not None for c in board)


def available_moves(board: Sequence[Cell]) -> List[int]:
    """Indices of empty cells in ascending order."""
    return [i for i, c in enumerate(board) if c is None]


def place(board: Sequence[Cell], index: int, player: Player) -> Board:
    """Return a new board with ``player`` at ``index``; ``board`` is untouched."""
    cells = list(board)
    cells[index] = player
    return tuple(cells)


def other_player(player: Player) -> Player:
    return "O" if player == "X" else "X"


def empty_board() -> Board:
    return (None,) * 9


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    board: List[Cell] = field(default_factory=lambda: [None] * 9)
    current_player: Player = FIRST_PLAYER
    mode: GameMode = GameMode.AI
    difficulty: Difficulty = Difficulty.MEDIUM
    winner: Optional[Player] = None
    winning_line: Optional[Tuple[int, int, int]] = None
    drawn: bool = False

    # ---- API used by UI & AI ----

    @property
    def is_over(self) -> bool:
        return self.winner is not None or self.drawn

    @property
    def ai_to_move(self) -> bool:
        return (
            self.mode == GameMode.AI
            and not self.is_over
            and self.current_player == other_player(FIRST_PLAYER)
        )

    def snapshot(self) -> Board:
        """Immutable copy of the board for the rule evaluator and the AI."""
        return tuple(self.board)

    def available_moves(self) -> List[int]:
        if self.is_over:
            return []
        return available_moves(self.board)

    def play_move(self, index: int) -> Event:
        """Apply the current player's mark at ``index`` and update the result."""
        if self.is_over:
            raise ValueError("Game already finished")
        if not 0 <= index < 9:
            raise ValueError(f"Cell index {index} is out of range")
        if self.board[index] is not None:
            raise ValueError("Cell already occupied")

        self.board[index] = self.current_player
        self.current_player = other_player(self.current_player)
        return self._update_state()

    def reset(
        self,
        mode: Optional[GameMode] = None,
        difficulty: Optional[Difficulty] = None,
    ) -> None:
        """Start a new round, keeping mode and difficulty unless replaced."""
        self.board = [None] * 9
        self.current_player = FIRST_PLAYER
        self.winner = None
        self.winning_line = None
        self.drawn = False
        if mode is not None:
            self.mode = mode
        if difficulty is not None:
            self.difficulty = difficulty

    # ---- helpers ----

    def _update_state(self) -> Event:
        result = evaluate_win(self.board)
        if result is not None:
            self.winner = result.winner
            self.winning_line = result.line
            LOGGER.debug("%s wins on line %s", result.winner, result.line)
            return Event.WIN
        if is_full(self.board):
            self.drawn = True
            LOGGER.debug("Board full, game drawn")
            return Event.DRAW
        return Event.MOVE
