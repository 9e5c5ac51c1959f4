"""Elite XO package exposing game rules, AI move selection, and the web application."""

from .ai import AIPlayer, NO_MOVE, select_move
from .game import Difficulty, GameMode, TicTacToeGame, evaluate_win, is_full
from .ui import app

__all__ = [
    "AIPlayer",
    "Difficulty",
    "GameMode",
    "NO_MOVE",
    "TicTacToeGame",
    "app",
    "evaluate_win",
    "is_full",
    "select_move",
]
