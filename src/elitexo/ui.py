"""FastAPI-powered web UI for playing Elite XO in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import AIPlayer, coerce_difficulty
from .game import Difficulty, Event, GameMode, TicTacToeGame, other_player, FIRST_PLAYER

LOGGER = logging.getLogger(__name__)

AI_PLAYER = other_player(FIRST_PLAYER)
AI_THINK_DELAY: float = 0.7


@dataclass
class GameSession:
    """Container for an active game and, in AI mode, its automated opponent."""

    game: TicTacToeGame
    ai: Optional[AIPlayer]
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    last_event: Optional[Event] = None
    ai_pending: bool = False
    # Bumped on reset so a queued AI reply from the previous round is dropped.
    generation: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Elite XO", description="Classic tic-tac-toe played in the browser")


class _SettingsPayload(BaseModel):
    @field_validator("difficulty", mode="before", check_fields=False)
    @classmethod
    def normalize_difficulty(cls, value: object) -> object:
        if isinstance(value, str):
            return coerce_difficulty(value)
        return value

    @field_validator("mode", mode="before", check_fields=False)
    @classmethod
    def normalize_mode(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class NewGameRequest(_SettingsPayload):
    """Request payload for starting a new game."""

    mode: GameMode = Field(default=GameMode.AI, description="AI or PVP")
    difficulty: Difficulty = Field(
        default=Difficulty.MEDIUM,
        description="Strategy used by the AI opponent",
    )


class ResetRequest(_SettingsPayload):
    """Request payload for restarting a game, optionally changing settings."""

    mode: Optional[GameMode] = None
    difficulty: Optional[Difficulty] = None


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _build_ai(game: TicTacToeGame) -> Optional[AIPlayer]:
    if game.mode != GameMode.AI:
        return None
    return AIPlayer(player=AI_PLAYER, difficulty=game.difficulty)


def _create_session(mode: GameMode, difficulty: Difficulty) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    game = TicTacToeGame(mode=mode, difficulty=difficulty)
    session = GameSession(game=game, ai=_build_ai(game))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    LOGGER.info("Created game %s (mode=%s, difficulty=%s)", session_id, mode.value, difficulty.value)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str, generation: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        if session.generation != generation:
            return
        try:
            if not session.ai:
                return
            game = session.game
            if not game.ai_to_move or game.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(game)
            session.last_event = game.play_move(cell_index)
            session.move_log.append(
                {"player": session.ai.player, "cellIndex": cell_index}
            )
            LOGGER.debug(
                "AI (%s) played %d in game %s",
                session.ai.difficulty.value,
                cell_index,
                game_id,
            )
        finally:
            session.ai_pending = False


def _status_text(game: TicTacToeGame, ai_pending: bool) -> str:
    if game.winner:
        return f"Winner: Player {game.winner}"
    if game.drawn:
        return "It's a Draw!"
    if ai_pending:
        return "AI is thinking..."
    return f"Turn: Player {game.current_player}"


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "mode": game.mode.value,
            "difficulty": game.difficulty.value,
            "board": [c if c in ("X", "O") else "" for c in game.board],
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "winningLine": list(game.winning_line) if game.winning_line else None,
            "drawn": game.drawn,
            "status": _status_text(game, session.ai_pending),
            "moveLog": list(session.move_log),
            "lastEvent": session.last_event.value if session.last_event else None,
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.is_over:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if game.ai_to_move:
            raise HTTPException(status_code=400, detail="It is the AI's turn")

        player = game.current_player
        try:
            session.last_event = game.play_move(cell_index)
        except ValueError as exc:
            LOGGER.info("Rejected move %d in game %s: %s", cell_index, game_id, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": player, "cellIndex": cell_index})

        should_schedule_ai = session.ai is not None and game.ai_to_move
        if should_schedule_ai:
            session.ai_pending = True
        generation = session.generation

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, generation)


def _reset_session(session: GameSession, request: ResetRequest) -> None:
    with session.lock:
        session.game.reset(mode=request.mode, difficulty=request.difficulty)
        session.ai = _build_ai(session.game)
        session.move_log.clear()
        session.last_event = None
        session.ai_pending = False
        session.generation += 1


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode, request.difficulty)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str, request: Optional[ResetRequest] = None) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_session(session, request or ResetRequest())
    LOGGER.info("Reset game %s", game_id)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Elite XO</title>
    <style>
      :root {
        color-scheme: dark;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        align-items: center;
        justify-content: center;
        padding: 1rem;
        background: #020617;
        color: #f1f5f9;
      }
      main {
        width: min(420px, 100%);
      }
      h1 {
        margin: 0;
        text-align: center;
        font-size: 2.6rem;
        font-weight: 800;
        background: linear-gradient(90deg, #22d3ee, #6366f1);
        -webkit-background-clip: text;
        background-clip: text;
        color: transparent;
      }
      .tagline {
        text-align: center;
        margin: 0.25rem 0 1.5rem;
        color: #94a3b8;
        font-size: 0.8rem;
        letter-spacing: 0.2em;
        text-transform: uppercase;
      }
      .picker {
        display: flex;
        gap: 0.25rem;
        padding: 0.25rem;
        margin-bottom: 0.75rem;
        border-radius: 12px;
        background: #0f172a;
        border: 1px solid #1e293b;
      }
      .picker button {
        flex: 1;
        padding: 0.5rem;
        border: 0;
        border-radius: 8px;
        background: transparent;
        color: #94a3b8;
        font-weight: 600;
        cursor: pointer;
      }
      .picker button.active {
        background: #1e293b;
        color: #22d3ee;
      }
      .hidden {
        display: none !important;
      }
      .toolbar {
        display: flex;
        align-items: center;
        justify-content: space-between;
        height: 2.5rem;
        margin: 0.5rem 0;
      }
      #status {
        font-size: 1.2rem;
        font-weight: 700;
      }
      #status.won {
        color: #4ade80;
      }
      #status.drawn {
        color: #facc15;
      }
      .icon-button {
        border: 0;
        background: transparent;
        color: #94a3b8;
        font-size: 1.25rem;
        cursor: pointer;
      }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.75rem;
        padding: 0.75rem;
        border-radius: 16px;
        background: #0f172a;
        border: 1px solid #1e293b;
      }
      #board.thinking {
        opacity: 0.8;
      }
      .cell {
        aspect-ratio: 1;
        border: 0;
        border-radius: 12px;
        background: #1e293b;
        font-size: 3rem;
        font-weight: 800;
        cursor: pointer;
      }
      .cell:disabled {
        cursor: default;
      }
      .cell.x {
        color: #22d3ee;
      }
      .cell.o {
        color: #fb7185;
      }
      .cell.winning {
        background: #14532d;
      }
      #message {
        min-height: 1.25rem;
        margin-top: 0.75rem;
        text-align: center;
        color: #fb7185;
      }
      .legend {
        display: flex;
        justify-content: center;
        gap: 1.5rem;
        margin-top: 0.5rem;
        color: #64748b;
        font-size: 0.7rem;
        font-weight: 700;
        text-transform: uppercase;
      }
      #overlay {
        position: fixed;
        inset: 0;
        display: flex;
        align-items: center;
        justify-content: center;
        background: rgba(2, 6, 23, 0.8);
      }
      .result-card {
        width: min(360px, 90%);
        padding: 2rem;
        border-radius: 24px;
        text-align: center;
        background: #0f172a;
        border: 1px solid #1e293b;
      }
      .result-card button {
        width: 100%;
        padding: 1rem;
        border: 0;
        border-radius: 12px;
        background: #4f46e5;
        color: white;
        font-weight: 700;
        cursor: pointer;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>ELITE XO</h1>
      <p class=\"tagline\">Classic Game &bull; Modern Experience</p>
      <div class=\"picker\" id=\"mode-picker\">
        <button data-mode=\"AI\">AI Mode</button>
        <button data-mode=\"PVP\">PVP Mode</button>
      </div>
      <div class=\"picker\" id=\"difficulty-picker\">
        <button data-difficulty=\"Easy\">Easy</button>
        <button data-difficulty=\"Medium\">Medium</button>
        <button data-difficulty=\"Hard\">Hard</button>
      </div>
      <div class=\"toolbar\">
        <div id=\"status\">Setting up your game…</div>
        <div>
          <button class=\"icon-button\" id=\"mute\" title=\"Mute\">&#128266;</button>
          <button class=\"icon-button\" id=\"restart\" title=\"Restart Game\">&#8635;</button>
        </div>
      </div>
      <div id=\"board\"></div>
      <div id=\"message\"></div>
      <div class=\"legend\">
        <span>X: Human</span>
        <span id=\"legend-o\">O: AI</span>
      </div>
    </main>
    <div id=\"overlay\" class=\"hidden\">
      <div class=\"result-card\">
        <h2 id=\"result-title\"></h2>
        <p id=\"result-text\"></p>
        <button id=\"play-again\">Play Again</button>
      </div>
    </div>
    <script>
      const MUTE_KEY = 'tic-tac-toe-muted';
      const boardContainer = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const modePicker = document.getElementById('mode-picker');
      const difficultyPicker = document.getElementById('difficulty-picker');
      const muteButton = document.getElementById('mute');
      const restartButton = document.getElementById('restart');
      const legendO = document.getElementById('legend-o');
      const overlay = document.getElementById('overlay');
      const resultTitle = document.getElementById('result-title');
      const resultText = document.getElementById('result-text');
      const playAgainButton = document.getElementById('play-again');

      let gameId = null;
      let gameState = null;
      let isRequestPending = false;
      let aiPollHandle = null;
      let lastSoundedMoves = 0;
      let isMuted = JSON.parse(localStorage.getItem(MUTE_KEY) || 'false');
      let audioCtx = null;

      // ---- sound ----

      function getCtx() {
        if (!audioCtx) {
          audioCtx = new (window.AudioContext || window.webkitAudioContext)();
        }
        if (audioCtx.state === 'suspended') {
          audioCtx.resume();
        }
        return audioCtx;
      }

      function playTone(freq, type, duration, volume) {
        if (isMuted) return;
        const ctx = getCtx();
        const osc = ctx.createOscillator();
        const gain = ctx.createGain();
        osc.type = type;
        osc.frequency.setValueAtTime(freq, ctx.currentTime);
        gain.gain.setValueAtTime(volume, ctx.currentTime);
        gain.gain.exponentialRampToValueAtTime(0.0001, ctx.currentTime + duration);
        osc.connect(gain);
        gain.connect(ctx.destination);
        osc.start();
        osc.stop(ctx.currentTime + duration);
      }

      function playEventSound(event) {
        if (event === 'win') {
          [523.25, 659.25, 783.99, 1046.5].forEach((freq, i) => {
            setTimeout(() => playTone(freq, 'triangle', 0.4, 0.15), i * 150);
          });
        } else if (event === 'draw') {
          playTone(110, 'sine', 0.5, 0.2);
        } else if (event === 'move') {
          playTone(880, 'sine', 0.1, 0.1);
        }
      }

      function renderMute() {
        muteButton.innerHTML = isMuted ? '&#128263;' : '&#128266;';
        muteButton.title = isMuted ? 'Unmute' : 'Mute';
      }

      function toggleMute() {
        isMuted = !isMuted;
        localStorage.setItem(MUTE_KEY, JSON.stringify(isMuted));
        renderMute();
      }

      // ---- server calls ----

      async function postJson(url, body) {
        const response = await fetch(url, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body || {}),
        });
        const payload = await response.json().catch(() => ({}));
        if (!response.ok) {
          const detail = typeof payload?.detail === 'string' ? payload.detail : 'Request failed';
          throw new Error(detail);
        }
        return payload;
      }

      async function startGame(mode, difficulty) {
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          const data = gameId
            ? await postJson(`/api/game/${gameId}/reset`, { mode, difficulty })
            : await postJson('/api/game', { mode: mode || 'AI', difficulty: difficulty || 'Medium' });
          lastSoundedMoves = 0;
          setState(data);
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      function stopAiPolling() {
        if (aiPollHandle !== null) {
          clearTimeout(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function ensureAiPolling() {
        if (aiPollHandle !== null) return;
        aiPollHandle = setTimeout(pollAiState, 250);
      }

      async function pollAiState() {
        aiPollHandle = null;
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}`);
          if (!response.ok) {
            return;
          }
          setState(await response.json());
        } catch (error) {
          console.error('Polling failed', error);
        } finally {
          if (gameState?.aiPending) {
            ensureAiPolling();
          }
        }
      }

      async function sendMove(cellIndex) {
        if (!gameState || gameState.winner || gameState.drawn || gameState.aiPending) {
          return;
        }
        if (isRequestPending || !gameId) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await postJson(`/api/game/${gameId}/move`, { cellIndex }));
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      // ---- rendering ----

      function setState(data) {
        gameId = data.id;
        gameState = data;
        if (data.moveLog.length > lastSoundedMoves) {
          playEventSound(data.lastEvent);
        }
        lastSoundedMoves = data.moveLog.length;
        render();
        if (gameState.aiPending) {
          ensureAiPolling();
        } else {
          stopAiPolling();
        }
      }

      function render() {
        const state = gameState;
        modePicker.querySelectorAll('button').forEach((button) => {
          button.classList.toggle('active', button.dataset.mode === state.mode);
        });
        difficultyPicker.classList.toggle('hidden', state.mode !== 'AI');
        difficultyPicker.querySelectorAll('button').forEach((button) => {
          button.classList.toggle('active', button.dataset.difficulty === state.difficulty);
        });
        legendO.textContent = state.mode === 'AI' ? `O: AI (${state.difficulty})` : 'O: Human';

        statusEl.textContent = state.status;
        statusEl.classList.toggle('won', Boolean(state.winner));
        statusEl.classList.toggle('drawn', state.drawn);
        boardContainer.classList.toggle('thinking', state.aiPending);

        boardContainer.innerHTML = '';
        const winningLine = state.winningLine || [];
        const finished = Boolean(state.winner) || state.drawn;
        state.board.forEach((value, index) => {
          const cell = document.createElement('button');
          cell.className = 'cell';
          cell.textContent = value;
          if (value) cell.classList.add(value === 'X' ? 'x' : 'o');
          if (winningLine.includes(index)) cell.classList.add('winning');
          cell.disabled = finished || Boolean(value) || state.aiPending;
          cell.addEventListener('click', () => sendMove(index));
          boardContainer.appendChild(cell);
        });

        overlay.classList.toggle('hidden', !finished);
        if (finished) {
          resultTitle.textContent = state.winner ? `Player ${state.winner} Wins!` : "It's a Draw!";
          if (state.winner === 'O' && state.mode === 'AI') {
            resultText.textContent = `The ${state.difficulty} AI found its way to victory.`;
          } else if (state.winner === 'X' && state.mode === 'AI' && state.difficulty === 'Hard') {
            resultText.textContent = 'You actually beat the Hard AI? Impossible!';
          } else {
            resultText.textContent = 'Excellent game! Want to go again?';
          }
        }
      }

      modePicker.querySelectorAll('button').forEach((button) => {
        button.addEventListener('click', () => startGame(button.dataset.mode, null));
      });
      difficultyPicker.querySelectorAll('button').forEach((button) => {
        button.addEventListener('click', () => startGame(null, button.dataset.difficulty));
      });
      restartButton.addEventListener('click', () => startGame(null, null));
      playAgainButton.addEventListener('click', () => startGame(null, null));
      muteButton.addEventListener('click', toggleMute);

      renderMute();
      startGame('AI', 'Medium');
    </script>
  </body>
</html>
"""
