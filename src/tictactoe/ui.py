"""FastAPI-powered web UI for playing Tic-Tac-Toe in the browser."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import threading

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import AI_PLAYER, MinimaxAI
from .game import EMPTY, TicTacToeGame

logger = logging.getLogger(__name__)

ALLOWED_MODES: Tuple[str, ...] = ("pvp", "ai")
AI_THINK_DELAY = 0.25  # seconds, pacing only


@dataclass
class GameSession:
    """Container for one browser game: its mode, board and AI opponent."""

    game: TicTacToeGame = field(default_factory=TicTacToeGame)
    mode: Optional[str] = None
    ai: Optional[MinimaxAI] = None
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    # Bumped on every reset so deferred AI moves can spot a stale board.
    generation: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def restart(self, mode: Optional[str]) -> None:
        self.game.reset()
        self.mode = mode
        self.ai = MinimaxAI(player=AI_PLAYER) if mode == "ai" else None
        self.move_log.clear()
        self.ai_pending = False
        self.generation += 1

    def phase(self) -> str:
        game = self.game
        if self.mode is None:
            return "menu"
        if game.winner:
            return "won"
        if game.drawn:
            return "drawn"
        if self.ai and game.current_player == self.ai.player:
            return "ai_thinking"
        return "in_progress"

    def status(self) -> str:
        phase = self.phase()
        if phase == "menu":
            return "Choose a mode to start"
        if phase == "won":
            return f"{self.game.winner} wins!"
        if phase == "drawn":
            return "Draw!"
        if phase == "ai_thinking":
            return "AI thinking..."
        return f"Next: {self.game.current_player}"


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic Tac Toe", description="Tic-tac-toe played in the browser")


def _check_mode(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized not in ALLOWED_MODES:
        raise ValueError(
            f"Unsupported mode {value!r}. Choose one of {', '.join(ALLOWED_MODES)}."
        )
    return normalized


class NewGameRequest(BaseModel):
    """Request payload for opening a session; no mode means the menu."""

    mode: Optional[str] = Field(default=None, description="'pvp' or 'ai'")

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: Optional[str]) -> Optional[str]:
        return _check_mode(value)


class ModeRequest(BaseModel):
    mode: str

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        return _check_mode(value)  # type: ignore[return-value]


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


class ResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to_menu: bool = Field(default=False, alias="toMenu")


def _create_session(mode: Optional[str]) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession()
    session.restart(mode)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("created session %s (mode=%s)", session_id, mode or "menu")
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

    with session.lock:
        if session.generation != generation or not session.ai:
            return
        ai = session.ai
        board = session.game.board

    # Search on the snapshot; the board may change while we wait.
    try:
        cell_index = ai.choose(board)
    except Exception:
        with session.lock:
            if session.generation == generation:
                session.ai_pending = False
        raise
    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        if session.generation != generation:
            logger.debug("discarding stale AI move %s for %s", cell_index, game_id)
            return
        game = session.game
        try:
            if (
                game.winner
                or game.drawn
                or game.current_player != ai.player
                or game.board[cell_index] != EMPTY
            ):
                logger.debug("discarding stale AI move %s for %s", cell_index, game_id)
                return
            game.play_move(cell_index)
            session.move_log.append({"player": ai.player, "cellIndex": cell_index})
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode,
            "phase": session.phase(),
            "status": session.status(),
            "board": [c if c != EMPTY else "" for c in game.board],
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "winningLine": list(game.winning_line) if game.winning_line else None,
            "drawn": game.drawn,
            "moveLog": list(session.move_log),
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
        if session.mode is None:
            raise HTTPException(status_code=400, detail="Choose a mode to start")

        if game.winner or game.drawn:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending or (
            session.ai and game.current_player == session.ai.player
        ):
            raise HTTPException(status_code=400, detail="AI is completing its move")

        player = game.current_player
        try:
            game.play_move(cell_index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": player, "cellIndex": cell_index})

        should_schedule_ai = bool(
            session.ai
            and not game.winner
            and not game.drawn
            and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True
        generation = session.generation

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, generation)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/mode")
def start_mode(game_id: str, request: ModeRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.restart(request.mode)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(
    game_id: str, request: Optional[ResetRequest] = None
) -> Dict[str, object]:
    session = _get_session(game_id)
    to_menu = request.to_menu if request else False
    with session.lock:
        session.restart(None if to_menu else session.mode)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
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
        justify-content: center;
        align-items: center;
        background: radial-gradient(circle at top, #2a1748, #120a22 60%, #07040f);
        color: #f3ecff;
      }
      .app {
        display: flex;
        flex-direction: column;
        align-items: center;
        gap: 1.25rem;
        padding: 2rem;
      }
      .title {
        margin: 0;
        font-size: clamp(2rem, 3vw + 1rem, 3rem);
        letter-spacing: 0.08em;
      }
      .status {
        font-size: 1.2rem;
        font-weight: 600;
        min-height: 1.5em;
      }
      .message {
        color: #ff9bd2;
        min-height: 1.2em;
      }
      .modeRow,
      .actionsRow {
        display: flex;
        gap: 0.75rem;
      }
      button {
        font-family: inherit;
        font-size: 1rem;
        cursor: pointer;
      }
      .primaryBtn,
      .secondaryBtn {
        padding: 0.6rem 1.2rem;
        border-radius: 999px;
        border: 1px solid rgba(255, 255, 255, 0.25);
        color: inherit;
      }
      .primaryBtn {
        background: linear-gradient(135deg, #8a4dff, #d04dff);
      }
      .secondaryBtn {
        background: rgba(255, 255, 255, 0.08);
      }
      .boardWrapper {
        position: relative;
        width: min(360px, 80vw);
        aspect-ratio: 1;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 8px;
        width: 100%;
        height: 100%;
      }
      .square {
        border-radius: 14px;
        border: 1px solid rgba(255, 255, 255, 0.2);
        background: rgba(255, 255, 255, 0.06);
        color: inherit;
        font-size: clamp(2rem, 8vw, 3.5rem);
        font-weight: 700;
      }
      .square:disabled {
        cursor: default;
      }
      .square.win {
        background: rgba(208, 77, 255, 0.35);
      }
      .winLine {
        position: absolute;
        inset: 0;
        width: 100%;
        height: 100%;
        pointer-events: none;
      }
      .winLine line {
        stroke: #ffe45c;
        stroke-width: 0.08;
        stroke-linecap: round;
      }
      .hidden {
        display: none !important;
      }
    </style>
  </head>
  <body>
    <div class=\"app\">
      <h1 class=\"title\">Tic Tac Toe</h1>
      <div class=\"status\" id=\"status\">Choose a mode to start</div>
      <div class=\"modeRow\" id=\"modeRow\">
        <button class=\"primaryBtn\" type=\"button\" data-mode=\"pvp\">2 Players</button>
        <button class=\"secondaryBtn\" type=\"button\" data-mode=\"ai\">Play vs AI</button>
      </div>
      <div class=\"boardWrapper hidden\" id=\"boardWrapper\">
        <svg class=\"winLine hidden\" id=\"winLine\" viewBox=\"0 0 3 3\" preserveAspectRatio=\"none\" aria-hidden=\"true\">
          <line id=\"winLineStroke\" />
        </svg>
        <div class=\"board\" id=\"board\" role=\"grid\" aria-label=\"Tic Tac Toe board\"></div>
      </div>
      <div class=\"actionsRow hidden\" id=\"actionsRow\">
        <button class=\"secondaryBtn\" type=\"button\" id=\"resetButton\">Reset</button>
        <button class=\"secondaryBtn\" type=\"button\" id=\"menuButton\">Change Mode</button>
      </div>
      <div class=\"message\" id=\"message\"></div>
    </div>
    <script>
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const modeRow = document.getElementById('modeRow');
      const boardWrapper = document.getElementById('boardWrapper');
      const boardEl = document.getElementById('board');
      const actionsRow = document.getElementById('actionsRow');
      const winLine = document.getElementById('winLine');
      const winLineStroke = document.getElementById('winLineStroke');

      let gameId = null;
      let gameState = null;
      let aiPollHandle = null;
      let isRequestPending = false;

      function stopAiPolling() {
        if (aiPollHandle !== null) {
          clearTimeout(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function ensureAiPolling() {
        if (aiPollHandle !== null) return;
        aiPollHandle = window.setTimeout(pollAiState, 150);
      }

      async function request(path, payload) {
        const options = payload === undefined
          ? {}
          : {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify(payload),
            };
        const response = await fetch(path, options);
        if (!response.ok) {
          const body = await response.json().catch(() => ({}));
          const detail = typeof body?.detail === 'string' ? body.detail : 'Request failed';
          throw new Error(detail);
        }
        return response.json();
      }

      async function send(path, payload) {
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await request(path, payload));
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      async function pollAiState() {
        aiPollHandle = null;
        if (!gameId) return;
        try {
          setState(await request(`/api/game/${gameId}`));
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      function startMode(mode) {
        if (gameId) {
          send(`/api/game/${gameId}/mode`, { mode });
        } else {
          send('/api/game', { mode });
        }
      }

      function indexToCenter(i) {
        return { x: (i % 3) + 0.5, y: Math.floor(i / 3) + 0.5 };
      }

      function renderWinLine(line) {
        if (!line) {
          winLine.classList.add('hidden');
          return;
        }
        const a = indexToCenter(line[0]);
        const c = indexToCenter(line[2]);
        winLineStroke.setAttribute('x1', a.x);
        winLineStroke.setAttribute('y1', a.y);
        winLineStroke.setAttribute('x2', c.x);
        winLineStroke.setAttribute('y2', c.y);
        winLine.classList.remove('hidden');
      }

      function renderBoard() {
        boardEl.innerHTML = '';
        if (!gameState) return;
        const winning = new Set(gameState.winningLine || []);
        const locked = gameState.phase !== 'in_progress';
        gameState.board.forEach((value, i) => {
          const square = document.createElement('button');
          square.type = 'button';
          square.className = 'square' + (value ? ' filled' : '') + (winning.has(i) ? ' win' : '');
          square.textContent = value;
          square.disabled = locked || Boolean(value);
          square.setAttribute('aria-label', value ? `Square ${value}` : 'Empty square');
          square.addEventListener('click', () => send(`/api/game/${gameId}/move`, { cellIndex: i }));
          boardEl.appendChild(square);
        });
        renderWinLine(gameState.winningLine);
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        statusEl.textContent = data.status;
        const inMenu = data.phase === 'menu';
        modeRow.classList.toggle('hidden', !inMenu);
        boardWrapper.classList.toggle('hidden', inMenu);
        actionsRow.classList.toggle('hidden', inMenu);
        renderBoard();
        if (data.aiPending) {
          ensureAiPolling();
        } else {
          stopAiPolling();
        }
      }

      modeRow.querySelectorAll('button[data-mode]').forEach((button) => {
        button.addEventListener('click', () => startMode(button.dataset.mode));
      });
      document.getElementById('resetButton').addEventListener('click', () => {
        stopAiPolling();
        send(`/api/game/${gameId}/reset`, { toMenu: false });
      });
      document.getElementById('menuButton').addEventListener('click', () => {
        stopAiPolling();
        send(`/api/game/${gameId}/reset`, { toMenu: true });
      });
    </script>
  </body>
</html>
"""
