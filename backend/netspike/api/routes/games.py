"""
Game Routes

REST API endpoints for game management:
- Create/list/get games
- Submit command lines
- Get the game-over summary and the log history
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Path, Body
from pydantic import BaseModel, Field

from ...config import get_settings
from ...core import GameEngine, LogEntry, list_modifiers
from ...core.modifiers import is_known_modifier

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Pydantic Models for Request/Response
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request model for creating a new game"""
    modifier: str = Field(default="", description="Modifier keyword, empty for the default rules")
    seed: Optional[int] = Field(default=None, description="Random seed for a reproducible game")

    model_config = {
        "json_schema_extra": {
            "example": {"modifier": "QUBIT", "seed": 42}
        }
    }


class CommandRequest(BaseModel):
    """Request model for one line of player input"""
    line: str = Field(..., min_length=1, description="Command line, e.g. 'hop SRV_03'")

    model_config = {
        "json_schema_extra": {
            "example": {"line": "scan"}
        }
    }


class LogEntryResponse(BaseModel):
    text: str
    type: str


class GameStateResponse(BaseModel):
    """Response model for game state"""
    game_id: str
    game_over: bool
    won: bool
    lost: bool
    state: Dict[str, Any]
    entries: List[LogEntryResponse] = []


class EncodingResponse(BaseModel):
    """Numeric state encoding of a game"""
    game_id: str
    features: List[float]
    adjacency: List[List[int]]
    node_names: List[str]


class ModifierResponse(BaseModel):
    key: str
    name: str
    description: str


# =============================================================================
# Game Storage (In-Memory)
# =============================================================================

games_store: Dict[str, GameEngine] = {}


def _entries(entries: List[LogEntry]) -> List[LogEntryResponse]:
    return [LogEntryResponse(**entry.to_dict()) for entry in entries]


def _get_engine(game_id: str) -> GameEngine:
    engine = games_store.get(game_id)
    if engine is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return engine


def game_state_to_response(engine: GameEngine, entries: Optional[List[LogEntry]] = None) -> GameStateResponse:
    """Convert game engine state to API response"""
    state = engine.state
    return GameStateResponse(
        game_id=state.game_id,
        game_over=state.is_over,
        won=state.won,
        lost=state.lost,
        state=state.to_dict(),
        entries=_entries(entries or []),
    )


# =============================================================================
# API Endpoints
# =============================================================================

@router.get("/modifiers", response_model=List[ModifierResponse])
async def get_modifiers():
    """List the modifier catalog"""
    return [ModifierResponse(key=m.key, name=m.name, description=m.description) for m in list_modifiers()]


@router.post("/", response_model=GameStateResponse)
async def create_new_game(request: Optional[CreateGameRequest] = None):
    """
    Create a new game session.

    Returns the initial game state and the welcome entries.
    """
    request = request or CreateGameRequest()
    settings = get_settings()
    word = request.modifier or settings.DEFAULT_MODIFIER
    if word and not is_known_modifier(word):
        raise HTTPException(status_code=400, detail=f"Unknown modifier: {word}")

    # Evict the oldest sessions once the store is full
    while len(games_store) >= settings.MAX_SESSIONS:
        oldest = next(iter(games_store))
        del games_store[oldest]
        logger.info("Evicted game %s", oldest)

    engine = GameEngine(word, seed=request.seed)
    games_store[engine.game_id] = engine
    logger.info("Created game %s (modifier=%s)", engine.game_id, word or "NONE")
    return game_state_to_response(engine, engine.welcome_entries())


@router.get("/", response_model=List[Dict[str, Any]])
async def list_games(
    active_only: bool = Query(default=True, description="Only return active games")
):
    """
    List all game sessions.
    """
    games = []
    for game_id, engine in games_store.items():
        state = engine.state
        if active_only and state.is_over:
            continue
        games.append({
            "game_id": game_id,
            "modifier": state.mod.key or None,
            "action_count": state.action_count,
            "score": state.score,
            "is_active": not state.is_over,
        })
    return games


@router.get("/{game_id}", response_model=GameStateResponse)
async def get_game(game_id: str = Path(..., description="Game ID")):
    """
    Get the current state of a game.
    """
    return game_state_to_response(_get_engine(game_id))


@router.post("/{game_id}/command", response_model=GameStateResponse)
async def execute_command(
    game_id: str = Path(..., description="Game ID"),
    request: CommandRequest = Body(...)
):
    """
    Submit one command line.

    Rejected commands are not HTTP errors: they come back as an error entry
    and leave the state unchanged.
    """
    engine = _get_engine(game_id)
    if not request.line.strip():
        raise HTTPException(status_code=400, detail="Empty command")

    was_over = engine.is_game_over()
    entries = engine.execute(request.line)
    # Summary only on the turn that ends the game
    if engine.is_game_over() and not was_over:
        entries = entries + engine.build_game_over_entries()
    return game_state_to_response(engine, entries)


@router.get("/{game_id}/encoding", response_model=EncodingResponse)
async def get_encoding(game_id: str = Path(..., description="Game ID")):
    """
    Get the numeric encoding of a game: global features and adjacency matrix.
    """
    engine = _get_engine(game_id)
    return EncodingResponse(game_id=game_id, **engine.encode_state())


@router.get("/{game_id}/summary", response_model=List[LogEntryResponse])
async def get_summary(game_id: str = Path(..., description="Game ID")):
    """
    Get the game-over summary (or the progress so far).
    """
    return _entries(_get_engine(game_id).build_game_over_entries())


@router.get("/{game_id}/history", response_model=List[LogEntryResponse])
async def get_game_history(
    game_id: str = Path(..., description="Game ID"),
    limit: Optional[int] = Query(default=None, ge=1, description="Only the last N entries"),
):
    """
    Get the log history of a game.
    """
    return _entries(_get_engine(game_id).get_history(limit))


@router.delete("/{game_id}")
async def delete_game(game_id: str = Path(..., description="Game ID")):
    """
    Delete a game session.
    """
    _get_engine(game_id)
    del games_store[game_id]
    return {"message": "Game deleted", "game_id": game_id}
