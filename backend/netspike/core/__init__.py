# =============================================================================
# Core Game Module
# =============================================================================
"""
Core game engine components including:
- Network generation and graph search
- Game state representation
- Command handlers and turn resolution
- Trace, rival and Overlord behaviour
- Modifier registry and runtime switching
"""

from .enums import NodeType, NodeState, IceKind, RivalPhase, EntryType, LossReason
from .data_structures import (
    LogEntry, Node, PlayerState, OverlordState, TraceProgram, RivalHacker
)
from .modifiers import ModifierConfig, DEFAULT_MODIFIER, MODIFIERS, get_modifier, list_modifiers
from .network_topology import Network, NetworkTopologyGenerator, generate_network
from .game_state import GameState, new_game_state
from .commands import CommandError, CommandProcessor
from .reconciliation import reconcile_modifier
from .game_engine import GameEngine, create_game, play_random_game

__all__ = [
    # Enums
    "NodeType", "NodeState", "IceKind", "RivalPhase", "EntryType", "LossReason",
    # Data structures
    "LogEntry", "Node", "PlayerState", "OverlordState", "TraceProgram", "RivalHacker",
    # Modifiers
    "ModifierConfig", "DEFAULT_MODIFIER", "MODIFIERS", "get_modifier", "list_modifiers",
    "reconcile_modifier",
    # Core classes
    "Network", "NetworkTopologyGenerator", "generate_network",
    "GameState", "new_game_state",
    "CommandError", "CommandProcessor",
    "GameEngine",
    # Convenience functions
    "create_game", "play_random_game",
]
