# =============================================================================
# NetSpike - Core Data Structures
# =============================================================================
"""
Core data structures for representing game elements.
These are the fundamental building blocks of the game state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from .enums import NodeType, NodeState, IceKind, RivalPhase, EntryType


# =============================================================================
# Log Entry
# =============================================================================

@dataclass
class LogEntry:
    """A single typed output line returned to the presentation layer"""
    text: str
    type: EntryType = EntryType.SYSTEM

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "type": self.type.value}


# =============================================================================
# Network Node
# =============================================================================

@dataclass
class Node:
    """
    Represents a single node in the network.

    Attributes:
        id: Index of the node in its network
        name: Unique display name derived from the node type
        node_type: What the node is and which utility command it offers
        state: Discovery/compromise state
        is_target: Target flag visible to the player
        internal_target: Real target flag kept while targets are hidden
        extracted: Server data already pulled (one-shot)
        ice: Optional one-shot trap, cleared once triggered
        adjacent_nodes: Outbound neighbour ids
    """
    id: int
    name: str
    node_type: NodeType
    state: NodeState = NodeState.UNDISCOVERED
    is_target: bool = False
    internal_target: bool = False
    extracted: bool = False
    ice: Optional[IceKind] = None
    adjacent_nodes: List[int] = field(default_factory=list)

    @property
    def is_real_target(self) -> bool:
        """Target whether or not it is currently revealed"""
        return self.is_target or self.internal_target

    @property
    def is_compromised(self) -> bool:
        return self.state.is_compromised

    @property
    def is_discovered(self) -> bool:
        return self.state != NodeState.UNDISCOVERED

    @property
    def degree(self) -> int:
        return len(self.adjacent_nodes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "name": self.name,
            "node_type": self.node_type.display_name,
            "state": self.state.name,
            "is_target": self.is_target,
            "extracted": self.extracted,
            "ice": self.ice.value if self.ice else None,
            "adjacent_nodes": list(self.adjacent_nodes),
        }


# =============================================================================
# Player State
# =============================================================================

@dataclass
class PlayerState:
    """
    Represents the state of the player.

    DATA may reach exactly zero but never goes negative; detection is
    clamped to [0, 1].
    """
    data: int
    current_node: int
    detection: float = 0.0
    cloak_turns: int = 0
    hop_count: int = 0
    spike_count: int = 0
    visited_nodes: Set[int] = field(default_factory=set)

    @property
    def is_cloaked(self) -> bool:
        return self.cloak_turns > 0

    @property
    def detection_percent(self) -> int:
        return int(self.detection * 100)

    def can_afford(self, cost: int) -> bool:
        """Check if player can afford an action"""
        return self.data >= cost

    def spend(self, amount: int):
        """Deduct DATA, never below zero"""
        self.data = max(0, self.data - amount)

    def gain(self, amount: int):
        self.data += amount

    def raise_detection(self, amount: float):
        """Add detection, clamped to [0, 1]"""
        self.detection = max(0.0, min(1.0, self.detection + amount))

    def is_alive(self) -> bool:
        return self.detection < 1.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "data": self.data,
            "current_node": self.current_node,
            "detection": self.detection,
            "cloak_turns": self.cloak_turns,
            "hop_count": self.hop_count,
            "spike_count": self.spike_count,
            "visited_nodes": sorted(self.visited_nodes),
        }


# =============================================================================
# Overlord State
# =============================================================================

@dataclass
class OverlordState:
    """Activation state of the detection system"""
    active: bool = False
    neutralized: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"active": self.active, "neutralized": self.neutralized}


# =============================================================================
# Trace Program
# =============================================================================

@dataclass
class TraceProgram:
    """
    Pursuit agent spawned at the Overlord node.

    The trace moves once every ``move_cooldown`` ticks; ``cooldown_remaining``
    counts the ticks left before its next move.
    """
    id: int
    name: str
    current_node: int
    move_cooldown: int = 2
    cooldown_remaining: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "current_node": self.current_node,
            "move_cooldown": self.move_cooldown,
            "cooldown_remaining": self.cooldown_remaining,
        }


# =============================================================================
# Rival Hacker
# =============================================================================

@dataclass
class RivalHacker:
    """Autonomous competing agent racing the player for the same targets"""
    current_node: int
    move_counter: int = 0
    target_node: Optional[int] = None
    phase: RivalPhase = RivalPhase.MOVING
    spiked_targets: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_node": self.current_node,
            "move_counter": self.move_counter,
            "target_node": self.target_node,
            "phase": self.phase.value,
            "spiked_targets": self.spiked_targets,
        }
