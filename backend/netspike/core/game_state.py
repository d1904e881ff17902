# =============================================================================
# NetSpike - Game State
# =============================================================================
"""
The complete game state representation.
This is the single mutable aggregate owned by one GameEngine; nothing about
a session lives at module scope, so any number of games can coexist.
"""

import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

import numpy as np

from .enums import NodeType, NodeState, LossReason
from .data_structures import PlayerState, OverlordState, TraceProgram, RivalHacker, Node
from .modifiers import ModifierConfig, DEFAULT_MODIFIER
from .network_topology import Network, generate_network
from .agents import create_rival


WIN_BONUS = 500
SPIKE_SCORE = 100


@dataclass
class GameState:
    """
    Complete state of a game instance.

    Utility effects that outlive their command (camera feed, jam, blocked
    trace spawn, free crack) are tracked by the turn counters below.
    """

    # ==========================================================================
    # Core Components
    # ==========================================================================
    network: Network
    player: PlayerState
    mod: ModifierConfig = DEFAULT_MODIFIER
    overlord: OverlordState = field(default_factory=OverlordState)
    traces: List[TraceProgram] = field(default_factory=list)
    rival: Optional[RivalHacker] = None
    rng: random.Random = field(default_factory=random.Random, repr=False)
    game_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Number of targets materialised in this network; not retrofitted
    # when the modifier changes mid-game.
    target_count: int = 3

    # ==========================================================================
    # Terminal State
    # ==========================================================================
    won: bool = False
    lost: bool = False
    killed: bool = False
    dev_cheat: bool = False
    loss_reason: Optional[LossReason] = None
    score: int = 0

    # ==========================================================================
    # Turn Counters
    # ==========================================================================
    action_count: int = 0
    just_hopped: bool = False
    trace_counter: int = 0
    camera_feed_turns: int = 0
    jam_turns: int = 0
    jammed_nodes: Set[int] = field(default_factory=set)
    trace_spawn_blocked: bool = False
    free_crack: bool = False

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_over(self) -> bool:
        return self.won or self.lost

    @property
    def current_node(self) -> Node:
        return self.network.nodes[self.player.current_node]

    @property
    def rival_spikes(self) -> int:
        return self.rival.spiked_targets if self.rival else 0

    @property
    def accounted_targets(self) -> int:
        """Targets spiked by anyone"""
        return self.player.spike_count + self.rival_spikes

    def is_jammed(self, node_id: int) -> bool:
        return self.jam_turns > 0 and node_id in self.jammed_nodes

    # ==========================================================================
    # Terminal Transitions
    # ==========================================================================

    # The first terminal transition sticks; won and lost are never both set

    def declare_win(self) -> bool:
        """Mark the game won once; returns True on the transition"""
        if self.is_over:
            return False
        self.won = True
        self.score += WIN_BONUS
        return True

    def declare_loss(self, reason: LossReason):
        if self.is_over:
            return
        self.lost = True
        self.loss_reason = reason
        if reason in (LossReason.DETECTED, LossReason.USER_DELETED):
            self.killed = True

    # ==========================================================================
    # Serialization
    # ==========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary for JSON serialization"""
        return {
            "game_id": self.game_id,
            "modifier": self.mod.key or None,
            "network": self.network.to_dict(),
            "player": self.player.to_dict(),
            "overlord": self.overlord.to_dict(),
            "traces": [t.to_dict() for t in self.traces],
            "rival": self.rival.to_dict() if self.rival else None,
            "target_count": self.target_count,
            "won": self.won,
            "lost": self.lost,
            "killed": self.killed,
            "loss_reason": self.loss_reason.banner if self.loss_reason else None,
            "score": self.score,
            "action_count": self.action_count,
        }

    # ==========================================================================
    # State Encoding
    # ==========================================================================

    def get_global_features(self) -> np.ndarray:
        """
        Get global game features as a flat vector.

        Returns:
            numpy array of shape (num_global_features,)
        """
        node_count = max(1, len(self.network))
        discovered = sum(1 for n in self.network if n.is_discovered)
        features = [
            self.player.data / 20.0,
            self.player.detection,
            self.player.cloak_turns / 3.0,
            self.player.hop_count / node_count,
            self.player.spike_count / max(1, self.target_count),
            self.rival_spikes / max(1, self.target_count),
            len(self.traces) / node_count,
            discovered / node_count,
            1.0 if self.overlord.active else 0.0,
            1.0 if self.overlord.neutralized else 0.0,
        ]
        return np.array(features, dtype=np.float32)


# =============================================================================
# Construction
# =============================================================================

def new_player(network: Network, mod: ModifierConfig, rng: random.Random) -> PlayerState:
    """Start on a random non-Overlord, non-target node with 10-20 DATA"""
    candidates = [
        n.id for n in network
        if n.node_type != NodeType.OVERLORD and not n.is_real_target
    ]
    start = rng.choice(candidates)
    if network.nodes[start].state == NodeState.UNDISCOVERED:
        network.nodes[start].state = NodeState.DISCOVERED

    player = PlayerState(data=rng.randint(10, 20), current_node=start)
    player.raise_detection(mod.start_detection)
    player.visited_nodes.add(start)
    return player


def new_game_state(mod: ModifierConfig = DEFAULT_MODIFIER, rng: Optional[random.Random] = None) -> GameState:
    """Generate a network and bootstrap every agent for a fresh game"""
    rng = rng or random.Random()
    network = generate_network(mod, rng)
    player = new_player(network, mod, rng)
    return GameState(
        network=network,
        player=player,
        mod=mod,
        overlord=OverlordState(active=mod.overlord_immediate),
        rival=create_rival(network, player.current_node, rng),
        rng=rng,
        target_count=len(network.real_targets()),
    )
