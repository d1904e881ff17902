# =============================================================================
# NetSpike - Enumerations
# =============================================================================
"""
All enumeration types used throughout the game.
These define the discrete values for game elements.
"""

from enum import Enum, auto
from typing import List


class NodeType(Enum):
    """
    Types of network nodes in the game.
    Each type gates its own utility command once cracked.
    """
    SERVER = 0      # Extractable data store
    CAMERA = 1      # Camera feed: reveal + passive income
    TURRET = 2      # Jamming and trace destruction
    DOOR = 3        # Bridges between discovered nodes
    COMMS = 4       # Traffic sniffing and trace relay
    POWER = 5       # Power drain / overload
    FIREWALL = 6    # Unlocks locked nodes
    OVERLORD = 7    # The detection system itself, exactly one per network

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        """Capitalised name used in log lines"""
        return self.name.capitalize()

    @property
    def prefix(self) -> str:
        """Prefix of generated node names"""
        prefixes = {
            NodeType.SERVER: "SRV",
            NodeType.CAMERA: "CAM",
            NodeType.TURRET: "TRT",
            NodeType.DOOR: "DOOR",
            NodeType.COMMS: "COM",
            NodeType.POWER: "PWR",
            NodeType.FIREWALL: "FW",
            NodeType.OVERLORD: "OVLRD",
        }
        return prefixes[self]

    @property
    def crack_cost(self) -> int:
        """Base DATA cost to crack a node of this type"""
        costs = {
            NodeType.SERVER: 3,
            NodeType.CAMERA: 2,
            NodeType.TURRET: 4,
            NodeType.DOOR: 2,
            NodeType.COMMS: 3,
            NodeType.POWER: 4,
            NodeType.FIREWALL: 5,
            NodeType.OVERLORD: 5,
        }
        return costs[self]


class NodeState(Enum):
    """
    Lifecycle of a node from the player's point of view.
    LOCKED is a side branch reachable from any non-terminal state.
    """
    UNDISCOVERED = 0
    DISCOVERED = 1
    CRACKED = 2
    SPIKED = 3
    LOCKED = 4

    def __str__(self) -> str:
        return self.name.capitalize()

    @property
    def is_compromised(self) -> bool:
        """Cracked or spiked"""
        return self in (NodeState.CRACKED, NodeState.SPIKED)

    @property
    def marker(self) -> str:
        """Map marker for this state"""
        markers = {
            NodeState.CRACKED: "[+]",
            NodeState.SPIKED: "[S]",
            NodeState.LOCKED: "[X]",
        }
        return markers.get(self, "[ ]")


class IceKind(Enum):
    """One-shot traps triggered on crack"""
    DRAIN = "drain"
    LOCK = "lock"
    ALERT = "alert"

    def __str__(self) -> str:
        return self.value


class RivalPhase(Enum):
    """
    Phases of the rival hacker state machine.
    MOVING -> CRACKING -> SPIKING -> [EXTRACTING] -> MOVING
    """
    MOVING = "moving"
    CRACKING = "cracking"
    SPIKING = "spiking"
    EXTRACTING = "extracting"

    def __str__(self) -> str:
        return self.value


class EntryType(Enum):
    """Type tag of a log entry, used by the presentation layer for styling"""
    SYSTEM = "system"
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"
    INPUT = "input"
    WARNING = "warning"

    def __str__(self) -> str:
        return self.value


class LossReason(Enum):
    """Ways the player can lose"""
    DETECTED = auto()           # Detection reached 100%
    NETWORK_COMPROMISED = auto()  # Rival spiked more than half the targets
    TIME_EXPIRED = auto()       # Action limit reached
    USER_DELETED = auto()       # sudo rm -rf user

    def __str__(self) -> str:
        return self.banner

    @property
    def banner(self) -> str:
        """Text shown in the game-over banner"""
        banners = {
            LossReason.DETECTED: "DETECTED BY OVERLORD",
            LossReason.NETWORK_COMPROMISED: "NETWORK COMPROMISED",
            LossReason.TIME_EXPIRED: "TIME EXPIRED",
            LossReason.USER_DELETED: "USER DELETED",
        }
        return banners[self]


# =============================================================================
# Utility Functions
# =============================================================================

def regular_node_types(include_servers: bool = True) -> List[NodeType]:
    """Node types that random assignment may pick (everything but the Overlord)"""
    return [
        t for t in NodeType
        if t != NodeType.OVERLORD and (include_servers or t != NodeType.SERVER)
    ]
