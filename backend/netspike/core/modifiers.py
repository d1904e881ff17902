# =============================================================================
# NetSpike - Modifier Registry
# =============================================================================
"""
Named rule variants selected at game start by a keyword.

A modifier is a bag of overrides on top of the default ruleset. Every field
below carries the default value; a catalog entry only sets the fields it
changes. Costs, cadences and detection rates are read live by the engine, so
swapping the active modifier takes effect on the next command. Generation
fields only matter when a network is built.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List


@dataclass(frozen=True)
class ModifierConfig:
    """Configuration for one rule variant"""
    key: str = ""
    name: str = ""
    description: str = ""

    # Costs
    cost_multiplier: int = 1
    reward_multiplier: int = 1
    extract_multiplier: int = 1
    crack_cost_bonus: int = 0
    hop_cost: int = 1
    scan_cost: int = 1
    cloak_cost: int = 3

    # Generation
    min_nodes: int = 8
    max_nodes: int = 15
    target_count: int = 3
    no_servers: bool = False
    directed_edges: bool = False
    extra_edge_multiplier: int = 1
    hidden_targets: bool = False
    overlord_is_target: bool = False
    all_discovered: bool = False
    start_detection: float = 0.0

    # Detection
    overlord_scale_multiplier: float = 1.0
    overlord_immediate: bool = False
    passive_detection: float = 0.0
    hop_detection_penalty: float = 0.0
    trace_contact_detection: float = 0.15
    ice_revealed: bool = False

    # AI cadences
    trace_spawn_interval: int = 4
    rival_move_interval: int = 3

    # Rules
    hop_anywhere: bool = False
    flux_interval: int = 0
    action_limit: int = 0

    @property
    def is_default(self) -> bool:
        return not self.key

    def scaled(self, base: int) -> int:
        """Apply the global cost multiplier to a base cost"""
        return base * self.cost_multiplier

    def changed_fields(self, other: "ModifierConfig") -> List[str]:
        """Names of rule fields whose value differs from ``other``"""
        skip = {"key", "name", "description"}
        return [
            f.name for f in fields(self)
            if f.name not in skip and getattr(self, f.name) != getattr(other, f.name)
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_MODIFIER = ModifierConfig()


def _mod(key: str, name: str, description: str, **overrides) -> ModifierConfig:
    return replace(DEFAULT_MODIFIER, key=key, name=name, description=description, **overrides)


MODIFIERS: Dict[str, ModifierConfig] = {m.key: m for m in [
    _mod("NEURAL", "Fast Learner", "Overlord detection scales 2x faster",
         overlord_scale_multiplier=2.0),
    _mod("CIPHER", "Encrypted", "Crack costs +1 DATA, but ICE traps are revealed",
         crack_cost_bonus=1, ice_revealed=True),
    _mod("VOID", "Barren", "Minimum nodes, no Servers - pure scarcity",
         min_nodes=8, max_nodes=8, no_servers=True),
    _mod("DAEMON", "Swarm", "Traces spawn every 2 hops instead of 4",
         trace_spawn_interval=2),
    _mod("KERNEL", "Hardened Core", "4 targets required, Overlord is a target",
         target_count=4, overlord_is_target=True),
    _mod("BINARY", "Double Down", "All costs double, all rewards double",
         cost_multiplier=2, reward_multiplier=2),
    _mod("FLUX", "Unstable", "Every 5 actions, a random edge is rewired",
         flux_interval=5),
    _mod("PULSE", "Heartbeat", "+5% passive detection per action, but cloak is free",
         passive_detection=0.05, cloak_cost=0),
    _mod("VERTEX", "Dense", "Double extra edges - more paths, more trace routes",
         extra_edge_multiplier=2),
    _mod("PROXY", "Bounce", "Hops cost 0 DATA, scans cost 2 DATA",
         hop_cost=0, scan_cost=2),
    _mod("SOCKET", "Direct Link", "Hop to any discovered node, but +10% detection per hop",
         hop_anywhere=True, hop_detection_penalty=0.10),
    _mod("BREACH", "Pre-Compromised", "All nodes start Discovered, detection starts at 30%",
         all_discovered=True, start_detection=0.30),
    _mod("SPAWN", "Overwhelm", "Traces every 2 hops, trace contact does 40% detection",
         trace_spawn_interval=2, trace_contact_detection=0.40),
    _mod("VECTOR", "One-Way", "Edges are directed - plan your route carefully",
         directed_edges=True),
    _mod("QUBIT", "Superposition", "Targets hidden until cracked",
         hidden_targets=True),
    _mod("CACHE", "Resource Race", "Servers give double extract, rival moves every 2 turns",
         extract_multiplier=2, rival_move_interval=2),
    _mod("EPOCH", "Time Pressure", "25-action limit to spike all targets",
         action_limit=25),
    _mod("SHARD", "Fragmented", "4 targets, larger network (12-15 nodes)",
         target_count=4, min_nodes=12, max_nodes=15),
    _mod("EGO", "Overconfident", "Start at 0% detection, but Overlord activates immediately",
         overlord_immediate=True),
]}

# Fields that describe an already generated network; changing them at
# runtime is reported but never applied to the live graph.
STRUCTURAL_FIELDS = (
    "min_nodes", "max_nodes", "target_count", "no_servers",
    "directed_edges", "extra_edge_multiplier", "start_detection",
)


def get_modifier(word: str = "") -> ModifierConfig:
    """Look up a modifier by keyword (case-insensitive); unknown words give the default rules"""
    return MODIFIERS.get((word or "").strip().upper(), DEFAULT_MODIFIER)


def is_known_modifier(word: str) -> bool:
    return (word or "").strip().upper() in MODIFIERS


def list_modifiers() -> List[ModifierConfig]:
    return list(MODIFIERS.values())
