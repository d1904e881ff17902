# =============================================================================
# NetSpike - Overlord Detection System
# =============================================================================
"""
Escalating probabilistic detection tied to hops.

The first check after the game starts only activates the Overlord. Every
later check rolls against

    0.15 + 0.08 * scale * floor(hop_count / 3)

halved while cloaked, and on success applies one punishment chosen
uniformly from alert, drain and lockout.
"""

import random
from typing import Optional

from .enums import NodeState, EntryType
from .data_structures import LogEntry, OverlordState, PlayerState
from .modifiers import ModifierConfig
from .network_topology import Network


BASE_CHANCE = 0.15
CHANCE_PER_STEP = 0.08
HOPS_PER_STEP = 3

ALERT_DETECTION = 0.20
DRAIN_AMOUNT = 3


def detection_chance(player: PlayerState, mod: ModifierConfig) -> float:
    """Probability that an active Overlord punishes the current hop"""
    chance = BASE_CHANCE + CHANCE_PER_STEP * mod.overlord_scale_multiplier * (player.hop_count // HOPS_PER_STEP)
    if player.is_cloaked:
        chance /= 2
    return chance


def _alert(player: PlayerState) -> LogEntry:
    player.raise_detection(ALERT_DETECTION)
    return LogEntry(">> OVERLORD ALERT: Detection surge detected! (+20% DETECTION)", EntryType.ERROR)


def overlord_check(
    overlord: OverlordState,
    player: PlayerState,
    network: Network,
    mod: ModifierConfig,
    rng: random.Random,
) -> Optional[LogEntry]:
    """
    Run one Overlord check after a hop.

    Returns:
        The punishment entry, or None when nothing happened
    """
    if overlord.neutralized:
        return None

    if not overlord.active:
        overlord.active = True
        return None

    if rng.random() >= detection_chance(player, mod):
        return None

    punishment = rng.randrange(3)
    if punishment == 0:
        return _alert(player)

    if punishment == 1:
        player.spend(DRAIN_AMOUNT)
        return LogEntry(
            f">> OVERLORD DRAIN: Data siphoned from your reserves! (-{DRAIN_AMOUNT} DATA)",
            EntryType.ERROR,
        )

    node = network.get_node(player.current_node)
    if node is not None and node.state not in (NodeState.LOCKED, NodeState.SPIKED):
        node.state = NodeState.LOCKED
        return LogEntry(f">> OVERLORD LOCKOUT: {node.name} has been locked!", EntryType.ERROR)
    return _alert(player)
