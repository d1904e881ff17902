# =============================================================================
# NetSpike - Autonomous Agents
# =============================================================================
"""
Trace programs and the rival hacker.

Both agents navigate with breadth-first search over the live network and
advance exactly one tick per action command. The rival is an explicit
finite-state machine with one handler per phase.
"""

import random
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .enums import NodeType, NodeState, RivalPhase, EntryType
from .data_structures import LogEntry, RivalHacker, TraceProgram
from .network_topology import Network

if TYPE_CHECKING:
    from .game_state import GameState


TRACE_MOVE_COOLDOWN = 2
CHASE_FULL_DETECTION = 0.5
CONFLICT_DETECTION_PENALTY = 0.10


# =============================================================================
# Trace Programs
# =============================================================================

def spawn_trace(gs: "GameState") -> TraceProgram:
    """Deploy a new trace program at the Overlord node"""
    gs.trace_counter += 1
    trace = TraceProgram(
        id=gs.trace_counter,
        name=f"TRACE_{gs.trace_counter:02d}",
        current_node=gs.network.overlord.id,
        move_cooldown=TRACE_MOVE_COOLDOWN,
        cooldown_remaining=TRACE_MOVE_COOLDOWN - 1,
    )
    gs.traces.append(trace)
    return trace


def find_trace(gs: "GameState", name: str) -> Optional[TraceProgram]:
    wanted = name.upper()
    for trace in gs.traces:
        if trace.name.upper() == wanted:
            return trace
    return None


def chase_probability(detection: float) -> float:
    """Chance a trace chases instead of wandering; certain from 50% detection"""
    return min(detection / CHASE_FULL_DETECTION, 1.0)


def _move_trace(gs: "GameState", trace: TraceProgram):
    network = gs.network
    if gs.rng.random() < chase_probability(gs.player.detection):
        step = network.next_step(trace.current_node, gs.player.current_node)
        if step is not None:
            trace.current_node = step
        return

    neighbours = network.nodes[trace.current_node].adjacent_nodes
    if neighbours:
        trace.current_node = gs.rng.choice(neighbours)


def tick_trace(gs: "GameState", trace: TraceProgram) -> Optional[LogEntry]:
    """
    Advance one trace by one tick.

    A cooling-down trace stays put; otherwise it moves. Contact with the
    player is checked every tick either way.
    """
    if trace.cooldown_remaining > 0:
        trace.cooldown_remaining -= 1
    else:
        _move_trace(gs, trace)
        trace.cooldown_remaining = trace.move_cooldown - 1

    if trace.current_node != gs.player.current_node:
        return None

    amount = gs.mod.trace_contact_detection
    gs.player.raise_detection(amount)
    return LogEntry(
        f">> {trace.name} has made contact! (+{round(amount * 100)}% DETECTION)",
        EntryType.ERROR,
    )


def move_traces(gs: "GameState") -> List[LogEntry]:
    entries = []
    for trace in gs.traces:
        entry = tick_trace(gs, trace)
        if entry is not None:
            entries.append(entry)
    return entries


# =============================================================================
# Rival Hacker
# =============================================================================

def create_rival(network: Network, player_node: int, rng: random.Random) -> Optional[RivalHacker]:
    """
    Place the rival as far as possible from both the player and the Overlord.
    Non-target nodes are preferred so the rival does not start mid-breach.
    """
    overlord_id = network.overlord.id
    from_player = network.distances_from(player_node)
    from_overlord = network.distances_from(overlord_id)
    far = len(network) + 1

    candidates = [
        n for n in network
        if n.id not in (player_node, overlord_id)
    ]
    if not candidates:
        return None
    non_targets = [n for n in candidates if not n.is_real_target]
    if non_targets:
        candidates = non_targets

    def remoteness(node_id: int):
        dp = from_player.get(node_id, far)
        do = from_overlord.get(node_id, far)
        return (min(dp, do), dp + do)

    best = max(remoteness(n.id) for n in candidates)
    start = rng.choice([n for n in candidates if remoteness(n.id) == best])
    return RivalHacker(current_node=start.id)


def nearest_rival_target(gs: "GameState") -> Optional[int]:
    """Closest reachable real target that is neither spiked nor locked"""
    rival = gs.rival
    if rival is None:
        return None
    distances = gs.network.distances_from(rival.current_node)
    reachable = [
        n for n in gs.network.real_targets()
        if _rival_can_breach(n) and n.id in distances
    ]
    if not reachable:
        return None
    return min(reachable, key=lambda n: (distances[n.id], n.id)).id


def _rival_can_breach(node) -> bool:
    return node.is_real_target and node.state not in (NodeState.SPIKED, NodeState.LOCKED)


def _reset_rival(rival: RivalHacker):
    rival.phase = RivalPhase.MOVING
    rival.target_node = None
    rival.move_counter = 0


def _back_off(gs: "GameState", node_name: str) -> List[LogEntry]:
    """The target was locked mid-breach; only bypass or shatter open it again"""
    _reset_rival(gs.rival)
    return [LogEntry(f">> RIVAL HACKER locked out of {node_name}. Retargeting.", EntryType.INFO)]


def _abort_conflict(gs: "GameState", node_name: str) -> List[LogEntry]:
    """The player spiked the node under the rival's hands"""
    _reset_rival(gs.rival)

    gs.player.raise_detection(CONFLICT_DETECTION_PENALTY)
    trace = spawn_trace(gs)
    return [
        LogEntry(
            f">> CONFLICT on {node_name}: rival hacker's attempt aborted. "
            f"Alarm raised (+{round(CONFLICT_DETECTION_PENALTY * 100)}% DETECTION)",
            EntryType.WARNING,
        ),
        LogEntry(f">> New TRACE PROGRAM deployed from Overlord! ({trace.name})", EntryType.WARNING),
    ]


def _begin_breach(gs: "GameState", node_id: int) -> List[LogEntry]:
    rival = gs.rival
    rival.phase = RivalPhase.CRACKING
    rival.target_node = node_id
    node = gs.network.nodes[node_id]
    return [LogEntry(f">> RIVAL HACKER is breaching {node.name}...", EntryType.WARNING)]


def _rival_moving(gs: "GameState") -> List[LogEntry]:
    rival = gs.rival
    here = gs.network.nodes[rival.current_node]
    if _rival_can_breach(here):
        return _begin_breach(gs, here.id)

    rival.move_counter += 1
    if rival.move_counter < gs.mod.rival_move_interval:
        return []
    rival.move_counter = 0

    target = nearest_rival_target(gs)
    rival.target_node = target
    if target is None:
        return []
    step = gs.network.next_step(rival.current_node, target)
    if step is None:
        return []

    rival.current_node = step
    entries = []
    if step == gs.player.current_node:
        entries.append(LogEntry(">> RIVAL HACKER detected at your node!", EntryType.WARNING))
    if step == target:
        entries.extend(_begin_breach(gs, step))
    return entries


def _rival_cracking(gs: "GameState") -> List[LogEntry]:
    rival = gs.rival
    node = gs.network.nodes[rival.target_node]
    if node.state == NodeState.SPIKED:
        return _abort_conflict(gs, node.name)
    if node.state == NodeState.LOCKED:
        return _back_off(gs, node.name)

    # Undiscovered nodes stay hidden from the player
    if node.state == NodeState.DISCOVERED:
        node.state = NodeState.CRACKED
    rival.phase = RivalPhase.SPIKING
    return [LogEntry(f">> RIVAL HACKER cracked {node.name}.", EntryType.WARNING)]


def _rival_spiking(gs: "GameState") -> List[LogEntry]:
    rival = gs.rival
    node = gs.network.nodes[rival.target_node]
    if node.state == NodeState.SPIKED:
        return _abort_conflict(gs, node.name)
    if node.state == NodeState.LOCKED:
        return _back_off(gs, node.name)

    node.state = NodeState.SPIKED
    rival.spiked_targets += 1
    if node.node_type == NodeType.SERVER and not node.extracted:
        rival.phase = RivalPhase.EXTRACTING
    else:
        rival.phase = RivalPhase.MOVING
        rival.target_node = None
    return [LogEntry(
        f">> RIVAL HACKER planted a spike on {node.name}! "
        f"({rival.spiked_targets}/{gs.target_count} rival spikes)",
        EntryType.WARNING,
    )]


def _rival_extracting(gs: "GameState") -> List[LogEntry]:
    rival = gs.rival
    node = gs.network.nodes[rival.target_node]
    node.extracted = True
    rival.phase = RivalPhase.MOVING
    rival.target_node = None
    return [LogEntry(f">> RIVAL HACKER extracted data from {node.name}.", EntryType.WARNING)]


RIVAL_PHASE_HANDLERS: Dict[RivalPhase, Callable[["GameState"], List[LogEntry]]] = {
    RivalPhase.MOVING: _rival_moving,
    RivalPhase.CRACKING: _rival_cracking,
    RivalPhase.SPIKING: _rival_spiking,
    RivalPhase.EXTRACTING: _rival_extracting,
}


def advance_rival(gs: "GameState") -> List[LogEntry]:
    """Advance the rival state machine by one tick"""
    if gs.rival is None:
        return []
    return RIVAL_PHASE_HANDLERS[gs.rival.phase](gs)
