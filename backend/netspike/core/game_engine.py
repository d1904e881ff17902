# =============================================================================
# NetSpike - Game Engine
# =============================================================================
"""
Main game engine that orchestrates gameplay.
Accepts one input line per turn, dispatches it, applies the modifier's
per-action hooks, runs the post-turn effects and checks terminal conditions.
"""

import logging
import random
from typing import Any, Dict, List, Optional, Union

from .enums import NodeType, NodeState, EntryType, LossReason
from .data_structures import LogEntry
from .game_state import GameState, new_game_state
from .modifiers import ModifierConfig, get_modifier
from .agents import move_traces, spawn_trace, advance_rival
from .commands import (
    CommandError, CommandProcessor, INFO_COMMANDS, DEV_COMMANDS,
    is_action, parse_command,
)

logger = logging.getLogger(__name__)


class GameEngine:
    """
    Main game engine class.

    Responsibilities:
    - Own exactly one GameState and its random source
    - Turn one line of input into a list of log entries
    - Run modifier hooks and post-turn effects after action commands
    - Detect win and loss transitions

    Example usage:
        engine = GameEngine("FLUX", seed=7)
        while not engine.is_game_over():
            for entry in engine.execute(input("> ")):
                print(entry.text)
    """

    def __init__(
        self,
        modifier: Union[str, ModifierConfig] = "",
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        mod = modifier if isinstance(modifier, ModifierConfig) else get_modifier(modifier)
        self.processor = CommandProcessor()
        self.history: List[LogEntry] = []
        self.stats = {
            "commands": 0,
            "actions": 0,
            "rejected": 0,
            "traces_spawned": 0,
        }
        self.state = new_game_state(mod, rng or random.Random(seed))
        logger.info(
            "Game %s created: modifier=%s nodes=%d targets=%d",
            self.state.game_id, mod.key or "NONE", len(self.state.network), self.state.target_count,
        )

    @classmethod
    def from_state(cls, state: GameState) -> "GameEngine":
        """Wrap an already built GameState, e.g. a hand-made test network"""
        engine = cls.__new__(cls)
        engine.processor = CommandProcessor()
        engine.history = []
        engine.stats = {"commands": 0, "actions": 0, "rejected": 0, "traces_spawned": 0}
        engine.state = state
        return engine

    @property
    def game_id(self) -> str:
        return self.state.game_id

    def is_game_over(self) -> bool:
        return self.state.is_over

    # =========================================================================
    # Turn Resolution
    # =========================================================================

    def execute(self, line: str) -> List[LogEntry]:
        """
        Process one line of input.

        Returns:
            The input echo followed by every entry the turn produced
        """
        command = parse_command(line)
        if command is None:
            return []

        gs = self.state
        self.stats["commands"] += 1
        entries = [LogEntry(f"> {command.raw}", EntryType.INPUT)]

        if gs.is_over and command.name not in INFO_COMMANDS | DEV_COMMANDS:
            entries.append(LogEntry("Session terminated. Start a new game.", EntryType.ERROR))
            return self._record(entries)

        gs.just_hopped = False
        try:
            entries.extend(self.processor.dispatch(gs, command))
        except CommandError as exc:
            self.stats["rejected"] += 1
            logger.debug("Game %s rejected %r: %s", gs.game_id, command.raw, exc)
            entries.append(LogEntry(str(exc), EntryType.ERROR))
            return self._record(entries)

        if is_action(command.name):
            self.stats["actions"] += 1
            entries.extend(self._resolve_action())

        entries.extend(self._check_alive())
        return self._record(entries)

    def _record(self, entries: List[LogEntry]) -> List[LogEntry]:
        self.history.extend(entries)
        return entries

    def _resolve_action(self) -> List[LogEntry]:
        """Per-action modifier hooks, then the post-turn effects"""
        gs = self.state
        mod = gs.mod
        player = gs.player
        entries = []

        gs.action_count += 1
        # A winning spike closes the turn
        if gs.is_over:
            return entries

        if player.cloak_turns > 0:
            player.cloak_turns -= 1
            if player.cloak_turns == 0:
                entries.append(LogEntry("Cloak expired.", EntryType.WARNING))

        if mod.passive_detection:
            player.raise_detection(mod.passive_detection)
            entries.append(LogEntry(
                f">> PULSE: +{round(mod.passive_detection * 100)}% passive detection",
                EntryType.WARNING,
            ))

        if mod.flux_interval and gs.action_count % mod.flux_interval == 0:
            entries.extend(self._flux())

        entries.extend(self._check_alive())
        if mod.action_limit and gs.action_count >= mod.action_limit and not gs.is_over:
            gs.declare_loss(LossReason.TIME_EXPIRED)
            logger.info("Game %s lost: action limit %d reached", gs.game_id, mod.action_limit)
            entries.append(LogEntry(
                f">> TIME EXPIRED: {mod.action_limit}-action limit reached. Connection severed.",
                EntryType.ERROR,
            ))
        if gs.is_over:
            return entries

        entries.extend(self._post_turn_effects())
        return entries

    def _flux(self) -> List[LogEntry]:
        network = self.state.network
        rewired = network.rewire_edge(self.state.rng)
        if rewired is None:
            return []
        (a, b), (c, d) = rewired
        nodes = network.nodes
        logger.debug("Game %s flux rewire %d-%d -> %d-%d", self.state.game_id, a, b, c, d)
        return [LogEntry(
            f">> NETWORK FLUX: {nodes[a].name}-{nodes[b].name} severed, "
            f"{nodes[c].name}-{nodes[d].name} linked",
            EntryType.WARNING,
        )]

    # =========================================================================
    # Post-Turn Effects
    # =========================================================================

    def _post_turn_effects(self) -> List[LogEntry]:
        """Runs once per action command, in a fixed order"""
        gs = self.state
        player = gs.player
        entries = move_traces(gs)

        if gs.camera_feed_turns > 0:
            gs.camera_feed_turns -= 1
            player.gain(1)
            entries.append(LogEntry(f">> CAMERA FEED: +1 DATA ({player.data} total)", EntryType.INFO))

        if gs.jam_turns > 0:
            gs.jam_turns -= 1
            if gs.jam_turns == 0:
                gs.jammed_nodes = set()
                entries.append(LogEntry(">> Turret jam expired.", EntryType.SYSTEM))

        entries.extend(self._maybe_spawn_trace())
        entries.extend(advance_rival(gs))

        # Detection loss outranks a win reached on the same tick
        entries.extend(self._check_alive())
        if gs.accounted_targets >= gs.target_count and gs.declare_win():
            logger.info("Game %s won: %d/%d targets accounted for", gs.game_id, gs.accounted_targets, gs.target_count)
            entries.append(LogEntry("ALL TARGETS ACCOUNTED FOR! [+500 BONUS]", EntryType.SUCCESS))

        if gs.rival_spikes > gs.target_count / 2 and not gs.is_over:
            gs.declare_loss(LossReason.NETWORK_COMPROMISED)
            logger.info("Game %s lost: rival spiked %d targets", gs.game_id, gs.rival_spikes)
            entries.append(LogEntry(">> The rival hacker has taken over the network.", EntryType.ERROR))
        return entries

    def _maybe_spawn_trace(self) -> List[LogEntry]:
        gs = self.state
        hops = gs.player.hop_count
        interval = gs.mod.trace_spawn_interval
        if gs.overlord.neutralized or not gs.just_hopped or not interval:
            return []
        if hops == 0 or hops % interval != 0:
            return []

        if gs.trace_spawn_blocked:
            gs.trace_spawn_blocked = False
            return [LogEntry(">> Trace spawn intercepted by signal jamming.", EntryType.INFO)]

        trace = spawn_trace(gs)
        self.stats["traces_spawned"] += 1
        return [LogEntry(f">> New TRACE PROGRAM deployed from Overlord! ({trace.name})", EntryType.WARNING)]

    def _check_alive(self) -> List[LogEntry]:
        gs = self.state
        if gs.player.is_alive() or gs.is_over:
            return []
        gs.declare_loss(LossReason.DETECTED)
        logger.info("Game %s lost: detection reached 100%%", gs.game_id)
        return [LogEntry(">> DETECTION AT 100%. The Overlord has found you.", EntryType.ERROR)]

    # =========================================================================
    # Queries
    # =========================================================================

    def welcome_entries(self) -> List[LogEntry]:
        gs = self.state
        entries = [
            LogEntry("=== NETSPIKE ===", EntryType.INFO),
            LogEntry(
                f"Jacked in at {gs.current_node.name} with {gs.player.data} DATA. "
                f"Spike {gs.target_count} targets without reaching 100% detection.",
                EntryType.SYSTEM,
            ),
        ]
        if not gs.mod.is_default:
            entries.append(LogEntry(f"Modifier: {gs.mod.name} - {gs.mod.description}", EntryType.WARNING))
        entries.append(LogEntry("Type 'help' for commands.", EntryType.SYSTEM))
        return entries

    def build_game_over_entries(self) -> List[LogEntry]:
        """Summary view of a finished (or abandoned) game"""
        gs = self.state
        player = gs.player
        if gs.won:
            banner = LogEntry("=== MISSION COMPLETE ===", EntryType.SUCCESS)
        elif gs.loss_reason is not None:
            banner = LogEntry(f"=== MISSION FAILED: {gs.loss_reason.banner} ===", EntryType.ERROR)
        else:
            banner = LogEntry("=== SESSION IN PROGRESS ===", EntryType.INFO)

        entries = [
            banner,
            LogEntry(f"Hops: {player.hop_count}", EntryType.INFO),
            LogEntry(f"Spikes: {player.spike_count}/{gs.target_count}", EntryType.INFO),
            LogEntry(f"DATA remaining: {player.data}", EntryType.INFO),
            LogEntry(f"Score: {gs.score}", EntryType.INFO),
        ]
        if gs.dev_cheat:
            entries.append(LogEntry("(dev cheat used)", EntryType.SYSTEM))
        return entries

    def get_valid_commands(self) -> List[str]:
        """Command lines that are plausible right now; used by random play"""
        gs = self.state
        node = gs.current_node
        lines = ["pass", "scan", "cloak"]

        for other in gs.network:
            if other.id == node.id or not other.is_discovered or other.state == NodeState.LOCKED:
                continue
            if gs.mod.hop_anywhere or gs.network.has_edge(node.id, other.id):
                lines.append(f"hop {other.name}")

        if not node.is_compromised and node.state != NodeState.LOCKED:
            lines.append("crack")
        if node.is_target and node.state == NodeState.CRACKED:
            lines.append("spike")
        if node.node_type == NodeType.SERVER and node.is_compromised and not node.extracted:
            lines.append("extract")
        if node.is_compromised:
            utility = {
                NodeType.CAMERA: ["feed"],
                NodeType.TURRET: ["jam"] + [f"destroy_{t.name.lower()}" for t in gs.traces],
                NodeType.COMMS: ["sniff"],
                NodeType.POWER: ["drain", "overload"],
                NodeType.FIREWALL: ["shatter"],
            }
            lines.extend(utility.get(node.node_type, []))
        if gs.rival and gs.rival.current_node == node.id:
            lines.append("kill")
        return lines

    def get_history(self, limit: Optional[int] = None) -> List[LogEntry]:
        if limit is None:
            return list(self.history)
        return self.history[-limit:]

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)

    def encode_state(self) -> Dict[str, Any]:
        """
        Numeric snapshot for external agents and analysis.

        ``features`` is the global feature vector; ``adjacency`` is the
        current edge matrix indexed by node id.
        """
        gs = self.state
        return {
            "features": gs.get_global_features().tolist(),
            "adjacency": gs.network.adjacency_matrix().tolist(),
            "node_names": [n.name for n in gs.network],
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "stats": self.get_stats(),
            "is_over": self.is_game_over(),
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def create_game(modifier: str = "", seed: Optional[int] = None) -> GameEngine:
    """
    Create and initialize a new game.

    Args:
        modifier: Modifier keyword; unknown or empty words give the default rules
        seed: Random seed for reproducibility
    """
    return GameEngine(modifier, seed=seed)


def play_random_game(modifier: str = "", max_turns: int = 200, seed: Optional[int] = None) -> Dict:
    """
    Play a game by picking random plausible commands (for testing/demonstration).

    Returns:
        Game results dictionary
    """
    engine = create_game(modifier, seed=seed)
    chooser = random.Random(seed)

    turns = 0
    while not engine.is_game_over() and turns < max_turns:
        engine.execute(chooser.choice(engine.get_valid_commands()))
        turns += 1

    gs = engine.state
    return {
        "won": gs.won,
        "lost": gs.lost,
        "loss_reason": gs.loss_reason.name if gs.loss_reason else None,
        "turns": turns,
        "score": gs.score,
        "stats": engine.get_stats(),
    }
