# =============================================================================
# NetSpike - Commands
# =============================================================================
"""
Parses input lines and runs command handlers.

Every handler takes the GameState and the positional arguments and returns
a list of log entries. A handler rejects a command by raising
CommandError before it mutates anything; the engine turns that into a
single error entry.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .enums import NodeType, NodeState, IceKind, EntryType, LossReason
from .data_structures import LogEntry, Node
from .game_state import GameState, SPIKE_SCORE
from .modifiers import DEFAULT_MODIFIER, get_modifier, is_known_modifier, list_modifiers
from .overlord import overlord_check
from .agents import find_trace
from .reconciliation import reconcile_modifier


CLOAK_TURNS = 3
FREE_HOP_DETECTION = 0.5
ICE_DRAIN = 2
ICE_ALERT = 0.15
PASS_DETECTION = 0.05
KILL_COST = 2
KILL_REWARD = 10
FEED_TURNS = 2
JAM_TURNS = 3
BRIDGE_COST = 2
BRIDGE_DETECTION = 0.05
SNIFF_COST = 1
RELAY_COST = 1
DRAIN_GAIN = 2
DRAIN_DETECTION = 0.05
OVERLOAD_DETECTION = 0.08
BYPASS_DETECTION = 0.03
SHATTER_DETECTION = 0.10
DESTROY_COST = 2

DESTROY_PREFIX = "destroy_"

INFO_COMMANDS = frozenset({"help", "status", "map"})
DEV_COMMANDS = frozenset({"dev_cheat", "dev_mod", "sudo"})
ACTION_COMMANDS = frozenset({
    "scan", "hop", "crack", "spike", "extract", "pass", "cloak", "kill",
    "feed", "jam", "bridge", "sniff", "relay", "drain", "overload",
    "bypass", "shatter",
})


class CommandError(Exception):
    """A command was rejected; the message is shown to the player"""


@dataclass
class ParsedCommand:
    """A tokenised input line"""
    name: str
    args: List[str] = field(default_factory=list)
    raw: str = ""


def parse_command(line: str) -> Optional[ParsedCommand]:
    """Split on whitespace; the first token, lower-cased, is the command"""
    parts = line.split()
    if not parts:
        return None
    return ParsedCommand(name=parts[0].lower(), args=parts[1:], raw=line.strip())


def is_action(name: str) -> bool:
    """Action commands advance the turn; info and developer commands do not"""
    return name in ACTION_COMMANDS or name.startswith(DESTROY_PREFIX)


def _pct(amount: float) -> int:
    return round(amount * 100)


Handler = Callable[[GameState, List[str]], List[LogEntry]]


class CommandProcessor:
    """
    Dispatches parsed commands to their handlers.

    Checks performed by handlers:
    - current node type and state gate utility commands
    - named nodes exist, are discovered and are adjacent where required
    - the player can pay before anything is mutated
    """

    def __init__(self):
        self.handlers: Dict[str, Handler] = {
            "help": self._cmd_help,
            "status": self._cmd_status,
            "map": self._cmd_map,
            "scan": self._cmd_scan,
            "hop": self._cmd_hop,
            "crack": self._cmd_crack,
            "spike": self._cmd_spike,
            "extract": self._cmd_extract,
            "pass": self._cmd_pass,
            "cloak": self._cmd_cloak,
            "kill": self._cmd_kill,
            "feed": self._cmd_feed,
            "jam": self._cmd_jam,
            "bridge": self._cmd_bridge,
            "sniff": self._cmd_sniff,
            "relay": self._cmd_relay,
            "drain": self._cmd_drain,
            "overload": self._cmd_overload,
            "bypass": self._cmd_bypass,
            "shatter": self._cmd_shatter,
            "dev_cheat": self._cmd_dev_cheat,
            "dev_mod": self._cmd_dev_mod,
            "sudo": self._cmd_sudo,
        }

    def dispatch(self, gs: GameState, command: ParsedCommand) -> List[LogEntry]:
        """
        Run one command.

        Raises:
            CommandError: the command was rejected and nothing changed
        """
        if command.name.startswith(DESTROY_PREFIX):
            return self._cmd_destroy(gs, command.name[len(DESTROY_PREFIX):])

        handler = self.handlers.get(command.name)
        if handler is None:
            raise CommandError(f"Unknown command: {command.name}. Type 'help' for commands.")
        return handler(gs, command.args)

    # =========================================================================
    # Shared Checks
    # =========================================================================

    @staticmethod
    def _pay(gs: GameState, cost: int, message: str):
        if not gs.player.can_afford(cost):
            raise CommandError(message)
        gs.player.spend(cost)

    @staticmethod
    def _lookup(gs: GameState, name: str) -> Node:
        node = gs.network.node_by_name(name)
        if node is None:
            raise CommandError(f"Unknown node: {name.upper()}")
        return node

    @staticmethod
    def _require_type(node: Node, node_type: NodeType, command: str):
        if node.node_type != node_type:
            raise CommandError(f"{command} works only on {node_type.display_name} nodes.")

    @staticmethod
    def _require_compromised(node: Node, message: str):
        if not node.is_compromised:
            raise CommandError(message)

    @staticmethod
    def _require_spiked(node: Node, message: str):
        if node.state != NodeState.SPIKED:
            raise CommandError(message)

    @staticmethod
    def _detection_entry(gs: GameState, amount: float, reason: str) -> LogEntry:
        gs.player.raise_detection(amount)
        return LogEntry(
            f">> +{_pct(amount)}% detection from {reason} ({gs.player.detection_percent}%).",
            EntryType.WARNING,
        )

    @staticmethod
    def _reveal_neighbours(gs: GameState, node: Node, label: str) -> List[LogEntry]:
        entries = []
        for neighbour_id in node.adjacent_nodes:
            neighbour = gs.network.nodes[neighbour_id]
            if neighbour.state != NodeState.UNDISCOVERED:
                continue
            neighbour.state = NodeState.DISCOVERED
            target = " (TARGET)" if neighbour.is_target else ""
            ice = " [ICE]" if neighbour.ice and gs.mod.ice_revealed else ""
            entries.append(LogEntry(
                f"  {label}: {neighbour.name} [{neighbour.node_type}]{target}{ice}",
                EntryType.SUCCESS,
            ))
        return entries

    def _node_tags(self, gs: GameState, node: Node) -> str:
        tags = ""
        if node.is_target:
            tags += " (TARGET)"
        if node.extracted:
            tags += " (EXTRACTED)"
        if node.ice and gs.mod.ice_revealed and not node.is_compromised:
            tags += " [ICE]"
        if any(t.current_node == node.id for t in gs.traces):
            tags += " [!]"
        if gs.rival and gs.rival.current_node == node.id:
            tags += " [R]"
        return tags

    # =========================================================================
    # Information
    # =========================================================================

    def _cmd_help(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        mod = gs.mod
        hop_target = "discovered" if mod.hop_anywhere else "connected"
        lines = [
            "Available commands:",
            "  help   - Show this help message",
            "  status - Show current stats, connected nodes, and commands available at this node",
            "  map    - Show discovered network",
            f"  scan   - Reveal connected nodes ({mod.scaled(mod.scan_cost)} DATA)",
            f"  hop <node> - Move to a {hop_target} node (free if visited & <50% detection, "
            f"else {mod.scaled(mod.hop_cost)} DATA)",
            "  crack  - Hack current node (variable DATA cost)",
            "  spike  - Plant spike on cracked target (free)",
            "  extract - Extract data from cracked Server (free)",
            f"  pass   - Gain 1 DATA, +{_pct(PASS_DETECTION)}% detection",
            f"  cloak  - Reduce detection for {CLOAK_TURNS} turns ({mod.scaled(mod.cloak_cost)} DATA)",
            f"  kill   - Eliminate rival hacker at your node ({KILL_COST} DATA)",
            "  feed | jam | bridge | sniff | relay | drain | overload | bypass | shatter",
            "         - Node-specific commands, see 'status' on a cracked node",
            f"  destroy_<trace> - Delete a trace program from a cracked Turret ({DESTROY_COST} DATA)",
            "  sudo rm -rf user - undefined",
        ]
        entries = [LogEntry(text, EntryType.INFO) for text in lines]
        if not mod.is_default:
            entries.append(LogEntry("", EntryType.SYSTEM))
            entries.append(LogEntry(f"Active modifier: {mod.name} - {mod.description}", EntryType.WARNING))
        return entries

    def _cmd_status(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        player = gs.player
        node = gs.current_node
        mod = gs.mod

        header = (
            f"DATA: {player.data} | DETECTION: {player.detection_percent}% | "
            f"NODE: {node.name} [{node.node_type}] | TARGETS: {player.spike_count}/{gs.target_count}"
        )
        if player.is_cloaked:
            header += f" | CLOAK: {player.cloak_turns} turns"
        if gs.traces:
            header += f" | TRACES: {len(gs.traces)}"
        if gs.rival:
            header += f" | RIVAL: {gs.rival.spiked_targets} spiked"
        if mod.action_limit:
            header += f" | ACTIONS: {gs.action_count}/{mod.action_limit}"
        entries = [LogEntry(header, EntryType.INFO)]

        connected = [
            gs.network.nodes[i] for i in node.adjacent_nodes
            if gs.network.nodes[i].is_discovered
        ]
        if connected:
            entries.append(LogEntry("Connected nodes:", EntryType.SYSTEM))
            for other in connected:
                state_tag = f" [{other.state.name}]" if other.state in (
                    NodeState.CRACKED, NodeState.SPIKED, NodeState.LOCKED) else ""
                if other.state == NodeState.LOCKED:
                    entry_type = EntryType.ERROR
                elif other.is_target:
                    entry_type = EntryType.WARNING
                else:
                    entry_type = EntryType.SYSTEM
                entries.append(LogEntry(
                    f"  * {other.name} [{other.node_type}]{state_tag}{self._node_tags(gs, other)}",
                    entry_type,
                ))
        else:
            entries.append(LogEntry("No discovered nodes connected from here.", EntryType.SYSTEM))

        available = self._available_here(gs, node)
        if available:
            entries.append(LogEntry("Commands at this node:", EntryType.SYSTEM))
            entries.extend(LogEntry(f"  > {text}", EntryType.INFO) for text in available)
        return entries

    def _available_here(self, gs: GameState, node: Node) -> List[str]:
        """Node-specific commands the player could issue right now"""
        mod = gs.mod
        compromised = node.is_compromised
        spiked = node.state == NodeState.SPIKED
        available = []

        if not compromised and node.state != NodeState.LOCKED:
            cost = mod.scaled(node.node_type.crack_cost + mod.crack_cost_bonus)
            available.append(f"crack ({0 if gs.free_crack else cost} DATA) - hack this node")
        if node.is_target and node.state == NodeState.CRACKED:
            available.append("spike - plant a spike on this target")
        if node.node_type == NodeType.SERVER and compromised and not node.extracted:
            available.append("extract - pull data from this server")

        if compromised:
            if node.node_type == NodeType.CAMERA:
                available.append(f"feed - reveal adjacent nodes, gain +1 DATA/turn for {FEED_TURNS} turns")
            elif node.node_type == NodeType.TURRET:
                available.append(f"jam - suppress hop-detection on connected nodes for {JAM_TURNS} turns")
                for trace in gs.traces:
                    available.append(f"destroy_{trace.name.lower()} ({DESTROY_COST} DATA) - delete this trace program")
            elif node.node_type == NodeType.DOOR:
                available.append(
                    f"bridge <nodeA> <nodeB> ({BRIDGE_COST} DATA, +{_pct(BRIDGE_DETECTION)}% det) "
                    "- create an edge between two discovered nodes")
            elif node.node_type == NodeType.COMMS:
                available.append(f"sniff ({SNIFF_COST} DATA) - reveal rival location and block next trace spawn")
                if spiked and gs.traces:
                    available.append(f"relay <node> ({RELAY_COST} DATA) - redirect a trace program to another node")
            elif node.node_type == NodeType.POWER:
                available.append(f"drain - +{DRAIN_GAIN} DATA, +{_pct(DRAIN_DETECTION)}% detection")
                if spiked:
                    available.append(
                        f"overload - clear ICE from adjacent nodes, next crack free (+{_pct(OVERLOAD_DETECTION)}% detection)")
            elif node.node_type == NodeType.FIREWALL:
                available.append(f"bypass <node> (+{_pct(BYPASS_DETECTION)}% detection) - unlock an adjacent locked node")
                if spiked:
                    available.append(
                        f"shatter (+{_pct(SHATTER_DETECTION)}% detection) - remove all locks from the entire network")

        if gs.rival and gs.rival.current_node == node.id:
            available.append(f"kill ({KILL_COST} DATA) - eliminate rival hacker [RIVAL IS HERE]")
        return available

    def _map_entry_type(self, gs: GameState, node: Node) -> EntryType:
        if node.id == gs.player.current_node:
            return EntryType.INFO
        if node.state == NodeState.LOCKED:
            return EntryType.ERROR
        if node.is_target:
            return EntryType.WARNING
        if node.is_compromised:
            return EntryType.SUCCESS
        return EntryType.SYSTEM

    def _cmd_map(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        network = gs.network
        arrow = " -->" if network.directed else " |--"
        entries = [LogEntry("=== NETWORK MAP ===", EntryType.INFO)]

        for node in network:
            if not node.is_discovered:
                continue
            marker = "[*]" if node.id == gs.player.current_node else node.state.marker
            entries.append(LogEntry(
                f"{marker} {node.name} [{node.node_type}]{self._node_tags(gs, node)}",
                self._map_entry_type(gs, node),
            ))
            for other_id in node.adjacent_nodes:
                other = network.nodes[other_id]
                if other.is_discovered:
                    entries.append(LogEntry(f"   {arrow} {other.name}", EntryType.SYSTEM))

        if network.directed:
            entries.append(LogEntry("(Edges are ONE-WAY: arrows show direction)", EntryType.WARNING))
        return entries

    # =========================================================================
    # Movement and Core Actions
    # =========================================================================

    def _cmd_scan(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        cost = gs.mod.scaled(gs.mod.scan_cost)
        self._pay(gs, cost, f"Insufficient DATA to scan. Cost: {cost}")

        node = gs.current_node
        entries = [LogEntry(f"Scanning from {node.name}...", EntryType.SYSTEM)]
        revealed = self._reveal_neighbours(gs, node, "Discovered")
        entries.extend(revealed or [LogEntry("  No new nodes discovered.", EntryType.SYSTEM)])
        entries.append(LogEntry(f"-{cost} DATA ({gs.player.data} remaining)", EntryType.WARNING))
        return entries

    def _cmd_hop(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        if not args:
            raise CommandError("Usage: hop <node_name>")

        player = gs.player
        mod = gs.mod
        target = self._lookup(gs, args[0])
        if target.state == NodeState.UNDISCOVERED:
            raise CommandError("Node not yet discovered. Use 'scan' first.")
        if target.state == NodeState.LOCKED:
            raise CommandError("Node is LOCKED. Cannot hop there.")
        if target.id == player.current_node:
            raise CommandError(f"Already at {target.name}.")

        free_return = target.id in player.visited_nodes and player.detection < FREE_HOP_DETECTION
        if not mod.hop_anywhere and not gs.network.has_edge(player.current_node, target.id):
            # A free return hop may retrace a known route through visited nodes
            route = None
            if free_return:
                passable = {
                    i for i in player.visited_nodes
                    if gs.network.nodes[i].state != NodeState.LOCKED
                }
                route = gs.network.shortest_path(player.current_node, target.id, allowed=passable)
            if route is None:
                raise CommandError("Node is not connected to current node.")

        cost = 0 if free_return else mod.scaled(mod.hop_cost)
        self._pay(gs, cost, f"Insufficient DATA to hop. Cost: {cost}")

        player.current_node = target.id
        player.hop_count += 1
        player.visited_nodes.add(target.id)
        gs.just_hopped = True

        if cost == 0:
            entries = [LogEntry(f"Hopped to {target.name}. (free, {player.data} DATA remaining)", EntryType.INFO)]
        else:
            entries = [LogEntry(f"Hopped to {target.name}. -{cost} DATA ({player.data} remaining)", EntryType.INFO)]

        jammed = gs.is_jammed(target.id)
        if jammed:
            entries.append(LogEntry(f">> JAM ACTIVE: no detection risk hopping into {target.name}.", EntryType.INFO))
            return entries

        if mod.hop_detection_penalty:
            player.raise_detection(mod.hop_detection_penalty)
            entries.append(LogEntry(
                f">> DIRECT LINK: +{_pct(mod.hop_detection_penalty)}% detection from hop",
                EntryType.WARNING,
            ))

        punishment = overlord_check(gs.overlord, player, gs.network, mod, gs.rng)
        if punishment is not None:
            entries.append(punishment)
        return entries

    def _cmd_crack(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        mod = gs.mod
        if node.is_compromised:
            raise CommandError("Node already cracked.")
        if node.state == NodeState.LOCKED:
            raise CommandError("Node is LOCKED. Cannot crack.")

        cost = 0 if gs.free_crack else mod.scaled(node.node_type.crack_cost + mod.crack_cost_bonus)
        self._pay(gs, cost, f"Insufficient DATA. Crack cost: {cost}, you have: {gs.player.data}")
        node.state = NodeState.CRACKED

        if gs.free_crack:
            gs.free_crack = False
            entries = [LogEntry(
                f"{node.name} cracked! (POWER OVERLOAD - free crack, {gs.player.data} DATA remaining)",
                EntryType.SUCCESS,
            )]
        else:
            entries = [LogEntry(f"{node.name} cracked! -{cost} DATA ({gs.player.data} remaining)", EntryType.SUCCESS)]

        if node.node_type == NodeType.OVERLORD:
            gs.overlord.neutralized = True
            entries.append(LogEntry(">> OVERLORD NEUTRALIZED. Detection system offline.", EntryType.SUCCESS))

        if node.internal_target and not node.is_target:
            node.is_target = True
            node.internal_target = False
            entries.append(LogEntry(">> TARGET REVEALED: This node is a target!", EntryType.SUCCESS))

        if node.ice is not None:
            entries.extend(self._trigger_ice(gs, node))
        return entries

    def _trigger_ice(self, gs: GameState, node: Node) -> List[LogEntry]:
        """Fire the node's trap once and clear it"""
        kind = node.ice
        node.ice = None
        entries = []

        if kind == IceKind.DRAIN:
            amount = gs.mod.scaled(ICE_DRAIN)
            gs.player.spend(amount)
            entries.append(LogEntry(f">> ICE TRAP [DRAIN]: -{amount} DATA!", EntryType.ERROR))
        elif kind == IceKind.LOCK:
            lockable = [
                gs.network.nodes[i] for i in node.adjacent_nodes
                if gs.network.nodes[i].state in (NodeState.DISCOVERED, NodeState.CRACKED)
            ]
            if lockable:
                victim = gs.rng.choice(lockable)
                victim.state = NodeState.LOCKED
                entries.append(LogEntry(f">> ICE TRAP [LOCK]: {victim.name} has been locked!", EntryType.ERROR))
            else:
                entries.append(LogEntry(">> ICE TRAP [LOCK]: no adjacent node to lock.", EntryType.WARNING))
        elif kind == IceKind.ALERT:
            gs.player.raise_detection(ICE_ALERT)
            entries.append(LogEntry(f">> ICE TRAP [ALERT]: +{_pct(ICE_ALERT)}% DETECTION!", EntryType.ERROR))
        return entries

    def _cmd_spike(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        if not node.is_target:
            raise CommandError("This node is not a target.")
        if node.state != NodeState.CRACKED:
            raise CommandError("Node must be cracked before spiking.")

        node.state = NodeState.SPIKED
        gs.player.spike_count += 1
        gs.score += SPIKE_SCORE

        entries = [LogEntry(
            f"SPIKE PLANTED on {node.name}! ({gs.player.spike_count}/{gs.target_count}) [+{SPIKE_SCORE} PTS]",
            EntryType.SUCCESS,
        )]
        if gs.accounted_targets >= gs.target_count and gs.declare_win():
            entries.append(LogEntry("ALL TARGETS ACCOUNTED FOR! [+500 BONUS]", EntryType.SUCCESS))
        return entries

    def _cmd_extract(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        mod = gs.mod
        if node.node_type != NodeType.SERVER:
            raise CommandError("This is not a Server node.")
        if not node.is_compromised:
            raise CommandError("Node must be cracked before extracting.")
        if node.extracted:
            raise CommandError("Data already extracted from this server.")

        base = min(gs.rng.randint(0, 7) + gs.rng.randint(0, 8) + 5, 20)
        reward = base * mod.extract_multiplier * mod.reward_multiplier
        gs.player.gain(reward)
        node.extracted = True
        return [LogEntry(
            f"Data extracted from {node.name}! +{reward} DATA ({gs.player.data} total)",
            EntryType.SUCCESS,
        )]

    def _cmd_pass(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        gs.player.gain(1)
        gs.player.raise_detection(PASS_DETECTION)
        return [
            LogEntry(f"Idle cycle... +1 DATA ({gs.player.data} total)", EntryType.SUCCESS),
            LogEntry(f">> +{_pct(PASS_DETECTION)}% detection ({gs.player.detection_percent}%)", EntryType.WARNING),
        ]

    def _cmd_cloak(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        cost = gs.mod.scaled(gs.mod.cloak_cost)
        self._pay(gs, cost, f"Insufficient DATA. Cloak costs {cost} DATA.")
        gs.player.cloak_turns = CLOAK_TURNS
        return [LogEntry(
            f"Cloak activated for {CLOAK_TURNS} turns. -{cost} DATA ({gs.player.data} remaining)",
            EntryType.SUCCESS,
        )]

    def _cmd_kill(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        if gs.rival is None:
            raise CommandError("No rival hacker in this network.")
        if gs.rival.current_node != gs.player.current_node:
            raise CommandError("Rival hacker is not at your node.")
        self._pay(gs, KILL_COST, f"Insufficient DATA. Kill costs {KILL_COST} DATA.")

        gs.rival = None
        gs.player.gain(KILL_REWARD)
        return [LogEntry(
            f">> RIVAL HACKER eliminated! +{KILL_REWARD - KILL_COST} DATA net ({gs.player.data} remaining)",
            EntryType.SUCCESS,
        )]

    # =========================================================================
    # Node-Type Utilities
    # =========================================================================

    def _cmd_feed(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.CAMERA, "feed")
        self._require_compromised(node, "Camera must be cracked before accessing the feed.")

        entries = [LogEntry(f"Accessing camera feed on {node.name}...", EntryType.SYSTEM)]
        revealed = self._reveal_neighbours(gs, node, "Feed reveals")
        entries.extend(revealed or [LogEntry("  No new nodes in camera range.", EntryType.SYSTEM)])

        gs.camera_feed_turns = FEED_TURNS
        entries.append(LogEntry(f">> CAMERA FEED active: +1 DATA/turn for {FEED_TURNS} turns.", EntryType.INFO))
        return entries

    def _cmd_jam(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.TURRET, "jam")
        self._require_compromised(node, "Turret must be cracked to jam.")

        gs.jammed_nodes = set(node.adjacent_nodes)
        gs.jam_turns = JAM_TURNS
        gs.trace_spawn_blocked = True
        entries = [LogEntry(
            f">> TURRET JAMMED: detection suppressed on {len(gs.jammed_nodes)} connected node(s) "
            f"for {JAM_TURNS} turns. Next trace spawn will be blocked.",
            EntryType.SUCCESS,
        )]
        if gs.rival:
            gs.rival.move_counter = max(0, gs.rival.move_counter - 1)
            entries.append(LogEntry(">> Rival hacker disrupted by jamming signal.", EntryType.INFO))
        return entries

    def _cmd_bridge(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.DOOR, "bridge")
        self._require_compromised(node, "Door must be cracked to create a bridge.")
        if len(args) < 2:
            raise CommandError("Usage: bridge <nodeA> <nodeB>")

        node_a = self._lookup(gs, args[0])
        node_b = self._lookup(gs, args[1])
        if node_a.id == node_b.id:
            raise CommandError("Cannot bridge a node to itself.")
        for other in (node_a, node_b):
            if not other.is_discovered:
                raise CommandError(f"{other.name} has not been discovered yet.")
        if gs.network.has_edge(node_a.id, node_b.id):
            raise CommandError(f"{node_a.name} and {node_b.name} are already connected.")
        self._pay(gs, BRIDGE_COST, f"Insufficient DATA. bridge costs {BRIDGE_COST} DATA.")

        gs.network.add_edge(node_a.id, node_b.id)
        link = "->" if gs.network.directed else "<->"
        return [
            LogEntry(
                f">> BRIDGE established: {node_a.name} {link} {node_b.name}. "
                f"-{BRIDGE_COST} DATA ({gs.player.data} remaining)",
                EntryType.SUCCESS,
            ),
            self._detection_entry(gs, BRIDGE_DETECTION, "routing anomaly"),
        ]

    def _cmd_sniff(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.COMMS, "sniff")
        self._require_compromised(node, "Comms must be cracked to sniff traffic.")
        self._pay(gs, SNIFF_COST, f"Insufficient DATA. sniff costs {SNIFF_COST} DATA.")

        entries = [LogEntry("Sniffing network traffic...", EntryType.SYSTEM)]
        rival = gs.rival
        if rival is None:
            entries.append(LogEntry("  No rival signal detected in this network.", EntryType.INFO))
        else:
            location = gs.network.nodes[rival.current_node].name
            entries.append(LogEntry(
                f"  Rival hacker located at: {location} (phase: {rival.phase})", EntryType.WARNING))
            target = gs.network.get_node(rival.target_node)
            if target is not None:
                entries.append(LogEntry(f"  Rival next target: {target.name}", EntryType.WARNING))

        gs.trace_spawn_blocked = True
        entries.append(LogEntry(">> Comms jamming active: next trace spawn will be intercepted.", EntryType.INFO))
        return entries

    def _cmd_relay(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.COMMS, "relay")
        self._require_spiked(node, "Comms must be spiked to relay traffic.")
        if not gs.traces:
            raise CommandError("No active trace programs to redirect.")
        if not args:
            raise CommandError("Usage: relay <node> [trace]")

        destination = self._lookup(gs, args[0])
        if not destination.is_discovered:
            raise CommandError(f"{destination.name} has not been discovered yet.")
        trace = gs.traces[0]
        if len(args) > 1:
            trace = find_trace(gs, args[1])
            if trace is None:
                raise CommandError(f"Unknown trace program: {args[1].upper()}")
        self._pay(gs, RELAY_COST, f"Insufficient DATA. relay costs {RELAY_COST} DATA.")

        trace.current_node = destination.id
        return [LogEntry(
            f">> RELAY: {trace.name} redirected to {destination.name}. "
            f"-{RELAY_COST} DATA ({gs.player.data} remaining)",
            EntryType.SUCCESS,
        )]

    def _cmd_drain(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.POWER, "drain")
        self._require_compromised(node, "Power node must be cracked to drain.")

        gs.player.gain(DRAIN_GAIN)
        return [
            LogEntry(f">> POWER DRAIN: +{DRAIN_GAIN} DATA ({gs.player.data} total).", EntryType.SUCCESS),
            self._detection_entry(gs, DRAIN_DETECTION, "power surge"),
        ]

    def _cmd_overload(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.POWER, "overload")
        self._require_spiked(node, "Power node must be spiked to overload.")

        entries = [LogEntry(
            f">> POWER OVERLOAD on {node.name}: frying adjacent security systems...", EntryType.WARNING)]
        cleared = 0
        for neighbour_id in node.adjacent_nodes:
            neighbour = gs.network.nodes[neighbour_id]
            if neighbour.ice is not None:
                neighbour.ice = None
                cleared += 1
                entries.append(LogEntry(f"  ICE destroyed on {neighbour.name}.", EntryType.SUCCESS))
        if not cleared:
            entries.append(LogEntry("  No ICE traps found on adjacent nodes.", EntryType.SYSTEM))

        gs.free_crack = True
        entries.append(LogEntry(">> Next crack costs 0 DATA (power surge active).", EntryType.INFO))
        entries.append(self._detection_entry(gs, OVERLOAD_DETECTION, "overload"))
        return entries

    def _cmd_bypass(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.FIREWALL, "bypass")
        self._require_compromised(node, "Firewall must be cracked to bypass.")
        if not args:
            raise CommandError("Usage: bypass <node>")

        target = self._lookup(gs, args[0])
        if not gs.network.has_edge(node.id, target.id):
            raise CommandError(f"{target.name} is not adjacent to this Firewall.")
        if target.state != NodeState.LOCKED:
            raise CommandError(f"{target.name} is not locked.")

        target.state = NodeState.DISCOVERED
        return [
            LogEntry(f">> FIREWALL BYPASS: {target.name} is now accessible.", EntryType.SUCCESS),
            self._detection_entry(gs, BYPASS_DETECTION, "bypass alarm"),
        ]

    def _cmd_shatter(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        node = gs.current_node
        self._require_type(node, NodeType.FIREWALL, "shatter")
        self._require_spiked(node, "Firewall must be spiked to shatter.")

        locked = gs.network.nodes_in_state(NodeState.LOCKED)
        for other in locked:
            other.state = NodeState.DISCOVERED
        return [
            LogEntry(
                f">> FIREWALL SHATTERED: {len(locked)} locked node(s) unlocked across the network.",
                EntryType.SUCCESS,
            ),
            self._detection_entry(gs, SHATTER_DETECTION, "security breach"),
        ]

    def _cmd_destroy(self, gs: GameState, trace_name: str) -> List[LogEntry]:
        node = gs.current_node
        if not trace_name:
            raise CommandError("Usage: destroy_<trace_name>")
        self._require_type(node, NodeType.TURRET, "destroy")
        self._require_compromised(node, "Turret must be cracked to target trace programs.")

        trace = find_trace(gs, trace_name)
        if trace is None:
            raise CommandError(f"Unknown trace program: {trace_name.upper()}")
        self._pay(gs, DESTROY_COST, f"Insufficient DATA. destroy costs {DESTROY_COST} DATA.")

        gs.traces.remove(trace)
        return [LogEntry(
            f">> TURRET FIRE: {trace.name} destroyed. -{DESTROY_COST} DATA ({gs.player.data} remaining)",
            EntryType.SUCCESS,
        )]

    # =========================================================================
    # Developer
    # =========================================================================

    def _cmd_dev_cheat(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        if gs.is_over:
            raise CommandError("Session already ended.")
        gs.won = True
        gs.dev_cheat = True
        return [LogEntry(">> DEV CHEAT: AUTO-WIN", EntryType.SUCCESS)]

    def _cmd_dev_mod(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        if not args:
            entries = [LogEntry(f"Active modifier: {gs.mod.key or 'NONE'}", EntryType.INFO)]
            entries.extend(
                LogEntry(f"  {m.key:<7} {m.name} - {m.description}", EntryType.SYSTEM)
                for m in list_modifiers()
            )
            return entries

        word = args[0].upper()
        if word in ("NONE", "DEFAULT"):
            new_mod = DEFAULT_MODIFIER
        elif is_known_modifier(word):
            new_mod = get_modifier(word)
        else:
            raise CommandError(f"Unknown modifier: {word}")
        return reconcile_modifier(gs, new_mod)

    def _cmd_sudo(self, gs: GameState, args: List[str]) -> List[LogEntry]:
        if " ".join(args).lower() != "rm -rf user":
            raise CommandError("Unknown command: sudo. Type 'help' for commands.")
        if gs.is_over:
            raise CommandError("Session already ended.")
        gs.declare_loss(LossReason.USER_DELETED)
        return [LogEntry("USER DELETED.", EntryType.ERROR)]
