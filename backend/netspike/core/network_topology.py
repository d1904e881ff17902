# =============================================================================
# NetSpike - Network Topology
# =============================================================================
"""
The network graph and its procedural generator.

Generation guarantees:
- node count within the modifier bounds
- exactly one Overlord
- a random spanning tree underneath everything, so the graph is connected;
  in directed mode every tree edge also gets its reverse edge
- a size-scaled minimum of Servers unless the modifier disables them
"""

import random
from collections import deque
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np

from .enums import NodeType, NodeState, IceKind, regular_node_types
from .data_structures import Node
from .modifiers import ModifierConfig, DEFAULT_MODIFIER


NAME_SUFFIXES = ["ALPHA", "BETA", "GAMMA", "DELTA"]


def generate_name(node_type: NodeType, rng: random.Random) -> str:
    """Random display name such as ``SRV_07`` or ``FW_GAMMA``"""
    if rng.random() < 0.5:
        return f"{node_type.prefix}_{rng.randint(1, 99):02d}"
    return f"{node_type.prefix}_{rng.choice(NAME_SUFFIXES)}"


def minimum_servers(node_count: int) -> int:
    """Servers a network of this size must contain"""
    if node_count <= 10:
        return 1
    if node_count <= 13:
        return 2
    return 3


class Network:
    """
    Ordered collection of nodes plus a ``directed`` flag.

    Adjacency is stored on the nodes as outbound neighbour lists. In an
    undirected network every edge appears in both lists.
    """

    def __init__(self, nodes: Optional[List[Node]] = None, directed: bool = False):
        self.nodes: List[Node] = nodes or []
        self.directed = directed

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    @classmethod
    def build(
        cls,
        types: Sequence[NodeType],
        edges: Iterable[Tuple[int, int]],
        names: Optional[Sequence[str]] = None,
        directed: bool = False,
    ) -> "Network":
        """Build a network from explicit node types and an edge list"""
        nodes = []
        for i, node_type in enumerate(types):
            name = names[i] if names else f"{node_type.prefix}_{i:02d}"
            nodes.append(Node(id=i, name=name.upper(), node_type=node_type))
        network = cls(nodes, directed=directed)
        for a, b in edges:
            network.add_edge(a, b)
        return network

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_node(self, node_id: Optional[int]) -> Optional[Node]:
        if node_id is None or node_id < 0 or node_id >= len(self.nodes):
            return None
        return self.nodes[node_id]

    def node_by_name(self, name: str) -> Optional[Node]:
        """Find a node by display name, case-insensitively"""
        wanted = name.upper()
        for node in self.nodes:
            if node.name == wanted:
                return node
        return None

    @property
    def overlord(self) -> Node:
        return next(n for n in self.nodes if n.node_type == NodeType.OVERLORD)

    def real_targets(self) -> List[Node]:
        return [n for n in self.nodes if n.is_real_target]

    def nodes_in_state(self, state: NodeState) -> List[Node]:
        return [n for n in self.nodes if n.state == state]

    # =========================================================================
    # Edges
    # =========================================================================

    def has_edge(self, a: int, b: int) -> bool:
        return b in self.nodes[a].adjacent_nodes

    def add_edge(self, a: int, b: int, both_ways: bool = False):
        """Add a -> b, plus b -> a when undirected or when ``both_ways``"""
        if not self.has_edge(a, b):
            self.nodes[a].adjacent_nodes.append(b)
        if (not self.directed or both_ways) and not self.has_edge(b, a):
            self.nodes[b].adjacent_nodes.append(a)

    def remove_edge(self, a: int, b: int):
        if b in self.nodes[a].adjacent_nodes:
            self.nodes[a].adjacent_nodes.remove(b)
        if not self.directed and a in self.nodes[b].adjacent_nodes:
            self.nodes[b].adjacent_nodes.remove(a)

    def edge_list(self) -> List[Tuple[int, int]]:
        """All edges; undirected edges are listed once with the smaller id first"""
        edges = []
        for node in self.nodes:
            for other in node.adjacent_nodes:
                if self.directed or node.id < other:
                    edges.append((node.id, other))
        return edges

    def degree(self, node_id: int) -> int:
        """Number of distinct neighbours, counting inbound edges in directed mode"""
        neighbours = set(self.nodes[node_id].adjacent_nodes)
        if self.directed:
            neighbours.update(n.id for n in self.nodes if node_id in n.adjacent_nodes)
        return len(neighbours)

    # =========================================================================
    # Breadth-First Search
    # =========================================================================

    def shortest_path(
        self,
        source: int,
        target: int,
        allowed: Optional[Set[int]] = None,
    ) -> Optional[List[int]]:
        """
        Shortest path from ``source`` to ``target`` following outbound edges.

        Args:
            source: Start node id
            target: Destination node id
            allowed: Optional set of node ids the path may pass through
                (source and target are always allowed)

        Returns:
            List of node ids including both endpoints, or None if unreachable
        """
        if source == target:
            return [source]

        previous: Dict[int, int] = {source: source}
        queue = deque([source])

        while queue:
            current = queue.popleft()
            for nxt in self.nodes[current].adjacent_nodes:
                if nxt in previous:
                    continue
                if allowed is not None and nxt != target and nxt not in allowed:
                    continue
                previous[nxt] = current
                if nxt == target:
                    path = [target]
                    while path[-1] != source:
                        path.append(previous[path[-1]])
                    return list(reversed(path))
                queue.append(nxt)
        return None

    def next_step(self, source: int, target: int) -> Optional[int]:
        """First hop on the shortest path toward ``target``"""
        path = self.shortest_path(source, target)
        if path is None or len(path) < 2:
            return None
        return path[1]

    def distances_from(self, source: int) -> Dict[int, int]:
        """BFS hop distance from ``source`` to every reachable node"""
        distances = {source: 0}
        queue = deque([source])
        while queue:
            current = queue.popleft()
            for nxt in self.nodes[current].adjacent_nodes:
                if nxt not in distances:
                    distances[nxt] = distances[current] + 1
                    queue.append(nxt)
        return distances

    def is_connected(self) -> bool:
        """
        Every node reaches every other node.
        For undirected networks this is plain connectivity.
        """
        if not self.nodes:
            return True
        if len(self.distances_from(0)) != len(self.nodes):
            return False
        if not self.directed:
            return True
        # Reverse reachability: everything must reach node 0
        reverse: Dict[int, List[int]] = {n.id: [] for n in self.nodes}
        for a, b in self.edge_list():
            reverse[b].append(a)
        seen = {0}
        queue = deque([0])
        while queue:
            current = queue.popleft()
            for nxt in reverse[current]:
                if nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        return len(seen) == len(self.nodes)

    # =========================================================================
    # Mutation
    # =========================================================================

    def rewire_edge(self, rng: random.Random) -> Optional[Tuple[Tuple[int, int], Tuple[int, int]]]:
        """
        Remove one random non-bridge edge whose endpoints both have degree
        greater than 1, then add one new random non-duplicate edge.

        Returns:
            ``(removed, added)`` edge pairs, or None if no edge could be rewired
        """
        candidates = [
            (a, b) for a, b in self.edge_list()
            if self.degree(a) > 1 and self.degree(b) > 1
        ]
        rng.shuffle(candidates)

        removed = None
        for a, b in candidates:
            self.remove_edge(a, b)
            if self.is_connected():
                removed = (a, b)
                break
            self.add_edge(a, b)
        if removed is None:
            return None

        count = len(self.nodes)
        new_edges = [
            (a, b)
            for a in range(count)
            for b in range(count)
            if a != b
            and (self.directed or a < b)
            and not self.has_edge(a, b)
            and {a, b} != set(removed)
        ]
        if not new_edges:
            self.add_edge(*removed)
            return None

        added = rng.choice(new_edges)
        self.add_edge(*added)
        return removed, added

    # =========================================================================
    # State Encoding
    # =========================================================================

    def adjacency_matrix(self) -> np.ndarray:
        """Dense adjacency matrix (row = source, column = destination)"""
        matrix = np.zeros((len(self.nodes), len(self.nodes)), dtype=np.int8)
        for node in self.nodes:
            for other in node.adjacent_nodes:
                matrix[node.id, other] = 1
        return matrix

    def to_dict(self) -> Dict:
        return {
            "directed": self.directed,
            "nodes": [n.to_dict() for n in self.nodes],
        }


class NetworkTopologyGenerator:
    """
    Generates a network for a given modifier.

    All randomness comes from the injected ``rng`` so that a seeded
    ``random.Random`` reproduces the same network.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, mod: ModifierConfig = DEFAULT_MODIFIER) -> Network:
        """
        Generate a network.

        Args:
            mod: Active modifier (bounds, targets, edges, servers, discovery)

        Returns:
            A connected Network with targets, ICE and node types assigned
        """
        count = self.rng.randint(mod.min_nodes, max(mod.min_nodes, mod.max_nodes))

        types = self._assign_types(count, mod)
        network = Network(self._create_nodes(types), directed=mod.directed_edges)

        self._build_spanning_tree(network)
        self._add_extra_edges(network, mod)
        self._mark_targets(network, mod)
        if not mod.no_servers:
            self._ensure_servers(network)
        self._place_ice(network)

        if mod.all_discovered:
            for node in network:
                node.state = NodeState.DISCOVERED

        return network

    def _assign_types(self, count: int, mod: ModifierConfig) -> List[NodeType]:
        """Exactly one Overlord, the rest uniformly random, then shuffled"""
        pool = regular_node_types(include_servers=not mod.no_servers)
        types = [NodeType.OVERLORD] + [self.rng.choice(pool) for _ in range(count - 1)]
        self.rng.shuffle(types)
        return types

    def _create_nodes(self, types: List[NodeType]) -> List[Node]:
        used: Set[str] = set()
        nodes = []
        for i, node_type in enumerate(types):
            name = self._unique_name(node_type, used)
            nodes.append(Node(id=i, name=name, node_type=node_type))
        return nodes

    def _unique_name(self, node_type: NodeType, used: Set[str]) -> str:
        name = generate_name(node_type, self.rng)
        while name in used:
            name = generate_name(node_type, self.rng)
        used.add(name)
        return name

    def _build_spanning_tree(self, network: Network):
        """Random spanning tree; tree edges always go both ways"""
        order = list(range(len(network)))
        self.rng.shuffle(order)
        for i in range(1, len(order)):
            a = order[i]
            b = order[self.rng.randrange(i)]
            network.add_edge(a, b, both_ways=True)

    def _add_extra_edges(self, network: Network, mod: ModifierConfig):
        count = len(network)
        attempts = (count // 2) * mod.extra_edge_multiplier
        for _ in range(attempts):
            a = self.rng.randrange(count)
            b = self.rng.randrange(count)
            if a != b and not network.has_edge(a, b):
                network.add_edge(a, b)

    def _mark_targets(self, network: Network, mod: ModifierConfig):
        candidates = [n.id for n in network if n.node_type != NodeType.OVERLORD]
        self.rng.shuffle(candidates)

        wanted = mod.target_count
        chosen: List[int] = []
        if mod.overlord_is_target:
            chosen.append(network.overlord.id)
            wanted -= 1
        chosen.extend(candidates[:max(0, wanted)])

        for node_id in chosen:
            node = network.nodes[node_id]
            if mod.hidden_targets:
                node.internal_target = True
            else:
                node.is_target = True

    def _ensure_servers(self, network: Network):
        """Convert random non-target nodes into Servers until the minimum is met"""
        needed = minimum_servers(len(network)) - sum(
            1 for n in network if n.node_type == NodeType.SERVER
        )
        if needed <= 0:
            return

        convertible = [
            n for n in network
            if n.node_type not in (NodeType.SERVER, NodeType.OVERLORD)
            and not n.is_real_target
        ]
        self.rng.shuffle(convertible)
        used = {n.name for n in network}
        for node in convertible[:needed]:
            used.discard(node.name)
            node.node_type = NodeType.SERVER
            node.name = self._unique_name(NodeType.SERVER, used)

    def _place_ice(self, network: Network):
        """2-4 one-shot traps on non-Overlord, non-target nodes"""
        eligible = [
            n for n in network
            if n.node_type != NodeType.OVERLORD and not n.is_real_target
        ]
        self.rng.shuffle(eligible)
        count = min(len(eligible), self.rng.randint(2, 4))
        kinds = list(IceKind)
        for node in eligible[:count]:
            node.ice = self.rng.choice(kinds)


# =============================================================================
# Convenience function
# =============================================================================

def generate_network(
    mod: ModifierConfig = DEFAULT_MODIFIER,
    rng: Optional[random.Random] = None,
) -> Network:
    """
    Convenience function to generate a network.

    Args:
        mod: Active modifier
        rng: Random source; a fresh unseeded one when omitted

    Returns:
        The generated Network
    """
    return NetworkTopologyGenerator(rng=rng).generate(mod)
