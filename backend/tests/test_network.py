"""
Network Tests

Generation invariants across seeds and modifiers, graph search and
rewiring.
"""

import random

import numpy as np
import pytest

from netspike.core import NodeState, NodeType, generate_network, get_modifier
from netspike.core.network_topology import minimum_servers


SEEDS = range(25)


def _servers(network):
    return sum(1 for n in network if n.node_type == NodeType.SERVER)


@pytest.mark.parametrize("word", ["", "VOID", "VERTEX", "VECTOR", "KERNEL", "SHARD", "QUBIT"])
def test_generation_invariants(word):
    mod = get_modifier(word)
    for seed in SEEDS:
        network = generate_network(mod, random.Random(seed))

        assert mod.min_nodes <= len(network) <= mod.max_nodes
        assert sum(1 for n in network if n.node_type == NodeType.OVERLORD) == 1
        assert network.is_connected()
        assert len({n.name for n in network}) == len(network)
        assert len(network.real_targets()) == mod.target_count

        if mod.no_servers:
            assert _servers(network) == 0
        else:
            assert _servers(network) >= minimum_servers(len(network))

        iced = [n for n in network if n.ice is not None]
        assert 2 <= len(iced) <= 4
        for node in iced:
            assert node.node_type != NodeType.OVERLORD
            assert not node.is_real_target


def test_minimum_servers():
    assert minimum_servers(8) == 1
    assert minimum_servers(10) == 1
    assert minimum_servers(11) == 2
    assert minimum_servers(13) == 2
    assert minimum_servers(14) == 3


def test_seeded_generation_is_reproducible():
    a = generate_network(rng=random.Random(3))
    b = generate_network(rng=random.Random(3))
    assert a.to_dict() == b.to_dict()


def test_hidden_targets_are_internal():
    network = generate_network(get_modifier("QUBIT"), random.Random(1))
    assert not any(n.is_target for n in network)
    assert sum(1 for n in network if n.internal_target) == 3


def test_overlord_can_be_a_target():
    network = generate_network(get_modifier("KERNEL"), random.Random(1))
    assert network.overlord.is_target
    assert len(network.real_targets()) == 4


def test_pre_discovered_network():
    network = generate_network(get_modifier("BREACH"), random.Random(1))
    assert all(n.state == NodeState.DISCOVERED for n in network)


def test_node_names_follow_type_prefix():
    network = generate_network(rng=random.Random(5))
    for node in network:
        assert node.name.startswith(node.node_type.prefix + "_")


# =============================================================================
# Graph Search
# =============================================================================

def test_node_lookup(make_state):
    network = make_state().network
    assert network.node_by_name("srv_b").id == 1
    assert network.node_by_name("NOPE") is None
    assert network.get_node(99) is None
    assert network.overlord.id == 7


def test_shortest_path(make_state):
    network = make_state().network
    assert network.shortest_path(0, 8) == [0, 1, 4, 8]
    assert network.shortest_path(3, 3) == [3]
    assert network.next_step(7, 0) == 6


def test_shortest_path_restricted(make_state):
    network = make_state().network
    assert network.shortest_path(5, 0, allowed={2}) == [5, 2, 0]
    assert network.shortest_path(5, 0, allowed={9}) is None


def test_directed_edges(make_state):
    network = make_state().network
    network.directed = True
    network.add_edge(8, 9)
    assert network.has_edge(8, 9)
    assert not network.has_edge(9, 8)
    assert network.degree(9) == 3


def test_rewire_keeps_network_connected(make_state):
    network = make_state().network
    rng = random.Random(11)
    for _ in range(20):
        count = len(network.edge_list())
        result = network.rewire_edge(rng)
        assert result is not None
        removed, added = result
        assert set(removed) != set(added)
        assert len(network.edge_list()) == count
        assert network.is_connected()


def test_rewire_refuses_bridges_only():
    network = generate_network(rng=random.Random(0))
    # Strip to a path: every edge is a bridge
    for node in network:
        node.adjacent_nodes = []
    for i in range(len(network) - 1):
        network.add_edge(i, i + 1)
    assert network.rewire_edge(random.Random(0)) is None
    assert len(network.edge_list()) == len(network) - 1


def test_adjacency_matrix(make_state):
    network = make_state().network
    matrix = network.adjacency_matrix()
    assert matrix.shape == (10, 10)
    assert np.array_equal(matrix, matrix.T)
    assert matrix.sum() == 2 * len(network.edge_list())
