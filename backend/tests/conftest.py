"""
Shared fixtures: a small hand-built network and a state factory around it.

Layout (undirected):

    CAM_A(0) - SRV_B(1)* - COM_E(4) - SRV_I(8)*
      |   \\
    TRT_C(2) DOOR_D(3) - FW_G(6) - OVLRD_H(7)
      |                               |
    PWR_F(5) ---------------------- CAM_J(9)*

    * = target
"""

import random

import pytest

from netspike.core import GameEngine, GameState, Network, NodeState, NodeType, PlayerState


NAMES = ["CAM_A", "SRV_B", "TRT_C", "DOOR_D", "COM_E", "PWR_F", "FW_G", "OVLRD_H", "SRV_I", "CAM_J"]
TYPES = [
    NodeType.CAMERA, NodeType.SERVER, NodeType.TURRET, NodeType.DOOR, NodeType.COMMS,
    NodeType.POWER, NodeType.FIREWALL, NodeType.OVERLORD, NodeType.SERVER, NodeType.CAMERA,
]
EDGES = [(0, 1), (0, 2), (0, 3), (1, 4), (2, 5), (3, 6), (6, 7), (4, 8), (5, 9), (7, 9)]
TARGETS = [1, 8, 9]


class PinnedRandom(random.Random):
    """random() always returns ``value``; every other draw stays seeded"""

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self):
        return self.value

    # Keeps choice/randrange/shuffle on the seeded bit generator
    def getrandbits(self, k):
        return super().getrandbits(k)


def build_network() -> Network:
    network = Network.build(TYPES, EDGES, names=NAMES)
    for node_id in TARGETS:
        network.nodes[node_id].is_target = True
    return network


@pytest.fixture
def make_state():
    """
    Factory for a GameState on the hand-built network.

    No rival, no ICE, Overlord inactive. Every node starts Discovered
    unless ``discover`` is False, in which case only the start node is.
    """
    def _make(start=0, data=15, rng=None, discover=True, network=None, **kwargs) -> GameState:
        network = network or build_network()
        for node in network:
            if discover or node.id == start:
                node.state = NodeState.DISCOVERED
        player = PlayerState(data=data, current_node=start)
        player.visited_nodes.add(start)
        return GameState(
            network=network,
            player=player,
            rng=rng or random.Random(0),
            target_count=3,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_engine(make_state):
    def _make(**kwargs) -> GameEngine:
        return GameEngine.from_state(make_state(**kwargs))
    return _make


@pytest.fixture
def pinned():
    return PinnedRandom
