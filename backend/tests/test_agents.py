"""
Agent Tests

Trace programs, the rival hacker state machine and the Overlord check.
"""

import pytest

from netspike.core import EntryType, LossReason, NodeState, RivalHacker, RivalPhase, get_modifier
from netspike.core.agents import (
    advance_rival, chase_probability, create_rival, nearest_rival_target, spawn_trace, tick_trace,
)
from netspike.core.overlord import detection_chance, overlord_check


# =============================================================================
# Trace Programs
# =============================================================================

def test_spawn_trace_at_overlord(make_state):
    gs = make_state()
    first = spawn_trace(gs)
    second = spawn_trace(gs)

    assert first.name == "TRACE_01"
    assert second.name == "TRACE_02"
    assert first.current_node == 7
    assert first.cooldown_remaining == 1


def test_chase_probability():
    assert chase_probability(0.0) == 0.0
    assert chase_probability(0.25) == pytest.approx(0.5)
    assert chase_probability(0.9) == 1.0


def test_trace_moves_every_other_tick_toward_player(make_state):
    gs = make_state()
    gs.player.detection = 0.5
    trace = spawn_trace(gs)

    tick_trace(gs, trace)
    assert trace.current_node == 7

    tick_trace(gs, trace)
    assert trace.current_node == 6

    tick_trace(gs, trace)
    assert trace.current_node == 6
    tick_trace(gs, trace)
    assert trace.current_node == 3


def test_trace_wanders_at_zero_detection(make_state):
    gs = make_state()
    trace = spawn_trace(gs)
    trace.cooldown_remaining = 0

    tick_trace(gs, trace)

    assert trace.current_node in (6, 9)


def test_trace_contact_raises_detection(make_state):
    gs = make_state()
    trace = spawn_trace(gs)
    trace.current_node = 0

    entry = tick_trace(gs, trace)

    assert entry is not None
    assert entry.type == EntryType.ERROR
    assert "TRACE_01" in entry.text
    assert gs.player.detection == pytest.approx(0.15)


def test_trace_contact_uses_modifier_rate(make_state):
    gs = make_state(mod=get_modifier("SPAWN"))
    trace = spawn_trace(gs)
    trace.current_node = 0
    tick_trace(gs, trace)
    assert gs.player.detection == pytest.approx(0.40)


def test_trace_spawns_on_hop_interval(make_engine, pinned):
    engine = make_engine(rng=pinned(0.99))
    gs = engine.state
    gs.player.hop_count = 3

    entries = engine.execute("hop TRT_C")

    assert len(gs.traces) == 1
    assert any("TRACE PROGRAM" in e.text for e in entries)


def test_blocked_spawn_is_consumed(make_engine, pinned):
    engine = make_engine(rng=pinned(0.99))
    gs = engine.state
    gs.player.hop_count = 3
    gs.trace_spawn_blocked = True

    engine.execute("hop TRT_C")

    assert gs.traces == []
    assert not gs.trace_spawn_blocked


def test_no_spawn_after_non_hop_action(make_engine):
    engine = make_engine()
    gs = engine.state
    gs.player.hop_count = 4
    engine.execute("pass")
    assert gs.traces == []


def test_no_spawn_once_overlord_neutralized(make_engine):
    engine = make_engine()
    gs = engine.state
    gs.player.hop_count = 3
    gs.overlord.neutralized = True
    engine.execute("hop TRT_C")
    assert gs.traces == []


# =============================================================================
# Rival Hacker
# =============================================================================

def test_rival_starts_far_from_player_and_overlord(make_state):
    gs = make_state()
    rival = create_rival(gs.network, 0, gs.rng)
    assert rival.current_node not in (0, 7)
    assert not gs.network.nodes[rival.current_node].is_real_target
    assert rival.phase == RivalPhase.MOVING


def test_nearest_rival_target(make_state):
    gs = make_state()
    gs.rival = RivalHacker(current_node=5)
    assert nearest_rival_target(gs) == 9

    gs.network.nodes[9].state = NodeState.SPIKED
    assert nearest_rival_target(gs) == 1


def test_rival_full_cycle_on_server(make_state):
    gs = make_state()
    gs.rival = RivalHacker(current_node=8)
    node = gs.network.nodes[8]

    advance_rival(gs)
    assert gs.rival.phase == RivalPhase.CRACKING
    assert gs.rival.target_node == 8

    advance_rival(gs)
    assert node.state == NodeState.CRACKED
    assert gs.rival.phase == RivalPhase.SPIKING

    advance_rival(gs)
    assert node.state == NodeState.SPIKED
    assert gs.rival.spiked_targets == 1
    assert gs.rival.phase == RivalPhase.EXTRACTING

    advance_rival(gs)
    assert node.extracted
    assert gs.rival.phase == RivalPhase.MOVING
    assert gs.rival.target_node is None


def test_rival_moves_on_interval(make_state):
    gs = make_state()
    gs.rival = RivalHacker(current_node=4)

    advance_rival(gs)
    advance_rival(gs)
    assert gs.rival.current_node == 4

    advance_rival(gs)
    assert gs.rival.current_node == 1
    assert gs.rival.phase == RivalPhase.CRACKING


def test_rival_targets_hidden_targets(make_state):
    gs = make_state()
    for node_id in (1, 8, 9):
        node = gs.network.nodes[node_id]
        node.is_target = False
        node.internal_target = True
    gs.rival = RivalHacker(current_node=5)
    assert nearest_rival_target(gs) == 9


def test_conflict_aborts_rival(make_state):
    gs = make_state()
    gs.rival = RivalHacker(current_node=8, target_node=8, phase=RivalPhase.CRACKING)
    gs.network.nodes[8].state = NodeState.SPIKED

    entries = advance_rival(gs)

    assert gs.rival.phase == RivalPhase.MOVING
    assert gs.rival.spiked_targets == 0
    assert gs.player.detection == pytest.approx(0.10)
    assert len(gs.traces) == 1
    assert any("CONFLICT" in e.text for e in entries)


def test_rival_skips_locked_targets(make_state):
    gs = make_state()
    gs.network.nodes[9].state = NodeState.LOCKED
    gs.rival = RivalHacker(current_node=9)

    assert nearest_rival_target(gs) == 1
    advance_rival(gs)
    advance_rival(gs)

    assert gs.network.nodes[9].state == NodeState.LOCKED
    assert gs.rival.phase == RivalPhase.MOVING


@pytest.mark.parametrize("phase", [RivalPhase.CRACKING, RivalPhase.SPIKING])
def test_rival_backs_off_node_locked_mid_breach(make_state, phase):
    gs = make_state()
    gs.network.nodes[9].state = NodeState.LOCKED
    gs.rival = RivalHacker(current_node=9, target_node=9, phase=phase)

    entries = advance_rival(gs)

    assert gs.network.nodes[9].state == NodeState.LOCKED
    assert gs.rival.phase == RivalPhase.MOVING
    assert gs.rival.target_node is None
    assert gs.rival.spiked_targets == 0
    assert "locked out" in entries[0].text


def test_rival_crack_keeps_undiscovered_node_hidden(make_state):
    gs = make_state(discover=False)
    gs.rival = RivalHacker(current_node=8, target_node=8, phase=RivalPhase.CRACKING)

    advance_rival(gs)

    assert gs.network.nodes[8].state == NodeState.UNDISCOVERED
    assert gs.rival.phase == RivalPhase.SPIKING


def test_rival_dominance_is_a_loss(make_engine):
    engine = make_engine()
    gs = engine.state
    gs.rival = RivalHacker(current_node=9, target_node=9, phase=RivalPhase.SPIKING, spiked_targets=1)

    engine.execute("pass")

    assert gs.rival.spiked_targets == 2
    assert gs.lost
    assert not gs.killed
    assert gs.loss_reason == LossReason.NETWORK_COMPROMISED


def test_combined_spikes_win(make_engine):
    engine = make_engine()
    gs = engine.state
    gs.player.spike_count = 1
    gs.rival = RivalHacker(current_node=9, target_node=9, phase=RivalPhase.SPIKING, spiked_targets=1)

    engine.execute("pass")

    assert gs.won
    assert not gs.lost
    assert gs.score == 500


def test_jam_disrupts_rival(make_engine):
    engine = make_engine(start=2)
    gs = engine.state
    gs.current_node.state = NodeState.CRACKED
    gs.rival = RivalHacker(current_node=4, move_counter=1)

    engine.execute("jam")

    # Disrupted to 0, then one post-turn tick
    assert gs.rival.move_counter == 1


# =============================================================================
# Overlord
# =============================================================================

def test_detection_chance_formula(make_state):
    gs = make_state()
    gs.player.hop_count = 6
    assert detection_chance(gs.player, gs.mod) == pytest.approx(0.31)
    assert detection_chance(gs.player, get_modifier("NEURAL")) == pytest.approx(0.47)

    gs.player.cloak_turns = 2
    assert detection_chance(gs.player, gs.mod) == pytest.approx(0.155)


def test_overlord_first_check_only_activates(make_state, pinned):
    gs = make_state()
    entry = overlord_check(gs.overlord, gs.player, gs.network, gs.mod, pinned(0.0))
    assert entry is None
    assert gs.overlord.active


def test_overlord_punishes_when_roll_succeeds(make_state, pinned):
    gs = make_state()
    gs.overlord.active = True

    entry = overlord_check(gs.overlord, gs.player, gs.network, gs.mod, pinned(0.0))

    assert entry is not None
    assert entry.type == EntryType.ERROR
    punished = (
        gs.player.detection == pytest.approx(0.20)
        or gs.player.data == 12
        or gs.current_node.state == NodeState.LOCKED
    )
    assert punished


def test_overlord_quiet_when_roll_fails(make_state, pinned):
    gs = make_state()
    gs.overlord.active = True
    assert overlord_check(gs.overlord, gs.player, gs.network, gs.mod, pinned(0.99)) is None


def test_neutralized_overlord_never_checks(make_state, pinned):
    gs = make_state()
    gs.overlord.neutralized = True
    assert overlord_check(gs.overlord, gs.player, gs.network, gs.mod, pinned(0.0)) is None
    assert not gs.overlord.active
