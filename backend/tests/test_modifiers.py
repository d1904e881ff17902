"""
Modifier Tests

Registry lookups, per-action modifier hooks and runtime switching through
reconcile_modifier / dev_mod.
"""

from dataclasses import replace

import pytest

from netspike.core import (
    DEFAULT_MODIFIER, MODIFIERS, EntryType, LossReason, NodeState, RivalHacker,
    get_modifier, list_modifiers, reconcile_modifier,
)


# =============================================================================
# Registry
# =============================================================================

def test_catalog():
    assert len(MODIFIERS) == 19
    assert len(list_modifiers()) == 19
    for key, mod in MODIFIERS.items():
        assert mod.key == key
        assert mod.name
        assert mod.description
        assert mod.changed_fields(DEFAULT_MODIFIER)


def test_lookup_is_case_insensitive_with_default_fallback():
    assert get_modifier("qubit") is MODIFIERS["QUBIT"]
    assert get_modifier(" Flux ") is MODIFIERS["FLUX"]
    assert get_modifier("nope") is DEFAULT_MODIFIER
    assert get_modifier("") is DEFAULT_MODIFIER
    assert DEFAULT_MODIFIER.is_default


def test_scaled_costs():
    assert get_modifier("BINARY").scaled(3) == 6
    assert DEFAULT_MODIFIER.scaled(3) == 3


# =============================================================================
# Per-Action Hooks
# =============================================================================

def test_pulse_passive_detection_and_free_cloak(make_engine):
    engine = make_engine()
    gs = engine.state
    gs.mod = get_modifier("PULSE")

    engine.execute("pass")
    assert gs.player.detection == pytest.approx(0.10)

    engine.execute("cloak")
    assert gs.player.data == 16


def test_epoch_action_limit(make_engine):
    engine = make_engine()
    gs = engine.state
    gs.mod = get_modifier("EPOCH")
    gs.action_count = 23

    engine.execute("pass")
    assert not gs.lost

    engine.execute("pass")
    assert gs.lost
    assert gs.loss_reason == LossReason.TIME_EXPIRED
    assert gs.player.detection < 1.0


def test_flux_rewires_on_cadence(make_engine):
    engine = make_engine()
    gs = engine.state
    gs.mod = get_modifier("FLUX")
    gs.action_count = 4
    edges_before = set(gs.network.edge_list())

    entries = engine.execute("pass")

    assert any("NETWORK FLUX" in e.text for e in entries)
    assert len(gs.network.edge_list()) == len(edges_before)
    assert set(gs.network.edge_list()) != edges_before
    assert gs.network.is_connected()


# =============================================================================
# Runtime Reconciliation
# =============================================================================

def test_hidden_targets_toggle(make_state):
    gs = make_state()
    gs.network.nodes[9].is_target = False

    reconcile_modifier(gs, get_modifier("QUBIT"))
    for node_id in (1, 8):
        node = gs.network.nodes[node_id]
        assert not node.is_target
        assert node.internal_target

    reconcile_modifier(gs, DEFAULT_MODIFIER)
    for node_id in (1, 8):
        node = gs.network.nodes[node_id]
        assert node.is_target
        assert not node.internal_target


def test_cracked_target_stays_visible(make_state):
    gs = make_state()
    gs.network.nodes[1].state = NodeState.CRACKED

    reconcile_modifier(gs, get_modifier("QUBIT"))

    assert gs.network.nodes[1].is_target
    assert gs.network.nodes[8].internal_target


def test_dev_mod_switch_is_not_an_action(make_engine):
    engine = make_engine()
    gs = engine.state

    entries = engine.execute("dev_mod qubit")

    assert gs.mod is MODIFIERS["QUBIT"]
    assert not gs.network.nodes[1].is_target
    assert gs.action_count == 0
    assert "QUBIT" in entries[1].text

    engine.execute("dev_mod none")
    assert gs.mod is DEFAULT_MODIFIER
    assert gs.network.nodes[1].is_target


def test_dev_mod_lists_and_rejects(make_engine):
    engine = make_engine()
    listing = engine.execute("dev_mod")
    assert len(listing) == 1 + 1 + 19

    entries = engine.execute("dev_mod BOGUS")
    assert entries[-1].type == EntryType.ERROR
    assert engine.state.mod is DEFAULT_MODIFIER


def test_reveal_counts_only_still_hidden_targets(make_engine):
    engine = make_engine(start=1)
    engine.execute("dev_mod qubit")
    engine.execute("crack")

    entries = engine.execute("dev_mod none")

    assert any(e.text.strip() == "2 hidden target(s) revealed." for e in entries)
    assert not any(n.internal_target for n in engine.state.network)


def test_overlord_target_toggle(make_state):
    gs = make_state()
    overlord = gs.network.overlord

    reconcile_modifier(gs, get_modifier("KERNEL"))
    assert overlord.is_target

    reconcile_modifier(gs, DEFAULT_MODIFIER)
    assert not overlord.is_target
    assert not overlord.internal_target


def test_overlord_target_respects_hidden_targets(make_state):
    gs = make_state()
    hidden_kernel = replace(get_modifier("KERNEL"), hidden_targets=True)

    reconcile_modifier(gs, hidden_kernel)

    overlord = gs.network.overlord
    assert not overlord.is_target
    assert overlord.internal_target


def test_immediate_overlord_activation(make_state):
    gs = make_state()
    reconcile_modifier(gs, get_modifier("EGO"))
    assert gs.overlord.active

    gs = make_state()
    gs.overlord.neutralized = True
    reconcile_modifier(gs, get_modifier("EGO"))
    assert not gs.overlord.active


def test_pre_discovered_network(make_state):
    gs = make_state(discover=False)
    reconcile_modifier(gs, get_modifier("BREACH"))
    assert not gs.network.nodes_in_state(NodeState.UNDISCOVERED)
    # Starting detection is structural
    assert gs.player.detection == 0.0


def test_rival_counter_clamped(make_state):
    gs = make_state()
    gs.rival = RivalHacker(current_node=4, move_counter=3)
    reconcile_modifier(gs, get_modifier("CACHE"))
    assert gs.rival.move_counter == 2


def test_structural_changes_reported_not_applied(make_state):
    gs = make_state()
    entries = reconcile_modifier(gs, get_modifier("VOID"))

    assert len(gs.network) == 10
    assert sum(1 for n in gs.network if n.node_type.name == "SERVER") == 2
    assert any("no_servers" in e.text for e in entries)


def test_costs_follow_switched_modifier(make_engine):
    engine = make_engine()
    engine.execute("dev_mod PROXY")
    engine.execute("scan")
    assert engine.state.player.data == 13
