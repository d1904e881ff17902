# =============================================================================
# NetSpike - Runtime Modifier Switch
# =============================================================================
"""
Swap the active modifier of a running game.

Costs, cadences and detection rates are read live from ``GameState.mod``,
so most fields need nothing beyond the swap. The flags below describe state
that was already materialised at generation time and are brought in line
with the new modifier here. Structural generation fields are reported and
left alone.
"""

import logging
from typing import List

from .enums import NodeState, EntryType
from .data_structures import LogEntry
from .game_state import GameState
from .modifiers import ModifierConfig, STRUCTURAL_FIELDS

logger = logging.getLogger(__name__)


def _hide_targets(gs: GameState) -> int:
    """Visible targets that are not yet cracked become hidden"""
    hidden = 0
    for node in gs.network:
        if node.is_target and not node.is_compromised:
            node.is_target = False
            node.internal_target = True
            hidden += 1
    return hidden


def _reveal_targets(gs: GameState) -> int:
    revealed = 0
    for node in gs.network:
        if node.internal_target:
            node.internal_target = False
            if not node.is_target:
                node.is_target = True
                revealed += 1
    return revealed


def _mark_overlord_target(gs: GameState, enabled: bool):
    overlord = gs.network.overlord
    if not enabled:
        # A spiked Overlord stays accounted for
        if overlord.state != NodeState.SPIKED:
            overlord.is_target = False
            overlord.internal_target = False
        return
    if gs.mod.hidden_targets and not overlord.is_compromised:
        overlord.internal_target = True
    else:
        overlord.is_target = True


def reconcile_modifier(gs: GameState, new_mod: ModifierConfig) -> List[LogEntry]:
    """
    Make ``new_mod`` the active modifier and reconcile live state with it.

    Returns:
        Log entries describing what changed
    """
    old_mod = gs.mod
    changed = set(new_mod.changed_fields(old_mod))
    gs.mod = new_mod
    logger.info("Game %s modifier %s -> %s", gs.game_id, old_mod.key or "NONE", new_mod.key or "NONE")

    entries = [LogEntry(
        f">> MODIFIER SWITCH: {old_mod.key or 'NONE'} -> {new_mod.key or 'NONE'}",
        EntryType.WARNING,
    )]
    if not new_mod.is_default:
        entries.append(LogEntry(f"   {new_mod.name} - {new_mod.description}", EntryType.INFO))

    if "hidden_targets" in changed:
        if new_mod.hidden_targets:
            count = _hide_targets(gs)
            entries.append(LogEntry(f"   {count} target(s) hidden until cracked.", EntryType.INFO))
        else:
            count = _reveal_targets(gs)
            entries.append(LogEntry(f"   {count} hidden target(s) revealed.", EntryType.INFO))

    if "overlord_is_target" in changed:
        _mark_overlord_target(gs, new_mod.overlord_is_target)
        state = "now" if new_mod.overlord_is_target else "no longer"
        entries.append(LogEntry(f"   Overlord is {state} a target.", EntryType.INFO))

    if new_mod.overlord_immediate and not old_mod.overlord_immediate:
        if not gs.overlord.neutralized and not gs.overlord.active:
            gs.overlord.active = True
            entries.append(LogEntry("   Overlord activated.", EntryType.WARNING))

    if new_mod.all_discovered and not old_mod.all_discovered:
        discovered = gs.network.nodes_in_state(NodeState.UNDISCOVERED)
        for node in discovered:
            node.state = NodeState.DISCOVERED
        entries.append(LogEntry(f"   {len(discovered)} node(s) discovered.", EntryType.INFO))

    if "rival_move_interval" in changed and gs.rival is not None:
        gs.rival.move_counter = min(gs.rival.move_counter, new_mod.rival_move_interval)

    structural = [name for name in STRUCTURAL_FIELDS if name in changed]
    if structural:
        entries.append(LogEntry(
            f"   Not applied to the current network: {', '.join(structural)}",
            EntryType.SYSTEM,
        ))
    return entries
