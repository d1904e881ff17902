# =============================================================================
# NetSpike - Backend Package
# =============================================================================
"""
NetSpike Backend

A single-player, turn-based hacking game played through typed commands.
The player moves across a procedurally generated network, cracks nodes and
plants spikes on targets while an escalating detection system, trace
programs and a rival hacker work against them.
"""

__version__ = "0.1.0"
