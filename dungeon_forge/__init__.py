"""
Dungeon Forge
=============

Deterministic dungeon layout generation driven by node graphs.

A generator document (nodes, edges, constraints, parameters) is
interpreted against a seeded RNG to place rooms, connect them and
populate them. Without a usable graph a fixed seed-only generator
produces a linear start-to-boss dungeon instead.

Submodules:
- core: Definitions, errors, seeded RNG, layout data model
- generation: Room primitives, graph document model, interpreter, fallback
- evaluation: Constraint checks and distribution statistics
- pipeline: Single-request generation and batch simulation
- utils: networkx-based graph and layout analysis
"""

__version__ = "1.0.0"

__all__ = ['core', 'generation', 'evaluation', 'pipeline', 'utils']
