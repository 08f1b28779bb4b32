"""Pure geometry and statistics package for chart layouts.

This package contains deterministic, testable computations (quantiles,
hierarchical roll-ups, scales, curve interpolation, palettes) that operate on
in-memory inputs. It must not import Django or draw anything.
"""

from .hierarchy import HierarchyNode, rollup
from .quantiles import BoxStats, box_stats, quartiles

__all__ = ["BoxStats", "HierarchyNode", "box_stats", "quartiles", "rollup"]
