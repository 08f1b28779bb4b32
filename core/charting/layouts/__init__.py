"""Chart-family layout algorithms.

Every layout is a pure function `(config, rows) -> LayoutResult`; none of
them draws or touches shared state.
"""

from __future__ import annotations

from .boxplot import layout_box_plot
from .cartesian import layout_cartesian
from .gantt import layout_gantt
from .geo import layout_geo
from .heatmap import layout_heatmap
from .pie import layout_pie
from .sankey import layout_sankey
from .sunburst import layout_sunburst
from .table import layout_table
from .treemap import layout_treemap
from .waterfall import layout_waterfall

__all__ = [
    "layout_box_plot",
    "layout_cartesian",
    "layout_gantt",
    "layout_geo",
    "layout_heatmap",
    "layout_pie",
    "layout_sankey",
    "layout_sunburst",
    "layout_table",
    "layout_treemap",
    "layout_waterfall",
]
