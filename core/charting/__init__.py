"""Declarative chart configuration, layout and rendering.

Charts are driven by `ChartConfiguration` objects plus data rows rather than
bespoke view logic. `render` dispatches a configuration to its family layout,
`paint` draws the layout on an SVG surface and `export` captures that surface
as PNG, SVG or PDF.
"""
