"""Squarified rectangle tiling (Bruls, Huizing and van Wijk).

Tiles are laid out row by row along the shorter side of the remaining space,
adding items to the current row while that keeps the worst aspect ratio from
getting worse. Areas are exactly proportional to the weights and the tiles
partition the container.
"""

from __future__ import annotations

from collections.abc import Sequence

Rect = tuple[float, float, float, float]


def _worst_ratio(row: Sequence[float], side: float) -> float:
    total = sum(row)
    if total <= 0 or side <= 0:
        return float("inf")
    largest, smallest = max(row), min(row)
    side_sq = side * side
    total_sq = total * total
    return max(side_sq * largest / total_sq, total_sq / (side_sq * smallest))


def squarify(weights: Sequence[float], x: float, y: float, width: float, height: float) -> list[Rect]:
    """Tile a rectangle into one sub-rectangle per weight.

    Args:
        weights: Positive weights, ideally sorted descending.
        x: Container left.
        y: Container top.
        width: Container width.
        height: Container height.

    Returns:
        `(x, y, width, height)` per weight, in input order.

    Raises:
        ValueError: When a weight is not positive.
    """

    if any(weight <= 0 for weight in weights):
        raise ValueError("squarify weights must be positive.")
    total = sum(weights)
    if not weights or width <= 0 or height <= 0:
        return [(x, y, 0.0, 0.0) for _ in weights]

    scale = width * height / total
    areas = [weight * scale for weight in weights]
    rects: list[Rect] = []
    i = 0
    while i < len(areas):
        side = min(width, height)
        row = [areas[i]]
        j = i + 1
        while j < len(areas) and _worst_ratio(row + [areas[j]], side) <= _worst_ratio(row, side):
            row.append(areas[j])
            j += 1
        row_total = sum(row)
        last_row = j == len(areas)
        if width >= height:
            thickness = width if last_row else row_total / height
            cursor = y
            for k, area in enumerate(row):
                extent = (y + height - cursor) if k == len(row) - 1 else area / thickness
                rects.append((x, cursor, thickness, extent))
                cursor += extent
            x += thickness
            width = max(0.0, width - thickness)
        else:
            thickness = height if last_row else row_total / width
            cursor = x
            for k, area in enumerate(row):
                extent = (x + width - cursor) if k == len(row) - 1 else area / thickness
                rects.append((cursor, y, extent, thickness))
                cursor += extent
            y += thickness
            height = max(0.0, height - thickness)
        i = j
    return rects
