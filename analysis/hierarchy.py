"""Weighted hierarchies for treemap and sunburst layouts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .aggregations import sum_by_key

ROOT_NAME = "root"


@dataclass(frozen=True, slots=True)
class HierarchyNode:
    """A node in a weighted hierarchy.

    Attributes:
        name: Category label (the synthetic root is named "root").
        value: Summed weight of the node (for the root, the sum of its children).
        depth: 0 for the root, 1 for its children.
        children: Child nodes sorted by descending value.
    """

    name: str
    value: float
    depth: int = 0
    children: tuple["HierarchyNode", ...] = ()

    def leaves(self) -> tuple["HierarchyNode", ...]:
        """Return the leaf nodes under this node, in order."""

        if not self.children:
            return (self,)
        out: list[HierarchyNode] = []
        for child in self.children:
            out.extend(child.leaves())
        return tuple(out)

    def positive_children(self) -> tuple["HierarchyNode", ...]:
        """Return children that can occupy area (value > 0)."""

        return tuple(child for child in self.children if child.value > 0)


def rollup(
    rows: Iterable[Mapping[str, object]],
    *,
    category_field: str,
    value_field: str,
) -> HierarchyNode:
    """Build a one-level hierarchy: a synthetic root with one child per category.

    Args:
        rows: Data rows.
        category_field: Column naming the category of each row.
        value_field: Column holding the weight; non-numeric values are skipped.

    Returns:
        The root HierarchyNode. Children are sorted by descending value, ties
        keep first-seen order. The root value sums the positive children only,
        so it equals the total area a tiling distributes.
    """

    totals = sum_by_key(rows, key_field=category_field, value_field=value_field)
    ordered = sorted(totals.items(), key=lambda kv: -kv[1])
    children = tuple(HierarchyNode(name=name, value=value, depth=1) for name, value in ordered)
    total = sum(child.value for child in children if child.value > 0)
    return HierarchyNode(name=ROOT_NAME, value=total, depth=0, children=children)
