from __future__ import annotations

from typing import Iterable

from contracts.layout import Fragment, Row


def group_rows(fragments: Iterable[Fragment], *, y_tolerance: float) -> list[Row]:
    """
    Partition fragments into rows, top to bottom.

    Sequential single-pass clustering: fragments are swept in ascending mid_y
    order and each one is compared against the LAST fragment appended to the
    current row (not a row centroid). A chain of fragments that are pairwise
    within tolerance therefore stays in one row even when its ends are further
    apart than `y_tolerance`.

    Each row is then sorted by min_x (left-to-right reading order).
    """

    if y_tolerance < 0:
        raise ValueError("y_tolerance must be >= 0")

    # sorted() is stable, so equal keys keep input order (deterministic).
    sweep = sorted(fragments, key=lambda f: f.mid_y)

    rows: list[list[Fragment]] = []
    current: list[Fragment] = []

    for frag in sweep:
        if current and abs(frag.mid_y - current[-1].mid_y) <= y_tolerance:
            current.append(frag)
            continue
        if current:
            rows.append(current)
        current = [frag]

    if current:
        rows.append(current)

    return [Row(fragments=tuple(sorted(r, key=lambda f: f.min_x))) for r in rows]
