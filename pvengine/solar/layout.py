"""Panel placement on rectangular roof segments."""

from __future__ import annotations

import math
from dataclasses import replace

from pvengine.catalog.models import PanelSpec
from pvengine.project import RoofSegment


def grid_dimensions(segment: RoofSegment, panel: PanelSpec) -> tuple[int, int]:
    """Rows and columns of portrait panels that fit inside the segment.

    The usable rectangle is the segment minus ``edge_margin`` on every
    side.  Each column takes ``panel width + column_spacing`` and each
    row ``panel height + row_spacing``; the last column and row need no
    trailing gap.
    """
    usable_w = max(0.0, segment.width - 2.0 * segment.edge_margin)
    usable_h = max(0.0, segment.height - 2.0 * segment.edge_margin)
    if usable_w < panel.width_m or usable_h < panel.height_m:
        return 0, 0

    cols = math.floor((usable_w + segment.column_spacing) / (panel.width_m + segment.column_spacing))
    rows = math.floor((usable_h + segment.row_spacing) / (panel.height_m + segment.row_spacing))
    return rows, cols


def max_panels(segment: RoofSegment, panel: PanelSpec) -> int:
    rows, cols = grid_dimensions(segment, panel)
    return rows * cols


def auto_fill(segment: RoofSegment, panel: PanelSpec) -> RoofSegment:
    """Return a copy of *segment* filled with as many panels as fit."""
    return replace(segment, panels_count=max_panels(segment, panel))
