"""Static colour-key legend."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from typing import Iterable

from hurricaneviewer.core.models import LegendEntry
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)

# Layout in points: one swatch per row with its label to the right
ROW_HEIGHT_PT = 22.0
SWATCH_SIZE_PT = 16.0
TITLE_HEIGHT_PT = 26.0
PADDING_PT = 12.0
PANEL_WIDTH_PT = 190.0
LEGEND_DPI = 150


@dataclass(frozen=True)
class LegendRow:
    color: str
    label: str


@dataclass
class LegendPanel:
    """A titled vertical list of colour swatches."""

    title: str
    rows: list[LegendRow] = field(default_factory=list)

    def add(self, row: LegendRow) -> None:
        self.rows.append(row)


def build_legend(title: str, entries: Iterable[LegendEntry]) -> LegendPanel:
    """Create a panel with one row per entry, in order."""
    panel = LegendPanel(title=title)
    for entry in entries:
        panel.add(LegendRow(color=entry.color, label=entry.label))
    return panel


def render_legend(panel: LegendPanel, destination: pathlib.Path) -> pathlib.Path:
    """Draw the legend panel and save it as PNG."""
    import matplotlib.pyplot as plt
    from matplotlib.patches import Rectangle

    height_pt = 2 * PADDING_PT + TITLE_HEIGHT_PT + ROW_HEIGHT_PT * len(panel.rows)
    fig = plt.figure(figsize=(PANEL_WIDTH_PT / 72.0, height_pt / 72.0), dpi=LEGEND_DPI)
    try:
        # Axes in point units, origin at the top left
        ax = fig.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, PANEL_WIDTH_PT)
        ax.set_ylim(height_pt, 0)
        ax.axis("off")
        fig.patch.set_facecolor("white")

        ax.text(
            PADDING_PT,
            PADDING_PT,
            panel.title,
            fontsize=11,
            fontweight="bold",
            va="top",
            ha="left",
        )

        y = PADDING_PT + TITLE_HEIGHT_PT
        for row in panel.rows:
            ax.add_patch(
                Rectangle((PADDING_PT, y), SWATCH_SIZE_PT, SWATCH_SIZE_PT, facecolor=f"#{row.color}", edgecolor="none")
            )
            ax.text(
                PADDING_PT + SWATCH_SIZE_PT + 6,
                y + SWATCH_SIZE_PT / 2,
                row.label,
                fontsize=9,
                va="center",
                ha="left",
            )
            y += ROW_HEIGHT_PT

        destination.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(destination, dpi=LEGEND_DPI)
    finally:
        plt.close(fig)

    LOGGER.info("Saved legend with %d rows to %s", len(panel.rows), destination)
    return destination
