"""
Renderer sinks for turtle segments and plots of the depth posterior.

A sink is any callable accepting a Segment. The interpreter never reads
anything back from a sink.
"""

import os

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection


class SegmentRecorder:
    """Collects emitted segments in render order."""

    def __init__(self):
        self.segments = []

    def __call__(self, segment):
        self.segments.append(segment)

    def __len__(self):
        return len(self.segments)


def _fmt(x, precision):
    if not x:
        x = 0.0
    s = f"{x:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s or "0"


class SvgRenderer(SegmentRecorder):
    """
    Writes segments as SVG <line> elements on a fixed-size canvas.

    Every line starts transparent and fades in after
    reveal_delay_ms * segment.index milliseconds, so the tree appears in the
    order it was drawn.
    """

    def __init__(self, width, height, reveal_delay_ms=10, fade_ms=250,
                 precision=2, background=None):
        super().__init__()
        self.width = width
        self.height = height
        self.reveal_delay_ms = reveal_delay_ms
        self.fade_ms = fade_ms
        self.precision = precision
        self.background = background

    def to_svg(self):
        p = self.precision
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_fmt(self.width, p)}" '
            f'height="{_fmt(self.height, p)}" '
            f'viewBox="0 0 {_fmt(self.width, p)} {_fmt(self.height, p)}">',
        ]
        if self.reveal_delay_ms:
            lines.append(
                "<style>line.tree{stroke-opacity:0;stroke-linecap:round;"
                f"animation:reveal {self.fade_ms}ms forwards}}"
                "@keyframes reveal{to{stroke-opacity:1}}</style>"
            )
        if self.background:
            lines.append(f'<rect width="100%" height="100%" fill="{self.background}"/>')

        for seg in self.segments:
            style = f"stroke:{seg.color};stroke-width:{_fmt(seg.width, p)}"
            if self.reveal_delay_ms:
                style += f";animation-delay:{seg.index * self.reveal_delay_ms}ms"
            lines.append(
                f'<line class="tree" x1="{_fmt(seg.start[0], p)}" y1="{_fmt(seg.start[1], p)}" '
                f'x2="{_fmt(seg.end[0], p)}" y2="{_fmt(seg.end[1], p)}" style="{style}"/>'
            )
        lines.append("</svg>")
        return "\n".join(lines) + "\n"

    def save(self, path):
        os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_svg())


class MatplotlibRenderer(SegmentRecorder):
    """
    Draws segments on a matplotlib Axes in canvas coordinates (y grows down).
    """

    def __init__(self, width, height, ax=None, dpi=100):
        super().__init__()
        if ax is None:
            _, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.ax = ax
        self.fig = ax.figure
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.set_aspect("equal")
        ax.axis("off")

    def draw(self):
        """Add the collected segments to the axes, in render order."""
        if not self.segments:
            return None
        collection = LineCollection(
            [(s.start, s.end) for s in self.segments],
            colors=[s.color for s in self.segments],
            linewidths=[s.width for s in self.segments],
            capstyle="round",
        )
        self.ax.add_collection(collection)
        return collection

    def save(self, path):
        self.draw()
        self.fig.savefig(path, bbox_inches="tight")
        plt.close(self.fig)


def plot_posterior(estimate, ax=None, title=None):
    """
    Bar chart of the depth posterior with the MAP depth highlighted.

    Args:
        estimate (DepthEstimate): Result of infer_depth
        ax (matplotlib.axes.Axes, optional): Axes to draw on
        title (str, optional): Plot title

    Returns:
        matplotlib.figure.Figure: Figure containing the plot
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 4))

    depths = list(estimate.posterior)
    probs = [estimate.posterior[d] for d in depths]
    colors = ["tab:green" if d == estimate.map_depth else "tab:gray" for d in depths]

    ax.bar(depths, probs, color=colors)
    ax.axvline(estimate.expected_depth, color="tab:brown", linestyle="--",
               label=f"E[depth] = {estimate.expected_depth:.2f}")
    ax.set_xticks(depths)
    ax.set_xlabel("depth")
    ax.set_ylabel("posterior probability")
    ax.set_title(title or f"MAP depth = {estimate.map_depth}")
    ax.legend()
    return ax.figure
