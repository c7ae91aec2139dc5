import re

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from matplotlib.figure import Figure

from lsystem_trees import (
    DepthPosterior,
    MatplotlibRenderer,
    RenderContext,
    SegmentRecorder,
    SvgRenderer,
    plot_posterior,
    render,
)
from lsystem_trees.inference import DepthEstimate


def _estimate():
    posterior = DepthPosterior(3)
    for depth in [1, 2, 2, 3]:
        posterior.record(depth)
    return DepthEstimate(
        map_depth=posterior.map_depth(),
        expected_depth=posterior.expectation(),
        posterior=posterior.as_dict(),
        acceptance_rate=0.5,
        n_samples=posterior.total,
        truncated=False,
        distribution=posterior,
    )


class TestSegmentRecorder:
    def test_collects(self, origin_state, rng) -> None:
        recorder = SegmentRecorder()
        render("F[L]F", origin_state, context=RenderContext(sink=recorder), rng=rng)
        assert len(recorder) == 3


class TestSvgRenderer:
    def test_one_line_per_segment(self, origin_state, rng) -> None:
        svg = SvgRenderer(100, 80)
        render("F[L]F", origin_state, context=RenderContext(sink=svg), rng=rng)
        doc = svg.to_svg()

        assert doc.count("<line ") == 3
        assert 'width="100" height="80"' in doc
        assert re.findall(r"stroke:(\w+);", doc) == ["brown", "green", "brown"]

    def test_staggered_reveal(self, origin_state, rng) -> None:
        svg = SvgRenderer(100, 100, reveal_delay_ms=10)
        render("LLL", origin_state, context=RenderContext(sink=svg), rng=rng)
        assert re.findall(r"animation-delay:(\d+)ms", svg.to_svg()) == ["0", "10", "20"]

    def test_no_reveal(self, origin_state) -> None:
        svg = SvgRenderer(100, 100, reveal_delay_ms=0)
        render("L", origin_state, context=RenderContext(sink=svg))
        doc = svg.to_svg()
        assert "animation" not in doc
        assert 'x1="0" y1="0" x2="10" y2="0"' in doc

    def test_background(self) -> None:
        assert 'fill="white"' in SvgRenderer(10, 10, background="white").to_svg()

    def test_save(self, tmp_path, origin_state) -> None:
        svg = SvgRenderer(100, 100)
        render("L", origin_state, context=RenderContext(sink=svg))
        out = tmp_path / "nested" / "tree.svg"
        svg.save(out)
        assert out.read_text(encoding="utf-8").startswith("<?xml")


class TestMatplotlibRenderer:
    def test_draw(self, origin_state, rng) -> None:
        figure = MatplotlibRenderer(200, 100)
        render("F[+L][-L]", origin_state, context=RenderContext(sink=figure), rng=rng)
        collection = figure.draw()
        assert isinstance(collection, LineCollection)
        assert len(collection.get_segments()) == 3
        # canvas coordinates: y grows downwards
        assert figure.ax.get_ylim() == (100, 0)
        plt.close(figure.fig)

    def test_draw_empty(self) -> None:
        figure = MatplotlibRenderer(50, 50)
        assert figure.draw() is None
        plt.close(figure.fig)

    def test_save(self, tmp_path, origin_state) -> None:
        figure = MatplotlibRenderer(100, 100)
        render("LL", origin_state, context=RenderContext(sink=figure))
        out = tmp_path / "tree.png"
        figure.save(out)
        assert out.stat().st_size > 0


class TestPlotPosterior:
    def test_bars(self) -> None:
        fig = plot_posterior(_estimate())
        assert isinstance(fig, Figure)
        ax = fig.axes[0]
        assert len(ax.patches) == 4
        assert ax.get_title() == "MAP depth = 2"
        plt.close(fig)

    def test_existing_axes(self) -> None:
        fig, ax = plt.subplots()
        assert plot_posterior(_estimate(), ax=ax, title="depth") is fig
        assert ax.get_title() == "depth"
        plt.close(fig)
