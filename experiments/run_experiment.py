"""
Main experiment runner for stochastic L-system trees.

This script runs a single pass: grow a tree at a random depth, draw it, count
its leaves, and infer the depth back from the leaf count.
"""

import argparse
import json
import sys
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from lsystem_trees import (
    StochasticGrammar,
    RenderContext,
    SvgRenderer,
    MatplotlibRenderer,
    render,
    infer_depth,
    plot_posterior,
)
from lsystem_trees.interpreter import LEAF_COLOR
from configs.grammars import get_grammar
from configs.experiment_config import ExperimentConfig, EXPERIMENTS


def setup_experiment(config: ExperimentConfig):
    """Setup experiment directory and save the configuration."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    exp_dir = Path(config.save_dir) / f"{config.experiment_name}_{timestamp}"
    exp_dir.mkdir(parents=True, exist_ok=True)

    with open(exp_dir / "config.json", "w") as f:
        json.dump(asdict(config), f, indent=2)

    return exp_dir


def grow_tree(config: ExperimentConfig, grammar):
    """Expand the axiom to a fixed or randomly chosen depth."""
    print("=" * 60)
    print("GROWING TREE")
    print("=" * 60)

    if config.fixed_depth is None:
        depth = int(np.random.choice(config.tree.max_generation_depth + 1))
    else:
        depth = config.fixed_depth
    print(f"Chosen depth: {depth}")

    statement = grammar.expand(grammar.axiom, depth)
    leaves = grammar.count_leaves(statement)

    print(f"Statement length: {len(statement)}")
    print(f"Leaves: {leaves}")

    return depth, statement, leaves


def draw_tree(config: ExperimentConfig, statement, exp_dir):
    """Render the statement to SVG and PNG."""
    print("\n" + "=" * 60)
    print("DRAWING TREE")
    print("=" * 60)

    svg = SvgRenderer(
        config.canvas.width,
        config.canvas.height,
        reveal_delay_ms=config.tree.reveal_delay_ms,
        background=config.canvas.background,
    )
    figure = MatplotlibRenderer(config.canvas.width, config.canvas.height)

    def sink(segment):
        svg(segment)
        figure(segment)

    context = RenderContext(sink=sink)
    segments = render(statement, config.initial_state(), context=context,
                      min_length=config.tree.min_length)

    svg.save(exp_dir / "tree.svg")
    figure.save(exp_dir / "tree.png")

    n_leaves = sum(1 for s in segments if s.color == LEAF_COLOR)
    print(f"Segments drawn: {len(segments)} ({n_leaves} leaves)")

    return segments


def estimate_depth(config: ExperimentConfig, grammar, leaves, exp_dir):
    """Infer the expansion depth from the observed leaf count."""
    print("\n" + "=" * 60)
    print("INFERRING DEPTH")
    print("=" * 60)

    inference = config.inference
    estimate = infer_depth(
        leaves,
        inference.max_depth,
        inference.n_samples,
        grammar,
        likelihood_scale=inference.likelihood_scale,
        burn_in=inference.burn_in,
        time_limit=inference.time_limit,
        progress=inference.show_progress,
    )

    if estimate.truncated:
        print(f"Time limit reached after {estimate.n_samples} samples")
    print(f"Posterior: {[round(p, 4) for p in estimate.posterior.values()]}")
    print(f"Expected depth: {estimate.expected_depth:.3f}")
    print(f"MAP depth: {estimate.map_depth}")
    print(f"Acceptance rate: {estimate.acceptance_rate:.3f}")

    estimate.distribution.to_frame().to_csv(exp_dir / "posterior.csv", index=False)
    fig = plot_posterior(estimate)
    fig.savefig(exp_dir / "posterior.png", bbox_inches="tight")
    plt.close(fig)

    return estimate


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", choices=sorted(EXPERIMENTS), default="default",
                        help="Predefined experiment configuration")
    parser.add_argument("--seed", type=int, default=None, help="Override the random seed")
    parser.add_argument("--depth", type=int, default=None,
                        help="Grow the tree at this depth instead of a random one")
    parser.add_argument("--save-dir", default=None, help="Override the output directory")
    parser.add_argument("--no-progress", action="store_true",
                        help="Hide the MCMC progress bar")
    return parser.parse_args(argv)


def build_config(args):
    """Apply command-line overrides to the selected configuration."""
    config = EXPERIMENTS[args.config]
    overrides = {}
    if args.seed is not None:
        overrides["random_seed"] = args.seed
    if args.depth is not None:
        overrides["fixed_depth"] = args.depth
    if args.save_dir is not None:
        overrides["save_dir"] = args.save_dir
    if args.no_progress:
        overrides["inference"] = replace(config.inference, show_progress=False)
    return replace(config, **overrides)


def main(argv=None):
    """Main experiment pipeline."""
    config = build_config(parse_args(argv))

    print("Starting experiment:", config.experiment_name)
    print("Grammar:", config.grammar_type)

    exp_dir = setup_experiment(config)
    print(f"Experiment directory: {exp_dir}")

    if config.random_seed is not None:
        np.random.seed(config.random_seed)

    grammar = StochasticGrammar(get_grammar(config.grammar_type))

    depth, statement, leaves = grow_tree(config, grammar)
    draw_tree(config, statement, exp_dir)
    estimate = estimate_depth(config, grammar, leaves, exp_dir)

    summary = {
        "chosen_depth": depth,
        "leaves": leaves,
        "posterior": estimate.posterior,
        "expected_depth": estimate.expected_depth,
        "map_depth": estimate.map_depth,
        "acceptance_rate": estimate.acceptance_rate,
        "n_samples": estimate.n_samples,
        "truncated": estimate.truncated,
    }
    with open(exp_dir / "summary.json", "w") as f:
        json.dump(summary, f, indent=2)

    print("\n" + "=" * 60)
    print("EXPERIMENT COMPLETE")
    print("=" * 60)
    print(f"Inferred depth: {estimate.map_depth}")
    print(f"Results saved to: {exp_dir}")

    return summary


if __name__ == "__main__":
    main()
