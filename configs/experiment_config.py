"""
Configuration file for tree generation and depth inference experiments.
"""

import math
from dataclasses import dataclass, field
from typing import Literal, Optional

from lsystem_trees.interpreter import TurtleState


@dataclass
class CanvasConfig:
    """Configuration for the drawing surface."""
    width: int = 600
    height: int = 600
    background: Optional[str] = None

    @property
    def start_position(self):
        """Trunk base: horizontally centered on the bottom edge."""
        return (self.width / 2, self.height)


@dataclass
class TreeConfig:
    """Configuration for growing and drawing the tree."""
    start_length: float = 15.0
    start_width: float = 6.0
    start_angle: float = -math.pi / 2
    min_length: float = 2.0
    reveal_delay_ms: int = 10
    max_generation_depth: int = 6


@dataclass
class InferenceConfig:
    """Configuration for MCMC depth inference."""
    max_depth: int = 6
    n_samples: int = 5000
    likelihood_scale: float = 100.0
    burn_in: int = 0
    time_limit: Optional[float] = None
    show_progress: bool = True


@dataclass
class ExperimentConfig:
    """Full experiment configuration."""
    experiment_name: str = "sls_tree"
    grammar_type: Literal["tree", "binary_tree"] = "tree"
    random_seed: Optional[int] = 42
    fixed_depth: Optional[int] = None  # None draws the depth at random

    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)

    save_dir: str = "./outputs"

    def initial_state(self):
        """Turtle state at the base of the trunk."""
        x, y = self.canvas.start_position
        return TurtleState(
            x=x,
            y=y,
            angle=self.tree.start_angle,
            length=self.tree.start_length,
            width=self.tree.start_width,
        )


# Predefined experiment configurations
DEFAULT_EXPERIMENT = ExperimentConfig()

QUICK_EXPERIMENT = ExperimentConfig(
    experiment_name="quick_test",
    tree=TreeConfig(max_generation_depth=4),
    inference=InferenceConfig(max_depth=4, n_samples=500, time_limit=30.0),
)

EXPERIMENTS = {
    'default': DEFAULT_EXPERIMENT,
    'quick': QUICK_EXPERIMENT,
}
