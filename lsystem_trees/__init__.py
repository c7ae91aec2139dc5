"""
Trees as Stochastic Lindenmayer Systems

This package grows branching trees with a stochastic L-system, draws them
with a turtle-graphics interpreter and infers the expansion depth of a tree
from its leaf count.
"""

from .errors import (
    LSystemError,
    MalformedGrammarError,
    UnbalancedBracketsError,
    InvalidConfigurationError,
    NumericDegeneracyError,
)
from .grammar import StochasticGrammar, expand, count_leaves, LEAF_SYMBOL
from .interpreter import (
    TurtleState,
    Segment,
    RenderContext,
    render,
    check_brackets,
)
from .inference import (
    DepthPosterior,
    DepthEstimate,
    infer_depth,
    soft_match_log_likelihood,
    DEFAULT_LIKELIHOOD_SCALE,
)
from .rendering import (
    SegmentRecorder,
    SvgRenderer,
    MatplotlibRenderer,
    plot_posterior,
)

__version__ = "0.1.0"
