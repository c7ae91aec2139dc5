"""
Bayesian inference of the expansion depth behind an observed leaf count.

The generative model draws a depth uniformly from {0, ..., max_depth},
expands the grammar's axiom to that depth and counts the leaves. A soft-match
likelihood exp(-|simulated - observed| / scale) ties the simulation to the
observation. The posterior over depth is approximated with a pseudo-marginal
Metropolis-Hastings chain whose visit counts form a normalized histogram.
"""

import time
from dataclasses import dataclass
from functools import partial

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from .errors import InvalidConfigurationError, NumericDegeneracyError


DEFAULT_LIKELIHOOD_SCALE = 100.0


def soft_match_log_likelihood(simulated, observed, scale=DEFAULT_LIKELIHOOD_SCALE):
    """Log of exp(-|simulated - observed| / scale)."""
    return -abs(simulated - observed) / scale


class DepthPosterior:
    """
    Visit histogram over depths 0..max_depth.

    Visit counts are the unnormalized weights of the approximate posterior.
    """

    def __init__(self, max_depth):
        self.depths = np.arange(max_depth + 1)
        self.visits = np.zeros(max_depth + 1, dtype=np.int64)

    def record(self, depth):
        self.visits[depth] += 1

    @property
    def total(self):
        return int(self.visits.sum())

    @property
    def log_weights(self):
        """Unnormalized log-weights; -inf for depths never visited."""
        with np.errstate(divide='ignore'):
            return np.log(self.visits.astype(float))

    @property
    def probabilities(self):
        if self.total == 0:
            raise NumericDegeneracyError("posterior has no recorded samples")
        return self.visits / self.total

    def map_depth(self):
        """Depth with the largest posterior mass; ties go to the smaller depth."""
        return int(np.argmax(self.probabilities))

    def expectation(self):
        return float(np.dot(self.depths, self.probabilities))

    def as_dict(self):
        return {int(d): float(p) for d, p in zip(self.depths, self.probabilities)}

    def to_frame(self):
        """
        Tabulate the posterior.

        Returns:
            pd.DataFrame: Columns 'depth', 'visits', 'log_weight', 'probability'
        """
        return pd.DataFrame({
            'depth': self.depths,
            'visits': self.visits,
            'log_weight': self.log_weights,
            'probability': self.probabilities,
        })


@dataclass
class DepthEstimate:
    """Result of a depth inference run."""
    map_depth: int
    expected_depth: float
    posterior: dict
    acceptance_rate: float
    n_samples: int
    truncated: bool
    distribution: DepthPosterior


def _check_count(value, name, minimum):
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidConfigurationError(f"{name} must be >= {minimum}, got {value}")


def infer_depth(observed_leaves, max_depth, sample_budget, grammar, *,
                likelihood_scale=DEFAULT_LIKELIHOOD_SCALE, log_likelihood=None,
                burn_in=0, time_limit=None, rng=None, progress=False):
    """
    Estimate the expansion depth that produced `observed_leaves`.

    Each iteration proposes a depth uniformly at random and simulates its leaf
    count with a fresh expansion of the axiom. The current state keeps the
    log-weight of its own simulation, so the chain targets prior x likelihood
    marginalized over the simulation noise.

    Args:
        observed_leaves (int): Leaf count of the observed tree
        max_depth (int): Largest candidate depth (prior is uniform on 0..max_depth)
        sample_budget (int): Number of recorded MCMC iterations
        grammar (StochasticGrammar): Grammar used to simulate trees
        likelihood_scale (float): Leaf-count mismatch scale (default: 100)
        log_likelihood (callable, optional): f(simulated, observed) -> float;
            overrides the soft-match likelihood
        burn_in (int): Iterations run before visits are recorded
        time_limit (float, optional): Soft cap in seconds on the sampling loop
        rng: numpy Generator; defaults to the global numpy random state
        progress (bool): Show a tqdm progress bar

    Returns:
        DepthEstimate: MAP depth, posterior mean, normalized posterior and
                       chain diagnostics

    Raises:
        InvalidConfigurationError: On invalid arguments, before sampling
        NumericDegeneracyError: If no recorded sample has non-zero weight
    """
    _check_count(observed_leaves, "observed_leaves", 0)
    _check_count(max_depth, "max_depth", 0)
    _check_count(sample_budget, "sample_budget", 1)
    _check_count(burn_in, "burn_in", 0)
    if not likelihood_scale > 0 or not np.isfinite(likelihood_scale):
        raise InvalidConfigurationError(
            f"likelihood_scale must be a positive number, got {likelihood_scale!r}")
    if time_limit is not None and not time_limit > 0:
        raise InvalidConfigurationError(f"time_limit must be positive, got {time_limit!r}")

    rng = np.random if rng is None else rng
    if log_likelihood is None:
        log_likelihood = partial(soft_match_log_likelihood, scale=likelihood_scale)

    n_depths = max_depth + 1

    def log_weight(depth):
        # Uniform prior, so only the likelihood matters
        return log_likelihood(grammar.simulate_leaves(depth, rng=rng), observed_leaves)

    posterior = DepthPosterior(max_depth)
    current = int(rng.choice(n_depths))
    current_lw = log_weight(current)

    iterations = 0
    accepted = 0
    finite_visits = 0
    truncated = False
    start = time.monotonic()

    steps = range(burn_in + sample_budget)
    if progress:
        steps = tqdm(steps, desc="mcmc", leave=False)

    for step in steps:
        if time_limit is not None and time.monotonic() - start > time_limit:
            truncated = True
            break

        iterations += 1
        proposal = int(rng.choice(n_depths))
        proposal_lw = log_weight(proposal)
        if proposal_lw >= current_lw or rng.random() < np.exp(proposal_lw - current_lw):
            current, current_lw = proposal, proposal_lw
            accepted += 1

        if step >= burn_in:
            posterior.record(current)
            if np.isfinite(current_lw):
                finite_visits += 1

    if progress:
        steps.close()

    if posterior.total == 0:
        raise NumericDegeneracyError("no samples recorded before the time limit")
    if finite_visits == 0:
        raise NumericDegeneracyError(
            "all posterior samples have zero likelihood; MAP depth is undefined")

    return DepthEstimate(
        map_depth=posterior.map_depth(),
        expected_depth=posterior.expectation(),
        posterior=posterior.as_dict(),
        acceptance_rate=accepted / max(iterations, 1),
        n_samples=posterior.total,
        truncated=truncated,
        distribution=posterior,
    )
