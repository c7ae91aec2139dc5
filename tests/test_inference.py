import math
import time

import numpy as np
import pandas as pd
import pytest

from lsystem_trees import (
    DepthPosterior,
    InvalidConfigurationError,
    NumericDegeneracyError,
    infer_depth,
    soft_match_log_likelihood,
)


class NoSamplingGrammar:
    """Fails the test if the estimator simulates anything."""

    def simulate_leaves(self, depth, rng=None):
        raise AssertionError("sampling started before validation")


class SlowGrammar:
    """Every simulation outlasts a short time limit."""

    def simulate_leaves(self, depth, rng=None):
        time.sleep(0.05)
        return depth


class TestValidation:
    @pytest.mark.parametrize("kwargs", [
        dict(observed_leaves=5, max_depth=-1, sample_budget=10),
        dict(observed_leaves=5, max_depth=3, sample_budget=0),
        dict(observed_leaves=-1, max_depth=3, sample_budget=10),
        dict(observed_leaves=5, max_depth=3.0, sample_budget=10),
        dict(observed_leaves=5, max_depth=3, sample_budget=True),
    ])
    def test_rejects_invalid_arguments(self, kwargs) -> None:
        with pytest.raises(InvalidConfigurationError):
            infer_depth(grammar=NoSamplingGrammar(), **kwargs)

    @pytest.mark.parametrize("scale", [0, -1.0, float("inf"), float("nan")])
    def test_rejects_invalid_scale(self, scale) -> None:
        with pytest.raises(InvalidConfigurationError):
            infer_depth(5, 3, 10, NoSamplingGrammar(), likelihood_scale=scale)

    def test_rejects_negative_burn_in(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            infer_depth(5, 3, 10, NoSamplingGrammar(), burn_in=-1)

    def test_rejects_non_positive_time_limit(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            infer_depth(5, 3, 10, NoSamplingGrammar(), time_limit=0)


class TestPosterior:
    def test_normalized(self, tree_grammar, rng) -> None:
        estimate = infer_depth(10, 4, 500, tree_grammar, rng=rng)
        assert sorted(estimate.posterior) == [0, 1, 2, 3, 4]
        assert sum(estimate.posterior.values()) == pytest.approx(1.0)
        assert all(p >= 0 for p in estimate.posterior.values())
        assert estimate.n_samples == 500

    def test_expectation_and_map(self, tree_grammar, rng) -> None:
        estimate = infer_depth(10, 4, 500, tree_grammar, rng=rng)
        mean = sum(d * p for d, p in estimate.posterior.items())
        assert estimate.expected_depth == pytest.approx(mean)
        assert estimate.posterior[estimate.map_depth] == max(estimate.posterior.values())

    @pytest.mark.parametrize("seed", range(5))
    def test_zero_leaves_favours_depth_zero(self, tree_grammar, seed) -> None:
        estimate = infer_depth(0, 3, 2000, tree_grammar, rng=np.random.default_rng(seed))
        assert estimate.map_depth == 0
        assert estimate.posterior[0] > 0.5

    def test_zero_leaves_with_sharper_likelihood(self, tree_grammar, rng) -> None:
        estimate = infer_depth(0, 3, 2000, tree_grammar, likelihood_scale=1.0, rng=rng)
        assert estimate.posterior[0] > 0.95

    def test_recovers_depth_of_binary_tree(self, binary_grammar, rng) -> None:
        observed = binary_grammar.simulate_leaves(3)
        estimate = infer_depth(observed, 5, 2000, binary_grammar,
                               likelihood_scale=1.0, rng=rng)
        assert estimate.map_depth == 3
        assert estimate.expected_depth == pytest.approx(3.0, abs=0.2)

    def test_single_candidate_depth(self, tree_grammar, rng) -> None:
        estimate = infer_depth(3, 0, 50, tree_grammar, rng=rng)
        assert estimate.posterior == {0: 1.0}
        assert estimate.map_depth == 0
        assert estimate.expected_depth == 0.0

    def test_burn_in_not_recorded(self, tree_grammar, rng) -> None:
        estimate = infer_depth(5, 3, 200, tree_grammar, burn_in=100, rng=rng)
        assert estimate.n_samples == 200
        assert 0.0 < estimate.acceptance_rate <= 1.0

    def test_time_limit_truncates(self, tree_grammar, rng) -> None:
        estimate = infer_depth(5, 3, 10 ** 8, tree_grammar, time_limit=0.2, rng=rng)
        assert estimate.truncated
        assert 0 < estimate.n_samples < 10 ** 8
        assert sum(estimate.posterior.values()) == pytest.approx(1.0)

    def test_time_limit_before_any_sample(self, rng) -> None:
        # The only step that runs is still inside burn-in
        with pytest.raises(NumericDegeneracyError, match="time limit"):
            infer_depth(2, 3, 10, SlowGrammar(), burn_in=5, time_limit=0.01, rng=rng)

    def test_progress_bar(self, tree_grammar, rng) -> None:
        estimate = infer_depth(2, 2, 50, tree_grammar, rng=rng, progress=True)
        assert estimate.n_samples == 50

    def test_zero_likelihood_everywhere(self, tree_grammar, rng) -> None:
        with pytest.raises(NumericDegeneracyError):
            infer_depth(5, 3, 100, tree_grammar, rng=rng,
                        log_likelihood=lambda simulated, observed: -np.inf)


class TestLikelihood:
    def test_soft_match(self) -> None:
        assert soft_match_log_likelihood(7, 7) == 0.0
        assert soft_match_log_likelihood(0, 50) == pytest.approx(-0.5)
        assert soft_match_log_likelihood(50, 0, scale=10.0) == pytest.approx(-5.0)

    def test_huge_mismatch_stays_finite(self) -> None:
        log_weight = soft_match_log_likelihood(10 ** 7, 0)
        assert math.isfinite(log_weight)
        assert math.exp(log_weight) == 0.0


class TestDepthPosterior:
    def test_histogram(self) -> None:
        posterior = DepthPosterior(3)
        for depth in [0, 2, 2, 3]:
            posterior.record(depth)
        assert posterior.total == 4
        assert posterior.as_dict() == {0: 0.25, 1: 0.0, 2: 0.5, 3: 0.25}
        assert posterior.map_depth() == 2
        assert posterior.expectation() == pytest.approx(1.75)

    def test_log_weights(self) -> None:
        posterior = DepthPosterior(2)
        posterior.record(0)
        posterior.record(0)
        assert posterior.log_weights[0] == pytest.approx(math.log(2))
        assert posterior.log_weights[1] == -np.inf

    def test_ties_go_to_smaller_depth(self) -> None:
        posterior = DepthPosterior(2)
        posterior.record(2)
        posterior.record(1)
        assert posterior.map_depth() == 1

    def test_empty_is_degenerate(self) -> None:
        with pytest.raises(NumericDegeneracyError):
            DepthPosterior(2).map_depth()

    def test_to_frame(self) -> None:
        posterior = DepthPosterior(1)
        posterior.record(1)
        frame = posterior.to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ['depth', 'visits', 'log_weight', 'probability']
        assert frame['probability'].tolist() == [0.0, 1.0]
