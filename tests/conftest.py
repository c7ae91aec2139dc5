import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from configs.grammars import BINARY_TREE_GRAMMAR, TREE_GRAMMAR
from lsystem_trees import StochasticGrammar, TurtleState


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def tree_grammar():
    return StochasticGrammar(TREE_GRAMMAR)


@pytest.fixture
def binary_grammar():
    return StochasticGrammar(BINARY_TREE_GRAMMAR)


@pytest.fixture
def origin_state():
    return TurtleState(x=0.0, y=0.0, angle=0.0, length=10.0, width=6.0)
