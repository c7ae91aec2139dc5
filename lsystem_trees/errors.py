"""
Exceptions raised by the L-system engine, the turtle interpreter and the
depth estimator.
"""


class LSystemError(Exception):
    """Base class for every error raised by this package."""


class MalformedGrammarError(LSystemError, ValueError):
    """A grammar spec is invalid, or a symbol has no production."""


class UnbalancedBracketsError(LSystemError, ValueError):
    """A derivation string has a stray ']' or an unterminated '['."""

    def __init__(self, message, index):
        super().__init__(f"{message} (at index {index})")
        self.index = index


class InvalidConfigurationError(LSystemError, ValueError):
    """Invalid top-level parameters passed to the engine or the estimator."""


class NumericDegeneracyError(LSystemError, RuntimeError):
    """Every posterior sample landed on a zero-weight depth."""
