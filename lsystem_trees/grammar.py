"""
Grammar module for stochastic Lindenmayer systems.

A stochastic L-system rewrites every symbol of a string in parallel, picking
each replacement at random from that symbol's weighted alternatives. Repeating
the rewrite for a number of generations grows a derivation string whose
structure (brackets, turns, leaves) is later walked by the turtle interpreter.
"""

import numpy as np

from .errors import InvalidConfigurationError, MalformedGrammarError


LEAF_SYMBOL = 'L'


class StochasticGrammar:
    """
    A stochastic L-system grammar.

    Every symbol that can appear in a derived string must have a production.
    Symbols that never change are declared as constants, which gives them an
    identity production.
    """

    def __init__(self, grammar_spec):
        """
        Initialize with a grammar specification.

        Args:
            grammar_spec (dict): Grammar specification containing:
                - axiom (str): Starting string
                - rules (dict): Maps a symbol to [(replacement, weight), ...]
                - constants (list, optional): Symbols rewritten to themselves
                - leaf_symbol (str, optional): Symbol counted as a leaf
        """
        self.grammar = grammar_spec
        self._validate_grammar()

        self.axiom = grammar_spec['axiom']
        self.leaf_symbol = grammar_spec.get('leaf_symbol', LEAF_SYMBOL)

        rules = {c: [(c, 1.0)] for c in grammar_spec.get('constants', [])}
        rules.update(grammar_spec['rules'])

        # Precompute probabilities for faster sampling
        self.prob_rules = {}
        for symbol, prods in rules.items():
            productions, weights = zip(*prods)
            probs = np.asarray(weights, dtype=float) / float(sum(weights))
            self.prob_rules[symbol] = (productions, probs)

    def _validate_grammar(self):
        """Check the grammar specification is valid."""
        for key in ['axiom', 'rules']:
            if key not in self.grammar:
                raise MalformedGrammarError(f"Grammar must specify {key}")

        rules = self.grammar['rules']
        constants = set(self.grammar.get('constants', []))

        for symbol, prods in rules.items():
            if not isinstance(symbol, str) or len(symbol) != 1:
                raise MalformedGrammarError(
                    f"Rule keys must be single characters, got {symbol!r}")
            if not prods:
                raise MalformedGrammarError(f"Symbol {symbol} has no alternatives")
            weights = [w for _, w in prods]
            if any(not np.isfinite(w) or w < 0 for w in weights):
                raise MalformedGrammarError(
                    f"Weights for {symbol} must be finite and non-negative")
            if sum(weights) <= 0:
                raise MalformedGrammarError(
                    f"Symbol {symbol} needs at least one positive weight")

        # Every reachable symbol needs a production (possibly the identity)
        defined = set(rules) | constants
        used = set(self.grammar['axiom'])
        for prods in rules.values():
            for replacement, _ in prods:
                used.update(replacement)
        missing = sorted(used - defined)
        if missing:
            raise MalformedGrammarError(
                f"Symbols without production rules: {''.join(missing)}")

    @property
    def alphabet(self):
        """All symbols that have a production."""
        return frozenset(self.prob_rules)

    def reachable_symbols(self):
        """Symbols reachable from the axiom under any choice of alternatives."""
        seen = set()
        frontier = list(self.axiom)
        while frontier:
            symbol = frontier.pop()
            if symbol in seen:
                continue
            seen.add(symbol)
            productions, probs = self.prob_rules[symbol]
            for replacement, p in zip(productions, probs):
                if p > 0:
                    frontier.extend(replacement)
        return frozenset(seen)

    def next_generation(self, statement, rng=None):
        """
        Rewrite every symbol of a string once.

        Replacements are sampled independently per symbol occurrence. All
        occurrences of one symbol are drawn in a single vectorized call.

        Args:
            statement (str): Current derivation string
            rng: numpy Generator; defaults to the global numpy random state

        Returns:
            str: The next-generation string
        """
        rng = np.random if rng is None else rng

        positions = {}
        for i, symbol in enumerate(statement):
            positions.setdefault(symbol, []).append(i)

        parts = [None] * len(statement)
        for symbol, idx in positions.items():
            if symbol not in self.prob_rules:
                raise MalformedGrammarError(
                    f"Symbol {symbol!r} has no production rule")
            productions, probs = self.prob_rules[symbol]
            if len(productions) == 1:
                for i in idx:
                    parts[i] = productions[0]
                continue
            choices = rng.choice(len(productions), size=len(idx), p=probs)
            for i, c in zip(idx, choices):
                parts[i] = productions[c]

        return ''.join(parts)

    def expand(self, seed, depth, rng=None):
        """
        Expand a seed string for a number of generations.

        Args:
            seed (str): Starting string (usually the axiom)
            depth (int): Number of generations, depth 0 returns seed unchanged
            rng: numpy Generator; defaults to the global numpy random state

        Returns:
            str: The derivation string after `depth` generations
        """
        if isinstance(depth, bool) or not isinstance(depth, (int, np.integer)):
            raise InvalidConfigurationError(f"depth must be an integer, got {depth!r}")
        if depth < 0:
            raise InvalidConfigurationError(f"depth must be >= 0, got {depth}")

        statement = seed
        for _ in range(depth):
            statement = self.next_generation(statement, rng=rng)
        return statement

    def count_leaves(self, statement):
        """Count leaf symbols of this grammar in a derivation string."""
        return count_leaves(statement, self.leaf_symbol)

    def simulate_leaves(self, depth, rng=None):
        """Expand the axiom to `depth` and count the resulting leaves."""
        return self.count_leaves(self.expand(self.axiom, depth, rng=rng))


def expand(grammar, seed, depth, rng=None):
    """Expand `seed` for `depth` generations with `grammar`."""
    return grammar.expand(seed, depth, rng=rng)


def count_leaves(statement, leaf_symbol=LEAF_SYMBOL):
    """
    Count exact occurrences of the leaf symbol.

    Args:
        statement (str): Derivation string
        leaf_symbol (str): Symbol to count (default: 'L')

    Returns:
        int: Number of leaves
    """
    return statement.count(leaf_symbol)
