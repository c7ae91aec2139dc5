"""
Grammar configurations for stochastic L-system trees.

Each grammar spec names an axiom, weighted production rules and the symbols
that rewrite to themselves.
"""

# Drawing symbols that never change under rewriting
TURTLE_CONSTANTS = ['[', ']', '+', '-', 'L']

# Leaves fanned out around a branch tip; brackets return to the tip each time
LEAF_CLUSTER = '[+L][-L][L]'
CANOPY_CLUSTERS = 25
CANOPY = LEAF_CLUSTER * CANOPY_CLUSTERS

# Stochastic tree: X grows a branch segment with one or two side branches and
# a canopy of 75 leaves at its tip. F occasionally doubles in length.
# Leaf counts grow fast enough with depth that the soft-match likelihood at
# scale 100 separates depth 0 (no leaves) from every deeper tree.
TREE_GRAMMAR = {
    'axiom': 'X',
    'leaf_symbol': 'L',
    'constants': TURTLE_CONSTANTS,
    'rules': {
        'X': [
            ('F[+X][-X]FX' + CANOPY, 0.6),
            ('F[-X]FX' + CANOPY, 0.2),
            ('F[+X]FX' + CANOPY, 0.2),
        ],
        'F': [('F', 0.7), ('FF', 0.3)],
    },
}

# Deterministic binary tree: every A forks into two A's and a leaf
BINARY_TREE_GRAMMAR = {
    'axiom': 'A',
    'leaf_symbol': 'L',
    'constants': TURTLE_CONSTANTS + ['F'],
    'rules': {
        'A': [('F[+A][-A]L', 1.0)],
    },
}

GRAMMARS = {
    'tree': TREE_GRAMMAR,
    'binary_tree': BINARY_TREE_GRAMMAR,
}


def get_grammar(name):
    """Look up a grammar spec by name."""
    if name not in GRAMMARS:
        raise ValueError(f"Unknown grammar type: {name}. Choose from {sorted(GRAMMARS)}")
    return GRAMMARS[name]


def count_leaves_deterministic(grammar_spec, depth):
    """
    Leaf count after `depth` generations, following the first production of
    every rule. Exact for grammars with a single alternative per symbol.
    """
    leaf = grammar_spec.get('leaf_symbol', 'L')
    rules = grammar_spec['rules']

    def count(symbol, d):
        if d == 0 or symbol not in rules:
            return 1 if symbol == leaf else 0
        production = rules[symbol][0][0]
        return sum(count(c, d - 1) for c in production)

    return sum(count(c, depth) for c in grammar_spec['axiom'])
