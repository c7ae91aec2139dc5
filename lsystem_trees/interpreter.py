"""
Turtle-graphics interpreter for derivation strings.

Walks a derivation string with a cursor and an explicit state stack, and
emits one line segment per drawn step. Branches ('[' ... ']') are drawn
relative to the state saved at the opening bracket, and drawing resumes
from that saved state after the closing bracket.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

import numpy as np

from .errors import InvalidConfigurationError, UnbalancedBracketsError

Point = Tuple[float, float]

BRANCH_COLOR = "brown"
LEAF_COLOR = "green"

# Fractions of the initial width below which tapering stops
WIDTH_HOLD_FRACTION = 0.2
LENGTH_HOLD_FRACTION = 0.5

WIDTH_SHRINK = (0.8, 1.0)
LENGTH_SHRINK = (0.9, 1.0)
LEAF_WIDTH_FACTOR = 2.0 / 3.0
TURN_RANGE = (math.pi / 20, math.pi / 7)

DEFAULT_MIN_LENGTH = 2.0


@dataclass(frozen=True)
class TurtleState:
    """Position, heading (radians), segment length and stroke width."""
    x: float
    y: float
    angle: float
    length: float
    width: float

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def forward(self) -> Point:
        """Point reached by moving `length` along the current heading."""
        return (self.x + self.length * math.cos(self.angle),
                self.y + self.length * math.sin(self.angle))


@dataclass(frozen=True)
class Segment:
    """A drawn line: endpoints, stroke width, color name and render order."""
    start: Point
    end: Point
    width: float
    color: str
    index: int


@dataclass
class RenderContext:
    """
    Per-render state threaded through the interpreter.

    Attributes:
        next_index (int): Render-order index given to the next segment
        sink (callable, optional): Receives each Segment as it is emitted
        stack (list): Saved TurtleStates of the currently open branches
    """
    next_index: int = 0
    sink: Optional[Callable[[Segment], None]] = None
    stack: List[TurtleState] = field(default_factory=list)

    def emit(self, start, end, width, color) -> Segment:
        segment = Segment(start=start, end=end, width=width, color=color,
                          index=self.next_index)
        self.next_index += 1
        if self.sink is not None:
            self.sink(segment)
        return segment


def check_brackets(statement: str) -> int:
    """
    Check that every '[' has a matching ']'.

    Args:
        statement (str): Derivation string

    Returns:
        int: Maximum bracket nesting depth

    Raises:
        UnbalancedBracketsError: On a stray ']' or an unterminated '['
    """
    depth = 0
    max_depth = 0
    open_positions = []
    for i, ch in enumerate(statement):
        if ch == '[':
            open_positions.append(i)
            depth += 1
            max_depth = max(max_depth, depth)
        elif ch == ']':
            if not open_positions:
                raise UnbalancedBracketsError("']' without matching '['", i)
            open_positions.pop()
            depth -= 1
    if open_positions:
        raise UnbalancedBracketsError("unterminated '['", open_positions[-1])
    return max_depth


def render(statement: str, initial: TurtleState,
           context: Optional[RenderContext] = None, rng=None,
           min_length: float = DEFAULT_MIN_LENGTH) -> List[Segment]:
    """
    Interpret a derivation string as turtle commands.

    Symbols:
        F   draw a brown branch if length > min_length, then taper
        L   draw a green leaf at 2/3 of the current width, keep that width
        [   save the current state
        ]   restore the state saved at the matching '['
        +   turn by a random angle in [pi/20, pi/7]
        -   turn by minus a random angle in [pi/20, pi/7]
    Every other symbol (including X) is skipped.

    Args:
        statement (str): Derivation string
        initial (TurtleState): Starting state; its width is the reference
                               for the taper thresholds
        context (RenderContext, optional): Render-order counter and sink
        rng: numpy Generator; defaults to the global numpy random state
        min_length (float): Branches at or below this length are not drawn

    Returns:
        list[Segment]: Emitted segments in render order
    """
    check_brackets(statement)

    rng = np.random if rng is None else rng
    context = RenderContext() if context is None else context

    width_hold = WIDTH_HOLD_FRACTION * initial.width
    length_hold = LENGTH_HOLD_FRACTION * initial.width

    segments = []
    stack = context.stack
    if stack:
        raise InvalidConfigurationError("render context has a non-empty state stack")
    state = initial

    for ch in statement:
        if ch == 'F':
            if state.length <= min_length:
                continue
            end = state.forward()
            segments.append(context.emit(state.position, end, state.width,
                                         BRANCH_COLOR))
            width = state.width
            if width > width_hold:
                width = width * rng.uniform(*WIDTH_SHRINK)
            length = state.length
            if state.width > length_hold:
                length = length * rng.uniform(*LENGTH_SHRINK)
            state = replace(state, x=end[0], y=end[1], length=length, width=width)

        elif ch == 'L':
            end = state.forward()
            width = state.width * LEAF_WIDTH_FACTOR
            segments.append(context.emit(state.position, end, width, LEAF_COLOR))
            state = replace(state, x=end[0], y=end[1], width=width)

        elif ch == '[':
            stack.append(state)

        elif ch == ']':
            state = stack.pop()

        elif ch == '+':
            state = replace(state, angle=state.angle + rng.uniform(*TURN_RANGE))

        elif ch == '-':
            state = replace(state, angle=state.angle - rng.uniform(*TURN_RANGE))

    return segments
