"""Push-up repetition state machine.

The counter is a reducer: :func:`advance` maps ``(state, frame)`` to the next
:class:`RepCounterState` and never raises. Every frame passes through the
same ordered gates (presence, visibility, posture) before the UP/DOWN phase
logic runs; a failing gate leaves the phase and count untouched and only
changes the instruction.

A rep is credited on the DOWN -> UP edge, so a partial dip never counts. The
band between the down and up elbow thresholds is a dead zone that keeps the
current phase, which stops angle jitter around a single cut-point from
double-counting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from pushcount.config import CounterConfig
from pushcount.geometry import DegenerateAngleError, angle_degrees
from pushcount.landmarks import Joint, LandmarkFrame

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    UP = "up"
    DOWN = "down"


class Instruction(str, Enum):
    """Coaching prompts returned with every update."""

    BODY_IN_FRAME = "Keep your whole body in frame."
    BACK_STRAIGHT = "Keep your back straight!"
    GO_UP = "Go up!"
    GO_DOWN = "Go down!"


class Gate(str, Enum):
    """Outcome of frame gating, in evaluation order."""

    NO_PERSON = "no_person"
    LOW_VISIBILITY = "low_visibility"
    DEGENERATE = "degenerate"
    BAD_POSTURE = "bad_posture"
    PASSED = "passed"


@dataclass(frozen=True)
class JointAngles:
    left_elbow: float
    right_elbow: float
    left_hip: float
    right_hip: float


@dataclass(frozen=True)
class FrameEvaluation:
    """Gate outcome for a frame plus the angles when they could be computed."""

    gate: Gate
    angles: Optional[JointAngles] = None
    is_down: bool = False
    is_up: bool = False

    @property
    def passed(self) -> bool:
        return self.gate is Gate.PASSED


@dataclass(frozen=True)
class RepCounterState:
    """Session state of the counter; replaced, never mutated."""

    rep_count: int = 0
    phase: Phase = Phase.UP
    last_instruction: Instruction = Instruction.BODY_IN_FRAME

    def as_output(self) -> Tuple[int, str]:
        return self.rep_count, self.last_instruction.value


def _is_visible(visibility: float, threshold: float) -> bool:
    # NaN compares false, so it never passes.
    return visibility >= threshold


def _compute_angles(frame: LandmarkFrame) -> JointAngles:
    p = frame.points
    return JointAngles(
        left_elbow=angle_degrees(p[Joint.LEFT_SHOULDER], p[Joint.LEFT_ELBOW], p[Joint.LEFT_WRIST]),
        right_elbow=angle_degrees(p[Joint.RIGHT_SHOULDER], p[Joint.RIGHT_ELBOW], p[Joint.RIGHT_WRIST]),
        left_hip=angle_degrees(p[Joint.LEFT_SHOULDER], p[Joint.LEFT_HIP], p[Joint.LEFT_KNEE]),
        right_hip=angle_degrees(p[Joint.RIGHT_SHOULDER], p[Joint.RIGHT_HIP], p[Joint.RIGHT_KNEE]),
    )


def evaluate_frame(frame: LandmarkFrame, config: CounterConfig = CounterConfig()) -> FrameEvaluation:
    """Run the presence, visibility and posture gates and classify the arms."""

    if frame.is_empty:
        return FrameEvaluation(Gate.NO_PERSON)

    for joint in Joint:
        point = frame.get(joint)
        if point is None or not _is_visible(point.visibility, config.visibility_threshold):
            return FrameEvaluation(Gate.LOW_VISIBILITY)

    try:
        angles = _compute_angles(frame)
    except DegenerateAngleError:
        return FrameEvaluation(Gate.DEGENERATE)

    straight = angles.left_hip > config.straight_body_angle and angles.right_hip > config.straight_body_angle
    if not straight:
        return FrameEvaluation(Gate.BAD_POSTURE, angles)

    is_down = angles.left_elbow < config.down_elbow_angle and angles.right_elbow < config.down_elbow_angle
    is_up = angles.left_elbow > config.up_elbow_angle and angles.right_elbow > config.up_elbow_angle
    return FrameEvaluation(Gate.PASSED, angles, is_down=is_down, is_up=is_up)


def advance(
    state: RepCounterState, frame: LandmarkFrame, config: CounterConfig = CounterConfig()
) -> RepCounterState:
    """Return the state after consuming ``frame``."""

    evaluation = evaluate_frame(frame, config)

    if evaluation.gate is Gate.BAD_POSTURE:
        logger.debug("posture gate failed: %s", evaluation.angles)
        return replace(state, last_instruction=Instruction.BACK_STRAIGHT)
    if not evaluation.passed:
        logger.debug("frame gated: %s", evaluation.gate.value)
        return replace(state, last_instruction=Instruction.BODY_IN_FRAME)

    if state.phase is Phase.UP:
        if evaluation.is_down:
            logger.debug("phase UP -> DOWN at rep %d", state.rep_count)
            return replace(state, phase=Phase.DOWN, last_instruction=Instruction.GO_UP)
        return replace(state, last_instruction=Instruction.GO_DOWN)

    if evaluation.is_up:
        logger.debug("phase DOWN -> UP, rep %d counted", state.rep_count + 1)
        return RepCounterState(
            rep_count=state.rep_count + 1,
            phase=Phase.UP,
            last_instruction=Instruction.GO_DOWN,
        )
    return replace(state, last_instruction=Instruction.GO_UP)


class PushupRepCounter:
    """Stateful convenience wrapper around :func:`advance`.

    Not thread-safe: feed it from a single stream of frames or serialize
    calls externally.
    """

    def __init__(self, config: Optional[CounterConfig] = None) -> None:
        self.config = config or CounterConfig()
        self.state = RepCounterState()

    @property
    def rep_count(self) -> int:
        return self.state.rep_count

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def update(self, frame: LandmarkFrame) -> Tuple[int, str]:
        """Consume one frame and return ``(rep_count, instruction)``."""
        self.state = advance(self.state, frame, self.config)
        return self.state.as_output()

    def reset(self) -> None:
        self.state = RepCounterState()
