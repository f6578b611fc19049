"""
Type definitions for the gesture-controlled photo studio.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable


class LandmarkValidationError(ValueError):
    """Raised when a landmark frame is malformed (wrong count, out-of-range coordinates)."""


class FilterPreconditionError(ValueError):
    """Raised when a pixel buffer does not match its declared dimensions."""


@dataclass(frozen=True)
class Landmark:
    """One normalized hand landmark (x, y in [0..1], optional relative depth)."""
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def coerce(cls, point: Any) -> "Landmark":
        """Build a Landmark from a tuple, a Landmark or a MediaPipe landmark."""
        if isinstance(point, Landmark):
            return point
        try:
            if hasattr(point, "x") and hasattr(point, "y"):
                return cls(float(point.x), float(point.y), float(getattr(point, "z", 0.0)))
            values = tuple(point)
            if len(values) not in (2, 3):
                raise LandmarkValidationError(f"Landmark needs 2 or 3 coordinates, got {len(values)}")
            return cls(*(float(v) for v in values))
        except (TypeError, ValueError) as e:
            if isinstance(e, LandmarkValidationError):
                raise
            raise LandmarkValidationError(f"Malformed landmark {point!r}: {e}") from e


@dataclass
class LandmarkFrame:
    """Landmarks for zero or more detected hands, as produced for a single camera frame."""
    hands: List[Sequence[Any]] = field(default_factory=list)
    timestamp_ms: float = 0.0

    @property
    def primary_hand(self) -> Optional[Sequence[Any]]:
        """Landmarks of the first detected hand, or None if no hand was seen."""
        return self.hands[0] if self.hands else None


@dataclass(frozen=True)
class FingerState:
    """Extension flags for the five digits (True = extended)."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    def as_tuple(self):
        return (self.thumb, self.index, self.middle, self.ring, self.pinky)

    def __len__(self) -> int:
        return 5

    def __iter__(self):
        return iter(self.as_tuple())


class GestureLabel(str, Enum):
    """Closed set of recognizable hand gestures."""
    NONE = "none"
    OPEN_PALM = "open_palm"
    PEACE = "peace"
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
    POINT_UP = "point_up"
    POINT_DOWN = "point_down"
    FIST = "fist"
    ROCK = "rock"
    SWIPE_LEFT = "swipe_left"
    SWIPE_RIGHT = "swipe_right"


class GestureCategory(str, Enum):
    """How the state machine turns a held gesture into actions."""
    INERT = "inert"            # never dispatches
    SUSTAINED = "sustained"    # fires once after the sustain period, then resets
    INSTANT = "instant"        # fires once after debounce, then resets
    HELD = "held"              # fires once after the hold period, then resets
    CONTINUOUS = "continuous"  # fires every frame after debounce, no reset


class ActionKind(str, Enum):
    """Commands the studio understands."""
    CAPTURE = "capture"
    SWITCH_CAMERA = "switch_camera"
    NEXT_FILTER = "next_filter"
    REMOVE_FILTER = "remove_filter"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    TOGGLE_RECORDING = "toggle_recording"
    TOGGLE_TIMER = "toggle_timer"
    DISCARD_LAST = "discard_last"
    SAVE_LAST = "save_last"


@dataclass(frozen=True)
class ActionEvent:
    """An action dispatched by the gesture state machine."""
    kind: ActionKind
    gesture: GestureLabel
    timestamp_ms: float


@runtime_checkable
class ActionHandlerProto(Protocol):
    """Abstract protocol for consumers of action events."""

    def handle(self, event: ActionEvent) -> None:
        """Apply the effect bound to the event's action kind."""
        ...
