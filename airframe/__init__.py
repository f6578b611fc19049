"""
AirFrame - Gesture-Controlled Photo Studio

Recognizes hand gestures from MediaPipe hand landmarks and turns them into
studio commands (capture, camera switch, filters, zoom, recording), while
rendering the camera feed through real-time image filters.
"""

__version__ = "0.1.0"

from .types import (
    ActionEvent,
    ActionKind,
    FilterPreconditionError,
    FingerState,
    GestureCategory,
    GestureLabel,
    Landmark,
    LandmarkFrame,
    LandmarkValidationError,
)
from .config import load_config, Cfg
from .landmarks import finger_states, validate_landmarks
from .gestures import (
    GestureProcessor,
    GestureRecognizer,
    GestureSessionState,
    GestureStateMachine,
    MotionTracker,
    advance_session,
    recognize_gesture,
)
from .filters import FilterKind, FilterPipeline, PixelBuffer, apply_filter, next_filter
from .studio import ActionDispatcher, StudioController

__all__ = [
    "ActionEvent",
    "ActionKind",
    "FilterPreconditionError",
    "FingerState",
    "GestureCategory",
    "GestureLabel",
    "Landmark",
    "LandmarkFrame",
    "LandmarkValidationError",
    "load_config",
    "Cfg",
    "finger_states",
    "validate_landmarks",
    "GestureProcessor",
    "GestureRecognizer",
    "GestureSessionState",
    "GestureStateMachine",
    "MotionTracker",
    "advance_session",
    "recognize_gesture",
    "FilterKind",
    "FilterPipeline",
    "PixelBuffer",
    "apply_filter",
    "next_filter",
    "ActionDispatcher",
    "StudioController",
]
