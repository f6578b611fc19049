"""
Gesture recognition and the interaction state machine that converts
hand poses into studio actions.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .config import Cfg, GesturesConfig, TimingConfig
from .landmarks import (
    INDEX_BASE,
    INDEX_TIP,
    THUMB_TIP,
    THUMB_EXTENSION_THRESHOLD,
    finger_states,
    palm_position,
    validate_landmarks,
)
from .types import (
    ActionEvent,
    ActionKind,
    FingerState,
    GestureCategory,
    GestureLabel,
    Landmark,
    LandmarkFrame,
)

logger = logging.getLogger(__name__)

SWIPE_MIN_DX = 0.15
SWIPE_MAX_DY = 0.1
POINT_DEAD_ZONE = 0.1


# How each gesture is turned into actions by the state machine
GESTURE_CATEGORIES: Dict[GestureLabel, GestureCategory] = {
    GestureLabel.NONE: GestureCategory.INERT,
    GestureLabel.OPEN_PALM: GestureCategory.SUSTAINED,
    GestureLabel.PEACE: GestureCategory.INSTANT,
    GestureLabel.THUMBS_UP: GestureCategory.INSTANT,
    GestureLabel.THUMBS_DOWN: GestureCategory.INSTANT,
    GestureLabel.ROCK: GestureCategory.INSTANT,
    GestureLabel.SWIPE_LEFT: GestureCategory.INSTANT,
    GestureLabel.SWIPE_RIGHT: GestureCategory.INSTANT,
    GestureLabel.FIST: GestureCategory.HELD,
    GestureLabel.POINT_UP: GestureCategory.CONTINUOUS,
    GestureLabel.POINT_DOWN: GestureCategory.CONTINUOUS,
}

GESTURE_ACTIONS: Dict[GestureLabel, ActionKind] = {
    GestureLabel.OPEN_PALM: ActionKind.CAPTURE,
    GestureLabel.PEACE: ActionKind.SWITCH_CAMERA,
    GestureLabel.THUMBS_UP: ActionKind.NEXT_FILTER,
    GestureLabel.THUMBS_DOWN: ActionKind.REMOVE_FILTER,
    GestureLabel.POINT_UP: ActionKind.ZOOM_IN,
    GestureLabel.POINT_DOWN: ActionKind.ZOOM_OUT,
    GestureLabel.FIST: ActionKind.TOGGLE_RECORDING,
    GestureLabel.ROCK: ActionKind.TOGGLE_TIMER,
    GestureLabel.SWIPE_LEFT: ActionKind.DISCARD_LAST,
    GestureLabel.SWIPE_RIGHT: ActionKind.SAVE_LAST,
}


class MotionTracker:
    """
    Detects horizontal swipes from the palm position of consecutive frames.
    
    Only the most recent palm position is kept. It is overwritten on every
    update, whether or not a swipe was detected.
    """
    
    def __init__(self, min_dx: float = SWIPE_MIN_DX, max_dy: float = SWIPE_MAX_DY):
        self.min_dx = min_dx
        self.max_dy = max_dy
        self.last_position: Optional[Tuple[float, float]] = None
    
    def update(self, position: Tuple[float, float]) -> Optional[GestureLabel]:
        """
        Compare the palm position with the previous sample.
        
        Args:
            position: Current palm (x, y) in [0..1]
            
        Returns:
            SWIPE_LEFT / SWIPE_RIGHT if a swipe occurred, None otherwise
        """
        swipe = None
        if self.last_position is not None:
            dx = position[0] - self.last_position[0]
            dy = position[1] - self.last_position[1]
            if abs(dy) < self.max_dy:
                if dx > self.min_dx:
                    swipe = GestureLabel.SWIPE_RIGHT
                elif dx < -self.min_dx:
                    swipe = GestureLabel.SWIPE_LEFT
        
        self.last_position = position
        return swipe
    
    def reset(self):
        """Forget the stored palm position."""
        self.last_position = None


def recognize_gesture(fingers: FingerState, swipe: Optional[GestureLabel],
                      landmarks: Sequence[Landmark],
                      point_dead_zone: float = POINT_DEAD_ZONE) -> GestureLabel:
    """
    Map finger states and motion to a single gesture label.
    
    Rules are checked in priority order and the first match wins. A swipe
    overrides every shape-based rule.
    
    Args:
        fingers: Extension state of the five digits
        swipe: Swipe detected by the motion tracker this frame, if any
        landmarks: 21 hand landmarks (thumb tip, index tip and index base are read)
        point_dead_zone: Minimum vertical index tip offset for point_up/point_down
        
    Returns:
        Recognized GestureLabel (NONE if nothing matches)
    """
    if swipe is not None:
        return swipe
    
    thumb, index, middle, ring, pinky = fingers.as_tuple()
    
    if thumb and index and middle and ring and pinky:
        return GestureLabel.OPEN_PALM
    
    if index and middle and not thumb and not ring and not pinky:
        return GestureLabel.PEACE
    
    if thumb and not (index or middle or ring or pinky):
        if landmarks[THUMB_TIP].y < landmarks[INDEX_BASE].y:
            return GestureLabel.THUMBS_UP
        return GestureLabel.THUMBS_DOWN
    
    if index and not (thumb or middle or ring or pinky):
        offset = landmarks[INDEX_TIP].y - landmarks[INDEX_BASE].y
        if offset < -point_dead_zone:
            return GestureLabel.POINT_UP
        if offset > point_dead_zone:
            return GestureLabel.POINT_DOWN
        # Inside the dead zone: fall through to the remaining rules
    
    if not (index or middle or ring or pinky):
        return GestureLabel.FIST
    
    if index and pinky and not middle and not ring:
        return GestureLabel.ROCK
    
    return GestureLabel.NONE


class GestureRecognizer:
    """Combines the finger-state classifier and the motion tracker."""
    
    def __init__(self, cfg: Optional[GesturesConfig] = None):
        self.thumb_threshold = cfg.classifier.thumb_extension if cfg else THUMB_EXTENSION_THRESHOLD
        self.point_dead_zone = cfg.recognizer.point_dead_zone if cfg else POINT_DEAD_ZONE
        if cfg is not None:
            self.motion = MotionTracker(cfg.motion.swipe_min_dx, cfg.motion.swipe_max_dy)
        else:
            self.motion = MotionTracker()
    
    def recognize(self, points: Sequence) -> Tuple[GestureLabel, FingerState, List[Landmark]]:
        """
        Classify one hand.

        The landmarks are validated before the motion tracker is touched, so a
        rejected frame leaves the stored palm position unchanged.

        Returns:
            Tuple of (label, finger_states, validated_landmarks)

        Raises:
            LandmarkValidationError: malformed landmarks
        """
        landmarks = validate_landmarks(points)
        fingers = finger_states(landmarks, self.thumb_threshold)
        swipe = self.motion.update(palm_position(landmarks))
        label = recognize_gesture(fingers, swipe, landmarks, self.point_dead_zone)
        return label, fingers, landmarks


@dataclass(frozen=True)
class GestureSessionState:
    """Label currently being held and for how long (milliseconds)."""
    label: GestureLabel = GestureLabel.NONE
    start_ms: float = 0.0
    elapsed_ms: float = 0.0


def _reset(now_ms: float) -> GestureSessionState:
    return GestureSessionState(GestureLabel.NONE, now_ms, 0.0)


def advance_session(state: GestureSessionState, label: GestureLabel, now_ms: float,
                    timing: Optional[TimingConfig] = None
                    ) -> Tuple[GestureSessionState, Optional[ActionKind]]:
    """
    Pure transition of the gesture session for one recognized label.
    
    Args:
        state: Session state before this frame
        label: Gesture recognized this frame
        now_ms: Monotonic timestamp in milliseconds
        timing: Debounce, sustain and hold durations (defaults if None)
        
    Returns:
        Tuple of (new_state, action) where action is None when nothing fires
    """
    timing = timing or TimingConfig()
    
    if label != state.label:
        # Fresh entry never fires
        return GestureSessionState(label, now_ms, 0.0), None

    state = replace(state, elapsed_ms=now_ms - state.start_ms)

    category = GESTURE_CATEGORIES[label]
    elapsed = state.elapsed_ms
    
    if category is GestureCategory.INERT:
        return state, None
    
    if category is GestureCategory.SUSTAINED:
        if elapsed > timing.sustain_ms:
            return _reset(now_ms), GESTURE_ACTIONS[label]
        return state, None
    
    # Debounce
    if elapsed < timing.debounce_ms:
        return state, None
    
    if category is GestureCategory.INSTANT:
        return _reset(now_ms), GESTURE_ACTIONS[label]
    
    if category is GestureCategory.HELD:
        if elapsed > timing.hold_ms:
            return _reset(now_ms), GESTURE_ACTIONS[label]
        return state, None
    
    # Continuous gestures repeat every frame and keep their start time
    return state, GESTURE_ACTIONS[label]


class GestureStateMachine:
    """Holds the session state and turns transitions into action events."""
    
    def __init__(self, timing: Optional[TimingConfig] = None):
        self.timing = timing or TimingConfig()
        self.state = GestureSessionState()
    
    def update(self, label: GestureLabel, now_ms: float) -> Optional[ActionEvent]:
        previous = self.state.label
        self.state, action = advance_session(self.state, label, now_ms, self.timing)
        
        if label != previous:
            logger.debug(f"Gesture changed: {previous.value} -> {label.value}")
        
        if action is None:
            return None
        
        logger.debug(f"🎯 {label.value} -> {action.value} at {now_ms:.0f}ms")
        return ActionEvent(kind=action, gesture=label, timestamp_ms=now_ms)
    

@dataclass
class FrameResult:
    """Outcome of processing one landmark frame."""
    label: GestureLabel = GestureLabel.NONE
    fingers: Optional[FingerState] = None
    landmarks: Optional[List[Landmark]] = None
    hand_detected: bool = False
    events: List[ActionEvent] = field(default_factory=list)


class GestureProcessor:
    """
    Main gesture processor: landmark frame in, action events out.
    """
    
    def __init__(self, cfg: Optional[Cfg] = None):
        """Initialize gesture processor with configuration."""
        gestures_cfg = cfg.gestures if cfg is not None else None
        self.recognizer = GestureRecognizer(gestures_cfg)
        self.state_machine = GestureStateMachine(gestures_cfg.timing if gestures_cfg else None)
        self.reset_on_hand_lost = gestures_cfg.motion.reset_on_hand_lost if gestures_cfg else False
    
    def process_frame(self, frame: LandmarkFrame) -> FrameResult:
        """
        Run one classifier -> tracker -> recognizer -> state machine cycle.
        
        Frames with no hand produce no events and leave the session untouched.
        
        Raises:
            LandmarkValidationError: the first hand's landmarks are malformed
        """
        hand = frame.primary_hand
        if hand is None:
            if self.reset_on_hand_lost:
                self.recognizer.motion.reset()
            return FrameResult()
        
        label, fingers, landmarks = self.recognizer.recognize(hand)
        event = self.state_machine.update(label, frame.timestamp_ms)
        
        return FrameResult(
            label=label,
            fingers=fingers,
            landmarks=landmarks,
            hand_detected=True,
            events=[event] if event is not None else []
        )
    
    @property
    def session(self) -> GestureSessionState:
        return self.state_machine.state
