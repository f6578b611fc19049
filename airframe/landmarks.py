"""
Hand landmark validation and finger-state classification.
"""
import cv2
import numpy as np
from typing import Any, List, Sequence, Tuple

from .types import FingerState, Landmark, LandmarkValidationError

NUM_LANDMARKS = 21

# MediaPipe hand landmark indices
WRIST = 0
THUMB_TIP = 4
INDEX_BASE = 5
INDEX_TIP = 8

# Tip and base joint per digit: thumb, index, middle, ring, pinky
FINGER_TIPS = (4, 8, 12, 16, 20)
FINGER_BASES = (2, 6, 10, 14, 18)

THUMB_EXTENSION_THRESHOLD = 0.05


def validate_landmarks(points: Sequence[Any]) -> List[Landmark]:
    """
    Coerce and check one hand's landmarks.
    
    Args:
        points: 21 landmarks as Landmark objects, (x, y[, z]) tuples or MediaPipe landmarks
        
    Returns:
        List of 21 Landmark objects
        
    Raises:
        LandmarkValidationError: wrong landmark count or x/y outside [0..1]
    """
    if points is None:
        raise LandmarkValidationError("Landmarks are missing")
    landmarks = [Landmark.coerce(p) for p in points]
    if len(landmarks) != NUM_LANDMARKS:
        raise LandmarkValidationError(
            f"Expected {NUM_LANDMARKS} landmarks, got {len(landmarks)}"
        )
    for i, lm in enumerate(landmarks):
        if not (0.0 <= lm.x <= 1.0 and 0.0 <= lm.y <= 1.0):
            raise LandmarkValidationError(
                f"Landmark {i} out of range: ({lm.x:.3f}, {lm.y:.3f})"
            )
    return landmarks


def finger_states(landmarks: Sequence[Landmark],
                  thumb_threshold: float = THUMB_EXTENSION_THRESHOLD) -> FingerState:
    """
    Classify each digit as extended or curled.
    
    The thumb extends sideways, so it is judged by the horizontal distance
    between its tip and base. The other digits are extended when the tip sits
    above the base joint (smaller y in image coordinates).
    
    Args:
        landmarks: 21 validated hand landmarks
        thumb_threshold: Minimum horizontal tip-to-base distance for the thumb
        
    Returns:
        FingerState for thumb, index, middle, ring and pinky
    """
    if len(landmarks) != NUM_LANDMARKS:
        raise LandmarkValidationError(
            f"Expected {NUM_LANDMARKS} landmarks, got {len(landmarks)}"
        )
    
    thumb_tip = landmarks[FINGER_TIPS[0]]
    thumb_base = landmarks[FINGER_BASES[0]]
    extended = [abs(thumb_tip.x - thumb_base.x) > thumb_threshold]
    
    for tip_idx, base_idx in zip(FINGER_TIPS[1:], FINGER_BASES[1:]):
        extended.append(landmarks[tip_idx].y < landmarks[base_idx].y)  # inverted y-axis
    
    return FingerState(*extended)


def palm_position(landmarks: Sequence[Landmark]) -> Tuple[float, float]:
    """Wrist position used as the palm reference for swipe tracking."""
    wrist = landmarks[WRIST]
    return (wrist.x, wrist.y)


def count_extended(fingers: FingerState) -> int:
    """Number of extended digits (0-5)."""
    return sum(1 for f in fingers if f)


def draw_landmarks(frame: np.ndarray, landmarks: Sequence[Landmark]) -> np.ndarray:
    """
    Draw hand landmarks on the frame.
    
    Args:
        frame: Input frame (BGR)
        landmarks: Normalized hand landmarks
        
    Returns:
        Frame with landmarks drawn
    """
    height, width = frame.shape[:2]
    
    for i, lm in enumerate(landmarks):
        px = int(lm.x * width)
        py = int(lm.y * height)
        cv2.circle(frame, (px, py), 3, (0, 0, 255), -1)
        cv2.putText(frame, str(i), (px + 5, py - 5), cv2.FONT_HERSHEY_SIMPLEX, 0.3, (255, 255, 255), 1)
    
    return frame
