"""
Hand landmark detection using MediaPipe.
"""
import cv2
import mediapipe as mp
import numpy as np

from .types import Landmark, LandmarkFrame


class HandsTracker:
    """Hand landmark tracker using MediaPipe Hands."""
    
    def __init__(self, max_num_hands: int = 1, min_detection_conf: float = 0.7, min_tracking_conf: float = 0.5):
        """
        Initialize the hands tracker.
        
        Args:
            max_num_hands: Maximum number of hands to detect
            min_detection_conf: Minimum confidence for hand detection
            min_tracking_conf: Minimum confidence for hand tracking
        """
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_num_hands,
            min_detection_confidence=min_detection_conf,
            min_tracking_confidence=min_tracking_conf
        )
    
    def process(self, frame_bgr: np.ndarray, timestamp_ms: float) -> LandmarkFrame:
        """
        Process a frame and return the detected hands.
        
        Args:
            frame_bgr: Input frame in BGR format
            timestamp_ms: Monotonic capture time in milliseconds
            
        Returns:
            LandmarkFrame with 21 landmarks per detected hand (empty if none)
        """
        # Convert BGR to RGB for MediaPipe
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self.hands.process(frame_rgb)
        
        hands = []
        if results.multi_hand_landmarks:
            for hand_landmarks in results.multi_hand_landmarks:
                hands.append([Landmark(lm.x, lm.y, lm.z) for lm in hand_landmarks.landmark])
        
        return LandmarkFrame(hands=hands, timestamp_ms=timestamp_ms)
    
    def close(self):
        self.hands.close()
