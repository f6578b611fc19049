"""
Test cases for landmark validation and finger-state classification.
"""
import unittest
import sys
from pathlib import Path
from types import SimpleNamespace

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from airframe.landmarks import count_extended, finger_states, palm_position, validate_landmarks
from airframe.types import FingerState, Landmark, LandmarkValidationError
from tests.helpers import make_hand, open_palm


class TestValidateLandmarks(unittest.TestCase):
    
    def test_accepts_tuples(self):
        landmarks = validate_landmarks(make_hand())
        self.assertEqual(len(landmarks), 21)
        self.assertIsInstance(landmarks[0], Landmark)
        self.assertEqual(landmarks[0].z, 0.0)
    
    def test_accepts_mediapipe_style_objects(self):
        points = [SimpleNamespace(x=x, y=y, z=-0.02) for x, y in make_hand()]
        landmarks = validate_landmarks(points)
        self.assertEqual(landmarks[4], Landmark(0.5, 0.5, -0.02))
    
    def test_accepts_xyz_tuples(self):
        landmarks = validate_landmarks([(x, y, 0.1) for x, y in make_hand()])
        self.assertEqual(landmarks[0].z, 0.1)
    
    def test_wrong_count(self):
        for count in (0, 20, 22):
            with self.assertRaises(LandmarkValidationError):
                validate_landmarks([(0.5, 0.5)] * count)
    
    def test_out_of_range(self):
        for bad in ((-0.01, 0.5), (0.5, 1.01)):
            points = list(make_hand())
            points[10] = bad
            with self.assertRaises(LandmarkValidationError):
                validate_landmarks(points)
    
    def test_bad_point_shape(self):
        points = list(make_hand())
        points[0] = (0.5,)
        with self.assertRaises(LandmarkValidationError):
            validate_landmarks(points)

    def test_missing_point(self):
        points = list(make_hand())
        points[3] = None
        with self.assertRaises(LandmarkValidationError):
            validate_landmarks(points)

    def test_non_numeric_point(self):
        points = list(make_hand())
        points[3] = ("a", "b")
        with self.assertRaises(LandmarkValidationError):
            validate_landmarks(points)

        points[3] = SimpleNamespace(x="left", y=0.5)
        with self.assertRaises(LandmarkValidationError):
            validate_landmarks(points)

    def test_validation_error_is_value_error(self):
        self.assertTrue(issubclass(LandmarkValidationError, ValueError))


class TestFingerStates(unittest.TestCase):
    
    def test_five_flags(self):
        fingers = finger_states(validate_landmarks(open_palm()))
        self.assertIsInstance(fingers, FingerState)
        self.assertEqual(len(fingers.as_tuple()), 5)
        self.assertEqual(fingers.as_tuple(), (True, True, True, True, True))
    
    def test_deterministic(self):
        landmarks = validate_landmarks(make_hand(index=True, pinky=True))
        self.assertEqual(finger_states(landmarks), finger_states(landmarks))
    
    def test_individual_digits(self):
        fingers = finger_states(validate_landmarks(make_hand(index=True, ring=True)))
        self.assertEqual(fingers, FingerState(False, True, False, True, False))
    
    def test_thumb_uses_horizontal_distance(self):
        points = list(make_hand())
        points[4] = (0.54, 0.1)  # far above its base, but only 0.04 to the side
        self.assertFalse(finger_states(validate_landmarks(points)).thumb)
        
        points[4] = (0.44, 0.9)  # below its base, 0.06 to the side
        self.assertTrue(finger_states(validate_landmarks(points)).thumb)
    
    def test_tip_level_with_base_is_curled(self):
        points = list(make_hand())
        points[8] = (0.5, 0.5)
        self.assertFalse(finger_states(validate_landmarks(points)).index)
    
    def test_partial_hand_rejected(self):
        landmarks = validate_landmarks(make_hand())[:15]
        with self.assertRaises(LandmarkValidationError):
            finger_states(landmarks)
    
    def test_count_extended(self):
        self.assertEqual(count_extended(FingerState(True, False, True, False, True)), 3)
    
    def test_palm_position_is_wrist(self):
        landmarks = validate_landmarks(make_hand(wrist=(0.3, 0.7)))
        self.assertEqual(palm_position(landmarks), (0.3, 0.7))


if __name__ == '__main__':
    unittest.main()
