"""
Test cases for camera selection and self-timer routing in the app loop.
"""
import unittest
import sys
from dataclasses import replace
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from airframe.config import load_config
from airframe.main import camera_index_for, dispatch_event
from airframe.studio import CaptureTimer, StudioController
from airframe.types import ActionEvent, ActionKind, GestureLabel


def event(kind, t=0.0):
    return ActionEvent(kind=kind, gesture=GestureLabel.NONE, timestamp_ms=t)


class TestCameraIndex(unittest.TestCase):
    
    def setUp(self):
        self.camera = load_config().camera
    
    def test_single_camera(self):
        self.assertEqual(camera_index_for(self.camera, "user"), 0)
        self.assertEqual(camera_index_for(self.camera, "environment"), 0)
    
    def test_alternate_camera_for_environment(self):
        camera = replace(self.camera, alternate_index=2)
        self.assertEqual(camera_index_for(camera, "user"), 0)
        self.assertEqual(camera_index_for(camera, "environment"), 2)
    
    def test_switching_changes_device(self):
        studio = StudioController(load_config().studio)
        camera = replace(self.camera, alternate_index=1)
        before = camera_index_for(camera, studio.facing)
        studio.handle(event(ActionKind.SWITCH_CAMERA))
        self.assertNotEqual(camera_index_for(camera, studio.facing), before)


class TestDispatchEvent(unittest.TestCase):
    
    def setUp(self):
        self.studio = StudioController(load_config().studio, frame_source=lambda: "frame")
        self.timer = CaptureTimer()
    
    def test_capture_waits_for_countdown(self):
        message = dispatch_event(self.studio, self.timer, event(ActionKind.CAPTURE, 1000.0), 1000.0)
        self.assertEqual(message, "Capturing in 3s")
        self.assertEqual(self.studio.gallery, [])
        
        self.assertIsNone(self.timer.poll(3500.0))
        due = self.timer.poll(4000.0)
        self.studio.handle(due)
        self.assertEqual(len(self.studio.gallery), 1)
        self.assertEqual(self.studio.gallery[0].timestamp_ms, 4000.0)
    
    def test_capture_during_countdown_ignored(self):
        dispatch_event(self.studio, self.timer, event(ActionKind.CAPTURE, 0.0), 0.0)
        self.assertIsNone(dispatch_event(self.studio, self.timer, event(ActionKind.CAPTURE, 500.0), 500.0))
        self.assertEqual(self.timer.due_ms, 3000.0)
    
    def test_timer_off_captures_immediately(self):
        self.studio.timer_s = 0
        message = dispatch_event(self.studio, self.timer, event(ActionKind.CAPTURE, 10.0), 10.0)
        self.assertEqual(message, "Photo captured!")
        self.assertIsNone(self.timer.pending)
        self.assertEqual(len(self.studio.gallery), 1)
    
    def test_other_actions_not_delayed(self):
        self.assertEqual(dispatch_event(self.studio, self.timer, event(ActionKind.ZOOM_IN), 0.0), "Zoom: 110%")
        self.assertIsNone(self.timer.pending)


if __name__ == '__main__':
    unittest.main()
