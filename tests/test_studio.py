"""
Test cases for the studio controller and action dispatch.
"""
import unittest
import sys
from pathlib import Path

import numpy as np

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from airframe.config import load_config
from airframe.filters import FilterKind
from airframe.studio import ActionDispatcher, CaptureTimer, StudioController, make_collage
from airframe.types import ActionEvent, ActionHandlerProto, ActionKind, GestureLabel


def event(kind, t=0.0, gesture=GestureLabel.NONE):
    return ActionEvent(kind=kind, gesture=gesture, timestamp_ms=t)


class TestActionDispatcher(unittest.TestCase):
    
    def test_routes_to_registered_handler(self):
        calls = []
        dispatcher = ActionDispatcher()
        dispatcher.register(ActionKind.ZOOM_IN, lambda e: calls.append(e) or "zoomed")
        
        result = dispatcher.dispatch(event(ActionKind.ZOOM_IN, 5.0))
        
        self.assertEqual(result, "zoomed")
        self.assertEqual(calls[0].timestamp_ms, 5.0)
    
    def test_unbound_action_ignored(self):
        self.assertIsNone(ActionDispatcher().dispatch(event(ActionKind.CAPTURE)))


class TestStudioController(unittest.TestCase):
    """Test the effects bound to each action."""
    
    def setUp(self):
        self.cfg = load_config()
        self.saved = []
        self.studio = StudioController(
            self.cfg.studio,
            frame_source=lambda: "frame",
            save_sink=self.saved.append
        )
    
    def test_is_action_handler(self):
        self.assertIsInstance(self.studio, ActionHandlerProto)
    
    def test_every_action_has_a_handler(self):
        for kind in ActionKind:
            self.assertIn(kind, self.studio.dispatcher.handlers)
    
    def test_capture(self):
        self.studio.handle(event(ActionKind.NEXT_FILTER))
        message = self.studio.handle(event(ActionKind.CAPTURE, 1234.0))
        
        self.assertEqual(message, "Photo captured!")
        photo = self.studio.gallery[-1]
        self.assertEqual(photo.timestamp_ms, 1234.0)
        self.assertEqual(photo.filter, FilterKind.GRAYSCALE)
        self.assertEqual(photo.countdown_s, 3)
        self.assertEqual(photo.image, "frame")
        self.assertFalse(photo.is_video)
    
    def test_photo_booth(self):
        self.studio.start_photo_booth()
        messages = [self.studio.handle(event(ActionKind.CAPTURE, t)) for t in range(4)]
        self.assertEqual(messages[:3], ["Photo 1/4", "Photo 2/4", "Photo 3/4"])
        self.assertIn("complete", messages[3])
        self.assertFalse(self.studio.booth_mode)
        self.assertEqual(len(self.studio.gallery), 1)
        self.assertTrue(self.studio.gallery[0].is_collage)
        self.assertEqual(self.studio.booth_photos, [])
    
    def test_photo_booth_collage_image(self):
        shades = iter([10, 60, 120, 200])
        studio = StudioController(
            self.cfg.studio,
            frame_source=lambda: np.full((480, 640, 3), next(shades), dtype=np.uint8)
        )
        studio.start_photo_booth()
        for t in range(4):
            studio.handle(event(ActionKind.CAPTURE, t))
        
        collage = studio.gallery[0].image
        self.assertEqual(collage.shape, (800, 800, 3))
        self.assertEqual(collage[0, 0, 0], 10)
        self.assertEqual(collage[0, 799, 0], 60)
        self.assertEqual(collage[799, 0, 0], 120)
        self.assertEqual(collage[799, 799, 0], 200)
    
    def test_switch_camera(self):
        self.assertEqual(self.studio.facing, "user")
        self.studio.handle(event(ActionKind.SWITCH_CAMERA))
        self.assertEqual(self.studio.facing, "environment")
        self.studio.handle(event(ActionKind.SWITCH_CAMERA))
        self.assertEqual(self.studio.facing, "user")
    
    def test_filters(self):
        self.studio.handle(event(ActionKind.NEXT_FILTER))
        self.studio.handle(event(ActionKind.NEXT_FILTER))
        self.assertEqual(self.studio.filter, FilterKind.SEPIA)
        self.assertEqual(self.studio.handle(event(ActionKind.REMOVE_FILTER)), "Filter removed")
        self.assertEqual(self.studio.filter, FilterKind.NONE)
    
    def test_zoom_clamped(self):
        for _ in range(25):
            self.studio.handle(event(ActionKind.ZOOM_IN))
        self.assertEqual(self.studio.zoom, 3.0)
        
        for _ in range(3):
            self.studio.handle(event(ActionKind.ZOOM_OUT))
        self.assertAlmostEqual(self.studio.zoom, 2.7)
        
        for _ in range(30):
            message = self.studio.handle(event(ActionKind.ZOOM_OUT))
        self.assertEqual(self.studio.zoom, 1.0)
        self.assertEqual(message, "Zoom: 100%")
    
    def test_zoom_steps(self):
        message = self.studio.handle(event(ActionKind.ZOOM_IN))
        self.assertAlmostEqual(self.studio.zoom, 1.1)
        self.assertEqual(message, "Zoom: 110%")
    
    def test_timer_cycle(self):
        seen = []
        for _ in range(4):
            self.studio.handle(event(ActionKind.TOGGLE_TIMER))
            seen.append(self.studio.timer_s)
        self.assertEqual(seen, [5, 10, 0, 3])
    
    def test_recording(self):
        self.assertEqual(self.studio.handle(event(ActionKind.TOGGLE_RECORDING, 1000.0)), "Recording started")
        self.assertTrue(self.studio.is_recording)
        
        message = self.studio.handle(event(ActionKind.TOGGLE_RECORDING, 3500.0))
        self.assertEqual(message, "Recording stopped (2.5s)")
        self.assertFalse(self.studio.is_recording)
        self.assertTrue(self.studio.gallery[-1].is_video)
    
    def test_recording_started_at_time_zero(self):
        self.studio.handle(event(ActionKind.TOGGLE_RECORDING, 0.0))
        message = self.studio.handle(event(ActionKind.TOGGLE_RECORDING, 2500.0))
        self.assertEqual(message, "Recording stopped (2.5s)")
    
    def test_discard_last(self):
        self.assertIsNone(self.studio.handle(event(ActionKind.DISCARD_LAST)))
        self.studio.handle(event(ActionKind.CAPTURE, 1.0))
        self.studio.handle(event(ActionKind.CAPTURE, 2.0))
        self.assertEqual(self.studio.handle(event(ActionKind.DISCARD_LAST)), "Photo discarded")
        self.assertEqual([p.timestamp_ms for p in self.studio.gallery], [1.0])
    
    def test_save_last(self):
        self.assertIsNone(self.studio.handle(event(ActionKind.SAVE_LAST)))
        self.assertEqual(self.saved, [])
        
        self.studio.handle(event(ActionKind.CAPTURE, 7.0))
        self.assertEqual(self.studio.handle(event(ActionKind.SAVE_LAST)), "Photo saved")
        self.assertEqual(self.saved[0].timestamp_ms, 7.0)
        self.assertEqual(len(self.studio.gallery), 1)


class TestMakeCollage(unittest.TestCase):
    
    def test_missing_images(self):
        self.assertIsNone(make_collage([]))
        self.assertIsNone(make_collage(["frame", np.zeros((4, 4, 3), dtype=np.uint8)]))
    
    def test_grayscale_and_partial_grid(self):
        images = [np.full((20, 30), 50, dtype=np.uint8)] * 3
        collage = make_collage(images, tile=10)
        self.assertEqual(collage.shape, (20, 20, 3))
        self.assertEqual(collage[15, 5].tolist(), [50, 50, 50])
        self.assertEqual(collage[15, 15].tolist(), [0, 0, 0])


class TestCaptureTimer(unittest.TestCase):
    
    def test_releases_capture_when_due(self):
        timer = CaptureTimer()
        self.assertTrue(timer.arm(event(ActionKind.CAPTURE, 1000.0), 1000.0, 3))
        
        self.assertEqual(timer.remaining_s(1000.0), 3)
        self.assertEqual(timer.remaining_s(2500.0), 2)
        self.assertIsNone(timer.poll(3999.0))
        
        released = timer.poll(4000.0)
        self.assertEqual(released.kind, ActionKind.CAPTURE)
        self.assertEqual(released.timestamp_ms, 4000.0)
        self.assertIsNone(timer.poll(5000.0))
        self.assertEqual(timer.remaining_s(5000.0), 0)
    
    def test_second_arm_ignored_while_counting(self):
        timer = CaptureTimer()
        timer.arm(event(ActionKind.CAPTURE, 0.0), 0.0, 5)
        self.assertFalse(timer.arm(event(ActionKind.CAPTURE, 100.0), 100.0, 5))
        self.assertIsNone(timer.poll(4999.0))
        self.assertEqual(timer.poll(5000.0).timestamp_ms, 5000.0)


if __name__ == '__main__':
    unittest.main()
