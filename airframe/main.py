"""
Main application for the gesture-controlled photo studio.
"""
import logging
import sys
import time
from typing import List, Optional

import cv2

from .config import CameraConfig, load_config
from .filters import FilterKind, FilterPipeline
from .gestures import GestureProcessor
from .landmarks import count_extended, draw_landmarks
from .render import draw_status, render_frame
from .studio import CaptureTimer, StudioController
from .types import ActionEvent, ActionKind, LandmarkValidationError

logger = logging.getLogger(__name__)


def camera_index_for(cfg: CameraConfig, facing: str) -> int:
    """Device index for a studio facing; "environment" uses the alternate camera if one is set."""
    if facing == "environment" and cfg.alternate_index is not None:
        return cfg.alternate_index
    return cfg.index


def dispatch_event(studio: StudioController, capture_timer: CaptureTimer,
                   event: ActionEvent, now_ms: float) -> Optional[str]:
    """
    Send an event to the studio, holding captures back while the self-timer runs.
    
    Returns:
        Feedback message, or None if nothing changed
    """
    if event.kind is ActionKind.CAPTURE and studio.timer_s > 0:
        if capture_timer.arm(event, now_ms, studio.timer_s):
            return f"Capturing in {studio.timer_s}s"
        return None
    return studio.handle(event)


class AirFrameApp:
    """Main application class: camera -> gestures -> studio, camera -> filters -> display."""
    
    def __init__(self, config_path: Optional[str] = None):
        """Initialize the application with configuration."""
        # Imported here so the rest of the package works without MediaPipe installed
        from .tracker import HandsTracker
        
        self.config = load_config(config_path)
        self.tracker = HandsTracker(
            max_num_hands=self.config.mediapipe.max_num_hands,
            min_detection_conf=self.config.mediapipe.min_detection_confidence,
            min_tracking_conf=self.config.mediapipe.min_tracking_confidence
        )
        self.gesture_processor = GestureProcessor(self.config)
        self.pipeline = FilterPipeline(
            FilterKind(self.config.filters.default),
            seed=self.config.filters.vintage_seed
        )
        self.last_output = None
        self.studio = StudioController(
            self.config.studio,
            pipeline=self.pipeline,
            frame_source=lambda: None if self.last_output is None else self.last_output.copy()
        )
        self.capture_timer = CaptureTimer()
        self.feedback: Optional[str] = None
        
        self.cap = None
        self.camera_index: Optional[int] = None
        self._open_camera()
    
    def _open_camera(self):
        index = camera_index_for(self.config.camera, self.studio.facing)
        if index == self.camera_index:
            logger.info(f"🎥 Only one camera configured, staying on {index} ({self.studio.facing})")
            return
        if self.cap is not None:
            self.cap.release()
        
        self.camera_index = index
        self.cap = cv2.VideoCapture(index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.config.camera.fps)
        
        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open camera {index}")
        logger.info(f"🎥 Camera {index} opened ({self.studio.facing})")
    
    def run(self):
        """Run the main application loop."""
        logger.info(f"Starting {self.config.display.window_name}")
        logger.info("🎯 Gestures:")
        logger.info("  - Open palm (hold 2s) = Take photo")
        logger.info("  - Peace = Switch camera | Rock = Cycle timer")
        logger.info("  - Thumbs up/down = Next filter / Remove filter")
        logger.info("  - Point up/down = Zoom in/out | Fist (hold 1s) = Record")
        logger.info("  - Swipe left/right = Discard / Save last photo")
        logger.info("Press 'q' to quit")
        
        while True:
            ret, frame = self.cap.read()
            if not ret:
                logger.error("Failed to read frame from camera")
                break
            
            if self.config.camera.mirror:
                frame = cv2.flip(frame, 1)
            
            now_ms = time.monotonic() * 1000.0
            landmark_frame = self.tracker.process(frame, now_ms)
            
            try:
                result = self.gesture_processor.process_frame(landmark_frame)
            except LandmarkValidationError as e:
                logger.warning(f"Rejected landmark frame: {e}")
                result = None
            
            if result is not None:
                facing = self.studio.facing
                for event in result.events:
                    self.feedback = dispatch_event(self.studio, self.capture_timer, event, now_ms) or self.feedback
                if self.studio.facing != facing:
                    self._open_camera()
            
            due = self.capture_timer.poll(now_ms)
            if due is not None:
                self.feedback = self.studio.handle(due) or self.feedback
            
            output = render_frame(frame, self.studio.zoom, self.pipeline)
            self.last_output = output
            
            display = output.copy()
            if result is not None and result.landmarks and self.config.display.show_landmarks:
                draw_landmarks(display, result.landmarks)
            
            if self.config.display.show_status:
                draw_status(display, self._status_lines(result), self.studio.is_recording, self.feedback)
            
            cv2.imshow(self.config.display.window_name, display)
            
            # Check for quit key
            if cv2.waitKey(1) & 0xFF == ord('q'):
                break
        
        self.close()
    
    def _status_lines(self, result) -> List[str]:
        if result is None or not result.hand_detected:
            gesture_line = "No hand detected"
        else:
            gesture_line = f"Gesture: {result.label.value} ({count_extended(result.fingers)} fingers)"
        lines = [
            gesture_line,
            f"Filter: {self.studio.filter.value} | Zoom: {round(self.studio.zoom * 100)}%",
            f"Timer: {self.studio.timer_s}s | Gallery: {len(self.studio.gallery)}",
        ]
        if self.capture_timer.pending is not None:
            lines.append(f"Capturing in {self.capture_timer.remaining_s(time.monotonic() * 1000.0)}...")
        return lines
    
    def close(self):
        """Cleanup resources."""
        if self.cap is not None and self.cap.isOpened():
            self.cap.release()
        self.tracker.close()
        cv2.destroyAllWindows()


def main():
    """Entry point for the application."""
    verbose = "--verbose" in sys.argv
    config_path = None
    for arg in sys.argv[1:]:
        if arg.startswith("--config="):
            config_path = arg.split("=", 1)[1]
    
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )
    
    app = None
    try:
        app = AirFrameApp(config_path)
        if "--booth" in sys.argv:
            logger.info(app.studio.start_photo_booth())
        app.run()
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        if app is not None:
            app.close()
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
