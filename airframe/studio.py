"""
Studio controller: applies dispatched actions to camera, filter, zoom,
recording, self-timer and gallery state.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional

import cv2
import numpy as np

from .config import StudioConfig
from .filters import FilterKind, FilterPipeline
from .types import ActionEvent, ActionKind

logger = logging.getLogger(__name__)

Handler = Callable[[ActionEvent], Optional[str]]

COLLAGE_TILE = 400  # px per shot in the photo booth collage


def make_collage(images: List[Any], tile: int = COLLAGE_TILE, columns: int = 2) -> Optional[np.ndarray]:
    """
    Tile frames into a grid, each scaled to tile x tile pixels.
    
    Args:
        images: BGR frames in shot order (4 shots give a 2x2 grid)
        tile: Edge length of each cell in pixels
        columns: Cells per row
        
    Returns:
        Collage image, or None if any shot has no image
    """
    if not images or not all(isinstance(img, np.ndarray) for img in images):
        return None
    
    rows = -(-len(images) // columns)
    collage = np.zeros((rows * tile, columns * tile, 3), dtype=np.uint8)
    for i, img in enumerate(images):
        row, col = divmod(i, columns)
        if img.ndim == 2:
            img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
        collage[row * tile:(row + 1) * tile, col * tile:(col + 1) * tile] = cv2.resize(img[..., :3], (tile, tile))
    return collage


class CaptureTimer:
    """Holds a capture back for the self-timer countdown."""
    
    def __init__(self):
        self.pending: Optional[ActionEvent] = None
        self.due_ms: Optional[float] = None
    
    def arm(self, event: ActionEvent, now_ms: float, seconds: float) -> bool:
        """Start a countdown for event; returns False if one is already running."""
        if self.pending is not None:
            return False
        self.pending = event
        self.due_ms = now_ms + seconds * 1000.0
        return True
    
    def remaining_s(self, now_ms: float) -> int:
        """Whole seconds left on the countdown (0 when idle)."""
        if self.due_ms is None:
            return 0
        return max(0, math.ceil((self.due_ms - now_ms) / 1000.0))
    
    def poll(self, now_ms: float) -> Optional[ActionEvent]:
        """Release the pending capture once due, re-stamped with the release time."""
        if self.pending is None or now_ms < self.due_ms:
            return None
        event = replace(self.pending, timestamp_ms=now_ms)
        self.pending = None
        self.due_ms = None
        return event


class ActionDispatcher:
    """Callback table routing action events to handlers."""
    
    def __init__(self):
        self.handlers: Dict[ActionKind, Handler] = {}
    
    def register(self, kind: ActionKind, handler: Handler) -> None:
        self.handlers[ActionKind(kind)] = handler
    
    def dispatch(self, event: ActionEvent) -> Optional[str]:
        """
        Run the handler bound to the event's kind.
        
        Returns:
            Feedback message from the handler, or None if nothing is bound
        """
        handler = self.handlers.get(event.kind)
        if handler is None:
            logger.warning(f"No handler for action: {event.kind.value}")
            return None
        return handler(event)


@dataclass
class Photo:
    """A captured photo or a finished recording."""
    timestamp_ms: float
    filter: FilterKind
    zoom: float
    countdown_s: int = 0
    is_video: bool = False
    is_collage: bool = False
    image: Optional[Any] = None


class StudioController:
    """
    Keeps the studio state driven by gestures and exposes one handler per action.
    
    Media capture, countdown display, speech and downloads are outside this
    class: captured frames come from frame_source, saved entries go to
    save_sink, and the self-timer delay is applied by the caller with
    CaptureTimer before the capture event reaches this class.
    """
    
    FACINGS = ("user", "environment")
    
    def __init__(self, cfg: StudioConfig, pipeline: Optional[FilterPipeline] = None,
                 frame_source: Optional[Callable[[], Any]] = None,
                 save_sink: Optional[Callable[[Photo], None]] = None):
        """Initialize the studio with configuration and optional collaborators."""
        self.cfg = cfg
        self.pipeline = pipeline or FilterPipeline()
        self.frame_source = frame_source
        self.save_sink = save_sink
        
        self.facing = self.FACINGS[0]
        self.zoom = cfg.zoom_min
        self.timer_s = cfg.timer_default
        self.is_recording = False
        self.recording_started_ms: Optional[float] = None
        self.gallery: List[Photo] = []
        self.saved: List[Photo] = []
        
        # Photo booth mode
        self.booth_mode = False
        self.booth_count = 0
        self.booth_photos: List[Photo] = []
        
        self.dispatcher = ActionDispatcher()
        self.dispatcher.register(ActionKind.CAPTURE, self.capture)
        self.dispatcher.register(ActionKind.SWITCH_CAMERA, self.switch_camera)
        self.dispatcher.register(ActionKind.NEXT_FILTER, self.next_filter)
        self.dispatcher.register(ActionKind.REMOVE_FILTER, self.remove_filter)
        self.dispatcher.register(ActionKind.ZOOM_IN, self.zoom_in)
        self.dispatcher.register(ActionKind.ZOOM_OUT, self.zoom_out)
        self.dispatcher.register(ActionKind.TOGGLE_RECORDING, self.toggle_recording)
        self.dispatcher.register(ActionKind.TOGGLE_TIMER, self.toggle_timer)
        self.dispatcher.register(ActionKind.DISCARD_LAST, self.discard_last)
        self.dispatcher.register(ActionKind.SAVE_LAST, self.save_last)
    
    @property
    def filter(self) -> FilterKind:
        return self.pipeline.kind
    
    def handle(self, event: ActionEvent) -> Optional[str]:
        """Apply an action event and log the resulting feedback."""
        message = self.dispatcher.dispatch(event)
        if message:
            logger.info(f"📸 {message}")
        return message
    
    def start_photo_booth(self) -> str:
        self.booth_mode = True
        self.booth_count = 0
        self.booth_photos = []
        return f"Photo booth: {self.cfg.booth_shots} shots, hold open palm for each"
    
    def capture(self, event: ActionEvent) -> str:
        """
        Take a photo of the current frame.
        
        The self-timer is not waited on here; the caller delays the event
        (see CaptureTimer) and the photo only records the countdown used.
        In photo booth mode shots are held back until the last one, then a
        single collage entry is added to the gallery.
        """
        image = self.frame_source() if self.frame_source is not None else None
        photo = Photo(
            timestamp_ms=event.timestamp_ms,
            filter=self.filter,
            zoom=self.zoom,
            countdown_s=self.timer_s,
            image=image
        )
        
        if not self.booth_mode:
            self.gallery.append(photo)
            return "Photo captured!"
        
        self.booth_photos.append(photo)
        self.booth_count += 1
        if self.booth_count < self.cfg.booth_shots:
            return f"Photo {self.booth_count}/{self.cfg.booth_shots}"
        
        self.gallery.append(Photo(
            timestamp_ms=event.timestamp_ms,
            filter=self.filter,
            zoom=self.zoom,
            countdown_s=self.timer_s,
            image=make_collage([p.image for p in self.booth_photos]),
            is_collage=True
        ))
        shots = self.booth_count
        self.booth_mode = False
        self.booth_count = 0
        self.booth_photos = []
        return f"Photo booth complete ({shots} photos)"
    
    def switch_camera(self, event: ActionEvent) -> str:
        self.facing = self.FACINGS[(self.FACINGS.index(self.facing) + 1) % len(self.FACINGS)]
        return f"Camera switched ({self.facing})"
    
    def next_filter(self, event: ActionEvent) -> str:
        return f"Filter: {self.pipeline.next().value}"
    
    def remove_filter(self, event: ActionEvent) -> str:
        self.pipeline.reset()
        return "Filter removed"
    
    def zoom_in(self, event: ActionEvent) -> str:
        self.zoom = min(self.cfg.zoom_max, round(self.zoom + self.cfg.zoom_step, 6))
        return f"Zoom: {round(self.zoom * 100)}%"
    
    def zoom_out(self, event: ActionEvent) -> str:
        self.zoom = max(self.cfg.zoom_min, round(self.zoom - self.cfg.zoom_step, 6))
        return f"Zoom: {round(self.zoom * 100)}%"
    
    def toggle_recording(self, event: ActionEvent) -> str:
        if not self.is_recording:
            self.is_recording = True
            self.recording_started_ms = event.timestamp_ms
            return "Recording started"
        
        self.is_recording = False
        self.gallery.append(Photo(
            timestamp_ms=event.timestamp_ms,
            filter=self.filter,
            zoom=self.zoom,
            is_video=True
        ))
        duration_s = 0.0
        if self.recording_started_ms is not None:
            duration_s = (event.timestamp_ms - self.recording_started_ms) / 1000.0
        self.recording_started_ms = None
        return f"Recording stopped ({duration_s:.1f}s)"
    
    def toggle_timer(self, event: ActionEvent) -> str:
        choices = self.cfg.timer_choices
        # An unknown current value restarts the cycle at the first choice
        index = choices.index(self.timer_s) if self.timer_s in choices else -1
        self.timer_s = choices[(index + 1) % len(choices)]
        return f"Timer: {self.timer_s}s"
    
    def discard_last(self, event: ActionEvent) -> Optional[str]:
        if not self.gallery:
            return None
        self.gallery.pop()
        return "Photo discarded"
    
    def save_last(self, event: ActionEvent) -> Optional[str]:
        if not self.gallery:
            return None
        last = self.gallery[-1]
        if self.save_sink is not None:
            self.save_sink(last)
        self.saved.append(last)
        return "Video saved" if last.is_video else "Photo saved"
