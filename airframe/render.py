"""
Frame rendering: digital zoom, filter application and status overlay.
"""
from typing import List, Optional

import cv2
import numpy as np

from .filters import FilterPipeline, PixelBuffer


def zoom_crop(frame: np.ndarray, zoom: float) -> np.ndarray:
    """
    Centre-crop the frame by 1/zoom and scale it back to the original size.
    
    Args:
        frame: Input frame (any channel layout)
        zoom: Zoom factor, 1.0 means no zoom
        
    Returns:
        Zoomed frame with the same shape as the input
    """
    if zoom <= 1.0:
        return frame
    
    height, width = frame.shape[:2]
    crop_w = max(1, int(round(width / zoom)))
    crop_h = max(1, int(round(height / zoom)))
    x0 = (width - crop_w) // 2
    y0 = (height - crop_h) // 2
    
    crop = frame[y0:y0 + crop_h, x0:x0 + crop_w]
    return cv2.resize(crop, (width, height), interpolation=cv2.INTER_LINEAR)


def to_pixel_buffer(frame_bgr: np.ndarray) -> PixelBuffer:
    """Convert a BGR camera frame to an RGBA pixel buffer."""
    rgba = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGBA)
    height, width = rgba.shape[:2]
    return PixelBuffer(width=width, height=height, data=rgba)


def from_pixel_buffer(buffer: PixelBuffer) -> np.ndarray:
    """Convert an RGBA pixel buffer back to a BGR frame for display."""
    return cv2.cvtColor(buffer.pixels(), cv2.COLOR_RGBA2BGR)


def render_frame(frame_bgr: np.ndarray, zoom: float, pipeline: FilterPipeline) -> np.ndarray:
    """
    Produce the displayed frame: zoom, then the active filter.
    
    Args:
        frame_bgr: Camera frame in BGR format
        zoom: Current zoom factor
        pipeline: Filter pipeline holding the active filter
        
    Returns:
        New BGR frame; the input is not modified
    """
    zoomed = zoom_crop(frame_bgr, zoom)
    buffer = to_pixel_buffer(zoomed)
    pipeline.apply(buffer)
    return from_pixel_buffer(buffer)


def draw_status(frame: np.ndarray, lines: List[str], recording: bool = False,
                feedback: Optional[str] = None) -> np.ndarray:
    """Draw status text, a recording marker and the last feedback message."""
    y = 30
    for line in lines:
        cv2.putText(frame, line, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2)
        y += 28
    
    if recording:
        cv2.circle(frame, (frame.shape[1] - 30, 30), 10, (0, 0, 255), -1)
    
    if feedback:
        cv2.putText(frame, feedback, (10, frame.shape[0] - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 255, 0), 2)
    
    return frame
