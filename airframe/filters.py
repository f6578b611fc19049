"""
Per-frame image filters operating in place on RGBA pixel buffers.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Union

import numpy as np

from .types import FilterPreconditionError

logger = logging.getLogger(__name__)

# Rec. 601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

# Rows are output channels R', G', B'
SEPIA_MATRIX = np.array([
    [0.393, 0.769, 0.189],
    [0.349, 0.686, 0.168],
    [0.272, 0.534, 0.131],
])

VINTAGE_GAINS = np.array([1.2, 1.1, 0.8])
VINTAGE_NOISE_AMPLITUDE = 25.0  # noise in [-12.5, +12.5]

COLOR_POP_MARGIN = 30
COLOR_POP_BOOST = 1.2


class FilterKind(str, Enum):
    """Available filters, in the order used by next_filter()."""
    NONE = "none"
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    VINTAGE = "vintage"
    COLOR_POP = "colorPop"
    BEAUTY = "beauty"


def next_filter(kind: FilterKind) -> FilterKind:
    """Cycle to the next filter, wrapping back to NONE after the last one."""
    kinds = list(FilterKind)
    return kinds[(kinds.index(kind) + 1) % len(kinds)]


@dataclass
class PixelBuffer:
    """
    Row-major RGBA image of width x height pixels.
    
    data may be a uint8 numpy array (any shape with width*height*4 elements)
    or a bytearray; either way filters write straight into it.
    """
    width: int
    height: int
    data: Union[np.ndarray, bytearray]
    
    def pixels(self) -> np.ndarray:
        """
        Return a (height, width, 4) view onto the buffer.
        
        Raises:
            FilterPreconditionError: dimensions and storage do not agree
        """
        if self.width <= 0 or self.height <= 0:
            raise FilterPreconditionError(
                f"Invalid buffer dimensions {self.width}x{self.height}"
            )
        
        if isinstance(self.data, (bytearray, memoryview)):
            array = np.frombuffer(self.data, dtype=np.uint8)
        elif isinstance(self.data, np.ndarray):
            array = self.data
        else:
            raise FilterPreconditionError(f"Unsupported buffer type: {type(self.data).__name__}")
        
        if array.dtype != np.uint8:
            raise FilterPreconditionError(f"Buffer must be uint8, got {array.dtype}")
        if not array.flags.c_contiguous or not array.flags.writeable:
            raise FilterPreconditionError("Buffer must be contiguous and writeable")
        
        expected = self.width * self.height * 4
        if array.size != expected:
            raise FilterPreconditionError(
                f"Buffer holds {array.size} bytes, expected {expected} for {self.width}x{self.height} RGBA"
            )
        
        return array.reshape(self.height, self.width, 4)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Noise source for the vintage filter; pass a seed for reproducible output."""
    return np.random.default_rng(seed)


def _store(dst: np.ndarray, values: np.ndarray):
    """Write float values into uint8 channels, rounding half to even and clamping."""
    dst[...] = np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _grayscale(px: np.ndarray, rng: np.random.Generator):
    luma = px[..., :3] @ LUMA_WEIGHTS
    _store(px[..., :3], luma[..., np.newaxis])


def _sepia(px: np.ndarray, rng: np.random.Generator):
    _store(px[..., :3], px[..., :3] @ SEPIA_MATRIX.T)


def _vintage(px: np.ndarray, rng: np.random.Generator):
    rgb = px[..., :3]
    _store(rgb, np.minimum(255.0, rgb * VINTAGE_GAINS))
    
    # Film grain: one noise value per pixel, shared by all three channels
    noise = (rng.random(px.shape[:2]) - 0.5) * VINTAGE_NOISE_AMPLITUDE
    _store(rgb, rgb + noise[..., np.newaxis])


def _color_pop(px: np.ndarray, rng: np.random.Generator):
    rgb = px[..., :3].astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    
    red_dominant = (r > g + COLOR_POP_MARGIN) & (r > b + COLOR_POP_MARGIN)
    luma = rgb @ LUMA_WEIGHTS
    
    out = np.repeat(luma[..., np.newaxis], 3, axis=-1)
    out[red_dominant] = rgb[red_dominant]
    out[red_dominant, 0] = np.minimum(255.0, r[red_dominant] * COLOR_POP_BOOST)
    _store(px[..., :3], out)


def _beauty(px: np.ndarray, rng: np.random.Generator):
    height, width = px.shape[:2]
    if height < 3 or width < 3:
        return
    
    # Read from an unfiltered copy so blurred pixels don't feed back
    source = px[..., :3].astype(np.uint16)
    total = np.zeros((height - 2, width - 2, 3), dtype=np.uint16)
    for dy in range(3):
        for dx in range(3):
            total += source[dy:dy + height - 2, dx:dx + width - 2]
    
    _store(px[1:-1, 1:-1, :3], total / 9.0)


_FILTERS: Dict[FilterKind, Callable[[np.ndarray, np.random.Generator], None]] = {
    FilterKind.GRAYSCALE: _grayscale,
    FilterKind.SEPIA: _sepia,
    FilterKind.VINTAGE: _vintage,
    FilterKind.COLOR_POP: _color_pop,
    FilterKind.BEAUTY: _beauty,
}


def apply_filter(buffer: PixelBuffer, kind: FilterKind,
                 rng: Optional[np.random.Generator] = None) -> PixelBuffer:
    """
    Apply a filter to the buffer in place. Alpha is never modified.
    
    Args:
        buffer: RGBA pixel buffer owned by the caller for the duration of the call
        kind: Filter to apply
        rng: Noise source for VINTAGE (a fresh unseeded one is used if None)
        
    Returns:
        The same buffer, for chaining
        
    Raises:
        FilterPreconditionError: buffer storage inconsistent with its dimensions
    """
    kind = FilterKind(kind)
    if kind is FilterKind.NONE:
        return buffer
    
    px = buffer.pixels()
    if kind is FilterKind.VINTAGE and rng is None:
        rng = make_rng()
    
    _FILTERS[kind](px, rng)
    return buffer


class FilterPipeline:
    """Active filter selection plus the vintage noise generator it owns."""
    
    def __init__(self, kind: FilterKind = FilterKind.NONE, seed: Optional[int] = None):
        self.kind = FilterKind(kind)
        self.rng = make_rng(seed)
    
    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return apply_filter(buffer, self.kind, self.rng)
    
    def next(self) -> FilterKind:
        self.kind = next_filter(self.kind)
        logger.info(f"🎨 Filter: {self.kind.value}")
        return self.kind
    
    def reset(self) -> FilterKind:
        self.kind = FilterKind.NONE
        logger.info("🎨 Filter removed")
        return self.kind
