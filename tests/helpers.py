"""
Synthetic hand landmarks for tests.
"""
from typing import List, Tuple


def make_hand(thumb: bool = False, index: bool = False, middle: bool = False,
              ring: bool = False, pinky: bool = False,
              wrist: Tuple[float, float] = (0.5, 0.8),
              thumb_tip_y: float = 0.5) -> List[Tuple[float, float]]:
    """
    Build 21 (x, y) landmarks with the requested digits extended.
    
    Every point starts at the centre. Extended digits get their tip above
    the base joint; the thumb is moved sideways away from its base.
    Landmark 5 (index base) sits at y=0.5.
    """
    points = [[0.5, 0.5] for _ in range(21)]
    points[0] = list(wrist)
    
    points[4][0] = 0.6 if thumb else 0.5
    points[4][1] = thumb_tip_y
    
    for tip, extended in zip((8, 12, 16, 20), (index, middle, ring, pinky)):
        points[tip][1] = 0.3 if extended else 0.6
    
    return [tuple(p) for p in points]


def open_palm(wrist: Tuple[float, float] = (0.5, 0.8)) -> List[Tuple[float, float]]:
    return make_hand(True, True, True, True, True, wrist=wrist)


def point_down() -> List[Tuple[float, float]]:
    """Only the index extended, tip well below the index base."""
    points = [list(p) for p in make_hand(index=True)]
    points[6][1] = 0.9
    points[8][1] = 0.75
    return [tuple(p) for p in points]
