"""
Configuration management for the gesture-controlled photo studio.
"""
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass

# Shipped inside the package so installed copies can find it
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int
    width: int
    height: int
    fps: int
    mirror: bool
    alternate_index: Optional[int] = None  # camera used for the "environment" facing


@dataclass
class MediaPipeConfig:
    """MediaPipe Hands configuration settings."""
    max_num_hands: int
    min_detection_confidence: float
    min_tracking_confidence: float


@dataclass
class ClassifierConfig:
    """Finger-state classifier thresholds."""
    thumb_extension: float = 0.05


@dataclass
class MotionConfig:
    """Swipe detection thresholds."""
    swipe_min_dx: float = 0.15
    swipe_max_dy: float = 0.1
    reset_on_hand_lost: bool = False


@dataclass
class RecognizerConfig:
    """Shape classification thresholds."""
    point_dead_zone: float = 0.1


@dataclass
class TimingConfig:
    """Gesture state machine durations in milliseconds."""
    debounce_ms: float = 100.0
    sustain_ms: float = 2000.0
    hold_ms: float = 1000.0


@dataclass
class GesturesConfig:
    """Gesture recognition configuration."""
    classifier: ClassifierConfig
    motion: MotionConfig
    recognizer: RecognizerConfig
    timing: TimingConfig


@dataclass
class FiltersConfig:
    """Filter pipeline configuration."""
    default: str
    vintage_seed: Optional[int]


@dataclass
class StudioConfig:
    """Studio controller settings."""
    zoom_min: float
    zoom_max: float
    zoom_step: float
    timer_choices: List[int]
    timer_default: int
    booth_shots: int


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    window_name: str
    show_landmarks: bool
    show_status: bool


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig
    mediapipe: MediaPipeConfig
    gestures: GesturesConfig
    filters: FiltersConfig
    studio: StudioConfig
    display: DisplayConfig


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.
    
    Args:
        path: Path to config file. If None, uses the packaged config.default.yaml
        
    Returns:
        Configuration object with all settings
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)
    
    if not isinstance(data, dict):
        raise ValueError(f"Config file is empty or malformed: {config_path}")
    
    try:
        return _dict_to_config(data)
    except KeyError as e:
        raise ValueError(f"Missing config key {e} in {config_path}") from e


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    camera_data = data['camera']
    camera = CameraConfig(
        index=int(camera_data['index']),
        width=int(camera_data['width']),
        height=int(camera_data['height']),
        fps=int(camera_data['fps']),
        mirror=bool(camera_data.get('mirror', True)),
        alternate_index=None if camera_data.get('alternate_index') is None else int(camera_data['alternate_index'])
    )
    
    mp_data = data['mediapipe']
    mediapipe = MediaPipeConfig(
        max_num_hands=int(mp_data['max_num_hands']),
        min_detection_confidence=float(mp_data['min_detection_confidence']),
        min_tracking_confidence=float(mp_data['min_tracking_confidence'])
    )
    
    # Gesture thresholds fall back to the calibrated defaults when omitted
    gestures_data = data.get('gestures') or {}
    classifier_data = gestures_data.get('classifier') or {}
    motion_data = gestures_data.get('motion') or {}
    recognizer_data = gestures_data.get('recognizer') or {}
    timing_data = gestures_data.get('timing') or {}
    gestures = GesturesConfig(
        classifier=ClassifierConfig(
            thumb_extension=float(classifier_data.get('thumb_extension', 0.05))
        ),
        motion=MotionConfig(
            swipe_min_dx=float(motion_data.get('swipe_min_dx', 0.15)),
            swipe_max_dy=float(motion_data.get('swipe_max_dy', 0.1)),
            reset_on_hand_lost=bool(motion_data.get('reset_on_hand_lost', False))
        ),
        recognizer=RecognizerConfig(
            point_dead_zone=float(recognizer_data.get('point_dead_zone', 0.1))
        ),
        timing=TimingConfig(
            debounce_ms=float(timing_data.get('debounce_ms', 100)),
            sustain_ms=float(timing_data.get('sustain_ms', 2000)),
            hold_ms=float(timing_data.get('hold_ms', 1000))
        )
    )
    
    filters_data = data.get('filters') or {}
    seed = filters_data.get('vintage_seed')
    filters = FiltersConfig(
        default=str(filters_data.get('default', 'none')),
        vintage_seed=None if seed is None else int(seed)
    )
    
    studio_data = data['studio']
    studio = StudioConfig(
        zoom_min=float(studio_data['zoom_min']),
        zoom_max=float(studio_data['zoom_max']),
        zoom_step=float(studio_data['zoom_step']),
        timer_choices=[int(v) for v in studio_data['timer_choices']],
        timer_default=int(studio_data['timer_default']),
        booth_shots=int(studio_data['booth_shots'])
    )
    if studio.zoom_min > studio.zoom_max:
        raise ValueError(f"zoom_min ({studio.zoom_min}) exceeds zoom_max ({studio.zoom_max})")
    if studio.timer_default not in studio.timer_choices:
        raise ValueError(f"timer_default {studio.timer_default} not in timer_choices {studio.timer_choices}")
    
    display_data = data['display']
    display = DisplayConfig(
        window_name=display_data['window_name'],
        show_landmarks=bool(display_data['show_landmarks']),
        show_status=bool(display_data['show_status'])
    )
    
    return Cfg(
        camera=camera,
        mediapipe=mediapipe,
        gestures=gestures,
        filters=filters,
        studio=studio,
        display=display
    )
