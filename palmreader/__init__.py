"""
Hand-gesture engine for the card-reading experience.

Turns a stream of 21-point hand landmarks into debounced interaction events.
"""

from .GestureClassifier import Gesture, GestureClassifier, classify
from .GestureProcessor import DEFAULT_CONFIG, LEFT, RIGHT, GestureCallbacks, GestureProcessor
from .GestureState import EngineState, GestureHistory
from .HandData import HandData, landmarks_to_array
from .HandFeatures import FingerFeature, HandFeatureExtractor, HandFeatures, ThumbFeature, extract_features, palm_scale
from .timers import ManualScheduler, ThreadScheduler, TimerHandle

__all__ = [
    "DEFAULT_CONFIG",
    "LEFT",
    "RIGHT",
    "EngineState",
    "FingerFeature",
    "Gesture",
    "GestureCallbacks",
    "GestureClassifier",
    "GestureHistory",
    "GestureProcessor",
    "HandData",
    "HandFeatureExtractor",
    "HandFeatures",
    "ManualScheduler",
    "ThreadScheduler",
    "ThumbFeature",
    "TimerHandle",
    "classify",
    "extract_features",
    "landmarks_to_array",
    "palm_scale",
]
