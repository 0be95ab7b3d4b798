from typing import Mapping, Optional, Sequence, Tuple, Union

import numpy as np

NUM_LANDMARKS = 21

WRIST = 0
THUMB_MCP, THUMB_IP, THUMB_TIP = 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

# The middle finger MCP doubles as the palm centre.
PALM_CENTER = MIDDLE_MCP

# (mcp, pip, dip, tip) for the four long fingers, in index..pinky order.
FINGERS = {
    "index": (INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP),
    "middle": (MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP),
    "ring": (RING_MCP, RING_PIP, RING_DIP, RING_TIP),
    "pinky": (PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP),
}

Point = Tuple[float, float, float]
LandmarkLike = Union[Sequence[float], Mapping[str, float]]


def _extract_point(entry: Union[LandmarkLike, object]) -> Point:
    if hasattr(entry, "x") and hasattr(entry, "y"):
        return (float(entry.x), float(entry.y), float(getattr(entry, "z", 0.0) or 0.0))
    if isinstance(entry, Mapping):
        return (float(entry.get("x", 0.0)), float(entry.get("y", 0.0)), float(entry.get("z", 0.0)))
    if isinstance(entry, (list, tuple, np.ndarray)) and len(entry) >= 2:
        z = entry[2] if len(entry) >= 3 else 0.0
        return (float(entry[0]), float(entry[1]), float(z))
    raise ValueError("Unsupported landmark format; expected object with x,y,z or sequence of 3 values.")


def landmarks_to_array(landmarks) -> np.ndarray:
    """Convert any supported landmark container into a (21, 3) float array."""
    if isinstance(landmarks, np.ndarray):
        arr = np.asarray(landmarks, dtype=float)
        if arr.ndim == 2 and arr.shape[1] == 2:
            arr = np.hstack([arr, np.zeros((arr.shape[0], 1))])
    else:
        arr = np.array([_extract_point(p) for p in landmarks], dtype=float)
    if arr.ndim != 2 or arr.shape != (NUM_LANDMARKS, 3):
        raise ValueError(
            f"Expected {NUM_LANDMARKS} landmarks with x,y,z; got shape {arr.shape}."
        )
    return arr


class HandData:
    """
    Container for one detected hand in one frame.
    The engine only reads `landmarks`; the rest is carried along for the host.
    """

    def __init__(self, landmarks, handedness: str = "Unknown", timestamp: float = 0.0, raw_landmarks=None):
        # (21, 3) array in normalized image space, y grows downward
        self.landmarks: np.ndarray = landmarks_to_array(landmarks)

        # "Left" / "Right" as reported by the estimator
        self.handedness = handedness

        # absolute time (seconds)
        self.timestamp = timestamp

        # estimator object, kept for drawing
        self.raw_landmarks = raw_landmarks

    @classmethod
    def from_landmarks(cls, landmarks, handedness: str = "Unknown", timestamp: float = 0.0) -> "HandData":
        return cls(landmarks, handedness=handedness, timestamp=timestamp)

    @property
    def palm_center(self) -> Tuple[float, float]:
        p = self.landmarks[PALM_CENTER]
        return (float(p[0]), float(p[1]))

    @property
    def wrist(self) -> Point:
        p = self.landmarks[WRIST]
        return (float(p[0]), float(p[1]), float(p[2]))

    def to_dict(self):
        """Serialize to JSON-friendly dict."""
        return {
            "handedness": self.handedness,
            "timestamp": self.timestamp,
            "landmarks": self.landmarks.tolist(),
        }


def coerce_hand(sample) -> Optional[HandData]:
    """Accept HandData, a landmark sequence or nothing; return None when no hand is present."""
    if sample is None:
        return None
    if isinstance(sample, HandData):
        return sample
    if isinstance(sample, np.ndarray):
        return HandData(sample) if sample.size else None
    if len(sample) == 0:
        return None
    return HandData(sample)
