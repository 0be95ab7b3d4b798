import json
import logging
import math
import os
import time

import numpy as np

logger = logging.getLogger(__name__)

EPS = 1e-6
DEGENERATE_ANGLE = 180.0


# ---------- vector & geometry ----------
def vector(a, b) -> np.ndarray:
    """Vector from b to a."""
    return np.asarray(a, dtype=float) - np.asarray(b, dtype=float)


def magnitude(v) -> float:
    return float(np.linalg.norm(v))


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def distance3(a, b) -> float:
    """Euclidean distance using x, y and z."""
    return magnitude(vector(a[:3], b[:3]))


def distance2(a, b) -> float:
    """Euclidean distance in the image plane (x, y only)."""
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def normalize(v, fallback=(0.0, -1.0, 0.0)) -> np.ndarray:
    length = magnitude(v)
    if length < EPS:
        return np.asarray(fallback, dtype=float)
    return np.asarray(v, dtype=float) / length


def angle(a, b, c) -> float:
    """
    Angle (degrees) at b for points a-b-c.
    A zero-length bone reads as a straight joint.
    """
    v1 = vector(a, b)
    v2 = vector(c, b)
    mag1 = magnitude(v1)
    mag2 = magnitude(v2)
    if mag1 < EPS or mag2 < EPS:
        return DEGENERATE_ANGLE
    cosine = clamp(float(np.dot(v1, v2)) / (mag1 * mag2), -1.0, 1.0)
    return math.degrees(math.acos(cosine))


# ---------- config ----------
def deep_merge(base, override):
    """Merge `override` into `base` in place, one level of nesting deep."""
    if not override:
        return base
    for k, v in override.items():
        if isinstance(v, dict):
            base.setdefault(k, {}).update(v)
        else:
            base[k] = v
    return base


def load_config(path="config.json"):
    if not os.path.exists(path):
        logger.info("config '%s' not found, using defaults.", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Failed to load config '%s': %s", path, e)
        return {}


class ConfigWatcher:
    """
    Hot-reload source for the demo loop.

    `check_reload()` is meant to run once per frame: it stats `path` at most every
    `min_check_interval` seconds and re-parses the file only when its mtime moved.
    A file that disappears or stops parsing leaves the last good config in place.
    """

    def __init__(self, path="config.json", min_check_interval=0.5, clock=time.monotonic):
        self.path = path
        self.min_check_interval = min_check_interval
        self._clock = clock
        self._next_check = None
        self._mtime = None
        self._cfg = {}
        self._refresh(self._stat())

    def _stat(self):
        try:
            return os.path.getmtime(self.path)
        except OSError:
            return None

    def _refresh(self, mtime):
        if mtime is None:
            return
        cfg = load_config(self.path)
        self._mtime = mtime
        if cfg:
            self._cfg = cfg

    def get_config(self):
        return self._cfg

    def check_reload(self):
        now = self._clock()
        if self._next_check is not None and now < self._next_check:
            return self._cfg
        self._next_check = now + self.min_check_interval

        mtime = self._stat()
        if mtime is not None and mtime != self._mtime:
            logger.info("%s changed, reloading", self.path)
            self._refresh(mtime)
        return self._cfg
