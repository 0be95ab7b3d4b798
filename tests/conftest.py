import numpy as np
import pytest

from palmreader import GestureCallbacks, GestureProcessor, ManualScheduler

# Upright right hand in image coordinates (y grows downward), palm scale ~0.196.
PALM = {
    0: (0.50, 0.80, 0.0),
    5: (0.44, 0.60, 0.0),
    9: (0.50, 0.58, 0.0),
    13: (0.56, 0.60, 0.0),
    17: (0.61, 0.63, 0.0),
}

THUMB_OUT = {
    1: (0.45, 0.75, 0.0),
    2: (0.40, 0.70, 0.0),
    3: (0.36, 0.66, 0.0),
    4: (0.32, 0.62, 0.0),
}

THUMB_TUCKED = {
    1: (0.46, 0.74, 0.0),
    2: (0.42, 0.68, -0.02),
    3: (0.45, 0.64, -0.05),
    4: (0.50, 0.68, -0.07),
}

# finger straight up
EXTENDED = {
    "index": {6: (0.44, 0.53, 0.0), 7: (0.44, 0.48, 0.0), 8: (0.44, 0.44, 0.0)},
    "middle": {10: (0.50, 0.50, 0.0), 11: (0.50, 0.45, 0.0), 12: (0.50, 0.41, 0.0)},
    "ring": {14: (0.56, 0.53, 0.0), 15: (0.56, 0.48, 0.0), 16: (0.56, 0.44, 0.0)},
    "pinky": {18: (0.61, 0.57, 0.0), 19: (0.61, 0.53, 0.0), 20: (0.61, 0.50, 0.0)},
}

# finger folded toward the camera then down into the palm, 90 degrees at PIP and DIP
CURLED = {
    "index": {6: (0.44, 0.60, -0.06), 7: (0.44, 0.78, -0.06), 8: (0.44, 0.78, -0.01)},
    "middle": {10: (0.50, 0.58, -0.06), 11: (0.50, 0.78, -0.06), 12: (0.50, 0.78, -0.01)},
    "ring": {14: (0.56, 0.60, -0.06), 15: (0.56, 0.78, -0.06), 16: (0.56, 0.78, -0.01)},
    "pinky": {18: (0.61, 0.63, -0.05), 19: (0.61, 0.78, -0.05), 20: (0.61, 0.78, -0.01)},
}

# index bent over so its tip touches the thumb tip
INDEX_PINCH = {6: (0.41, 0.52, -0.02), 7: (0.38, 0.50, -0.02), 8: (0.39, 0.56, -0.01)}
THUMB_PINCH = {
    1: (0.45, 0.75, 0.0),
    2: (0.40, 0.70, 0.0),
    3: (0.37, 0.64, 0.0),
    4: (0.38, 0.56, 0.0),
}


def build_hand(*parts, dx=0.0, dy=0.0, scale=1.0):
    points = {}
    for part in (PALM,) + parts:
        points.update(part)
    assert sorted(points) == list(range(21))
    arr = np.array([points[i] for i in range(21)], dtype=float)
    wrist = arr[0].copy()
    arr = wrist + (arr - wrist) * scale
    arr[:, 0] += dx
    arr[:, 1] += dy
    return arr


def open_hand(**kw):
    return build_hand(THUMB_OUT, *EXTENDED.values(), **kw)


def fist(**kw):
    return build_hand(THUMB_TUCKED, *CURLED.values(), **kw)


def index_up_hand(**kw):
    return build_hand(THUMB_TUCKED, EXTENDED["index"], CURLED["middle"], CURLED["ring"], CURLED["pinky"], **kw)


def ok_hand(**kw):
    return build_hand(THUMB_PINCH, INDEX_PINCH, EXTENDED["middle"], EXTENDED["ring"], EXTENDED["pinky"], **kw)


HANDS = {
    "open": open_hand,
    "closed": fist,
    "index_up": index_up_hand,
    "ok": ok_hand,
}


class Recorder:
    """Collects every callback the processor makes."""

    def __init__(self):
        self.changes = []
        self.index_up = 0
        self.ok = 0
        self.positions = []
        self.scrolls = []

    def callbacks(self):
        return GestureCallbacks(
            on_gesture_change=lambda new, prev: self.changes.append((new, prev)),
            on_index_up=self._index_up,
            on_ok=self._ok,
            on_position_update=self.positions.append,
            on_edge_scroll=self.scrolls.append,
        )

    def _index_up(self):
        self.index_up += 1

    def _ok(self):
        self.ok += 1

    def total(self):
        return len(self.changes) + self.index_up + self.ok + len(self.positions) + len(self.scrolls)


@pytest.fixture
def hands():
    return HANDS


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def processor(recorder, scheduler):
    p = GestureProcessor(recorder.callbacks(), scheduler=scheduler)
    yield p
    p.dispose()
