# GestureClassifier.py
from enum import Enum

from .HandData import (
    INDEX_DIP,
    INDEX_MCP,
    INDEX_PIP,
    INDEX_TIP,
    MIDDLE_TIP,
    PINKY_TIP,
    RING_TIP,
    THUMB_TIP,
    WRIST,
    HandData,
)
from .HandFeatures import HandFeatureExtractor, HandFeatures
from .helpers import angle, distance3, normalize, vector


class Gesture(str, Enum):
    NONE = "none"
    OPEN = "open"
    CLOSED = "closed"
    INDEX_UP = "index_up"
    OK = "ok"

    def __str__(self) -> str:
        return self.value


class GestureClassifier:
    """
    Stateless rule-based classifier: one feature vector in, one raw label out.
    Rules are tried in priority order because a hand can satisfy several at once.
    """

    # ok: pinch window and closeness, fractions of palm scale
    ok_pinch_min = 0.02
    ok_pinch_max = 0.20
    ok_close = 0.15
    ok_index_min_len = 0.03
    ok_others_margin = 0.05
    ok_min_points = 4

    # index up
    index_up_min_score = 0.6
    index_up_min_curled = 2
    index_up_vertical = 0.65
    index_up_over_middle = 0.08
    index_up_over_thumb = 0.03
    index_up_over_mcp = 0.06
    index_up_over_wrist = 0.10
    index_up_straight = 160.0
    index_expected_len = 0.45
    index_len_ratio = 0.7

    # open / closed
    open_min_points = 4
    open_ratio = 1.15
    closed_min_conditions = 3
    closed_ratio = 1.08

    def __init__(self, feature_extractor=None):
        self.feature_extractor = feature_extractor or HandFeatureExtractor()

    def classify_hand(self, hand: HandData):
        """Extract features and classify. Returns (gesture, features)."""
        features = self.feature_extractor.extract(hand)
        return self.classify(features, hand.landmarks), features

    def classify(self, features: HandFeatures, lm) -> Gesture:
        if isinstance(lm, HandData):
            lm = lm.landmarks
        if self.is_ok(features, lm):
            return Gesture.OK
        if self.is_index_up(features, lm):
            return Gesture.INDEX_UP

        is_open = self.is_open(features)
        is_closed = self.is_closed(features)
        if is_open and not is_closed:
            return Gesture.OPEN
        if is_closed and not is_open:
            return Gesture.CLOSED
        if is_open and is_closed:
            return Gesture.OPEN if features.open_score >= features.closed_score else Gesture.CLOSED
        return Gesture.NONE

    # ---------- rules ----------
    def ok_points(self, f: HandFeatures, lm) -> int:
        scale = f.palm_scale
        thumb_tip = lm[THUMB_TIP]
        index_tip = lm[INDEX_TIP]
        index_mcp = lm[INDEX_MCP]
        wrist = lm[WRIST]

        pinch_ratio = distance3(thumb_tip, index_tip) / scale
        pinch_ok = self.ok_pinch_min < pinch_ratio < self.ok_pinch_max

        tips_close = (
            abs(thumb_tip[0] - index_tip[0]) < scale * self.ok_close
            and abs(thumb_tip[1] - index_tip[1]) < scale * self.ok_close
        )

        # index must still reach away from the palm, otherwise this is a fist
        not_fist = (
            distance3(index_tip, index_mcp) > scale * self.ok_index_min_len
            and distance3(index_tip, wrist) > distance3(index_mcp, wrist)
        )

        others_extended = sum(1 for f_ in (f.middle, f.ring, f.pinky) if f_.extended)
        others_ok = others_extended >= 1 or f.curled_count <= 3

        highest_other = min(lm[MIDDLE_TIP][1], lm[RING_TIP][1], lm[PINKY_TIP][1])
        pinch_y = (thumb_tip[1] + index_tip[1]) / 2.0
        others_level = highest_other <= pinch_y + scale * self.ok_others_margin

        points = 0
        if pinch_ok:
            points += 2
        if tips_close:
            points += 1
        if not_fist:
            points += 1
        if others_ok:
            points += 1
        if others_level:
            points += 1
        return points

    def is_ok(self, f: HandFeatures, lm) -> bool:
        return self.ok_points(f, lm) >= self.ok_min_points

    def is_index_up(self, f: HandFeatures, lm) -> bool:
        if not f.index.extended or f.index.extension_score < self.index_up_min_score:
            return False
        if f.middle.extended or f.ring.extended or f.pinky.extended:
            return False
        if f.curled_count < self.index_up_min_curled:
            return False

        scale = f.palm_scale
        wrist = lm[WRIST]
        index_tip = lm[INDEX_TIP]
        index_mcp = lm[INDEX_MCP]
        thumb_tip = lm[THUMB_TIP]
        middle_tip = lm[MIDDLE_TIP]

        # y grows downward, so "up" is negative y
        direction = normalize(vector(index_tip, index_mcp), fallback=(0.0, -1.0, 0.0))
        pointing_up = -direction[1] > self.index_up_vertical

        above_middle = index_tip[1] < middle_tip[1] - scale * self.index_up_over_middle
        above_thumb = not f.thumb.extended or index_tip[1] < thumb_tip[1] - scale * self.index_up_over_thumb
        above_mcp = index_tip[1] < index_mcp[1] - scale * self.index_up_over_mcp
        above_wrist = index_tip[1] < wrist[1] - scale * self.index_up_over_wrist

        straight = angle(lm[INDEX_MCP], lm[INDEX_PIP], lm[INDEX_DIP]) > self.index_up_straight
        long_enough = distance3(index_tip, index_mcp) > scale * self.index_expected_len * self.index_len_ratio

        return (
            pointing_up
            and above_middle
            and above_thumb
            and above_mcp
            and above_wrist
            and straight
            and long_enough
        )

    def open_points(self, f: HandFeatures) -> int:
        points = 0
        if f.extended_count >= 4:
            points += 2
        elif f.extended_count >= 3:
            points += 1
        if f.index.extended and f.middle.extended:
            points += 1
        if f.avg_extension_score > 0.2:
            points += 1
        if f.open_ratio_avg > self.open_ratio:
            points += 1
        if f.curled_count <= 2:
            points += 1
        return points

    def is_open(self, f: HandFeatures) -> bool:
        return self.open_points(f) >= self.open_min_points

    def closed_conditions(self, f: HandFeatures) -> int:
        conditions = (
            f.extended_count <= 1,
            f.curled_count >= 2 or f.folded_count >= 3,
            f.open_ratio_avg < self.closed_ratio,
            f.avg_extension_score < 0.1,
            not f.index.extended or not f.middle.extended,
        )
        return sum(1 for c in conditions if c)

    def is_closed(self, f: HandFeatures) -> bool:
        return self.closed_conditions(f) >= self.closed_min_conditions


def classify(features: HandFeatures, lm) -> Gesture:
    return GestureClassifier().classify(features, lm)
