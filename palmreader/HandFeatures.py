from dataclasses import asdict, dataclass
from typing import Dict, Tuple

import numpy as np

from .HandData import (
    FINGERS,
    INDEX_MCP,
    MIDDLE_MCP,
    PALM_CENTER,
    PINKY_MCP,
    THUMB_IP,
    THUMB_MCP,
    THUMB_TIP,
    WRIST,
    HandData,
)
from .helpers import EPS, angle, distance2, distance3

MIN_PALM_SCALE = 0.08


@dataclass(frozen=True)
class FingerFeature:
    extension_score: float
    extended: bool
    curled: bool
    tip_palm_ratio: float
    pip_angle: float
    dip_angle: float
    extension_gap: float
    y_extension: float


@dataclass(frozen=True)
class ThumbFeature:
    extension_score: float
    extended: bool
    curled: bool
    angle: float
    extension_gap: float


@dataclass(frozen=True)
class HandFeatures:
    """Per-frame feature vector. Carries no identity across frames."""

    palm_scale: float
    index: FingerFeature
    middle: FingerFeature
    ring: FingerFeature
    pinky: FingerFeature
    thumb: ThumbFeature
    extended_count: int
    curled_count: int
    folded_count: int
    open_ratio_avg: float
    open_ratio_min: float
    open_ratio_max: float
    extension_scores: Tuple[float, ...]
    avg_extension_score: float
    open_score: float
    closed_score: float

    @property
    def fingers(self) -> Dict[str, FingerFeature]:
        return {"index": self.index, "middle": self.middle, "ring": self.ring, "pinky": self.pinky}

    def to_dict(self):
        """Serialize to JSON-friendly dict."""
        d = asdict(self)
        d["extension_scores"] = list(self.extension_scores)
        return d


def palm_scale(lm: np.ndarray) -> float:
    """Average of palm width (index MCP to pinky MCP) and height (wrist to middle MCP), in 2D."""
    palm_width = distance2(lm[INDEX_MCP], lm[PINKY_MCP])
    palm_height = distance2(lm[WRIST], lm[MIDDLE_MCP])
    return max(MIN_PALM_SCALE, (palm_width + palm_height) / 2.0)


class HandFeatureExtractor:
    """
    Computes finger extension/curl features for one frame.
    Every threshold is relative to the palm scale so the result does not depend on
    how far the hand is from the camera.
    """

    # finger angle contribution (mean of PIP and DIP angles, degrees)
    straight_angle = 155.0
    bent_angle = 140.0
    curled_angle = 110.0
    # radial gap contribution, fraction of palm scale
    gap_extended = 0.08
    gap_curled = 0.02
    # vertical contribution, in palm scales
    y_extended = 0.15
    y_curled = 0.05
    extended_score = 0.5
    curled_score = -0.2
    fold_margin = 0.01

    thumb_straight_angle = 150.0
    thumb_bent_angle = 120.0
    thumb_gap_extended = 0.05
    thumb_gap_curled = 0.015
    thumb_extended_score = 0.5
    thumb_curled_score = -0.3

    def extract(self, hand) -> HandFeatures:
        lm = hand.landmarks if isinstance(hand, HandData) else np.asarray(hand, dtype=float)
        scale = palm_scale(lm)
        wrist = lm[WRIST]
        palm_center = lm[PALM_CENTER]

        fingers: Dict[str, FingerFeature] = {}
        folded_count = 0
        for name, (mcp_i, pip_i, dip_i, tip_i) in FINGERS.items():
            mcp, pip, dip, tip = lm[mcp_i], lm[pip_i], lm[dip_i], lm[tip_i]
            feature = self._finger_feature(mcp, pip, dip, tip, wrist, palm_center, scale)
            fingers[name] = feature

            tip_palm = distance3(tip, palm_center)
            mcp_palm = distance3(mcp, palm_center)
            if tip_palm < mcp_palm + scale * self.fold_margin:
                folded_count += 1

        thumb = self._thumb_feature(lm[THUMB_MCP], lm[THUMB_IP], lm[THUMB_TIP], wrist, scale)

        scores = tuple(f.extension_score for f in fingers.values())
        ratios = [f.tip_palm_ratio for f in fingers.values()]
        extended_count = sum(1 for f in fingers.values() if f.extended)
        curled_count = sum(1 for f in fingers.values() if f.curled)
        avg_score = sum(scores) / max(len(scores), 1)

        open_score = extended_count + (0.6 if thumb.extended else 0.0) + avg_score * 0.5
        closed_score = curled_count + (0.6 if thumb.curled else 0.0) - avg_score * 0.3

        return HandFeatures(
            palm_scale=scale,
            thumb=thumb,
            extended_count=extended_count,
            curled_count=curled_count,
            folded_count=folded_count,
            open_ratio_avg=sum(ratios) / max(len(ratios), 1),
            open_ratio_min=min(ratios),
            open_ratio_max=max(ratios),
            extension_scores=scores,
            avg_extension_score=avg_score,
            open_score=open_score,
            closed_score=closed_score,
            **fingers,
        )

    def _finger_feature(self, mcp, pip, dip, tip, wrist, palm_center, scale) -> FingerFeature:
        pip_angle = angle(mcp, pip, dip)
        dip_angle = angle(pip, dip, tip)
        avg_angle = (pip_angle + dip_angle) / 2.0

        extension_gap = distance3(tip, wrist) - distance3(mcp, wrist)
        y_extension = (wrist[1] - tip[1]) / scale

        score = 0.0
        if avg_angle > self.straight_angle:
            score += 0.4
        elif avg_angle > self.bent_angle:
            score += 0.2
        elif avg_angle < self.curled_angle:
            score -= 0.3

        if extension_gap > scale * self.gap_extended:
            score += 0.3
        elif extension_gap < scale * self.gap_curled:
            score -= 0.2

        if y_extension > self.y_extended:
            score += 0.3
        elif y_extension < self.y_curled:
            score -= 0.2

        tip_palm = distance3(tip, palm_center)
        mcp_palm = distance3(mcp, palm_center)

        return FingerFeature(
            extension_score=score,
            extended=score >= self.extended_score,
            curled=score <= self.curled_score,
            tip_palm_ratio=tip_palm / max(mcp_palm, EPS),
            pip_angle=pip_angle,
            dip_angle=dip_angle,
            extension_gap=float(extension_gap),
            y_extension=float(y_extension),
        )

    def _thumb_feature(self, mcp, ip, tip, wrist, scale) -> ThumbFeature:
        thumb_angle = angle(mcp, ip, tip)
        gap = distance3(tip, wrist) - distance3(mcp, wrist)

        score = 0.0
        if thumb_angle > self.thumb_straight_angle:
            score += 0.5
        elif thumb_angle < self.thumb_bent_angle:
            score -= 0.3
        if gap > scale * self.thumb_gap_extended:
            score += 0.5
        elif gap < scale * self.thumb_gap_curled:
            score -= 0.3

        return ThumbFeature(
            extension_score=score,
            extended=score >= self.thumb_extended_score,
            curled=score <= self.thumb_curled_score,
            angle=thumb_angle,
            extension_gap=float(gap),
        )


def extract_features(hand) -> HandFeatures:
    return HandFeatureExtractor().extract(hand)
