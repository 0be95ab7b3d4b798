import mediapipe as mp

from .HandData import HandData


class HandTracker:
    def __init__(
        self,
        cfg,
    ):
        self.mp_drawing = mp.solutions.drawing_utils
        self.cfg = cfg
        tcfg = cfg.get("tracker", {})

        self.mp_hands = mp.solutions.hands.Hands(
            model_complexity=tcfg.get("model_complexity", 1),
            min_detection_confidence=tcfg.get("min_detection_confidence", 0.7),
            min_tracking_confidence=tcfg.get("min_tracking_confidence", 0.5),
            max_num_hands=tcfg.get("max_num_hands", 1),
        )

    def process_frame(self, frame_rgb, timestamp):
        """
        Process an RGB frame (caller does the BGR->RGB conversion).
        Returns list of HandData instances, empty when no hand is visible.
        timestamp: absolute time (seconds) for this frame.
        """
        result = self.mp_hands.process(frame_rgb)
        hands = []

        if not result.multi_hand_landmarks:
            return hands

        handedness = result.multi_handedness or []
        for i, lm in enumerate(result.multi_hand_landmarks):
            label = handedness[i].classification[0].label if i < len(handedness) else "Unknown"
            hands.append(
                HandData(lm.landmark, handedness=label, timestamp=timestamp, raw_landmarks=lm)
            )

        return hands

    def draw(self, frame, hand: HandData):
        if hand.raw_landmarks is None:
            return
        self.mp_drawing.draw_landmarks(
            frame, hand.raw_landmarks, mp.solutions.hands.HAND_CONNECTIONS
        )

    def close(self):
        self.mp_hands.close()
