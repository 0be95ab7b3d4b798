import copy
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .GestureClassifier import Gesture, GestureClassifier
from .GestureState import EngineState, GestureHistory
from .HandData import coerce_hand
from .helpers import deep_merge
from .timers import CLOCK_SLACK, ThreadScheduler

logger = logging.getLogger(__name__)

LEFT = "left"
RIGHT = "right"

DEFAULT_CONFIG = {
    "stabilizer": {
        "history_size": 6,
        "stable_min": 4,
    },
    "dispatch": {
        "debounce_ms": 400,
        "edge_threshold": 0.18,
        "edge_scroll_interval_ms": 200,
    },
    "debug": {
        "enabled": False,
    },
}


@dataclass
class GestureCallbacks:
    """
    Output slots filled in by the host. Any slot may stay None.
    All of them are invoked synchronously, from process()/dispatch() or from the edge-scroll timer.
    """

    on_gesture_change: Optional[Callable[[Gesture, Gesture], None]] = None
    on_index_up: Optional[Callable[[], None]] = None
    on_ok: Optional[Callable[[], None]] = None
    on_position_update: Optional[Callable[[float], None]] = None
    on_edge_scroll: Optional[Callable[[str], None]] = None


# ==========================================
# PROCESSING CORE
# ==========================================
class GestureProcessor:
    """
    Turns one hand per frame into debounced interaction events.

    Pipeline per frame: features -> raw label -> majority vote over the last frames ->
    dispatch. Frames without a hand leave every piece of state untouched.
    """

    def __init__(self, callbacks=None, cfg=None, scheduler=None, clock=None, debug=None, classifier=None):
        self.callbacks = callbacks or GestureCallbacks()
        self.classifier = classifier or GestureClassifier()
        self.state = EngineState()

        self._scheduler = scheduler or ThreadScheduler()
        self._clock = clock or self._scheduler.time
        # frame processing and timer ticks must not interleave
        self._lock = threading.RLock()

        self.cfg = copy.deepcopy(DEFAULT_CONFIG)
        self.history = GestureHistory()
        self.update_config(cfg)
        if debug is not None:
            self.set_debug_mode(debug)

        self._debug_info = {
            "raw_gesture": Gesture.NONE,
            "stable_gesture": Gesture.NONE,
            "features": None,
            "confidence": 0.0,
        }

    def update_config(self, cfg):
        deep_merge(self.cfg, cfg)

        s = self.cfg.get("stabilizer", {})
        d = self.cfg.get("dispatch", {})
        dbg = self.cfg.get("debug", {})

        with self._lock:
            self.history_size = int(s.get("history_size", 6))
            self.stable_min = int(s.get("stable_min", 4))
            self.debounce = d.get("debounce_ms", 400) / 1000.0
            self.edge_threshold = float(d.get("edge_threshold", 0.18))
            self.edge_scroll_interval = d.get("edge_scroll_interval_ms", 200) / 1000.0
            self.debug_mode = bool(dbg.get("enabled", False))

            if self.history.size != self.history_size:
                self.history.resize(self.history_size)
            self.history.stable_min = self.stable_min

    # ---------- read-only state ----------
    @property
    def current_gesture(self) -> Gesture:
        return self.state.current_gesture

    @property
    def previous_gesture(self) -> Gesture:
        return self.state.previous_gesture

    @property
    def hand_position(self) -> Tuple[float, float]:
        return self.state.hand_position

    @property
    def edge_scroll_direction(self) -> Optional[str]:
        return self.state.edge_scroll_direction if self.state.scrolling else None

    @property
    def disposed(self) -> bool:
        return self.state.disposed

    # ---------- entry points ----------
    def process(self, sample) -> Optional[Gesture]:
        """
        Run the full pipeline for one frame.
        `sample` is a HandData, 21 landmarks, or None / empty when no hand was found.
        Returns the effective gesture, or None when the frame was skipped.
        """
        hand = coerce_hand(sample)
        if hand is None:
            return None

        with self._lock:
            if self.state.disposed:
                return None

            raw, features = self.classifier.classify_hand(hand)
            stable, effective = self.history.push(raw)

            if self.debug_mode:
                self._debug_info = {
                    "raw_gesture": raw,
                    "stable_gesture": effective,
                    "features": features.to_dict(),
                    "confidence": self.history.confidence(raw),
                }

            self._dispatch(effective, hand.palm_center)
            return effective

    def dispatch(self, gesture, hand_position) -> None:
        """Drive the event outputs with an already-stabilised gesture."""
        with self._lock:
            if self.state.disposed:
                return
            self._dispatch(Gesture(gesture), hand_position)

    def dispose(self) -> None:
        """Stop the edge-scroll timer and ignore every later frame. Safe to call repeatedly."""
        with self._lock:
            if self.state.disposed:
                return
            self._stop_edge_scroll()
            self.state.disposed = True
        logger.info("Gesture processor disposed")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.dispose()
        return False

    # ---------- debug ----------
    def set_debug_mode(self, enabled: bool) -> None:
        # update_config re-reads debug_mode from cfg
        self.cfg.setdefault("debug", {})["enabled"] = bool(enabled)
        self.debug_mode = bool(enabled)

    def debug_info(self):
        if not self.debug_mode:
            logger.warning("Debug mode is not enabled; pass debug=True or call set_debug_mode(True).")
        with self._lock:
            info = dict(self._debug_info)
            info["current_gesture"] = self.state.current_gesture
            info["previous_gesture"] = self.state.previous_gesture
            info["history"] = self.history.items()
        return info

    # ---------- dispatch ----------
    def _debounce_elapsed(self, now: float) -> bool:
        last = self.state.last_event_time
        return last is None or now - last >= self.debounce - CLOCK_SLACK

    def _dispatch(self, gesture: Gesture, hand_position) -> None:
        now = self._clock()
        x, y = float(hand_position[0]), float(hand_position[1])
        self.state.hand_position = (x, y)

        if gesture is Gesture.OPEN:
            self._handle_open(x)
        elif gesture in (Gesture.INDEX_UP, Gesture.OK):
            self._stop_edge_scroll()
            self._fire_trigger(gesture, now)
        else:
            self._stop_edge_scroll()

        if gesture != self.state.current_gesture:
            previous = self.state.current_gesture
            self.state.previous_gesture = previous
            self.state.current_gesture = gesture
            logger.debug("Gesture %s -> %s", previous, gesture)

            cb = self.callbacks.on_gesture_change
            if cb is not None and self._debounce_elapsed(now):
                self.state.last_event_time = now
                cb(gesture, previous)

    def _fire_trigger(self, gesture: Gesture, now: float) -> None:
        # rising edge only
        if self.state.current_gesture == gesture:
            return
        if gesture is Gesture.INDEX_UP:
            cb = self.callbacks.on_index_up
        else:
            cb = self.callbacks.on_ok
        if cb is None or not self._debounce_elapsed(now):
            return
        self.state.last_event_time = now
        cb()

    def _handle_open(self, x: float) -> None:
        # camera image is mirrored relative to the user
        normalized_x = 1.0 - x
        if normalized_x <= self.edge_threshold:
            self._start_edge_scroll(LEFT)
        elif normalized_x >= 1.0 - self.edge_threshold:
            self._start_edge_scroll(RIGHT)
        else:
            self._stop_edge_scroll()
            cb = self.callbacks.on_position_update
            if cb is not None:
                cb(normalized_x)

    # ---------- edge scroll ----------
    def _start_edge_scroll(self, direction: str) -> None:
        st = self.state
        if st.edge_scroll_direction == direction and st.scrolling:
            return

        self._stop_edge_scroll()
        st.edge_scroll_generation += 1
        generation = st.edge_scroll_generation
        st.edge_scroll_direction = direction
        logger.debug("Edge scroll %s started", direction)

        cb = self.callbacks.on_edge_scroll
        if cb is not None:
            cb(direction)

        # the callback may have stopped scrolling or disposed the processor
        if st.disposed or st.edge_scroll_generation != generation:
            return
        st.edge_scroll_timer = self._scheduler.call_every(
            self.edge_scroll_interval,
            lambda: self._edge_scroll_tick(generation, direction),
        )

    def _edge_scroll_tick(self, generation: int, direction: str) -> None:
        with self._lock:
            st = self.state
            if st.disposed or generation != st.edge_scroll_generation:
                return
            cb = self.callbacks.on_edge_scroll
            if cb is not None:
                cb(direction)

    def _stop_edge_scroll(self) -> None:
        st = self.state
        if st.edge_scroll_timer is not None:
            st.edge_scroll_timer.cancel()
            st.edge_scroll_timer = None
            logger.debug("Edge scroll %s stopped", st.edge_scroll_direction)
        if st.edge_scroll_direction is not None:
            st.edge_scroll_generation += 1
        st.edge_scroll_direction = None
