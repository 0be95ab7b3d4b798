from collections import Counter, deque
from typing import List, Optional, Tuple

from .GestureClassifier import Gesture
from .timers import TimerHandle


# ==========================================
# TEMPORAL STABILIZER
# ==========================================
class GestureHistory:
    """
    Sliding window of raw labels with a majority vote.
    A label is stable once it holds at least `stable_min` of the window.
    """

    def __init__(self, size: int = 6, stable_min: int = 4):
        self.size = max(1, int(size))
        self.stable_min = max(1, int(stable_min))
        self._items = deque(maxlen=self.size)

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> List[Gesture]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def resize(self, size: int) -> None:
        # keep the most recent entries
        self.size = max(1, int(size))
        self._items = deque(self._items, maxlen=self.size)

    def counts(self) -> Counter:
        return Counter(self._items)

    def stable(self) -> Optional[Gesture]:
        if not self._items:
            return None
        label, votes = self.counts().most_common(1)[0]
        return label if votes >= self.stable_min else None

    def push(self, raw: Gesture) -> Tuple[Optional[Gesture], Gesture]:
        """
        Record `raw` and return (stable, effective).
        With no majority the effective label is `raw` itself, not the last stable one.
        """
        self._items.append(raw)
        stable = self.stable()
        return stable, stable if stable is not None else raw

    def confidence(self, label: Gesture) -> float:
        if not self._items:
            return 0.0
        return self.counts().get(label, 0) / len(self._items)


# ==========================================
# PERSISTENT STATE
# ==========================================
class EngineState:
    """
    Mutable state owned by one GestureProcessor.
    Only the processor touches it, from frame processing or its own timer tick.
    """

    def __init__(self):
        self.current_gesture = Gesture.NONE
        self.previous_gesture = Gesture.NONE
        # monotonic seconds of the last dispatched debounced event, None = never
        self.last_event_time: Optional[float] = None

        self.hand_position: Tuple[float, float] = (0.5, 0.5)

        # edge-scroll sub-state; at most one live timer
        self.edge_scroll_direction: Optional[str] = None
        self.edge_scroll_timer: Optional[TimerHandle] = None
        self.edge_scroll_generation = 0

        self.disposed = False

    @property
    def scrolling(self) -> bool:
        return self.edge_scroll_timer is not None and self.edge_scroll_timer.active
