import logging
import threading
import time
from queue import Empty, Queue

import cv2

from .GestureProcessor import GestureCallbacks, GestureProcessor
from .HandTracker import HandTracker
from .helpers import ConfigWatcher, load_config

logger = logging.getLogger(__name__)

# --------------------------------------------------------
# Queue for latest frame only (overwrite when full)
# --------------------------------------------------------
FRAME_QUEUE_MAX = 1
WINDOW_NAME = "Gesture Debug"


# --------------------------------------------------------
# CAPTURE THREAD
# --------------------------------------------------------
def capture_thread(frame_queue, stop_event, cfg):
    camera_cfg = cfg.get("camera", {})
    cap = cv2.VideoCapture(camera_cfg.get("index", 0))
    if not cap.isOpened():
        logger.error("[PY] Cannot open camera")
        stop_event.set()
        return

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, camera_cfg.get("frame_width", 640))
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, camera_cfg.get("frame_height", 480))

    tracker = HandTracker(cfg)
    logger.info("[PY] Capture thread started.")

    try:
        while not stop_event.is_set():
            ok, frame = cap.read()
            if not ok:
                time.sleep(0.01)
                continue

            now = time.monotonic()
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            hands = tracker.process_frame(rgb, now)

            if frame_queue.full():
                try:
                    frame_queue.get_nowait()  # drop the older frame
                except Empty:
                    pass
            frame_queue.put_nowait((frame, hands, tracker))
    finally:
        cap.release()
        tracker.close()
        logger.info("[PY] Capture thread exiting.")


def logging_callbacks():
    """Callbacks that only report what the engine emits."""
    return GestureCallbacks(
        on_gesture_change=lambda new, prev: logger.info("[EVT] gesture %s -> %s", prev, new),
        on_index_up=lambda: logger.info("[EVT] index up"),
        on_ok=lambda: logger.info("[EVT] ok"),
        on_position_update=lambda x: logger.debug("[EVT] position %.3f", x),
        on_edge_scroll=lambda direction: logger.info("[EVT] edge scroll %s", direction),
    )


# --------------------------------------------------------
# PROCESSING LOOP
# --------------------------------------------------------
def processing_loop(frame_queue, stop_event, cfg, config_path, callbacks=None):
    cfg_watcher = ConfigWatcher(config_path)
    current_cfg = cfg_watcher.get_config() or cfg

    processor = GestureProcessor(callbacks or logging_callbacks(), cfg=current_cfg)
    debug_cfg = current_cfg.get("debug", {})
    show_window = debug_cfg.get("show_window", True)
    if show_window:
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

    logger.info("[PY] Processing loop started.")

    try:
        while not stop_event.is_set():
            try:
                frame, hands, tracker = frame_queue.get(timeout=0.1)
            except Empty:
                continue

            new_cfg = cfg_watcher.check_reload()
            if new_cfg and new_cfg != current_cfg:
                current_cfg = new_cfg
                processor.update_config(current_cfg)

            # the engine follows a single hand, like the tracker is configured to
            hand = hands[0] if hands else None
            gesture = processor.process(hand)

            if not show_window:
                continue

            if hand is not None and current_cfg.get("debug", {}).get("draw_landmarks", True):
                tracker.draw(frame, hand)
            label = gesture.value if gesture is not None else "no hand"
            cv2.putText(
                frame,
                f"{label} ({processor.current_gesture.value})",
                (10, 30),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.8,
                (0, 255, 0),
                2,
            )
            cv2.imshow(WINDOW_NAME, frame)
            if cv2.waitKey(1) & 0xFF == 27:  # ESC
                stop_event.set()
                break
    finally:
        processor.dispose()
        if show_window:
            cv2.destroyAllWindows()
        logger.info("[PY] Processing loop exiting.")


# --------------------------------------------------------
# MAIN ENTRY
# --------------------------------------------------------
def main(config_path="config.json"):
    cfg = load_config(config_path)
    if not cfg:
        logger.warning("[PY] No usable %s, running with defaults.", config_path)

    frame_queue = Queue(maxsize=FRAME_QUEUE_MAX)
    stop_event = threading.Event()

    cap_thread = threading.Thread(
        target=capture_thread, args=(frame_queue, stop_event, cfg), daemon=True
    )
    cap_thread.start()

    try:
        processing_loop(frame_queue, stop_event, cfg, config_path)
    except KeyboardInterrupt:
        pass
    finally:
        stop_event.set()
        cap_thread.join(timeout=1.0)

    logger.info("[PY] Shutdown complete.")
