from dataclasses import dataclass, field
import logging
import math

logger = logging.getLogger(__name__)


@dataclass
class PointerSample:
    x: float
    y: float
    # Seconds since an arbitrary origin
    t: float


@dataclass
class Gesture:
    """A press, any number of moves, and a release, as recorded from the UI."""
    task_id: str
    pointer_type: str = 'mouse'
    samples: list = field(default_factory=list)

    def distance_from_start(self, sample):
        start = self.samples[0]
        return math.hypot(sample.x - start.x, sample.y - start.y)


class PointerSensor:
    """Mouse/pen: the drag starts once the pointer travels ``distance`` pixels."""
    pointer_types = ('mouse', 'pen')

    def __init__(self, distance=8):
        self.distance = distance

    def activates(self, gesture):
        if not gesture.samples:
            return False
        return any(gesture.distance_from_start(s) >= self.distance for s in gesture.samples)


class TouchSensor:
    """
    Touch: the finger must stay down for ``delay`` seconds without drifting
    more than ``tolerance`` pixels. Moving further before the delay is a
    scroll, not a drag.
    """
    pointer_types = ('touch',)

    def __init__(self, delay=0.1, tolerance=5):
        self.delay = delay
        self.tolerance = tolerance

    def activates(self, gesture):
        if not gesture.samples:
            return False
        activation_time = gesture.samples[0].t + self.delay
        for sample in gesture.samples:
            if sample.t >= activation_time:
                return True
            if gesture.distance_from_start(sample) > self.tolerance:
                return False
        return False


class DragController:
    """Turns drag gestures into store moves; drops off a column do nothing."""

    def __init__(self, store, sensors=None):
        self.store = store
        self.sensors = sensors or (PointerSensor(), TouchSensor())
        self.active_task = None

    def sensor_for(self, pointer_type):
        for sensor in self.sensors:
            if pointer_type in sensor.pointer_types:
                return sensor
        return None

    def drag_start(self, active_id):
        # Ghost only, the store is not touched until the drop
        self.active_task = next(
            (task for column_id in self.store.column_ids
             for task in self.store.tasks_by_column(column_id)
             if task.id == active_id),
            None
        )
        return self.active_task

    def drag_cancel(self):
        self.active_task = None

    def drag_end(self, active_id, over_id):
        self.active_task = None

        if over_id is None:
            logger.debug(f"Drop of {active_id} outside the board ignored")
            return None
        if over_id not in self.store.column_ids:
            logger.debug(f"Drop of {active_id} on {over_id} ignored, not a column")
            return None
        return self.store.move(active_id, over_id)

    def handle_gesture(self, gesture, over_id):
        """Replay a recorded gesture. Returns the move, or None for taps and invalid drops."""
        sensor = self.sensor_for(gesture.pointer_type)
        if sensor is None or not sensor.activates(gesture):
            return None
        self.drag_start(gesture.task_id)
        return self.drag_end(gesture.task_id, over_id)
