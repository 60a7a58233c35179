"""
Tests for the drag controller: drop resolution and gesture activation.
"""
from unittest import mock

import pytest

from taskboard.drag import DragController, Gesture, PointerSample, PointerSensor, TouchSensor


@pytest.fixture()
def controller(store):
    return DragController(store)


def gesture(pointer_type, *points, task_id='task-1'):
    return Gesture(task_id, pointer_type, [PointerSample(x, y, t) for x, y, t in points])


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Drop resolution
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_drop_on_another_task_does_not_move(controller, store):
    with mock.patch.object(store, 'move') as move_task:
        assert controller.drag_end('task-1', 'task-2') is None
    move_task.assert_not_called()


def test_drop_outside_any_column_does_not_move(controller, store):
    with mock.patch.object(store, 'move') as move_task:
        assert controller.drag_end('task-1', None) is None
    move_task.assert_not_called()


def test_drop_on_column_moves_once(controller, store):
    with mock.patch.object(store, 'move') as move_task:
        result = controller.drag_end('task-1', 'inProgress')
    move_task.assert_called_once_with('task-1', 'inProgress')
    assert result is move_task.return_value


def test_drag_start_sets_ghost_without_touching_store(controller, store, api):
    before = list(store.tasks)

    task = controller.drag_start('task-2')

    assert task.id == 'task-2'
    assert controller.active_task is task
    assert store.tasks == before
    assert api.calls == []


def test_drag_start_unknown_task_has_no_ghost(controller):
    assert controller.drag_start('nope') is None
    assert controller.active_task is None


def test_drag_end_and_cancel_clear_ghost(controller, store):
    controller.drag_start('task-1')
    controller.drag_cancel()
    assert controller.active_task is None

    controller.drag_start('task-1')
    controller.drag_end('task-1', None)
    assert controller.active_task is None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Sensors
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_pointer_sensor_needs_distance():
    sensor = PointerSensor(distance=8)

    assert not sensor.activates(gesture('mouse', (0, 0, 0), (3, 4, 0.1)))
    assert sensor.activates(gesture('mouse', (0, 0, 0), (6, 8, 0.1)))
    assert not sensor.activates(Gesture('task-1'))


def test_touch_sensor_needs_a_steady_hold():
    sensor = TouchSensor(delay=0.1, tolerance=5)

    # Quick tap
    assert not sensor.activates(gesture('touch', (0, 0, 0), (0, 0, 0.05)))
    # Held still past the delay, then dragged
    assert sensor.activates(gesture('touch', (0, 0, 0), (2, 2, 0.05), (2, 2, 0.12), (200, 0, 0.3)))
    # Swipe before the delay is a scroll
    assert not sensor.activates(gesture('touch', (0, 0, 0), (0, 40, 0.05), (0, 80, 0.2)))


def test_handle_gesture_ignores_taps(controller, store):
    with mock.patch.object(store, 'move') as move_task:
        assert controller.handle_gesture(gesture('mouse', (10, 10, 0), (11, 10, 0.1)), 'done') is None
    move_task.assert_not_called()


def test_handle_gesture_drag_moves(controller, store):
    with mock.patch.object(store, 'move') as move_task:
        controller.handle_gesture(gesture('touch', (0, 0, 0), (0, 0, 0.15), (300, 0, 0.4)), 'done')
    move_task.assert_called_once_with('task-1', 'done')


def test_handle_gesture_unknown_pointer_type(controller, store):
    with mock.patch.object(store, 'move') as move_task:
        assert controller.handle_gesture(gesture('stylus-x', (0, 0, 0), (50, 0, 1)), 'done') is None
    move_task.assert_not_called()
