"""
Client-side task store.

Holds the board's task list, mirrors every change to the REST API and
notifies subscribers after each state change. Column moves are applied
optimistically and confirmed or rolled back when the server answers.
"""
import asyncio
from dataclasses import replace
from enum import Enum
import logging

from .models import DEFAULT_COLUMNS, TODO

logger = logging.getLogger(__name__)


class MoveState(Enum):
    IDLE = 'idle'
    OPTIMISTIC = 'optimistic'
    CONFIRMED = 'confirmed'
    ROLLED_BACK = 'rolled_back'
    # Target was not a column; nothing was sent or changed
    REJECTED = 'rejected'


class MoveOperation:
    """Handle for one move. Await it to wait for the server's answer."""

    def __init__(self, task_id, column, previous_column=None):
        self.task_id = task_id
        self.column = column
        self.previous_column = previous_column
        self.state = MoveState.IDLE
        self.error = None
        self._task = None

    @property
    def done(self):
        return self.state in (MoveState.CONFIRMED, MoveState.ROLLED_BACK, MoveState.REJECTED)

    async def wait(self):
        if self._task is not None:
            await self._task
        return self

    def __await__(self):
        return self.wait().__await__()

    def __repr__(self):
        return f"<MoveOperation {self.task_id} -> {self.column} {self.state.value}>"


class BoardStore:
    def __init__(self, api, columns=DEFAULT_COLUMNS):
        self.api = api
        self.columns = tuple(columns)
        self.tasks = []
        self.is_loading = False
        self.error = None
        self._listeners = []
        # Keeps in-flight moves alive even if the caller drops the operation
        self._pending_moves = set()

    # ── Subscriptions ────────────────────────────────────────────────────

    def subscribe(self, listener):
        """Call ``listener(store)`` after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _set(self, **changes):
        for name, value in changes.items():
            setattr(self, name, value)
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Error in store listener: {e}")

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def column_ids(self):
        return tuple(column.id for column in self.columns)

    @property
    def pending_moves(self):
        return len(self._pending_moves)

    def get_task(self, task_id):
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def tasks_by_column(self, column_id):
        return [task for task in self.tasks if task.column == column_id]

    # ── CRUD ─────────────────────────────────────────────────────────────

    async def fetch_all(self):
        self._set(is_loading=True, error=None)
        try:
            tasks = await self.api.list_tasks()
        except Exception as e:
            logger.error(f"Error fetching tasks: {e}")
            self._set(error='Failed to load tasks', is_loading=False)
            return False
        self._set(tasks=list(tasks), is_loading=False)
        return True

    async def create(self, title, description='', column_id=TODO):
        if not title or not title.strip():
            self._set(error='Title is required')
            return None
        if column_id not in self.column_ids:
            self._set(error=f'Unknown column: {column_id}')
            return None

        self._set(is_loading=True, error=None)
        try:
            task = await self.api.create_task(title.strip(), (description or '').strip(), column_id)
        except Exception as e:
            logger.error(f"Error adding task: {e}")
            self._set(error='Failed to add task', is_loading=False)
            return None
        self._set(tasks=self.tasks + [task], is_loading=False)
        return task

    async def update(self, task_id, title, description=''):
        self._set(is_loading=True, error=None)
        try:
            updated = await self.api.update_task(task_id, title=title, description=description)
        except Exception as e:
            logger.error(f"Error updating task: {e}")
            self._set(error='Failed to update task', is_loading=False)
            return None
        tasks = [updated if task.id == task_id else task for task in self.tasks]
        self._set(tasks=tasks, is_loading=False)
        return updated

    async def remove(self, task_id):
        self._set(is_loading=True, error=None)
        try:
            await self.api.delete_task(task_id)
        except Exception as e:
            logger.error(f"Error deleting task: {e}")
            self._set(error='Failed to delete task', is_loading=False)
            return False
        tasks = [task for task in self.tasks if task.id != task_id]
        self._set(tasks=tasks, is_loading=False)
        return True

    # ── Moves ────────────────────────────────────────────────────────────

    def move(self, task_id, new_column_id):
        """
        Move a task to another column.

        The local task is updated immediately and the returned operation
        tracks the server round trip. Must be called from a running event loop
        unless the target is rejected.
        """
        if new_column_id not in self.column_ids:
            operation = MoveOperation(task_id, new_column_id)
            operation.state = MoveState.REJECTED
            return operation

        task = self.get_task(task_id)
        operation = MoveOperation(task_id, new_column_id, task.column if task else None)
        self._write_column(task_id, new_column_id)
        operation.state = MoveState.OPTIMISTIC
        operation._task = asyncio.ensure_future(self._confirm_move(operation))
        self._pending_moves.add(operation._task)
        operation._task.add_done_callback(self._pending_moves.discard)
        return operation

    async def settle(self):
        """Wait for every in-flight move, including ones whose operation was discarded."""
        while self._pending_moves:
            await asyncio.gather(*self._pending_moves)

    def _write_column(self, task_id, column_id, expected=None):
        changed = False
        tasks = []
        for task in self.tasks:
            if task.id == task_id and (expected is None or task.column == expected):
                task = replace(task, column=column_id)
                changed = True
            tasks.append(task)
        self._set(tasks=tasks)
        return changed

    async def _confirm_move(self, operation):
        try:
            await self.api.update_task(operation.task_id, column=operation.column)
        except Exception as e:
            logger.error(f"Error moving task {operation.task_id}: {e}")
            operation.error = str(e)
            # Undo only this move, and only if nothing has moved the task since
            if operation.previous_column is not None:
                self._write_column(operation.task_id, operation.previous_column,
                                   expected=operation.column)
            operation.state = MoveState.ROLLED_BACK
            self._set(error='Failed to move task')
            return operation

        operation.state = MoveState.CONFIRMED
        return operation
