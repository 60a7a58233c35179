# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
import itertools

from taskboard.client import TaskApiError
from taskboard.models import Task


class FakeRepository:
    """In-memory stand-in for TaskRepository."""

    def __init__(self, tasks=()):
        self._ids = itertools.count(1)
        self.tasks = {}
        self.owners = {}
        self.users = []
        self.broken = False
        for task in tasks:
            self.tasks[task.id] = task

    def _check(self):
        if self.broken:
            raise RuntimeError("database unavailable")

    def ping(self):
        self._check()
        return datetime(2024, 1, 1, tzinfo=timezone.utc)

    def list_tasks(self):
        self._check()
        return sorted(self.tasks.values(), key=lambda t: t.created_at, reverse=True)

    def get_task(self, task_id):
        self._check()
        return self.tasks.get(task_id)

    def create_task(self, title, description, column, user_id=None):
        self._check()
        task_id = str(100 + next(self._ids))
        task = Task(id=task_id, title=title, description=description, column=column)
        self.tasks[task_id] = task
        self.owners[task_id] = user_id
        return task

    def update_task(self, task_id, fields):
        self._check()
        task = self.tasks.get(task_id)
        if task is None:
            return None
        task = replace(task, **fields)
        self.tasks[task_id] = task
        return task

    def delete_task(self, task_id):
        self._check()
        return self.tasks.pop(task_id, None) is not None

    def upsert_user(self, email, name=None, image=None):
        self._check()
        for user in self.users:
            if user['email'] == email:
                return user['id']
        user = {'id': len(self.users) + 1, 'email': email, 'name': name}
        self.users.append(user)
        return user['id']

    def list_users(self):
        self._check()
        return list(self.users)


class FakeTaskApi:
    """
    In-memory stand-in for TaskApiClient.

    ``fail_on`` names methods that raise; ``fail_ids`` makes update_task fail
    for specific tasks; ``gates`` holds update_task for a task id until the
    event is set.
    """

    def __init__(self, tasks=()):
        self.tasks = {task.id: task for task in tasks}
        self.calls = []
        self.fail_on = set()
        self.fail_ids = set()
        self.gates = {}
        self._ids = itertools.count(1)

    def _maybe_fail(self, method):
        if method in self.fail_on:
            raise TaskApiError(f"{method} failed", status=500)

    async def list_tasks(self):
        self.calls.append(('list_tasks',))
        self._maybe_fail('list_tasks')
        return list(self.tasks.values())

    async def create_task(self, title, description, column):
        self.calls.append(('create_task', title, description, column))
        self._maybe_fail('create_task')
        task = Task(id=f"new-{next(self._ids)}", title=title, description=description, column=column)
        self.tasks[task.id] = task
        return task

    async def update_task(self, task_id, **fields):
        self.calls.append(('update_task', task_id, fields))
        gate = self.gates.get(task_id)
        if gate is not None:
            await gate.wait()
        self._maybe_fail('update_task')
        if task_id in self.fail_ids:
            raise TaskApiError("PUT failed", status=500)
        if task_id not in self.tasks:
            raise TaskApiError("Task not found", status=404)
        self.tasks[task_id] = replace(self.tasks[task_id], **fields)
        return self.tasks[task_id]

    async def delete_task(self, task_id):
        self.calls.append(('delete_task', task_id))
        self._maybe_fail('delete_task')
        if self.tasks.pop(task_id, None) is None:
            raise TaskApiError("Task not found", status=404)

    def gate(self, task_id):
        self.gates[task_id] = asyncio.Event()
        return self.gates[task_id]
