import logging

import httpx

from .models import Task

logger = logging.getLogger(__name__)


class TaskApiError(Exception):
    """A task API call failed; ``status`` is None for transport failures."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status

    @property
    def not_found(self):
        return self.status == 404


class TaskApiClient:
    def __init__(self, base_url, timeout=10.0, transport=None, headers=None):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip('/'),
            timeout=timeout,
            transport=transport,
            headers=headers,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method, path, **kwargs):
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TaskApiError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            try:
                message = response.json().get('error') or response.reason_phrase
            except (ValueError, AttributeError):
                message = response.reason_phrase
            raise TaskApiError(f"{method} {path}: {message}", status=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise TaskApiError(f"{method} {path}: invalid JSON response", status=response.status_code) from e

    async def list_tasks(self):
        data = await self._request('GET', '/tasks')
        return [Task.from_dict(item) for item in data['tasks']]

    async def create_task(self, title, description, column):
        data = await self._request('POST', '/tasks', json={
            'title': title,
            'description': description,
            'column': column,
        })
        return Task.from_dict(data['task'])

    async def update_task(self, task_id, **fields):
        data = await self._request('PUT', f'/tasks/{task_id}', json=fields)
        return Task.from_dict(data['task'])

    async def delete_task(self, task_id):
        await self._request('DELETE', f'/tasks/{task_id}')
