from dataclasses import dataclass, field
from datetime import datetime, timezone
import time

TODO = 'todo'
IN_PROGRESS = 'inProgress'
DONE = 'done'

# Board order
COLUMN_IDS = (TODO, IN_PROGRESS, DONE)

# Fields a PUT may change
UPDATE_FIELDS = ('title', 'description', 'column')


@dataclass(frozen=True)
class Column:
    id: str
    title: str


DEFAULT_COLUMNS = (
    Column(TODO, 'To Do'),
    Column(IN_PROGRESS, 'In Progress'),
    Column(DONE, 'Done'),
)


def is_column_id(value):
    return isinstance(value, str) and value in COLUMN_IDS


def now_ms():
    return int(time.time() * 1000)


@dataclass
class Task:
    id: str
    title: str
    column: str
    description: str = ''
    created_at: int = field(default_factory=now_ms)

    def __post_init__(self):
        if not is_column_id(self.column):
            raise ValueError(f"Unknown column: {self.column!r}")

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'column': self.column,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            description=data.get('description') or '',
            column=data.get('column'),
            created_at=int(data.get('createdAt') or now_ms()),
        )


def _to_epoch_ms(value):
    if value is None:
        return now_ms()
    if isinstance(value, datetime):
        # TIMESTAMP columns come back naive; they hold UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    return int(value)


def task_from_row(row):
    """Map a ``tasks`` row (status column holds the column id) to a Task."""
    return Task(
        id=str(row['id']),
        title=row['title'],
        description=row.get('description') or '',
        column=row['status'],
        created_at=_to_epoch_ms(row.get('created_at')),
    )


def board_stats(tasks):
    counts = {column_id: 0 for column_id in COLUMN_IDS}
    for task in tasks:
        column = task.column if isinstance(task, Task) else task['column']
        if column in counts:
            counts[column] += 1

    total = len(tasks)
    completion_rate = round(counts[DONE] / total * 100) if total else 0
    return {'total': total, **counts, 'completionRate': completion_rate}
