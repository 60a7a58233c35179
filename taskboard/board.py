from dataclasses import dataclass


@dataclass(frozen=True)
class ColumnView:
    id: str
    title: str
    cards: tuple

    @property
    def count(self):
        return len(self.cards)


def _fit(text, width):
    if len(text) <= width:
        return text.ljust(width)
    return text[:width - 1] + '…'


class BoardView:
    """Column view models projected from a BoardStore, refreshed on every store change."""

    def __init__(self, store, on_render=None):
        self.store = store
        self.on_render = on_render
        self.columns = self.project()
        self._unsubscribe = store.subscribe(self._on_change)

    def project(self):
        return [
            ColumnView(column.id, column.title, tuple(self.store.tasks_by_column(column.id)))
            for column in self.store.columns
        ]

    def _on_change(self, store):
        self.columns = self.project()
        if self.on_render:
            self.on_render(self)

    def close(self):
        self._unsubscribe()

    def render_text(self, width=28):
        gap = ' | '
        lines = [
            gap.join(_fit(f"{column.title} ({column.count})", width) for column in self.columns),
            '-+-'.join('-' * width for _ in self.columns),
        ]

        depth = max((column.count for column in self.columns), default=0)
        for row in range(depth):
            cells = []
            for column in self.columns:
                if row < column.count:
                    task = column.cards[row]
                    cells.append(_fit(f"[{task.id}] {task.title}", width))
                else:
                    cells.append(' ' * width)
            lines.append(gap.join(cells).rstrip())

        if self.store.is_loading:
            lines.append('Loading...')
        if self.store.error:
            lines.append(f"Error: {self.store.error}")
        return '\n'.join(lines)
