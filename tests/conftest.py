import io
import random

import pandas as pd
import pytest

from luckydraw.app import create_app


class ManualTask:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True


class ManualScheduler:
    """Scheduler whose ticks only happen when a test calls tick()."""

    def __init__(self):
        self.tasks = []

    def call_every(self, interval, callback):
        task = ManualTask(interval, callback)
        self.tasks.append(task)
        return task

    def tick(self):
        for task in self.tasks:
            if not task.stopped:
                task.callback()


def xlsx_bytes(*sheets):
    """Build a workbook with one sheet per list of rows, no header row."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine='openpyxl') as writer:
        for i, rows in enumerate(sheets):
            pd.DataFrame(rows).to_excel(writer, index=False, header=False, sheet_name=f'Sheet{i + 1}')
    return buf.getvalue()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def app(scheduler):
    app = create_app(scheduler=scheduler, rng=random.Random(3))
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions['luckydraw']
