from pathlib import Path
import sys
import pytest

# Ensure src/ is on sys.path for direct test invocation without an editable install
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from timewarden.dispatch import run_job
from timewarden.gateway import RemoteCallError
from timewarden.models import AppUsage, Schedule, Session


class ManualInvoker:
    """Queues jobs until the test runs them; ``auto=True`` runs them on submit."""

    def __init__(self, auto: bool = False):
        self.auto = auto
        self.queue: list = []
        self._draining = False

    def submit(self, job, on_success, on_failure):
        self.queue.append((job, on_success, on_failure))
        if self.auto and not self._draining:
            self.run_all()

    def run_next(self) -> None:
        job, on_success, on_failure = self.queue.pop(0)
        ok, payload = run_job(job)
        (on_success if ok else on_failure)(payload)

    def run_all(self) -> None:
        self._draining = True
        try:
            while self.queue:
                self.run_next()
        finally:
            self._draining = False


class FakeGateway:
    def __init__(self):
        self.current_app: str | None = "chrome.exe"
        self.idle_seconds = 0
        self.sessions: list[Session] = []
        self.totals: list[AppUsage] = []
        self.schedules: list[Schedule] = []
        self.fail: set[str] = set()
        self.calls: list[tuple] = []
        self._next_id = 1

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise RemoteCallError(name, "backend unavailable")

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def get_current_app(self):
        self._record("get_current_app")
        return self.current_app

    def get_idle_seconds(self):
        self._record("get_idle_seconds")
        return self.idle_seconds

    def get_today_sessions(self):
        self._record("get_today_sessions")
        return list(self.sessions)

    def get_app_totals_today(self):
        self._record("get_app_totals_today")
        return list(self.totals)

    def get_all_schedules(self):
        self._record("get_all_schedules")
        return [Schedule.from_dict(s.to_dict()) for s in self.schedules]

    def add_schedule(self, name: str, enabled: bool = True) -> Schedule:
        s = Schedule(id=self._next_id, name=name, start_time="09:00:00", end_time="17:00:00",
                     days=["Mon"], enabled=enabled)
        self._next_id += 1
        self.schedules.append(s)
        return s

    def create_schedule(self, schedule: Schedule):
        self._record("create_schedule", schedule)
        created = Schedule.from_dict({**schedule.to_dict(), "id": self._next_id})
        self._next_id += 1
        self.schedules.append(created)

    def update_schedule(self, schedule: Schedule):
        self._record("update_schedule", schedule)
        self.schedules = [schedule if s.id == schedule.id else s for s in self.schedules]

    def delete_schedule(self, schedule_id: int):
        self._record("delete_schedule", schedule_id)
        self.schedules = [s for s in self.schedules if s.id != schedule_id]

    def toggle_schedule(self, schedule_id: int, enabled: bool):
        self._record("toggle_schedule", schedule_id, enabled)
        for s in self.schedules:
            if s.id == schedule_id:
                s.enabled = enabled


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def invoker() -> ManualInvoker:
    return ManualInvoker()
