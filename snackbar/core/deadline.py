import threading
import time
from dataclasses import dataclass, field

from snackbar.core.errors import OperationCancelled


@dataclass
class Deadline:
    """Caller-supplied bound on a unit of work.

    Either a timeout in seconds, a cancel event set from another thread, or
    both. The sale store calls `check` between statements and right before
    committing, so expired work is rolled back instead of committed.
    """

    timeout: float | None = None
    cancel_event: threading.Event | None = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def remaining(self) -> float | None:
        if self.timeout is None:
            return None
        return self.timeout - (time.monotonic() - self.started_at)

    def expired(self) -> bool:
        if self.cancel_event is not None and self.cancel_event.is_set():
            return True
        remaining = self.remaining
        return remaining is not None and remaining <= 0

    def check(self, stage: str) -> None:
        """Raises OperationCancelled if the work must stop before `stage`."""
        if self.expired():
            raise OperationCancelled(f"Operation cancelled before {stage}.")


def ensure_deadline(deadline: Deadline | None) -> Deadline:
    return deadline if deadline is not None else Deadline()
