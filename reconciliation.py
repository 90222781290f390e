import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from app_state import AppState
from table_errors import (
    AnalysisInProgress,
    EmptyInstruction,
    EmptyPayload,
    InvalidAnalysisResponse,
    TableError,
    TransportFailure,
)
from table_model import Table, normalize

logger = logging.getLogger(__name__)


def reconcile(payload: Sequence[Sequence[str]]) -> Table:
    """Turn a header-first list of string rows into a settled Table."""
    if payload is None or len(payload) == 0:
        raise EmptyPayload()
    return normalize(Table.from_lists(payload[0], payload[1:]))


@dataclass(frozen=True)
class AnalysisRequest:
    current_table: Table
    instruction: str

    def to_payload(self) -> dict:
        headers, rows = self.current_table.to_lists()
        return {
            "currentTable": {"headers": headers, "rows": rows},
            "instruction": self.instruction,
        }


@dataclass(frozen=True)
class AnalysisResponse:
    needs_change: bool
    narrative: str
    table: tuple[tuple[str, ...], ...]

    @classmethod
    def from_payload(cls, payload: Any) -> "AnalysisResponse":
        if not isinstance(payload, dict):
            raise InvalidAnalysisResponse("Analysis response is not an object")
        table = payload.get("table")
        if not isinstance(table, (list, tuple)) or len(table) == 0:
            raise InvalidAnalysisResponse("Analysis response has no table")
        if not all(isinstance(row, (list, tuple)) for row in table):
            raise InvalidAnalysisResponse("Analysis table rows must be lists")
        if len(table[0]) == 0:
            raise InvalidAnalysisResponse("Analysis table has no header row")
        narrative = payload.get("narrative")
        return cls(
            needs_change=bool(payload.get("needsChange", False)),
            narrative=narrative if isinstance(narrative, str) else "",
            table=tuple(tuple("" if v is None else str(v) for v in row) for row in table),
        )


class AnalysisClient(Protocol):
    model: str

    def configure(self, model: Optional[str] = None, api_key: Optional[str] = None): ...

    def analyze(self, request: AnalysisRequest) -> AnalysisResponse: ...


class Outcome(enum.Enum):
    APPLIED = "applied"
    NO_CHANGE = "no_change"
    STALE = "stale"


@dataclass(frozen=True)
class ReconcileResult:
    outcome: Outcome
    narrative: str
    table: Optional[Table] = None


@dataclass
class _Job:
    request: AnalysisRequest
    base_version: int
    file_name: str
    done: threading.Event = field(default_factory=threading.Event)
    response: Optional[AnalysisResponse] = None
    error: Optional[BaseException] = None
    thread: Optional[threading.Thread] = None


class ReconciliationEngine:
    """Runs one analysis at a time and merges its table back into the state."""

    def __init__(self, state: AppState, client: AnalysisClient):
        self.state = state
        self.client = client
        self._job: Optional[_Job] = None

    @property
    def pending(self) -> bool:
        return self._job is not None

    def submit(self, instruction: str) -> None:
        if self._job is not None:
            raise AnalysisInProgress()
        instruction = (instruction or "").strip()
        if not instruction:
            raise EmptyInstruction()
        table = self.state.require_table()

        job = _Job(
            request=AnalysisRequest(table, instruction),
            base_version=self.state.version,
            file_name=self.state.file_name,
        )
        job.thread = threading.Thread(target=self._run, args=(job,), daemon=True)
        self._job = job
        logger.info("Submitting analysis at version %d: %r", job.base_version, instruction)
        job.thread.start()

    def _run(self, job: _Job):
        try:
            job.response = self.client.analyze(job.request)
        except TableError as exc:
            job.error = exc
        except Exception as exc:
            job.error = TransportFailure(str(exc) or exc.__class__.__name__)
        finally:
            job.done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        job = self._job
        if job is None:
            return True
        return job.done.wait(timeout)

    def poll(self, hold: bool = False) -> Optional[ReconcileResult]:
        """Return the finished result, or None while the call is outstanding.

        With `hold` set a finished result stays queued, so an edit the user
        is still typing can settle first; committing it bumps the version and
        the held result then comes back STALE. Errors from the call are
        raised here, after the job is cleared.
        """
        job = self._job
        if job is None or not job.done.is_set():
            return None
        if hold and job.error is None:
            return None
        self._job = None
        if job.error is not None:
            logger.warning("Analysis failed: %s", job.error)
            raise job.error
        return self.apply(job.response, job.base_version, job.file_name)

    def apply(
        self,
        response: AnalysisResponse,
        base_version: int,
        file_name: Optional[str] = None,
    ) -> ReconcileResult:
        if not response.table:
            raise InvalidAnalysisResponse("Analysis response has no table")
        if not response.table[0]:
            raise InvalidAnalysisResponse("Analysis table has no header row")
        if not response.needs_change:
            logger.info("Analysis reported no change needed")
            return ReconcileResult(Outcome.NO_CHANGE, response.narrative)

        table = reconcile(response.table)
        if self.state.version != base_version:
            logger.warning(
                "Table moved from version %d to %d during analysis; result not applied",
                base_version,
                self.state.version,
            )
            return ReconcileResult(Outcome.STALE, response.narrative, table)

        self.state.commit(table, file_name=file_name)
        logger.info("Applied analysis table %dx%d", *table.shape)
        return ReconcileResult(Outcome.APPLIED, response.narrative, table)
