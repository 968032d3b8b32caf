"""
Run observability helpers.

One `RunObservability` per digest run. Stages are timed with `stage()`,
KPIs, context and errors accumulate on the instance, and `finalize()`
emits the whole run as a single `RUN_REPORT_JSON` log line. Nothing is
written to disk.
"""

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger("RunObservability")


def _jsonable(value: Any) -> Any:
    # Round-trip through json so tuples become lists and unknown objects become strings.
    return json.loads(json.dumps(value, default=str))


class RunObservability:
    """Collects stage timings, KPIs and errors for one run and logs the report."""

    SCHEMA_VERSION = "2.0"

    def __init__(
        self,
        run_type: str,
        *,
        dry_run: bool = False,
        run_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.run_type = (run_type or "digest").strip().lower()
        self.started_at = datetime.now(timezone.utc)
        self.run_id = run_id or f"{self.run_type}_{self.started_at:%Y%m%dT%H%M%SZ}"
        self.dry_run = bool(dry_run)

        self.kpis: Dict[str, Any] = {}
        self.context: Dict[str, Any] = dict(context or {})
        self.errors: List[Dict[str, str]] = []
        self.events: List[Dict[str, Any]] = []
        self.stage_seconds: Dict[str, float] = {}

        self._clock = time.monotonic()
        self._report: Optional[Dict[str, Any]] = None
        logger.info(f"▶️ Run {self.run_id} started (type={self.run_type}, dry_run={self.dry_run})")

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time a pipeline stage; an exception escaping it is recorded, then re-raised."""
        started = time.monotonic()
        try:
            yield
        except Exception as e:
            self.add_error(name, e)
            raise
        finally:
            self.stage_seconds[name] = round(time.monotonic() - started, 3)

    def set_context(self, key: str, value: Any) -> None:
        self.context[key] = value

    def set_kpi(self, key: str, value: Any) -> None:
        self.kpis[key] = value

    def set_kpis(self, metrics: Optional[Dict[str, Any]]) -> None:
        self.kpis.update(metrics or {})

    def add_event(self, name: str, payload: Optional[Dict[str, Any]] = None) -> None:
        self.events.append({"name": name, "at": datetime.now(timezone.utc).isoformat(), "payload": payload or {}})

    def add_error(self, stage: str, err: Any) -> None:
        logger.warning(f"Run {self.run_id}: error in {stage}: {err}")
        self.errors.append({"stage": stage, "error": str(err)})

    def finalize(
        self,
        *,
        status: str,
        summary: str = "",
        kpis: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Build and log the run report. Later calls return the first report unchanged."""
        if self._report is not None:
            return self._report

        self.set_kpis(kpis)
        self.context.update(context or {})

        report = {
            "schema_version": self.SCHEMA_VERSION,
            "run_type": self.run_type,
            "run_id": self.run_id,
            "status": status,
            "summary": summary,
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat(),
            "completed_at": datetime.now(timezone.utc).isoformat(),
            "duration_seconds": round(time.monotonic() - self._clock, 3),
            "stage_seconds": self.stage_seconds,
            "kpis": self.kpis,
            "context": self.context,
            "errors": self.errors,
            "event_count": len(self.events),
        }
        if self.events:
            report["events"] = self.events

        self._report = _jsonable(report)
        logger.info("RUN_REPORT_JSON %s", json.dumps(self._report, sort_keys=True, ensure_ascii=False))
        return self._report
