"""JSON-lines exporter for runtime telemetry in an OTEL-friendly envelope."""
from __future__ import annotations

import io
import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Mapping, Optional, TextIO

if TYPE_CHECKING:  # pragma: no cover
    from config import RuntimeConfig

DEFAULT_SERVICE_NAME = "bookkeeping-agent-runtime"
DEFAULT_SCOPE = "tools.runtime"


class OtelExporter:
    """Write one ``{"resource", "scope", "event"}`` record per line.

    Records go to *sink* if given, else are appended to *path*, else are kept
    in memory for ``buffered_payloads``.
    """

    def __init__(
        self,
        *,
        service_name: str = DEFAULT_SERVICE_NAME,
        scope: str = DEFAULT_SCOPE,
        sink: Optional[TextIO] = None,
        path: Optional[Path] = None,
        resource: Optional[Mapping[str, str]] = None,
    ) -> None:
        if sink is not None and path is not None:
            raise ValueError("provide either sink or path, not both")
        self._sink = sink
        self._path = path
        attributes: Dict[str, str] = {"service.name": service_name}
        attributes.update({str(k): str(v) for k, v in (resource or {}).items()})
        self._envelope = {"resource": attributes, "scope": {"name": scope}}
        self._lock = threading.Lock()
        self._buffer: List[str] = []

    @classmethod
    def from_config(cls, config: "RuntimeConfig", **kwargs: object) -> "OtelExporter":
        """Exporter appending to the configured telemetry log, or buffering if none is set."""
        return cls(path=config.telemetry_log_path, **kwargs)  # type: ignore[arg-type]

    def encode(self, event: Mapping[str, object]) -> str:
        return json.dumps({**self._envelope, "event": event}, ensure_ascii=False, default=str)

    def export(self, events: Iterable[Mapping[str, object]]) -> int:
        """Serialize and emit *events*; return how many records were written."""
        lines = [self.encode(event) for event in events]
        if not lines:
            return 0
        with self._lock, self._target() as target:
            target.writelines(f"{line}\n" for line in lines)
        return len(lines)

    @contextmanager
    def _target(self) -> Iterator[TextIO]:
        if self._sink is not None:
            yield self._sink
            self._sink.flush()
        elif self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                yield fh
        else:
            pending = io.StringIO()
            yield pending
            self._buffer.extend(pending.getvalue().splitlines())

    def buffered_payloads(self) -> List[str]:
        with self._lock:
            return list(self._buffer)


__all__ = ["DEFAULT_SCOPE", "DEFAULT_SERVICE_NAME", "OtelExporter"]
