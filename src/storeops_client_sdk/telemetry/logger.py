from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import TextIO

from .events import TelemetryEvent


class TelemetryLogger:
    """Append-only JSONL sink for list-view telemetry.

    Events are also kept in ``emitted`` so a host application can inspect
    the last few without reading the file back.
    """

    def __init__(
        self,
        *,
        app_name: str,
        enabled: bool | None = None,
        log_file: str | Path | None = None,
        stdout_sink: bool = False,
        stdout_stream: TextIO | None = None,
        keep_last: int = 50,
    ) -> None:
        self.app_name = app_name
        self.enabled = enabled if enabled is not None else _env_telemetry_enabled()
        self.log_file = Path(log_file) if log_file else Path("artifacts") / "telemetry" / f"{app_name}.jsonl"
        self.stdout_sink = stdout_sink
        self.stdout_stream = stdout_stream
        self.keep_last = max(0, keep_last)
        self.emitted: list[dict[str, object]] = []

    def emit(self, event: TelemetryEvent) -> bool:
        if not self.enabled:
            return False

        payload = event.to_dict()
        payload["app_name"] = self.app_name
        line = json.dumps(payload, sort_keys=True, default=str)

        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        with self.log_file.open("a", encoding="utf-8") as fp:
            fp.write(f"{line}\n")

        if self.stdout_sink:
            stream = self.stdout_stream or sys.stdout
            stream.write(f"{line}\n")
            stream.flush()

        if self.keep_last:
            self.emitted.append(payload)
            del self.emitted[: -self.keep_last]
        return True


def _env_telemetry_enabled() -> bool:
    value = os.getenv("STOREOPS_TELEMETRY_ENABLED", "0").strip().lower()
    return value in {"1", "true", "yes", "on"}
