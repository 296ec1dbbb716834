"""
HashMangle — Telemetry Collector
=================================
Collects per-file conversion stats. Events are kept in memory and, when an
output directory is configured, appended to a JSONL file for later analysis.
"""

import json
import time
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from hashmangle.models import ConversionResult

logger = logging.getLogger(__name__)

TELEMETRY_FILE = "telemetry.jsonl"


class TelemetryCollector:

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self._events: List[Dict[str, Any]] = []
        self._log_file: Optional[Path] = None
        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self._log_file = self.output_dir / TELEMETRY_FILE

    def record(
        self,
        metric: str,
        value: Any,
        filename: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record a single telemetry event."""
        event = {
            "timestamp": time.time(),
            "metric": metric,
            "value": value,
            "filename": filename,
            **(extra or {}),
        }
        self._events.append(event)
        if self._log_file is not None:
            with open(self._log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(event) + "\n")

    def record_conversion(self, filename: str, result: ConversionResult) -> None:
        """Record the stats of one private-to-property pass."""
        self.record("class_count", result.class_count, filename=filename)
        self.record("field_count", result.field_count, filename=filename)
        self.record("edit_count", result.edit_count, filename=filename)
        self.record("elapsed_ms", result.elapsed_ms, filename=filename)

    def get_all_events(self) -> List[Dict[str, Any]]:
        return self._events.copy()

    def load_from_disk(self) -> List[Dict[str, Any]]:
        """Load all telemetry events from the JSONL file."""
        events = []
        if self._log_file is not None and self._log_file.exists():
            with open(self._log_file, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            events.append(json.loads(line))
                        except json.JSONDecodeError:
                            logger.warning(f"[Telemetry] Skipping undecodable line in {self._log_file}")
        return events
