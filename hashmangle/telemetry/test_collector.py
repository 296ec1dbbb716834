"""
Unit tests for the telemetry collector.
"""
from hashmangle.models import ConversionResult
from hashmangle.telemetry.collector import TELEMETRY_FILE, TelemetryCollector


class TestTelemetryCollector:
    def test_in_memory_only(self, tmp_path):
        collector = TelemetryCollector()
        collector.record("edit_count", 3, filename="a.js")
        events = collector.get_all_events()
        assert len(events) == 1
        assert events[0]["metric"] == "edit_count"
        assert events[0]["value"] == 3
        assert collector.load_from_disk() == []

    def test_record_conversion_writes_jsonl(self, tmp_path):
        collector = TelemetryCollector(output_dir=tmp_path / "telemetry")
        result = ConversionResult(code="", class_count=2, field_count=3, edit_count=5, elapsed_ms=1.5)
        collector.record_conversion("main.js", result)

        events = collector.load_from_disk()
        assert [e["metric"] for e in events] == ["class_count", "field_count", "edit_count", "elapsed_ms"]
        assert [e["value"] for e in events] == [2, 3, 5, 1.5]
        assert all(e["filename"] == "main.js" for e in events)

    def test_undecodable_lines_skipped(self, tmp_path):
        collector = TelemetryCollector(output_dir=tmp_path)
        collector.record("edit_count", 1, extra={"run": "x"})
        with open(tmp_path / TELEMETRY_FILE, "a", encoding="utf-8") as f:
            f.write("{not json\n\n")
        events = collector.load_from_disk()
        assert len(events) == 1
        assert events[0]["run"] == "x"
