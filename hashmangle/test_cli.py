"""
Tests for the HashMangle command interface.
"""
import json

from typer.testing import CliRunner

from hashmangle.cli import app
from hashmangle.sourcemap.model import Mapping, SourceMap

runner = CliRunner()

CODE = "class Foo { #count = 0; inc() { this.#count++; } }"


def write_identity_map(path, code):
    mappings = [Mapping(1, c, "foo.js", 1, c) for c in range(len(code))]
    source_map = SourceMap(mappings=mappings, sources=["foo.js"], sources_content=[code])
    path.write_text(json.dumps(source_map.to_dict()), encoding="utf-8")


# ─── Convert ─────────────────────────────────────────────────────────────────

class TestConvertCommand:
    def test_rewrites_in_place(self, tmp_path):
        script = tmp_path / "foo.js"
        script.write_text(CODE, encoding="utf-8")
        result = runner.invoke(app, ["convert", str(script)])
        assert result.exit_code == 0, result.output
        assert script.read_text(encoding="utf-8") == "class Foo { $a = 0; inc() { this.$a++; } }"

    def test_adjusts_sibling_source_map(self, tmp_path):
        script = tmp_path / "foo.js"
        script.write_text(CODE, encoding="utf-8")
        write_identity_map(tmp_path / "foo.js.map", CODE)

        result = runner.invoke(app, ["convert", str(script)])
        assert result.exit_code == 0, result.output

        source_map = SourceMap.from_dict(json.loads((tmp_path / "foo.js.map").read_text(encoding="utf-8")))
        new_code = script.read_text(encoding="utf-8")
        pos = source_map.original_position_for(1, new_code.index("inc"))
        assert pos.column == CODE.index("inc")

    def test_output_paths(self, tmp_path):
        script = tmp_path / "foo.js"
        script.write_text(CODE, encoding="utf-8")
        map_path = tmp_path / "in.map"
        write_identity_map(map_path, CODE)
        out = tmp_path / "dist" / "foo.js"
        out.parent.mkdir()

        result = runner.invoke(app, ["convert", str(script), "--output", str(out), "--source-map", str(map_path)])
        assert result.exit_code == 0, result.output
        assert script.read_text(encoding="utf-8") == CODE
        assert "#" not in out.read_text(encoding="utf-8")
        assert (tmp_path / "dist" / "foo.js.map").exists()

    def test_strict_syntax_error_exits_1(self, tmp_path):
        script = tmp_path / "broken.js"
        script.write_text("class Foo { #x = 1; get() { return this.#x; }", encoding="utf-8")
        result = runner.invoke(app, ["convert", str(script), "--strict"])
        assert result.exit_code == 1

    def test_malformed_source_map_exits_1(self, tmp_path):
        script = tmp_path / "foo.js"
        script.write_text(CODE, encoding="utf-8")
        (tmp_path / "foo.js.map").write_text('{"version": 3, "sources": [], "mappings": "AAAA"}', encoding="utf-8")
        result = runner.invoke(app, ["convert", str(script)])
        assert result.exit_code == 1
        # Nothing is written when the map cannot be adjusted
        assert script.read_text(encoding="utf-8") == CODE

    def test_malformed_source_map_writes_no_output(self, tmp_path):
        script = tmp_path / "foo.js"
        script.write_text(CODE, encoding="utf-8")
        map_path = tmp_path / "in.map"
        map_path.write_text("not json", encoding="utf-8")
        out = tmp_path / "out.js"
        result = runner.invoke(app, ["convert", str(script), "--output", str(out), "--source-map", str(map_path)])
        assert result.exit_code == 1
        assert not out.exists()
        assert not (tmp_path / "out.js.map").exists()

    def test_records_telemetry(self, tmp_path):
        script = tmp_path / "foo.js"
        script.write_text(CODE, encoding="utf-8")
        telemetry_dir = tmp_path / "telemetry"
        result = runner.invoke(app, ["convert", str(script), "--telemetry-dir", str(telemetry_dir)])
        assert result.exit_code == 0, result.output
        lines = (telemetry_dir / "telemetry.jsonl").read_text(encoding="utf-8").splitlines()
        events = {e["metric"]: e["value"] for e in map(json.loads, lines)}
        assert events["edit_count"] == 2
        assert events["field_count"] == 1

    def test_typescript_inferred_from_extension(self, tmp_path):
        script = tmp_path / "foo.ts"
        script.write_text("class Foo { #x: number = 1; get(): number { return this.#x; } }", encoding="utf-8")
        result = runner.invoke(app, ["convert", str(script)])
        assert result.exit_code == 0, result.output
        assert "#x" not in script.read_text(encoding="utf-8")


# ─── Transforms ──────────────────────────────────────────────────────────────

class TestTransformsCommand:
    def test_lists_private_to_property(self):
        result = runner.invoke(app, ["transforms"])
        assert result.exit_code == 0
        assert "private_to_property" in result.output
