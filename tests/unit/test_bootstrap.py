"""
tests/unit/test_bootstrap.py - Tests for configuration, errors and the CLI.
"""

import json
import logging

import pytest

from navalforge.bootstrap import (
    ForgeConfig,
    build_parser,
    build_request,
    cli_main,
    load_config,
    resolve_output_path,
    setup_logging,
)
from navalforge.errors import (
    FORGE_ERROR_CODES,
    ExportError,
    ForgeError,
    GeometryParameterError,
    LoadError,
    SupersededRequestError,
    error_response,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestErrors:
    """Tests for the error taxonomy."""

    def test_codes_unique_and_documented(self):
        classes = [ForgeError, LoadError, GeometryParameterError, ExportError, SupersededRequestError]
        codes = [cls.code for cls in classes]
        assert len(set(codes)) == len(codes)
        assert all(code in FORGE_ERROR_CODES for code in codes)

    def test_parameter_error_dict(self):
        err = GeometryParameterError(param="beam", value=-2, valid_range=(0.0, None))
        data = error_response(err)["error"]
        assert data["code"] == "FORGE_002"
        assert data["category"] == "geometry_parameter"
        assert data["details"]["param"] == "beam"
        assert "greater than" in data["recovery_hint"]

    def test_str_includes_code(self):
        err = LoadError(reason="truncated", source="top.png")
        assert str(err).startswith("[FORGE_001]")
        assert "top.png" in err.message

    def test_superseded_is_info(self):
        err = SupersededRequestError(ticket=1, latest=2)
        assert err.severity.value == "info"
        assert err.details == {"ticket": 1, "latest": 2}


class TestForgeConfig:
    """Tests for ForgeConfig."""

    def test_defaults(self, monkeypatch):
        for name in ("NAVALFORGE_TRACE_SMOOTHING", "NAVALFORGE_SHIP_LENGTH", "NAVALFORGE_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        config = ForgeConfig.from_env()
        assert config.trace.smoothing_radius == 3
        assert config.ship.length == 250.0
        assert config.export.format == "obj"
        assert config.validate() == []

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("NAVALFORGE_TRACE_SMOOTHING", "5")
        monkeypatch.setenv("NAVALFORGE_DETECT_TURRETS", "true")
        monkeypatch.setenv("NAVALFORGE_SHIP_BEAM", "40.5")
        config = ForgeConfig.from_env()
        assert config.trace.smoothing_radius == 5
        assert config.trace.detect_turrets is True
        assert config.ship.beam == 40.5

    def test_from_file_overrides(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NAVALFORGE_LOG_LEVEL", raising=False)
        path = tmp_path / "navalforge.json"
        path.write_text(json.dumps({"trace": {"smoothing_radius": 0}, "logging": {"level": "DEBUG"}}))
        config = ForgeConfig.from_file(str(path))
        assert config.trace.smoothing_radius == 0
        assert config.logging.level == "DEBUG"

    def test_missing_file_falls_back(self, tmp_path):
        config = ForgeConfig.from_file(str(tmp_path / "nope.json"))
        assert isinstance(config, ForgeConfig)

    def test_check_rejects_bad_values(self):
        config = ForgeConfig()
        config.ship.draft = 0
        assert config.validate() == ["ship.draft must be positive"]
        with pytest.raises(GeometryParameterError):
            config.check()

    def test_load_config_with_path(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"export": {"format": "json"}}))
        assert load_config(str(path)).export.format == "json"

    def test_to_dict(self):
        data = ForgeConfig().to_dict()
        assert data["trace"]["smoothing_radius"] == 3
        assert data["ship"] == {"length": 250.0, "beam": 36.0, "draft": 15.0}


class TestLogging:
    """Tests for setup_logging."""

    def test_level_and_file(self, tmp_path):
        log_file = tmp_path / "forge.log"
        setup_logging(level="DEBUG", log_file=str(log_file))
        logging.getLogger("tests.bootstrap").debug("hello forge")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello forge" in log_file.read_text()

    def test_json_format(self, tmp_path):
        log_file = tmp_path / "forge.jsonl"
        setup_logging(level="INFO", log_file=str(log_file), json_format=True)
        logging.getLogger("tests.bootstrap").info("structured")
        for handler in logging.getLogger().handlers:
            handler.flush()
        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["message"] == "structured"
        assert record["logger"] == "tests.bootstrap"


class TestCli:
    """Tests for the command line."""

    def test_parse_hints(self):
        parsed = build_parser().parse_args(["--turrets", "0.8,0.2", "--superstructure", "0.3,0.6"])
        request = build_request(parsed, ForgeConfig())
        assert request.geometry.turrets == (0.8, 0.2)
        assert request.geometry.superstructure.start == 0.3
        assert request.params.length == 250.0

    def test_empty_turrets_means_none(self):
        parsed = build_parser().parse_args(["--turrets", ""])
        request = build_request(parsed, ForgeConfig())
        assert request.geometry.turrets == ()

    def test_config_defaults_flow_through(self):
        config = ForgeConfig()
        config.trace.smoothing_radius = 0
        config.ship.length = 300.0
        request = build_request(build_parser().parse_args([]), config)
        assert request.smoothing_radius == 0
        assert request.params.length == 300.0
        assert request.geometry is None

    def test_sensitivity_flag_and_config_default(self):
        config = ForgeConfig()
        config.trace.detection_sensitivity = 90.0
        assert build_request(build_parser().parse_args([]), config).detection_sensitivity == 90.0

        parsed = build_parser().parse_args(["--sensitivity", "200"])
        assert build_request(parsed, config).detection_sensitivity == 200.0

    def test_out_of_range_sensitivity_exit_code(self):
        assert cli_main(["--sensitivity", "300", "--log-level", "ERROR"]) == 2

    def test_resolve_output_path(self, tmp_path):
        config = ForgeConfig()
        config.export.output_dir = str(tmp_path / "exports")
        assert resolve_output_path("ship.obj", config) == str(tmp_path / "exports" / "ship.obj")
        absolute = str(tmp_path / "elsewhere.obj")
        assert resolve_output_path(absolute, config) == absolute

    def test_relative_output_written_under_export_dir(self, tmp_path):
        cfg = tmp_path / "navalforge.json"
        cfg.write_text(json.dumps({"export": {"output_dir": str(tmp_path / "exports")}}))

        code = cli_main(["-c", str(cfg), "-o", "ship.obj", "--log-level", "ERROR"])
        assert code == 0
        written = tmp_path / "exports" / "ship.obj"
        assert written.read_text().startswith("# NavalForge 3D Export\n")

    def test_json_format_reports_structured_error(self, capsys):
        code = cli_main(["--beam", "-3", "--format", "json", "--log-level", "ERROR"])
        assert code == 2
        payload = json.loads(capsys.readouterr().out)
        assert payload["error"]["code"] == "FORGE_002"
        assert payload["error"]["category"] == "geometry_parameter"

    def test_bad_turret_list(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--turrets", "a,b"])

    def test_writes_obj(self, tmp_path, top_png, side_png):
        top = tmp_path / "top.png"
        side = tmp_path / "side.png"
        top.write_bytes(top_png)
        side.write_bytes(side_png)
        out = tmp_path / "ship.obj"

        code = cli_main([
            "--top", str(top), "--side", str(side),
            "--turrets", "0.8,0.2",
            "-o", str(out),
            "--log-level", "WARNING",
        ])
        assert code == 0
        lines = out.read_text().splitlines()
        assert lines[0] == "# NavalForge 3D Export"
        assert sum(1 for l in lines if l.startswith("v ")) == 663 + 8 + 34

    def test_stdout_without_images(self, capsys):
        code = cli_main(["--length", "200", "--log-level", "ERROR"])
        assert code == 0
        out = capsys.readouterr().out
        assert "# Length: 200m, Beam: 36m, Draft: 15m" in out

    def test_invalid_dimension_exit_code(self, capsys):
        assert cli_main(["--beam", "-3", "--log-level", "ERROR"]) == 2

    def test_undecodable_image(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"garbage")
        assert cli_main(["--top", str(bad), "--log-level", "ERROR"]) == 2
