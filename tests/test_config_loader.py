from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from replaytest.config import RunConfig, load_config
from replaytest.core import ConfigurationError


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "replaytest.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_load_full_config(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        target: suites/smoke.py:harness
        report: json
        report_path: out/report.json
        color: false
        breakpoints: false
        """,
    )
    config = load_config(str(path))
    assert config.target == f"{(tmp_path / 'suites/smoke.py').resolve()}:harness"
    assert config.report == "json"
    assert config.report_path == str((tmp_path / "out/report.json").resolve())
    assert config.color is False
    assert config.breakpoints is False
    assert config.show_stack is True


def test_module_targets_are_kept_verbatim(tmp_path: Path) -> None:
    config = load_config(str(_write(tmp_path, "target: mypkg.suites:harness\n")))
    assert config.target == "mypkg.suites:harness"


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    assert load_config(str(_write(tmp_path, ""))) == RunConfig()


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as exc:
        load_config(str(_write(tmp_path, "parallel: 4\n")))
    assert "parallel" in str(exc.value)


def test_invalid_report_format(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as exc:
        load_config(str(_write(tmp_path, "report: html\n")))
    assert "report" in str(exc.value)


def test_json_report_requires_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as exc:
        load_config(str(_write(tmp_path, "report: json\n")))
    assert "report_path" in str(exc.value)


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(str(_write(tmp_path, "- a\n- b\n")))


def test_overrides_skip_none() -> None:
    config = RunConfig(report="json", report_path="a.json").with_overrides(report=None, color=False)
    assert config.report == "json"
    assert config.color is False
