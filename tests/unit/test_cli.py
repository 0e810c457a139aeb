"""
CLI tests.

Runs the argparse entry point in-process with a temporary working
directory; publish goes through the fake Figma server.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from tokensync.adapters.figma_api import FigmaVariablesApi
from tokensync.app_shell import cli


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def system_file(workdir: Path, sample_system: dict[str, Any]) -> Path:
    path = workdir / "tokens.json"
    path.write_text(json.dumps(sample_system))
    return path


@pytest.fixture
def fake_api(monkeypatch: pytest.MonkeyPatch, figma_server, access_token: str):
    monkeypatch.setenv("FIGMA_ACCESS_TOKEN", access_token)

    def factory(token: str, **kwargs: Any) -> FigmaVariablesApi:
        return FigmaVariablesApi(token, transport=figma_server.transport, **kwargs)

    monkeypatch.setattr(cli, "FigmaVariablesApi", factory)
    return figma_server


class TestTransformCommand:
    def test_writes_result(self, workdir: Path, system_file: Path) -> None:
        out = workdir / "result.json"

        code = cli.main(["transform", str(system_file), "--out", str(out)])

        assert code == 0
        result = json.loads(out.read_text())
        assert result["success"] is True
        assert result["variables"]
        assert result["stats"]["created"] == len(result["variables"])

    def test_prints_to_stdout(self, system_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = cli.main(["transform", str(system_file), "--color-profile", "display-p3"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["success"] is True

    def test_invalid_system(self, workdir: Path, sample_system: dict[str, Any]) -> None:
        del sample_system["systemId"]
        path = workdir / "broken.json"
        path.write_text(json.dumps(sample_system))

        assert cli.main(["transform", str(path), "--out", str(workdir / "r.json")]) == 1

    def test_unreadable_input(self, workdir: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["transform", str(workdir / "missing.json")])
        assert exc_info.value.code == 1

    def test_explicit_rules_file_must_exist(self, system_file: Path) -> None:
        with pytest.raises(SystemExit):
            cli.main(["--rules", "nope.yaml", "transform", str(system_file)])

    def test_unknown_color_profile_rejected(self, system_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["transform", str(system_file), "--color-profile", "cmyk"])
        assert exc_info.value.code == 2


class TestPublishCommand:
    def test_publish_and_persist(
        self,
        workdir: Path,
        system_file: Path,
        fake_api,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = cli.main(
            [
                "publish",
                str(system_file),
                "--file-key",
                "FILE123",
                "--mapping-dir",
                str(workdir / "maps"),
                "--no-record",
            ]
        )

        assert code == 0
        assert "Published" in capsys.readouterr().out
        mapping = json.loads((workdir / "maps" / "FILE123.json").read_text())
        assert set(mapping.values()) <= {
            *fake_api.variables,
            *fake_api.collections,
            *(m["modeId"] for c in fake_api.collections.values() for m in c["modes"]),
        }

    def test_missing_token(
        self, system_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("FIGMA_ACCESS_TOKEN", raising=False)

        assert cli.main(["publish", str(system_file), "--file-key", "FILE123"]) == 1

    def test_remote_failure(self, system_file: Path, fake_api) -> None:
        fake_api.fail_with = 500

        code = cli.main(["publish", str(system_file), "--file-key", "FILE123", "--no-record"])

        assert code == 1
