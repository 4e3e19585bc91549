"""Tests for the gotestfinder CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest
import yaml
from click.testing import CliRunner

from gotestfinder.cli import cli
from gotestfinder.config import CONFIG_FILENAME
from gotestfinder.selectors.base import TestSelector
from gotestfinder.utils.subprocess_runner import SubprocessError, SubprocessResult

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

_ADD_SUB = """\
func TestAdd(t *testing.T) {
    t.Run("positive", func(t *testing.T){})
    t.Run("negative", func(t *testing.T){})
}
func TestSub(t *testing.T) {}
"""

_EXECUTE = "gotestfinder.cli.execute_go_test"
_GET_SELECTOR = "gotestfinder.cli.get_selector"


class _FakeSelector(TestSelector):
    def __init__(self, chosen: list[str]) -> None:
        self.chosen = chosen
        self.candidates: list[str] | None = None

    @property
    def name(self) -> str:
        return "fake"

    async def select(self, candidates: Sequence[str]) -> list[str]:
        self.candidates = list(candidates)
        return list(self.chosen)


def _write_file(root: Path, rel: str, content: str) -> Path:
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")
    return f


@pytest.fixture
def project(tmp_path: Path) -> Path:
    _write_file(tmp_path, "calc/calc_test.go", _ADD_SUB)
    return tmp_path


# ── Basics ───────────────────────────────────────────────────────


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_help() -> None:
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "--fzf" in result.output
    assert "--tags" in result.output


def test_directory_required() -> None:
    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 2


def test_directory_must_exist(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, [str(tmp_path / "missing")])
    assert result.exit_code == 2


# ── Listing mode ─────────────────────────────────────────────────


class TestListing:
    def test_default_flags(self, project: Path) -> None:
        result = CliRunner().invoke(cli, [str(project)])
        assert result.exit_code == 0
        assert result.output == "^TestAdd$\n^TestAdd/positive$\n^TestAdd/negative$\n^TestSub$\n"

    def test_no_subtests(self, project: Path) -> None:
        result = CliRunner().invoke(cli, ["--no-subtests", str(project)])
        assert result.output == "^TestAdd$\n^TestSub$\n"

    def test_no_parent(self, project: Path) -> None:
        result = CliRunner().invoke(cli, ["--no-parent", str(project)])
        assert result.output == "^TestAdd/positive$\n^TestAdd/negative$\n^TestSub$\n"

    def test_no_parent_no_subtests(self, project: Path) -> None:
        result = CliRunner().invoke(cli, ["--no-parent", "--no-subtests", str(project)])
        assert result.output == "^TestSub$\n"

    def test_config_defaults_and_flag_override(self, project: Path) -> None:
        (project / CONFIG_FILENAME).write_text(
            yaml.dump({"listing": {"subtests": False}}), encoding="utf-8"
        )
        runner = CliRunner()
        assert runner.invoke(cli, [str(project)]).output == "^TestAdd$\n^TestSub$\n"
        result = runner.invoke(cli, ["--subtests", str(project)])
        assert "^TestAdd/positive$" in result.output

    def test_empty_tree(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(cli, [str(tmp_path)])
        assert result.exit_code == 0
        assert result.output == ""

    def test_unreadable_file_aborts(self, project: Path) -> None:
        (project / "bad_test.go").write_bytes(b"\xff\xfe")
        result = CliRunner().invoke(cli, [str(project)])
        assert result.exit_code != 0
        assert "Failed to read" in result.output
        assert "^TestAdd$" not in result.output

    def test_errors_written_to_stderr(self, project: Path) -> None:
        (project / "bad_test.go").write_bytes(b"\xff\xfe")
        result = CliRunner().invoke(cli, [str(project)])
        assert result.exit_code != 0
        assert "Failed to read" in result.stderr
        assert "Failed to read" not in result.stdout

    def test_invalid_config_aborts(self, project: Path) -> None:
        (project / CONFIG_FILENAME).write_text(
            yaml.dump({"runner": {"count": 0}}), encoding="utf-8"
        )
        result = CliRunner().invoke(cli, [str(project)])
        assert result.exit_code != 0
        assert "runner.count" in result.output

    def test_malformed_config_aborts(self, project: Path) -> None:
        (project / CONFIG_FILENAME).write_text("listing: [oops\n", encoding="utf-8")
        result = CliRunner().invoke(cli, [str(project)])
        assert result.exit_code != 0
        assert "Failed to load" in result.output


# ── Interactive mode ─────────────────────────────────────────────


class TestInteractive:
    def test_no_tests_found(self, tmp_path: Path) -> None:
        selector = _FakeSelector(["TestAdd"])
        with (
            patch(_GET_SELECTOR, return_value=selector),
            patch(_EXECUTE, new=AsyncMock(return_value=0)) as mock_exec,
        ):
            result = CliRunner().invoke(cli, ["--fzf", str(tmp_path)])

        assert result.exit_code == 0
        assert "No tests found" in result.output
        assert selector.candidates is None
        mock_exec.assert_not_awaited()

    def test_no_tests_selected(self, project: Path) -> None:
        with (
            patch(_GET_SELECTOR, return_value=_FakeSelector([])),
            patch(_EXECUTE, new=AsyncMock(return_value=0)) as mock_exec,
        ):
            result = CliRunner().invoke(cli, ["--fzf", str(project)])

        assert result.exit_code == 0
        assert "No tests selected" in result.output
        mock_exec.assert_not_awaited()

    def test_candidates_ignore_listing_flags(self, project: Path) -> None:
        selector = _FakeSelector([])
        with patch(_GET_SELECTOR, return_value=selector):
            CliRunner().invoke(cli, ["--fzf", "--no-parent", "--no-subtests", str(project)])

        assert selector.candidates == [
            "TestAdd",
            "TestAdd/positive",
            "TestAdd/negative",
            "TestSub",
        ]

    def test_runs_selected_tests(self, project: Path) -> None:
        selector = _FakeSelector(["TestAdd/positive", "TestSub"])
        with (
            patch(_GET_SELECTOR, return_value=selector),
            patch(_EXECUTE, new=AsyncMock(return_value=0)) as mock_exec,
        ):
            result = CliRunner().invoke(cli, ["--fzf", str(project)])

        assert result.exit_code == 0
        command = mock_exec.await_args.args[0]
        assert command == ["go", "test", "-count=1", "-run", "TestAdd/positive|TestSub", "./..."]
        assert "Running: go test -count=1 -run TestAdd/positive|TestSub ./..." in result.output

    def test_single_selection_is_verbatim(self, project: Path) -> None:
        with (
            patch(_GET_SELECTOR, return_value=_FakeSelector(["TestSub"])),
            patch(_EXECUTE, new=AsyncMock(return_value=0)) as mock_exec,
        ):
            CliRunner().invoke(cli, ["--fzf", str(project)])

        command = mock_exec.await_args.args[0]
        assert command[command.index("-run") + 1] == "TestSub"

    def test_tags_and_verbose_forwarded(self, project: Path) -> None:
        with (
            patch(_GET_SELECTOR, return_value=_FakeSelector(["TestSub"])),
            patch(_EXECUTE, new=AsyncMock(return_value=0)) as mock_exec,
        ):
            CliRunner().invoke(cli, ["--fzf", "--tags", "integration", "-v", str(project)])

        command = mock_exec.await_args.args[0]
        assert "-v" in command
        assert "-tags=integration" in command

    def test_runner_config_used(self, project: Path) -> None:
        (project / CONFIG_FILENAME).write_text(
            yaml.dump({"runner": {"tags": "e2e", "packages": ["./calc/..."]}}),
            encoding="utf-8",
        )
        with (
            patch(_GET_SELECTOR, return_value=_FakeSelector(["TestSub"])),
            patch(_EXECUTE, new=AsyncMock(return_value=0)) as mock_exec,
        ):
            CliRunner().invoke(cli, ["--fzf", str(project)])

        command = mock_exec.await_args.args[0]
        assert "-tags=e2e" in command
        assert command[-1] == "./calc/..."

    def test_exit_code_propagated(self, project: Path) -> None:
        with (
            patch(_GET_SELECTOR, return_value=_FakeSelector(["TestSub"])),
            patch(_EXECUTE, new=AsyncMock(return_value=3)),
        ):
            result = CliRunner().invoke(cli, ["--fzf", str(project)])

        assert result.exit_code == 3

    def test_launch_failure_aborts(self, project: Path) -> None:
        error = SubprocessError(
            "Command not found: go",
            result=SubprocessResult(returncode=-1, stdout="", stderr="", success=False),
        )
        with (
            patch(_GET_SELECTOR, return_value=_FakeSelector(["TestSub"])),
            patch(_EXECUTE, new=AsyncMock(side_effect=error)),
        ):
            result = CliRunner().invoke(cli, ["--fzf", str(project)])

        assert result.exit_code == 1
        assert "Command not found: go" in result.output

    def test_selector_option_overrides_config(self, project: Path) -> None:
        with patch(_GET_SELECTOR, return_value=_FakeSelector([])) as mock_get:
            CliRunner().invoke(cli, ["--fzf", "--selector", "fzf", str(project)])

        assert mock_get.call_args.args[0].backend == "fzf"


# ── Selector configuration ───────────────────────────────────────


class TestSelectorConfiguration:
    def test_listing_ignores_unknown_backend(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOTESTFINDER_SELECTOR", "skim")
        result = CliRunner().invoke(cli, [str(project)])
        assert result.exit_code == 0
        assert result.output.startswith("^TestAdd$\n")

    def test_interactive_rejects_unknown_backend(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOTESTFINDER_SELECTOR", "skim")
        with patch(_GET_SELECTOR, return_value=_FakeSelector([])) as mock_get:
            result = CliRunner().invoke(cli, ["--fzf", str(project)])

        assert result.exit_code != 0
        assert "selector.backend" in result.output
        mock_get.assert_not_called()

    def test_option_replaces_unknown_backend(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOTESTFINDER_SELECTOR", "skim")
        with patch(_GET_SELECTOR, return_value=_FakeSelector([])) as mock_get:
            result = CliRunner().invoke(cli, ["--fzf", "--selector", "fzf", str(project)])

        assert result.exit_code == 0
        assert "No tests selected" in result.output
        assert mock_get.call_args.args[0].backend == "fzf"

    def test_listing_with_selector_option(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOTESTFINDER_SELECTOR", "skim")
        result = CliRunner().invoke(cli, ["--selector", "fzf", str(project)])
        assert result.exit_code == 0
        assert "^TestSub$" in result.output
