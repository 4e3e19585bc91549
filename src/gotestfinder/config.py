"""Configuration parsing from ``.gotestfinder.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".gotestfinder.yml"

SELECTOR_BACKENDS = ("textual", "fzf")

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")


class ConfigError(Exception):
    """Raised when the configuration file exists but cannot be loaded."""


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    return value if isinstance(value, dict) else {}


def _str_list(value: Any, default: list[str]) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    return list(default)


@dataclass
class DiscoveryConfig:
    """Which files are scanned for tests."""

    file_suffix: str = "_test.go"
    """File name suffix marking a Go test file."""

    exclude_dirs: list[str] = field(default_factory=list)
    """Directory names pruned from the walk (e.g. ``vendor``)."""


@dataclass
class ListingConfig:
    """Defaults for the non-interactive listing output."""

    subtests: bool = True
    """Print ``Name/Sub`` identifiers."""

    parent: bool = True
    """Print the bare name of tests that have sub-tests."""


@dataclass
class RunnerConfig:
    """How ``go test`` is invoked."""

    command: str = "go"
    """Go executable."""

    count: int = 1
    """Value of ``-count``; 1 disables the test result cache."""

    packages: list[str] = field(default_factory=lambda: ["./..."])
    """Package patterns passed after the flags."""

    tags: str = ""
    """Default build tags (``-tags``)."""

    verbose: bool = False
    """Pass ``-v`` by default."""


@dataclass
class SelectorConfig:
    """Interactive selection settings."""

    backend: str = "textual"
    """``textual`` (built in) or ``fzf`` (external binary)."""

    prompt: str = "Select tests: "
    """Prompt shown above the candidate list."""

    header: str = "TAB to select multiple tests, ENTER to confirm, ESC to cancel"
    """Help line shown by the built-in selector."""

    fzf_command: str = "fzf"
    """fzf executable for the ``fzf`` backend."""


@dataclass
class FinderConfig:
    """Top-level configuration."""

    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    listing: ListingConfig = field(default_factory=ListingConfig)
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    selector: SelectorConfig = field(default_factory=SelectorConfig)
    source: Path | None = None
    """File the configuration was read from, ``None`` for defaults."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML (after env var resolution)."""


def _parse_discovery_config(raw: dict[str, Any]) -> DiscoveryConfig:
    default = DiscoveryConfig()
    return DiscoveryConfig(
        file_suffix=str(raw.get("file_suffix", default.file_suffix)),
        exclude_dirs=_str_list(raw.get("exclude_dirs"), default.exclude_dirs),
    )


def _parse_listing_config(raw: dict[str, Any]) -> ListingConfig:
    return ListingConfig(
        subtests=bool(raw.get("subtests", True)),
        parent=bool(raw.get("parent", True)),
    )


def _parse_runner_config(raw: dict[str, Any]) -> RunnerConfig:
    default = RunnerConfig()
    tags = raw.get("tags", "")
    return RunnerConfig(
        command=str(raw.get("command", os.environ.get("GOTESTFINDER_GO", default.command))),
        count=int(raw.get("count", default.count)),
        packages=_str_list(raw.get("packages"), default.packages),
        tags=str(tags) if tags else "",
        verbose=bool(raw.get("verbose", False)),
    )


def _parse_selector_config(raw: dict[str, Any]) -> SelectorConfig:
    default = SelectorConfig()
    return SelectorConfig(
        backend=str(
            raw.get("backend", os.environ.get("GOTESTFINDER_SELECTOR", default.backend))
        ).lower(),
        prompt=str(raw.get("prompt", default.prompt)),
        header=str(raw.get("header", default.header)),
        fzf_command=str(raw.get("fzf_command", default.fzf_command)),
    )


def load_config(root: str | Path, config_path: str | Path | None = None) -> FinderConfig:
    """Load ``.gotestfinder.yml`` from *root*, or *config_path* when given.

    Falls back to defaults (and environment variables) when the file is
    missing or a section is absent.

    Raises:
        ConfigError: If the file exists but is not valid YAML or has bad values.
    """
    path = Path(config_path) if config_path else Path(root).resolve() / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    source: Path | None = None
    if path.is_file():
        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to load {path}: {exc}") from exc
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        source = path
        logger.debug("Loaded configuration from %s", path)
    elif config_path:
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        return FinderConfig(
            discovery=_parse_discovery_config(_section(raw, "discovery")),
            listing=_parse_listing_config(_section(raw, "listing")),
            runner=_parse_runner_config(_section(raw, "runner")),
            selector=_parse_selector_config(_section(raw, "selector")),
            source=source,
            raw=raw,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in {path}: {exc}") from exc


def _validate_discovery_config(discovery: DiscoveryConfig) -> list[str]:
    errors: list[str] = []
    if not discovery.file_suffix.endswith(".go"):
        errors.append(
            f"discovery.file_suffix must end with '.go', got '{discovery.file_suffix}'"
        )
    return errors


def _validate_runner_config(runner: RunnerConfig) -> list[str]:
    errors: list[str] = []
    if not runner.command:
        errors.append("runner.command must not be empty")
    if runner.count < 1:
        errors.append(f"runner.count must be >= 1, got {runner.count}")
    if not runner.packages:
        errors.append("runner.packages must list at least one package pattern")
    return errors


def _validate_selector_config(selector: SelectorConfig) -> list[str]:
    errors: list[str] = []
    if selector.backend not in SELECTOR_BACKENDS:
        errors.append(
            f"selector.backend must be one of {', '.join(SELECTOR_BACKENDS)}, "
            f"got '{selector.backend}'"
        )
    if selector.backend == "fzf" and not selector.fzf_command:
        errors.append("selector.fzf_command must not be empty")
    return errors


def validate_config(config: FinderConfig, *, check_selector: bool = True) -> list[str]:
    """Validate the configuration and return a list of error messages.

    The selector section is only checked when *check_selector* is True.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []
    errors.extend(_validate_discovery_config(config.discovery))
    errors.extend(_validate_runner_config(config.runner))
    if check_selector:
        errors.extend(_validate_selector_config(config.selector))
    return errors
