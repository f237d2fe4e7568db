"""Gate configuration loaded from ``formatting.toml``.

Example file::

    [gate]
    base_ref = "origin/main"
    excluded_dirs = [".git", "node_modules", "out"]
    config_area = ["tools/formatting"]

    [files]
    script_extensions = [".ps1", ".psm1", ".psd1"]
    text_extensions = [".md", ".txt", ".json", ".yml", ".yaml"]

    [checks]
    max_consecutive_empty_lines = 2
    header = ["# Copyright (c) Contoso Ltd.", "# Licensed under the MIT License."]

    [analyzer]
    settings = "tools/formatting/PSScriptAnalyzerSettings.psd1"
    custom_rules = "tools/formatting/CustomRules"
    min_version = "1.21.0"
    retries = 5
    retry_delay = 5.0

Relative paths are resolved against the repository root.
"""

import _thread
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from psgate.gate.errors import ConfigError


DEFAULT_CONFIG_RELPATH = Path("tools") / "formatting" / "formatting.toml"

DEFAULT_BASE_REF = "origin/main"

DEFAULT_EXCLUDED_DIRS = [
    ".git",
    ".github",
    ".vs",
    ".vscode",
    "node_modules",
    "bin",
    "obj",
    "out",
]

DEFAULT_SCRIPT_EXTENSIONS = [".ps1", ".psm1", ".psd1"]
DEFAULT_TEXT_EXTENSIONS = [".md", ".txt", ".json", ".yml", ".yaml"]
DEFAULT_FORMATTED_EXTENSIONS = [".ps1", ".psm1"]

DEFAULT_HEADER = [
    "# Copyright (c) Microsoft Corporation.",
    "# Licensed under the MIT License.",
]

DEFAULT_SETTINGS = "tools/formatting/PSScriptAnalyzerSettings.psd1"
DEFAULT_CUSTOM_RULES = "tools/formatting/CustomRules"


@dataclass
class GateConfig:
    """Everything the resolver, checks and analyzer need to know."""

    root: Path
    config_file: Optional[Path] = None
    base_ref: str = DEFAULT_BASE_REF
    excluded_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS))
    extra_config_area: list[Path] = field(default_factory=lambda: list[Path]())
    script_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_SCRIPT_EXTENSIONS)
    )
    text_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_TEXT_EXTENSIONS)
    )
    formatted_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_FORMATTED_EXTENSIONS)
    )
    max_consecutive_empty_lines: int = 2
    header: list[str] = field(default_factory=lambda: list(DEFAULT_HEADER))
    analyzer_settings: Optional[Path] = None
    analyzer_custom_rules: Optional[Path] = None
    min_analyzer_version: str = "1.21.0"
    analyzer_retries: int = 5
    analyzer_retry_delay: float = 5.0

    def __post_init__(self) -> None:
        self.root = self.root.resolve()
        if self.analyzer_settings is None:
            self.analyzer_settings = self.root / DEFAULT_SETTINGS
        if self.analyzer_custom_rules is None:
            self.analyzer_custom_rules = self.root / DEFAULT_CUSTOM_RULES

    @property
    def recognized_extensions(self) -> set[str]:
        return {e.lower() for e in self.script_extensions + self.text_extensions}

    def is_script(self, path: Path) -> bool:
        return path.suffix.lower() in {e.lower() for e in self.script_extensions}

    def is_text(self, path: Path) -> bool:
        return path.suffix.lower() in {e.lower() for e in self.text_extensions}

    def is_formatted(self, path: Path) -> bool:
        return path.suffix.lower() in {e.lower() for e in self.formatted_extensions}

    def config_area(self) -> list[Path]:
        """Paths whose modification invalidates the changed-files shortcut."""
        area: list[Path] = []
        if self.config_file is not None:
            area.append(self.config_file)
        assert self.analyzer_settings is not None
        assert self.analyzer_custom_rules is not None
        area.append(self.analyzer_settings)
        area.append(self.analyzer_custom_rules)
        area.extend(self.extra_config_area)
        return [p.resolve() for p in area]


def _expect(value: Any, kind: type, key: str, config_path: Path) -> Any:
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(
            f"{key} must be a {kind.__name__} in {config_path}\n"
            f"Got: {value!r} (type: {type(value).__name__})"
        )
    return value


def _expect_str_list(value: Any, key: str, config_path: Path) -> list[str]:
    items = _expect(value, list, key, config_path)
    for item in items:
        _expect(item, str, f"{key}[]", config_path)
    return list(items)


def load_config(root: Path, config_path: Optional[Path] = None) -> GateConfig:
    """
    Load the gate configuration.

    Args:
        root: Repository root; relative paths in the file resolve against it
        config_path: Explicit config file. When None the default location is
            used if it exists, otherwise built-in defaults apply.

    Returns:
        GateConfig

    Raises:
        ConfigError: explicit file missing, unparsable, or wrongly typed
    """
    root = root.resolve()
    explicit = config_path is not None
    if config_path is None:
        config_path = root / DEFAULT_CONFIG_RELPATH
    elif not config_path.is_absolute():
        config_path = root / config_path

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Required config file not found at {config_path}")
        return GateConfig(root=root)

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except KeyboardInterrupt:
        _thread.interrupt_main()
        raise
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {config_path}: {e}") from e

    config = GateConfig(root=root, config_file=config_path.resolve())

    gate = _expect(data.get("gate", {}), dict, "[gate]", config_path)
    if "base_ref" in gate:
        config.base_ref = _expect(gate["base_ref"], str, "gate.base_ref", config_path)
    if "excluded_dirs" in gate:
        config.excluded_dirs = _expect_str_list(
            gate["excluded_dirs"], "gate.excluded_dirs", config_path
        )
    if "config_area" in gate:
        config.extra_config_area = [
            root / p
            for p in _expect_str_list(gate["config_area"], "gate.config_area", config_path)
        ]

    files = _expect(data.get("files", {}), dict, "[files]", config_path)
    if "script_extensions" in files:
        config.script_extensions = _expect_str_list(
            files["script_extensions"], "files.script_extensions", config_path
        )
    if "text_extensions" in files:
        config.text_extensions = _expect_str_list(
            files["text_extensions"], "files.text_extensions", config_path
        )
    if "formatted_extensions" in files:
        config.formatted_extensions = _expect_str_list(
            files["formatted_extensions"], "files.formatted_extensions", config_path
        )

    checks = _expect(data.get("checks", {}), dict, "[checks]", config_path)
    if "max_consecutive_empty_lines" in checks:
        limit = _expect(
            checks["max_consecutive_empty_lines"],
            int,
            "checks.max_consecutive_empty_lines",
            config_path,
        )
        if limit < 0:
            raise ConfigError(
                f"checks.max_consecutive_empty_lines must be >= 0 in {config_path}"
            )
        config.max_consecutive_empty_lines = limit
    if "header" in checks:
        config.header = _expect_str_list(checks["header"], "checks.header", config_path)

    analyzer = _expect(data.get("analyzer", {}), dict, "[analyzer]", config_path)
    if "settings" in analyzer:
        config.analyzer_settings = root / _expect(
            analyzer["settings"], str, "analyzer.settings", config_path
        )
    if "custom_rules" in analyzer:
        config.analyzer_custom_rules = root / _expect(
            analyzer["custom_rules"], str, "analyzer.custom_rules", config_path
        )
    if "min_version" in analyzer:
        config.min_analyzer_version = _expect(
            analyzer["min_version"], str, "analyzer.min_version", config_path
        )
    if "retries" in analyzer:
        retries = _expect(analyzer["retries"], int, "analyzer.retries", config_path)
        if retries < 1:
            raise ConfigError(f"analyzer.retries must be >= 1 in {config_path}")
        config.analyzer_retries = retries
    if "retry_delay" in analyzer:
        config.analyzer_retry_delay = _expect(
            analyzer["retry_delay"], float, "analyzer.retry_delay", config_path
        )

    # Paths named explicitly must exist; built-in defaults may be absent
    for key, path in (
        ("settings", config.analyzer_settings),
        ("custom_rules", config.analyzer_custom_rules),
    ):
        if key in analyzer and path is not None and not path.exists():
            raise ConfigError(
                f"analyzer.{key} in {config_path} points to a missing path: {path}"
            )

    return config
