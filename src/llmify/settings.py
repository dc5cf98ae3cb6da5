from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from llmify.config import (
    DEFAULT_MAX_FILE_CHARS,
    DEFAULT_OUTPUT,
    ENV_PREFIX,
    HIDDEN_DIR_ALLOWLIST,
    RC_FILE_NAMES,
)
from llmify.exceptions import ConfigFileError

ENV_FILE = find_dotenv(usecwd=True)


class CrawlOptions(BaseModel):
    """Options of one llmify invocation.

    Built once (from the command line, environment and config file) and passed
    explicitly to the rule builder, the crawler and the assembler.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    root: Path = Field(default_factory=Path.cwd, description="Directory to crawl.")
    output: Path = Field(default=Path(DEFAULT_OUTPUT), description="Output file.")
    excludes: list[str] = Field(default_factory=list, description="Exclude globs.")
    includes: list[str] = Field(
        default_factory=list,
        description="Include globs; override every exclusion.",
    )
    path: str = Field(default="", description="Only crawl this file or subtree.")
    max_depth: int = Field(default=0, ge=0, description="Max depth, 0 for unlimited.")
    use_gitignore: bool = Field(default=True, description="Honor .gitignore.")
    use_llmignore: bool = Field(default=True, description="Honor (and create) .llmignore.")
    exclude_binary: bool = Field(default=True, description="Exclude binary files.")
    header: bool = Field(default=True, description="Write the header block.")
    verbose: bool = Field(default=False, description="Per-entry diagnostics.")
    log_file: str = Field(default="", description="Log file path.")
    max_file_chars: int = Field(
        default=DEFAULT_MAX_FILE_CHARS,
        gt=0,
        description="Characters kept per file before truncation.",
    )
    skip_hidden_dirs: bool = Field(
        default=True,
        description="Prune dot-directories outside the allow-list.",
    )
    hidden_dir_allowlist: tuple[str, ...] = Field(
        default=HIDDEN_DIR_ALLOWLIST,
        description="Dot-directories walked even when hidden ones are skipped.",
    )
    list_files: bool = Field(default=False, description="Print relevant files only.")

    @field_validator("excludes", "includes", mode="before")
    @classmethod
    def _split_commas(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list | tuple):
            out: list[str] = []
            for item in value:
                out.extend(part.strip() for part in str(item).split(",") if part.strip())
            return out
        return value

    @property
    def resolved_root(self) -> Path:
        return self.root.expanduser().resolve()

    @property
    def resolved_output(self) -> Path:
        """Absolute output path; relative outputs are taken from the working directory."""
        out = self.output.expanduser()
        return out if out.is_absolute() else (Path.cwd() / out).resolve()


_BOOL_FIELDS = frozenset({
    "use_gitignore",
    "use_llmignore",
    "exclude_binary",
    "header",
    "verbose",
    "skip_hidden_dirs",
    "list_files",
})
_INT_FIELDS = frozenset({"max_depth", "max_file_chars"})
_LIST_FIELDS = frozenset({"excludes", "includes", "hidden_dir_allowlist"})
_BOOL_TRUE = {"1", "true", "yes", "on"}
_BOOL_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _BOOL_TRUE:
        return True
    if value in _BOOL_FALSE:
        return False
    msg = f"{key}: expected a boolean, got {raw!r}"
    raise ValueError(msg)


def _field_kind(name: str) -> str:
    if name in _BOOL_FIELDS:
        return "bool"
    if name in _INT_FIELDS:
        return "int"
    if name in _LIST_FIELDS:
        return "list"
    return "str"


def env_defaults(environ: dict[str, str | None] | None = None) -> dict[str, Any]:
    """Collect option defaults from `LLMIFY_*` variables.

    Variables from the nearest `.env` file are read first and the process
    environment wins over them. The process environment is not modified.

    Args:
        environ (dict[str, str | None] | None): environment to read; defaults
            to the `.env` file merged with `os.environ`.

    Raises:
        ValueError: if a variable cannot be converted to the option's type.

    Returns:
        dict[str, Any]: option name to value, only for the variables present.
    """
    if environ is None:
        environ = {**(dotenv_values(ENV_FILE) if ENV_FILE else {}), **os.environ}
    out: dict[str, Any] = {}
    for key, raw in environ.items():
        if not key.startswith(ENV_PREFIX) or raw is None:
            continue
        name = key[len(ENV_PREFIX) :].lower()
        if name not in CrawlOptions.model_fields or name == "root":
            continue
        kind = _field_kind(name)
        if kind == "bool":
            out[name] = _parse_bool(key, raw)
        elif kind == "int":
            out[name] = int(raw)
        elif kind == "list":
            out[name] = [part.strip() for part in raw.split(",") if part.strip()]
        else:
            out[name] = raw
    return out


def find_config_file(root: Path) -> Path | None:
    """Locate the YAML config: `.llmifyrc.yaml` in `root`, else the user config.

    Args:
        root (Path): the directory being crawled.

    Returns:
        Path | None: the first existing config file, or None.
    """
    candidates = [root / name for name in RC_FILE_NAMES]
    candidates.append(Path.home() / ".config" / "llmify" / "config.yaml")
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def file_defaults(config_file: Path | None) -> dict[str, Any]:
    """Read option defaults from the `crawl:` section of a YAML config file.

    Args:
        config_file (Path | None): the config file, or None for no defaults.

    Raises:
        ConfigFileError: if the file cannot be read or is not a mapping.

    Returns:
        dict[str, Any]: option name to value for the known keys.
    """
    if config_file is None:
        return {}
    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(path=config_file, message=f"Invalid configuration file ({e})") from e
    if not isinstance(data, dict):
        raise ConfigFileError(path=config_file)
    section = data.get("crawl", {}) or {}
    if not isinstance(section, dict):
        raise ConfigFileError(path=config_file, message="The 'crawl' section must be a mapping")
    return {
        str(k).replace("-", "_"): v
        for k, v in section.items()
        if str(k).replace("-", "_") in CrawlOptions.model_fields and str(k) != "root"
    }


def load_options(root: Path, overrides: dict[str, Any]) -> CrawlOptions:
    """Merge config file, environment and command-line values into options.

    Precedence: command line > environment > config file > built-in default.

    Args:
        root (Path): the directory to crawl.
        overrides (dict[str, Any]): values given explicitly on the command line.

    Raises:
        ConfigFileError: if the config file or the environment holds invalid values.

    Returns:
        CrawlOptions: the merged options.
    """
    config_file = find_config_file(root)
    values: dict[str, Any] = file_defaults(config_file)
    try:
        values.update(env_defaults())
    except ValueError as e:
        raise ConfigFileError(path=Path(ENV_FILE or "."), message=f"Invalid environment ({e})") from e
    values.update(overrides)
    values["root"] = root
    try:
        return CrawlOptions(**values)
    except ValidationError as e:
        where = config_file or Path(ENV_FILE or ".")
        raise ConfigFileError(path=where, message=f"Invalid option value ({e.error_count()} errors)") from e
