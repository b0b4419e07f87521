"""
Configuration management with Pydantic validation and layered rc files.

Settings come from two optional ``.autocommitrc`` files: one in the home
directory and one at the repository root. The repository file wins for the
keys it sets, the home file fills in the rest, and ``AUTOCOMMIT_*``
environment variables only apply to keys neither file mentions.
"""

import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Optional

from loguru import logger
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import InvalidConfigurationError


CONFIG_FILENAME = ".autocommitrc"

# key=value, optionally prefixed with "export"
_LINE_PATTERN = re.compile(r'^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$')


class Config(BaseSettings):
    """Resolved, immutable settings for a single run."""

    model: str = Field(
        default="gpt-4o-mini",
        description="Model name passed to the text backend"
    )
    verbose: bool = Field(
        default=False,
        description="Emit a step-by-step trace"
    )
    backend: Literal["sgpt", "ollama"] = Field(
        default="sgpt",
        description="Text backend used for generation"
    )
    api_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server endpoint"
    )
    timeout: int = Field(
        default=120,
        ge=10,
        le=600,
        description="HTTP request timeout in seconds (ollama only)"
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTOCOMMIT_",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @field_validator("model", "api_url")
    @classmethod
    def non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("verbose", mode="before")
    @classmethod
    def strict_boolean(cls, v):
        """Only accept true/false, not pydantic's wider set of truthy strings."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str) and v.strip().lower() in ("true", "false"):
            return v.strip().lower() == "true"
        raise ValueError("must be true or false")

    @classmethod
    def load(
        cls,
        repo_root: Optional[Path] = None,
        home: Optional[Path] = None,
        **overrides
    ) -> "Config":
        """Resolve configuration from the rc files plus explicit overrides.

        Overrides set to ``None`` are ignored, so CLI options can be passed
        through unconditionally. Every layer is validated on its own, so an
        invalid value fails the load even when a later layer sets the key.
        """
        merged: Dict[str, Any] = {}
        for path in config_paths(repo_root, home):
            logger.debug(f"Loading config from {path}")
            values = parse_config_file(path)
            cls._check_layer(values, str(path))
            merged.update(values)

        explicit = {key: value for key, value in overrides.items() if value is not None}
        cls._check_layer(explicit, "command line")
        merged.update(explicit)
        logger.debug(f"Resolved config keys: {sorted(merged)}")

        try:
            return cls(**merged)
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid configuration: {_describe(e)}") from e

    @classmethod
    def _check_layer(cls, values: Dict[str, Any], source: str) -> None:
        if not values:
            return
        try:
            cls(**values)
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid configuration in {source}: {_describe(e)}") from e


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


def config_paths(repo_root: Optional[Path] = None, home: Optional[Path] = None) -> List[Path]:
    """Existing config files in load order (lowest precedence first)."""
    candidates: List[Path] = [(home or Path.home()) / CONFIG_FILENAME]
    if repo_root:
        candidates.append(Path(repo_root) / CONFIG_FILENAME)

    paths: List[Path] = []
    seen = set()
    for path in candidates:
        resolved = path.expanduser().resolve()
        if resolved in seen or not resolved.is_file():
            continue
        seen.add(resolved)
        paths.append(resolved)
    return paths


def parse_config_file(path: Path) -> Dict[str, str]:
    """Parse a single rc file into raw string values.

    Comments, blank lines and ``export`` prefixes are accepted. Unknown keys
    are skipped with a warning; anything malformed invalidates the file.
    """
    try:
        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise InvalidConfigurationError(f"Cannot read {path}: {e}") from e

    return parse_config_lines(lines, source=str(path))


def parse_config_lines(lines: Iterable[str], source: str = "<config>") -> Dict[str, str]:
    values: Dict[str, str] = {}
    known_keys = set(Config.model_fields)

    for lineno, line in enumerate(lines, 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        match = _LINE_PATTERN.match(stripped)
        if not match:
            raise InvalidConfigurationError(f"{source}:{lineno}: malformed line: {stripped!r}")

        key, value = match.group(1), _unquote(match.group(2).strip())

        # installer template variables
        if key.startswith("DEFAULT_"):
            logger.debug(f"{source}:{lineno}: skipping {key}")
            continue

        if key not in known_keys:
            logger.warning(f"{source}:{lineno}: unknown config key '{key}' ignored")
            continue

        if not value:
            raise InvalidConfigurationError(f"{source}:{lineno}: empty value for '{key}'")

        values[key] = value

    return values


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1].strip()
    return value
