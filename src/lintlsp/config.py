"""
Configuration for lintlsp.

The configuration file is YAML::

    log-file: /tmp/lintlsp.log
    log-level: info
    languages:
      python:
        lint-command: 'flake8 --stdin-display-name ${INPUT} -'
        lint-stdin: true
        lint-formats:
          - '%f:%l:%c: %m'

Each entry under ``languages`` becomes an immutable :class:`Configuration`
keyed by the LSP language identifier of the document.  A document whose
language has no entry gets an empty configuration and is never linted.
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from lintlsp.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_FORMATS: tuple[str, ...] = ('%f:%l:%m', '%f:%l:%c:%m')
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Configuration:
    """Per-language lint settings."""
    lint_formats: tuple[str, ...] = DEFAULT_FORMATS
    lint_stdin: bool = False
    lint_offset: int = 0
    lint_command: str = ''
    # Seconds; None (or <= 0 in the file) disables the limit.
    lint_timeout: float | None = DEFAULT_TIMEOUT

    @classmethod
    def from_mapping(cls, language: str, data: Mapping[str, Any] | None) -> 'Configuration':
        """Build a :class:`Configuration` from one ``languages`` entry."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigError(f'languages.{language}: expected a mapping, got {type(data).__name__}')

        formats = data.get('lint-formats', data.get('lint-error-formats'))
        if formats is None or formats == []:
            formats = DEFAULT_FORMATS
        elif isinstance(formats, str):
            formats = (formats,)
        elif isinstance(formats, list) and all(isinstance(f, str) for f in formats):
            formats = tuple(formats)
        else:
            raise ConfigError(f'languages.{language}.lint-formats: expected a list of strings')

        stdin = data.get('lint-stdin', False)
        if not isinstance(stdin, bool):
            raise ConfigError(f'languages.{language}.lint-stdin: expected a boolean')

        offset = data.get('lint-offset', 0)
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise ConfigError(f'languages.{language}.lint-offset: expected an integer')

        command = data.get('lint-command') or ''
        if not isinstance(command, str):
            raise ConfigError(f'languages.{language}.lint-command: expected a string')

        timeout = data.get('lint-timeout', DEFAULT_TIMEOUT)
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                raise ConfigError(f'languages.{language}.lint-timeout: expected a number')
            timeout = float(timeout) if timeout > 0 else None

        unknown = set(data) - _LANGUAGE_KEYS
        if unknown:
            logger.warning('languages.%s: ignoring unknown keys %s', language, sorted(unknown))

        return cls(
            lint_formats=formats,
            lint_stdin=stdin,
            lint_offset=offset,
            lint_command=command,
            lint_timeout=timeout,
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            'lint-error-formats': list(self.lint_formats),
            'lint-stdin': self.lint_stdin,
            'lint-offset': self.lint_offset,
            'lint-command': self.lint_command,
            'lint-timeout': self.lint_timeout if self.lint_timeout is not None else 0,
        }


_LANGUAGE_KEYS = frozenset({
    'lint-formats', 'lint-error-formats', 'lint-stdin',
    'lint-offset', 'lint-command', 'lint-timeout',
})


@dataclass(frozen=True)
class ServerConfig:
    """Everything read from the configuration file."""
    languages: Mapping[str, Configuration] = field(default_factory=lambda: MappingProxyType({}))
    log_file: str | None = None
    log_level: str | None = None


def parse_languages(data: Any) -> Mapping[str, Configuration]:
    """Turn the ``languages`` section into a read-only mapping."""
    if data is None:
        return MappingProxyType({})
    if not isinstance(data, Mapping):
        raise ConfigError(f'languages: expected a mapping, got {type(data).__name__}')
    return MappingProxyType({
        str(lang): Configuration.from_mapping(str(lang), entry)
        for lang, entry in data.items()
    })


def parse_config(data: Any) -> ServerConfig:
    """Validate a decoded YAML document and return a :class:`ServerConfig`."""
    if data is None:
        return ServerConfig()
    if not isinstance(data, Mapping):
        raise ConfigError(f'expected a mapping at top level, got {type(data).__name__}')

    log_file = data.get('log-file')
    if log_file is not None and not isinstance(log_file, str):
        raise ConfigError('log-file: expected a string')
    log_level = data.get('log-level')
    if log_level is not None and not isinstance(log_level, str):
        raise ConfigError('log-level: expected a string')

    return ServerConfig(
        languages=parse_languages(data.get('languages')),
        log_file=log_file,
        log_level=log_level,
    )


def load_config(path: str | os.PathLike) -> ServerConfig:
    """Read and validate the YAML configuration at *path*.

    A missing file is not an error: the server starts with no languages.
    """
    path = Path(path)
    if not path.exists():
        logger.warning('config file %s not found; no lint commands configured', path)
        return ServerConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f'{path}: {e}') from e
    return parse_config(data)


def default_config_path() -> Path:
    """Return ``~/.config/lintlsp/config.yaml`` (``%APPDATA%`` on Windows).

    The parent directory is created if needed.
    """
    home = os.environ.get('HOME', '')
    if not home and sys.platform == 'win32':
        directory = Path(os.environ.get('APPDATA', '')) / 'lintlsp'
    else:
        directory = Path(home) / '.config' / 'lintlsp'
    directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    return directory / 'config.yaml'


def dump_config(config: ServerConfig, stream) -> None:
    """Write the effective *config* to *stream* as YAML."""
    data: dict[str, Any] = {}
    if config.log_file:
        data['log-file'] = config.log_file
    if config.log_level:
        data['log-level'] = config.log_level
    data['languages'] = {lang: c.to_mapping() for lang, c in config.languages.items()}
    yaml.safe_dump(data, stream, default_flow_style=False, sort_keys=True)
