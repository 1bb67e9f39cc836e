"""Tests for lintlsp.config — YAML loading and validation."""
from __future__ import annotations

import io

import pytest
import yaml

from lintlsp.config import (
    DEFAULT_FORMATS,
    Configuration,
    dump_config,
    load_config,
    parse_config,
)
from lintlsp.errors import ConfigError

SAMPLE = """\
log-file: /tmp/lintlsp.log
log-level: debug
languages:
  python:
    lint-command: 'flake8 -'
    lint-stdin: true
    lint-formats:
      - '%f:%l:%c: %m'
  sh:
    lint-command: 'shellcheck -f gcc ${INPUT}'
    lint-offset: 1
    lint-timeout: 0
  markdown:
"""


class TestLoadConfig:
    def test_sample(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(SAMPLE)
        config = load_config(path)
        assert config.log_file == '/tmp/lintlsp.log'
        assert config.log_level == 'debug'

        py = config.languages['python']
        assert py.lint_command == 'flake8 -'
        assert py.lint_stdin is True
        assert py.lint_formats == ('%f:%l:%c: %m',)

        sh = config.languages['sh']
        assert sh.lint_offset == 1
        assert sh.lint_timeout is None

    def test_defaults_applied_to_stored_entry(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(SAMPLE)
        config = load_config(path)
        assert config.languages['sh'].lint_formats == DEFAULT_FORMATS
        assert config.languages['markdown'] == Configuration()

    def test_missing_file_gives_empty_config(self, tmp_path):
        config = load_config(tmp_path / 'nope.yaml')
        assert config.log_file is None
        assert dict(config.languages) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('languages: [unclosed\n')
        with pytest.raises(ConfigError):
            load_config(path)

    def test_languages_are_read_only(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(SAMPLE)
        config = load_config(path)
        with pytest.raises(TypeError):
            config.languages['go'] = Configuration()


class TestParseConfig:
    def test_empty_document(self):
        config = parse_config(None)
        assert dict(config.languages) == {}
        assert config.log_level is None

    @pytest.mark.parametrize('data', [
        ['not', 'a', 'mapping'],
        {'languages': ['python']},
        {'languages': {'python': 'flake8'}},
        {'languages': {'python': {'lint-stdin': 'yes'}}},
        {'languages': {'python': {'lint-offset': '1'}}},
        {'languages': {'python': {'lint-offset': True}}},
        {'languages': {'python': {'lint-formats': [1, 2]}}},
        {'languages': {'python': {'lint-command': ['flake8']}}},
        {'languages': {'python': {'lint-timeout': 'soon'}}},
        {'log-file': 3},
    ])
    def test_rejects_wrong_types(self, data):
        with pytest.raises(ConfigError):
            parse_config(data)

    def test_legacy_key_name(self):
        config = parse_config({'languages': {'c': {'lint-error-formats': ['%f:%l:%m']}}})
        assert config.languages['c'].lint_formats == ('%f:%l:%m',)

    def test_single_format_string(self):
        config = parse_config({'languages': {'c': {'lint-formats': '%f:%l:%m'}}})
        assert config.languages['c'].lint_formats == ('%f:%l:%m',)

    def test_empty_format_list_uses_defaults(self):
        config = parse_config({'languages': {'c': {'lint-formats': []}}})
        assert config.languages['c'].lint_formats == DEFAULT_FORMATS


class TestDumpConfig:
    def test_dump_reloads_to_same_config(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(SAMPLE)
        config = load_config(path)
        buf = io.StringIO()
        dump_config(config, buf)
        reloaded = parse_config(yaml.safe_load(buf.getvalue()))
        assert dict(reloaded.languages) == dict(config.languages)
        assert reloaded.log_file == config.log_file
        assert reloaded.log_level == config.log_level
