"""Tests for pomgen.config."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from pomgen import __version__
from pomgen.config import ConfigError, GeneratorOptions, PomGenConfig, apply_overrides, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, PomGenConfig)
    assert config.root == tmp_path.resolve()
    assert config.generator == GeneratorOptions()
    assert config.generator.test_file_suffix == "spec"
    assert config.generator.tool_version == __version__
    assert config.exclude_paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".pomgen.yml"
    config_file.write_text(
        """
generator:
  file_header: "// {FileName} generated {GeneratedDate}"
  test_file_suffix: "e2e"
  output_directory: "playwright"
  doc_comments: false
  default_timeout: 15000
  base_url: "http://localhost:4300"
  debug: yes
  generated_at: "2024-05-01T12:30:00"
  templates_dir: "templates"
exclude_paths:
  - "app/legacy/*"
""",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})
    options = config.generator

    assert options.file_header == "// {FileName} generated {GeneratedDate}"
    assert options.test_file_suffix == "e2e"
    assert options.output_directory == "playwright"
    assert options.doc_comments is False
    assert options.default_timeout == 15000
    assert options.base_url == "http://localhost:4300"
    assert options.debug is True
    assert options.generated_at == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
    assert options.templates_dir == tmp_path.resolve() / "templates"
    assert config.exclude_paths == ["app/legacy/*"]


def test_environment_overrides_file(tmp_path: Path) -> None:
    (tmp_path / ".pomgen.yml").write_text("generator:\n  test_file_suffix: e2e\n", encoding="utf-8")

    config = load_config(
        tmp_path,
        environ={
            "POMGEN_TEST_FILE_SUFFIX": "test",
            "POMGEN_DEFAULT_TIMEOUT": "45000",
            "POMGEN_BASE_URL": "https://staging.example.com",
            "POMGEN_DEBUG": "true",
        },
    )

    assert config.generator.test_file_suffix == "test"
    assert config.generator.default_timeout == 45000
    assert config.generator.base_url == "https://staging.example.com"
    assert config.generator.debug is True


def test_invalid_environment_timeout(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="POMGEN_DEFAULT_TIMEOUT"):
        load_config(tmp_path, environ={"POMGEN_DEFAULT_TIMEOUT": "soon"})


def test_empty_config_file_is_valid(tmp_path: Path) -> None:
    (tmp_path / ".pomgen.yml").write_text("", encoding="utf-8")

    assert load_config(tmp_path, environ={}).generator == GeneratorOptions()


@pytest.mark.parametrize("content", ["- just\n- a list\n", "generator: [unclosed\n"])
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / ".pomgen.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_apply_overrides_skips_none_and_validates() -> None:
    options = apply_overrides(GeneratorOptions(), file_header="// x", test_file_suffix=None)

    assert options.file_header == "// x"
    assert options.test_file_suffix == "spec"
    with pytest.raises(ConfigError, match="Invalid test file suffix"):
        apply_overrides(options, test_file_suffix="spec.ts")
    with pytest.raises(ConfigError, match="default_timeout"):
        apply_overrides(options, default_timeout=0)
