"""Tests for liberator.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from liberator.config import ConfigError, LiberatorConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, LiberatorConfig)
    assert config.root == tmp_path.resolve()
    assert config.cleaning.remove_telemetry is True
    assert config.cleaning.extra_suspicious_packages == []
    assert config.project.name is None
    assert config.project.ai_provider == "ollama"
    assert config.scan.exclude_paths == []
    assert config.validation.fail_on_error is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".liberator.yml"
    config_file.write_text(
        """
cleaning:
  remove_telemetry: false
  clean_comments: "no"
  suspicious_packages: [left-pad]
  telemetry_domains: tracker.example.com
project:
  name: storefront
  version: 2.1.0
  include_database: false
  ai_provider: lmstudio
  domain: shop.example.com
scan:
  exclude_paths:
    - "legacy/*"
validation:
  root: frontend
  external_packages: ["@acme/"]
  fail_on_error: true
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.cleaning.remove_telemetry is False
    assert config.cleaning.clean_comments is False
    assert config.cleaning.extra_suspicious_packages == ["left-pad"]
    assert config.cleaning.extra_telemetry_domains == ["tracker.example.com"]
    assert config.project.name == "storefront"
    assert config.project.version == "2.1.0"
    assert config.project.include_database is False
    assert config.project.ai_provider == "lmstudio"
    assert config.scan.exclude_paths == ["legacy/*"]
    assert config.validation.root == "frontend"
    assert config.validation.extra_external_packages == ["@acme/"]
    assert config.validation.fail_on_error is True


def test_cleaning_options_extend_builtin_lists(tmp_path: Path) -> None:
    (tmp_path / ".liberator.yml").write_text("cleaning:\n  suspicious_packages: [left-pad]\n", encoding="utf-8")

    options = load_config(tmp_path).cleaning_options(dry_run=True)

    assert "left-pad" in options.suspicious_packages
    assert "lovable-tagger" in options.suspicious_packages
    assert options.dry_run is True


def test_liberation_options_prefer_explicit_name(tmp_path: Path) -> None:
    (tmp_path / ".liberator.yml").write_text(
        "project:\n  name: from-config\n  include_auth: false\n", encoding="utf-8"
    )
    config = load_config(tmp_path)

    assert config.liberation_options().project_name == "from-config"
    assert config.liberation_options("cli-name").project_name == "cli-name"
    assert config.liberation_options().include_auth is False


def test_load_config_accepts_file_path(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("project:\n  name: custom\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.project.name == "custom"
    assert config.root == tmp_path.resolve()


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".liberator.yml").write_text("\n", encoding="utf-8")
    assert load_config(tmp_path).project.name is None


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".liberator.yml").write_text("project: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".liberator.yml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
