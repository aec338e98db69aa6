"""Unit coverage for year configuration discovery and parsing utilities."""

from __future__ import annotations

from pathlib import Path
from shutil import copy2

import pytest
import yaml

from fincompare.backend.config import year_config


@pytest.fixture()
def isolated_config_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return a temporary configuration directory patched into ``year_config``."""

    original_directory = year_config.CONFIG_DIRECTORY
    copy2(original_directory / "2025.yaml", tmp_path / "2025.yaml")

    manifest_path = tmp_path / "manifest.yaml"
    copy2(original_directory / "manifest.yaml", manifest_path)

    monkeypatch.setattr(year_config, "CONFIG_DIRECTORY", tmp_path)
    monkeypatch.setattr(year_config, "MANIFEST_FILE", manifest_path)
    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()

    yield tmp_path

    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()


def _declare_year(directory: Path, entry: dict[str, object]) -> None:
    manifest_path = directory / "manifest.yaml"
    manifest = yaml.safe_load(manifest_path.read_text())
    manifest.setdefault("years", []).append(entry)
    manifest_path.write_text(yaml.safe_dump(manifest, sort_keys=False))
    year_config.load_manifest.cache_clear()


def test_shipped_configuration_loads() -> None:
    config = year_config.load_year_configuration(2025)

    assert config.year == 2025
    assert config.currency == "RM"
    assert len(config.income_tax.brackets) == 10
    assert config.income_tax.brackets[-1].upper_bound is None
    assert config.income_tax.relief("personal").default_amount == 9000


def test_available_years_follow_the_manifest(isolated_config_directory: Path) -> None:
    """New years appear once declared in the manifest."""

    (isolated_config_directory / "2026.yaml").write_text(
        (isolated_config_directory / "2025.yaml").read_text()
    )
    _declare_year(isolated_config_directory, {"year": 2026})

    assert year_config.available_years() == (2025, 2026)
    assert year_config.default_year() == 2026


def test_undeclared_year_is_not_found(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2030.yaml").write_text("meta: {}\n")

    with pytest.raises(FileNotFoundError):
        year_config.load_year_configuration(2030)


def test_declared_year_without_file_is_reported(isolated_config_directory: Path) -> None:
    _declare_year(isolated_config_directory, {"year": 2027})

    with pytest.raises(FileNotFoundError, match="missing"):
        year_config.load_year_configuration(2027)


def test_manifest_filename_override_is_honoured(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "budget-2026.yaml").write_text(
        (isolated_config_directory / "2025.yaml").read_text()
    )
    _declare_year(isolated_config_directory, {"year": 2026, "filename": "budget-2026.yaml"})

    assert year_config.load_year_configuration(2026).year == 2026


def test_non_contiguous_brackets_are_rejected(isolated_config_directory: Path) -> None:
    broken = yaml.safe_load((isolated_config_directory / "2025.yaml").read_text())
    broken["income_tax"]["brackets"][2]["lower"] = 21000
    (isolated_config_directory / "2026.yaml").write_text(yaml.safe_dump(broken))
    _declare_year(isolated_config_directory, {"year": 2026})

    with pytest.raises(year_config.ConfigurationError, match="contiguous"):
        year_config.load_year_configuration(2026)


def test_missing_income_tax_section_is_rejected(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2026.yaml").write_text("meta: {currency: RM}\n")
    _declare_year(isolated_config_directory, {"year": 2026})

    with pytest.raises(year_config.ConfigurationError, match="income_tax"):
        year_config.load_year_configuration(2026)


def test_duplicate_manifest_years_are_rejected(isolated_config_directory: Path) -> None:
    _declare_year(isolated_config_directory, {"year": 2025})

    with pytest.raises(year_config.ConfigurationError, match="Duplicate year"):
        year_config.load_manifest()


def test_default_year_requires_declared_years(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "manifest.yaml").write_text("years: []\n")
    year_config.load_manifest.cache_clear()

    with pytest.raises(year_config.ConfigurationError):
        year_config.default_year()
