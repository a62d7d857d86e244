from __future__ import annotations

from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)
from models.config_models import VERSION
from models.credential_models import NO_PROJECT

if TYPE_CHECKING:
    from pathlib import Path


def _write_ini(tmp_path: Path, content: str) -> Path:
    ini_path: Path = tmp_path / "tmscli.ini"
    ini_path.write_text(dedent(content), encoding="utf-8")
    return ini_path


def test_config_loader_raises_for_missing_file(tmp_path: Path) -> None:
    ini_path: Path = tmp_path / "missing.ini"
    with pytest.raises(ConfigFileNotFoundError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_config_loader_reads_typed_values(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = yes
        LOG_FILE = "tmscli.log"

        [API]
        URL = https://tms.example.com/
        PROJECT_ID = 12
        """,
    )

    config = ConfigLoader(config_filename=ini_path, script_name="test").config

    assert config.GENERAL.DEBUG is True
    assert config.GENERAL.LOG_FILE == "tmscli.log"
    assert config.GENERAL.SCRIPT_NAME == "test"
    assert config.API.URL == "https://tms.example.com/"
    assert config.API.PROJECT_ID == 12


def test_config_loader_overrides(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [API]
        URL = https://tms.example.com
        PROJECT_ID = 12
        """,
    )

    config = ConfigLoader(
        config_filename=ini_path,
        api_url="http://localhost:8080",
        project_id=3,
        api_key="tgpat_override",
        debug=True,
    ).config

    assert config.API.URL == "http://localhost:8080"
    assert config.API.PROJECT_ID == 3
    assert config.API.API_KEY == "tgpat_override"
    assert config.GENERAL.DEBUG is True


def test_config_loader_ignores_none_overrides(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(tmp_path, "[API]\nPROJECT_ID = 12\n")
    config = ConfigLoader(config_filename=ini_path, project_id=None, api_url=None).config
    assert config.API.PROJECT_ID == 12
    assert config.API.URL == "https://app.tolgee.io"


def test_defaults_without_file() -> None:
    config = ConfigLoader.defaults(script_name="test")
    assert config.API.PROJECT_ID == NO_PROJECT
    assert config.API.API_KEY == ""
    assert config.GENERAL.DEBUG is False
    assert config.GENERAL.VERSION == VERSION


@pytest.mark.parametrize("url", ["ftp://tms.example.com", "tms.example.com", "https://"])
def test_invalid_api_url(tmp_path: Path, url: str) -> None:
    ini_path: Path = _write_ini(tmp_path, f"[API]\nURL = {url}\n")
    with pytest.raises(ConfigValueError, match=r"API\.URL"):
        ConfigLoader(config_filename=ini_path)


def test_plain_http_url_warns(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    ini_path: Path = _write_ini(tmp_path, "[API]\nURL = http://localhost:8080\n")
    ConfigLoader(config_filename=ini_path)
    assert any("plain http" in rec.message for rec in caplog.records)


@pytest.mark.parametrize("value", ["abc", "1.5"])
def test_non_integer_project_id(tmp_path: Path, value: str) -> None:
    ini_path: Path = _write_ini(tmp_path, f"[API]\nPROJECT_ID = {value}\n")
    with pytest.raises(ConfigValueError, match=r"API\.PROJECT_ID"):
        ConfigLoader(config_filename=ini_path)


def test_non_positive_project_id(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(tmp_path, "[API]\nPROJECT_ID = 0\n")
    with pytest.raises(ConfigValueError, match="positive"):
        ConfigLoader(config_filename=ini_path)


def test_project_id_override_with_wrong_type() -> None:
    with pytest.raises(ConfigTypeError):
        ConfigLoader.defaults(project_id=True)


def test_unparsable_file(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(tmp_path, "URL = no section header\n")
    with pytest.raises(ConfigFormatError):
        ConfigLoader(config_filename=ini_path)


def test_unknown_section_is_ignored(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    ini_path: Path = _write_ini(tmp_path, "[EXTRA]\nFOO = 1\n")
    config = ConfigLoader(config_filename=ini_path).config
    assert config.API.PROJECT_ID == NO_PROJECT
    assert any("Unknown section 'EXTRA'" in rec.message for rec in caplog.records)
