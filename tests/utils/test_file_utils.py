from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from utils.file_utils import AUTH_FILE_ENV, FileMissingError, FileUtils, InvalidFileTypeError

if TYPE_CHECKING:
    from pathlib import Path


def test_check_file_status(tmp_path: Path) -> None:
    file_path: Path = tmp_path / "en.json"
    file_path.write_text("{}", encoding="utf-8")
    FileUtils.check_file_status(file_path)

    with pytest.raises(FileMissingError):
        FileUtils.check_file_status(tmp_path / "missing.json")
    with pytest.raises(InvalidFileTypeError):
        FileUtils.check_file_status(tmp_path)


def test_resolve_path_expands_home_and_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("EXPORT_DIR", "exports")
    assert FileUtils.resolve_path("~/$EXPORT_DIR/en.zip") == (tmp_path / "exports" / "en.zip").resolve()


def test_resolve_path_relative_to_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert FileUtils.resolve_path("out.zip") == (tmp_path / "out.zip").resolve()


def test_config_dir_per_platform(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.platform", "win32")
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert FileUtils.config_dir() == tmp_path / "tmscli"

    monkeypatch.setattr("sys.platform", "linux")
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert FileUtils.config_dir() == tmp_path / ".config" / "tmscli"


def test_auth_file_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(AUTH_FILE_ENV, str(tmp_path / "creds.json"))
    assert FileUtils.auth_file() == (tmp_path / "creds.json").resolve()
