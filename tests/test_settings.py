from pathlib import Path

import pytest
import yaml

from import_converter.config.settings import load_settings, settings_from_mapping, user_settings_path
from import_converter.domain.exceptions import SettingsException

BASE = {
    "extensions": {"copy": ["*.jpg", "png"], "reencode": ["*.mp4"]},
    "directories": {"source": "in", "destination": "out"},
    "options": {"dry_run": True},
    "encoding": {"handbrake_cli": "HandBrakeCLI", "options": "--encoder x265  --quality 24", "new_file_extension": ".mkv"},
    "organisation": {"path_format": "%Y/%m", "filename_prefix": "%Y%m%d_"},
}


def write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_loads_base_settings(tmp_path):
    settings = load_settings(write_yaml(tmp_path / "settings.yaml", BASE), environ={})
    assert settings.source_dir == Path("in")
    assert settings.destination_dir == Path("out")
    assert settings.dry_run is True
    assert settings.new_file_extension == "mkv"
    assert settings.encoding_option_tokens == ["--encoder", "x265", "--quality", "24"]
    assert settings.encoding_timeout is None
    assert settings.write_reports is True
    assert settings.use_ffprobe is True


def test_masks_copy_first_then_reencode(tmp_path):
    settings = load_settings(write_yaml(tmp_path / "settings.yaml", BASE), environ={})
    assert [(m.extension, m.reencode) for m in settings.mask_entries] == [
        ("*.jpg", False),
        ("*.png", False),
        ("*.mp4", True),
    ]


def test_user_settings_are_merged(tmp_path):
    config = write_yaml(tmp_path / "settings.yaml", BASE)
    write_yaml(user_settings_path(config), {"options": {"dry_run": False}, "encoding": {"timeout": 600}})
    settings = load_settings(config, environ={})
    assert settings.dry_run is False
    assert settings.encoding_timeout == 600.0
    assert settings.handbrake_cli == "HandBrakeCLI"


def test_user_settings_path():
    assert user_settings_path(Path("conf/settings.yaml")) == Path("conf/settings.user.yaml")


def test_environment_overrides(tmp_path):
    config = write_yaml(tmp_path / "settings.yaml", BASE)
    environ = {
        "ICONV_OPTIONS__DRY_RUN": "false",
        "ICONV_DIRECTORIES__DESTINATION": "/mnt/archive",
        "ICONV_ENCODING__KEEP_MTIME": "true",
        "UNRELATED": "1",
    }
    settings = load_settings(config, environ=environ)
    assert settings.dry_run is False
    assert settings.destination_dir == Path("/mnt/archive")
    assert settings.keep_mtime is True


def test_missing_file(tmp_path):
    with pytest.raises(SettingsException, match="settings.yaml"):
        load_settings(tmp_path / "settings.yaml", environ={})


def test_invalid_yaml(tmp_path):
    config = tmp_path / "settings.yaml"
    config.write_text("extensions: [unclosed", encoding="utf-8")
    with pytest.raises(SettingsException):
        load_settings(config, environ={})


@pytest.mark.parametrize(
    "section,key",
    [
        ("extensions", "copy"),
        ("directories", "source"),
        ("options", "dry_run"),
        ("encoding", "handbrake_cli"),
        ("encoding", "new_file_extension"),
        ("organisation", "path_format"),
    ],
)
def test_missing_required_key(section, key):
    data = {name: dict(values) for name, values in BASE.items()}
    del data[section][key]
    with pytest.raises(SettingsException, match=f"setting {section}.{key} not found"):
        settings_from_mapping(data)


def test_wrong_types():
    data = {name: dict(values) for name, values in BASE.items()}
    data["options"]["dry_run"] = "yes please"
    with pytest.raises(SettingsException):
        settings_from_mapping(data)

    data = {name: dict(values) for name, values in BASE.items()}
    data["encoding"]["timeout"] = -5
    with pytest.raises(SettingsException):
        settings_from_mapping(data)

    data = {name: dict(values) for name, values in BASE.items()}
    data["extensions"]["copy"] = ["*.jpg", 3]
    with pytest.raises(SettingsException, match="entry invalid"):
        settings_from_mapping(data)


def test_with_overrides_ignores_none(tmp_path):
    settings = load_settings(write_yaml(tmp_path / "settings.yaml", BASE), environ={})
    assert settings.with_overrides(dry_run=None, source_dir=None) is settings
    changed = settings.with_overrides(dry_run=False, source_dir=Path("card"))
    assert changed.dry_run is False
    assert changed.source_dir == Path("card")
    assert changed.mask_entries == settings.mask_entries
