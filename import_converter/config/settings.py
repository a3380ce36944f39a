"""
Loads the user-editable settings for an import run.

Settings are read from a YAML file (`settings.yaml` by default). An optional
`settings.user.yaml` next to it is merged on top, and finally environment
variables prefixed with `ICONV_` override single keys. The result is an
immutable `Settings` object that is created once at startup and handed to the
components that need it, instead of being read from module-level globals.

Example `settings.yaml`:

    extensions:
      copy: ["*.jpg", "*.png"]
      reencode: ["*.mp4"]
    directories:
      source: /media/card
      destination: /media/archive
    options:
      dry_run: true
    encoding:
      handbrake_cli: HandBrakeCLI
      options: --preset "Fast 1080p30"
      new_file_extension: mkv
    organisation:
      path_format: "%Y/%m"
      filename_prefix: "%Y%m%d_"
"""
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from loguru import logger

from ..domain.entries import MaskEntry
from ..domain.exceptions import SettingsException
from .common import ENV_PREFIX, ENV_SEPARATOR, USER_SETTINGS_SUFFIX

_MISSING = object()


@dataclass(frozen=True)
class Settings:
    """
    All values an import run needs, resolved and typed.

    Attributes:
        copy_extensions: Glob masks of files that are copied verbatim.
        reencode_extensions: Glob masks of files that are passed through the transcoder.
        source_dir: Root of the tree that is scanned for media files.
        destination_dir: Root below which the organised files are written.
        dry_run: If True, the run stops after printing the plan.
        handbrake_cli: Executable name or path of the transcoder.
        encoding_options: Extra transcoder arguments, split on whitespace.
        new_file_extension: Extension given to re-encoded files (without dot).
        path_format: strftime template for the destination subdirectories.
        filename_prefix: strftime template prepended to every file name.
        encoding_timeout: Optional limit in seconds for one transcoder run.
        keep_mtime: Copy the source modification time onto re-encoded files.
        write_reports: Write the error log and the YAML run report.
        use_ffprobe: Ask ffprobe for a creation time when a file is not MP4/MOV.
        ffprobe_cmd: Executable name or path of ffprobe.
    """

    copy_extensions: Tuple[str, ...]
    reencode_extensions: Tuple[str, ...]
    source_dir: Path
    destination_dir: Path
    dry_run: bool
    handbrake_cli: str
    encoding_options: str
    new_file_extension: str
    path_format: str
    filename_prefix: str
    encoding_timeout: Optional[float] = None
    keep_mtime: bool = False
    write_reports: bool = True
    use_ffprobe: bool = True
    ffprobe_cmd: str = "ffprobe"
    mask_entries: Tuple[MaskEntry, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        masks = [MaskEntry.from_setting(ext, reencode=False) for ext in self.copy_extensions]
        masks += [MaskEntry.from_setting(ext, reencode=True) for ext in self.reencode_extensions]
        object.__setattr__(self, "mask_entries", tuple(masks))

    @property
    def encoding_option_tokens(self) -> List[str]:
        """The transcoder options as independent arguments (never passed through a shell)."""
        return self.encoding_options.split()

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Returns a copy with the given non-None fields replaced (used for CLI flags)."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsException(f"Could not parse settings file '{path}': {e}") from e
    except OSError as e:
        raise SettingsException(f"Could not read settings file '{path}': {e}") from e
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise SettingsException(f"Settings file '{path}' must contain a mapping at the top level.")
    return content


def _environment_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Collects `ICONV_SECTION__KEY=value` variables into a nested dictionary.

    Keys are lowercased. Values are parsed as YAML scalars so that `true`,
    `false`, numbers and `null` arrive with the right type.
    """
    overrides: Dict[str, Any] = {}
    for name, raw_value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key_path = [part.lower() for part in name[len(ENV_PREFIX):].split(ENV_SEPARATOR) if part]
        if not key_path:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        node = overrides
        for part in key_path[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise SettingsException(f"Environment variable {name} conflicts with another override.")
        node[key_path[-1]] = value
        logger.debug(f"Settings override from environment: {'.'.join(key_path)}")
    return overrides


def _lookup(data: Mapping[str, Any], dotted_key: str, default: Any = _MISSING) -> Any:
    node: Any = data
    for part in dotted_key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            if default is _MISSING:
                raise SettingsException(f"setting {dotted_key} not found")
            return default
        node = node[part]
    if node is None and default is _MISSING:
        raise SettingsException(f"setting {dotted_key} not found")
    return node


def _get_str(data: Mapping[str, Any], dotted_key: str, default: Any = _MISSING) -> str:
    value = _lookup(data, dotted_key, default)
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise SettingsException(f"setting {dotted_key} must be a string, got {value!r}")
    return str(value)


def _get_bool(data: Mapping[str, Any], dotted_key: str, default: Any = _MISSING) -> bool:
    value = _lookup(data, dotted_key, default)
    if not isinstance(value, bool):
        raise SettingsException(f"setting {dotted_key} must be true or false, got {value!r}")
    return value


def _get_str_list(data: Mapping[str, Any], dotted_key: str) -> Tuple[str, ...]:
    value = _lookup(data, dotted_key)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise SettingsException(f"setting {dotted_key} must be a list")
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise SettingsException(f"setting {dotted_key} entry invalid: {item!r}")
    return tuple(item.strip() for item in value)


def _get_timeout(data: Mapping[str, Any]) -> Optional[float]:
    value = _lookup(data, "encoding.timeout", None)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise SettingsException(f"setting encoding.timeout must be a positive number, got {value!r}")
    return float(value)


def settings_from_mapping(data: Mapping[str, Any]) -> Settings:
    """
    Builds a `Settings` object from an already merged settings mapping.

    Raises:
        SettingsException: If a required key is missing or has the wrong type.
    """
    return Settings(
        copy_extensions=_get_str_list(data, "extensions.copy"),
        reencode_extensions=_get_str_list(data, "extensions.reencode"),
        source_dir=Path(_get_str(data, "directories.source")),
        destination_dir=Path(_get_str(data, "directories.destination")),
        dry_run=_get_bool(data, "options.dry_run"),
        write_reports=_get_bool(data, "options.write_reports", True),
        handbrake_cli=_get_str(data, "encoding.handbrake_cli"),
        encoding_options=_get_str(data, "encoding.options", ""),
        new_file_extension=_get_str(data, "encoding.new_file_extension").lstrip("."),
        encoding_timeout=_get_timeout(data),
        keep_mtime=_get_bool(data, "encoding.keep_mtime", False),
        path_format=_get_str(data, "organisation.path_format"),
        filename_prefix=_get_str(data, "organisation.filename_prefix"),
        use_ffprobe=_get_bool(data, "metadata.use_ffprobe", True),
        ffprobe_cmd=_get_str(data, "metadata.ffprobe", "ffprobe"),
    )


def user_settings_path(config_path: Path) -> Path:
    """`settings.yaml` -> `settings.user.yaml`"""
    return config_path.with_name(f"{config_path.stem}{USER_SETTINGS_SUFFIX}{config_path.suffix}")


def load_settings(
    config_path: Path,
    user_config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Reads, merges and validates the settings for one run.

    Args:
        config_path: The required main settings file.
        user_config_path: Optional override file. Defaults to `<stem>.user<suffix>`
                          next to `config_path`; it is skipped if it does not exist.
        environ: Environment to read `ICONV_` overrides from (defaults to `os.environ`).

    Returns:
        The validated `Settings`.

    Raises:
        SettingsException: If the main file is missing or any setting is invalid.
    """
    if not config_path.is_file():
        raise SettingsException(
            f"unable to read settings ({config_path} needed, {user_settings_path(config_path).name} optional)"
        )
    data = _read_yaml(config_path)
    logger.debug(f"Loaded settings from '{config_path}'")

    user_path = user_config_path if user_config_path is not None else user_settings_path(config_path)
    if user_path.is_file():
        data = _deep_merge(data, _read_yaml(user_path))
        logger.debug(f"Merged user settings from '{user_path}'")
    else:
        logger.debug(f"User settings '{user_path}' not found, using defaults only.")

    data = _deep_merge(data, _environment_overrides(os.environ if environ is None else environ))
    return settings_from_mapping(data)
