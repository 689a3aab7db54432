"""Where deckinventory keeps its files, and how the effective config is built.

* **Directories** -- ``$XDG_CONFIG_HOME/deckinventory`` and
  ``$XDG_DATA_HOME/deckinventory`` on Linux/BSD; a single
  ``~/.deckinventory`` tree (config at the top, data under ``data/``)
  elsewhere. The snapshot cache file lives in the data directory unless
  ``cache.data_dir`` points somewhere else.
* **Global config** -- one :class:`~deckinventory.models.GlobalConfig`
  document, ``config.json`` in the config directory.
* **Precedence** -- :func:`resolve_config` layers CLI flags over
  ``DECKINVENTORY_*`` environment variables over the file over defaults.

Every file this package writes, the cache file included, goes through
:func:`atomic_write`.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from deckinventory.exceptions import ConfigError
from deckinventory.models import GlobalConfig

_APP_NAME = "deckinventory"
_CONFIG_FILENAME = "config.json"

ENV_DATA_DIR = "DECKINVENTORY_DATA_DIR"
ENV_URL = "DECKINVENTORY_URL"

# kind -> (XDG variable, default location under $HOME, location under the fallback tree)
_XDG_DIRS: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), ()),
    "data": ("XDG_DATA_HOME", (".local", "share"), ("data",)),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, xdg_default, fallback = _XDG_DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var) or Path.home().joinpath(*xdg_default)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Return the default data directory (cache file, crash logs), creating it if necessary."""
    return _app_dir("data")


def resolve_data_dir(config: GlobalConfig) -> Path:
    """Return the directory holding the snapshot cache file.

    ``cache.data_dir`` wins when set (``~`` is expanded); it is not created
    here because the store creates it on first write. Otherwise this is
    :func:`get_data_dir`.
    """
    if config.cache.data_dir:
        return Path(config.cache.data_dir).expanduser()
    return get_data_dir()


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* without ever exposing a partial file.

    The text is written and fsynced to a temporary file in the same
    directory, then renamed over *path*. If anything fails the temporary
    file is removed and the error propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load ``config.json``, or return defaults if it does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except ValueError as exc:
        # JSONDecodeError and pydantic's ValidationError are both ValueErrors.
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    atomic_write(_global_config_path(), json.dumps(config.model_dump(mode="json"), indent=2) + "\n")


def resolve_config(
    cli_data_dir: Optional[str] = None,
    cli_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Build the effective configuration for one invocation.

    Precedence, highest first: CLI flags, ``DECKINVENTORY_DATA_DIR`` /
    ``DECKINVENTORY_URL``, ``config.json``, defaults. Overrides are applied
    to the in-memory copy only and never saved.
    """
    config = load_global_config()

    data_dir = cli_data_dir or os.environ.get(ENV_DATA_DIR)
    if data_dir:
        config.cache.data_dir = data_dir

    url = cli_url or os.environ.get(ENV_URL)
    if url:
        config.request.url = url

    if cli_format is not None:
        config.output.format = cli_format

    return config
