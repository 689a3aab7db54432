"""``deckinventory config`` -- view and edit the global configuration.

Keys use dot notation over :class:`~deckinventory.models.GlobalConfig`,
for example ``request.url``, ``cache.ttl_hours`` or
``cache.failure_retry_minutes``.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from deckinventory.config import get_config_dir, load_global_config, save_global_config
from deckinventory.exceptions import InvalidUsageError
from deckinventory.models import GlobalConfig
from deckinventory.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


def _section_for(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Return the dict holding the last segment of *key* and that segment."""
    *parents, leaf = key.split(".")
    section = data
    for name in parents:
        section = section.get(name)
        if not isinstance(section, dict):
            raise InvalidUsageError(f"Invalid config key: {key}")
    if leaf not in section or isinstance(section[leaf], dict):
        raise InvalidUsageError(f"Unknown config key: {key}")
    return section, leaf


def _coerce(key: str, current: Any, value: str) -> Any:
    """Convert the CLI string to the type of the value it replaces."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes", "on")
    if isinstance(current, (int, float)):
        try:
            return type(current)(value)
        except ValueError:
            raise InvalidUsageError(
                f"Expected {type(current).__name__} for {key}, got: {value}"
            ) from None
    return value


@config_app.command("show")
def config_show() -> None:
    """Print the saved configuration.

    Example::

        deckinventory --json config show
    """
    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key in dot notation, e.g. 'cache.ttl_hours'."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Set one configuration value and save it.

    Example::

        deckinventory config set cache.ttl_hours 12
        deckinventory config set request.url https://example.com/decks.json
    """
    data = load_global_config().model_dump(mode="json")
    try:
        section, leaf = _section_for(data, key)
        section[leaf] = _coerce(key, section[leaf], value)
        updated = GlobalConfig.model_validate(data)
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=InvalidUsageError.exit_code) from None

    save_global_config(updated)
    success(f"Set {key} = {section[leaf]}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Restore the default configuration.

    Example::

        deckinventory config reset --yes
    """
    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
