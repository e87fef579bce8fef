"""Config commands -- view and modify ``config.json``.

Provides the ``apimock config`` sub-command group for reading, updating,
and resetting :class:`~apimock.models.MockConfig`: the Prism command line,
the SIGTERM-to-SIGKILL grace period, the startup settle delay, the download
timeout, and the default host and port.
"""

from __future__ import annotations

import json

import typer

from apimock.output import error, info, print_json, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Example::

        apimock config show
    """
    from apimock.config import get_config_dir, load_config

    info(f"Config directory: {get_config_dir()}")
    print_json(load_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (e.g. 'grace_period_seconds')."),
    value: str = typer.Argument(
        help="Value to set. List values (prism_command) take a JSON array or a space-separated string."
    ),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type and the result is
    validated against :class:`~apimock.models.MockConfig` before saving.

    Raises:
        typer.Exit: With code 2 for an unknown key or a value that fails
            coercion or validation.

    Example::

        apimock config set grace_period_seconds 10
        apimock config set prism_command '["npx", "@stoplight/prism-cli"]'
        apimock config set default_port 8080
    """
    from apimock.config import load_config, save_config
    from apimock.models import MockConfig

    data = load_config().model_dump(mode="json")
    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = data[key]
    coerced: object
    if isinstance(current, list):
        try:
            coerced = json.loads(value) if value.lstrip().startswith("[") else value.split()
        except json.JSONDecodeError as exc:
            error(f"Expected a JSON array for {key}: {exc}")
            raise typer.Exit(code=2) from None
    elif isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    elif isinstance(current, float):
        try:
            coerced = float(value)
        except ValueError:
            error(f"Expected number for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value

    data[key] = coerced
    try:
        new_config = MockConfig.model_validate(data)
    except Exception as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        apimock config reset
        apimock --force config reset
    """
    from apimock.config import save_config
    from apimock.models import MockConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_config(MockConfig())
    success("Configuration reset to defaults.")
