"""
CLI entry point.

Sub-commands are generated from the command definitions: every command
that has a template for the current platform becomes a click command whose
positional ``ARGS`` fill its parameters in declaration order and whose
options set the parameters that declare a flag.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Tuple

import click
from dotenv import load_dotenv

from . import __version__
from .config import CommandRegistry, get_settings, load_commands
from .core.exceptions import GoldfishError, exit_code_for
from .core.types import CommandSpec, ExecutionContext, ExecutionStatus, ParameterSpec, Platform
from .engine import Engine
from .platform import detect_platform
from .utils.logger import get_logger, set_logger

logger = get_logger(__name__)

STATE_KEY = "goldfish.state"

OPTION_TYPES = {
    "string": click.STRING,
    "int": click.INT,
    "float": click.FLOAT,
}


@dataclass
class AppState:
    """Per-invocation application state."""

    registry: CommandRegistry
    engine: Engine
    platform: Platform
    timeout: Optional[float] = None
    dry_run: bool = False


def _fail(ctx: click.Context, error: BaseException) -> NoReturn:
    click.secho(f"✗ {error}", fg="red", err=True)
    ctx.exit(exit_code_for(error))


def _app_state(ctx: click.Context) -> AppState:
    """Build (once per invocation) the state shared by all sub-commands."""
    root = ctx.find_root()
    state = root.meta.get(STATE_KEY)
    if state is not None:
        return state

    params = root.params
    try:
        settings = get_settings(force_refresh=True)
        set_logger(
            log_file=params.get("log_file") or settings.log_file,
            verbose=params.get("verbose") or settings.verbose,
            debug=params.get("debug") or settings.debug,
        )
        registry = load_commands(params.get("config_path") or settings.commands_file)
        platform = detect_platform()
    except GoldfishError as e:
        _fail(ctx, e)

    state = AppState(
        registry=registry,
        engine=Engine(default_timeout=settings.default_timeout),
        platform=platform,
        timeout=params.get("timeout"),
        dry_run=bool(params.get("dry_run")),
    )
    root.meta[STATE_KEY] = state
    logger.debug(
        "Loaded %d commands from %s for %s",
        len(registry),
        registry.source,
        platform,
    )
    return state


def _option_dest(index: int) -> str:
    return f"param_{index}"


def _build_option(index: int, param: ParameterSpec) -> click.Option:
    help_text = param.description or f"{param.name} parameter"
    decl = f"--{param.flag_name}"
    if param.type == "bool":
        return click.Option([decl, _option_dest(index)], is_flag=True, default=False, help=help_text)
    return click.Option(
        [decl, _option_dest(index)],
        type=OPTION_TYPES.get(param.type, click.STRING),
        default=None,
        help=help_text,
    )


def generate_examples(command: CommandSpec) -> str:
    """Usage examples for a command's help epilog."""
    example = f"  goldfish {command.name}"
    for param in command.parameters:
        if not param.required:
            continue
        if param.type == "bool":
            if param.flag:
                example += f" {param.flag}"
        else:
            example += f" <{param.name}>"

    examples = [example]
    if command.alias:
        examples.append(example.replace(command.name, command.alias, 1))
    return "\b\nExamples:\n" + "\n".join(examples)


def build_command(command: CommandSpec) -> click.Command:
    """Create the click command for a command definition."""
    flagged: List[Tuple[int, ParameterSpec]] = [
        (index, param) for index, param in enumerate(command.parameters) if param.flag
    ]

    @click.pass_context
    def callback(ctx: click.Context, args: Tuple[str, ...], **options: Any) -> None:
        state = _app_state(ctx)

        flags: Dict[str, Any] = {}
        for index, param in flagged:
            value = options.get(_option_dest(index))
            if value is None or value is False:
                continue
            flags[param.flag] = value

        try:
            params = state.engine.parse_parameters(command, list(args), flags)
            context = ExecutionContext(
                command=command,
                platform=state.platform,
                parameters=params,
                timeout=state.timeout,
            )
            if state.dry_run:
                click.echo(state.engine.render(context))
                return
            outcome = state.engine.execute(context)
        except GoldfishError as e:
            logger.debug("%s failed", command.name, exc_info=True)
            _fail(ctx, e)

        if outcome.status is ExecutionStatus.FAILED:
            click.secho(
                f"{command.name}: command failed with exit code {outcome.exit_code}",
                dim=True,
                err=True,
            )
            ctx.exit(outcome.exit_code)
        if not outcome.ok:
            _fail(ctx, outcome.error)

    description = command.description or command.name
    return click.Command(
        name=command.name,
        callback=callback,
        params=[click.Argument(["args"], nargs=-1)]
        + [_build_option(index, param) for index, param in flagged],
        help=(
            f"{description}\n\nThis command provides cross-platform "
            f"compatibility for '{command.base_command}'."
        ),
        short_help=command.description,
        epilog=generate_examples(command),
    )


class CommandGroup(click.Group):
    """Group whose sub-commands come from the loaded command definitions."""

    def list_commands(self, ctx: click.Context) -> List[str]:
        builtins = super().list_commands(ctx)
        state = _app_state(ctx)
        generated = [
            command.name
            for command in state.registry.for_platform(state.platform)
            if command.name not in builtins
        ]
        return builtins + generated

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        builtin = super().get_command(ctx, cmd_name)
        if builtin is not None:
            return builtin

        state = _app_state(ctx)
        command = state.registry.find(cmd_name)
        if command is None or not command.supports(state.platform):
            return None
        return build_command(command)

    def resolve_command(self, ctx: click.Context, args: List[str]):
        # Report the canonical name when invoked through an alias
        _, cmd, remaining = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, remaining


@click.group(cls=CommandGroup)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Commands file to load instead of the built-in definitions",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Seconds a command may run (default: GOLDFISH_DEFAULT_TIMEOUT or 30)",
)
@click.option("--dry-run", is_flag=True, help="Print the rendered command instead of running it")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Log file path")
@click.version_option(__version__, prog_name="goldfish")
@click.pass_context
def cli(ctx: click.Context, **_: Any) -> None:
    """Cross-platform command unification.

    goldfish provides unified command interfaces that work consistently
    across different operating systems.
    """
    _app_state(ctx)


@cli.command(name="list")
@click.pass_context
def list_cmd(ctx: click.Context) -> None:
    """List the configured commands."""
    state = _app_state(ctx)
    if not len(state.registry):
        click.echo("No commands configured.")
        return

    click.echo("\nAvailable commands:")
    click.echo("-" * 40)

    for command in state.registry:
        title = command.name
        if command.alias:
            title += f" ({command.alias})"
        if not command.supports(state.platform):
            title += f" [not available on {state.platform}]"

        click.echo(f"\n{title}:")
        click.echo(f"  Description: {command.description or 'No description available'}")
        click.echo(f"  Base command: {command.base_command}")
        click.echo(f"  Platforms: {', '.join(sorted(command.platforms))}")
        for param in command.parameters:
            marker = "required" if param.required else "optional"
            flag = f" {param.flag}" if param.flag else ""
            click.echo(f"    {param.name}{flag} ({param.type}, {marker})")

    click.echo("")


def load_environment_variables(env_path: Path) -> None:
    """Load environment variables from a .env file if it exists.

    Only GOLDFISH_ variables are logged, at debug level.
    """
    if env_path.exists():
        load_dotenv(env_path)
        logger.info("Loaded environment from %s", env_path)

        for key, value in os.environ.items():
            if key.startswith("GOLDFISH_"):
                logger.debug("Loaded env var: %s=%s", key, value)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the goldfish CLI."""
    load_environment_variables(Path.cwd() / ".env")
    cli.main(args=argv, prog_name="goldfish")


if __name__ == "__main__":
    main()
