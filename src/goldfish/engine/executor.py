"""
Command execution engine.

Sequences validation, template selection, rendering and process execution
for a single invocation.
"""

from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.exceptions import TemplateError, UnsupportedPlatformError
from ..core.types import CommandSpec, ExecutionContext, ExecutionOutcome
from ..utils.logger import get_logger
from .resolver import resolve_parameters
from .runner import DEFAULT_TIMEOUT, ProcessRunner
from .template import TemplateRenderer
from .validator import validate_context

logger = get_logger(__name__)


class Engine:
    """Handles command rendering and execution."""

    def __init__(
        self,
        default_timeout: float = DEFAULT_TIMEOUT,
        runner: Optional[ProcessRunner] = None,
        renderer: Optional[TemplateRenderer] = None,
    ):
        """Initialize the engine.

        Args:
            default_timeout: Seconds a command may run when the context
                does not set its own timeout
            runner: Process runner; built from ``default_timeout`` if omitted
            renderer: Template renderer
        """
        self.runner = runner or ProcessRunner(default_timeout)
        self.renderer = renderer or TemplateRenderer()

    @property
    def default_timeout(self) -> float:
        return self.runner.default_timeout

    def parse_parameters(
        self,
        command: CommandSpec,
        args: Sequence[str],
        flags: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Resolve positional arguments and typed flags for ``command``."""
        return resolve_parameters(command, args, flags)

    def render(self, context: ExecutionContext) -> str:
        """Validate the context and render its command line without running it.

        Raises:
            InvalidContextError: If the context fails validation
            UnsupportedPlatformError: If the command has no template for the platform
            TemplateParseError: If the template cannot be parsed
            TemplateExecutionError: If the template cannot be evaluated
        """
        validate_context(context)

        command = context.command
        platform = str(context.platform)
        template = command.template_for(platform)
        if template is None:
            raise UnsupportedPlatformError(platform, command.name)

        try:
            rendered = self.renderer.render(command, template, context.parameters)
        except TemplateError as e:
            raise e.with_context(command=command.name, platform=platform, stage="render")

        logger.debug(
            "Rendered %s for %s: %s", command.name, platform, rendered
        )
        return rendered

    def execute(self, context: ExecutionContext) -> ExecutionOutcome:
        """Run a command with the context's parameters.

        Nothing is spawned unless validation and rendering succeed. The
        runner's outcome is returned unchanged; a non-zero exit, timeout or
        spawn failure is reported on the outcome rather than raised.

        Raises:
            InvalidContextError: If the context fails validation
            UnsupportedPlatformError: If the command has no template for the platform
            TemplateParseError: If the template cannot be parsed
            TemplateExecutionError: If the template cannot be evaluated
        """
        rendered = self.render(context)

        logger.info("Executing %s: %s", context.command.name, rendered)
        outcome = self.runner.run(rendered, context.timeout, context.platform)
        if outcome.error is not None:
            outcome.error.with_context(
                command_name=context.command.name,
                platform=str(context.platform),
                stage="run",
            )
        return outcome
