"""Tool catalog: which tools run on their own and which wait for a human."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from .context import ConfigurationError, ToolContext
from ..logging import get_logger

logger = get_logger(__name__)

ToolFunction = Callable[[Any, ToolContext], Any]


class ToolMode(str, Enum):
    """How a tool call gets executed."""
    AUTONOMOUS = "autonomous"
    CONFIRM_REQUIRED = "confirm_required"


@dataclass(frozen=True)
class ToolDefinition:
    """
    A tool as described to the model.

    Autonomous tools carry their execute function. Confirm-required tools carry
    none; their logic lives in the registry's execution table under the same name.
    """

    name: str
    description: str
    parameters: Type[BaseModel]
    mode: ToolMode
    execute: Optional[ToolFunction] = None

    def to_openai_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.model_json_schema(),
            },
        }


class ToolRegistry:
    """Fixed set of tools plus the execution table for confirm-required ones."""

    def __init__(self, tools: Iterable[ToolDefinition], executions: Mapping[str, ToolFunction]):
        self.tools: Dict[str, ToolDefinition] = {}
        self.executions: Dict[str, ToolFunction] = dict(executions)

        for tool in tools:
            if tool.name in self.tools:
                raise ConfigurationError(f"Duplicate tool: {tool.name}")
            if tool.mode is ToolMode.AUTONOMOUS and tool.execute is None:
                raise ConfigurationError(f"Autonomous tool {tool.name} has no execute function")
            if tool.mode is ToolMode.CONFIRM_REQUIRED:
                if tool.execute is not None:
                    raise ConfigurationError(f"Confirm-required tool {tool.name} must not carry an execute function")
                if tool.name not in self.executions:
                    raise ConfigurationError(f"Confirm-required tool {tool.name} has no execution entry")
            self.tools[tool.name] = tool

        for name in self.executions:
            tool = self.tools.get(name)
            if tool is None or tool.mode is not ToolMode.CONFIRM_REQUIRED:
                raise ConfigurationError(f"Execution entry {name} has no confirm-required tool")

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self.tools.get(name)

    def requires_confirmation(self, name: str) -> bool:
        tool = self.tools.get(name)
        return tool is not None and tool.mode is ToolMode.CONFIRM_REQUIRED

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        return [tool.to_openai_tool() for tool in self.tools.values()]

    def run(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]],
        context: ToolContext,
        executions: Optional[Mapping[str, ToolFunction]] = None,
    ) -> Any:
        """
        Validate arguments and run a tool.

        Failures never escape: they come back as a sentence the model can read.
        Confirm-required tools run from the execution table, so callers must only
        get here once a human approved the call.
        """
        tool = self.tools.get(name)
        if tool is None:
            return f"Error: unknown tool {name}"

        try:
            args = tool.parameters.model_validate(arguments or {})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
                for error in e.errors()
            )
            logger.warning(f"Invalid arguments for {name}: {problems}")
            return f"Error: invalid arguments for {name}: {problems}"

        if tool.mode is ToolMode.AUTONOMOUS:
            func = tool.execute
        else:
            func = (executions if executions is not None else self.executions).get(name)
            if func is None:
                return f"Error: no execution found for tool {name}"

        try:
            return func(args, context)
        except Exception as e:
            logger.error(f"Error executing tool {name}: {e}", exc_info=True)
            return f"Error executing {name}: {e}"
