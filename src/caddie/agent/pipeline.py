"""Reconcile pending tool calls in a transcript with their results."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .context import ToolContext
from .registry import ToolFunction, ToolRegistry
from ..logging import get_logger

logger = get_logger(__name__)

DENIED_RESULT = "User denied access to tool execution"


class ToolCallState(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    COMPLETED = "completed"


Decision = Union[ToolCallState, str]


@dataclass
class ToolCallIntent:
    """A tool call the model asked for, as found in the transcript."""

    call_id: str
    tool_name: str
    arguments: Optional[Dict[str, Any]]
    state: ToolCallState = ToolCallState.PENDING
    arguments_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "call_id": self.call_id,
            "tool_name": self.tool_name,
            "arguments": self.arguments,
            "state": self.state.value,
        }


def coerce_result(result: Any) -> str:
    """Tool message content is always text; structured results are sent as JSON."""
    if isinstance(result, str):
        return result
    return json.dumps(result, default=str)


def tool_message(call_id: str, content: Any) -> Dict[str, Any]:
    return {"role": "tool", "tool_call_id": call_id, "content": coerce_result(content)}


def last_tool_call_index(messages: List[Dict[str, Any]]) -> Optional[int]:
    """Index of the most recent assistant message that carries tool calls."""
    for index in range(len(messages) - 1, -1, -1):
        message = messages[index]
        if message.get("role") == "assistant" and message.get("tool_calls"):
            return index
    return None


def _parse_arguments(raw: Any) -> tuple:
    if raw is None or raw == "":
        return {}, None
    if isinstance(raw, dict):
        return raw, None
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        return None, f"arguments are not valid JSON ({e})"
    if not isinstance(parsed, dict):
        return None, "arguments must be a JSON object"
    return parsed, None


def _normalize_decision(decision: Optional[Decision]) -> ToolCallState:
    if decision is None:
        return ToolCallState.PENDING
    try:
        state = ToolCallState(decision)
    except ValueError:
        logger.warning(f"[PIPELINE] Ignoring unknown decision {decision!r}")
        return ToolCallState.PENDING
    if state is ToolCallState.COMPLETED:
        return ToolCallState.PENDING
    return state


def tool_call_intents(
    messages: List[Dict[str, Any]],
    decisions: Optional[Mapping[str, Decision]] = None,
) -> List[ToolCallIntent]:
    """
    Tool calls of the most recent tool-calling assistant message.

    Calls with a tool message answering them are COMPLETED; the others take the
    human decision supplied for their call id, or stay PENDING.
    """
    index = last_tool_call_index(messages)
    if index is None:
        return []

    decisions = decisions or {}
    answered = {
        message.get("tool_call_id")
        for message in messages[index + 1:]
        if message.get("role") == "tool"
    }

    intents = []
    for call in messages[index]["tool_calls"]:
        function = call.get("function", {})
        arguments, error = _parse_arguments(function.get("arguments"))
        call_id = call.get("id", "")
        if call_id in answered:
            state = ToolCallState.COMPLETED
        else:
            state = _normalize_decision(decisions.get(call_id))
        intents.append(ToolCallIntent(
            call_id=call_id,
            tool_name=function.get("name", ""),
            arguments=arguments,
            state=state,
            arguments_error=error,
        ))
    return intents


def pending_confirmations(
    messages: List[Dict[str, Any]],
    registry: ToolRegistry,
    decisions: Optional[Mapping[str, Decision]] = None,
) -> List[ToolCallIntent]:
    """Confirm-required calls still waiting for a human decision."""
    return [
        intent
        for intent in tool_call_intents(messages, decisions)
        if intent.state is ToolCallState.PENDING and registry.requires_confirmation(intent.tool_name)
    ]


def _resolve(
    intent: ToolCallIntent,
    registry: ToolRegistry,
    context: ToolContext,
    executions: Optional[Mapping[str, ToolFunction]],
) -> Optional[Any]:
    """Result for one intent, or None when it has to wait for a human."""
    if registry.requires_confirmation(intent.tool_name):
        if intent.state is ToolCallState.PENDING:
            return None
        if intent.state is ToolCallState.DENIED:
            logger.info(f"[PIPELINE] {intent.tool_name} ({intent.call_id}) denied by user")
            return DENIED_RESULT
        logger.info(f"[PIPELINE] {intent.tool_name} ({intent.call_id}) approved, executing")
    else:
        logger.info(f"[PIPELINE] Running {intent.tool_name} ({intent.call_id})")

    if intent.arguments_error:
        return f"Error: invalid arguments for {intent.tool_name}: {intent.arguments_error}"
    return registry.run(intent.tool_name, intent.arguments, context, executions=executions)


def reconcile(
    messages: List[Dict[str, Any]],
    registry: ToolRegistry,
    context: ToolContext,
    decisions: Optional[Mapping[str, Decision]] = None,
    executions: Optional[Mapping[str, ToolFunction]] = None,
) -> List[Dict[str, Any]]:
    """
    Fill in missing tool results for the most recent tool-calling message.

    Autonomous calls without a result are run. Confirm-required calls run from
    the execution table once approved, get DENIED_RESULT once denied and are
    left alone while pending. New tool messages go right after the results
    already answering that assistant message, in call order; nothing else moves.

    Args:
        messages: Transcript in chat-completions shape
        registry: Tool catalog
        context: Capabilities passed to tool functions
        decisions: Human decisions keyed by tool call id
        executions: Execution table, defaults to the registry's

    Returns:
        A new message list
    """
    index = last_tool_call_index(messages)
    if index is None:
        return list(messages)

    new_results = []
    for intent in tool_call_intents(messages, decisions):
        if intent.state is ToolCallState.COMPLETED:
            continue
        result = _resolve(intent, registry, context, executions)
        if result is None:
            continue
        new_results.append(tool_message(intent.call_id, result))

    if not new_results:
        return list(messages)

    insert_at = index + 1
    while insert_at < len(messages) and messages[insert_at].get("role") == "tool":
        insert_at += 1

    logger.info(f"[PIPELINE] Attached {len(new_results)} tool result(s)")
    return list(messages[:insert_at]) + new_results + list(messages[insert_at:])
