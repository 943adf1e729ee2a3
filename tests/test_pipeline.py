"""Tests for tool call reconciliation."""

import json

import pytest

from caddie.agent.context import ToolContext
from caddie.agent.pipeline import (
    DENIED_RESULT,
    ToolCallState,
    coerce_result,
    pending_confirmations,
    reconcile,
    tool_call_intents,
)
from caddie.agent.registry import ToolDefinition, ToolMode, ToolRegistry
from caddie.agent.tool_schemas import LocalTimeArguments, WeatherArguments


class RecordingExecution:
    def __init__(self, result="The weather in Paris is sunny", error=None):
        self.calls = []
        self.result = result
        self.error = error

    def __call__(self, args, context):
        self.calls.append(args)
        if self.error:
            raise self.error
        return self.result


def tool_call(call_id, name, arguments):
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


@pytest.fixture
def weather():
    return RecordingExecution()


@pytest.fixture
def registry(weather):
    tools = [
        ToolDefinition(
            name="getWeatherInformation",
            description="show the weather",
            parameters=WeatherArguments,
            mode=ToolMode.CONFIRM_REQUIRED,
        ),
        ToolDefinition(
            name="getLocalTime",
            description="local time",
            parameters=LocalTimeArguments,
            mode=ToolMode.AUTONOMOUS,
            execute=lambda args, context: {"location": args.location, "time": "10am"},
        ),
    ]
    return ToolRegistry(tools, {"getWeatherInformation": weather})


@pytest.fixture
def transcript():
    return [
        {"role": "user", "content": "Weather in Paris and time in Rome?"},
        {
            "role": "assistant",
            "content": "",
            "tool_calls": [
                tool_call("call_weather", "getWeatherInformation", '{"city": "Paris"}'),
                tool_call("call_time", "getLocalTime", '{"location": "Rome"}'),
            ],
        },
    ]


def results_by_id(messages):
    return {m["tool_call_id"]: m["content"] for m in messages if m.get("role") == "tool"}


def test_pending_confirm_required_call_is_left_alone(registry, weather, transcript):
    messages = reconcile(transcript, registry, ToolContext())

    results = results_by_id(messages)
    assert "call_weather" not in results
    assert json.loads(results["call_time"]) == {"location": "Rome", "time": "10am"}
    assert weather.calls == []


def test_denied_call_never_executes(registry, weather, transcript):
    messages = reconcile(transcript, registry, ToolContext(), decisions={"call_weather": "denied"})

    assert results_by_id(messages)["call_weather"] == DENIED_RESULT
    assert weather.calls == []


def test_approved_call_executes_once_with_its_arguments(registry, weather, transcript):
    messages = reconcile(transcript, registry, ToolContext(), decisions={"call_weather": ToolCallState.APPROVED})
    messages = reconcile(messages, registry, ToolContext(), decisions={"call_weather": ToolCallState.APPROVED})

    assert len(weather.calls) == 1
    assert weather.calls[0].city == "Paris"
    assert list(results_by_id(messages).values()).count("The weather in Paris is sunny") == 1


def test_approved_call_failure_becomes_error_string(transcript):
    failing = RecordingExecution(error=RuntimeError("service down"))
    registry = ToolRegistry(
        [ToolDefinition(
            name="getWeatherInformation",
            description="show the weather",
            parameters=WeatherArguments,
            mode=ToolMode.CONFIRM_REQUIRED,
        ), ToolDefinition(
            name="getLocalTime",
            description="local time",
            parameters=LocalTimeArguments,
            mode=ToolMode.AUTONOMOUS,
            execute=lambda args, context: "10am",
        )],
        {"getWeatherInformation": failing},
    )

    messages = reconcile(transcript, registry, ToolContext(), decisions={"call_weather": "approved"})

    assert results_by_id(messages)["call_weather"] == "Error executing getWeatherInformation: service down"


def test_results_follow_call_order_without_reordering(registry, transcript):
    transcript.append({"role": "user", "content": "still there?"})

    messages = reconcile(transcript, registry, ToolContext(), decisions={"call_weather": "approved"})

    roles = [m["role"] for m in messages]
    assert roles == ["user", "assistant", "tool", "tool", "user"]
    assert [m["tool_call_id"] for m in messages if m["role"] == "tool"] == ["call_weather", "call_time"]
    assert messages[-1] == {"role": "user", "content": "still there?"}


def test_new_results_go_after_existing_ones(registry, transcript):
    first = reconcile(transcript, registry, ToolContext())
    second = reconcile(first, registry, ToolContext(), decisions={"call_weather": "denied"})

    assert [m.get("tool_call_id") for m in second[2:]] == ["call_time", "call_weather"]


def test_input_transcript_is_not_mutated(registry, transcript):
    before = [dict(m) for m in transcript]

    reconcile(transcript, registry, ToolContext(), decisions={"call_weather": "approved"})

    assert transcript == before


def test_transcript_without_tool_calls_is_unchanged(registry):
    messages = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]
    assert reconcile(messages, registry, ToolContext()) == messages


def test_invalid_json_arguments_become_error_result(registry):
    messages = [
        {"role": "assistant", "content": "", "tool_calls": [tool_call("call_bad", "getLocalTime", "{not json")]},
    ]

    result = results_by_id(reconcile(messages, registry, ToolContext()))["call_bad"]

    assert result.startswith("Error: invalid arguments for getLocalTime")


def test_unknown_tool_gets_error_result(registry):
    messages = [{"role": "assistant", "content": "", "tool_calls": [tool_call("call_x", "teleport", "{}")]}]

    assert results_by_id(reconcile(messages, registry, ToolContext()))["call_x"] == "Error: unknown tool teleport"


def test_tool_call_intents_states(registry, transcript):
    messages = reconcile(transcript, registry, ToolContext())

    states = {i.call_id: i.state for i in tool_call_intents(messages, {"call_weather": "denied"})}

    assert states == {"call_weather": ToolCallState.DENIED, "call_time": ToolCallState.COMPLETED}


def test_pending_confirmations(registry, transcript):
    pending = pending_confirmations(transcript, registry)

    assert [intent.call_id for intent in pending] == ["call_weather"]
    assert pending[0].arguments == {"city": "Paris"}
    assert pending_confirmations(transcript, registry, {"call_weather": "approved"}) == []


def test_coerce_result():
    assert coerce_result("plain") == "plain"
    assert coerce_result(["a", "b"]) == '["a", "b"]'
    assert coerce_result({"n": 1}) == '{"n": 1}'
