"""Tool-call extraction from assistant text.

Models without native function calling are prompted to emit tool calls
inline. Two formats are understood:

    <tool_call>{"name": "Server.tool", "arguments": {"q": "cats"}}</tool_call>

and, only when no JSON-format call is present, the XML-ish format some
models fall back to:

    <execute><invoke name="Server.tool"><parameter name="q">cats</parameter></invoke></execute>

Executed results are written back as `<tool_result name="...">` regions.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

TOOL_CALL_OPEN = "<tool_call>"
TOOL_CALL_PATTERN = r"<tool_call>\s*(\{[\s\S]*?\})\s*</tool_call>"
TOOL_RESULT_PATTERN = r'<tool_result name="([^"]+)">([\s\S]*?)</tool_result>'

_TOOL_CALL_RE = re.compile(TOOL_CALL_PATTERN)
_INVOKE_RE = re.compile(r'<(?:execute|tool)>\s*<invoke\s+name="([^"]+)">([\s\S]*?)</invoke>\s*</(?:execute|tool)>')
_PARAMETER_RE = re.compile(r'<parameter\s+name="([^"]+)">([^<]*)</parameter>')


@dataclass(frozen=True)
class ToolCallRequest:
    """A tool invocation requested by the model.

    Attributes:
        name: Tool name, optionally prefixed with "ServerName."
        arguments: JSON object arguments, None when absent or not an object
    """

    name: str
    arguments: dict[str, Any] | None = None


def parse_tool_calls(text: str) -> list[ToolCallRequest]:
    """Extract tool calls from assistant text, in order of appearance."""
    calls = _parse_json_tool_calls(text)
    if not calls:
        calls = _parse_xml_tool_calls(text)
    return calls


def contains_tool_calls(text: str) -> bool:
    return bool(_TOOL_CALL_RE.search(text) or _INVOKE_RE.search(text))


def format_tool_result(name: str, result: str) -> str:
    """Render a tool result region for the assistant transcript."""
    return f'<tool_result name="{name}">\n{result}\n</tool_result>'


def load_tool_call_payload(payload: str) -> dict[str, Any] | None:
    """Decode a `<tool_call>` payload, or None if it is not a usable call.

    A usable call is a JSON object with a string "name". Payloads nested
    too deeply or holding oversized integers count as unusable.
    """
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("name"), str):
        return None
    return data


def _parse_json_tool_calls(text: str) -> list[ToolCallRequest]:
    calls = []
    pos = 0
    while (match := _TOOL_CALL_RE.search(text, pos)) is not None:
        payload = load_tool_call_payload(match.group(1))
        if payload is None:
            # The lazy payload may have swallowed later regions; rescan them
            pos = match.start() + len(TOOL_CALL_OPEN)
            continue
        arguments = payload.get("arguments")
        calls.append(
            ToolCallRequest(
                name=payload["name"],
                arguments=arguments if isinstance(arguments, dict) else None,
            )
        )
        pos = match.end()
    return calls


def _parse_xml_tool_calls(text: str) -> list[ToolCallRequest]:
    calls = []
    for match in _INVOKE_RE.finditer(text):
        arguments = {name: value for name, value in _PARAMETER_RE.findall(match.group(2))}
        calls.append(ToolCallRequest(name=match.group(1), arguments=arguments or None))
    return calls
