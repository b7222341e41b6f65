"""Unit tests for inline tool-call extraction."""

import pytest

from yodaai.chat.segments import ToolResultSegment, parse_segments
from yodaai.platform.mcp.tool_calls import (
    ToolCallRequest,
    contains_tool_calls,
    format_tool_result,
    parse_tool_calls,
)


class TestParseToolCallsJSON:
    def test_single_call(self):
        text = 'Sure.\n<tool_call>\n{"name": "Search.web", "arguments": {"q": "cats"}}\n</tool_call>'
        assert parse_tool_calls(text) == [ToolCallRequest(name="Search.web", arguments={"q": "cats"})]

    def test_multiple_calls_in_order(self):
        text = '<tool_call>{"name": "a"}</tool_call> then <tool_call>{"name": "b", "arguments": {}}</tool_call>'
        assert parse_tool_calls(text) == [ToolCallRequest(name="a"), ToolCallRequest(name="b", arguments={})]

    @pytest.mark.parametrize("arguments", ['"text"', "[1, 2]", "null", "3"])
    def test_non_object_arguments_become_none(self, arguments: str):
        text = f'<tool_call>{{"name": "a", "arguments": {arguments}}}</tool_call>'
        assert parse_tool_calls(text) == [ToolCallRequest(name="a", arguments=None)]

    def test_malformed_calls_are_skipped(self):
        text = '<tool_call>{nope}</tool_call><tool_call>{"arguments": {}}</tool_call><tool_call>{"name": "ok"}</tool_call>'
        assert parse_tool_calls(text) == [ToolCallRequest(name="ok")]

    def test_unclosed_payload_does_not_hide_later_call(self):
        text = '<tool_call>{bad</tool_call> mid <tool_call>{"name": "good"}</tool_call>'
        assert parse_tool_calls(text) == [ToolCallRequest(name="good")]

    @pytest.mark.parametrize(
        "arguments",
        [
            "[" * 100_000 + "]" * 100_000,  # Nested past the recursion limit
            "7" * 5000,  # Past the integer conversion limit
        ],
        ids=["deep-nesting", "huge-integer"],
    )
    def test_undecodable_payloads_are_skipped(self, arguments: str):
        text = '<tool_call>{"name": "x", "arguments": ' + arguments + "}</tool_call>"
        assert parse_tool_calls(text) == []


class TestParseToolCallsXML:
    def test_invoke_format(self):
        text = (
            "<execute>\n"
            '<invoke name="Search.web">\n'
            '<parameter name="q">cats</parameter>\n'
            '<parameter name="limit">3</parameter>\n'
            "</invoke>\n"
            "</execute>"
        )
        assert parse_tool_calls(text) == [
            ToolCallRequest(name="Search.web", arguments={"q": "cats", "limit": "3"}),
        ]

    def test_tool_wrapper_without_parameters(self):
        text = '<tool><invoke name="Clock.now"></invoke></tool>'
        assert parse_tool_calls(text) == [ToolCallRequest(name="Clock.now", arguments=None)]

    def test_json_format_takes_precedence(self):
        text = (
            '<tool_call>{"name": "json"}</tool_call>'
            '<execute><invoke name="xml"><parameter name="a">1</parameter></invoke></execute>'
        )
        assert parse_tool_calls(text) == [ToolCallRequest(name="json")]


class TestContainsToolCalls:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ('<tool_call>{"name": "a"}</tool_call>', True),
            ('<execute><invoke name="a"></invoke></execute>', True),
            ("plain text", False),
            ('<tool_result name="a">x</tool_result>', False),
        ],
    )
    def test_detection(self, text: str, expected: bool):
        assert contains_tool_calls(text) is expected


def test_formatted_result_parses_as_segment():
    region = format_tool_result("Search.web", "3 results")
    assert region == '<tool_result name="Search.web">\n3 results\n</tool_result>'
    assert parse_segments(region) == [ToolResultSegment(name="Search.web", result="3 results")]
