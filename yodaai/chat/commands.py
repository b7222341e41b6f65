"""Slash commands typed into the composer."""

from dataclasses import dataclass
from enum import StrEnum


class SlashCommand(StrEnum):
    HELP = "help"
    CLEAR = "clear"
    NEW = "new"
    MODELS = "models"
    SETTINGS = "settings"
    COPY = "copy"
    EXPORT = "export"
    TOOLS = "tools"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def usage(self) -> str:
        return f"/{self.value}"


_DESCRIPTIONS = {
    SlashCommand.HELP: "Show available commands",
    SlashCommand.CLEAR: "Clear the current conversation",
    SlashCommand.NEW: "Start a new chat thread",
    SlashCommand.MODELS: "List models from the current provider",
    SlashCommand.SETTINGS: "Show current settings",
    SlashCommand.COPY: "Copy the last assistant response",
    SlashCommand.EXPORT: "Export the conversation as Markdown",
    SlashCommand.TOOLS: "List tools from connected MCP servers",
}


@dataclass(frozen=True)
class ParsedCommand:
    command: SlashCommand
    argument: str = ""


def parse_slash_command(text: str) -> ParsedCommand | None:
    """Parse "/name [argument]"; returns None for anything that is not a known command.

    Matching is case-insensitive on the command name.
    """
    stripped = text.strip()
    if not stripped.startswith("/"):
        return None

    name, _, argument = stripped[1:].partition(" ")
    try:
        command = SlashCommand(name.lower())
    except ValueError:
        return None
    return ParsedCommand(command=command, argument=argument.strip())


def should_show_autocomplete(text: str) -> bool:
    """Autocomplete is offered while a single "/word" is being typed."""
    return text.startswith("/") and " " not in text


def filter_commands(text: str) -> list[SlashCommand]:
    """Commands whose name starts with the typed prefix (without the slash)."""
    prefix = text.removeprefix("/").lower()
    return [command for command in SlashCommand if command.value.startswith(prefix)]


def help_text() -> str:
    lines = ["Available commands:"]
    for command in SlashCommand:
        lines.append(f"  {command.usage:<10} {command.description}")
    return "\n".join(lines)
