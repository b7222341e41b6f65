"""Interactive terminal chat.

Reads lines from the user, dispatches slash commands and streams assistant
replies to stdout. Tool activity in a finished reply is summarised with the
segment renderer.
"""

import asyncio
import logging
from pathlib import Path

import click

from yodaai.chat.commands import ParsedCommand, SlashCommand, help_text, parse_slash_command
from yodaai.chat.render import render_segments
from yodaai.chat.segments import SegmentedContent, TextSegment
from yodaai.chat.session import ChatSession
from yodaai.chat.thread import Message, export_markdown
from yodaai.platform.llm.exceptions import LLMClientError
from yodaai.platform.llm.messages import Role
from yodaai.platform.settings import Settings

logger = logging.getLogger(__name__)

EXIT_WORDS = frozenset({"exit", "quit"})


class ChatConsole:
    """REPL around a ChatSession."""

    def __init__(self, session: ChatSession, settings: Settings, color: bool = True) -> None:
        self.session = session
        self.settings = settings
        self.color = color
        self._printed = 0

    async def run(self) -> None:
        click.echo(f"YoDaAI chat. Type /help for commands, {'/'.join(sorted(EXIT_WORDS))} to leave.")
        while True:
            try:
                line = await asyncio.to_thread(click.prompt, "", prompt_suffix="> ", default="", show_default=False)
            except (EOFError, click.Abort):
                click.echo()
                return
            if line.strip().lower() in EXIT_WORDS:
                return
            await self.handle_line(line)

    async def handle_line(self, line: str) -> None:
        command = parse_slash_command(line)
        if command is not None:
            await self.run_command(command)
            return
        if line.strip().startswith("/"):
            click.echo(f"Unknown command: {line.strip()}. Type /help for commands.")
            return
        await self.send(line)

    async def send(self, text: str) -> Message | None:
        self._printed = 0
        click.echo(self._style("Assistant", "green") + ": ", nl=False)
        reply = await self.session.send(text, on_update=self._echo_delta)
        click.echo()

        if reply is None:
            if self.session.last_error:
                click.echo(self._style(f"Error: {self.session.last_error}", "red"), err=True)
            return None

        content = SegmentedContent(reply.content)
        if any(not isinstance(segment, TextSegment) for segment in content.segments):
            click.echo(self._style("Tool activity:", "yellow"))
            click.echo(render_segments(content, color=self.color))
        return reply

    async def run_command(self, parsed: ParsedCommand) -> None:
        command = parsed.command
        if command is SlashCommand.HELP:
            click.echo(help_text())
        elif command is SlashCommand.CLEAR:
            self.session.clear_thread()
            click.echo("Conversation cleared.")
        elif command is SlashCommand.NEW:
            self.session.new_thread()
            click.echo("Started a new chat.")
        elif command is SlashCommand.MODELS:
            await self._list_models()
        elif command is SlashCommand.SETTINGS:
            self._show_settings()
        elif command is SlashCommand.COPY:
            latest = self.session.thread.last_message(Role.ASSISTANT)
            if latest is None:
                click.echo("No assistant response yet.")
            else:
                click.echo(latest.content)
        elif command is SlashCommand.EXPORT:
            self._export(parsed.argument)
        elif command is SlashCommand.TOOLS:
            await self._list_tools()

    def _echo_delta(self, message: Message) -> None:
        click.echo(message.content[self._printed :], nl=False)
        self._printed = len(message.content)

    async def _list_models(self) -> None:
        provider = self.session.providers.ensure_default()
        try:
            models = await self.session.client.list_models(provider)
        except LLMClientError as e:
            click.echo(self._style(f"Error: {e}", "red"), err=True)
            return
        for model in models:
            marker = "*" if model.id == provider.selected_model else " "
            click.echo(f" {marker} {model.id}")

    async def _list_tools(self) -> None:
        registry = self.session.tool_registry
        if not registry.enabled:
            click.echo("MCP tools are disabled. Set YODAAI_MCP__ENABLED=true to enable them.")
            return
        await registry.refresh_tools(self.session.mcp_servers)
        for endpoint, status in sorted(registry.server_status.items()):
            detail = status.error or status.server_name or ""
            click.echo(f"{endpoint}: {status.state.value} {detail}".rstrip())
        for registered in registry.tools:
            click.echo(f"  {registered.prefixed_name}")

    def _show_settings(self) -> None:
        provider = self.session.providers.ensure_default()
        click.echo(f"Provider: {provider.name} ({provider.base_url})")
        click.echo(f"Model: {provider.selected_model}")
        click.echo(f"MCP tools: {'enabled' if self.settings.mcp.enabled else 'disabled'}")
        for server in self.session.mcp_servers:
            click.echo(f"  {server.name}: {server.endpoint} [{server.transport.display_name}]")
        click.echo(f"Attach app context: {self.session.always_attach_app_context}")

    def _export(self, argument: str) -> None:
        markdown = export_markdown(self.session.thread)
        if not argument:
            click.echo(markdown)
            return
        path = Path(argument).expanduser()
        path.write_text(markdown, encoding="utf-8")
        click.echo(f"Exported to {path}")

    def _style(self, text: str, fg: str) -> str:
        return click.style(text, fg=fg, bold=True) if self.color else text
