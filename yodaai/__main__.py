"""Entry point when the package is executed as a module."""

import asyncio
import sys

import click

from . import create_session
from .chat.console import ChatConsole
from .chat.render import render_segments
from .chat.segments import SegmentedContent
from .platform.llm.exceptions import LLMClientError
from .platform.observability import configure_logging, initialize_bugsnag
from .platform.settings import Settings


@click.group()
@click.pass_context
def main(ctx):
    settings = Settings()
    configure_logging(settings.app.log_level, json_output=settings.app.log_json)
    initialize_bugsnag(settings.bugsnag.api_key, settings.bugsnag.release_stage)
    ctx.obj = settings


@main.command()
@click.option("--no-color", is_flag=True)
@click.pass_obj
def chat(settings, no_color=False):
    """Start an interactive chat."""
    console = ChatConsole(create_session(settings), settings, color=not no_color)
    asyncio.run(console.run())


@main.command()
@click.pass_obj
def models(settings):
    """List models offered by the configured provider."""
    session = create_session(settings)
    provider = session.providers.ensure_default()
    try:
        available = asyncio.run(session.client.list_models(provider))
    except LLMClientError as e:
        raise click.ClickException(str(e)) from e
    for model in available:
        click.echo(model.id)


@main.command()
@click.pass_obj
def tools(settings):
    """List tools from the configured MCP servers."""
    if not settings.mcp.enabled:
        raise click.ClickException("MCP tools are disabled. Set YODAAI_MCP__ENABLED=true to enable them.")
    session = create_session(settings)
    registry = session.tool_registry
    asyncio.run(registry.refresh_tools(session.mcp_servers))
    for endpoint, status in sorted(registry.server_status.items()):
        click.echo(f"{endpoint}: {status.state.value}", err=status.error is not None)
    click.echo(registry.tools_system_prompt())


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--expand", is_flag=True, help="Show tool call arguments and tool results.")
def render(source, expand=False):
    """Render message content (tool calls and results included) from a file or stdin."""
    content = SegmentedContent(source.read())
    if expand:
        content.expand_all()
    click.echo(render_segments(content, color=sys.stdout.isatty()))


if __name__ == "__main__":
    sys.exit(main())
