"""Chat session orchestration.

A `ChatSession` owns the active thread and drives one exchange at a time:
the user message is appended, the request is assembled from the thread
history, the MCP tool catalogue and permitted app context, and the
assistant reply is streamed into a message whose content grows with every
delta. Tool calls found in the reply are executed through the tool
registry and their results appended as `<tool_result>` regions before the
model is asked to continue.

Usage:
    session = ChatSession(client, providers, tool_registry=registry)
    await session.send("What's the weather in Paris?", on_update=render)
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from yodaai.chat.context import (
    AppContextCache,
    AppContextProvider,
    AppContextSnapshot,
    AppPermissionsStore,
    NullAppContextProvider,
    RunningApp,
    format_app_context,
)
from yodaai.chat.thread import ChatThread, Message, generate_thread_title
from yodaai.platform.llm.client import OpenAICompatibleClient
from yodaai.platform.llm.exceptions import LLMClientError
from yodaai.platform.llm.messages import ChatMessage, Role
from yodaai.platform.llm.providers import ProviderRegistry
from yodaai.platform.mcp.client import MCPClientError
from yodaai.platform.mcp.config import MCPServerConfig
from yodaai.platform.mcp.registry import MCPToolRegistry
from yodaai.platform.mcp.tool_calls import format_tool_result, parse_tool_calls
from yodaai.platform.observability.logging import bound_thread

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 5

TOOL_RESULTS_PROMPT = "Tool results are above. Continue your response using them."

# Called with the assistant message each time its content changes
UpdateCallback: TypeAlias = Callable[[Message], None]


@dataclass(frozen=True)
class RequestOptions:
    """Sampling options forwarded to the completions endpoint."""

    temperature: float | None = None
    max_tokens: int | None = None


class ChatSession:
    """Chat orchestration for a single active thread.

    Errors from the LLM client and the tool runtime are caught, logged and
    exposed through `last_error` as a user-facing message; `send` and the
    retry operations never raise them.
    """

    def __init__(
        self,
        client: OpenAICompatibleClient,
        providers: ProviderRegistry,
        tool_registry: MCPToolRegistry | None = None,
        mcp_servers: Sequence[MCPServerConfig] = (),
        context_provider: AppContextProvider | None = None,
        permissions: AppPermissionsStore | None = None,
        context_cache: AppContextCache | None = None,
        always_attach_app_context: bool = True,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        options: RequestOptions | None = None,
    ) -> None:
        self.client = client
        self.providers = providers
        self.tool_registry = tool_registry or MCPToolRegistry(enabled=False)
        self.mcp_servers = list(mcp_servers)
        self.context_provider = context_provider or NullAppContextProvider()
        self.permissions = permissions or AppPermissionsStore()
        self.context_cache = context_cache or AppContextCache()
        self.always_attach_app_context = always_attach_app_context
        self.max_tool_rounds = max_tool_rounds
        self.options = options or RequestOptions()

        self.thread = ChatThread()
        self.is_sending = False
        self.streaming_message_id: str | None = None
        self.last_error: str | None = None

    async def send(
        self,
        text: str,
        mentioned_apps: Sequence[RunningApp] = (),
        on_update: UpdateCallback | None = None,
    ) -> Message | None:
        """Send a user message and stream the assistant reply.

        Blank input is ignored. The thread gets a title from the first user
        message once the reply has completed.

        Returns:
            The assistant message, or None if nothing was sent or the request failed
        """
        trimmed = text.strip()
        if not trimmed:
            return None

        self.thread.append(Role.USER, trimmed)
        reply = await self._respond(mentioned_apps, on_update)

        if reply is not None and self.thread.has_default_title:
            self.thread.title = generate_thread_title(trimmed)
        return reply

    async def retry_last_response(self, on_update: UpdateCallback | None = None) -> Message | None:
        """Drop the last assistant message and generate it again."""
        last = self.thread.last_message(Role.ASSISTANT)
        if last is not None:
            self.thread.remove(last.id)
        return await self._respond((), on_update)

    async def retry_from(self, message: Message, on_update: UpdateCallback | None = None) -> Message | None:
        """Regenerate from a message, dropping everything after it.

        A user message is kept and answered again; an assistant message is
        removed along with the rest.
        """
        if all(existing.id != message.id for existing in self.thread.messages):
            logger.warning("Message %s is not part of the active thread", message.id)
            return None
        self.thread.truncate_after(message.id, inclusive=message.role is Role.ASSISTANT)
        return await self._respond((), on_update)

    def delete_message(self, message_id: str) -> bool:
        return self.thread.remove(message_id)

    def new_thread(self) -> ChatThread:
        self.thread = ChatThread()
        self.last_error = None
        return self.thread

    def clear_thread(self) -> None:
        self.thread.messages.clear()
        self.last_error = None

    def insert_last_assistant_message(self) -> bool:
        """Insert the latest assistant reply into the focused field of the frontmost app.

        Insertion is refused when the frontmost app's permission rule
        disallows it. When no app can be identified the provider decides.
        """
        latest = self.thread.last_message(Role.ASSISTANT)
        if latest is None or not latest.content:
            return False

        snapshot = self.context_provider.capture_frontmost()
        if snapshot is not None:
            rule = self.permissions.ensure_rule(snapshot.bundle_identifier, snapshot.app_name)
            if not rule.allow_insert:
                logger.info("Insertion into %s is not permitted", snapshot.app_name)
                return False
        return self.context_provider.insert_text(latest.content)

    async def _respond(
        self,
        mentioned_apps: Sequence[RunningApp],
        on_update: UpdateCallback | None,
    ) -> Message | None:
        self.is_sending = True
        self.last_error = None
        with bound_thread(self.thread.id):
            try:
                return await self._stream_assistant_response(mentioned_apps, on_update)
            except (LLMClientError, MCPClientError) as e:
                logger.error("Chat request failed: %s", e, exc_info=e)
                self.last_error = str(e)
                self._discard_empty_reply()
                return None
            finally:
                self.is_sending = False
                self.streaming_message_id = None

    async def _stream_assistant_response(
        self,
        mentioned_apps: Sequence[RunningApp],
        on_update: UpdateCallback | None,
    ) -> Message:
        provider = self.providers.ensure_default()
        contexts = self._collect_app_contexts(mentioned_apps)
        request_messages = await self._build_request(contexts)

        assistant = self.thread.append(Role.ASSISTANT, "", app_contexts=[snapshot for snapshot, _ in contexts])
        self.streaming_message_id = assistant.id

        rounds = 0
        while True:
            round_text = ""
            async for delta in self.client.stream_chat_completion(
                provider,
                request_messages,
                temperature=self.options.temperature,
                max_tokens=self.options.max_tokens,
            ):
                round_text += delta
                assistant.content += delta
                if on_update is not None:
                    on_update(assistant)

            calls = parse_tool_calls(round_text)
            if not calls or not self.tool_registry.enabled:
                break
            if rounds >= self.max_tool_rounds:
                logger.warning("Stopping after %d tool rounds", rounds)
                break
            rounds += 1

            results = []
            for call in calls:
                result = await self._execute_tool_call(call.name, call.arguments)
                results.append(format_tool_result(call.name, result))
            results_text = "\n".join(results)

            assistant.content += "\n" + results_text + "\n"
            if on_update is not None:
                on_update(assistant)

            request_messages = [
                *request_messages,
                ChatMessage(role=Role.ASSISTANT.value, content=round_text),
                ChatMessage(role=Role.USER.value, content=f"{results_text}\n\n{TOOL_RESULTS_PROMPT}"),
            ]

        logger.info("Assistant reply complete after %d tool rounds", rounds)
        return assistant

    def _discard_empty_reply(self) -> None:
        """Drop the streaming message if the request failed before any content arrived."""
        for message in self.thread.messages:
            if message.id == self.streaming_message_id:
                if not message.content:
                    self.thread.remove(message.id)
                return

    async def _execute_tool_call(self, name: str, arguments: dict | None) -> str:
        """Run one tool call; failures become the result text the model sees."""
        try:
            return await self.tool_registry.call_tool(name, arguments)
        except MCPClientError as e:
            logger.warning("Tool call %s failed: %s", name, e)
            return f"Tool error: {e}"

    async def _build_request(self, contexts: Sequence[tuple[AppContextSnapshot, bool]]) -> list[ChatMessage]:
        messages: list[ChatMessage] = []

        tools_prompt = await self.tool_registry.get_tools_system_prompt(self.mcp_servers)
        if tools_prompt:
            messages.append(ChatMessage(role=Role.SYSTEM.value, content=tools_prompt))

        messages.extend(message.to_chat_message() for message in self.thread.messages)

        for snapshot, is_mentioned in contexts:
            messages.append(
                ChatMessage(role=Role.SYSTEM.value, content=format_app_context(snapshot, is_mentioned=is_mentioned))
            )
        return messages

    def _collect_app_contexts(self, mentioned_apps: Sequence[RunningApp]) -> list[tuple[AppContextSnapshot, bool]]:
        """Snapshots permitted for this request, paired with whether they were @mentioned.

        Mentioned apps come first; the frontmost app is added when enabled
        and not already mentioned.
        """
        contexts: list[tuple[AppContextSnapshot, bool]] = []
        mentioned_ids = set()

        for app in mentioned_apps:
            mentioned_ids.add(app.bundle_identifier)
            snapshot = self.context_cache.capture(self.context_provider, app.bundle_identifier)
            if snapshot is not None and self._context_allowed(snapshot):
                contexts.append((snapshot, True))

        if self.always_attach_app_context:
            snapshot = self.context_provider.capture_frontmost()
            if (
                snapshot is not None
                and snapshot.bundle_identifier not in mentioned_ids
                and self._context_allowed(snapshot)
            ):
                contexts.append((snapshot, False))
        return contexts

    def _context_allowed(self, snapshot: AppContextSnapshot) -> bool:
        rule = self.permissions.ensure_rule(snapshot.bundle_identifier, snapshot.app_name)
        return rule.allow_context
