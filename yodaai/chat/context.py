"""Context captured from other applications.

Capturing on-screen text and inserting text into focused fields are
platform services; they are reached through the `AppContextProvider`
protocol so the chat session stays platform-neutral. Per-app permission
rules decide whether captured context may be attached to a request and
whether replies may be inserted back.
"""

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TTL_SECONDS = 60.0


@dataclass(frozen=True)
class RunningApp:
    bundle_identifier: str
    app_name: str


@dataclass(frozen=True)
class AppContextSnapshot:
    """Text context captured from an application.

    Attributes:
        bundle_identifier: Application identifier (e.g. "com.google.Chrome")
        app_name: Display name
        window_title: Title of the focused window
        focused_role: Accessibility role of the focused element
        focused_value_preview: Text of the focused element, possibly truncated
        focused_is_secure: True for password fields; their value is never sent
    """

    bundle_identifier: str
    app_name: str
    window_title: str | None = None
    focused_role: str | None = None
    focused_value_preview: str | None = None
    focused_is_secure: bool = False


class AppContextProvider(Protocol):
    """Protocol for platform context capture and text insertion."""

    def capture_frontmost(self) -> AppContextSnapshot | None:
        """Capture context from the frontmost application."""
        ...

    def capture_app(self, bundle_identifier: str) -> AppContextSnapshot | None:
        """Capture context from a specific running application."""
        ...

    def list_running_apps(self) -> list[RunningApp]:
        """List applications that can be @mentioned."""
        ...

    def insert_text(self, text: str) -> bool:
        """Insert text into the focused field; returns True on success."""
        ...


class NullAppContextProvider:
    """Provider used when no platform integration is available."""

    def capture_frontmost(self) -> AppContextSnapshot | None:
        return None

    def capture_app(self, bundle_identifier: str) -> AppContextSnapshot | None:
        return None

    def list_running_apps(self) -> list[RunningApp]:
        return []

    def insert_text(self, text: str) -> bool:
        return False


@dataclass
class AppPermissionRule:
    """Per-application permissions.

    Attributes:
        allow_context: Context from this app may be attached to requests
        allow_insert: Replies may be inserted into this app
    """

    bundle_identifier: str
    display_name: str
    allow_context: bool = True
    allow_insert: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class AppPermissionsStore:
    """In-memory permission rules keyed by bundle identifier."""

    def __init__(self, default_allow_context: bool = True, default_allow_insert: bool = True) -> None:
        self.default_allow_context = default_allow_context
        self.default_allow_insert = default_allow_insert
        self._rules: dict[str, AppPermissionRule] = {}

    def rule(self, bundle_identifier: str) -> AppPermissionRule | None:
        return self._rules.get(bundle_identifier)

    def ensure_rule(self, bundle_identifier: str, display_name: str) -> AppPermissionRule:
        """Return the rule for an app, creating one with the defaults if missing."""
        existing = self._rules.get(bundle_identifier)
        if existing is not None:
            return existing
        created = AppPermissionRule(
            bundle_identifier=bundle_identifier,
            display_name=display_name,
            allow_context=self.default_allow_context,
            allow_insert=self.default_allow_insert,
        )
        self._rules[bundle_identifier] = created
        return created

    def set_rule(
        self,
        bundle_identifier: str,
        display_name: str,
        allow_context: bool | None = None,
        allow_insert: bool | None = None,
    ) -> AppPermissionRule:
        rule = self.ensure_rule(bundle_identifier, display_name)
        if allow_context is not None:
            rule.allow_context = allow_context
        if allow_insert is not None:
            rule.allow_insert = allow_insert
        rule.updated_at = datetime.now(UTC)
        return rule

    def rules(self) -> list[AppPermissionRule]:
        return sorted(self._rules.values(), key=lambda rule: rule.display_name.lower())


@dataclass
class CachedAppContent:
    """A captured snapshot with capture-time tracking."""

    snapshot: AppContextSnapshot
    captured_at: float

    def is_older_than(self, seconds: float, now: float) -> bool:
        return now - self.captured_at > seconds


class AppContextCache:
    """Cache of the latest snapshot per application.

    Snapshots captured in the background stay available for @mentions;
    entries older than the TTL are treated as missing.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CONTENT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: dict[str, CachedAppContent] = {}

    def store(self, snapshot: AppContextSnapshot) -> None:
        self._cache[snapshot.bundle_identifier] = CachedAppContent(snapshot, self._clock())

    def get(self, bundle_identifier: str) -> AppContextSnapshot | None:
        cached = self._cache.get(bundle_identifier)
        if cached is None:
            return None
        if cached.is_older_than(self.ttl_seconds, self._clock()):
            del self._cache[bundle_identifier]
            return None
        return cached.snapshot

    def has_fresh_content(self, bundle_identifier: str) -> bool:
        return self.get(bundle_identifier) is not None

    def capture(self, provider: AppContextProvider, bundle_identifier: str) -> AppContextSnapshot | None:
        """Return a fresh cached snapshot, capturing through the provider when needed."""
        snapshot = self.get(bundle_identifier)
        if snapshot is not None:
            return snapshot
        snapshot = provider.capture_app(bundle_identifier)
        if snapshot is not None:
            self.store(snapshot)
        return snapshot

    def clear(self) -> None:
        self._cache.clear()


def format_app_context(snapshot: AppContextSnapshot, is_mentioned: bool = False) -> str:
    """Render a snapshot as a system message for the model."""
    if is_mentioned:
        lines = ["YoDaAI @mentioned app context:"]
    else:
        lines = ["YoDaAI app context (frontmost macOS app):"]
    lines.append(f"- App: {snapshot.app_name} ({snapshot.bundle_identifier})")

    if snapshot.window_title:
        lines.append(f"- Window: {snapshot.window_title}")
    if snapshot.focused_role:
        lines.append(f"- Focused role: {snapshot.focused_role}")

    if snapshot.focused_is_secure:
        lines.append("- Content: (redacted: secure field)")
    elif snapshot.focused_value_preview:
        lines.append(f"- Content: {snapshot.focused_value_preview}")

    lines.append("Instruction: Use this context only to answer the user's request, and do not invent UI details.")
    return "\n".join(lines)
