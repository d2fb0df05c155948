"""Interaction: one transcript turn and the context gathered for it.

The context arrives as an awaitable produced by the assembler. It is resolved
at most once, and every read re-applies the ignore rules, storing the
filtered fragments back so repeated reads converge on the same list.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime, timezone

from chat_context.context.ignore_filter import IgnoreFilter
from chat_context.context.messages import (
    ContextFile,
    ContextFragment,
    ContextMessage,
    PreciseContext,
    flatten_fragments,
    pair_context_messages,
)
from chat_context.transcript.messages import ChatMessage, ChatMetadata, InteractionMessage

logger = logging.getLogger(__name__)

ContextSource = Awaitable[list[ContextMessage]] | list[ContextMessage] | None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _ContextCache:
    """Holds either the unresolved context awaitable or the resolved fragments."""

    def __init__(self, source: ContextSource):
        self._pending: Awaitable[list[ContextMessage]] | None = None
        self._fragments: list[ContextFragment] | None = None
        self._lock: asyncio.Lock | None = None
        if source is None:
            self._fragments = []
        elif isinstance(source, list):
            self._fragments = pair_context_messages(source)
        else:
            self._pending = source

    @property
    def resolved(self) -> bool:
        return self._fragments is not None

    async def get(self) -> list[ContextFragment]:
        if self._fragments is not None:
            return self._fragments
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._fragments is None:
                # The awaitable is consumed here whatever happens; a failed or
                # cancelled retrieval leaves the turn with no context.
                pending, self._pending = self._pending, None
                messages: list[ContextMessage] = []
                if pending is not None:
                    try:
                        messages = list(await pending or [])
                    except Exception:
                        logger.exception("Context retrieval failed, continuing without context")
                self._fragments = pair_context_messages(messages)
        return self._fragments

    def store(self, fragments: list[ContextFragment]) -> None:
        self._fragments = fragments


def _is_ignored(file: ContextFile, ignore_filter: IgnoreFilter) -> bool:
    if file.uri and ignore_filter.is_ignored(file.uri):
        return True
    # Embedding results carry repo-relative paths rather than local URIs
    if file.source == "embeddings" and file.repo_name:
        return ignore_filter.is_ignored_path(file.repo_name, file.file_name)
    return False


def remove_ignored_fragments(
    fragments: list[ContextFragment], ignore_filter: IgnoreFilter,
) -> list[ContextFragment]:
    """Drop every fragment whose file is ignored, together with its response."""
    kept = []
    for fragment in fragments:
        file = fragment.file
        if file is not None and _is_ignored(file, ignore_filter):
            logger.debug("Dropping ignored context file %s", file.file_name)
            continue
        kept.append(fragment)
    return kept


class Interaction:
    """One (human, assistant) exchange plus its candidate and used context."""

    def __init__(
        self,
        human_message: InteractionMessage,
        assistant_message: InteractionMessage,
        full_context: ContextSource,
        used_context_files: list[ContextFile] | None = None,
        used_precise_context: list[PreciseContext] | None = None,
        timestamp: str | None = None,
        *,
        ignore_filter: IgnoreFilter | None = None,
    ):
        self._human_message = human_message
        self._assistant_message = assistant_message
        self._context = _ContextCache(full_context)
        self._used_context_files = list(used_context_files or [])
        self._used_precise_context = list(used_precise_context or [])
        self._timestamp = timestamp or _now_iso()
        self._ignore_filter = ignore_filter or IgnoreFilter.empty()
        self._metadata: ChatMetadata | None = None

    @property
    def timestamp(self) -> str:
        return self._timestamp

    @property
    def context_resolved(self) -> bool:
        return self._context.resolved

    async def _filtered_fragments(self) -> list[ContextFragment]:
        fragments = await self._context.get()
        filtered = remove_ignored_fragments(fragments, self._ignore_filter)
        self._context.store(filtered)
        return filtered

    async def get_full_context(self) -> list[ContextMessage]:
        """Filtered context messages, as a new list the caller may mutate."""
        return flatten_fragments(await self._filtered_fragments())

    async def get_context_fragments(self) -> list[ContextFragment]:
        return list(await self._filtered_fragments())

    async def has_context(self) -> bool:
        return len(await self._filtered_fragments()) > 0

    def set_metadata(self, metadata: ChatMetadata) -> None:
        self._metadata = metadata
        self._human_message.metadata = metadata
        self._assistant_message.metadata = metadata

    def get_human_message(self) -> InteractionMessage:
        return self._human_message.copy()

    def get_assistant_message(self) -> InteractionMessage:
        return self._assistant_message.copy()

    def set_assistant_message(self, assistant_message: InteractionMessage) -> None:
        message = assistant_message.copy()
        if self._metadata is not None:
            message.metadata = self._metadata
        self._assistant_message = message

    def set_used_context(
        self,
        used_context_files: list[ContextFile],
        used_precise_context: list[PreciseContext],
    ) -> None:
        self._used_context_files = list(used_context_files)
        self._used_precise_context = list(used_precise_context)

    def _render(self, message: InteractionMessage) -> ChatMessage:
        return ChatMessage(
            speaker=message.speaker,
            text=message.text,
            display_text=message.display_text,
            prefix=message.prefix,
            metadata=message.metadata,
            context_files=list(self._used_context_files),
            precise_context=list(self._used_precise_context),
        )

    def to_chat(self) -> list[ChatMessage]:
        """Render the human/assistant pair with the used context. Never awaits."""
        return [self._render(self._human_message), self._render(self._assistant_message)]

    async def to_chat_after_context(self) -> list[ChatMessage]:
        await self._context.get()
        return self.to_chat()

    async def to_json(self) -> dict:
        """Serialize the turn. The stored context is written without refiltering.

        ``context`` duplicates ``fullContext`` for readers of the older format.
        """
        full_context = [m.to_dict() for m in flatten_fragments(await self._context.get())]
        return {
            "humanMessage": self._human_message.to_dict(),
            "assistantMessage": self._assistant_message.to_dict(),
            "fullContext": full_context,
            "usedContextFiles": [f.to_dict() for f in self._used_context_files],
            "usedPreciseContext": [p.to_dict() for p in self._used_precise_context],
            "timestamp": self._timestamp,
            "context": list(full_context),
        }

    @classmethod
    def from_json(cls, data: dict, ignore_filter: IgnoreFilter | None = None) -> Interaction:
        """Restore a serialized turn. Accepts ``fullContext`` or the legacy ``context``."""
        raw_context = data.get("fullContext")
        if raw_context is None:
            raw_context = data.get("context") or []
        interaction = cls(
            human_message=InteractionMessage.from_dict(data["humanMessage"]),
            assistant_message=InteractionMessage.from_dict(data["assistantMessage"]),
            full_context=[ContextMessage.from_dict(m) for m in raw_context],
            used_context_files=[
                ContextFile.from_dict(f) for f in data.get("usedContextFiles") or []
            ],
            used_precise_context=[
                PreciseContext.from_dict(p) for p in data.get("usedPreciseContext") or []
            ],
            timestamp=data["timestamp"],
            ignore_filter=ignore_filter,
        )
        metadata = interaction._human_message.metadata
        if metadata is not None:
            interaction._metadata = metadata
        return interaction
