"""Transcript message dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from chat_context.context.messages import VALID_SPEAKERS, ContextFile, PreciseContext


@dataclass(frozen=True)
class ChatMetadata:
    """Request identifiers stamped on both messages of a turn."""
    source: str | None = None
    request_id: str | None = None
    chat_model: str | None = None

    def to_dict(self) -> dict:
        data = {}
        if self.source is not None:
            data["source"] = self.source
        if self.request_id is not None:
            data["requestID"] = self.request_id
        if self.chat_model is not None:
            data["chatModel"] = self.chat_model
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ChatMetadata:
        return cls(
            source=data.get("source"),
            request_id=data.get("requestID"),
            chat_model=data.get("chatModel"),
        )


@dataclass
class InteractionMessage:
    speaker: str
    text: str | None = None
    display_text: str | None = None
    prefix: str | None = None
    metadata: ChatMetadata | None = None

    def __post_init__(self):
        if self.speaker not in VALID_SPEAKERS:
            raise ValueError(
                f"speaker must be one of {VALID_SPEAKERS}, got {self.speaker!r}"
            )

    def copy(self) -> InteractionMessage:
        return replace(self)

    def to_dict(self) -> dict:
        data: dict = {"speaker": self.speaker}
        if self.text is not None:
            data["text"] = self.text
        if self.display_text is not None:
            data["displayText"] = self.display_text
        if self.prefix is not None:
            data["prefix"] = self.prefix
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> InteractionMessage:
        metadata = data.get("metadata")
        return cls(
            speaker=data["speaker"],
            text=data.get("text"),
            display_text=data.get("displayText"),
            prefix=data.get("prefix"),
            metadata=ChatMetadata.from_dict(metadata) if metadata else None,
        )


@dataclass
class ChatMessage(InteractionMessage):
    """A rendered transcript message, annotated with the context it used."""
    context_files: list[ContextFile] = field(default_factory=list)
    precise_context: list[PreciseContext] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["contextFiles"] = [f.to_dict() for f in self.context_files]
        data["preciseContext"] = [p.to_dict() for p in self.precise_context]
        return data
