"""Context message dataclasses and fragment pairing.

Wire names are camelCase so serialized transcripts stay readable by
existing consumers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

VALID_SPEAKERS = ("human", "assistant")
# Sources produced by this package. Transcripts may carry others.
KNOWN_SOURCES = ("embeddings", "file-scan", "selection", "user", "editor", "search")

DEFAULT_CONTEXT_RESPONSE = "Ok."


@dataclass(frozen=True)
class Position:
    line: int
    character: int = 0


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    def to_dict(self) -> dict:
        return {
            "start": {"line": self.start.line, "character": self.start.character},
            "end": {"line": self.end.line, "character": self.end.character},
        }

    @classmethod
    def from_dict(cls, data: dict) -> Range:
        return cls(
            start=Position(data["start"]["line"], data["start"].get("character", 0)),
            end=Position(data["end"]["line"], data["end"].get("character", 0)),
        )


@dataclass(frozen=True)
class ContextFile:
    """Provenance of a context message: which file it came from and how."""
    file_name: str
    uri: str | None = None
    repo_name: str | None = None
    source: str | None = None
    content: str | None = None

    def to_dict(self) -> dict:
        data: dict = {"fileName": self.file_name}
        if self.uri is not None:
            data["uri"] = self.uri
        if self.repo_name is not None:
            data["repoName"] = self.repo_name
        if self.source is not None:
            data["source"] = self.source
        if self.content is not None:
            data["content"] = self.content
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ContextFile:
        return cls(
            file_name=data["fileName"],
            uri=data.get("uri"),
            repo_name=data.get("repoName"),
            source=data.get("source"),
            content=data.get("content"),
        )


@dataclass(frozen=True)
class PreciseSymbol:
    fully_qualified_name: str
    fuzzy_name: str | None = None


@dataclass(frozen=True)
class PreciseContext:
    """A resolved symbol-level reference consulted for a response."""
    symbol: PreciseSymbol
    file_path: str
    definition_snippet: str
    hover_text: list[str] = field(default_factory=list)
    range: Range | None = None

    def to_dict(self) -> dict:
        data = {
            "symbol": {
                "fullyQualifiedName": self.symbol.fully_qualified_name,
            },
            "filePath": self.file_path,
            "definitionSnippet": self.definition_snippet,
            "hoverText": list(self.hover_text),
        }
        if self.symbol.fuzzy_name is not None:
            data["symbol"]["fuzzyName"] = self.symbol.fuzzy_name
        if self.range is not None:
            data["range"] = self.range.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> PreciseContext:
        symbol = data["symbol"]
        return cls(
            symbol=PreciseSymbol(
                fully_qualified_name=symbol["fullyQualifiedName"],
                fuzzy_name=symbol.get("fuzzyName"),
            ),
            file_path=data["filePath"],
            definition_snippet=data["definitionSnippet"],
            hover_text=list(data.get("hoverText", [])),
            range=Range.from_dict(data["range"]) if data.get("range") else None,
        )


@dataclass(frozen=True)
class ContextMessage:
    """One message of retrieved context, as sent to the model."""
    speaker: str
    text: str
    file: ContextFile | None = None
    precise_context: PreciseContext | None = None

    def __post_init__(self):
        if self.speaker not in VALID_SPEAKERS:
            raise ValueError(
                f"speaker must be one of {VALID_SPEAKERS}, got {self.speaker!r}"
            )

    def to_dict(self) -> dict:
        data: dict = {"speaker": self.speaker, "text": self.text}
        if self.file is not None:
            data["file"] = self.file.to_dict()
        if self.precise_context is not None:
            data["preciseContext"] = self.precise_context.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ContextMessage:
        file = data.get("file")
        precise = data.get("preciseContext")
        return cls(
            speaker=data["speaker"],
            text=data.get("text", ""),
            file=ContextFile.from_dict(file) if file else None,
            precise_context=PreciseContext.from_dict(precise) if precise else None,
        )


@dataclass(frozen=True)
class ContextFragment:
    """A context message and the assistant reply paired with it.

    Messages that are not part of a pair are carried alone, with no response.
    """
    message: ContextMessage
    response: ContextMessage | None = None

    @property
    def file(self) -> ContextFile | None:
        if self.message.speaker != "human":
            return None
        return self.message.file

    def messages(self) -> list[ContextMessage]:
        if self.response is None:
            return [self.message]
        return [self.message, self.response]


def make_context_message_with_response(
    text: str,
    file: ContextFile,
    response: str = DEFAULT_CONTEXT_RESPONSE,
) -> list[ContextMessage]:
    """Build the human/assistant pair for one piece of file context."""
    return [
        ContextMessage(speaker="human", text=text, file=file),
        ContextMessage(speaker="assistant", text=response),
    ]


def pair_context_messages(messages: list[ContextMessage]) -> list[ContextFragment]:
    """Group a flat message list into fragments without reordering.

    A human message carrying a file pairs with the assistant message directly
    after it. Anything else becomes a single-message fragment, so a missing
    acknowledgement never causes an unrelated message to be paired.
    """
    fragments: list[ContextFragment] = []
    i = 0
    while i < len(messages):
        message = messages[i]
        following = messages[i + 1] if i + 1 < len(messages) else None
        if (
            message.speaker == "human"
            and message.file is not None
            and following is not None
            and following.speaker == "assistant"
        ):
            fragments.append(ContextFragment(message=message, response=following))
            i += 2
            continue
        fragments.append(ContextFragment(message=message))
        i += 1
    return fragments


def flatten_fragments(fragments: list[ContextFragment]) -> list[ContextMessage]:
    messages: list[ContextMessage] = []
    for fragment in fragments:
        messages.extend(fragment.messages())
    return messages
