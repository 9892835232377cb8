"""
Pipeline Stages

Each stage transforms a Dialog in place and returns it. Stages are built once
per run from frozen configs and reused for every dialog, so expensive
resources (detector models, stopword lists) are loaded only once.

Stages:
    message_merger       → merge consecutive messages of one sender
    tokenizer            → message.tokens = Tokenizer.tokenize(message.text)
    language_identifier  → message.language = detector.detect(message.text)
    stopwords_remover    → drop stopwords of message.language from tokens

Message-level stages isolate failures: a message that raises is logged and
left as it was; the rest of the dialog is still processed.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from utils.logger import get_logger
from data.models import Dialog, Message
from preprocessing.tokenizer import Tokenizer
from preprocessing.stopwords import StopwordCache
from preprocessing.language_identifier import LanguageDetector

logger = get_logger("stages")


class PipelineStage(Protocol):
    """Transform a dialog and return the (possibly mutated) dialog."""

    name: str

    def process(self, dialog: Dialog) -> Dialog:
        ...


class MessageStage:
    """Base for stages that touch each message independently."""

    name = "message_stage"

    def process(self, dialog: Dialog) -> Dialog:
        for message in dialog.messages:
            try:
                self.process_message(message)
            except Exception as e:
                logger.error(
                    f"Stage '{self.name}' failed on message {message.id} "
                    f"of dialog {dialog.id}: {e}"
                )
        return dialog

    def process_message(self, message: Message) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ─────────────────────────────────────────────
# Message merger
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class MergerConfig:
    """
    Merge policy.

    Attributes:
        max_gap_seconds: largest date gap between consecutive messages of one
                         sender that still counts as the same turn
        separator:       joins the merged texts
    """
    max_gap_seconds: int = 60
    separator: str = "\n"

    def __post_init__(self):
        if self.max_gap_seconds < 0:
            raise ValueError("max_gap_seconds must be non-negative")

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "MergerConfig":
        config = config or {}
        return cls(
            max_gap_seconds=config.get("max_gap_seconds", 60),
            separator=config.get("separator", "\n"),
        )


class MessageMerger:
    """
    Merge adjacent messages that form one logical turn.

    Two neighbours belong to the same turn when they have the same known
    sender and the later one was sent at most ``max_gap_seconds`` after the
    earlier one. The first message of a turn is kept (id, sender, date,
    language) and absorbs the texts and tokens of the others.

    Example (max_gap_seconds=60):
        [A@0 "hi", A@30 "there", B@40 "yo", A@50 "ok"]
        → [A@0 "hi\\nthere", B@40 "yo", A@50 "ok"]
    """

    name = "message_merger"

    def __init__(self, config: Optional[MergerConfig] = None):
        self.config = config or MergerConfig()

    def process(self, dialog: Dialog) -> Dialog:
        merged: List[Message] = []
        previous: Optional[Message] = None

        for message in dialog.messages:
            if merged and self._same_turn(previous, message):
                self._absorb(merged[-1], message)
            else:
                merged.append(message)
            previous = message

        if len(merged) != len(dialog.messages):
            logger.debug(
                f"Dialog {dialog.id}: merged {len(dialog.messages)} → {len(merged)} messages"
            )
        dialog.messages[:] = merged
        return dialog

    def _same_turn(self, previous: Message, message: Message) -> bool:
        if previous.from_id is None or previous.from_id != message.from_id:
            return False
        gap = message.date - previous.date
        return 0 <= gap <= self.config.max_gap_seconds

    def _absorb(self, head: Message, message: Message) -> None:
        texts = [t for t in (head.text, message.text) if t]
        head.text = self.config.separator.join(texts)
        if head.tokens is not None and message.tokens is not None:
            head.tokens = head.tokens + message.tokens
        else:
            head.tokens = None

    def __repr__(self) -> str:
        return f"MessageMerger(max_gap_seconds={self.config.max_gap_seconds})"


# ─────────────────────────────────────────────
# Message-level stages
# ─────────────────────────────────────────────

class TokenizerStage(MessageStage):
    """Store the token sequence of every message."""

    name = "tokenizer"

    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self.tokenizer = tokenizer or Tokenizer()

    def process_message(self, message: Message) -> None:
        message.tokens = self.tokenizer.tokenize(message.text)

    def __repr__(self) -> str:
        return f"TokenizerStage({self.tokenizer.config})"


class LanguageIdentifierStage(MessageStage):
    """
    Tag every message with its detected language.

    Each message is classified on its own text only. Without a detector the
    stage is a no-op and messages stay untagged.
    """

    name = "language_identifier"

    def __init__(self, detector: Optional[LanguageDetector] = None):
        self.detector = detector
        if detector is None:
            logger.warning("No language detector; messages will stay untagged")

    def process(self, dialog: Dialog) -> Dialog:
        if self.detector is None:
            return dialog
        return super().process(dialog)

    def process_message(self, message: Message) -> None:
        message.language = self.detector.detect(message.text)

    def __repr__(self) -> str:
        backend = self.detector.backend if self.detector is not None else None
        return f"LanguageIdentifierStage(backend={backend})"


class StopwordsRemoverStage(MessageStage):
    """
    Remove stopwords of each message's language from its tokens.

    Messages with no language or no tokens yet pass through unchanged.
    """

    name = "stopwords_remover"

    def __init__(self, stopwords: Optional[StopwordCache] = None):
        self.stopwords = stopwords if stopwords is not None else StopwordCache()

    def process_message(self, message: Message) -> None:
        if message.language is None or message.tokens is None:
            return
        stopwords = self.stopwords.get(message.language)
        if stopwords:
            message.tokens = [t for t in message.tokens if t not in stopwords]


# ─────────────────────────────────────────────
# Factory
# ─────────────────────────────────────────────

# Every stage name, in default execution order
STAGE_NAMES = (
    MessageMerger.name,
    TokenizerStage.name,
    LanguageIdentifierStage.name,
    StopwordsRemoverStage.name,
)


def build_stage(
    name: str,
    config: Optional[Dict[str, Any]] = None,
    detector: Optional[LanguageDetector] = None,
    stopwords: Optional[StopwordCache] = None,
) -> PipelineStage:
    """
    Build one stage from the ``preprocessing`` config section.

    Args:
        name:      stage name (see STAGE_NAMES)
        config:    preprocessing config dict (per-stage sub-sections)
        detector:  language detector for language_identifier, may be None
        stopwords: shared cache for stopwords_remover

    Raises:
        ValueError: for unknown stage names
    """
    config = config or {}
    if name == MessageMerger.name:
        return MessageMerger(MergerConfig.from_config(config.get("message_merger")))
    if name == TokenizerStage.name:
        return TokenizerStage(Tokenizer.from_config(config.get("tokenizer")))
    if name == LanguageIdentifierStage.name:
        return LanguageIdentifierStage(detector)
    if name == StopwordsRemoverStage.name:
        if stopwords is None:
            stopwords = StopwordCache.from_config(config.get("stopwords"))
        return StopwordsRemoverStage(stopwords)
    raise ValueError(f"Unknown stage: {name}; expected any of {list(STAGE_NAMES)}")
