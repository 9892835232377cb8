"""
Dialog data model.

Dialogs and messages are plain mutable dataclasses: pipeline stages update
them in place (tokens, language tags, merged texts).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Message:
    """
    A single chat message.

    Attributes:
        id:        message id within the dialog
        from_id:   sender id (None when the store has no sender)
        date:      unix timestamp in seconds
        text:      raw message text
        language:  ISO 639-1 code, None until language identification
        tokens:    normalized tokens, None until tokenization
    """
    id: int
    from_id: Optional[int] = None
    date: int = 0
    text: str = ""
    language: Optional[str] = None
    tokens: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from_id": self.from_id,
            "date": self.date,
            "text": self.text,
            "language": self.language,
            "tokens": list(self.tokens) if self.tokens is not None else None,
        }


@dataclass
class Dialog:
    """A conversation: id, display name and its messages in load order."""
    id: int
    name: str = ""
    messages: List[Message] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "messages": [m.to_dict() for m in self.messages],
        }
