"""
Dialog Source

Lazy, date-filtered iteration over the dialogs of a store, with messages
fetched on demand.

DialogStore is the port to the document database; DataFrameDialogStore is a
file/DataFrame-backed implementation for exported chat dumps and tests.

Expected columns:
    dialogs:   id, name
    messages:  id, dialog_id, date (unix seconds), text, [from_id]
"""

from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Union

import pandas as pd

from utils.logger import get_logger
from data.models import Dialog, Message

logger = get_logger("dialog_source")

DIALOG_COLUMNS = ["id"]
MESSAGE_COLUMNS = ["id", "dialog_id", "date", "text"]


class DialogStore(Protocol):
    """Storage operations the dialog source needs."""

    def get_dialogs(self) -> Iterable[Dialog]:
        ...

    def get_messages(self, dialog_id: int, date_from: int = 0, date_to: int = 0) -> List[Message]:
        ...


class DialogSource:
    """
    Finite, lazy sequence of dialogs from a store.

    Each ``iter(source)`` starts a fresh pass in store order; dialogs come
    without messages until ``load_messages`` is called (``iter_loaded`` does
    both).

    Args:
        store:      DialogStore implementation
        date_from:  inclusive lower bound (unix seconds), 0 = unbounded
        date_to:    inclusive upper bound (unix seconds), 0 = unbounded
    """

    def __init__(self, store: DialogStore, date_from: int = 0, date_to: int = 0):
        if date_from < 0 or date_to < 0:
            raise ValueError("Dates must be non-negative unix timestamps")
        if date_to and date_to < date_from:
            raise ValueError(f"date_to ({date_to}) is earlier than date_from ({date_from})")
        self.store = store
        self.date_from = date_from
        self.date_to = date_to

    @classmethod
    def from_config(cls, store: DialogStore, config: Optional[dict]) -> "DialogSource":
        """Build from the ``source`` section of the preprocessing config."""
        config = config or {}
        return cls(store, date_from=config.get("date_from", 0), date_to=config.get("date_to", 0))

    def __iter__(self) -> Iterator[Dialog]:
        yield from self.store.get_dialogs()

    def load_messages(self, dialog: Dialog) -> Dialog:
        """
        Populate ``dialog.messages`` from the store.

        Store errors propagate; skipping the dialog is the caller's decision.
        """
        dialog.messages = list(
            self.store.get_messages(dialog.id, self.date_from, self.date_to)
        )
        return dialog

    def iter_loaded(self) -> Iterator[Dialog]:
        """Yield dialogs one at a time with their messages loaded."""
        for dialog in self:
            yield self.load_messages(dialog)


# ─────────────────────────────────────────────
# DataFrame-backed store
# ─────────────────────────────────────────────

class DataFrameDialogStore:
    """
    DialogStore over two pandas DataFrames.

    Usage:
        store = DataFrameDialogStore.from_json("dialogs.jsonl", "messages.jsonl")
        source = DialogSource(store, date_from=1514764800)
    """

    def __init__(self, dialogs: pd.DataFrame, messages: pd.DataFrame):
        self.dialogs = self._validate(dialogs, DIALOG_COLUMNS, "dialogs")
        self.messages = self._validate(messages, MESSAGE_COLUMNS, "messages")
        if "name" not in self.dialogs.columns:
            self.dialogs["name"] = ""
        if "from_id" not in self.messages.columns:
            self.messages["from_id"] = None
        self.messages["text"] = self.messages["text"].fillna("").astype(str)
        logger.info(
            f"Dialog store: {len(self.dialogs)} dialogs, {len(self.messages)} messages"
        )

    # ── Input loaders ────────────────────────────────────────────────────────

    @classmethod
    def from_records(
        cls,
        dialogs: List[Dict],
        messages: List[Dict],
    ) -> "DataFrameDialogStore":
        """Build from in-memory lists of dicts."""
        return cls(
            pd.DataFrame(dialogs, columns=None if dialogs else DIALOG_COLUMNS),
            pd.DataFrame(messages, columns=None if messages else MESSAGE_COLUMNS),
        )

    @classmethod
    def from_json(
        cls,
        dialogs_path: Union[str, Path],
        messages_path: Union[str, Path],
    ) -> "DataFrameDialogStore":
        """Load JSON or JSONL exports."""
        return cls(cls._read_json(dialogs_path), cls._read_json(messages_path))

    @classmethod
    def from_csv(
        cls,
        dialogs_path: Union[str, Path],
        messages_path: Union[str, Path],
    ) -> "DataFrameDialogStore":
        """Load CSV exports."""
        return cls(
            pd.read_csv(cls._existing(dialogs_path), encoding="utf-8"),
            pd.read_csv(cls._existing(messages_path), encoding="utf-8"),
        )

    @staticmethod
    def _existing(path: Union[str, Path]) -> Path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Dialog export not found: {path}")
        return path

    @classmethod
    def _read_json(cls, path: Union[str, Path]) -> pd.DataFrame:
        path = cls._existing(path)
        try:
            # Try JSONL first
            return pd.read_json(path, lines=True, convert_dates=False)
        except ValueError:
            return pd.read_json(path, convert_dates=False)

    @staticmethod
    def _validate(df: pd.DataFrame, required: List[str], what: str) -> pd.DataFrame:
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ValueError(
                f"Missing required {what} column(s) {missing}. Found: {list(df.columns)}"
            )
        before = len(df)
        df = df.dropna(subset=[c for c in required if c != "text"]).copy()
        dropped = before - len(df)
        if dropped:
            logger.warning(f"Dropped {dropped} {what} rows with null keys")
        return df

    # ── DialogStore ──────────────────────────────────────────────────────────

    def get_dialogs(self) -> Iterator[Dialog]:
        for row in self.dialogs.itertuples(index=False):
            name = row.name if isinstance(row.name, str) else ""
            yield Dialog(id=int(row.id), name=name)

    def get_messages(self, dialog_id: int, date_from: int = 0, date_to: int = 0) -> List[Message]:
        df = self.messages[self.messages["dialog_id"] == dialog_id]
        if date_from:
            df = df[df["date"] >= date_from]
        if date_to:
            df = df[df["date"] <= date_to]
        df = df.sort_values(["date", "id"], kind="stable")

        return [
            Message(
                id=int(row.id),
                from_id=None if pd.isna(row.from_id) else int(row.from_id),
                date=int(row.date),
                text=row.text,
            )
            for row in df.itertuples(index=False)
        ]
