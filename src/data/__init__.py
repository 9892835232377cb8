"""Data module — dialog/message model, stores, and the dialog source."""

from .models import Dialog, Message
from .dialog_source import (
    DialogStore,
    DialogSource,
    DataFrameDialogStore,
)

__all__ = [
    "Dialog",
    "Message",
    "DialogStore",
    "DialogSource",
    "DataFrameDialogStore",
]
