"""
Test suite for the dialog source and the DataFrame-backed store
"""

import json
import sys
import pytest
import pandas as pd
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data.models import Dialog, Message
from data.dialog_source import DataFrameDialogStore, DialogSource


DIALOGS = [
    {"id": 10, "name": "general"},
    {"id": 20, "name": "random"},
]

MESSAGES = [
    {"id": 3, "dialog_id": 10, "from_id": 1, "date": 300, "text": "third"},
    {"id": 1, "dialog_id": 10, "from_id": 2, "date": 100, "text": "first"},
    {"id": 2, "dialog_id": 10, "from_id": 1, "date": 200, "text": "second"},
    {"id": 5, "dialog_id": 20, "from_id": None, "date": 200, "text": None},
    {"id": 4, "dialog_id": 20, "from_id": 3, "date": 200, "text": "same date"},
]


@pytest.fixture
def store():
    return DataFrameDialogStore.from_records(DIALOGS, MESSAGES)


class TestDataFrameDialogStore:

    def test_dialogs_in_store_order(self, store):
        dialogs = list(store.get_dialogs())
        assert [(d.id, d.name) for d in dialogs] == [(10, "general"), (20, "random")]
        assert all(d.messages == [] for d in dialogs)

    def test_messages_sorted_by_date_then_id(self, store):
        messages = store.get_messages(10)
        assert [m.id for m in messages] == [1, 2, 3]
        assert [m.text for m in messages] == ["first", "second", "third"]

    def test_ties_broken_by_id(self, store):
        assert [m.id for m in store.get_messages(20)] == [4, 5]

    def test_missing_sender_and_text(self, store):
        message = store.get_messages(20)[1]
        assert message.from_id is None
        assert message.text == ""
        assert message.language is None
        assert message.tokens is None

    def test_inclusive_date_range(self, store):
        assert [m.id for m in store.get_messages(10, 200, 300)] == [2, 3]
        assert [m.id for m in store.get_messages(10, 0, 200)] == [1, 2]
        assert [m.id for m in store.get_messages(10, 0, 0)] == [1, 2, 3]

    def test_unknown_dialog_has_no_messages(self, store):
        assert store.get_messages(99) == []

    def test_missing_column_raises(self):
        with pytest.raises(ValueError):
            DataFrameDialogStore(pd.DataFrame(DIALOGS), pd.DataFrame([{"id": 1, "text": "x"}]))

    def test_optional_columns_filled(self):
        store = DataFrameDialogStore(
            pd.DataFrame([{"id": 1}]),
            pd.DataFrame([{"id": 1, "dialog_id": 1, "date": 5, "text": "hi"}]),
        )
        dialog = next(iter(store.get_dialogs()))
        assert dialog.name == ""
        assert store.get_messages(1)[0].from_id is None

    def test_empty_records(self):
        store = DataFrameDialogStore.from_records([], [])
        assert list(store.get_dialogs()) == []

    def test_from_jsonl(self, tmp_path):
        dialogs_path = tmp_path / "dialogs.jsonl"
        messages_path = tmp_path / "messages.jsonl"
        dialogs_path.write_text("\n".join(json.dumps(d) for d in DIALOGS), encoding="utf-8")
        messages_path.write_text("\n".join(json.dumps(m) for m in MESSAGES), encoding="utf-8")

        store = DataFrameDialogStore.from_json(dialogs_path, messages_path)

        assert [d.id for d in store.get_dialogs()] == [10, 20]
        assert [m.date for m in store.get_messages(10)] == [100, 200, 300]

    def test_from_csv(self, tmp_path):
        dialogs_path = tmp_path / "dialogs.csv"
        messages_path = tmp_path / "messages.csv"
        pd.DataFrame(DIALOGS).to_csv(dialogs_path, index=False)
        pd.DataFrame(MESSAGES).to_csv(messages_path, index=False)

        store = DataFrameDialogStore.from_csv(dialogs_path, messages_path)

        assert [m.text for m in store.get_messages(10)] == ["first", "second", "third"]
        assert store.get_messages(20)[1].from_id is None

    def test_missing_export_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DataFrameDialogStore.from_json(tmp_path / "a.jsonl", tmp_path / "b.jsonl")


class TestDialogSource:

    def test_iterates_without_loading_messages(self, store):
        source = DialogSource(store)
        assert [d.messages for d in source] == [[], []]

    def test_each_pass_starts_over(self, store):
        source = DialogSource(store)
        assert len(list(source)) == len(list(source)) == 2

    def test_load_messages_populates_dialog(self, store):
        source = DialogSource(store, date_from=150)
        dialog = next(iter(source))

        result = source.load_messages(dialog)

        assert result is dialog
        assert [m.id for m in dialog.messages] == [2, 3]

    def test_iter_loaded(self, store):
        source = DialogSource(store, date_to=150)
        loaded = list(source.iter_loaded())
        assert [[m.id for m in d.messages] for d in loaded] == [[1], []]

    def test_lazy_iteration(self):
        fetched = []

        class LazyStore:
            def get_dialogs(self):
                for i in (1, 2, 3):
                    fetched.append(i)
                    yield Dialog(id=i)

            def get_messages(self, dialog_id, date_from=0, date_to=0):
                return [Message(id=1, text=f"dialog {dialog_id}")]

        loaded = DialogSource(LazyStore()).iter_loaded()
        first = next(loaded)

        assert first.id == 1
        assert fetched == [1]

    def test_store_errors_propagate(self):
        class FailingStore:
            def get_dialogs(self):
                return [Dialog(id=1)]

            def get_messages(self, dialog_id, date_from=0, date_to=0):
                raise ConnectionError("db down")

        source = DialogSource(FailingStore())
        with pytest.raises(ConnectionError):
            list(source.iter_loaded())

    def test_invalid_range_raises(self, store):
        with pytest.raises(ValueError):
            DialogSource(store, date_from=200, date_to=100)

    def test_negative_dates_raise(self, store):
        with pytest.raises(ValueError):
            DialogSource(store, date_from=-1)

    def test_from_config(self, store):
        source = DialogSource.from_config(store, {"date_from": 5, "date_to": 10})
        assert (source.date_from, source.date_to) == (5, 10)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
