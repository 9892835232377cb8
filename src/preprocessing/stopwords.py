"""
Stopword Cache

Lazily loads per-language stopword lists and keeps them for the rest of a
run, so each list is read once no matter how many dialogs need it.

Resource layout (default loader):
    <directory>/<language>.txt   one word per line, '#' starts a comment
"""

import threading
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Union

from utils.logger import get_logger

logger = get_logger("stopwords")

DEFAULT_STOPWORDS_DIR = Path(__file__).parent / "resources" / "stopwords"

StopwordLoader = Callable[[str], FrozenSet[str]]


def load_stopword_file(
    directory: Union[str, Path],
    language: str,
) -> FrozenSet[str]:
    """
    Read ``<directory>/<language>.txt`` into a frozen set.

    A missing or unreadable file is not an error: it yields an empty set and
    a warning, so messages in that language keep all their tokens.
    """
    path = Path(directory) / f"{language}.txt"
    if not path.exists():
        logger.warning(f"No stopword list for '{language}' at {path}")
        return frozenset()

    try:
        with open(path, encoding="utf-8") as f:
            words = {
                line.split("#", 1)[0].strip().lower()
                for line in f
            }
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read stopword list {path}: {e}")
        return frozenset()

    words.discard("")
    logger.info(f"Loaded {len(words)} stopwords for '{language}'")
    return frozenset(words)


class StopwordCache:
    """
    Process-wide, populate-on-demand stopword sets keyed by language code.

    Each language is loaded at most once, also under concurrent first access
    (one lock per language). ``clear()`` drops every set at the end of a run.

    Args:
        loader:    callable(language) -> frozenset; defaults to reading text
                   files from ``directory``
        directory: stopword directory for the default loader
    """

    def __init__(
        self,
        loader: Optional[StopwordLoader] = None,
        directory: Optional[Union[str, Path]] = None,
    ):
        self.directory = Path(directory) if directory else DEFAULT_STOPWORDS_DIR
        self._loader = loader or (lambda language: load_stopword_file(self.directory, language))
        self._sets: Dict[str, FrozenSet[str]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    @classmethod
    def from_config(cls, config: Optional[dict]) -> "StopwordCache":
        """Build from the ``stopwords`` section of the preprocessing config."""
        config = config or {}
        return cls(directory=config.get("directory"))

    def get(self, language: str) -> FrozenSet[str]:
        """Return the stopword set for ``language``, loading it on first use."""
        cached = self._sets.get(language)
        if cached is not None:
            return cached

        with self._guard:
            lock = self._locks.setdefault(language, threading.Lock())

        with lock:
            # Another thread may have finished loading while we waited
            cached = self._sets.get(language)
            if cached is None:
                cached = frozenset(self._loader(language))
                self._sets[language] = cached
        return cached

    def clear(self) -> None:
        """Release all cached sets."""
        with self._guard:
            released = len(self._sets)
            self._sets.clear()
            self._locks.clear()
        if released:
            logger.info(f"Released {released} stopword set(s)")

    def loaded_languages(self) -> List[str]:
        return sorted(self._sets)

    def __contains__(self, language: str) -> bool:
        return language in self._sets

    def __len__(self) -> int:
        return len(self._sets)
