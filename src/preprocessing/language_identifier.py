"""
Message Language Identification

Wraps a statistical language identifier behind a single ``detect(text)``
call used by the language identification stage.

Architecture:
    LanguageDetector
    ├── Primary: FastText (lid.176.bin) - fast, 176 languages
    └── Fallback: langid (Python-native, normalized probabilities)

The detector owns short-text handling and confidence thresholding: it
returns None instead of a low-confidence guess. When no backend can be
initialised, ``load_detector`` returns None and the pipeline runs without
language tags.
"""

import contextlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from utils.logger import get_logger

logger = get_logger("language_identifier")

BACKENDS = ("auto", "fasttext", "langid")


# ─────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class LanguageDetectorConfig:
    """
    Detector settings.

    Attributes:
        backend:              'auto' (FastText, then langid), 'fasttext' or 'langid'
        fasttext_model_path:  path to lid.176.bin
        confidence_threshold: minimum probability to accept a prediction
        min_text_length:      shorter texts (after stripping) are not classified
        languages:            optional whitelist of ISO 639-1 codes
    """
    backend: str = "auto"
    fasttext_model_path: str = "models/lid.176.bin"
    confidence_threshold: float = 0.5
    min_text_length: int = 3
    languages: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown language detector backend: {self.backend}")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError("confidence_threshold must be in [0, 1]")
        if self.min_text_length < 0:
            raise ValueError("min_text_length must be non-negative")

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "LanguageDetectorConfig":
        config = config or {}
        return cls(
            backend=config.get("backend", "auto"),
            fasttext_model_path=config.get("fasttext_model_path", "models/lid.176.bin"),
            confidence_threshold=config.get("confidence_threshold", 0.5),
            min_text_length=config.get("min_text_length", 3),
            languages=tuple(config.get("languages") or ()),
        )


class DetectorUnavailableError(RuntimeError):
    """Raised when no language identification backend can be initialised."""


# ─────────────────────────────────────────────
# Detector
# ─────────────────────────────────────────────

class LanguageDetector:
    """
    Language identification for whole messages.

    Usage:
        detector = LanguageDetector(LanguageDetectorConfig(backend="langid"))
        detector.detect("this movie was great, thanks for the tip")   # 'en'
        detector.detect("ok")                                         # None

    Raises:
        DetectorUnavailableError: if the requested backend cannot be loaded
    """

    def __init__(self, config: Optional[LanguageDetectorConfig] = None):
        self.config = config or LanguageDetectorConfig()

        self._fasttext_model = None
        self._langid = None
        self._backend = None

        self._initialize_backend()

    # ── Initialization ──────────────────────────────────────────────────────

    def _initialize_backend(self) -> None:
        """Priority: FastText > langid."""
        requested = self.config.backend

        if requested in ("auto", "fasttext") and self._try_load_fasttext():
            self._backend = "fasttext"
            logger.info("LID backend: FastText")
            return

        if requested in ("auto", "langid") and self._try_load_langid():
            self._backend = "langid"
            logger.info("LID backend: langid")
            return

        raise DetectorUnavailableError(
            f"No language identification backend available (requested: {requested})"
        )

    def _try_load_fasttext(self) -> bool:
        """Attempt to load the FastText LID model."""
        model_path = Path(self.config.fasttext_model_path)
        if not model_path.exists():
            logger.debug(f"FastText model not found at: {model_path}")
            return False
        try:
            import fasttext
        except ImportError:
            logger.debug("fasttext package not installed")
            return False
        try:
            # FastText prints a warning to stdout on load
            with open(os.devnull, "w") as devnull, contextlib.redirect_stdout(devnull):
                self._fasttext_model = fasttext.load_model(str(model_path))
        except (ValueError, OSError) as e:
            logger.warning(f"FastText load failed: {e}")
            return False
        logger.info(f"FastText model loaded from: {model_path}")
        return True

    def _try_load_langid(self) -> bool:
        """Build a langid identifier with normalized probabilities."""
        try:
            from langid.langid import LanguageIdentifier, model
        except ImportError:
            logger.debug("langid package not installed")
            return False
        identifier = LanguageIdentifier.from_modelstring(model, norm_probs=True)
        if self.config.languages:
            identifier.set_languages(list(self.config.languages))
        self._langid = identifier
        return True

    # ── Public API ──────────────────────────────────────────────────────────

    def detect(self, text: Optional[str]) -> Optional[str]:
        """
        Identify the language of a message text.

        Args:
            text: Raw or normalized message text

        Returns:
            ISO 639-1 code, or None when the text is too short or the
            prediction is below the confidence threshold
        """
        if not isinstance(text, str):
            return None
        clean = " ".join(text.split())
        if len(clean) < max(self.config.min_text_length, 1):
            return None

        if self._backend == "fasttext":
            language, confidence = self._predict_fasttext(clean)
        else:
            language, confidence = self._langid.classify(clean)

        if confidence < self.config.confidence_threshold:
            logger.debug(f"Low LID confidence {confidence:.2f} for '{clean[:30]}'")
            return None
        if self.config.languages and language not in self.config.languages:
            return None
        return language

    # ── Private: backends ───────────────────────────────────────────────────

    def _predict_fasttext(self, text: str) -> Tuple[str, float]:
        labels, probs = self._fasttext_model.predict(text, k=1)
        language = labels[0].replace("__label__", "")
        return language, float(probs[0])

    @property
    def backend(self) -> Optional[str]:
        """Return the active backend name."""
        return self._backend


# ─────────────────────────────────────────────
# Factories
# ─────────────────────────────────────────────

def load_detector(
    config: Optional[LanguageDetectorConfig] = None,
) -> Optional[LanguageDetector]:
    """
    Create a detector, or None if no backend can be initialised.

    Detector unavailability never stops a run; callers get None and the
    language identification stage leaves messages untagged.
    """
    try:
        return LanguageDetector(config)
    except DetectorUnavailableError as e:
        logger.warning(f"{e}; messages will stay untagged")
        return None


_default_detector: Optional[LanguageDetector] = None


def get_detector(
    config: Optional[LanguageDetectorConfig] = None,
) -> Optional[LanguageDetector]:
    """
    Return (or create) a process-wide detector instance.

    Avoids loading the model more than once per process. A failed load is
    retried on the next call.
    """
    global _default_detector
    if _default_detector is None:
        _default_detector = load_detector(config)
    return _default_detector
