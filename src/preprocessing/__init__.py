"""
Preprocessing module: tokenization, language identification, stopword
removal and the stage pipeline that applies them to dialogs.

Exports:
    Tokenizer               — whitespace + compound tokenizer with normalization
    StopwordCache           — lazily loaded per-language stopword sets
    LanguageDetector        — FastText / langid message language detector
    PreprocessingPipeline   — ordered stage runner
"""

from .tokenizer import Tokenizer, TokenizerConfig
from .stopwords import StopwordCache, load_stopword_file
from .language_identifier import (
    LanguageDetector,
    LanguageDetectorConfig,
    DetectorUnavailableError,
    load_detector,
    get_detector,
)
from .stages import (
    PipelineStage,
    MessageMerger,
    MergerConfig,
    TokenizerStage,
    LanguageIdentifierStage,
    StopwordsRemoverStage,
    build_stage,
)
from .pipeline import PreprocessingPipeline

__all__ = [
    "Tokenizer",
    "TokenizerConfig",
    "StopwordCache",
    "load_stopword_file",
    "LanguageDetector",
    "LanguageDetectorConfig",
    "DetectorUnavailableError",
    "load_detector",
    "get_detector",
    "PipelineStage",
    "MessageMerger",
    "MergerConfig",
    "TokenizerStage",
    "LanguageIdentifierStage",
    "StopwordsRemoverStage",
    "build_stage",
    "PreprocessingPipeline",
]
