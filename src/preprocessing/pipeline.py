"""
Preprocessing Pipeline

Runs an ordered list of stages over one dialog at a time.

Usage:
    config = load_config("config/preprocessing_config.yaml")
    detector = load_detector(LanguageDetectorConfig.from_config(
        config["preprocessing"].get("language_identifier")))
    pipeline = PreprocessingPipeline.from_config(config["preprocessing"], detector)

    source = DialogSource.from_config(store, config["preprocessing"].get("source"))
    pipeline.run_all(source, sink=save_dialog)
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from utils.logger import get_logger
from data.models import Dialog
from data.dialog_source import DialogSource
from preprocessing.language_identifier import LanguageDetector
from preprocessing.stopwords import StopwordCache
from preprocessing.stages import STAGE_NAMES, PipelineStage, build_stage

logger = get_logger("pipeline")

DEFAULT_STAGES = list(STAGE_NAMES)

DialogSink = Callable[[Dialog], None]


class PreprocessingPipeline:
    """
    Sequential stage runner.

    Stage N+1 only sees a dialog after stage N has finished with it. The
    runner owns the stopword cache for the length of a run and releases it
    in ``close()`` / at the end of ``run_all``.

    Args:
        stages:    stages in execution order
        stopwords: cache shared by the stopword stage(s)
    """

    def __init__(
        self,
        stages: Sequence[PipelineStage],
        stopwords: Optional[StopwordCache] = None,
    ):
        self.stages: List[PipelineStage] = list(stages)
        self.stopwords = stopwords

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        detector: Optional[LanguageDetector] = None,
        stopwords: Optional[StopwordCache] = None,
    ) -> "PreprocessingPipeline":
        """
        Build the pipeline from the ``preprocessing`` config section.

        Args:
            config:    preprocessing section; ``stages`` lists stage names in
                       execution order (defaults to DEFAULT_STAGES)
            detector:  language detector, or None to run without tagging
            stopwords: shared cache; created from ``stopwords`` config if None
        """
        config = config or {}
        if stopwords is None:
            stopwords = StopwordCache.from_config(config.get("stopwords"))

        names = config.get("stages") or DEFAULT_STAGES
        stages = [build_stage(name, config, detector, stopwords) for name in names]
        logger.info(f"Pipeline stages: {' → '.join(names)}")
        return cls(stages, stopwords)

    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def run(self, dialog: Dialog) -> Dialog:
        """
        Apply every stage to ``dialog`` in order.

        Exceptions raised by a stage propagate and abandon this dialog.
        """
        for stage in self.stages:
            dialog = stage.process(dialog)
        return dialog

    def run_all(
        self,
        source: DialogSource,
        sink: Optional[DialogSink] = None,
        skip_failed: bool = False,
    ) -> int:
        """
        Process every dialog of ``source`` and hand each one to ``sink``.

        Args:
            source:      dialog source (messages are loaded per dialog)
            sink:        callback receiving each processed dialog
            skip_failed: log and skip dialogs whose loading or processing
                         fails instead of stopping the run

        Returns:
            Number of dialogs processed
        """
        processed = 0
        try:
            for dialog in source:
                try:
                    source.load_messages(dialog)
                    logger.info(
                        f"Dialog {dialog.id} '{dialog.name}': "
                        f"{len(dialog.messages)} messages"
                    )
                    dialog = self.run(dialog)
                except Exception:
                    if not skip_failed:
                        raise
                    logger.exception(f"Skipping dialog {dialog.id}")
                    continue

                if sink is not None:
                    sink(dialog)
                processed += 1
        finally:
            self.close()

        logger.info(f"Processed {processed} dialog(s)")
        return processed

    def close(self) -> None:
        """Release run-scoped resources (the stopword cache)."""
        if self.stopwords is not None:
            self.stopwords.clear()

    def __enter__(self) -> "PreprocessingPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PreprocessingPipeline({self.stage_names()})"
