from stockscan.config.settings import Settings
from stockscan.preprocessing.base import BasePreprocessor
from stockscan.preprocessing.passthrough import PassthroughPreprocessor
from stockscan.preprocessing.pillow_preprocessor import PillowPreprocessor


class PreprocessorFactory:
    """Creates the correct preprocessor based on settings."""

    ENGINES = ("pillow", "passthrough")

    @classmethod
    def create(cls, settings: Settings) -> BasePreprocessor:
        engine = settings.preprocess_engine.lower()
        if engine == "pillow":
            return PillowPreprocessor(
                max_edge=settings.preprocess_max_edge,
                quality=settings.preprocess_quality,
            )
        if engine == "passthrough":
            return PassthroughPreprocessor()
        raise ValueError(
            f"Unknown preprocess engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
