from fairness.normalization.base import BaseNormalizer
from fairness.normalization.normalizer import SentimentNormalizer

__all__ = ["BaseNormalizer", "SentimentNormalizer"]
