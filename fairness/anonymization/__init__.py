from fairness.anonymization.anonymizer import Anonymizer
from fairness.anonymization.base import BaseAnonymizer
from fairness.anonymization.fallback import PatternAnonymizer

__all__ = ["Anonymizer", "BaseAnonymizer", "PatternAnonymizer"]
