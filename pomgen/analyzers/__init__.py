"""Template and routability analyzers."""

from .routability import RoutabilityClassifier
from .template import DETECTION_RULES, DetectionRule, TemplateAnalyzer

__all__ = ["DETECTION_RULES", "DetectionRule", "RoutabilityClassifier", "TemplateAnalyzer"]
