"""
Analysis modules.

- impact: downstream blast radius and risk classification
"""

from .impact import ImpactAnalysisResult, ImpactAnalyzer, RiskLevel, RiskThresholds, analyze_impact

__all__ = [
    "ImpactAnalysisResult", "ImpactAnalyzer", "RiskLevel", "RiskThresholds", "analyze_impact",
]
