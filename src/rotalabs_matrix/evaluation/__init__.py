"""
Evaluation module for rotalabs-matrix.

This module evaluates condition configurations against a context.
"""

from rotalabs_matrix.evaluation.evaluator import ConditionEvaluator, EvaluationResult, compare_values

__all__ = ["ConditionEvaluator", "EvaluationResult", "compare_values"]
