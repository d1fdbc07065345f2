"""Reconciliation engine: three-way classification of two file trees."""

from srcverify.reconcile.engine import compare_trees
from srcverify.reconcile.textdiff import GitDiffer, TextDiffer, UnifiedDiffer, make_differ
from srcverify.reconcile.types import IDENTICAL_SUMMARY, ClassificationResult, PathError, build_summary

__all__ = [
    "IDENTICAL_SUMMARY",
    "ClassificationResult",
    "GitDiffer",
    "PathError",
    "TextDiffer",
    "UnifiedDiffer",
    "build_summary",
    "compare_trees",
    "make_differ",
]
