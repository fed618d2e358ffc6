"""
kmedian - Thorup-style bicriteria k-median on weighted graphs.

This package provides:
- a weighted graph wrapper with scoped synthetic-source support
- Thorup sampling and elimination algorithms with best-of-N selection
- nearest-center assignment and cost vectors
- DIMACS graph files and file-backed distance matrices
- experiment orchestration and analysis utilities
"""

__all__ = ["graphs", "algorithms"]
