from .diskmat import DiskMat, estimate_matrix_memory
from .dimacs import DimacsFormatError, haversine_distance, read_dimacs, ways_to_dimacs, write_dimacs
from .synthetic import ScopedSyntheticVertex
from .weighted import WeightedGraph

__all__ = [
    "DiskMat",
    "DimacsFormatError",
    "ScopedSyntheticVertex",
    "WeightedGraph",
    "estimate_matrix_memory",
    "haversine_distance",
    "read_dimacs",
    "ways_to_dimacs",
    "write_dimacs",
]
