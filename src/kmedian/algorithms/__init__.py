from ._shared import ThorupParameters, random_sample, thorup_parameters
from .assignment import CenterIndex, get_costs
from .thorup_elimination import mincost_parameters, thorup_d, thorup_sample_mincost
from .thorup_sampling import sample_from_graph, thorup_sample

__all__ = [
    "CenterIndex",
    "ThorupParameters",
    "get_costs",
    "mincost_parameters",
    "random_sample",
    "sample_from_graph",
    "thorup_d",
    "thorup_parameters",
    "thorup_sample",
    "thorup_sample_mincost",
]
