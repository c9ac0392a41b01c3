from .plotting import (
    plot_compartments,
    plot_two_populations,
    plot_cumulative,
    plot_incidence,
)

__all__ = [
    "plot_compartments",
    "plot_two_populations",
    "plot_cumulative",
    "plot_incidence",
]
