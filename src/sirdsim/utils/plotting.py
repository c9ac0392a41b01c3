"""
===========================================================
plotting.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================
Visualization functions for SIRD simulation output.

These only read an IntegrationResult (or plain arrays); they
never touch the engine.
"""
import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Sequence
from matplotlib.axes import Axes
from matplotlib.figure import Figure

COLORS = {"S": "blue", "I": "red", "R": "green", "D": "gold"}
LABELS = {"S": "Susceptible", "I": "Infected", "R": "Recovered", "D": "Dead"}


def plot_compartments(result,
                      suffix: str = "",
                      ax: Optional[Axes] = None,
                      show: bool = False,
                      title: Optional[str] = None) -> Axes:
    """
    Plot S, I, R, D over time.

    Parameters
    ----------
    result : IntegrationResult
        Output of SIRDSimulation.simulate()
    suffix : str
        Column suffix, "1" or "2" for two-population results
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates new figure
    show : bool
        Whether to display the plot immediately
    title : str, optional
        Axes title

    Returns
    -------
    ax : matplotlib.axes.Axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))

    for c in ("S", "I", "R", "D"):
        ax.plot(result.t, result.column(c + suffix), color=COLORS[c],
                linewidth=2, label=LABELS[c])

    ax.set_xlabel('Days', fontsize=12)
    ax.set_ylabel('Number of individuals', fontsize=12)
    ax.set_title(title if title else 'SIRD Model Dynamics', fontsize=14)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)

    if show:
        plt.tight_layout()
        plt.show()
    return ax


def plot_two_populations(result,
                         titles: Sequence[str] = ("Main Population", "Subpopulation"),
                         show: bool = False) -> Figure:
    """Stack the compartments of both populations in two panels"""
    fig, axes = plt.subplots(2, 1, figsize=(8, 8), sharex=True)
    for k, (ax, title) in enumerate(zip(axes, titles), start=1):
        plot_compartments(result, suffix=str(k), ax=ax, title=title)
    axes[0].set_xlabel('')
    fig.tight_layout()
    if show:
        plt.show()
    return fig


def plot_cumulative(result, column: str = "C", ax: Optional[Axes] = None,
                    show: bool = False) -> Axes:
    """Cumulative number of infections"""
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(result.t, result.column(column), color='blue', linewidth=2, label='Cumulative infections')
    ax.set_xlabel('Days', fontsize=12)
    ax.set_ylabel('Number of cases', fontsize=12)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)
    if show:
        plt.show()
    return ax


def plot_incidence(t: np.ndarray,
                   incidence: np.ndarray,
                   thresholds: Optional[Sequence[float]] = None,
                   ndays: int = 7,
                   ax: Optional[Axes] = None,
                   show: bool = False) -> Axes:
    """
    Plot an incidence series, optionally with horizontal lines at
    the feedback thresholds (e.g. (40, 200)).
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(t, incidence, color='blue', linewidth=2, label='Incidence')
    for level in thresholds or ():
        ax.axhline(level, color='gray', linestyle='--', alpha=0.7)
    ax.set_xlabel('Days', fontsize=12)
    ax.set_ylabel(f'{ndays} day incidence per 100 000', fontsize=12)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)
    if show:
        plt.show()
    return ax
