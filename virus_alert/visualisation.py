"""
Visualisation of simulation reports
"""
import math
from typing import List, Optional, Sequence

from matplotlib import pyplot as plt
from matplotlib.colors import ListedColormap

from virus_alert.individual import Individual
from virus_alert.report import Report

DEFAULT_CMAP = ListedColormap(["#56B4E9", "#009E73", "#F0E442", "#0072B2", "#D55E00", "#CC79A7", "#999999", "#E69F00"])


def _checkInputs(reports: Sequence[Report], titles: Optional[Sequence[str]]) -> List[str]:
    if not reports:
        raise ValueError("reports cannot be an empty list")
    if titles is None:
        titles = [f"config {i}" for i in range(len(reports))]
    if len(titles) != len(reports):
        raise ValueError(f"{len(titles)} titles for {len(reports)} reports")
    return list(titles)


def plot_evolution(reports, titles=None, individual=Individual.HEALTHY, figsize=None, cmap=None):
    """
    Plots the evolution over time of one individual type, one curve per report. Each curve is the mean over all runs
    of a report, with error bars of one standard error.

    :param reports: the reports to plot
    :type reports: list of Report
    :param titles: label of each report (None means "config <index>")
    :type titles: list of str
    :param individual: the individual type to plot
    :type individual: Individual
    :param figsize: size of the figure
    :param cmap: color map to use
    :return: returns a matplotlib figure
    :rtype: matplotlib figure
    """
    titles = _checkInputs(reports, titles)
    if cmap is None:
        cmap = DEFAULT_CMAP

    fig, ax = plt.subplots(constrained_layout=True, figsize=figsize)
    for index, (report, title) in enumerate(zip(reports, titles)):
        averages = report.average_individual(individual)
        ax.errorbar(
            range(len(averages)),
            [average.mean for average in averages],
            yerr=[average.error for average in averages],
            label=title,
            color=cmap(index % cmap.N),
            capsize=3,
        )
    ax.set_title(f"Evolution of {individual} people under different configurations")
    ax.set_ylabel("Number of People")
    ax.set_xlabel("Day")
    ax.legend(loc="upper right")

    return fig


def plot_histograms(reports, titles=None, individual=Individual.HEALTHY, ncol=2, sharey=True, figsize=None):
    """
    Plots a grid of plots, one per report, with the distribution across runs of one individual type on each day.

    :param reports: the reports to plot
    :type reports: list of Report
    :param titles: title of each plot (None means "config <index>")
    :type titles: list of str
    :param individual: the individual type to plot
    :type individual: Individual
    :param ncol: number of columns (the number of rows will be calculated to fit all graphs)
    :type ncol: int
    :param sharey: set to true if all plots should have the same y-axis
    :type sharey: bool
    :param figsize: select the size of the figure
    :return: returns a matplotlib figure
    :rtype: matplotlib figure
    """
    titles = _checkInputs(reports, titles)
    nrow = math.ceil(len(reports) / ncol)
    if figsize is None:
        figsize = (10 * ncol, nrow * 5)

    fig, axes = plt.subplots(nrow, ncol, squeeze=False, constrained_layout=True, sharey=sharey, figsize=figsize)
    for count, ax in enumerate(axes.flat):
        if count >= len(reports):
            ax.set_visible(False)
            continue
        ax.boxplot(reports[count].individual_transpose(individual), positions=range(reports[count].days()))
        ax.set_title(titles[count])
        ax.set_ylabel(f"{individual} people")
        ax.set_xlabel("Day")

    return fig
