"""
Reporting utilities for congestion value histories.

Routers record their congestion value at every contact end. These helpers
summarize, export and plot such histories for offline analysis.
"""

import csv
from collections.abc import Hashable, Iterable, Mapping

import matplotlib.pyplot as plt
import numpy as np

from dtnroute.domain.receipt import CongestionSample
from dtnroute.utils.logging_config import get_logger
from dtnroute.utils.os import prepare_output_file

logger = get_logger(__name__)

CSV_FIELDNAMES = ["node", "time", "cv"]


def summarize_cv_history(samples: Iterable[CongestionSample]) -> dict[str, float]:
    """
    Compute summary statistics of a congestion history.

    :param samples: Congestion samples, oldest first
    :type samples: Iterable[CongestionSample]
    :return: count, mean, std, min, max and final congestion value
    :rtype: dict[str, float]

    Example:
        >>> summary = summarize_cv_history(router.congestion_history)
        >>> summary['count']
        12
    """
    values = np.array([sample.cv for sample in samples], dtype=float)

    if values.size == 0:
        return {
            "count": 0,
            "mean": float("nan"),
            "std": float("nan"),
            "min": float("nan"),
            "max": float("nan"),
            "final": float("nan"),
        }

    return {
        "count": int(values.size),
        "mean": float(np.mean(values)),
        "std": float(np.std(values, ddof=1)) if values.size > 1 else 0.0,
        "min": float(np.min(values)),
        "max": float(np.max(values)),
        "final": float(values[-1]),
    }


def export_cv_history_to_csv(
    samples: Iterable[CongestionSample],
    output_path: str,
    node_id: Hashable | None = None,
) -> None:
    """
    Export a congestion history to CSV.

    :param samples: Congestion samples, oldest first
    :type samples: Iterable[CongestionSample]
    :param output_path: Output CSV path
    :type output_path: str
    :param node_id: Node label written in the ``node`` column
    :type node_id: Hashable | None
    """
    rows = [
        {"node": "" if node_id is None else node_id, "time": sample.time, "cv": sample.cv}
        for sample in samples
    ]
    if not rows:
        logger.warning("No congestion samples to export")
        return

    with open(prepare_output_file(output_path), "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)

    logger.info("Exported %d congestion samples to %s", len(rows), output_path)


def plot_cv_history(
    histories: Mapping[Hashable, Iterable[CongestionSample]],
    output_path: str,
) -> None:
    """
    Plot the congestion value of several nodes over time.

    :param histories: Congestion samples per node
    :type histories: Mapping[Hashable, Iterable[CongestionSample]]
    :param output_path: Output image path
    :type output_path: str
    """
    if not histories:
        logger.warning("No congestion histories to plot")
        return

    output_file = prepare_output_file(output_path)

    fig, ax = plt.subplots(figsize=(10, 6), dpi=150)
    for node_id, samples in histories.items():
        sample_list = list(samples)
        if not sample_list:
            logger.warning("Node %s has no congestion samples, skipping", node_id)
            continue
        times = [sample.time for sample in sample_list]
        values = [sample.cv for sample in sample_list]
        ax.step(times, values, where="post", label=f"node {node_id}")

    ax.set_title("Congestion Value per Node", weight="bold")
    ax.set_xlabel("Time")
    ax.set_ylabel("Congestion Value")
    ax.grid(True, alpha=0.3)
    if ax.get_legend_handles_labels()[0]:
        ax.legend(loc="best")

    fig.savefig(output_file, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved congestion plot to %s", output_path)
