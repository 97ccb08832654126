from __future__ import annotations

from typing import Optional, Sequence

import matplotlib.pyplot as plt

from metaheuristics.grasp import IterationRecord


def plot_convergence(
    history: Sequence[IterationRecord],
    title: str = "",
    save_path: Optional[str] = None,
    show: bool = True,
):
    """
    One-command plot of a GRASP run:
      - cost of each iteration's local optimum (points)
      - incumbent cost (step line)
      - alpha drawn at each iteration (secondary axis, reactive runs only)
    """
    fig, ax = plt.subplots()

    its = [r.iteration for r in history]
    ax.scatter(its, [r.cost for r in history], s=6, alpha=0.5, label="Iteration cost")
    ax.step(its, [r.incumbent_cost for r in history], where="post", color="black",
            linewidth=1.2, label="Incumbent")

    alphas = {r.alpha for r in history}
    if len(alphas) > 1:
        ax2 = ax.twinx()
        ax2.scatter(its, [r.alpha for r in history], s=4, marker="x", color="tab:red", alpha=0.4)
        ax2.set_ylabel("alpha")
        ax2.set_ylim(0.0, 1.05)

    ax.set_xlabel("Iteration")
    ax.set_ylabel("Cost")
    ax.grid(True, linewidth=0.3)

    if not title and history:
        title = f"iterations={len(history)} | best={history[-1].incumbent_cost:.2f}"
    ax.set_title(title)
    ax.legend(loc="upper right", fontsize=9)

    if save_path:
        fig.savefig(save_path, dpi=200, bbox_inches="tight")
    if show:
        plt.show()
    else:
        plt.close(fig)
