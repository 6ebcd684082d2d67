"""
Chart generation for reports.

This module draws the payoff profile of an option from a ScenarioSet.
"""

from pathlib import Path
from typing import Optional
import matplotlib.pyplot as plt
from fxlab.entities import ScenarioSet


def plot_payoff_profile(
    scenarios: ScenarioSet,
    spot: float,
    strike: float,
    save_path: str,
    pair: Optional[str] = None
) -> None:
    """
    Plot gross payoff and net result across future spots.

    Args:
        scenarios: ScenarioSet to draw
        spot: Current spot (marked with a vertical line)
        strike: Strike (marked with a vertical line)
        save_path: Path to save chart
        pair: Optional pair label for the title (e.g. "USDCLP=X")
    """
    fig, ax = plt.subplots(figsize=(10, 6))

    future_spots = scenarios.future_spots
    ax.plot(future_spots, scenarios.payoffs, label="Payoff", linewidth=2, linestyle="--")
    ax.plot(future_spots, scenarios.results, label="Net Result", linewidth=2, color="green")
    ax.fill_between(
        future_spots, scenarios.results, 0,
        where=scenarios.results < 0, color="red", alpha=0.1
    )

    ax.axhline(y=0, color="black", linewidth=1, alpha=0.5)
    ax.axvline(x=spot, color="gray", linestyle=":", alpha=0.7, label=f"Spot {spot:.2f}")
    ax.axvline(x=strike, color="blue", linestyle="--", alpha=0.5, label=f"Strike {strike:.2f}")
    if scenarios.break_even is not None:
        ax.axvline(
            x=scenarios.break_even, color="orange", linestyle="-.", alpha=0.8,
            label=f"Break-even {scenarios.break_even:.2f}"
        )

    kind = scenarios.option_type.value.capitalize()
    title = f"{kind} Option Payoff Profile"
    if pair:
        title += f" ({pair})"
    ax.set_xlabel("Future Spot")
    ax.set_ylabel("Result (domestic currency)")
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def create_report_assets_dir(report_dir: Path) -> Path:
    """Create and return the assets directory for report charts."""
    assets_dir = Path(report_dir) / "assets"
    assets_dir.mkdir(parents=True, exist_ok=True)
    return assets_dir
