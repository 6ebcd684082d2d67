"""
Markdown report generation.

This module writes one calculation (inputs, premium, Greeks, break-even,
payoff scenarios and the hedging table) to a markdown file with a payoff
chart alongside it.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional
from fxlab.data_sources.market import MarketSnapshot
from fxlab.entities import HedgeScenario, PricingResult, ScenarioSet
from fxlab.reporting.charts import plot_payoff_profile, create_report_assets_dir


class Report:
    """
    Generates markdown reports for option calculations.
    """

    def __init__(self, output_dir: str = "reports"):
        """
        Initialize report generator.

        Args:
            output_dir: Directory to save reports
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate_report(
        self,
        result: PricingResult,
        scenarios: ScenarioSet,
        hedge_scenarios: Optional[List[HedgeScenario]] = None,
        snapshot: Optional[MarketSnapshot] = None,
        include_chart: bool = True
    ) -> str:
        """
        Generate a complete markdown report.

        Args:
            result: PricingResult of the calculation
            scenarios: ScenarioSet of the payoff sweep
            hedge_scenarios: Optional hedging table rows
            snapshot: Optional market snapshot the inputs were seeded from
            include_chart: Whether to render the payoff chart

        Returns:
            Path to generated report file
        """
        now = datetime.now()
        kind = result.inputs.option_type.value
        label = snapshot.pair.replace("=X", "") if snapshot else "FX"
        report_path = self.output_dir / f"{label}_{kind}_{now.strftime('%Y%m%d_%H%M%S')}.md"

        content = self._generate_header(result, snapshot, now)
        content += self._generate_inputs_section(result)
        content += self._generate_valuation_section(result)
        content += self._generate_scenario_section(result, scenarios, report_path.stem, include_chart)
        content += self._generate_hedge_section(hedge_scenarios)
        content += "*Garman-Kohlhagen model for European currency options.*\n"

        with open(report_path, "w") as f:
            f.write(content)

        return str(report_path)

    def _generate_header(
        self,
        result: PricingResult,
        snapshot: Optional[MarketSnapshot],
        now: datetime
    ) -> str:
        """Generate report header."""
        kind = result.inputs.option_type.value.capitalize()
        lines = [
            f"# Currency Option Report: {kind}",
            "",
            f"**Generated:** {now.strftime('%Y-%m-%d %H:%M:%S')}  ",
        ]
        if snapshot is not None:
            source = snapshot.source
            if snapshot.is_fallback:
                source += " ⚠"
            lines.append(f"**Pair:** {snapshot.pair}  ")
            lines.append(f"**Market data:** {source}, {snapshot.last_updated}  ")
        lines += ["", "---", "", ""]
        return "\n".join(lines)

    def _generate_inputs_section(self, result: PricingResult) -> str:
        """Generate inputs table."""
        inputs = result.inputs
        rows = [
            ("Spot", f"{inputs.spot:.4f}"),
            ("Strike", f"{inputs.strike:.4f}"),
            ("Time to maturity (years)", f"{inputs.time_to_maturity:.6f}"),
            ("Volatility", f"{inputs.volatility:.2%}"),
            ("Domestic rate", f"{inputs.domestic_rate:.2%}"),
            ("Foreign rate", f"{inputs.foreign_rate:.2%}"),
        ]
        if result.notional is not None:
            rows.append(("Notional", f"{result.notional:,.2f}"))

        content = "## Inputs\n\n| Input | Value |\n|-------|-------|\n"
        for name, value in rows:
            content += f"| {name} | {value} |\n"
        return content + "\n---\n\n"

    def _generate_valuation_section(self, result: PricingResult) -> str:
        """Generate premium, break-even and Greeks section."""
        content = "## Valuation\n\n"
        content += f"**Premium:** {result.premium:.4f}  \n"
        if result.total_premium is not None:
            content += f"**Total premium:** {result.total_premium:,.2f}  \n"
        content += f"**Break-even:** {result.break_even:.4f}\n\n"

        content += "| Greek | Value |\n|-------|-------|\n"
        for name, value in result.greeks.to_dict().items():
            content += f"| {name.capitalize()} | {value:.4f} |\n"
        content += "\n*Theta is per calendar day; rho is the domestic-rate sensitivity.*\n\n---\n\n"
        return content

    def _generate_scenario_section(
        self,
        result: PricingResult,
        scenarios: ScenarioSet,
        stem: str,
        include_chart: bool
    ) -> str:
        """Generate payoff scenario table and chart."""
        content = "## Payoff Scenarios\n\n"

        if include_chart:
            assets_dir = create_report_assets_dir(self.output_dir)
            chart_path = assets_dir / f"{stem}_payoff.png"
            plot_payoff_profile(
                scenarios, result.inputs.spot, result.inputs.strike, str(chart_path)
            )
            content += f"![Payoff profile](assets/{chart_path.name})\n\n"

        content += "| Variation | Future Spot | Payoff | Result | Result % |\n"
        content += "|-----------|-------------|--------|--------|----------|\n"
        for s in scenarios:
            content += (
                f"| {s.variation:+.2%} | {s.future_spot:.2f} | {s.payoff:,.2f} "
                f"| {s.result:,.2f} | {s.result_percent:.1f} |\n"
            )
        return content + "\n---\n\n"

    def _generate_hedge_section(self, hedge_scenarios: Optional[List[HedgeScenario]]) -> str:
        """Generate hedging table."""
        if not hedge_scenarios:
            return ""
        content = "## Hedging Table\n\n"
        content += "| Future Spot | Effective Rate | Exercised | Final Rate |\n"
        content += "|-------------|----------------|-----------|------------|\n"
        for row in hedge_scenarios:
            exercised = "Yes" if row.exercised else "No"
            content += (
                f"| {row.future_spot:.2f} | {row.effective_rate:.2f} "
                f"| {exercised} | {row.final_rate:.2f} |\n"
            )
        return content + "\n---\n\n"
