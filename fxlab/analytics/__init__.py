"""Pricing core: normal distribution, Garman-Kohlhagen, scenarios, maturity."""

from fxlab.analytics.normal import norm_cdf, norm_pdf
from fxlab.analytics.scenarios import (
    break_even, generate_scenarios, generate_hedge_scenarios,
    effective_exchange_rate, total_premium
)
from fxlab.analytics.garman_kohlhagen import (
    d_terms, price, price_option, greeks, evaluate, put_call_parity_gap
)
from fxlab.analytics.maturity import days_to_years, time_to_maturity, days_to_maturity
