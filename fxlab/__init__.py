"""
FX Options Lab

A currency-options calculator built on the Garman-Kohlhagen model, with
analytic Greeks, break-even and payoff scenario analysis.
"""

__version__ = "0.1.0"
