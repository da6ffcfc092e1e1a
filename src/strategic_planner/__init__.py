"""Strategic planner - SWOT, strategic options, Balanced Scorecard and action plans."""

__version__ = "0.1.0"
