"""Report generation modules"""

from .summary import earnings_summary, format_usd, generate_summary

__all__ = ["generate_summary", "earnings_summary", "format_usd"]
