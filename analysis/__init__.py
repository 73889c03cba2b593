"""
Analysis Engine Module

Pure engines over one security's daily price history:
- Moving averages (SMA20, SMA50, SMA200)
- Volatility (annualized) and maximum drawdown
- CAGR and risk-adjusted return
- Buy / Sell / Hold scoring
- Compound-growth projections
"""

__version__ = "0.1.0"
