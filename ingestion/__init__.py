"""
Data Ingestion Module

Fetches and validates daily price data:
- yfinance for OHLCV price data
- Normalization to canonical rows and PricePoint histories
"""

__version__ = "0.1.0"
