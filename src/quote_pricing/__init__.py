"""
Quote Pricing Package

Resolves travel package prices from tiered, period-based pricing tables
and keeps a quote's price in sync with its linked package.
"""

__version__ = "1.0.0"
