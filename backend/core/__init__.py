"""Core shared logic for indicators, signal detection, risk rules and models.

This package contains pure business logic with no I/O dependencies
(no database, exchange or network access). It is shared between the
live position manager (live/) and the backtesting system (backtest/).
"""
