"""Shared API dependencies."""

from tradetracker.engine.state import TrackerState, get_state


async def get_tracker() -> TrackerState:
    """Session state owning trades, balance and prices."""
    return get_state()
