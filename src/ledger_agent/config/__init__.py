"""Configuration module for the ledger agent."""

from ledger_agent.config.logging import configure_logging
from ledger_agent.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging"]
