"""
Core utilities and configuration for loom-agents.

This package provides settings, logging configuration and Logfire monitoring
shared by the agent engine.
"""

from loom_agents.core.config import Settings, settings
from loom_agents.core.logging_config import get_logger, setup_logging

__all__ = ["Settings", "settings", "get_logger", "setup_logging"]
