"""Application configuration."""

from insight_api.config.settings import AppConfig, Network

__all__ = ["AppConfig", "Network"]
