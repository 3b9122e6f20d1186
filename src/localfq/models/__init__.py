"""Configuration models for LocalFQ."""

from localfq.models.config import LocalFQConfig, LocalFQSettings, configure_logging

__all__ = ["LocalFQConfig", "LocalFQSettings", "configure_logging"]
