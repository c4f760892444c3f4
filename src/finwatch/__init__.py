"""Finwatch: personal-finance balance calculators and proactive alerting."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestConfig
from .monitoring.engine import MonitoringEngine

__all__ = ["BaseConfig", "DevConfig", "MonitoringEngine", "TestConfig"]
