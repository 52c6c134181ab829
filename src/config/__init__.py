"""
Catalog Insights Service
Configuration Module
"""
from .settings import Settings, SallaSettings, get_settings
from .definitions import DashboardDefinitions, PriceBucket, ChannelDefinition, DEFAULT_DEFINITIONS

__all__ = [
    "Settings",
    "SallaSettings",
    "get_settings",
    "DashboardDefinitions",
    "PriceBucket",
    "ChannelDefinition",
    "DEFAULT_DEFINITIONS",
]
