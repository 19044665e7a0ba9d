"""Test fixtures for the placement tag engine."""

from .factories import CampaignFactory, CreativeFactory, OrderFactory

__all__ = [
    "CampaignFactory",
    "CreativeFactory",
    "OrderFactory",
]
