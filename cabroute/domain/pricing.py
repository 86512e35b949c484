"""
Trip Pricing  (Strategy Pattern)
================================

Formula
-------
Estimated_Cost = Total_Duration_Minutes x Rate_Per_Minute

The cost is fixed at quote/booking time and stored on the booking; it is
never recomputed when the route network changes.

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, duration_minutes: int, rate_per_minute: float) -> float: ...


class PerMinutePricing(PricingStrategy):
    def calculate(self, duration_minutes: int, rate_per_minute: float) -> float:
        return float(duration_minutes * rate_per_minute)
