"""Data models for quote data."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Quote:
    """Immutable last-known market state for one canonical symbol."""

    symbol: str
    name: str
    price: float
    previous_close: float
    timestamp: float = field(default_factory=time.time)  # Unix seconds

    def __post_init__(self) -> None:
        if not self.name.strip():
            # Frozen dataclass: bypass __setattr__ for the fallback
            object.__setattr__(self, "name", self.symbol)

    @property
    def has_data(self) -> bool:
        """False until a previous close is known ("no data yet" vs "zero change")."""
        return self.previous_close != 0

    @property
    def change(self) -> float:
        """Absolute change from the previous close."""
        if not self.has_data:
            return 0.0
        return round(self.price - self.previous_close, 4)

    @property
    def change_percent(self) -> float:
        """Percentage change from the previous close; 0.0 when it is unknown."""
        if self.previous_close == 0:
            return 0.0
        return round((self.price - self.previous_close) / self.previous_close * 100, 4)

    @property
    def direction(self) -> str:
        """'up', 'down', or 'flat'."""
        if not self.has_data:
            return "flat"
        if self.price > self.previous_close:
            return "up"
        elif self.price < self.previous_close:
            return "down"
        return "flat"

    def to_dict(self) -> dict:
        """Serialize for JSON / SSE transmission."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "previous_close": self.previous_close,
            "timestamp": self.timestamp,
            "change": self.change,
            "change_percent": self.change_percent,
            "direction": self.direction,
            "has_data": self.has_data,
        }
