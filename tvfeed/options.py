"""Options describing which chart series and study to load."""

from __future__ import annotations

from dataclasses import dataclass, replace

__all__ = ["StudyOptions", "ChartOptions"]


@dataclass(frozen=True)
class StudyOptions:
    """A Pine script to run on a chart series."""

    script_id: str
    script_version: str
    script_type: str


@dataclass(frozen=True)
class ChartOptions:
    """What to request for one chart series.

    ``range`` takes forms such as ``r,1626220800:1628640000``, ``1D``, ``5d``,
    ``1M``, ``3M``, ``6M``, ``YTD``, ``12M``, ``60M`` or ``ALL``.
    """

    symbol: str = ""
    exchange: str = ""
    interval: str = "1D"
    bar_count: int = 500_000
    range: str | None = None
    from_: int | None = None
    to: int | None = None
    replay_mode: bool = False
    replay_from: int = 0
    replay_session: str | None = None
    adjustment: str | None = None
    currency: str | None = None
    session_type: str | None = None
    study_config: StudyOptions | None = None

    def __post_init__(self) -> None:
        if self.bar_count < 0:
            raise ValueError("bar_count must not be negative")
        for name in ("from_", "to"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must not be negative")

    @classmethod
    def for_market(cls, symbol: str, exchange: str, interval: str) -> ChartOptions:
        return cls(symbol=symbol, exchange=exchange, interval=interval)

    def with_study(
        self, script_id: str, script_version: str, script_type: str
    ) -> ChartOptions:
        return replace(
            self, study_config=StudyOptions(script_id, script_version, script_type)
        )

    def range_param(self) -> str:
        """The range sent with a series request; empty when unset."""
        if self.range is not None:
            return self.range
        if self.from_ is not None and self.to is not None:
            return f"r,{self.from_}:{self.to}"
        return ""

    def market_symbol(self) -> str:
        return f"{self.exchange}:{self.symbol}"