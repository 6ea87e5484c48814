#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Extracted model: the immutable result of parsing one sheet.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

Series = Tuple[Optional[float], ...]

@dataclass(frozen=True)
class ExtractedModel:
    """
    Year-aligned series and point-in-time scalars keyed by canonical metric.

    Every series has exactly one entry per year (None where absent).
    A key may appear in both mappings once derived values are filled in.
    """

    years: Tuple[int, ...]
    series: Mapping[str, Series]
    scalars: Mapping[str, float]
    sheet_name: Optional[str] = None
    conflicts: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        years = tuple(int(y) for y in self.years)
        series = {k: tuple(v) for k, v in self.series.items()}
        for key, values in series.items():
            if len(values) != len(years):
                raise ValueError(
                    f"Series '{key}' has {len(values)} values for {len(years)} years"
                )
        object.__setattr__(self, "years", years)
        object.__setattr__(self, "series", MappingProxyType(series))
        object.__setattr__(self, "scalars", MappingProxyType({k: float(v) for k, v in self.scalars.items()}))
        object.__setattr__(self, "conflicts", tuple(self.conflicts))

    @classmethod
    def build(
        cls,
        years: Sequence[int],
        series: Mapping[str, Sequence[Optional[float]]],
        scalars: Mapping[str, float],
        sheet_name: Optional[str] = None,
        conflicts: Sequence[str] = (),
    ) -> "ExtractedModel":
        return cls(tuple(years), dict(series), dict(scalars), sheet_name, tuple(conflicts))

    def latest(self, key: str) -> Optional[float]:
        """Last present value of a series, or None."""
        for v in reversed(self.series.get(key, ())):
            if v is not None:
                return v
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheet_name": self.sheet_name,
            "years": list(self.years),
            "series": {k: list(v) for k, v in self.series.items()},
            "scalars": dict(self.scalars),
            "conflicts": list(self.conflicts),
        }
