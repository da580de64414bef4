"""
Grid Subset Vertical Transforms

A vertical transform describes how the vertical coordinate maps to a
physical height or pressure. The subsetting engine treats it as opaque and
only re-indexes its level-dependent terms.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import numpy as np

from ..core.core_types import Range
from ..core.exceptions import CoordinateError, RangeOutOfBoundsError


@dataclass(frozen=True, eq=False)
class VerticalTransform:
    """
    Unit-bearing description of a vertical coordinate.

    Attributes:
        name: Transform name (usually the CF standard_name)
        unit_string: Units of the physical coordinate the transform produces
        num_levels: Number of vertical levels described
        level_terms: 1-D terms indexed by level (e.g. sigma, a, b coefficients)
        field_terms: Terms referring to other dataset variables by name
        attrs: Extra metadata
    """
    name: str
    unit_string: str
    num_levels: int
    level_terms: Mapping[str, np.ndarray] = field(default_factory=dict)
    field_terms: Mapping[str, str] = field(default_factory=dict)
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        terms: Dict[str, np.ndarray] = {}
        for term, values in dict(self.level_terms).items():
            arr = np.array(values, dtype=np.float64).reshape(-1)
            if arr.size != self.num_levels:
                raise CoordinateError(
                    self.name, f"Term '{term}' has {arr.size} levels, expected {self.num_levels}"
                )
            arr.flags.writeable = False
            terms[term] = arr
        object.__setattr__(self, "level_terms", terms)
        object.__setattr__(self, "field_terms", dict(self.field_terms))
        object.__setattr__(self, "attrs", dict(self.attrs))

    def get_unit_string(self) -> str:
        return self.unit_string

    def subset(self, z_range: Optional[Range]) -> VerticalTransform:
        """
        Re-index the transform onto a vertical sub-range.

        Returns ``self`` when the range is None or the full axis.
        """
        if z_range is None or z_range.is_full(self.num_levels):
            return self
        if z_range.last_element >= self.num_levels:
            raise RangeOutOfBoundsError(self.name, z_range, self.num_levels)
        sel = z_range.to_slice()
        return VerticalTransform(
            name=self.name,
            unit_string=self.unit_string,
            num_levels=z_range.length,
            level_terms={term: values[sel] for term, values in self.level_terms.items()},
            field_terms=self.field_terms,
            attrs=self.attrs,
        )
