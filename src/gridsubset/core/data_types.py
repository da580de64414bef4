"""
Grid Subset Element Type Descriptions

Element types of grid variables are described with a closed set of tagged
variants selected by a ``TypeSort`` tag rather than by subclassing.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union
import numpy as np

from .exceptions import ParameterError


class TypeSort(Enum):
    """Sort tag of an element type."""
    ATOMIC = "atomic"
    STRUCTURE = "structure"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class AtomicType:
    """Scalar numeric, boolean or string element."""
    dtype: np.dtype
    sort: TypeSort = field(default=TypeSort.ATOMIC, init=False)

    def __post_init__(self):
        object.__setattr__(self, "dtype", np.dtype(self.dtype))

    @property
    def name(self) -> str:
        return self.dtype.name


@dataclass(frozen=True)
class StructureType:
    """
    Ordered collection of named fields.

    Field order is significant. Lookup by name goes through a mapping built
    once at construction.
    """
    name: str
    fields: Tuple[Tuple[str, "ElementType"], ...]
    sort: TypeSort = field(default=TypeSort.STRUCTURE, init=False)
    _index: Dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        fields = tuple((str(n), t) for n, t in self.fields)
        index: Dict[str, int] = {}
        for i, (field_name, _) in enumerate(fields):
            if field_name in index:
                raise ParameterError("fields", field_name, f"Duplicate field in structure '{self.name}'")
            index[field_name] = i
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "_index", index)

    def find_by_name(self, short_name: str) -> Optional["ElementType"]:
        i = self._index.get(short_name)
        return None if i is None else self.fields[i][1]

    def index_by_name(self, short_name: str) -> int:
        return self._index.get(short_name, -1)

    def get_field(self, i: int) -> "ElementType":
        return self.fields[i][1]

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(n for n, _ in self.fields)


@dataclass(frozen=True)
class SequenceType:
    """Variable-length sequence of elements."""
    name: str
    element: "ElementType"
    sort: TypeSort = field(default=TypeSort.SEQUENCE, init=False)


ElementType = Union[AtomicType, StructureType, SequenceType]


def describe_dtype(dtype, name: str = "") -> ElementType:
    """
    Describe a numpy dtype as a tagged element type.

    Structured dtypes become ``StructureType`` with one field per member,
    object dtypes (ragged data) become ``SequenceType``.

    Args:
        dtype: numpy dtype or anything ``np.dtype`` accepts
        name: Name given to structure and sequence types

    Returns:
        ElementType: Tagged element type
    """
    dtype = np.dtype(dtype)
    if dtype.names is not None:
        members = tuple(
            (member, describe_dtype(dtype.fields[member][0], member))
            for member in dtype.names
        )
        return StructureType(name, members)
    if dtype.kind == "O":
        return SequenceType(name, AtomicType(np.dtype(np.float64)))
    return AtomicType(dtype)
