import numpy as np
import pytest

from gridsubset import ParameterError, TypeSort
from gridsubset.core.data_types import AtomicType, SequenceType, StructureType, describe_dtype


def test_atomic():
    t = describe_dtype("f4")
    assert isinstance(t, AtomicType)
    assert t.sort is TypeSort.ATOMIC
    assert t.name == "float32"


def test_structure_lookup():
    t = describe_dtype(np.dtype([("time", "f8"), ("station", "i4"), ("flag", "u1")]), "obs")
    assert t.sort is TypeSort.STRUCTURE
    assert t.name == "obs"
    assert t.field_names == ("time", "station", "flag")
    assert t.index_by_name("station") == 1
    assert t.index_by_name("missing") == -1
    assert t.find_by_name("flag") == AtomicType(np.uint8)
    assert t.find_by_name("missing") is None
    assert t.get_field(0).name == "float64"


def test_nested_structure():
    inner = np.dtype([("u", "f4"), ("v", "f4")])
    t = describe_dtype(np.dtype([("wind", inner), ("p", "f8")]))
    wind = t.find_by_name("wind")
    assert wind.sort is TypeSort.STRUCTURE
    assert wind.field_names == ("u", "v")


def test_duplicate_fields():
    with pytest.raises(ParameterError, match="Duplicate"):
        StructureType("s", (("a", AtomicType(np.float32)), ("a", AtomicType(np.int32))))


def test_sequence():
    t = describe_dtype(object, "profile")
    assert isinstance(t, SequenceType)
    assert t.sort is TypeSort.SEQUENCE
    assert t.element.sort is TypeSort.ATOMIC
