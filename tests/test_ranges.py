import numpy as np
import pytest

from gridsubset import ParameterError, Range, RangeOutOfBoundsError
from gridsubset.coordinates import AxisType, CoordinateAxis
from gridsubset.core.exceptions import EmptySubsetResultError
from gridsubset.subsetting import (
    apply_stride,
    compose_ranges,
    full_range,
    resolve_range,
    validate_range,
)


class TestRange:
    def test_length(self):
        assert Range(0, 26, 3).length == 9
        assert len(Range(4, 10, 3)) == 3
        assert Range.single(7).length == 1

    @pytest.mark.parametrize(
        ("first", "last", "stride"),
        [(-1, 3, 1), (5, 3, 1), (0, 3, 0), (0, 3, -2)],
    )
    def test_invalid(self, first, last, stride):
        with pytest.raises(ParameterError):
            Range(first, last, stride)

    def test_non_integer(self):
        with pytest.raises(ParameterError, match="integer"):
            Range(0, 2.5)

    def test_last_element(self):
        rng = Range(0, 10, 3)
        assert rng.last_element == 9
        np.testing.assert_array_equal(rng.indices(), [0, 3, 6, 9])
        assert rng.to_slice() == slice(0, 10, 3)

    def test_element(self):
        rng = Range(2, 20, 3)
        assert rng.element(0) == 2
        assert rng.element(6) == 20
        with pytest.raises(RangeOutOfBoundsError):
            rng.element(7)
        with pytest.raises(RangeOutOfBoundsError):
            rng.element(-2)

    def test_compose(self):
        outer = Range(2, 20, 3)
        assert outer.compose(Range(1, 3)) == Range(5, 11, 3)
        assert outer.compose(Range(0, 6, 2)) == Range(2, 20, 6)
        with pytest.raises(RangeOutOfBoundsError, match="'z'"):
            outer.compose(Range(0, 7), "z")

    def test_union(self):
        assert Range(0, 10).union(Range(350, 359)) == Range(0, 359)
        assert Range(5, 9, 2).union(Range(0, 1)) == Range(0, 9)

    def test_is_full(self):
        assert Range(0, 9).is_full(10)
        assert not Range(0, 9, 3).is_full(10)
        assert not Range(1, 9).is_full(10)


class TestStride:
    @pytest.mark.parametrize("n", [1, 2, 5, 27, 61, 76])
    @pytest.mark.parametrize("s", [1, 2, 3, 4, 7])
    def test_full_range_rounding(self, n, s):
        rng = full_range(n, s)
        assert rng.first == 0
        assert rng.length == -(-n // s)
        assert rng.last_element <= n - 1
        if (n - 1) % s == 0:
            assert rng.last_element == n - 1

    def test_apply_stride_keeps_anchor(self):
        assert apply_stride(Range(4, 10), 3) == Range(4, 10, 3)
        assert apply_stride(Range(4, 10), 1) == Range(4, 10)
        assert apply_stride(Range(0, 26, 3), 3) == Range(0, 24, 9)

    @pytest.mark.parametrize("stride", [0, -1, 1.5])
    def test_invalid_stride(self, stride):
        with pytest.raises(ParameterError, match="stride"):
            full_range(10, stride)


class TestResolveRange:
    def test_identity(self):
        assert resolve_range(27) is None
        assert resolve_range(27, None, 1) is None

    def test_absent_axis(self):
        assert resolve_range(None, None, 3) is None

    def test_full_with_stride(self):
        assert resolve_range(27, None, 3) == Range(0, 26, 3)
        assert resolve_range(61, None, 3).length == 21
        assert resolve_range(76, None, 3).length == 26

    def test_explicit_range(self):
        assert resolve_range(27, Range(2, 20)) == Range(2, 20)
        assert resolve_range(27, Range(2, 20), 3) == Range(2, 20, 3)
        # A strided constraint is taken as is
        assert resolve_range(27, Range(2, 20, 2), 3) == Range(2, 20, 2)

    def test_out_of_bounds(self):
        with pytest.raises(RangeOutOfBoundsError, match="vertical"):
            resolve_range(27, Range(2, 30), axis_name="vertical")

    def test_bad_stride(self):
        with pytest.raises(ParameterError):
            resolve_range(27, None, 0)

    def test_value_constraint(self):
        axis = CoordinateAxis.regular("lev", 0.0, 100.0, 10, "m", AxisType.VERTICAL)
        assert resolve_range(axis, (120.0, 380.0)) == Range(1, 4)
        assert resolve_range(axis, (120.0, 380.0), 2) == Range(1, 4, 2)

    def test_value_constraint_outside(self):
        axis = CoordinateAxis.regular("lev", 0.0, 100.0, 10, "m", AxisType.VERTICAL)
        with pytest.raises(EmptySubsetResultError):
            resolve_range(axis, (5000.0, 6000.0))


def test_validate_range():
    assert validate_range(Range(0, 9), 10, "x") == Range(0, 9)
    with pytest.raises(RangeOutOfBoundsError, match="Valid index range: \\[0, 9\\]"):
        validate_range(Range(0, 10), 10, "x")


def test_compose_ranges():
    assert compose_ranges(None, None, 10, "x") == Range(0, 9)
    assert compose_ranges(None, Range(2, 4), 10, "x") == Range(2, 4)
    assert compose_ranges(Range(2, 8, 2), Range(1, 2), 4, "x") == Range(4, 6, 2)
