"""
Tests for map-equation codelength evaluation.
"""

import math

import numpy as np
import pytest
import polars as pl

from infoflow.common.context import ExecutionContext
from infoflow.network.codelength import (
    plogp,
    plogp_expr,
    probability_sum,
    calculate_codelength
)


class TestPlogp:
    """Test the plogp helper and its polars counterpart."""

    def test_scalar(self):
        assert plogp(0.0) == 0.0
        assert plogp(1.0) == 0.0
        assert plogp(0.5) == pytest.approx(-0.5)
        assert plogp(0.25) == pytest.approx(-0.5)

    def test_array(self):
        result = plogp(np.array([0.0, 0.5, 1.0]))
        assert isinstance(result, np.ndarray)
        np.testing.assert_allclose(result, [0.0, -0.5, 0.0])

    def test_expression_matches_scalar(self):
        values = [0.0, 0.1, 0.5, 0.9, 1.0]
        result = pl.DataFrame({"x": values}).select(plogp_expr(pl.col("x")))
        assert result["x"].to_list() == pytest.approx([plogp(v) for v in values])


class TestCalculateCodelength:
    """Test the map equation on hand-computed module records."""

    def setup_method(self):
        self.context = ExecutionContext()
        third = 1 / 3
        self.singletons = pl.LazyFrame({
            "id": [1, 2, 3], "size": [1, 1, 1], "prob": [third] * 3,
            "exitw": [third] * 3, "exitq": [third] * 3,
        })

    def test_probability_sum(self):
        assert probability_sum(self.singletons, self.context) == pytest.approx(-math.log2(3))

    def test_singletons(self):
        prob_sum = probability_sum(self.singletons, self.context)
        codelength = calculate_codelength(self.singletons, prob_sum, self.context)
        assert codelength == pytest.approx(math.log2(3) + 2)

    def test_single_module_is_node_entropy(self):
        prob_sum = probability_sum(self.singletons, self.context)
        module = pl.LazyFrame({"id": [1], "size": [3], "prob": [1.0], "exitw": [0.0], "exitq": [0.0]})
        assert calculate_codelength(module, prob_sum, self.context) == pytest.approx(math.log2(3))
