"""
Tests for input validation functions.
"""

import pytest
import polars as pl

from infoflow.common.exceptions import ValidationError
from infoflow.common.validators import (
    validate_edge_frame,
    validate_vertex_frame,
    validate_assignment_frame
)


class TestValidateEdgeFrame:
    """Test edge list validation."""

    def test_valid_weighted_edges(self):
        df = pl.DataFrame({"src": [1, 2], "dst": [2, 1], "weight": [1.0, 2.5]})
        validate_edge_frame(df, weight_col="weight")

    def test_empty_edges_are_valid(self):
        df = pl.DataFrame(schema={"src": pl.Int64, "dst": pl.Int64})
        validate_edge_frame(df)

    def test_missing_column(self):
        df = pl.DataFrame({"src": [1]})
        with pytest.raises(ValidationError, match="missing required columns"):
            validate_edge_frame(df)

    def test_non_integer_ids(self):
        df = pl.DataFrame({"src": ["a"], "dst": ["b"]})
        with pytest.raises(ValidationError, match="integers"):
            validate_edge_frame(df)

    def test_null_ids(self):
        df = pl.DataFrame({"src": [1, None], "dst": [2, 3]})
        with pytest.raises(ValidationError, match="null"):
            validate_edge_frame(df)

    def test_negative_weight(self):
        df = pl.DataFrame({"src": [1, 2], "dst": [2, 1], "weight": [1.0, -1.0]})
        with pytest.raises(ValidationError, match="negative"):
            validate_edge_frame(df, weight_col="weight")

    def test_non_finite_weight(self):
        df = pl.DataFrame({"src": [1], "dst": [2], "weight": [float("inf")]})
        with pytest.raises(ValidationError, match="non-finite"):
            validate_edge_frame(df, weight_col="weight")

    def test_null_weight(self):
        df = pl.DataFrame({"src": [1, 2], "dst": [2, 1], "weight": [1.0, None]})
        with pytest.raises(ValidationError, match="null"):
            validate_edge_frame(df, weight_col="weight")

    def test_non_numeric_weight(self):
        df = pl.DataFrame({"src": [1], "dst": [2], "weight": ["heavy"]})
        with pytest.raises(ValidationError, match="numeric"):
            validate_edge_frame(df, weight_col="weight")


class TestValidateVertexFrame:
    """Test vertex table validation."""

    def test_valid(self):
        validate_vertex_frame(pl.DataFrame({"id": [1, 2, 3], "name": ["a", "b", "c"]}))

    def test_duplicate_ids(self):
        with pytest.raises(ValidationError, match="duplicated"):
            validate_vertex_frame(pl.DataFrame({"id": [1, 1]}))


class TestValidateAssignmentFrame:
    """Test partition assignment validation."""

    def setup_method(self):
        self.vertex_ids = pl.Series("id", [1, 2, 3])

    def test_valid(self):
        assignment = pl.DataFrame({"id": [1, 2, 3], "module": [1, 1, 3]})
        validate_assignment_frame(assignment, self.vertex_ids)

    def test_unassigned_vertex(self):
        assignment = pl.DataFrame({"id": [1, 2], "module": [1, 1]})
        with pytest.raises(ValidationError, match="no module assignment"):
            validate_assignment_frame(assignment, self.vertex_ids)

    def test_vertex_assigned_twice(self):
        assignment = pl.DataFrame({"id": [1, 1, 2, 3], "module": [1, 2, 1, 1]})
        with pytest.raises(ValidationError, match="twice"):
            validate_assignment_frame(assignment, self.vertex_ids)
