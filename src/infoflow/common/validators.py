"""
Input validation for flow-graph frames.

These checks run on materialized polars DataFrames before a graph enters
the pipeline, so that malformed input fails early with a ValidationError
instead of surfacing as an engine error deep inside a lazy query.
"""

from typing import Optional

import polars as pl

from .exceptions import ValidationError


def _require_columns(df: pl.DataFrame, columns, frame_name: str) -> None:
    missing_cols = [col for col in columns if col not in df.columns]
    if missing_cols:
        raise ValidationError(
            f"{frame_name} is missing required columns: {missing_cols}",
            field="columns",
            details={"available_columns": df.columns, "missing": missing_cols}
        )


def _require_integer_ids(df: pl.DataFrame, col: str) -> None:
    if not df[col].dtype.is_integer():
        raise ValidationError(
            f"Vertex ids must be integers, got {df[col].dtype}",
            field=col,
            details={"dtype": str(df[col].dtype)}
        )
    null_count = df[col].null_count()
    if null_count > 0:
        raise ValidationError(
            f"Column contains {null_count} null values",
            field=col,
            details={"null_count": null_count, "total_rows": len(df)}
        )


def validate_edge_frame(
    df: pl.DataFrame,
    source_col: str = "src",
    target_col: str = "dst",
    weight_col: Optional[str] = None
) -> None:
    """
    Validate a directed, weighted edge list.

    Parameters
    ----------
    df : pl.DataFrame
        Edge list to validate. An empty frame is valid (a graph of isolated
        vertices).
    source_col : str, default "src"
        Name of the source vertex column
    target_col : str, default "dst"
        Name of the target vertex column
    weight_col : str, optional
        Name of the weight column, if the edge list is weighted

    Raises
    ------
    ValidationError
        If a column is missing, ids are not non-null integers, or weights are
        null, non-numeric, negative or non-finite

    Examples
    --------
    >>> df = pl.DataFrame({"src": [1, 2], "dst": [2, 1], "weight": [1.0, 3.0]})
    >>> validate_edge_frame(df, weight_col="weight")
    """
    required_cols = [source_col, target_col] + ([weight_col] if weight_col else [])
    _require_columns(df, required_cols, "Edge list")

    for col in (source_col, target_col):
        _require_integer_ids(df, col)

    if weight_col is None:
        return

    weight_series = df[weight_col]
    if not weight_series.dtype.is_numeric():
        raise ValidationError(
            f"Weight column must be numeric, got {weight_series.dtype}",
            field=weight_col,
            details={"dtype": str(weight_series.dtype)}
        )

    null_count = weight_series.null_count()
    if null_count > 0:
        raise ValidationError(
            f"Weight column contains {null_count} null values",
            field=weight_col,
            details={"null_count": null_count}
        )

    weights = weight_series.cast(pl.Float64)
    non_finite = int((~weights.is_finite()).sum())
    if non_finite > 0:
        raise ValidationError(
            f"Weight column contains {non_finite} non-finite values",
            field=weight_col,
            details={"non_finite_count": non_finite}
        )

    negative_count = int((weights < 0).sum())
    if negative_count > 0:
        raise ValidationError(
            f"Weight column contains {negative_count} negative values. "
            f"Minimum weight: {weights.min()}",
            field=weight_col,
            details={"min_weight": weights.min(), "negative_count": negative_count}
        )


def validate_vertex_frame(df: pl.DataFrame, id_col: str = "id") -> None:
    """
    Validate a vertex table: integer, non-null, unique ids.

    Raises
    ------
    ValidationError
        If the id column is missing, null, non-integer or duplicated
    """
    _require_columns(df, [id_col], "Vertex table")
    _require_integer_ids(df, id_col)

    duplicate_count = int(df[id_col].is_duplicated().sum())
    if duplicate_count > 0:
        raise ValidationError(
            f"Found {duplicate_count} rows with duplicated vertex ids",
            field=id_col,
            details={"duplicate_count": duplicate_count}
        )


def validate_assignment_frame(
    assignment: pl.DataFrame,
    vertex_ids: pl.Series,
    id_col: str = "id",
    module_col: str = "module"
) -> None:
    """
    Validate a vertex-to-module assignment against the vertices it covers.

    Every vertex must be assigned to exactly one module.

    Raises
    ------
    ValidationError
        If columns are missing or malformed, a vertex is assigned twice, or
        a vertex is not assigned at all
    """
    _require_columns(assignment, [id_col, module_col], "Assignment")
    _require_integer_ids(assignment, id_col)
    _require_integer_ids(assignment, module_col)

    duplicate_count = int(assignment[id_col].is_duplicated().sum())
    if duplicate_count > 0:
        raise ValidationError(
            f"Found {duplicate_count} rows assigning the same vertex twice",
            field=id_col,
            details={"duplicate_count": duplicate_count}
        )

    assigned = set(assignment[id_col].to_list())
    unassigned = [v for v in vertex_ids.to_list() if v not in assigned]
    if unassigned:
        raise ValidationError(
            f"{len(unassigned)} vertices have no module assignment",
            field=module_col,
            details={"unassigned": unassigned[:10]}
        )
