import logging

import numpy as np
import pandas as pd
import pytest

from alphasynopsis.validation.base import Optional, Required, Schema, to_number


def test_to_number():
    values = pd.Series(["1.5", "Infinity", "abc", ""], dtype=object)

    floats = to_number(values, np.float64)
    ints = to_number(pd.Series(["3", "x"], dtype=object), np.int64)

    assert floats.iloc[0] == 1.5
    assert floats.iloc[1] == 0.0
    assert floats.iloc[2] == 0.0
    assert floats.iloc[3] == 0.0
    assert not floats.isna().any()
    assert ints.tolist() == [3, 0]
    assert ints.dtype == np.int64


def test_schema_validate_casts_columns():
    schema = Schema(
        "test",
        [
            Required("a", np.int64),
            Required("b", object),
            Optional("c", np.float64),
            Optional("d", np.float64),
        ],
    )
    df = pd.DataFrame({"a": ["1", "2"], "b": ["x", None], "c": ["0.5", "-"]})

    schema.validate(df)

    assert df["a"].dtype == np.int64
    assert df["b"].tolist() == ["x", ""]
    assert df["c"].dtype == np.float64
    assert df["c"].tolist() == [0.5, 0.0]
    assert "d" not in df.columns


def test_schema_validate_missing_required_column():
    schema = Schema("test", [Required("a", np.int64)])

    with pytest.raises(ValueError):
        schema.validate(pd.DataFrame({"b": [1]}))


def test_schema_rejects_non_properties():
    with pytest.raises(ValueError):
        Schema("test", ["a"])


def test_schema_warns_on_nan_values(caplog):
    schema = Schema("test", [Optional("c", np.float64)])
    df = pd.DataFrame({"c": ["1.0", "abc"]})

    with caplog.at_level(logging.WARNING):
        schema.validate(df, warn_on_critical_values=True)

    assert "c has 1 values which are not numbers" in caplog.text
    assert df["c"].tolist() == [1.0, 0.0]


def test_schema_does_not_warn_on_empty_values(caplog):
    schema = Schema("test", [Optional("c", np.float64)])
    df = pd.DataFrame({"c": ["", ""]})

    with caplog.at_level(logging.WARNING):
        schema.validate(df, warn_on_critical_values=True)

    assert "not numbers" not in caplog.text
    assert df["c"].tolist() == [0.0, 0.0]
