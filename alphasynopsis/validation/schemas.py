import numpy as np

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.schema.descriptor import FLOAT_FIELDS, INT_FIELDS
from alphasynopsis.validation.base import Optional, Required, Schema

hits_schema = Schema(
    "hits",
    [
        Required(HitCols.LINE_NUMBER, np.int64),
        Required(HitCols.PEPTIDE, object),
        Required(HitCols.PROTEIN, object),
        *[Optional(field, np.int64) for field in INT_FIELDS if field != HitCols.LINE_NUMBER],
        *[Optional(field, np.float64) for field in FLOAT_FIELDS],
    ],
)
