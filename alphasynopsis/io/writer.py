import logging
import os

import numpy as np
import pandas as pd

from alphasynopsis.constants.keys import HitCols, ModificationType, SynopsisFiles
from alphasynopsis.modifications.definitions import ModificationDefinitions
from alphasynopsis.schema.descriptor import ToolSchema

logger = logging.getLogger()


def format_float(value: float, digits: int = 5) -> str:
    """Format a number with at most `digits` decimals and without trailing zeros.

    Non-zero values too small for `digits` decimals are written in scientific notation, NaN as empty text.
    """
    if not np.isfinite(value):
        return ""
    if value != 0 and abs(value) < 10**-digits:
        return f"{value:.{max(digits - 1, 1)}e}"
    text = f"{value:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def to_synopsis_df(
    hits_df: pd.DataFrame, schema: ToolSchema, float_digits: int = 5
) -> pd.DataFrame:
    """Select and rename the columns written to the synopsis file of the tool.

    Result ids are assigned as 1..n in the current row order. Fields missing from `hits_df` are written empty.
    """
    hits_df = hits_df.assign(**{HitCols.RESULT_ID: np.arange(1, len(hits_df) + 1)})

    columns = {}
    for name, field in schema.synopsis_columns:
        if field not in hits_df.columns:
            columns[name] = [""] * len(hits_df)
            continue
        values = hits_df[field]
        if pd.api.types.is_float_dtype(values):
            columns[name] = [format_float(v, float_digits) for v in values]
        elif pd.api.types.is_bool_dtype(values):
            columns[name] = values.astype(int).to_numpy()
        else:
            columns[name] = values.to_numpy()
    return pd.DataFrame(columns, columns=schema.synopsis_header)


def write_synopsis(
    hits_df: pd.DataFrame, path: str, schema: ToolSchema, float_digits: int = 5
) -> None:
    """Write hits as tab-separated synopsis file.

    Parameters
    ----------

    hits_df: pd.DataFrame
        Hits in their final order.

    path: str
        Path of the synopsis file.

    schema: ToolSchema
        Schema defining the columns of the synopsis file.

    float_digits: int, default 5
        Maximum number of decimals of numbers.

    """
    logger.info(f"Saving {len(hits_df):,} hits to {path}")
    to_synopsis_df(hits_df, schema, float_digits).to_csv(path, sep="\t", index=False)


MOD_SUMMARY_COLUMNS = [
    "Modification_Name",
    "Modification_Mass",
    "Target_Residues",
    "Modification_Type",
    "Occurrence_Count",
]


def to_mod_summary_df(
    hits_df: pd.DataFrame, definitions: ModificationDefinitions | None = None
) -> pd.DataFrame:
    """Summarize the modifications found in reconciled hits.

    Every configured modification is listed, also if it was not found. Modifications
    resolved from the alphabase table or labelled by their mass are listed with the
    residues they were found on. Rows split by protein are counted once.

    Parameters
    ----------
    hits_df : pd.DataFrame
        Hits with the modification tokens added by mass reconciliation.

    definitions : ModificationDefinitions, optional
        Modifications of the search.

    Returns
    -------
    pd.DataFrame
        One row per modification name and type, in order of first appearance.
    """
    summary = {}
    if definitions is not None:
        for definition in definitions.definitions:
            summary.setdefault(
                (definition.name, definition.type), [definition.mass, definition.residues, 0]
            )

    found_residues = {}
    for tokens in hits_df.drop_duplicates(subset=HitCols.LINE_NUMBER)[HitCols.MOD_TOKENS]:
        for token in tokens:
            mod_type = ModificationType.STATIC if token.is_static else ModificationType.DYNAMIC
            key = (token.name, mod_type)
            summary.setdefault(key, [token.mass_delta, None, 0])[2] += 1
            found_residues.setdefault(key, set()).add(token.residue)

    rows = []
    for (name, mod_type), (mass, residues, count) in summary.items():
        if residues is None:
            residues = "".join(sorted(found_residues[(name, mod_type)]))
        rows.append([name, format_float(mass, 6), residues, mod_type, count])
    return pd.DataFrame(rows, columns=MOD_SUMMARY_COLUMNS)


def write_mod_summary(
    hits_df: pd.DataFrame, path: str, definitions: ModificationDefinitions | None = None
) -> None:
    """Write the modification summary of the hits as tab-separated file."""
    summary_df = to_mod_summary_df(hits_df, definitions)
    logger.info(f"Saving {len(summary_df):,} modifications to {path}")
    summary_df.to_csv(path, sep="\t", index=False)


def _companion_path(path: str, suffix: str) -> str:
    if path.endswith(SynopsisFiles.SYNOPSIS_SUFFIX):
        base = path[: -len(SynopsisFiles.SYNOPSIS_SUFFIX)]
    else:
        base = os.path.splitext(path)[0]
    return base + suffix


def first_hits_path(path: str) -> str:
    """Path of the first hits file written next to a synopsis file."""
    return _companion_path(path, SynopsisFiles.FIRST_HITS_SUFFIX)


def mod_summary_path(path: str) -> str:
    """Path of the modification summary written next to a synopsis file."""
    return _companion_path(path, SynopsisFiles.MOD_SUMMARY_SUFFIX)


def synopsis_path(input_path: str, output_directory: str | None = None) -> str:
    """Default path of the synopsis file of a result file."""
    base = os.path.splitext(os.path.basename(input_path))[0]
    directory = output_directory if output_directory is not None else os.path.dirname(input_path)
    return os.path.join(directory, base + SynopsisFiles.SYNOPSIS_SUFFIX)
