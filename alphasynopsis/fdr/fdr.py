from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np
import pandas as pd

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.proteins.protein_list import split_protein_list
from alphasynopsis.schema.descriptor import ToolSchema

logger = logging.getLogger()

IDENTIFICATION_COLUMNS = [HitCols.SCAN, HitCols.CHARGE, HitCols.PEPTIDE]

_SORT_KEY = "_sort_key"


def sort_by_confidence(hits_df: pd.DataFrame, schema: ToolSchema) -> pd.DataFrame:
    """Sort hits from most to least confident.

    Ties are broken by scan, charge, peptide and protein, which keeps the rows of one identification contiguous.
    """
    sort_key = hits_df[schema.fdr_field].fillna(0.0).to_numpy(dtype=np.float64)
    if schema.fdr_higher_is_better:
        sort_key = -sort_key

    return (
        hits_df.assign(**{_SORT_KEY: sort_key})
        .sort_values(
            [_SORT_KEY, HitCols.SCAN, HitCols.CHARGE, HitCols.PEPTIDE, HitCols.PROTEIN],
            kind="mergesort",
        )
        .drop(columns=_SORT_KEY)
        .reset_index(drop=True)
    )


def _fdr_to_q_values(fdr_values: np.ndarray) -> np.ndarray:
    """Converts FDR values to q-values.

    Takes a array of FDR values sorted from most to least confident and converts them to q-values.
    for every element the lowest FDR where it would be accepted is used as q-value.

    Parameters
    ----------
    fdr_values : np.ndarray
        The FDR values to convert.

    Returns
    -------
    np.ndarray
        The q-values.

    """
    fdr_values_flipped = np.flip(fdr_values)
    q_values_flipped = np.minimum.accumulate(fdr_values_flipped)
    return np.flip(q_values_flipped)


def identification_groups(hits_df: pd.DataFrame) -> np.ndarray:
    """Index of the identification group of each row.

    Contiguous rows sharing scan, charge and peptide form a group.
    """
    if hits_df.empty:
        return np.zeros(0, dtype=np.int64)

    keys = hits_df[IDENTIFICATION_COLUMNS]
    is_new_group = (keys != keys.shift()).any(axis=1).to_numpy()
    is_new_group[0] = True
    return np.cumsum(is_new_group) - 1


def get_q_values(
    hits_df: pd.DataFrame,
    is_decoy: Callable[[str], bool],
    protein_list_separator: str | None = None,
    max_q_value: float = 1.0,
) -> pd.DataFrame:
    """Calculates FDR and q-values for hits sorted by confidence.

    Rows of the same identification are counted once. An identification is a decoy only if every
    protein of every one of its rows is a decoy. Walking from most to least confident, the FDR of an
    identification is the number of decoy identifications seen so far divided by the number of
    target identifications seen so far, at least 1.

    Parameters
    ----------
    hits_df : pd.DataFrame
        Hits sorted from most to least confident, see `sort_by_confidence`.

    is_decoy : callable
        Decides whether a protein name belongs to a decoy.

    protein_list_separator : str, optional
        Separator of protein columns which list several proteins.

    max_q_value : float, default 1.0
        Upper bound of FDR and q-values.

    Returns
    -------
    pd.DataFrame
        A copy of `hits_df` with the columns decoy, fdr and qvalue.
        q-values never decrease from the most to the least confident hit.
    """
    hits_df = hits_df.copy()
    group_idx = identification_groups(hits_df)

    row_is_decoy = np.array(
        [
            all(is_decoy(protein) for protein in split_protein_list(proteins, protein_list_separator))
            for proteins in hits_df[HitCols.PROTEIN]
        ],
        dtype=bool,
    )

    n_groups = group_idx.max() + 1 if len(group_idx) else 0
    group_is_decoy = np.ones(n_groups, dtype=bool)
    np.logical_and.at(group_is_decoy, group_idx, row_is_decoy)

    decoy_cumsum = np.cumsum(group_is_decoy)
    target_cumsum = np.cumsum(~group_is_decoy)
    fdr_values = np.minimum(decoy_cumsum / np.maximum(target_cumsum, 1), max_q_value)
    q_values = _fdr_to_q_values(fdr_values)

    hits_df[HitCols.DECOY] = group_is_decoy[group_idx]
    hits_df[HitCols.FDR] = fdr_values[group_idx]
    hits_df[HitCols.QVALUE] = q_values[group_idx]

    n_decoys = int(group_is_decoy.sum())
    logger.info(f"{n_groups - n_decoys:,} target and {n_decoys:,} decoy identifications")
    return hits_df
