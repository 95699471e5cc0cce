"""Ranking of the hits of each scan."""

import logging

import numba as nb
import numpy as np
import pandas as pd

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.schema.descriptor import ToolSchema
from alphasynopsis.utils import USE_NUMBA_CACHING

logger = logging.getLogger()

# scores closer than this are considered tied
SCORE_EPSILON = np.finfo(np.float64).eps

_SORT_KEY = "_sort_key"


@nb.njit(cache=USE_NUMBA_CACHING)
def rank_sorted_scores(scan, score, delta_norm_default):
    """Rank scores which are sorted by scan and from best to worst within each scan.

    Parameters
    ----------

    scan : np.ndarray
        Scan numbers of shape (n,), hits of the same scan are contiguous.

    score : np.ndarray
        Scores of shape (n,), sorted from best to worst within each scan.

    delta_norm_default : float
        Normalized score difference of the last hit of a scan and of hits with score 0.

    Returns
    -------
    rank : np.ndarray
        Rank of shape (n,) starting at 1 for each scan. Tied scores share a rank.

    delta_norm : np.ndarray
        Normalized difference to the next score of the scan, |(score[i] - score[i+1]) / score[i]|.

    """
    n = len(scan)
    rank = np.zeros(n, dtype=np.int32)
    delta_norm = np.full(n, delta_norm_default, dtype=np.float64)

    for i in range(n):
        if i == 0 or scan[i] != scan[i - 1]:
            rank[i] = 1
        elif abs(score[i] - score[i - 1]) > SCORE_EPSILON:
            rank[i] = rank[i - 1] + 1
        else:
            rank[i] = rank[i - 1]

        if i + 1 < n and scan[i + 1] == scan[i] and score[i] != 0:
            delta_norm[i] = abs((score[i] - score[i + 1]) / score[i])

    return rank, delta_norm


def sort_by_scan(
    hits_df: pd.DataFrame, score_column: str, higher_is_better: bool
) -> pd.DataFrame:
    """Sort hits by scan, best score first within a scan. Charge, peptide and protein break ties."""
    sort_key = hits_df[score_column].fillna(0.0).to_numpy(dtype=np.float64)
    if higher_is_better:
        sort_key = -sort_key

    return (
        hits_df.assign(**{_SORT_KEY: sort_key})
        .sort_values(
            [HitCols.SCAN, _SORT_KEY, HitCols.CHARGE, HitCols.PEPTIDE, HitCols.PROTEIN],
            kind="mergesort",
        )
        .drop(columns=_SORT_KEY)
        .reset_index(drop=True)
    )


def rank_hits(
    hits_df: pd.DataFrame, schema: ToolSchema, delta_norm_default: float = 0.0
) -> pd.DataFrame:
    """Rank all hits of each scan by the ranking score of the tool.

    Hits of all charge states of a scan compete. Must be applied before any filtering.

    Parameters
    ----------
    hits_df : pd.DataFrame
        Unfiltered hits.

    schema : ToolSchema
        Schema defining the ranking score and its direction.

    delta_norm_default : float, default 0.0
        Normalized score difference assigned to the last hit of each scan.

    Returns
    -------
    pd.DataFrame
        Hits sorted by scan and score, with rank and normalized score difference columns.
    """
    ranked_df = sort_by_scan(hits_df, schema.score_field, schema.score_higher_is_better)

    rank, delta_norm = rank_sorted_scores(
        ranked_df[HitCols.SCAN].to_numpy(dtype=np.int64),
        ranked_df[schema.score_field].fillna(0.0).to_numpy(dtype=np.float64),
        float(delta_norm_default),
    )
    ranked_df[HitCols.RANK] = rank
    ranked_df[HitCols.DELTA_NORM] = delta_norm
    return ranked_df


def filter_hits(
    hits_df: pd.DataFrame, schema: ToolSchema, threshold: float
) -> pd.DataFrame:
    """Keep hits whose filter score is at least as good as the threshold.

    Hits without a filter score are removed.
    """
    values = hits_df[schema.filter_field]
    if schema.filter_higher_is_better:
        mask = values >= threshold
    else:
        mask = values <= threshold

    logger.info(
        f"Keeping {mask.sum():,} of {len(hits_df):,} hits passing {schema.filter_field} threshold {threshold}"
    )
    return hits_df[mask].reset_index(drop=True)


def first_hits(hits_df: pd.DataFrame) -> pd.DataFrame:
    """Hits ranked first in their scan."""
    return hits_df[hits_df[HitCols.RANK] == 1].reset_index(drop=True)
