"""Handling of protein columns which list several proteins."""

import logging
import re

import pandas as pd

from alphasynopsis.constants.keys import HitCols

logger = logging.getLogger()

# protein name followed by the location of the peptide, e.g. ref|YP_001[K.196~206.Q(2)]
_PROTEIN_WITH_POSITION = re.compile(r"(.+)\[([^\]]+)\]")

# written for hits whose protein list is empty
UNKNOWN_PROTEIN = "Unknown_Protein"


def split_protein_entry(entry: str) -> tuple[str, str]:
    """Split a protein list entry into protein name and peptide position, the position may be empty."""
    entry = entry.strip()
    match = _PROTEIN_WITH_POSITION.fullmatch(entry)
    if match is None:
        return entry, ""
    return match.group(1), match.group(2)


def split_protein_list(proteins: str, separator: str | None) -> list[str]:
    """Protein names of a protein column, without peptide positions."""
    if separator is None:
        entries = [proteins]
    else:
        entries = [entry for entry in proteins.split(separator) if entry.strip()]
    return [split_protein_entry(entry)[0] for entry in entries] or [""]


def explode_protein_lists(hits_df: pd.DataFrame, separator: str | None) -> pd.DataFrame:
    """Write one row per protein for hits whose protein column lists several proteins.

    The peptide position of each entry is moved to the peptide position column.
    Rows of the same hit stay contiguous and in the order of the list.
    """
    if separator is None or hits_df.empty:
        return hits_df

    entries = hits_df[HitCols.PROTEIN].map(
        lambda proteins: [
            split_protein_entry(entry)
            for entry in proteins.split(separator)
            if entry.strip()
        ]
        or [(UNKNOWN_PROTEIN, "")]
    )
    exploded_df = hits_df.assign(_entry=entries).explode("_entry", ignore_index=True)
    exploded_df[HitCols.PROTEIN] = exploded_df["_entry"].map(lambda entry: entry[0])
    exploded_df[HitCols.PEPTIDE_POSITION] = exploded_df["_entry"].map(
        lambda entry: entry[1]
    )

    logger.info(
        f"Expanded protein lists of {len(hits_df):,} hits into {len(exploded_df):,} rows"
    )
    return exploded_df.drop(columns="_entry")
