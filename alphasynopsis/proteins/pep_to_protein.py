"""Expansion of hits to every protein a peptide maps to."""

import bisect
import logging
import os
from dataclasses import dataclass

import numpy as np
import pandas as pd

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.exceptions import InputFileError
from alphasynopsis.fdr.fdr import identification_groups
from alphasynopsis.reporting import PeriodicWarning

logger = logging.getLogger()

PEP_TO_PROTEIN_COLUMNS = ["Peptide", "Protein", "ResidueStart", "ResidueEnd"]


@dataclass(frozen=True)
class PepToProteinEntry:
    """A peptide and the residues of a protein it covers."""

    peptide: str
    protein: str
    residue_start: int
    residue_end: int


@dataclass(frozen=True)
class IdentificationKey:
    """Identity of a hit independent of the protein it is reported for."""

    scan: int
    charge: int
    peptide: str


def _is_int(text: str) -> bool:
    try:
        int(text)
    except ValueError:
        return False
    return True


def load_pep_to_protein_map(path: str) -> list[PepToProteinEntry]:
    """Read a tab-separated peptide to protein map.

    The columns are peptide, protein, first and last residue. A header line is recognized
    by a third column which is not an integer. Lines without peptide or protein are skipped,
    missing residue numbers are read as 0.

    Returns
    -------
    list[PepToProteinEntry]
        Entries sorted by peptide.

    Raises
    ------
    InputFileError
        If the file does not exist or cannot be read.
    """
    if not os.path.exists(path):
        raise InputFileError(path, "Peptide to protein map file not found.")

    logger.info(f"Reading peptide to protein map from {path}")
    try:
        map_df = pd.read_csv(
            path,
            sep="\t",
            header=None,
            usecols=range(4),
            names=PEP_TO_PROTEIN_COLUMNS,
            dtype=str,
            keep_default_na=False,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError:
        map_df = pd.DataFrame(columns=PEP_TO_PROTEIN_COLUMNS)
    except OSError as e:
        raise InputFileError(path, str(e)) from e

    map_df = map_df.fillna("")

    if len(map_df) > 0 and not _is_int(map_df["ResidueStart"].iloc[0]):
        map_df = map_df.iloc[1:]

    map_df = map_df[(map_df["Peptide"] != "") & (map_df["Protein"] != "")]
    residue_start = pd.to_numeric(map_df["ResidueStart"], errors="coerce").fillna(0)
    residue_end = pd.to_numeric(map_df["ResidueEnd"], errors="coerce").fillna(0)

    entries = [
        PepToProteinEntry(peptide, protein, int(start), int(end))
        for peptide, protein, start, end in zip(
            map_df["Peptide"], map_df["Protein"], residue_start, residue_end, strict=True
        )
    ]
    entries.sort(key=lambda entry: entry.peptide)
    logger.info(f"Loaded {len(entries):,} peptide to protein entries")
    return entries


class PepToProteinIndex:
    def __init__(self, entries: list[PepToProteinEntry]) -> None:
        """Peptide to protein entries, searchable by peptide.

        Parameters
        ----------
        entries : list[PepToProteinEntry]
            Entries in any order, they are sorted by peptide.

        """
        self.entries = sorted(entries, key=lambda entry: entry.peptide)
        self.peptides = [entry.peptide for entry in self.entries]

    @classmethod
    def from_file(cls, path: str) -> "PepToProteinIndex":
        return cls(load_pep_to_protein_map(path))

    def __len__(self) -> int:
        return len(self.entries)

    def find_first_match(self, peptide: str) -> int:
        """Index of the first entry of the peptide, -1 if the peptide is not in the map."""
        index = bisect.bisect_left(self.peptides, peptide)
        if index < len(self.peptides) and self.peptides[index] == peptide:
            return index
        return -1

    def proteins(self, peptide: str) -> list[str]:
        """All proteins of a peptide, in map order without duplicates."""
        index = self.find_first_match(peptide)
        if index < 0:
            return []

        proteins = []
        while index < len(self.entries) and self.entries[index].peptide == peptide:
            proteins.append(self.entries[index].protein)
            index += 1
        return list(dict.fromkeys(proteins))


def expand_proteins(hits_df: pd.DataFrame, index: PepToProteinIndex) -> pd.DataFrame:
    """Add a row for every protein of the map which is not yet reported for an identification.

    Rows of the same scan, charge and peptide have to be contiguous. Added rows copy the first
    row of their identification and directly follow it. The map is searched by primary sequence
    and, if that fails, by clean sequence.

    Parameters
    ----------
    hits_df : pd.DataFrame
        Hits sorted such that rows of the same identification are contiguous.

    index : PepToProteinIndex
        Peptide to protein map.

    Returns
    -------
    pd.DataFrame
        Hits including the added rows.
    """
    if hits_df.empty or len(index) == 0:
        return hits_df

    no_match_warning = PeriodicWarning("No match in peptide to protein mapping for peptide")
    group_idx = identification_groups(hits_df)
    group_starts = np.flatnonzero(np.diff(group_idx, prepend=-1))
    group_ends = np.append(group_starts[1:], len(hits_df))

    proteins = hits_df[HitCols.PROTEIN].to_numpy()
    primary = hits_df[HitCols.PRIMARY_SEQUENCE].to_numpy()
    clean = hits_df[HitCols.CLEAN_SEQUENCE].to_numpy()
    scans = hits_df[HitCols.SCAN].to_numpy()
    charges = hits_df[HitCols.CHARGE].to_numpy()
    peptides = hits_df[HitCols.PEPTIDE].to_numpy()

    row_indices = []
    row_proteins = []
    is_added = []
    seen: set[IdentificationKey] = set()

    for start, end in zip(group_starts, group_ends, strict=True):
        row_indices.extend(range(start, end))
        row_proteins.extend(proteins[start:end])
        is_added.extend([False] * (end - start))

        key = IdentificationKey(int(scans[start]), int(charges[start]), peptides[start])
        if key in seen:
            continue
        seen.add(key)

        mapped = index.proteins(primary[start]) or index.proteins(clean[start])
        if not mapped:
            no_match_warning(f"'{primary[start]}'")
            continue

        reported = set(proteins[start:end])
        for protein in mapped:
            if protein not in reported:
                row_indices.append(start)
                row_proteins.append(protein)
                is_added.append(True)

    no_match_warning.summarize()

    expanded_df = hits_df.iloc[row_indices].reset_index(drop=True)
    expanded_df[HitCols.PROTEIN] = row_proteins
    if HitCols.PEPTIDE_POSITION in expanded_df.columns:
        expanded_df.loc[np.array(is_added, dtype=bool), HitCols.PEPTIDE_POSITION] = ""

    logger.info(
        f"Added {sum(is_added):,} rows for additional proteins to {len(hits_df):,} hits"
    )
    return expanded_df
