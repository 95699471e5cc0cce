import numpy as np
import pandas as pd

from alphasynopsis.constants.keys import HitCols

MODA_HEADER = [
    "SpectrumFile",
    "Index",
    "ObservedMW",
    "Charge",
    "CalculatedMW",
    "DeltaMass",
    "Score",
    "Probability",
    "Peptide",
    "Protein",
    "PeptidePosition",
]


def moda_line(
    index: int,
    peptide: str,
    protein: str = "prot1",
    probability: float = 0.9,
    charge: int = 2,
    observed_mw: float = 1000.0,
    calculated_mw: float = 0.0,
    score: float = 30.0,
) -> str:
    """A data line of a MODa result file."""
    return "\t".join(
        str(v)
        for v in [
            "spectra.mgf",
            index,
            observed_mw,
            charge,
            calculated_mw,
            0.0,
            score,
            probability,
            peptide,
            protein,
            "1~10",
        ]
    )


def write_lines(path: str, lines: list[str]) -> str:
    with open(path, "w") as f:
        f.write("\n".join(lines) + "\n")
    return path


def mock_hits_df(
    scan: list[int],
    score: list[float],
    protein: list[str] | None = None,
    charge: list[int] | None = None,
    peptide: list[str] | None = None,
    score_column: str = HitCols.PROBABILITY,
) -> pd.DataFrame:
    """Create a minimal hits dataframe as produced by the reader."""
    n = len(scan)
    return pd.DataFrame(
        {
            HitCols.LINE_NUMBER: np.arange(1, n + 1),
            HitCols.SCAN: np.array(scan, dtype=np.int64),
            HitCols.CHARGE: np.array(charge if charge is not None else [2] * n, dtype=np.int64),
            HitCols.PEPTIDE: peptide if peptide is not None else [f"K.PEPTIDE{i}.R" for i in range(n)],
            HitCols.PROTEIN: protein if protein is not None else ["prot1"] * n,
            score_column: np.array(score, dtype=np.float64),
        }
    )

