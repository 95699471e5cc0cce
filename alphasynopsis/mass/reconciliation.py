"""Reconciliation of the masses reported by a search tool with masses computed from the sequence."""

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from alphasynopsis.config import Config
from alphasynopsis.constants.keys import ConfigKeys, HitCols
from alphasynopsis.mass.calculator import (
    PeptideMassCalculator,
    correct_c13_isotope,
    mass_to_ppm,
    split_prefix_and_suffix,
)
from alphasynopsis.modifications.definitions import (
    ModificationDefinitions,
    describe_modifications,
)
from alphasynopsis.modifications.parser import (
    ModificationSyntax,
    ModificationToken,
    parse_annotation,
)
from alphasynopsis.reporting import PeriodicWarning

logger = logging.getLogger()


@dataclass(frozen=True)
class MassSettings:
    """Tolerances and conventions used when reconciling masses.

    Parameters
    ----------
    mismatch_min_tolerance : float
        Absolute mass difference in Da always tolerated between tool and computed mass.

    mismatch_relative_divisor : float
        The tolerance grows to `tool_mass / mismatch_relative_divisor` for large masses.

    fallback_mz : float
        m/z used to express DelM in ppm when the precursor m/z is unknown.

    correct_c13_isotope : bool
        Remove C13 isotope offsets from DelM before converting to ppm.

    """

    mismatch_min_tolerance: float = 0.1
    mismatch_relative_divisor: float = 50000.0
    fallback_mz: float = 1000.0
    correct_c13_isotope: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "MassSettings":
        mass_config = config[ConfigKeys.MASS]
        return cls(
            mismatch_min_tolerance=float(mass_config[ConfigKeys.MISMATCH_MIN_TOLERANCE]),
            mismatch_relative_divisor=float(
                mass_config[ConfigKeys.MISMATCH_RELATIVE_DIVISOR]
            ),
            fallback_mz=float(mass_config[ConfigKeys.FALLBACK_MZ]),
            correct_c13_isotope=bool(mass_config[ConfigKeys.CORRECT_C13_ISOTOPE]),
        )

    def tolerance(self, tool_mass: float) -> float:
        return max(self.mismatch_min_tolerance, tool_mass / self.mismatch_relative_divisor)


@dataclass(frozen=True)
class MassReconciliation:
    """Masses derived for a single hit.

    `theoretical_mass` is computed from the clean sequence and all modifications,
    `tool_mass` is the theoretical mass reported by the tool, or the computed mass if none was reported.
    `delm` and `delm_ppm` are NaN if the observed precursor is unknown.
    """

    primary_sequence: str
    clean_sequence: str
    tokens: tuple[ModificationToken, ...]
    theoretical_mass: float
    tool_mass: float
    mh: float
    precursor_mass: float
    precursor_mz: float
    delm: float
    delm_ppm: float
    mass_mismatch: bool

    @property
    def mod_description(self) -> str:
        return describe_modifications(list(self.tokens))


def _is_set(value) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def reconcile_mass(
    annotation: str,
    charge: int,
    calculator: PeptideMassCalculator,
    definitions: ModificationDefinitions,
    syntax: ModificationSyntax,
    precursor_mass: float | None = None,
    precursor_mz: float | None = None,
    tool_mass: float | None = None,
    settings: MassSettings | None = None,
    mismatch_warning: PeriodicWarning | None = None,
) -> MassReconciliation:
    """Compute the theoretical mass of an annotated peptide and its difference to the observed precursor.

    Parameters
    ----------
    annotation : str
        Peptide annotation, optionally with flanking residues and modification masses.

    charge : int
        Precursor charge, 0 if unknown.

    calculator : PeptideMassCalculator
        Residue masses and charge conversions.

    definitions : ModificationDefinitions
        Static modifications and names of dynamic modifications.

    syntax : ModificationSyntax
        How modifications are written into the annotation.

    precursor_mass, precursor_mz : float, optional
        Observed neutral precursor mass or m/z, the mass takes precedence.

    tool_mass : float, optional
        Theoretical neutral mass reported by the tool. Missing or 0 means the computed mass is used.

    settings : MassSettings, optional
        Tolerances, defaults to `MassSettings()`.

    mismatch_warning : PeriodicWarning, optional
        Called if computed and reported theoretical mass disagree.

    Returns
    -------
    MassReconciliation
    """
    if settings is None:
        settings = MassSettings()

    primary, prefix, suffix = split_prefix_and_suffix(annotation)
    dynamic_tokens = parse_annotation(primary, syntax, prefix, suffix)
    clean_sequence = "".join(c for c in primary if c.isalpha()).upper()
    tokens = (
        *definitions.annotate(dynamic_tokens),
        *definitions.static_tokens(clean_sequence, prefix, suffix),
    )

    theoretical_mass = calculator.compute_sequence_mass(clean_sequence) + sum(
        token.mass_delta for token in tokens
    )

    mass_mismatch = False
    if _is_set(tool_mass):
        if abs(theoretical_mass - tool_mass) > settings.tolerance(tool_mass):
            mass_mismatch = True
            if mismatch_warning is not None:
                mismatch_warning(
                    f"{annotation}: computed {theoretical_mass:.4f}, reported {tool_mass:.4f}"
                )
    else:
        tool_mass = theoretical_mass

    observed_mass = np.nan
    observed_mz = np.nan
    if _is_set(precursor_mass):
        observed_mass = precursor_mass
        if charge > 0:
            observed_mz = float(calculator.neutral_mass_to_mz(precursor_mass, charge))
    elif _is_set(precursor_mz) and charge > 0:
        observed_mz = precursor_mz
        observed_mass = float(calculator.mz_to_neutral_mass(precursor_mz, charge))

    delm = observed_mass - tool_mass
    if settings.correct_c13_isotope and math.isfinite(delm):
        delm = float(correct_c13_isotope(delm))
    ppm_reference = observed_mz if _is_set(observed_mz) else settings.fallback_mz
    delm_ppm = float(mass_to_ppm(delm, ppm_reference))

    return MassReconciliation(
        primary_sequence=primary,
        clean_sequence=clean_sequence,
        tokens=tokens,
        theoretical_mass=theoretical_mass,
        tool_mass=tool_mass,
        mh=calculator.convolute_mass(theoretical_mass, 0, 1),
        precursor_mass=observed_mass,
        precursor_mz=observed_mz,
        delm=delm,
        delm_ppm=delm_ppm,
        mass_mismatch=mass_mismatch,
    )


def _optional_values(hits_df: pd.DataFrame, column: str) -> np.ndarray:
    if column in hits_df.columns:
        return hits_df[column].to_numpy(dtype=np.float64)
    return np.full(len(hits_df), np.nan)


def reconcile_hits(
    hits_df: pd.DataFrame,
    syntax: ModificationSyntax,
    calculator: PeptideMassCalculator,
    definitions: ModificationDefinitions,
    settings: MassSettings | None = None,
    file_name: str = "",
) -> pd.DataFrame:
    """Add the sequence and mass columns derived by `reconcile_mass` to every hit.

    Returns
    -------
    pd.DataFrame
        A copy of `hits_df` with clean sequence, primary sequence, modification description,
        theoretical mass, MH, precursor m/z, DelM, DelM in ppm and the mass mismatch flag.
    """
    mismatch_warning = PeriodicWarning(
        f"Computed mass does not match the mass reported by the search tool {file_name}".rstrip()
    )

    precursor_mass = _optional_values(hits_df, HitCols.PRECURSOR_MASS)
    precursor_mz = _optional_values(hits_df, HitCols.PRECURSOR_MZ)
    tool_mass = _optional_values(hits_df, HitCols.CALCULATED_MASS)

    results = [
        reconcile_mass(
            annotation,
            int(charge),
            calculator,
            definitions,
            syntax,
            precursor_mass=precursor_mass[i],
            precursor_mz=precursor_mz[i],
            tool_mass=tool_mass[i],
            settings=settings,
            mismatch_warning=mismatch_warning,
        )
        for i, (annotation, charge) in enumerate(
            zip(hits_df[HitCols.PEPTIDE], hits_df[HitCols.CHARGE], strict=True)
        )
    ]
    mismatch_warning.summarize()

    # set one by one to keep a 1d array of tuples
    mod_tokens = np.empty(len(results), dtype=object)
    for i, r in enumerate(results):
        mod_tokens[i] = r.tokens

    reconciled_df = hits_df.copy()
    reconciled_df[HitCols.PRIMARY_SEQUENCE] = [r.primary_sequence for r in results]
    reconciled_df[HitCols.CLEAN_SEQUENCE] = [r.clean_sequence for r in results]
    reconciled_df[HitCols.MOD_DESCRIPTION] = [r.mod_description for r in results]
    reconciled_df[HitCols.MOD_TOKENS] = mod_tokens
    reconciled_df[HitCols.MOD_COUNT] = np.array([len(r.tokens) for r in results], dtype=np.int64)
    reconciled_df[HitCols.THEORETICAL_MASS] = np.array(
        [r.theoretical_mass for r in results], dtype=np.float64
    )
    reconciled_df[HitCols.MH] = np.array([r.mh for r in results], dtype=np.float64)
    reconciled_df[HitCols.PRECURSOR_MZ] = np.array(
        [r.precursor_mz for r in results], dtype=np.float64
    )
    reconciled_df[HitCols.DELM] = np.array([r.delm for r in results], dtype=np.float64)
    reconciled_df[HitCols.DELM_PPM] = np.array(
        [r.delm_ppm for r in results], dtype=np.float64
    )
    reconciled_df[HitCols.MASS_MISMATCH] = np.array(
        [r.mass_mismatch for r in results], dtype=bool
    )
    return reconciled_df
