"""Monoisotopic mass calculations for peptide sequences."""

import logging
import re

import numpy as np

logger = logging.getLogger()

MASS_HYDROGEN = 1.0078246
MASS_OXYGEN = 15.9949141
MASS_PROTON = 1.00727649
MASS_C13 = 1.00335483

# N-terminal H plus C-terminal OH
MASS_WATER = 2 * MASS_HYDROGEN + MASS_OXYGEN

PROTEIN_TERMINUS_SYMBOL = "-"

# monoisotopic residue masses, ambiguous codes use the mass of their most common member
RESIDUE_MASSES = {
    "A": 71.0371100902557,
    "B": 114.042921543121,
    "C": 103.009180784225,
    "D": 115.026938199997,
    "E": 129.042587518692,
    "F": 147.068408727646,
    "G": 57.0214607715607,
    "H": 137.058904886246,
    "I": 113.084058046341,
    "J": 0.0,
    "K": 128.094955444336,
    "L": 113.084058046341,
    "M": 131.040479421616,
    "N": 114.042921543121,
    "O": 114.079306125641,
    "P": 97.0527594089508,
    "Q": 128.058570861816,
    "R": 156.101100921631,
    "S": 87.0320241451263,
    "T": 101.047673463821,
    "U": 150.95363,
    "V": 99.0684087276459,
    "W": 186.079306125641,
    "X": 113.084058046341,
    "Y": 163.063322782516,
    "Z": 128.058570861816,
}

_NON_LETTER = re.compile(r"[^A-Za-z]")


def split_prefix_and_suffix(annotation: str) -> tuple[str, str, str]:
    """Split an annotation like `K.PEPT[+80]IDE.R` into primary sequence, prefix and suffix.

    The primary sequence is everything between the first and the last period.
    Annotations without two periods, or whose periods do not flank the primary sequence
    with at most one residue, are returned unchanged with empty prefix and suffix.

    Parameters
    ----------
    annotation : str
        Peptide annotation as reported by the search tool.

    Returns
    -------
    tuple[str, str, str]
        primary sequence, prefix residue and suffix residue.
    """
    annotation = annotation.strip()
    if annotation.count(".") < 2:
        return annotation, "", ""

    first = annotation.find(".")
    last = annotation.rfind(".")

    prefix = annotation[:first]
    suffix = annotation[last + 1 :]
    if not (_is_flank(prefix) and _is_flank(suffix)):
        # periods belong to modification masses
        return annotation, "", ""

    return annotation[first + 1 : last], prefix, suffix


def _is_flank(residue: str) -> bool:
    return residue == "" or (
        len(residue) == 1 and (residue.isalpha() or residue == PROTEIN_TERMINUS_SYMBOL)
    )


def get_clean_sequence(annotation: str) -> str:
    """Primary sequence without flanking residues, modification masses or symbols, in upper case."""
    primary, _, _ = split_prefix_and_suffix(annotation)
    return _NON_LETTER.sub("", primary).upper()


class PeptideMassCalculator:
    def __init__(
        self,
        residue_masses: dict[str, float] | None = None,
        charge_carrier_mass: float = MASS_PROTON,
    ) -> None:
        """Calculates monoisotopic masses of peptides and converts between masses and m/z values.

        Parameters
        ----------
        residue_masses : dict[str, float], optional
            Monoisotopic mass per residue letter. Defaults to `RESIDUE_MASSES`.

        charge_carrier_mass : float, default MASS_PROTON
            Mass added per charge.

        """
        self.residue_masses = dict(RESIDUE_MASSES if residue_masses is None else residue_masses)
        self.charge_carrier_mass = charge_carrier_mass
        self._unknown_residues: set[str] = set()

    def compute_sequence_mass(self, clean_sequence: str) -> float:
        """Monoisotopic neutral mass of an unmodified sequence, i.e. the sum of its residues plus water.

        Unknown residues contribute no mass and are reported once per calculator.
        An empty sequence has mass 0.
        """
        if not clean_sequence:
            return 0.0

        mass = MASS_WATER
        for residue in clean_sequence:
            residue_mass = self.residue_masses.get(residue)
            if residue_mass is None:
                if residue not in self._unknown_residues:
                    self._unknown_residues.add(residue)
                    logger.warning(f"Unknown residue '{residue}' treated as zero mass")
                continue
            mass += residue_mass
        return mass

    def convolute_mass(
        self, mass_mz: float, current_charge: int, desired_charge: int = 1
    ) -> float:
        """Convert a mass or m/z value from one charge state to another.

        Charge 0 denotes the neutral mass, charge 1 the M+H value.

        Parameters
        ----------
        mass_mz : float
            Mass (charge 0) or m/z value (charge > 0).

        current_charge : int
            Charge state of `mass_mz`.

        desired_charge : int, default 1
            Charge state to convert to.

        Returns
        -------
        float
            Converted mass or m/z value.
        """
        if current_charge == desired_charge:
            return mass_mz

        proton = self.charge_carrier_mass
        if current_charge > 0:
            neutral_mass = mass_mz * current_charge - proton * current_charge
        else:
            neutral_mass = mass_mz

        if desired_charge > 0:
            return (neutral_mass + proton * desired_charge) / desired_charge
        return neutral_mass

    def neutral_mass_to_mz(self, neutral_mass, charge):
        """Vectorized conversion of neutral masses to m/z values, charge 0 leaves the mass unchanged."""
        neutral_mass = np.asarray(neutral_mass, dtype=np.float64)
        charge = np.asarray(charge, dtype=np.float64)
        safe_charge = np.where(charge > 0, charge, 1.0)
        mz = (neutral_mass + safe_charge * self.charge_carrier_mass) / safe_charge
        return np.where(charge > 0, mz, neutral_mass)

    def mz_to_neutral_mass(self, mz, charge):
        """Vectorized conversion of m/z values to neutral masses, charge 0 leaves the value unchanged."""
        mz = np.asarray(mz, dtype=np.float64)
        charge = np.asarray(charge, dtype=np.float64)
        return np.where(charge > 0, mz * charge - charge * self.charge_carrier_mass, mz)


def mass_to_ppm(mass_difference, mz):
    """Convert a mass difference to parts per million of `mz`."""
    return np.asarray(mass_difference, dtype=np.float64) * 1e6 / np.asarray(mz, dtype=np.float64)


def correct_c13_isotope(delm, max_shift: int = 3):
    """Remove multiples of the C13 isotope spacing from mass differences.

    Mass differences larger than half a Dalton are assumed to originate from selecting a
    C13 isotope instead of the monoisotopic peak and are shifted towards zero by up to
    `max_shift` isotope spacings.
    """
    delm = np.asarray(delm, dtype=np.float64)
    shifts = np.clip(np.round(delm / MASS_C13), -max_shift, max_shift)
    shifts = np.where(np.abs(delm) > 0.5, shifts, 0)
    return delm - shifts * MASS_C13
