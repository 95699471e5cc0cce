import numpy as np
import pytest

from alphasynopsis.mass.calculator import (
    MASS_C13,
    MASS_PROTON,
    MASS_WATER,
    RESIDUE_MASSES,
    PeptideMassCalculator,
    correct_c13_isotope,
    get_clean_sequence,
    mass_to_ppm,
    split_prefix_and_suffix,
)


@pytest.mark.parametrize(
    "annotation, expected",
    [
        ("K.ACDEFGHIK.R", ("ACDEFGHIK", "K", "R")),
        ("-.MPEPTIDE.-", ("MPEPTIDE", "-", "-")),
        (".PEP(TI)[79.97]DE.", ("PEP(TI)[79.97]DE", "", "")),
        ("PEPTIDE", ("PEPTIDE", "", "")),
        ("K..R", ("", "K", "R")),
        ("K.PEP+15.995TIDE.R", ("PEP+15.995TIDE", "K", "R")),
        ("A+15.995C+1.0", ("A+15.995C+1.0", "", "")),
    ],
)
def test_split_prefix_and_suffix(annotation, expected):
    assert split_prefix_and_suffix(annotation) == expected


def test_get_clean_sequence():
    assert get_clean_sequence("K.PEP(TI)[79.97]de.R") == "PEPTIDE"
    assert get_clean_sequence("R.M+15.995PEPTIDE.-") == "MPEPTIDE"


def test_compute_sequence_mass_is_sum_of_residues_plus_water():
    calculator = PeptideMassCalculator()
    sequence = get_clean_sequence("K.ACDEFGHIK.R")

    expected = sum(RESIDUE_MASSES[r] for r in sequence) + MASS_WATER

    assert np.isclose(calculator.compute_sequence_mass(sequence), expected)
    assert np.isclose(MASS_WATER, 18.0105633)


def test_compute_sequence_mass_empty_and_unknown():
    calculator = PeptideMassCalculator()

    assert calculator.compute_sequence_mass("") == 0.0
    # unknown residues contribute nothing
    assert np.isclose(
        calculator.compute_sequence_mass("G*"), RESIDUE_MASSES["G"] + MASS_WATER
    )


def test_convolute_mass():
    calculator = PeptideMassCalculator()
    mass = 1000.0

    mh = calculator.convolute_mass(mass, 0, 1)
    mz2 = calculator.convolute_mass(mass, 0, 2)

    assert np.isclose(mh, mass + MASS_PROTON)
    assert np.isclose(mz2, (mass + 2 * MASS_PROTON) / 2)
    assert np.isclose(calculator.convolute_mass(mz2, 2, 0), mass)
    assert np.isclose(calculator.convolute_mass(mz2, 2, 1), mz2 * 2 - MASS_PROTON)
    assert calculator.convolute_mass(mass, 3, 3) == mass


def test_vectorized_conversions():
    calculator = PeptideMassCalculator()
    mass = np.array([1000.0, 2000.0, 500.0])
    charge = np.array([1, 2, 0])

    mz = calculator.neutral_mass_to_mz(mass, charge)

    assert np.allclose(mz, [1000.0 + MASS_PROTON, 1000.0 + MASS_PROTON, 500.0])
    assert np.allclose(calculator.mz_to_neutral_mass(mz, charge), mass)


def test_mass_to_ppm():
    assert np.isclose(mass_to_ppm(0.001, 1000.0), 1.0)


def test_correct_c13_isotope():
    corrected = correct_c13_isotope(np.array([0.01, MASS_C13 + 0.01, -2 * MASS_C13]))

    assert np.allclose(corrected, [0.01, 0.01, 0.0])
