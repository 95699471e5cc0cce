import os
from dataclasses import replace

import numpy as np
import pandas as pd
import pytest

from alphasynopsis.constants.keys import HitCols, ModificationType, TerminusState
from alphasynopsis.io.writer import (
    MOD_SUMMARY_COLUMNS,
    first_hits_path,
    format_float,
    mod_summary_path,
    synopsis_path,
    to_mod_summary_df,
    to_synopsis_df,
    write_mod_summary,
    write_synopsis,
)
from alphasynopsis.modifications.definitions import (
    ModificationDefinition,
    ModificationDefinitions,
)
from alphasynopsis.modifications.parser import ModificationToken
from alphasynopsis.schema.tools import MODA_SCHEMA


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.23456789, "1.23457"),
        (2.5, "2.5"),
        (3.0, "3"),
        (0.0, "0"),
        (-0.0, "0"),
        (1e-7, "1.0000e-07"),
        (-1e-6, "-1.0000e-06"),
        (np.nan, ""),
    ],
)
def test_format_float(value, expected):
    assert format_float(value, 5) == expected


@pytest.fixture
def synopsis_hits_df():
    return pd.DataFrame(
        {
            HitCols.SCAN: [7, 3],
            HitCols.SPECTRUM_INDEX: [7, 3],
            HitCols.CHARGE: [2, 3],
            HitCols.PEPTIDE: ["K.PEPA.R", "K.PEPB.R"],
            HitCols.PROTEIN: ["prot1", "prot2"],
            HitCols.PROBABILITY: [0.9, 0.25],
            HitCols.DELM: [0.0012345678, np.nan],
            HitCols.RANK: np.array([1, 1], dtype=np.int32),
        }
    )


def test_to_synopsis_df(synopsis_hits_df):
    synopsis_df = to_synopsis_df(synopsis_hits_df, MODA_SCHEMA)

    assert synopsis_df.columns.tolist() == MODA_SCHEMA.synopsis_header
    assert synopsis_df["ResultID"].tolist() == [1, 2]
    assert synopsis_df["Scan"].tolist() == [7, 3]
    assert synopsis_df["DelM"].tolist() == ["0.00123", ""]
    assert synopsis_df["Probability"].tolist() == ["0.9", "0.25"]
    # fields not present in the hits are written empty
    assert synopsis_df["MH"].tolist() == ["", ""]


def test_write_synopsis(synopsis_hits_df, tmp_path):
    path = str(tmp_path / "results_syn.txt")

    write_synopsis(synopsis_hits_df, path, MODA_SCHEMA)

    with open(path) as f:
        header = f.readline().rstrip("\n").split("\t")
    assert header == MODA_SCHEMA.synopsis_header

    written_df = pd.read_csv(path, sep="\t")
    assert written_df["ResultID"].tolist() == [1, 2]
    assert written_df["Peptide"].tolist() == ["K.PEPA.R", "K.PEPB.R"]


def test_write_synopsis_empty(tmp_path):
    path = str(tmp_path / "empty_syn.txt")

    write_synopsis(pd.DataFrame(columns=[HitCols.SCAN]), path, MODA_SCHEMA)

    written_df = pd.read_csv(path, sep="\t")
    assert len(written_df) == 0
    assert written_df.columns.tolist() == MODA_SCHEMA.synopsis_header


def test_first_hits_path():
    assert first_hits_path(os.path.join("out", "results_syn.txt")) == os.path.join(
        "out", "results_fht.txt"
    )
    assert first_hits_path("results.txt") == "results_fht.txt"


def test_synopsis_path():
    input_path = os.path.join("data", "results.txt")

    assert synopsis_path(input_path) == os.path.join("data", "results_syn.txt")
    assert synopsis_path(input_path, "out") == os.path.join("out", "results_syn.txt")


def test_mod_summary_path():
    assert mod_summary_path(os.path.join("out", "results_syn.txt")) == os.path.join(
        "out", "results_ModSummary.txt"
    )


@pytest.fixture
def modified_hits_df():
    oxidation = ModificationToken("M", 3, TerminusState.NONE, 15.9949, name="Oxidation")
    carbamidomethyl = ModificationToken(
        "C", 5, TerminusState.NONE, 57.021464, name="Carbamidomethyl", is_static=True
    )
    unmapped = ModificationToken("K", 4, TerminusState.PEPTIDE_C, 123.4567, name="+123.457")
    return pd.DataFrame(
        {
            # the first hit was split into two proteins
            HitCols.LINE_NUMBER: [2, 2, 3, 4],
            HitCols.PROTEIN: ["prot1", "prot2", "prot3", "prot4"],
            HitCols.MOD_TOKENS: pd.Series(
                [
                    (oxidation, carbamidomethyl),
                    (oxidation, carbamidomethyl),
                    (replace(oxidation, position=2), unmapped),
                    (),
                ],
                dtype=object,
            ),
        }
    )


def test_to_mod_summary_df(modified_hits_df):
    definitions = ModificationDefinitions(
        [
            ModificationDefinition("Oxidation", 15.994915, "M"),
            ModificationDefinition("Carbamidomethyl", 57.021464, "C", ModificationType.STATIC),
            ModificationDefinition("Phospho", 79.966331, "STY"),
        ],
        use_unimod=False,
    )

    summary_df = to_mod_summary_df(modified_hits_df, definitions)

    assert summary_df.columns.tolist() == MOD_SUMMARY_COLUMNS
    assert summary_df["Modification_Name"].tolist() == [
        "Oxidation",
        "Carbamidomethyl",
        "Phospho",
        "+123.457",
    ]
    assert summary_df["Modification_Mass"].tolist() == [
        "15.994915",
        "57.021464",
        "79.966331",
        "123.4567",
    ]
    assert summary_df["Target_Residues"].tolist() == ["M", "C", "STY", "K"]
    assert summary_df["Modification_Type"].tolist() == [
        ModificationType.DYNAMIC,
        ModificationType.STATIC,
        ModificationType.DYNAMIC,
        ModificationType.DYNAMIC,
    ]
    assert summary_df["Occurrence_Count"].tolist() == [2, 1, 0, 1]


def test_write_mod_summary_without_definitions(modified_hits_df, tmp_path):
    path = str(tmp_path / "results_ModSummary.txt")

    write_mod_summary(modified_hits_df, path)

    written_df = pd.read_csv(path, sep="\t", dtype=str)
    assert written_df.columns.tolist() == MOD_SUMMARY_COLUMNS
    assert written_df["Modification_Name"].tolist() == ["Oxidation", "Carbamidomethyl", "+123.457"]
    assert written_df["Occurrence_Count"].tolist() == ["2", "1", "1"]
