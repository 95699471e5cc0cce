import pytest
from conftest import mock_hits_df, write_lines

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.exceptions import InputFileError
from alphasynopsis.proteins.pep_to_protein import (
    PepToProteinEntry,
    PepToProteinIndex,
    expand_proteins,
    load_pep_to_protein_map,
)

MAP_LINES = [
    "PEPB\tprot3\t5\t8",
    "PEPA\tprot1\t1\t4",
    "PEPA\tprot2\t10\t13",
]


@pytest.fixture
def index():
    return PepToProteinIndex(
        [
            PepToProteinEntry("PEPB", "prot3", 5, 8),
            PepToProteinEntry("PEPA", "prot1", 1, 4),
            PepToProteinEntry("PEPA", "prot2", 10, 13),
        ]
    )


def test_load_pep_to_protein_map_with_header(tmp_path):
    path = write_lines(
        str(tmp_path / "map.txt"),
        ["Peptide\tProtein\tResidueStart\tResidueEnd", *MAP_LINES],
    )

    entries = load_pep_to_protein_map(path)

    assert [e.peptide for e in entries] == ["PEPA", "PEPA", "PEPB"]
    assert entries[0] == PepToProteinEntry("PEPA", "prot1", 1, 4)


def test_load_pep_to_protein_map_without_header(tmp_path):
    path = write_lines(str(tmp_path / "map.txt"), MAP_LINES)

    entries = load_pep_to_protein_map(path)

    assert len(entries) == 3
    assert entries[-1] == PepToProteinEntry("PEPB", "prot3", 5, 8)


def test_load_pep_to_protein_map_missing_file(tmp_path):
    with pytest.raises(InputFileError):
        load_pep_to_protein_map(str(tmp_path / "missing.txt"))


def test_find_first_match(index):
    assert len(index) == 3
    assert index.find_first_match("PEPA") == 0
    assert index.find_first_match("PEPB") == 2
    assert index.find_first_match("PEPZ") == -1
    assert index.proteins("PEPA") == ["prot1", "prot2"]
    assert index.proteins("PEPZ") == []


def test_expand_proteins(index):
    hits_df = mock_hits_df(
        scan=[1, 2, 3],
        score=[0.9, 0.8, 0.7],
        peptide=["K.PEPA.R", "K.PEP+16B.R", "K.PEPC.R"],
        protein=["prot1", "protX", "protY"],
    )
    hits_df[HitCols.PRIMARY_SEQUENCE] = ["PEPA", "PEP+16B", "PEPC"]
    hits_df[HitCols.CLEAN_SEQUENCE] = ["PEPA", "PEPB", "PEPC"]
    hits_df[HitCols.PEPTIDE_POSITION] = ["1~4", "5~8", "1~4"]

    expanded_df = expand_proteins(hits_df, index)

    assert expanded_df[HitCols.PROTEIN].tolist() == [
        "prot1",
        "prot2",
        "protX",
        "prot3",
        "protY",
    ]
    assert expanded_df[HitCols.SCAN].tolist() == [1, 1, 2, 2, 3]
    assert expanded_df[HitCols.PEPTIDE_POSITION].tolist() == ["1~4", "", "5~8", "", "1~4"]
    assert expanded_df[HitCols.PROBABILITY].tolist() == [0.9, 0.9, 0.8, 0.8, 0.7]


def test_expand_proteins_reported_protein_not_duplicated(index):
    hits_df = mock_hits_df(
        scan=[1, 1],
        score=[0.9, 0.9],
        peptide=["K.PEPA.R", "K.PEPA.R"],
        protein=["prot1", "prot2"],
    )
    hits_df[HitCols.PRIMARY_SEQUENCE] = ["PEPA", "PEPA"]
    hits_df[HitCols.CLEAN_SEQUENCE] = ["PEPA", "PEPA"]

    expanded_df = expand_proteins(hits_df, index)

    assert expanded_df[HitCols.PROTEIN].tolist() == ["prot1", "prot2"]
