import logging

import numpy as np
import pytest
from conftest import MODA_HEADER, moda_line, write_lines

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.exceptions import (
    InputFileError,
    ProcessingAbortedError,
    RequiredColumnMissingError,
    SchemaError,
)
from alphasynopsis.io.reader import InvalidRowError, parse_scan, read_hits
from alphasynopsis.reporting import ErrorLog
from alphasynopsis.schema.tools import MODA_SCHEMA, MSALIGN_SCHEMA


def test_parse_scan():
    assert parse_scan("1234") == 1234
    assert parse_scan("1234-1236") == 1234
    assert parse_scan(" scan=17 ") == 17
    assert parse_scan("none") == 0

    with pytest.raises(InvalidRowError):
        parse_scan("")


def test_read_hits_with_header(tmp_path):
    path = write_lines(
        str(tmp_path / "moda.txt"),
        [
            "\t".join(MODA_HEADER),
            moda_line(5, "K.PEPTIDE.R", protein="prot1 some description"),
            moda_line(6, "K.PEPTIDEK.R", probability=0.5),
        ],
    )

    hits_df = read_hits(path, MODA_SCHEMA)

    assert len(hits_df) == 2
    assert hits_df[HitCols.SCAN].tolist() == [5, 6]
    assert hits_df[HitCols.LINE_NUMBER].tolist() == [2, 3]
    assert hits_df[HitCols.PROTEIN].tolist() == ["prot1", "prot1"]
    assert np.allclose(hits_df[HitCols.PROBABILITY], [0.9, 0.5])
    assert hits_df[HitCols.CHARGE].dtype == np.int64


def test_read_hits_without_header(tmp_path):
    path = write_lines(
        str(tmp_path / "moda.txt"),
        [moda_line(5, "K.PEPTIDE.R"), moda_line(6, "K.PEPTIDEK.R")],
    )

    hits_df = read_hits(path, MODA_SCHEMA, truncate_protein_names=False)

    assert len(hits_df) == 2
    assert hits_df[HitCols.LINE_NUMBER].tolist() == [1, 2]


def test_read_hits_malformed_row_is_dropped_and_logged(tmp_path):
    path = write_lines(
        str(tmp_path / "moda.txt"),
        [
            "\t".join(MODA_HEADER),
            moda_line(5, "K.PEPTIDE.R"),
            "spectra.mgf\t6\t1000.0",
            moda_line(7, "K.PEPTIDEK.R"),
        ],
    )
    error_log = ErrorLog()

    hits_df = read_hits(path, MODA_SCHEMA, error_log=error_log)

    assert hits_df[HitCols.SCAN].tolist() == [5, 7]
    assert len(error_log) == 1
    assert error_log.entries[0].startswith("Line 3:")


def test_read_hits_missing_peptide_is_dropped(tmp_path):
    path = write_lines(
        str(tmp_path / "moda.txt"),
        ["\t".join(MODA_HEADER), moda_line(5, "")],
    )
    error_log = ErrorLog()

    hits_df = read_hits(path, MODA_SCHEMA, error_log=error_log)

    assert len(hits_df) == 0
    assert "peptide is missing" in error_log.entries[0]


def test_read_hits_infinity_score_is_zero(tmp_path):
    line = moda_line(5, "K.PEPTIDE.R").replace("\t0.9\t", "\tInfinity\t")
    path = write_lines(str(tmp_path / "moda.txt"), ["\t".join(MODA_HEADER), line])

    hits_df = read_hits(path, MODA_SCHEMA)

    assert hits_df[HitCols.PROBABILITY].tolist() == [0.0]


def test_read_hits_unparsable_score_is_zero(tmp_path, caplog):
    line = moda_line(5, "K.PEPTIDE.R").replace("\t0.9\t", "\tn/a\t")
    path = write_lines(str(tmp_path / "moda.txt"), ["\t".join(MODA_HEADER), line])

    with caplog.at_level(logging.WARNING):
        hits_df = read_hits(path, MODA_SCHEMA)

    assert hits_df[HitCols.PROBABILITY].tolist() == [0.0]
    assert not hits_df[HitCols.PROBABILITY].isna().any()
    assert "values which are not numbers" in caplog.text


def test_read_hits_missing_required_column(tmp_path):
    header = [c for c in MODA_HEADER if c != "Probability"]
    path = write_lines(str(tmp_path / "moda.txt"), ["\t".join(header)])

    with pytest.raises(RequiredColumnMissingError):
        read_hits(path, MODA_SCHEMA)


def test_read_hits_empty_file(tmp_path):
    path = write_lines(str(tmp_path / "empty.txt"), [""])

    with pytest.raises(SchemaError):
        read_hits(path, MODA_SCHEMA)


def test_read_hits_file_not_found(tmp_path):
    with pytest.raises(InputFileError):
        read_hits(str(tmp_path / "missing.txt"), MODA_SCHEMA)


def test_read_hits_abort(tmp_path):
    path = write_lines(
        str(tmp_path / "moda.txt"),
        ["\t".join(MODA_HEADER), moda_line(5, "K.PEPTIDE.R")],
    )

    with pytest.raises(ProcessingAbortedError):
        read_hits(path, MODA_SCHEMA, should_abort=lambda: True)


def test_read_hits_scan_list(tmp_path):
    header = [
        "Data_file_name",
        "Prsm_ID",
        "Spectrum_ID",
        "Protein_Sequence_ID",
        "Scan(s)",
        "#peaks",
        "Charge",
        "Precursor_mass",
        "Adjusted_precursor_mass",
        "Protein_ID",
        "Species_ID",
        "Protein_name",
        "Protein_mass",
        "First_residue",
        "Last_residue",
        "Peptide",
        "#unexpected_modifications",
        "#matched_peaks",
        "#matched_fragment_ions",
        "P-value",
        "E-value",
        "FDR",
        "FragMethod",
    ]
    values = [
        "data.msalign",
        "0",
        "12",
        "3",
        "1230 1231",
        "40",
        "5",
        "5000.1",
        "5000.1",
        "3",
        "0",
        "sp|P1|PROT some protein",
        "20000.0",
        "1",
        "45",
        "-.MPEP(TI)[79.97]DE.K",
        "1",
        "20",
        "18",
        "1e-10",
        "2e-8",
        "0.0",
        "CID",
    ]
    path = write_lines(str(tmp_path / "msalign.txt"), ["\t".join(header), "\t".join(values)])

    hits_df = read_hits(path, MSALIGN_SCHEMA)

    assert hits_df[HitCols.SCAN].tolist() == [1230]
    assert hits_df[HitCols.PROTEIN].tolist() == ["sp|P1|PROT"]
    assert np.isclose(hits_df[HitCols.PVALUE].iloc[0], 1e-10)
