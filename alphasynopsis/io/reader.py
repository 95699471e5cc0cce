"""Streaming reader for tab-delimited search tool results."""

import logging
import os
import re
from collections.abc import Callable

import pandas as pd

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.exceptions import InputFileError, ProcessingAbortedError, SchemaError
from alphasynopsis.reporting import ErrorLog, PeriodicWarning
from alphasynopsis.schema.adapter import ABSENT, resolve_columns, validate_required
from alphasynopsis.schema.descriptor import ToolSchema
from alphasynopsis.validation.schemas import hits_schema

logger = logging.getLogger()

_DIGITS = re.compile(r"\d+")


class InvalidRowError(ValueError):
    """A data line which cannot be converted into a hit."""


def parse_scan(text: str, warning: PeriodicWarning | None = None) -> int:
    """Scan number of a scan or scan list column, e.g. `1234` or `1234-1236`.

    The first run of digits is used when the text is not an integer.
    Text without any digits results in scan 0.
    """
    text = text.strip()
    if not text:
        raise InvalidRowError("scan number is missing")
    try:
        return int(text)
    except ValueError:
        pass

    match = _DIGITS.search(text)
    if match is None:
        if warning is not None:
            warning(f"'{text}'")
        return 0
    return int(match.group())


def parse_row(
    tokens: list[str],
    mapping: dict[str, int],
    schema: ToolSchema,
    scan_warning: PeriodicWarning | None = None,
) -> dict[str, str | int]:
    """Convert the tokens of a data line into a dictionary of raw field values.

    Raises
    ------
    InvalidRowError
        If the line has too few columns, or the peptide or scan is missing.
    """
    if len(tokens) < schema.min_columns:
        raise InvalidRowError(
            f"expected at least {schema.min_columns} columns, found {len(tokens)}"
        )

    row = {
        field: tokens[index].strip() if 0 <= index < len(tokens) else ""
        for field, index in mapping.items()
    }

    if not row.get(HitCols.PEPTIDE):
        raise InvalidRowError("peptide is missing")

    scan_field = HitCols.SCAN
    if mapping.get(HitCols.SCAN, ABSENT) == ABSENT and schema.scan_from_field is not None:
        scan_field = schema.scan_from_field
    row[HitCols.SCAN] = parse_scan(row.get(scan_field, ""), scan_warning)

    return row


def read_hits(
    path: str,
    schema: ToolSchema,
    error_log: ErrorLog | None = None,
    should_abort: Callable[[], bool] | None = None,
    truncate_protein_names: bool = True,
) -> pd.DataFrame:
    """Read all hits of a search tool result file.

    Lines which cannot be parsed are skipped and reported to the error log.

    Parameters
    ----------
    path : str
        Path to the tab-delimited result file.

    schema : ToolSchema
        Schema of the search tool that wrote the file.

    error_log : ErrorLog, optional
        Collects errors of individual lines.

    should_abort : callable, optional
        Polled once per line, reading stops with `ProcessingAbortedError` if it returns True.

    truncate_protein_names : bool, default True
        Keep protein names only up to the first space.

    Returns
    -------
    pd.DataFrame
        One row per hit with the internal fields of the schema and the 1-based line number.

    Raises
    ------
    InputFileError
        If the file cannot be opened.

    SchemaError
        If the file has no header or data line, or a required column is missing.
    """
    if error_log is None:
        error_log = ErrorLog()
    file_name = os.path.basename(path)
    scan_warning = PeriodicWarning(f"Scan column without scan number in {file_name}")

    rows = []
    mapping = None
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                if should_abort is not None and should_abort():
                    raise ProcessingAbortedError(file_name)

                if not line.strip():
                    continue

                if mapping is None:
                    mapping, is_header = resolve_columns(line, schema)
                    validate_required(mapping, schema, file_name)
                    if is_header:
                        continue

                tokens = line.rstrip("\r\n").split("\t")
                try:
                    row = parse_row(tokens, mapping, schema, scan_warning)
                except InvalidRowError as e:
                    error_log.add(str(e), line_number)
                    continue
                row[HitCols.LINE_NUMBER] = line_number
                rows.append(row)
    except OSError as e:
        raise InputFileError(path, str(e)) from e

    if mapping is None:
        raise SchemaError(file_name, "The file contains neither a header nor a data line.")

    columns = list(dict.fromkeys([HitCols.LINE_NUMBER, HitCols.SCAN, *mapping.keys()]))
    hits_df = pd.DataFrame(rows, columns=columns)
    hits_schema.validate(hits_df, warn_on_critical_values=True)

    if truncate_protein_names:
        hits_df[HitCols.PROTEIN] = hits_df[HitCols.PROTEIN].str.split(" ", n=1).str[0]

    logger.info(
        f"Read {len(hits_df):,} hits from {file_name}, {error_log.n_errors:,} lines skipped"
    )
    return hits_df
