"""Mapping of the columns of a result file onto the internal fields of a tool schema."""

import logging

from alphasynopsis.exceptions import RequiredColumnMissingError
from alphasynopsis.schema.descriptor import IGNORED, ToolSchema

logger = logging.getLogger()

# column index of fields which are not present in a file
ABSENT = -1


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def is_header_line(tokens: list[str]) -> bool:
    """A line is a header unless its second token is a number.

    Every supported tool writes a number into the second column of its data lines.
    """
    if len(tokens) < 2:
        return not (tokens and _is_number(tokens[0]))
    return not _is_number(tokens[1].strip())


def map_header(
    tokens: list[str], schema: ToolSchema, column_table: dict[str, str] | None = None
) -> dict[str, int]:
    """Map the column names of a header line onto internal fields.

    Parameters
    ----------
    tokens : list[str]
        Column names of the header line.

    schema : ToolSchema
        Schema of the search tool.

    column_table : dict[str, str], optional
        Column name to field table, defaults to the column names of the search tool.

    Returns
    -------
    dict[str, int]
        Column index of every field of the schema, `ABSENT` for fields not found in the header.
    """
    if column_table is None:
        lookup = schema.lookup
    else:
        lookup = {name.strip().lower(): field for name, field in column_table.items()}

    mapping = {field: ABSENT for field in schema.fields}
    mapping.update({field: ABSENT for field in lookup.values()})

    unknown = []
    for index, token in enumerate(tokens):
        name = token.strip()
        field = lookup.get(name.lower())
        if field is None:
            if name:
                unknown.append(name)
            continue
        if mapping[field] == ABSENT:
            mapping[field] = index
        else:
            logger.debug(f"Column '{name}' ignored, field '{field}' is already mapped")

    if unknown:
        logger.warning(
            f"Unrecognized columns in {schema.name} results will be ignored: {', '.join(unknown)}"
        )
    return mapping


def default_mapping(schema: ToolSchema) -> dict[str, int]:
    """Positional mapping for files without a header line."""
    mapping = {field: ABSENT for field in schema.fields}
    for index, field in enumerate(schema.default_fields):
        if field != IGNORED:
            mapping[field] = index
    return mapping


def resolve_columns(
    first_line: str, schema: ToolSchema
) -> tuple[dict[str, int], bool]:
    """Determine the column mapping from the first line of a file.

    Returns
    -------
    tuple[dict[str, int], bool]
        The mapping and whether the first line is a header. If it is not,
        the positional mapping is returned and the line has to be read as data.
    """
    tokens = first_line.rstrip("\r\n").split("\t")
    if is_header_line(tokens):
        return map_header(tokens, schema), True

    logger.info(f"No header line found, using the default column order of {schema.name}")
    return default_mapping(schema), False


def validate_required(mapping: dict[str, int], schema: ToolSchema, file_name: str) -> None:
    """Raise if a field required by the schema has no column.

    Raises
    ------
    RequiredColumnMissingError
        If at least one required field is absent.
    """
    missing = [
        field
        for field in schema.required_fields
        if mapping.get(field, ABSENT) == ABSENT
    ]
    if missing:
        raise RequiredColumnMissingError(file_name, missing)
