"""Descriptors of the result file layout of a search tool."""

from dataclasses import dataclass, field

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.modifications.parser import INLINE_SYNTAX, ModificationSyntax

# placeholder in `default_fields` for columns which are not read
IGNORED = ""


@dataclass(frozen=True)
class ToolSchema:
    """Everything needed to read the results of one search tool and write its synopsis file.

    All tools are handled by the same processing code, differences are expressed as data.

    Parameters
    ----------
    name : str
        Name of the search tool, used to look up tool specific settings in the config.

    column_names : dict[str, str]
        Column names as written by the tool, mapped to the internal field names in `HitCols`.
        Matching is case-insensitive, several names may map onto the same field.

    default_fields : tuple[str, ...]
        Internal field names in the column order used by the tool when the file has no header line.

    required_fields : tuple[str, ...]
        Fields without which the file cannot be processed.

    min_columns : int
        Minimum number of columns of a data line.

    score_field : str
        Field used to rank the hits of a scan.

    score_higher_is_better : bool
        Direction of `score_field`.

    filter_field : str
        Field compared to the score threshold of the tool.

    filter_higher_is_better : bool
        Direction of `filter_field`, hits at least as good as the threshold are kept.

    confidence_field : str
        Field used to order all hits by confidence for FDR estimation. Defaults to `score_field`.

    confidence_higher_is_better : bool or None
        Direction of `confidence_field`. Defaults to the direction of `score_field`.

    modification_syntax : ModificationSyntax
        How modifications are written into the peptide annotation.

    protein_list_separator : str or None
        Separator of tools which report all proteins of a peptide in a single column.

    scan_from_field : str or None
        Field holding the scan number for tools without a scan column.

    synopsis_columns : tuple[tuple[str, str], ...]
        Column names of the synopsis file and the internal field written to each.

    """

    name: str
    column_names: dict[str, str]
    default_fields: tuple[str, ...]
    required_fields: tuple[str, ...]
    min_columns: int
    score_field: str
    score_higher_is_better: bool
    filter_field: str
    filter_higher_is_better: bool
    synopsis_columns: tuple[tuple[str, str], ...]
    confidence_field: str | None = None
    confidence_higher_is_better: bool | None = None
    modification_syntax: ModificationSyntax = INLINE_SYNTAX
    protein_list_separator: str | None = None
    scan_from_field: str | None = None
    lookup: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "lookup",
            {name.strip().lower(): field_ for name, field_ in self.column_names.items()},
        )

    @property
    def fields(self) -> list[str]:
        """All internal fields the tool provides, in order of first appearance."""
        fields = dict.fromkeys([*self.default_fields, *self.column_names.values()])
        return [f for f in fields if f != IGNORED]

    @property
    def fdr_field(self) -> str:
        return self.confidence_field or self.score_field

    @property
    def fdr_higher_is_better(self) -> bool:
        if self.confidence_higher_is_better is None:
            return self.score_higher_is_better
        return self.confidence_higher_is_better

    @property
    def synopsis_header(self) -> list[str]:
        return [name for name, _ in self.synopsis_columns]

    def synopsis_column_table(self) -> dict[str, str]:
        """Column names of the synopsis file mapped to internal fields, for reading synopsis files back."""
        return {name: field_ for name, field_ in self.synopsis_columns}


# fields cast to numbers after reading, all others are kept as text
INT_FIELDS = (
    HitCols.SCAN,
    HitCols.CHARGE,
    HitCols.SPECTRUM_INDEX,
    HitCols.LINE_NUMBER,
)

FLOAT_FIELDS = (
    HitCols.PRECURSOR_MASS,
    HitCols.PRECURSOR_MZ,
    HitCols.CALCULATED_MASS,
    HitCols.DELTA_MASS,
    HitCols.SCORE,
    HitCols.PROBABILITY,
    HitCols.PVALUE,
    HitCols.EVALUE,
    HitCols.TOOL_FDR,
    HitCols.TOOL_QVALUE,
    HitCols.PROTEOFORM_FDR,
    HitCols.MQ_SCORE,
    HitCols.TOTAL_PRM_SCORE,
    HitCols.F_SCORE,
    HitCols.DELTA_SCORE,
    HitCols.PRECURSOR_ERROR,
    HitCols.ADJUSTED_PRECURSOR_MASS,
)
