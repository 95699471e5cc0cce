"""Result file layouts of the supported search tools."""

from alphasynopsis.constants.keys import HitCols, ToolNames
from alphasynopsis.exceptions import UnknownToolError
from alphasynopsis.modifications.parser import BRACKETED_SYNTAX, INLINE_SYNTAX
from alphasynopsis.schema.descriptor import IGNORED, ToolSchema

# columns shared by all synopsis files, in the order they are written
_IDENTIFICATION_COLUMNS = (
    ("Charge", HitCols.CHARGE),
    ("PrecursorMZ", HitCols.PRECURSOR_MZ),
    ("DelM", HitCols.DELM),
    ("DelM_PPM", HitCols.DELM_PPM),
    ("MH", HitCols.MH),
    ("Peptide", HitCols.PEPTIDE),
    ("Protein", HitCols.PROTEIN),
    ("Modifications", HitCols.MOD_DESCRIPTION),
)

_FDR_COLUMNS = (
    ("FDR", HitCols.FDR),
    ("QValue", HitCols.QVALUE),
)


def _ranking_columns(score_name: str) -> tuple[tuple[str, str], ...]:
    return (
        (f"Rank_{score_name}", HitCols.RANK),
        (f"DeltaNorm_{score_name}", HitCols.DELTA_NORM),
    )


MODA_SCHEMA = ToolSchema(
    name=ToolNames.MODA,
    column_names={
        "SpectrumFile": HitCols.SPECTRUM_FILE,
        "Index": HitCols.SPECTRUM_INDEX,
        "ObservedMW": HitCols.PRECURSOR_MASS,
        "Charge": HitCols.CHARGE,
        "CalculatedMW": HitCols.CALCULATED_MASS,
        "DeltaMass": HitCols.DELTA_MASS,
        "Score": HitCols.SCORE,
        "Probability": HitCols.PROBABILITY,
        "Peptide": HitCols.PEPTIDE,
        "Protein": HitCols.PROTEIN,
        "PeptidePosition": HitCols.PEPTIDE_POSITION,
    },
    default_fields=(
        HitCols.SPECTRUM_FILE,
        HitCols.SPECTRUM_INDEX,
        HitCols.PRECURSOR_MASS,
        HitCols.CHARGE,
        HitCols.CALCULATED_MASS,
        HitCols.DELTA_MASS,
        HitCols.SCORE,
        HitCols.PROBABILITY,
        HitCols.PEPTIDE,
        HitCols.PROTEIN,
        HitCols.PEPTIDE_POSITION,
    ),
    required_fields=(
        HitCols.SPECTRUM_INDEX,
        HitCols.CHARGE,
        HitCols.PEPTIDE,
        HitCols.PROBABILITY,
    ),
    min_columns=11,
    score_field=HitCols.PROBABILITY,
    score_higher_is_better=True,
    filter_field=HitCols.PROBABILITY,
    filter_higher_is_better=True,
    modification_syntax=INLINE_SYNTAX,
    scan_from_field=HitCols.SPECTRUM_INDEX,
    synopsis_columns=(
        ("ResultID", HitCols.RESULT_ID),
        ("Scan", HitCols.SCAN),
        ("Spectrum_Index", HitCols.SPECTRUM_INDEX),
        *_IDENTIFICATION_COLUMNS,
        ("PeptidePosition", HitCols.PEPTIDE_POSITION),
        ("Probability", HitCols.PROBABILITY),
        *_ranking_columns("Probability"),
        ("Score", HitCols.SCORE),
        *_FDR_COLUMNS,
    ),
)

MODPLUS_SCHEMA = ToolSchema(
    name=ToolNames.MODPLUS,
    column_names={
        "SpectrumFile": HitCols.SPECTRUM_FILE,
        "Index": HitCols.SPECTRUM_INDEX,
        "ScanNo": HitCols.SCAN,
        "ObservedMW": HitCols.PRECURSOR_MASS,
        "Charge": HitCols.CHARGE,
        "CalculatedMW": HitCols.CALCULATED_MASS,
        "DeltaMass": HitCols.DELTA_MASS,
        "Score": HitCols.SCORE,
        "Probability": HitCols.PROBABILITY,
        "Peptide": HitCols.PEPTIDE,
        "NTT": HitCols.NTT,
        "Protein": HitCols.PROTEIN,
        "ModificationAnnotation": HitCols.MODIFICATION_ANNOTATION,
    },
    default_fields=(
        HitCols.SPECTRUM_FILE,
        HitCols.SPECTRUM_INDEX,
        HitCols.SCAN,
        HitCols.PRECURSOR_MASS,
        HitCols.CHARGE,
        HitCols.CALCULATED_MASS,
        HitCols.DELTA_MASS,
        HitCols.SCORE,
        HitCols.PROBABILITY,
        HitCols.PEPTIDE,
        HitCols.NTT,
        HitCols.PROTEIN,
        HitCols.MODIFICATION_ANNOTATION,
    ),
    required_fields=(
        HitCols.SCAN,
        HitCols.CHARGE,
        HitCols.PEPTIDE,
        HitCols.SCORE,
        HitCols.PROBABILITY,
    ),
    min_columns=13,
    score_field=HitCols.SCORE,
    score_higher_is_better=True,
    filter_field=HitCols.PROBABILITY,
    filter_higher_is_better=True,
    modification_syntax=INLINE_SYNTAX,
    protein_list_separator=";",
    synopsis_columns=(
        ("ResultID", HitCols.RESULT_ID),
        ("Scan", HitCols.SCAN),
        ("Spectrum_Index", HitCols.SPECTRUM_INDEX),
        *_IDENTIFICATION_COLUMNS,
        ("NTT", HitCols.NTT),
        ("ModificationAnnotation", HitCols.MODIFICATION_ANNOTATION),
        ("Peptide_Position", HitCols.PEPTIDE_POSITION),
        ("Score", HitCols.SCORE),
        ("Probability", HitCols.PROBABILITY),
        *_ranking_columns("Score"),
        *_FDR_COLUMNS,
    ),
)

MSALIGN_SCHEMA = ToolSchema(
    name=ToolNames.MSALIGN,
    column_names={
        "Data_file_name": HitCols.SPECTRUM_FILE,
        "Prsm_ID": HitCols.PRSM_ID,
        "Spectrum_ID": HitCols.SPECTRUM_INDEX,
        "Scan(s)": HitCols.SCAN,
        "Charge": HitCols.CHARGE,
        "Precursor_mass": HitCols.PRECURSOR_MASS,
        "Adjusted_precursor_mass": HitCols.ADJUSTED_PRECURSOR_MASS,
        "Protein_name": HitCols.PROTEIN,
        "First_residue": HitCols.FIRST_RESIDUE,
        "Last_residue": HitCols.LAST_RESIDUE,
        "Peptide": HitCols.PEPTIDE,
        "#unexpected_modifications": HitCols.UNEXPECTED_MODIFICATIONS,
        "#matched_peaks": HitCols.MATCHED_PEAKS,
        "#matched_fragment_ions": HitCols.MATCHED_FRAGMENT_IONS,
        "P-value": HitCols.PVALUE,
        "E-value": HitCols.EVALUE,
        "FDR": HitCols.TOOL_FDR,
        "FragMethod": HitCols.FRAGMENTATION,
    },
    default_fields=(
        HitCols.SPECTRUM_FILE,
        HitCols.PRSM_ID,
        HitCols.SPECTRUM_INDEX,
        IGNORED,  # Protein_Sequence_ID
        HitCols.SCAN,
        IGNORED,  # #peaks
        HitCols.CHARGE,
        HitCols.PRECURSOR_MASS,
        HitCols.ADJUSTED_PRECURSOR_MASS,
        IGNORED,  # Protein_ID
        IGNORED,  # Species_ID
        HitCols.PROTEIN,
        IGNORED,  # Protein_mass
        HitCols.FIRST_RESIDUE,
        HitCols.LAST_RESIDUE,
        HitCols.PEPTIDE,
        HitCols.UNEXPECTED_MODIFICATIONS,
        HitCols.MATCHED_PEAKS,
        HitCols.MATCHED_FRAGMENT_IONS,
        HitCols.PVALUE,
        HitCols.EVALUE,
        HitCols.TOOL_FDR,
        HitCols.FRAGMENTATION,
    ),
    required_fields=(
        HitCols.SCAN,
        HitCols.CHARGE,
        HitCols.PEPTIDE,
        HitCols.PVALUE,
    ),
    min_columns=13,
    score_field=HitCols.PVALUE,
    score_higher_is_better=False,
    filter_field=HitCols.PVALUE,
    filter_higher_is_better=False,
    modification_syntax=BRACKETED_SYNTAX,
    synopsis_columns=(
        ("ResultID", HitCols.RESULT_ID),
        ("Scan", HitCols.SCAN),
        ("Prsm_ID", HitCols.PRSM_ID),
        ("Spectrum_ID", HitCols.SPECTRUM_INDEX),
        *_IDENTIFICATION_COLUMNS,
        ("Unexpected_Mod_Count", HitCols.UNEXPECTED_MODIFICATIONS),
        ("Matched_Peak_Count", HitCols.MATCHED_PEAKS),
        ("Matched_Fragment_Ion_Count", HitCols.MATCHED_FRAGMENT_IONS),
        ("PValue", HitCols.PVALUE),
        *_ranking_columns("PValue"),
        ("EValue", HitCols.EVALUE),
        ("Tool_FDR", HitCols.TOOL_FDR),
        ("FragMethod", HitCols.FRAGMENTATION),
        *_FDR_COLUMNS,
    ),
)

TOPPIC_SCHEMA = ToolSchema(
    name=ToolNames.TOPPIC,
    column_names={
        "Data file name": HitCols.SPECTRUM_FILE,
        "Prsm ID": HitCols.PRSM_ID,
        "Spectrum ID": HitCols.SPECTRUM_INDEX,
        "Fragmentation": HitCols.FRAGMENTATION,
        "Scan(s)": HitCols.SCAN,
        "Retention time": HitCols.RETENTION_TIME,
        "Charge": HitCols.CHARGE,
        "Precursor mass": HitCols.PRECURSOR_MASS,
        "Adjusted precursor mass": HitCols.ADJUSTED_PRECURSOR_MASS,
        "Protein accession": HitCols.PROTEIN,
        "Protein name": HitCols.PROTEIN,
        "Protein description": HitCols.PROTEIN_DESCRIPTION,
        "First residue": HitCols.FIRST_RESIDUE,
        "Last residue": HitCols.LAST_RESIDUE,
        "Proteoform": HitCols.PEPTIDE,
        "#unexpected modifications": HitCols.UNEXPECTED_MODIFICATIONS,
        "#matched peaks": HitCols.MATCHED_PEAKS,
        "#matched fragment ions": HitCols.MATCHED_FRAGMENT_IONS,
        "P-value": HitCols.PVALUE,
        "E-value": HitCols.EVALUE,
        "Q-value (spectral FDR)": HitCols.TOOL_QVALUE,
        "Spectrum-level Q-value": HitCols.TOOL_QVALUE,
        "Proteoform FDR": HitCols.PROTEOFORM_FDR,
        "Proteoform-level Q-value": HitCols.PROTEOFORM_FDR,
    },
    default_fields=(
        HitCols.SPECTRUM_FILE,
        HitCols.PRSM_ID,
        HitCols.SPECTRUM_INDEX,
        HitCols.FRAGMENTATION,
        HitCols.SCAN,
        HitCols.RETENTION_TIME,
        IGNORED,  # #peaks
        HitCols.CHARGE,
        HitCols.PRECURSOR_MASS,
        HitCols.ADJUSTED_PRECURSOR_MASS,
        IGNORED,  # Proteoform ID
        IGNORED,  # Feature intensity
        IGNORED,  # Feature score
        HitCols.PROTEIN,
        HitCols.PROTEIN_DESCRIPTION,
        HitCols.FIRST_RESIDUE,
        HitCols.LAST_RESIDUE,
        HitCols.PEPTIDE,
        HitCols.UNEXPECTED_MODIFICATIONS,
        IGNORED,  # MIScore
        IGNORED,  # #variable PTMs
        HitCols.MATCHED_PEAKS,
        HitCols.MATCHED_FRAGMENT_IONS,
        HitCols.PVALUE,
        HitCols.EVALUE,
        HitCols.TOOL_QVALUE,
        HitCols.PROTEOFORM_FDR,
    ),
    required_fields=(
        HitCols.SCAN,
        HitCols.CHARGE,
        HitCols.PEPTIDE,
        HitCols.PVALUE,
    ),
    min_columns=15,
    score_field=HitCols.PVALUE,
    score_higher_is_better=False,
    filter_field=HitCols.PVALUE,
    filter_higher_is_better=False,
    modification_syntax=BRACKETED_SYNTAX,
    synopsis_columns=(
        ("ResultID", HitCols.RESULT_ID),
        ("Scan", HitCols.SCAN),
        ("Prsm_ID", HitCols.PRSM_ID),
        ("Spectrum_ID", HitCols.SPECTRUM_INDEX),
        *_IDENTIFICATION_COLUMNS,
        ("Protein_Description", HitCols.PROTEIN_DESCRIPTION),
        ("Retention_Time", HitCols.RETENTION_TIME),
        ("Unexpected_Mod_Count", HitCols.UNEXPECTED_MODIFICATIONS),
        ("Matched_Peak_Count", HitCols.MATCHED_PEAKS),
        ("Matched_Fragment_Ion_Count", HitCols.MATCHED_FRAGMENT_IONS),
        ("PValue", HitCols.PVALUE),
        *_ranking_columns("PValue"),
        ("EValue", HitCols.EVALUE),
        ("Spectrum_QValue", HitCols.TOOL_QVALUE),
        ("Proteoform_QValue", HitCols.PROTEOFORM_FDR),
        ("FragMethod", HitCols.FRAGMENTATION),
        *_FDR_COLUMNS,
    ),
)

INSPECT_SCHEMA = ToolSchema(
    name=ToolNames.INSPECT,
    column_names={
        "#SpectrumFile": HitCols.SPECTRUM_FILE,
        "Scan#": HitCols.SCAN,
        "Annotation": HitCols.PEPTIDE,
        "Protein": HitCols.PROTEIN,
        "Charge": HitCols.CHARGE,
        "MQScore": HitCols.MQ_SCORE,
        "TotalPRMScore": HitCols.TOTAL_PRM_SCORE,
        "NTT": HitCols.NTT,
        "p-value": HitCols.PVALUE,
        "F-Score": HitCols.F_SCORE,
        "DeltaScore": HitCols.DELTA_SCORE,
        "PrecursorMZ": HitCols.PRECURSOR_MZ,
        "PrecursorError": HitCols.PRECURSOR_ERROR,
    },
    default_fields=(
        HitCols.SPECTRUM_FILE,
        HitCols.SCAN,
        HitCols.PEPTIDE,
        HitCols.PROTEIN,
        HitCols.CHARGE,
        HitCols.MQ_SCORE,
        IGNORED,  # Length
        HitCols.TOTAL_PRM_SCORE,
        IGNORED,  # MedianPRMScore
        IGNORED,  # FractionY
        IGNORED,  # FractionB
        IGNORED,  # Intensity
        HitCols.NTT,
        HitCols.PVALUE,
        HitCols.F_SCORE,
        HitCols.DELTA_SCORE,
        IGNORED,  # DeltaScoreOther
        IGNORED,  # RecordNumber
        IGNORED,  # DBFilePos
        IGNORED,  # SpecFilePos
        HitCols.PRECURSOR_MZ,
        HitCols.PRECURSOR_ERROR,
    ),
    required_fields=(
        HitCols.SCAN,
        HitCols.CHARGE,
        HitCols.PEPTIDE,
        HitCols.TOTAL_PRM_SCORE,
    ),
    min_columns=15,
    score_field=HitCols.TOTAL_PRM_SCORE,
    score_higher_is_better=True,
    filter_field=HitCols.PVALUE,
    filter_higher_is_better=False,
    modification_syntax=INLINE_SYNTAX,
    synopsis_columns=(
        ("ResultID", HitCols.RESULT_ID),
        ("Scan", HitCols.SCAN),
        *_IDENTIFICATION_COLUMNS,
        ("NTT", HitCols.NTT),
        ("TotalPRMScore", HitCols.TOTAL_PRM_SCORE),
        *_ranking_columns("TotalPRMScore"),
        ("MQScore", HitCols.MQ_SCORE),
        ("PValue", HitCols.PVALUE),
        ("FScore", HitCols.F_SCORE),
        ("DeltaScore", HitCols.DELTA_SCORE),
        ("PrecursorError", HitCols.PRECURSOR_ERROR),
        *_FDR_COLUMNS,
    ),
)

TOOL_SCHEMAS = {
    schema.name: schema
    for schema in (
        MODA_SCHEMA,
        MODPLUS_SCHEMA,
        MSALIGN_SCHEMA,
        TOPPIC_SCHEMA,
        INSPECT_SCHEMA,
    )
}


def get_schema(tool_name: str) -> ToolSchema:
    """Look up the schema of a search tool by its name, case-insensitive."""
    try:
        return TOOL_SCHEMAS[tool_name.lower()]
    except KeyError:
        raise UnknownToolError(tool_name, list(TOOL_SCHEMAS)) from None
