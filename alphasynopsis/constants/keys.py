class ConstantsClass(type):
    """A metaclass for classes that should only contain string constants."""

    def __setattr__(self, name, value):
        raise TypeError("Constants class cannot be modified")

    def get_values(cls):
        """Get all user-defined string values of the class."""
        return [
            value
            for key, value in cls.__dict__.items()
            if not key.startswith("__") and isinstance(value, str)
        ]


class HitCols(metaclass=ConstantsClass):
    """String constants for the internal columns of the hits dataframe."""

    LINE_NUMBER = "line_number"

    # fields read from the tool output
    SPECTRUM_FILE = "spectrum_file"
    SPECTRUM_INDEX = "spectrum_index"
    PRSM_ID = "prsm_id"
    SCAN = "scan"
    CHARGE = "charge"
    PEPTIDE = "peptide"
    PROTEIN = "protein"
    PROTEIN_DESCRIPTION = "protein_description"
    PEPTIDE_POSITION = "peptide_position"
    PRECURSOR_MASS = "precursor_mass"
    PRECURSOR_MZ = "precursor_mz"
    CALCULATED_MASS = "calculated_mass"
    ADJUSTED_PRECURSOR_MASS = "adjusted_precursor_mass"
    PRECURSOR_ERROR = "precursor_error"
    DELTA_MASS = "delta_mass"
    SCORE = "score"
    PROBABILITY = "probability"
    PVALUE = "pvalue"
    EVALUE = "evalue"
    TOOL_FDR = "tool_fdr"
    TOOL_QVALUE = "tool_qvalue"
    PROTEOFORM_FDR = "proteoform_fdr"
    NTT = "ntt"
    FIRST_RESIDUE = "first_residue"
    LAST_RESIDUE = "last_residue"
    MATCHED_PEAKS = "matched_peaks"
    MATCHED_FRAGMENT_IONS = "matched_fragment_ions"
    UNEXPECTED_MODIFICATIONS = "unexpected_modifications"
    FRAGMENTATION = "fragmentation"
    RETENTION_TIME = "retention_time"
    MODIFICATION_ANNOTATION = "modification_annotation"
    MQ_SCORE = "mq_score"
    TOTAL_PRM_SCORE = "total_prm_score"
    F_SCORE = "f_score"
    DELTA_SCORE = "delta_score"

    # derived during reconciliation
    CLEAN_SEQUENCE = "clean_sequence"
    PRIMARY_SEQUENCE = "primary_sequence"
    THEORETICAL_MASS = "theoretical_mass"
    MH = "mh"
    DELM = "delm"
    DELM_PPM = "delm_ppm"
    MASS_MISMATCH = "mass_mismatch"
    MOD_DESCRIPTION = "mod_description"
    MOD_COUNT = "mod_count"
    MOD_TOKENS = "mod_tokens"

    # derived by ranking and fdr
    RANK = "rank"
    DELTA_NORM = "delta_norm"
    DECOY = "decoy"
    FDR = "fdr"
    QVALUE = "qvalue"

    RESULT_ID = "result_id"


class ConfigKeys(metaclass=ConstantsClass):
    """String constants for accessing the config."""

    GENERAL = "general"
    ERROR_LOG_MAX_LENGTH = "error_log_max_length"
    WARNING_INTERVAL = "warning_interval"
    WARNING_FIRST_N = "warning_first_n"

    MASS = "mass"
    CHARGE_CARRIER_MASS = "charge_carrier_mass"
    CORRECT_C13_ISOTOPE = "correct_c13_isotope"
    MISMATCH_MIN_TOLERANCE = "mismatch_min_tolerance"
    MISMATCH_RELATIVE_DIVISOR = "mismatch_relative_divisor"
    FALLBACK_MZ = "fallback_mz"

    RANKING = "ranking"
    DELTA_NORM_DEFAULT = "delta_norm_default"

    FDR = "fdr"
    DECOY_PREFIXES = "decoy_prefixes"
    DECOY_SUFFIXES = "decoy_suffixes"
    MAX_QVALUE = "max_qvalue"

    OUTPUT = "output"
    WRITE_FIRST_HITS = "write_first_hits"
    WRITE_MOD_SUMMARY = "write_mod_summary"
    TRUNCATE_PROTEIN_NAMES = "truncate_protein_names"
    FLOAT_DIGITS = "float_digits"

    TOOLS = "tools"
    SCORE_THRESHOLD = "score_threshold"
    MASS_DIGITS = "mass_digits"
    LOOSE_MASS_DIGITS = "loose_mass_digits"

    MODIFICATIONS = "modifications"


class TerminusState(metaclass=ConstantsClass):
    """String constants for the terminus state of a modified residue."""

    NONE = "none"
    PEPTIDE_N = "peptide_n"
    PEPTIDE_C = "peptide_c"
    PROTEIN_N = "protein_n"
    PROTEIN_C = "protein_c"


class ModificationType(metaclass=ConstantsClass):
    """String constants for the type of a modification definition."""

    STATIC = "static"
    DYNAMIC = "dynamic"


class ParserMode(metaclass=ConstantsClass):
    """String constants for the modes of the annotation parser."""

    NORMAL = "normal"
    IN_MASS_TOKEN = "in_mass_token"


class ToolNames(metaclass=ConstantsClass):
    """String constants for the supported search tools."""

    MODA = "moda"
    MODPLUS = "modplus"
    MSALIGN = "msalign"
    TOPPIC = "toppic"
    INSPECT = "inspect"


class SynopsisFiles(metaclass=ConstantsClass):
    SYNOPSIS_SUFFIX = "_syn.txt"
    FIRST_HITS_SUFFIX = "_fht.txt"
    MOD_SUMMARY_SUFFIX = "_ModSummary.txt"
    FROZEN_CONFIG = "frozen_config.yaml"
