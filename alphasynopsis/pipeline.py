"""Processing steps applied to the hits of a result file, in the order of `SynopsisProcessor`."""

import logging
import typing

import pandas as pd

from alphasynopsis.constants.keys import HitCols
from alphasynopsis.exceptions import ProcessingAbortedError
from alphasynopsis.fdr.fdr import get_q_values, sort_by_confidence
from alphasynopsis.mass.calculator import PeptideMassCalculator
from alphasynopsis.mass.reconciliation import MassSettings, reconcile_hits
from alphasynopsis.modifications.definitions import ModificationDefinitions
from alphasynopsis.proteins.pep_to_protein import PepToProteinIndex, expand_proteins
from alphasynopsis.proteins.protein_list import explode_protein_lists
from alphasynopsis.schema.descriptor import ToolSchema
from alphasynopsis.scoring.ranking import filter_hits, rank_hits

logger = logging.getLogger()


class ProcessingStep:
    def __init__(self) -> None:
        """Base class for processing steps. Each implementation must implement the `validate` and `forward` method.
        Processing steps can be chained together in a ProcessingPipeline.
        """

    def __call__(self, *args: typing.Any) -> typing.Any:
        """Run the processing step on the input object."""
        logger.info(f"Running {self.__class__.__name__}")
        if self.validate(*args):
            return self.forward(*args)
        logger.critical(f"Input failed validation for {self.__class__.__name__}")
        raise ValueError(f"Input failed validation for {self.__class__.__name__}")

    def validate(self, *args: typing.Any) -> bool:
        """Validate the input object."""
        raise NotImplementedError("Subclasses must implement this method")

    def forward(self, *args: typing.Any) -> typing.Any:
        """Run the processing step on the input object."""
        raise NotImplementedError("Subclasses must implement this method")


class HitsStep(ProcessingStep):
    """Processing step transforming a hits dataframe into a new hits dataframe."""

    required_columns: tuple[str, ...] = ()

    def validate(self, input: pd.DataFrame) -> bool:
        """Validate the input object. It is expected that the input is a hits dataframe with the required columns."""
        if not isinstance(input, pd.DataFrame):
            logger.error(f"Expected a dataframe, got {type(input)}")
            return False

        missing = [c for c in self.required_columns if c not in input.columns]
        if missing:
            logger.error(f"Hits are missing the columns {missing}")
            return False
        return True


class ProcessingPipeline:
    def __init__(
        self,
        steps: list[ProcessingStep],
        should_abort: typing.Callable[[], bool] | None = None,
    ) -> None:
        """Processing pipeline for transforming the hits of a result file.

        The pipeline is a list of ProcessingStep objects. Each step is called in order
        and the output of the previous step is passed to the next step.

        Example::

            pipeline = ProcessingPipeline([
                ReconcileMasses(schema, calculator, definitions),
                RankHits(schema),
                FilterHits(schema, threshold=0.05),
                EstimateQValues(schema, DecoyPredicate()),
            ])

            hits_df = pipeline(hits_df)

        Parameters
        ----------
        steps : list[ProcessingStep]
            Steps to apply in order.

        should_abort : callable, optional
            Polled before each step, the pipeline stops with `ProcessingAbortedError` if it returns True.

        """
        self.steps = steps
        self.should_abort = should_abort

    def __call__(self, input: typing.Any) -> typing.Any:
        """Run the pipeline on the input object."""
        for step in self.steps:
            if self.should_abort is not None and self.should_abort():
                raise ProcessingAbortedError(step.__class__.__name__)
            input = step(input)
        return input


class ReconcileMasses(HitsStep):
    required_columns = (HitCols.PEPTIDE, HitCols.CHARGE)

    def __init__(
        self,
        schema: ToolSchema,
        calculator: PeptideMassCalculator,
        definitions: ModificationDefinitions,
        settings: MassSettings | None = None,
        file_name: str = "",
    ) -> None:
        """Parse modifications and derive the mass columns of every hit."""
        self.schema = schema
        self.calculator = calculator
        self.definitions = definitions
        self.settings = settings
        self.file_name = file_name

    def forward(self, input: pd.DataFrame) -> pd.DataFrame:
        return reconcile_hits(
            input,
            self.schema.modification_syntax,
            self.calculator,
            self.definitions,
            self.settings,
            self.file_name,
        )


class RankHits(HitsStep):
    required_columns = (HitCols.SCAN, HitCols.CHARGE, HitCols.PEPTIDE, HitCols.PROTEIN)

    def __init__(self, schema: ToolSchema, delta_norm_default: float = 0.0) -> None:
        """Rank the hits of each scan. Has to run before any hit is filtered."""
        self.schema = schema
        self.delta_norm_default = delta_norm_default

    def validate(self, input: pd.DataFrame) -> bool:
        return super().validate(input) and self.schema.score_field in input.columns

    def forward(self, input: pd.DataFrame) -> pd.DataFrame:
        return rank_hits(input, self.schema, self.delta_norm_default)


class FilterHits(HitsStep):
    def __init__(self, schema: ToolSchema, threshold: float) -> None:
        """Remove hits whose filter score is worse than the threshold."""
        self.schema = schema
        self.threshold = threshold

    def validate(self, input: pd.DataFrame) -> bool:
        return super().validate(input) and self.schema.filter_field in input.columns

    def forward(self, input: pd.DataFrame) -> pd.DataFrame:
        return filter_hits(input, self.schema, self.threshold)


class EstimateQValues(HitsStep):
    required_columns = (HitCols.SCAN, HitCols.CHARGE, HitCols.PEPTIDE, HitCols.PROTEIN)

    def __init__(
        self,
        schema: ToolSchema,
        is_decoy: typing.Callable[[str], bool],
        max_q_value: float = 1.0,
    ) -> None:
        """Sort hits by confidence and estimate FDR and q-values from decoy hits."""
        self.schema = schema
        self.is_decoy = is_decoy
        self.max_q_value = max_q_value

    def forward(self, input: pd.DataFrame) -> pd.DataFrame:
        sorted_df = sort_by_confidence(input, self.schema)
        return get_q_values(
            sorted_df,
            self.is_decoy,
            self.schema.protein_list_separator,
            self.max_q_value,
        )


class ExplodeProteinLists(HitsStep):
    required_columns = (HitCols.PROTEIN,)

    def __init__(self, separator: str | None) -> None:
        """Write one row per protein for tools which list all proteins of a hit in one column."""
        self.separator = separator

    def forward(self, input: pd.DataFrame) -> pd.DataFrame:
        return explode_protein_lists(input, self.separator)


class ExpandProteins(HitsStep):
    required_columns = (
        HitCols.SCAN,
        HitCols.CHARGE,
        HitCols.PEPTIDE,
        HitCols.PROTEIN,
        HitCols.PRIMARY_SEQUENCE,
        HitCols.CLEAN_SEQUENCE,
    )

    def __init__(self, index: PepToProteinIndex) -> None:
        """Add rows for the proteins of a peptide to protein map."""
        self.index = index

    def forward(self, input: pd.DataFrame) -> pd.DataFrame:
        return expand_proteins(input, self.index)
