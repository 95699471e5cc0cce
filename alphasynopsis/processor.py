"""Conversion of search tool result files into synopsis files."""

import gc
import logging
import os
import typing
from dataclasses import dataclass, field

import pandas as pd

from alphasynopsis.config import Config, load_config
from alphasynopsis.constants.keys import ConfigKeys, SynopsisFiles
from alphasynopsis.exceptions import CustomError, ProcessingAbortedError
from alphasynopsis.fdr.decoy import DecoyPredicate
from alphasynopsis.io.reader import read_hits
from alphasynopsis.io.writer import (
    first_hits_path,
    mod_summary_path,
    synopsis_path,
    write_mod_summary,
    write_synopsis,
)
from alphasynopsis.mass.calculator import PeptideMassCalculator
from alphasynopsis.mass.reconciliation import MassSettings
from alphasynopsis.modifications.definitions import (
    ModificationDefinition,
    ModificationDefinitions,
)
from alphasynopsis.pipeline import (
    EstimateQValues,
    ExpandProteins,
    ExplodeProteinLists,
    FilterHits,
    ProcessingPipeline,
    RankHits,
    ReconcileMasses,
)
from alphasynopsis.proteins.pep_to_protein import PepToProteinIndex
from alphasynopsis.reporting import ErrorLog, set_periodic_warning_defaults
from alphasynopsis.schema.descriptor import ToolSchema
from alphasynopsis.schema.tools import get_schema
from alphasynopsis.scoring.ranking import first_hits

logger = logging.getLogger()


@dataclass
class ProcessingResult:
    """Outcome of processing a single result file.

    Parameters
    ----------
    input_path : str
        Result file that was processed.

    success : bool
        Whether the synopsis file was written.

    aborted : bool
        Whether processing stopped because `SynopsisProcessor.abort` was called.

    n_hits_read : int
        Number of hits read from the result file.

    n_hits_written : int
        Number of rows written to the synopsis file.

    error_log : ErrorLog
        Errors of individual lines of the result file.

    synopsis_path, first_hits_path, mod_summary_path : str or None
        Files written.

    error_message : str
        Description of the error which stopped processing.

    """

    input_path: str
    success: bool = False
    aborted: bool = False
    n_hits_read: int = 0
    n_hits_written: int = 0
    error_log: ErrorLog = field(default_factory=ErrorLog)
    synopsis_path: str | None = None
    first_hits_path: str | None = None
    mod_summary_path: str | None = None
    error_message: str = ""


class SynopsisProcessor:
    def __init__(
        self,
        schema: ToolSchema | str,
        config: Config | None = None,
        modifications: ModificationDefinitions | list[ModificationDefinition] | None = None,
        decoy_predicate: typing.Callable[[str], bool] | None = None,
    ) -> None:
        """Converts the result files of one search tool into synopsis files.

        Parameters
        ----------
        schema : ToolSchema or str
            Schema of the search tool, or its name.

        config : Config, optional
            Configuration, defaults to the packaged default config.

        modifications : ModificationDefinitions or list[ModificationDefinition], optional
            Modifications of the search. Defaults to the `modifications` section of the config.

        decoy_predicate : callable, optional
            Decides whether a protein is a decoy. Defaults to prefixes and suffixes from the config.

        """
        self.schema = get_schema(schema) if isinstance(schema, str) else schema
        self.config = config if config is not None else load_config()
        general_config = self.config[ConfigKeys.GENERAL]
        set_periodic_warning_defaults(
            general_config[ConfigKeys.WARNING_FIRST_N],
            general_config[ConfigKeys.WARNING_INTERVAL],
        )

        tool_settings = self.config.tool_settings(self.schema.name)
        mass_digits = int(tool_settings.get(ConfigKeys.MASS_DIGITS, 3))
        loose_mass_digits = int(tool_settings.get(ConfigKeys.LOOSE_MASS_DIGITS, 1))

        if isinstance(modifications, ModificationDefinitions):
            self.definitions = modifications
        elif modifications is not None:
            self.definitions = ModificationDefinitions(
                modifications, mass_digits=mass_digits, loose_mass_digits=loose_mass_digits
            )
        else:
            self.definitions = ModificationDefinitions.from_config(
                self.config[ConfigKeys.MODIFICATIONS],
                mass_digits=mass_digits,
                loose_mass_digits=loose_mass_digits,
            )

        self.decoy_predicate = (
            decoy_predicate
            if decoy_predicate is not None
            else DecoyPredicate.from_config(self.config)
        )
        self.calculator = PeptideMassCalculator(
            charge_carrier_mass=self.config[ConfigKeys.MASS][ConfigKeys.CHARGE_CARRIER_MASS]
        )
        self.mass_settings = MassSettings.from_config(self.config)
        score_threshold = tool_settings.get(ConfigKeys.SCORE_THRESHOLD)
        self.score_threshold = float(score_threshold) if score_threshold is not None else None

        self._abort_requested = False

    def abort(self) -> None:
        """Request processing to stop. Checked once per line while reading and between processing steps."""
        logger.warning("Abort requested")
        self._abort_requested = True

    def _should_abort(self) -> bool:
        return self._abort_requested

    def save_config(self, output_folder: str) -> str:
        """Save the config used for processing to `frozen_config.yaml` in the output folder."""
        file_path = os.path.join(output_folder, SynopsisFiles.FROZEN_CONFIG)
        if os.path.exists(file_path):
            logger.info(f"Overwriting existing config file {file_path}")
        self.config.to_yaml(file_path)
        return file_path

    def build_pipeline(
        self,
        pep_to_protein_index: PepToProteinIndex | None = None,
        file_name: str = "",
    ) -> ProcessingPipeline:
        """Steps applied to the hits read from a result file."""
        ranking_config = self.config[ConfigKeys.RANKING]
        fdr_config = self.config[ConfigKeys.FDR]

        steps = [
            ReconcileMasses(
                self.schema,
                self.calculator,
                self.definitions,
                self.mass_settings,
                file_name,
            ),
            RankHits(self.schema, ranking_config[ConfigKeys.DELTA_NORM_DEFAULT]),
        ]
        if self.score_threshold is not None:
            steps.append(FilterHits(self.schema, self.score_threshold))
        steps += [
            EstimateQValues(
                self.schema, self.decoy_predicate, fdr_config[ConfigKeys.MAX_QVALUE]
            ),
            ExplodeProteinLists(self.schema.protein_list_separator),
        ]
        if pep_to_protein_index is not None:
            steps.append(ExpandProteins(pep_to_protein_index))

        return ProcessingPipeline(steps, should_abort=self._should_abort)

    def process_hits(
        self,
        hits_df: pd.DataFrame,
        pep_to_protein_index: PepToProteinIndex | None = None,
        file_name: str = "",
    ) -> pd.DataFrame:
        """Apply all processing steps to hits read from a result file."""
        return self.build_pipeline(pep_to_protein_index, file_name)(hits_df)

    def process_file(
        self,
        input_path: str,
        output_path: str | None = None,
        pep_to_protein_path: str | None = None,
    ) -> ProcessingResult:
        """Convert a single result file into a synopsis file.

        Parameters
        ----------
        input_path : str
            Tab-delimited result file of the search tool.

        output_path : str, optional
            Path of the synopsis file, defaults to the input path with suffix `_syn.txt`.

        pep_to_protein_path : str, optional
            Peptide to protein map used to add rows for all proteins of a peptide.

        Returns
        -------
        ProcessingResult
            The outcome, unsuccessful and marked as aborted if `abort` was called.

        Raises
        ------
        InputFileError
            If the result file or the map cannot be read.

        SchemaError
            If the result file does not match the schema.
        """
        self._abort_requested = False
        return self._process_file(input_path, output_path, pep_to_protein_path)

    def _process_file(
        self,
        input_path: str,
        output_path: str | None,
        pep_to_protein_path: str | None,
    ) -> ProcessingResult:
        file_name = os.path.basename(input_path)
        output_path = output_path if output_path is not None else synopsis_path(input_path)
        general_config = self.config[ConfigKeys.GENERAL]
        output_config = self.config[ConfigKeys.OUTPUT]

        result = ProcessingResult(
            input_path=input_path,
            error_log=ErrorLog(general_config[ConfigKeys.ERROR_LOG_MAX_LENGTH]),
        )
        logger.progress(f"Creating synopsis file for {file_name}")

        try:
            hits_df = read_hits(
                input_path,
                self.schema,
                error_log=result.error_log,
                should_abort=self._should_abort,
                truncate_protein_names=output_config[ConfigKeys.TRUNCATE_PROTEIN_NAMES],
            )
            result.n_hits_read = len(hits_df)

            pep_to_protein_index = (
                PepToProteinIndex.from_file(pep_to_protein_path)
                if pep_to_protein_path is not None
                else None
            )
            synopsis_df = self.process_hits(hits_df, pep_to_protein_index, file_name)
        except ProcessingAbortedError:
            logger.warning(f"Processing of {file_name} aborted, no synopsis file written")
            result.aborted = True
            result.error_message = "Processing aborted"
            return result

        float_digits = output_config[ConfigKeys.FLOAT_DIGITS]
        write_synopsis(synopsis_df, output_path, self.schema, float_digits)
        result.synopsis_path = output_path
        result.n_hits_written = len(synopsis_df)

        if output_config[ConfigKeys.WRITE_FIRST_HITS]:
            result.first_hits_path = first_hits_path(output_path)
            write_synopsis(
                first_hits(synopsis_df), result.first_hits_path, self.schema, float_digits
            )

        if output_config[ConfigKeys.WRITE_MOD_SUMMARY]:
            result.mod_summary_path = mod_summary_path(output_path)
            write_mod_summary(synopsis_df, result.mod_summary_path, self.definitions)

        if result.error_log.n_errors > 0:
            logger.warning(
                f"{result.error_log.n_errors:,} lines of {file_name} could not be read:\n{result.error_log}"
            )
        logger.progress(
            f"Wrote {result.n_hits_written:,} of {result.n_hits_read:,} hits to {output_path}"
        )
        result.success = True
        return result

    def process_files(
        self,
        input_paths: list[str],
        output_directory: str | None = None,
        pep_to_protein_paths: dict[str, str] | None = None,
    ) -> list[ProcessingResult]:
        """Convert several result files one after the other.

        A file which cannot be processed is reported in its result and does not stop the remaining files.
        After an abort, the remaining files are not processed.

        Parameters
        ----------
        input_paths : list[str]
            Result files of the search tool.

        output_directory : str, optional
            Directory for the synopsis files, defaults to the directory of each input file.
            The config used is saved to this directory.

        pep_to_protein_paths : dict[str, str], optional
            Peptide to protein map per input path.

        Returns
        -------
        list[ProcessingResult]
            One result per input path, in order.
        """
        self._abort_requested = False
        pep_to_protein_paths = pep_to_protein_paths or {}
        if output_directory is not None:
            self.save_config(output_directory)

        results = []
        for input_path in input_paths:
            if self._abort_requested:
                results.append(
                    ProcessingResult(
                        input_path=input_path, aborted=True, error_message="Processing aborted"
                    )
                )
                continue

            try:
                result = self._process_file(
                    input_path,
                    synopsis_path(input_path, output_directory),
                    pep_to_protein_paths.get(input_path),
                )
            except CustomError as e:
                logger.error(f"Processing of {input_path} failed: {e}")
                result = ProcessingResult(input_path=input_path, error_message=str(e))
            results.append(result)

            # buffers of the previous file are released before the next file is read
            gc.collect()

        n_success = sum(r.success for r in results)
        logger.progress(f"Created {n_success} of {len(input_paths)} synopsis files")
        return results
