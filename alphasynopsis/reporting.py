# native imports
import logging
import os
import time
from datetime import timedelta

# global variable which tracks if any logger has been initiated
# As soon as its instantiated the default logger will be configured with a path to save the log file
__is_initiated__ = False

# Add a new logging level to the default logger, level 21 is just above INFO (20)
# This has to happen at load time to make the .progress() method available even if no logger is instantiated
PROGRESS_LEVELV_NUM = 21
logging.PROGRESS = PROGRESS_LEVELV_NUM
logging.addLevelName(PROGRESS_LEVELV_NUM, "PROGRESS")

DEFAULT_ERROR_LOG_MAX_LENGTH = 4096

logger = logging.getLogger()


def progress(self, message, *args, **kws):
    if self.isEnabledFor(PROGRESS_LEVELV_NUM):
        # Yes, logger takes its '*args' as 'args'.
        self._log(PROGRESS_LEVELV_NUM, message, args, **kws)


logging.Logger.progress = progress


class DefaultFormatter(logging.Formatter):
    template = "%(levelname)s: %(message)s"

    grey = "\x1b[38;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    green = "\x1b[32;20m"
    reset = "\x1b[0m"

    def __init__(self, use_ansi: bool = True):
        """
        Default formatter adding elapsed time and optional ANSI colors.

        Parameters
        ----------

        use_ansi : bool, default True
            Whether to use ANSI escape codes to color the output.

        """
        super().__init__()
        self.start_time = time.time()

        colors = {
            logging.DEBUG: "",
            logging.INFO: "",
            logging.PROGRESS: self.green,
            logging.WARNING: self.yellow,
            logging.ERROR: self.red,
            logging.CRITICAL: self.bold_red,
        }
        self.formatter = {
            level: logging.Formatter(
                color + self.template + self.reset
                if use_ansi and color
                else self.template
            )
            for level, color in colors.items()
        }

    def format(self, record: logging.LogRecord):
        """Format the log record, prefixed by the time elapsed since the formatter was created."""

        elapsed = timedelta(seconds=record.created - self.start_time)
        formatter = self.formatter.get(record.levelno, self.formatter[logging.INFO])

        return f"{elapsed} {formatter.format(record)}"


def init_logging(
    log_folder: str = None, log_level: int = logging.INFO, overwrite: bool = True
):
    """Initialize the default logger.
    Sets the formatter and the console and file handlers.

    Parameters
    ----------

    log_folder : str, default None
        Path to the folder where the log file will be saved. If None, the log file will not be saved.

    log_level : int, default logging.INFO
        Log level to use. Can be logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR or logging.CRITICAL.

    overwrite : bool, default True
        Whether to overwrite the log file if it already exists.
    """

    global __is_initiated__

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(log_level)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(DefaultFormatter(use_ansi=True))
    root_logger.addHandler(ch)

    if log_folder is not None:
        log_name = os.path.join(log_folder, "log.txt")
        if os.path.exists(log_name) and overwrite:
            os.remove(log_name)
        fh = logging.FileHandler(log_name, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(DefaultFormatter(use_ansi=False))
        root_logger.addHandler(fh)

    __is_initiated__ = True


class ErrorLog:
    def __init__(self, max_length: int = DEFAULT_ERROR_LOG_MAX_LENGTH) -> None:
        """Bounded log of row level errors encountered while processing a single file.

        Entries are kept until their accumulated length exceeds `max_length` characters.
        Later entries are counted but not stored.

        Parameters
        ----------

        max_length : int, default 4096
            Maximum number of characters kept.

        """
        self.max_length = max_length
        self.entries: list[str] = []
        self.n_errors = 0
        self._length = 0

    def add(self, message: str, line_number: int | None = None) -> None:
        """Record an error, optionally referencing the line of the input file it occurred in."""
        self.n_errors += 1
        entry = f"Line {line_number}: {message}" if line_number is not None else message
        logger.debug(entry)

        if self._length + len(entry) > self.max_length:
            return
        self.entries.append(entry)
        self._length += len(entry) + 1

    @property
    def truncated(self) -> bool:
        return self.n_errors > len(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __str__(self) -> str:
        text = "\n".join(self.entries)
        if self.truncated:
            text += f"\n... {self.n_errors - len(self.entries)} more errors not shown"
        return text


# occurrences of periodic warnings which are always logged, and the logging interval afterwards
_periodic_warning_defaults = {"first_n": 10, "interval": 10}


def set_periodic_warning_defaults(first_n: int, interval: int) -> None:
    """Set the defaults of all `PeriodicWarning` objects created afterwards."""
    _periodic_warning_defaults["first_n"] = int(first_n)
    _periodic_warning_defaults["interval"] = int(interval)


class PeriodicWarning:
    def __init__(
        self, message: str, first_n: int | None = None, interval: int | None = None
    ) -> None:
        """Warning which is logged for its first occurrences and then only every `interval` occurrences.

        Parameters
        ----------

        message : str
            Description of the warning, details of each occurrence are appended.

        first_n : int, optional
            Number of occurrences which are always logged, see `set_periodic_warning_defaults`.

        interval : int, optional
            After `first_n` occurrences, only every `interval`-th occurrence is logged.

        """
        self.message = message
        self.first_n = (
            first_n if first_n is not None else _periodic_warning_defaults["first_n"]
        )
        if interval is None:
            interval = _periodic_warning_defaults["interval"]
        self.interval = max(interval, 1)
        self.count = 0

    def __call__(self, detail: str = "") -> bool:
        """Count an occurrence and log it if due. Returns whether the warning was logged."""
        self.count += 1
        if self.count > self.first_n and self.count % self.interval != 0:
            return False

        text = f"{self.message}: {detail}" if detail else self.message
        if self.count > self.first_n:
            text += f" ({self.count} occurrences)"
        logger.warning(text)
        return True

    def summarize(self) -> None:
        if self.count > 0:
            logger.info(f"{self.message}: {self.count} occurrences in total")
