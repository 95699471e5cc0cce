"""Module containing custom exceptions."""


class CustomError(Exception):
    """Custom alphasynopsis error class."""

    _error_code = ""
    _msg = ""
    _detail_msg = ""
    _user_msg = ""

    @property
    def error_code(self):
        return self._error_code

    @property
    def msg(self):
        return self._msg

    @property
    def detail_msg(self):
        return self._detail_msg

    def __init__(self, msg: str = ""):
        self._user_msg = msg

        super().__init__(self._msg)

    def __str__(self):
        return (
            f"{self._error_code}: {self._msg}\n'{self._user_msg}'\n{self._detail_msg}"
        )


class BusinessError(CustomError):
    """Custom error class for 'business' errors.

    A 'business' error is an error that is caused during processing the input (data, configuration, ...) and not by a
    malfunction in alphasynopsis.
    """


class UserError(CustomError):
    """Custom error class for 'user' errors.

    A 'user' error is an error that is caused by the incompatible user input (data, configuration, ...) and not by a
    malfunction in alphasynopsis.
    """


class SchemaError(BusinessError):
    """Raise when a search result file does not match the expected column layout."""

    _error_code = "SCHEMA_ERROR"

    _msg = "Search result file does not match the expected column layout."

    def __init__(self, file_name: str, detail_msg: str = ""):
        self._user_msg = file_name
        self._file_name = file_name
        self._detail_msg = detail_msg

    @property
    def file_name(self):
        return self._file_name


class RequiredColumnMissingError(SchemaError):
    """Raise when a column required for processing is absent from the header."""

    _error_code = "REQUIRED_COLUMN_MISSING"

    _msg = "Required column missing from search result file."

    def __init__(self, file_name: str, missing: list[str]):
        super().__init__(file_name)
        self._missing = list(missing)
        self._detail_msg = (
            f"The following columns are required but were not found: {', '.join(self._missing)}. "
            f"Check that the file was produced by the expected search tool."
        )

    @property
    def missing(self):
        return self._missing


class InputFileError(UserError):
    """Raise when an input file cannot be found or read."""

    _error_code = "INPUT_FILE_ERROR"

    _msg = "Input file not found or not readable."

    def __init__(self, file_name: str, detail_msg: str = ""):
        self._user_msg = file_name
        self._detail_msg = detail_msg


class UnknownToolError(UserError):
    """Raise when no schema is registered for a search tool."""

    _error_code = "UNKNOWN_TOOL"

    _msg = "No schema registered for search tool."

    def __init__(self, tool_name: str, known: list[str]):
        self._user_msg = tool_name
        self._detail_msg = f"Supported tools are: {', '.join(known)}"


class ConfigError(BusinessError):
    """Raise when something is wrong with the provided configuration."""

    _error_code = "CONFIG_ERROR"

    _msg = "Malformed or invalid configuration."
    _key = ""
    _config_name = ""
    _detail_msg = ""

    def __init__(
        self,
        key: str = "",
        value: str = "",
        config_name: str = "",
        detail_msg: str = "",
    ):
        self._key = key
        self._value = value
        self._config_name = config_name
        self._detail_msg = detail_msg


class KeyAddedConfigError(ConfigError):
    """Raise when a key should be added to a config."""

    def __init__(self, key: str, value: str, config_name: str):
        super().__init__(key, value, config_name)
        self._detail_msg = (
            f"Defining new keys is not allowed when updating a config: "
            f"key='{self._key}', value='{self._value}', config_name='{self._config_name}'"
        )


class TypeMismatchConfigError(ConfigError):
    """Raise when the type of a value does not match the default type."""

    def __init__(self, key: str, value: str, config_name: str, extra_msg: str):
        super().__init__(key, value, config_name)
        self._detail_msg = (
            f"Types of values must match default config: "
            f"key='{self._key}', value='{self._value}', config_name='{self._config_name}', types='{extra_msg}'"
        )


class ProcessingAbortedError(BusinessError):
    """Raise when processing of a file was aborted on request."""

    _error_code = "PROCESSING_ABORTED"

    _msg = "Processing was aborted before the file was completed."
