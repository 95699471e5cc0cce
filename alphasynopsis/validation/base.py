import logging

import numpy as np
import pandas as pd

logger = logging.getLogger()

# text written by some tools for scores which overflowed
_INFINITY_TOKENS = ("inf", "+inf", "-inf", "infinity", "+infinity", "-infinity")


def _replace_infinity_tokens(values: pd.Series) -> pd.Series:
    if values.dtype != object:
        return values
    return values.where(
        ~values.astype(str).str.strip().str.lower().isin(_INFINITY_TOKENS), "0"
    )


def to_number(values: pd.Series, type) -> pd.Series:
    """Cast text to numbers, values which are not numbers become 0.

    Infinity tokens are read as 0.
    """
    numbers = pd.to_numeric(_replace_infinity_tokens(values), errors="coerce")
    return numbers.fillna(0).astype(type)


def count_not_numbers(values: pd.Series) -> int:
    """Number of non-empty entries which can not be read as a number."""
    numbers = pd.to_numeric(_replace_infinity_tokens(values), errors="coerce")
    is_empty = values.isna() | (values.astype(str).str.strip() == "")
    return int((numbers.isna() & ~is_empty).sum())


class Property:
    """Column property base class"""

    def __init__(self, name, type):
        """Base class for all properties

        Parameters
        ----------
        name: str
            Name of the property

        type: type
            Type of the property

        """
        self.name = name
        self.type = type

    def cast(self, df: pd.DataFrame) -> None:
        if self.type is object:
            df[self.name] = df[self.name].fillna("").astype(str)
        else:
            df[self.name] = to_number(df[self.name], self.type)


class Optional(Property):
    """Optional property"""

    def __call__(self, df):
        """Casts the property to the specified type if it is present in the dataframe

        Parameters
        ----------
        df: pd.DataFrame
            Dataframe to validate

        """
        if self.name in df.columns:
            self.cast(df)

        return True


class Required(Property):
    """Required property"""

    def __call__(self, df):
        """Casts the property to the specified type if it is present in the dataframe

        Parameters
        ----------
        df: pd.DataFrame
            Dataframe to validate

        """
        if self.name in df.columns:
            self.cast(df)
            return True
        return False


class Schema:
    def __init__(self, name, properties):
        """Schema for validating dataframes

        Parameters
        ----------
        name: str
            Name of the schema

        properties: list
            List of Property objects

        """
        self.name = name
        self.schema = properties
        for property in self.schema:
            if not isinstance(property, Property):
                raise ValueError("Schema must contain only Property objects")

    def validate(self, df: pd.DataFrame, warn_on_critical_values: bool = False) -> None:
        """Validates the dataframe in place.

        Parameters
        ----------
        df: pd.DataFrame
            Dataframe to validate

        warn_on_critical_values: bool
            If True, warn on values in numeric columns which are not numbers. Defaults to False.

        Raises
        ------
        ValueError
            If validation fails.

        """
        if warn_on_critical_values:
            self._warn_on_critical_values(df)

        for property in self.schema:
            if not property(df):
                raise ValueError(
                    f"Validation of {self.name} failed: Column {property.name} is not present in the dataframe"
                )

    def _warn_on_critical_values(self, input_df: pd.DataFrame) -> None:
        """Warns about values in numeric columns which are not numbers.

        Must run before casting, as casting replaces these values with 0.
        """
        for property in self.schema:
            if property.type is object or property.name not in input_df.columns:
                continue
            nan_count = count_not_numbers(input_df[property.name])

            if nan_count > 0:
                nan_percentage = nan_count / len(input_df) * 100
                logger.warning(
                    f"{property.name} has {nan_count} values which are not numbers ( {nan_percentage:.2f} % out of {len(input_df)}), using 0"
                )
