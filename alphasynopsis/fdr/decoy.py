"""Recognition of decoy proteins by their name."""

from alphasynopsis.config import Config
from alphasynopsis.constants.keys import ConfigKeys

DEFAULT_DECOY_PREFIXES = ("reversed_", "rev_", "scrambled_", "xxx_", "xxx.")
DEFAULT_DECOY_SUFFIXES = (":reversed",)


class DecoyPredicate:
    def __init__(
        self,
        prefixes: tuple[str, ...] | list[str] = DEFAULT_DECOY_PREFIXES,
        suffixes: tuple[str, ...] | list[str] = DEFAULT_DECOY_SUFFIXES,
    ) -> None:
        """Decides whether a protein is a decoy, case-insensitive, by prefix or suffix of its name.

        Any callable taking a protein name and returning a bool can be used in its place.

        Parameters
        ----------
        prefixes : list[str]
            Name prefixes of decoy proteins.

        suffixes : list[str]
            Name suffixes of decoy proteins.

        """
        self.prefixes = tuple(p.lower() for p in prefixes)
        self.suffixes = tuple(s.lower() for s in suffixes)

    @classmethod
    def from_config(cls, config: Config) -> "DecoyPredicate":
        fdr_config = config[ConfigKeys.FDR]
        return cls(
            prefixes=fdr_config[ConfigKeys.DECOY_PREFIXES],
            suffixes=fdr_config[ConfigKeys.DECOY_SUFFIXES],
        )

    def __call__(self, protein: str) -> bool:
        name = protein.strip().lower()
        if not name:
            return False
        return name.startswith(self.prefixes) or name.endswith(self.suffixes)
