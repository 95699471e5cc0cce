"""Modification definitions and the resolution of mass shifts to modification names."""

import logging
from dataclasses import dataclass, replace

import numpy as np
from alphabase.constants.modification import MOD_DF

from alphasynopsis.constants.keys import ModificationType, TerminusState
from alphasynopsis.modifications.parser import ModificationToken, get_terminus_state
from alphasynopsis.reporting import PeriodicWarning

logger = logging.getLogger()

PEPTIDE_N_TERMINUS = "<"
PEPTIDE_C_TERMINUS = ">"
ANY_RESIDUE = "*"

_N_TERMINAL_STATES = (TerminusState.PEPTIDE_N, TerminusState.PROTEIN_N)
_C_TERMINAL_STATES = (TerminusState.PEPTIDE_C, TerminusState.PROTEIN_C)

# sites of the alphabase modification table which are not tied to a residue
_UNIMOD_TERMINAL_SITES = {
    "Any_N-term": _N_TERMINAL_STATES,
    "Any_C-term": _C_TERMINAL_STATES,
    "Protein_N-term": (TerminusState.PROTEIN_N,),
    "Protein_C-term": (TerminusState.PROTEIN_C,),
}


@dataclass(frozen=True)
class ModificationDefinition:
    """A modification as configured for the search.

    Parameters
    ----------
    name : str
        Name of the modification, e.g. `Oxidation`.

    mass : float
        Monoisotopic mass shift.

    residues : str
        Target residues. `<` and `>` target the peptide N- and C-terminus, `*` any residue.

    type : str
        `static` if applied to every matching residue, `dynamic` otherwise.

    """

    name: str
    mass: float
    residues: str = ANY_RESIDUE
    type: str = ModificationType.DYNAMIC

    def __post_init__(self):
        if self.type not in ModificationType.get_values():
            raise ValueError(
                f"Unknown type '{self.type}' of modification {self.name}, expected one of {ModificationType.get_values()}"
            )

    @property
    def is_static(self) -> bool:
        return self.type == ModificationType.STATIC

    def targets(self, residue: str, terminus_state: str = TerminusState.NONE) -> bool:
        """Whether the modification can sit on the residue.

        `<` and `>` only match residues at the N- and C-terminus of the peptide or protein.
        """
        for target in self.residues:
            if target in (ANY_RESIDUE, residue):
                return True
            if target == PEPTIDE_N_TERMINUS and terminus_state in _N_TERMINAL_STATES:
                return True
            if target == PEPTIDE_C_TERMINUS and terminus_state in _C_TERMINAL_STATES:
                return True
        return False


class ModificationDefinitions:
    def __init__(
        self,
        definitions: list[ModificationDefinition] | None = None,
        use_unimod: bool = True,
        mass_digits: int = 3,
        loose_mass_digits: int = 1,
    ) -> None:
        """Resolves mass shifts found in annotations to modification names.

        Configured dynamic definitions are searched first, first at `mass_digits` and then
        at `loose_mass_digits` decimal digits. If no definition matches, the alphabase
        modification table is searched at `mass_digits`.

        Parameters
        ----------
        definitions : list[ModificationDefinition], optional
            Static and dynamic modifications of the search.

        use_unimod : bool, default True
            Whether to fall back on the alphabase modification table.

        mass_digits : int, default 3
            Decimal digits two masses have to agree on.

        loose_mass_digits : int, default 1
            Decimal digits for the second, less strict, pass over the configured definitions.

        """
        self.definitions = list(definitions) if definitions is not None else []
        self.use_unimod = use_unimod
        self.mass_digits = mass_digits
        self.loose_mass_digits = loose_mass_digits
        self._unimod_cache: dict[tuple[float, str, str], str | None] = {}
        self.unmapped_warning = PeriodicWarning("Unmapped modification mass")

    @classmethod
    def from_config(cls, modifications: list[dict], **kwargs) -> "ModificationDefinitions":
        """Build definitions from the `modifications` section of the config."""
        definitions = [
            ModificationDefinition(
                name=str(modification["name"]),
                mass=float(modification["mass"]),
                residues=str(modification.get("residues", ANY_RESIDUE)),
                type=str(modification.get("type", ModificationType.DYNAMIC)).lower(),
            )
            for modification in modifications
        ]
        return cls(definitions, **kwargs)

    @property
    def static_definitions(self) -> list[ModificationDefinition]:
        return [d for d in self.definitions if d.is_static]

    @property
    def dynamic_definitions(self) -> list[ModificationDefinition]:
        return [d for d in self.definitions if not d.is_static]

    def _match_definition(
        self, mass_delta: float, residue: str, terminus_state: str, digits: int
    ) -> str | None:
        rounded = round(mass_delta, digits)
        for definition in self.dynamic_definitions:
            if round(definition.mass, digits) != rounded:
                continue
            if definition.targets(residue, terminus_state):
                return definition.name
        return None

    def _match_unimod(self, mass_delta: float, residue: str, terminus_state: str) -> str | None:
        key = (round(mass_delta, self.mass_digits), residue, terminus_state)
        if key not in self._unimod_cache:
            self._unimod_cache[key] = _search_unimod(*key, self.mass_digits)
        return self._unimod_cache[key]

    def resolve_name(
        self, mass_delta: float, residue: str, terminus_state: str = TerminusState.NONE
    ) -> str | None:
        """Name of the modification with the given mass shift on the given residue, None if unknown.

        Terminal modifications are only considered for residues at a terminus.
        """
        for digits in (self.mass_digits, self.loose_mass_digits):
            name = self._match_definition(mass_delta, residue, terminus_state, digits)
            if name is not None:
                return name

        if self.use_unimod:
            return self._match_unimod(mass_delta, residue, terminus_state)
        return None

    def annotate(self, tokens: list[ModificationToken]) -> list[ModificationToken]:
        """Return the tokens with resolved names. Unresolved tokens are labelled by their mass."""
        annotated = []
        for token in tokens:
            if token.name:
                annotated.append(token)
                continue
            name = self.resolve_name(token.mass_delta, token.residue, token.terminus_state)
            if name is None:
                name = f"{token.mass_delta:+.{self.mass_digits}f}"
                self.unmapped_warning(f"{name} on {token.residue}{token.position}")
            annotated.append(replace(token, name=name))
        return annotated

    def static_tokens(
        self, clean_sequence: str, prefix: str = "", suffix: str = ""
    ) -> list[ModificationToken]:
        """Tokens for all static modifications matching the clean sequence.

        Static modifications are not written into the annotation but apply to every matching residue.
        """
        length = len(clean_sequence)
        if length == 0:
            return []

        tokens = []
        for definition in self.static_definitions:
            positions = []
            for target in definition.residues:
                if target == PEPTIDE_N_TERMINUS:
                    positions.append(1)
                elif target == PEPTIDE_C_TERMINUS:
                    positions.append(length)
                else:
                    positions.extend(
                        i + 1 for i, residue in enumerate(clean_sequence) if residue == target
                    )
            for position in sorted(set(positions)):
                tokens.append(
                    ModificationToken(
                        residue=clean_sequence[position - 1],
                        position=position,
                        terminus_state=get_terminus_state(position, length, prefix, suffix),
                        mass_delta=definition.mass,
                        name=definition.name,
                        is_static=True,
                    )
                )
        return tokens


def _search_unimod(
    mass_delta: float, residue: str, terminus_state: str, digits: int
) -> str | None:
    """Search the alphabase modification table, residue specific entries before terminal ones.

    Terminal entries only match residues at the corresponding terminus.
    """
    table = _unimod_table()
    candidates = table["name"][np.round(table["mass"], digits) == mass_delta]
    terminal = None
    for name in candidates:
        _, _, site = name.partition("@")
        if site == residue:
            return name
        if terminal is None and terminus_state in _UNIMOD_TERMINAL_SITES.get(site, ()):
            terminal = name
    return terminal


_UNIMOD_TABLE: dict[str, np.ndarray] = {}


def _unimod_table() -> dict[str, np.ndarray]:
    if not _UNIMOD_TABLE:
        _UNIMOD_TABLE["name"] = MOD_DF["mod_name"].to_numpy().astype(str)
        _UNIMOD_TABLE["mass"] = MOD_DF["mass"].to_numpy().astype(np.float64)
    return _UNIMOD_TABLE


def describe_modifications(tokens: list[ModificationToken]) -> str:
    """Compact description of the modifications of a peptide, e.g. `Oxidation:M3,Phospho:S7`."""
    return ",".join(
        f"{token.name}:{token.residue}{token.position}"
        for token in sorted(tokens, key=lambda t: (t.position, not t.is_static))
    )
