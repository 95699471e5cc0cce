"""State machine parsing modification masses embedded in peptide annotations.

Two annotation styles are supported:

- bracketed, as written by MSAlign and TopPIC, e.g. `PEP(TI)[79.97]DE`:
  parentheses group residues among which the modification is ambiguous,
  square brackets enclose the mass shift.
- inline, as written by MODa, MODPlus and InSpecT, e.g. `PEPT+79.966IDE`:
  a mass shift starts with a sign or digit and ends at the next residue or at the end.

The parser is a single transition function `step` folded over the characters of the annotation.
"""

import logging
from dataclasses import dataclass, replace

from alphasynopsis.constants.keys import ParserMode, TerminusState
from alphasynopsis.mass.calculator import PROTEIN_TERMINUS_SYMBOL

logger = logging.getLogger()


@dataclass(frozen=True)
class ModificationSyntax:
    """Markers used by a search tool to annotate modifications.

    Parameters
    ----------
    group_open, group_close : str or None
        Markers enclosing residues among which a modification is ambiguous.

    mass_open, mass_close : str or None
        Markers enclosing a mass shift. If `mass_open` is None, mass shifts are written inline.

    """

    group_open: str | None = None
    group_close: str | None = None
    mass_open: str | None = None
    mass_close: str | None = None

    @property
    def is_inline(self) -> bool:
        return self.mass_open is None


BRACKETED_SYNTAX = ModificationSyntax(
    group_open="(", group_close=")", mass_open="[", mass_close="]"
)
INLINE_SYNTAX = ModificationSyntax()

_INLINE_TOKEN_START = "+-0123456789"
_INLINE_TOKEN_BODY = "0123456789."


@dataclass(frozen=True)
class ModificationToken:
    """A modification placed on a residue of the clean sequence.

    Parameters
    ----------
    residue : str
        Modified residue. For ambiguous modifications the first residue of the group.

    position : int
        1-based position in the clean sequence.

    terminus_state : str
        One of `TerminusState`.

    mass_delta : float
        Mass shift of the modification.

    name : str
        Name of the modification, empty if not resolved.

    is_static : bool
        Whether the modification is applied to every matching residue.

    """

    residue: str
    position: int
    terminus_state: str
    mass_delta: float
    name: str = ""
    is_static: bool = False


@dataclass(frozen=True)
class ParserState:
    mode: str = ParserMode.NORMAL
    location: int = 0
    residue: str = ""
    group_residue: str = ""
    group_location: int = 0
    store_next: bool = False
    clear_next: bool = False
    digits: str = ""


def _close_token(state: ParserState) -> tuple[ParserState, tuple[str, int, float] | None]:
    """Finish the current mass token and place it on the open group or the most recent residue."""
    closed = replace(state, mode=ParserMode.NORMAL, digits="")
    try:
        mass_delta = float(state.digits)
    except ValueError:
        logger.debug(f"Ignoring modification mass '{state.digits}' which is not a number")
        return closed, None

    if state.group_residue:
        residue, location = state.group_residue, state.group_location
    else:
        residue, location = state.residue, state.location

    return closed, (residue, max(location, 1), mass_delta)


def _step_residue(state: ParserState, char: str) -> ParserState:
    location = state.location + 1
    if state.store_next:
        return replace(
            state,
            location=location,
            residue=char,
            group_residue=char,
            group_location=location,
            store_next=False,
        )
    if state.clear_next:
        return replace(
            state,
            location=location,
            residue=char,
            group_residue="",
            group_location=0,
            clear_next=False,
        )
    return replace(state, location=location, residue=char)


def step(
    state: ParserState, char: str, syntax: ModificationSyntax
) -> tuple[ParserState, tuple[str, int, float] | None]:
    """Transition of the annotation parser on a single character.

    Parameters
    ----------
    state : ParserState
        Current state.

    char : str
        Next character of the annotation.

    syntax : ModificationSyntax
        Markers of the annotation style.

    Returns
    -------
    tuple[ParserState, tuple or None]
        The new state and, if a mass token was completed, its (residue, location, mass_delta).
    """
    if state.mode == ParserMode.IN_MASS_TOKEN:
        if syntax.is_inline:
            if char in _INLINE_TOKEN_BODY:
                return replace(state, digits=state.digits + char), None
            # any other character terminates the inline token and is processed normally
            closed, token = _close_token(state)
            next_state, _ = step(closed, char, syntax)
            return next_state, token

        if char == syntax.mass_close:
            return _close_token(state)
        return replace(state, digits=state.digits + char), None

    if char.isalpha():
        return _step_residue(state, char.upper()), None

    if syntax.is_inline:
        if char in _INLINE_TOKEN_START:
            return replace(state, mode=ParserMode.IN_MASS_TOKEN, digits=char), None
        return state, None

    if char == syntax.mass_open:
        return replace(state, mode=ParserMode.IN_MASS_TOKEN, digits=""), None
    if char == syntax.group_open:
        return replace(state, store_next=True), None
    if char == syntax.group_close:
        return replace(state, clear_next=True), None
    return state, None


def finish(
    state: ParserState, syntax: ModificationSyntax
) -> tuple[str, int, float] | None:
    """Handle the end of the annotation.

    Inline tokens are terminated by the end of the annotation, unterminated bracketed tokens are discarded.
    """
    if state.mode != ParserMode.IN_MASS_TOKEN:
        return None
    if syntax.is_inline:
        return _close_token(state)[1]
    logger.debug(f"Discarding unterminated modification token '{state.digits}'")
    return None


def get_terminus_state(position: int, length: int, prefix: str = "", suffix: str = "") -> str:
    """Terminus state of a residue, the N-terminus takes precedence for single residue peptides."""
    if position <= 1:
        return (
            TerminusState.PROTEIN_N
            if prefix == PROTEIN_TERMINUS_SYMBOL
            else TerminusState.PEPTIDE_N
        )
    if position >= length:
        return (
            TerminusState.PROTEIN_C
            if suffix == PROTEIN_TERMINUS_SYMBOL
            else TerminusState.PEPTIDE_C
        )
    return TerminusState.NONE


def parse_annotation(
    primary_sequence: str,
    syntax: ModificationSyntax,
    prefix: str = "",
    suffix: str = "",
) -> list[ModificationToken]:
    """Extract the dynamic modifications written into a peptide annotation.

    Parameters
    ----------
    primary_sequence : str
        Annotation without flanking residues, e.g. `PEP(TI)[79.97]DE`.

    syntax : ModificationSyntax
        Markers of the annotation style.

    prefix, suffix : str
        Flanking residues, `-` denotes the protein terminus.

    Returns
    -------
    list[ModificationToken]
        Modifications in the order they appear in the annotation.
    """
    raw_tokens = []
    state = ParserState()
    for char in primary_sequence:
        state, token = step(state, char, syntax)
        if token is not None:
            raw_tokens.append(token)

    token = finish(state, syntax)
    if token is not None:
        raw_tokens.append(token)

    length = state.location
    first_residue = next((c.upper() for c in primary_sequence if c.isalpha()), "")

    tokens = []
    for residue, location, mass_delta in raw_tokens:
        position = min(location, length) if length > 0 else location
        tokens.append(
            ModificationToken(
                residue=residue or first_residue,
                position=position,
                terminus_state=get_terminus_state(position, length, prefix, suffix),
                mass_delta=mass_delta,
            )
        )
    return tokens
