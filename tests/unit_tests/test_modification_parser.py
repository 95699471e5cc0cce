import pytest

from alphasynopsis.constants.keys import ParserMode, TerminusState
from alphasynopsis.modifications.parser import (
    BRACKETED_SYNTAX,
    INLINE_SYNTAX,
    ModificationToken,
    ParserState,
    get_terminus_state,
    parse_annotation,
    step,
)


def test_bracketed_single_token():
    tokens = parse_annotation("AC[15.9949]DE", BRACKETED_SYNTAX)

    assert tokens == [
        ModificationToken(
            residue="C",
            position=2,
            terminus_state=TerminusState.NONE,
            mass_delta=15.9949,
        )
    ]


def test_bracketed_group_resolves_to_first_residue():
    tokens = parse_annotation("PEP(TIS)[79.97]DE", BRACKETED_SYNTAX)

    assert len(tokens) == 1
    assert tokens[0].residue == "T"
    assert tokens[0].position == 4
    assert tokens[0].mass_delta == pytest.approx(79.97)


def test_bracketed_group_is_cleared_after_next_residue():
    tokens = parse_annotation("(AB)[1.0]C[2.0]", BRACKETED_SYNTAX)

    assert [(t.residue, t.position, t.mass_delta) for t in tokens] == [
        ("A", 1, 1.0),
        ("C", 3, 2.0),
    ]


def test_bracketed_unparseable_token_is_dropped():
    tokens = parse_annotation("PEP[Acetyl]T[15.99]IDE", BRACKETED_SYNTAX)

    assert len(tokens) == 1
    assert tokens[0].residue == "T"


def test_bracketed_unterminated_token_is_discarded():
    assert parse_annotation("PEPT[15.99", BRACKETED_SYNTAX) == []


def test_bracketed_token_before_first_residue_is_placed_on_position_1():
    tokens = parse_annotation("[42.01]PEPTIDE", BRACKETED_SYNTAX)

    assert tokens[0].position == 1
    assert tokens[0].residue == "P"
    assert tokens[0].terminus_state == TerminusState.PEPTIDE_N


def test_inline_tokens():
    tokens = parse_annotation("PEPT+79.966IDEM+15.995", INLINE_SYNTAX)

    assert [(t.residue, t.position) for t in tokens] == [("T", 4), ("M", 8)]
    assert tokens[0].mass_delta == pytest.approx(79.966)
    assert tokens[1].mass_delta == pytest.approx(15.995)
    assert tokens[1].terminus_state == TerminusState.PEPTIDE_C


def test_inline_negative_token():
    tokens = parse_annotation("Q-17.027PEPTIDE", INLINE_SYNTAX)

    assert tokens[0].residue == "Q"
    assert tokens[0].mass_delta == pytest.approx(-17.027)


def test_inline_sign_without_digits_is_dropped():
    assert parse_annotation("PEP-TIDE", INLINE_SYNTAX) == []


def test_protein_terminus_states():
    tokens = parse_annotation("M+42.011PEPTIDE+1.0", INLINE_SYNTAX, prefix="-", suffix="-")

    assert tokens[0].terminus_state == TerminusState.PROTEIN_N
    assert tokens[1].terminus_state == TerminusState.PROTEIN_C


@pytest.mark.parametrize(
    "position, length, prefix, suffix, expected",
    [
        (1, 5, "K", "R", TerminusState.PEPTIDE_N),
        (1, 5, "-", "R", TerminusState.PROTEIN_N),
        (5, 5, "K", "R", TerminusState.PEPTIDE_C),
        (5, 5, "K", "-", TerminusState.PROTEIN_C),
        (3, 5, "-", "-", TerminusState.NONE),
        (1, 1, "K", "-", TerminusState.PEPTIDE_N),
    ],
)
def test_get_terminus_state(position, length, prefix, suffix, expected):
    assert get_terminus_state(position, length, prefix, suffix) == expected


def test_step_transitions():
    state = ParserState()

    state, token = step(state, "A", BRACKETED_SYNTAX)
    assert token is None
    assert state.location == 1
    assert state.residue == "A"

    state, token = step(state, "[", BRACKETED_SYNTAX)
    assert state.mode == ParserMode.IN_MASS_TOKEN

    state, _ = step(state, "1", BRACKETED_SYNTAX)
    state, token = step(state, "]", BRACKETED_SYNTAX)
    assert state.mode == ParserMode.NORMAL
    assert token == ("A", 1, 1.0)


def test_parser_state_is_immutable():
    state = ParserState()
    new_state, _ = step(state, "A", INLINE_SYNTAX)

    assert state.location == 0
    assert new_state.location == 1
