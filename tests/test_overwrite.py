"""Tests for the overwrite policy state machine."""

import pytest

from gsc.errors import Cancelled, DestinationExists, GscError
from gsc.overwrite import OverwritePolicy, OverwriteState


def scripted(*answers):
    """Answer prompts from a fixed list; None simulates a closed stream."""
    remaining = list(answers)
    questions = []

    def ask(question):
        questions.append(question)
        return remaining.pop(0)

    ask.questions = questions
    return ask


def test_always_proceeds_without_asking():
    ask = scripted()
    state = OverwriteState(OverwritePolicy.ALWAYS, ask=ask)

    assert state.confirm('a.c') is True
    assert ask.questions == []


def test_never_raises_destination_exists():
    state = OverwriteState(OverwritePolicy.NEVER, ask=scripted())

    with pytest.raises(DestinationExists) as exc_info:
        state.confirm('a.c')

    assert exc_info.value.target == 'a.c'
    assert isinstance(exc_info.value, GscError)


def test_ask_yes_and_no():
    state = OverwriteState(OverwritePolicy.ASK, ask=scripted('y', 'n'))

    assert state.confirm('a.c') is True
    assert state.confirm('b.c') is False
    assert state.policy is OverwritePolicy.ASK


def test_ask_all_switches_to_always():
    ask = scripted('a')
    state = OverwriteState(OverwritePolicy.ASK, ask=ask)

    assert state.confirm('a.c') is True
    assert state.policy is OverwritePolicy.ALWAYS
    assert state.confirm('b.c') is True
    assert len(ask.questions) == 1


def test_ask_cancel_raises_cancelled():
    state = OverwriteState(OverwritePolicy.ASK, ask=scripted('c'))

    with pytest.raises(Cancelled):
        state.confirm('a.c')


def test_cancelled_is_not_a_gsc_error():
    """Batch loops catch GscError; cancelling must get past them."""
    assert not issubclass(Cancelled, GscError)


def test_closed_input_cancels():
    state = OverwriteState(OverwritePolicy.ASK, ask=scripted(None))

    with pytest.raises(Cancelled):
        state.confirm('a.c')


def test_unknown_answer_reprompts_with_legend(capsys):
    ask = scripted('maybe', ' YES ')
    state = OverwriteState(OverwritePolicy.ASK, ask=ask)

    assert state.confirm('a.c') is True
    assert len(ask.questions) == 2
    assert ask.questions[0] == 'Overwrite ‘a.c’? [y/n/a/c] '
    assert 'overwrite this and all remaining files' in capsys.readouterr().err


def test_policy_from_name():
    assert OverwritePolicy.from_name('always') is OverwritePolicy.ALWAYS
    assert OverwritePolicy.from_name('NEVER') is OverwritePolicy.NEVER
    assert OverwritePolicy.from_name('sometimes') is OverwritePolicy.ASK
