import pytest
from pydantic import ValidationError

from jobcook.app.models.interview import InterviewHistory, InterviewRole, InterviewTurn


def question(content="Why us?"):
    return InterviewTurn(role=InterviewRole.INTERVIEWER, content=content)


def answer(content="Because."):
    return InterviewTurn(role=InterviewRole.CANDIDATE, content=content)


def test_append_and_order():
    history = InterviewHistory()
    q = history.append(question())
    a = history.append(answer())

    assert history.turns == (q, a)
    assert len(history) == 2
    assert history.last == a
    assert history.last_question() == q


def test_append_rejects_duplicate_ids():
    history = InterviewHistory()
    turn = history.append(question())

    with pytest.raises(ValueError):
        history.append(turn)


def test_interviewer_turns_never_carry_feedback():
    history = InterviewHistory()

    with pytest.raises(ValueError):
        history.append(
            InterviewTurn(role=InterviewRole.INTERVIEWER, content="Q?", feedback="Nice", score=5)
        )


def test_amend_replaces_in_place():
    history = InterviewHistory()
    history.append(question())
    provisional = history.append(answer("(Audio Answer Submitted)"))
    history.append(question("Next?"))

    amended = history.amend(provisional.id, content="Spoken words", feedback="Clear.", score=9)

    assert history.turns[1] == amended
    assert amended.id == provisional.id
    assert amended.content == "Spoken words"
    assert amended.is_evaluated
    assert len(history) == 3


def test_amend_only_candidate_turns():
    history = InterviewHistory()
    q = history.append(question())

    with pytest.raises(ValueError):
        history.amend(q.id, feedback="x", score=3)
    with pytest.raises(KeyError):
        history.amend("missing", score=3)


def test_amend_validates_score():
    history = InterviewHistory()
    a = history.append(answer())

    with pytest.raises(ValidationError):
        history.amend(a.id, score=11)

    assert not history.turns[0].is_evaluated


def test_reset():
    history = InterviewHistory()
    history.append(question())

    history.reset()

    assert history.turns == ()
    assert history.last is None
    assert history.last_question() is None
