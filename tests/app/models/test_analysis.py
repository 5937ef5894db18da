import pytest
from pydantic import ValidationError

from jobcook.app.models.analysis import UNKNOWN_COMPANY, MatchAnalysis
from jobcook.app.models.notification import Notification, NotificationKind
from jobcook.app.models.refinement import RefinementResult


@pytest.mark.parametrize(
    "score, verdict",
    [(100, "Excellent Match"), (80, "Excellent Match"), (79.9, "Good Potential"), (60, "Good Potential"), (10, "Needs Improvement")],
)
def test_verdict_bands(score, verdict):
    assert MatchAnalysis(match_score=score).verdict == verdict


def test_score_range_is_enforced():
    with pytest.raises(ValidationError):
        MatchAnalysis(match_score=101)
    with pytest.raises(ValidationError):
        MatchAnalysis(match_score=-1)


def test_company_sentinel():
    assert MatchAnalysis(match_score=50).company_name == UNKNOWN_COMPANY
    assert not MatchAnalysis(match_score=50).has_known_company
    assert MatchAnalysis(match_score=50, company_name="Acme").has_known_company


def test_notification_helpers():
    assert Notification.success("ok").kind == NotificationKind.SUCCESS
    assert Notification.error("bad").kind == NotificationKind.ERROR
    assert Notification.info("fyi").model_dump(mode="json") == {"kind": "info", "message": "fyi"}


def test_refinement_completeness():
    assert RefinementResult(original="x", variations=["a", "b", "c"]).is_complete
    assert not RefinementResult(original="x", variations=["a"]).is_complete
