import logging

from pydantic import BaseModel, Field

from jobcook.app.models.notification import Notification

log = logging.getLogger(__name__)

UNKNOWN_COMPANY = "Unknown Company"


class MatchAnalysis(BaseModel):
    """Result of comparing the ingredient set against a job posting.

    Attributes:
        match_score (float): How well the ingredients fit the posting, from 0 to 100.
        missing_requirements (list[str]): Requirements the posting asks for that the candidate lacks.
        fit_summary (str): A brief summary of the fit.
        improvement_tips (list[str]): Ordered advice to improve the application.
        company_name (str): The extracted company name, or UNKNOWN_COMPANY.

    """

    match_score: float = Field(..., ge=0, le=100)
    missing_requirements: list[str] = Field(default_factory=list)
    fit_summary: str = ""
    improvement_tips: list[str] = Field(default_factory=list)
    company_name: str = UNKNOWN_COMPANY

    @property
    def has_known_company(self) -> bool:
        """True when a company name was extracted from the posting."""
        name = self.company_name.strip()
        return bool(name) and name != UNKNOWN_COMPANY

    @property
    def verdict(self) -> str:
        """Short label describing the score band."""
        if self.match_score >= 80:
            return "Excellent Match"
        if self.match_score >= 60:
            return "Good Potential"
        return "Needs Improvement"


class SourceCitation(BaseModel):
    title: str
    uri: str


class CompanyResearch(BaseModel):
    """A markdown brief about an employer, personalized to the candidate.

    Attributes:
        summary (str): Markdown text.
        sources (list[SourceCitation]): Citations backing the summary. Empty when
            the backend is not asked to search.

    """

    summary: str
    sources: list[SourceCitation] = Field(default_factory=list)


class AnalysisOutcome(BaseModel):
    """The combined result of a match analysis and its optional company research.

    Attributes:
        analysis (MatchAnalysis): The successful match analysis.
        company_research (CompanyResearch | None): The research brief, when it was requested and succeeded.
        notifications (list[Notification]): One notification per outcome, in order.

    """

    analysis: MatchAnalysis
    company_research: CompanyResearch | None = None
    notifications: list[Notification] = Field(default_factory=list)
