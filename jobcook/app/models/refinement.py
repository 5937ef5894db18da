from pydantic import BaseModel, Field

EXPECTED_VARIATIONS = 3


class RefinementResult(BaseModel):
    """Alternative phrasings of a submitted text. Transient, never persisted.

    Attributes:
        original (str): The submitted text.
        variations (list[str]): The alternatives, normally EXPECTED_VARIATIONS of them.

    """

    original: str
    variations: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return len(self.variations) == EXPECTED_VARIATIONS
