from typing import Annotated

from fastapi import Depends

from textscope.config.dependencies import DEnvironmentVariables
from textscope.domain.services.text_validation import validate_and_sanitize_text

VOWELS = frozenset("aeiou")


def count_vowels(text: str) -> int:
    return sum(1 for char in text.lower() if char in VOWELS)


class TextAnalysisUseCase:
    def __init__(self, environment_variables: DEnvironmentVariables):
        self.max_text_length = environment_variables.MAX_TEXT_LENGTH

    def validate(self, raw_text: object) -> str:
        return validate_and_sanitize_text(raw_text, max_length=self.max_text_length)

    def length(self, text: str) -> int:
        return len(text)

    def vowel_count(self, text: str) -> int:
        return count_vowels(text)


DTextAnalysisUseCase = Annotated[TextAnalysisUseCase, Depends(TextAnalysisUseCase)]
