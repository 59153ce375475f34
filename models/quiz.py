from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

LETTERS = ("A", "B", "C", "D")


class Question(BaseModel):
    """A single multiple-choice question with four lettered options."""
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="The question text")
    options: Dict[str, str] = Field(..., description="Option text keyed by letter A-D")
    correct_letter: str = Field(..., description="Letter of the correct option")
    explanation: str = Field("", description="Shown after the user answers")

    @classmethod
    def from_generated(cls, data: dict) -> Optional["Question"]:
        """Build from the generator's JSON shape, or None if the item is unusable."""
        if not isinstance(data, dict):
            return None
        text = data.get("question")
        options = data.get("options")
        correct = data.get("correct_answer")
        if not isinstance(text, str) or not text.strip():
            return None
        if not isinstance(options, dict) or not isinstance(correct, str):
            return None

        options = {str(k).strip().upper(): v for k, v in options.items()}
        if set(options) != set(LETTERS):
            return None
        if not all(isinstance(v, str) and v.strip() for v in options.values()):
            return None

        correct = correct.strip().upper()
        if correct not in LETTERS:
            return None

        explanation = data.get("explanation") or ""
        return cls(
            text=text.strip(),
            options={letter: options[letter].strip() for letter in LETTERS},
            correct_letter=correct,
            explanation=str(explanation).strip(),
        )


class AnsweredRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_text: str
    user_letter: str
    correct_letter: str
    was_correct: bool


class Reply(BaseModel):
    """Chat reply returned to the client."""
    message: str = Field(..., description="Formatted reply text")
    image_url: Optional[str] = Field(None, description="Optional image to show with the reply")
    intent: str = Field(..., description="Intent name or synthesized quiz tag")
