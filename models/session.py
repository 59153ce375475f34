from typing import List
from pydantic import BaseModel, Field
from models.quiz import Question, AnsweredRecord

class QuizSession(BaseModel):
    active: bool = True
    questions: List[Question]

    current_index: int = Field(0, ge=0)
    score: int = Field(0, ge=0)
    answers: List[AnsweredRecord] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def is_finished(self) -> bool:
        return self.current_index >= len(self.questions)

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]
