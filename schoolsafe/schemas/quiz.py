from datetime import datetime
from typing import Literal
from pydantic import Field, model_validator
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.user import UserBrief

class Media(CamelModel):
    type: Literal["none", "gif", "image", "video"] = "none"
    url: str | None = None
    resource_id: int | None = None

class Question(CamelModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=2)
    correct_answer: int
    media: Media = Field(default_factory=Media)
    timelimit_seconds: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def correct_answer_in_options(self):
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError("correctAnswer must index one of the options")
        return self

class QuizCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    questions: list[Question] = Field(min_length=1)
    resource_id: int | None = None
    time_limit: int | None = Field(default=None, gt=0)
    passing_score: int = Field(default=60, ge=0, le=100)
    category: Literal["earthquake", "flood", "fire", "tornado", "tsunami", "general"] = "general"
    xp_reward: int = Field(default=100, ge=0)

class QuizOut(CamelModel):
    id: int
    title: str
    description: str | None = ""
    questions: list[Question]
    tenant_id: int
    created_by: int
    creator: UserBrief | None = None
    resource_id: int | None = None
    time_limit: int | None = None
    passing_score: int
    category: str
    xp_reward: int
    created_at: datetime | None = None

class QuizBrief(CamelModel):
    id: int
    title: str
    passing_score: int
    category: str

class AnswerIn(CamelModel):
    selected_answer: int | None = None

class SubmitQuizIn(CamelModel):
    answers: list[AnswerIn]
    time_taken: int | None = Field(default=None, ge=0)

class AnswerResult(CamelModel):
    question_index: int
    selected_answer: int | None = None
    is_correct: bool

class SubmissionOut(CamelModel):
    id: int
    quiz_id: int
    student_id: int
    answers: list[AnswerResult]
    score: int
    time_taken: int | None = None
    completed_at: datetime
    passed: bool
    quiz: QuizBrief | None = None
    student: UserBrief | None = None

class LeaderboardEntry(CamelModel):
    student_id: int
    first_name: str
    last_name: str
    best_score: int
    attempts: int
    last_attempt: datetime
