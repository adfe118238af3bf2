# Assessment Templates Feature - Models

from typing import Optional, List, Literal, Any, Dict
from uuid import uuid4
from beanie import Document, Indexed
from pydantic import BaseModel, Field, field_validator
from awv.shared.models import TimestampMixin


QuestionType = Literal[
    "text",
    "multipleChoice",
    "numeric",
    "date",
    "boolean",
    "bmi",
    "vitalSigns",
    "phq2",
    "cognitiveAssessment",
    "cageScreening",
]
Priority = Literal["high", "medium", "low"]
ConditionOperator = Literal["equals", "notEquals", "greaterThan", "lessThan"]


def _new_id() -> str:
    return uuid4().hex


def option_key(value: Any) -> Any:
    """Normalize an answer or option value to the stored string form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value) if isinstance(value, (int, float)) else value


class QuestionOption(BaseModel):
    value: str
    label: str
    recommendation: Optional[str] = None

    @field_validator('value', mode='before')
    @classmethod
    def value_as_string(cls, v):
        return option_key(v)


class ShowWhen(BaseModel):
    value: Any = None
    operator: ConditionOperator = "equals"


class ConditionalLogic(BaseModel):
    """Show a question only when an earlier answer satisfies ``show_when``."""

    depends_on: str
    show_when: ShowWhen = Field(default_factory=ShowWhen)


class Question(BaseModel):
    id: str = Field(default_factory=_new_id)
    text: str = Field(..., min_length=1)
    type: QuestionType = "text"
    required: bool = False
    help_text: Optional[str] = None
    options: List[QuestionOption] = Field(default_factory=list)
    conditional_logic: Optional[ConditionalLogic] = None

    # Static recommendation; ``{value}`` is replaced with the formatted answer
    recommendation: Optional[str] = None
    recommendation_domain: Optional[str] = None
    recommendation_priority: Priority = "medium"

    # Type-specific settings, e.g. {"subtype": "mmse"} or {"units": "metric"}
    config: Dict[str, Any] = Field(default_factory=dict)
    min: Optional[float] = None
    max: Optional[float] = None

    @field_validator('id', mode='before')
    @classmethod
    def generate_missing_id(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return _new_id()
        return v

    def option_for(self, value: Any) -> Optional[QuestionOption]:
        key = option_key(value)
        for option in self.options:
            if option.value == key:
                return option
        return None


class Section(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)

    @field_validator('id', mode='before')
    @classmethod
    def generate_missing_id(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return _new_id()
        return v


class QuestionnaireMixin:
    """Lookup helpers shared by anything holding ``sections``."""

    def iter_questions(self):
        """Yield ``(section, question)`` pairs in reading order."""
        for section in self.sections:
            for question in section.questions:
                yield section, question

    def question_map(self) -> Dict[str, Question]:
        return {question.id: question for _, question in self.iter_questions()}


class Questionnaire(BaseModel, QuestionnaireMixin):
    """Template content without persistence."""

    sections: List[Section] = Field(default_factory=list)


class Template(Document, TimestampMixin, QuestionnaireMixin):
    """Assessment template: ordered sections of typed questions."""

    name: Indexed(str)
    description: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)
    is_active: bool = True
    version: int = 1
    created_by: Optional[str] = None

    class Settings:
        name = "templates"
        use_state_management = True
