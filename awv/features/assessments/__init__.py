# Assessment engine

from awv.features.assessments.engine import (
    build_recommendations,
    format_response,
    group_recommendations,
    is_question_visible,
    summarize,
    validate_responses,
)

__all__ = [
    "build_recommendations",
    "format_response",
    "group_recommendations",
    "is_question_visible",
    "summarize",
    "validate_responses",
]
