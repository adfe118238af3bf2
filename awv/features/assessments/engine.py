"""
Assessment engine.

Pure functions over a template and a visit's responses: conditional
visibility, required-answer validation, display formatting and the
health-plan recommendations derived from the answers. Nothing here touches
the database.
"""

from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from awv.features.assessments.models import HealthPlanRecommendation, RecommendationSource
from awv.features.assessments.scoring import (
    VITAL_FIELDS,
    cognitive_instrument,
    composite_answer,
    score_bmi,
    score_cage,
    score_cognitive,
    score_phq2,
    score_vitals,
    to_bool,
    to_number,
)
from awv.features.templates.models import Question, Section, option_key


COMPOSITE_TYPES = {"bmi", "vitalSigns", "phq2", "cognitiveAssessment", "cageScreening"}

SCORED_DOMAINS = {
    "bmi": "Weight Management",
    "vitalSigns": "Cardiovascular Health",
    "phq2": "Mental Health",
    "cognitiveAssessment": "Cognitive Health",
    "cageScreening": "Substance Use",
}

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


# ============== Answers ==============

def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def has_answer(question: Question, responses: Mapping[str, Any]) -> bool:
    """True when the question has a non-empty answer in either answer shape."""
    if not is_blank(responses.get(question.id)):
        return True
    if question.type in COMPOSITE_TYPES:
        prefix = f"{question.id}_"
        return any(key.startswith(prefix) and not is_blank(value) for key, value in responses.items())
    return False


def unknown_response_keys(template, responses: Mapping[str, Any]) -> List[str]:
    """Response keys that belong to no question of the template."""
    questions = template.question_map()
    unknown = []
    for key in responses:
        if key in questions:
            continue
        base, sep, _ = key.rpartition("_")
        if sep and base in questions and questions[base].type in COMPOSITE_TYPES:
            continue
        unknown.append(key)
    return unknown


# ============== Visibility ==============

def _comparable(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower()
    number = to_number(value)
    if number is not None:
        return str(int(number)) if number.is_integer() else str(number)
    return str(option_key(value)).strip()


def _matches(answer: Any, expected: Any) -> bool:
    if isinstance(answer, (list, tuple)):
        return any(_comparable(item) == _comparable(expected) for item in answer)
    return _comparable(answer) == _comparable(expected)


def is_question_visible(question: Question, responses: Mapping[str, Any], template, _seen=None) -> bool:
    """
    Evaluate a question's conditional logic against the current answers.

    A question is hidden when its controlling question is hidden. When the
    controlling question has no answer only ``notEquals`` shows the question.
    """
    logic = question.conditional_logic
    if logic is None or not logic.depends_on:
        return True

    seen = _seen or set()
    if question.id in seen:
        return False
    seen.add(question.id)

    controller = template.question_map().get(logic.depends_on)
    if controller is None:
        return True
    if not is_question_visible(controller, responses, template, seen):
        return False

    answer = responses.get(controller.id)
    operator = logic.show_when.operator
    expected = logic.show_when.value

    if is_blank(answer):
        return operator == "notEquals"

    if operator == "equals":
        return _matches(answer, expected)
    if operator == "notEquals":
        return not _matches(answer, expected)

    actual_number = to_number(answer)
    expected_number = to_number(expected)
    if actual_number is None or expected_number is None:
        return False
    if operator == "greaterThan":
        return actual_number > expected_number
    return actual_number < expected_number


def visible_questions(template, responses: Mapping[str, Any]):
    """Yield ``(section, question)`` for every currently visible question."""
    for section, question in template.iter_questions():
        if is_question_visible(question, responses, template):
            yield section, question


# ============== Validation ==============

def validate_responses(template, responses: Mapping[str, Any]) -> List[str]:
    """Messages for visible required questions that have no answer."""
    errors = []
    for _, question in visible_questions(template, responses):
        if question.required and not has_answer(question, responses):
            errors.append(f'Question "{question.text}" is required.')
    return errors


# ============== Formatting ==============

def format_number(value: Any) -> str:
    number = to_number(value)
    if number is None:
        return "" if value is None else str(value)
    return str(int(number)) if number.is_integer() else str(number)


def _format_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10]).isoformat()
        except ValueError:
            return value
    return str(value)


def _option_label(question: Question, value: Any) -> str:
    option = question.option_for(value)
    return option.label if option else str(value)


def _format_vitals(question: Question, responses: Mapping[str, Any]) -> Optional[str]:
    result = score_vitals(question.id, responses)
    if result is None:
        return None
    r = {key: format_number(result.readings[key]) if result.readings[key] is not None else "" for key in VITAL_FIELDS}
    text = f"BP: {r['systolic']}/{r['diastolic']} mmHg, HR: {r['heartRate']} bpm"
    if r["respiratoryRate"]:
        text += f", RR: {r['respiratoryRate']} breaths/min"
    if r["temperature"]:
        text += f", Temp: {r['temperature']}°F"
    if r["oxygenSaturation"]:
        text += f", O2: {r['oxygenSaturation']}%"
    return text


def _score_question(question: Question, responses: Mapping[str, Any]):
    if question.type == "bmi":
        return score_bmi(question.id, responses, question.config)
    if question.type == "vitalSigns":
        return score_vitals(question.id, responses)
    if question.type == "phq2":
        return score_phq2(question.id, responses)
    if question.type == "cognitiveAssessment":
        return score_cognitive(question.id, responses, question.config)
    if question.type == "cageScreening":
        return score_cage(question.id, responses)
    return None


def format_response(question: Question, value: Any, responses: Optional[Mapping[str, Any]] = None) -> str:
    """Human-readable answer text for reports."""
    responses = responses if responses is not None else {question.id: value}
    qtype = question.type

    if qtype in COMPOSITE_TYPES:
        if qtype == "vitalSigns":
            text = _format_vitals(question, responses)
            if text is not None:
                return text
        else:
            result = _score_question(question, responses)
            if result is not None and qtype == "bmi":
                return f"BMI: {format_number(result.value)} ({result.category})"
            if result is not None and qtype == "cognitiveAssessment":
                label = "MMSE" if cognitive_instrument(question.config) == "mmse" else "MoCA"
                return f"{label} Score: {format_number(result.score)}/30 (Risk: {result.risk})"
            if result is not None:
                return f"Score: {format_number(result.score)}/{result.max_score} (Risk: {result.risk})"
        return "" if is_blank(value) else str(value)

    if is_blank(value):
        return ""
    if qtype == "multipleChoice":
        if isinstance(value, (list, tuple)):
            return ", ".join(_option_label(question, item) for item in value)
        return _option_label(question, value)
    if qtype == "boolean":
        if question.options and question.option_for(value):
            return _option_label(question, value)
        return "Yes" if to_bool(value) else "No"
    if qtype == "numeric":
        return format_number(value)
    if qtype == "date":
        return _format_date(value)
    return str(value)


# ============== Recommendations ==============

def _option_recommendation(question: Question, value: Any) -> Optional[str]:
    values = value if isinstance(value, (list, tuple)) else [value]
    texts = []
    for item in values:
        option = question.option_for(item)
        if option and option.recommendation:
            texts.append(option.recommendation)
    return " ".join(texts) if texts else None


def recommendation_for(section: Section, question: Question, responses: Mapping[str, Any]) -> Optional[HealthPlanRecommendation]:
    """The recommendation produced by one answered question, if any."""
    value = responses.get(question.id)
    response_text = format_response(question, value, responses)
    source = RecommendationSource(question_id=question.id, question=question.text, response=response_text)

    if question.type in SCORED_DOMAINS:
        result = _score_question(question, responses)
        if result is not None:
            return HealthPlanRecommendation(
                domain=SCORED_DOMAINS[question.type],
                text=result.recommendation,
                priority=result.priority,
                source=source,
            )

    text = None
    if question.type in ("multipleChoice", "boolean"):
        text = _option_recommendation(question, value)
    if text is None and question.recommendation:
        text = question.recommendation.replace("{value}", response_text)
    if not text:
        return None

    return HealthPlanRecommendation(
        domain=question.recommendation_domain or section.title,
        text=text,
        priority=question.recommendation_priority,
        source=source,
    )


def build_recommendations(template, responses: Mapping[str, Any]) -> List[HealthPlanRecommendation]:
    """One recommendation per visible, answered question that yields text."""
    recommendations = []
    for section, question in visible_questions(template, responses):
        if not has_answer(question, responses):
            continue
        recommendation = recommendation_for(section, question, responses)
        if recommendation is not None:
            recommendations.append(recommendation)
    return recommendations


def sort_by_priority(recommendations: List[HealthPlanRecommendation]) -> List[HealthPlanRecommendation]:
    return sorted(recommendations, key=lambda rec: PRIORITY_ORDER.get(rec.priority, len(PRIORITY_ORDER)))


def group_recommendations(recommendations: List[HealthPlanRecommendation]) -> "OrderedDict[str, List[HealthPlanRecommendation]]":
    """Group by domain in first-appearance order, high priority first within a domain."""
    groups: "OrderedDict[str, List[HealthPlanRecommendation]]" = OrderedDict()
    for recommendation in recommendations:
        groups.setdefault(recommendation.domain, []).append(recommendation)
    for domain in groups:
        groups[domain] = sort_by_priority(groups[domain])
    return groups


def summarize(recommendations: List[HealthPlanRecommendation]) -> str:
    """Plain-text overview of a health plan."""
    if not recommendations:
        return "No recommendations were generated for this visit."

    groups = group_recommendations(recommendations)
    counts: Dict[str, int] = {"high": 0, "medium": 0, "low": 0}
    for recommendation in recommendations:
        counts[recommendation.priority] = counts.get(recommendation.priority, 0) + 1

    noun = "recommendation" if len(recommendations) == 1 else "recommendations"
    domain_noun = "domain" if len(groups) == 1 else "domains"
    summary = (
        f"{len(recommendations)} {noun} across {len(groups)} {domain_noun} "
        f"({', '.join(groups)}): {counts['high']} high, {counts['medium']} medium and {counts['low']} low priority."
    )

    urgent = [domain for domain, recs in groups.items() if any(rec.priority == "high" for rec in recs)]
    if urgent:
        summary += f" Follow-up needed for {', '.join(urgent)}."
    return summary
