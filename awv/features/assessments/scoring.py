"""Screening instruments: thresholds, scorers and their recommendation text."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


# BMI categories, checked in order: (upper bound exclusive, category, priority, recommendation)
BMI_CATEGORIES = [
    (18.5, "Underweight", "medium",
     "BMI is below normal range. Consider nutrition counseling to achieve healthy weight."),
    (25.0, "Normal weight", "low",
     "BMI is within normal range. Continue maintaining healthy diet and exercise habits."),
    (30.0, "Overweight", "medium",
     "BMI indicates overweight. Recommend lifestyle modifications including increased physical "
     "activity and dietary changes."),
    (float("inf"), "Obese", "high",
     "BMI indicates obesity. Recommend comprehensive weight management program, including nutrition "
     "counseling, regular exercise, and possibly referral to weight management specialist."),
]

# Blood pressure stages, checked in order: (systolic >=, diastolic >=, stage, priority, recommendation)
BLOOD_PRESSURE_STAGES = [
    (180, 120, "Hypertensive crisis", "high",
     "Blood pressure indicates hypertensive crisis. Immediate medical attention recommended."),
    (140, 90, "Hypertension", "high",
     "Blood pressure indicates hypertension. Follow-up with primary care provider recommended."),
    (130, 80, "Elevated", "medium",
     "Blood pressure indicates elevated/stage 1 hypertension. Lifestyle modifications recommended."),
]

HEART_RATE_HIGH = 100
HEART_RATE_LOW = 60
HEART_RATE_HIGH_TEXT = "Heart rate is elevated. Monitor for symptoms and consider evaluation if persistent."
HEART_RATE_LOW_TEXT = "Heart rate is below normal range. Consider evaluation if symptomatic."
VITALS_NORMAL_TEXT = "Vital signs are within normal ranges."

# Screening instruments: maximum score, "High" risk predicate, recommendation per risk
SCREENINGS = {
    "phq2": {
        "max_score": 6,
        "is_high": lambda score: score >= 3,
        "high": "Consider further assessment with PHQ-9 and referral to mental health services.",
        "low": "Continue monitoring for depression symptoms at future visits.",
    },
    "moca": {
        "max_score": 30,
        "is_high": lambda score: score < 26,
        "high": "Results indicate potential cognitive impairment. Consider referral for comprehensive "
                "neuropsychological testing.",
        "low": "Cognitive function appears normal. Continue monitoring at future visits.",
    },
    "mmse": {
        "max_score": 30,
        "is_high": lambda score: score < 24,
        "high": "Results indicate potential cognitive impairment. Consider referral for comprehensive "
                "neuropsychological testing.",
        "low": "Cognitive function appears normal. Continue monitoring at future visits.",
    },
    "cage": {
        "max_score": 4,
        "is_high": lambda score: score >= 2,
        "high": "Results suggest potential alcohol problem. Consider referral for alcohol abuse "
                "assessment and counseling.",
        "low": "Continue monitoring alcohol use at future visits.",
    },
}

# Item keys accepted for itemised screening answers
PHQ2_ITEMS = ("interest", "depressed")
CAGE_ITEMS = ("cutDown", "annoyed", "guilty", "eyeOpener")

VITAL_FIELDS = ("systolic", "diastolic", "heartRate", "respiratoryRate", "temperature", "oxygenSaturation")
_SNAKE_ALIASES = {
    "heartRate": "heart_rate",
    "respiratoryRate": "respiratory_rate",
    "oxygenSaturation": "oxygen_saturation",
}

_TRUE_STRINGS = {"true", "yes", "y", "1"}


@dataclass
class BMIResult:
    value: float
    category: str
    priority: str
    recommendation: str


@dataclass
class VitalsResult:
    readings: Dict[str, Optional[float]]
    findings: List[str] = field(default_factory=list)
    priority: str = "low"

    @property
    def recommendation(self) -> str:
        return " ".join(self.findings) if self.findings else VITALS_NORMAL_TEXT


@dataclass
class ScreeningResult:
    instrument: str
    score: float
    max_score: int
    risk: str
    priority: str
    recommendation: str


def to_number(value: Any) -> Optional[float]:
    """Parse a numeric answer; booleans, blanks and non-numbers give None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def composite_answer(question_id: str, responses: Mapping[str, Any], keys) -> Dict[str, Any]:
    """
    Collect the parts of a composite answer.

    Answers are either an object stored under the question id or the older
    flattened form where each part lives under ``<question id>_<part>``.
    """
    raw = responses.get(question_id)
    parts: Dict[str, Any] = {}
    if isinstance(raw, Mapping):
        for key in keys:
            if key in raw:
                parts[key] = raw[key]
            elif _SNAKE_ALIASES.get(key) in raw:
                parts[key] = raw[_SNAKE_ALIASES[key]]
    for key in keys:
        flat_key = f"{question_id}_{key}"
        if key not in parts and flat_key in responses:
            parts[key] = responses[flat_key]
    return parts


def _round1(value: float) -> float:
    return round(value, 1)


def bmi_category(value: float) -> Tuple[str, str, str]:
    """Return ``(category, priority, recommendation)`` for a BMI value."""
    for upper, category, priority, text in BMI_CATEGORIES:
        if value < upper:
            return category, priority, text
    _, category, priority, text = BMI_CATEGORIES[-1]
    return category, priority, text


def calculate_bmi(weight: float, height: float, units: str = "imperial") -> Optional[float]:
    """
    BMI from weight and height.

    Imperial units are pounds and inches (``703 * lb / in^2``), metric units
    are kilograms and centimetres or metres.
    """
    if weight is None or height is None or height <= 0 or weight <= 0:
        return None
    if units == "metric":
        meters = height / 100 if height > 3 else height
        return _round1(weight / (meters * meters))
    return _round1(703 * weight / (height * height))


def score_bmi(question_id: str, responses: Mapping[str, Any], config: Optional[Mapping[str, Any]] = None) -> Optional[BMIResult]:
    config = config or {}
    raw = responses.get(question_id)

    value = to_number(raw)
    parts = composite_answer(question_id, responses, ("value", "bmi", "weight", "height", "units"))
    if value is None:
        value = to_number(parts.get("value", parts.get("bmi")))
    if value is None:
        units = parts.get("units") or config.get("units", "imperial")
        value = calculate_bmi(to_number(parts.get("weight")), to_number(parts.get("height")), units)
    if value is None or value <= 0:
        return None

    value = _round1(value)
    category, priority, text = bmi_category(value)
    return BMIResult(value=value, category=category, priority=priority, recommendation=text)


def score_vitals(question_id: str, responses: Mapping[str, Any]) -> Optional[VitalsResult]:
    parts = composite_answer(question_id, responses, VITAL_FIELDS)
    readings = {key: to_number(parts.get(key)) for key in VITAL_FIELDS}
    if all(reading is None for reading in readings.values()):
        return None

    result = VitalsResult(readings=readings)
    systolic = readings["systolic"]
    diastolic = readings["diastolic"]
    priorities = []

    for min_sys, min_dia, _stage, priority, text in BLOOD_PRESSURE_STAGES:
        if (systolic is not None and systolic >= min_sys) or (diastolic is not None and diastolic >= min_dia):
            result.findings.append(text)
            priorities.append(priority)
            break

    heart_rate = readings["heartRate"]
    if heart_rate is not None:
        if heart_rate > HEART_RATE_HIGH:
            result.findings.append(HEART_RATE_HIGH_TEXT)
            priorities.append("medium")
        elif heart_rate < HEART_RATE_LOW:
            result.findings.append(HEART_RATE_LOW_TEXT)
            priorities.append("medium")

    if "high" in priorities:
        result.priority = "high"
    elif priorities:
        result.priority = "medium"
    return result


def _screening(instrument: str, score: float) -> ScreeningResult:
    screening = SCREENINGS[instrument]
    high = screening["is_high"](score)
    return ScreeningResult(
        instrument=instrument,
        score=score,
        max_score=screening["max_score"],
        risk="High" if high else "Low",
        priority="high" if high else "low",
        recommendation=screening["high"] if high else screening["low"],
    )


def _itemised_score(raw: Any, items, item_value) -> Optional[float]:
    """Sum item answers given as a list or as an object keyed by item name."""
    if isinstance(raw, (list, tuple)) and raw:
        return float(sum(item_value(v) for v in raw))
    if isinstance(raw, Mapping) and any(item in raw for item in items):
        return float(sum(item_value(raw.get(item)) for item in items))
    return None


def _score_from(question_id: str, responses: Mapping[str, Any], items, item_value) -> Optional[float]:
    raw = responses.get(question_id)
    score = to_number(raw)
    if score is None:
        score = _itemised_score(raw, items, item_value)
    if score is None:
        score = to_number(composite_answer(question_id, responses, ("score",)).get("score"))
    return score


def _phq_item(value: Any) -> float:
    number = to_number(value)
    return min(max(number, 0), 3) if number is not None else 0


def score_phq2(question_id: str, responses: Mapping[str, Any]) -> Optional[ScreeningResult]:
    """PHQ-2: two items scored 0-3 each."""
    score = _score_from(question_id, responses, PHQ2_ITEMS, _phq_item)
    if score is None:
        return None
    return _screening("phq2", min(max(score, 0), 6))


def cognitive_instrument(config: Optional[Mapping[str, Any]]) -> str:
    subtype = str((config or {}).get("subtype", "moca")).lower()
    return "mmse" if subtype == "mmse" else "moca"


def score_cognitive(question_id: str, responses: Mapping[str, Any], config: Optional[Mapping[str, Any]] = None) -> Optional[ScreeningResult]:
    """MoCA (default) or MMSE total out of 30."""
    score = _score_from(question_id, responses, (), lambda v: to_number(v) or 0)
    if score is None:
        return None
    return _screening(cognitive_instrument(config), min(max(score, 0), 30))


def score_cage(question_id: str, responses: Mapping[str, Any]) -> Optional[ScreeningResult]:
    """CAGE: four yes/no items, one point per yes."""
    score = _score_from(question_id, responses, CAGE_ITEMS, lambda v: 1 if to_bool(v) else 0)
    if score is None:
        return None
    return _screening("cage", min(max(score, 0), 4))
