"""Assessment engine: visibility, validation, scoring, formatting and health plans."""

import pytest

from awv.features.assessments.engine import (
    build_recommendations,
    format_response,
    group_recommendations,
    is_question_visible,
    summarize,
    unknown_response_keys,
    validate_responses,
)
from awv.features.assessments.scoring import (
    HEART_RATE_HIGH_TEXT,
    VITALS_NORMAL_TEXT,
    calculate_bmi,
    score_bmi,
    score_cage,
    score_cognitive,
    score_phq2,
    score_vitals,
)
from awv.features.templates.models import Question, Questionnaire

from conftest import AWV_RESPONSES, awv_template_payload


@pytest.fixture
def questionnaire() -> Questionnaire:
    return Questionnaire.model_validate(awv_template_payload())


def question(questionnaire: Questionnaire, question_id: str) -> Question:
    return questionnaire.question_map()[question_id]


# ============== Visibility ==============

class TestVisibility:
    def test_question_without_logic_is_visible(self, questionnaire):
        assert is_question_visible(question(questionnaire, "smoker"), {}, questionnaire)

    @pytest.mark.parametrize("answer", [True, "true", "TRUE"])
    def test_equals_matches_boolean_answers(self, questionnaire, answer):
        packs = question(questionnaire, "packs_per_day")
        assert is_question_visible(packs, {"smoker": answer}, questionnaire)

    def test_equals_hides_on_other_answer(self, questionnaire):
        packs = question(questionnaire, "packs_per_day")
        assert not is_question_visible(packs, {"smoker": False}, questionnaire)

    def test_missing_controller_answer_hides_question(self, questionnaire):
        packs = question(questionnaire, "packs_per_day")
        assert not is_question_visible(packs, {}, questionnaire)
        assert not is_question_visible(packs, {"smoker": ""}, questionnaire)

    def test_not_equals_shows_when_controller_unanswered(self):
        q = Questionnaire.model_validate({
            "sections": [{"id": "s", "title": "S", "questions": [
                {"id": "a", "text": "A", "type": "text"},
                {"id": "b", "text": "B", "conditional_logic": {
                    "depends_on": "a", "show_when": {"value": "no", "operator": "notEquals"}}},
            ]}],
        })
        b = q.question_map()["b"]
        assert is_question_visible(b, {}, q)
        assert is_question_visible(b, {"a": "yes"}, q)
        assert not is_question_visible(b, {"a": "no"}, q)

    def test_hidden_controller_hides_dependent(self):
        q = Questionnaire.model_validate({
            "sections": [{"id": "s", "title": "S", "questions": [
                {"id": "a", "text": "A", "type": "boolean"},
                {"id": "b", "text": "B", "type": "text", "conditional_logic": {
                    "depends_on": "a", "show_when": {"value": True}}},
                {"id": "c", "text": "C", "type": "text", "conditional_logic": {
                    "depends_on": "b", "show_when": {"value": "x", "operator": "notEquals"}}},
            ]}],
        })
        c = q.question_map()["c"]
        assert not is_question_visible(c, {"a": False, "b": "y"}, q)
        assert is_question_visible(c, {"a": True, "b": "y"}, q)

    def test_numeric_comparisons(self):
        q = Questionnaire.model_validate({
            "sections": [{"id": "s", "title": "S", "questions": [
                {"id": "age", "text": "Age", "type": "numeric"},
                {"id": "older", "text": "Older", "conditional_logic": {
                    "depends_on": "age", "show_when": {"value": 65, "operator": "greaterThan"}}},
                {"id": "younger", "text": "Younger", "conditional_logic": {
                    "depends_on": "age", "show_when": {"value": "65", "operator": "lessThan"}}},
            ]}],
        })
        older = q.question_map()["older"]
        younger = q.question_map()["younger"]
        assert is_question_visible(older, {"age": 70}, q)
        assert not is_question_visible(older, {"age": 65}, q)
        assert is_question_visible(younger, {"age": "40"}, q)
        assert not is_question_visible(older, {"age": "seventy"}, q)
        assert not is_question_visible(younger, {"age": "seventy"}, q)

    def test_equals_matches_any_item_of_list_answer(self):
        q = Questionnaire.model_validate({
            "sections": [{"id": "s", "title": "S", "questions": [
                {"id": "conditions", "text": "Conditions", "type": "multipleChoice",
                 "options": [{"value": "diabetes", "label": "Diabetes"}, {"value": "copd", "label": "COPD"}]},
                {"id": "a1c", "text": "Last A1C", "type": "numeric", "conditional_logic": {
                    "depends_on": "conditions", "show_when": {"value": "diabetes"}}},
            ]}],
        })
        a1c = q.question_map()["a1c"]
        assert is_question_visible(a1c, {"conditions": ["copd", "diabetes"]}, q)
        assert not is_question_visible(a1c, {"conditions": ["copd"]}, q)


# ============== Validation ==============

class TestValidation:
    def test_complete_answers_pass(self, questionnaire):
        assert validate_responses(questionnaire, AWV_RESPONSES) == []

    def test_missing_required_answers_are_reported(self, questionnaire):
        errors = validate_responses(questionnaire, {"overall_health": "", "smoker": True})
        assert errors == [
            'Question "How would you rate your overall health?" is required.',
            'Question "How many packs per day?" is required.',
        ]

    def test_hidden_required_question_is_not_required(self, questionnaire):
        assert validate_responses(questionnaire, {"overall_health": "good", "smoker": False}) == []

    def test_empty_list_counts_as_missing(self, questionnaire):
        errors = validate_responses(questionnaire, {"overall_health": [], "smoker": False})
        assert errors == ['Question "How would you rate your overall health?" is required.']

    def test_unknown_keys_allow_flattened_composite_parts(self, questionnaire):
        responses = {"vitals_systolic": 120, "bmi": 22, "favourite_color": "blue", "smoker_extra": 1}
        assert unknown_response_keys(questionnaire, responses) == ["favourite_color", "smoker_extra"]


# ============== Scoring ==============

class TestBMI:
    def test_imperial_formula(self):
        assert calculate_bmi(180, 68) == 27.4

    def test_metric_accepts_centimetres_and_metres(self):
        assert calculate_bmi(70, 175, "metric") == 22.9
        assert calculate_bmi(70, 1.75, "metric") == 22.9

    @pytest.mark.parametrize("height", [0, -60])
    def test_non_positive_height_is_not_scorable(self, height):
        assert calculate_bmi(150, height) is None
        assert score_bmi("bmi", {"bmi": {"weight": 150, "height": height}}) is None

    @pytest.mark.parametrize("value, category, priority", [
        (18.4, "Underweight", "medium"),
        (18.5, "Normal weight", "low"),
        (24.9, "Normal weight", "low"),
        (25, "Overweight", "medium"),
        (30, "Obese", "high"),
    ])
    def test_categories(self, value, category, priority):
        result = score_bmi("bmi", {"bmi": value})
        assert result.category == category
        assert result.priority == priority

    def test_metric_units_from_config(self):
        result = score_bmi("bmi", {"bmi": {"weight": 95, "height": 170}}, {"units": "metric"})
        assert result.value == 32.9
        assert result.category == "Obese"

    def test_flattened_value(self):
        result = score_bmi("bmi", {"bmi_value": "27.4", "bmi_category": "Overweight"})
        assert result.value == 27.4


class TestVitals:
    def test_hypertensive_crisis(self):
        result = score_vitals("v", {"v": {"systolic": 185, "diastolic": 95}})
        assert result.priority == "high"
        assert "hypertensive crisis" in result.recommendation

    def test_diastolic_alone_can_trigger_hypertension(self):
        result = score_vitals("v", {"v": {"systolic": 125, "diastolic": 92}})
        assert result.priority == "high"
        assert "indicates hypertension" in result.recommendation

    def test_elevated(self):
        result = score_vitals("v", {"v": {"systolic": 132, "diastolic": 70}})
        assert result.priority == "medium"
        assert "elevated/stage 1" in result.recommendation

    def test_normal(self):
        result = score_vitals("v", {"v": {"systolic": 118, "diastolic": 76, "heartRate": 72}})
        assert result.priority == "low"
        assert result.recommendation == VITALS_NORMAL_TEXT

    def test_heart_rate_from_flattened_keys(self):
        result = score_vitals("v", {"v_systolic": "118", "v_diastolic": "76", "v_heartRate": "110"})
        assert result.findings == [HEART_RATE_HIGH_TEXT]
        assert result.priority == "medium"

    def test_unanswered(self):
        assert score_vitals("v", {}) is None


class TestScreenings:
    @pytest.mark.parametrize("answer, score, risk", [
        ({"interest": 2, "depressed": 1}, 3, "High"),
        ([1, 1], 2, "Low"),
        (0, 0, "Low"),
    ])
    def test_phq2(self, answer, score, risk):
        result = score_phq2("phq", {"phq": answer})
        assert result.score == score
        assert result.max_score == 6
        assert result.risk == risk

    def test_phq2_flattened_score(self):
        result = score_phq2("phq", {"phq_score": 4, "phq_risk": "High"})
        assert result.risk == "High"
        assert result.priority == "high"

    @pytest.mark.parametrize("config, score, risk", [
        ({}, 25, "High"),
        ({}, 26, "Low"),
        ({"subtype": "mmse"}, 24, "Low"),
        ({"subtype": "MMSE"}, 23, "High"),
    ])
    def test_cognitive_thresholds(self, config, score, risk):
        result = score_cognitive("cog", {"cog": score}, config)
        assert result.risk == risk
        assert result.max_score == 30

    def test_cage(self):
        result = score_cage("cage", {"cage": {"cutDown": "yes", "annoyed": True, "guilty": False}})
        assert result.score == 2
        assert result.risk == "High"
        assert "alcohol abuse" in result.recommendation

        low = score_cage("cage", {"cage": {"cutDown": False, "annoyed": False}})
        assert low.score == 0
        assert low.risk == "Low"


# ============== Formatting ==============

class TestFormatting:
    def test_option_labels(self, questionnaire):
        assert format_response(question(questionnaire, "overall_health"), "good") == "Good"
        assert format_response(question(questionnaire, "overall_health"), ["good", "poor"]) == "Good, Poor"

    def test_boolean(self, questionnaire):
        assert format_response(question(questionnaire, "smoker"), True) == "Yes"
        assert format_response(question(questionnaire, "advance_directive"), False) == "No"
        assert format_response(question(questionnaire, "advance_directive"), "true") == "Yes"

    def test_date(self):
        q = Question(id="d", text="Last flu shot", type="date")
        assert format_response(q, "2024-10-01T00:00:00Z") == "2024-10-01"

    def test_scored_types(self, questionnaire):
        responses = AWV_RESPONSES
        assert format_response(question(questionnaire, "bmi"), responses["bmi"], responses) == "BMI: 27.4 (Overweight)"
        assert (
            format_response(question(questionnaire, "vitals"), responses["vitals"], responses)
            == "BP: 142/88 mmHg, HR: 72 bpm"
        )
        assert format_response(question(questionnaire, "phq2"), responses["phq2"], responses) == "Score: 2/6 (Risk: Low)"
        assert (
            format_response(question(questionnaire, "cognition"), responses["cognition"], responses)
            == "MMSE Score: 22/30 (Risk: High)"
        )

    def test_full_vitals(self):
        q = Question(id="v", text="Vitals", type="vitalSigns")
        value = {
            "systolic": 120, "diastolic": 80, "heartRate": 72,
            "respiratoryRate": 16, "temperature": 98.6, "oxygenSaturation": 97,
        }
        assert format_response(q, value) == "BP: 120/80 mmHg, HR: 72 bpm, RR: 16 breaths/min, Temp: 98.6°F, O2: 97%"


# ============== Health plan ==============

class TestHealthPlan:
    def test_build_recommendations(self, questionnaire):
        recommendations = build_recommendations(questionnaire, AWV_RESPONSES)

        assert [(r.domain, r.priority) for r in recommendations] == [
            ("Tobacco Use", "high"),
            ("Weight Management", "medium"),
            ("Cardiovascular Health", "high"),
            ("Mental Health", "low"),
            ("Cognitive Health", "high"),
            ("Substance Use", "low"),
        ]
        tobacco = recommendations[0]
        assert tobacco.text == "Offer smoking cessation counseling and resources."
        assert tobacco.source.question_id == "smoker"
        assert tobacco.source.response == "Yes"
        assert recommendations[1].source.response == "BMI: 27.4 (Overweight)"

    def test_hidden_questions_produce_nothing(self, questionnaire):
        responses = {"overall_health": "good", "smoker": False, "packs_per_day": 3}
        assert build_recommendations(questionnaire, responses) == []

    def test_static_recommendation_substitutes_value(self, questionnaire):
        recommendations = build_recommendations(questionnaire, {"advance_directive": True})
        assert len(recommendations) == 1
        assert recommendations[0].text == "Advance directive on file: Yes."
        assert recommendations[0].domain == "Advance Care Planning"
        assert recommendations[0].priority == "low"

    def test_option_recommendation_uses_section_domain(self, questionnaire):
        recommendations = build_recommendations(questionnaire, {"overall_health": "poor"})
        assert recommendations[0].domain == "General Health"
        assert recommendations[0].priority == "medium"

    def test_group_recommendations_orders_by_priority(self, questionnaire):
        q = Questionnaire.model_validate({
            "sections": [{"id": "s", "title": "Lifestyle", "questions": [
                {"id": "a", "text": "A", "type": "text", "recommendation": "low one", "recommendation_priority": "low"},
                {"id": "b", "text": "B", "type": "text", "recommendation": "high one", "recommendation_priority": "high"},
                {"id": "c", "text": "C", "type": "text", "recommendation": "other", "recommendation_domain": "Other"},
            ]}],
        })
        groups = group_recommendations(build_recommendations(q, {"a": "x", "b": "y", "c": "z"}))
        assert list(groups) == ["Lifestyle", "Other"]
        assert [r.text for r in groups["Lifestyle"]] == ["high one", "low one"]

    def test_summary(self, questionnaire):
        summary = summarize(build_recommendations(questionnaire, AWV_RESPONSES))
        assert summary.startswith("6 recommendations across 6 domains")
        assert "3 high, 1 medium and 2 low priority." in summary
        assert summary.endswith("Follow-up needed for Tobacco Use, Cardiovascular Health, Cognitive Health.")

    def test_empty_summary(self):
        assert summarize([]) == "No recommendations were generated for this visit."
