from datetime import date

import pytest

from award_interpreter.core.constants import AwardType, Severity
from award_interpreter.schemas.record import (
    CanonicalRecord,
    EfficientStarFields,
    NationalAreaIncentiveFields,
    ScoreCondition,
    ScoreRule,
    StarPointFields,
    TeamManagement,
    TeamPosition,
)
from award_interpreter.validation.business_rules import (
    DataValidator,
    ValidationResult,
    default_values,
    fix_common_issues,
)

TODAY = date(2025, 6, 1)


@pytest.fixture
def validator() -> DataValidator:
    return DataValidator(today=TODAY)


def _with(record: CanonicalRecord, **updates) -> CanonicalRecord:
    return record.model_copy(update=updates)


class TestReferenceRecords:

    def test_valid_record_has_no_issues(self, validator, valid_record):
        result = validator.validate(valid_record)

        assert result.errors == []
        assert result.warnings == []
        assert result.is_valid

    def test_past_deadline_is_one_warning(self, validator, valid_record):
        result = validator.validate(_with(valid_record, deadline="2020-01-01"))

        assert result.errors == []
        assert len(result.warnings) == 1
        assert "deadline" in result.warnings[0].lower()
        assert result.codes() == ["deadline_past"]

    def test_invalid_status_is_an_error(self, validator, valid_record):
        record = _with(
            valid_record,
            specific=NationalAreaIncentiveFields(national_allocation="50%", area_allocation="50%", status="pending"),
        )
        result = validator.validate(record)

        assert not result.is_valid
        assert "status_invalid" in result.codes(Severity.ERROR)
        assert any("pending" in message for message in result.errors)


class TestBasicFields:

    @pytest.mark.parametrize("updates, code", [
        ({"title": ""}, "title_required"),
        ({"title": "   "}, "title_required"),
        ({"description": ""}, "description_required"),
        ({"deadline": ""}, "deadline_required"),
        ({"deadline": "31/12/2025"}, "deadline_invalid"),
        ({"deadline": "2025-02-30"}, "deadline_invalid"),
    ])
    def test_errors(self, validator, valid_record, updates, code):
        result = validator.validate(_with(valid_record, **updates))
        assert code in result.codes(Severity.ERROR)

    @pytest.mark.parametrize("updates, code", [
        ({"title": "A"}, "title_too_short"),
        ({"title": "A" * 201}, "title_too_long"),
        ({"description": "Too short"}, "description_too_short"),
        ({"description": "A" * 2001}, "description_too_long"),
        ({"deadline": "2031-01-01"}, "deadline_too_far"),
        ({"external_link": "not a url"}, "external_link_invalid"),
    ])
    def test_warnings(self, validator, valid_record, updates, code):
        result = validator.validate(_with(valid_record, **updates))

        assert result.is_valid
        assert result.codes() == [code]

    def test_deadline_today_is_not_past(self, validator, valid_record):
        assert validator.validate(_with(valid_record, deadline="2025-06-01")).warnings == []

    def test_link_without_scheme_is_accepted(self, validator, valid_record):
        result = validator.validate(_with(valid_record, external_link="www.jci.cc/awards"))
        assert result.warnings == []


class TestSpecificFields:

    @pytest.mark.parametrize("no", [0, -1, 1.5])
    def test_sequence_invalid(self, validator, valid_record, no):
        result = validator.validate(_with(valid_record, specific=EfficientStarFields(no=no)))
        assert result.codes(Severity.ERROR) == ["sequence_invalid"]

    def test_sequence_missing_and_long_guidelines(self, validator, valid_record):
        record = _with(valid_record, specific=EfficientStarFields(guidelines="x" * 1001))
        assert validator.validate(record).codes() == ["sequence_missing", "guidelines_too_long"]

    def test_star_point(self, validator, valid_record):
        record = _with(valid_record, specific=StarPointFields(objective=100), category="Network Star")
        assert validator.validate(record).codes() == []

    def test_star_point_missing_objective_and_category(self, validator, valid_record):
        record = _with(valid_record, specific=StarPointFields())
        assert validator.validate(record).codes() == ["objective_missing", "category_missing"]

    def test_objective_invalid_and_too_large(self, validator, valid_record):
        negative = _with(valid_record, specific=StarPointFields(objective=-5), category_id="network_star")
        huge = _with(valid_record, specific=StarPointFields(objective=20000), category_id="network_star")

        assert validator.validate(negative).codes() == ["objective_invalid"]
        assert validator.validate(huge).codes() == ["objective_too_large"]

    def test_national_area_incentive_missing_fields(self, validator, valid_record):
        record = _with(valid_record, specific=NationalAreaIncentiveFields())
        assert validator.validate(record).codes() == [
            "national_allocation_missing",
            "area_allocation_missing",
            "status_missing",
        ]


class TestScoreRules:

    def test_no_rules(self, validator, valid_record):
        assert validator.validate(_with(valid_record, score_rules=[])).codes() == ["score_rules_empty"]

    def test_rule_problems(self, validator, valid_record):
        rule = ScoreRule(id="r", name="", base_score=-1, conditions=[])
        result = validator.validate(_with(valid_record, score_rules=[rule]))

        assert result.codes(Severity.ERROR) == ["rule_base_score_invalid"]
        assert result.codes(Severity.WARNING) == ["rule_name_missing", "rule_conditions_empty"]

    def test_condition_problems(self, validator, valid_record):
        condition = ScoreCondition(id="c", type="bananaCount", member_count=2.5, points=-3)
        rule = ScoreRule(id="r", name="Rule", base_score=1, conditions=[condition])
        result = validator.validate(_with(valid_record, score_rules=[rule]))

        assert result.codes(Severity.ERROR) == [
            "condition_type_invalid",
            "condition_points_invalid",
            "condition_count_invalid",
        ]
        assert "bananaCount" in result.errors[0]


class TestTeamManagement:

    def test_empty_positions(self, validator, valid_record):
        record = _with(valid_record, team_management=TeamManagement(positions=[]))
        assert validator.validate(record).codes() == ["positions_empty"]

    def test_position_problems(self, validator, valid_record):
        position = TeamPosition(id="p", name=" ", max_members=0)
        record = _with(valid_record, team_management=TeamManagement(positions=[position]))

        assert validator.validate(record).codes(Severity.ERROR) == [
            "position_name_required",
            "position_max_members_invalid",
        ]

    def test_valid_team(self, validator, record_with_team):
        assert validator.validate(record_with_team).codes() == []


class TestMetadata:

    @pytest.mark.parametrize("updates, code", [
        ({"confidence": 0.3}, "confidence_low"),
        ({"confidence": 1.4}, "confidence_out_of_range"),
        ({"confidence": -0.1}, "confidence_out_of_range"),
        ({"extracted_keywords": []}, "keywords_empty"),
        ({"source_text": " "}, "source_text_empty"),
    ])
    def test_warnings(self, validator, valid_record, updates, code):
        result = validator.validate(_with(valid_record, **updates))

        assert result.is_valid
        assert result.codes() == [code]


class TestValidationResult:

    def test_to_dict(self):
        result = ValidationResult()
        result.error("title_required", "Title is required")
        result.warning("keywords_empty", "No keywords")

        assert result.to_dict() == {
            "errors": ["Title is required"],
            "warnings": ["No keywords"],
            "isValid": False,
            "issues": [
                {"severity": "error", "code": "title_required", "message": "Title is required"},
                {"severity": "warning", "code": "keywords_empty", "message": "No keywords"},
            ],
        }

    def test_all_categories_run(self, validator, valid_record):
        record = _with(valid_record, title="", score_rules=[], confidence=0.2)
        assert validator.validate(record).codes() == ["title_required", "score_rules_empty", "confidence_low"]


class TestFixCommonIssues:

    def _messy(self, valid_record):
        return _with(
            valid_record,
            title="  Best Chapter 2025  ",
            description="  " + "A" * 50 + "\n",
            deadline="31/12/2025",
            specific=EfficientStarFields(no=2.7, guidelines="  read me  "),
            score_rules=[
                ScoreRule(
                    id="r",
                    name="Rule",
                    base_score=-5,
                    conditions=[ScoreCondition(id="c", type="memberCount", member_count=3.9, points=-2)],
                ),
            ],
            team_management=TeamManagement(positions=[TeamPosition(id="p", name="Lead", max_members=0)]),
        )

    def test_repairs(self, valid_record):
        fixed = fix_common_issues(self._messy(valid_record))

        assert fixed.title == "Best Chapter 2025"
        assert fixed.description == "A" * 50
        assert fixed.deadline == "2025-12-31"
        assert fixed.specific.no == 2
        assert fixed.specific.guidelines == "read me"
        assert fixed.score_rules[0].base_score == 0
        assert fixed.score_rules[0].conditions[0].member_count == 3
        assert fixed.score_rules[0].conditions[0].points == 0
        assert fixed.team_management.positions[0].max_members == 1

    def test_fixed_record_validates(self, validator, valid_record):
        fixed = fix_common_issues(self._messy(valid_record))
        assert validator.validate(fixed).is_valid

    def test_idempotent(self, valid_record):
        once = fix_common_issues(self._messy(valid_record))
        assert fix_common_issues(once).model_dump() == once.model_dump()

    def test_does_not_mutate_input(self, valid_record):
        messy = self._messy(valid_record)
        fix_common_issues(messy)
        assert messy.title == "  Best Chapter 2025  "

    def test_never_invents_content(self, valid_record):
        record = _with(valid_record, title="", specific=EfficientStarFields(), deadline="")
        fixed = fix_common_issues(record)

        assert fixed.title == ""
        assert fixed.deadline == ""
        assert fixed.specific.no is None

    def test_partial_deadline_uses_given_today(self, valid_record):
        fixed = fix_common_issues(_with(valid_record, deadline="12"), today=TODAY)
        assert fixed.deadline == "2025-06-12"

    def test_objective_clamped(self, valid_record):
        fixed = fix_common_issues(_with(valid_record, specific=StarPointFields(objective=-3)))
        assert fixed.specific.objective == 0


class TestDefaultValues:

    def test_efficient_star(self):
        assert default_values(AwardType.EFFICIENT_STAR) == EfficientStarFields(no=1, guidelines="")

    def test_star_point(self):
        assert default_values("star_point") == StarPointFields(objective=100)

    def test_national_area_incentive(self):
        values = default_values(AwardType.NATIONAL_AREA_INCENTIVE)
        assert values.national_allocation == "-"
        assert values.area_allocation == "-"
        assert values.status == "open"

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            default_values("gold_medal")
