import json

import pytest

from award_interpreter.core.constants import AwardType
from award_interpreter.interpretation.base import default_proposal
from award_interpreter.interpretation.parsing import (
    DEFAULT_NOTES,
    PLACEHOLDER_DEADLINE,
    PLACEHOLDER_TITLE,
    first_json_object,
    parse_response,
    standardize_response,
    strip_code_fence,
)

DEFAULT = default_proposal("OPENAI_API_KEY")

FULL_REPLY = {
    "awardType": "star_point",
    "basicFields": {
        "title": "Network Star",
        "description": "Build partnerships with local organisations.",
        "deadline": "2025-11-30",
        "externalLink": "https://jci.cc/star",
    },
    "categoryFields": {"categoryId": "network_star", "category": "Network Star"},
    "specificFields": {"objective": "150"},
    "scoreRules": [
        {
            "name": "Partnerships",
            "baseScore": -5,
            "enabled": "true",
            "conditions": [
                {"type": "partnerCount", "partnerCount": 2, "partnerType": "NGO", "points": "20"},
                {"points": 5},
                "not a condition",
            ],
        },
    ],
    "teamManagement": {"positions": [{"name": "Lead", "isRequired": True, "maxMembers": 2}]},
    "confidence": 1.7,
    "extractedKeywords": ["Star Point", "", 7, " partner "],
    "notes": "",
}


class TestRawParsing:

    def test_strip_code_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fence('{"a": 1}') == '{"a": 1}'

    def test_first_json_object_skips_chatter(self):
        text = 'Sure! Here it is: {"a": {"b": 1}} and that is all {"c": 2}'
        assert first_json_object(text) == '{"a": {"b": 1}}'

    def test_first_json_object_ignores_braces_in_strings(self):
        text = '{"title": "Use {braces} and \\"quotes\\" }", "n": 1} trailing'
        assert json.loads(first_json_object(text)) == {"title": 'Use {braces} and "quotes" }', "n": 1}

    def test_first_json_object_unbalanced(self):
        assert first_json_object('{"a": {"b": 1}') is None
        assert first_json_object("no json here") is None


class TestParseResponse:

    @pytest.mark.parametrize("reply", [
        "",
        "   ",
        None,
        "I could not read the document.",
        '{"awardType": "star_point", ',
        "[1, 2, 3]",
        "{not: valid json}",
    ])
    def test_garbage_yields_default(self, reply):
        assert parse_response(reply, DEFAULT) == DEFAULT

    def test_default_is_deterministic(self):
        first = parse_response("garbage", default_proposal("OPENAI_API_KEY"))
        second = parse_response("garbage", default_proposal("OPENAI_API_KEY"))

        assert first.model_dump_json() == second.model_dump_json()

    def test_fenced_reply(self):
        reply = "```json\n" + json.dumps(FULL_REPLY) + "\n```"
        proposal = parse_response(reply, DEFAULT)

        assert proposal.award_type == AwardType.STAR_POINT
        assert proposal.basic_fields.title == "Network Star"


class TestStandardizeResponse:

    def test_full_reply(self):
        proposal = standardize_response(FULL_REPLY, DEFAULT)

        assert proposal.award_type == AwardType.STAR_POINT
        assert proposal.basic_fields.external_link == "https://jci.cc/star"
        assert proposal.category_fields.category_id == "network_star"
        assert proposal.specific_fields.objective == 150
        assert proposal.specific_fields.status == "open"

        rule = proposal.score_rules[0]
        assert rule.base_score == 0
        assert rule.enabled is True
        assert len(rule.conditions) == 2
        assert rule.conditions[0].type == "partnerCount"
        assert rule.conditions[0].partner_count == 2
        assert rule.conditions[0].points == 20
        assert rule.conditions[1].type == "memberCount"

        assert proposal.team_management.positions[0].is_required is True
        assert proposal.extracted_keywords == ["Star Point", "partner"]
        assert proposal.notes == DEFAULT_NOTES

    def test_confidence_is_clamped(self):
        assert standardize_response(FULL_REPLY, DEFAULT).confidence == 1.0
        assert standardize_response({"confidence": -0.3}, DEFAULT).confidence == 0.0
        assert standardize_response({"confidence": "high"}, DEFAULT).confidence == 0.5
        assert standardize_response({}, DEFAULT).confidence == 0.5

    def test_unknown_condition_type_is_kept(self):
        raw = {"scoreRules": [{"conditions": [{"type": "bananaCount"}]}]}
        proposal = standardize_response(raw, DEFAULT)

        assert proposal.score_rules[0].conditions[0].type == "bananaCount"

    def test_missing_fields_get_placeholders(self):
        proposal = standardize_response({"awardType": "gold_medal"}, DEFAULT)

        assert proposal.award_type == DEFAULT.award_type
        assert proposal.basic_fields.title == PLACEHOLDER_TITLE
        assert proposal.basic_fields.deadline == PLACEHOLDER_DEADLINE
        assert proposal.score_rules == []
        assert proposal.team_management is None

    def test_non_list_collections_become_empty(self):
        proposal = standardize_response({"scoreRules": "none", "extractedKeywords": "JCI"}, DEFAULT)

        assert proposal.score_rules == []
        assert proposal.extracted_keywords == []
