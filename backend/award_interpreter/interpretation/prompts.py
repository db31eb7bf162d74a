"""
LLM prompts for award indicator interpretation.

All prompts used by the interpretation backends are centralised here.
This makes it easy to iterate on prompts without touching backend logic.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
#  System prompt (shared by every backend)
# ═══════════════════════════════════════════════════════════

SYSTEM_PROMPT = (
    "You are an expert interpreter of award indicator documents for JCI "
    "(Junior Chamber International) chapters. Read the document carefully, "
    "extract every relevant field, and answer with JSON only."
)


# ═══════════════════════════════════════════════════════════
#  Interpretation prompt
# ═══════════════════════════════════════════════════════════

INTERPRETATION_PROMPT = """
Analyse the following award indicator document and extract every field needed to create a standard record.

File name: {filename}

Document content:
{text}

Return exactly one JSON object with this structure:

{{
  "awardType": "efficient_star|star_point|national_area_incentive",
  "basicFields": {{
    "title": "indicator title",
    "description": "detailed description",
    "deadline": "deadline as YYYY-MM-DD",
    "externalLink": "related link, if any"
  }},
  "categoryFields": {{
    "categoryId": "category id (Star Point only)",
    "category": "network_star|experience_star|social_star|outreach_star (Star Point only)"
  }},
  "specificFields": {{
    "no": "sequence number (Efficient Star only)",
    "guidelines": "guidelines (Efficient Star only)",
    "objective": "target score (Star Point only)",
    "nationalAllocation": "national allocation (National Area Incentive only)",
    "areaAllocation": "area allocation (National Area Incentive only)",
    "status": "open|closed|completed (National Area Incentive only)"
  }},
  "scoreRules": [
    {{
      "name": "rule name",
      "baseScore": 0,
      "description": "rule description",
      "enabled": true,
      "conditions": [
        {{
          "type": "memberCount|nonMemberCount|totalCount|activityCount|activityType|activityCategory|specificActivity|partnerCount",
          "memberCount": 0,
          "nonMemberCount": 0,
          "totalCount": 0,
          "activityCount": 0,
          "activityType": "activity type, if applicable",
          "activityCategory": "activity category, if applicable",
          "specificActivity": "specific activity name, if applicable",
          "partnerCount": 0,
          "partnerType": "partner type, if applicable",
          "points": 0,
          "description": "condition description"
        }}
      ]
    }}
  ],
  "teamManagement": {{
    "positions": [
      {{
        "name": "position name",
        "description": "position description",
        "isRequired": true,
        "maxMembers": 1
      }}
    ]
  }},
  "confidence": 0.0,
  "extractedKeywords": ["keyword"],
  "notes": "interpretation notes and caveats"
}}

Requirements:
1. Identify the award type and the indicators it defines.
2. Extract every field you can; set fields you cannot find to null.
3. Dates must be YYYY-MM-DD.
4. Analyse score rules in detail: condition types and their parameters.
5. Give a confidence between 0 and 1 and the keywords you relied on.
6. Explain anything you could not determine in notes.
7. Return valid JSON only, with no text before or after it.
"""


def build_interpretation_prompt(text: str, filename: str) -> str:
    return INTERPRETATION_PROMPT.format(filename=filename, text=text)
