from award_interpreter.schemas.document import ExtractedText, KeyInformation, RawDocument
from award_interpreter.schemas.proposal import (
    BasicFields,
    CategoryFields,
    InterpretationProposal,
    ProposedScoreCondition,
    ProposedScoreRule,
    ProposedTeamManagement,
    ProposedTeamPosition,
    SpecificFields,
)
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

__all__ = [
    "BasicFields",
    "CanonicalRecord",
    "CategoryFields",
    "EfficientStarFields",
    "ExtractedText",
    "InterpretationProposal",
    "KeyInformation",
    "NationalAreaIncentiveFields",
    "ProposedScoreCondition",
    "ProposedScoreRule",
    "ProposedTeamManagement",
    "ProposedTeamPosition",
    "RawDocument",
    "ScoreCondition",
    "ScoreRule",
    "SpecificFields",
    "StarPointFields",
    "TeamManagement",
    "TeamPosition",
]
