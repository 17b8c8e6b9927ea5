"""Rating and bracket engine domain modules."""

from domain.common import GLOBAL_SCOPE, Competitor, CompetitorKind, MatchOutcome

__all__ = ["Competitor", "CompetitorKind", "GLOBAL_SCOPE", "MatchOutcome"]
