"""
Engine Errors

Every error raised by the engine is recoverable: it describes why a request
was refused and carries structured details for the service layer to show.
No operation leaves its inputs partially modified when one of these is raised.
"""

from typing import Any, Dict, List, Optional


class LeagueEngineError(Exception):
    """Base exception for engine errors"""

    code = "ENGINE_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class InfeasibleScheduleError(LeagueEngineError):
    """Schedule preconditions failed; nothing was generated"""

    code = "INFEASIBLE_SCHEDULE"

    def __init__(self, reasons: List[str]):
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons) or "Schedule is infeasible")

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self), "reasons": self.reasons}


class InvalidScoreError(LeagueEngineError):
    """A proposed result violates the scoring rules"""

    code = "INVALID_SCORE"

    def __init__(self, set_index: Optional[int], reason: str, issues: Optional[list] = None):
        self.set_index = set_index
        self.reason = reason
        self.issues = list(issues or [])
        super().__init__(reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.reason,
            "set_index": self.set_index,
            "issues": [
                {"set_index": i.set_index, "code": i.code, "message": i.message}
                for i in self.issues
            ],
        }


class PreconditionError(LeagueEngineError):
    """Bracket or tie-breaker requested before its prerequisites hold"""

    code = "PRECONDITION_FAILED"


class ConcurrentWriteError(LeagueEngineError):
    """A result was submitted against a match that was already written"""

    code = "CONCURRENT_WRITE"

    def __init__(self, match_id: str, message: str):
        self.match_id = match_id
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self), "match_id": self.match_id}
