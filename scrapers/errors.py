# scrapers/errors.py


class AnalysisError(Exception):
    """Base for failures reported to the caller: stable kind + readable detail."""

    kind = "analysis_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


class InputError(AnalysisError):
    kind = "input_error"


class CollaboratorError(AnalysisError):
    kind = "collaborator_error"
