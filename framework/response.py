from typing import Any, Optional
from pydantic import BaseModel

class ResponseModel(BaseModel):
    """Envelope used for framework-level failures (validation, database, uncaught)."""
    code: int = 500
    message: str = "error"
    data: Optional[Any] = None

    @staticmethod
    def fail(code: int = 400, message: str = "error", data: Any = None):
        return {"code": code, "message": message, "data": data}
