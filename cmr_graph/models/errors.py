"""The caller-visible shape of any failure."""

from typing import List

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    status_code: int = 500
    errors: List[str] = []

    def to_body(self) -> dict:
        return {"statusCode": self.status_code, "errors": self.errors}
