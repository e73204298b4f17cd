"""The parsed selection tree handed over by the graph layer."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class FieldSelection(BaseModel):
    """One selected field, its arguments and its nested selections."""

    name: str
    arguments: Dict[str, Any] = {}
    selections: List["FieldSelection"] = []

    def child(self, name: str) -> Optional["FieldSelection"]:
        return next((s for s in self.selections if s.name == name), None)

    @property
    def params(self) -> Dict[str, Any]:
        """Caller arguments, whether passed bare or wrapped in a `params` object."""
        wrapped = self.arguments.get("params")
        if isinstance(wrapped, dict):
            return dict(wrapped)
        return dict(self.arguments)


FieldSelection.model_rebuild()
