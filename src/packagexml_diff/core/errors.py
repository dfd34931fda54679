from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_RUN


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_RUN
    kind: str = "internal_error"

    def __str__(self) -> str:
        return self.message
