from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OpKind(str, Enum):
    EQUAL = "equal"
    SUBSTITUTE = "substitute"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class EditOperation:
    """One step turning the reference text into the typed text.

    ``ref_char`` is None for inserts, ``input_char`` is None for deletes.
    """
    kind: OpKind
    ref_char: Optional[str] = None
    input_char: Optional[str] = None

    @classmethod
    def equal(cls, ref_char: str, input_char: str) -> "EditOperation":
        return cls(OpKind.EQUAL, ref_char, input_char)

    @classmethod
    def substitute(cls, ref_char: str, input_char: str) -> "EditOperation":
        return cls(OpKind.SUBSTITUTE, ref_char, input_char)

    @classmethod
    def insert(cls, input_char: str) -> "EditOperation":
        return cls(OpKind.INSERT, None, input_char)

    @classmethod
    def delete(cls, ref_char: str) -> "EditOperation":
        return cls(OpKind.DELETE, ref_char, None)

    @property
    def is_edit(self) -> bool:
        return self.kind is not OpKind.EQUAL


@dataclass(frozen=True)
class MistakeReport:
    incorrect_spaces: int = 0
    missing_letters: int = 0
    typos: int = 0

    @property
    def total(self) -> int:
        return self.incorrect_spaces + self.missing_letters + self.typos
