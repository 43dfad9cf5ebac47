"""Turn an alignment into counts of spacing, missing-letter and typo mistakes."""

from __future__ import annotations

from typing import Iterable, Optional

from typescore.models.edit_operation import EditOperation, MistakeReport, OpKind


def _is_space(ch: Optional[str]) -> bool:
    return ch is not None and ch.isspace()


def classify(ops: Iterable[EditOperation]) -> MistakeReport:
    """Count mistakes in an operation sequence.

    - delete: a space is an incorrect space, anything else a missing letter
    - insert: a space is an incorrect space, anything else a typo
    - substitute: incorrect space when either side is a space, otherwise a typo
    """
    incorrect_spaces = missing_letters = typos = 0
    for op in ops:
        if not op.is_edit:
            continue
        if op.kind is OpKind.DELETE:
            if _is_space(op.ref_char):
                incorrect_spaces += 1
            else:
                missing_letters += 1
        elif op.kind is OpKind.INSERT:
            if _is_space(op.input_char):
                incorrect_spaces += 1
            else:
                typos += 1
        elif _is_space(op.ref_char) or _is_space(op.input_char):
            incorrect_spaces += 1
        else:
            typos += 1
    return MistakeReport(
        incorrect_spaces=incorrect_spaces,
        missing_letters=missing_letters,
        typos=typos,
    )
