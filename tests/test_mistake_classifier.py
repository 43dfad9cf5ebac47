import pytest

from typescore.models.edit_operation import EditOperation, MistakeReport
from typescore.services.alignment_service import align
from typescore.services.mistake_classifier import classify


def test_each_operation_kind():
    ops = [
        EditOperation.equal("a", "a"),
        EditOperation.delete(" "),
        EditOperation.delete("b"),
        EditOperation.insert(" "),
        EditOperation.insert("x"),
        EditOperation.substitute(" ", "y"),
        EditOperation.substitute("z", " "),
        EditOperation.substitute("c", "d"),
    ]
    assert classify(ops) == MistakeReport(incorrect_spaces=4, missing_letters=1, typos=2)


def test_equal_only_is_clean():
    report = classify(align("the quick fox", "the quick fox"))
    assert report == MistakeReport(0, 0, 0)
    assert report.total == 0


def test_typo():
    assert classify(align("cat", "cot")) == MistakeReport(incorrect_spaces=0, missing_letters=0, typos=1)


def test_missing_letter():
    assert classify(align("cats", "cat")) == MistakeReport(incorrect_spaces=0, missing_letters=1, typos=0)


def test_missing_space():
    assert classify(align("the cat", "thecat")) == MistakeReport(incorrect_spaces=1, missing_letters=0, typos=0)


def test_extra_space():
    assert classify(align("the cat", "the  cat")) == MistakeReport(incorrect_spaces=1, missing_letters=0, typos=0)


def test_tab_counts_as_space():
    assert classify([EditOperation.insert("\t")]).incorrect_spaces == 1


def test_empty_input_reports_every_reference_character():
    report = classify(align("the cat sat", ""))
    assert report == MistakeReport(incorrect_spaces=2, missing_letters=9, typos=0)


@pytest.mark.parametrize(
    "reference,typed",
    [
        ("the cat sat", "teh cat  sat"),
        ("hello world", "helo wrld!!"),
        ("", "typed without reference"),
        ("Նրանք սովորում են", "Նրանքսովորում են"),
    ],
)
def test_totals_match_edit_count(reference, typed):
    ops = align(reference, typed)
    assert classify(ops).total == sum(1 for op in ops if op.is_edit)
