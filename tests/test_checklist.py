"""Tests for checklist statistics parsed from task descriptions."""

from services.checklist import checklist_progress, checklist_statistics

DESCRIPTION = (
    '<ul data-type="taskList">'
    '<li data-checked="true">one</li>'
    '<li data-checked="false">two</li>'
    '<li data-checked="true">three</li>'
    '</ul>'
)


def test_statistics():
    assert checklist_statistics(DESCRIPTION) == (3, 2)


def test_progress_rounds_half_up():
    assert checklist_progress(DESCRIPTION) == 67
    eighth = '<li data-checked="true"></li>' + '<li data-checked="false"></li>' * 7
    assert checklist_progress(eighth) == 13


def test_no_checklist():
    assert checklist_statistics("") == (0, 0)
    assert checklist_progress(None) == 0
