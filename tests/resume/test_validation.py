# tests/resume/test_validation.py
"""
Testes da validação estrutural do Resume Object.
"""

import pytest

from flowengine.core.exceptions import ValidationError
from flowengine.resume.types import ResumeObject
from flowengine.resume.validation import validate_resume_object


def test_partial_results_are_valid(control, three_split_output):
    obj = ResumeObject(control=control, split_output=three_split_output, workflow_results={"2": {}})

    assert validate_resume_object(obj) is obj


def test_mapping_form_is_coerced(control, three_split_output):
    out = validate_resume_object(
        {
            "control": control,
            "split_output": three_split_output,
            "workflow_results": {},
            "metadata": {"engine": "array_prepare"},
        }
    )

    assert isinstance(out, ResumeObject)
    assert out.metadata == {"engine": "array_prepare"}


def test_results_outside_split_map_are_invalid(control, three_split_output):
    obj = ResumeObject(control=control, split_output=three_split_output, workflow_results={"4": {}})

    with pytest.raises(ValidationError) as exc:
        validate_resume_object(obj)

    assert any("not in split map" in p for p in exc.value.details["problems"])


def test_missing_and_unknown_fields_are_reported(control, three_split_output):
    with pytest.raises(ValidationError) as exc:
        validate_resume_object({"control": control, "split_output": three_split_output, "extra": 1})

    problems = exc.value.details["problems"]
    assert "missing fields: metadata, workflow_results" in problems
    assert "unknown fields: extra" in problems


def test_wrong_field_kinds_are_all_reported(three_split_output):
    obj = ResumeObject(control="nope", split_output={"1": 1}, workflow_results=[], metadata=None)

    with pytest.raises(ValidationError) as exc:
        validate_resume_object(obj)

    assert len(exc.value.details["problems"]) == 4
