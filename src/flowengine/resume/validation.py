# src/flowengine/resume/validation.py
"""
Validação estrutural do Resume Object.

Regras:
    - exatamente os campos control, split_output, workflow_results, metadata
    - control é um `ControlObject`
    - split_output é um `SplitEnvelope` (com Split Map)
    - workflow_results é um mapping com chaves string
    - metadata é um mapping
    - chaves de workflow_results ⊆ ids do Split Map

Resultados parciais (subconjunto estrito) são válidos.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Union

from flowengine.core.control import ControlObject
from flowengine.core.errors import resume_object_invalid
from flowengine.core.exceptions import ValidationError
from flowengine.core.pipeline.envelope import SplitEnvelope

from .types import ResumeObject


def _coerce(obj: Any, problems: List[str]) -> Any:
    if isinstance(obj, ResumeObject):
        return obj
    if isinstance(obj, Mapping):
        keys = set(obj)
        expected = set(ResumeObject.FIELDS)
        if keys != expected:
            missing = sorted(expected - keys)
            extra = sorted(keys - expected)
            if missing:
                problems.append(f"missing fields: {', '.join(missing)}")
            if extra:
                problems.append(f"unknown fields: {', '.join(extra)}")
            return None
        return ResumeObject(**{k: obj[k] for k in ResumeObject.FIELDS})
    problems.append(f"resume object must be a ResumeObject or mapping, got {type(obj).__name__}")
    return None


def validate_resume_object(obj: Union[ResumeObject, Mapping[str, Any]]) -> ResumeObject:
    """
    Valida o Resume Object e o devolve na forma tipada.

    Raises:
        ValidationError: Com a lista completa de problemas em `details.problems`.
    """
    problems: List[str] = []
    resume = _coerce(obj, problems)

    if resume is not None:
        if not isinstance(resume.control, ControlObject):
            problems.append(f"control must be a ControlObject, got {type(resume.control).__name__}")

        split_ids = None
        if not isinstance(resume.split_output, SplitEnvelope):
            problems.append(f"split_output must be a SplitEnvelope, got {type(resume.split_output).__name__}")
        else:
            split_ids = set(resume.split_output.splits)

        if not isinstance(resume.workflow_results, Mapping):
            problems.append(
                f"workflow_results must be a mapping, got {type(resume.workflow_results).__name__}"
            )
        else:
            non_str = [k for k in resume.workflow_results if not isinstance(k, str)]
            if non_str:
                problems.append(f"workflow_results keys must be strings: {non_str!r}")
            if split_ids is not None:
                unknown = [k for k in resume.workflow_results if k not in split_ids]
                if unknown:
                    problems.append(f"workflow_results keys not in split map: {unknown!r}")

        if not isinstance(resume.metadata, Mapping):
            problems.append(f"metadata must be a mapping, got {type(resume.metadata).__name__}")

    if problems:
        payload = resume_object_invalid(problems=problems)
        raise ValidationError(message=payload.message, details=payload.details, hint=payload.hint)
    return resume
