# src/flowengine/persistence/snapshot_store.py
"""
Snapshots do Control Object e do split output (v1).

Antes do dispatch para um backend externo, o Control Object e o envelope
de split são persistidos como blobs opacos. Cada runner externo carrega os
dois snapshots em modo somente-leitura; o Resume Reconstructor os carrega
novamente para montar o Resume Object.

Layout (relativo a `output_folder`):
    - control_base.joblib  → Control Object
    - split_output.joblib  → SplitEnvelope (contém o Split Map)
    - n_splits.txt         → número de splits (tamanho do array job)

Decisões (v1):
    - Formato: joblib
    - Falha de leitura (ausente, corrompido ou tipo inesperado) → `LoadError`

Limites explícitos:
    - Não valida o conteúdo além do tipo do objeto
    - Não apaga snapshots
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, Union

import joblib

from flowengine.core.errors import snapshot_not_loadable
from flowengine.core.exceptions import LoadError


CONTROL_FILE = "control_base.joblib"
SPLIT_OUTPUT_FILE = "split_output.joblib"
N_SPLITS_FILE = "n_splits.txt"


def load_snapshot(path: Union[str, Path], *, role: str, expected_type: Optional[Type[Any]] = None) -> Any:
    """
    Carrega um snapshot persistido.

    Args:
        path: Caminho do snapshot.
        role: Papel do snapshot (`control` ou `split_output`), usado no diagnóstico.
        expected_type: Tipo exigido do objeto carregado (opcional).

    Raises:
        LoadError: Snapshot ausente, ilegível, corrompido ou de tipo inesperado.
    """
    p = Path(path)

    def _fail(reason: str) -> LoadError:
        payload = snapshot_not_loadable(path=str(p), role=role, reason=reason)
        return LoadError(message=payload.message, details=payload.details, hint=payload.hint)

    if not p.is_file():
        raise _fail("missing")
    try:
        obj = joblib.load(p)
    except Exception as e:
        raise _fail(f"unreadable: {type(e).__name__}: {e}") from e
    if expected_type is not None and not isinstance(obj, expected_type):
        raise _fail(f"unexpected type: {type(obj).__name__}")
    return obj


class SnapshotStore:
    """Store dos snapshots de hand-off em um `output_folder`."""

    def __init__(self, output_folder: Union[str, Path]):
        self.output_folder = Path(output_folder)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    @property
    def control_path(self) -> Path:
        return self.output_folder / CONTROL_FILE

    @property
    def split_output_path(self) -> Path:
        return self.output_folder / SPLIT_OUTPUT_FILE

    @property
    def n_splits_path(self) -> Path:
        return self.output_folder / N_SPLITS_FILE

    # ------------------------------------------------------------------
    # Persist / Load
    # ------------------------------------------------------------------
    def dump(self, *, control: Any, split_output: Any) -> Dict[str, str]:
        """Persiste os dois snapshots e `n_splits.txt`; retorna os caminhos gravados."""
        self.output_folder.mkdir(parents=True, exist_ok=True)
        joblib.dump(control, self.control_path)
        joblib.dump(split_output, self.split_output_path)
        self.n_splits_path.write_text(f"{len(split_output.splits)}\n", encoding="utf-8")
        return {
            "control": str(self.control_path),
            "split_output": str(self.split_output_path),
            "n_splits": str(self.n_splits_path),
        }

    def load(self) -> Tuple[Any, Any]:
        from flowengine.core.control import ControlObject
        from flowengine.core.pipeline.envelope import SplitEnvelope

        control = load_snapshot(self.control_path, role="control", expected_type=ControlObject)
        split_output = load_snapshot(self.split_output_path, role="split_output", expected_type=SplitEnvelope)
        return control, split_output

    def n_splits(self) -> int:
        if not self.n_splits_path.is_file():
            raise _missing_n_splits(self.n_splits_path)
        return int(self.n_splits_path.read_text(encoding="utf-8").strip())


def _missing_n_splits(path: Path) -> LoadError:
    payload = snapshot_not_loadable(path=str(path), role="n_splits", reason="missing")
    return LoadError(message=payload.message, details=payload.details, hint=payload.hint)


__all__ = ["SnapshotStore", "load_snapshot", "CONTROL_FILE", "SPLIT_OUTPUT_FILE", "N_SPLITS_FILE"]
