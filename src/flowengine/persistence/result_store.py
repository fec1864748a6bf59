# src/flowengine/persistence/result_store.py
"""
Result Store canônica do flowengine (v1).

Uma Result Store traduz split-id → resultado persistido. Ela é o ponto de
hand-off entre os runners (que gravam um resultado por split) e o Resume
Reconstructor (que procura um resultado por split), de forma que trocar o
backend de armazenamento não altera a lógica de reconstrução.

Interface (`ResultStore`):
    - put(split_id, payload)      → persiste o resultado de um split
    - get(split_id) -> Optional   → resultado ou `None` quando ausente
    - list_ids()                  → ids com resultado disponível
    - location(split_id)          → endereço legível (diagnóstico)

Implementações (v1):
    - FileResultStore     → `<results_dir>/result_split_<id>.joblib`, com o id
                            codificado por `urllib.parse.quote` (ids com
                            `/` ou `\\` continuam endereçáveis)
    - InMemoryResultStore → dicionário em memória (testes, execução local)

Decisões (v1):
    - Formato em disco: joblib
    - Escrita atômica: arquivo temporário + `os.replace` (um leitor nunca vê
      um resultado parcialmente gravado)
    - Leituras nunca removem ou alteram arquivos

Limites explícitos:
    - Não interpreta o conteúdo dos resultados
    - Não decide quais splits são esperados (isso é o Split Map)
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable
from urllib.parse import quote, unquote

import joblib

from flowengine.core.config.errors import InvalidSplitParamsError
from flowengine.core.exceptions import LoadError


RESULT_PREFIX = "result_split_"
RESULT_SUFFIX = ".joblib"


@runtime_checkable
class ResultStore(Protocol):
    """Contrato mínimo de uma store de resultados por split."""

    def put(self, split_id: str, payload: Any) -> None:
        ...

    def get(self, split_id: str) -> Optional[Any]:
        ...

    def list_ids(self) -> List[str]:
        ...

    def location(self, split_id: str) -> str:
        ...


def _check_split_id(split_id: Any) -> str:
    if not isinstance(split_id, str) or not split_id.strip():
        raise InvalidSplitParamsError(f"split id must be a non-empty string, got: {split_id!r}")
    return split_id


def _check_payload(payload: Any) -> None:
    if payload is None:
        raise ValueError("payload cannot be None (None means 'no result')")


class FileResultStore:
    """Store em filesystem: um arquivo joblib por split dentro de `results_dir`."""

    def __init__(self, results_dir: Union[str, Path]):
        self.results_dir = Path(results_dir)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def path_for(self, split_id: str) -> Path:
        return self.results_dir / f"{RESULT_PREFIX}{quote(_check_split_id(split_id), safe='')}{RESULT_SUFFIX}"

    def location(self, split_id: str) -> str:
        return str(self.path_for(split_id))

    # ------------------------------------------------------------------
    # Persist / Load
    # ------------------------------------------------------------------
    def put(self, split_id: str, payload: Any) -> None:
        _check_payload(payload)
        target = self.path_for(split_id)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp = tempfile.mkstemp(prefix=".tmp_", suffix=RESULT_SUFFIX, dir=str(target.parent))
        os.close(fd)
        try:
            joblib.dump(payload, tmp)
            os.replace(tmp, target)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def get(self, split_id: str) -> Optional[Any]:
        """
        Carrega o resultado de um split.

        Returns:
            O payload persistido, ou `None` quando o arquivo não existe.

        Raises:
            LoadError: Arquivo existe mas não pode ser desserializado.
        """
        path = self.path_for(split_id)
        if not path.exists():
            return None
        try:
            return joblib.load(path)
        except Exception as e:
            raise LoadError(
                message="Split result could not be loaded",
                details={"split_id": split_id, "path": str(path), "reason": f"{type(e).__name__}: {e}"},
                hint="Reexecute o runner deste split para regravar o resultado.",
            ) from e

    def list_ids(self) -> List[str]:
        if not self.results_dir.is_dir():
            return []
        ids = []
        for p in sorted(self.results_dir.iterdir()):
            name = p.name
            if p.is_file() and name.startswith(RESULT_PREFIX) and name.endswith(RESULT_SUFFIX):
                ids.append(unquote(name[len(RESULT_PREFIX):-len(RESULT_SUFFIX)]))
        return ids

    def __repr__(self) -> str:
        return f"FileResultStore(results_dir={str(self.results_dir)!r})"


class InMemoryResultStore:
    """Store em memória (mesmo contrato da FileResultStore)."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._results: Dict[str, Any] = {}
        for split_id, payload in (initial or {}).items():
            self.put(split_id, payload)

    def location(self, split_id: str) -> str:
        return f"memory://{_check_split_id(split_id)}"

    def put(self, split_id: str, payload: Any) -> None:
        _check_payload(payload)
        self._results[_check_split_id(split_id)] = payload

    def get(self, split_id: str) -> Optional[Any]:
        return self._results.get(split_id)

    def list_ids(self) -> List[str]:
        return list(self._results)


__all__ = ["ResultStore", "FileResultStore", "InMemoryResultStore", "RESULT_PREFIX", "RESULT_SUFFIX"]
