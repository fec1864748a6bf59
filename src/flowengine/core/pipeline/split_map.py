# src/flowengine/core/pipeline/split_map.py
"""
Split Map canônico do flowengine.

O Split Map é o mapeamento **ordenado** de split-id → payload que define
cada unidade de trabalho despachável de um workload (ex.: dados de treino
e teste de um fold).

Ele é a referência compartilhada entre:
    - o Split Registry (que o produz)
    - o Dispatch Adapter (que despacha um runner por id)
    - o Resume Reconstructor (que procura um resultado por id)

Invariantes:
    - Existe pelo menos um split (`EmptySplitMapError` caso contrário)
    - Ids são strings não vazias e únicas
    - A ordem de inserção é preservada e define a ordem de iteração
    - O mapa é somente-leitura após construção

Limites explícitos:
    - Não interpreta o payload dos splits
    - Não decide a estratégia de particionamento
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from flowengine.core.config.errors import (
    DuplicateSplitIdError,
    EmptySplitMapError,
    InvalidSplitParamsError,
)


SplitsInput = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


class SplitMap(Mapping[str, Any]):
    """
    Mapeamento ordenado e imutável de split-id → payload.

    Aceita um `Mapping` ou um iterável de pares `(id, payload)`; o segundo
    formato permite detectar ids duplicados, que um dict silenciaria.

    Raises:
        EmptySplitMapError: Se nenhum split for informado.
        DuplicateSplitIdError: Se um id aparecer mais de uma vez.
        InvalidSplitParamsError: Se um id não for string não vazia.
    """

    def __init__(self, splits: SplitsInput):
        pairs = splits.items() if isinstance(splits, Mapping) else splits

        self._splits: Dict[str, Any] = {}
        for split_id, payload in pairs:
            if not isinstance(split_id, str) or not split_id.strip():
                raise InvalidSplitParamsError(
                    f"split id must be a non-empty string, got: {split_id!r}"
                )
            if split_id in self._splits:
                raise DuplicateSplitIdError(f"Duplicate split id: {split_id}")
            self._splits[split_id] = payload

        if not self._splits:
            raise EmptySplitMapError("Split Map must contain at least one split")

    def __getitem__(self, split_id: str) -> Any:
        return self._splits[split_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._splits)

    def __len__(self) -> int:
        return len(self._splits)

    def ids(self) -> List[str]:
        """Ids na ordem definida do mapa."""
        return list(self._splits)

    def __repr__(self) -> str:
        return f"SplitMap(ids={self.ids()!r})"
