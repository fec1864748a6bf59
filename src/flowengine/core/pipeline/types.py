# src/flowengine/core/pipeline/types.py
"""
Tipos canônicos do pipeline do flowengine.

Este módulo define os enums fundamentais que padronizam a comunicação
entre engines, registry, Reconstructor e camadas de rastreabilidade.

Componentes principais:
    - EngineCategory → classificação semântica de engines (split, execution, ...)
    - LogLevel       → níveis canônicos do event log estruturado

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (enums de string)
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não executa engines
    - Não decide políticas de execução
"""

from __future__ import annotations

from enum import Enum
from typing import Union


class EngineCategory(str, Enum):
    """
    Categorias semânticas de engines no flowengine.

    Cada categoria define:
        - o shape do Output Envelope que o engine deve retornar
        - o ponto do workflow em que o engine é invocado

    Categorias definidas:
        - SPLIT: particiona o workload em splits nomeados (Split Map)
        - PREPROCESSING: transforma dados de treino antes do treinamento
        - TRAINING: ajusta um modelo sobre os dados de treino de um split
        - EXECUTION: despacha os splits (in-process ou para backend externo)
        - EVALUATION: calcula métricas sobre as predições de um split

    Invariantes:
        - O valor textual do enum é estável e canônico
        - O valor textual é o nome usado na configuração (`engines`, `params`)
    """
    SPLIT = "split"
    PREPROCESSING = "preprocessing"
    TRAINING = "training"
    EXECUTION = "execution"
    EVALUATION = "evaluation"

    @classmethod
    def parse(cls, value: Union[str, "EngineCategory"]) -> "EngineCategory":
        """Normaliza string/enum para EngineCategory (aceita `pre-processing`)."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown engine category: {value!r}")
        key = value.strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown engine category: {value!r}")


class LogLevel(str, Enum):
    """
    Níveis canônicos do event log.

    A ordem numérica (`rank`) define o filtro aplicado por
    `settings.log_level`: eventos com rank inferior ao configurado
    são descartados.
    """
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self.value]


_LEVEL_RANKS = {"debug": 1, "info": 2, "warn": 3, "error": 4}
