# src/flowengine/core/config/__init__.py

"""
Camada de configuração do flowengine.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, validar estruturalmente e identificar configurações de workflow,
além do merge de parâmetros usado por todo engine.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Merge de parâmetros de usuário com defaults de engine
    - Geração de hash canônico para rastreabilidade
    - Hierarquia `ConfigError` (inclui erros de particionamento)

Limites explícitos:
    - Não executa workflow
    - Não interage com engines diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    DuplicateSplitIdError,
    EmptySplitMapError,
    InvalidConfigRootTypeError,
    InvalidSplitParamsError,
    UnknownEngineCategoryError,
    UnknownVariableError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash, compute_control_hash
from .merge import deep_merge, merge_with_defaults
from .loader import load_config

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "DuplicateSplitIdError",
    "EmptySplitMapError",
    "InvalidConfigRootTypeError",
    "InvalidSplitParamsError",
    "UnknownEngineCategoryError",
    "UnknownVariableError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "compute_control_hash",
    "load_config",
    "deep_merge",
    "merge_with_defaults",
]
