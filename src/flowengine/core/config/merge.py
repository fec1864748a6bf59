# src/flowengine/core/config/merge.py
"""
Utilitários canônicos de merge de configuração e parâmetros.

Este módulo concentra as duas políticas de merge usadas pelo flowengine:

    - `deep_merge`: resolve a configuração final a partir de defaults e
      overrides locais (arquivos YAML/JSON)
    - `merge_with_defaults`: combina os parâmetros informados pelo usuário
      para um engine com os parâmetros padrão declarados pelo próprio engine

Política de deep-merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (sem merge elemento a elemento)
    - escalar → sobrescrita direta
    - conflito de tipos → erro estrutural explícito

Política de merge de parâmetros (v1):
    - para cada chave dos defaults, o valor do usuário vence quando presente
    - chaves presentes apenas no usuário são preservadas
    - parâmetros do usuário ausentes (`None`) equivalem a `{}`

Princípios fundamentais:
    - Os merges são determinísticos e puramente funcionais
    - Nenhum input é mutado durante o processo

Limites explícitos:
    - Não carrega arquivos de configuração
    - Não valida semântica de domínio
    - Não realiza coerção de tipos
"""

from copy import deepcopy
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários de configuração.

    Política de merge (v1):
        - dict + dict → merge recursivo por chave
        - list        → sobrescrita total (sem merge elemento a elemento)
        - escalar     → sobrescrita direta pelo override
        - conflito de tipos → erro estrutural explícito

    Invariantes:
        - A estrutura retornada é sempre um novo dicionário
        - Chaves não presentes no override são preservadas da base
        - O mesmo par (base, override) sempre produz o mesmo resultado

    Args:
        base (Dict[str, Any]): Configuração base (ex.: defaults).
        override (Dict[str, Any]): Overrides explícitos da configuração.

    Returns:
        Dict[str, Any]: Nova configuração resultante do deep-merge.

    Raises:
        ConfigTypeConflictError: Se ocorrer conflito de tipo entre base e override.
    """

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        # dict -> merge recursivo
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        # list -> sobrescrita total
        if isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # None na base aceita qualquer override (ex.: max_depth: null)
        if base_value is None:
            result[key] = deepcopy(override_value)
            continue

        if type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result


def merge_with_defaults(
    user_params: Optional[Mapping[str, Any]],
    default_params: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Combina parâmetros do usuário com os parâmetros padrão de um engine.

    Esta função é usada por todo engine antes de executar sua lógica,
    garantindo que parâmetros opcionais sempre tenham um valor definido
    sem exigir que o usuário informe o conjunto completo.

    Exemplo:
        >>> merge_with_defaults({"alpha": 5}, {"alpha": 1, "beta": 2})
        {'alpha': 5, 'beta': 2}
        >>> merge_with_defaults({}, {"alpha": 1})
        {'alpha': 1}

    Decisões arquiteturais:
        - O merge é raso: valores aninhados do usuário substituem o default
          por inteiro (parâmetros de engine são planos por convenção)
        - Chaves apenas do usuário passam adiante sem alteração
        - Função total: não existem modos de falha

    Args:
        user_params: Parâmetros informados pelo usuário (pode ser `None`).
        default_params: Parâmetros padrão declarados pelo engine (pode ser `None`).

    Returns:
        Dict[str, Any]: Novo dicionário com os parâmetros efetivos.
    """
    effective: Dict[str, Any] = deepcopy(dict(default_params or {}))
    for key, value in dict(user_params or {}).items():
        effective[key] = deepcopy(value)
    return effective
