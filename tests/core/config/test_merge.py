# tests/core/config/test_merge.py
"""
Testes das políticas de merge de configuração e de parâmetros.

Este módulo valida:
- `deep_merge`: resolução da configuração final a partir de defaults e
  overrides explícitos (YAML/JSON)
- `merge_with_defaults`: combinação dos parâmetros do usuário com os
  parâmetros padrão de um engine

Decisões arquiteturais:
    - Os merges são determinísticos e puramente funcionais
    - Não há heurísticas implícitas para listas ou tipos mistos
    - Conflitos estruturais no deep-merge são tratados como erro fatal
    - O merge de parâmetros é total: não existem modos de falha

Invariantes:
    - Chaves não sobrescritas são preservadas
    - Nenhum input é mutado
"""

import pytest

try:
    from flowengine.core.config.merge import deep_merge, merge_with_defaults
    from flowengine.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    merge_with_defaults = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que os módulos de merge estejam disponíveis para os testes.

    Falha explicitamente com uma mensagem orientada quando `deep_merge`,
    `merge_with_defaults` e/ou `ConfigTypeConflictError` não podem ser importados.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config merge modules. Implement:\n"
            "- src/flowengine/core/config/merge.py (deep_merge, merge_with_defaults)\n"
            "- src/flowengine/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


# =====================================================
# deep_merge
# =====================================================

def test_merge_simple_override():
    """
    Verifica o override de valores escalares sem mutar as entradas.

    Invariantes:
        - O valor sobrescrito reflete exatamente o override
        - `base` e `override` não sofrem mutação
    """
    _require_imports()
    base = {"a": 1, "b": 2}
    override = {"b": 99}

    out = deep_merge(base, override)

    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_dict():
    """
    Verifica que dicionários aninhados são mesclados recursivamente.

    O override de `settings.log_level` não pode apagar `settings.log`.
    """
    _require_imports()
    base = {"settings": {"log": True, "log_level": "info"}}
    override = {"settings": {"log_level": "debug"}}

    out = deep_merge(base, override)

    assert out == {"settings": {"log": True, "log_level": "debug"}}


def test_merge_list_override_total():
    """
    Verifica que listas são sobrescritas integralmente (sem merge elemento a elemento).
    """
    _require_imports()
    base = {"engines": {"evaluation": ["mse", "summarystats"]}}
    override = {"engines": {"evaluation": ["mse"]}}

    out = deep_merge(base, override)

    assert out == {"engines": {"evaluation": ["mse"]}}


def test_merge_none_base_accepts_any_override():
    _require_imports()
    out = deep_merge({"params": {"seed": None}}, {"params": {"seed": 42}})
    assert out == {"params": {"seed": 42}}


def test_merge_type_conflict_raises():
    """
    Verifica que conflitos de tipo são rejeitados explicitamente.

    Um dicionário não pode ser sobrescrito por um escalar; nenhuma
    configuração parcial é produzida.
    """
    _require_imports()
    if ConfigTypeConflictError is None:
        pytest.fail("ConfigTypeConflictError must be defined in errors.py")

    base = {"settings": {"log": True}}
    override = {"settings": "DEBUG"}  # dict vs str

    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)


# =====================================================
# merge_with_defaults
# =====================================================

def test_user_value_wins_and_defaults_fill_the_rest():
    """
    Verifica o caso canônico: `{alpha: 5}` sobre `{alpha: 1, beta: 2}`.

    Invariantes:
        - O valor do usuário vence para chaves presentes nos defaults
        - Chaves ausentes no usuário recebem o default
    """
    _require_imports()
    assert merge_with_defaults({"alpha": 5}, {"alpha": 1, "beta": 2}) == {"alpha": 5, "beta": 2}


def test_empty_or_absent_user_params_yield_defaults():
    _require_imports()
    assert merge_with_defaults({}, {"alpha": 1}) == {"alpha": 1}
    assert merge_with_defaults(None, {"alpha": 1}) == {"alpha": 1}


def test_user_only_keys_pass_through():
    _require_imports()
    out = merge_with_defaults({"gamma": [1, 2]}, {"alpha": 1})
    assert out == {"alpha": 1, "gamma": [1, 2]}


def test_merge_with_defaults_does_not_mutate_inputs():
    _require_imports()
    user = {"grid": {"depth": 3}}
    defaults = {"grid": {"depth": 1}, "beta": [1]}

    out = merge_with_defaults(user, defaults)
    out["grid"]["depth"] = 99
    out["beta"].append(2)

    assert user == {"grid": {"depth": 3}}
    assert defaults == {"grid": {"depth": 1}, "beta": [1]}


def test_merge_with_defaults_handles_absent_defaults():
    _require_imports()
    assert merge_with_defaults({"alpha": 5}, None) == {"alpha": 5}
    assert merge_with_defaults(None, None) == {}
