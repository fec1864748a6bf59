# tests/conftest.py
"""
Fixtures compartilhados para testes do flowengine.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações YAML mínimas e determinísticas
- um dataset sintético pequeno (pandas) com target contínuo e binário
- Control Object, EngineRegistry v1 e RunContext controlados
- um split output com três splits ("1", "2", "3")

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados são gerados com seed fixa (numpy.random.default_rng)
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa workflow real
    - Nenhuma fixture realiza I/O (testes de store usam `tmp_path`)
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest


# =====================================================
# Config Loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Representa o conteúdo típico de um `config.defaults.yaml`, base sobre a
    qual configurações locais são aplicadas via deep-merge.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """
    return """\
settings:
  log: true
  log_level: info
global_seed: 1
vars:
  target_var: score
  feature_vars: [income, age]
  protected_vars: [gender_male]
  protected_vars_binary: [gender_male]
engines:
  split: cv
  execution: sequential
  training: lm
  evaluation: [mse, summarystats]
params:
  split:
    cv:
      cv_folds: 5
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de override local (ex.: `config.local.yaml`).

    Contém apenas overrides: nível de log e número de folds.

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """
    return """\
settings:
  log_level: debug
params:
  split:
    cv:
      cv_folds: 3
"""


# =====================================================
# Dados / Control Object
# =====================================================

@pytest.fixture
def sample_df() -> pd.DataFrame:
    """
    Dataset sintético determinístico (60 linhas).

    Colunas:
        - income, age: features numéricas
        - gender_male: atributo protegido binário (0/1)
        - score: target contínuo (relação linear + ruído)
        - label: target binário derivado de `score`
    """
    rng = np.random.default_rng(7)
    n = 60
    income = rng.normal(50.0, 10.0, n)
    age = rng.integers(20, 65, n)
    gender_male = np.tile([0, 1], n // 2)
    score = 0.5 * income + 0.1 * age + 2.0 * gender_male + rng.normal(0.0, 1.0, n)
    label = (score > np.median(score)).astype(int)
    return pd.DataFrame(
        {
            "income": income,
            "age": age,
            "gender_male": gender_male,
            "score": score,
            "label": label,
        }
    )


@pytest.fixture
def base_config() -> dict:
    """Configuração resolvida mínima (equivalente a `load_config` já aplicado)."""
    return {
        "settings": {"log": True, "log_level": "debug"},
        "global_seed": 1,
        "vars": {
            "target_var": "score",
            "feature_vars": ["income", "age"],
            "protected_vars": ["gender_male"],
            "protected_vars_binary": ["gender_male"],
        },
        "engines": {
            "split": "cv",
            "execution": "sequential",
            "training": "lm",
            "evaluation": ["mse", "summarystats", "statisticalparity"],
        },
        "params": {"split": {"cv": {"cv_folds": 3}}},
    }


@pytest.fixture
def control(base_config, sample_df):
    from flowengine.core.control import control_from_config

    return control_from_config(base_config, sample_df)


@pytest.fixture
def registry():
    from flowengine.core.pipeline.registry import EngineRegistry

    return EngineRegistry.v1()


@pytest.fixture
def dummy_ctx():
    """
    RunContext determinístico para testes.

    `run_id` e `created_at` são fixos; o nível de log é `debug` para que
    todos os eventos fiquem visíveis nas asserções.
    """
    from flowengine.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        settings={"log": True, "log_level": "debug"},
        meta={"source": "pytest"},
    )


@pytest.fixture
def three_split_output(sample_df):
    """
    SplitEnvelope com os splits "1", "2" e "3" (blocos contíguos de teste).
    """
    from flowengine.core.pipeline.envelope import SplitEnvelope

    splits = {}
    for i, test_idx in enumerate(np.array_split(np.arange(len(sample_df)), 3), start=1):
        mask = np.zeros(len(sample_df), dtype=bool)
        mask[test_idx] = True
        splits[str(i)] = {"train": sample_df.iloc[~mask], "test": sample_df.iloc[mask]}
    return SplitEnvelope(split_type="userdefined", splits=splits, seed=1)
