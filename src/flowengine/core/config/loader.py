# src/flowengine/core/config/loader.py
"""
Loader canônico da configuração de workflow do flowengine.

A configuração de um workflow descreve, de forma declarativa, quais engines
são usados em cada categoria e com quais parâmetros. Ela é resolvida a partir de:
    - um arquivo de defaults (obrigatório)
    - um arquivo local de overrides (opcional)

Exemplo (YAML):

    settings:
      log: true
      log_level: info
    global_seed: 1
    vars:
      target_var: default
      feature_vars: [income, age]
      protected_vars: [gender]
      protected_vars_binary: [gender_male]
    engines:
      split: cv
      execution: sequential
      training: lm
      evaluation: [mse, summarystats]
    params:
      split:
        cv: {cv_folds: 5}
      execution:
        array_prepare: {output_folder: array_inputs}

Cada arquivo é normalizado **antes** do merge:
    - categorias em `engines`/`params` usam o nome canônico
      (`pre-processing` → `preprocessing`)
    - listas de `vars` aceitam um nome isolado (`feature_vars: income`)

Assim um override local pode usar um alias diferente do defaults sem
produzir duas chaves para a mesma categoria.

Limites explícitos:
    - Não carrega o dataset
    - Não constrói o Control Object (ver `flowengine.core.control`)
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import json

import yaml  # PyYAML

from flowengine.core.pipeline.types import EngineCategory

from .merge import deep_merge
from .errors import (
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnknownEngineCategoryError,
    UnsupportedConfigFormatError,
)


_READERS = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}

_VAR_LISTS = ("feature_vars", "protected_vars", "protected_vars_binary")


def _read(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    with path.open("r", encoding="utf-8") as f:
        data = reader(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )
    return data


def _by_category(section: str, raw: Any, source: Path) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ConfigTypeConflictError(f"{source}: '{section}' deve ser um mapping")
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        try:
            category = EngineCategory.parse(key).value
        except ValueError as e:
            raise UnknownEngineCategoryError(f"{source}: {section}.{key}: {e}") from e
        if category in out:
            raise ConfigTypeConflictError(
                f"{source}: '{section}' declara a categoria '{category}' mais de uma vez"
            )
        out[category] = value
    return out


def _normalize(config: Dict[str, Any], source: Path) -> Dict[str, Any]:
    """Normaliza as seções do flowengine de um único arquivo."""
    out = dict(config)

    for section in ("engines", "params"):
        if section in out and out[section] is not None:
            out[section] = _by_category(section, out[section], source)

    if "vars" in out and out["vars"] is not None:
        if not isinstance(out["vars"], dict):
            raise ConfigTypeConflictError(f"{source}: 'vars' deve ser um mapping")
        vars_ = dict(out["vars"])
        for name in _VAR_LISTS:
            if isinstance(vars_.get(name), str):
                vars_[name] = [vars_[name]]
        out["vars"] = vars_

    return out


def load_config(
    *,
    defaults_path: Union[str, Path],
    local_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do workflow.

    Política de resolução:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional e ignorado quando não existe
        - Cada arquivo é normalizado e então o local é aplicado via `deep_merge`

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Extensão diferente de .yaml/.yml/.json.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        UnknownEngineCategoryError: Categoria desconhecida em `engines`/`params`.
        ConfigTypeConflictError: Seção malformada ou conflito durante o merge.
    """
    defaults_file = Path(defaults_path)
    config = _normalize(_read(defaults_file), defaults_file)

    if local_path is None or not Path(local_path).exists():
        return config

    local_file = Path(local_path)
    return deep_merge(config, _normalize(_read(local_file), local_file))
