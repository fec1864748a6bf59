# src/flowengine/core/config/hashing.py
"""
Hashing canônico de configuração do flowengine.

O hash representa a **identidade estrutural** de uma configuração e é usado
para associar resultados externos (ex.: splits executados em um array job)
à configuração que os produziu.

Política (v1):
    - JSON canônico: chaves ordenadas, separadores compactos, UTF-8
    - Tuplas viram listas; valores não serializáveis viram `str()`
    - SHA-256 em hexadecimal (64 caracteres)

Dois hashes são oferecidos:
    - compute_config_hash  → qualquer mapping de configuração
    - compute_control_hash → apenas a parte declarativa de um Control Object
                             (vars, engines, params); dados e settings de log
                             não alteram a identidade de um workflow
"""

import hashlib
import json
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Mapping


def _canonical(payload: Any) -> bytes:
    text = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return text.encode("utf-8")


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )
    return hashlib.sha256(_canonical(config)).hexdigest()


def compute_control_hash(control: Any) -> str:
    """Hash de `vars` + `engines` + `params` de um Control Object."""
    vars_ = control.vars
    if is_dataclass(vars_):
        vars_ = asdict(vars_)
    elif not isinstance(vars_, Mapping):
        raise TypeError(f"control.vars deve ser dataclass ou mapping, recebido: {type(vars_).__name__}")
    return compute_config_hash(
        {
            "vars": dict(vars_),
            "engines": dict(control.engines or {}),
            "params": dict(control.params or {}),
        }
    )
