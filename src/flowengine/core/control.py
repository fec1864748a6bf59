# src/flowengine/core/control.py
"""
Control Object — bundle imutável de configuração + dados do flowengine.

O Control Object é criado pelo chamador que orquestra o workflow e é
compartilhado **somente-leitura** por todo engine, pelo Dispatch Adapter
(como snapshot) e pelo Resume Reconstructor.

Campos:
    - vars: nomes das variáveis (target, features, protegidas, protegidas binárias)
    - data: dataset completo (pandas DataFrame)
    - params: categoria → nome do engine → parâmetros do usuário
    - engines: categoria → engine(s) selecionado(s)
    - settings: `log` / `log_level` do event log
    - global_seed: seed padrão quando um engine não declara a sua

Invariantes:
    - Toda variável declarada em `vars` existe como coluna em `data`
    - Nenhum engine muta o Control Object; variações (ex.: dados de um split)
      são novas instâncias via `with_data`

Limites explícitos:
    - Não carrega dataset do disco
    - Não valida parâmetros de engines (cada engine valida os seus)
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from flowengine.core.config.errors import ConfigError, UnknownVariableError
from flowengine.core.pipeline.types import EngineCategory


DEFAULT_SETTINGS: Dict[str, Any] = {"log": True, "log_level": "info"}


def _as_names(value: Any, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"vars.{field_name} must be a string or a list of strings")
    return tuple(value)


@dataclass(frozen=True)
class VarsSpec:
    """Nomes de variáveis usados pelos engines."""

    target_var: str
    feature_vars: Tuple[str, ...] = ()
    protected_vars: Tuple[str, ...] = ()
    protected_vars_binary: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "VarsSpec":
        if not isinstance(raw, Mapping):
            raise ConfigError("vars must be a mapping")
        target = raw.get("target_var")
        if not isinstance(target, str) or not target.strip():
            raise ConfigError("vars.target_var is required")
        return cls(
            target_var=target,
            feature_vars=_as_names(raw.get("feature_vars"), "feature_vars"),
            protected_vars=_as_names(raw.get("protected_vars"), "protected_vars"),
            protected_vars_binary=_as_names(raw.get("protected_vars_binary"), "protected_vars_binary"),
        )

    def all_names(self) -> List[str]:
        names: List[str] = []
        for n in (self.target_var, *self.feature_vars, *self.protected_vars, *self.protected_vars_binary):
            if n not in names:
                names.append(n)
        return names

    def design_columns(self) -> List[str]:
        """Colunas explicativas (features + protegidas), sem duplicatas."""
        cols: List[str] = []
        for n in (*self.feature_vars, *self.protected_vars):
            if n not in cols:
                cols.append(n)
        return cols

    def formula(self) -> str:
        return f"{self.target_var} ~ " + " + ".join(self.design_columns())


@dataclass(frozen=True, eq=False)
class ControlObject:
    """Bundle imutável de configuração + dados (ver docstring do módulo)."""

    vars: VarsSpec
    data: Any
    params: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)
    engines: Dict[str, Any] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_SETTINGS))
    global_seed: int = 1

    def __post_init__(self) -> None:
        columns = getattr(self.data, "columns", None)
        if columns is None:
            raise ConfigError("control.data must be a table with named columns (pandas DataFrame)")
        missing = [n for n in self.vars.all_names() if n not in set(columns)]
        if missing:
            raise UnknownVariableError(f"Variables not found in data: {', '.join(missing)}")

    # -----------------------------
    # Engines / params
    # -----------------------------
    def engine_params(self, category: Union[str, EngineCategory], name: str) -> Dict[str, Any]:
        cat = EngineCategory.parse(category).value
        by_engine = self.params.get(cat) or {}
        return deepcopy(dict(by_engine.get(name) or {}))

    def engine_for(self, category: Union[str, EngineCategory]) -> Optional[str]:
        names = self.engines_for(category)
        return names[0] if names else None

    def engines_for(self, category: Union[str, EngineCategory]) -> List[str]:
        value = self.engines.get(EngineCategory.parse(category).value)
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return list(value)

    # -----------------------------
    # Derivação (sem mutação)
    # -----------------------------
    def with_data(self, data: Any) -> "ControlObject":
        return replace(self, data=data)

    def with_engine(self, category: Union[str, EngineCategory], name: Any) -> "ControlObject":
        engines = dict(self.engines)
        engines[EngineCategory.parse(category).value] = name
        return replace(self, engines=engines)

    def with_engine_params(self, category: Union[str, EngineCategory], name: str, **overrides: Any) -> "ControlObject":
        """Cópia com `params[categoria][nome]` atualizado por `overrides`."""
        cat = EngineCategory.parse(category).value
        params = deepcopy(self.params)
        by_engine = params.setdefault(cat, {})
        by_engine[name] = {**(by_engine.get(name) or {}), **overrides}
        return replace(self, params=params)


def control_from_config(config: Mapping[str, Any], data: Any) -> ControlObject:
    """
    Constrói o Control Object a partir da configuração resolvida (`load_config`).

    Chaves reconhecidas: `vars`, `params`, `engines`, `settings`, `global_seed`.
    Categorias em `params`/`engines` são normalizadas (ex.: `pre-processing`).

    Raises:
        ConfigError: Estrutura inválida ou variável ausente em `data`.
    """
    if not isinstance(config, Mapping):
        raise ConfigError("config must be a mapping")

    params_raw = config.get("params") or {}
    engines_raw = config.get("engines") or {}
    if not isinstance(params_raw, Mapping) or not isinstance(engines_raw, Mapping):
        raise ConfigError("config.params and config.engines must be mappings")

    try:
        params = {EngineCategory.parse(k).value: dict(v or {}) for k, v in params_raw.items()}
        engines = {EngineCategory.parse(k).value: v for k, v in engines_raw.items()}
    except ValueError as e:
        raise ConfigError(str(e)) from e

    settings = dict(DEFAULT_SETTINGS)
    settings.update(config.get("settings") or {})

    seed = config.get("global_seed", 1)
    if not isinstance(seed, int) or isinstance(seed, bool):
        raise ConfigError("global_seed must be an int")

    return ControlObject(
        vars=VarsSpec.from_dict(config.get("vars") or {}),
        data=data,
        params=params,
        engines=engines,
        settings=settings,
        global_seed=seed,
    )
