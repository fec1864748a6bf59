# src/flowengine/core/pipeline/registry.py
"""
Registro explícito de engines do flowengine.

O `EngineRegistry` é um **valor** construído uma vez no início do processo
e passado por referência a todo ponto que resolve um engine por
(categoria, nome). Não existe registry global implícito nem discovery
automático por nome de função.

Cada engine é descrito por um `EngineSpec`:
    - name: nome estável do engine (ex.: "cv", "sequential", "mse")
    - category: `EngineCategory`
    - wrapper: callable que executa o engine e retorna o envelope da categoria
    - default_params: parâmetros padrão (mesclados via `merge_with_defaults`)

Contrato do wrapper:
    wrapper(*, ctx, control, params, **inputs) -> Envelope da categoria

Invariantes:
    - O par (categoria, nome) é único no registry
    - A ordem de registro é preservada
    - `invoke` sempre devolve o envelope da categoria (ou falha com SchemaError)

Limites explícitos:
    - Não decide quais engines um workflow usa (isso é o Control Object)
    - Não executa workflow
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from flowengine.core.config.merge import merge_with_defaults
from flowengine.core.exceptions import EngineNotFoundError, SchemaError

from .context import RunContext
from .envelope import Envelope, envelope_type_for
from .types import EngineCategory


class DuplicateEngineError(ValueError):
    """Dois engines registrados com o mesmo par (categoria, nome)."""


@dataclass(frozen=True)
class EngineSpec:
    """Especificação canônica de um engine registrado."""

    name: str
    category: EngineCategory
    wrapper: Callable[..., Envelope]
    default_params: Dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def effective_params(self, user_params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return merge_with_defaults(user_params, self.default_params)

    def invoke(self, *, ctx: RunContext, control: Any, **inputs: Any) -> Envelope:
        """
        Executa o engine com parâmetros efetivos e valida o envelope retornado.

        Os parâmetros do usuário vêm de `control.params[categoria][nome]`.
        """
        params = self.effective_params(control.engine_params(self.category, self.name))
        ctx.log(
            step_id=f"{self.category.value}.{self.name}",
            level="debug",
            message="engine invoked",
            params=sorted(params),
        )
        out = self.wrapper(ctx=ctx, control=control, params=params, **inputs)

        expected = envelope_type_for(self.category)
        if not isinstance(out, expected):
            raise SchemaError(
                message=f"Engine '{self.name}' must return {expected.__name__}",
                details={
                    "engine": self.name,
                    "category": self.category.value,
                    "received": type(out).__name__,
                },
                hint="Construa o retorno com build_envelope(categoria, campos).",
            )
        return out


class EngineRegistry:
    """
    Registry determinístico de EngineSpec indexado por (categoria, nome).

    Extensibilidade é explícita: engines de terceiros são adicionados via
    `register()` antes do registry ser entregue ao workflow.
    """

    def __init__(self, specs: Optional[Iterable[EngineSpec]] = None):
        self._specs: Dict[Tuple[EngineCategory, str], EngineSpec] = {}
        if specs:
            for s in specs:
                self.register(s)

    @classmethod
    def v1(cls) -> "EngineRegistry":
        """Factory do catálogo v1 (splitters, execução, treino, avaliação, pre-processing)."""
        from flowengine.engines import default_specs_v1

        return cls(specs=default_specs_v1())

    def register(self, spec: EngineSpec) -> None:
        if not isinstance(spec, EngineSpec):
            raise TypeError("spec must be an EngineSpec")
        if not isinstance(spec.name, str) or not spec.name.strip():
            raise ValueError("engine name must be a non-empty string")
        key = (spec.category, spec.name)
        if key in self._specs:
            raise DuplicateEngineError(
                f"engine already registered: {spec.category.value}/{spec.name}"
            )
        self._specs[key] = spec

    def get(self, category: Union[str, EngineCategory], name: str) -> EngineSpec:
        cat = EngineCategory.parse(category)
        spec = self._specs.get((cat, name))
        if spec is None:
            raise EngineNotFoundError(
                message=f"unknown engine: {cat.value}/{name}",
                details={
                    "category": cat.value,
                    "name": name,
                    "available": self.list_names(cat),
                },
                hint="Registre o engine no EngineRegistry ou corrija o nome na configuração.",
            )
        return spec

    def has(self, category: Union[str, EngineCategory], name: str) -> bool:
        return (EngineCategory.parse(category), name) in self._specs

    def list_names(self, category: Union[str, EngineCategory]) -> List[str]:
        cat = EngineCategory.parse(category)
        return [name for (c, name) in self._specs if c == cat]

    def list(self) -> List[EngineSpec]:
        return list(self._specs.values())
