# src/flowengine/core/config/errors.py
"""
Exceções canônicas da camada de configuração do flowengine.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento da configuração, a construção do Control Object e a
definição do particionamento (Split Map) de um workload.

As exceções aqui definidas representam **violações estruturais
explícitas**, e não erros genéricos de execução.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são tratados como falhas fatais
    - Nenhuma exceção é levantada depois do dispatch dos splits

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de execução de engine

Limites explícitos:
    - Não executa workflow
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do flowengine.

    Todas as exceções levantadas durante carregamento, validação estrutural,
    resolução de configuração e definição de splits herdam desta classe.

    Esta hierarquia permite:
        - captura genérica de erros de configuração
        - distinção clara entre falhas estruturais e falhas de execução
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório: sem ele não existe configuração
    efetiva válida e nada é inferido automaticamente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"settings": {"log": true}}
        - override: {"settings": "DEBUG"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class UnknownVariableError(ConfigError):
    """
    Variável declarada em `vars` não existe como coluna em `data`.

    O Control Object exige que target, features e atributos protegidos
    estejam presentes no dataset antes de qualquer split.
    """


class EmptySplitMapError(ConfigError):
    """
    O particionamento produziria zero splits.

    Um Split Map vazio é inválido: não existe unidade de trabalho a ser
    despachada. Um único split é válido e representa execução sem
    particionamento.
    """


class DuplicateSplitIdError(ConfigError):
    """Dois splits compartilham o mesmo identificador."""


class InvalidSplitParamsError(ConfigError):
    """
    Parâmetros de split inválidos.

    Exemplos:
        - `split_ratio` fora de (0, 1)
        - `cv_folds` menor que 2 (treino vazio)
        - identificador de split vazio ou não-string
    """


class UnknownEngineCategoryError(ConfigError):
    """
    Categoria de engine desconhecida em `engines` ou `params`.

    Categorias válidas: split, preprocessing (ou `pre-processing`), training,
    execution, evaluation.
    """
