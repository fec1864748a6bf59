# src/flowengine/__init__.py
"""
flowengine — orquestração de workflows de dados compostos por engines plugáveis.

Este pacote raiz define o namespace público do flowengine. Um workflow é
composto por engines independentes (split, pre-processing, training,
execution, evaluation) que consomem o mesmo Control Object e devolvem
resultados em um Output Envelope uniforme.

O núcleo do pacote é o protocolo **split / execute / resume**:
    - o workload é particionado em splits endereçáveis (Split Map)
    - cada split é executado in-process ou por um runner externo (array job)
    - os resultados disponíveis são reunidos, tolerando lacunas, em um
      Resume Object a partir do qual o workflow continua

Arquitetura em alto nível:
    - core.config    → carregamento, merge e hashing de configuração
    - core.pipeline  → envelopes, Split Map, registry de engines e RunContext
    - core.control   → Control Object (configuração + dados)
    - split          → engines de particionamento
    - execution      → engines de execução e runner externo
    - persistence    → stores de resultados e snapshots
    - resume         → Resume Reconstructor
    - workflow       → corpo do workflow por split, continuação e agregação
    - engines        → catálogo v1 de engines built-in

Limites explícitos:
    - Não agenda jobs no backend externo
    - Não carrega datasets do disco
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
