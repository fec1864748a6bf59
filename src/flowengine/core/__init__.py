# src/flowengine/core/__init__.py
"""
Core do flowengine.

Reúne as estruturas compartilhadas por todos os engines e pelo protocolo
split / execute / resume:
    - config     → resolução de configuração (merge, loader, hashing, erros)
    - pipeline   → Output Envelope, Split Map, EngineRegistry e RunContext
    - control    → Control Object imutável
    - exceptions → exceções tipadas fatais
    - errors     → payloads de erro serializáveis

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - Nenhum registry global implícito
    - Diagnósticos não fatais são valores, não exceções

Limites explícitos:
    - Não contém lógica estatística ou de ML
    - Não depende de backends de execução externos
"""
