# src/stepflow/core/engine/__init__.py
"""
Engine do stepflow.

Este pacote contém os pipelines que **resolvem** e **executam** a
sequência de Steps de uma requisição, separando leitura (query) de
escrita (command).

Componentes principais:
    - planner → resolução única e validação estrutural da lista de Steps
    - engine  → composição, execução fail-fast e conversão de erros
    - query   → QueryPipeline (sem transação)
    - command → CommandPipeline (transação + pós-execução após commit)

Princípios fundamentais:
    - Composição explícita em vez de herança de template
    - A lista de Steps é resolvida uma vez por invocação, antes da execução
    - Toda falha chega ao chamador como exatamente um ClassifiedError

Limites explícitos:
    - Não define Steps de domínio
    - Não implementa persistência nem publicação de eventos (delegadas)
    - Não executa Steps em paralelo
"""

from .command import CommandPipeline
from .engine import BasePipeline, StepExecutor
from .planner import resolve_steps, validate_steps
from .query import QueryPipeline

__all__ = [
    "BasePipeline",
    "CommandPipeline",
    "QueryPipeline",
    "StepExecutor",
    "resolve_steps",
    "validate_steps",
]
