# src/stepflow/core/__init__.py
"""
Core do stepflow.

Este pacote reúne as responsabilidades essenciais para executar uma
requisição como uma sequência ordenada de Steps, separando leitura
(query) de escrita (command).

Componentes principais:
    - pipeline        → StepResult, contexto de execução e protocolos de Step
    - engine          → resolução da lista de Steps e pipelines query/command
    - transaction     → fronteira transacional consumida por commands
    - events          → sink de eventos publicados após commit
    - instrumentation → logging e timing como middleware explícito
    - config          → carregamento, merge e validação de configuração

Princípios fundamentais:
    - Nenhuma decisão silenciosa: toda falha é classificada
    - Estado de invocação vive apenas no contexto
    - Colaboradores são injetados explicitamente

Limites explícitos:
    - Não contém lógica de domínio
    - Não implementa persistência nem mensageria
"""
