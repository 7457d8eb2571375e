"""
Core do Zealux.

Este pacote contém a implementação canônica do Zealux, reunindo todas as
responsabilidades essenciais para validar e executar grafos de fases.

Componentes principais:
    - process      → declarações (Phase, PhaseNode, Connection, Termination, Process)
    - engine       → validator, planner, execução assíncrona e agregação
    - config       → resolução de configuração (merge, validação, hashing)
    - traceability → Manifest de execução

Princípios fundamentais:
    - Definições inválidas nunca executam
    - Falhas locais degradam para resultados parciais, nunca silenciosos
    - Estado de execução é isolado por run

Limites explícitos:
    - Não contém lógica de domínio
    - Não define como processos são carregados ou persistidos
"""
