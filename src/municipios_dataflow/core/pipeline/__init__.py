# src/municipios_dataflow/core/pipeline/__init__.py
"""
# Pipeline Core — Municípios DataFlow

Contratos canônicos e estruturas fundamentais de um pipeline.

Um pipeline é modelado como um **DAG explícito de Steps**, onde:
- cada Step declara identidade, tipo semântico e dependências
- a execução é coordenada exclusivamente pelo Engine
- o estado compartilhado é mediado pelo `RunContext`

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext` (artefatos, event log, warnings)
- **registry**: `StepRegistry` (unicidade de `step.id`)
"""
