# src/municipios_dataflow/steps/__init__.py
"""
Steps concretos do pipeline de municípios.

Ordem canônica (DAG linear):

    snapshot.acquire → snapshot.diff → ingest.parse → export.regions

Padrão de todos os Steps:
    - configuração lida de `config["steps"][<step_id>]`
    - exceções convertidas em StepResult FAILED com `payload["error"]`
    - eventos estruturados registrados via `ctx.log`
"""
