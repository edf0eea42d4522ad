"""
Test — Pipeline inexistente (Guardrail)

Cenário: a execução é solicitada para um pipeline_id que não está no store.
Esperado:
- PipelineNotFoundError com payload canônico "PIPELINE_NOT_FOUND"
- nenhum Execution Record é criado
"""

from __future__ import annotations

import pytest

from blockci.core.engine.engine import EXECUTIONS_COLLECTION, PipelineExecutor
from blockci.core.errors import pipeline_not_found
from blockci.core.exceptions import PipelineNotFoundError
from blockci.persistence.store import InMemoryDocumentStore

from tests.errors._snapshot_helpers import assert_error_snapshot
from tests.fixtures.triggers import FakeBuildTrigger, FakeDeployTrigger


def test_pipeline_not_found() -> None:
    store = InMemoryDocumentStore()
    executor = PipelineExecutor(
        store=store,
        build_trigger=FakeBuildTrigger(),
        deploy_trigger=FakeDeployTrigger(),
    )

    with pytest.raises(PipelineNotFoundError) as exc:
        executor.run("ghost", "u", "proj")

    payload = {"type": "PIPELINE_NOT_FOUND", "message": str(exc.value), "details": exc.value.details}
    assert_error_snapshot("pipeline_not_found.json", payload)
    assert_error_snapshot("pipeline_not_found.json", pipeline_not_found(pipeline_id="ghost").to_dict())
    assert store.list(EXECUTIONS_COLLECTION) == []
