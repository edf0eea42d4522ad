"""
Test — Definição de blocos com fallback inexistente (Guardrail)

Cenário: um bloco BUILD aponta `on_failed` para um bloco que não existe e
o build é disparado em modo estrito.
Esperado:
- ValidationError com payload canônico "VALIDATION_ERROR" listando a issue
- o Build Trigger nunca é chamado
"""

from __future__ import annotations

import pytest

from blockci.core.pipeline.validation import ValidationError
from blockci.integrations.builds import start_pipeline_build

from tests.errors._snapshot_helpers import assert_error_snapshot
from tests.fixtures.triggers import FakeBuildTrigger


def test_invalid_definition_strict() -> None:
    definition = {
        "runtime": "nodejs:18",
        "blocks": [
            {
                "id": "build",
                "block_type": "custom_build_command",
                "group_type": "build",
                "custom_command": ["npm run build"],
                "on_failed": "missing-fallback",
            }
        ],
    }
    trigger = FakeBuildTrigger()

    with pytest.raises(ValidationError) as exc:
        start_pipeline_build(
            user_id="u",
            project_id="proj",
            definition=definition,
            build_trigger=trigger,
            strict=True,
        )

    payload = {"type": "VALIDATION_ERROR", "message": str(exc.value), "details": exc.value.details}
    assert_error_snapshot("validation_error.json", payload)
    assert trigger.calls == []
