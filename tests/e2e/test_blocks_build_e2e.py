"""
E2E — definição de blocos → buildspec → build disparado → status final.

Cenário: definição YAML com os quatro grupos, cache e relatório, disparada
via `start_pipeline_build` e depois atualizada com o status terminal.
Esperado:
- buildspec com fases pre_build/build/post_build e seções auxiliares
- registro em `builds/<build_id>` com snapshot e hash do buildspec
- status terminal arquivado pelo Log Archiver
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import yaml

from blockci.integrations.builds import BUILDS_COLLECTION, record_build_status, start_pipeline_build
from blockci.persistence.store import JsonDirectoryStore

from tests.e2e._helpers import load_pipeline_fixture
from tests.fixtures.triggers import FakeBuildTrigger


def test_blocks_build_e2e(tmp_path: Path) -> None:
    store = JsonDirectoryStore(tmp_path / "store")
    started = datetime(2026, 1, 16, 10, 0, 0, tzinfo=timezone.utc)

    outcome = start_pipeline_build(
        user_id="user-1",
        project_id="shop",
        definition=load_pipeline_fixture("blocks_definition.yaml"),
        build_trigger=FakeBuildTrigger(build_ids=["shop-build-1"]),
        store=store,
        strict=True,
        now=lambda: started,
    )

    spec = yaml.safe_load(outcome.buildspec)
    assert list(spec) == ["version", "phases", "artifacts", "env", "cache", "reports"]
    assert spec["phases"]["pre_build"]["commands"] == [
        "# Block: system",
        "# Package manager - fail fast on error",
        "apt-get update -y",
        "apt-get install -y zip",
        "# Block: deps",
        "# Package manager - fail fast on error",
        "pnpm install",
    ]
    assert spec["phases"]["build"]["commands"][0] == "# Block: compile (with fallback)"
    assert "  ./scripts/notify.sh" in spec["phases"]["build"]["commands"]
    assert spec["phases"]["post_build"]["commands"] == [
        "# Test Block: unit",
        "pnpm test -- --ci",
        "# Run Block: notify",
        "./scripts/notify.sh",
    ]
    assert spec["reports"]["unit"]["file-format"] == "JUNITXML"

    stored = store.get(BUILDS_COLLECTION, "shop-build-1")
    assert stored["project_name"] == "blockci-shop-user-1"
    assert stored["buildspec"] == spec

    archived = []
    final = record_build_status(
        store,
        "shop-build-1",
        "SUCCEEDED",
        end_time=started + timedelta(minutes=3),
        archiver=archived.append,
    )
    assert final["status"] == "succeeded"
    assert final["duration_seconds"] == 180
    assert archived[0]["build_id"] == "shop-build-1"
    assert store.get(BUILDS_COLLECTION, "shop-build-1")["end_time"] == "2026-01-16T10:03:00+00:00"
