from __future__ import annotations

import json

import pytest

from rosterrecon.domain.errors import InvalidArgumentError, NotFoundError, UpstreamError
from rosterrecon.domain.model import (
    ActionType,
    OrphanedRecord,
    OrphanedRecordAction,
    ReingestResult,
    ResolutionItem,
    ResolutionResult,
    RosterEntryData,
    VisibleOrphan,
)
from rosterrecon.ui import cli as cli_module
from tests.helpers.orphans import at


def _record() -> OrphanedRecord:
    return OrphanedRecord(
        document_id="doc-1",
        edipi="1234567890",
        phone=None,
        unit="Alpha",
        timestamp=at(0),
        org_id=1,
        composite_id="1234567890_1",
        deleted_on=at(10),
        id=5,
    )


def test_list_prints_visible_orphans(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_list(**kwargs: object) -> list[VisibleOrphan]:
        captured.update(kwargs)
        return [
            VisibleOrphan(
                id="1234567890_1",
                edipi="1234567890",
                phone=None,
                unit="Alpha",
                count=2,
                latest_report_date=at(60),
                earliest_report_date=at(0),
                action=ActionType.CLAIM,
                claimed_until=at(120),
            )
        ]

    monkeypatch.setattr(cli_module, "list_orphans", fake_list)

    cli_module.main(["list", "--user", "1111111111", "--org", "1"])

    assert captured == {"user_edipi": "1111111111", "org_id": 1}
    (item,) = json.loads(capsys.readouterr().out)
    assert item["id"] == "1234567890_1"
    assert item["count"] == 2
    assert item["action"] == "claim"
    assert item["claimed_until"] == at(120).isoformat()


def test_claim_passes_ttl(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_set(composite_id: str, **kwargs: object) -> OrphanedRecordAction:
        captured.update(kwargs, composite_id=composite_id)
        return OrphanedRecordAction(
            composite_id=composite_id,
            user_edipi="1111111111",
            type=ActionType.CLAIM,
            expires_on=at(30),
        )

    monkeypatch.setattr(cli_module, "set_orphan_action", fake_set)

    cli_module.main(["claim", "1234567890_1", "--user", "1111111111", "--ttl-ms", "30000"])

    assert captured == {
        "composite_id": "1234567890_1",
        "user_edipi": "1111111111",
        "action_type": "claim",
        "ttl_ms": 30000,
    }
    assert json.loads(capsys.readouterr().out)["type"] == "claim"


def test_resolve_builds_roster_entry(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_resolve(composite_id: str, **kwargs: object) -> ResolutionResult:
        captured.update(kwargs, composite_id=composite_id)
        return ResolutionResult(
            records_ingested=3,
            lambda_invocation_count=1,
            items=(
                ResolutionItem(
                    records_ingested=3, lambda_invocation_count=1, orphaned_record=_record()
                ),
            ),
        )

    monkeypatch.setattr(cli_module, "resolve_orphan", fake_resolve)

    cli_module.main(
        ["resolve", "1234567890_1", "--org", "1", "--edipi", "1234567890", "--unit", "7"]
    )

    assert captured["org_id"] == 1
    assert captured["entry"] == RosterEntryData(edipi="1234567890", unit_id=7)
    payload = json.loads(capsys.readouterr().out)
    assert payload["recordsIngested"] == 3
    assert payload["items"][0]["orphanedRecord"]["composite_id"] == "1234567890_1"


def test_invalid_argument_exits_with_usage_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_clear(*_: object, **__: object) -> None:
        raise InvalidArgumentError("Param 'user' is required.")

    monkeypatch.setattr(cli_module, "clear_orphan_action", fake_clear)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["clear", "1234567890_1", "--user", " ", "--action", "claim"])

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    "error",
    [NotFoundError("missing"), UpstreamError("lambda down", orphaned_record=_record())],
)
def test_workflow_failures_exit_with_error_code(
    monkeypatch: pytest.MonkeyPatch, error: Exception
) -> None:
    def fake_delete(*_: object, **__: object) -> int:
        raise error

    monkeypatch.setattr(cli_module, "delete_orphan", fake_delete)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["delete", "1234567890_1"])

    assert excinfo.value.code == 1


def test_unknown_action_is_rejected_by_parser() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["clear", "1234567890_1", "--user", "u", "--action", "approve"])

    assert excinfo.value.code == 2
