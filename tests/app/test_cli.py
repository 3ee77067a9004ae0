from __future__ import annotations

import pytest

from schemagate.domain import (
    EXIT_ABORT,
    EXIT_PROCEED,
    Fatal,
    GateStage,
    GateWarning,
    MissingRelation,
    NotConfigured,
    Success,
    SuccessWithWarnings,
    classify,
)
from schemagate.ui import cli

_WARNING = GateWarning(
    stage=GateStage.SYNCHRONIZING, failure=MissingRelation(message="relation missing")
)
_NOT_CONFIGURED = NotConfigured(message="Missing configuration for: DB_HOST")


@pytest.mark.parametrize(
    ("outcome", "expected_code"),
    [
        (Success(), EXIT_PROCEED),
        (SuccessWithWarnings(warnings=(_WARNING,)), EXIT_PROCEED),
        (
            Fatal(
                stage=GateStage.START,
                failure=_NOT_CONFIGURED,
                classification=classify(_NOT_CONFIGURED),
            ),
            EXIT_ABORT,
        ),
    ],
)
def test_main_exits_with_outcome_status(
    monkeypatch: pytest.MonkeyPatch,
    outcome: Success | SuccessWithWarnings | Fatal,
    expected_code: int,
) -> None:
    monkeypatch.setattr(cli, "ensure_database_schema", lambda: outcome)

    with pytest.raises(SystemExit) as exc:
        cli.main()

    assert exc.value.code == expected_code


def test_main_aborts_on_unexpected_exception(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode() -> Success:
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "ensure_database_schema", explode)

    with pytest.raises(SystemExit) as exc:
        cli.main()

    assert exc.value.code == EXIT_ABORT


def test_sigint_handler_blocks_deployment() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.sigint_handler(2, None)

    assert exc.value.code == EXIT_ABORT
