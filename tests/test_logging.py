from __future__ import annotations

import logging

from hooks_toolkit.logging import _redact_secrets, get_logger, setup_logging


def test_secrets_are_redacted() -> None:
    event = {"event": "deploy", "secret": "snoPBr", "Seed": "sEd7", "account": "rHb9"}
    out = _redact_secrets(logging.getLogger("t"), "info", event)
    assert out["secret"] == "***"
    assert out["Seed"] == "***"
    assert out["account"] == "rHb9"


def test_setup_logging_json(capsys) -> None:
    setup_logging(level="info", log_format="json")
    get_logger("hooks_toolkit.test").info("stage_ok", stage="compile", signing_secret="shh")
    err = capsys.readouterr().err
    assert '"stage": "compile"' in err
    assert "shh" not in err
    assert logging.getLogger().level == logging.INFO
