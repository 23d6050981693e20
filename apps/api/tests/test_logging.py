import json
from uuid import uuid4

from loguru import logger

from gamepass_api.core.logging import _serialize_log, claim_log_context


METADATA = {"service_name": "gamepass-api", "environment": "test", "version": "0.0.0"}


def test_claim_log_context_binds_claim_identity() -> None:
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    user_id = uuid4()

    try:
        with claim_log_context(user_id, day=3, tier="elite") as claim_request_id:
            logger.info("inside claim")
        logger.info("after claim")
    finally:
        logger.remove(handler_id)

    inside = next(record for record in records if record["message"] == "inside claim")
    after = next(record for record in records if record["message"] == "after claim")
    assert inside["extra"] == {
        "claim_request_id": claim_request_id,
        "user_id": str(user_id),
        "day": 3,
        "tier": "elite",
    }
    assert "claim_request_id" not in after["extra"]


def test_serialized_records_redact_credentials(capsys) -> None:
    handler_id = logger.add(lambda message: _serialize_log(message, METADATA))

    try:
        logger.bind(api_key="secret-key", character_id=7).warning("Delivery bridge rejected request")
    finally:
        logger.remove(handler_id)

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    payload = next(line for line in lines if line["message"] == "Delivery bridge rejected request")
    assert payload["api_key"] == "[redacted]"
    assert payload["character_id"] == 7
    assert payload["service"] == "gamepass-api"
    assert payload["level"] == "warning"
    assert "trace_id" not in payload
