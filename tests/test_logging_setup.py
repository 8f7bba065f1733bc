import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from storefront.errors import ApiFailure
from storefront.models import Failure, ResolvedPayload, Success
from utils import logging_setup


def _read_json_log(capfd):
    output = capfd.readouterr().err
    line = next(line for line in output.splitlines() if line.strip())
    return json.loads(line)


def test_configure_logging_emits_json(capfd, monkeypatch):
    logging_setup.reset_logging()
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.delenv("CLOUDWATCH_LOG_GROUP", raising=False)
    logging_setup.configure_logging("storefront-tests")
    logging.getLogger("storefront").info("hello", extra={"url": "/styles/1", "status": 200})
    record = _read_json_log(capfd)
    logging_setup.reset_logging()
    assert record["message"] == "hello"
    assert record["service"] == "storefront-tests"
    assert record["url"] == "/styles/1"
    assert record["status"] == 200


def test_configure_logging_adds_cloudwatch_handler(monkeypatch):
    logging_setup.reset_logging()
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("CLOUDWATCH_LOG_GROUP", "test-group")
    monkeypatch.setenv("CLOUDWATCH_LOG_STREAM", "test-stream")

    events = []

    class ResourceAlreadyExistsException(Exception):
        pass

    class DummyExceptions:
        pass

    DummyExceptions.ResourceAlreadyExistsException = ResourceAlreadyExistsException

    class DummyLogsClient:
        exceptions = DummyExceptions

        def create_log_group(self, **_kwargs):
            raise ResourceAlreadyExistsException()

        def create_log_stream(self, **_kwargs):
            return None

        def put_log_events(self, **kwargs):
            events.extend(kwargs["logEvents"])
            return {"nextSequenceToken": "token"}

    monkeypatch.setattr(logging_setup.boto3, "client", lambda *_a, **_k: DummyLogsClient())
    logging_setup.configure_logging("storefront-tests")
    log = logging.getLogger("storefront")
    log.info("plain application record")
    log.error("cloudwatch", extra={"url": "/styles/1", "status": 502, "kind": "unexpected_html"})
    log.error("classified", exc_info=ApiFailure("/styles/9", 404, "Not Found", "gone", {}))
    logging_setup.reset_logging()

    assert len(events) == 2
    first = json.loads(events[0]["message"])
    assert first["message"] == "cloudwatch"
    assert first["service"] == "storefront-tests"
    assert (first["url"], first["status"], first["kind"]) == ("/styles/1", 502, "unexpected_html")
    second = json.loads(events[1]["message"])
    assert (second["url"], second["status"], second["kind"]) == ("/styles/9", 404, "api")


def test_configure_logging_is_idempotent(monkeypatch):
    logging_setup.reset_logging()
    monkeypatch.delenv("CLOUDWATCH_LOG_GROUP", raising=False)
    before = len(logging.getLogger().handlers)
    logging_setup.configure_logging("storefront-tests")
    logging_setup.configure_logging("storefront-tests")
    assert len(logging.getLogger().handlers) == before + 1
    logging_setup.reset_logging()


def test_log_outcome_levels(caplog):
    logger = logging.getLogger("storefront.outcome")
    caplog.set_level(logging.INFO, logger="storefront.outcome")

    failure = Failure(ApiFailure("/styles/9", 404, "Not Found", "not found", {"message": "not found"}))
    logging_setup.log_outcome(logger, failure)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.message == "API Error: 404 - not found"
    assert record.kind == "api"
    assert record.status == 404

    caplog.clear()
    success = Success(ResolvedPayload(data={}, status_code=200, url="/styles/1"))
    logging_setup.log_outcome(logger, success, extra={"request_id": "r-1"})

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.url == "/styles/1"
    assert record.request_id == "r-1"


def test_fetch_event_formatter_always_emits_fetch_keys():
    formatter = logging_setup.FetchEventFormatter("%(message)s")
    record = logging.LogRecord("storefront", logging.INFO, __file__, 1, "hello", None, None)
    record.url = "/styles/1"
    payload = json.loads(formatter.format(record))
    assert payload["url"] == "/styles/1"
    assert payload["status"] is None
    assert payload["kind"] is None
