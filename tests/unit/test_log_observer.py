import logging

from tokensync.adapters.log_observer import LoggingObserver
from tokensync.core.ports.observer import CollectingObserver


def test_warning_is_logged_with_code(caplog):
    observer = LoggingObserver()

    with caplog.at_level(logging.WARNING, logger="tokensync"):
        observer.warn("DANGLING_ALIAS", "Alias target missing", entity_id="text-primary")

    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "[DANGLING_ALIAS] Alias target missing (entity_id=text-primary)"


def test_info_without_context(caplog):
    observer = LoggingObserver(logging.getLogger("tokensync.test"))

    with caplog.at_level(logging.INFO, logger="tokensync.test"):
        observer.info("Fetched remote state")

    assert caplog.records[0].getMessage() == "Fetched remote state"


def test_collecting_observer_forwards(caplog):
    collector = CollectingObserver(forward=LoggingObserver())

    with caplog.at_level(logging.WARNING, logger="tokensync"):
        collector.warn("MISSING_MODE_VALUE", "No value for mode", entity_id="surface")

    assert [w.code for w in collector.warnings] == ["MISSING_MODE_VALUE"]
    assert collector.warnings[0].entity_id == "surface"
    assert "MISSING_MODE_VALUE" in caplog.text
