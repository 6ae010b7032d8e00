import logging
from datetime import UTC, datetime

import orjson
import pytest

from widgetgrid.core.models import GridConfiguration
from widgetgrid.infra.config import WorkspaceSettings
from widgetgrid.infra.logging import JsonLineFormatter, run_log_path, setup_logging, shutdown_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    shutdown_logging()
    root.handlers[:] = handlers
    root.setLevel(level)


def _settings(tmp_path, **overrides) -> WorkspaceSettings:
    return WorkspaceSettings(
        app_data_dir=tmp_path,
        layouts_dir=tmp_path / "layouts",
        logs_dir=tmp_path / "logs",
        grid=GridConfiguration.STANDARD,
        **overrides,
    )


def test_json_line_formatter_inlines_extra_fields() -> None:
    logger = logging.getLogger("test.json.formatter")
    record = logger.makeRecord(
        name=logger.name,
        level=logging.WARNING,
        fn=__file__,
        lno=1,
        msg="moved %s",
        args=("clock",),
        exc_info=None,
        extra={"widget_id": "clock", "row": 3},
    )
    entry = orjson.loads(JsonLineFormatter().format(record))
    assert entry["message"] == "moved clock"
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "test.json.formatter"
    assert entry["widget_id"] == "clock"
    assert entry["row"] == 3
    assert "lineno" not in entry


def test_run_log_path_is_stamped(tmp_path) -> None:
    started = datetime(2026, 5, 6, 7, 8, 9, tzinfo=UTC)
    assert run_log_path(tmp_path, started) == tmp_path / "widgetgrid_run_20260506T070809.jsonl"


def test_setup_logging_respects_existing_handlers(tmp_path, restore_root_logging) -> None:
    root = restore_root_logging
    root.handlers[:] = [logging.NullHandler()]
    assert setup_logging(_settings(tmp_path), to_file=False) is None
    assert isinstance(root.handlers[0], logging.NullHandler)


def test_console_only_uses_configured_level_and_format(tmp_path, restore_root_logging) -> None:
    root = restore_root_logging
    settings = _settings(tmp_path, log_level="DEBUG", log_format="json")
    assert setup_logging(settings, to_file=False, force=True) is None
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonLineFormatter)
    assert not (tmp_path / "logs").exists()


def test_run_log_is_written_through_the_queue(tmp_path, restore_root_logging) -> None:
    path = setup_logging(_settings(tmp_path, log_level="DEBUG"), force=True)
    assert path is not None
    assert path.parent == tmp_path / "logs"

    logging.getLogger("test.logging.run").info("hello")
    shutdown_logging()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert any(orjson.loads(line)["message"] == "hello" for line in lines)
