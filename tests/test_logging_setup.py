import json
import logging

from autokatalog.config import Settings
from autokatalog.logging_setup import build_formatter


def make_record(msg, args):
    return logging.LogRecord("autokatalog.api.autos", logging.DEBUG, __file__, 60, msg, args, None)


def test_json_lines_parse_with_quotes_in_message():
    formatter = build_formatter(Settings(log_format="json"))

    line = formatter.format(make_record("get_auto: id=%s if_none_match=%s", ("1", '"0"')))

    record = json.loads(line)
    assert record["message"] == 'get_auto: id=1 if_none_match="0"'
    assert record["levelname"] == "DEBUG"
    assert record["name"] == "autokatalog.api.autos"
    assert "time" in record


def test_text_format_by_default():
    formatter = build_formatter(Settings())

    line = formatter.format(make_record("create: id=%d", (7,)))

    assert line.endswith(" - autokatalog.api.autos - DEBUG - create: id=7")
