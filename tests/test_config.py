from __future__ import annotations

import logging

import pytest

from feedgate import FeedGateConfig
from feedgate.data.calendar import ExchangeCalendar
from feedgate.data.reader import SchemaRecordReader
from feedgate.utils import save_yaml, setup_logging
from feedgate.utils.config import CalendarConfig, ReaderConfig, deep_update, load_config, validate_config


def test_defaults_match_exchange_conventions() -> None:
    cfg = FeedGateConfig()
    assert cfg.reader.value_column == "Close"
    assert cfg.reader.on_relearn == "reject"
    assert (cfg.calendar.regular_open, cfg.calendar.regular_close) == ("09:30", "16:00")
    assert (cfg.calendar.extended_open, cfg.calendar.extended_close) == ("04:00", "20:00")
    assert cfg.locator.is_auth_token_set is False
    validate_config(cfg)


def test_from_dict_partial_override_round_trip() -> None:
    cfg = FeedGateConfig.from_dict({"reader": {"value_column": "Settle"}, "calendar": {"holidays": ["2020-01-08"]}})
    assert cfg.reader.value_column == "Settle"
    assert cfg.reader.delimiter == ","
    assert cfg.calendar.holidays == ("2020-01-08",)
    assert FeedGateConfig.from_dict(cfg.to_dict()) == cfg


def test_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError):
        FeedGateConfig.from_dict({"strategy": {}})
    with pytest.raises(TypeError):
        FeedGateConfig.from_dict({"reader": {"colour": "red"}})


def test_deep_update_nested() -> None:
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    out = deep_update(base, {"a": {"b": 10}})
    assert out == {"a": {"b": 10, "c": 2}, "d": 3}
    assert base["a"]["b"] == 1


@pytest.mark.parametrize(
    "cfg",
    [
        FeedGateConfig(reader=ReaderConfig(delimiter="")),
        FeedGateConfig(reader=ReaderConfig(value_column="  ")),
        FeedGateConfig(reader=ReaderConfig(on_relearn="relearn")),  # type: ignore[arg-type]
        FeedGateConfig(reader=ReaderConfig(period_days=0)),
        FeedGateConfig(calendar=CalendarConfig(regular_open="16:00", regular_close="09:30")),
        FeedGateConfig(calendar=CalendarConfig(extended_open="20:00", extended_close="04:00")),
        FeedGateConfig(calendar=CalendarConfig(regular_open="9h30")),
        FeedGateConfig(gate_session="overnight"),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects(cfg: FeedGateConfig) -> None:
    with pytest.raises(ValueError):
        validate_config(cfg)


def test_non_containing_windows_only_warn(caplog) -> None:
    cfg = FeedGateConfig(calendar=CalendarConfig(extended_open="10:00", extended_close="15:00"))
    with caplog.at_level(logging.WARNING, logger="feedgate.utils.config"):
        validate_config(cfg)
    assert "does not contain" in caplog.text


def test_load_config_from_yaml(tmp_path) -> None:
    path = tmp_path / "cfg.yaml"
    save_yaml(
        {
            "reader": {"value_column": "Value", "delimiter": ";"},
            "calendar": {"holidays": ["2020-01-08"], "timezone": None},
            "locator": {"auth_token": "tok", "is_auth_token_set": True},
            "gate_session": "extended",
        },
        path,
    )
    cfg = load_config(path)
    assert cfg.reader.delimiter == ";"
    assert cfg.calendar.timezone is None
    assert cfg.locator.auth_token == "tok"
    assert cfg.gate_session == "extended"

    reader = SchemaRecordReader.from_config(cfg.reader, symbol="S")
    reader.learn_schema("Date;Value")
    assert reader.parse_line("2020-01-08;2.5").value == pytest.approx(2.5)

    assert load_config(None) == FeedGateConfig()


def test_yaml_dates_in_holidays_are_normalized(tmp_path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("calendar:\n  holidays: [2020-01-08]\n", encoding="utf-8")
    assert load_config(path).calendar.holidays == ("2020-01-08",)


def test_unquoted_yaml_session_times(tmp_path) -> None:
    # YAML 1.1 reads 16:00 and 20:00 as 960 and 1200; 09:30 and 04:00 stay strings
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "calendar:\n  regular_open: 09:30\n  regular_close: 16:00\n"
        "  extended_open: 04:00\n  extended_close: 20:00\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.calendar == CalendarConfig()

    cal = ExchangeCalendar.from_config(cfg.calendar)
    assert cal.is_regular_session_open("2020-01-08 15:59") is True
    assert cal.is_regular_session_open("2020-01-08 16:00") is False


def test_setup_logging_is_idempotent() -> None:
    logger = setup_logging("debug")
    try:
        setup_logging("WARNING")
        handlers = [h for h in logger.handlers if getattr(h, "_feedgate", False)]
        assert len(handlers) == 1
        assert logger.level == logging.WARNING
        with pytest.raises(ValueError):
            setup_logging("LOUD")
    finally:
        for h in list(logger.handlers):
            if getattr(h, "_feedgate", False):
                logger.removeHandler(h)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
