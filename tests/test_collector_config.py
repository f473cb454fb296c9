import json
import os
from datetime import datetime

from collector_config import (
    DEFAULT_CONFIG,
    CollectorSettings,
    ConfigManager,
    now_ts,
    safe_filename,
)


def test_missing_config_file_uses_defaults(tmp_path):
    config = ConfigManager(str(tmp_path / "absent.txt")).load_config()

    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_simple_config_overrides_nested_values(tmp_path):
    path = tmp_path / "mdm_collector_config.txt"
    path.write_text(
        "# overrides\n"
        f"output_directory={tmp_path / 'out'}\n"
        "registry.enrollments=HKLM\\SOFTWARE\\Test\\Enrollments\n"
        "archive.Airwatchx86=\n",
        encoding="utf-8",
    )

    config = ConfigManager(str(path)).load_config()

    assert config["output_directory"] == str(tmp_path / "out")
    assert config["registry"]["enrollments"] == "HKLM\\SOFTWARE\\Test\\Enrollments"
    assert config["registry"]["logonui"] == DEFAULT_CONFIG["registry"]["logonui"]
    assert config["archive"]["Airwatchx86"] is None


def test_json_config_is_deep_merged(tmp_path):
    path = tmp_path / "cfg.txt"
    path.write_text(json.dumps({"archive": {"Airwatch": "D:\\AW"}}), encoding="utf-8")

    config = ConfigManager(str(path)).load_config()

    assert config["archive"] == {"Airwatch": "D:\\AW", "Airwatchx86": DEFAULT_CONFIG["archive"]["Airwatchx86"]}


def test_broken_json_falls_back_to_defaults(tmp_path, capsys):
    path = tmp_path / "cfg.txt"
    path.write_text("{not json", encoding="utf-8")

    config = ConfigManager(str(path)).load_config()

    assert config == DEFAULT_CONFIG
    assert "[!] Error loading config" in capsys.readouterr().out


def test_settings_from_config(tmp_path):
    config = ConfigManager(str(tmp_path / "absent.txt")).load_config()
    config["output_directory"] = str(tmp_path)
    config["archive"]["Airwatchx86"] = None

    settings = CollectorSettings.from_config(config, timestamp="20261019-101500")

    assert settings.archive_sources == (("Airwatch", r"C:\ProgramData\Airwatch"),)
    assert settings.report_path("WKS01") == os.path.join(str(tmp_path), "RegInfo_WKS01_20261019-101500.txt")
    assert settings.archive_log_path() == os.path.join(str(tmp_path), "Zip-AWFolders-20261019-101500.txt")


def test_settings_default_to_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    settings = CollectorSettings.from_config(ConfigManager(str(tmp_path / "x")).load_config())

    assert settings.output_directory == os.getcwd()
    assert len(settings.timestamp) == len("yyyymmdd-HHMMSS")


def test_now_ts_format_and_uniqueness():
    first = now_ts(datetime(2026, 10, 19, 9, 30, 0))
    second = now_ts(datetime(2026, 10, 19, 9, 30, 2))

    assert first == "20261019-093000"
    assert first != second


def test_safe_filename():
    assert safe_filename('WKS:01/"x"') == "WKS_01_x_"
    assert safe_filename("") == "noname"
