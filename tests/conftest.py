import pytest

import fake_scom_sdk
from scom_maintenance.maintenance_log import MaintenanceLog, MaintenanceLogConfig

HOST = "web01.corp.example.com"


@pytest.fixture
def sdk():
    fake_scom_sdk.reset([HOST, "db01.corp.example.com"])
    yield fake_scom_sdk
    fake_scom_sdk.reset()


@pytest.fixture
def log(tmp_path):
    maintenance_log = MaintenanceLog(MaintenanceLogConfig(str(tmp_path), "MaintenanceMode", "Enable"))
    yield maintenance_log
    maintenance_log.close()


@pytest.fixture
def cli_env(tmp_path, monkeypatch, sdk):
    """Point both CLIs at the fake SDK and a temporary log root."""
    from scom_maintenance import disable, enable, stages

    for module in (enable, disable):
        monkeypatch.setattr(module, "SCOM_LOG_ROOT", str(tmp_path))
        monkeypatch.setattr(module, "SCOM_SDK_MODULE", "fake_scom_sdk")
    monkeypatch.setattr(stages, "SCOM_PASSWORD", None)
    return tmp_path
