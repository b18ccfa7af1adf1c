import os
from dotenv import load_dotenv

load_dotenv()

SCOM_LOG_ROOT = os.getenv("SCOM_LOG_ROOT", "/var/log/scom")
SCOM_LOG_SUBDIR = os.getenv("SCOM_LOG_SUBDIR", "MaintenanceMode")
SCOM_SDK_MODULE = os.getenv("SCOM_SDK_MODULE", "scom_maintenance.scom_client")
SCOM_VERIFY_TLS = os.getenv("SCOM_VERIFY_TLS", "true").lower() not in ("0", "false", "no")
SCOM_PASSWORD = os.getenv("SCOM_PASSWORD")
