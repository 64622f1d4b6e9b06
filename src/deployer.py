"""
Firmware deployment orchestration for Notehub.
"""

import logging
import os
import time
from typing import Optional

from clients import NotehubClient
from config import DeploymentConfig
from errors import DeploymentError, InputValidationError, NotehubError
from models import DeploymentResult

logger = logging.getLogger(__name__)

# Summary labels for the targeting fields, in display order
SUMMARY_LABELS = (
    ("device_uid", "Target Device UID"),
    ("tag", "Target Tag"),
    ("serial_number", "Target Serial"),
    ("fleet_uid", "Fleet UID"),
    ("product_uid", "Product UID"),
    ("notecard_firmware", "Notecard Firmware"),
    ("location", "Location"),
    ("sku", "SKU"),
)


class FirmwareDeployer:
    """Runs one deployment: authenticate, upload, then optionally trigger DFU."""

    def __init__(
        self, config: DeploymentConfig, client: Optional[NotehubClient] = None
    ):
        """
        Initialize the deployer.

        Args:
            config: Deployment configuration
            client: Optional Notehub client; a default one is built if omitted
        """
        self.config = config
        self.client = client if client is not None else NotehubClient()

    def _check_firmware_file(self) -> str:
        path = self.config.firmware_path
        if not os.path.isfile(path):
            raise InputValidationError(f"firmware file not found: {path}")
        logger.info("✓ Input validation passed")
        return path

    def run(self) -> DeploymentResult:
        """
        Execute the deployment.

        There is no rollback: if a later stage fails, the uploaded binary
        stays on Notehub and a re-run uploads it again.

        Returns:
            DeploymentResult describing the successful run

        Raises:
            DeploymentError: wrapping the failure of whichever stage failed
        """
        config = self.config
        start_time = time.time()

        logger.info("Starting firmware deployment to Notehub...")
        logger.info(f"Project UID: {config.project_uid}")
        logger.info(f"Firmware File: {config.firmware_file}")

        try:
            session = self.client.authenticate(config.client_id, config.client_secret)
        except NotehubError as e:
            raise DeploymentError(
                "authentication", f"authentication failed: {e}"
            ) from e

        try:
            firmware_path = self._check_firmware_file()
        except InputValidationError as e:
            raise DeploymentError("validation", str(e)) from e

        try:
            upload = self.client.upload_firmware(
                session, config.project_uid, firmware_path
            )
        except NotehubError as e:
            raise DeploymentError("upload", f"firmware upload failed: {e}") from e

        logger.info("✓ Firmware uploaded to Notehub")

        dfu_triggered = False
        if config.upload_only:
            logger.info("issue_dfu is false; skipping device firmware update")
        else:
            try:
                self.client.trigger_dfu(session, config, upload.filename)
            except NotehubError as e:
                raise DeploymentError("dfu", f"DFU trigger failed: {e}") from e
            dfu_triggered = True
            logger.info("✓ Device firmware update triggered")
            self.log_summary(upload.filename)

        end_time = time.time()
        return DeploymentResult(
            status="success",
            filename=upload.filename,
            dfu_triggered=dfu_triggered,
            start_time=start_time,
            end_time=end_time,
            duration_seconds=end_time - start_time,
        )

    def log_summary(self, filename: str) -> None:
        """Log the project, firmware and every targeting field that was set."""
        config = self.config
        logger.info("=== Deployment Summary ===")
        logger.info(f"Project UID: {config.project_uid}")
        logger.info(f"Firmware File: {config.firmware_file}")
        logger.info(f"Uploaded Filename: {filename}")
        for field, label in SUMMARY_LABELS:
            value = getattr(config, field)
            if value:
                logger.info(f"{label}: {value}")
        logger.info("Deployment Status: SUCCESS")
