"""Console entry point for the Notehub firmware deployer."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List

import actions
from clients import NotehubClient
from config import DEFAULT_FIRMWARE_DIR, DeploymentConfig
from deployer import FirmwareDeployer
from errors import NotehubError
from log_utils import setup_logging

logger = logging.getLogger(__name__)

TARGETING_OPTIONS = (
    ("device_uid", "Device UID(s) to update"),
    ("tag", "Device tag(s) to update"),
    ("serial_number", "Device serial number(s) to update"),
    ("fleet_uid", "Fleet UID(s) to update"),
    ("product_uid", "Product UID(s) to update"),
    ("notecard_firmware", "Only devices running this Notecard firmware"),
    ("location", "Device location(s) to update"),
    ("sku", "Notecard SKU(s) to update"),
)


def _flag(name: str) -> str:
    return "--" + name.replace("_", "-")


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the CLI argument parser.

    Every option defaults to the matching GitHub Actions input
    (``INPUT_PROJECT_UID`` and so on), read when the parser is built.
    """
    parser = argparse.ArgumentParser(
        description=(
            "Upload host firmware to Notehub and optionally trigger a "
            "device firmware update. Targeting options accept "
            "comma-separated lists."
        )
    )

    required = parser.add_argument_group("project and credentials")
    required.add_argument(
        "--project-uid",
        default=actions.get_input("project_uid"),
        help="Notehub project UID",
    )
    required.add_argument(
        "--firmware-file",
        default=actions.get_input("firmware_file"),
        help="Firmware binary, relative to --firmware-dir",
    )
    required.add_argument(
        "--client-id",
        default=actions.get_input("client_id"),
        help="Notehub OAuth2 client ID",
    )
    required.add_argument(
        "--client-secret",
        default=actions.get_input("client_secret"),
        help="Notehub OAuth2 client secret",
    )

    mode = parser.add_argument_group("operation mode")
    mode.add_argument(
        "--issue-dfu",
        default=actions.get_input("issue_dfu", "true"),
        help='Set to "false" to upload without triggering an update',
    )
    mode.add_argument(
        "--firmware-dir",
        default=actions.get_input("firmware_dir", DEFAULT_FIRMWARE_DIR),
        help=f"Directory holding the firmware file (default: {DEFAULT_FIRMWARE_DIR})",
    )

    targeting = parser.add_argument_group("device targeting")
    for name, help_text in TARGETING_OPTIONS:
        targeting.add_argument(
            _flag(name), default=actions.get_input(name), help=help_text
        )

    logging_group = parser.add_argument_group("logging and output")
    logging_group.add_argument("--verbose", action="store_true")
    logging_group.add_argument("--log-file", help="Also write logs to this file")
    return parser


def main(argv: List[str] | None = None) -> int:
    """CLI main; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(args=argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    config = DeploymentConfig.from_args(args)
    actions.add_mask(config.client_secret)

    try:
        config.validate()
        with NotehubClient() as client:
            result = FirmwareDeployer(config, client=client).run()
    except NotehubError as e:
        logger.error(f"Deployment failed: {e}")
        actions.error(f"Deployment failed: {e}")
        actions.set_output("deployment_status", "failed")
        return 1

    actions.set_output("deployment_status", result.status)
    actions.set_output("firmware_filename", result.filename)
    logger.info("✓ Firmware deployment completed successfully")
    return 0


def run() -> None:
    """console_scripts entry point."""
    sys.exit(main())
