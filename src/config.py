"""
Configuration management for the Notehub firmware deployer.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Tuple

from errors import InputValidationError

DEFAULT_FIRMWARE_DIR = "firmware"

REQUIRED_FIELDS = ("project_uid", "firmware_file", "client_id", "client_secret")

# Targeting field -> Notehub DFU query parameter
TARGETING_PARAMS: Dict[str, str] = {
    "device_uid": "deviceUID",
    "tag": "tags",
    "serial_number": "serialNumber",
    "fleet_uid": "fleetUID",
    "product_uid": "productUID",
    "notecard_firmware": "notecardFirmware",
    "location": "location",
    "sku": "sku",
}


@dataclass(frozen=True)
class DeploymentConfig:
    """Configuration for a single firmware deployment run."""

    project_uid: str
    firmware_file: str
    client_id: str
    client_secret: str
    issue_dfu: str = "true"
    device_uid: str = ""
    tag: str = ""
    serial_number: str = ""
    fleet_uid: str = ""
    product_uid: str = ""
    notecard_firmware: str = ""
    location: str = ""
    sku: str = ""
    firmware_dir: str = DEFAULT_FIRMWARE_DIR
    verbose: bool = False

    @classmethod
    def from_args(cls, args) -> "DeploymentConfig":
        """
        Create configuration from command-line arguments.

        Args:
            args: Parsed argparse arguments

        Returns:
            DeploymentConfig instance
        """
        return cls(
            project_uid=args.project_uid or "",
            firmware_file=args.firmware_file or "",
            client_id=args.client_id or "",
            client_secret=args.client_secret or "",
            issue_dfu=args.issue_dfu or "",
            device_uid=args.device_uid or "",
            tag=args.tag or "",
            serial_number=args.serial_number or "",
            fleet_uid=args.fleet_uid or "",
            product_uid=args.product_uid or "",
            notecard_firmware=args.notecard_firmware or "",
            location=args.location or "",
            sku=args.sku or "",
            firmware_dir=args.firmware_dir or DEFAULT_FIRMWARE_DIR,
            verbose=args.verbose,
        )

    def validate(self) -> None:
        """
        Check that every required field is present.

        Raises:
            InputValidationError: naming all missing fields
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(self, name)]
        if missing:
            raise InputValidationError(
                f"missing required input(s): {', '.join(missing)}"
            )

    @property
    def upload_only(self) -> bool:
        """True only when issue_dfu is literally "false", in any case."""
        return self.issue_dfu.lower() == "false"

    @property
    def firmware_path(self) -> str:
        return os.path.join(self.firmware_dir, self.firmware_file)

    def targeting(self) -> List[Tuple[str, str]]:
        """Return (query parameter, raw value) pairs for every targeting field."""
        return [
            (param, getattr(self, field)) for field, param in TARGETING_PARAMS.items()
        ]
