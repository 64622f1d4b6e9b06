"""
REST API client for Notehub firmware deployment.
"""

import json
import logging
import os
from typing import Dict, Optional

import requests

from config import DeploymentConfig
from errors import (
    DecodeError,
    InputValidationError,
    ProtocolError,
    TransportError,
)
from models import DfuResponse, Session, UploadResult
from query import build_targeting_params, encode_query

logger = logging.getLogger(__name__)

API_BASE = "https://api.notefile.net/v1"
TOKEN_URL = "https://notehub.io/oauth2/token"
DEFAULT_TIMEOUT_S = 30


class NotehubClient:
    """REST client for the three Notehub calls used by a firmware deployment."""

    def __init__(
        self,
        base_url: str = API_BASE,
        token_url: str = TOKEN_URL,
        timeout_s: int = DEFAULT_TIMEOUT_S,
        http: Optional[requests.Session] = None,
    ):
        """
        Initialize the Notehub client.

        Args:
            base_url: Notehub API origin
            token_url: OAuth2 token endpoint
            timeout_s: Timeout applied to each individual request
            http: Optional HTTP session, substituted in tests
        """
        self.base_url = base_url.rstrip("/")
        self.token_url = token_url
        self.timeout_s = timeout_s
        self.http = http if http is not None else requests.Session()

    def __enter__(self) -> "NotehubClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def _url(self, path: str) -> str:
        """Construct full API URL from path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, operation: str, method: str, url: str, **kwargs):
        """
        Execute a single HTTP request and require a 2xx status.

        No retry is attempted: any failure surfaces to the caller.

        Args:
            operation: Human-readable name used in error messages
            method: HTTP method
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
            The response object

        Raises:
            TransportError: If no response was received
            ProtocolError: If the status is outside [200, 300)
        """
        try:
            resp = self.http.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{operation} request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise ProtocolError(
                f"{operation} failed with status {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp

    @staticmethod
    def _decode(operation: str, resp) -> Dict:
        try:
            data = resp.json()
        except ValueError as e:
            raise DecodeError(f"failed to parse {operation} response: {e}") from e
        if not isinstance(data, dict):
            raise DecodeError(
                f"failed to parse {operation} response: "
                f"expected a JSON object, got {resp.text}"
            )
        return data

    def authenticate(self, client_id: str, client_secret: str) -> Session:
        """
        Obtain an OAuth2 bearer token using the client_credentials grant.

        Args:
            client_id: OAuth2 client ID
            client_secret: OAuth2 client secret

        Returns:
            Session carrying the access token

        Raises:
            TransportError, ProtocolError, DecodeError: On any failure
        """
        logger.info("Obtaining OAuth2 bearer token from Notehub...")

        resp = self._send(
            "OAuth2",
            "POST",
            self.token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": client_id,
                "client_secret": client_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        data = self._decode("OAuth2", resp)

        token = data.get("access_token")
        if not token or not isinstance(token, str):
            raise ProtocolError(
                "OAuth2 response missing access token",
                status_code=resp.status_code,
                body=resp.text,
            )

        logger.info("✓ OAuth2 token obtained successfully")
        return Session(base_url=self.base_url, access_token=token)

    def upload_firmware(
        self, session: Session, project_uid: str, firmware_file: str
    ) -> UploadResult:
        """
        Upload a host firmware binary to a Notehub project.

        The whole file is sent as the request body; the filename Notehub
        returns is authoritative and may differ from the local base name.

        Args:
            session: Authenticated session
            project_uid: Notehub project UID
            firmware_file: Path to the firmware binary

        Returns:
            UploadResult with the server-assigned filename

        Raises:
            InputValidationError: If the file cannot be read
            TransportError, ProtocolError, DecodeError: On request failure
        """
        logger.info("Uploading firmware to Notehub...")

        try:
            with open(firmware_file, "rb") as fh:
                payload = fh.read()
        except OSError as e:
            raise InputValidationError(f"failed to read firmware file: {e}") from e

        filename = os.path.basename(firmware_file)
        logger.info(f"  - Project: {project_uid}")
        logger.info(f"  - File: {filename}")
        logger.info(f"  - Size: {len(payload)} bytes")

        url = self._url(f"projects/{project_uid}/firmware/host/{filename}")
        resp = self._send(
            "firmware upload",
            "PUT",
            url,
            data=payload,
            headers={
                **session.headers,
                "Content-Type": "application/octet-stream",
            },
        )
        data = self._decode("upload", resp)

        uploaded = data.get("filename")
        if not uploaded or not isinstance(uploaded, str):
            raise ProtocolError(
                f"upload response missing filename: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        logger.info("✓ Firmware upload successful")
        logger.info(f"✓ Captured uploaded filename: {uploaded}")
        return UploadResult(filename=uploaded, size_bytes=len(payload))

    def trigger_dfu(
        self, session: Session, config: DeploymentConfig, filename: str
    ) -> DfuResponse:
        """
        Trigger a host firmware update on the devices selected by ``config``.

        Only the HTTP status decides success; the response body is logged
        and parsed on a best-effort basis.

        Args:
            session: Authenticated session
            config: Deployment configuration supplying project and targeting
            filename: Filename returned by upload_firmware

        Returns:
            DfuResponse with whatever the server reported

        Raises:
            DecodeError: If the payload cannot be encoded
            TransportError, ProtocolError: On request failure
        """
        logger.info("Triggering device firmware update...")

        url = self._url(f"projects/{config.project_uid}/dfu/host/update")
        params = build_targeting_params(config)
        if params:
            url += "?" + encode_query(params)
        logger.info(f"DFU URL: {url}")

        try:
            body = json.dumps({"filename": filename})
        except (TypeError, ValueError) as e:
            raise DecodeError(f"failed to marshal DFU payload: {e}") from e
        logger.info(f"Payload: {body}")

        resp = self._send(
            "device firmware update",
            "POST",
            url,
            data=body,
            headers={**session.headers, "Content-Type": "application/json"},
        )

        logger.info("✓ Device firmware update triggered successfully")
        logger.info(f"Response: {resp.text}")
        return self._parse_dfu_response(resp.text)

    @staticmethod
    def _parse_dfu_response(text: str) -> DfuResponse:
        try:
            data = json.loads(text) if text else {}
        except ValueError:
            logger.debug("DFU response is not JSON; keeping raw body")
            return DfuResponse(raw=text)
        if not isinstance(data, dict):
            return DfuResponse(raw=text)
        success = data.get("success")
        return DfuResponse(
            success=success if isinstance(success, bool) else None,
            message=str(data.get("message", "")),
            raw=text,
        )
