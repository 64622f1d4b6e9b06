"""
Unit tests for FirmwareDeployer, including end-to-end runs against a
mocked HTTP session.
"""

import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

from clients import NotehubClient
from config import DeploymentConfig
from deployer import FirmwareDeployer
from errors import DeploymentError, ProtocolError, TransportError
from models import DfuResponse, Session, UploadResult
from test_clients import make_response


class DeployerTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        os.makedirs(os.path.join(self.tmpdir.name, "build"))
        with open(os.path.join(self.tmpdir.name, "build", "firmware.bin"), "wb") as fh:
            fh.write(b"firmware-image")

    def make_config(self, **overrides):
        values = dict(
            project_uid="app:1234",
            firmware_file="build/firmware.bin",
            client_id="id",
            client_secret="secret",
            issue_dfu="true",
            firmware_dir=self.tmpdir.name,
        )
        values.update(overrides)
        return DeploymentConfig(**values)


class TestFirmwareDeployerStages(DeployerTestCase):
    """Test stage sequencing with a mocked client."""

    def setUp(self):
        super().setUp()
        self.client = MagicMock(spec=NotehubClient)
        self.session = Session(base_url="https://example.test", access_token="t")
        self.client.authenticate.return_value = self.session
        self.client.upload_firmware.return_value = UploadResult(
            filename="firmware.bin", size_bytes=14
        )
        self.client.trigger_dfu.return_value = DfuResponse(success=True)

    def test_run_passes_session_and_uploaded_filename(self):
        self.client.upload_firmware.return_value = UploadResult(
            filename="firmware-v2.bin"
        )
        config = self.make_config()

        result = FirmwareDeployer(config, client=self.client).run()

        self.assertEqual(result.status, "success")
        self.assertEqual(result.filename, "firmware-v2.bin")
        self.assertTrue(result.dfu_triggered)
        self.assertIsNotNone(result.duration_seconds)
        self.client.authenticate.assert_called_once_with("id", "secret")
        self.client.upload_firmware.assert_called_once_with(
            self.session,
            "app:1234",
            os.path.join(self.tmpdir.name, "build/firmware.bin"),
        )
        self.client.trigger_dfu.assert_called_once_with(
            self.session, config, "firmware-v2.bin"
        )

    def test_upload_only_never_triggers(self):
        for value in ("FALSE", "false", "False"):
            with self.subTest(issue_dfu=value):
                self.client.trigger_dfu.reset_mock()
                config = self.make_config(issue_dfu=value)

                result = FirmwareDeployer(config, client=self.client).run()

                self.assertEqual(result.status, "success")
                self.assertEqual(result.filename, "firmware.bin")
                self.assertFalse(result.dfu_triggered)
                self.client.trigger_dfu.assert_not_called()

    def test_unrecognized_issue_dfu_still_triggers(self):
        config = self.make_config(issue_dfu="nope")
        FirmwareDeployer(config, client=self.client).run()
        self.client.trigger_dfu.assert_called_once()

    def test_authentication_failure_stops_run(self):
        self.client.authenticate.side_effect = ProtocolError(
            "OAuth2 failed with status 401: denied", status_code=401, body="denied"
        )
        with self.assertRaises(DeploymentError) as ctx:
            FirmwareDeployer(self.make_config(), client=self.client).run()
        self.assertEqual(ctx.exception.stage, "authentication")
        self.assertIsInstance(ctx.exception.__cause__, ProtocolError)
        self.client.upload_firmware.assert_not_called()

    def test_upload_failure_stops_run(self):
        self.client.upload_firmware.side_effect = TransportError("reset")
        with self.assertRaises(DeploymentError) as ctx:
            FirmwareDeployer(self.make_config(), client=self.client).run()
        self.assertEqual(ctx.exception.stage, "upload")
        self.assertIn("firmware upload failed", str(ctx.exception))
        self.client.trigger_dfu.assert_not_called()

    def test_trigger_failure_is_wrapped(self):
        self.client.trigger_dfu.side_effect = ProtocolError(
            "device firmware update failed with status 500: boom", status_code=500
        )
        with self.assertRaises(DeploymentError) as ctx:
            FirmwareDeployer(self.make_config(), client=self.client).run()
        self.assertEqual(ctx.exception.stage, "dfu")
        self.assertIn("DFU trigger failed", str(ctx.exception))
        self.assertIn("500", str(ctx.exception))

    def test_summary_lists_set_fields_only(self):
        config = self.make_config(tag="production,staging", sku="NOTE-WBNA")
        with self.assertLogs("deployer", level="INFO") as logs:
            FirmwareDeployer(config, client=self.client).run()
        output = "\n".join(logs.output)
        self.assertIn("=== Deployment Summary ===", output)
        self.assertIn("Uploaded Filename: firmware.bin", output)
        self.assertIn("Target Tag: production,staging", output)
        self.assertIn("SKU: NOTE-WBNA", output)
        self.assertNotIn("Target Device UID", output)
        self.assertNotIn("secret", output)

    def test_no_summary_in_upload_only_mode(self):
        config = self.make_config(issue_dfu="false")
        with self.assertLogs("deployer", level="INFO") as logs:
            FirmwareDeployer(config, client=self.client).run()
        self.assertNotIn("=== Deployment Summary ===", "\n".join(logs.output))


class TestFirmwareDeployerEndToEnd(DeployerTestCase):
    """Full runs through NotehubClient with a mocked HTTP session."""

    def setUp(self):
        super().setUp()
        self.http = MagicMock()
        self.client = NotehubClient(http=self.http)

    def test_valid_run_with_device_target(self):
        self.http.request.side_effect = [
            make_response(200, {"access_token": "tok", "expires_in": 1800}),
            make_response(200, {"filename": "firmware.bin"}),
            make_response(200, {"success": True}),
        ]
        config = self.make_config(device_uid="dev:123")

        result = FirmwareDeployer(config, client=self.client).run()

        self.assertEqual(result.status, "success")
        self.assertEqual(result.filename, "firmware.bin")
        self.assertEqual(self.http.request.call_count, 3)

        trigger = self.http.request.call_args_list[2]
        self.assertEqual(trigger.args[0], "POST")
        self.assertEqual(
            parse_qs(urlsplit(trigger.args[1]).query), {"deviceUID": ["dev:123"]}
        )
        self.assertEqual(
            json.loads(trigger.kwargs["data"]), {"filename": "firmware.bin"}
        )
        self.assertEqual(trigger.kwargs["headers"]["Authorization"], "Bearer tok")

    def test_missing_firmware_aborts_after_authenticate(self):
        self.http.request.side_effect = [
            make_response(200, {"access_token": "tok"}),
        ]
        config = self.make_config(firmware_file="build/missing.bin")

        with self.assertRaises(DeploymentError) as ctx:
            FirmwareDeployer(config, client=self.client).run()

        self.assertEqual(ctx.exception.stage, "validation")
        self.assertIn("firmware file not found", str(ctx.exception))
        self.assertEqual(self.http.request.call_count, 1)

    def test_multiple_tags_become_repeated_parameters(self):
        self.http.request.side_effect = [
            make_response(200, {"access_token": "tok"}),
            make_response(200, {"filename": "firmware.bin"}),
            make_response(200, {}),
        ]
        config = self.make_config(tag="production,staging")

        FirmwareDeployer(config, client=self.client).run()

        query = urlsplit(self.http.request.call_args_list[2].args[1]).query
        self.assertIn("tags=production&tags=staging", query)

    def test_unauthorized_aborts_before_upload(self):
        self.http.request.side_effect = [
            make_response(401, text='{"error":"invalid_client"}'),
        ]

        with self.assertRaises(DeploymentError) as ctx:
            FirmwareDeployer(self.make_config(), client=self.client).run()

        self.assertEqual(ctx.exception.stage, "authentication")
        self.assertIn("401", str(ctx.exception))
        self.assertIn("invalid_client", str(ctx.exception))
        self.assertEqual(self.http.request.call_count, 1)

    def test_trigger_uses_server_renamed_filename(self):
        self.http.request.side_effect = [
            make_response(200, {"access_token": "tok"}),
            make_response(200, {"filename": "firmware$20250101.bin"}),
            make_response(200, {}),
        ]

        FirmwareDeployer(self.make_config(), client=self.client).run()

        body = json.loads(self.http.request.call_args_list[2].kwargs["data"])
        self.assertEqual(body, {"filename": "firmware$20250101.bin"})


if __name__ == "__main__":
    unittest.main()
