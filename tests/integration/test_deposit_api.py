"""End-to-end tests — multipart deposits through ``POST /deposit``.

These tests exercise the FastAPI app, form-to-bundle conversion,
DepositValidator and outcome dispatch working together.
"""

from __future__ import annotations

import hashlib
import json

import pytest
from fastapi.testclient import TestClient

from depositgate import __version__
from depositgate.api.app import create_app
from depositgate.config import GateConfigError, GateSettings

PAGE_ONE = b"0123456789"
PAGE_TWO = b"abcdefghijklmnopqrst"


@pytest.fixture
def client(settings: GateSettings) -> TestClient:
    return TestClient(create_app(settings=settings))


@pytest.fixture
def manifest(make_manifest, make_entry) -> bytes:
    return make_manifest([
        make_entry("FILE_0001", PAGE_ONE),
        make_entry("FILE_0002", PAGE_TWO),
    ])


def _deposit(client: TestClient, manifest: bytes, *parts: tuple[str, bytes]):
    files = [("manifest", ("manifest.xml", manifest, "application/xml"))]
    files.extend(
        (part_id, (f"{part_id}.bin", data, "application/octet-stream"))
        for part_id, data in parts
    )
    return client.post("/deposit", files=files)


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestDeposit:
    def test_valid_deposit(self, client, manifest):
        response = _deposit(
            client, manifest, ("FILE_0001", PAGE_ONE), ("FILE_0002", PAGE_TWO)
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "messages": []}

    def test_duplicate_file(self, client, manifest):
        response = _deposit(
            client,
            manifest,
            ("FILE_0001", PAGE_ONE),
            ("FILE_0001", PAGE_ONE),
            ("FILE_0002", PAGE_TWO),
        )
        assert response.status_code == 400
        assert response.json()["messages"] == [
            "File upload entry FILE_0001 contains 2 files, expected is 1"
        ]

    def test_missing_file(self, client, manifest):
        response = _deposit(client, manifest, ("FILE_0001", PAGE_ONE))
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "messages": ["Missing uploaded file expected from manifest: FILE_0002"],
        }

    def test_file_not_in_manifest(self, client, manifest):
        response = _deposit(
            client,
            manifest,
            ("FILE_0001", PAGE_ONE),
            ("FILE_0002", PAGE_TWO),
            ("FILE_0003", b"stray"),
        )
        assert response.status_code == 400
        assert response.json()["messages"] == [
            "Uploaded file is missing from manifest: FILE_0003"
        ]

    def test_checksum_mismatch(self, client, manifest, digest):
        corrupted = b"abcdefghijklmnopqrsX"
        response = _deposit(
            client, manifest, ("FILE_0001", PAGE_ONE), ("FILE_0002", corrupted)
        )
        assert response.status_code == 400
        assert response.json()["messages"] == [
            "Checksum mismatch with manifest for file FILE_0002 "
            f"(expected={digest(PAGE_TWO)}, actual={digest(corrupted)})"
        ]

    def test_byte_count_mismatch(self, client, make_manifest, make_entry):
        manifest = make_manifest([make_entry("FILE_0001", PAGE_ONE[:9], size=10)])
        response = _deposit(client, manifest, ("FILE_0001", PAGE_ONE[:9]))
        assert response.status_code == 400
        assert response.json()["messages"] == [
            "Byte count mismatch with manifest for file FILE_0001 (expected=10, actual=9)"
        ]

    def test_unknown_checksum_algorithm(self, client, make_manifest, make_entry):
        manifest = make_manifest([
            make_entry("FILE_0001", PAGE_ONE, checksum_type="MAGIC-42")
        ])
        response = _deposit(client, manifest, ("FILE_0001", PAGE_ONE))
        assert response.status_code == 400
        assert response.json()["messages"] == [
            "Checksum algorithm not supported for file: FILE_0001, MAGIC-42"
        ]

    def test_corrupted_manifest(self, client):
        response = _deposit(client, b"<manif", ("FILE_0001", PAGE_ONE))
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert len(body["messages"]) == 1
        assert body["messages"][0].startswith("Malformed XML manifest")

    def test_oversized_size_attribute(self, client, make_manifest, make_entry):
        manifest = make_manifest([make_entry("FILE_0001", PAGE_ONE, size="9" * 5000)])
        response = _deposit(client, manifest, ("FILE_0001", PAGE_ONE))
        assert response.status_code == 400
        assert response.json()["messages"] == [
            "Manifest entry 1 has an invalid size: too many digits"
        ]

    def test_json_manifest(self, client):
        manifest = json.dumps({
            "files": [{
                "id": "FILE_0001",
                "size": len(PAGE_ONE),
                "checksum_type": "MD5",
                "checksum": hashlib.md5(PAGE_ONE).hexdigest(),
            }]
        }).encode("utf-8")
        response = _deposit(client, manifest, ("FILE_0001", PAGE_ONE))
        assert response.status_code == 200, response.json()

    def test_no_manifest(self, client):
        response = client.post(
            "/deposit",
            files=[("FILE_0001", ("FILE_0001.bin", PAGE_ONE, "application/octet-stream"))],
        )
        assert response.status_code == 400
        assert response.json()["messages"] == ["No manifest was uploaded"]

    def test_manifest_as_text_field(self, client, make_manifest, make_entry):
        manifest = make_manifest([make_entry("FILE_0001", PAGE_ONE)])
        response = client.post(
            "/deposit",
            data={"manifest": manifest.decode("utf-8")},
            files=[("FILE_0001", ("FILE_0001.bin", PAGE_ONE, "application/octet-stream"))],
        )
        assert response.status_code == 200, response.json()

    def test_rejection_is_repeatable(self, client, manifest):
        first = _deposit(client, manifest, ("FILE_0001", PAGE_ONE))
        second = _deposit(client, manifest, ("FILE_0001", PAGE_ONE))
        assert first.json() == second.json()


class TestCreateApp:
    def test_production_debug_refused(self):
        with pytest.raises(GateConfigError):
            create_app(settings=GateSettings(environment="production", debug=True))

    def test_uses_given_settings(self, settings: GateSettings):
        app = create_app(settings=settings)
        assert app.state.settings is settings
        assert app.state.validator is not None
