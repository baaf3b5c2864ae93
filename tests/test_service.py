"""Tests for the HTTP conversion service."""

import io
import json
import tempfile
import unittest
from unittest import mock
from pathlib import Path

import yaml

from service.main import create_app
from service.routes import converter
from tests.fixtures import make_collection, make_request

def upload_payload(document, filename="api.json", **form):
    data = {"file": (io.BytesIO(json.dumps(document).encode("utf-8")), filename)}
    data.update(form)
    return data

class TestConverterService(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.app = create_app({
            "TESTING": True,
            "UPLOAD_FOLDER": str(root / "uploads"),
            "OUTPUT_FOLDER": str(root / "outputs"),
        })
        self.client = self.app.test_client()

    def tearDown(self):
        self._tmp.cleanup()

    def upload(self, document, **form):
        response = self.client.post("/api/converter/upload", data=upload_payload(document, **form),
                                    content_type="multipart/form-data")
        self.assertEqual(response.status_code, 200)
        job_id = response.get_json()["job_id"]
        converter.futures[job_id].result(timeout=30)
        return job_id

    def test_health(self):
        self.assertEqual(self.client.get("/health").get_json(), {"status": "ok"})

    def test_job_lifecycle(self):
        job_id = self.upload(make_collection([make_request("Ping")], name="Ops"), format="json")

        status = self.client.get(f"/api/converter/status/{job_id}").get_json()
        self.assertEqual(status["status"], "completed")
        self.assertEqual(status["progress"], 100)
        self.assertNotIn("output_file", status)

        download = self.client.get(f"/api/converter/download/{job_id}")
        self.assertEqual(download.status_code, 200)
        document = json.loads(download.data)
        self.assertEqual(document["name"], "Ops")
        self.assertEqual(document["collection"][0]["name"], "Ping")
        download.close()

        cleanup = self.client.delete(f"/api/converter/cleanup/{job_id}")
        self.assertEqual(cleanup.status_code, 200)
        self.assertEqual(self.client.get(f"/api/converter/status/{job_id}").status_code, 404)

    def test_yaml_is_default(self):
        job_id = self.upload(make_collection([make_request("Ping")]))
        download = self.client.get(f"/api/converter/download/{job_id}")
        self.assertEqual(yaml.safe_load(download.data)["type"], "collection.insomnia.rest/5.0")
        download.close()

    def test_failed_conversion(self):
        job_id = self.upload({"not": "postman"})
        status = self.client.get(f"/api/converter/status/{job_id}").get_json()
        self.assertEqual(status["status"], "error")
        self.assertIn("Conversion failed", status["message"])
        self.assertEqual(self.client.get(f"/api/converter/download/{job_id}").status_code, 400)

    def test_unexpected_error_marks_job_failed(self):
        with mock.patch("service.routes.converter.BatchConverter.convert_files",
                        side_effect=AttributeError("boom")):
            job_id = self.upload(make_collection([make_request("Ping")]))
        status = self.client.get(f"/api/converter/status/{job_id}").get_json()
        self.assertEqual(status["status"], "error")
        self.assertEqual(status["message"], "Conversion error: boom")

    def test_environment_with_numeric_key(self):
        document = {"name": "Ops", "_postman_variable_scope": "environment",
                    "values": [{"key": 5, "value": "v"}]}
        job_id = self.upload(document, format="json")
        status = self.client.get(f"/api/converter/status/{job_id}").get_json()
        self.assertEqual(status["status"], "completed")

    def test_rejects_bad_uploads(self):
        no_file = self.client.post("/api/converter/upload", data={}, content_type="multipart/form-data")
        self.assertEqual(no_file.status_code, 400)

        wrong_type = self.client.post("/api/converter/upload",
                                      data=upload_payload({}, filename="api.txt"),
                                      content_type="multipart/form-data")
        self.assertEqual(wrong_type.status_code, 400)

        bad_format = self.client.post("/api/converter/upload",
                                      data=upload_payload(make_collection(), format="toml"),
                                      content_type="multipart/form-data")
        self.assertEqual(bad_format.status_code, 400)

    def test_unknown_job(self):
        self.assertEqual(self.client.get("/api/converter/status/nope").status_code, 404)
        self.assertEqual(self.client.get("/api/converter/download/nope").status_code, 404)

    def test_batch_upload(self):
        data = {"files": [
            (io.BytesIO(json.dumps(make_collection([make_request("A")])).encode("utf-8")), "a.json"),
            (io.BytesIO(b"hello"), "notes.txt"),
        ]}
        response = self.client.post("/api/converter/batch/upload", data=data,
                                    content_type="multipart/form-data")
        payload = response.get_json()

        self.assertEqual(len(payload["job_ids"]), 1)
        self.assertEqual([r["status"] for r in payload["results"]], ["queued", "error"])
        converter.futures[payload["job_ids"][0]].result(timeout=30)

        queue = self.client.get("/api/converter/queue/status").get_json()
        self.assertGreaterEqual(queue["completed"], 1)
        self.assertEqual(queue["max_workers"], 4)

    def test_version(self):
        info = self.client.get("/api/converter/version").get_json()
        self.assertEqual(info["converter"], "postman2insomnia")
        self.assertIn("version", info)

if __name__ == "__main__":
    unittest.main()
