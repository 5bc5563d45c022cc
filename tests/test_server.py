"""Tests for the Flask HTTP API."""

import io

import cv2
import numpy as np
import pytest

from unwatermark.document import open_document
from unwatermark.server import create_app


@pytest.fixture
def client(service_config):
    app = create_app(service_config)
    app.config["TESTING"] = True
    return app.test_client()


def _upload(client, url, data, filename, mimetype=None, **form):
    payload = {"file": (io.BytesIO(data), filename, mimetype) if mimetype else (io.BytesIO(data), filename)}
    payload.update(form)
    return client.post(url, data=payload, content_type="multipart/form-data")


def test_remove_image(client, png_bytes, service_config):
    response = _upload(client, "/api/watermark/remove/image", png_bytes, "stripe.png",
                       threshold="200", tolerance="20")

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["fallback"] is False
    assert body["fileType"] == "png"
    assert body["fileName"].endswith("_nowatermark.png")

    output = (service_config.output_dir / body["fileName"]).read_bytes()
    image = cv2.imdecode(np.frombuffer(output, np.uint8), cv2.IMREAD_COLOR)
    assert (image == (40, 60, 80)).all()


def test_remove_image_uses_default_parameters(client, png_bytes):
    response = _upload(client, "/api/watermark/remove/image", png_bytes, "stripe.png")
    assert response.status_code == 200


def test_remove_image_without_file(client):
    response = client.post("/api/watermark/remove/image", data={}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_remove_image_rejects_bad_parameters(client, png_bytes):
    response = _upload(client, "/api/watermark/remove/image", png_bytes, "a.png", threshold="abc")
    assert response.status_code == 400
    response = _upload(client, "/api/watermark/remove/image", png_bytes, "a.png", tolerance="999")
    assert response.status_code == 400


def test_remove_image_rejects_garbage(client, service_config):
    response = _upload(client, "/api/watermark/remove/image", b"not an image", "a.png")
    assert response.status_code == 400
    assert list(service_config.upload_dir.iterdir()) == []


def test_remove_image_names_output_after_encoder(client, png_bytes, service_config):
    response = _upload(client, "/api/watermark/remove/image", png_bytes, "a.gif")

    assert response.status_code == 200
    body = response.get_json()
    assert body["fallback"] is False
    assert body["fileType"] == "jpg"
    assert body["fileName"].endswith("_nowatermark.jpg")
    assert (service_config.output_dir / body["fileName"]).read_bytes()[:2] == b"\xff\xd8"

    response = client.delete(f"/api/watermark/delete/{body['fileName']}")
    assert response.status_code == 200
    assert list(service_config.upload_dir.iterdir()) == []


def test_remove_pdf(client, pdf_bytes, service_config):
    response = _upload(client, "/api/watermark/remove/pdf", pdf_bytes, "doc.pdf", "application/pdf")

    assert response.status_code == 200
    body = response.get_json()
    assert body["fileType"] == "pdf"
    assert body["pages"] == 2
    assert body["fallback"] is False

    document = open_document((service_config.output_dir / body["fileName"]).read_bytes())
    assert document.page_count == 2
    document.close()


def test_remove_pdf_rejects_other_files(client, png_bytes):
    response = _upload(client, "/api/watermark/remove/pdf", png_bytes, "a.png", "image/png")
    assert response.status_code == 400


def test_remove_pdf_rejects_broken_pdf(client, service_config):
    response = _upload(client, "/api/watermark/remove/pdf", b"garbage", "doc.pdf", "application/pdf")
    assert response.status_code == 400
    assert list(service_config.upload_dir.iterdir()) == []


def test_download_and_delete(client, png_bytes, service_config):
    name = _upload(client, "/api/watermark/remove/image", png_bytes, "a.png").get_json()["fileName"]

    response = client.get(f"/api/watermark/download/{name}")
    assert response.status_code == 200
    assert "attachment" in response.headers["Content-Disposition"]
    assert response.data == (service_config.output_dir / name).read_bytes()
    response.close()

    response = client.delete(f"/api/watermark/delete/{name}")
    assert response.status_code == 200
    assert response.get_json()["success"] is True
    assert not (service_config.output_dir / name).exists()

    response = client.get(f"/api/watermark/download/{name}")
    assert response.status_code == 404


def test_delete_missing_file(client):
    response = client.delete("/api/watermark/delete/missing_nowatermark.png")
    assert response.status_code == 500
    assert response.get_json()["success"] is False
