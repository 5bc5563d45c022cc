"""Flask HTTP API for watermark removal.

Endpoints:
    POST   /api/watermark/remove/image
    POST   /api/watermark/remove/pdf
    GET    /api/watermark/download/<file_name>
    DELETE /api/watermark/delete/<file_name>
"""

from typing import Optional, Tuple

from flask import Flask, jsonify, request, send_file

from .classifier import ClassificationParameters
from .codec import normalize_format
from .config import ServiceConfig
from .document import DocumentWatermarkRemover, remove_watermark_from_pdf_bytes
from .errors import InvalidInputError, StorageError
from .remover import remove_watermark_from_image_bytes
from .storage import FileStore
from .utils import file_extension, setup_logger

logger = setup_logger(__name__)


def _error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def _read_parameters(config: ServiceConfig) -> ClassificationParameters:
    """Read threshold/tolerance from the form, falling back to config defaults.

    Raises:
        ValueError: If a value is not an integer or is out of range
    """
    values = []
    for name, default in (
        ("threshold", config.default_threshold),
        ("tolerance", config.default_tolerance),
    ):
        raw = request.form.get(name)
        if raw is None or raw.strip() == "":
            values.append(default)
            continue
        try:
            values.append(int(raw))
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    return ClassificationParameters(*values)


def _read_upload() -> Tuple[Optional[str], Optional[bytes]]:
    file = request.files.get("file")
    if file is None or not file.filename:
        return None, None
    data = file.read()
    if not data:
        return None, None
    return file.filename, data


def _is_pdf_upload(filename: str) -> bool:
    file = request.files["file"]
    return file.mimetype == "application/pdf" or file_extension(filename) == "pdf"


def create_app(config: Optional[ServiceConfig] = None) -> Flask:
    """Create the Flask application."""
    config = config or ServiceConfig.from_env()
    store = FileStore(config.upload_dir, config.output_dir)
    document_remover = DocumentWatermarkRemover(dpi=config.dpi)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length
    app.extensions["unwatermark_store"] = store

    @app.route("/api/watermark/remove/image", methods=["POST"])
    def remove_image():
        filename, data = _read_upload()
        if data is None:
            return _error("No file uploaded", 400)
        try:
            params = _read_parameters(config)
        except ValueError as e:
            return _error(str(e), 400)

        extension = file_extension(filename)
        file_id = None
        try:
            file_id = store.save_upload(data, extension)
            result = remove_watermark_from_image_bytes(
                data, params.threshold, params.tolerance, fmt=extension
            )
            # Cleaned images are re-encoded, so name them after the encoder used
            output_type = extension if result.fallback else normalize_format(extension)
            output_name = store.output_name(file_id, output_type)
            store.write_output(output_name, result.data)
        except InvalidInputError as e:
            if file_id is not None:
                store.discard_upload(file_id, extension)
            return _error(f"Invalid image: {e}", 400)
        except StorageError as e:
            logger.error(f"Storage failure: {e}")
            return _error(f"Watermark removal failed: {e}", 500)

        return jsonify({
            "success": True,
            "fileName": output_name,
            "fileType": output_type,
            "fallback": result.fallback,
            "message": _result_message(result.fallback),
        })

    @app.route("/api/watermark/remove/pdf", methods=["POST"])
    def remove_pdf():
        filename, data = _read_upload()
        if data is None:
            return _error("No file uploaded", 400)
        if not _is_pdf_upload(filename):
            return _error("Invalid file. Only PDFs are allowed.", 400)
        try:
            params = _read_parameters(config)
        except ValueError as e:
            return _error(str(e), 400)

        file_id = None
        try:
            file_id = store.save_upload(data, "pdf")
            result = remove_watermark_from_pdf_bytes(
                data, params.threshold, params.tolerance, remover=document_remover
            )
            output_name = store.output_name(file_id, "pdf")
            store.write_output(output_name, result.data)
        except InvalidInputError as e:
            if file_id is not None:
                store.discard_upload(file_id, "pdf")
            return _error(f"Invalid PDF: {e}", 400)
        except StorageError as e:
            logger.error(f"Storage failure: {e}")
            return _error(f"Watermark removal failed: {e}", 500)

        return jsonify({
            "success": True,
            "fileName": output_name,
            "fileType": "pdf",
            "pages": result.pages,
            "fallback": result.fallback,
            "message": _result_message(result.fallback),
        })

    @app.route("/api/watermark/download/<path:file_name>", methods=["GET"])
    def download(file_name: str):
        try:
            path = store.output_path(file_name)
        except ValueError:
            return _error("Invalid file name", 400)
        if not path.is_file():
            return _error("File not found", 404)
        return send_file(path, as_attachment=True, download_name=file_name)

    @app.route("/api/watermark/delete/<path:file_name>", methods=["DELETE"])
    def delete(file_name: str):
        try:
            deleted = store.delete(file_name)
        except ValueError:
            return _error("Invalid file name", 400)
        except StorageError as e:
            return _error(f"Error: {e}", 500)

        if deleted:
            return jsonify({"success": True, "message": "Files deleted successfully"})
        return _error("File deletion failed", 500)

    @app.errorhandler(413)
    def too_large(_):
        return _error(f"File too large (max {config.max_upload_mb} MB)", 413)

    return app


def _result_message(fallback: bool) -> str:
    if fallback:
        return "Watermark removal failed; original file returned unchanged"
    return "Watermark removed successfully"
