"""On-disk storage for uploaded and processed files.

Uploads are saved as ``<id>.<ext>`` in the upload directory and results as
``<id>_nowatermark.<ext>`` in the output directory.
"""

import uuid
from pathlib import Path
from typing import Union

from .errors import StorageError
from .utils import setup_logger

logger = setup_logger(__name__)

OUTPUT_SUFFIX = "_nowatermark"


class FileStore:
    """Upload and output directories for the web service."""

    def __init__(self, upload_dir: Union[str, Path], output_dir: Union[str, Path]) -> None:
        self.upload_dir = Path(upload_dir)
        self.output_dir = Path(output_dir)
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create upload directories: {e}") from e

    @staticmethod
    def output_name(file_id: str, extension: str) -> str:
        return f"{file_id}{OUTPUT_SUFFIX}.{extension}"

    @staticmethod
    def upload_id(output_name: str) -> str:
        """Map an output file name back to the id of the upload it was made from.

        Only the id is recoverable: a cleaned image may have been re-encoded
        in a different format from the upload.
        """
        stem = output_name.rsplit(".", 1)[0]
        if stem.endswith(OUTPUT_SUFFIX):
            stem = stem[:-len(OUTPUT_SUFFIX)]
        return stem

    def _resolve(self, directory: Path, name: str) -> Path:
        path = (directory / name).resolve()
        if path.parent != directory.resolve() or not name:
            raise ValueError(f"Invalid file name: {name!r}")
        return path

    def save_upload(self, data: bytes, extension: str) -> str:
        """Persist uploaded bytes under a fresh id and return the id."""
        file_id = str(uuid.uuid4())
        path = self._resolve(self.upload_dir, f"{file_id}.{extension}")
        try:
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Could not save upload: {e}") from e
        logger.debug(f"Saved upload {path.name} ({len(data):,} bytes)")
        return file_id

    def upload_path(self, name: str) -> Path:
        return self._resolve(self.upload_dir, name)

    def discard_upload(self, file_id: str, extension: str) -> bool:
        """Remove an upload that produced no output."""
        path = self.upload_path(f"{file_id}.{extension}")
        try:
            removed = _delete_if_exists(path)
        except OSError as e:
            raise StorageError(f"Could not discard upload {path.name}: {e}") from e
        if removed:
            logger.debug(f"Discarded upload {path.name}")
        return removed

    def output_path(self, name: str) -> Path:
        """Return the path of an output file.

        Raises:
            ValueError: If ``name`` would resolve outside the output directory
        """
        return self._resolve(self.output_dir, name)

    def write_output(self, name: str, data: bytes) -> Path:
        path = self.output_path(name)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Could not write output {name}: {e}") from e
        logger.debug(f"Wrote output {name} ({len(data):,} bytes)")
        return path

    def read_output(self, name: str) -> bytes:
        path = self.output_path(name)
        if not path.is_file():
            raise FileNotFoundError(name)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Could not read output {name}: {e}") from e

    def delete(self, name: str) -> bool:
        """Delete an output file and the upload it came from.

        Returns:
            True only if both files existed and were removed

        Raises:
            StorageError: If a file exists but cannot be removed
        """
        output_path = self.output_path(name)
        file_id = self.upload_id(name)

        try:
            output_deleted = _delete_if_exists(output_path)
            # Matched on the stem alone, so an id never acts as a glob pattern
            originals = [p for p in self.upload_dir.iterdir() if p.stem == file_id]
            original_deleted = False
            for path in originals:
                original_deleted = _delete_if_exists(path) or original_deleted
        except OSError as e:
            raise StorageError(f"Could not delete {name}: {e}") from e

        logger.info("File deletion results:")
        logger.info(f"- Processed file (output): {'Deleted' if output_deleted else 'Not found'}")
        logger.info(f"- Original file (upload): {'Deleted' if original_deleted else 'Not found'}")
        return output_deleted and original_deleted


def _delete_if_exists(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True
