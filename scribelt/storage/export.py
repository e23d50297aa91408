"""Transcript export to a plain-text file."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..exceptions import EmptyExportAttempt, ExportWriteFailure

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "SpeechTranscription.txt"


def _default_file_mode() -> int:
    # os.umask can only be read by setting it
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class ExportService:
    """Writes the displayed transcript to a fixed file, overwritten on each export."""

    def __init__(self, export_dir: Optional[str] = None, file_name: str = DEFAULT_FILE_NAME):
        """Initialize export service.

        Args:
            export_dir: Directory for the export file (defaults to the system temp dir)
            file_name: Name of the export file
        """
        self.export_dir = Path(export_dir) if export_dir else Path(tempfile.gettempdir())
        self.file_name = file_name
        logger.info(f"ExportService initialized with export path: {self.export_path}")

    @property
    def export_path(self) -> Path:
        return self.export_dir / self.file_name

    def write_text_file(self, path: Path, content: str, encoding: str = "utf-8") -> Path:
        """Write text atomically: a sibling temp file is renamed over ``path``.

        Raises:
            ExportWriteFailure: the file could not be written
        """
        path = Path(path)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
                f.write(content)
            os.chmod(tmp_name, _default_file_mode())
            os.replace(tmp_name, path)
        except (OSError, UnicodeError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error(f"Failed to write export file {path}: {e}")
            raise ExportWriteFailure(f"Could not create {path}: {e}") from e

        logger.info(f"Export file written: {path} ({len(content)} characters)")
        return path

    def export_text(self, text: str) -> Path:
        """Export ``text`` to the export path and return it.

        Raises:
            EmptyExportAttempt: there is no text to export
            ExportWriteFailure: the file could not be written
        """
        if not text:
            raise EmptyExportAttempt("No text to export")
        return self.write_text_file(self.export_path, text)
