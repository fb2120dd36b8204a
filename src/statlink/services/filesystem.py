"""File system service for snapshot persistence."""

import json
from pathlib import Path
from typing import Any

import structlog

log = structlog.stdlib.get_logger()


class FileSystemService:
    """Service for file system operations with logging and atomic writes."""

    def write_text(self, path: Path, content: str) -> None:
        """Write text to the specified path, replacing any existing file.

        The content goes to a temporary sibling first and is then moved into
        place, so a failed write never leaves a truncated file behind.

        Raises:
            OSError: If the file cannot be written
        """
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            self.ensure_directory(path.parent)

            log.debug("Writing file", path=str(path), temp_path=str(temp_path))
            with open(temp_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)

            temp_path.replace(path)

        except OSError as e:
            log.error("Failed to write file", path=str(path), error=str(e))
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    log.warning("Failed to clean up temporary file", path=str(temp_path))
            raise

    def read_text(self, path: Path) -> str:
        """Read a UTF-8 text file.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be read
        """
        try:
            with open(path, 'r', encoding='utf-8-sig') as f:
                return f.read()
        except OSError as e:
            log.error("Failed to read file", path=str(path), error=str(e))
            raise

    def save_json(self, data: dict[str, Any], path: Path) -> None:
        """Save data as pretty-printed JSON, keeping the key order of ``data``.

        Raises:
            OSError: If file cannot be written
            ValueError: If data cannot be serialized to JSON
        """
        try:
            content = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            log.error("Failed to serialize data to JSON", path=str(path), error=str(e))
            raise ValueError(f"Cannot serialize data to JSON: {e}") from e

        self.write_text(path, content)

    def load_json(self, path: Path) -> dict[str, Any]:
        """Load a JSON object from the specified path.

        Raises:
            FileNotFoundError: If file does not exist
            OSError: If file cannot be read
            ValueError: If file contains invalid JSON or is not an object
        """
        text = self.read_text(path)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            log.error("Invalid JSON in file", path=str(path), error=str(e))
            raise ValueError(f"Invalid JSON in file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Expected JSON object (dict) in {path}, got {type(data).__name__}")
        return data

    def ensure_directory(self, path: Path) -> None:
        """Ensure that a directory exists, creating it if necessary.

        Raises:
            OSError: If the directory cannot be created or the path is a file
        """
        if path.exists():
            if not path.is_dir():
                log.error("Path exists but is not a directory", path=str(path))
                raise NotADirectoryError(f"Path exists but is not a directory: {path}")
            return

        log.debug("Creating directory", path=str(path))
        path.mkdir(parents=True, exist_ok=True)

    def list_directories(self, directory: Path) -> list[Path]:
        """List the immediate subdirectories of a directory, sorted by name.

        Raises:
            FileNotFoundError: If directory does not exist
            OSError: If directory cannot be accessed
        """
        if not directory.is_dir():
            raise FileNotFoundError(f"Directory not found: {directory}")

        subdirectories = sorted((p for p in directory.iterdir() if p.is_dir()), key=lambda p: p.name)
        log.debug("Listed directories", directory=str(directory), count=len(subdirectories))
        return subdirectories
