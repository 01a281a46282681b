"""
Seed data loader.

Seed datasets are JSON objects mapping entity names to record lists:

    {
        "Patient": [{"id": "p1", "name": "Alice", ...}, ...],
        "Document": [...]
    }
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from patientflow.core.errors import SeedDataError

SeedData = dict[str, list[dict[str, Any]]]

BUNDLED_SEED_FILE = "seed.json"


def validate_seed_data(data: Any) -> SeedData:
    """
    Check that ``data`` has the ``{EntityName: [record, ...]}`` shape.

    Raises:
        SeedDataError: If the structure is wrong
    """
    if not isinstance(data, dict):
        raise SeedDataError("Seed data must be a JSON object")

    for entity_name, records in data.items():
        if not isinstance(records, list):
            raise SeedDataError(f"Entity '{entity_name}' data must be a list")
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise SeedDataError(f"Entity '{entity_name}' record {i} must be an object")
            if not record.get("id"):
                raise SeedDataError(f"Entity '{entity_name}' record {i} has no id")

    return data


class SeedDataLoader:
    """
    Loads seed datasets from JSON files.

    Supports a single combined file or a directory of ``{EntityName}.json``
    files, each holding a list of records.
    """

    def __init__(self, project_root: Path | None = None) -> None:
        """
        Initialize the loader.

        Args:
            project_root: Root directory for resolving relative paths
        """
        self.project_root = project_root or Path.cwd()

    def _resolve(self, path: str | Path) -> Path:
        full_path = Path(path)
        if not full_path.is_absolute():
            full_path = self.project_root / path
        return full_path

    def load_from_json_file(self, path: str | Path) -> SeedData:
        """
        Load a combined seed file.

        Args:
            path: Path to the JSON file (absolute or relative to project_root)

        Returns:
            Dictionary mapping entity names to lists of records

        Raises:
            FileNotFoundError: If the file doesn't exist
            SeedDataError: If the file isn't valid JSON or has the wrong shape
        """
        full_path = self._resolve(path)
        if not full_path.exists():
            raise FileNotFoundError(f"Seed data file not found: {full_path}")

        try:
            with open(full_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SeedDataError(f"Invalid JSON in {full_path}: {e}") from e

        return validate_seed_data(data)

    def load_from_json_dir(self, dir_path: str | Path) -> SeedData:
        """
        Load a directory of per-entity files named ``{EntityName}.json``.

        Raises:
            NotADirectoryError: If the path isn't a directory
            SeedDataError: If a file isn't valid JSON or has the wrong shape
        """
        full_path = self._resolve(dir_path)
        if not full_path.is_dir():
            raise NotADirectoryError(f"Seed data directory not found: {full_path}")

        result: SeedData = {}
        for json_file in sorted(full_path.glob("*.json")):
            try:
                with open(json_file, encoding="utf-8") as f:
                    result[json_file.stem] = json.load(f)
            except json.JSONDecodeError as e:
                raise SeedDataError(f"Invalid JSON in {json_file}: {e}") from e

        return validate_seed_data(result)

    def load(self, path: str | Path) -> SeedData:
        """Load from a file or a directory, whichever ``path`` is."""
        if self._resolve(path).is_dir():
            return self.load_from_json_dir(path)
        return self.load_from_json_file(path)


def load_default_seed() -> SeedData:
    """Load the dataset bundled with the package."""
    text = resources.files("patientflow.demo_data").joinpath(BUNDLED_SEED_FILE).read_text(
        encoding="utf-8"
    )
    return validate_seed_data(json.loads(text))
