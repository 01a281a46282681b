"""Tests for seed data loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from patientflow.core.errors import SeedDataError
from patientflow.demo_data import SeedDataLoader, load_default_seed, validate_seed_data
from patientflow.runtime.registry import ENTITY_NAMES


@pytest.fixture
def loader(tmp_path: Path) -> SeedDataLoader:
    return SeedDataLoader(project_root=tmp_path)


class TestSeedDataLoader:
    def test_load_combined_file(self, loader: SeedDataLoader, tmp_path: Path):
        (tmp_path / "seed.json").write_text(
            json.dumps({"Patient": [{"id": "p1"}], "Document": []})
        )

        data = loader.load_from_json_file("seed.json")
        assert data == {"Patient": [{"id": "p1"}], "Document": []}

    def test_missing_file(self, loader: SeedDataLoader):
        with pytest.raises(FileNotFoundError):
            loader.load_from_json_file("missing.json")

    def test_invalid_json(self, loader: SeedDataLoader, tmp_path: Path):
        (tmp_path / "seed.json").write_text("{not json")
        with pytest.raises(SeedDataError, match="Invalid JSON"):
            loader.load_from_json_file("seed.json")

    def test_load_directory(self, loader: SeedDataLoader, tmp_path: Path):
        seed_dir = tmp_path / "seed"
        seed_dir.mkdir()
        (seed_dir / "Patient.json").write_text(json.dumps([{"id": "p1"}]))
        (seed_dir / "BillingCode.json").write_text(json.dumps([{"id": "code-g0180"}]))

        data = loader.load("seed")
        assert data == {"BillingCode": [{"id": "code-g0180"}], "Patient": [{"id": "p1"}]}

    def test_invalid_json_in_directory(self, loader: SeedDataLoader, tmp_path: Path):
        seed_dir = tmp_path / "seed"
        seed_dir.mkdir()
        (seed_dir / "Patient.json").write_text("[{")

        with pytest.raises(SeedDataError, match="Invalid JSON"):
            loader.load_from_json_dir("seed")

    def test_missing_directory(self, loader: SeedDataLoader):
        with pytest.raises(NotADirectoryError):
            loader.load_from_json_dir("nowhere")

    def test_absolute_path(self, tmp_path: Path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"Patient": []}))
        assert SeedDataLoader(project_root=Path("/elsewhere")).load(path) == {"Patient": []}


class TestValidateSeedData:
    @pytest.mark.parametrize(
        "data,message",
        [
            ([], "must be a JSON object"),
            ({"Patient": {"id": "p1"}}, "must be a list"),
            ({"Patient": ["p1"]}, "must be an object"),
            ({"Patient": [{"name": "Alice"}]}, "has no id"),
        ],
    )
    def test_rejects(self, data, message):
        with pytest.raises(SeedDataError, match=message):
            validate_seed_data(data)


class TestBundledSeed:
    def test_covers_every_entity(self):
        data = load_default_seed()
        assert set(data) == set(ENTITY_NAMES)

    def test_ids_unique_per_entity(self):
        for entity_name, records in load_default_seed().items():
            ids = [record["id"] for record in records]
            assert len(ids) == len(set(ids)), entity_name
