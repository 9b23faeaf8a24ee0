"""Report file parser."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from listenviz.model import ReportModel

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def _load_bundled_schema() -> dict[str, Any]:
    """Load the bundled JSON schema from package resources."""
    try:
        schema_file = resources.files("listenviz.schema").joinpath("report_schema.json")
        return json.loads(schema_file.read_text())
    except (FileNotFoundError, TypeError):
        # Fallback if schema not bundled (development mode)
        return {}


class SchemaValidationError(ValueError):
    """Raised when input data fails schema validation."""
    pass


class ReportParser:
    """Load and validate clustering report files.

    Reports are JSON documents (YAML is accepted by file suffix) holding an
    'arguments' array and a 'clusters' array, as produced by the clustering
    pipeline.
    """

    def __init__(self, schema_path: str | Path | None = None) -> None:
        """Initialize parser with optional custom schema.

        Args:
            schema_path: Path to JSON schema. Uses bundled schema if None.
        """
        if schema_path:
            with open(schema_path) as f:
                self._schema = json.load(f)
        else:
            self._schema = _load_bundled_schema() or self._minimal_schema()

    def _minimal_schema(self) -> dict[str, Any]:
        """Return minimal schema for essential validation.

        Used as fallback when bundled schema is not available.
        """
        return {
            "type": "object",
            "required": ["arguments", "clusters"],
            "properties": {
                "arguments": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["arg_id", "argument", "x", "y", "cluster_ids"],
                    },
                },
                "clusters": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["level", "id", "parent"],
                    },
                },
            },
        }

    def parse(self, filepath: str | Path) -> ReportModel:
        """Parse a report file and return a ReportModel.

        Args:
            filepath: Path to the report file.

        Returns:
            ReportModel instance.

        Raises:
            FileNotFoundError: If file doesn't exist.
            ValueError: If the JSON or YAML is malformed.
            SchemaValidationError: If data fails schema validation.
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        if filepath.suffix.lower() in YAML_SUFFIXES:
            try:
                with open(filepath) as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML: {e}") from e
        else:
            try:
                with open(filepath, encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON: {e}") from e

        logger.info("Parsing report %s", filepath)
        return self.parse_data(data if data is not None else {})

    def parse_data(self, data: dict[str, Any]) -> ReportModel:
        """Validate already-decoded report data (e.g. an upload body).

        Raises:
            SchemaValidationError: If data fails schema validation.
        """
        self._validate(data)
        return ReportModel(data)

    def _validate(self, data: dict[str, Any]) -> None:
        """Validate data against schema.

        Raises:
            SchemaValidationError: If validation fails.
        """
        try:
            jsonschema.validate(data, self._schema)
        except jsonschema.ValidationError as e:
            # Extract the most relevant part of the error message
            field = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"
            raise SchemaValidationError(
                f"Schema validation failed at '{field}': {e.message}"
            ) from e
