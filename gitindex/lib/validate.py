"""
Schema checks for gitindex configuration.

Schemas ship as `<name>.schema.json` in the package's schemas directory.
Every violation in a document is collected and reported together, so a
broken gitindex.yaml can be fixed in one pass.
"""

import json
from functools import lru_cache
from pathlib import Path

from jsonschema import Draft7Validator

from gitindex.lib.errors import GitIndexError

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"

ROOT_PATH = "(root)"


class ValidationError(GitIndexError):
    """A document does not match its schema.

    Attributes:
        schema_name: Schema the document was checked against
        errors: (path, message) pairs, ordered by path
        path: Path of the first error, for single-problem callers
    """

    def __init__(self, schema_name: str, errors: list[tuple[str, str]]):
        self.schema_name = schema_name
        self.errors = errors
        self.path = errors[0][0] if errors else None
        details = "; ".join(f"{path}: {message}" for path, message in errors)
        super().__init__(f"[{schema_name}] {details}")


def _format_path(parts) -> str:
    return ".".join(str(p) for p in parts) if parts else ROOT_PATH


@lru_cache(maxsize=None)
def _validator(schema_name: str) -> Draft7Validator:
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise ValidationError(schema_name, [(ROOT_PATH, f"Schema file not found: {schema_path}")])
    schema = json.loads(schema_path.read_text())
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


def schema_errors(data, schema_name: str) -> list[tuple[str, str]]:
    """All (path, message) violations of data against the named schema."""
    found = [
        (_format_path(error.absolute_path), error.message)
        for error in _validator(schema_name).iter_errors(data)
    ]
    return sorted(found)


def validate(data, schema_name: str) -> None:
    """
    Check data against the named schema.

    Raises:
        ValidationError: Listing every violation, if there are any
    """
    errors = schema_errors(data, schema_name)
    if errors:
        raise ValidationError(schema_name, errors)
