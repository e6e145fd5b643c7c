"""YAML form definition loader with integrity hashing."""

import hashlib
from pathlib import Path
from typing import Any

import yaml

from feedback_app.rules.models import Rule, RuleDefinitionError

# Default form definitions directory
FORMS_DIR = Path(__file__).parent.parent.parent / "forms"


def compute_definition_hash(content: str) -> str:
    """Compute SHA256 hash of form definition content.

    Args:
        content: Raw YAML content string

    Returns:
        SHA256 hex digest
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def load_form_definition(
    filename: str,
    forms_dir: Path | None = None,
) -> tuple[dict[str, Any], str]:
    """Load a form definition YAML file and compute its hash.

    Rules in the definition are validated on load, so a definition that
    breaks the flag invariant never reaches the database.

    Args:
        filename: Name of the definition file (e.g., "isp-feedback-v1.yaml")
        forms_dir: Directory containing definitions (defaults to /forms)

    Returns:
        Tuple of (parsed definition dict, SHA256 hash)

    Raises:
        FileNotFoundError: If the definition file doesn't exist
        yaml.YAMLError: If YAML is invalid
        RuleDefinitionError: If a rule is malformed
    """
    if forms_dir is None:
        forms_dir = FORMS_DIR

    filepath = forms_dir / filename

    if not filepath.exists():
        raise FileNotFoundError(f"Form definition not found: {filepath}")

    content = filepath.read_text(encoding="utf-8")
    definition_hash = compute_definition_hash(content)
    definition = yaml.safe_load(content)

    validate_definition(definition)

    return definition, definition_hash


def validate_definition(definition: dict[str, Any]) -> None:
    """Check question references and rule invariants of a definition."""
    question_keys = {q["key"] for q in definition.get("questions", [])}

    for index, rule_data in enumerate(definition.get("rules", [])):
        rule_id = rule_data.get("id", f"rule-{index}")
        for ref in ("source", "depends_on"):
            if rule_data.get(ref) not in question_keys:
                raise RuleDefinitionError(
                    f"Rule '{rule_id}' references unknown question '{rule_data.get(ref)}'"
                )
        # Construct once to enforce the action/flag_kind invariant
        Rule.from_dict(
            {
                "id": rule_id,
                "source_question_id": rule_data["source"],
                "depends_on_question_id": rule_data["depends_on"],
                "operator": rule_data["operator"],
                "match_value": rule_data.get("value", ""),
                "action": rule_data["action"],
                "flag_kind": rule_data.get("flag_kind"),
            }
        )


class FormDefinitionLoader:
    """Stateful form definition loader with caching."""

    def __init__(self, forms_dir: Path | None = None) -> None:
        self.forms_dir = forms_dir or FORMS_DIR
        self._cache: dict[str, tuple[dict[str, Any], str]] = {}

    def load(self, filename: str, use_cache: bool = True) -> tuple[dict[str, Any], str]:
        """Load a definition with optional caching."""
        if use_cache and filename in self._cache:
            return self._cache[filename]

        definition, definition_hash = load_form_definition(filename, self.forms_dir)
        self._cache[filename] = (definition, definition_hash)

        return definition, definition_hash

    def clear_cache(self) -> None:
        """Clear the definition cache."""
        self._cache.clear()

    def list_definitions(self) -> list[str]:
        """List available definition files."""
        return sorted(f.name for f in self.forms_dir.glob("*.yaml"))
