"""
Load custom rule sets from JSON5 files.

A rule set file lists rules in application order:

    {
      include_defaults: true,          // built-in rules run first
      rules: [
        {id: "strike", pattern: "~~(.+?)~~", template: "$1", style: "italic"},
      ],
    }

A string entry names a built-in rule by id, so built-ins can be picked and
reordered without copying their patterns: ``rules: ["code", "bold", {...}]``.

``$ref`` references are expanded before validation, and defaults from
``rules.schema.json`` are filled into the data while it is validated.
"""

import json
import logging
import re
from pathlib import Path

import json5
import jsonref
from jsonschema import Draft7Validator, validators

from mdtext.rules import BUILTIN_RULES, DEFAULT_RULES, Rule, StyleOp

logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).with_name("rules.schema.json")
SCHEMA = json.loads(SCHEMA_FILE.read_text(encoding="utf-8"))


class RuleConfigError(ValueError):
    """A rule set definition is malformed. ``errors`` lists every problem found."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def extend_with_default(validator_class):
    """Extend validator to set defaults"""
    validate_props = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if validator.is_type(instance, "object"):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    # Only set default if key is missing
                    instance.setdefault(prop, subschema["default"])

        # Continue validation as normal
        for error in validate_props(validator, properties, instance, schema):
            yield error

    return validators.extend(
        validator_class, {"properties": set_defaults},
    )


DefaultValidatingDraft7Validator = extend_with_default(Draft7Validator)


def load_json5_with_refs(path):
    """
    Load a JSON/JSON5 file and expand $ref references.

    Uses json5 to allow comments, trailing commas and other JSON5 features,
    then normalizes to strict JSON for jsonref. Relative references resolve
    against the file's own location.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json5.load(f)

    json_str = json.dumps(data)

    # expands $ref
    return jsonref.loads(json_str, base_uri=path.resolve().as_uri(), proxies=False)


def validate(data):
    """Validate rule set data against the schema, filling in defaults."""
    validator = DefaultValidatingDraft7Validator(SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        raise RuleConfigError(
            f"Validation error at {list(error.path)}: {error.message}" for error in errors
        )
    return data


def rules_from_config(data):
    """
    Build a rule tuple from validated rule set data.

    Raises:
        RuleConfigError: On schema violations, duplicate ids or patterns
            that do not compile.
    """
    validate(data)

    rules = list(DEFAULT_RULES) if data["include_defaults"] else []
    problems = []
    seen = {rule.id for rule in rules}
    for index, entry in enumerate(data["rules"]):
        # a bare string names a built-in rule
        if isinstance(entry, str):
            if entry not in BUILTIN_RULES:
                problems.append(f"Validation error at ['rules', {index}]: unknown built-in rule {entry!r}")
            elif entry in seen:
                problems.append(f"Validation error at ['rules', {index}]: duplicate rule id {entry!r}")
            else:
                seen.add(entry)
                rules.append(BUILTIN_RULES[entry])
            continue

        rule_id = entry["id"]
        if rule_id in seen:
            problems.append(f"Validation error at ['rules', {index}, 'id']: duplicate rule id {rule_id!r}")
            continue
        seen.add(rule_id)
        try:
            re.compile(entry["pattern"])
        except re.error as exc:
            problems.append(f"Validation error at ['rules', {index}, 'pattern']: {exc}")
            continue
        rules.append(Rule(rule_id, entry["pattern"], entry["template"], StyleOp(entry["style"])))

    if problems:
        raise RuleConfigError(problems)

    logger.debug("Loaded %d rules (%d custom)", len(rules), len(data["rules"]))
    return tuple(rules)


def load_rule_set(file_path):
    """
    Load, expand, validate and convert a rule set file.

    Raises:
        RuleConfigError: When the file cannot be read or parsed, a ``$ref``
            does not resolve, or the rule set itself is invalid.
    """
    try:
        data = load_json5_with_refs(file_path)
    except (OSError, ValueError, jsonref.JsonRefError) as exc:
        raise RuleConfigError([f"Cannot load rule set {file_path}: {exc}"]) from exc
    return rules_from_config(data)
