"""
YAML Rule Store Adapter - File-based rule configuration.

Loads rule definitions from a YAML file. Files written by the legacy
flowcharting panel (``rulesData``) are migrated on load.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from flowrules.core.domain.rule import Rule
from flowrules.core.ports.rule_store import RuleStore
from flowrules.core.services.migration import is_legacy_panel, migrate_legacy_panel

logger = logging.getLogger(__name__)


class RuleConfigError(ValueError):
    """The rules file exists but cannot be read as a rules document."""


class YamlRuleStore(RuleStore):
    """
    Rule store that reads rules from a YAML file.
    """

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)
        self._rules: dict[str, Rule] = {}
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self._load_rules()
            self._loaded = True

    def _load_rules(self) -> None:
        if not self.config_path.exists():
            return

        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise RuleConfigError(f"Cannot read rules from {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise RuleConfigError(f"Rules file {self.config_path} must contain a mapping")

        if is_legacy_panel(data):
            result = migrate_legacy_panel(data)
            for warning in result.warnings:
                logger.warning(f"{self.config_path}: {warning}")
            if not result.success:
                raise RuleConfigError(f"Cannot migrate legacy rules in {self.config_path}")
            for rule in result.rules:
                self._rules[rule.id] = rule
            return

        for rule_data in data.get("rules") or []:
            try:
                rule = Rule.model_validate(rule_data)
            except ValidationError as e:
                logger.warning(f"Skipping invalid rule in {self.config_path}: {e}")
                continue
            if rule.id in self._rules:
                logger.warning(f"Duplicate rule id '{rule.id}' in {self.config_path}, keeping the last one")
            self._rules[rule.id] = rule

        logger.info(f"Loaded {len(self._rules)} rules from {self.config_path}")

    def list_rules(self) -> list[Rule]:
        self._ensure_loaded()
        return list(self._rules.values())

    def get_rule(self, rule_id: str) -> Rule | None:
        self._ensure_loaded()
        return self._rules.get(rule_id)

    def save_rule(self, rule: Rule) -> None:
        self._ensure_loaded()
        self._rules[rule.id] = rule
        self._save_to_file()

    def delete_rule(self, rule_id: str) -> bool:
        self._ensure_loaded()
        if rule_id in self._rules:
            del self._rules[rule_id]
            self._save_to_file()
            return True
        return False

    def _save_to_file(self) -> None:
        rules_data = [
            r.model_dump(mode="json", by_alias=True)
            for r in self._rules.values()
        ]

        with open(self.config_path, "w") as f:
            yaml.safe_dump({"rules": rules_data}, f, default_flow_style=False, sort_keys=False)
