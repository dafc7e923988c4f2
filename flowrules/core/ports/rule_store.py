"""
RuleStore Port - Interface for loading and persisting rule configurations.

Implementations can be file-based (YAML) or backed by the host's own
dashboard storage.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowrules.core.domain.rule import Rule


class RuleStore(ABC):
    """
    Abstract interface for rule storage.

    Rule order is significant and must be preserved by implementations.
    """

    @abstractmethod
    def list_rules(self) -> list["Rule"]:
        """
        List all configured rules.

        Returns:
            Rules in configured order
        """
        ...

    @abstractmethod
    def get_rule(self, rule_id: str) -> "Rule | None":
        """
        Get a specific rule by id.

        Args:
            rule_id: Rule id

        Returns:
            Rule if found, None otherwise
        """
        ...

    @abstractmethod
    def save_rule(self, rule: "Rule") -> None:
        """
        Save or update a rule. New rules are appended, existing ones keep their position.

        Args:
            rule: Rule to save
        """
        ...

    @abstractmethod
    def delete_rule(self, rule_id: str) -> bool:
        """
        Delete a rule by id.

        Args:
            rule_id: Rule id

        Returns:
            True if deleted, False if not found
        """
        ...
