"""
Composition root - wires settings, rule store and a rendering surface into a RefreshCycle.
"""

import logging

from flowrules.adapters.config.settings_loader import load_settings
from flowrules.adapters.config.yaml_store import YamlRuleStore
from flowrules.core.ports.render_surface import RenderSurface
from flowrules.core.services.refresh_cycle import RefreshCycle
from flowrules.core.services.rule_evaluator import HostVariableResolver, identity

logger = logging.getLogger(__name__)


def create_refresh_cycle(
    surface: RenderSurface,
    config_path: str | None = None,
    resolve_host_variable: HostVariableResolver = identity,
) -> RefreshCycle:
    """
    Build a RefreshCycle for one surface.

    Args:
        surface: Diagram to drive
        config_path: Path to config.yaml (see load_settings)
        resolve_host_variable: Host-level template substitution (dashboard variables ...)
    """
    # Configuration (Load from YAML with Env Overrides)
    settings = load_settings(config_path)

    logging.basicConfig(level=settings.log_level)

    store = YamlRuleStore(settings.rules_file)
    rules = store.list_rules()
    logger.info(f"Starting refresh cycle with {len(rules)} rules from {settings.rules_file}")

    return RefreshCycle(surface, rules, settings, resolve_host_variable)
