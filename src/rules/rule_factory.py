# src/rules/rule_factory.py - v1
"""Factory for the static rule catalogue.

Weights come from DetectionConfig; rules named in ``disabled_rules`` are
built with ``enabled=False`` so they still appear in engine stats.
"""

from __future__ import annotations

import importlib
import logging

from postguard.config.detection import DetectionConfig
from postguard.rules.base_rule import BaseRule

logger = logging.getLogger(__name__)

# Registry of rule name -> class path (lazy import). Order is catalogue order.
_RULE_REGISTRY: dict[str, str] = {
    "profanity": "postguard.rules.profanity_rule.ProfanityRule",
    "repetitive_content": "postguard.rules.repetitive_content_rule.RepetitiveContentRule",
    "promotional": "postguard.rules.promotional_rule.PromotionalRule",
    "suspicious_links": "postguard.rules.suspicious_links_rule.SuspiciousLinksRule",
    "caps_abuse": "postguard.rules.caps_abuse_rule.CapsAbuseRule",
    "fake_engagement": "postguard.rules.fake_engagement_rule.FakeEngagementRule",
}


def available_rules() -> list[str]:
    """Names of all registered rules, in catalogue order."""
    return list(_RULE_REGISTRY)


def create_default_rules(config: DetectionConfig | None = None) -> list[BaseRule]:
    """Instantiate every registered rule.

    Args:
        config: Detection configuration. Defaults to DetectionConfig().

    Returns:
        One rule instance per registered name.

    Raises:
        ConfigurationError: If a rule's kind has no positive weight.
    """
    config = config or DetectionConfig()
    rules = [_build(name, config) for name in _RULE_REGISTRY]
    logger.debug(
        "Created %d rules (%d disabled)",
        len(rules), sum(1 for r in rules if not r.enabled),
    )
    return rules


def get_rule(name: str, config: DetectionConfig | None = None) -> BaseRule | None:
    """Instantiate a single rule by name, or return None if unknown."""
    if name not in _RULE_REGISTRY:
        return None
    return _build(name, config or DetectionConfig())


def _build(name: str, config: DetectionConfig) -> BaseRule:
    rule_cls = _import_class(_RULE_REGISTRY[name])
    return rule_cls(
        weight=config.weight_for(rule_cls.kind),
        limits=config.limits,
        enabled=name not in config.disabled_rules,
    )


def _import_class(class_path: str) -> type[BaseRule]:
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
