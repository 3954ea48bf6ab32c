"""Static intervention catalog keyed by risk tier.

Selection is a pure lookup. The selector keeps no memory of what was
suggested before; tier changes come only from re-running the aggregator on
new data.
"""

from __future__ import annotations

from collections.abc import Iterable

from mindwatch.domains.behavioral.domain_logic.risk_models import (
    EmergencyResource,
    InterventionStrategy,
    RiskTier,
)

INTERVENTION_CATALOG: dict[RiskTier, tuple[InterventionStrategy, ...]] = {
    RiskTier.LOW: (
        InterventionStrategy(
            title="Mindfulness Check-in",
            description="Take 5 minutes for deep breathing and mindfulness",
            action_label="Start Guided Session",
        ),
        InterventionStrategy(
            title="Social Connection",
            description="Reach out to a friend or family member",
            action_label="View Contacts",
        ),
        InterventionStrategy(
            title="Physical Activity",
            description="Take a short walk or do light exercise",
            action_label="Start Activity",
        ),
    ),
    RiskTier.MEDIUM: (
        InterventionStrategy(
            title="Professional Check-in",
            description="Schedule appointment with your therapist/counselor",
            action_label="Schedule Now",
        ),
        InterventionStrategy(
            title="Crisis Support Chat",
            description="Connect with trained crisis counselor online",
            action_label="Start Chat",
        ),
        InterventionStrategy(
            title="Safety Planning",
            description="Review and update your personalized safety plan",
            action_label="Open Safety Plan",
        ),
        InterventionStrategy(
            title="Support Network Alert",
            description="Notify trusted contacts about your current state",
            action_label="Send Alerts",
        ),
    ),
    RiskTier.HIGH: (
        InterventionStrategy(
            title="Immediate Professional Help",
            description="Contact emergency mental health services now",
            action_label="Call 988",
            urgent=True,
            requires_emergency_resources=True,
        ),
        InterventionStrategy(
            title="Crisis Center Locator",
            description="Find nearest mental health crisis center",
            action_label="Find Centers",
            urgent=True,
            requires_emergency_resources=True,
        ),
        InterventionStrategy(
            title="Emergency Contact",
            description="Call your emergency contact person immediately",
            action_label="Call Contact",
            urgent=True,
            requires_emergency_resources=True,
        ),
    ),
}

EMERGENCY_RESOURCES: tuple[EmergencyResource, ...] = (
    EmergencyResource(name="National Suicide Prevention Lifeline", contact="988"),
    EmergencyResource(name="Crisis Text Line", contact="Text HOME to 741741"),
    EmergencyResource(name="Emergency Services", contact="911"),
    EmergencyResource(name="SAMHSA National Helpline", contact="1-800-662-4357"),
)


def select_interventions(tier: RiskTier | str) -> list[InterventionStrategy]:
    """Ordered strategies for a risk tier.

    Raises:
        ValueError: If ``tier`` is not a known risk tier.
    """
    return list(INTERVENTION_CATALOG[RiskTier(tier)])


def emergency_resources_for(strategies: Iterable[InterventionStrategy]) -> list[EmergencyResource]:
    """Crisis resources to show alongside ``strategies`` (empty unless needed)."""
    if any(s.requires_emergency_resources for s in strategies):
        return list(EMERGENCY_RESOURCES)
    return []


def find_strategy(title: str) -> tuple[RiskTier, InterventionStrategy] | None:
    """Look up a catalog strategy by title (case-insensitive)."""
    wanted = title.strip().lower()
    for tier, strategies in INTERVENTION_CATALOG.items():
        for strategy in strategies:
            if strategy.title.lower() == wanted:
                return tier, strategy
    return None
