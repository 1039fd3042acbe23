"""Deterministic impact summary and recommendation templates."""

from __future__ import annotations

from ewaste_impact.models import ImpactFigures, Narrative

TEMPLATE_SOURCE = "template"

_CONDITION_CLOSINGS = {
    "good": "The device is in good condition, maximizing material recovery potential.",
    "fair": "The device's condition allows for moderate material recovery.",
    "poor": "Due to poor condition, material recovery will be limited.",
}


def build_impact_summary(figures: ImpactFigures, condition: str) -> str:
    """Compose the prose summary for ``figures``.

    Sentences are emitted in a fixed order: footprint, remaining life,
    recoverable materials, material value (only when positive), condition.
    """

    materials = figures.raw_materials
    remaining = figures.device_info.remaining_lifespan_years
    parts = [
        f"Your {figures.device_name.lower()} has an estimated carbon footprint "
        f"of {figures.unrounded_co2eq:.1f} kg CO2e."
    ]
    if remaining > 0:
        parts.append(
            f"It has approximately {remaining:.1f} years of useful life remaining."
        )
    else:
        parts.append("This device has exceeded its typical lifespan.")
    parts.append(
        f"If properly recycled, it could recover {materials.total():.1f}g of "
        f"valuable materials, including {materials.gold:.3f}g of gold and "
        f"{materials.copper:.1f}g of copper."
    )
    if figures.unrounded_material_value_usd > 0:
        parts.append(
            "The estimated material value is "
            f"${figures.unrounded_material_value_usd:.2f}."
        )
    parts.append(_CONDITION_CLOSINGS[condition])
    return " ".join(parts)


def build_recommendations(
    remaining_lifespan_years: float, condition: str, co2eq: float
) -> list[str]:
    """Return disposal recommendations ordered by priority."""

    recommendations: list[str] = []
    if remaining_lifespan_years > 2:
        recommendations.append(
            "Consider extending the device's life through repairs or upgrades."
        )
        recommendations.append(
            "Donate to schools, libraries, or non-profits if still functional."
        )
    elif remaining_lifespan_years > 0:
        recommendations.append("Plan for responsible disposal within the next year.")
        recommendations.append("Back up all data before disposal.")
    else:
        recommendations.append("This device should be recycled immediately.")
        recommendations.append("Remove all personal data before recycling.")

    if condition == "good":
        recommendations.append("The device has high resale or donation value.")
    elif condition == "poor":
        recommendations.append(
            "Professional recycling is recommended for maximum material recovery."
        )

    if co2eq > 200:
        recommendations.append(
            "Consider energy-efficient alternatives for your next device."
        )

    recommendations.append("Find certified e-waste recyclers in your area.")
    recommendations.append("Check if the manufacturer offers take-back programs.")
    return recommendations


def template_narrative(figures: ImpactFigures, condition: str) -> Narrative:
    """Build the deterministic narrative for ``figures``."""

    return Narrative(
        impact_summary=build_impact_summary(figures, condition),
        recommendations=tuple(
            build_recommendations(
                figures.device_info.remaining_lifespan_years,
                condition,
                figures.unrounded_co2eq,
            )
        ),
        source=TEMPLATE_SOURCE,
    )
