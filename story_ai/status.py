"""Player status summaries for the live view."""

from story_ai.models import GameState, Item

# (minimum health, label, color)
HEALTH_LEVELS = [
    (80, "Healthy", "#a6e22e"),
    (50, "Injured", "#e6db74"),
    (20, "Wounded", "#fd971f"),
    (1, "Critical", "#f92672"),
]
DECEASED = ("Deceased", "#75715e")


def health_status(health: int) -> tuple[str, str]:
    """Return (label, color) for a health value."""
    for minimum, label, color in HEALTH_LEVELS:
        if health >= minimum:
            return label, color
    return DECEASED


def format_properties(properties: list[str]) -> str:
    return ", ".join(properties)


def status_payload(state: GameState | None) -> dict:
    if state is None:
        return {}
    player = state.player_status
    label, color = health_status(player.health)
    return {
        "health": player.health,
        "stamina": player.stamina,
        "conditions": list(player.conditions),
        "health_label": label,
        "health_color": color,
    }


def inventory_payload(items: list[Item]) -> list[dict]:
    return [
        {
            "name": item.name,
            "description": item.description,
            "properties": format_properties(item.properties),
            "state": item.state,
        }
        for item in items
    ]
