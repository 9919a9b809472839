"""
Stock dashboard catalog. All times are UTC.

Layered underneath the TOML file and ``--set`` overrides by ConfigResolver.
"""

from typing import Any

from tradetime.schedule.news import default_news_templates


def _window(
    id: str, name: str, start: str, end: str, region: str, **extra: Any
) -> dict[str, Any]:
    return {"id": id, "name": name, "start": start, "end": end, "region": region, **extra}


DEFAULT_MACROS: list[dict[str, Any]] = [
    _window("london-1", "London Session 1", "09:33", "10:00", "London"),
    _window("london-2", "London Session 2", "11:03", "11:30", "London"),
    _window("ny-am-1", "NY AM 1", "15:50", "16:10", "New York"),
    _window("ny-am-2", "NY AM 2", "16:50", "17:10", "New York"),
    _window("ny-am-3", "NY AM 3", "17:50", "18:10", "New York"),
    _window("ny-midday", "NY Midday", "18:50", "19:10", "New York"),
    _window("ny-pm", "NY PM", "20:10", "20:40", "New York"),
    _window("ny-closing", "NY Closing", "22:15", "22:45", "New York"),
]

DEFAULT_KILLZONES: list[dict[str, Any]] = [
    _window("london-kz", "London KZ", "06:00", "09:00", "London"),
    _window("newyork-kz", "New York KZ", "14:30", "17:30", "New York"),
]

DEFAULT_MARKET_SESSIONS: list[dict[str, Any]] = [
    _window("premarket", "Pre-Market", "07:00", "09:30", "New York", session_type="premarket"),
    _window("lunch", "Lunch", "18:00", "19:00", "New York", session_type="lunch"),
]

DEFAULT_NEWS_TEMPLATES: list[dict[str, Any]] = [
    {
        "id": t.id,
        "name": t.name,
        "impact": t.impact.value,
        "countdown_minutes": t.countdown_minutes,
        "cooldown_minutes": t.cooldown_minutes,
        "description": t.description,
    }
    for t in default_news_templates()
]

DEFAULT_CONFIG: dict[str, Any] = {
    "timezone": "UTC",
    "display": {
        "show_seconds": False,
        "lookahead_limit": 4,
        "reference_zones": ["UTC", "America/New_York", "Europe/London", "Asia/Tokyo"],
    },
    "macros": DEFAULT_MACROS,
    "killzones": DEFAULT_KILLZONES,
    "market_sessions": DEFAULT_MARKET_SESSIONS,
    "news_templates": DEFAULT_NEWS_TEMPLATES,
    "news_instances": [],
}
