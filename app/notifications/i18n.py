_MESSAGES: dict[str, dict[str, str]] = {
    "id": {
        "greeting": "Halo, {name}",
        "preamble": "Website berikut mengalami perubahan status:",
        "action": "Lihat Detail",
        "fallback_name": "Pengguna",
    },
    "en": {
        "greeting": "Hello, {name}",
        "preamble": "The following website changed status:",
        "action": "View Details",
        "fallback_name": "there",
    },
}

DEFAULT_LOCALE = "id"


def translate(key: str, locale: str | None = None, **params) -> str:
    table = _MESSAGES.get((locale or DEFAULT_LOCALE).lower(), _MESSAGES[DEFAULT_LOCALE])
    template = table.get(key) or _MESSAGES[DEFAULT_LOCALE].get(key, key)
    return template.format(**params) if params else template
