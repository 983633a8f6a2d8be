"""Rules that turn WorkItem free text into the values the portal form expects."""
import re

from src.core.matching import best_match, normalize

SALES_LINE_FORKLIFT = "MONT"
SALES_LINE_SERVICE = "SERV"
SALES_LINE_SOLUTIONS = "SOLU"

GENERIC_HONORIFIC = "Sr(a)."


def split_name(full_name: str | None) -> tuple[str, str]:
    """Split a contact name into (first, last) by word count.

    1 word → name only; 2 → first/last; 3 → first + two-word last;
    4 or more → first two words + the rest as last name.
    """
    words = (full_name or "").split()
    if not words:
        return "", ""
    if len(words) == 1:
        return words[0], ""
    if len(words) == 2:
        return words[0], words[1]
    if len(words) == 3:
        return words[0], " ".join(words[1:])
    return " ".join(words[:2]), " ".join(words[2:])


def classify_sales_line(label: str | None) -> str:
    text = normalize(label)
    if "SERVICIO" in text and "MONTACARGAS" in text:
        return SALES_LINE_FORKLIFT
    if "MONTACARGAS" in text or "ALQUILER" in text:
        return SALES_LINE_FORKLIFT
    if "MANTENIMIENTO" in text:
        return SALES_LINE_SERVICE
    if "VENTA" in text:
        return SALES_LINE_SOLUTIONS
    return SALES_LINE_SOLUTIONS


def resolve_client_type(label: str | None, codes: dict[str, str], default: str) -> str:
    """Map a client-type category onto its portal code, falling back to `default`."""
    wanted = normalize(label)
    if not wanted:
        return default
    for name, code in codes.items():
        if normalize(name) == wanted:
            return code
    return default


def resolve_agent_code(name: str | None, agent_codes: dict[str, str]) -> str | None:
    """Exact normalized lookup first, then a fuzzy pick over the map keys.

    Returns None when nothing scores above zero.
    """
    wanted = normalize(name)
    if not wanted or not agent_codes:
        return None
    for agent, code in agent_codes.items():
        if normalize(agent) == wanted:
            return code
    agent = best_match(wanted, agent_codes.keys(), require_positive=True)
    return agent_codes[agent] if agent is not None else None


def contact_channel_variants(raw: str | None) -> list[str]:
    """Ordered raw values to try against a select's option values."""
    value = (raw or "").strip()
    if not value:
        return []
    variants = []
    for v in (value, value.upper(), value.lower(), value.title()):
        if v not in variants:
            variants.append(v)
    return variants


def honorific_for(first_name: str | None, honorifics: dict[str, list[str]]) -> str:
    """Pick "Sr." / "Sra." from the configured first-name lists, generic when unsure."""
    wanted = normalize(first_name)
    if not wanted:
        return GENERIC_HONORIFIC
    is_male = wanted in {normalize(n) for n in honorifics.get("male", [])}
    is_female = wanted in {normalize(n) for n in honorifics.get("female", [])}
    if is_male and not is_female:
        return "Sr."
    if is_female and not is_male:
        return "Sra."
    return GENERIC_HONORIFIC


def greeting_for(contact_name: str | None, honorifics: dict[str, list[str]]) -> str:
    words = (contact_name or "").split()
    if not words:
        return GENERIC_HONORIFIC
    first = words[0]
    return f"{honorific_for(first, honorifics)} {first.title()}"


def phone_digits(phone: str | None, country_code: str = "") -> str:
    """Digits only; a bare 10-digit national number gets `country_code` prefixed."""
    digits = re.sub(r"\D", "", phone or "")
    if country_code and len(digits) == 10:
        return f"{country_code}{digits}"
    return digits
