"""Unit tests for the free text to portal value rules."""
import pytest

from src.core.field_mapping import (
    GENERIC_HONORIFIC,
    SALES_LINE_FORKLIFT,
    SALES_LINE_SERVICE,
    SALES_LINE_SOLUTIONS,
    classify_sales_line,
    contact_channel_variants,
    greeting_for,
    honorific_for,
    phone_digits,
    resolve_agent_code,
    resolve_client_type,
    split_name,
)

CLIENT_TYPES = {"Nuevo": "1", "Antiguo": "2", "Fidelizado": "3", "Recuperado": "4"}
AGENTS = {"CAROLINA MARTINEZ": "CMARTINEZ", "JORGE RAMIREZ": "JRAMIREZ"}
HONORIFICS = {"male": ["Juan", "Andrés"], "female": ["María", "Ana"]}


class TestSplitName:
    @pytest.mark.parametrize("full_name, expected", [
        ("JUAN", ("JUAN", "")),
        ("JUAN PEREZ", ("JUAN", "PEREZ")),
        ("JUAN PEREZ GOMEZ", ("JUAN", "PEREZ GOMEZ")),
        ("JUAN CARLOS PEREZ GOMEZ", ("JUAN CARLOS", "PEREZ GOMEZ")),
        ("ANA MARIA DE LA TORRE", ("ANA MARIA", "DE LA TORRE")),
    ])
    def test_splits_by_word_count(self, full_name, expected):
        assert split_name(full_name) == expected

    def test_collapses_extra_whitespace(self):
        assert split_name("  JUAN   PEREZ ") == ("JUAN", "PEREZ")

    def test_empty_name(self):
        assert split_name("") == ("", "")
        assert split_name(None) == ("", "")


class TestClassifySalesLine:
    @pytest.mark.parametrize("label, expected", [
        ("Servicio técnico montacargas", SALES_LINE_FORKLIFT),
        ("Alquiler de equipos", SALES_LINE_FORKLIFT),
        ("MONTACARGAS", SALES_LINE_FORKLIFT),
        ("Mantenimiento preventivo", SALES_LINE_SERVICE),
        ("Venta de repuestos", SALES_LINE_SOLUTIONS),
        ("Otro", SALES_LINE_SOLUTIONS),
        ("", SALES_LINE_SOLUTIONS),
    ])
    def test_classifies(self, label, expected):
        assert classify_sales_line(label) == expected


class TestResolveClientType:
    def test_known_category(self):
        assert resolve_client_type("Fidelizado", CLIENT_TYPES, "1") == "3"

    def test_case_and_accent_insensitive(self):
        assert resolve_client_type("  recuperado ", CLIENT_TYPES, "1") == "4"

    def test_unknown_falls_back_to_default(self):
        assert resolve_client_type("VIP", CLIENT_TYPES, "1") == "1"
        assert resolve_client_type("", CLIENT_TYPES, "1") == "1"


class TestResolveAgentCode:
    def test_exact_normalized_lookup(self):
        assert resolve_agent_code("carolina martínez", AGENTS) == "CMARTINEZ"

    def test_fuzzy_containment(self):
        assert resolve_agent_code("RAMIREZ", AGENTS) == "JRAMIREZ"

    def test_no_positive_score_returns_none(self):
        assert resolve_agent_code("PEDRO LOPEZ", AGENTS) is None

    def test_empty_inputs(self):
        assert resolve_agent_code("", AGENTS) is None
        assert resolve_agent_code("JORGE RAMIREZ", {}) is None


class TestContactChannelVariants:
    def test_variant_order_without_duplicates(self):
        assert contact_channel_variants("WhatsApp") == ["WhatsApp", "WHATSAPP", "whatsapp", "Whatsapp"]

    def test_deduplicates(self):
        assert contact_channel_variants("WEB") == ["WEB", "web", "Web"]

    def test_empty(self):
        assert contact_channel_variants("  ") == []


class TestHonorifics:
    def test_male_and_female(self):
        assert honorific_for("JUAN", HONORIFICS) == "Sr."
        assert honorific_for("maria", HONORIFICS) == "Sra."

    def test_unknown_name_is_generic(self):
        assert honorific_for("ALEX", HONORIFICS) == GENERIC_HONORIFIC

    def test_name_in_both_lists_is_generic(self):
        both = {"male": ["Andrea"], "female": ["Andrea"]}
        assert honorific_for("ANDREA", both) == GENERIC_HONORIFIC

    def test_greeting_uses_title_case_first_name(self):
        assert greeting_for("JUAN CARLOS PEREZ", HONORIFICS) == "Sr. Juan"
        assert greeting_for("ANDRÉS LOPEZ", HONORIFICS) == "Sr. Andrés"

    def test_greeting_without_name(self):
        assert greeting_for("", HONORIFICS) == GENERIC_HONORIFIC


class TestPhoneDigits:
    def test_strips_formatting(self):
        assert phone_digits("+57 (300) 123-4567") == "573001234567"

    def test_prefixes_country_code_for_national_numbers(self):
        assert phone_digits("300 123 4567", "57") == "573001234567"

    def test_leaves_international_numbers_alone(self):
        assert phone_digits("573001234567", "57") == "573001234567"

    def test_empty(self):
        assert phone_digits(None, "57") == ""
