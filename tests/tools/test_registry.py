import logging

import pytest

from tests.tool_harness import (
    CreateInvoiceInput,
    CreateInvoiceInputWithCurrency,
    CreateInvoiceInputWithMemo,
    CreateInvoiceInputWithoutAmount,
    make_entry,
)
from tools.registry import ToolRegistry
from tools.spec import RiskLevel, ToolCategory, ToolStatus, ToolVersion


def test_register_then_get_round_trips(registry):
    registry.register(make_entry())

    entry = registry.get("create_invoice")

    assert entry is not None
    assert entry.name == "create_invoice"
    assert entry.category is ToolCategory.WRITE
    assert entry.input_schema is CreateInvoiceInput
    assert entry.version_string == "1.0.0"


def test_get_unknown_tool_returns_none(registry):
    assert registry.get("void_invoice") is None
    assert "void_invoice" not in registry


def test_patch_release_with_optional_field_is_compatible(registry, caplog):
    registry.register(make_entry(version="1.0.0"))
    with caplog.at_level(logging.WARNING, logger="tools.registry"):
        warnings = registry.register(make_entry(version="1.0.1", input_schema=CreateInvoiceInputWithMemo))

    assert warnings == []
    assert "Breaking changes" not in caplog.text
    assert registry.get_version_history("create_invoice") == [ToolVersion(1, 0, 0)]
    assert registry.get("create_invoice").version_string == "1.0.1"


def test_required_field_without_major_bump_warns(registry, caplog):
    registry.register(make_entry(version="1.0.0"))
    with caplog.at_level(logging.WARNING, logger="tools.registry"):
        warnings = registry.register(make_entry(version="1.1.0", input_schema=CreateInvoiceInputWithCurrency))

    assert warnings == ["added required field: currency"]
    assert "Breaking changes detected without major version bump" in caplog.text
    assert registry.get("create_invoice").input_schema is CreateInvoiceInputWithCurrency


def test_required_field_with_major_bump_is_accepted(registry):
    registry.register(make_entry(version="1.0.0"))
    warnings = registry.register(make_entry(version="2.0.0", input_schema=CreateInvoiceInputWithCurrency))
    assert warnings == []


def test_removed_field_is_breaking(registry):
    registry.register(make_entry(version="1.0.0"))
    warnings = registry.register(make_entry(version="1.0.1", input_schema=CreateInvoiceInputWithoutAmount))
    assert warnings == ["removed field: amount"]


def test_version_history_accumulates(registry):
    for version in ("1.0.0", "1.1.0", "1.2.0"):
        registry.register(make_entry(version=version))
    assert [str(v) for v in registry.get_version_history("create_invoice")] == ["1.0.0", "1.1.0"]
    assert registry.get_version_history("unknown") == []


def test_counters_survive_re_registration(registry):
    registry.register(make_entry())
    entry = registry.get("create_invoice")
    registry.record_usage(entry)
    registry.record_usage(entry)
    registry.record_error(entry)

    registry.register(make_entry(version="1.0.1"))

    updated = registry.get("create_invoice")
    assert updated is not entry
    assert (updated.usage_count, updated.error_count) == (2, 1)


def test_deprecated_tool_is_returned_with_warning(registry, caplog):
    registry.register(make_entry())
    registry.deprecate("create_invoice", replaced_by="create_invoice_v2")

    with caplog.at_level(logging.WARNING, logger="tools.registry"):
        entry = registry.get("create_invoice")

    assert entry is not None
    assert entry.status is ToolStatus.DEPRECATED
    assert entry.replaced_by == "create_invoice_v2"
    assert entry.deprecation_notice == 'This tool is deprecated. Use "create_invoice_v2" instead.'
    assert 'Use "create_invoice_v2" instead' in caplog.text
    assert registry.get_deprecated() == [entry]


def test_deprecate_with_custom_notice(registry):
    registry.register(make_entry())
    registry.deprecate("create_invoice", notice="Use the quotation flow")
    assert registry.get("create_invoice").deprecation_notice == "Use the quotation flow"


def test_retired_tool_is_hidden_but_counted(registry, caplog):
    registry.register(make_entry())
    before = registry.get("create_invoice").last_modified_at
    registry.retire("create_invoice")

    with caplog.at_level(logging.ERROR, logger="tools.registry"):
        assert registry.get("create_invoice") is None
    assert "is retired" in caplog.text

    stats = registry.get_stats()
    assert stats.total_tools == 1
    assert stats.by_status[ToolStatus.RETIRED] == 1
    assert len(registry.get_all()) == 1
    assert registry.get_all()[0].last_modified_at >= before


def test_lifecycle_calls_on_unknown_names_are_noops(registry):
    registry.deprecate("ghost")
    registry.retire("ghost")
    assert len(registry) == 0


def test_stats_aggregate_counts_and_error_rate(registry):
    registry.register(make_entry())
    registry.register(make_entry(name="list_invoices", category=ToolCategory.READ, status=ToolStatus.BETA))
    invoice = registry.get("create_invoice")
    for _ in range(3):
        registry.record_usage(invoice)
    registry.record_usage(registry.get("list_invoices"))
    registry.record_error(invoice)

    stats = registry.get_stats()

    assert stats.total_tools == 2
    assert stats.by_category[ToolCategory.WRITE] == 1
    assert stats.by_category[ToolCategory.READ] == 1
    assert stats.by_category[ToolCategory.MEMORY] == 0
    assert stats.by_status[ToolStatus.BETA] == 1
    assert stats.total_usage == 4
    assert stats.total_errors == 1
    assert stats.error_rate == pytest.approx(25.0)
    assert stats.to_dict()["by_status"]["active"] == 1


def test_stats_error_rate_is_zero_without_usage(registry):
    registry.register(make_entry())
    assert registry.get_stats().error_rate == 0


def test_filters(registry):
    registry.register(make_entry(name="create_invoice"))
    registry.register(make_entry(name="list_invoices", category=ToolCategory.READ, status=ToolStatus.BETA))
    registry.register(make_entry(name="old_report", category=ToolCategory.ANALYSIS))
    registry.deprecate("old_report")

    assert {e.name for e in registry.get_active()} == {"create_invoice", "list_invoices"}
    assert [e.name for e in registry.get_by_category("read")] == ["list_invoices"]
    assert [e.name for e in registry.get_deprecated()] == ["old_report"]


def test_create_tool_helper_applies_defaults():
    registry = ToolRegistry()
    entry = registry.create_tool(
        name="mark_bill_paid",
        version="1.2.3",
        category="write",
        description="Mark a bill as paid",
        input_schema=CreateInvoiceInput,
        execute=lambda args: {"ok": True},
        risk_level="high",
        financial_impact=True,
    )

    assert registry.get("mark_bill_paid") is entry
    assert entry.version == ToolVersion(1, 2, 3)
    assert entry.status is ToolStatus.ACTIVE
    assert entry.risk_level is RiskLevel.HIGH
    assert entry.requires_approval is False
    assert entry.financial_impact is True


def test_registry_accepts_initial_entries():
    registry = ToolRegistry([make_entry(), make_entry(name="list_invoices")])
    assert len(registry) == 2


def test_tool_version_parse_and_order():
    assert ToolVersion.parse("2.10.3") == ToolVersion(2, 10, 3)
    assert str(ToolVersion(1, 0, 1)) == "1.0.1"
    assert ToolVersion(1, 9, 9) < ToolVersion(2, 0, 0)
    assert ToolVersion(1, 0, 10) > ToolVersion(1, 0, 9)
    with pytest.raises(ValueError):
        ToolVersion.parse("v1")


def test_entry_renders_anthropic_definition():
    definition = make_entry().to_anthropic_definition()
    assert definition["name"] == "create_invoice"
    assert set(definition["input_schema"]["properties"]) == {"customer_id", "amount"}
    assert definition["input_schema"]["required"] == ["customer_id", "amount"]


@pytest.mark.parametrize(
    "overrides",
    [
        {
            "input_schema": {
                "type": "object",
                "properties": {"customer_id": {"type": "string"}},
                "required": ["customer_id"],
            }
        },
        {"output_schema": {"type": "object", "properties": {}}},
    ],
)
def test_entry_rejects_json_schema_dicts(registry, overrides):
    with pytest.raises(TypeError, match="must be a pydantic model class"):
        make_entry(name="lookup_customer", **overrides)
    assert "lookup_customer" not in registry


def test_create_tool_rejects_non_model_schema(registry):
    with pytest.raises(TypeError):
        registry.create_tool(
            name="lookup_customer",
            version="1.0.0",
            category="read",
            description="Look up a customer",
            input_schema={"type": "object"},  # type: ignore[arg-type]
            execute=lambda args: None,
        )
    assert len(registry) == 0
