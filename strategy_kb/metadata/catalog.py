"""Static schema catalog and data lineage for the Metadata Registry.

Declarative metadata only: nothing here is derived from live data.
"""

from __future__ import annotations

from strategy_kb.models.common import EntityKind
from strategy_kb.models.metadata import DataLineage, DataSourceType, SchemaField


def _f(name: str, type_: str, required: bool, description: str) -> SchemaField:
    return SchemaField(name=name, type=type_, required=required, description=description)


_ID = _f("id", "string", True, "Unique identifier")
_CREATED = _f("created_at", "date", True, "Creation timestamp")
_UPDATED = _f("updated_at", "date", True, "Last update timestamp")

# ---------------------------------------------------------------------------
# Entity groups (DATABASE sources)
# ---------------------------------------------------------------------------

_ENTITY_SCHEMAS: dict[str, list[SchemaField]] = {
    "megatrends": [
        _ID,
        _f("name", "string", True, "Megatrend name"),
        _f("description", "string", True, "Detailed description"),
        _f("category", "string", True, "Category classification"),
        _f("impact", "enum", True, "Impact level (LOW/MEDIUM/HIGH/CRITICAL)"),
        _f("timeframe", "string", True, "Expected timeframe"),
        _f("confidence", "number", True, "Confidence score (0-1)"),
        _f("sources", "array", False, "Source references"),
        _f("keywords", "array", False, "Related keywords"),
        _CREATED,
        _UPDATED,
    ],
    "value_templates": [
        _ID,
        _f("name", "string", True, "Template name"),
        _f("description", "string", True, "Template description"),
        _f("category", "enum", True, "Value category"),
        _f("target_segment", "string", True, "Target customer segment"),
        _f("value_proposition", "string", True, "Value proposition statement"),
        _f("key_benefits", "array", True, "Key benefits list"),
        _f("use_cases", "array", False, "Use cases"),
        _f("success_metrics", "array", False, "Success metrics"),
        _CREATED,
        _UPDATED,
    ],
    "hidden_needs": [
        _ID,
        _f("surface_need", "string", True, "Surface-level need"),
        _f("hidden_need", "string", True, "Underlying hidden need"),
        _f("root_cause", "string", True, "Root cause analysis"),
        _f("customer_segment", "string", True, "Customer segment"),
        _f("emotional_driver", "string", False, "Emotional driver"),
        _f("functional_driver", "string", False, "Functional driver"),
        _f("social_driver", "string", False, "Social driver"),
        _f("validation_level", "enum", True, "Validation level"),
        _f("evidence", "array", False, "Supporting evidence"),
        _CREATED,
        _UPDATED,
    ],
    "success_cases": [
        _ID,
        _f("title", "string", True, "Case title"),
        _f("description", "string", True, "Case summary"),
        _f("industry", "string", True, "Industry"),
        _f("company_size", "string", True, "Company size band"),
        _f("challenge", "string", True, "Challenge faced"),
        _f("solution", "string", True, "Solution applied"),
        _f("results", "string", True, "Results achieved"),
        _f("key_factors", "array", True, "Key success factors"),
        _f("lessons_learned", "array", False, "Lessons learned"),
        _f("metrics", "object", False, "Outcome metrics"),
        _CREATED,
        _UPDATED,
    ],
    "seeds": [
        _ID,
        _f("name", "string", True, "Seed name"),
        _f("description", "string", True, "Seed description"),
        _f("type", "enum", True, "Seed type"),
        _f("maturity_level", "enum", True, "Maturity level"),
        _f("potential_markets", "array", True, "Potential markets"),
        _f("required_resources", "array", False, "Required resources"),
        _f("risks", "array", True, "Known risks"),
        _f("time_to_market", "string", False, "Expected time to market"),
        _f("estimated_investment", "string", False, "Estimated investment"),
        _CREATED,
        _UPDATED,
    ],
    "partners": [
        _ID,
        _f("name", "string", True, "Partner name"),
        _f("description", "string", False, "Partner description"),
        _f("type", "enum", True, "Partner type"),
        _f("industry", "array", True, "Industries served"),
        _f("capabilities", "array", True, "Partner capabilities"),
        _f("relationship_status", "enum", True, "Relationship status"),
        _CREATED,
        _UPDATED,
    ],
    "short_term_trends": [
        _ID,
        _f("name", "string", True, "Trend name"),
        _f("description", "string", True, "Trend description"),
        _f("category", "string", True, "Category classification"),
        _f("current_phase", "enum", True, "Lifecycle phase"),
        _f("relevance", "number", True, "Relevance score (0-1)"),
        _f("megatrend_id", "string", False, "Parent megatrend reference"),
        _f("sources", "array", False, "Source references"),
        _CREATED,
        _UPDATED,
    ],
    "competitors": [
        _ID,
        _f("name", "string", True, "Competitor name"),
        _f("description", "string", False, "Competitor description"),
        _f("industry", "array", True, "Industries"),
        _f("market_position", "string", False, "Market position"),
        _f("strengths", "array", True, "Strengths"),
        _f("weaknesses", "array", True, "Weaknesses"),
        _f("products", "array", True, "Products"),
        _CREATED,
        _UPDATED,
    ],
}

# ---------------------------------------------------------------------------
# Catalog by source kind
# ---------------------------------------------------------------------------

SCHEMA_CATALOG: dict[DataSourceType, dict[str, list[SchemaField]]] = {
    DataSourceType.DATABASE: _ENTITY_SCHEMAS,
    DataSourceType.API: {
        "external_data": [
            _f("endpoint", "string", True, "API endpoint"),
            _f("method", "string", True, "HTTP method"),
            _f("headers", "object", False, "Request headers"),
            _f("response_format", "string", True, "Response format"),
        ],
    },
    DataSourceType.FILE: {
        "file_data": [
            _f("path", "string", True, "File path"),
            _f("format", "string", True, "File format"),
            _f("encoding", "string", False, "File encoding"),
        ],
    },
    DataSourceType.MANUAL: {
        "manual_entry": [
            _f("entered_by", "string", True, "User who entered data"),
            _f("entered_at", "date", True, "Entry timestamp"),
            _f("verified", "boolean", False, "Verification status"),
        ],
    },
    DataSourceType.EXTERNAL_SERVICE: {
        "service_data": [
            _f("service_id", "string", True, "External service ID"),
            _f("credentials", "object", True, "Service credentials"),
            _f("sync_interval", "string", False, "Sync interval"),
        ],
    },
}

LINEAGE_CATALOG: dict[EntityKind, list[DataLineage]] = {
    EntityKind.MEGATREND: [
        DataLineage(
            source_id="external-research",
            source_name="External Research Sources",
            transformations=["Extract", "Validate", "Enrich with AI analysis"],
            target_id="megatrend-db",
            target_name="Megatrend Database",
        ),
    ],
    EntityKind.VALUE_TEMPLATE: [
        DataLineage(
            source_id="success-cases",
            source_name="Success Cases Database",
            transformations=[
                "Analyze patterns",
                "Extract value propositions",
                "Template generation",
            ],
            target_id="value-template-db",
            target_name="Value Template Database",
        ),
    ],
    EntityKind.HIDDEN_NEED: [
        DataLineage(
            source_id="customer-research",
            source_name="Customer Research Data",
            transformations=[
                "Interview analysis",
                "Need extraction",
                "Root cause analysis",
            ],
            target_id="hidden-need-db",
            target_name="Hidden Needs Database",
        ),
    ],
}


def predefined_schema(kind: DataSourceType) -> dict[str, list[SchemaField]]:
    """Copy of the catalog entry for *kind*; empty for unknown kinds."""
    return {
        group: list(fields)
        for group, fields in SCHEMA_CATALOG.get(kind, {}).items()
    }


def lineage_for(entity_kind: EntityKind) -> list[DataLineage]:
    return list(LINEAGE_CATALOG.get(entity_kind, []))
