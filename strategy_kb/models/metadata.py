"""Data source metadata models for the Metadata Registry."""

from enum import StrEnum
from typing import Any

from pydantic import Field

from strategy_kb.models.common import (
    EntityKind,
    KBBase,
    KBRecord,
    UTCTimestamp,
    UUIDv7,
)


class DataSourceType(StrEnum):
    """Where a registered data source physically lives."""

    DATABASE = "DATABASE"
    API = "API"
    FILE = "FILE"
    MANUAL = "MANUAL"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"


class SyncStatus(StrEnum):
    IDLE = "IDLE"
    SYNCING = "SYNCING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class DataSourceConfig(KBBase):
    """Registration input for a data source."""

    name: str
    kind: DataSourceType
    entity_kind: EntityKind | None = None
    connection_info: dict[str, Any] = Field(default_factory=dict)
    sync_frequency: str | None = None


class DataSourceConfigUpdate(KBBase):
    name: str | None = None
    kind: DataSourceType | None = None
    entity_kind: EntityKind | None = None
    connection_info: dict[str, Any] | None = None
    sync_frequency: str | None = None


class DataSourceMetadata(KBRecord):
    """A registered data source, independent of entity content.

    ``source_schema`` (serialized as ``schema``) carries the source's
    connection/config description.
    """

    source_id: UUIDv7
    name: str
    kind: DataSourceType
    entity_kind: EntityKind | None = None
    sync_frequency: str | None = None
    last_sync_at: UTCTimestamp | None = None
    sync_status: SyncStatus = SyncStatus.IDLE
    source_schema: dict[str, Any] = Field(default_factory=dict, alias="schema")


class SchemaField(KBBase, frozen=True):
    name: str
    type: str
    required: bool
    description: str | None = None


class DataLineage(KBBase, frozen=True):
    source_id: str
    source_name: str
    transformations: list[str] = Field(default_factory=list)
    target_id: str | None = None
    target_name: str | None = None


class SyncRecency(KBBase):
    """Recency buckets: <24h, <7 days (and not <24h), never synced."""

    synced_24h: int = 0
    synced_7d: int = 0
    never_synced: int = 0


class SourceStatistics(KBBase):
    total_sources: int = 0
    by_kind: dict[DataSourceType, int] = Field(
        default_factory=lambda: {kind: 0 for kind in DataSourceType},
    )
    by_status: dict[SyncStatus, int] = Field(
        default_factory=lambda: {status: 0 for status in SyncStatus},
    )
    last_sync_overview: SyncRecency = Field(default_factory=SyncRecency)
