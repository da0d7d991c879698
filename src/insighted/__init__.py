__version__ = "0.1.0"
from .__main__ import cli
from .common import Settings, console, env, normalize_key
from .draft import SchoolDraft
from .errors import (
    EnvironmentRefusal,
    InsightEdError,
    ReferenceDataError,
    SchoolNotFound,
    SyncInProgress,
    TransportError,
    ValidationError,
)
from .hierarchy import LocationHierarchy, load_hierarchy
from .lookup import (
    autofill,
    field_value,
    find_identifier_field,
    find_reference_record,
    load_reference_records,
)
from .outbox import OutboxItem, OutboxStore
from .profiles import ProfileRepository
from .resolver import LocationMatch, resolve_location
from .sync import (
    DeliveryOutcome,
    DeliveryResult,
    ItemStatus,
    OutboxSynchronizer,
    SyncReport,
    sync_all,
)
from .transport import HttpTransport
