from sqlalchemy import MetaData, JSON, Text
from sqlalchemy.dialects.postgresql import JSONB, ARRAY
import enum

# Destination tables owned by this project
metadata = MetaData()

# Legacy tables, read-only; never created against a real source database
source_metadata = MetaData()


# ============================================================================
# COLUMN TYPES
# ============================================================================

# JSON blob columns; Python None is stored as SQL NULL
JsonBlob = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

# Attribute-store values: text[] on the legacy server, JSON elsewhere so all
# producer shapes (bare int, list, braced string, numeric string) survive.
# Lookups cast the column to text rather than rely on this type.
AttributeValueType = ARRAY(Text).with_variant(JSON(), "sqlite")


# ============================================================================
# ENUMS
# ============================================================================

class EntityType(str, enum.Enum):
    """Migrated entity types"""
    USER_PROFILE = "user_profile"
    COHORT_SUMMARY = "cohort_summary"
    DAILY_ATTENDANCE = "daily_attendance"
    COURSE = "course"
    COURSE_CERTIFICATE = "course_certificate"
    ASSESSMENT_TRACKING = "assessment_tracking"
    ASSESSMENT_SCORE_DETAIL = "assessment_score_detail"


class RunState(str, enum.Enum):
    """Migration run states"""
    IDLE = "idle"
    CONNECTING = "connecting"
    SCHEMA_ENSURED = "schema_ensured"
    EXTRACTING = "extracting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class LocationLevel(str, enum.Enum):
    """Location levels stored in the attribute store"""
    STATE = "state"
    DISTRICT = "district"
    BLOCK = "block"
    VILLAGE = "village"
