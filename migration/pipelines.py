"""
Entity pipelines and the jobs that group them.

Each factory assembles one ``EntityPipeline`` from its extraction query,
enrichment steps, transformer and writer. A job is the list of pipelines
run over one source/destination connection pair.
"""

from typing import Callable, Dict, List, Mapping, Optional
from sqlalchemy import Text, cast, distinct, func, select
from migration.base import EntityPipeline, EnrichmentStep
from migration.resolvers.api_resolver import HierarchyResolver, SearchResolver
from migration.resolvers.attribute_resolver import AttributeStoreResolver, LocationNameResolver
from migration.resolvers.lookup_resolver import (
    CustomFieldsResolver,
    CohortMembershipResolver,
    TenantRoleResolver,
)
from migration.transformers.entity_transformer import EntityTransformer
from migration.loaders.postgres_loader import UpsertLoader, DeleteInsertLoader
from models.base import EntityType
from models import source, reports, content


def _keyed(*columns):
    """Label columns with their snake_case keys so result rows use them"""
    return [column.label(column.key) for column in columns]


# ============================================================================
# EXTRACTION QUERIES
# ============================================================================

USER_PROFILE_QUERY = select(
    *_keyed(
        source.users.c.user_id,
        source.users.c.username,
        source.users.c.first_name,
        source.users.c.middle_name,
        source.users.c.last_name,
        source.users.c.email,
        source.users.c.mobile,
        source.users.c.dob,
    ),
    cast(source.users.c.gender, Text).label("gender"),
    cast(source.users.c.status, Text).label("status"),
    *_keyed(
        source.users.c.created_at,
        source.users.c.updated_at,
        source.users.c.created_by,
        source.users.c.updated_by,
    ),
)

# One row per (cohort, academic year); member count counts distinct users
COHORT_SUMMARY_QUERY = (
    select(
        source.cohorts.c.cohort_id.label("cohort_id"),
        source.cohorts.c.name.label("name"),
        source.cohorts.c.type.label("type"),
        source.cohorts.c.tenant_id.label("tenant_id"),
        source.tenants.c.name.label("tenant_name"),
        source.cohort_academic_years.c.academic_year_id.label("academic_year"),
        func.count(distinct(source.cohort_members.c.user_id)).label("member_count"),
        source.cohorts.c.created_at.label("created_at"),
        source.cohorts.c.updated_at.label("updated_at"),
    )
    .select_from(
        source.cohorts
        .outerjoin(source.cohort_members, source.cohorts.c.cohort_id == source.cohort_members.c.cohort_id)
        .outerjoin(source.cohort_academic_years, source.cohorts.c.cohort_id == source.cohort_academic_years.c.cohort_id)
        .outerjoin(source.tenants, source.cohorts.c.tenant_id == source.tenants.c.tenant_id)
    )
    .group_by(
        source.cohorts.c.cohort_id,
        source.cohorts.c.name,
        source.cohorts.c.type,
        source.cohorts.c.tenant_id,
        source.tenants.c.name,
        source.cohorts.c.created_at,
        source.cohorts.c.updated_at,
        source.cohort_academic_years.c.academic_year_id,
    )
)

DAILY_ATTENDANCE_QUERY = select(*_keyed(*source.attendance.c))

COURSE_CERTIFICATE_QUERY = select(*_keyed(*source.user_course_certificates.c))

COURSE_QUERY = select(source.user_course_certificates.c.course_id.label("course_id")).distinct()

ASSESSMENT_TRACKING_QUERY = select(*_keyed(*source.assessment_tracking.c))

ASSESSMENT_SCORE_DETAIL_QUERY = select(*_keyed(*source.assessment_score_details.c))


# ============================================================================
# PIPELINES
# ============================================================================

def build_user_profile_pipeline(location_field_ids: Optional[Mapping[str, str]] = None) -> EntityPipeline:
    return EntityPipeline(
        name="user_profile",
        extract_query=USER_PROFILE_QUERY,
        key_field="user_id",
        transformer=EntityTransformer(EntityType.USER_PROFILE),
        loader=UpsertLoader(
            reports.user_profile_reports,
            key_columns=["user_id"],
            immutable=["created_at", "created_by"]
        ),
        enrichments=[
            EnrichmentStep("custom_fields", CustomFieldsResolver(), "user_id"),
            EnrichmentStep(
                "location",
                LocationNameResolver(AttributeStoreResolver(location_field_ids)),
                "user_id"
            ),
            EnrichmentStep("cohorts", CohortMembershipResolver(), "user_id"),
            EnrichmentStep("tenant_role", TenantRoleResolver(), "user_id"),
        ],
    )


def build_cohort_summary_pipeline(location_field_ids: Optional[Mapping[str, str]] = None) -> EntityPipeline:
    return EntityPipeline(
        name="cohort_summary",
        extract_query=COHORT_SUMMARY_QUERY,
        key_field="cohort_id",
        transformer=EntityTransformer(EntityType.COHORT_SUMMARY),
        loader=UpsertLoader(
            reports.cohort_summary_reports,
            key_columns=["cohort_id"],
            immutable=["created_at"]
        ),
        enrichments=[
            EnrichmentStep("custom_fields", CustomFieldsResolver(), "cohort_id"),
            EnrichmentStep(
                "location",
                LocationNameResolver(AttributeStoreResolver(location_field_ids)),
                "cohort_id"
            ),
        ],
    )


def build_daily_attendance_pipeline() -> EntityPipeline:
    return EntityPipeline(
        name="daily_attendance",
        extract_query=DAILY_ATTENDANCE_QUERY,
        key_field="attendance_id",
        transformer=EntityTransformer(EntityType.DAILY_ATTENDANCE),
        loader=UpsertLoader(
            reports.daily_attendance_reports,
            key_columns=["attendance_id"],
            immutable=["created_at", "created_by"]
        ),
    )


def build_course_certificate_pipeline() -> EntityPipeline:
    return EntityPipeline(
        name="course_certificate",
        extract_query=COURSE_CERTIFICATE_QUERY,
        key_field="usercertificate_id",
        transformer=EntityTransformer(EntityType.COURSE_CERTIFICATE),
        loader=DeleteInsertLoader(content.user_course_certificates, key_column="usercertificate_id"),
    )


def build_course_pipeline(hierarchy: Optional[HierarchyResolver] = None) -> EntityPipeline:
    return EntityPipeline(
        name="course",
        extract_query=COURSE_QUERY,
        key_field="course_id",
        transformer=EntityTransformer(EntityType.COURSE),
        loader=DeleteInsertLoader(content.courses, key_column="course_do_id"),
        enrichments=[
            EnrichmentStep("content", hierarchy or HierarchyResolver(), "course_id"),
        ],
    )


def build_assessment_tracking_pipeline(search: Optional[SearchResolver] = None) -> EntityPipeline:
    return EntityPipeline(
        name="assessment_tracking",
        extract_query=ASSESSMENT_TRACKING_QUERY,
        key_field="assessment_tracking_id",
        transformer=EntityTransformer(EntityType.ASSESSMENT_TRACKING),
        loader=UpsertLoader(
            content.assessment_tracking,
            key_columns=["assessment_tracking_id"],
            immutable=["created_on"]
        ),
        enrichments=[
            EnrichmentStep("content", search or SearchResolver(), "course_id"),
        ],
    )


def build_assessment_score_detail_pipeline() -> EntityPipeline:
    return EntityPipeline(
        name="assessment_score_detail",
        extract_query=ASSESSMENT_SCORE_DETAIL_QUERY,
        key_field="id",
        transformer=EntityTransformer(EntityType.ASSESSMENT_SCORE_DETAIL),
        loader=DeleteInsertLoader(content.assessment_score_details, key_column="id"),
    )


# ============================================================================
# JOBS
# ============================================================================

# Job name → pipeline factories, run in order over one connection pair
JOBS: Dict[str, List[Callable[[], EntityPipeline]]] = {
    "user_profile": [build_user_profile_pipeline],
    "cohort_summary": [build_cohort_summary_pipeline],
    "attendance": [build_daily_attendance_pipeline],
    "course": [build_course_certificate_pipeline, build_course_pipeline],
    "assessment": [build_assessment_tracking_pipeline],
    "assessment_scores": [build_assessment_score_detail_pipeline],
}


def build_job(job: str) -> List[EntityPipeline]:
    """Build the pipelines of a job"""
    if job not in JOBS:
        raise ValueError(f"Unknown migration job: {job}")
    return [factory() for factory in JOBS[job]]
