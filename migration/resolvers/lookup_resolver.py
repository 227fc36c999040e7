"""
Joined-table resolvers over the source database.

Each resolver issues one parameterized query through ``SourceLookup``; a
failed query is logged and treated as a miss.
"""

from typing import Any, Dict
from sqlalchemy import select
from migration.resolvers.base import EnrichmentResolver, SourceLookup
from models.source import (
    fields,
    field_values,
    cohorts,
    cohort_members,
    tenants,
    roles,
    user_tenant_mapping,
    user_roles_mapping,
)

TENANT_ROLE_FIELDS = ("tenant_id", "tenant_name", "role_id", "role_name", "role_code")


class CustomFieldsResolver(EnrichmentResolver):
    """
    Attribute-store custom fields of a user or cohort.

    Returns ``{fieldName: {"type": ..., "value": ...}}``.
    """

    name = "custom_fields"

    async def resolve(self, lookup: SourceLookup, key: Any) -> Dict[str, Any]:
        if key is None:
            return {}

        stmt = (
            select(
                fields.c.name.label("name"),
                fields.c.type.label("type"),
                field_values.c.value.label("value"),
            )
            .select_from(field_values.join(fields, field_values.c.field_id == fields.c.field_id))
            .where(field_values.c.item_id == key)
        )

        rows = await lookup.fetch_all(stmt, f"Error fetching custom fields for {key}")
        return {
            row["name"]: {"type": row["type"], "value": row["value"]}
            for row in rows
        }


class CohortMembershipResolver(EnrichmentResolver):
    """
    Cohorts a user belongs to.

    Returns ``{"cohorts": [...]}`` with one entry per membership row.
    """

    name = "cohorts"

    async def resolve(self, lookup: SourceLookup, key: Any) -> Dict[str, Any]:
        if key is None:
            return {"cohorts": []}

        stmt = (
            select(
                cohorts.c.cohort_id.label("cohortId"),
                cohorts.c.name.label("cohortName"),
                cohorts.c.type.label("cohortType"),
                cohorts.c.tenant_id.label("tenantId"),
                cohort_members.c.status.label("cohortMemberStatus"),
                cohorts.c.status.label("cohortStatus"),
                cohort_members.c.created_at.label("joinedAt"),
            )
            .select_from(cohort_members.join(cohorts, cohort_members.c.cohort_id == cohorts.c.cohort_id))
            .where(cohort_members.c.user_id == key)
        )

        rows = await lookup.fetch_all(stmt, f"Error fetching cohorts for user {key}")
        return {"cohorts": [dict(row) for row in rows]}


class TenantRoleResolver(EnrichmentResolver):
    """
    Tenant and role of a user.

    First row of the tenant mapping joined with tenants, role mapping and
    roles; every field is None when the user has no tenant mapping.
    """

    name = "tenant_role"

    async def resolve(self, lookup: SourceLookup, key: Any) -> Dict[str, Any]:
        empty = {field: None for field in TENANT_ROLE_FIELDS}
        if key is None:
            return empty

        stmt = (
            select(
                user_tenant_mapping.c.tenant_id.label("tenant_id"),
                tenants.c.name.label("tenant_name"),
                user_roles_mapping.c.role_id.label("role_id"),
                roles.c.name.label("role_name"),
                roles.c.code.label("role_code"),
            )
            .select_from(
                user_tenant_mapping
                .outerjoin(tenants, user_tenant_mapping.c.tenant_id == tenants.c.tenant_id)
                .outerjoin(user_roles_mapping, user_roles_mapping.c.user_id == user_tenant_mapping.c.user_id)
                .outerjoin(roles, user_roles_mapping.c.role_id == roles.c.role_id)
            )
            .where(user_tenant_mapping.c.user_id == key)
            .limit(1)
        )

        row = await lookup.fetch_first(stmt, f"Error fetching tenant and role for user {key}")
        if row is None:
            return empty
        return {field: row[field] for field in TENANT_ROLE_FIELDS}
