"""
Transform source rows plus enrichment results into destination records
"""

from typing import Dict, Any, Optional, List
from pydantic import BaseModel, ValidationError
from models.base import EntityType
from schemas.records import (
    UserProfileReportRecord,
    CohortSummaryReportRecord,
    DailyAttendanceReportRecord,
    CourseRecord,
    CourseCertificateRecord,
    AssessmentTrackingRecord,
    AssessmentScoreDetailRecord,
)
from core.exceptions import TransformationError
import logging

logger = logging.getLogger(__name__)

AUTOMATIC_COHORT_TYPE = "automatic"


class EntityTransformer:
    """
    Map one source row and its enrichment results to a destination record.

    Handles:
    - Column mapping per entity
    - Explicit defaults for every missing source or enrichment value
    - Scalar projections of list-shaped API fields (first element)
    - Validation through the destination record schema

    ``enrichment`` maps an enrichment step name (``custom_fields``,
    ``location``, ``cohorts``, ``tenant_role``, ``content``) to that
    step's result.
    """

    def __init__(self, entity: EntityType):
        self.entity = entity

    def transform(self, row: Dict[str, Any], enrichment: Optional[Dict[str, Dict[str, Any]]] = None) -> BaseModel:
        """
        Transform a source row into its destination record.

        Raises:
            TransformationError: If the row cannot be mapped or validated
        """
        enrichment = enrichment or {}
        try:
            if self.entity == EntityType.USER_PROFILE:
                return self._transform_user_profile(row, enrichment)
            elif self.entity == EntityType.COHORT_SUMMARY:
                return self._transform_cohort_summary(row, enrichment)
            elif self.entity == EntityType.DAILY_ATTENDANCE:
                return self._transform_daily_attendance(row)
            elif self.entity == EntityType.COURSE:
                return self._transform_course(row, enrichment)
            elif self.entity == EntityType.COURSE_CERTIFICATE:
                return CourseCertificateRecord(**row)
            elif self.entity == EntityType.ASSESSMENT_TRACKING:
                return self._transform_assessment_tracking(row, enrichment)
            elif self.entity == EntityType.ASSESSMENT_SCORE_DETAIL:
                return AssessmentScoreDetailRecord(**row)
            else:
                raise ValueError(f"Unknown entity type: {self.entity}")

        except (ValidationError, ValueError, TypeError, KeyError) as e:
            raise TransformationError(
                f"Failed to transform {self.entity.value} record",
                context={"entity": self.entity.value},
                original_exception=e
            )

    def _transform_user_profile(self, row: Dict[str, Any], enrichment: Dict[str, Dict[str, Any]]) -> UserProfileReportRecord:
        """Users row + custom fields, location, cohorts, tenant/role"""
        cohorts = (enrichment.get("cohorts") or {}).get("cohorts") or []
        tenant_role = enrichment.get("tenant_role") or {}
        location = enrichment.get("location") or {}

        return UserProfileReportRecord(
            user_id=row["user_id"],
            username=row.get("username"),
            full_name=self.full_name(
                row.get("first_name"), row.get("middle_name"), row.get("last_name")
            ),
            email=row.get("email") or None,
            mobile=row.get("mobile") or None,
            dob=row.get("dob") or None,
            gender=row.get("gender") or None,
            tenant_id=tenant_role.get("tenant_id"),
            tenant_name=tenant_role.get("tenant_name"),
            role_id=tenant_role.get("role_id"),
            role_name=tenant_role.get("role_name"),
            status=row.get("status"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            created_by=row.get("created_by"),
            updated_by=row.get("updated_by"),
            custom_fields=enrichment.get("custom_fields") or {},
            cohorts=cohorts,
            automatic_member=self.is_automatic_member(cohorts),
            state=location.get("state"),
            district=location.get("district"),
            block=location.get("block"),
            village=location.get("village"),
        )

    def _transform_cohort_summary(self, row: Dict[str, Any], enrichment: Dict[str, Dict[str, Any]]) -> CohortSummaryReportRecord:
        location = enrichment.get("location") or {}

        return CohortSummaryReportRecord(
            cohort_id=row["cohort_id"],
            name=row.get("name"),
            type=row.get("type"),
            tenant_id=row.get("tenant_id"),
            tenant_name=row.get("tenant_name"),
            academic_year=row.get("academic_year"),
            member_count=row.get("member_count"),
            custom_fields=enrichment.get("custom_fields") or {},
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            state=location.get("state"),
            district=location.get("district"),
            block=location.get("block"),
            village=location.get("village"),
        )

    def _transform_daily_attendance(self, row: Dict[str, Any]) -> DailyAttendanceReportRecord:
        return DailyAttendanceReportRecord(
            attendance_id=row["attendance_id"],
            user_id=row.get("user_id"),
            cohort_id=row.get("context_id"),
            context=row.get("context"),
            date=row.get("attendance_date"),
            status=row.get("attendance"),
            metadata=row.get("meta_data"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            created_by=row.get("created_by"),
            updated_by=row.get("updated_by"),
        )

    def _transform_course(self, row: Dict[str, Any], enrichment: Dict[str, Dict[str, Any]]) -> CourseRecord:
        """Hierarchy content projections; the full payload goes to ``details``"""
        content = enrichment.get("content") or {}

        return CourseRecord(
            # A failed lookup keeps the source course id as the key
            course_do_id=self.first_value(content.get("identifier")) or row.get("course_id"),
            course_name=self.first_value(content.get("name")),
            channel=self.first_value(content.get("channel")),
            language=content.get("language") or [],
            program=content.get("program") or [],
            primary_user=content.get("primaryUser") or [],
            target_age_group=content.get("targetAgeGroup") or [],
            keywords=content.get("keywords") or [],
            details=content,
        )

    def _transform_assessment_tracking(self, row: Dict[str, Any], enrichment: Dict[str, Dict[str, Any]]) -> AssessmentTrackingRecord:
        """Source row copied as-is plus content search projections, all scalar"""
        content = enrichment.get("content") or {}

        projections = {
            "name": self.first_value(content.get("name")),
            "description": self.first_value(content.get("description")),
            "subject": self.first_value(content.get("subject")),
            "domain": self.first_value(content.get("domain")),
            "sub_domain": self.first_value(content.get("subDomain")),
            "channel": self.first_value(content.get("channel")),
            "assessment_type": self.first_value(content.get("assessmentType")),
            "program": self.first_value(content.get("program")),
            "target_age_group": self.first_value(content.get("targetAgeGroup")),
            "assessment_name": self.first_value(content.get("name")),
            "content_language": self.first_value(content.get("language")),
            "status": self.first_value(content.get("status")),
            "framework": self.first_value(content.get("framework")),
            "summary_type": "assessment_tracking",
        }

        return AssessmentTrackingRecord(**{**row, **projections})

    @staticmethod
    def full_name(first: Optional[str], middle: Optional[str], last: Optional[str]) -> str:
        """
        Join name parts with single spaces, trimming only the edges.

        An empty middle name leaves a double space between first and last
        name: ("Asha", "", "Rao") -> "Asha  Rao".
        """
        return " ".join([first or "", middle or "", last or ""]).strip()

    @staticmethod
    def is_automatic_member(cohorts: List[Dict[str, Any]]) -> bool:
        """True iff any cohort membership is of the automatic type"""
        return any(cohort.get("cohortType") == AUTOMATIC_COHORT_TYPE for cohort in cohorts)

    @staticmethod
    def first_value(value: Any) -> Any:
        """First element of a list-shaped value; scalars pass through; falsy becomes None"""
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        return value or None
