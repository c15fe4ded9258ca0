# sams/constants/roles.py
"""
Staff roles, job categories and the appraisal hierarchy.

Role values are the exact strings stored in `users.role`,
`users.additional_roles`, `appraiser_assignments.role` and `appraisals.role`.
"""
import enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, FrozenSet, Optional, Union


class UserRole(str, enum.Enum):
    DIRECTOR = "DIRECTOR"

    # Senior leadership
    SCHOOL_MANAGER = "SCHOOL MANAGER"
    HEAD_TEACHER = "HEAD TEACHER"
    FINANCE_OFFICER = "FINANCE OFFICER"
    OPERATIONS_OFFICER = "OPERATIONS OFFICER"

    # Intermediate leadership
    SECTION_HEAD_UPPER_PRIMARY = "SECTION HEAD UPPER PRIMARY"
    SECTION_HEAD_JUNIOR_SCHOOL = "SECTION HEAD JUNIOR SCHOOL"
    SECTION_HEAD_LOWER_PRIMARY = "SECTION HEAD LOWER PRIMARY"
    CURRICULUM_COORDINATOR = "CURRICULUM COORDINATOR"
    ICT_MANAGER = "ICT MANAGER"
    HEADCOOK = "HEADCOOK"
    DRIVERS_SUPERVISOR = "DRIVERS SUPERVISOR"
    CLEANERS_SUPERVISOR = "CLEANERS SUPERVISOR"

    # Firstline leadership
    HEAD_OF_PANELS = "HEAD OF PANELS"
    CLASS_TEACHERS = "CLASS TEACHERS"
    SPECIAL_ROLES = "SPECIAL ROLES"

    # Teaching
    TEACHERS = "TEACHERS"

    # Non-teaching
    ACCOUNTS_ASSISTANT = "ACCOUNTS ASSISTANT"
    ICT_TECHNICIAN = "ICT TECHNICIAN"
    COOKS = "COOKS"
    DRIVERS = "DRIVERS"
    CLEANERS = "CLEANERS"
    SECURITY = "SECURITY"


class JobCategory(str, enum.Enum):
    TEACHING = "TEACHING"
    NON_TEACHING = "NON_TEACHING"
    FIRSTLINE_LEADERSHIP = "FIRSTLINE_LEADERSHIP"
    INTERMEDIATE_LEADERSHIP = "INTERMEDIATE_LEADERSHIP"
    SENIOR_LEADERSHIP = "SENIOR_LEADERSHIP"


JOB_CATEGORY_LABELS: Mapping[JobCategory, str] = MappingProxyType({
    JobCategory.TEACHING: "Teaching Staff",
    JobCategory.NON_TEACHING: "Non-Teaching Staff",
    JobCategory.FIRSTLINE_LEADERSHIP: "Firstline Leadership",
    JobCategory.INTERMEDIATE_LEADERSHIP: "Intermediate Leadership",
    JobCategory.SENIOR_LEADERSHIP: "Senior Leadership",
})

# Display key for an assignment row stored with role = NULL. Never persisted.
PRIMARY_ROLE_KEY = "PRIMARY"

ROLE_CATEGORY: Mapping[UserRole, JobCategory] = MappingProxyType({
    UserRole.DIRECTOR: JobCategory.SENIOR_LEADERSHIP,
    UserRole.SCHOOL_MANAGER: JobCategory.SENIOR_LEADERSHIP,
    UserRole.HEAD_TEACHER: JobCategory.SENIOR_LEADERSHIP,
    UserRole.FINANCE_OFFICER: JobCategory.SENIOR_LEADERSHIP,
    UserRole.OPERATIONS_OFFICER: JobCategory.SENIOR_LEADERSHIP,
    UserRole.SECTION_HEAD_UPPER_PRIMARY: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.SECTION_HEAD_JUNIOR_SCHOOL: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.SECTION_HEAD_LOWER_PRIMARY: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.CURRICULUM_COORDINATOR: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.ICT_MANAGER: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.HEADCOOK: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.DRIVERS_SUPERVISOR: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.CLEANERS_SUPERVISOR: JobCategory.INTERMEDIATE_LEADERSHIP,
    UserRole.HEAD_OF_PANELS: JobCategory.FIRSTLINE_LEADERSHIP,
    UserRole.CLASS_TEACHERS: JobCategory.FIRSTLINE_LEADERSHIP,
    UserRole.SPECIAL_ROLES: JobCategory.FIRSTLINE_LEADERSHIP,
    UserRole.TEACHERS: JobCategory.TEACHING,
    UserRole.ACCOUNTS_ASSISTANT: JobCategory.NON_TEACHING,
    UserRole.ICT_TECHNICIAN: JobCategory.NON_TEACHING,
    UserRole.COOKS: JobCategory.NON_TEACHING,
    UserRole.DRIVERS: JobCategory.NON_TEACHING,
    UserRole.CLEANERS: JobCategory.NON_TEACHING,
    UserRole.SECURITY: JobCategory.NON_TEACHING,
})

_SECTION_HEADS = (
    UserRole.SECTION_HEAD_UPPER_PRIMARY,
    UserRole.SECTION_HEAD_JUNIOR_SCHOOL,
    UserRole.SECTION_HEAD_LOWER_PRIMARY,
)
_ACADEMIC_APPRAISERS = frozenset(_SECTION_HEADS + (UserRole.CURRICULUM_COORDINATOR,))

# appraisee role -> roles allowed to appraise it
APPRAISAL_HIERARCHY: Mapping[UserRole, FrozenSet[UserRole]] = MappingProxyType({
    UserRole.SCHOOL_MANAGER: frozenset({UserRole.DIRECTOR}),
    UserRole.HEAD_TEACHER: frozenset({UserRole.DIRECTOR, UserRole.SCHOOL_MANAGER}),
    UserRole.FINANCE_OFFICER: frozenset({UserRole.DIRECTOR, UserRole.SCHOOL_MANAGER}),
    UserRole.OPERATIONS_OFFICER: frozenset({UserRole.DIRECTOR, UserRole.SCHOOL_MANAGER}),
    UserRole.SECTION_HEAD_UPPER_PRIMARY: frozenset({UserRole.HEAD_TEACHER}),
    UserRole.SECTION_HEAD_JUNIOR_SCHOOL: frozenset({UserRole.HEAD_TEACHER}),
    UserRole.SECTION_HEAD_LOWER_PRIMARY: frozenset({UserRole.HEAD_TEACHER}),
    UserRole.CURRICULUM_COORDINATOR: frozenset({UserRole.HEAD_TEACHER}),
    UserRole.ICT_MANAGER: frozenset({UserRole.OPERATIONS_OFFICER}),
    UserRole.HEADCOOK: frozenset({UserRole.OPERATIONS_OFFICER}),
    UserRole.DRIVERS_SUPERVISOR: frozenset({UserRole.OPERATIONS_OFFICER}),
    UserRole.CLEANERS_SUPERVISOR: frozenset({UserRole.OPERATIONS_OFFICER}),
    UserRole.HEAD_OF_PANELS: _ACADEMIC_APPRAISERS,
    UserRole.CLASS_TEACHERS: _ACADEMIC_APPRAISERS,
    UserRole.SPECIAL_ROLES: _ACADEMIC_APPRAISERS,
    UserRole.TEACHERS: _ACADEMIC_APPRAISERS,
    UserRole.ACCOUNTS_ASSISTANT: frozenset({UserRole.FINANCE_OFFICER}),
    UserRole.ICT_TECHNICIAN: frozenset({UserRole.ICT_MANAGER}),
    UserRole.COOKS: frozenset({UserRole.HEADCOOK}),
    UserRole.DRIVERS: frozenset({UserRole.DRIVERS_SUPERVISOR}),
    UserRole.CLEANERS: frozenset({UserRole.CLEANERS_SUPERVISOR}),
    UserRole.SECURITY: frozenset({UserRole.OPERATIONS_OFFICER}),
})


def parse_role(value: Union[str, UserRole, None]) -> Optional[UserRole]:
    """Return the enum member for a role string, or None if it isn't one."""
    if value is None or isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        return None


def get_role_category(role: Union[str, UserRole, None]) -> JobCategory:
    # Unknown strings are scored as non-teaching staff.
    member = parse_role(role)
    if member is None:
        return JobCategory.NON_TEACHING
    return ROLE_CATEGORY[member]


def allowed_appraiser_roles(role: Union[str, UserRole, None]) -> FrozenSet[UserRole]:
    member = parse_role(role)
    if member is None:
        return frozenset()
    return APPRAISAL_HIERARCHY.get(member, frozenset())


def is_eligible_appraiser(appraisee_role, appraiser_role) -> bool:
    return parse_role(appraiser_role) in allowed_appraiser_roles(appraisee_role)


def eligible_appraisers(role, users: Iterable, appraisee_id=None) -> List:
    """
    Users whose primary role may appraise `role`, excluding the appraisee.

    A role missing from the hierarchy yields an empty list; nobody can be
    assigned until the table covers it.
    """
    allowed = allowed_appraiser_roles(role)
    return [
        u for u in users
        if parse_role(u.role) in allowed and u.id != appraisee_id
    ]


def assignable_roles(user) -> List[str]:
    """Primary role first, then additional roles, without duplicates."""
    roles = [user.role]
    for extra in user.additional_roles or []:
        if extra and extra not in roles:
            roles.append(extra)
    return roles
