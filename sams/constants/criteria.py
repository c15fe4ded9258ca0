# sams/constants/criteria.py
"""
Fixed rating parameter lists and the scoring profile of each job category.

Ratings in an appraisal document are keyed by the 0-based index of the
parameter in the list that applies to the appraised role.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from sams.constants.roles import JobCategory, get_role_category

LESSON_OBSERVATION_PARAMETERS: Tuple[str, ...] = (
    "Lesson planning and preparation",
    "Introduction and review of previous knowledge",
    "Mastery and presentation of content",
    "Use of teaching and learning resources",
    "Learner participation and engagement",
    "Classroom management and organisation",
    "Questioning and assessment for learning",
    "Time management",
    "Lesson conclusion and assignment of work",
)

WORK_OBSERVATION_PARAMETERS: Tuple[str, ...] = (
    "Preparation for the task",
    "Knowledge of the job and procedures",
    "Quality and accuracy of work",
    "Use and care of tools and equipment",
    "Adherence to safety and hygiene standards",
    "Time management and punctuality",
    "Communication and teamwork",
    "Completion of assigned tasks",
)

PROFESSIONAL_DOCUMENTS: Tuple[str, ...] = (
    "Schemes of work",
    "Lesson plans",
    "Records of work covered",
    "Learners' progress records",
    "Attendance register",
    "Lesson notes",
)

PROFESSIONAL_DOCUMENT_STATUSES: Tuple[str, ...] = ("not_available", "available", "well_kept")

TEACHING_EVALUATION_PARAMETERS: Tuple[str, ...] = (
    "Professional knowledge and application",
    "Learner assessment and feedback",
    "Co-curricular involvement",
    "Professional conduct and ethics",
    "Teamwork and collaboration",
    "Communication with parents and stakeholders",
)

NON_TEACHING_EVALUATION_PARAMETERS: Tuple[str, ...] = (
    "Job knowledge and skills",
    "Quality of work",
    "Reliability and punctuality",
    "Initiative and creativity",
    "Teamwork and interpersonal relations",
    "Integrity and professional conduct",
)

SENIOR_LEADERSHIP_EVALUATION_PARAMETERS: Tuple[str, ...] = (
    "Strategic leadership and vision",
    "Planning and organisation",
    "Decision making and problem solving",
    "Staff supervision and development",
    "Financial and resource stewardship",
    "Communication and stakeholder relations",
    "Accountability and reporting",
    "Integrity and professional conduct",
)

# Marks awarded for the top target band; the targets component maximum.
TARGET_MAX_MARKS = 33
RATING_MIN = 1
RATING_MAX = 4


@dataclass(frozen=True)
class CategoryProfile:
    has_targets: bool
    observation_parameters: Tuple[str, ...]
    evaluation_parameters: Tuple[str, ...]
    lesson_observation: bool = False

    @property
    def has_observations(self) -> bool:
        return bool(self.observation_parameters)

    @property
    def requires_work_appraised(self) -> bool:
        return self.has_observations and not self.lesson_observation


CATEGORY_PROFILES: Mapping[JobCategory, CategoryProfile] = MappingProxyType({
    JobCategory.TEACHING: CategoryProfile(
        has_targets=True,
        observation_parameters=LESSON_OBSERVATION_PARAMETERS,
        evaluation_parameters=TEACHING_EVALUATION_PARAMETERS,
        lesson_observation=True,
    ),
    JobCategory.NON_TEACHING: CategoryProfile(
        has_targets=False,
        observation_parameters=WORK_OBSERVATION_PARAMETERS,
        evaluation_parameters=NON_TEACHING_EVALUATION_PARAMETERS,
    ),
    JobCategory.FIRSTLINE_LEADERSHIP: CategoryProfile(
        has_targets=True,
        observation_parameters=WORK_OBSERVATION_PARAMETERS,
        evaluation_parameters=NON_TEACHING_EVALUATION_PARAMETERS,
    ),
    JobCategory.INTERMEDIATE_LEADERSHIP: CategoryProfile(
        has_targets=True,
        observation_parameters=WORK_OBSERVATION_PARAMETERS,
        evaluation_parameters=NON_TEACHING_EVALUATION_PARAMETERS,
    ),
    JobCategory.SENIOR_LEADERSHIP: CategoryProfile(
        has_targets=True,
        observation_parameters=(),
        evaluation_parameters=SENIOR_LEADERSHIP_EVALUATION_PARAMETERS,
    ),
})


def profile_for_role(role) -> CategoryProfile:
    return CATEGORY_PROFILES[get_role_category(role)]
