"""
Appraisal status workflow.

Status is a single pointer that only moves forward through STATUS_ORDER;
"is X done" means "status is at or past X". Moving forward runs the gate of
every stage between the current status and the requested one. The only way
back is `authorize_reset`, a director-only operation.
"""
import enum
import logging
from typing import Callable, Dict, List, Optional, Union

from sams.constants.criteria import CategoryProfile, profile_for_role
from sams.schemas.appraisal import AppraisalData, Observation
from sams.services.exceptions import NotAuthorized, ValidationFailed
from sams.services.scoring import valid_rating

logger = logging.getLogger(__name__)


class AppraisalStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    TARGETS_SET = "TARGETS_SET"
    OBSERVATION_SUBMITTED = "OBSERVATION_SUBMITTED"
    EVALUATION_SUBMITTED = "EVALUATION_SUBMITTED"
    TARGETS_SUBMITTED = "TARGETS_SUBMITTED"
    COMPLETED = "COMPLETED"


STATUS_ORDER: List[AppraisalStatus] = list(AppraisalStatus)
_STATUS_INDEX: Dict[AppraisalStatus, int] = {s: i for i, s in enumerate(STATUS_ORDER)}

OBSERVATION_PENDING = "PENDING"
OBSERVATION_COMPLETED = "COMPLETED"
OBSERVATION_SLOTS = (1, 2)

StatusLike = Union[str, AppraisalStatus]


def parse_status(value: StatusLike) -> AppraisalStatus:
    try:
        return AppraisalStatus(value)
    except ValueError:
        raise ValidationFailed(f"Unknown appraisal status: {value}")


def status_index(status: StatusLike) -> int:
    return _STATUS_INDEX[parse_status(status)]


def is_at_least(status: Optional[StatusLike], stage: StatusLike) -> bool:
    if not status:
        return False
    return status_index(status) >= status_index(stage)


def is_targets_set(status) -> bool:
    return is_at_least(status, AppraisalStatus.TARGETS_SET)


def is_observation_submitted(status) -> bool:
    return is_at_least(status, AppraisalStatus.OBSERVATION_SUBMITTED)


def is_evaluation_submitted(status) -> bool:
    return is_at_least(status, AppraisalStatus.EVALUATION_SUBMITTED)


def is_targets_submitted(status) -> bool:
    return is_at_least(status, AppraisalStatus.TARGETS_SUBMITTED)


def is_completed(status) -> bool:
    return is_at_least(status, AppraisalStatus.COMPLETED)


def workflow_for(profile: CategoryProfile) -> List[AppraisalStatus]:
    """The stages that apply to a role, in order."""
    stages = []
    for status in STATUS_ORDER:
        if status in (AppraisalStatus.TARGETS_SET, AppraisalStatus.TARGETS_SUBMITTED) and not profile.has_targets:
            continue
        if status is AppraisalStatus.OBSERVATION_SUBMITTED and not profile.has_observations:
            continue
        stages.append(status)
    return stages


# ---------------------------------------------------------------------------
# Gates
# ---------------------------------------------------------------------------

def _observation_label(slot: int) -> str:
    return "first observation" if slot == 1 else "second observation"


def check_observation(observation: Observation, slot: int, profile: CategoryProfile) -> None:
    label = _observation_label(slot)
    params = profile.observation_parameters
    for index in range(len(params)):
        if valid_rating(observation.ratings.get(index)) is None:
            raise ValidationFailed(
                f"Please rate all parameters of the {label} before saving. (Missing item {index + 1})"
            )
    if not observation.date.strip():
        raise ValidationFailed(f"Please enter the date of the {label}.")
    if not observation.time.strip():
        raise ValidationFailed(f"Please enter the time of the {label}.")
    if profile.requires_work_appraised and not observation.work_appraised.strip():
        raise ValidationFailed(f"Please describe the work appraised in the {label}.")


def _check_targets_set(data: AppraisalData, profile: CategoryProfile) -> None:
    if not data.target_signatures.is_signed:
        raise ValidationFailed("Both Appraiser and Appraisee must sign before setting targets.")


def _check_observations(data: AppraisalData, profile: CategoryProfile) -> None:
    check_observation(data.observation1, 1, profile)
    if data.observation2.is_started:
        check_observation(data.observation2, 2, profile)


def _check_evaluation(data: AppraisalData, profile: CategoryProfile) -> None:
    ratings = data.evaluation.ratings
    for index in range(len(profile.evaluation_parameters)):
        if valid_rating(ratings.get(index)) is None:
            raise ValidationFailed(
                f"Please rate all evaluation parameters before saving. (Missing item {index + 1})"
            )


def _check_target_review(data: AppraisalData) -> None:
    if not data.target_review_signatures.is_signed:
        raise ValidationFailed("Both Appraiser and Appraisee must sign the target review before submitting targets.")
    for position, target in enumerate(data.targets, start=1):
        if not target.has_actual:
            raise ValidationFailed(f"Please enter the actual value for target {position}.")


def _check_targets_submitted(data: AppraisalData, profile: CategoryProfile) -> None:
    _check_target_review(data)


def _check_completed(data: AppraisalData, profile: CategoryProfile) -> None:
    signatures = data.completion_signatures
    if not signatures.appraiser_signature:
        raise ValidationFailed("The appraiser must sign the final scoresheet before completing the appraisal.")
    if not signatures.appraisee_signature:
        raise ValidationFailed("The appraisee must sign the final scoresheet before completing the appraisal.")
    if profile.has_targets:
        _check_target_review(data)


def check_completed_observations(data: AppraisalData, profile: CategoryProfile) -> None:
    """A slot sent back as COMPLETED must still pass its own check."""
    for slot, observation in ((1, data.observation1), (2, data.observation2)):
        if observation.status != OBSERVATION_COMPLETED:
            continue
        if not profile.has_observations:
            raise ValidationFailed("Observations do not apply to this role.")
        check_observation(observation, slot, profile)


GATES: Dict[AppraisalStatus, Callable[[AppraisalData, CategoryProfile], None]] = {
    AppraisalStatus.TARGETS_SET: _check_targets_set,
    AppraisalStatus.OBSERVATION_SUBMITTED: _check_observations,
    AppraisalStatus.EVALUATION_SUBMITTED: _check_evaluation,
    AppraisalStatus.TARGETS_SUBMITTED: _check_targets_submitted,
    AppraisalStatus.COMPLETED: _check_completed,
}


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def check_transition(
    current: Optional[StatusLike],
    requested: StatusLike,
    data: AppraisalData,
    role=None,
) -> AppraisalStatus:
    """
    Validate moving an appraisal from `current` (None for a new record) to
    `requested`. Returns the requested status; raises ValidationFailed.
    """
    profile = profile_for_role(role)
    target = parse_status(requested)
    stages = workflow_for(profile)

    if target not in stages:
        raise ValidationFailed(f"{target.value} does not apply to the {role or 'appraised'} role.")

    start = parse_status(current) if current else AppraisalStatus.DRAFT
    if status_index(target) < status_index(start):
        raise ValidationFailed(
            f"Cannot move an appraisal back from {start.value} to {target.value}. "
            "Ask a director to reset its status."
        )

    check_completed_observations(data, profile)

    for stage in stages:
        if status_index(start) < status_index(stage) <= status_index(target):
            GATES[stage](data, profile)

    if target is not start:
        logger.info("Appraisal transition %s -> %s accepted", start.value, target.value)
    return target


def mark_observation_complete(data: AppraisalData, slot: int, role=None) -> AppraisalData:
    """Validate a single observation slot and flag it COMPLETED."""
    if slot not in OBSERVATION_SLOTS:
        raise ValidationFailed(f"Unknown observation slot: {slot}")
    profile = profile_for_role(role)
    if not profile.has_observations:
        raise ValidationFailed(f"Observations do not apply to the {role or 'appraised'} role.")

    observation = data.observation1 if slot == 1 else data.observation2
    check_observation(observation, slot, profile)

    completed = observation.model_copy(update={"status": OBSERVATION_COMPLETED})
    field = "observation1" if slot == 1 else "observation2"
    return data.model_copy(update={field: completed})


def authorize_reset(caller_role: Optional[str], new_status: StatusLike) -> AppraisalStatus:
    """Director-only backwards (or any) move; bypasses every gate."""
    if caller_role != "DIRECTOR":
        logger.warning("Status reset refused for role %s", caller_role)
        raise NotAuthorized("Only Directors can reset appraisal status")
    return parse_status(new_status)
