from types import SimpleNamespace

from sams.constants.roles import (
    JobCategory,
    UserRole,
    allowed_appraiser_roles,
    assignable_roles,
    eligible_appraisers,
    get_role_category,
    is_eligible_appraiser,
)


def _user(id, role, additional_roles=None):
    return SimpleNamespace(id=id, role=role, additional_roles=additional_roles)


STAFF = [
    _user("d", "DIRECTOR"),
    _user("sm", "SCHOOL MANAGER"),
    _user("ht", "HEAD TEACHER"),
    _user("sh", "SECTION HEAD LOWER PRIMARY"),
    _user("cc", "CURRICULUM COORDINATOR"),
    _user("t1", "TEACHERS"),
    _user("hc", "HEADCOOK"),
]


def test_every_role_has_a_category():
    for role in UserRole:
        assert isinstance(get_role_category(role), JobCategory)
    assert get_role_category("TEACHERS") is JobCategory.TEACHING
    assert get_role_category("nobody") is JobCategory.NON_TEACHING


def test_teachers_are_appraised_by_academic_leads():
    ids = {u.id for u in eligible_appraisers("TEACHERS", STAFF)}
    assert ids == {"sh", "cc"}


def test_head_teacher_eligible_appraisers():
    ids = {u.id for u in eligible_appraisers(UserRole.HEAD_TEACHER, STAFF)}
    assert ids == {"d", "sm"}


def test_director_has_no_appraisers():
    assert allowed_appraiser_roles("DIRECTOR") == frozenset()
    assert eligible_appraisers("DIRECTOR", STAFF) == []


def test_unknown_role_has_no_appraisers():
    assert eligible_appraisers("GARDENER", STAFF) == []


def test_appraisee_is_excluded_from_own_candidates():
    # a second head teacher holding a section head role
    staff = STAFF + [_user("ht2", "HEAD TEACHER")]
    ids = {u.id for u in eligible_appraisers("SECTION HEAD UPPER PRIMARY", staff, appraisee_id="ht2")}
    assert ids == {"ht"}


def test_is_eligible_appraiser():
    assert is_eligible_appraiser("COOKS", "HEADCOOK")
    assert not is_eligible_appraiser("COOKS", "TEACHERS")
    assert not is_eligible_appraiser("SCHOOL MANAGER", "HEAD TEACHER")


def test_assignable_roles_deduplicates():
    user = _user("x", "TEACHERS", ["CLASS TEACHERS", "TEACHERS", "CLASS TEACHERS", ""])
    assert assignable_roles(user) == ["TEACHERS", "CLASS TEACHERS"]
    assert assignable_roles(_user("y", "COOKS", None)) == ["COOKS"]
