"""
Admission rules for course registration.

Pure functions with no database access; the service layer feeds them the
current state read under a row lock.
"""

from django.conf import settings

PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'

LOAD_STATUSES = (PENDING, APPROVED)


def _policy(key):
    return settings.REGISTRATION_POLICY[key]


def total_credits(credits):
    return sum(credits)


def counts_toward_load(status):
    """Pending and approved uploads count toward the semester credit load"""
    return status in LOAD_STATUSES


def can_admit_course(existing_credits, candidate_credits, min_credits=None, max_credits=None):
    """
    Decide whether a course may join a semester load.

    Args:
        existing_credits: credits of the pending and approved uploads already held
        candidate_credits: credits of the course being added
        min_credits: smallest admissible course, defaults to the configured policy
        max_credits: largest admissible total, defaults to the configured policy

    Returns:
        tuple: (admitted, reason); reason is empty when admitted
    """
    if min_credits is None:
        min_credits = _policy('MIN_COURSE_CREDITS')
    if max_credits is None:
        max_credits = _policy('MAX_TERM_CREDITS')

    if candidate_credits < min_credits:
        return False, f"Course has {candidate_credits} credits; the minimum is {min_credits}"

    current_load = total_credits(existing_credits)
    if current_load + candidate_credits > max_credits:
        return False, (
            f"Adding {candidate_credits} credits to the current {current_load} "
            f"would exceed the {max_credits} credit limit"
        )
    return True, ''


def is_duplicate_upload(existing_triples, candidate_triple):
    """Exact (student, semester, course) membership"""
    return tuple(candidate_triple) in {tuple(triple) for triple in existing_triples}


def aggregate_registration_status(statuses):
    statuses = list(statuses)
    if not statuses:
        return PENDING
    if all(status == APPROVED for status in statuses):
        return APPROVED
    if any(status == PENDING for status in statuses):
        return PENDING
    return REJECTED
