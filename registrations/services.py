"""
Registration Service

Admission control for course registration and the approval workflow.

Every write that depends on the current state of a registration runs inside
transaction.atomic() holding a row lock on the Registration, so credit checks,
status aggregation and card issuance see a consistent set of course uploads.
"""

import logging
import random

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from audit.services import AuditLogger
from notifications.services import notify
from portal.exceptions import (
    AdmissionRejected, ConflictError, DeadlinePassed, DuplicateRegistration, PortalValidationError
)
from .admission import (
    aggregate_registration_status, can_admit_course, counts_toward_load, is_duplicate_upload,
    total_credits, APPROVED, PENDING, REJECTED
)
from .models import Approval, CourseUpload, Registration, RegistrationCard

logger = logging.getLogger(__name__)


def generate_card_number(year=None):
    """Card numbers look like BU2026-004213"""
    year = year or timezone.now().year
    prefix = settings.REGISTRATION_POLICY['CARD_PREFIX']
    return f"{prefix}{year}-{random.randint(0, 999999):06d}"


def get_or_create_registration(student, semester):
    registration, created = Registration.objects.get_or_create(student=student, semester=semester)
    if created:
        logger.info(f"Opened registration for {student.email} in {semester.name}")
    return registration


def _lock_registration(registration_id):
    return Registration.objects.select_for_update().get(pk=registration_id)


def issue_registration_card(student, semester):
    """
    Return the student's card for the semester, creating it if needed.

    The (student, semester) unique constraint guarantees a single card even when
    two approvals race; a card number collision is retried with a fresh number.
    """
    attempts = settings.REGISTRATION_POLICY['CARD_NUMBER_ATTEMPTS']
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                card, created = RegistrationCard.objects.get_or_create(
                    student=student,
                    semester=semester,
                    defaults={'card_number': generate_card_number(semester.start_date.year)},
                )
        except IntegrityError:
            existing = RegistrationCard.objects.filter(student=student, semester=semester).first()
            if existing:
                return existing
            logger.warning(f"Card number collision for {student.email} (attempt {attempt}/{attempts})")
            continue

        if created:
            logger.info(f"Issued registration card {card.card_number} to {student.email} for {semester.name}")
            AuditLogger.log_action(
                actor=None,
                action='ISSUE',
                entity_type='registration_card',
                entity_id=card.id,
                entity_name=card.card_number,
                description=f"Card issued to {student.email} for {semester.name}",
            )
        return card

    raise ConflictError('Could not allocate a unique card number', code='CARD_NUMBER_UNAVAILABLE')


def _revoke_registration_card(registration):
    """Delete the card of a registration that is no longer approved"""
    card = RegistrationCard.objects.filter(
        student_id=registration.student_id, semester_id=registration.semester_id
    ).first()
    if card is None:
        return

    card_number = card.card_number
    card_id = card.id
    card.delete()
    logger.info(f"Revoked registration card {card_number} for registration {registration.id}")
    AuditLogger.log_action(
        actor=None,
        action='REVOKE',
        entity_type='registration_card',
        entity_id=card_id,
        entity_name=card_number,
        description=f"Registration is {registration.status}",
    )


def _refresh_registration_status(registration):
    """
    Recompute a locked registration's status from its uploads. A card exists
    only while the registration is approved.

    Returns:
        tuple: (previous_status, card); card is set when the registration is approved
    """
    previous_status = registration.status
    statuses = list(registration.course_uploads.values_list('status', flat=True))
    new_status = aggregate_registration_status(statuses)

    if new_status != previous_status:
        registration.status = new_status
        if new_status != REJECTED:
            registration.rejection_reason = ''
        registration.save(update_fields=['status', 'rejection_reason', 'updated_at'])
        logger.info(f"Registration {registration.id} moved from {previous_status} to {new_status}")

    card = None
    if new_status == APPROVED:
        card = issue_registration_card(registration.student, registration.semester)
    elif previous_status == APPROVED:
        _revoke_registration_card(registration)
    return previous_status, card


def _ensure_readmissible(upload, uploads):
    """
    A rejected upload rejoins the credit load when it is approved, so it has to
    pass admission again against its siblings' current load.
    """
    load = [
        sibling.course.credits for sibling in uploads
        if sibling.pk != upload.pk and counts_toward_load(sibling.status)
    ]
    admitted, reason = can_admit_course(load, upload.course.credits)
    if not admitted:
        raise AdmissionRejected(
            f"{upload.course.code} cannot be approved: {reason}",
            current_credits=total_credits(load),
            course_credits=upload.course.credits,
            max_credits=settings.REGISTRATION_POLICY['MAX_TERM_CREDITS'],
        )


def _notify_registration_approved(registration, card):
    notify(
        registration.student,
        'Registration approved',
        f"Your registration for {registration.semester.name} has been approved. "
        f"Registration card number: {card.card_number}",
        notification_type='registration',
        send_email=True,
    )


def add_course(student, semester, course, actor=None):
    """
    Add a course to the student's registration for the semester.

    Raises:
        DeadlinePassed: the semester's course upload deadline has passed
        DuplicateRegistration: the student already uploaded this course for the semester
        AdmissionRejected: the course is below the credit minimum or would exceed the load limit
    """
    if semester.course_upload_deadline and timezone.now() > semester.course_upload_deadline:
        raise DeadlinePassed(
            f"The course upload deadline for {semester.name} has passed",
            deadline=semester.course_upload_deadline.isoformat(),
        )

    with transaction.atomic():
        registration = get_or_create_registration(student, semester)
        registration = _lock_registration(registration.pk)

        existing = list(
            CourseUpload.objects.filter(student=student, semester=semester).select_related('course')
        )
        triples = [(upload.student_id, upload.semester_id, upload.course_id) for upload in existing]
        if is_duplicate_upload(triples, (student.id, semester.id, course.id)):
            raise DuplicateRegistration(
                f"{course.code} is already on your registration for {semester.name}",
                course_id=str(course.id),
            )

        load = [upload.course.credits for upload in existing if counts_toward_load(upload.status)]
        admitted, reason = can_admit_course(load, course.credits)
        if not admitted:
            raise AdmissionRejected(
                reason,
                current_credits=total_credits(load),
                course_credits=course.credits,
                max_credits=settings.REGISTRATION_POLICY['MAX_TERM_CREDITS'],
            )

        upload = CourseUpload.objects.create(
            student=student,
            course=course,
            semester=semester,
            registration=registration,
            status=PENDING,
        )
        _refresh_registration_status(registration)

        AuditLogger.log_action(
            actor=actor or student,
            action='CREATE',
            entity_type='course_upload',
            entity_id=upload.id,
            entity_name=f"{student.email} {course.code}",
            description=f"Course {course.code} added for {semester.name}",
        )

    logger.info(
        f"{student.email} added {course.code} ({course.credits} credits) for {semester.name}; "
        f"load now {total_credits(load) + course.credits}"
    )
    return upload


def drop_course(upload, actor):
    """
    Remove a course upload. Approved uploads may only be dropped by a registrar
    or administrator. Dropping the last upload removes the registration and
    any card issued for it.

    Returns:
        Registration or None: the remaining registration
    """
    course_code = upload.course.code
    student = upload.student
    semester = upload.semester

    with transaction.atomic():
        registration = _lock_registration(upload.registration_id)
        upload = CourseUpload.objects.select_for_update().get(pk=upload.pk)
        if upload.status == APPROVED and not actor.can_manage_registrations():
            raise PortalValidationError(
                'Approved courses can only be dropped by the registrar',
                code='COURSE_ALREADY_APPROVED',
            )

        upload_id = upload.id
        upload.delete()

        card = None
        previous_status = registration.status
        if registration.course_uploads.exists():
            previous_status, card = _refresh_registration_status(registration)
        else:
            RegistrationCard.objects.filter(student=student, semester=semester).delete()
            registration.delete()
            registration = None

        AuditLogger.log_action(
            actor=actor,
            action='DELETE',
            entity_type='course_upload',
            entity_id=upload_id,
            entity_name=f"{student.email} {course_code}",
            description=f"Course {course_code} dropped for {semester.name}",
        )

    logger.info(f"{actor.email} dropped {course_code} for {student.email} in {semester.name}")
    if registration is not None and card and previous_status != APPROVED:
        _notify_registration_approved(registration, card)
    return registration


def approve_course_upload(upload, approver, comments=''):
    """
    Approve a single course upload. When it is the last one outstanding the
    registration is approved and the registration card issued.

    Returns:
        CourseUpload: the approved upload
    """
    with transaction.atomic():
        registration = _lock_registration(upload.registration_id)
        upload = CourseUpload.objects.select_for_update().get(pk=upload.pk)
        if upload.status == APPROVED:
            raise PortalValidationError('Course upload is already approved', code='ALREADY_APPROVED')
        if upload.status == REJECTED:
            _ensure_readmissible(upload, list(registration.course_uploads.select_related('course')))

        upload.status = APPROVED
        upload.rejection_reason = ''
        upload.save(update_fields=['status', 'rejection_reason', 'updated_at'])
        Approval.objects.create(course_upload=upload, approver=approver, status=APPROVED, comments=comments)

        previous_status, card = _refresh_registration_status(registration)

        AuditLogger.log_action(
            actor=approver,
            action='APPROVE',
            entity_type='course_upload',
            entity_id=upload.id,
            entity_name=f"{upload.student.email} {upload.course.code}",
            description=comments,
        )

    logger.info(f"{approver.email} approved {upload.course.code} for {upload.student.email}")
    notify(
        upload.student,
        'Course approved',
        f"{upload.course.code} - {upload.course.title} has been approved for {upload.semester.name}.",
        notification_type='course_approval',
    )
    if card and previous_status != APPROVED:
        _notify_registration_approved(registration, card)
    return upload


def reject_course_upload(upload, approver, reason=''):
    with transaction.atomic():
        registration = _lock_registration(upload.registration_id)
        upload = CourseUpload.objects.select_for_update().get(pk=upload.pk)
        if upload.status != PENDING:
            raise PortalValidationError(
                f"Only pending course uploads can be rejected; this one is {upload.status}",
                code='NOT_PENDING',
            )

        upload.status = REJECTED
        upload.rejection_reason = reason
        upload.save(update_fields=['status', 'rejection_reason', 'updated_at'])
        Approval.objects.create(course_upload=upload, approver=approver, status=REJECTED, comments=reason)

        _refresh_registration_status(registration)

        AuditLogger.log_action(
            actor=approver,
            action='REJECT',
            entity_type='course_upload',
            entity_id=upload.id,
            entity_name=f"{upload.student.email} {upload.course.code}",
            description=reason,
        )

    logger.info(f"{approver.email} rejected {upload.course.code} for {upload.student.email}")
    message = f"{upload.course.code} - {upload.course.title} was not approved for {upload.semester.name}."
    if reason:
        message += f" Reason: {reason}"
    notify(upload.student, 'Course rejected', message, notification_type='course_rejection')
    return upload


def approve_registration(registration, approver, comments=''):
    """
    Approve every outstanding course on a registration, then the registration
    itself, and issue the card.

    Returns:
        RegistrationCard: the student's card for the semester
    """
    with transaction.atomic():
        registration = _lock_registration(registration.pk)
        uploads = list(registration.course_uploads.select_for_update())
        if not uploads:
            raise PortalValidationError('Registration has no courses to approve', code='EMPTY_REGISTRATION')

        # Pending uploads already count toward the load; rejected ones must fit around them
        outstanding = [u for u in uploads if u.status == PENDING] + [u for u in uploads if u.status == REJECTED]
        approved_now = 0
        for upload in outstanding:
            if upload.status == REJECTED:
                _ensure_readmissible(upload, uploads)
            upload.status = APPROVED
            upload.rejection_reason = ''
            upload.save(update_fields=['status', 'rejection_reason', 'updated_at'])
            Approval.objects.create(course_upload=upload, approver=approver, status=APPROVED, comments=comments)
            approved_now += 1

        previous_status, card = _refresh_registration_status(registration)

        AuditLogger.log_action(
            actor=approver,
            action='APPROVE',
            entity_type='registration',
            entity_id=registration.id,
            entity_name=f"{registration.student.email} {registration.semester.name}",
            description=comments,
            changes={'courses_approved': approved_now, 'card_number': card.card_number},
        )

    logger.info(
        f"{approver.email} approved registration {registration.id} "
        f"({approved_now} courses, card {card.card_number})"
    )
    if previous_status != APPROVED:
        _notify_registration_approved(registration, card)
    return card


def reject_registration(registration, approver, reason=''):
    """Reject the pending courses on a registration and mark it rejected"""
    with transaction.atomic():
        registration = _lock_registration(registration.pk)
        if registration.status == APPROVED:
            raise PortalValidationError(
                'Approved registrations cannot be rejected; drop individual courses instead',
                code='ALREADY_APPROVED',
            )

        pending = list(registration.course_uploads.select_for_update().filter(status=PENDING))
        for upload in pending:
            upload.status = REJECTED
            upload.rejection_reason = reason
            upload.save(update_fields=['status', 'rejection_reason', 'updated_at'])
            Approval.objects.create(course_upload=upload, approver=approver, status=REJECTED, comments=reason)

        registration.status = REJECTED
        registration.rejection_reason = reason
        registration.save(update_fields=['status', 'rejection_reason', 'updated_at'])
        _revoke_registration_card(registration)

        AuditLogger.log_action(
            actor=approver,
            action='REJECT',
            entity_type='registration',
            entity_id=registration.id,
            entity_name=f"{registration.student.email} {registration.semester.name}",
            description=reason,
            changes={'courses_rejected': len(pending)},
        )

    logger.info(f"{approver.email} rejected registration {registration.id} ({len(pending)} courses)")
    message = f"Your registration for {registration.semester.name} was rejected."
    if reason:
        message += f" Reason: {reason}"
    notify(registration.student, 'Registration rejected', message, notification_type='registration', send_email=True)
    return registration
