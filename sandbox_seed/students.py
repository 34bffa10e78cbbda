"""Synthetic students and their enrollments."""

from __future__ import annotations

import logging
import time
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .constants import SEED_EMAIL_DOMAIN, student_names_for_group
from .db.models import EnrollmentModel, StudentProfileModel, UserModel
from .models import Enrollment, Group

logger = logging.getLogger(__name__)


def _display_name(first_name: Optional[str], last_name: Optional[str], email: str) -> str:
    if first_name and last_name:
        return f"{first_name} {last_name}"
    return email


def seed_students_for_group(
    session: Session,
    group: Group,
    group_index: int,
    count: int,
    *,
    stamp: Optional[int] = None,
) -> List[Enrollment]:
    """Reuse up to ``count`` active enrollments, then create the missing students."""
    stmt = (
        select(EnrollmentModel, StudentProfileModel)
        .join(StudentProfileModel, EnrollmentModel.student_profile_id == StudentProfileModel.id)
        .where(EnrollmentModel.group_id == group.id, EnrollmentModel.status == "active")
        .order_by(EnrollmentModel.id)
        .limit(count)
    )
    enrollments: List[Enrollment] = []
    for enrollment, profile in session.execute(stmt).all():
        enrollments.append(
            Enrollment(
                id=enrollment.id,
                student_profile_id=profile.id,
                display_name=_display_name(profile.first_name, profile.last_name, profile.email),
            )
        )
    if enrollments:
        logger.info("Found %d existing students in %s", len(enrollments), group.group_name)

    missing = count - len(enrollments)
    if missing <= 0:
        return enrollments

    logger.info("Creating %d new students in %s", missing, group.group_name)
    names = student_names_for_group(group_index)
    stamp = stamp if stamp is not None else int(time.time() * 1000)
    for index in range(len(enrollments), count):
        first_name, last_name = names[index % len(names)]
        has_name = first_name is not None and last_name is not None
        if has_name:
            email = f"sandbox.{first_name.lower()}.{last_name.lower()}.{stamp}.{group.id}.{index}@{SEED_EMAIL_DOMAIN}"
        else:
            email = f"sandbox.student.{stamp}.{group.id}.{index}@{SEED_EMAIL_DOMAIN}"
        display_name = _display_name(first_name, last_name, email)

        user_id = str(uuid.uuid4())
        session.add(UserModel(id=user_id, email=email, raw_user_meta_data={"name": display_name} if has_name else {}))
        session.add(StudentProfileModel(id=user_id, first_name=first_name, last_name=last_name, email=email))
        enrollment = EnrollmentModel(student_profile_id=user_id, group_id=group.id)
        session.add(enrollment)
        session.flush()

        enrollments.append(Enrollment(id=enrollment.id, student_profile_id=user_id, display_name=display_name))
        logger.debug("Created student %s%s", display_name, "" if has_name else " (no name)")

    return enrollments


__all__ = ["seed_students_for_group"]
