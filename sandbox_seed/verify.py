"""Existence checks for the teacher, groups and modules a seed run targets."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .constants import module_name
from .db.models import GroupModel, ModuleModel, TeacherProfileModel
from .errors import MissingSeedDataError
from .models import Group, Teacher

logger = logging.getLogger(__name__)


def verify_teacher(session: Session, email: str) -> Teacher:
    stmt = select(TeacherProfileModel).where(TeacherProfileModel.email == email).limit(1)
    model = session.execute(stmt).scalar_one_or_none()
    if model is None:
        raise MissingSeedDataError(f"Teacher not found: {email}")
    logger.info("Using teacher: %s %s", model.first_name, model.last_name)
    return Teacher(id=model.id, email=model.email, first_name=model.first_name, last_name=model.last_name)


def verify_groups(session: Session, group_ids: Sequence[int], group_codes: Dict[int, str]) -> List[Group]:
    """Load every configured group, aligning ``group_code`` with the configured value."""
    groups: List[Group] = []
    for group_id in group_ids:
        model = session.get(GroupModel, group_id)
        if model is None:
            raise MissingSeedDataError(f"Group not found: ID {group_id}")

        target_code = group_codes.get(group_id)
        if target_code and model.group_code != target_code:
            logger.info("Updated group: %s (%s -> %s)", model.group_name, model.group_code, target_code)
            model.group_code = target_code
        else:
            logger.info("Using group: %s (%s)", model.group_name, model.group_code)
        groups.append(Group(id=model.id, group_name=model.group_name, group_code=model.group_code))

    session.flush()
    return groups


def verify_or_create_modules(
    session: Session,
    module_ids: Sequence[Optional[int]],
    teacher: Teacher,
) -> List[int]:
    """Rename configured modules to ``Alg 1 Unit 8.N``; create one for every empty slot."""
    resolved: List[int] = []
    for position, module_id in enumerate(module_ids):
        name = module_name(position)
        if module_id:
            model = session.get(ModuleModel, module_id)
            if model is None:
                raise MissingSeedDataError(f"Module not found: ID {module_id}")
            if model.name != name:
                logger.info("Updated module: %s -> %s", model.name, name)
                model.name = name
            else:
                logger.info("Using module: %s", model.name)
            resolved.append(model.id)
            continue

        model = ModuleModel(
            name=name,
            description="Auto-generated for sandbox testing",
            created_by=teacher.id,
        )
        session.add(model)
        session.flush()
        logger.info("Created module: %s (ID: %s)", name, model.id)
        resolved.append(model.id)

    session.flush()
    return resolved


__all__ = ["verify_groups", "verify_or_create_modules", "verify_teacher"]
