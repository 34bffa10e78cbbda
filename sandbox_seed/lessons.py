"""Lesson, mastery-check and question content for each seeded module."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from .constants import (
    DEFAULT_PAIRED_TITLES,
    DEFAULT_STANDALONE_TITLES,
    PAIRED_TITLES_BY_MODULE,
    PREREQUISITE_TYPE,
    STANDALONE_TITLES_BY_MODULE,
)
from .db.models import (
    AssignedAssignmentModel,
    AssignmentModel,
    AssignmentModuleModel,
    AssignmentPrerequisiteModel,
    AssignmentQuestionModel,
    KnowledgeComponentModel,
    QuestionModel,
)
from .models import LessonSpec, ModuleLessonData, QuestionSpec, Teacher
from .working_days import SeedClock

logger = logging.getLogger(__name__)

DUE_IN_DAYS = 30


def multiple_choice(question_text: str, explanation: str, choices: List[tuple[str, bool]]) -> Dict[str, Any]:
    return {
        "type": "MULTIPLE_CHOICE",
        "questionText": question_text,
        "explanation": explanation,
        "answerChoices": [
            {"id": str(uuid.uuid4()), "answerText": text, "isCorrect": is_correct} for text, is_correct in choices
        ],
    }


class LessonFactory:
    """Creates assignments owned by one teacher and launched for one group."""

    def __init__(self, session: Session, teacher: Teacher, clock: SeedClock, *, days_to_seed: int) -> None:
        self.session = session
        self.teacher = teacher
        self.clock = clock
        self.days_to_seed = days_to_seed

    @property
    def launch_date(self) -> datetime:
        return self.clock.timestamp_days_ago(self.days_to_seed)

    def create_assignment(self, title: str, description: str, config: Dict[str, Any]) -> AssignmentModel:
        assignment = AssignmentModel(
            title=title,
            description=description,
            created_by=self.teacher.id,
            state="active",
            config=config,
        )
        self.session.add(assignment)
        self.session.flush()
        return assignment

    def assign_to_group(self, assignment_id: int, group_id: int, launch_date: datetime | None = None) -> int:
        assigned = AssignedAssignmentModel(
            assignment_id=assignment_id,
            group_id=group_id,
            launch_date=launch_date or self.launch_date,
            due_date=self.clock.now() + timedelta(days=DUE_IN_DAYS),
        )
        self.session.add(assigned)
        self.session.flush()
        return assigned.id

    def link_to_module(self, assignment_id: int, module_id: int, order: int) -> None:
        self.session.add(AssignmentModuleModel(assignment_id=assignment_id, module_id=module_id, order=order))

    def create_question(
        self,
        assignment_id: int,
        order: int,
        content: Dict[str, Any],
        *,
        knowledge_component: str | None = None,
        config: Dict[str, Any] | None = None,
    ) -> QuestionSpec:
        question = QuestionModel(
            question_content=content,
            created_by=self.teacher.id,
            state="active",
            config=config if config is not None else {"tutorMode": False},
        )
        self.session.add(question)
        self.session.flush()

        kc_id = None
        if knowledge_component:
            kc = KnowledgeComponentModel(
                name=knowledge_component,
                original_question_id=question.id,
                active_in_personal_review=True,
            )
            self.session.add(kc)
            self.session.flush()
            question.knowledge_component_id = kc_id = kc.id

        link = AssignmentQuestionModel(assignment_id=assignment_id, question_id=question.id, order=order)
        self.session.add(link)
        self.session.flush()
        return QuestionSpec(id=question.id, assignment_question_id=link.id, knowledge_component_id=kc_id)

    def create_lesson_questions(self, lesson_id: int, lesson_title: str, count: int) -> List[QuestionSpec]:
        questions = []
        for q in range(count):
            content = multiple_choice(
                f"Q{q + 1} for {lesson_title}: What is the correct answer?",
                "This is the explanation for why this answer is correct.",
                [
                    ("Correct Answer", True),
                    ("Incorrect Option B", False),
                    ("Incorrect Option C", False),
                    ("Incorrect Option D", False),
                ],
            )
            questions.append(
                self.create_question(
                    lesson_id,
                    q + 1,
                    content,
                    knowledge_component=f"KC for Q{q + 1} in {lesson_title}",
                )
            )
        return questions

    def create_standalone_lesson(
        self,
        lesson_index: int,
        *,
        group_id: int,
        module_id: int,
        questions_per_lesson: int,
    ) -> LessonSpec:
        titles = STANDALONE_TITLES_BY_MODULE.get(module_id, DEFAULT_STANDALONE_TITLES)
        title = f"Ramp Up {lesson_index + 1}: {titles[lesson_index % len(titles)]}"

        lesson = self.create_assignment(title, "Auto-generated sandbox lesson", {"mode": "lesson", "isOptional": False})
        assigned_id = self.assign_to_group(lesson.id, group_id)
        questions = self.create_lesson_questions(lesson.id, title, questions_per_lesson)
        self.link_to_module(lesson.id, module_id, lesson_index + 1)

        return LessonSpec(lesson_id=lesson.id, title=title, assigned_lesson_id=assigned_id, questions=questions)

    def create_paired_lesson(
        self,
        lesson_index: int,
        *,
        group_id: int,
        module_id: int,
        questions_per_lesson: int,
        standalone_offset: int,
    ) -> LessonSpec:
        """A lesson plus its sequential mastery check, which lists the lesson as prerequisite."""
        titles = PAIRED_TITLES_BY_MODULE.get(module_id, DEFAULT_PAIRED_TITLES)
        title = f"Lesson {lesson_index + 1}: {titles[lesson_index % len(titles)]}"
        lesson_order = standalone_offset + lesson_index * 2 + 1

        lesson = self.create_assignment(title, "Auto-generated sandbox lesson", {"mode": "lesson", "isOptional": False})
        assigned_lesson_id = self.assign_to_group(lesson.id, group_id)
        questions = self.create_lesson_questions(lesson.id, title, questions_per_lesson)
        self.link_to_module(lesson.id, module_id, lesson_order)

        mastery = self.create_assignment(title, "Mastery check for lesson", {"mode": "sequential", "isOptional": False})
        self.create_question(
            mastery.id,
            1,
            multiple_choice(
                f"Mastery Check: Demonstrate your understanding of {title}",
                "Complete this to show mastery of the lesson content.",
                [("I understand the concept", True), ("I need more practice", False)],
            ),
        )
        self.link_to_module(mastery.id, module_id, lesson_order + 1)
        assigned_mastery_id = self.assign_to_group(mastery.id, group_id)
        self.session.add(
            AssignmentPrerequisiteModel(
                assignment_id=mastery.id,
                type=PREREQUISITE_TYPE,
                prereq_assignment_id=lesson.id,
            )
        )
        self.session.flush()

        return LessonSpec(
            lesson_id=lesson.id,
            title=title,
            assigned_lesson_id=assigned_lesson_id,
            mastery_check_id=mastery.id,
            mastery_check_title=title,
            assigned_mastery_id=assigned_mastery_id,
            questions=questions,
        )

    def create_all_lessons_for_module(
        self,
        *,
        group_id: int,
        module_id: int,
        standalone_count: int,
        paired_count: int,
        questions_per_lesson: int,
    ) -> ModuleLessonData:
        logger.info(
            "Creating %d standalone + %d paired lessons for group %s, module %s",
            standalone_count,
            paired_count,
            group_id,
            module_id,
        )
        standalone = [
            self.create_standalone_lesson(
                index,
                group_id=group_id,
                module_id=module_id,
                questions_per_lesson=questions_per_lesson,
            )
            for index in range(standalone_count)
        ]
        paired = [
            self.create_paired_lesson(
                index,
                group_id=group_id,
                module_id=module_id,
                questions_per_lesson=questions_per_lesson,
                standalone_offset=standalone_count,
            )
            for index in range(paired_count)
        ]
        for lesson in standalone + paired:
            logger.debug(
                "Created %s (ID: %s, mastery check: %s)", lesson.title, lesson.lesson_id, lesson.mastery_check_id
            )
        return ModuleLessonData(module_id=module_id, standalone_lessons=standalone, paired_lessons=paired)


__all__ = ["LessonFactory", "multiple_choice"]
