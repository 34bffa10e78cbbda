"""Domain models passed between the seed collaborators and the pacing scheduler."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Teacher(BaseModel):
    """Teacher profile that owns every seeded assignment."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class Group(BaseModel):
    id: int
    group_name: str
    group_code: Optional[str] = None


class Enrollment(BaseModel):
    """A synthetic student in a group. Enrollment order drives every pacing decision."""

    model_config = ConfigDict(frozen=True)

    id: int
    student_profile_id: str
    display_name: str


class QuestionSpec(BaseModel):
    """A question inside a lesson; shown events require a knowledge component."""

    model_config = ConfigDict(frozen=True)

    id: int
    assignment_question_id: int
    knowledge_component_id: Optional[int] = None


class LessonSpec(BaseModel):
    """A lesson assignment, optionally paired with a mastery-check assignment."""

    model_config = ConfigDict(frozen=True)

    lesson_id: int
    title: str = ""
    assigned_lesson_id: Optional[int] = None
    mastery_check_id: Optional[int] = None
    mastery_check_title: Optional[str] = None
    assigned_mastery_id: Optional[int] = None
    questions: List[QuestionSpec] = Field(default_factory=list)


class ModuleLessonData(BaseModel):
    """Everything created for one module: ramp-up lessons first, then paired lessons."""

    module_id: int
    standalone_lessons: List[LessonSpec] = Field(default_factory=list)
    paired_lessons: List[LessonSpec] = Field(default_factory=list)


class AssessmentQuestion(BaseModel):
    id: int
    assignment_question_id: int
    correct_choice_id: str


class Assessment(BaseModel):
    id: int
    assigned_id: int
    title: str
    questions: List[AssessmentQuestion] = Field(default_factory=list)


__all__ = [
    "Assessment",
    "AssessmentQuestion",
    "Enrollment",
    "Group",
    "LessonSpec",
    "ModuleLessonData",
    "QuestionSpec",
    "Teacher",
]
