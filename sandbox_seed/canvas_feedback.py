"""Canvas mastery checks with AI feedback for the feedback explorer dashboard."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from .assessments import record_response
from .constants import ALWAYS_COMPLETE_INDICES, EXPLANATION_GRADINGS, ZERO_START_INDICES
from .lessons import LessonFactory
from .models import Enrollment, QuestionSpec

logger = logging.getLogger(__name__)

CANVAS_ASSIGNMENTS_PER_MODULE = 2
CANVAS_QUESTIONS_PER_ASSIGNMENT = 2

OVERALL_FEEDBACK_CORRECT = [
    "- ✅ Your answer has the right idea!\n- Your work clearly shows each step of the solving process.\n"
    "- 🔍 One small suggestion: try labeling your variables more clearly next time.",
    "- ✅ Great job working through this problem!\n- You identified the correct strategy and applied it well.\n"
    "- Your explanation was thorough and easy to follow.",
    "- ✅ Excellent work!\n- You showed a strong understanding of the concept.\n"
    "- Your diagram clearly supports your answer.",
    "- ✅ Nice job!\n- You correctly set up the equation and solved it step by step.\n"
    "- Consider showing your check at the end to verify your answer.",
]

OVERALL_FEEDBACK_INCORRECT = [
    "- 🔄 Not quite there yet.\n- You started with the right approach, but there's an error in your second step.\n"
    "- 🔍 Try re-reading the problem and checking your signs.",
    "- 🔄 Good effort, but let's look at this again.\n- Your setup is correct, but the solving process has a mistake.\n"
    "- Think about what happens when you divide both sides.",
    "- 🔄 Almost there!\n- You have the right idea but made a calculation error.\n"
    "- Try working through it again step by step.",
    "- 🔄 Let's revisit this.\n- Your diagram doesn't quite match the problem description.\n"
    "- Re-read the problem and try sketching it again.",
]

THINKING_CORRECT = [
    "The student correctly identified the key concept and applied it systematically. "
    "Their work shows clear step-by-step reasoning. The final answer matches the expected solution.",
    "Student demonstrated strong understanding. Their explanation covers all required parts. "
    "The mathematical work is accurate and well-organized.",
    "The student's approach is valid and their execution is correct. "
    "They showed their work clearly and arrived at the right answer through logical steps.",
]

THINKING_INCORRECT = [
    "The student attempted the problem but made a sign error in step 2. They correctly set up the initial "
    "equation but lost track when combining like terms. The final answer is incorrect due to this error.",
    "Student showed partial understanding but confused the operation needed. Their setup was reasonable "
    "but the approach diverged from the correct method midway through.",
    "The student's work shows they understand the general concept but made errors in execution. "
    "The diagram is partially correct but missing key information.",
]

STUDENT_RUBRIC_CORRECT = [
    "✅ Part 1: You correctly identified the variables\n✅ Part 2: Your equation is set up properly\n"
    "✅ Part 3: Solution is correct",
    "✅ Part 1: Correct approach chosen\n✅ Part 2: Work shown clearly\n✅ Part 3: Final answer is accurate",
]

STUDENT_RUBRIC_INCORRECT = [
    "✅ Part 1: You correctly identified the variables\n"
    "🔄 Part 2: Check your equation setup, the right side needs adjustment\n"
    "🔄 Part 3: Since Part 2 has an error, the solution needs to be recalculated",
    "✅ Part 1: Good start with the right approach\n🔄 Part 2: There's a sign error in your work\n"
    "🔄 Part 3: Try again after fixing Part 2",
]

TEACHER_RUBRIC_CORRECT = [
    "Part 1 (Setup): Correct. Student identified variables and wrote the equation properly.\n"
    "Part 2 (Process): Correct. Clear step-by-step work shown.\n"
    "Part 3 (Answer): Correct. Final answer matches exemplar: x = 7.",
    "Part 1 (Identification): Correct. Student recognized the problem type.\n"
    "Part 2 (Strategy): Correct. Appropriate method selected and executed.\n"
    "Part 3 (Solution): Correct. Answer is accurate with units.",
]

TEACHER_RUBRIC_INCORRECT = [
    "Part 1 (Setup): Correct. Student identified variables properly.\n"
    "Part 2 (Process): Incorrect. Sign error when moving terms. Expected: 3x + 5 = 26, Student wrote: 3x - 5 = 26.\n"
    "Part 3 (Answer): Incorrect due to Part 2 error. Expected: x = 7, Got: x = 10.33.",
    "Part 1 (Identification): Partially correct. Student recognized the general concept but missed a constraint.\n"
    "Part 2 (Strategy): Incorrect. Used addition instead of subtraction.\n"
    "Part 3 (Solution): Incorrect. Answer does not satisfy the original equation.",
]

STUDENT_TEXT_RESPONSES = [
    "I started by identifying what x represents, then I set up the equation based on the problem. "
    "I combined like terms and solved for x by dividing both sides.",
    "First I drew a diagram to understand the problem. Then I wrote an equation and solved it step by step. "
    "I checked my answer by plugging it back in.",
    "I used the balance method to solve this. I subtracted 5 from both sides, then divided by 3 to get the answer.",
    "I set up a proportion based on the given information and cross-multiplied to find the unknown value.",
    "I graphed both equations and found where they intersect. The intersection point gives me the solution.",
]

CANVAS_QUESTION_PROMPTS = [
    "Show your work and explain how you would solve the equation 3x + 5 = 26. "
    "Use the canvas to write out each step.",
    "Draw a diagram to represent the relationship described in the problem, then solve for the unknown. "
    "Explain your reasoning.",
    "Use the canvas to solve this system of equations. Show all your work and explain your strategy.",
    "Explain your approach to solving this word problem. Draw a model if it helps, "
    "and show your solution step by step.",
]


class CanvasAssignment(BaseModel):
    id: int
    assigned_id: int
    title: str
    questions: List[QuestionSpec] = Field(default_factory=list)


def build_ai_analysis(is_correct: bool, explanation_graded: bool, rng: random.Random) -> Dict[str, Any]:
    """AI feedback payload; explanation-graded responses count as correct only with a full explanation."""
    analysis: Dict[str, Any] = {
        "thinking": rng.choice(THINKING_CORRECT if is_correct else THINKING_INCORRECT),
        "additionalFeedback": [
            {
                "sectionTitle": "Student-Facing Rubric",
                "content": rng.choice(STUDENT_RUBRIC_CORRECT if is_correct else STUDENT_RUBRIC_INCORRECT),
            },
            {
                "sectionTitle": "Teacher-Facing Rubric",
                "content": rng.choice(TEACHER_RUBRIC_CORRECT if is_correct else TEACHER_RUBRIC_INCORRECT),
            },
        ],
        "overallAIFeedback": rng.choice(OVERALL_FEEDBACK_CORRECT if is_correct else OVERALL_FEEDBACK_INCORRECT),
    }
    if not explanation_graded:
        analysis["isCorrect"] = is_correct
        return analysis

    grading = rng.choice(EXPLANATION_GRADINGS[1:] if is_correct else EXPLANATION_GRADINGS)
    analysis["answersCorrect"] = is_correct
    analysis["explanationGrading"] = grading
    analysis["isCorrect"] = is_correct and grading == "full"
    return analysis


def build_canvas_response_content(is_correct: bool, explanation_graded: bool, rng: random.Random) -> Dict[str, Any]:
    return {
        "type": "canvas",
        "canvasResponseData": {"canvasStateHistory": [], "finalCanvasState": {}},
        "overallStudentTextResponse": rng.choice(STUDENT_TEXT_RESPONSES),
        "aiAnalysis": build_ai_analysis(is_correct, explanation_graded, rng),
    }


def create_canvas_assignments(
    factory: LessonFactory,
    *,
    group_id: int,
    module_id: int,
    standalone_count: int,
    paired_count: int,
) -> List[CanvasAssignment]:
    """Canvas practice mastery checks ordered after every lesson in the module."""
    assignments: List[CanvasAssignment] = []
    for index in range(CANVAS_ASSIGNMENTS_PER_MODULE):
        title = f"Canvas Practice {index + 1}"
        assignment = factory.create_assignment(
            title,
            "Canvas mastery check with AI feedback",
            {"mode": "sequential", "isOptional": False},
        )
        factory.link_to_module(assignment.id, module_id, standalone_count + paired_count * 2 + index + 1)
        assigned_id = factory.assign_to_group(assignment.id, group_id)

        questions = []
        for q in range(CANVAS_QUESTIONS_PER_ASSIGNMENT):
            prompt = CANVAS_QUESTION_PROMPTS[(index * 2 + q) % len(CANVAS_QUESTION_PROMPTS)]
            questions.append(
                factory.create_question(
                    assignment.id,
                    q + 1,
                    {
                        "type": "CANVAS",
                        "questionText": prompt,
                        "acceptanceCriteria": "Student shows complete work with correct answer and clear explanation.",
                        "studentStartMode": "fresh_canvas",
                        "recording": "optional",
                    },
                )
            )
        assignments.append(
            CanvasAssignment(id=assignment.id, assigned_id=assigned_id, title=title, questions=questions)
        )
        logger.info("Created %s (%d Canvas questions)", title, len(questions))
    return assignments


def seed_canvas_responses(
    session: Session,
    factory: LessonFactory,
    enrollments: Sequence[Enrollment],
    assignments: Sequence[CanvasAssignment],
    *,
    module_index: int,
    days_to_seed: int,
    rng: Optional[random.Random] = None,
) -> int:
    """About three quarters of students respond; the first module uses explanation grading."""
    if not assignments:
        return 0
    rng = rng or random.Random()
    explanation_graded = module_index == 0

    created = 0
    for student_index, enrollment in enumerate(enrollments):
        if student_index in ZERO_START_INDICES:
            logger.debug("%s: zero-start student", enrollment.display_name)
            continue
        if student_index not in ALWAYS_COMPLETE_INDICES and student_index % 4 == 0:
            logger.debug("%s: no Canvas responses", enrollment.display_name)
            continue

        for assignment_index, assignment in enumerate(assignments):
            base_day = max(1, int(days_to_seed * 0.3) - assignment_index * 3)
            for q, question in enumerate(assignment.questions):
                is_correct = rng.random() > 0.4
                content = build_canvas_response_content(is_correct, explanation_graded, rng)
                record_response(
                    session,
                    enrollment_id=enrollment.id,
                    question_id=question.id,
                    assignment_question_id=question.assignment_question_id,
                    assigned_id=assignment.assigned_id,
                    is_correct=content["aiAnalysis"]["isCorrect"],
                    content=content,
                    timestamp=factory.clock.timestamp_days_ago(base_day, q),
                )
                created += 1

    session.flush()
    logger.info("Created %d Canvas responses for module %d", created, module_index + 1)
    return created


__all__ = [
    "CanvasAssignment",
    "build_ai_analysis",
    "build_canvas_response_content",
    "create_canvas_assignments",
    "seed_canvas_responses",
]
