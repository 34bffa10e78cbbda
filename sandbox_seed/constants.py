"""Fixed names and titles used when creating sandbox content."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

StudentName = Tuple[Optional[str], Optional[str]]

SEED_EMAIL_DOMAIN = "test.local"
SEED_EMAIL_PATTERN = f"sandbox.%@{SEED_EMAIL_DOMAIN}"

# Two nameless students per group exercise the dashboards' email fallback.
STUDENT_NAMES_BY_GROUP: List[List[StudentName]] = [
    [
        ("Alex", "Smith"),
        ("Emma", "Rodriguez"),
        ("Liam", "Chen"),
        ("Olivia", "Patel"),
        ("Noah", "Williams"),
        ("Ava", "Kim"),
        ("Ethan", "Garcia"),
        ("Sophia", "Nguyen"),
        ("Mason", "Brown"),
        ("Isabella", "Martinez"),
        ("James", "Lee"),
        (None, None),
        (None, None),
    ],
    [
        ("Charlotte", "Thomas"),
        ("Benjamin", "Jackson"),
        ("Amelia", "White"),
        ("Henry", "Harris"),
        ("Harper", "Clark"),
        ("Sebastian", "Lewis"),
        ("Evelyn", "Robinson"),
        ("Jack", "Walker"),
        ("Luna", "Young"),
        ("Owen", "Allen"),
        ("Chloe", "King"),
        (None, None),
        (None, None),
    ],
    [
        ("Michael", "Green"),
        ("Aria", "Baker"),
        ("William", "Adams"),
        ("Scarlett", "Nelson"),
        ("Alexander", "Hill"),
        ("Grace", "Ramirez"),
        ("Matthew", "Campbell"),
        ("Zoey", "Mitchell"),
        ("David", "Roberts"),
        ("Lily", "Carter"),
        ("Joseph", "Phillips"),
        (None, None),
        (None, None),
    ],
]

STANDALONE_TITLES_BY_MODULE: Dict[int, List[str]] = {
    10: ["Puzzle Problems", "Hanger Diagrams"],
    11: ["Relationships Between Quantities", "Graphing Two Equations"],
}
DEFAULT_STANDALONE_TITLES = ["Unit Overview", "Warm-Up Problems"]

PAIRED_TITLES_BY_MODULE: Dict[int, List[str]] = {
    10: [
        "Keeping the Equation Balanced",
        "Balanced Moves",
        "More Balanced Moves",
        "Solving Any Linear Equation",
        "Strategic Solving",
        "All, Some, or No Solutions",
        "When Are They the Same?",
        "On or Off the Line?",
        "On Both of the Lines",
        "Systems of Equations",
    ],
    11: [
        "Introduction to Systems",
        "Graphing Systems of Equations",
        "Solving Systems by Substitution",
        "Solving Systems by Elimination",
        "Choosing a Strategy",
        "Systems with No Solution",
        "Systems with Many Solutions",
        "Modeling with Systems",
        "Applications of Systems",
        "Systems Review",
    ],
}
DEFAULT_PAIRED_TITLES = [
    "Introduction",
    "Core Concepts",
    "Practice Problems",
    "Advanced Topics",
    "Review and Assessment",
]

POINT_DESCRIPTIONS = [
    "Completed Assignment",
    "Streak Bonus",
    "Teacher Award",
    "Perfect Score",
    "Daily Login Bonus",
]

# Title patterns (SQL LIKE) that identify seeded assignments during cleanup.
SEEDED_ASSIGNMENT_PATTERNS = [
    "Lesson _:%",
    "Lesson __:%",
    "Ramp Up %:%",
    "Canvas Practice %",
]
SEEDED_ASSESSMENT_PATTERN = "Unit % Assessment"
SEEDED_KC_PATTERNS = ["KC for Q% in Lesson%", "KC for Q% in Ramp%"]

PREREQUISITE_TYPE = "podsie_assignment"


def module_name(module_position: int) -> str:
    return f"Alg 1 Unit 8.{3 + module_position}"


def student_names_for_group(group_index: int) -> List[StudentName]:
    if 0 <= group_index < len(STUDENT_NAMES_BY_GROUP):
        return STUDENT_NAMES_BY_GROUP[group_index]
    return STUDENT_NAMES_BY_GROUP[0]


# Canvas feedback: these enrollment positions always respond / never respond.
ALWAYS_COMPLETE_INDICES = (0,)
ZERO_START_INDICES = (12,)

EXPLANATION_GRADINGS = ("none", "partial", "full")
