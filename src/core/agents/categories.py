# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Keyword-based categorisation of learning topics and therapy concerns.

Used to label sessions in the side panel and to pre-fill the planner's
and assessment agent's categorisation when the model does not supply one.
Matching is case-insensitive substring search; rules are checked in order
and the first match wins, with optional refinements checked inside it.
"""

from dataclasses import dataclass, field

MIN_SUBJECT_CATEGORY_ID = 1
MAX_SUBJECT_CATEGORY_ID = 50
OTHER_SUBJECT_CATEGORY_ID = 50


@dataclass(frozen=True)
class SubjectCategory:
    """Subject category assigned to a learning session."""

    category_id: int
    category_name: str
    subject_name: str


@dataclass(frozen=True)
class TherapyCategory:
    """Therapeutic category assigned to a therapy session."""

    category: str
    category_name: str


@dataclass(frozen=True)
class _SubjectRule:
    keywords: tuple[str, ...]
    category_id: int
    category_name: str
    refinements: tuple["_SubjectRule", ...] = field(default_factory=tuple)

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


_SUBJECT_RULES: tuple[_SubjectRule, ...] = (
    _SubjectRule(
        ("react", "javascript", "python", "java", "programming", "coding",
         "algorithm", "software", "development"),
        1, "Programming",
        (
            _SubjectRule(("mobile", "ios", "android"), 34, "Mobile Development"),
            _SubjectRule(("web", "html", "css", "frontend"), 35, "Web Development"),
        ),
    ),
    _SubjectRule(
        ("data", "analytics", "statistics", "machine learning", "visualization", "pandas"),
        2, "Data Science & Analytics",
        (_SubjectRule(("ai", "machine learning", "neural"), 32, "AI & Machine Learning"),),
    ),
    _SubjectRule(
        ("design", "ux", "ui", "user experience", "prototyping"),
        3, "Design & UX",
        (_SubjectRule(("graphic", "visual", "branding"), 15, "Graphic Design"),),
    ),
    _SubjectRule(
        ("business", "management", "strategy", "entrepreneur", "leadership", "operations"),
        4, "Business & Management",
        (
            _SubjectRule(("project",), 28, "Project Management"),
            _SubjectRule(("leadership", "team"), 27, "Leadership"),
        ),
    ),
    _SubjectRule(
        ("marketing", "sales", "advertising", "promotion", "branding", "customer"),
        5, "Marketing & Sales",
        (_SubjectRule(("social media", "instagram", "facebook"), 48, "Social Media"),),
    ),
    _SubjectRule(("math", "calculus", "algebra", "geometry", "statistics"), 9, "Mathematics"),
    _SubjectRule(("physics",), 42, "Physics"),
    _SubjectRule(("chemistry",), 43, "Chemistry"),
    _SubjectRule(("biology",), 44, "Biology"),
    _SubjectRule(
        ("english", "spanish", "french", "language", "grammar", "vocabulary"),
        10, "Languages",
    ),
    _SubjectRule(
        ("health", "fitness", "exercise", "nutrition", "diet", "wellness"),
        16, "Health & Wellness",
        (
            _SubjectRule(("fitness", "exercise", "workout"), 17, "Sports & Fitness"),
            _SubjectRule(("nutrition", "diet", "food"), 18, "Nutrition & Diet"),
        ),
    ),
    _SubjectRule(
        ("finance", "economics", "money", "investment", "trading", "accounting"),
        6, "Finance & Economics",
        (_SubjectRule(("crypto", "blockchain", "bitcoin"), 49, "Blockchain & Crypto"),),
    ),
    _SubjectRule(
        ("communication", "speaking", "presentation", "public speaking", "rhetoric"),
        26, "Communication",
        (_SubjectRule(("public speaking", "presentation"), 29, "Public Speaking"),),
    ),
    _SubjectRule(
        ("personal development", "self improvement", "productivity", "motivation", "habits"),
        21, "Personal Development",
    ),
)

_THERAPY_RULES: tuple[tuple[tuple[str, ...], TherapyCategory], ...] = (
    (("anxiety", "panic", "worry", "fear", "phobia", "nervous"),
     TherapyCategory("anxiety", "Anxiety Management")),
    (("depress", "sad", "mood", "hopeless", "down", "motivation"),
     TherapyCategory("depression", "Mood Management")),
    (("stress", "overwhelm", "pressure", "burnout", "tension"),
     TherapyCategory("stress", "Stress Management")),
    (("thoughts", "thinking", "negative", "rumination", "overthinking", "cognitive"),
     TherapyCategory("cognitive", "Cognitive Restructuring")),
    (("habit", "behavior", "procrastination", "avoidance", "compulsion"),
     TherapyCategory("behavioral", "Behavioral Change")),
    (("emotion", "anger", "rage", "regulation", "feelings"),
     TherapyCategory("emotional", "Emotional Regulation")),
    (("relationship", "social", "communication", "family", "friend", "partner"),
     TherapyCategory("relational", "Interpersonal Skills")),
    (("confidence", "self-esteem", "worth", "insecure", "identity"),
     TherapyCategory("self-concept", "Self-Esteem Building")),
)

GENERAL_THERAPY_CATEGORY = TherapyCategory("general", "General Well-being")

THERAPY_CATEGORIES: frozenset[str] = frozenset(
    [category.category for _, category in _THERAPY_RULES] + [GENERAL_THERAPY_CATEGORY.category]
)


def detect_subject_category(topic: str) -> SubjectCategory:
    """Map a learning topic to a subject category.

    Args:
        topic: Free-text topic of the learning session.

    Returns:
        The matching category, or "Other" (id 50) when nothing matches.
    """
    text = topic.lower()

    for rule in _SUBJECT_RULES:
        if not rule.matches(text):
            continue
        for refinement in rule.refinements:
            if refinement.matches(text):
                return SubjectCategory(refinement.category_id, refinement.category_name, topic)
        return SubjectCategory(rule.category_id, rule.category_name, topic)

    return SubjectCategory(OTHER_SUBJECT_CATEGORY_ID, "Other", topic)


def detect_therapy_category(concern: str) -> TherapyCategory:
    """Map a primary concern to a therapeutic category.

    Args:
        concern: Free-text primary concern of the therapy session.

    Returns:
        The matching category, or "general" when nothing matches.
    """
    text = concern.lower()

    for keywords, category in _THERAPY_RULES:
        if any(keyword in text for keyword in keywords):
            return category

    return GENERAL_THERAPY_CATEGORY


def is_valid_subject_category(category_id: int | None) -> bool:
    """Check whether a model-supplied category id is in the known range."""
    if category_id is None or isinstance(category_id, bool):
        return False
    return MIN_SUBJECT_CATEGORY_ID <= category_id <= MAX_SUBJECT_CATEGORY_ID
