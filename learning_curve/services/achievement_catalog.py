"""Built-in achievement definitions.

The catalog is immutable from the user's point of view; it is loaded
once into the in-memory repo at import (see api/dependencies.py) or into
Postgres by scripts/seed_catalog.py.
"""

from __future__ import annotations

from learning_curve.models.achievement import Achievement
from learning_curve.repos.achievement_repo import InMemoryAchievementRepo

# (key, title, description, icon, category, criteria, points, rarity)
ACHIEVEMENT_DEFINITIONS: list[tuple[str, str, str, str, str, dict, int, str]] = [
    ("first_steps", "First Steps", "Complete your first module",
     "Footprints", "module", {"type": "module_completion", "count": 1}, 10, "common"),
    ("knowledge_seeker", "Knowledge Seeker", "Complete 5 modules",
     "BookOpen", "module", {"type": "module_completion", "count": 5}, 25, "common"),
    ("dedicated_learner", "Dedicated Learner", "Complete 10 modules",
     "GraduationCap", "module", {"type": "module_completion", "count": 10}, 50, "rare"),
    ("master_student", "Master Student", "Complete 25 modules",
     "Award", "module", {"type": "module_completion", "count": 25}, 100, "epic"),
    ("quiz_novice", "Quiz Novice", "Pass your first quiz",
     "CheckCircle", "quiz", {"type": "quiz_passed", "count": 1}, 10, "common"),
    ("perfect_score", "Perfect Score", "Get 100% on a quiz",
     "Star", "quiz", {"type": "quiz_perfect", "count": 1}, 30, "rare"),
    ("quiz_master", "Quiz Master", "Get 100% on 5 quizzes",
     "Trophy", "quiz", {"type": "quiz_perfect", "count": 5}, 75, "epic"),
    ("flawless_victory", "Flawless Victory", "Get 100% on 10 quizzes",
     "Crown", "quiz", {"type": "quiz_perfect", "count": 10}, 150, "legendary"),
    ("path_pioneer", "Path Pioneer", "Complete your first learning path",
     "Map", "path", {"type": "path_completion", "count": 1}, 50, "rare"),
    ("ai_fundamentals_master", "AI Fundamentals Master", "Complete the AI Fundamentals path",
     "Brain", "path", {"type": "specific_path", "path_slug": "ai-fundamentals"}, 50, "rare"),
    ("ml_expert", "ML Expert", "Complete the Machine Learning path",
     "Cpu", "path", {"type": "specific_path", "path_slug": "machine-learning"}, 75, "epic"),
    ("deep_learning_guru", "Deep Learning Guru", "Complete the Deep Learning path",
     "Network", "path", {"type": "specific_path", "path_slug": "deep-learning"}, 100, "epic"),
    ("nlp_specialist", "NLP Specialist", "Complete the Natural Language Processing path",
     "MessageSquare", "path",
     {"type": "specific_path", "path_slug": "natural-language-processing"}, 100, "epic"),
    ("vision_master", "Vision Master", "Complete the Computer Vision path",
     "Eye", "path", {"type": "specific_path", "path_slug": "computer-vision"}, 100, "epic"),
    ("polymath", "Polymath", "Complete 5 learning paths",
     "Sparkles", "path", {"type": "path_completion", "count": 5}, 250, "legendary"),
    ("early_bird", "Early Bird", "Complete onboarding",
     "Sunrise", "special", {"type": "onboarding_complete"}, 5, "common"),
    ("note_taker", "Note Taker", "Create your first note",
     "FileText", "special", {"type": "note_created", "count": 1}, 10, "common"),
    ("certificate_collector", "Certificate Collector", "Earn your first certificate",
     "Award", "special", {"type": "certificate_earned", "count": 1}, 50, "rare"),
]


def builtin_achievements() -> list[Achievement]:
    """The definitions as catalog entries, ids assigned in list order from 1."""
    return [
        Achievement(
            id=i,
            key=key,
            title=title,
            description=description,
            icon=icon,
            category=category,
            points=points,
            rarity=rarity,
            criteria=dict(criteria),
        )
        for i, (key, title, description, icon, category, criteria, points, rarity)
        in enumerate(ACHIEVEMENT_DEFINITIONS, start=1)
    ]


def seed_achievements(repo: InMemoryAchievementRepo) -> None:
    for achievement in builtin_achievements():
        repo.add_definition(achievement)
