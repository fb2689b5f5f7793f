from __future__ import annotations
from typing import Dict, List, Sequence
from models import BreakPattern


TECHNIQUES_BY_STYLE: Dict[str, List[str]] = {
    "visual": [
        "Create mind maps for complex topics",
        "Use color-coded notes for different concepts",
        "Watch video tutorials for difficult subjects",
        "Draw diagrams to visualize processes",
    ],
    "auditory": [
        "Record yourself explaining concepts and listen back",
        "Participate in study groups with discussions",
        "Use text-to-speech for reading materials",
        "Explain concepts out loud to yourself",
    ],
    "reading/writing": [
        "Create detailed written summaries",
        "Rewrite notes in your own words",
        "Use the Cornell note-taking system",
        "Create flashcards for key concepts",
    ],
    "kinesthetic": [
        "Use physical movement while reviewing material",
        "Create physical models or representations",
        "Take short walks between study sessions",
        "Use hands-on experiments when possible",
    ],
}

CONTINGENCY_PLANS: List[str] = [
    "If you miss a study session, prioritize the most urgent topics in your next available slot",
    "If you're feeling overwhelmed, focus on review rather than new material",
    "If you're struggling with a topic, switch to a different learning method",
]


def break_patterns() -> List[BreakPattern]:
    return [
        BreakPattern(duration="25 minutes study, 5 minutes break", repeat=4, long_break="15-30 minutes"),
        BreakPattern(duration="50 minutes study, 10 minutes break", repeat=2, long_break="30 minutes"),
        BreakPattern(duration="90 minutes study, 20 minutes break", repeat=2, long_break="60 minutes"),
    ]


def recommend_techniques(learning_style: str, preferred_methods: Sequence[str]) -> List[str]:
    """
    Fixed techniques for the learning style, then the user's own methods.
    Preferred methods already in the list (exact match) are skipped.
    """
    techniques = list(TECHNIQUES_BY_STYLE[learning_style])
    for method in preferred_methods:
        if method not in techniques:
            techniques.append(method)
    return techniques
