# Deterministic offline question generator, used without credentials and as the remote fallback
# quizforge/services/offline_generator.py
from typing import Dict, List, Tuple

from quizforge.models.question import QuestionCandidate

# Each entry: (keywords that select it, question templates). First matching entry wins.
CATALOG: List[Tuple[Tuple[str, ...], List[Dict]]] = [
    (
        ("algorithm", "sort"),
        [
            {
                "question_type": "multiple_choice",
                "stem": "What is the **time complexity** of QuickSort in the worst case?",
                "options": [
                    {"label": "A", "content": "$O(n \\log n)$"},
                    {"label": "B", "content": "$O(n^2)$"},
                    {"label": "C", "content": "$O(n)$"},
                    {"label": "D", "content": "$O(\\log n)$"},
                ],
                "reference_answer": "B",
                "detailed_analysis": [
                    "QuickSort degrades to $O(n^2)$ when every pivot is the smallest or largest element.",
                    "A sorted input with a first-element pivot triggers exactly this case.",
                    "Its average case remains $O(n \\log n)$.",
                ],
                "knowledge_tags": ["algorithms", "sorting", "time-complexity"],
                "difficulty": 3,
            },
            {
                "question_type": "fill_in_the_blank",
                "stem": "The auxiliary space complexity of MergeSort on an array is $O($______$)$.",
                "reference_answer": "n",
                "detailed_analysis": [
                    "Merging two sorted halves needs a temporary buffer.",
                    "That buffer grows with the input, so the extra space is linear.",
                ],
                "knowledge_tags": ["algorithms", "sorting", "space-complexity"],
                "difficulty": 2,
            },
        ],
    ),
    (
        ("physics", "energy"),
        [
            {
                "question_type": "fill_in_the_blank",
                "stem": "In the mass-energy equivalence $E = mc^2$, the constant $c$ stands for the ______.",
                "reference_answer": "speed of light",
                "detailed_analysis": [
                    "Mass-energy equivalence relates the rest mass of a system to its energy.",
                    "$c$ is the speed of light in vacuum, roughly $3 \\times 10^8$ m/s.",
                ],
                "knowledge_tags": ["physics", "relativity", "mass-energy"],
                "difficulty": 2,
            },
            {
                "question_type": "essay",
                "stem": "Explain the significance of Einstein's equation $E = mc^2$ in modern physics.",
                "reference_answer": (
                    "Mass and energy are interchangeable. The relation explains the energy released "
                    "in nuclear fission and fusion and underlies stellar energy production."
                ),
                "detailed_analysis": [
                    "State the meaning: mass can be converted to energy and back.",
                    "Connect it to nuclear reactions: fission and fusion.",
                    "Mention stellar nucleosynthesis as an astronomical consequence.",
                    "Note that the large factor $c^2$ makes a small mass equal a huge energy.",
                ],
                "knowledge_tags": ["physics", "relativity", "nuclear-physics"],
                "difficulty": 4,
            },
        ],
    ),
]

DEFAULT_TEMPLATES: List[Dict] = [
    {
        "question_type": "multiple_choice",
        "stem": "Which of the following best describes the content provided?",
        "options": [
            {"label": "A", "content": "Technical documentation"},
            {"label": "B", "content": "Educational material"},
            {"label": "C", "content": "Research paper"},
            {"label": "D", "content": "Need more context to determine"},
        ],
        "reference_answer": "D",
        "detailed_analysis": [
            "The text carries no subject-specific markers the offline generator recognizes.",
            "Configure a remote model for questions tailored to the content.",
        ],
        "knowledge_tags": ["general"],
        "difficulty": 1,
    },
]


def generate_offline(source_text: str) -> List[QuestionCandidate]:
    """Picks templates by trivial keyword matching. Same input, same output."""
    lowered = source_text.lower()
    templates = DEFAULT_TEMPLATES
    for keywords, entry_templates in CATALOG:
        if any(keyword in lowered for keyword in keywords):
            templates = entry_templates
            break
    return [QuestionCandidate(**template) for template in templates]
