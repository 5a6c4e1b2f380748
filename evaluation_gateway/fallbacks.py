"""Canned results used when the provider is unavailable."""
from __future__ import annotations

from typing import List

from domain import (
    Category,
    CodeReview,
    CodingChallenge,
    Difficulty,
    EvaluationResult,
    Question,
    ResumeAnalysis,
    StarterCode,
)

MEANINGFUL_ANSWER_CHARS = 30


def fallback_questions(role: str, category: Category) -> List[Question]:
    if category is Category.APTITUDE:
        return [
            Question(
                id="f-a1",
                text=(
                    "A bat and a ball cost $1.10 in total. The bat costs $1.00 more than the ball. "
                    "How much does the ball cost?"
                ),
                category=Category.APTITUDE,
                difficulty=Difficulty.INTERMEDIATE,
                ideal_keywords=["5 cents", "0.05"],
            ),
            Question(
                id="f-a2",
                text=(
                    "If it takes 5 machines 5 minutes to make 5 widgets, how long would it take "
                    "100 machines to make 100 widgets?"
                ),
                category=Category.APTITUDE,
                difficulty=Difficulty.INTERMEDIATE,
                ideal_keywords=["5 minutes"],
            ),
            Question(
                id="f-a3",
                text=(
                    "In a lake, there is a patch of lily pads. Every day, the patch doubles in size. "
                    "If it takes 48 days for the patch to cover the entire lake, how long would it take "
                    "for the patch to cover half of the lake?"
                ),
                category=Category.APTITUDE,
                difficulty=Difficulty.INTERMEDIATE,
                ideal_keywords=["47 days"],
            ),
        ]
    return [
        Question(
            id="f1",
            text=f"Explain the core architecture of a modern {role} application.",
            category=category,
            difficulty=Difficulty.INTERMEDIATE,
            ideal_keywords=["scalability", "modularity"],
        ),
        Question(
            id="f2",
            text="How do you approach performance optimization in your projects?",
            category=category,
            difficulty=Difficulty.INTERMEDIATE,
            ideal_keywords=["profiling", "caching"],
        ),
        Question(
            id="f3",
            text="Describe a time you had to deal with a significant technical debt. How did you handle it?",
            category=category,
            difficulty=Difficulty.INTERMEDIATE,
            ideal_keywords=["refactoring", "prioritization"],
        ),
    ]


def fallback_coding_challenge() -> CodingChallenge:
    return CodingChallenge(
        id="f-code-1",
        title="Optimized Array Search",
        difficulty="Medium",
        points=100,
        description=(
            "Write a function that finds the first unique character in a string and returns its index. "
            "If it doesn't exist, return -1."
        ),
        starter_code=StarterCode(
            python="def firstUniqChar(s: str) -> int:\n    # Write your code here\n    pass",
            java=(
                "class Solution {\n    public int firstUniqChar(String s) {\n"
                "        // Write your code here\n        return -1;\n    }\n}"
            ),
            cpp=(
                "class Solution {\npublic:\n    int firstUniqChar(string s) {\n"
                "        // Write your code here\n        return -1;\n    }\n};"
            ),
        ),
    )


def fallback_evaluation(answer_text: str) -> EvaluationResult:
    """Length heuristic used while the evaluator is degraded."""

    meaningful = len(answer_text) > MEANINGFUL_ANSWER_CHARS
    return EvaluationResult(
        score=75 if meaningful else 0,
        relevance=70,
        correctness=70,
        grammar=100,
        sentiment="Neutral",
        feedback=(
            "Our AI evaluation engine is currently experiencing high traffic. We've provided a preliminary "
            "score based on your response length and engagement. Your progress has been saved."
        ),
        strengths=["Persistence in completing the task during peak load."],
        weaknesses=["AI analysis currently throttled."],
        ideal_answer=(
            "A standard answer would involve explaining the core mechanics, edge cases, and best practices "
            "associated with the technology mentioned in the question."
        ),
    )


def fallback_code_review() -> CodeReview:
    return CodeReview(
        status="System Busy",
        feedback=(
            "Your code was submitted, but deep complexity analysis is temporarily unavailable due to high "
            "demand. Please check the optimal solution below."
        ),
        score=80,
        optimal_solution=(
            "// Automated complexity analysis is currently offline.\n"
            "// Focus on O(n) time and O(1) space where possible."
        ),
    )


def fallback_resume_analysis(target_job: str) -> ResumeAnalysis:
    return ResumeAnalysis(
        score=50,
        summary="We are currently experiencing high API demand. This is a simplified analysis.",
        suggested_improvements=["Try uploading again in a few minutes for a deep AI audit."],
        matching_score=50,
        skill_gaps=["Analysis pending"],
        suggested_roles=[target_job, "Software Engineer", "Tech Consultant"],
    )
