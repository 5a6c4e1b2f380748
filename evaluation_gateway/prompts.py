"""Prompt builders for each gateway operation."""
from __future__ import annotations

from textwrap import dedent

from domain import Category, Difficulty


def question_prompt(role: str, category: Category, difficulty: Difficulty, count: int) -> str:
    level = difficulty.value
    if category is Category.APTITUDE:
        instruction = dedent(
            f"""
            Generate {count} Aptitude and Logical Reasoning questions for a candidate applying for a {role} position.
            Focus on quantitative ability, logical reasoning, and data interpretation.
            Ensure the questions are challenging but fair for a {level} level.
            """
        ).strip()
    elif category is Category.SYSTEM_DESIGN:
        instruction = (
            f"Generate {count} System Design questions for a {level} level {role}. "
            "Focus on scalability, distributed systems, and trade-offs."
        )
    else:
        instruction = (
            f"Generate {count} technical interview questions for a {level} level {role}. "
            f"Category: {category.value}. Ensure questions are technical and role-specific."
        )
    return (
        f"{instruction} Difficulty must be one of: BEGINNER, INTERMEDIATE, EXPERT. "
        'Output JSON of the form {"questions": [{"text", "difficulty", "idealKeywords"}]}.'
    )


def coding_prompt(role: str) -> str:
    return (
        f"Generate a coding challenge for a {role}. Include title, difficulty (Easy, Medium or Hard), "
        "description, and starter code for python, java and cpp."
    )


def answer_prompt(question: str, answer: str, category: Category) -> str:
    prompt = dedent(
        f"""
        Evaluate the candidate's technical answer.
        Question: "{question}"
        Candidate Answer: "{answer}"
        Category: {category.value}.
        Score every numeric field from 0 to 100.
        """
    ).strip()
    if category is Category.APTITUDE:
        prompt += "\nEvaluate for mathematical accuracy and logical flow."
    return prompt


def code_review_prompt(problem: str, language: str, code: str) -> str:
    return (
        f'Review code for problem: "{problem}". Language: {language}. Code: "{code}". '
        "Report status, time and space complexity, a 0-100 score, feedback and an optimal solution."
    )


def resume_prompt(resume_text: str, target_job: str) -> str:
    header = dedent(
        f"""
        Analyze the following resume text against the target job "{target_job}".
        Score overall quality and job match from 0 to 100, summarize, list improvements,
        skill gaps, and other roles the candidate fits.
        """
    ).strip()
    return f"{header}\n\nResume:\n{resume_text.strip()}"
