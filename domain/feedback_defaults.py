"""Fixed evaluations owned by the analysis pipeline.

``PLACEHOLDER_FEEDBACK`` is the zero state a record carries between the
initial and the final checkpoint. ``FALLBACK_FEEDBACK`` is the demonstration
evaluation substituted when no provider yields a usable result; bump
``FALLBACK_FEEDBACK_VERSION`` whenever its content changes.
"""
from domain.schemas import Feedback

FALLBACK_FEEDBACK_VERSION = "2025.1"

PLACEHOLDER_FEEDBACK = Feedback.model_validate({
    "overallScore": 0,
    "ATS": {"score": 0, "tips": []},
    "toneAndStyle": {"score": 0, "tips": []},
    "content": {"score": 0, "tips": []},
    "structure": {"score": 0, "tips": []},
    "skills": {"score": 0, "tips": []},
})

FALLBACK_FEEDBACK = Feedback.model_validate({
    "overallScore": 78,
    "ATS": {
        "score": 82,
        "tips": [
            {"type": "good", "tip": "Clear contact information and professional formatting"},
            {"type": "improve", "tip": "Add more industry-specific keywords from the job description"},
        ],
    },
    "toneAndStyle": {
        "score": 75,
        "tips": [
            {"type": "good", "tip": "Professional Tone",
             "explanation": "Resume maintains appropriate professional language throughout."},
            {"type": "improve", "tip": "Stronger Action Verbs",
             "explanation": "Replace passive phrases with powerful action verbs like "
                            "'spearheaded', 'orchestrated', 'pioneered'."},
        ],
    },
    "content": {
        "score": 77,
        "tips": [
            {"type": "good", "tip": "Experience Listed",
             "explanation": "Work history is clearly documented with company names and dates."},
            {"type": "improve", "tip": "Quantify Achievements",
             "explanation": "Add specific metrics and numbers to demonstrate impact "
                            "(e.g., 'Increased sales by 25%')."},
        ],
    },
    "structure": {
        "score": 83,
        "tips": [
            {"type": "good", "tip": "Clear Section Organization",
             "explanation": "Resume has well-defined sections that are easy to navigate."},
            {"type": "improve", "tip": "Consistent Formatting",
             "explanation": "Ensure uniform font sizes, bullet styles, and spacing throughout."},
        ],
    },
    "skills": {
        "score": 72,
        "tips": [
            {"type": "good", "tip": "Technical Skills Listed",
             "explanation": "Good variety of relevant technical skills mentioned."},
            {"type": "improve", "tip": "Align with Job Requirements",
             "explanation": "Prioritize skills that match the target job description more closely."},
        ],
    },
})
