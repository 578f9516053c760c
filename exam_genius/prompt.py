"""
Prompts for exam generation and question regeneration.
آزمون‌ساز: دستورالعمل‌های ارسالی به مدل.
"""

from .schema import GenerationConfig, Question

# Gemini accepts long inputs, but pasted books are cut to keep latency sane
MAX_TEXT_CHARS = 25_000


def build_requirements(config: GenerationConfig) -> str:
    """Join the non-zero per-type counts, e.g. '4 questions of type MULTIPLE_CHOICE, ...'."""
    return ", ".join(
        f"{count} questions of type {qtype.value}"
        for qtype, count in config.question_counts.items()
        if count > 0
    )


def get_system_prompt(config: GenerationConfig) -> str:
    """System instruction for full exam generation."""
    return f"""
You are an expert educational consultant and exam designer fluent in Persian (Farsi).

Requirements:
1. Output: Valid JSON only.
2. Language: Persian.
3. Content:
   - Header info.
   - EXACTLY these questions: {build_requirements(config)}.
   - Total score approx 20.
   - Generate a list of 4-6 core 'learning objectives' for the evaluation table.

Difficulty: {config.difficulty}
"""


def get_url_prompt(config: GenerationConfig) -> str:
    """Prompt for URL sources. No response schema can be used here, so the structure is spelled out."""
    return f"""
Analyze content at: "{config.content}".
Generate a Persian exam JSON.
Structure:
{{
  "header": {{ "title": "...", "schoolName": "...", "teacherName": "...", "grade": "...", "durationMinutes": 60, "totalScore": 20 }},
  "questions": [
     {{ "id": 1, "type": "MULTIPLE_CHOICE", "text": "...", "options": ["..."], "learningObjective": "...", "difficulty": "{config.difficulty}" }},
     {{ "id": 2, "type": "MATCHING", "text": "Connect the related items", "pairs": [{{"left": "A", "right": "B"}}], "learningObjective": "..." }}
  ],
  "evaluationTable": [
      {{ "objective": "Understanding X" }}
  ]
}}
"""


def get_text_prompt(config: GenerationConfig) -> str:
    """Prompt for pasted text sources."""
    content = config.content[:MAX_TEXT_CHARS]
    return f"""
Content: "{content}"
Generate exam JSON based on this content with exactly {config.total_questions} questions as requested.
"""


def get_file_prompt(config: GenerationConfig) -> str:
    """Prompt sent next to an inline image/PDF."""
    note = f'\nAdditional notes from the teacher: "{config.content[:2000]}"' if config.content.strip() else ""
    return f"""
The attached file is the source material (textbook page, handout or worksheet).
Generate exam JSON based on this file with exactly {config.total_questions} questions as requested.{note}
"""


def get_regeneration_prompt(question: Question, difficulty: str, context_summary: str) -> str:
    """Prompt asking the model to rewrite one question at a new difficulty."""
    return f"""
Rewrite the following exam question to be "{difficulty}".
Original Question: "{question.text}"
Type: {question.type.value}
Context/Topic: {context_summary}

Return JSON only:
{{
   "text": "New question text...",
   "options": ["opt1", "opt2"] (if MC),
   "pairs": [{{"left": "a", "right": "b"}}] (if Matching),
   "learningObjective": "..."
}}
"""
