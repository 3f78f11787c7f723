import os
import json
import logging
from typing import Optional, Type, TypeVar

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from educonnect.errors import AIResponseError
from educonnect.models.ai import (
    AnnouncementInput,
    AnnouncementOutput,
    EnglishTutorInput,
    EnglishTutorOutput,
    LessonPlanInput,
    LessonPlanOutput,
    PerformanceAnalyzerInput,
    PerformanceAnalyzerOutput,
    QuestionSolverInput,
    QuestionSolverOutput,
    StudyGuideInput,
    StudyGuideOutput,
    TestInput,
    TestOutput,
    TestPaperInput,
    TestPaperOutput,
)

logger = logging.getLogger(__name__)

AI_MODEL = os.getenv("AI_MODEL", "gpt-4o-mini")

OutputT = TypeVar("OutputT", bound=BaseModel)

_client: Optional[OpenAI] = None


def get_openai_client() -> OpenAI:
    """Create the OpenAI client on first use."""
    global _client
    if _client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable is not set")
        _client = OpenAI(api_key=api_key)
    return _client


def extract_json(content: str) -> str:
    """Strip a markdown code fence around a JSON object, if present."""
    content = content.strip()
    if not content.startswith("```"):
        return content

    lines = content.split("\n")
    json_start = None
    for i, line in enumerate(lines):
        if line.strip().startswith("{"):
            json_start = i
            break
    if json_start is None:
        return content

    json_lines = lines[json_start:]
    for i in range(len(json_lines) - 1, -1, -1):
        if json_lines[i].strip().endswith("}"):
            return "\n".join(json_lines[:i + 1])
    return content


def run_structured_prompt(
    system: str,
    prompt: str,
    output_model: Type[OutputT],
    temperature: float = 0.7,
    max_tokens: int = 2000,
) -> OutputT:
    """Send one prompt and validate the JSON reply against ``output_model``.

    Raises:
        AIResponseError: the reply is empty, not JSON, or fails validation
    """
    client = get_openai_client()
    try:
        response = client.chat.completions.create(
            model=AI_MODEL,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        logger.error("Model call failed for %s: %s", output_model.__name__, e)
        raise AIResponseError("The AI service could not be reached.") from e

    content = response.choices[0].message.content if response.choices else None
    if not content or not content.strip():
        logger.error("Empty response for %s", output_model.__name__)
        raise AIResponseError()

    try:
        return output_model.model_validate(json.loads(extract_json(content)))
    except json.JSONDecodeError as e:
        logger.error("Could not parse JSON for %s: %s", output_model.__name__, e)
        raise AIResponseError() from e
    except ValidationError as e:
        logger.error("Response for %s failed validation: %s", output_model.__name__, e)
        raise AIResponseError() from e


def generate_announcement(data: AnnouncementInput) -> AnnouncementOutput:
    prompt = f"""You are an assistant for a teacher. Your task is to write a clear and concise announcement for students based on the provided key points.

Key Points: "{data.keyPoints}"
Tone: {data.tone}

Draft a suitable announcement. If the points mention a date like "tomorrow" or "Friday", keep it relative. Address the students warmly (e.g., "Hello students," or "Hi everyone,").

Return a JSON object: {{"content": "<the announcement>"}}"""

    return run_structured_prompt(
        "You write class announcements for teachers. Return only valid JSON.",
        prompt,
        AnnouncementOutput,
    )


def generate_lesson_plan(data: LessonPlanInput) -> LessonPlanOutput:
    prompt = f"""You are an expert curriculum designer for teachers in India. Create a structured and engaging lesson plan.

Lesson Details:
- Topic: "{data.topic}"
- Subject: "{data.subject}"
- Class Level: {data.classLevel}
- Duration: {data.duration} minutes

Generate a lesson plan with the following components:

1. Learning Objectives: 3-4 specific and measurable goals for the end of the lesson.
2. Materials Needed: all necessary materials, like "Whiteboard", "Markers", "Chart paper", "Textbook".
3. Lesson Activities: a step-by-step breakdown formatted as a single HTML string. Use <h4> for headings and <ul>/<li> for lists. Structure it in three parts:
   - Introduction (about 20% of the time): an engaging hook.
   - Main Activity (about 60% of the time): explain the concept, perhaps with a group activity.
   - Conclusion & Assessment (about 20% of the time): a wrap-up and a quick check for understanding.

Make the content appropriate for the class level and topic.

Return a JSON object:
{{"learningObjectives": ["..."], "materialsNeeded": ["..."], "lessonActivities": "<html>"}}"""

    return run_structured_prompt(
        "You design lesson plans for school teachers. Return only valid JSON.",
        prompt,
        LessonPlanOutput,
        max_tokens=3000,
    )


def generate_test_paper(data: TestPaperInput) -> TestPaperOutput:
    prompt = f"""You are an expert educator and test creator for the Indian education system. Generate a high-quality test paper.

You must generate exactly {data.numQuestions} questions.
The questions should be a mix of multiple-choice questions (MCQs) and short-answer questions.
MCQs must have exactly 4 options, and the correct answer must be one of them.
The difficulty should be appropriate for the class level.

Topic: {data.topic}
Subject: {data.subject}
Class Level: {data.classLevel}

Return a JSON object:
{{"questions": [{{"questionText": "...", "questionType": "mcq" or "short_answer", "options": ["...", "...", "...", "..."], "correctAnswer": "..."}}]}}
Omit "options" for short-answer questions."""

    return run_structured_prompt(
        "You write test papers for teachers. Return only valid JSON.",
        prompt,
        TestPaperOutput,
        temperature=0.5,
        max_tokens=4000,
    )


def generate_test(data: TestInput) -> TestOutput:
    prompt = f"""You are an expert educator tasked with creating a multiple-choice test.

Generate a test with {data.numQuestions} questions based on the following criteria:
- Subject: {data.subject}
- Topic: {data.topic}
- Class Level: {data.classLevel}
- Difficulty: {data.difficulty}

Each question must have exactly 4 options.
Ensure the questions are relevant to the topic and appropriate for the class level and difficulty.
Provide the correct answer for each question, copied exactly from its options.

Your entire response must be a single JSON object with this structure:
{{"questions": [{{"questionText": "...", "options": ["...", "...", "...", "..."], "correctAnswer": "..."}}]}}"""

    return run_structured_prompt(
        "You write multiple-choice tests. Return only valid JSON.",
        prompt,
        TestOutput,
        temperature=0.5,
        max_tokens=4000,
    )


def generate_study_guide(data: StudyGuideInput) -> StudyGuideOutput:
    prompt = f"""You are an expert tutor creating a study guide for a student.
The topic is "{data.topic}" in the subject "{data.subject}".

Generate a concise and helpful study guide in HTML, using <h4> for headings, <p> for paragraphs and <ul>/<li> for lists:

1. Summary: a brief overview of the topic (1-2 paragraphs).
2. Key Concepts: a bulleted list of the most important terms, definitions and ideas.
3. Practice Questions: 3-5 short-answer or conceptual questions. Do not provide the answers.

Return a JSON object: {{"guide": "<html>"}}"""

    return run_structured_prompt(
        "You write study guides for school students. Return only valid JSON.",
        prompt,
        StudyGuideOutput,
        max_tokens=3000,
    )


def solve_question(data: QuestionSolverInput) -> QuestionSolverOutput:
    prompt = f"""You are an expert tutor for students. Answer the following question in a clear, step-by-step manner.

Question: "{data.question}"

If it's a problem, solve it step-by-step. If it's a concept, explain it with examples.
Format the answer in HTML using <h4>, <p>, <ul><li> and <b>. For math problems, show the steps clearly.

Return a JSON object: {{"answer": "<html>"}}"""

    return run_structured_prompt(
        "You are a patient tutor. Return only valid JSON.",
        prompt,
        QuestionSolverOutput,
        temperature=0.3,
        max_tokens=3000,
    )


ENGLISH_MODE_INSTRUCTIONS = {
    "hindi-to-english": (
        "The user provides a sentence in Hindi. Translate it accurately to English and put it in 'result'. "
        "In 'explanation', break down the English sentence structure or grammar, e.g. the verb tense or prepositions."
    ),
    "english-correction": (
        "The user provides an English sentence that may have grammatical errors. Put the corrected sentence in 'result'. "
        "In 'explanation', point out the mistake and explain the rule, e.g. subject-verb agreement."
    ),
}


def help_with_english(data: EnglishTutorInput) -> EnglishTutorOutput:
    prompt = f"""You are an AI English teacher for a student from a Hindi medium background. Be helpful, encouraging and clear. Write explanations in simple Hinglish (a mix of Hindi and English).

Mode: {data.mode}
{ENGLISH_MODE_INSTRUCTIONS[data.mode]}

User Input Text: "{data.text}"

Return a JSON object: {{"result": "...", "explanation": "..."}}"""

    return run_structured_prompt(
        "You teach English to Hindi-speaking students. Return only valid JSON.",
        prompt,
        EnglishTutorOutput,
        temperature=0.3,
        max_tokens=1000,
    )


def analyze_student_performance(data: PerformanceAnalyzerInput) -> PerformanceAnalyzerOutput:
    if data.testResults:
        results = "\n".join(
            f'  - Test: "{r.testTitle}", Score: {r.marksObtained:g}/{r.totalMarks:g}'
            for r in data.testResults
        )
    else:
        results = "  No test results available."

    prompt = f"""You are an expert educational assistant. Analyze a student's performance data and write a concise, insightful summary for their teacher.

The data for student "{data.studentName}" in class "{data.className}" is as follows:
- Attendance: Attended {data.attendance.present} out of {data.attendance.total} lectures.
- Test Results:
{results}

The analysis must be HTML and include:
1. A heading "Overall Summary" and a paragraph covering attendance and test scores.
2. A heading "Strengths" and a list of one or two key strengths.
3. A heading "Areas for Improvement" and a list of one or two areas for improvement.
4. A heading "Recommendation" and a paragraph with a brief, actionable recommendation for the teacher.

Be positive and constructive. If data is sparse (e.g., no tests), acknowledge that.

Return a JSON object: {{"analysis": "<html>"}}"""

    return run_structured_prompt(
        "You analyze student performance for teachers. Return only valid JSON.",
        prompt,
        PerformanceAnalyzerOutput,
        temperature=0.5,
    )
