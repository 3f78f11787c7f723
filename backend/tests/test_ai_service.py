"""
AI flow wrappers: prompt in, validated JSON out.

Goals:
- Valid replies (plain or fenced JSON) become output models.
- Empty, non-JSON and schema-violating replies raise AIResponseError.
- Teacher-only flows are guarded by role.
"""
import pytest

from educonnect.errors import AIResponseError
from educonnect.models import ai as ai_models
from educonnect.services import ai_service

from fakes import FakeOpenAI, TEACHER


def test_extract_json_strips_code_fence():
    fenced = '```json\n{"content": "Hello students"}\n```'
    assert ai_service.extract_json(fenced) == '{"content": "Hello students"}'
    assert ai_service.extract_json('  {"a": 1} ') == '{"a": 1}'


def test_announcement_reply_is_validated(fake_openai):
    client = fake_openai(FakeOpenAI({"content": "Hello students, no class tomorrow."}))

    output = ai_service.generate_announcement(
        ai_models.AnnouncementInput(keyPoints="no class tomorrow", tone="Casual")
    )

    assert output.content == "Hello students, no class tomorrow."
    call = client.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert "no class tomorrow" in call["messages"][1]["content"]


def test_fenced_reply_is_accepted(fake_openai):
    fake_openai(FakeOpenAI('```json\n{"guide": "<h4>Summary</h4>"}\n```'))

    output = ai_service.generate_study_guide(ai_models.StudyGuideInput(topic="Cells", subject="Biology"))

    assert output.guide == "<h4>Summary</h4>"


@pytest.mark.parametrize("reply", [None, "   ", "not json at all", '{"unexpected": true}'])
def test_unusable_reply_raises(fake_openai, reply):
    fake_openai(FakeOpenAI(reply))

    with pytest.raises(AIResponseError):
        ai_service.solve_question(ai_models.QuestionSolverInput(question="What is 2 + 2?"))


def test_test_questions_need_four_options(fake_openai):
    fake_openai(FakeOpenAI({"questions": [{"questionText": "Q?", "options": ["a", "b"], "correctAnswer": "a"}]}))

    with pytest.raises(AIResponseError):
        ai_service.generate_test(ai_models.TestInput(
            topic="Motion", subject="Physics", classLevel="Class 9", numQuestions=1, difficulty="Easy",
        ))


def test_test_paper_mixes_question_types(fake_openai):
    fake_openai(FakeOpenAI({"questions": [
        {"questionText": "Speed unit?", "questionType": "mcq", "options": ["m/s", "kg", "N", "J"], "correctAnswer": "m/s"},
        {"questionText": "Define velocity.", "questionType": "short_answer", "correctAnswer": "Speed with direction"},
    ]}))

    output = ai_service.generate_test_paper(ai_models.TestPaperInput(
        topic="Motion", subject="Physics", classLevel="Class 9", numQuestions=2,
    ))

    assert [q.questionType for q in output.questions] == ["mcq", "short_answer"]
    assert output.questions[1].options is None


def test_test_paper_question_count_is_bounded():
    with pytest.raises(ValueError):
        ai_models.TestPaperInput(topic="Motion", subject="Physics", classLevel="Class 9", numQuestions=21)


def test_english_tutor_prompt_follows_mode(fake_openai):
    client = fake_openai(FakeOpenAI({"result": "I am going to school.", "explanation": "Present continuous tense."}))

    output = ai_service.help_with_english(ai_models.EnglishTutorInput(text="Main school ja raha hoon", mode="hindi-to-english"))

    assert output.result == "I am going to school."
    assert "Translate it accurately" in client.calls[0]["messages"][1]["content"]


def test_performance_prompt_without_tests(fake_openai):
    client = fake_openai(FakeOpenAI({"analysis": "<h4>Overall Summary</h4>"}))

    ai_service.analyze_student_performance(ai_models.PerformanceAnalyzerInput(
        studentName="Asha", className="Physics", attendance={"present": 8, "total": 10},
    ))

    prompt = client.calls[0]["messages"][1]["content"]
    assert "Attended 8 out of 10" in prompt
    assert "No test results available." in prompt


def test_lesson_plan_endpoint_is_teacher_only(client, fake_openai, login_as):
    fake_openai(FakeOpenAI({
        "learningObjectives": ["Name the planets"],
        "materialsNeeded": ["Chart paper"],
        "lessonActivities": "<h4>Introduction</h4>",
    }))
    body = {"topic": "The Solar System", "subject": "Science", "classLevel": "Class 6", "duration": 40}

    assert client.post("/api/ai/lesson-plan", json=body).status_code == 403

    login_as(TEACHER["id"])
    resp = client.post("/api/ai/lesson-plan", json=body)
    assert resp.status_code == 200
    assert resp.json()["learningObjectives"] == ["Name the planets"]


def test_invalid_reply_maps_to_bad_gateway(client, fake_openai):
    fake_openai(FakeOpenAI("oops"))

    resp = client.post("/api/ai/solve", json={"question": "Why is the sky blue?"})

    assert resp.status_code == 502
    assert resp.json()["detail"] == "The AI returned an empty or invalid response. Please try again."
