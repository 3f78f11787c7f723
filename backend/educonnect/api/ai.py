from fastapi import APIRouter, Depends

from educonnect.auth.dependencies import get_current_profile, require_role
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
from educonnect.models.user import BaseProfile
from educonnect.services import ai_service

router = APIRouter(
    prefix="/ai",
    tags=["ai"],
    responses={
        502: {"description": "The AI returned an empty or invalid response"},
    },
)


@router.post(
    "/announcement",
    response_model=AnnouncementOutput,
    summary="Draft announcement",
    description="Turns key points into a formal or casual announcement for students.",
)
def draft_announcement(
    request: AnnouncementInput,
    teacher: BaseProfile = Depends(require_role("teacher")),
) -> AnnouncementOutput:
    print(f"[AI] Announcement requested by {teacher.id} ({request.tone})")
    return ai_service.generate_announcement(request)


@router.post(
    "/lesson-plan",
    response_model=LessonPlanOutput,
    summary="Generate lesson plan",
    description="Creates objectives, materials and timed activities for a lesson.",
)
def create_lesson_plan(
    request: LessonPlanInput,
    teacher: BaseProfile = Depends(require_role("teacher")),
) -> LessonPlanOutput:
    print(f"[AI] Lesson plan requested by {teacher.id}: {request.subject} / {request.topic}")
    return ai_service.generate_lesson_plan(request)


@router.post(
    "/test-paper",
    response_model=TestPaperOutput,
    summary="Generate test paper",
    description="Creates a mix of multiple choice and short answer questions with answers.",
)
def create_test_paper(
    request: TestPaperInput,
    teacher: BaseProfile = Depends(require_role("teacher")),
) -> TestPaperOutput:
    print(f"[AI] Test paper requested by {teacher.id}: {request.numQuestions} questions on {request.topic}")
    return ai_service.generate_test_paper(request)


@router.post(
    "/test",
    response_model=TestOutput,
    summary="Generate online test",
    description="Creates multiple choice questions with four options at the requested difficulty.",
)
def create_test(
    request: TestInput,
    teacher: BaseProfile = Depends(require_role("teacher")),
) -> TestOutput:
    print(f"[AI] {request.difficulty} test requested by {teacher.id}: {request.numQuestions} questions")
    return ai_service.generate_test(request)


@router.post(
    "/performance-analysis",
    response_model=PerformanceAnalyzerOutput,
    summary="Analyze performance",
    description="Writes a performance report from attendance and test results supplied by the teacher.",
)
def analyze_performance(
    request: PerformanceAnalyzerInput,
    teacher: BaseProfile = Depends(require_role("teacher")),
) -> PerformanceAnalyzerOutput:
    print(f"[AI] Performance analysis requested by {teacher.id}")
    return ai_service.analyze_student_performance(request)


@router.post(
    "/study-guide",
    response_model=StudyGuideOutput,
    summary="Generate study guide",
    description="Summary, key concepts and practice questions for a topic.",
)
def create_study_guide(
    request: StudyGuideInput,
    profile: BaseProfile = Depends(get_current_profile),
) -> StudyGuideOutput:
    print(f"[AI] Study guide requested by {profile.id}: {request.subject} / {request.topic}")
    return ai_service.generate_study_guide(request)


@router.post(
    "/solve",
    response_model=QuestionSolverOutput,
    summary="Solve question",
    description="Step-by-step answer to a student's question.",
)
def solve_question(
    request: QuestionSolverInput,
    profile: BaseProfile = Depends(get_current_profile),
) -> QuestionSolverOutput:
    print(f"[AI] Question solver used by {profile.id}")
    return ai_service.solve_question(request)


@router.post(
    "/english-tutor",
    response_model=EnglishTutorOutput,
    summary="English tutor",
    description="Translates Hindi to English or corrects an English sentence, with an explanation in Hinglish.",
)
def english_tutor(
    request: EnglishTutorInput,
    profile: BaseProfile = Depends(get_current_profile),
) -> EnglishTutorOutput:
    print(f"[AI] English tutor ({request.mode}) used by {profile.id}")
    return ai_service.help_with_english(request)
