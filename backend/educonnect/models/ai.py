"""Input and output schemas for the AI teaching tools.

Each flow pairs one input model with one output model; the output model is
what the model's JSON reply must validate against.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class AnnouncementInput(BaseModel):
    keyPoints: str = Field(
        ...,
        min_length=1,
        description='A few bullet points or a short phrase, e.g. "Test on Friday about Chapter 5"',
    )
    tone: Literal["Formal", "Casual"] = Field(..., description="Desired tone for the announcement")


class AnnouncementOutput(BaseModel):
    content: str = Field(..., min_length=1, description="The drafted announcement, ready to send to students")


class LessonPlanInput(BaseModel):
    topic: str = Field(..., min_length=1, description='Main topic, e.g. "The Solar System"')
    subject: str = Field(..., min_length=1, description='Subject, e.g. "Science"')
    classLevel: str = Field(..., min_length=1, description='Grade or class, e.g. "Class 8"')
    duration: int = Field(..., ge=5, description="Lesson duration in minutes")


class LessonPlanOutput(BaseModel):
    learningObjectives: List[str] = Field(..., min_length=1, description="3-4 learning objectives")
    materialsNeeded: List[str] = Field(..., description="Materials and resources needed")
    lessonActivities: str = Field(..., min_length=1, description="Step-by-step activities as HTML")


class TestPaperInput(BaseModel):
    topic: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    classLevel: str = Field(..., min_length=1)
    numQuestions: int = Field(..., ge=1, le=20)


class TestPaperQuestion(BaseModel):
    questionText: str = Field(..., min_length=1)
    questionType: Literal["mcq", "short_answer"]
    options: Optional[List[str]] = Field(None, description="4 options for multiple choice questions")
    correctAnswer: str = Field(..., min_length=1)


class TestPaperOutput(BaseModel):
    questions: List[TestPaperQuestion]


class TestInput(BaseModel):
    topic: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    classLevel: str = Field(..., min_length=1)
    numQuestions: int = Field(..., ge=1)
    difficulty: Literal["Easy", "Medium", "Hard"]


class TestQuestion(BaseModel):
    questionText: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correctAnswer: str = Field(..., min_length=1, description="One of the options")


class TestOutput(BaseModel):
    questions: List[TestQuestion]


class StudyGuideInput(BaseModel):
    topic: str = Field(..., min_length=1, description='Topic or chapter, e.g. "Cell Structure"')
    subject: str = Field(..., min_length=1, description='Subject, e.g. "Biology"')


class StudyGuideOutput(BaseModel):
    guide: str = Field(..., min_length=1, description="Summary, key concepts and practice questions as HTML")


class QuestionSolverInput(BaseModel):
    question: str = Field(..., min_length=1, max_length=4000)


class QuestionSolverOutput(BaseModel):
    answer: str = Field(..., min_length=1, description="Step-by-step answer as HTML")


class EnglishTutorInput(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000, description="Hindi or English text from the student")
    mode: Literal["hindi-to-english", "english-correction"]


class EnglishTutorOutput(BaseModel):
    result: str = Field(..., min_length=1, description="Translation or corrected sentence")
    explanation: str = Field(..., min_length=1, description="Explanation in simple Hinglish")


class AttendanceSummary(BaseModel):
    present: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class TestResultSummary(BaseModel):
    testTitle: str
    marksObtained: float
    totalMarks: float


class PerformanceAnalyzerInput(BaseModel):
    studentName: str = Field(..., min_length=1)
    className: str = Field(..., min_length=1)
    attendance: AttendanceSummary
    testResults: List[TestResultSummary] = Field(default_factory=list)


class PerformanceAnalyzerOutput(BaseModel):
    analysis: str = Field(..., min_length=1, description="Performance analysis as HTML")
