from datetime import date
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.quiz import SubmissionOut
from schoolsafe.schemas.resource import CompletionOut

class StudentInfo(CamelModel):
    id: int
    first_name: str
    last_name: str
    grade: str | None = None
    school: str | None = None

class ProgressOut(CamelModel):
    overall: int
    quizzes: int
    resources: int
    average_score: int

class StudentProgressOut(CamelModel):
    student: StudentInfo
    progress: ProgressOut
    quiz_submissions: list[SubmissionOut]
    resource_completions: list[CompletionOut]

class ClassProgressEntry(CamelModel):
    student: StudentInfo
    progress: ProgressOut
    completed_quizzes: int
    completed_resources: int

class DayActivity(CamelModel):
    date: date
    active_users: int
    new_registrations: int

class ResourceUsage(CamelModel):
    resource_id: int
    name: str
    completions: int
    completion_rate: int

class QuizPerformance(CamelModel):
    quiz_id: int
    category: str
    title: str
    average_score: int
    participants: int
    total_questions: int

class SystemMetrics(CamelModel):
    total_users: int
    active_users: int
    total_resources: int
    active_alerts: int
    avg_quiz_score: int
    total_completions: int
    engagement_rate: int

class AnalyticsOut(CamelModel):
    window_days: int
    user_activity: list[DayActivity]
    resource_usage: list[ResourceUsage]
    quiz_performance: list[QuizPerformance]
    system_metrics: SystemMetrics

class DirectorStatsOut(CamelModel):
    total_students: int
    total_teachers: int
    total_resources: int
    total_quizzes: int
    total_drills: int
    active_alerts: int

class TeacherDashboardOut(CamelModel):
    total_quizzes: int
    total_drills: int
    total_students: int
