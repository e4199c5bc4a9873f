"""In-memory indexes over one fetch of catalogue and learning-state rows."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from scholardorm.schemas.records import (
    ActivityRecord,
    CourseRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    QuizAttemptRecord,
    QuizRecord,
    UserRecord,
)

UNKNOWN_COURSE = "Unknown Course"


@dataclass
class CourseCatalog:
    """Courses with their published lessons and quizzes.

    Only published lessons are indexed, so a lesson id missing from
    ``lessons`` is either unpublished or outside the course set.
    """

    courses: dict[str, CourseRecord] = field(default_factory=dict)
    lessons: dict[str, LessonRecord] = field(default_factory=dict)
    quizzes: dict[str, QuizRecord] = field(default_factory=dict)
    _lesson_counts: Counter = field(default_factory=Counter, repr=False)

    @classmethod
    def build(
        cls,
        courses: Iterable[CourseRecord],
        lessons: Iterable[LessonRecord] = (),
        quizzes: Iterable[QuizRecord] = (),
    ) -> "CourseCatalog":
        published = {l.id: l for l in lessons if l.is_published}
        return cls(
            courses={c.id: c for c in courses},
            lessons=published,
            quizzes={q.id: q for q in quizzes},
            _lesson_counts=Counter(l.course_id for l in published.values()),
        )

    def title(self, course_id: str) -> str:
        course = self.courses.get(course_id)
        return course.title if course is not None and course.title else UNKNOWN_COURSE

    def published_lessons(self, course_id: str) -> int:
        return self._lesson_counts.get(course_id, 0)

    def lesson_course(self, lesson_id: str) -> str | None:
        lesson = self.lessons.get(lesson_id)
        return lesson.course_id if lesson is not None else None

    def quiz_course(self, quiz_id: str) -> str | None:
        """Course of a quiz, falling back to the course of its lesson."""
        quiz = self.quizzes.get(quiz_id)
        if quiz is None:
            return None
        if quiz.course_id:
            return quiz.course_id
        if quiz.lesson_id:
            return self.lesson_course(quiz.lesson_id)
        return None

    def course_quizzes(self, course_id: str) -> list[QuizRecord]:
        return [q for q in self.quizzes.values() if self.quiz_course(q.id) == course_id]


@dataclass
class ProgressDataset:
    """Everything one progress view needs, pre-filtered to a course set."""

    catalog: CourseCatalog = field(default_factory=CourseCatalog)
    enrollments: list[EnrollmentRecord] = field(default_factory=list)
    users: dict[str, UserRecord] = field(default_factory=dict)
    lesson_progress: list[LessonProgressRecord] = field(default_factory=list)
    attempts: list[QuizAttemptRecord] = field(default_factory=list)


@dataclass
class PlatformSnapshot:
    """Platform-wide rows for the admin analytics page."""

    users: list[UserRecord] = field(default_factory=list)
    courses: list[CourseRecord] = field(default_factory=list)
    enrollments: list[EnrollmentRecord] = field(default_factory=list)
    activities: list[ActivityRecord] = field(default_factory=list)
    attempts: list[QuizAttemptRecord] = field(default_factory=list)
