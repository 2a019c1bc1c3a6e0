from app.models.study_pack import Difficulty, StudyPack, SummaryLength
from app.models.flashcard import Flashcard
from app.models.quiz import Quiz
from app.models.flashcard_progress import FlashcardProgress
from app.models.quiz_attempt import QuizAttempt

__all__ = [
    "Difficulty",
    "StudyPack",
    "SummaryLength",
    "Flashcard",
    "Quiz",
    "FlashcardProgress",
    "QuizAttempt",
]
