from app.db.base_class import Base  # noqa: F401

# Import all the models here so that Base has them registered
# This file should NOT be imported by models.
from app.models.study_pack import StudyPack  # noqa: F401
from app.models.flashcard import Flashcard  # noqa: F401
from app.models.quiz import Quiz  # noqa: F401
from app.models.flashcard_progress import FlashcardProgress  # noqa: F401
from app.models.quiz_attempt import QuizAttempt  # noqa: F401
