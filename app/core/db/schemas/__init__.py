# Import models so Alembic and Base metadata are aware of them
from .alphabets import Alphabet, AlphabetType, Letter, PracticeSession, SessionType  # noqa: F401
