"""Read-only WebUntis client.

Authenticates a student account and fetches absences, the current school
year and weekly timetables as typed models.
"""

from src.untis.client import UntisClient
from src.untis.errors import UntisError
from src.untis.models import Absence, SchoolYear, TimetableEntry
from src.untis.transport import AiohttpRequester

__all__ = [
    "UntisClient",
    "AiohttpRequester",
    "Absence",
    "SchoolYear",
    "TimetableEntry",
    "UntisError",
]
