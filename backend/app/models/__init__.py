from app.models.elective_status import ElectiveAssignmentStatus, ElectiveStatus  # noqa: F401
from app.models.elective_suggestion import ElectiveSuggestion  # noqa: F401
from app.models.lesson import Lesson  # noqa: F401
from app.models.schedule_item import ScheduleItem  # noqa: F401
from app.models.school_class import SchoolClass  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.teacher_assignment import TeacherAssignment  # noqa: F401
