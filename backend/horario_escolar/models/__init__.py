from horario_escolar.models.activity_log import ActivityLog  # noqa: F401
from horario_escolar.models.audit_entry import AuditEntry, ChangeType  # noqa: F401
from horario_escolar.models.lesson_slot import LessonSlot  # noqa: F401
from horario_escolar.models.school_setting import SchoolSetting  # noqa: F401
from horario_escolar.models.timetable_snapshot import TimetableSnapshot  # noqa: F401
from horario_escolar.models.user import EDITOR_ROLES, User, UserRole  # noqa: F401
