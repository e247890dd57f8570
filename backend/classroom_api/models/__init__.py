from classroom_api.models.user import User, UserRole
from classroom_api.models.classroom import Classroom, ClassroomStudent, AttendanceRecord
