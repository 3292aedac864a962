from tutormatch.models.base import Base
from tutormatch.models.job import Job
from tutormatch.models.order import Order
from tutormatch.models.student_profile import StudentProfile
