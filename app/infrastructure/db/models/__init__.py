from .user_model import UserModel
from .subject_model import SubjectModel
from .mcq_model import MCQModel, OptionModel, DIFFICULTY_LEVELS
from .course_model import CourseModel, CourseSubjectModel, CourseParticipantModel
from .exam_model import ExamModel, ExamSubjectModel, ExamParticipantModel
from .attempt_model import ExamAttemptModel, AttemptAnswerModel, AttemptQuestionModel

__all__ = [
    "UserModel",
    "SubjectModel",
    "MCQModel",
    "OptionModel",
    "DIFFICULTY_LEVELS",
    "CourseModel",
    "CourseSubjectModel",
    "CourseParticipantModel",
    "ExamModel",
    "ExamSubjectModel",
    "ExamParticipantModel",
    "ExamAttemptModel",
    "AttemptAnswerModel",
    "AttemptQuestionModel",
]
