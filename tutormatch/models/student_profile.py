# models/student_profile.py

from tutormatch.extensions import db
from tutormatch.models.base import Base

class StudentProfile(Base):
    """大学生教员简历，以手机号为主键"""
    __tablename__ = 'profiles'

    phone = db.Column(db.String(20), primary_key=True, comment='手机号')
    # 明文保存，仅用于回访登录时的简单核对
    password = db.Column(db.String(64), comment='登录密码')
    name = db.Column(db.String(50), nullable=False, comment='姓名')
    school = db.Column(db.String(100), nullable=False, comment='学校')
    major = db.Column(db.String(100), comment='专业')
    grade = db.Column(db.String(50), comment='年级')
    experience = db.Column(db.Text, comment='经验介绍')
    gender = db.Column(db.String(10), comment='性别 male/female')

    # 意向，逗号分隔，如 "初一,初二"
    preferred_grades = db.Column(db.String(200), comment='意向年级')
    preferred_subjects = db.Column(db.String(200), comment='意向科目')

    def to_dict(self):
        """转换为字典表示，不含密码"""
        return {
            'phone': self.phone,
            'name': self.name,
            'school': self.school,
            'major': self.major,
            'grade': self.grade,
            'experience': self.experience,
            'gender': self.gender,
            'preferred_grades': self.preferred_grades,
            'preferred_subjects': self.preferred_subjects,
            'created_at': self.created_at,
        }
