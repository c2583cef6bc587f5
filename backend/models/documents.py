"""
SQL tables for the document-database deployment.
Each row carries the full JSON document; indexed columns are copies used for lookups.
"""
from .base import db, BaseModel
from .student import StudentRecord
from .teacher import SessionRecord, TeacherAccount, TeacherProfile


class StudentDocument(BaseModel):
    __tablename__ = 'student_documents'

    owner_id = db.Column(db.String(120), nullable=False, index=True)
    academic_year = db.Column(db.String(20), nullable=False, index=True)
    body = db.Column(db.JSON, nullable=False)

    @classmethod
    def from_record(cls, record):
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            academic_year=record.academic_year,
            body=record.to_document()
        )

    def apply(self, record):
        """Replace the stored document with record"""
        self.academic_year = record.academic_year
        self.body = record.to_document()

    def to_record(self):
        return StudentRecord.from_document(self.body)


class AccountDocument(db.Model):
    __tablename__ = 'teacher_accounts'

    identity = db.Column(db.String(120), primary_key=True)
    body = db.Column(db.JSON, nullable=False)

    def to_account(self):
        return TeacherAccount.from_document(self.body)


class ProfileDocument(db.Model):
    __tablename__ = 'teacher_profiles'

    identity = db.Column(db.String(120), primary_key=True)
    body = db.Column(db.JSON, nullable=False)

    def to_profile(self):
        return TeacherProfile.from_document(self.body)


class SessionDocument(db.Model):
    __tablename__ = 'sessions'

    # Single current-session row
    key = db.Column(db.String(20), primary_key=True, default='current')
    body = db.Column(db.JSON, nullable=False)

    def to_session(self):
        return SessionRecord.from_document(self.body)
