"""
SQLAlchemy Database Models

ORM entity set of the Student Management API.

- User: API accounts (credentials are managed by the auth module)
- Student: student records, optionally linked to the user who created them

Tables are created by schema synchronization at startup outside production;
production schemas are managed out of band.
"""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func
from datetime import datetime as dt
import uuid

# SQLAlchemy instance (initialized in db.init_db)
db = SQLAlchemy()


class User(db.Model):
    """
    API user account.

    UUID primary key prevents enumeration of valid ids.
    """
    __tablename__ = "users"

    id = db.Column(db.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(255), nullable=True)

    # Never serialized
    password_hash = db.Column(db.String(255), nullable=False)

    # "admin" or "user"
    role = db.Column(db.String(32), nullable=False, default="user", server_default="user")

    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default=db.text("true"))

    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=dt.utcnow,
        server_default=func.current_timestamp()
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=dt.utcnow,
        onupdate=dt.utcnow,
        server_default=func.current_timestamp()
    )

    students = db.relationship("Student", back_populates="created_by", lazy=True)

    def __repr__(self):
        return f"<User {self.email} role={self.role}>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Student(db.Model):
    """
    Student record.

    student_code is the institution-issued identifier and is unique.
    ON DELETE SET NULL keeps students when the creating user is removed.
    """
    __tablename__ = "students"

    id = db.Column(db.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    student_code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    phone = db.Column(db.String(32), nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    address = db.Column(db.Text, nullable=True)

    # Enrollment state: "active", "suspended", "graduated"
    status = db.Column(db.String(16), nullable=False, default="active", server_default="active")

    created_by_id = db.Column(
        db.Uuid(as_uuid=True),
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=dt.utcnow,
        server_default=func.current_timestamp()
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=dt.utcnow,
        onupdate=dt.utcnow,
        server_default=func.current_timestamp()
    )

    created_by = db.relationship("User", back_populates="students")

    def __repr__(self):
        return f"<Student {self.student_code} {self.first_name} {self.last_name}>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "student_code": self.student_code,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "address": self.address,
            "status": self.status,
            "created_by_id": str(self.created_by_id) if self.created_by_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
