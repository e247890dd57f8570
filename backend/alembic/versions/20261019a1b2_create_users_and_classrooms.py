"""Create users, classrooms, classroom_students and attendance_records tables.

Revision ID: 20261019a1b2
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019a1b2"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("user", "admin", name="userrole")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("start_year", sa.Integer(), nullable=False),
        sa.Column("end_year", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("start_year <= end_year", name="ck_classrooms_year_range"),
    )
    op.create_index("ix_classrooms_created_by", "classrooms", ["created_by"])
    op.create_index("ix_classrooms_created_by_end_year", "classrooms", ["created_by", "end_year"])

    op.create_table(
        "classroom_students",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(length=32), nullable=False, unique=True),
        sa.Column("classroom_id", sa.String(length=32), sa.ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("adm_no", sa.String(length=50), nullable=False),
        sa.Column("image_url", sa.String(length=500), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_classroom_students_classroom_id", "classroom_students", ["classroom_id"])

    op.create_table(
        "attendance_records",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(length=32), nullable=False, unique=True),
        sa.Column("classroom_id", sa.String(length=32), sa.ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day", sa.DateTime(timezone=True), nullable=False),
        sa.Column("presentees", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_attendance_records_classroom_id", "attendance_records", ["classroom_id"])
    op.create_index("ix_attendance_records_classroom_day", "attendance_records", ["classroom_id", "day"])


def downgrade() -> None:
    op.drop_index("ix_attendance_records_classroom_day", table_name="attendance_records")
    op.drop_index("ix_attendance_records_classroom_id", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_index("ix_classroom_students_classroom_id", table_name="classroom_students")
    op.drop_table("classroom_students")
    op.drop_index("ix_classrooms_created_by_end_year", table_name="classrooms")
    op.drop_index("ix_classrooms_created_by", table_name="classrooms")
    op.drop_table("classrooms")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    user_role.drop(op.get_bind(), checkfirst=True)
