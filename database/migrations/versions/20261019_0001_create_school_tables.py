"""create school tables

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "classes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_type", sa.String(length=100), nullable=False),
        sa.Column("grade", sa.Integer(), nullable=False),
        sa.Column("section", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("school_type", "grade", "section", name="uq_classes_school_type_grade_section"),
    )
    op.create_index("ix_classes_school_type", "classes", ["school_type"])

    op.create_table(
        "lessons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("grade", sa.Integer(), nullable=False),
        sa.Column("weekly_hours", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_mandatory", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("school_type", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_lessons_grade", "lessons", ["grade"])
    op.create_index("ix_lessons_school_type", "lessons", ["school_type"])

    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "teacher_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lesson_id", sa.Integer(), sa.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_id", sa.Integer(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("teacher_id", "lesson_id", "class_id", name="uq_teacher_assignments_identity"),
    )
    op.create_index("ix_teacher_assignments_teacher_id", "teacher_assignments", ["teacher_id"])
    op.create_index("ix_teacher_assignments_lesson_id", "teacher_assignments", ["lesson_id"])
    op.create_index("ix_teacher_assignments_class_id", "teacher_assignments", ["class_id"])

    op.create_table(
        "schedule_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("class_id", sa.Integer(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lesson_id", sa.Integer(), sa.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("time_slot", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("class_id", "day_of_week", "time_slot", name="uq_schedule_items_class_slot"),
    )
    op.create_index("ix_schedule_items_class_id", "schedule_items", ["class_id"])
    op.create_index("ix_schedule_items_teacher_id", "schedule_items", ["teacher_id"])


def downgrade() -> None:
    op.drop_index("ix_schedule_items_teacher_id", table_name="schedule_items")
    op.drop_index("ix_schedule_items_class_id", table_name="schedule_items")
    op.drop_table("schedule_items")
    op.drop_index("ix_teacher_assignments_class_id", table_name="teacher_assignments")
    op.drop_index("ix_teacher_assignments_lesson_id", table_name="teacher_assignments")
    op.drop_index("ix_teacher_assignments_teacher_id", table_name="teacher_assignments")
    op.drop_table("teacher_assignments")
    op.drop_table("teachers")
    op.drop_index("ix_lessons_school_type", table_name="lessons")
    op.drop_index("ix_lessons_grade", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("ix_classes_school_type", table_name="classes")
    op.drop_table("classes")
