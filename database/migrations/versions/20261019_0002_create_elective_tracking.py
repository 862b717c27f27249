"""create elective tracking

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


elective_status_enum = sa.Enum("complete", "incomplete", "over_assigned", name="elective_status")


def upgrade() -> None:
    op.create_table(
        "elective_assignment_status",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("class_id", sa.Integer(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("grade", sa.Integer(), nullable=False),
        sa.Column("required_electives", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("assigned_electives", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("missing_electives", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("status", elective_status_enum, nullable=False, server_default="incomplete"),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_elective_assignment_status_class_id",
        "elective_assignment_status",
        ["class_id"],
        unique=True,
    )
    op.create_index("ix_elective_assignment_status_status", "elective_assignment_status", ["status"])

    op.create_table(
        "elective_suggestions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("class_id", sa.Integer(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lesson_id", sa.Integer(), sa.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("suggestion_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("reasoning", sa.Text(), nullable=True),
        sa.Column("is_applied", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("class_id", "lesson_id", "teacher_id", name="uq_elective_suggestions_identity"),
    )
    op.create_index("ix_elective_suggestions_class_id", "elective_suggestions", ["class_id"])
    op.create_index("ix_elective_suggestions_is_applied", "elective_suggestions", ["is_applied"])


def downgrade() -> None:
    op.drop_index("ix_elective_suggestions_is_applied", table_name="elective_suggestions")
    op.drop_index("ix_elective_suggestions_class_id", table_name="elective_suggestions")
    op.drop_table("elective_suggestions")
    op.drop_index("ix_elective_assignment_status_status", table_name="elective_assignment_status")
    op.drop_index("ix_elective_assignment_status_class_id", table_name="elective_assignment_status")
    op.drop_table("elective_assignment_status")
    elective_status_enum.drop(op.get_bind(), checkfirst=True)
