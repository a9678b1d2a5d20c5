"""initial roster schema (ranks, members, rank changes, courses, tags)

Revision ID: 3c5e1d2a7b90
Revises:
Create Date: 2026-10-18 10:12:44.118204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c5e1d2a7b90'
down_revision = None
branch_labels = None
depends_on = None


AWAITING = sa.text("status = 'awaiting'")
OPEN_TAG = sa.text("status IN ('awaiting', 'approved')")


def upgrade():
    op.create_table(
        "rank",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=60), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "member",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("nick", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("rank_id", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("has_system_access", sa.Boolean(), nullable=False),
        sa.Column("has_contract", sa.Boolean(), nullable=False),
        sa.Column("tag", sa.String(length=3), nullable=True),
        sa.Column("promoter_tag", sa.String(length=16), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["rank_id"], ["rank.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_member_nick"), "member", ["nick"], unique=True)
    op.create_index(op.f("ix_member_email"), "member", ["email"], unique=True)

    op.create_table(
        "rank_change_request",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("promoter_id", sa.Integer(), nullable=False),
        sa.Column("affected_id", sa.Integer(), nullable=False),
        sa.Column("previous_rank_id", sa.Integer(), nullable=False),
        sa.Column("new_rank_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("permission", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("promoter_tag", sa.String(length=16), nullable=True),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["affected_id"], ["member.id"]),
        sa.ForeignKeyConstraint(["new_rank_id"], ["rank.id"]),
        sa.ForeignKeyConstraint(["previous_rank_id"], ["rank.id"]),
        sa.ForeignKeyConstraint(["promoter_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rank_change_request_affected_id"), "rank_change_request", ["affected_id"], unique=False)
    op.create_index(op.f("ix_rank_change_request_promoter_id"), "rank_change_request", ["promoter_id"], unique=False)
    op.create_index(
        "uq_rank_request_awaiting_member",
        "rank_change_request",
        ["affected_id"],
        unique=True,
        sqlite_where=AWAITING,
        postgresql_where=AWAITING,
    )

    op.create_table(
        "company",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sigla", sa.String(length=10), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sigla"),
    )

    op.create_table(
        "course",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("sigla", sa.String(length=10), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("mandatory", sa.Boolean(), nullable=False),
        sa.Column("rank_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["rank_id"], ["rank.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "sigla", name="uq_course_company_sigla"),
    )
    op.create_index(op.f("ix_course_company_id"), "course", ["company_id"], unique=False)

    op.create_table(
        "company_membership",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("member_id", "company_id", name="uq_company_membership"),
    )
    op.create_index(op.f("ix_company_membership_member_id"), "company_membership", ["member_id"], unique=False)
    op.create_index(op.f("ix_company_membership_company_id"), "company_membership", ["company_id"], unique=False)

    op.create_table(
        "course_completion",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("date_applied", sa.Date(), nullable=False),
        sa.Column("time_applied", sa.Time(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["course.id"]),
        sa.ForeignKeyConstraint(["instructor_id"], ["member.id"]),
        sa.ForeignKeyConstraint(["student_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("course_id", "student_id", name="uq_course_completion_student"),
    )
    op.create_index(op.f("ix_course_completion_course_id"), "course_completion", ["course_id"], unique=False)
    op.create_index(op.f("ix_course_completion_student_id"), "course_completion", ["student_id"], unique=False)

    op.create_table(
        "tag_request",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("requested_tag", sa.String(length=3), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tag_request_owner_id"), "tag_request", ["owner_id"], unique=False)
    op.create_index(
        "uq_tag_request_open_owner",
        "tag_request",
        ["owner_id"],
        unique=True,
        sqlite_where=OPEN_TAG,
        postgresql_where=OPEN_TAG,
    )


def downgrade():
    op.drop_index("uq_tag_request_open_owner", table_name="tag_request")
    op.drop_index(op.f("ix_tag_request_owner_id"), table_name="tag_request")
    op.drop_table("tag_request")

    op.drop_index(op.f("ix_course_completion_student_id"), table_name="course_completion")
    op.drop_index(op.f("ix_course_completion_course_id"), table_name="course_completion")
    op.drop_table("course_completion")

    op.drop_index(op.f("ix_company_membership_company_id"), table_name="company_membership")
    op.drop_index(op.f("ix_company_membership_member_id"), table_name="company_membership")
    op.drop_table("company_membership")

    op.drop_index(op.f("ix_course_company_id"), table_name="course")
    op.drop_table("course")

    op.drop_table("company")

    op.drop_index("uq_rank_request_awaiting_member", table_name="rank_change_request")
    op.drop_index(op.f("ix_rank_change_request_promoter_id"), table_name="rank_change_request")
    op.drop_index(op.f("ix_rank_change_request_affected_id"), table_name="rank_change_request")
    op.drop_table("rank_change_request")

    op.drop_index(op.f("ix_member_email"), table_name="member")
    op.drop_index(op.f("ix_member_nick"), table_name="member")
    op.drop_table("member")

    op.drop_table("rank")
