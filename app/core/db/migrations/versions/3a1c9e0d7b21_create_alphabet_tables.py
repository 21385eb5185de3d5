"""create alphabets, letters and practice_sessions tables

Revision ID: 3a1c9e0d7b21
Revises:
Create Date: 2025-09-12 10:04:51.118203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3a1c9e0d7b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


alphabet_type = sa.Enum(
    "french",
    "polish",
    "portuguese",
    "german",
    "belarusian",
    "georgian",
    "hebrew",
    name="alphabet_type",
)
session_type = sa.Enum("flashcard", "quiz", name="session_type")


def upgrade() -> None:
    """Create the catalog and practice session tables."""
    op.create_table(
        "alphabets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("type", alphabet_type, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("total_letters", sa.Integer(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_alphabets_id"), "alphabets", ["id"], unique=False)
    op.create_index(op.f("ix_alphabets_type"), "alphabets", ["type"], unique=False)
    op.create_index(
        op.f("ix_alphabets_created_at"), "alphabets", ["created_at"], unique=False
    )

    op.create_table(
        "letters",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("alphabet_id", sa.Integer(), nullable=False),
        sa.Column("letter", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("pronunciation", sa.Text(), nullable=True),
        sa.Column("pronunciation_guide", sa.Text(), nullable=True),
        sa.Column("order_position", sa.Integer(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["alphabet_id"], ["alphabets.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_letters_id"), "letters", ["id"], unique=False)
    op.create_index(
        op.f("ix_letters_alphabet_id"), "letters", ["alphabet_id"], unique=False
    )

    op.create_table(
        "practice_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("alphabet_id", sa.Integer(), nullable=False),
        sa.Column("session_type", session_type, nullable=False),
        sa.Column("total_cards", sa.Integer(), nullable=False),
        sa.Column(
            "completed_cards", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "correct_answers", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "started_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["alphabet_id"], ["alphabets.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_practice_sessions_id"), "practice_sessions", ["id"], unique=False
    )
    op.create_index(
        op.f("ix_practice_sessions_alphabet_id"),
        "practice_sessions",
        ["alphabet_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_practice_sessions_started_at"),
        "practice_sessions",
        ["started_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the tables and their enum types."""
    op.drop_index(op.f("ix_practice_sessions_started_at"), table_name="practice_sessions")
    op.drop_index(op.f("ix_practice_sessions_alphabet_id"), table_name="practice_sessions")
    op.drop_index(op.f("ix_practice_sessions_id"), table_name="practice_sessions")
    op.drop_table("practice_sessions")
    op.drop_index(op.f("ix_letters_alphabet_id"), table_name="letters")
    op.drop_index(op.f("ix_letters_id"), table_name="letters")
    op.drop_table("letters")
    op.drop_index(op.f("ix_alphabets_created_at"), table_name="alphabets")
    op.drop_index(op.f("ix_alphabets_type"), table_name="alphabets")
    op.drop_index(op.f("ix_alphabets_id"), table_name="alphabets")
    op.drop_table("alphabets")
    session_type.drop(op.get_bind(), checkfirst=True)
    alphabet_type.drop(op.get_bind(), checkfirst=True)
