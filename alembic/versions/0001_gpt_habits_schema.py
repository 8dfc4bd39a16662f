# alembic/versions/0001_gpt_habits_schema.py
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_gpt_habits_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "responses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("q1", sa.Text(), nullable=False),
        sa.Column("q2", sa.Text(), nullable=False),
        sa.Column("q3", sa.String(), nullable=False),
        sa.Column("q4", sa.String(), nullable=False),
        sa.Column("q5", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_responses_user_id", "responses", ["user_id"])
    op.create_index("ix_responses_created_at", "responses", ["created_at"])

    op.create_table(
        "live_session",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("slot", sa.String(), nullable=False, server_default=sa.text("'main'")),
        sa.Column("current_question", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("question_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("timer_duration", sa.Integer(), nullable=False),
        sa.Column("session_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("slot"),
    )

    op.create_table(
        "live_responses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("question_number", sa.Integer(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("session_id", sa.Uuid(), sa.ForeignKey("live_session.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_favorited", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.UniqueConstraint("user_id", "session_id", "question_number", name="uq_live_answer_user_session_question"),
    )
    op.create_index("ix_live_responses_session_question", "live_responses", ["session_id", "question_number"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("accion", sa.String(), nullable=False),
        sa.Column("payload", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=True),
        sa.Column("ip", sa.String(), nullable=True),
        sa.Column("ua", sa.Text(), nullable=True),
        sa.Column("creado_en", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_accion", "audit_logs", ["accion"])


def downgrade():
    op.drop_index("ix_audit_logs_accion", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_live_responses_session_question", table_name="live_responses")
    op.drop_table("live_responses")
    op.drop_table("live_session")
    op.drop_index("ix_responses_created_at", table_name="responses")
    op.drop_index("ix_responses_user_id", table_name="responses")
    op.drop_table("responses")
