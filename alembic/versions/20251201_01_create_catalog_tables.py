"""Create music and podcast catalog tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20251201_01"
down_revision = None
branch_labels = None
depends_on = None


def _media_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("explicit", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("duration", sa.String(length=16), nullable=False, server_default="00:00:00"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("thumbnail_suffix", sa.String(length=128), nullable=False),
        sa.Column("content_key", sa.String(length=128), nullable=False),
        sa.Column("conversion_status", sa.String(length=16)),
    ]


def _child_table(name: str, parent: str, value_column: str, value_length: int) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            f"{parent}_id",
            sa.String(length=64),
            sa.ForeignKey(f"{parent}.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(value_column, sa.String(length=value_length), nullable=False),
    )
    op.create_index(f"ix_{name}_{parent}_id", name, [f"{parent}_id"])
    op.create_index(f"ix_{name}_{value_column}", name, [value_column])


def upgrade() -> None:
    op.create_table(
        "music",
        *_media_columns(),
        sa.Column("artist", sa.String(length=256), nullable=False),
        sa.Column("album", sa.String(length=256), nullable=False, server_default=""),
        sa.Column("genre", sa.String(length=32)),
    )
    for column in ("title", "year", "conversion_status", "artist", "genre"):
        op.create_index(f"ix_music_{column}", "music", [column])
    _child_table("music_feat", "music", "name", 256)
    _child_table("music_mood", "music", "mood", 32)

    op.create_table(
        "podcast",
        *_media_columns(),
        sa.Column("presenter", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("episode_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("season_number", sa.Integer(), nullable=False, server_default="1"),
    )
    for column in ("title", "year", "conversion_status", "presenter"):
        op.create_index(f"ix_podcast_{column}", "podcast", [column])
    _child_table("podcast_guest", "podcast", "name", 256)
    _child_table("podcast_category", "podcast", "category", 32)


def downgrade() -> None:
    for table in ("podcast_category", "podcast_guest", "podcast", "music_mood", "music_feat", "music"):
        op.drop_table(table)
