"""Strain origin generation; photos on events or strains.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from alembic import op


# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade():
    op.execute("""
        ALTER TABLE strains ADD COLUMN generation_uuid UUID REFERENCES generations(uuid);
    """)

    # observable_uuid is an event or a strain, so it can't keep the events FK
    op.execute("ALTER TABLE event_photos DROP CONSTRAINT event_photos_event_uuid_fkey")
    op.execute("ALTER TABLE event_photos RENAME COLUMN event_uuid TO observable_uuid")
    op.execute("ALTER INDEX idx_event_photos_event RENAME TO idx_event_photos_observable")


def downgrade():
    op.execute("ALTER INDEX idx_event_photos_observable RENAME TO idx_event_photos_event")
    op.execute("DELETE FROM event_photos p WHERE NOT EXISTS (SELECT 1 FROM events e WHERE e.uuid = p.observable_uuid)")
    op.execute("ALTER TABLE event_photos RENAME COLUMN observable_uuid TO event_uuid")
    op.execute("""
        ALTER TABLE event_photos
            ADD CONSTRAINT event_photos_event_uuid_fkey
            FOREIGN KEY (event_uuid) REFERENCES events(uuid) ON DELETE CASCADE;
    """)

    op.execute("ALTER TABLE strains DROP COLUMN generation_uuid")
