"""Initial schema: catalog, observables, events, notes, photos, sources.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute("""
        CREATE TABLE vendors (
            uuid UUID PRIMARY KEY,
            name TEXT UNIQUE NOT NULL,
            website TEXT
        );
    """)

    op.execute("""
        CREATE TABLE ingredients (
            uuid UUID PRIMARY KEY,
            name TEXT UNIQUE NOT NULL
        );
    """)

    op.execute("""
        CREATE TABLE substrates (
            uuid UUID PRIMARY KEY,
            name TEXT NOT NULL,
            type TEXT NOT NULL CHECK (type IN ('Grain', 'Bulk', 'Plating', 'Liquid')),
            vendor_uuid UUID NOT NULL REFERENCES vendors(uuid),
            UNIQUE (name, vendor_uuid)
        );
    """)

    op.execute("""
        CREATE TABLE substrate_ingredients (
            uuid UUID PRIMARY KEY,
            substrate_uuid UUID NOT NULL REFERENCES substrates(uuid),
            ingredient_uuid UUID NOT NULL REFERENCES ingredients(uuid),
            UNIQUE (substrate_uuid, ingredient_uuid)
        );
    """)

    op.execute("""
        CREATE TABLE strains (
            uuid UUID PRIMARY KEY,
            name TEXT NOT NULL,
            species TEXT,
            ctime TIMESTAMPTZ DEFAULT now(),
            vendor_uuid UUID NOT NULL REFERENCES vendors(uuid),
            UNIQUE (name, vendor_uuid)
        );
    """)

    op.execute("""
        CREATE TABLE strain_attributes (
            uuid UUID PRIMARY KEY,
            name TEXT NOT NULL,
            value TEXT NOT NULL,
            strain_uuid UUID NOT NULL REFERENCES strains(uuid),
            UNIQUE (name, strain_uuid)
        );
    """)

    op.execute("""
        CREATE TABLE stages (
            uuid UUID PRIMARY KEY,
            name TEXT UNIQUE NOT NULL
        );
    """)

    op.execute("""
        CREATE TABLE event_types (
            uuid UUID PRIMARY KEY,
            name TEXT NOT NULL,
            severity TEXT NOT NULL,
            stage_uuid UUID NOT NULL REFERENCES stages(uuid),
            UNIQUE (name, stage_uuid)
        );
    """)

    op.execute("""
        CREATE TABLE lifecycles (
            uuid UUID PRIMARY KEY,
            name TEXT NOT NULL,
            location TEXT,
            strain_cost NUMERIC DEFAULT 0,
            grain_cost NUMERIC DEFAULT 0,
            bulk_cost NUMERIC DEFAULT 0,
            yield NUMERIC DEFAULT 0,
            headcount INTEGER DEFAULT 0,
            gross NUMERIC DEFAULT 0,
            mtime TIMESTAMPTZ DEFAULT now(),
            ctime TIMESTAMPTZ DEFAULT now(),
            strain_uuid UUID NOT NULL REFERENCES strains(uuid),
            grainsubstrate_uuid UUID NOT NULL REFERENCES substrates(uuid),
            bulksubstrate_uuid UUID NOT NULL REFERENCES substrates(uuid)
        );
    """)

    op.execute("""
        CREATE TABLE generations (
            uuid UUID PRIMARY KEY,
            plating_substrate_uuid UUID NOT NULL REFERENCES substrates(uuid),
            liquid_substrate_uuid UUID NOT NULL REFERENCES substrates(uuid),
            mtime TIMESTAMPTZ,
            ctime TIMESTAMPTZ DEFAULT now(),
            dtime TIMESTAMPTZ
        );
    """)

    # observable_uuid is a lifecycle or a generation, so it carries no FK
    op.execute("""
        CREATE TABLE events (
            uuid UUID PRIMARY KEY,
            temperature REAL,
            humidity INTEGER,
            mtime TIMESTAMPTZ DEFAULT now(),
            ctime TIMESTAMPTZ DEFAULT now(),
            observable_uuid UUID NOT NULL,
            eventtype_uuid UUID NOT NULL REFERENCES event_types(uuid)
        );
    """)

    op.execute("""
        CREATE INDEX idx_events_observable ON events(observable_uuid);
    """)

    op.execute("""
        CREATE TABLE event_photos (
            uuid UUID PRIMARY KEY,
            filename TEXT NOT NULL,
            event_uuid UUID NOT NULL REFERENCES events(uuid) ON DELETE CASCADE,
            mtime TIMESTAMPTZ DEFAULT now(),
            ctime TIMESTAMPTZ DEFAULT now()
        );
    """)

    op.execute("""
        CREATE INDEX idx_event_photos_event ON event_photos(event_uuid);
    """)

    # observable_uuid is an event, photo, lifecycle or generation
    op.execute("""
        CREATE TABLE notes (
            uuid UUID PRIMARY KEY,
            note TEXT NOT NULL,
            observable_uuid UUID NOT NULL,
            mtime TIMESTAMPTZ DEFAULT now(),
            ctime TIMESTAMPTZ DEFAULT now()
        );
    """)

    op.execute("""
        CREATE INDEX idx_notes_observable ON notes(observable_uuid);
    """)

    # progenitor_uuid is a strain (strain source) or an event (spore/clone)
    op.execute("""
        CREATE TABLE sources (
            uuid UUID PRIMARY KEY,
            type TEXT NOT NULL CHECK (type IN ('Spore', 'Clone')),
            progenitor_uuid UUID NOT NULL,
            generation_uuid UUID NOT NULL REFERENCES generations(uuid) ON DELETE CASCADE,
            UNIQUE (progenitor_uuid, generation_uuid)
        );
    """)


def downgrade():
    op.execute("DROP TABLE IF EXISTS sources CASCADE")
    op.execute("DROP TABLE IF EXISTS notes CASCADE")
    op.execute("DROP TABLE IF EXISTS event_photos CASCADE")
    op.execute("DROP TABLE IF EXISTS events CASCADE")
    op.execute("DROP TABLE IF EXISTS generations CASCADE")
    op.execute("DROP TABLE IF EXISTS lifecycles CASCADE")
    op.execute("DROP TABLE IF EXISTS event_types CASCADE")
    op.execute("DROP TABLE IF EXISTS stages CASCADE")
    op.execute("DROP TABLE IF EXISTS strain_attributes CASCADE")
    op.execute("DROP TABLE IF EXISTS strains CASCADE")
    op.execute("DROP TABLE IF EXISTS substrate_ingredients CASCADE")
    op.execute("DROP TABLE IF EXISTS substrates CASCADE")
    op.execute("DROP TABLE IF EXISTS ingredients CASCADE")
    op.execute("DROP TABLE IF EXISTS vendors CASCADE")
