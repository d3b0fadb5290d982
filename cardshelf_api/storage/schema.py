"""PostgreSQL schema definitions for Cardshelf.

Every statement is idempotent; the whole script runs on each connect.
"""

# Helper function for auto-updating timestamps
CREATE_UPDATED_AT_TRIGGER = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

# Users table - one row per identity-provider subject
CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    subject_id TEXT PRIMARY KEY,
    display_name TEXT NOT NULL DEFAULT '',
    email TEXT NOT NULL DEFAULT '',
    avatar_url TEXT NOT NULL DEFAULT '',
    handle TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    last_seen_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_users_handle_lower ON users (lower(handle));
CREATE INDEX IF NOT EXISTS idx_users_email_lower ON users (lower(email));
"""

# Cards table - one row per tracked title
CREATE_CARDS_TABLE = """
CREATE TABLE IF NOT EXISTS cards (
    card_id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL REFERENCES users(subject_id),
    name VARCHAR(200) NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    image TEXT NOT NULL DEFAULT '',
    image_public_id TEXT,
    score DOUBLE PRECISION NOT NULL DEFAULT 0,
    categories TEXT[] NOT NULL DEFAULT '{}',
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),

    CONSTRAINT cards_score_check CHECK (score >= 0 AND score <= 10)
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_cards_owner_name_lower ON cards (owner_id, lower(name));
CREATE INDEX IF NOT EXISTS idx_cards_categories ON cards USING GIN(categories);

DROP TRIGGER IF EXISTS update_cards_updated_at ON cards;
CREATE TRIGGER update_cards_updated_at
    BEFORE UPDATE ON cards
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""

# Categories table - owner-defined card groupings
CREATE_CATEGORIES_TABLE = """
CREATE TABLE IF NOT EXISTS categories (
    category_id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL REFERENCES users(subject_id),
    name VARCHAR(100) NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_categories_owner_id ON categories(owner_id);

DROP TRIGGER IF EXISTS update_categories_updated_at ON categories;
CREATE TRIGGER update_categories_updated_at
    BEFORE UPDATE ON categories
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""

# Complete schema initialization - executes in order
INIT_SCHEMA = f"""
-- Create helper functions
{CREATE_UPDATED_AT_TRIGGER}

-- Users must exist before the tables that reference them
{CREATE_USERS_TABLE}
{CREATE_CARDS_TABLE}
{CREATE_CATEGORIES_TABLE}
"""
