"""create_users_table

Revision ID: 1789000000
Revises:
Create Date: 2026-09-08 00:00:00

"""
from typing import Sequence, Union
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '1789000000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users table."""

    # Email stays unique across soft-deleted users too
    op.execute("""
        CREATE TABLE users (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            email VARCHAR(150) NOT NULL UNIQUE,
            role VARCHAR(10) NOT NULL CHECK (role IN ('owner', 'walker')),
            phone VARCHAR(20),
            location VARCHAR(200),
            profile_image_url VARCHAR(500),
            bio TEXT,
            rating NUMERIC(3, 2) NOT NULL DEFAULT 0 CHECK (rating >= 0 AND rating <= 5),
            total_reviews INTEGER NOT NULL DEFAULT 0 CHECK (total_reviews >= 0),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            is_active BOOLEAN NOT NULL DEFAULT TRUE
        )
    """)

    # Create indexes
    op.execute("CREATE INDEX idx_users_role ON users(role) WHERE is_active = TRUE")
    op.execute("CREATE INDEX idx_users_rating ON users(rating DESC) WHERE is_active = TRUE")
    op.execute("CREATE INDEX idx_users_created_at ON users(created_at DESC, id DESC)")


def downgrade() -> None:
    """Drop users table."""
    op.execute("DROP TABLE IF EXISTS users")
