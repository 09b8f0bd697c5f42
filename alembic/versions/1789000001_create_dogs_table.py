"""create_dogs_table

Revision ID: 1789000001
Revises: 1789000000
Create Date: 2026-09-08 00:00:01

"""
from typing import Sequence, Union
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '1789000001'
down_revision: Union[str, Sequence[str], None] = '1789000000'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create dogs table owned by users."""

    op.execute("""
        CREATE TABLE dogs (
            id SERIAL PRIMARY KEY,
            owner_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(50) NOT NULL,
            breed VARCHAR(50),
            age INTEGER CHECK (age >= 0 AND age <= 30),
            size VARCHAR(20) NOT NULL
                CHECK (size IN ('small', 'medium', 'large', 'extra_large')),
            temperament VARCHAR(200),
            special_needs TEXT,
            medical_notes TEXT,
            profile_image_url VARCHAR(500),
            is_friendly_with_other_dogs BOOLEAN NOT NULL DEFAULT TRUE,
            is_friendly_with_children BOOLEAN NOT NULL DEFAULT TRUE,
            energy_level VARCHAR(10) NOT NULL DEFAULT 'medium'
                CHECK (energy_level IN ('low', 'medium', 'high')),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            is_active BOOLEAN NOT NULL DEFAULT TRUE
        )
    """)

    # Create indexes
    op.execute("CREATE INDEX idx_dogs_owner_id ON dogs(owner_id) WHERE is_active = TRUE")
    op.execute("CREATE INDEX idx_dogs_size ON dogs(size) WHERE is_active = TRUE")
    op.execute("CREATE INDEX idx_dogs_energy_level ON dogs(energy_level) WHERE is_active = TRUE")
    op.execute("CREATE INDEX idx_dogs_created_at ON dogs(created_at DESC, id DESC)")


def downgrade() -> None:
    """Drop dogs table."""
    op.execute("DROP TABLE IF EXISTS dogs")
