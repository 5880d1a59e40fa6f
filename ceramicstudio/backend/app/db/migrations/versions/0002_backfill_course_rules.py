"""Backfill explicit course attributes from legacy id conventions

Revision ID: 0002_backfill_course_rules
Revises: 0001_initial
Create Date: 2025-11-20
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "0002_backfill_course_rules"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        "UPDATE courses SET capacity_class = 'pottery_wheel' "
        "WHERE id LIKE '%topferscheibe%'"
    )
    op.execute(
        "UPDATE courses SET schedule_rule = 'first_sunday_of_month' "
        "WHERE id = 'keramik-bemalen-sonntag'"
    )


def downgrade() -> None:
    op.execute("UPDATE courses SET capacity_class = 'standard'")
    op.execute("UPDATE courses SET schedule_rule = 'standard'")
