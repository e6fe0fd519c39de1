"""add passing scores, deadlines, prerequisites and ministry course stats

Revision ID: 0002
Revises: 0001
Create Date: 2026-09-21 16:40:27.509913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('lessons', sa.Column('passing_score', sa.Integer(), server_default='70', nullable=True))

    op.add_column('courses', sa.Column('deadline', sa.DateTime(), nullable=True))
    op.add_column('courses', sa.Column('is_mandatory', sa.Boolean(), server_default=sa.false(), nullable=False))
    op.add_column('courses', sa.Column('prerequisite_course_id', sa.Integer(), nullable=True))
    op.create_index(op.f('ix_courses_deadline'), 'courses', ['deadline'], unique=False)
    op.create_foreign_key(
        'fk_courses_prerequisite_course_id', 'courses', 'courses',
        ['prerequisite_course_id'], ['id'], ondelete='SET NULL'
    )

    op.add_column('enrollments', sa.Column('deadline', sa.DateTime(), nullable=True))
    op.add_column('enrollments', sa.Column('is_overdue', sa.Boolean(), server_default=sa.false(), nullable=False))
    op.create_index(op.f('ix_enrollments_deadline'), 'enrollments', ['deadline'], unique=False)

    op.add_column('lesson_progress', sa.Column('passed', sa.Boolean(), server_default=sa.false(), nullable=False))
    # Completed quiz rows recorded before the flag existed count as passed
    op.execute("UPDATE lesson_progress SET passed = true WHERE status = 'COMPLETED' AND quiz_score IS NOT NULL")

    op.create_table('ministry_course_stats',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ministry', sa.String(), nullable=False),
    sa.Column('course_id', sa.Integer(), nullable=False),
    sa.Column('enrolled_count', sa.Integer(), nullable=False),
    sa.Column('completed_count', sa.Integer(), nullable=False),
    sa.Column('avg_score', sa.Float(), nullable=False),
    sa.Column('overdue_count', sa.Integer(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('ministry', 'course_id', name='uq_ministry_course_stats')
    )
    op.create_index(op.f('ix_ministry_course_stats_id'), 'ministry_course_stats', ['id'], unique=False)
    op.create_index(op.f('ix_ministry_course_stats_ministry'), 'ministry_course_stats', ['ministry'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_ministry_course_stats_ministry'), table_name='ministry_course_stats')
    op.drop_index(op.f('ix_ministry_course_stats_id'), table_name='ministry_course_stats')
    op.drop_table('ministry_course_stats')

    op.drop_column('lesson_progress', 'passed')

    op.drop_index(op.f('ix_enrollments_deadline'), table_name='enrollments')
    op.drop_column('enrollments', 'is_overdue')
    op.drop_column('enrollments', 'deadline')

    op.drop_constraint('fk_courses_prerequisite_course_id', 'courses', type_='foreignkey')
    op.drop_index(op.f('ix_courses_deadline'), table_name='courses')
    op.drop_column('courses', 'prerequisite_course_id')
    op.drop_column('courses', 'is_mandatory')
    op.drop_column('courses', 'deadline')

    op.drop_column('lessons', 'passing_score')
