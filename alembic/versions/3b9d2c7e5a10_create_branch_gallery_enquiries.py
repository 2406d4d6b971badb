"""create_branch_gallery_enquiries

Revision ID: 3b9d2c7e5a10
Revises:
Create Date: 2026-10-19 10:12:41.508213

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b9d2c7e5a10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'branch',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('contact_no', sa.JSON(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('gmap_link', sa.Text(), nullable=True),
        sa.Column('room_rate', sa.JSON(), nullable=True),
        sa.Column('prime_location_perks', sa.JSON(), nullable=True),
        sa.Column('amenities', sa.JSON(), nullable=True),
        sa.Column('property_features', sa.JSON(), nullable=True),
        sa.Column('reg_fee', sa.Integer(), nullable=True),
        sa.Column('is_mess_available', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_ladies_only', sa.Boolean(), nullable=True),
        sa.Column('is_cooking_allowed', sa.Boolean(), nullable=True),
        sa.Column('cooking_price', sa.Integer(), nullable=True),
        sa.Column('thumbnail', sa.String(), nullable=True),
        sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_branch_id'), 'branch', ['id'], unique=False)
    op.create_index(op.f('ix_branch_name'), 'branch', ['name'], unique=False)
    op.create_index(op.f('ix_branch_display_order'), 'branch', ['display_order'], unique=False)

    op.create_table(
        'gallery',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(), nullable=False),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['branch_id'], ['branch.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_gallery_id'), 'gallery', ['id'], unique=False)
    op.create_index(op.f('ix_gallery_branch_id'), 'gallery', ['branch_id'], unique=False)
    op.create_index(op.f('ix_gallery_display_order'), 'gallery', ['display_order'], unique=False)

    op.create_table(
        'user_enquiries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('branch_id', sa.Integer(), nullable=True),
        sa.Column('source', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['branch_id'], ['branch.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_enquiries_id'), 'user_enquiries', ['id'], unique=False)
    op.create_index(op.f('ix_user_enquiries_branch_id'), 'user_enquiries', ['branch_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_user_enquiries_branch_id'), table_name='user_enquiries')
    op.drop_index(op.f('ix_user_enquiries_id'), table_name='user_enquiries')
    op.drop_table('user_enquiries')

    op.drop_index(op.f('ix_gallery_display_order'), table_name='gallery')
    op.drop_index(op.f('ix_gallery_branch_id'), table_name='gallery')
    op.drop_index(op.f('ix_gallery_id'), table_name='gallery')
    op.drop_table('gallery')

    op.drop_index(op.f('ix_branch_display_order'), table_name='branch')
    op.drop_index(op.f('ix_branch_name'), table_name='branch')
    op.drop_index(op.f('ix_branch_id'), table_name='branch')
    op.drop_table('branch')
