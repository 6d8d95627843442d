"""Create initial tables"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a7c5e21d9f4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create permissions table
    op.create_table(
        'permissions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('scope', sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_permissions_name'), 'permissions', ['name'])

    # Create roles table (scope_id is the organization id for organization roles)
    op.create_table(
        'roles',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('scope', sa.String(20), nullable=False),
        sa.Column('scope_id', sa.String(36), nullable=True),
        sa.Column('is_default', sa.Boolean(), server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'scope', 'scope_id', name='uq_roles_name_scope')
    )
    op.create_index(op.f('ix_roles_scope_id'), 'roles', ['scope_id'])

    op.create_table(
        'role_permissions',
        sa.Column('role_id', sa.String(36), nullable=False),
        sa.Column('permission_id', sa.String(36), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('role_id', 'permission_id')
    )

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_verified', sa.Boolean(), server_default=sa.false()),
        sa.Column('global_role_id', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['global_role_id'], ['roles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'])

    # Create organizations table
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('place_id', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('area', sa.String(200), nullable=True),
        sa.Column('sub_area', sa.String(200), nullable=True),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('post_code', sa.String(20), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('images', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('permissions', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('owner_id', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_organizations_name'), 'organizations', ['name'])
    op.create_index(op.f('ix_organizations_city'), 'organizations', ['city'])
    op.create_index('ix_organizations_lat_lng', 'organizations', ['latitude', 'longitude'])

    op.create_table(
        'organization_facilities',
        sa.Column('organization_id', sa.String(36), nullable=False),
        sa.Column('facility', sa.String(100), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('organization_id', 'facility')
    )

    # Create turfs table
    op.create_table(
        'turfs',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('organization_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('base_price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('team_size', sa.Integer(), nullable=False),
        sa.Column('images', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_turfs_organization_id'), 'turfs', ['organization_id'])
    op.create_index('ix_turfs_base_price', 'turfs', ['base_price'])

    op.create_table(
        'turf_sports',
        sa.Column('turf_id', sa.String(36), nullable=False),
        sa.Column('sport', sa.String(50), nullable=False),
        sa.ForeignKeyConstraint(['turf_id'], ['turfs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('turf_id', 'sport')
    )

    op.create_table(
        'turf_operating_hours',
        sa.Column('turf_id', sa.String(36), nullable=False),
        sa.Column('day', sa.String(10), nullable=False),
        sa.Column('open_time', sa.String(5), nullable=False),
        sa.Column('close_time', sa.String(5), nullable=False),
        sa.ForeignKeyConstraint(['turf_id'], ['turfs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('turf_id', 'day')
    )

    # Create turf_reviews table
    op.create_table(
        'turf_reviews',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('turf_id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review', sa.Text(), nullable=True),
        sa.Column('images', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['turf_id'], ['turfs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('turf_id', 'user_id', name='uq_turf_reviews_turf_user'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_turf_reviews_rating')
    )
    op.create_index(op.f('ix_turf_reviews_turf_id'), 'turf_reviews', ['turf_id'])
    op.create_index(op.f('ix_turf_reviews_user_id'), 'turf_reviews', ['user_id'])

    # Create user_organization_roles table (one role per user and organization)
    op.create_table(
        'user_organization_roles',
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('organization_id', sa.String(36), nullable=False),
        sa.Column('role_id', sa.String(36), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'organization_id')
    )

    # Create tokens table (password reset)
    op.create_table(
        'tokens',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('token_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tokens_user_id'), 'tokens', ['user_id'])


def downgrade():
    op.drop_table('tokens')
    op.drop_table('user_organization_roles')
    op.drop_table('turf_reviews')
    op.drop_table('turf_operating_hours')
    op.drop_table('turf_sports')
    op.drop_table('turfs')
    op.drop_table('organization_facilities')
    op.drop_table('organizations')
    op.drop_table('users')
    op.drop_table('role_permissions')
    op.drop_table('roles')
    op.drop_table('permissions')
