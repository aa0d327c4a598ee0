"""Initial recipe catalog schema

Revision ID: 3b7d2e91c4a0
Revises:
Create Date: 2026-10-16 09:12:44.118203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7d2e91c4a0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('source', sa.String(length=255), nullable=True),
        sa.Column('date_added', sa.Integer(), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('servings', sa.Integer(), nullable=True),
        sa.Column('estimated_calories', sa.Integer(), nullable=True),
        sa.Column('calories_confidence', sa.String(length=10), nullable=True),
        sa.Column('image_path', sa.String(length=255), nullable=True),
        sa.Column('times_cooked', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('recipes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipes_title'), ['title'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipes_date_added'), ['date_added'], unique=False)

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'recipe_tags',
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('recipe_id', 'tag_id'),
    )
    with op.batch_alter_table('recipe_tags', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_tags_tag_id'), ['tag_id'], unique=False)

    op.create_table(
        'ingredients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.String(length=50), nullable=True),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('ingredients', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ingredients_recipe_id'), ['recipe_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_ingredients_name'), ['name'], unique=False)

    op.create_table(
        'recipe_images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=True),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('is_hero', sa.Boolean(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('uploaded_by', sa.Integer(), nullable=True),
        sa.Column('uploaded_at', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('recipe_images', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_images_recipe_id'), ['recipe_id'], unique=False)

    op.create_table(
        'uploaded_files',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('uploaded_by', sa.Integer(), nullable=False),
        sa.Column('uploaded_at', sa.Integer(), nullable=False),
        sa.Column('processed', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('uploaded_files', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_uploaded_files_uploaded_by'), ['uploaded_by'], unique=False)

    op.create_table(
        'pending_recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('file_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=True),
        sa.Column('source', sa.String(length=500), nullable=True),
        sa.Column('category', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('raw_text', sa.Text(), nullable=True),
        sa.Column('parsed_data', sa.Text(), nullable=True),
        sa.Column('image_filename', sa.String(length=255), nullable=True),
        sa.Column('image_original_name', sa.String(length=255), nullable=True),
        sa.Column('image_file_path', sa.String(length=500), nullable=True),
        sa.Column('image_file_size', sa.Integer(), nullable=True),
        sa.Column('image_mime_type', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['file_id'], ['uploaded_files.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('pending_recipes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_pending_recipes_file_id'), ['file_id'], unique=False)

    op.create_table(
        'pending_ingredients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('pending_recipe_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.String(length=50), nullable=True),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['pending_recipe_id'], ['pending_recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('pending_ingredients', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_pending_ingredients_pending_recipe_id'), ['pending_recipe_id'], unique=False)

    op.create_table(
        'pending_tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('pending_recipe_id', sa.Integer(), nullable=False),
        sa.Column('tag_name', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['pending_recipe_id'], ['pending_recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('pending_tags', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_pending_tags_pending_recipe_id'), ['pending_recipe_id'], unique=False)

    op.create_table(
        'user_submitted_recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('source', sa.String(length=255), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('servings', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('user_submitted_recipes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_submitted_recipes_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_user_submitted_recipes_status'), ['status'], unique=False)

    op.create_table(
        'user_submitted_ingredients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('submitted_recipe_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.String(length=50), nullable=True),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['submitted_recipe_id'], ['user_submitted_recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('user_submitted_ingredients', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_submitted_ingredients_submitted_recipe_id'), ['submitted_recipe_id'], unique=False)

    op.create_table(
        'user_submitted_tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('submitted_recipe_id', sa.Integer(), nullable=False),
        sa.Column('tag_name', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['submitted_recipe_id'], ['user_submitted_recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('user_submitted_tags', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_submitted_tags_submitted_recipe_id'), ['submitted_recipe_id'], unique=False)

    op.create_table(
        'user_saved_recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('saved_at', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'recipe_id', name='uq_saved_user_recipe'),
    )
    with op.batch_alter_table('user_saved_recipes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_saved_recipes_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_user_saved_recipes_recipe_id'), ['recipe_id'], unique=False)


def downgrade():
    op.drop_table('user_saved_recipes')
    op.drop_table('user_submitted_tags')
    op.drop_table('user_submitted_ingredients')
    op.drop_table('user_submitted_recipes')
    op.drop_table('pending_tags')
    op.drop_table('pending_ingredients')
    op.drop_table('pending_recipes')
    op.drop_table('uploaded_files')
    op.drop_table('recipe_images')
    op.drop_table('ingredients')
    op.drop_table('recipe_tags')
    op.drop_table('tags')
    op.drop_table('recipes')
