"""Initial schema: tenants, themes, pages, page versions, block types, RLS policies.

Tenant-scoped tables use RLS keyed on the app.tenant_id setting. An empty
setting is the system context (migrations, registry loads, storefront
tenant lookup) and sees every row.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

from pagebuilder.kernel.defaults import DEFAULT_BLOCK_TYPES

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Reads the tenant setting without casting an empty string to uuid
    op.execute("""
        CREATE OR REPLACE FUNCTION get_app_tenant_id() RETURNS uuid AS $$
        DECLARE
            val text;
        BEGIN
            val := current_setting('app.tenant_id', true);
            IF val IS NULL OR val = '' THEN
                RETURN NULL;
            END IF;
            RETURN val::uuid;
        END;
        $$ LANGUAGE plpgsql STABLE;
    """)

    # Create tenants table
    op.execute("""
        CREATE TABLE tenants (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            subdomain TEXT UNIQUE NOT NULL,
            store_name TEXT NOT NULL DEFAULT '',
            created_at TIMESTAMPTZ DEFAULT now()
        );
    """)

    # Create themes table
    op.execute("""
        CREATE TABLE themes (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            settings JSONB NOT NULL DEFAULT '{}',
            is_active BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT themes_tenant_name_key UNIQUE (tenant_id, name)
        );
    """)

    # At most one active theme per tenant
    op.execute("""
        CREATE UNIQUE INDEX themes_one_active_per_tenant ON themes(tenant_id) WHERE is_active;
    """)

    # Create pages table
    op.execute("""
        CREATE TABLE pages (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            slug TEXT NOT NULL CHECK (slug ~ '^[a-z0-9-]+$'),
            title TEXT NOT NULL,
            meta_description TEXT NOT NULL DEFAULT '',
            theme_id UUID REFERENCES themes(id) ON DELETE SET NULL,
            blocks JSONB NOT NULL DEFAULT '[]',
            is_published BOOLEAN NOT NULL DEFAULT false,
            seo_settings JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            published_at TIMESTAMPTZ,
            CONSTRAINT pages_tenant_slug_key UNIQUE (tenant_id, slug)
        );
    """)

    op.execute("""
        CREATE INDEX idx_pages_tenant_published ON pages(tenant_id, slug) WHERE is_published;
    """)

    # Create page_versions table
    op.execute("""
        CREATE TABLE page_versions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            page_id UUID NOT NULL REFERENCES pages(id) ON DELETE CASCADE,
            version_number INTEGER NOT NULL CHECK (version_number > 0),
            blocks_snapshot JSONB NOT NULL DEFAULT '[]',
            created_by UUID,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT page_versions_page_version_key UNIQUE (page_id, version_number)
        );
    """)

    # Create block_types table (global, not tenant-scoped)
    op.execute("""
        CREATE TABLE block_types (
            name TEXT PRIMARY KEY,
            category TEXT NOT NULL,
            icon TEXT,
            template TEXT NOT NULL,
            default_config JSONB NOT NULL DEFAULT '{}',
            schema JSONB NOT NULL DEFAULT '{}',
            is_enabled BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    # RLS: enabled and forced, so the table owner is scoped too
    for table in ("tenants", "themes", "pages", "page_versions"):
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")

    op.execute("""
        CREATE POLICY tenants_own ON tenants
        FOR ALL
        USING (get_app_tenant_id() IS NULL OR id = get_app_tenant_id());
    """)

    op.execute("""
        CREATE POLICY themes_own ON themes
        FOR ALL
        USING (get_app_tenant_id() IS NULL OR tenant_id = get_app_tenant_id());
    """)

    op.execute("""
        CREATE POLICY pages_own ON pages
        FOR ALL
        USING (get_app_tenant_id() IS NULL OR tenant_id = get_app_tenant_id());
    """)

    # Versions belong to the tenant that owns the page
    op.execute("""
        CREATE POLICY page_versions_own ON page_versions
        FOR ALL
        USING (
            get_app_tenant_id() IS NULL
            OR page_id IN (SELECT id FROM pages WHERE tenant_id = get_app_tenant_id())
        );
    """)

    # Seed the stock block types
    block_types = sa.table(
        "block_types",
        sa.column("name", sa.Text),
        sa.column("category", sa.Text),
        sa.column("icon", sa.Text),
        sa.column("template", sa.Text),
        sa.column("default_config", JSONB),
        sa.column("schema", JSONB),
        sa.column("is_enabled", sa.Boolean),
    )
    op.bulk_insert(
        block_types,
        [
            {
                "name": b.name,
                "category": b.category,
                "icon": b.icon,
                "template": b.template,
                "default_config": b.default_config,
                "schema": b.schema,
                "is_enabled": b.enabled,
            }
            for b in DEFAULT_BLOCK_TYPES
        ],
    )


def downgrade():
    op.execute("DROP TABLE IF EXISTS block_types CASCADE")
    op.execute("DROP TABLE IF EXISTS page_versions CASCADE")
    op.execute("DROP TABLE IF EXISTS pages CASCADE")
    op.execute("DROP TABLE IF EXISTS themes CASCADE")
    op.execute("DROP TABLE IF EXISTS tenants CASCADE")
    op.execute("DROP FUNCTION IF EXISTS get_app_tenant_id()")
