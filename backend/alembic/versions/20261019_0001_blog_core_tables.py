from alembic import op


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS sys_authors (
            id VARCHAR(191) PRIMARY KEY,
            name VARCHAR(100),
            email VARCHAR(255),
            avatar VARCHAR(500),
            role VARCHAR(20) NOT NULL DEFAULT 'USER',
            bio TEXT,
            website VARCHAR(500),
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS blog_posts (
            id SERIAL PRIMARY KEY,
            title VARCHAR(200) NOT NULL,
            subtitle VARCHAR(100),
            content TEXT NOT NULL,
            category VARCHAR(100) NOT NULL,
            image_url VARCHAR(1000),
            slug VARCHAR(255) NOT NULL,
            excerpt TEXT NOT NULL DEFAULT '',
            read_time INTEGER NOT NULL DEFAULT 1,
            status VARCHAR(20) NOT NULL DEFAULT 'Published',
            featured BOOLEAN NOT NULL DEFAULT false,
            tags JSON NOT NULL DEFAULT '[]'::json,
            views INTEGER NOT NULL DEFAULT 0,
            author_id VARCHAR(191) REFERENCES sys_authors(id) ON DELETE SET NULL,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )
    op.execute("CREATE UNIQUE INDEX IF NOT EXISTS ix_blog_posts_slug ON blog_posts(slug);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_blog_posts_id ON blog_posts(id);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_blog_posts_status ON blog_posts(status);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_blog_posts_created_at ON blog_posts(created_at);")

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS blog_comments (
            id SERIAL PRIMARY KEY,
            name VARCHAR(50) NOT NULL,
            email VARCHAR(255),
            content TEXT NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'Pending',
            post_id INTEGER NOT NULL REFERENCES blog_posts(id) ON DELETE CASCADE,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS ix_blog_comments_id ON blog_comments(id);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_blog_comments_status ON blog_comments(status);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_blog_comments_post_id ON blog_comments(post_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS blog_comments;")
    op.execute("DROP TABLE IF EXISTS blog_posts;")
    op.execute("DROP TABLE IF EXISTS sys_authors;")
