import logging

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from .models import DEFAULT_COLUMNS, task_from_row

logger = logging.getLogger(__name__)

# Maps wire field names to table columns
UPDATABLE_FIELDS = {
    'title': 'title',
    'description': 'description',
    'column': 'status',
}

SAMPLE_TASKS = (
    ('Sample Task 1', 'This is from the database!', DEFAULT_COLUMNS[0].id),
    ('Sample Task 2', 'Another task from PostgreSQL', DEFAULT_COLUMNS[1].id),
    ('Sample Task 3', 'Completed database task', DEFAULT_COLUMNS[2].id),
)


def create_pool(config):
    try:
        db_pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=config.db_pool_min,
            maxconn=config.db_pool_max,
            dsn=config.database_url,
            cursor_factory=RealDictCursor
        )
        logger.info("Database connection pool created successfully")
        return db_pool
    except Exception as e:
        logger.error(f"Failed to create database pool: {e}")
        raise


def get_db(db_pool):
    try:
        conn = db_pool.getconn()
        return conn, conn.cursor()
    except Exception as e:
        logger.error(f"Failed to get database connection: {e}")
        raise


def release_db(db_pool, conn, cur):
    try:
        cur.close()
        db_pool.putconn(conn)
    except Exception as e:
        logger.error(f"Failed to release database connection: {e}")


def init_db(db_pool, reset=False, seed=False):
    conn, cur = get_db(db_pool)
    try:
        if reset:
            cur.execute("DROP TABLE IF EXISTS tasks;")
            logger.warning("Dropped tasks table")

        cur.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id SERIAL PRIMARY KEY,
                email VARCHAR(255) UNIQUE NOT NULL,
                name VARCHAR(255),
                image TEXT,
                created_at TIMESTAMP DEFAULT NOW()
            );
        """)
        cur.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id SERIAL PRIMARY KEY,
                title VARCHAR(255) NOT NULL,
                description TEXT,
                status VARCHAR(50) NOT NULL,
                created_at TIMESTAMP DEFAULT NOW(),
                user_id INTEGER REFERENCES users(id)
            );
        """)

        # Tables created before ownership existed lack user_id
        cur.execute("""
            ALTER TABLE tasks
            ADD COLUMN IF NOT EXISTS user_id INTEGER REFERENCES users(id);
        """)
        cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);")

        if seed:
            cur.executemany(
                "INSERT INTO tasks (title, description, status) VALUES (%s, %s, %s);",
                SAMPLE_TASKS
            )

        conn.commit()
        logger.info("Database initialized successfully")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize database: {e}")
        raise
    finally:
        release_db(db_pool, conn, cur)


def _parse_id(task_id):
    try:
        return int(task_id)
    except (TypeError, ValueError):
        return None


class TaskRepository:
    """Task and user queries over a psycopg2 connection pool."""

    def __init__(self, db_pool):
        self.db_pool = db_pool

    def _run(self, query, params=(), fetch='all', commit=False):
        conn, cur = get_db(self.db_pool)
        try:
            cur.execute(query, params)
            if fetch == 'all':
                result = cur.fetchall()
            elif fetch == 'one':
                result = cur.fetchone()
            else:
                result = None
            if commit:
                conn.commit()
            return result
        except Exception:
            conn.rollback()
            raise
        finally:
            release_db(self.db_pool, conn, cur)

    def ping(self):
        row = self._run("SELECT NOW() AS current_time;", fetch='one')
        return row['current_time']

    def list_tasks(self):
        rows = self._run("SELECT * FROM tasks ORDER BY created_at DESC, id DESC;")
        return [task_from_row(row) for row in rows]

    def get_task(self, task_id):
        row_id = _parse_id(task_id)
        if row_id is None:
            return None
        row = self._run("SELECT * FROM tasks WHERE id = %s;", (row_id,), fetch='one')
        return task_from_row(row) if row else None

    def create_task(self, title, description, column, user_id=None):
        row = self._run("""
            INSERT INTO tasks (title, description, status, user_id)
            VALUES (%s, %s, %s, %s)
            RETURNING *;
        """, (title, description or '', column, user_id), fetch='one', commit=True)
        return task_from_row(row)

    def update_task(self, task_id, fields):
        row_id = _parse_id(task_id)
        if row_id is None:
            return None

        # Only the provided subset is written
        assignments = []
        values = []
        for name, value in fields.items():
            assignments.append(f"{UPDATABLE_FIELDS[name]} = %s")
            values.append(value)
        if not assignments:
            raise ValueError("No fields to update")

        values.append(row_id)
        row = self._run(
            f"UPDATE tasks SET {', '.join(assignments)} WHERE id = %s RETURNING *;",
            tuple(values), fetch='one', commit=True
        )
        return task_from_row(row) if row else None

    def delete_task(self, task_id):
        row_id = _parse_id(task_id)
        if row_id is None:
            return False
        row = self._run(
            "DELETE FROM tasks WHERE id = %s RETURNING id;",
            (row_id,), fetch='one', commit=True
        )
        return row is not None

    def upsert_user(self, email, name=None, image=None):
        row = self._run("""
            INSERT INTO users (email, name, image)
            VALUES (%s, %s, %s)
            ON CONFLICT (email) DO UPDATE
                SET name = EXCLUDED.name, image = EXCLUDED.image
            RETURNING id;
        """, (email, name, image), fetch='one', commit=True)
        return row['id']

    def list_users(self):
        rows = self._run(
            "SELECT id, email, name, created_at FROM users ORDER BY created_at DESC;"
        )
        return [dict(row) for row in rows]
