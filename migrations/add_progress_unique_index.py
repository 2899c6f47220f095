"""
Migration: enforce one progress row per (user, module).

Databases created before the unique constraint existed can hold duplicate
user_progress rows. This keeps the best row per pair (highest progress, then
score), folds the time of the removed duplicates into it, and creates the
unique index that the atomic upsert relies on.
"""

import os
import sqlite3

INDEX_NAME = "uq_user_progress_user_module"


def _db_path() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./learntrack.db").replace("sqlite:///", "")


def run_migration():
    conn = None
    try:
        conn = sqlite3.connect(_db_path())
        cursor = conn.cursor()

        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='user_progress'")
        if not cursor.fetchone():
            print("user_progress table not found. Skipping.")
            return

        cursor.execute("SELECT name FROM sqlite_master WHERE type='index' AND name=?", (INDEX_NAME,))
        if cursor.fetchone():
            print(f"{INDEX_NAME} already exists. Skipping.")
            return

        cursor.execute(
            """
            SELECT user_id, module_id, SUM(time_spent), COUNT(*)
            FROM user_progress GROUP BY user_id, module_id HAVING COUNT(*) > 1
            """
        )
        duplicates = cursor.fetchall()
        for user_id, module_id, total_time, count in duplicates:
            cursor.execute(
                """
                SELECT id FROM user_progress WHERE user_id = ? AND module_id = ?
                ORDER BY progress DESC, score DESC, id ASC LIMIT 1
                """,
                (user_id, module_id),
            )
            (keep_id,) = cursor.fetchone()
            cursor.execute(
                "DELETE FROM user_progress WHERE user_id = ? AND module_id = ? AND id != ?",
                (user_id, module_id, keep_id),
            )
            cursor.execute("UPDATE user_progress SET time_spent = ? WHERE id = ?", (total_time or 0, keep_id))
            print(f"user_progress: merged {count} rows for user_id={user_id} module_id={module_id}")

        cursor.execute(f"CREATE UNIQUE INDEX {INDEX_NAME} ON user_progress (user_id, module_id)")
        conn.commit()
        print(f"✓ Migration add_progress_unique_index completed ({len(duplicates)} duplicate groups merged)")

    except sqlite3.Error as e:
        print(f"Error during migration: {e}")
        if conn:
            conn.rollback()
    finally:
        if conn:
            conn.close()


if __name__ == "__main__":
    run_migration()
