"""SQLite persistence for submitted reviews and session summaries."""

import sqlite3
import json
import logging
from datetime import datetime
from typing import Dict, Any, List, Optional

from ..config import Config
from ..models import InterviewReport, SubmissionResult

logger = logging.getLogger(__name__)


class ReviewRepository:
    """Stores reviews keyed by (user_id, question_index) and summaries keyed by user_id.

    Writes are insert-or-replace, so resubmitting a question overwrites the
    earlier row instead of duplicating it.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = str(db_path or Config.DB_PATH)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_database(self):
        """Create the tables if they do not exist."""
        conn = self._connect()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS reviews (
                    user_id TEXT NOT NULL,
                    question_index INTEGER NOT NULL,
                    question TEXT NOT NULL,
                    status TEXT NOT NULL CHECK (status IN ('success', 'failed')),
                    score INTEGER,
                    feedback TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (user_id, question_index)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS session_summaries (
                    user_id TEXT PRIMARY KEY,
                    score INTEGER NOT NULL,
                    summary TEXT NOT NULL,
                    tips TEXT NOT NULL,
                    details TEXT NOT NULL,
                    degraded INTEGER NOT NULL DEFAULT 0,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.commit()
            logger.info(f"Review database ready at {self.db_path}")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def save_review(self, user_id: str, result: SubmissionResult) -> None:
        conn = self._connect()
        try:
            conn.execute("""
                INSERT OR REPLACE INTO reviews
                (user_id, question_index, question, status, score, feedback, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                user_id,
                result.question_index,
                result.question,
                "success" if result.success else "failed",
                result.score,
                json.dumps(result.to_dict()),
                datetime.now().isoformat(),
            ))
            conn.commit()
            logger.info(f"Saved review: user={user_id}, question={result.question_index}")
        except Exception as e:
            logger.error(f"Database error saving review: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def save_summary(self, user_id: str, report: InterviewReport) -> None:
        conn = self._connect()
        try:
            conn.execute("""
                INSERT OR REPLACE INTO session_summaries
                (user_id, score, summary, tips, details, degraded, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                user_id,
                report.score,
                report.summary,
                json.dumps(list(report.tips)),
                json.dumps(report.interview_details),
                int(report.degraded),
                datetime.now().isoformat(),
            ))
            conn.commit()
            logger.info(f"Saved session summary: user={user_id}, score={report.score}")
        except Exception as e:
            logger.error(f"Database error saving summary: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def load_reviews(self, user_id: str) -> List[Dict[str, Any]]:
        conn = self._connect()
        try:
            cursor = conn.execute("""
                SELECT question_index, status, score, feedback, updated_at
                FROM reviews
                WHERE user_id = ?
                ORDER BY question_index
            """, (user_id,))
            return [
                {
                    "question_index": row[0],
                    "status": row[1],
                    "score": row[2],
                    "feedback": json.loads(row[3]),
                    "updated_at": row[4],
                }
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def load_summary(self, user_id: str) -> Optional[Dict[str, Any]]:
        conn = self._connect()
        try:
            row = conn.execute("""
                SELECT score, summary, tips, details, degraded, updated_at
                FROM session_summaries
                WHERE user_id = ?
            """, (user_id,)).fetchone()
        finally:
            conn.close()

        if not row:
            return None
        return {
            "score": row[0],
            "summary": row[1],
            "tips": json.loads(row[2]),
            "interview_details": json.loads(row[3]),
            "degraded": bool(row[4]),
            "updated_at": row[5],
        }
