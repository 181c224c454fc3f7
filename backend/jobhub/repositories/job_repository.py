"""
Job Repository Implementation

Storage gateway for scraped jobs: lookup by canonical apply URL and
insert with duplicate detection enforced by the unique constraint.
"""

from typing import Optional, Type
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from jobhub.core.exceptions import DuplicateJobError, StorageError
from jobhub.models.job import Job
from jobhub.repositories.base_repository import BaseRepository
from jobhub.schemas.job import NormalizedJob
from jobhub.utils.logger import get_logger

logger = get_logger(__name__)


class JobRepository(BaseRepository[Job]):
    """Repository for job database operations."""

    @property
    def model(self) -> Type[Job]:
        return Job

    async def find_job_by_apply_url(self, apply_url: str) -> Optional[NormalizedJob]:
        """Get job by apply URL to prevent duplicates."""
        async with self.get_session() as session:
            try:
                query = select(self.model).where(self.model.apply_url == apply_url)
                result = await session.execute(query)
                row = result.scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.error(f"Error getting job by apply URL: {e}", apply_url=apply_url)
                raise StorageError(f"Lookup by apply URL failed: {e}") from e

        return row.to_normalized() if row is not None else None

    async def insert_job(self, job: NormalizedJob) -> NormalizedJob:
        """
        Insert a new job.

        Raises:
            DuplicateJobError: If a job with the same apply URL exists
            StorageError: On any other database failure
        """
        try:
            async with self.get_session() as session:
                db_obj = Job.from_normalized(job)
                session.add(db_obj)
                await session.flush()
                await session.refresh(db_obj)
                saved = db_obj.to_normalized()
        except IntegrityError as e:
            if self._is_apply_url_violation(e):
                raise DuplicateJobError(job.apply_url) from e
            logger.error(f"Integrity error inserting job: {e}", apply_url=job.apply_url)
            raise StorageError(f"Insert rejected: {e.orig}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating job: {e}", apply_url=job.apply_url)
            raise StorageError(f"Insert failed: {e}") from e

        logger.debug("Saved job", title=saved.title, company=saved.company)
        return saved

    async def count_jobs(self, source_name: Optional[str] = None) -> int:
        filters = {"source_name": source_name} if source_name else None
        return await self.count(filters)

    @staticmethod
    def _is_apply_url_violation(error: IntegrityError) -> bool:
        message = str(error.orig).lower()
        if "uq_jobs_apply_url" in message:
            return True
        # SQLite names the columns rather than the constraint
        return "unique" in message and "apply_url" in message
