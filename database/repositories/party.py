from typing import Any, Optional

from database.models import Candidate, Company, Job
from database.repositories.base import BaseRepository


class PartyRepository(BaseRepository):
    """Lookups of the companies, candidates and jobs the engine references."""

    def get_company(self, company_id: Any) -> Optional[Company]:
        return self.db.get(Company, self._id(company_id))

    def get_candidate(self, candidate_id: Any) -> Optional[Candidate]:
        return self.db.get(Candidate, self._id(candidate_id))

    def get_job(self, job_id: Any) -> Optional[Job]:
        return self.db.get(Job, self._id(job_id))

    def add(self, entity):
        self.db.add(entity)
        self.db.flush()
        return entity
