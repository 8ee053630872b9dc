"""
Matching Engine.

Responsibilities:
- Resolve a candidate by CPF or a contest by code.
- Return the counterpart records whose professions intersect.

Non-Responsibilities:
- No mutation of persistent state.
- No scoring or ranking: any single shared profession qualifies.
- No retry on store failures.

Invariant:
Unknown or empty identifiers yield an empty list, never an error.
Results keep store-iteration order.
"""

from typing import Iterable, List, Optional, Set

from .database import Candidate, Contest
from .logger import StructuredLogger, get_logger, mask_key
from .normalize import Normalizer, exact
from .store import Store


def required_professions(contest: Contest) -> List[str]:
    """Distinct professions required across a contest's positions, in position order."""
    seen: List[str] = []
    for position in contest.positions:
        if position.profession not in seen:
            seen.append(position.profession)
    return seen


def _keys(professions: Iterable[str], normalizer: Normalizer) -> Set[str]:
    return {normalizer(p) for p in professions}


def is_match(professions: Iterable[str], required: Iterable[str], normalizer: Normalizer = exact) -> bool:
    """True when the two profession collections share at least one label."""
    return not _keys(professions, normalizer).isdisjoint(_keys(required, normalizer))


class MatchingEngine:
    """Finds compatible contests for a candidate and candidates for a contest."""

    def __init__(
        self,
        store: Store,
        normalizer: Normalizer = exact,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store = store
        self.normalizer = normalizer
        self.logger = logger or get_logger()

    def find_contests_for_candidate(self, cpf: Optional[str]) -> List[Contest]:
        if not cpf or not cpf.strip():
            return []
        candidate = self.store.query_by_unique_key(Candidate, cpf.strip())
        if candidate is None:
            self.logger.debug("Unknown CPF, no matches", cpf=mask_key(cpf.strip()))
            self.logger.record_match_query(0)
            return []

        wanted = _keys(candidate.professions or [], self.normalizer)
        matches = [
            contest
            for contest in self.store.query_all(Contest)
            if not wanted.isdisjoint(_keys(required_professions(contest), self.normalizer))
        ]
        self.logger.record_match_query(len(matches))
        self.logger.info("Contests matched for candidate", candidate_id=candidate.id, matches=len(matches))
        return matches

    def find_candidates_for_contest(self, code: Optional[str]) -> List[Candidate]:
        if not code or not code.strip():
            return []
        contest = self.store.query_by_unique_key(Contest, code.strip())
        if contest is None:
            self.logger.debug("Unknown contest code, no matches", code=code)
            self.logger.record_match_query(0)
            return []

        wanted = _keys(required_professions(contest), self.normalizer)
        matches = [
            candidate
            for candidate in self.store.query_all(Candidate)
            if not wanted.isdisjoint(_keys(candidate.professions or [], self.normalizer))
        ]
        self.logger.record_match_query(len(matches))
        self.logger.info("Candidates matched for contest", code=contest.code, matches=len(matches))
        return matches
