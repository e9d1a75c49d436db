import logging
from typing import Dict, List, Optional

from exceptions import DuplicateEntryError
from ledger import PenaltyLedger
from member import Member

logger = logging.getLogger(__name__)


class Membership:
    """Owns the member records, in insertion order."""

    def __init__(self, ledger: PenaltyLedger) -> None:
        self._members: Dict[str, Member] = {}
        self._ledger = ledger

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._members

    def add(self, member: Member) -> None:
        """Register a member with a zero balance. Prevent duplicates by id."""
        if member.member_id in self._members:
            raise DuplicateEntryError(f"Member with ID {member.member_id} already exists.")
        self._members[member.member_id] = member
        self._ledger.open_account(member.member_id)
        logger.info("Added member %s", member.member_id)

    def remove(self, member_id: str) -> bool:
        member = self._members.pop(member_id, None)
        if member is None:
            return False
        self._ledger.close_account(member_id)
        logger.info("Removed member %s", member_id)
        return True

    def find_by_id(self, member_id: str) -> Optional[Member]:
        return self._members.get(member_id)

    def list_members(self) -> List[Member]:
        return list(self._members.values())

    def search_by_name(self, text: str) -> List[Member]:
        needle = text.lower()
        return [m for m in self._members.values() if needle in m.name.lower()]
