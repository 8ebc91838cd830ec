# Import all models here to ensure they're loaded together
# This prevents circular import issues with relationships

from member_search.models.member import Member
from member_search.models.team import Team

__all__ = ["Member", "Team"]
