from typing import Dict, Iterable, List, Optional

from ..models.sleeper import User


class IdentityResolver:
    """
    Maps Sleeper user ids to the names managers are known by in the league.

    Precedence per user: alias table, the season's custom team name, the
    Sleeper display name, first name, then a "User <id>" placeholder. The
    alias table is global, so an aliased manager keeps one name across every
    season no matter how often they rename their team.
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None):
        # Several alias keys may point at the same user; the first one listed is canonical
        self._alias_by_user_id: Dict[str, str] = {}
        for name, user_id in (aliases or {}).items():
            self._alias_by_user_id.setdefault(user_id, name)

    def alias_for(self, user_id: str) -> Optional[str]:
        return self._alias_by_user_id.get(user_id)

    def display_name(self, user_id: str, user: Optional[User] = None) -> str:
        alias = self.alias_for(user_id)
        if alias:
            return alias
        if user is not None:
            team_name = (user.metadata or {}).get("team_name")
            if team_name:
                return team_name
            if user.display_name:
                return user.display_name
            if user.first_name:
                return user.first_name
        return f"User {user_id}"

    def resolve(self, users: List[User], owner_ids: Iterable[str] = ()) -> Dict[str, str]:
        """
        Build the user_id -> name mapping for one season.

        owner_ids covers roster owners missing from the season's user list,
        which happens when the users fetch fails.
        """
        names = {user.user_id: self.display_name(user.user_id, user) for user in users}
        for user_id in owner_ids:
            if user_id and user_id not in names:
                names[user_id] = self.display_name(user_id)
        return names
