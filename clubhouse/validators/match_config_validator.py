from clubhouse.match_state import MatchConfig, TIE

TOSS_DECISIONS = ("bat", "bowl")


class MatchConfigValidator:
    @staticmethod
    def validate(config: MatchConfig) -> dict:
        """
        Validate a match configuration.

        Rules:
        1. Both team names given and different
        2. Both rosters non-empty, no player listed twice, no player on both sides
        3. Overs is a positive whole number
        4. Toss winner is one of the two teams, decision is bat or bowl
        """
        errors = []

        def fail(field: str, message: str):
            errors.append({"field": field, "message": message})

        team_a = (config.team_a_name or "").strip()
        team_b = (config.team_b_name or "").strip()
        if not team_a:
            fail("team_a_name", "Team A needs a name")
        if not team_b:
            fail("team_b_name", "Team B needs a name")
        if team_a and team_a == team_b:
            fail("team_b_name", f"Both teams are called '{team_a}'")
        for field, name in (("team_a_name", team_a), ("team_b_name", team_b)):
            if name == TIE:
                fail(field, f"'{TIE}' is reserved for tied results")

        a_ids = [p.id for p in config.team_a_players]
        b_ids = [p.id for p in config.team_b_players]
        if not a_ids:
            fail("team_a_players", "Select at least one player for Team A")
        if not b_ids:
            fail("team_b_players", "Select at least one player for Team B")
        if len(set(a_ids)) != len(a_ids):
            fail("team_a_players", "A player is selected twice for Team A")
        if len(set(b_ids)) != len(b_ids):
            fail("team_b_players", "A player is selected twice for Team B")

        shared = set(a_ids) & set(b_ids)
        if shared:
            names = sorted(p.name for p in config.team_a_players if p.id in shared)
            fail("team_b_players", f"Players selected for both teams: {', '.join(names)}")

        if isinstance(config.overs, bool) or not isinstance(config.overs, int):
            fail("overs", f"Overs must be a whole number, got {config.overs!r}")
        elif config.overs <= 0:
            fail("overs", f"Overs must be positive, got {config.overs}")

        if config.toss_winner not in (config.team_a_name, config.team_b_name):
            fail("toss_winner", f"Toss winner '{config.toss_winner}' is not one of the two teams")
        if config.toss_decision not in TOSS_DECISIONS:
            fail("toss_decision", f"Toss decision must be 'bat' or 'bowl', got '{config.toss_decision}'")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "breakdown": {
                "team_a_players": len(a_ids),
                "team_b_players": len(b_ids),
                "overs": config.overs,
            }
        }
