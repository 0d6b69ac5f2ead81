"""SkillSwap backend: Clerk session verification and local user sync."""
