"""Business logic services for SkillSwap."""
