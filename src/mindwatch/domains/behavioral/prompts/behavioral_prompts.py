"""MCP Prompts — pre-built interaction templates for wellbeing check-ins."""

from __future__ import annotations

from fastmcp import FastMCP


def register_behavioral_prompts(mcp: FastMCP) -> None:
    """Register behavioral domain MCP prompts."""

    @mcp.prompt()
    def daily_check_in_prompt() -> str:
        """Prompt template for a guided end-of-day check-in."""
        return """Let's do my daily check-in. Please walk me through it one step at a time:

1. Ask how my mood was today (1-10) and whether anything in particular affected it,
   then log it with log_mood_entry
2. Ask when I went to bed and woke up, how well I slept (1-10) and how often I woke,
   then log it with log_sleep_entry
3. Ask about my steps, screen time, social contact, exercise and time outdoors,
   then log it with log_activity_entry
4. Run assess_risk and explain the result in plain, supportive language

If the assessment comes back high, show the emergency resources first."""

    @mcp.prompt()
    def weekly_review_prompt(days: int = 7) -> str:
        """Prompt template for reviewing the past week's patterns."""
        return f"""Let's review my wellbeing over the last {days} days. I'd like to:

1. See the trend in each domain with domain_trends
2. Compare my recent risk assessments with list_assessments (limit={days})
3. Check which interventions I actually used with list_interventions_used (days={days})
4. Pick one small, realistic change to focus on next week

Please be honest but kind, and point out what went well too."""
