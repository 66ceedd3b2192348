"""Insight extraction and read-time estimate for community submissions."""

from mindos.community.service import MAX_INSIGHTS, estimate_read_minutes, extract_insights


class TestExtractInsights:
    def test_title_first_then_actionable_and_conceptual(self):
        content = (
            "You should automate the weekly report with a small script. "
            "Then use a template to draft replies to common emails. "
            "This is about building a productivity system that compounds. "
            "Short one."
        )
        insights = extract_insights(content, "Automate your reporting")
        assert insights[0] == "Automate your reporting"
        assert "You should automate the weekly report with a small script" in insights
        assert len(insights) <= MAX_INSIGHTS

    def test_no_duplicates(self):
        content = "Automate the boring process today please. Automate the boring process today please."
        insights = extract_insights(content, "A reasonably long title")
        assert len(insights) == len(set(insights))

    def test_short_title_dropped(self):
        assert extract_insights("nothing useful", "Hi") == []


class TestEstimateReadMinutes:
    def test_minimum_one_minute(self):
        assert estimate_read_minutes("") == 1

    def test_two_hundred_chars_per_minute(self):
        assert estimate_read_minutes("x" * 200) == 1
        assert estimate_read_minutes("x" * 201) == 2
