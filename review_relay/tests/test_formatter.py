"""Tests for Telegram message templates."""

from datetime import datetime, timedelta, timezone

from review_relay.models.review import ReviewSubmission
from review_relay.services.formatter import (
    NEGATIVE_REVIEW_HEADER,
    POSITIVE_REVIEW_HEADER,
    format_alert_message,
    format_google_click_message,
    format_master_click_message,
    format_review_message,
    format_timestamp,
)

WINTER = datetime(2025, 3, 7, 12, 5, tzinfo=timezone.utc)
SUMMER = datetime(2025, 7, 1, 21, 30, tzinfo=timezone.utc)


class TestFormatTimestamp:
    def test_winter_offset(self):
        assert format_timestamp(WINTER) == "07.03.2025 14:05"

    def test_summer_offset_rolls_over_midnight(self):
        assert format_timestamp(SUMMER) == "02.07.2025 00:30"

    def test_naive_is_treated_as_utc(self):
        assert format_timestamp(datetime(2025, 3, 7, 12, 5)) == "07.03.2025 14:05"

    def test_same_instant_in_other_zone_formats_identically(self):
        other = WINTER.astimezone(timezone(timedelta(hours=-5)))
        assert format_timestamp(other) == format_timestamp(WINTER)


class TestReviewMessage:
    def test_negative_template_with_comment(self):
        text = format_review_message(
            ReviewSubmission(name="Ivan", rating=2, reason="Холодно"), WINTER
        )
        assert text.split("\n") == [
            NEGATIVE_REVIEW_HEADER,
            "",
            "👤 Імя: Ivan",
            "⭐️ 2/5",
            "💬 Коментар: Холодно",
            "",
            "🕑 07.03.2025 14:05",
        ]

    def test_positive_template_without_comment(self):
        text = format_review_message(ReviewSubmission(name="Olena", rating=5), WINTER)
        assert text.split("\n") == [
            POSITIVE_REVIEW_HEADER,
            "",
            "👤 Імя: Olena",
            "⭐️ 5/5",
            "",
            "🕑 07.03.2025 14:05",
        ]


def test_google_click_message_uses_placeholder_name():
    text = format_google_click_message("", WINTER)
    assert text.split("\n") == [
        "🎉 Гість перейшов за посиланням у Гугл",
        "👤 Імя: Невідомо",
        "🕑 07.03.2025 14:05",
    ]


class TestMasterClickMessage:
    def test_all_optional_lines(self):
        text = format_master_click_message("Olena", master="Anna", rating=5, at=WINTER)
        lines = text.split("\n")
        assert lines[2] == "👤 Ім'я: Olena"
        assert lines[3] == "🧑‍🔧 Майстер: Anna"
        assert lines[4] == "⭐️ 5/5"
        assert lines[-1] == "🕑 07.03.2025 14:05"

    def test_optional_lines_omitted(self):
        text = format_master_click_message("", at=WINTER)
        assert "Майстер" not in text
        assert "⭐️" not in text
        assert len(text.split("\n")) == 5

    def test_non_numeric_rating_omitted(self):
        text = format_master_click_message("Olena", rating="five", at=WINTER)
        assert "⭐️" not in text

    def test_integral_float_rating_shown_as_int(self):
        text = format_master_click_message("Olena", rating=4.0, at=WINTER)
        assert "⭐️ 4/5" in text


def test_alert_message_drops_empty_details():
    text = format_alert_message("🔥 boom", ["⚠️ bad", None, ""], WINTER)
    assert text.split("\n") == ["🔥 boom", "", "⚠️ bad", "", "🕑 07.03.2025 14:05"]
