"""
Tests for the field normalizer.

Job type classification, remote inference, salary and date parsing,
tag extraction and full listing normalization.
"""

import pytest
from datetime import datetime, timedelta
from pydantic import ValidationError

from jobhub.schemas.job import JobType
from jobhub.scrapers.normalizer import (
    classify_job_type,
    infer_remote,
    parse_salary,
    parse_posted_date,
    extract_tags,
    normalize_listing,
)

from tests.factories import make_raw_listing

NOW = datetime(2024, 6, 1, 12, 0, 0)


@pytest.mark.unit
class TestClassifyJobType:
    """Test job type classification."""

    def test_internship(self):
        assert classify_job_type("Marketing Intern", "Summer program") == JobType.INTERNSHIP

    def test_contract(self):
        assert classify_job_type("Senior Contract Engineer", "Six month engagement") == JobType.CONTRACT

    def test_full_time_default(self):
        assert classify_job_type("Engineer", "Full time role") == JobType.FULL_TIME

    def test_part_time_variants(self):
        assert classify_job_type("Barista", "Part-time shifts") == JobType.PART_TIME
        assert classify_job_type("Tutor (part time)", "") == JobType.PART_TIME

    def test_freelance(self):
        assert classify_job_type("Freelance Designer", "Project based") == JobType.FREELANCE

    def test_internship_wins_over_contract(self):
        assert classify_job_type("Contract Internship", "") == JobType.INTERNSHIP

    def test_contract_wins_over_freelance(self):
        assert classify_job_type("Freelance contract writer", "") == JobType.CONTRACT

    def test_case_insensitive(self):
        assert classify_job_type("DATA INTERN", "") == JobType.INTERNSHIP


@pytest.mark.unit
class TestInferRemote:
    """Test remote work detection."""

    def test_remote_location(self):
        assert infer_remote("Backend Dev", "Build APIs", "Remote - US") is True

    def test_office_location(self):
        assert infer_remote("Backend Dev", "Build APIs", "Austin, TX") is False

    @pytest.mark.parametrize("description", [
        "This is a work from home position",
        "WFH friendly team",
        "Fully REMOTE",
    ])
    def test_remote_description(self, description):
        assert infer_remote("Engineer", description, "New York, NY") is True

    def test_hybrid_is_not_remote(self):
        assert infer_remote("Engineer", "Hybrid work model", "Seattle, WA") is False


@pytest.mark.unit
class TestParseSalary:
    """Test salary range parsing."""

    def test_two_numbers(self):
        salary = parse_salary("Salary: 80000 to 120000")

        assert salary is not None
        assert salary.min == 80000
        assert salary.max == 120000
        assert salary.currency == "USD"

    def test_first_two_digit_runs_are_used(self):
        salary = parse_salary("$80,000 - $120,000")

        # Digit runs are "80", "000", "120", "000"
        assert salary.min == 80
        assert salary.max == 0

    def test_single_number_gives_no_range(self):
        assert parse_salary("Up to 200000 per year") is None

    @pytest.mark.parametrize("text", [None, "", "Competitive salary"])
    def test_no_numbers(self, text):
        assert parse_salary(text) is None

    def test_more_than_two_numbers(self):
        salary = parse_salary("50 - 70 per hour, 40 hours")
        assert (salary.min, salary.max) == (50, 70)


@pytest.mark.unit
class TestParsePostedDate:
    """Test posting date parsing and its ingestion-time fallback."""

    def test_absolute_date(self):
        assert parse_posted_date("2024-01-15", now=NOW) == datetime(2024, 1, 15)

    def test_written_date(self):
        assert parse_posted_date("Posted January 15, 2024", now=NOW).date() == datetime(2024, 1, 15).date()

    @pytest.mark.parametrize("text", [
        None, "", "   ", "recently", "unknown",
        "Job ID 4521", "Req #2031", "Posted for 3 openings", "Marketing team",
    ])
    def test_unparsable_falls_back_to_ingestion_time(self, text):
        assert parse_posted_date(text, now=NOW) == NOW

    def test_future_date_falls_back_to_ingestion_time(self):
        assert parse_posted_date("2031-01-01", now=NOW) == NOW

    def test_missing_year_uses_ingestion_year(self):
        assert parse_posted_date("Posted March 3", now=NOW) == datetime(2024, 3, 3)

    def test_relative_days(self):
        assert parse_posted_date("3 days ago", now=NOW) == NOW - timedelta(days=3)

    def test_relative_weeks_and_hours(self):
        assert parse_posted_date("2 weeks ago", now=NOW) == NOW - timedelta(weeks=2)
        assert parse_posted_date("5 hours ago", now=NOW) == NOW - timedelta(hours=5)

    def test_yesterday_and_today(self):
        assert parse_posted_date("Yesterday", now=NOW) == NOW - timedelta(days=1)
        assert parse_posted_date("Today", now=NOW) == NOW

    def test_timezone_aware_input_is_made_naive_utc(self):
        parsed = parse_posted_date("2024-01-15T10:00:00+02:00", now=NOW)
        assert parsed.tzinfo is None
        assert parsed == datetime(2024, 1, 15, 8, 0, 0)

    def test_default_now_is_current_time(self):
        before = datetime.utcnow()
        parsed = parse_posted_date("posted recently")
        assert before <= parsed <= datetime.utcnow()


@pytest.mark.unit
class TestExtractTags:
    """Test vocabulary tag extraction."""

    def test_vocabulary_order(self):
        tags = extract_tags("Senior React Engineer", "Kubernetes, Python and AWS")
        assert tags == ["react", "python", "aws", "kubernetes", "senior"]

    def test_no_partial_word_matches(self):
        # "maintain" contains "ai", "javascript" contains "java"
        assert extract_tags("Maintainer", "javascript tooling") == ["javascript"]

    def test_multi_word_and_symbol_tags(self):
        tags = extract_tags("Mobile Dev", "React Native, Node.js and C# experience")
        assert "react native" in tags
        assert "node.js" in tags
        assert "c#" in tags
        assert "mobile" in tags

    def test_no_tags(self):
        assert extract_tags("Chef", "Cook tasty food") == []


@pytest.mark.unit
class TestNormalizeListing:
    """Test full listing normalization."""

    def test_normalize(self):
        listing = make_raw_listing(
            3,
            title="Senior Python Contract Engineer",
            location="Remote - US",
            salary_text="90000 - 110000",
            posted_date_text="2024-05-20",
        )

        job = normalize_listing(listing, "Example Company", now=NOW)

        assert job.title == "Senior Python Contract Engineer"
        assert job.company == "Example Company"
        assert job.job_type == JobType.CONTRACT
        assert job.is_remote is True
        assert job.salary_range.min == 90000
        assert job.salary_range.max == 110000
        assert job.apply_url == "https://example.com/jobs/3"
        assert job.source_name == "Example Company"
        assert job.posted_date == datetime(2024, 5, 20)
        assert job.is_active is True
        assert "python" in job.tags and "senior" in job.tags

    def test_listing_company_overrides_source_name(self):
        job = normalize_listing(make_raw_listing(company="Acme Labs"), "Example Company", now=NOW)
        assert job.company == "Acme Labs"

    def test_missing_date_uses_ingestion_time(self):
        job = normalize_listing(make_raw_listing(), "Example Company", now=NOW)
        assert job.posted_date == NOW
        assert job.salary_range is None

    def test_blank_title_is_rejected(self):
        with pytest.raises(ValidationError):
            normalize_listing(make_raw_listing(title="   "), "Example Company", now=NOW)

    def test_relative_apply_url_is_rejected(self):
        with pytest.raises(ValidationError):
            normalize_listing(make_raw_listing(apply_url="/jobs/1"), "Example Company", now=NOW)
