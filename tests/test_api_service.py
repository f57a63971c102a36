"""
Test the API service over the simulated backend.
"""
from datetime import timedelta

import pytest

from creatorpulse_client.schemas import Draft
from creatorpulse_client.services.entity_store import DEFAULT_PASSWORD
from creatorpulse_client.services.seed_data import (
    DEMO_EMAIL,
    DEMO_USER_ID,
    INACTIVE_EMAIL,
)


class TestAuthentication:
    """Test login, registration and logout."""

    async def test_login_success(self, api):
        response = await api.login(DEMO_EMAIL, DEFAULT_PASSWORD)

        assert response.success is True
        assert response.data.user.id == DEMO_USER_ID
        assert response.data.token.startswith(f"sim-token-{DEMO_USER_ID}-")
        assert api.is_authenticated()
        assert api.get_current_user().email == DEMO_EMAIL

    @pytest.mark.parametrize("email,password", [
        (DEMO_EMAIL, "wrong-password"),
        ("nobody@creatorpulse.com", DEFAULT_PASSWORD),
    ])
    async def test_login_bad_credentials(self, api, email, password):
        """Unknown users and wrong passwords look the same."""
        response = await api.login(email, password)

        assert response.success is False
        assert response.error.code == "auth_error"
        assert response.error.message == "Invalid email or password"
        assert not api.is_authenticated()

    async def test_login_inactive_account(self, api):
        response = await api.login(INACTIVE_EMAIL, DEFAULT_PASSWORD)
        assert response.error.code == "auth_error"
        assert response.error.message == "Account is deactivated. Please contact support."

    async def test_login_missing_fields(self, api):
        response = await api.login("", "")
        assert response.error.code == "validation_error"

    async def test_login_rate_limited(self, api, faults):
        faults.script(0.01)
        response = await api.login(DEMO_EMAIL, DEFAULT_PASSWORD)
        assert response.error.code == "rate_limit_error"
        assert not api.is_authenticated()

    async def test_login_service_failure(self, api, faults):
        faults.script(0.5, 0.01)
        response = await api.login(DEMO_EMAIL, DEFAULT_PASSWORD)
        assert response.error.code == "server_error"
        assert response.error.message == "Authentication service temporarily unavailable"

    async def test_register_and_login(self, api):
        response = await api.register("new.writer@creatorpulse.com", "supersecret", "Europe/London")

        assert response.success is True
        assert response.data.user.timezone == "Europe/London"
        assert response.data.user.email_verified is False
        assert api.get_current_user().email == "new.writer@creatorpulse.com"

        await api.logout()
        again = await api.login("new.writer@creatorpulse.com", "supersecret")
        assert again.success is True

    @pytest.mark.parametrize("email,password,timezone", [
        (DEMO_EMAIL, "supersecret", "UTC"),
        ("not-an-email", "supersecret", "UTC"),
        ("new.writer@creatorpulse.com", "short", "UTC"),
        ("new.writer@creatorpulse.com", "supersecret", "Nowhere/City"),
    ])
    async def test_register_validation(self, api, email, password, timezone):
        response = await api.register(email, password, timezone)
        assert response.error.code == "validation_error"
        assert not api.is_authenticated()

    async def test_register_duplicate_message(self, api):
        response = await api.register(DEMO_EMAIL, "supersecret")
        assert response.error.message == "Email already registered"

    async def test_logout_clears_session(self, demo_api):
        response = await demo_api.logout()

        assert response.success is True
        assert not demo_api.is_authenticated()
        assert demo_api.sessions.storage.get() is None

    async def test_logout_twice(self, demo_api):
        await demo_api.logout()
        response = await demo_api.logout()
        assert response.success is True

    async def test_session_expires(self, demo_api, clock):
        await clock.advance(timedelta(hours=25).total_seconds())

        response = await demo_api.get_sources()

        assert response.error.code == "authentication_error"
        assert not demo_api.is_authenticated()

    @pytest.mark.parametrize("email,message", [
        (DEMO_EMAIL, "Password reset email sent successfully"),
        ("nobody@creatorpulse.com", "If the email exists, a reset link has been sent"),
    ])
    async def test_reset_password(self, api, email, message):
        response = await api.reset_password(email)
        assert response.success is True
        assert response.data.message == message

    async def test_verify_email(self, api):
        await api.register("new.writer@creatorpulse.com", "supersecret")

        response = await api.verify_email("valid-verification-token")

        assert response.success is True
        assert api.get_current_user().email_verified is True
        user = api.store.get_user(api.get_current_user().id)
        assert user.email_verified is True

    async def test_verify_email_bad_token(self, api):
        response = await api.verify_email("expired-token")
        assert response.error.code == "validation_error"

    async def test_set_auth_state(self, api, seeded_store):
        api.set_auth_state(seeded_store.get_user(DEMO_USER_ID), "external-token")
        assert api.is_authenticated()
        assert (await api.get_sources()).success


class TestProtectedOperations:
    """Every protected operation needs a session."""

    @pytest.mark.parametrize("operation,args", [
        ("get_sources", ()),
        ("create_source", ("rss", "https://example.com/feed")),
        ("delete_source", ("source-demo-rss",)),
        ("get_source_status", ("source-demo-rss",)),
        ("add_style_post", ("x" * 60,)),
        ("upload_style_posts", (["x" * 60] * 10,)),
        ("get_training_status", ()),
        ("retrain_style", ()),
        ("get_drafts", ()),
        ("generate_drafts", ()),
        ("get_draft", ("draft-demo-0001",)),
        ("submit_draft_feedback", ("draft-demo-0001", "positive")),
        ("get_user_settings", ()),
        ("get_dashboard_stats", ()),
    ])
    async def test_requires_session(self, api, operation, args):
        response = await getattr(api, operation)(*args)

        assert response.success is False
        assert response.error.code == "authentication_error"
        assert response.error.message == "Authentication required"

    async def test_update_operations_require_session(self, api):
        assert (await api.update_source("source-demo-rss", name="x")).error.code == "authentication_error"
        assert (await api.update_user_settings(timezone="UTC")).error.code == "authentication_error"


class TestSources:
    """Test source management."""

    async def test_list_sources(self, demo_api):
        response = await demo_api.get_sources()
        assert {s.id for s in response.data} == {"source-demo-rss", "source-demo-twitter"}

    async def test_create_rss_source(self, demo_api):
        response = await demo_api.create_source("rss", "https://example.com/feed.xml", "Example")

        assert response.success is True
        assert response.data.user_id == DEMO_USER_ID
        assert response.data.error_count == 0
        assert response.data.active is True
        assert len((await demo_api.get_sources()).data) == 3

    async def test_create_twitter_source_normalizes_handle(self, demo_api):
        response = await demo_api.create_source("twitter", "naval")
        assert response.data.url == "@naval"
        assert response.data.name == "@naval"

    @pytest.mark.parametrize("source_type,url,message", [
        ("rss", "not a url", "Invalid URL format"),
        ("rss", "https://example.com/invalid-feed", "RSS feed is not accessible"),
        ("twitter", "bad handle!", "Invalid Twitter handle format"),
        ("newsletter", "https://example.com", "Unknown source type: newsletter"),
    ])
    async def test_create_source_validation(self, demo_api, source_type, url, message):
        response = await demo_api.create_source(source_type, url)
        assert response.error.code == "validation_error"
        assert response.error.message == message

    async def test_update_source(self, demo_api, clock):
        response = await demo_api.update_source("source-demo-rss", name="TC", active=False)

        assert response.data.name == "TC"
        assert response.data.active is False
        assert response.data.updated_at == clock.now()

    async def test_update_source_revalidates_address(self, demo_api):
        response = await demo_api.update_source("source-demo-twitter", url="not valid handle")
        assert response.error.code == "validation_error"

    async def test_update_source_bad_type(self, demo_api):
        response = await demo_api.update_source("source-demo-rss", type="newsletter")
        assert response.error.code == "validation_error"
        assert response.error.message == "Invalid input data"

    async def test_update_missing_source(self, demo_api):
        response = await demo_api.update_source("missing", name="x")
        assert response.error.code == "not_found"

    async def test_delete_source(self, demo_api):
        response = await demo_api.delete_source("source-demo-rss")
        assert response.data.message == "Source deleted successfully"

        status = await demo_api.get_source_status("source-demo-rss")
        assert status.error.code == "not_found"

    async def test_delete_missing_source(self, demo_api):
        response = await demo_api.delete_source("missing")
        assert response.error.code == "not_found"

    async def test_source_status(self, demo_api):
        healthy = await demo_api.get_source_status("source-demo-rss")
        assert healthy.data.status == "active"
        assert healthy.data.last_error is None

        failing = await demo_api.get_source_status("source-demo-twitter")
        assert failing.data.status == "error"
        assert failing.data.last_error == "Feed temporarily unavailable"

        await demo_api.update_source("source-demo-rss", active=False)
        inactive = await demo_api.get_source_status("source-demo-rss")
        assert inactive.data.status == "inactive"

    async def test_create_source_failure(self, demo_api, faults):
        faults.script(0.01)
        response = await demo_api.create_source("rss", "https://example.com/feed.xml")
        assert response.error.code == "server_error"
        assert response.error.message == "Failed to create source"
        assert len((await demo_api.get_sources()).data) == 2


class TestStyleTraining:
    """Test style samples and training status."""

    async def test_add_style_post(self, demo_api, make_post):
        response = await demo_api.add_style_post("  " + make_post(1) + "  ")

        assert response.success is True
        assert response.data.processed is False
        assert response.data.content == make_post(1)
        assert response.data.word_count == len(make_post(1).split())
        assert demo_api.training.running

    async def test_add_style_post_too_short(self, demo_api):
        response = await demo_api.add_style_post("too short")
        assert response.error.code == "validation_error"
        assert response.error.message == "Content must be at least 50 characters long"

    @pytest.mark.parametrize("count,message", [
        (9, "Minimum 10 posts required for effective style training"),
        (101, "Maximum 100 posts allowed per upload"),
    ])
    async def test_upload_count_limits(self, demo_api, make_post, count, message):
        response = await demo_api.upload_style_posts([make_post(i) for i in range(count)])
        assert response.error.code == "validation_error"
        assert response.error.message == message

    async def test_upload_rejects_batch_with_invalid_post(self, demo_api, make_post):
        posts = [make_post(i) for i in range(10)]
        posts[3] = "too short"

        response = await demo_api.upload_style_posts(posts)

        assert response.error.code == "validation_error"
        assert response.error.message == "Each post must be between 50 and 3000 characters"
        assert response.error.details == {"invalid_posts": [3]}
        assert len(demo_api.store.list_style_posts(DEMO_USER_ID)) == 12

    async def test_upload_replaces_samples_and_trains(self, demo_api, clock, make_post):
        response = await demo_api.upload_style_posts([make_post(i) for i in range(10)])

        assert response.data.job_id.startswith("style-job-")
        assert response.data.message == "Style training started with 10 posts"

        status = await demo_api.get_training_status(response.data.job_id)
        assert status.data.status == "pending"
        assert status.data.total_posts == 10

        for _ in range(8):
            await clock.advance(2)

        status = await demo_api.get_training_status()
        assert status.data.status == "completed"
        assert status.data.progress == 100

    async def test_upload_service_overloaded(self, demo_api, faults, make_post):
        faults.script(0.005)
        response = await demo_api.upload_style_posts([make_post(i) for i in range(10)])

        assert response.error.code == "server_error"
        assert response.error.message == "Content processing service is overloaded. Please try again later."
        assert len(demo_api.store.list_style_posts(DEMO_USER_ID)) == 12

    async def test_retrain(self, demo_api):
        response = await demo_api.retrain_style()

        assert response.data.job_id.startswith("retrain-job-")
        status = await demo_api.get_training_status()
        assert status.data.status == "pending"
        assert status.data.processed_posts == 0
        assert demo_api.get_processing_status().style_training_active is True


class TestDrafts:
    """Test draft listing, generation and feedback."""

    async def test_get_drafts_paginated(self, demo_api):
        response = await demo_api.get_drafts(page=1, per_page=2)

        assert response.data.total == 3
        assert response.data.total_pages == 2
        assert [d.id for d in response.data.data] == ["draft-demo-0001", "draft-demo-0002"]

    async def test_get_drafts_bad_page(self, demo_api):
        response = await demo_api.get_drafts(page=0)
        assert response.error.code == "validation_error"

    async def test_get_draft(self, demo_api):
        response = await demo_api.get_draft("draft-demo-0003")
        assert response.data.status == "pending"

        missing = await demo_api.get_draft("missing")
        assert missing.error.code == "not_found"
        assert missing.error.message == "Draft not found"

    async def test_generate_drafts(self, demo_api):
        response = await demo_api.generate_drafts()

        generated = response.data.drafts_generated
        assert 3 <= generated <= 5
        assert response.data.message == f"Generated {generated} new drafts based on your recent sources"

        drafts = (await demo_api.get_drafts(per_page=50)).data
        assert drafts.total == 3 + generated
        new_drafts = drafts.data[:generated]
        assert all(d.status == "pending" for d in new_drafts)
        assert all(7.0 <= d.engagement_score <= 10.0 for d in new_drafts)
        assert all(d.character_count == len(d.content) for d in new_drafts)
        assert len({d.feedback_token for d in drafts.data}) == drafts.total

        content = {c.id: c for c in demo_api.snapshot()["source_content"]}
        assert content["content-demo-0001"].processed is True

    async def test_generate_drafts_recent_guard(self, demo_api, clock):
        demo_api.store.add_drafts([
            Draft(id=f"recent-{i}", user_id=DEMO_USER_ID, content="x", created_at=clock.now() - timedelta(hours=1))
            for i in range(5)
        ])

        blocked = await demo_api.generate_drafts()
        assert blocked.error.code == "validation_error"
        assert blocked.error.details == {"recent_drafts": 5}

        forced = await demo_api.generate_drafts(force=True)
        assert forced.success is True

    async def test_generate_drafts_needs_active_source(self, demo_api):
        await demo_api.update_source("source-demo-rss", active=False)
        await demo_api.update_source("source-demo-twitter", active=False)

        response = await demo_api.generate_drafts()

        assert response.error.code == "validation_error"
        assert response.error.message == "No active sources found. Please add sources first."

    async def test_generate_drafts_needs_training(self, api):
        await api.register("new.writer@creatorpulse.com", "supersecret")
        await api.create_source("rss", "https://example.com/feed.xml")

        response = await api.generate_drafts()

        assert response.error.message == "Insufficient style training. Please upload at least 10 sample posts."

    async def test_generate_drafts_ai_unavailable(self, demo_api, faults):
        faults.script(0.01)
        response = await demo_api.generate_drafts()
        assert response.error.code == "server_error"
        assert response.error.message == "AI service temporarily unavailable. Please try again."
        assert (await demo_api.get_drafts()).data.total == 3

    async def test_generate_drafts_timeout(self, demo_api, faults):
        faults.script(0.9, 0.05)
        response = await demo_api.generate_drafts()
        assert response.error.message == "Draft generation failed due to AI service timeout"

    async def test_draft_feedback(self, demo_api):
        response = await demo_api.submit_draft_feedback("draft-demo-0003", "positive")

        assert response.data.message == "Feedback recorded successfully"
        assert (await demo_api.get_draft("draft-demo-0003")).data.status == "approved"
        records = demo_api.store.feedback_for_draft("draft-demo-0003")
        assert [(f.feedback_type, f.feedback_source) for f in records] == [("positive", "dashboard")]

    async def test_repeated_feedback_last_wins(self, demo_api):
        await demo_api.submit_draft_feedback("draft-demo-0003", "negative")
        await demo_api.submit_draft_feedback("draft-demo-0003", "positive")

        assert (await demo_api.get_draft("draft-demo-0003")).data.status == "approved"
        assert len(demo_api.store.feedback_for_draft("draft-demo-0003")) == 2

    async def test_draft_feedback_validation(self, demo_api):
        bad_type = await demo_api.submit_draft_feedback("draft-demo-0003", "meh")
        assert bad_type.error.code == "validation_error"

        missing = await demo_api.submit_draft_feedback("missing", "positive")
        assert missing.error.code == "not_found"

    async def test_feedback_by_token_without_session(self, api):
        response = await api.submit_feedback_by_token("feedback-draft-demo-0003", "negative")

        assert response.success is True
        draft = api.store.get_draft("draft-demo-0003")
        assert draft.status == "rejected"
        records = api.store.feedback_for_draft("draft-demo-0003")
        assert [(f.feedback_type, f.feedback_source) for f in records] == [("negative", "email")]

    async def test_feedback_by_unknown_token(self, api):
        response = await api.submit_feedback_by_token("feedback-unknown", "positive")
        assert response.error.code == "not_found"
        assert response.error.message == "Invalid feedback token"


class TestSettingsAndDashboard:
    """Test user settings and dashboard statistics."""

    async def test_get_user_settings(self, demo_api):
        response = await demo_api.get_user_settings()

        assert response.data.timezone == "America/New_York"
        assert response.data.delivery_time.isoformat() == "08:00:00"
        assert response.data.email_notifications is True

    async def test_update_user_settings(self, demo_api):
        response = await demo_api.update_user_settings(timezone="Europe/London", delivery_time="09:30")

        assert response.data.timezone == "Europe/London"
        assert response.data.delivery_time.isoformat() == "09:30:00"
        assert demo_api.get_current_user().timezone == "Europe/London"
        assert (await demo_api.get_user_settings()).data.timezone == "Europe/London"

    async def test_disabling_notifications_keeps_account_active(self, demo_api):
        response = await demo_api.update_user_settings(email_notifications=False)
        assert response.data.email_notifications is False

        await demo_api.logout()
        assert (await demo_api.login(DEMO_EMAIL, DEFAULT_PASSWORD)).success is True

    @pytest.mark.parametrize("changes", [
        {"timezone": "Not/AZone"},
        {"delivery_time": "25:00"},
        {"email_notifications": "sometimes"},
    ])
    async def test_update_user_settings_validation(self, demo_api, changes):
        response = await demo_api.update_user_settings(**changes)
        assert response.error.code == "validation_error"
        assert (await demo_api.get_user_settings()).data.timezone == "America/New_York"

    async def test_dashboard_stats(self, demo_api):
        response = await demo_api.get_dashboard_stats()

        assert response.data.total_drafts == 3
        assert response.data.drafts_this_week == 2
        assert response.data.feedback_rate == 0.67
        assert response.data.active_sources == 2

    async def test_stats_follow_feedback(self, demo_api):
        await demo_api.submit_draft_feedback("draft-demo-0003", "positive")
        response = await demo_api.get_dashboard_stats()
        assert response.data.positive_feedback == 2
        assert response.data.feedback_rate == 1.0


class TestEnvelope:
    """Test the response envelope and error boundary."""

    async def test_success_envelope(self, demo_api):
        payload = (await demo_api.get_source_status("source-demo-rss")).to_dict()
        assert payload == {"success": True, "data": {"status": "active", "last_error": None}}

    async def test_error_envelope(self, api):
        payload = (await api.get_sources()).to_dict()
        assert payload == {
            "success": False,
            "error": {"code": "authentication_error", "message": "Authentication required"},
        }

    async def test_unexpected_exception(self, demo_api, monkeypatch):
        async def broken(session):
            raise RuntimeError("boom")

        monkeypatch.setattr(demo_api.simulated, "get_sources", broken)

        response = await demo_api.get_sources()

        assert response.error.code == "server_error"
        assert response.error.message == "An unexpected error occurred"


class TestLocalHelpers:
    """Test helpers that never touch a backend."""

    async def test_processing_status(self, demo_api):
        status = demo_api.get_processing_status()
        assert status.drafts_pending == 1
        assert status.sources_with_errors == 1

    async def test_processing_status_logged_out(self, api):
        assert api.get_processing_status() is None

    async def test_reset_data(self, demo_api):
        await demo_api.create_source("rss", "https://example.com/feed.xml")

        await demo_api.reset_data()

        assert not demo_api.is_authenticated()
        assert len(demo_api.store.list_sources(DEMO_USER_ID)) == 2
