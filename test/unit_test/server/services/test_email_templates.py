import pytest

from diligence_labs.server.services import email_templates


class TestEscaping:
    def test_user_values_are_escaped_in_html(self):
        template = email_templates.custom("<script>alert(1)</script>", "Hi", "a & b\n<b>bold</b>")

        assert "<script>" not in template.html
        assert "&lt;script&gt;" in template.html
        assert "a &amp; b" in template.html
        assert "&lt;b&gt;bold&lt;/b&gt;" in template.html

    def test_text_body_keeps_raw_values(self):
        template = email_templates.custom("Ann & Co", "Hi", "Line one")

        assert template.text.startswith("Hello Ann & Co,")

    def test_button_url_is_quoted(self):
        template = email_templates.password_reset('https://x.test/reset?t="1"', "Ann")

        assert 'href="https://x.test/reset?t=&quot;1&quot;"' in template.html


class TestSubjects:
    def test_verification(self):
        template = email_templates.email_verification("https://app.test/verify?token=t", "Ann")

        assert template.subject == "Verify your email address - Diligence Labs"
        assert "https://app.test/verify?token=t" in template.text

    def test_invitation_free_and_paid(self):
        free = email_templates.account_invitation("https://app.test/create", "STRATEGIC_ADVISORY", is_free=True)
        paid = email_templates.account_invitation("https://app.test/create", "DUE_DILIGENCE")

        assert free.subject.startswith("Free Consultation Confirmed")
        assert "Strategic Advisory" in free.text
        assert paid.subject == "Create Your Account - Diligence Labs"

    def test_contact_submission_default_topic(self):
        assert email_templates.contact_submission("Ann", "ann@example.com", "Hello").subject == (
            "Contact Form: General inquiry"
        )
        assert email_templates.contact_submission("Ann", "ann@example.com", "Hello", "Pricing").subject == (
            "Contact Form: Pricing"
        )

    def test_account_status_with_reason(self):
        template = email_templates.account_status("Ann", "SUSPENDED", "Chargeback")

        assert "temporarily suspended" in template.text
        assert "Reason: Chargeback" in template.text
        assert email_templates.STATUS_COLORS["SUSPENDED"] in template.html

    def test_expert_rejection_without_notes(self):
        template = email_templates.expert_rejection("Ann", None, "https://app.test/expert/apply")

        assert "No additional feedback was provided." in template.text

    def test_security_alert_optional_lines(self):
        bare = email_templates.security_alert("Ann", "Account locked", "Too many attempts")
        full = email_templates.security_alert("Ann", "Account locked", "Too many attempts", "10.0.0.1", "now")

        assert "IP address" not in bare.text
        assert "IP address: 10.0.0.1" in full.text
        assert "Time: now" in full.text


class TestExpiration:
    @pytest.mark.parametrize(
        "days,urgency",
        [(1, "URGENT"), (3, "URGENT"), (4, "Important"), (7, "Important"), (8, "Reminder"), (30, "Reminder")],
    )
    def test_urgency(self, days, urgency):
        assert email_templates.expiration_urgency(days) == urgency

    def test_subject_carries_urgency_and_days(self):
        template = email_templates.subscription_expiration(
            "Ann", "Premium", "2026-10-22", 3, "https://app.test/dashboard/subscription"
        )

        assert template.subject == "URGENT: Your Premium subscription expires in 3 days | Diligence Labs"
        assert "2026-10-22" in template.text
